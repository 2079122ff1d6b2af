"""
Metrics aggregation over the ledger.

Live figures are provisional: they describe the open period and may differ
from the Snapshot eventually written at closing. Closed days are always
answered from their locked Snapshots.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta

from cafe_ledger.config import get_logger
from cafe_ledger.core.entities.item import Item
from cafe_ledger.core.entities.outlet import Outlet
from cafe_ledger.core.entities.snapshot import Snapshot
from cafe_ledger.core.entities.stock import StockLevel, normalize_quantity
from cafe_ledger.core.exceptions import OutletNotFoundError, ValidationError
from cafe_ledger.core.interfaces.ledger_store import IMovementStore, ISnapshotStore
from cafe_ledger.core.interfaces.registry_store import IItemStore, IOutletStore
from cafe_ledger.core.services.clock import Clock, business_day_bounds, local_date
from cafe_ledger.core.services.stock_projection import StockProjectionService

logger = get_logger(__name__)

SOURCE_SNAPSHOT = "snapshot"
SOURCE_LIVE = "live"
SOURCE_NONE = "none"


@dataclass
class TodayMetrics:
    """Outlet-wide totals since local midnight."""

    outlet_id: int
    business_date: date
    consumption: float = 0.0
    wastage: float = 0.0
    received: float = 0.0
    movement_count: int = 0


@dataclass
class DailyItemRow:
    """Opening/used/wastage/closing of one item for one day."""

    item_id: int
    item_name: str
    unit: str
    opening: float
    received: float
    used: float
    wastage: float
    closing: float


@dataclass
class DailyMetrics:
    """Per-item figures for one business day and where they came from."""

    outlet_id: int
    business_date: date
    source: str  # "snapshot", "live" or "none"
    rows: list[DailyItemRow] = field(default_factory=list)
    closed_at: datetime | None = None

    @property
    def total_used(self) -> float:
        return normalize_quantity(sum(row.used for row in self.rows))

    @property
    def total_wastage(self) -> float:
        return normalize_quantity(sum(row.wastage for row in self.rows))

    @property
    def total_received(self) -> float:
        return normalize_quantity(sum(row.received for row in self.rows))


@dataclass
class ForecastRow:
    """Days-of-cover indicator for one item."""

    item_id: int
    item_name: str
    unit: str
    quantity: float
    average_daily_usage: float | None
    days_of_cover: float | None
    sample_days: int
    below_threshold: bool
    over_max: bool


def _row_from_level(level: StockLevel) -> DailyItemRow:
    return DailyItemRow(
        item_id=level.item.id or 0,
        item_name=level.item.name,
        unit=level.item.unit,
        opening=level.opening_stock,
        received=level.totals.received,
        used=level.totals.used,
        wastage=level.totals.wastage,
        closing=level.quantity,
    )


def _row_from_snapshot(snapshot: Snapshot, items: dict[int, Item]) -> DailyItemRow:
    item = items.get(snapshot.item_id)
    return DailyItemRow(
        item_id=snapshot.item_id,
        item_name=item.name if item else f"#{snapshot.item_id}",
        unit=snapshot.unit,
        opening=snapshot.opening_stock,
        received=snapshot.received,
        used=snapshot.used_today,
        wastage=snapshot.wastage,
        closing=snapshot.closing_stock,
    )


class MetricsAggregator:
    """
    Consumption, wastage and stock indicators for dashboards.

    Pure service -- stores and clock are injected via constructor.
    """

    def __init__(
        self,
        outlet_store: IOutletStore,
        item_store: IItemStore,
        movement_store: IMovementStore,
        snapshot_store: ISnapshotStore,
        clock: Clock,
    ) -> None:
        self._outlet_store = outlet_store
        self._item_store = item_store
        self._movement_store = movement_store
        self._snapshot_store = snapshot_store
        self._clock = clock
        self._projection = StockProjectionService(
            outlet_store=outlet_store,
            item_store=item_store,
            movement_store=movement_store,
        )

    async def today_metrics(self, outlet_id: int) -> TodayMetrics:
        """Sum of movements since local midnight of the outlet."""
        outlet = await self._require_outlet(outlet_id)
        today = local_date(self._clock.now(), outlet.timezone)
        start, end = business_day_bounds(today, outlet.timezone)
        totals = await self._movement_store.window_totals(outlet_id, start, end)
        return TodayMetrics(
            outlet_id=outlet_id,
            business_date=today,
            consumption=totals.used,
            wastage=totals.wastage,
            received=totals.received,
            movement_count=totals.movement_count,
        )

    async def per_item_daily(self, outlet_id: int) -> list[DailyItemRow]:
        """Provisional opening/used/wastage/closing for the open period."""
        levels = await self._projection.stock_levels(outlet_id)
        return [_row_from_level(level) for level in levels]

    async def daily_metrics(self, outlet_id: int, business_date: date | None = None) -> DailyMetrics:
        """Authoritative snapshot rows for closed days, live rows for today."""
        outlet = await self._require_outlet(outlet_id)
        today = local_date(self._clock.now(), outlet.timezone)
        day = business_date or today

        closing = await self._snapshot_store.get_closing(outlet_id, day)
        if closing is not None:
            snapshots = await self._snapshot_store.list_snapshots(outlet_id, business_date=day)
            items = await self._items_by_id(outlet_id)
            return DailyMetrics(
                outlet_id=outlet_id,
                business_date=day,
                source=SOURCE_SNAPSHOT,
                rows=[_row_from_snapshot(s, items) for s in snapshots],
                closed_at=closing.closed_at,
            )

        if day == today:
            return DailyMetrics(
                outlet_id=outlet_id,
                business_date=day,
                source=SOURCE_LIVE,
                rows=await self.per_item_daily(outlet_id),
            )

        return DailyMetrics(outlet_id=outlet_id, business_date=day, source=SOURCE_NONE)

    async def stock_forecast(self, outlet_id: int, window_days: int) -> list[ForecastRow]:
        """Average daily usage over recent snapshots and the resulting days of cover."""
        if window_days < 1:
            raise ValidationError("window_days", "must be at least 1", window_days)

        outlet = await self._require_outlet(outlet_id)
        today = local_date(self._clock.now(), outlet.timezone)
        snapshots = await self._snapshot_store.list_snapshots(
            outlet_id, since=today - timedelta(days=window_days)
        )

        usage: dict[int, list[float]] = defaultdict(list)
        for snapshot in snapshots:
            usage[snapshot.item_id].append(snapshot.used_today + snapshot.wastage)

        rows = []
        for level in await self._projection.stock_levels(outlet_id):
            samples = usage.get(level.item.id or 0, [])[-window_days:]
            average = normalize_quantity(sum(samples) / len(samples)) if samples else None
            cover = None
            if average:
                cover = round(max(level.quantity, 0.0) / average, 2)
            rows.append(
                ForecastRow(
                    item_id=level.item.id or 0,
                    item_name=level.item.name,
                    unit=level.item.unit,
                    quantity=level.quantity,
                    average_daily_usage=average,
                    days_of_cover=cover,
                    sample_days=len(samples),
                    below_threshold=level.is_low,
                    over_max=level.is_over_max,
                )
            )

        logger.info("stock_forecast_computed", outlet_id=outlet_id, items=len(rows))
        return rows

    async def _require_outlet(self, outlet_id: int) -> Outlet:
        outlet = await self._outlet_store.get_outlet(outlet_id)
        if outlet is None:
            raise OutletNotFoundError(outlet_id)
        return outlet

    async def _items_by_id(self, outlet_id: int) -> dict[int, Item]:
        items = await self._item_store.list_items(outlet_id)
        return {item.id: item for item in items if item.id is not None}

"""
Close Day Use Case -- lock the day's Snapshots and roll opening stock forward.

The whole closing runs in one write-locked transaction:

1. capture the cutover, the highest movement id recorded before the end of
   the business day in the outlet's timezone;
2. per active item, sum the period ``checkpoint < id <= cutover`` into
   received / used / wastage and derive the closing stock;
3. insert one locked Snapshot per item and the DailyClosing header;
4. advance every item's checkpoint to the cutover with opening = closing.

Any failure rolls back every step, so retrying an interrupted closing
produces the same state as a run that was never interrupted.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date

from cafe_ledger.application.dto.requests import CloseDayRequest
from cafe_ledger.application.dto.responses import ClosingResponse, SnapshotResponse
from cafe_ledger.application.services import get_clock, new_unit_of_work
from cafe_ledger.config import get_logger
from cafe_ledger.core.entities.item import ItemStatus
from cafe_ledger.core.entities.snapshot import DailyClosing, Snapshot
from cafe_ledger.core.entities.stock import PeriodTotals, normalize_quantity
from cafe_ledger.core.exceptions import (
    AlreadyClosedError,
    ClosingOrderError,
    OutletNotFoundError,
    ValidationError,
)
from cafe_ledger.core.interfaces.unit_of_work import IUnitOfWork
from cafe_ledger.core.services.clock import Clock, business_day_bounds, local_date

logger = get_logger(__name__)


@dataclass
class CloseDayResult:
    """Result of closing a business day."""

    closing: DailyClosing
    snapshots: list[Snapshot] = field(default_factory=list)


class CloseDayUseCase:
    """Close an outlet's business day."""

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork] | None = None,
        clock: Clock | None = None,
    ):
        self._uow_factory = uow_factory or new_unit_of_work
        self._clock = clock

    async def execute(
        self,
        outlet_id: int,
        request: CloseDayRequest | None = None,
    ) -> CloseDayResult:
        """Execute close day use case."""
        clock = self._clock or get_clock()
        requested = request.business_date if request else None

        async with self._uow_factory() as uow:
            outlet = await uow.outlets.get_outlet(outlet_id)
            if outlet is None:
                raise OutletNotFoundError(outlet_id)

            now = clock.now()
            today = local_date(now, outlet.timezone)
            business_date = requested or today
            await self._check_closable(uow, outlet_id, business_date, today)

            items = await uow.items.list_items(outlet_id, status=ItemStatus.ACTIVE)
            if business_date == today:
                cutover = await uow.movements.last_movement_id()
            else:
                _, day_end = business_day_bounds(business_date, outlet.timezone)
                cutover = await uow.movements.last_movement_id(before=day_end)
                # Items registered after the day ended did not exist on it
                items = [item for item in items if item.created_at < day_end]

            period = await uow.movements.open_period_totals(
                outlet_id, upto_movement_id=cutover
            )

            result = CloseDayResult(
                closing=DailyClosing(
                    outlet_id=outlet_id,
                    business_date=business_date,
                    cutover_movement_id=cutover,
                    item_count=len(items),
                    closed_at=now,
                )
            )

            for item in items:
                totals = period.get(item.id or 0, PeriodTotals())
                snapshot = Snapshot(
                    outlet_id=outlet_id,
                    item_id=item.id,  # type: ignore[arg-type]
                    business_date=business_date,
                    opening_stock=item.opening_stock,
                    received=totals.received,
                    used_today=totals.used,
                    wastage=totals.wastage,
                    closing_stock=normalize_quantity(item.opening_stock + totals.net),
                    unit=item.unit,
                    cutover_movement_id=cutover,
                    created_at=now,
                )
                result.snapshots.append(await uow.snapshots.add_snapshot(snapshot))

            result.closing = await uow.snapshots.add_closing(result.closing)

            for item, snapshot in zip(items, result.snapshots, strict=True):
                await uow.items.advance_checkpoint(
                    item.id,  # type: ignore[arg-type]
                    opening_stock=snapshot.closing_stock,
                    checkpoint_movement_id=max(item.checkpoint_movement_id, cutover),
                    closed_date=business_date,
                    updated_at=now,
                )

        logger.info(
            "day_closed",
            outlet_id=outlet_id,
            business_date=business_date.isoformat(),
            cutover_movement_id=cutover,
            items=len(result.snapshots),
        )
        return result

    @staticmethod
    async def _check_closable(
        uow: IUnitOfWork,
        outlet_id: int,
        business_date: date,
        today: date,
    ) -> None:
        if business_date > today:
            logger.warning(
                "closing_rejected",
                outlet_id=outlet_id,
                business_date=business_date.isoformat(),
                reason="future_date",
            )
            raise ValidationError("business_date", "cannot close a future day", business_date)

        existing = await uow.snapshots.get_closing(outlet_id, business_date)
        if existing is not None or await uow.snapshots.count_snapshots(outlet_id, business_date):
            logger.warning(
                "closing_rejected",
                outlet_id=outlet_id,
                business_date=business_date.isoformat(),
                reason="already_closed",
            )
            raise AlreadyClosedError(outlet_id, business_date)

        latest = await uow.snapshots.latest_closing(outlet_id)
        if latest is not None and latest.business_date > business_date:
            logger.warning(
                "closing_rejected",
                outlet_id=outlet_id,
                business_date=business_date.isoformat(),
                reason="out_of_order",
                last_closed=latest.business_date.isoformat(),
            )
            raise ClosingOrderError(outlet_id, business_date, latest.business_date)

    def to_response(self, result: CloseDayResult) -> ClosingResponse:
        """Convert result to API response."""
        return build_closing_response(result.closing, result.snapshots)


def build_closing_response(closing: DailyClosing, snapshots: list[Snapshot]) -> ClosingResponse:
    return ClosingResponse(
        outlet_id=closing.outlet_id,
        business_date=closing.business_date,
        cutover_movement_id=closing.cutover_movement_id,
        item_count=closing.item_count,
        closed_at=closing.closed_at,
        snapshots=[SnapshotResponse.from_entity(s) for s in snapshots],
    )

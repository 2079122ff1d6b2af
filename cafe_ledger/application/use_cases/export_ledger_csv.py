"""Export Ledger CSV Use Case -- movement log and daily report as CSV text."""

import csv
import io
from datetime import date, datetime
from zoneinfo import ZoneInfo

from cafe_ledger.config import get_logger
from cafe_ledger.core.exceptions import OutletNotFoundError
from cafe_ledger.core.interfaces.ledger_store import IMovementStore
from cafe_ledger.core.interfaces.registry_store import IItemStore, IOutletStore
from cafe_ledger.core.services.metrics_aggregator import MetricsAggregator

logger = get_logger(__name__)

MOVEMENT_COLUMNS = ["Date", "Item", "Type", "Quantity", "Reason", "Note"]
DAILY_COLUMNS = ["Item Name", "Opening", "Received", "Used Today", "Wastage", "Closing", "Unit"]

# Movements fetched per query while streaming the full log
EXPORT_BATCH_SIZE = 500


def format_quantity(value: float) -> str:
    """Drop a trailing .0 from whole quantities."""
    return str(int(value)) if value == int(value) else f"{value:.6f}".rstrip("0")


class ExportLedgerCsvUseCase:
    """Render ledger data as CSV in the outlet's local time."""

    def __init__(
        self,
        outlet_store: IOutletStore | None = None,
        item_store: IItemStore | None = None,
        movement_store: IMovementStore | None = None,
        metrics: MetricsAggregator | None = None,
    ):
        self._outlet_store = outlet_store
        self._item_store = item_store
        self._movement_store = movement_store
        self._metrics = metrics

    async def _get_stores(self) -> tuple[IOutletStore, IItemStore, IMovementStore]:
        if self._outlet_store is None or self._item_store is None or self._movement_store is None:
            from cafe_ledger.infrastructure.storage.sqlite import (
                get_item_store,
                get_movement_store,
                get_outlet_store,
            )

            self._outlet_store = self._outlet_store or await get_outlet_store()
            self._item_store = self._item_store or await get_item_store()
            self._movement_store = self._movement_store or await get_movement_store()
        return self._outlet_store, self._item_store, self._movement_store

    async def _get_metrics(self) -> MetricsAggregator:
        if self._metrics is None:
            from cafe_ledger.application.services import get_metrics_aggregator

            self._metrics = await get_metrics_aggregator()
        return self._metrics

    async def movements_csv(
        self,
        outlet_id: int,
        item_id: int | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> str:
        """Movement log, oldest first."""
        outlet_store, item_store, movement_store = await self._get_stores()
        outlet = await outlet_store.get_outlet(outlet_id)
        if outlet is None:
            raise OutletNotFoundError(outlet_id)
        tz = ZoneInfo(outlet.timezone)
        names = {item.id: item.name for item in await item_store.list_items(outlet_id)}

        output = io.StringIO()
        writer = csv.writer(output)
        writer.writerow(MOVEMENT_COLUMNS)

        offset = 0
        rows = 0
        while True:
            batch = await movement_store.list_movements(
                outlet_id,
                item_id=item_id,
                start=start,
                end=end,
                limit=EXPORT_BATCH_SIZE,
                offset=offset,
            )
            for m in batch:
                writer.writerow([
                    m.created_at.astimezone(tz).strftime("%Y-%m-%d %H:%M:%S"),
                    names.get(m.item_id, f"#{m.item_id}"),
                    m.direction.value,
                    format_quantity(m.amount),
                    m.reason.value,
                    m.note or "",
                ])
            rows += len(batch)
            if len(batch) < EXPORT_BATCH_SIZE:
                break
            offset += EXPORT_BATCH_SIZE

        logger.info("movements_exported", outlet_id=outlet_id, rows=rows)
        return output.getvalue()

    async def daily_csv(self, outlet_id: int, business_date: date | None = None) -> str:
        """Daily report: Snapshots for a closed day, live figures for today."""
        metrics = await self._get_metrics()
        report = await metrics.daily_metrics(outlet_id, business_date)

        output = io.StringIO()
        writer = csv.writer(output)
        writer.writerow(DAILY_COLUMNS)
        for row in report.rows:
            writer.writerow([
                row.item_name,
                format_quantity(row.opening),
                format_quantity(row.received),
                format_quantity(row.used),
                format_quantity(row.wastage),
                format_quantity(row.closing),
                row.unit,
            ])

        logger.info(
            "daily_report_exported",
            outlet_id=outlet_id,
            business_date=report.business_date.isoformat(),
            source=report.source,
            rows=len(report.rows),
        )
        return output.getvalue()

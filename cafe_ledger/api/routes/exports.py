"""CSV export endpoints."""

from datetime import date, datetime

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse

from cafe_ledger.api.dependencies import get_export_use_case
from cafe_ledger.application.dto.responses import ErrorResponse
from cafe_ledger.application.use_cases.export_ledger_csv import ExportLedgerCsvUseCase

router = APIRouter(prefix="/api/outlets/{outlet_id}/exports", tags=["exports"])


def _csv_response(content: str, filename: str) -> StreamingResponse:
    return StreamingResponse(
        iter([content]),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get(
    "/movements.csv",
    response_class=StreamingResponse,
    responses={404: {"model": ErrorResponse}},
)
async def export_movements(
    outlet_id: int,
    item_id: int | None = None,
    from_time: datetime | None = Query(default=None, alias="from"),
    to_time: datetime | None = Query(default=None, alias="to"),
    use_case: ExportLedgerCsvUseCase = Depends(get_export_use_case),
) -> StreamingResponse:
    """Movement log as CSV (Date, Item, Type, Quantity, Reason, Note)."""
    content = await use_case.movements_csv(outlet_id, item_id, from_time, to_time)
    return _csv_response(content, f"movements_outlet_{outlet_id}.csv")


@router.get(
    "/daily.csv",
    response_class=StreamingResponse,
    responses={404: {"model": ErrorResponse}},
)
async def export_daily(
    outlet_id: int,
    business_date: date | None = Query(default=None, alias="date"),
    use_case: ExportLedgerCsvUseCase = Depends(get_export_use_case),
) -> StreamingResponse:
    """Daily report as CSV: Snapshots for a closed day, live figures for today."""
    content = await use_case.daily_csv(outlet_id, business_date)
    label = business_date.isoformat() if business_date else "today"
    return _csv_response(content, f"daily_outlet_{outlet_id}_{label}.csv")

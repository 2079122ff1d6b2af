"""Daily closing endpoints."""

from datetime import date

from fastapi import APIRouter, Body, Depends, status

from cafe_ledger.api.dependencies import get_close_day_use_case, get_snap_store
from cafe_ledger.application.dto.requests import CloseDayRequest
from cafe_ledger.application.dto.responses import ClosingResponse, ErrorResponse
from cafe_ledger.application.use_cases.close_day import CloseDayUseCase, build_closing_response
from cafe_ledger.core.exceptions import NotFoundError
from cafe_ledger.infrastructure.storage.sqlite import SQLiteSnapshotStore

router = APIRouter(prefix="/api/outlets/{outlet_id}/closings", tags=["closings"])


@router.post(
    "",
    response_model=ClosingResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
async def close_day(
    outlet_id: int,
    request: CloseDayRequest | None = Body(default=None),
    use_case: CloseDayUseCase = Depends(get_close_day_use_case),
) -> ClosingResponse:
    """
    Close a business day.

    Writes one locked Snapshot per active item and rolls opening stock
    forward. Closed days are final.
    """
    result = await use_case.execute(outlet_id, request)
    return use_case.to_response(result)


@router.get(
    "/{business_date}",
    response_model=ClosingResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_closing(
    outlet_id: int,
    business_date: date,
    store: SQLiteSnapshotStore = Depends(get_snap_store),
) -> ClosingResponse:
    """Closing header and Snapshots of a closed day."""
    closing = await store.get_closing(outlet_id, business_date)
    if closing is None:
        raise NotFoundError(
            "Closing",
            f"{outlet_id}/{business_date.isoformat()}",
            code="CLOSING_NOT_FOUND",
        )
    snapshots = await store.list_snapshots(outlet_id, business_date=business_date)
    return build_closing_response(closing, snapshots)

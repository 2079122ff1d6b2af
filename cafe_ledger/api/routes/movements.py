"""Movement ledger endpoints."""

from datetime import datetime

from fastapi import APIRouter, Depends, Query, status

from cafe_ledger.api.dependencies import (
    get_movement_history_use_case,
    get_order_consumption_use_case,
    get_record_movement_use_case,
)
from cafe_ledger.application.dto.requests import (
    MovementHistoryRequest,
    RecordMovementRequest,
    RecordOrderConsumptionRequest,
)
from cafe_ledger.application.dto.responses import (
    ErrorResponse,
    MovementHistoryResponse,
    OrderConsumptionResponse,
    RecordMovementResponse,
)
from cafe_ledger.application.use_cases.get_movement_history import GetMovementHistoryUseCase
from cafe_ledger.application.use_cases.record_movement import RecordMovementUseCase
from cafe_ledger.application.use_cases.record_order_consumption import (
    RecordOrderConsumptionUseCase,
)

router = APIRouter(prefix="/api/movements", tags=["movements"])

WRITE_ERRORS = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
    422: {"model": ErrorResponse},
}


@router.post(
    "",
    response_model=RecordMovementResponse,
    status_code=status.HTTP_201_CREATED,
    responses=WRITE_ERRORS,
)
async def record_movement(
    request: RecordMovementRequest,
    use_case: RecordMovementUseCase = Depends(get_record_movement_use_case),
) -> RecordMovementResponse:
    """Append an Incoming or Outgoing movement to the ledger."""
    result = await use_case.execute(request)
    return use_case.to_response(result)


@router.post(
    "/order-consumption",
    response_model=OrderConsumptionResponse,
    status_code=status.HTTP_201_CREATED,
    responses=WRITE_ERRORS,
)
async def record_order_consumption(
    request: RecordOrderConsumptionRequest,
    use_case: RecordOrderConsumptionUseCase = Depends(get_order_consumption_use_case),
) -> OrderConsumptionResponse:
    """Record the ingredients consumed by a fulfilled order. Replaying an order is safe."""
    result = await use_case.execute(request)
    return use_case.to_response(result)


@router.get(
    "",
    response_model=MovementHistoryResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def movement_history(
    outlet_id: int,
    item_id: int | None = None,
    from_time: datetime | None = Query(default=None, alias="from"),
    to_time: datetime | None = Query(default=None, alias="to"),
    limit: int | None = Query(default=None, ge=1),
    offset: int = Query(default=0, ge=0),
    use_case: GetMovementHistoryUseCase = Depends(get_movement_history_use_case),
) -> MovementHistoryResponse:
    """Movements ordered by time ascending; ``from`` inclusive, ``to`` exclusive."""
    result = await use_case.execute(
        MovementHistoryRequest(
            outlet_id=outlet_id,
            item_id=item_id,
            from_time=from_time,
            to_time=to_time,
            limit=limit,
            offset=offset,
        )
    )
    return use_case.to_response(result)

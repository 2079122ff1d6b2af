"""Outlet registry and per-outlet stock endpoints."""

from fastapi import APIRouter, Depends, status

from cafe_ledger.api.dependencies import (
    get_out_store,
    get_projection,
    get_register_outlet_use_case,
)
from cafe_ledger.application.dto.requests import RegisterOutletRequest
from cafe_ledger.application.dto.responses import (
    ErrorResponse,
    OutletResponse,
    StockLevelResponse,
    StockLevelsResponse,
)
from cafe_ledger.application.use_cases.register_outlet import RegisterOutletUseCase
from cafe_ledger.core.exceptions import OutletNotFoundError
from cafe_ledger.core.services import StockProjectionService
from cafe_ledger.infrastructure.storage.sqlite import SQLiteOutletStore

router = APIRouter(prefix="/api/outlets", tags=["outlets"])


@router.post(
    "",
    response_model=OutletResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
)
async def register_outlet(
    request: RegisterOutletRequest,
    use_case: RegisterOutletUseCase = Depends(get_register_outlet_use_case),
) -> OutletResponse:
    """Register an outlet and its business-day timezone."""
    outlet = await use_case.execute(request)
    return use_case.to_response(outlet)


@router.get("", response_model=list[OutletResponse])
async def list_outlets(
    store: SQLiteOutletStore = Depends(get_out_store),
) -> list[OutletResponse]:
    """List all outlets."""
    return [OutletResponse.from_entity(o) for o in await store.list_outlets()]


@router.get(
    "/{outlet_id}",
    response_model=OutletResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_outlet(
    outlet_id: int,
    store: SQLiteOutletStore = Depends(get_out_store),
) -> OutletResponse:
    """Get an outlet by ID."""
    outlet = await store.get_outlet(outlet_id)
    if outlet is None:
        raise OutletNotFoundError(outlet_id)
    return OutletResponse.from_entity(outlet)


@router.get(
    "/{outlet_id}/stock",
    response_model=StockLevelsResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_stock_levels(
    outlet_id: int,
    projection: StockProjectionService = Depends(get_projection),
) -> StockLevelsResponse:
    """Current stock of every active item."""
    levels = await projection.stock_levels(outlet_id)
    return StockLevelsResponse(
        outlet_id=outlet_id,
        items=[StockLevelResponse.from_level(level) for level in levels],
        total=len(levels),
    )


@router.get(
    "/{outlet_id}/low-stock",
    response_model=StockLevelsResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_low_stock(
    outlet_id: int,
    projection: StockProjectionService = Depends(get_projection),
) -> StockLevelsResponse:
    """Active items at or below their low-stock threshold."""
    levels = await projection.low_stock(outlet_id)
    return StockLevelsResponse(
        outlet_id=outlet_id,
        items=[StockLevelResponse.from_level(level) for level in levels],
        total=len(levels),
    )

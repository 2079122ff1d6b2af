"""Item registry endpoints."""

from fastapi import APIRouter, Depends, Query, status

from cafe_ledger.api.dependencies import (
    get_itm_store,
    get_projection,
    get_register_item_use_case,
    get_retire_item_use_case,
    get_update_item_use_case,
)
from cafe_ledger.application.dto.requests import RegisterItemRequest, UpdateItemRequest
from cafe_ledger.application.dto.responses import (
    ErrorResponse,
    ItemListResponse,
    ItemResponse,
    StockLevelResponse,
    UnitSuggestionResponse,
)
from cafe_ledger.application.use_cases.register_item import RegisterItemUseCase
from cafe_ledger.application.use_cases.retire_item import RetireItemUseCase
from cafe_ledger.application.use_cases.update_item import UpdateItemUseCase
from cafe_ledger.core.entities.item import ItemStatus
from cafe_ledger.core.exceptions import ItemNotFoundError
from cafe_ledger.core.services import StockProjectionService, suggest_category_unit
from cafe_ledger.infrastructure.storage.sqlite import SQLiteItemStore

router = APIRouter(prefix="/api/items", tags=["items"])


@router.post(
    "",
    response_model=ItemResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def register_item(
    request: RegisterItemRequest,
    use_case: RegisterItemUseCase = Depends(get_register_item_use_case),
) -> ItemResponse:
    """Register an item. Category and unit are suggested from the name when omitted."""
    item = await use_case.execute(request)
    return use_case.to_response(item)


@router.get("", response_model=ItemListResponse)
async def list_items(
    outlet_id: int,
    item_status: ItemStatus | None = Query(default=None, alias="status"),
    search: str | None = Query(default=None, max_length=100),
    limit: int = Query(default=500, ge=1, le=5000),
    offset: int = Query(default=0, ge=0),
    store: SQLiteItemStore = Depends(get_itm_store),
) -> ItemListResponse:
    """List an outlet's items, optionally filtered by status or a name/category search."""
    items = await store.list_items(
        outlet_id, status=item_status, search=search, limit=limit, offset=offset
    )
    return ItemListResponse(
        items=[ItemResponse.from_entity(item) for item in items],
        total=len(items),
    )


@router.get("/suggest", response_model=UnitSuggestionResponse)
async def suggest_unit(name: str = Query(..., min_length=1)) -> UnitSuggestionResponse:
    """Advisory category/unit for an item name."""
    suggestion = suggest_category_unit(name)
    if suggestion is None:
        return UnitSuggestionResponse(name=name, matched=False)
    return UnitSuggestionResponse(
        name=name,
        matched=True,
        keyword=suggestion.keyword,
        category=suggestion.category,
        unit=suggestion.unit,
        decimals=suggestion.decimals,
    )


@router.get(
    "/{item_id}",
    response_model=ItemResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_item(
    item_id: int,
    store: SQLiteItemStore = Depends(get_itm_store),
) -> ItemResponse:
    """Get an item by ID."""
    item = await store.get_item(item_id)
    if item is None:
        raise ItemNotFoundError(item_id)
    return ItemResponse.from_entity(item)


@router.patch(
    "/{item_id}",
    response_model=ItemResponse,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
async def update_item(
    item_id: int,
    request: UpdateItemRequest,
    use_case: UpdateItemUseCase = Depends(get_update_item_use_case),
) -> ItemResponse:
    """Update identity fields. Movements are never touched."""
    item = await use_case.execute(item_id, request)
    return use_case.to_response(item)


@router.post(
    "/{item_id}/retire",
    response_model=ItemResponse,
    responses={404: {"model": ErrorResponse}},
)
async def retire_item(
    item_id: int,
    use_case: RetireItemUseCase = Depends(get_retire_item_use_case),
) -> ItemResponse:
    """Retire an item; it stays visible in history and snapshots."""
    item = await use_case.execute(item_id)
    return use_case.to_response(item)


@router.get(
    "/{item_id}/stock",
    response_model=StockLevelResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_current_stock(
    item_id: int,
    projection: StockProjectionService = Depends(get_projection),
) -> StockLevelResponse:
    """Current stock: opening checkpoint plus the open period's movements."""
    level = await projection.current_stock(item_id)
    return StockLevelResponse.from_level(level)

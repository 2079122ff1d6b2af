"""Register Item Use Case -- new stock-keeping unit with a zero checkpoint."""

from cafe_ledger.application.dto.requests import RegisterItemRequest
from cafe_ledger.application.dto.responses import ItemResponse
from cafe_ledger.application.services import get_clock
from cafe_ledger.config import get_logger
from cafe_ledger.core.entities.item import Item, ItemStatus
from cafe_ledger.core.exceptions import OutletNotFoundError, ValidationError
from cafe_ledger.core.interfaces.registry_store import IItemStore, IOutletStore
from cafe_ledger.core.services.clock import Clock
from cafe_ledger.core.services.unit_inference import suggest_category_unit

logger = get_logger(__name__)

DEFAULT_CATEGORY = "General"
DEFAULT_UNIT = "Pieces"


def validate_thresholds(low_stock_threshold: float | None, max_stock_level: float | None) -> None:
    """Thresholds are quantities and cannot be negative."""
    if low_stock_threshold is not None and low_stock_threshold < 0:
        raise ValidationError("low_stock_threshold", "must not be negative", low_stock_threshold)
    if max_stock_level is not None and max_stock_level < 0:
        raise ValidationError("max_stock_level", "must not be negative", max_stock_level)


class RegisterItemUseCase:
    """Register an item in an outlet's registry."""

    def __init__(
        self,
        outlet_store: IOutletStore | None = None,
        item_store: IItemStore | None = None,
        clock: Clock | None = None,
    ):
        self._outlet_store = outlet_store
        self._item_store = item_store
        self._clock = clock

    async def _get_outlet_store(self) -> IOutletStore:
        if self._outlet_store is None:
            from cafe_ledger.infrastructure.storage.sqlite import get_outlet_store

            self._outlet_store = await get_outlet_store()
        return self._outlet_store

    async def _get_item_store(self) -> IItemStore:
        if self._item_store is None:
            from cafe_ledger.infrastructure.storage.sqlite import get_item_store

            self._item_store = await get_item_store()
        return self._item_store

    async def execute(self, request: RegisterItemRequest) -> Item:
        """Execute register item use case."""
        name = request.name.strip()
        if not name:
            raise ValidationError("name", "must not be empty", request.name)
        validate_thresholds(request.low_stock_threshold, request.max_stock_level)

        outlet_store = await self._get_outlet_store()
        if await outlet_store.get_outlet(request.outlet_id) is None:
            raise OutletNotFoundError(request.outlet_id)

        category = (request.category or "").strip()
        unit = (request.unit or "").strip()
        if not category or not unit:
            suggestion = suggest_category_unit(name)
            if suggestion is not None:
                category = category or suggestion.category
                unit = unit or suggestion.unit
                logger.debug("item_unit_suggested", name=name, keyword=suggestion.keyword)

        now = (self._clock or get_clock()).now()
        item = Item(
            outlet_id=request.outlet_id,
            name=name,
            sku=(request.sku or "").strip() or None,
            category=category or DEFAULT_CATEGORY,
            unit=unit or DEFAULT_UNIT,
            low_stock_threshold=request.low_stock_threshold,
            max_stock_level=request.max_stock_level,
            status=ItemStatus.ACTIVE,
            created_at=now,
            updated_at=now,
        )

        item_store = await self._get_item_store()
        return await item_store.create_item(item)

    def to_response(self, item: Item) -> ItemResponse:
        """Convert result to API response."""
        return ItemResponse.from_entity(item)

"""Update Item Use Case -- identity edits that never touch the ledger."""

from collections.abc import Callable

from cafe_ledger.application.dto.requests import UpdateItemRequest
from cafe_ledger.application.dto.responses import ItemResponse
from cafe_ledger.application.services import get_clock, new_unit_of_work
from cafe_ledger.application.use_cases.register_item import validate_thresholds
from cafe_ledger.config import get_logger
from cafe_ledger.core.entities.item import Item
from cafe_ledger.core.exceptions import (
    ItemNotFoundError,
    UnitChangeConflictError,
    ValidationError,
)
from cafe_ledger.core.interfaces.unit_of_work import IUnitOfWork
from cafe_ledger.core.services.clock import Clock

logger = get_logger(__name__)

# Fields that may be cleared by sending null
NULLABLE_FIELDS = {"sku", "max_stock_level"}


class UpdateItemUseCase:
    """
    Edit name, SKU, category, unit or thresholds of an item.

    A unit change is refused while the item carries stock measured in the old
    unit: a non-zero opening stock or any movement in the open period.
    """

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork] | None = None,
        clock: Clock | None = None,
    ):
        self._uow_factory = uow_factory or new_unit_of_work
        self._clock = clock

    async def execute(self, item_id: int, request: UpdateItemRequest) -> Item:
        """Execute update item use case."""
        changes = request.model_dump(exclude_unset=True)
        if not changes:
            raise ValidationError("fields", "no updatable fields provided")

        for field, value in changes.items():
            if value is None and field not in NULLABLE_FIELDS:
                raise ValidationError(field, "must not be null")
        if "name" in changes:
            changes["name"] = changes["name"].strip()
            if not changes["name"]:
                raise ValidationError("name", "must not be empty", request.name)
        for field in ("category", "unit"):
            if field in changes:
                changes[field] = changes[field].strip()
                if not changes[field]:
                    raise ValidationError(field, "must not be empty")
        if "sku" in changes and changes["sku"] is not None:
            changes["sku"] = changes["sku"].strip() or None
        validate_thresholds(changes.get("low_stock_threshold"), changes.get("max_stock_level"))

        async with self._uow_factory() as uow:
            item = await uow.items.get_item(item_id)
            if item is None:
                raise ItemNotFoundError(item_id)

            new_unit = changes.get("unit")
            if new_unit is not None and new_unit != item.unit:
                totals = await uow.movements.period_totals(
                    item_id, after_movement_id=item.checkpoint_movement_id
                )
                if totals.movement_count > 0 or item.opening_stock != 0:
                    logger.warning(
                        "unit_change_rejected",
                        item_id=item_id,
                        current_unit=item.unit,
                        requested_unit=new_unit,
                        open_movements=totals.movement_count,
                    )
                    raise UnitChangeConflictError(item_id, item.unit, new_unit)

            changes["updated_at"] = (self._clock or get_clock()).now()
            updated = item.model_copy(update=changes)
            return await uow.items.update_identity(updated)

    def to_response(self, item: Item) -> ItemResponse:
        """Convert result to API response."""
        return ItemResponse.from_entity(item)

"""Retire Item Use Case -- soft delete keeping history and snapshots."""

from cafe_ledger.application.dto.responses import ItemResponse
from cafe_ledger.application.services import get_clock
from cafe_ledger.config import get_logger
from cafe_ledger.core.entities.item import Item, ItemStatus
from cafe_ledger.core.exceptions import ItemNotFoundError
from cafe_ledger.core.interfaces.registry_store import IItemStore
from cafe_ledger.core.services.clock import Clock

logger = get_logger(__name__)


class RetireItemUseCase:
    """Soft-retire an item. Retiring twice is a no-op."""

    def __init__(self, item_store: IItemStore | None = None, clock: Clock | None = None):
        self._item_store = item_store
        self._clock = clock

    async def _get_item_store(self) -> IItemStore:
        if self._item_store is None:
            from cafe_ledger.infrastructure.storage.sqlite import get_item_store

            self._item_store = await get_item_store()
        return self._item_store

    async def execute(self, item_id: int) -> Item:
        """Execute retire item use case."""
        store = await self._get_item_store()
        item = await store.get_item(item_id)
        if item is None:
            raise ItemNotFoundError(item_id)
        if item.status == ItemStatus.RETIRED:
            logger.debug("item_already_retired", item_id=item_id)
            return item

        now = (self._clock or get_clock()).now()
        await store.set_status(item_id, ItemStatus.RETIRED, updated_at=now)
        return item.model_copy(update={"status": ItemStatus.RETIRED, "updated_at": now})

    def to_response(self, item: Item) -> ItemResponse:
        """Convert result to API response."""
        return ItemResponse.from_entity(item)

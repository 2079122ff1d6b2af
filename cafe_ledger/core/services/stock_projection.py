"""
Live stock projection.

Current stock is never read from a stored counter. It is the item's opening
checkpoint plus the signed sum of every movement recorded after the
checkpoint, aggregated fresh from the ledger on each call.
"""

from cafe_ledger.config import get_logger
from cafe_ledger.core.entities.stock import StockLevel
from cafe_ledger.core.exceptions import ItemNotFoundError, OutletNotFoundError
from cafe_ledger.core.interfaces.ledger_store import IMovementStore
from cafe_ledger.core.interfaces.registry_store import IItemStore, IOutletStore

logger = get_logger(__name__)


class StockProjectionService:
    """
    Read-side view of on-hand quantities.

    Pure service -- stores are injected via constructor.
    """

    def __init__(
        self,
        outlet_store: IOutletStore,
        item_store: IItemStore,
        movement_store: IMovementStore,
    ) -> None:
        self._outlet_store = outlet_store
        self._item_store = item_store
        self._movement_store = movement_store

    async def current_stock(self, item_id: int) -> StockLevel:
        """Stock of a single item (active or retired)."""
        item = await self._item_store.get_item(item_id)
        if item is None:
            raise ItemNotFoundError(item_id)
        totals = await self._movement_store.period_totals(
            item_id, after_movement_id=item.checkpoint_movement_id
        )
        return StockLevel(item=item, totals=totals)

    async def stock_levels(self, outlet_id: int) -> list[StockLevel]:
        """Stock of every active item in an outlet, ordered by item name."""
        await self._require_outlet(outlet_id)
        return await self._item_store.list_stock_levels(outlet_id)

    async def low_stock(self, outlet_id: int) -> list[StockLevel]:
        """Active items at or below their low-stock threshold."""
        levels = await self.stock_levels(outlet_id)
        low = [level for level in levels if level.is_low]
        logger.debug("low_stock_evaluated", outlet_id=outlet_id, low=len(low))
        return low

    async def _require_outlet(self, outlet_id: int) -> None:
        if await self._outlet_store.get_outlet(outlet_id) is None:
            raise OutletNotFoundError(outlet_id)

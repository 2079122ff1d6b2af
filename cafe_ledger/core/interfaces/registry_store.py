"""Abstract interfaces for outlet and item registry storage."""

from abc import ABC, abstractmethod
from datetime import date, datetime

from cafe_ledger.core.entities.item import Item, ItemStatus
from cafe_ledger.core.entities.outlet import Outlet
from cafe_ledger.core.entities.stock import StockLevel


class IOutletStore(ABC):
    """Interface for outlet persistence."""

    @abstractmethod
    async def create_outlet(self, outlet: Outlet) -> Outlet:
        """Create a new outlet."""
        pass

    @abstractmethod
    async def get_outlet(self, outlet_id: int) -> Outlet | None:
        """Get outlet by ID."""
        pass

    @abstractmethod
    async def list_outlets(self) -> list[Outlet]:
        """List all outlets."""
        pass


class IItemStore(ABC):
    """Interface for item registry persistence.

    Identity updates and checkpoint advances are separate methods: only the
    daily closing may call ``advance_checkpoint``.
    """

    @abstractmethod
    async def create_item(self, item: Item) -> Item:
        """Create a new item with a zero checkpoint, keeping its timestamps."""
        pass

    @abstractmethod
    async def get_item(self, item_id: int) -> Item | None:
        """Get item by ID."""
        pass

    @abstractmethod
    async def list_items(
        self,
        outlet_id: int,
        status: ItemStatus | None = None,
        search: str | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[Item]:
        """List items of an outlet, optionally filtered by status or name/category."""
        pass

    @abstractmethod
    async def list_stock_levels(self, outlet_id: int) -> list[StockLevel]:
        """Active items with their open-period totals, read as one consistent state."""
        pass

    @abstractmethod
    async def update_identity(self, item: Item) -> Item:
        """Persist name, sku, category, unit and thresholds. Never touches stock fields."""
        pass

    @abstractmethod
    async def set_status(self, item_id: int, status: ItemStatus, updated_at: datetime) -> None:
        """Change lifecycle status."""
        pass

    @abstractmethod
    async def advance_checkpoint(
        self,
        item_id: int,
        opening_stock: float,
        checkpoint_movement_id: int,
        closed_date: date,
        updated_at: datetime,
    ) -> None:
        """Roll the opening-stock checkpoint forward."""
        pass

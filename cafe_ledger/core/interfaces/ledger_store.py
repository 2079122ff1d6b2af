"""Abstract interfaces for the movement ledger and closing records."""

from abc import ABC, abstractmethod
from datetime import date, datetime

from cafe_ledger.core.entities.movement import Movement
from cafe_ledger.core.entities.snapshot import DailyClosing, Snapshot
from cafe_ledger.core.entities.stock import PeriodTotals


class IMovementStore(ABC):
    """Interface for the append-only movement ledger.

    There is deliberately no update or delete method.
    """

    @abstractmethod
    async def add_movement(self, movement: Movement) -> Movement:
        """Append a movement and assign its sequence id."""
        pass

    @abstractmethod
    async def get_by_idempotency_key(self, key: str) -> Movement | None:
        """Find a movement previously recorded with this idempotency key."""
        pass

    @abstractmethod
    async def list_movements(
        self,
        outlet_id: int,
        item_id: int | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[Movement]:
        """List movements ordered by (created_at, id) ascending."""
        pass

    @abstractmethod
    async def period_totals(
        self,
        item_id: int,
        after_movement_id: int,
        upto_movement_id: int | None = None,
    ) -> PeriodTotals:
        """Sum an item's movements with after < id <= upto."""
        pass

    @abstractmethod
    async def open_period_totals(
        self,
        outlet_id: int,
        upto_movement_id: int | None = None,
    ) -> dict[int, PeriodTotals]:
        """Sum every item's movements since its own checkpoint, keyed by item id."""
        pass

    @abstractmethod
    async def window_totals(
        self,
        outlet_id: int,
        start: datetime,
        end: datetime,
    ) -> PeriodTotals:
        """Sum an outlet's movements with start <= created_at < end."""
        pass

    @abstractmethod
    async def last_movement_id(self, before: datetime | None = None) -> int:
        """Highest movement id, optionally restricted to created_at < before. 0 if none."""
        pass


class ISnapshotStore(ABC):
    """Interface for locked daily snapshots and closing headers."""

    @abstractmethod
    async def add_closing(self, closing: DailyClosing) -> DailyClosing:
        """Insert a closing header."""
        pass

    @abstractmethod
    async def add_snapshot(self, snapshot: Snapshot) -> Snapshot:
        """Insert one locked snapshot."""
        pass

    @abstractmethod
    async def get_closing(self, outlet_id: int, business_date: date) -> DailyClosing | None:
        """Get the closing header for a day."""
        pass

    @abstractmethod
    async def latest_closing(self, outlet_id: int) -> DailyClosing | None:
        """Most recent closed day of an outlet."""
        pass

    @abstractmethod
    async def count_snapshots(self, outlet_id: int, business_date: date) -> int:
        """Number of snapshots stored for a day."""
        pass

    @abstractmethod
    async def list_snapshots(
        self,
        outlet_id: int,
        business_date: date | None = None,
        item_id: int | None = None,
        since: date | None = None,
    ) -> list[Snapshot]:
        """List snapshots ordered by business_date, item_id."""
        pass

"""Abstract unit of work spanning registry and ledger stores."""

from abc import ABC, abstractmethod
from types import TracebackType

from cafe_ledger.core.interfaces.ledger_store import IMovementStore, ISnapshotStore
from cafe_ledger.core.interfaces.registry_store import IItemStore, IOutletStore


class IUnitOfWork(ABC):
    """
    Serialized read-check-write transaction.

    Stores exposed inside ``async with`` share one transaction that holds the
    write lock from its first statement. Leaving the block normally commits;
    an exception rolls everything back.
    """

    outlets: IOutletStore
    items: IItemStore
    movements: IMovementStore
    snapshots: ISnapshotStore

    @abstractmethod
    async def __aenter__(self) -> "IUnitOfWork":
        pass

    @abstractmethod
    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        pass

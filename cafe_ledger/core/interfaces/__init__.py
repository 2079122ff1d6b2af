"""Core interfaces (ports) for dependency injection."""

from cafe_ledger.core.interfaces.ledger_store import IMovementStore, ISnapshotStore
from cafe_ledger.core.interfaces.registry_store import IItemStore, IOutletStore
from cafe_ledger.core.interfaces.unit_of_work import IUnitOfWork

__all__ = [
    # Registry
    "IOutletStore",
    "IItemStore",
    # Ledger
    "IMovementStore",
    "ISnapshotStore",
    # Transactions
    "IUnitOfWork",
]

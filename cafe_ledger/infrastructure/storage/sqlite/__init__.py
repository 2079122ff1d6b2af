"""SQLite storage implementations."""

from cafe_ledger.infrastructure.storage.sqlite.connection import (
    ConnectionPool,
    close_pool,
    get_connection,
    get_pool,
    get_transaction,
)
from cafe_ledger.infrastructure.storage.sqlite.ledger_store import (
    SQLiteMovementStore,
    SQLiteSnapshotStore,
)
from cafe_ledger.infrastructure.storage.sqlite.registry_store import (
    SQLiteItemStore,
    SQLiteOutletStore,
)
from cafe_ledger.infrastructure.storage.sqlite.unit_of_work import SQLiteUnitOfWork

# Aliases for backward compatibility
get_connection_pool = get_pool
close_connection_pool = close_pool

# Singleton instances
_outlet_store: SQLiteOutletStore | None = None
_item_store: SQLiteItemStore | None = None
_movement_store: SQLiteMovementStore | None = None
_snapshot_store: SQLiteSnapshotStore | None = None


async def get_outlet_store() -> SQLiteOutletStore:
    """Get singleton outlet store instance."""
    global _outlet_store
    if _outlet_store is None:
        _outlet_store = SQLiteOutletStore()
    return _outlet_store


async def get_item_store() -> SQLiteItemStore:
    """Get singleton item store instance."""
    global _item_store
    if _item_store is None:
        _item_store = SQLiteItemStore()
    return _item_store


async def get_movement_store() -> SQLiteMovementStore:
    """Get singleton movement store instance."""
    global _movement_store
    if _movement_store is None:
        _movement_store = SQLiteMovementStore()
    return _movement_store


async def get_snapshot_store() -> SQLiteSnapshotStore:
    """Get singleton snapshot store instance."""
    global _snapshot_store
    if _snapshot_store is None:
        _snapshot_store = SQLiteSnapshotStore()
    return _snapshot_store


def get_unit_of_work() -> SQLiteUnitOfWork:
    """New unit of work; each one is a separate transaction."""
    return SQLiteUnitOfWork()


__all__ = [
    # Connection
    "ConnectionPool",
    "get_pool",
    "close_pool",
    "get_connection",
    "get_transaction",
    # Aliases for connection
    "get_connection_pool",
    "close_connection_pool",
    # Store classes
    "SQLiteOutletStore",
    "SQLiteItemStore",
    "SQLiteMovementStore",
    "SQLiteSnapshotStore",
    "SQLiteUnitOfWork",
    # Factory functions
    "get_outlet_store",
    "get_item_store",
    "get_movement_store",
    "get_snapshot_store",
    "get_unit_of_work",
]

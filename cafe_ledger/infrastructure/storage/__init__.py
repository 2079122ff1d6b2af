"""Storage infrastructure implementations."""

from cafe_ledger.infrastructure.storage.sqlite import (
    SQLiteItemStore,
    SQLiteMovementStore,
    SQLiteOutletStore,
    SQLiteSnapshotStore,
    SQLiteUnitOfWork,
    close_pool,
    get_connection,
    get_pool,
    get_transaction,
)

__all__ = [
    # SQLite stores
    "SQLiteOutletStore",
    "SQLiteItemStore",
    "SQLiteMovementStore",
    "SQLiteSnapshotStore",
    "SQLiteUnitOfWork",
    # Connection pool
    "get_pool",
    "close_pool",
    "get_connection",
    "get_transaction",
]

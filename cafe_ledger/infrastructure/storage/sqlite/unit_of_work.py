"""SQLite unit of work over one BEGIN IMMEDIATE transaction."""

from contextlib import AsyncExitStack
from types import TracebackType

from cafe_ledger.core.interfaces.unit_of_work import IUnitOfWork
from cafe_ledger.infrastructure.storage.sqlite.connection import get_transaction
from cafe_ledger.infrastructure.storage.sqlite.ledger_store import (
    SQLiteMovementStore,
    SQLiteSnapshotStore,
)
from cafe_ledger.infrastructure.storage.sqlite.registry_store import (
    SQLiteItemStore,
    SQLiteOutletStore,
)


class SQLiteUnitOfWork(IUnitOfWork):
    """
    Binds every store to a single pooled connection.

    Usage:
        async with SQLiteUnitOfWork() as uow:
            item = await uow.items.get_item(item_id)
            await uow.movements.add_movement(movement)
    """

    def __init__(self) -> None:
        self._stack: AsyncExitStack | None = None

    async def __aenter__(self) -> "SQLiteUnitOfWork":
        stack = AsyncExitStack()
        conn = await stack.enter_async_context(get_transaction(immediate=True))
        self._stack = stack
        self.outlets = SQLiteOutletStore(conn)
        self.items = SQLiteItemStore(conn)
        self.movements = SQLiteMovementStore(conn)
        self.snapshots = SQLiteSnapshotStore(conn)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        stack, self._stack = self._stack, None
        if stack is not None:
            await stack.__aexit__(exc_type, exc, tb)

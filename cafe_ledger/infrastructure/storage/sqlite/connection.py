"""
aiosqlite connection pool for the ledger database.

Every pooled connection runs in its own aiosqlite worker thread, so a writer
blocked on SQLite's lock (up to ``busy_timeout`` ms) never blocks the event
loop. Connections are opened lazily up to ``pool_size``.
"""

import asyncio
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

import aiosqlite

from cafe_ledger.config import get_logger, get_settings
from cafe_ledger.core.exceptions import DatabaseError

logger = get_logger(__name__)

CONNECTION_PRAGMAS = (
    "PRAGMA journal_mode=WAL",
    "PRAGMA synchronous=NORMAL",
    "PRAGMA foreign_keys=ON",
)

# Write-lock waits longer than this are logged
SLOW_LOCK_MS = 250


class ConnectionPool:
    """Bounded pool of configured aiosqlite connections."""

    def __init__(self, db_path: Path, pool_size: int = 5, busy_timeout: int = 30000):
        self.db_path = db_path
        self.pool_size = pool_size
        self.busy_timeout = busy_timeout

        self._idle: asyncio.Queue[aiosqlite.Connection] = asyncio.Queue()
        self._connections: list[aiosqlite.Connection] = []
        self._lock = asyncio.Lock()
        self._closed = False

    @property
    def size(self) -> int:
        """Connections opened so far."""
        return len(self._connections)

    async def initialize(self) -> None:
        """Open the first connection so configuration errors surface at startup."""
        async with self.acquire():
            pass
        logger.info(
            "connection_pool_initialized",
            db_path=str(self.db_path),
            pool_size=self.pool_size,
            busy_timeout_ms=self.busy_timeout,
        )

    async def _open(self) -> aiosqlite.Connection:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = await aiosqlite.connect(self.db_path)
        for pragma in CONNECTION_PRAGMAS:
            await conn.execute(pragma)
        await conn.execute(f"PRAGMA busy_timeout={int(self.busy_timeout)}")
        conn.row_factory = aiosqlite.Row
        return conn

    async def _checkout(self) -> aiosqlite.Connection:
        if self._closed:
            raise DatabaseError("acquire", "connection pool is closed")
        if self._idle.empty():
            async with self._lock:
                if self._idle.empty() and self.size < self.pool_size:
                    conn = await self._open()
                    self._connections.append(conn)
                    logger.debug("connection_opened", open_connections=self.size)
                    return conn
        return await self._idle.get()

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[aiosqlite.Connection]:
        """Borrow a connection; it goes back to the pool on exit."""
        conn = await self._checkout()
        try:
            yield conn
        finally:
            if self._closed:
                await conn.close()
            else:
                self._idle.put_nowait(conn)

    async def _begin_immediate(self, conn: aiosqlite.Connection) -> None:
        started = time.perf_counter()
        try:
            await conn.execute("BEGIN IMMEDIATE")
        except aiosqlite.OperationalError as e:
            logger.error("write_lock_timeout", busy_timeout_ms=self.busy_timeout, error=str(e))
            raise DatabaseError("begin immediate", str(e)) from e
        waited_ms = (time.perf_counter() - started) * 1000
        if waited_ms > SLOW_LOCK_MS:
            logger.warning("write_lock_slow", waited_ms=round(waited_ms, 1))

    @asynccontextmanager
    async def transaction(self, immediate: bool = False) -> AsyncIterator[aiosqlite.Connection]:
        """
        Borrow a connection inside a transaction.

        Commits on success and rolls back on any exception, cancellation
        included. With ``immediate=True`` the database write lock is taken
        before the first statement, so whatever the block reads stays valid
        until it commits; concurrent immediate transactions run one at a time.
        """
        async with self.acquire() as conn:
            if immediate:
                await self._begin_immediate(conn)
            try:
                yield conn
                await conn.commit()
            except BaseException:
                await conn.rollback()
                raise

    async def ping(self) -> bool:
        """True when a trivial query succeeds."""
        async with self.acquire() as conn:
            cursor = await conn.execute("SELECT 1")
            return (await cursor.fetchone())[0] == 1

    async def close(self) -> None:
        """Close every connection; borrowed ones close when returned."""
        async with self._lock:
            self._closed = True
            while not self._idle.empty():
                await self._idle.get_nowait().close()
            opened = self.size
            self._connections.clear()
        logger.info("connection_pool_closed", connections=opened)


_pool: ConnectionPool | None = None


async def get_pool() -> ConnectionPool:
    """Global pool built from ``STORAGE_`` settings."""
    global _pool
    if _pool is None:
        storage = get_settings().storage
        _pool = ConnectionPool(
            db_path=storage.db_path,
            pool_size=storage.pool_size,
            busy_timeout=storage.busy_timeout,
        )
        await _pool.initialize()
    return _pool


async def close_pool() -> None:
    """Close and forget the global pool."""
    global _pool
    pool, _pool = _pool, None
    if pool is not None:
        await pool.close()


@asynccontextmanager
async def get_connection() -> AsyncIterator[aiosqlite.Connection]:
    pool = await get_pool()
    async with pool.acquire() as conn:
        yield conn


@asynccontextmanager
async def get_transaction(immediate: bool = False) -> AsyncIterator[aiosqlite.Connection]:
    pool = await get_pool()
    async with pool.transaction(immediate=immediate) as conn:
        yield conn

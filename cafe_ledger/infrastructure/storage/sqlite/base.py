"""Shared helpers for SQLite stores."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, date, datetime

import aiosqlite

from cafe_ledger.core.entities.stock import PeriodTotals, normalize_quantity
from cafe_ledger.infrastructure.storage.sqlite.connection import get_connection, get_transaction

# Fixed-width UTC format so text comparison in SQL matches time order
TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"

# Shared aggregate over stock_movements aliased as m
TOTALS_COLUMNS = """
    COALESCE(SUM(CASE WHEN m.direction = 'Incoming' THEN m.amount ELSE 0 END), 0) AS received,
    COALESCE(SUM(CASE WHEN m.direction = 'Outgoing' AND m.reason != 'Wastage'
                      THEN m.amount ELSE 0 END), 0) AS used,
    COALESCE(SUM(CASE WHEN m.direction = 'Outgoing' AND m.reason = 'Wastage'
                      THEN m.amount ELSE 0 END), 0) AS wastage,
    COUNT(m.id) AS movement_count
"""


def to_db_timestamp(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).strftime(TIMESTAMP_FORMAT)


def from_db_timestamp(value: str) -> datetime:
    return datetime.strptime(value, TIMESTAMP_FORMAT).replace(tzinfo=UTC)


def to_db_date(value: date | None) -> str | None:
    return value.isoformat() if value else None


def from_db_date(value: str | None) -> date | None:
    if not value:
        return None
    return date.fromisoformat(value)


def row_to_totals(row: aiosqlite.Row | None) -> PeriodTotals:
    if row is None:
        return PeriodTotals()
    return PeriodTotals(
        received=normalize_quantity(row["received"]),
        used=normalize_quantity(row["used"]),
        wastage=normalize_quantity(row["wastage"]),
        movement_count=int(row["movement_count"]),
    )


class SQLiteStore:
    """
    Base for stores that either own their connections or join a unit of work.

    When constructed with ``conn`` every statement runs on that connection and
    the enclosing unit of work decides commit or rollback.
    """

    def __init__(self, conn: aiosqlite.Connection | None = None):
        self._conn = conn

    @asynccontextmanager
    async def _read(self) -> AsyncIterator[aiosqlite.Connection]:
        if self._conn is not None:
            yield self._conn
            return
        async with get_connection() as conn:
            yield conn

    @asynccontextmanager
    async def _write(self) -> AsyncIterator[aiosqlite.Connection]:
        if self._conn is not None:
            yield self._conn
            return
        async with get_transaction() as conn:
            yield conn

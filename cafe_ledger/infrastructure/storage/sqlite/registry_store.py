"""SQLite implementation of outlet and item registry storage."""

from datetime import date, datetime

import aiosqlite

from cafe_ledger.config import get_logger
from cafe_ledger.core.entities.item import Item, ItemStatus
from cafe_ledger.core.entities.outlet import Outlet
from cafe_ledger.core.entities.stock import StockLevel
from cafe_ledger.core.interfaces.registry_store import IItemStore, IOutletStore
from cafe_ledger.infrastructure.storage.sqlite.base import (
    TOTALS_COLUMNS,
    SQLiteStore,
    from_db_date,
    from_db_timestamp,
    row_to_totals,
    to_db_date,
    to_db_timestamp,
)

logger = get_logger(__name__)


class SQLiteOutletStore(SQLiteStore, IOutletStore):
    """SQLite implementation of outlet storage."""

    async def create_outlet(self, outlet: Outlet) -> Outlet:
        """Create a new outlet."""
        async with self._write() as conn:
            cursor = await conn.execute(
                "INSERT INTO outlets (name, timezone, created_at) VALUES (?, ?, ?)",
                (outlet.name, outlet.timezone, to_db_timestamp(outlet.created_at)),
            )
            outlet.id = cursor.lastrowid
            logger.info("outlet_created", outlet_id=outlet.id, name=outlet.name)
            return outlet

    async def get_outlet(self, outlet_id: int) -> Outlet | None:
        """Get outlet by ID."""
        async with self._read() as conn:
            cursor = await conn.execute("SELECT * FROM outlets WHERE id = ?", (outlet_id,))
            row = await cursor.fetchone()
            if row is None:
                return None
            return self._row_to_outlet(row)

    async def list_outlets(self) -> list[Outlet]:
        """List all outlets."""
        async with self._read() as conn:
            cursor = await conn.execute("SELECT * FROM outlets ORDER BY name, id")
            rows = await cursor.fetchall()
            return [self._row_to_outlet(row) for row in rows]

    @staticmethod
    def _row_to_outlet(row: aiosqlite.Row) -> Outlet:
        return Outlet(
            id=row["id"],
            name=row["name"],
            timezone=row["timezone"],
            created_at=from_db_timestamp(row["created_at"]),
        )


class SQLiteItemStore(SQLiteStore, IItemStore):
    """SQLite implementation of the item registry."""

    async def create_item(self, item: Item) -> Item:
        """Create a new item with a zero checkpoint."""
        item.opening_stock = 0.0
        item.checkpoint_movement_id = 0
        item.last_closed_date = None
        async with self._write() as conn:
            cursor = await conn.execute(
                """
                INSERT INTO items (
                    outlet_id, name, sku, category, unit,
                    low_stock_threshold, max_stock_level, status,
                    opening_stock, checkpoint_movement_id, last_closed_date,
                    created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, 0, 0, NULL, ?, ?)
                """,
                (
                    item.outlet_id,
                    item.name,
                    item.sku,
                    item.category,
                    item.unit,
                    item.low_stock_threshold,
                    item.max_stock_level,
                    item.status.value,
                    to_db_timestamp(item.created_at),
                    to_db_timestamp(item.updated_at),
                ),
            )
            item.id = cursor.lastrowid
            logger.info(
                "item_created",
                item_id=item.id,
                outlet_id=item.outlet_id,
                name=item.name,
            )
            return item

    async def get_item(self, item_id: int) -> Item | None:
        """Get item by ID."""
        async with self._read() as conn:
            cursor = await conn.execute("SELECT * FROM items WHERE id = ?", (item_id,))
            row = await cursor.fetchone()
            if row is None:
                return None
            return self._row_to_item(row)

    async def list_items(
        self,
        outlet_id: int,
        status: ItemStatus | None = None,
        search: str | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[Item]:
        """List items of an outlet ordered by name."""
        sql = "SELECT * FROM items WHERE outlet_id = ?"
        params: list = [outlet_id]
        if status is not None:
            sql += " AND status = ?"
            params.append(status.value)
        if search:
            sql += " AND (lower(name) LIKE ? OR lower(category) LIKE ?)"
            pattern = f"%{search.strip().lower()}%"
            params.extend([pattern, pattern])
        sql += " ORDER BY lower(name), id"
        if limit is not None:
            sql += " LIMIT ? OFFSET ?"
            params.extend([limit, offset])

        async with self._read() as conn:
            cursor = await conn.execute(sql, params)
            rows = await cursor.fetchall()
            return [self._row_to_item(row) for row in rows]

    async def list_stock_levels(self, outlet_id: int) -> list[StockLevel]:
        """
        Active items joined with the movements after their checkpoint.

        One statement: opening stock and totals always share a checkpoint, even
        while a closing commits.
        """
        async with self._read() as conn:
            cursor = await conn.execute(
                f"""
                SELECT i.*, {TOTALS_COLUMNS}
                FROM items i
                LEFT JOIN stock_movements m
                    ON m.item_id = i.id AND m.id > i.checkpoint_movement_id
                WHERE i.outlet_id = ? AND i.status = ?
                GROUP BY i.id
                ORDER BY lower(i.name), i.id
                """,
                (outlet_id, ItemStatus.ACTIVE.value),
            )
            rows = await cursor.fetchall()
            return [
                StockLevel(item=self._row_to_item(row), totals=row_to_totals(row))
                for row in rows
            ]

    async def update_identity(self, item: Item) -> Item:
        """Update identity fields only."""
        async with self._write() as conn:
            await conn.execute(
                """
                UPDATE items SET
                    name = ?,
                    sku = ?,
                    category = ?,
                    unit = ?,
                    low_stock_threshold = ?,
                    max_stock_level = ?,
                    updated_at = ?
                WHERE id = ?
                """,
                (
                    item.name,
                    item.sku,
                    item.category,
                    item.unit,
                    item.low_stock_threshold,
                    item.max_stock_level,
                    to_db_timestamp(item.updated_at),
                    item.id,
                ),
            )
            logger.info("item_updated", item_id=item.id)
            return item

    async def set_status(self, item_id: int, status: ItemStatus, updated_at: datetime) -> None:
        """Change lifecycle status."""
        async with self._write() as conn:
            await conn.execute(
                "UPDATE items SET status = ?, updated_at = ? WHERE id = ?",
                (status.value, to_db_timestamp(updated_at), item_id),
            )
            logger.info("item_status_changed", item_id=item_id, status=status.value)

    async def advance_checkpoint(
        self,
        item_id: int,
        opening_stock: float,
        checkpoint_movement_id: int,
        closed_date: date,
        updated_at: datetime,
    ) -> None:
        """Roll the opening-stock checkpoint forward."""
        async with self._write() as conn:
            await conn.execute(
                """
                UPDATE items SET
                    opening_stock = ?,
                    checkpoint_movement_id = ?,
                    last_closed_date = ?,
                    updated_at = ?
                WHERE id = ?
                """,
                (
                    opening_stock,
                    checkpoint_movement_id,
                    to_db_date(closed_date),
                    to_db_timestamp(updated_at),
                    item_id,
                ),
            )

    @staticmethod
    def _row_to_item(row: aiosqlite.Row) -> Item:
        """Convert a database row to an Item entity."""
        return Item(
            id=row["id"],
            outlet_id=row["outlet_id"],
            name=row["name"],
            sku=row["sku"],
            category=row["category"],
            unit=row["unit"],
            low_stock_threshold=float(row["low_stock_threshold"]),
            max_stock_level=(
                float(row["max_stock_level"]) if row["max_stock_level"] is not None else None
            ),
            status=ItemStatus(row["status"]),
            opening_stock=float(row["opening_stock"]),
            checkpoint_movement_id=int(row["checkpoint_movement_id"]),
            last_closed_date=from_db_date(row["last_closed_date"]),
            created_at=from_db_timestamp(row["created_at"]),
            updated_at=from_db_timestamp(row["updated_at"]),
        )

"""SQLite implementation of the movement ledger and closing records."""

from datetime import date, datetime

import aiosqlite

from cafe_ledger.config import get_logger
from cafe_ledger.core.entities.movement import Direction, Movement, MovementReason
from cafe_ledger.core.entities.snapshot import DailyClosing, Snapshot
from cafe_ledger.core.entities.stock import PeriodTotals
from cafe_ledger.core.interfaces.ledger_store import IMovementStore, ISnapshotStore
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


class SQLiteMovementStore(SQLiteStore, IMovementStore):
    """Append-only stock movement storage."""

    async def add_movement(self, movement: Movement) -> Movement:
        """Append a movement."""
        async with self._write() as conn:
            cursor = await conn.execute(
                """
                INSERT INTO stock_movements (
                    item_id, outlet_id, direction, amount, reason,
                    note, reference, idempotency_key, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    movement.item_id,
                    movement.outlet_id,
                    movement.direction.value,
                    movement.amount,
                    movement.reason.value,
                    movement.note,
                    movement.reference,
                    movement.idempotency_key,
                    to_db_timestamp(movement.created_at),
                ),
            )
            movement.id = cursor.lastrowid
            logger.info(
                "movement_recorded",
                movement_id=movement.id,
                item_id=movement.item_id,
                direction=movement.direction.value,
                amount=movement.amount,
                reason=movement.reason.value,
            )
            return movement

    async def get_by_idempotency_key(self, key: str) -> Movement | None:
        """Find a movement by idempotency key."""
        async with self._read() as conn:
            cursor = await conn.execute(
                "SELECT * FROM stock_movements WHERE idempotency_key = ?", (key,)
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return self._row_to_movement(row)

    async def list_movements(
        self,
        outlet_id: int,
        item_id: int | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[Movement]:
        """List movements ordered by time ascending."""
        sql = "SELECT * FROM stock_movements WHERE outlet_id = ?"
        params: list = [outlet_id]
        if item_id is not None:
            sql += " AND item_id = ?"
            params.append(item_id)
        if start is not None:
            sql += " AND created_at >= ?"
            params.append(to_db_timestamp(start))
        if end is not None:
            sql += " AND created_at < ?"
            params.append(to_db_timestamp(end))
        sql += " ORDER BY created_at, id LIMIT ? OFFSET ?"
        params.extend([limit, offset])

        async with self._read() as conn:
            cursor = await conn.execute(sql, params)
            rows = await cursor.fetchall()
            return [self._row_to_movement(row) for row in rows]

    async def period_totals(
        self,
        item_id: int,
        after_movement_id: int,
        upto_movement_id: int | None = None,
    ) -> PeriodTotals:
        """Sum one item's movements in (after, upto]."""
        sql = f"SELECT {TOTALS_COLUMNS} FROM stock_movements m WHERE m.item_id = ? AND m.id > ?"
        params: list = [item_id, after_movement_id]
        if upto_movement_id is not None:
            sql += " AND m.id <= ?"
            params.append(upto_movement_id)

        async with self._read() as conn:
            cursor = await conn.execute(sql, params)
            return row_to_totals(await cursor.fetchone())

    async def open_period_totals(
        self,
        outlet_id: int,
        upto_movement_id: int | None = None,
    ) -> dict[int, PeriodTotals]:
        """Sum every item's movements since its own checkpoint."""
        sql = f"""
            SELECT m.item_id AS item_id, {TOTALS_COLUMNS}
            FROM stock_movements m
            JOIN items i ON i.id = m.item_id
            WHERE i.outlet_id = ? AND m.id > i.checkpoint_movement_id
        """
        params: list = [outlet_id]
        if upto_movement_id is not None:
            sql += " AND m.id <= ?"
            params.append(upto_movement_id)
        sql += " GROUP BY m.item_id"

        async with self._read() as conn:
            cursor = await conn.execute(sql, params)
            rows = await cursor.fetchall()
            return {row["item_id"]: row_to_totals(row) for row in rows}

    async def window_totals(
        self,
        outlet_id: int,
        start: datetime,
        end: datetime,
    ) -> PeriodTotals:
        """Sum an outlet's movements in [start, end)."""
        async with self._read() as conn:
            cursor = await conn.execute(
                f"""
                SELECT {TOTALS_COLUMNS}
                FROM stock_movements m
                WHERE m.outlet_id = ? AND m.created_at >= ? AND m.created_at < ?
                """,
                (outlet_id, to_db_timestamp(start), to_db_timestamp(end)),
            )
            return row_to_totals(await cursor.fetchone())

    async def last_movement_id(self, before: datetime | None = None) -> int:
        """Ledger high-water mark."""
        sql = "SELECT COALESCE(MAX(id), 0) FROM stock_movements"
        params: list = []
        if before is not None:
            sql += " WHERE created_at < ?"
            params.append(to_db_timestamp(before))

        async with self._read() as conn:
            cursor = await conn.execute(sql, params)
            row = await cursor.fetchone()
            return int(row[0]) if row else 0

    @staticmethod
    def _row_to_movement(row: aiosqlite.Row) -> Movement:
        """Convert a database row to a Movement entity."""
        return Movement(
            id=row["id"],
            item_id=row["item_id"],
            outlet_id=row["outlet_id"],
            direction=Direction(row["direction"]),
            amount=float(row["amount"]),
            reason=MovementReason(row["reason"]),
            note=row["note"],
            reference=row["reference"],
            idempotency_key=row["idempotency_key"],
            created_at=from_db_timestamp(row["created_at"]),
        )


class SQLiteSnapshotStore(SQLiteStore, ISnapshotStore):
    """Locked snapshot and closing header storage."""

    async def add_closing(self, closing: DailyClosing) -> DailyClosing:
        """Insert a closing header."""
        async with self._write() as conn:
            cursor = await conn.execute(
                """
                INSERT INTO daily_closings (
                    outlet_id, business_date, cutover_movement_id, item_count, closed_at
                ) VALUES (?, ?, ?, ?, ?)
                """,
                (
                    closing.outlet_id,
                    to_db_date(closing.business_date),
                    closing.cutover_movement_id,
                    closing.item_count,
                    to_db_timestamp(closing.closed_at),
                ),
            )
            closing.id = cursor.lastrowid
            return closing

    async def add_snapshot(self, snapshot: Snapshot) -> Snapshot:
        """Insert one locked snapshot."""
        async with self._write() as conn:
            cursor = await conn.execute(
                """
                INSERT INTO stock_snapshots (
                    outlet_id, item_id, business_date, opening_stock, received,
                    used_today, wastage, closing_stock, unit, locked,
                    cutover_movement_id, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, 1, ?, ?)
                """,
                (
                    snapshot.outlet_id,
                    snapshot.item_id,
                    to_db_date(snapshot.business_date),
                    snapshot.opening_stock,
                    snapshot.received,
                    snapshot.used_today,
                    snapshot.wastage,
                    snapshot.closing_stock,
                    snapshot.unit,
                    snapshot.cutover_movement_id,
                    to_db_timestamp(snapshot.created_at),
                ),
            )
            snapshot.id = cursor.lastrowid
            snapshot.locked = True
            return snapshot

    async def get_closing(self, outlet_id: int, business_date: date) -> DailyClosing | None:
        """Get the closing header for a day."""
        async with self._read() as conn:
            cursor = await conn.execute(
                "SELECT * FROM daily_closings WHERE outlet_id = ? AND business_date = ?",
                (outlet_id, to_db_date(business_date)),
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return self._row_to_closing(row)

    async def latest_closing(self, outlet_id: int) -> DailyClosing | None:
        """Most recent closed day."""
        async with self._read() as conn:
            cursor = await conn.execute(
                """
                SELECT * FROM daily_closings WHERE outlet_id = ?
                ORDER BY business_date DESC LIMIT 1
                """,
                (outlet_id,),
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return self._row_to_closing(row)

    async def count_snapshots(self, outlet_id: int, business_date: date) -> int:
        """Number of snapshots stored for a day."""
        async with self._read() as conn:
            cursor = await conn.execute(
                "SELECT COUNT(*) FROM stock_snapshots WHERE outlet_id = ? AND business_date = ?",
                (outlet_id, to_db_date(business_date)),
            )
            row = await cursor.fetchone()
            return int(row[0]) if row else 0

    async def list_snapshots(
        self,
        outlet_id: int,
        business_date: date | None = None,
        item_id: int | None = None,
        since: date | None = None,
    ) -> list[Snapshot]:
        """List snapshots ordered by date then item."""
        sql = "SELECT * FROM stock_snapshots WHERE outlet_id = ?"
        params: list = [outlet_id]
        if business_date is not None:
            sql += " AND business_date = ?"
            params.append(to_db_date(business_date))
        if item_id is not None:
            sql += " AND item_id = ?"
            params.append(item_id)
        if since is not None:
            sql += " AND business_date >= ?"
            params.append(to_db_date(since))
        sql += " ORDER BY business_date, item_id"

        async with self._read() as conn:
            cursor = await conn.execute(sql, params)
            rows = await cursor.fetchall()
            return [self._row_to_snapshot(row) for row in rows]

    @staticmethod
    def _row_to_closing(row: aiosqlite.Row) -> DailyClosing:
        return DailyClosing(
            id=row["id"],
            outlet_id=row["outlet_id"],
            business_date=from_db_date(row["business_date"]),
            cutover_movement_id=row["cutover_movement_id"],
            item_count=row["item_count"],
            closed_at=from_db_timestamp(row["closed_at"]),
        )

    @staticmethod
    def _row_to_snapshot(row: aiosqlite.Row) -> Snapshot:
        return Snapshot(
            id=row["id"],
            outlet_id=row["outlet_id"],
            item_id=row["item_id"],
            business_date=from_db_date(row["business_date"]),
            opening_stock=float(row["opening_stock"]),
            received=float(row["received"]),
            used_today=float(row["used_today"]),
            wastage=float(row["wastage"]),
            closing_stock=float(row["closing_stock"]),
            unit=row["unit"],
            locked=bool(row["locked"]),
            cutover_movement_id=row["cutover_movement_id"],
            created_at=from_db_timestamp(row["created_at"]),
        )

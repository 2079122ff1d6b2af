"""
Versioned schema migrations for the ledger database.

Files named ``v<NNN>_<name>.sql`` in this package are applied in version
order and recorded in ``schema_migrations`` with a content checksum. An
applied migration is never re-run; editing one after release stops the
migrator until a new version is added instead.

Before migrating an existing database an online backup is taken with
SQLite's backup API (which, unlike a file copy, includes pages still in the
WAL) and restored if the run fails.
"""

import asyncio
import hashlib
import re
import time
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

import aiosqlite

from cafe_ledger.config import get_logger, get_settings

logger = get_logger(__name__)

MIGRATIONS_DIR = Path(__file__).parent
FILENAME_PATTERN = re.compile(r"v(\d{3,})_(\w+)\.sql")

LEDGER_TABLES = (
    "outlets",
    "items",
    "stock_movements",
    "daily_closings",
    "stock_snapshots",
    "schema_migrations",
)

# Append-only guarantees of the ledger live in these triggers
LEDGER_TRIGGERS = (
    "trg_movements_no_update",
    "trg_movements_no_delete",
    "trg_snapshots_no_update",
    "trg_snapshots_no_delete",
    "trg_closings_no_update",
    "trg_closings_no_delete",
)


@dataclass(frozen=True)
class MigrationInfo:
    """A migration file on disk."""

    version: str
    name: str
    path: Path
    checksum: str

    @classmethod
    def from_file(cls, path: Path) -> "MigrationInfo":
        match = FILENAME_PATTERN.fullmatch(path.name)
        if match is None:
            raise ValueError(f"Invalid migration filename: {path.name}")
        digest = hashlib.sha256(path.read_bytes()).hexdigest()[:16]
        return cls(version=match.group(1), name=match.group(2), path=path, checksum=digest)

    @property
    def label(self) -> str:
        return f"v{self.version}_{self.name}"


@dataclass
class MigrationResult:
    """Outcome of applying one migration."""

    version: str
    name: str
    success: bool
    execution_time_ms: int
    error: str | None = None


def discover_migrations(migrations_dir: Path | None = None) -> list[MigrationInfo]:
    """Migration files sorted by version; badly named files are skipped."""
    found = []
    for path in (migrations_dir or MIGRATIONS_DIR).glob("v*.sql"):
        try:
            found.append(MigrationInfo.from_file(path))
        except ValueError as e:
            logger.warning("skipping_invalid_migration", path=str(path), error=str(e))
    return sorted(found, key=lambda m: int(m.version))


async def _applied_checksums(conn: aiosqlite.Connection) -> dict[str, str]:
    cursor = await conn.execute(
        "SELECT name FROM sqlite_master WHERE type = 'table' AND name = 'schema_migrations'"
    )
    if await cursor.fetchone() is None:
        return {}
    cursor = await conn.execute("SELECT version, checksum FROM schema_migrations")
    return {row[0]: row[1] for row in await cursor.fetchall()}


async def get_current_version(conn: aiosqlite.Connection) -> str | None:
    """Highest applied version, or None on an empty database."""
    applied = await _applied_checksums(conn)
    return max(applied, key=int) if applied else None


async def _apply(conn: aiosqlite.Connection, migration: MigrationInfo) -> MigrationResult:
    logger.info("applying_migration", migration=migration.label)
    started = time.perf_counter()

    def elapsed_ms() -> int:
        return int((time.perf_counter() - started) * 1000)

    try:
        await conn.executescript(migration.path.read_text(encoding="utf-8"))
        await conn.execute(
            "INSERT INTO schema_migrations (version, name, checksum, execution_time_ms)"
            " VALUES (?, ?, ?, ?)",
            (migration.version, migration.name, migration.checksum, elapsed_ms()),
        )
        await conn.commit()
    except aiosqlite.Error as e:
        await conn.rollback()
        logger.error("migration_failed", migration=migration.label, error=str(e))
        return MigrationResult(
            migration.version, migration.name, False, elapsed_ms(), error=str(e)
        )

    cursor = await conn.execute("PRAGMA foreign_key_check")
    violations = await cursor.fetchall()
    if violations:
        logger.error(
            "migration_left_fk_violations",
            migration=migration.label,
            violations=len(violations),
        )
        return MigrationResult(
            migration.version,
            migration.name,
            False,
            elapsed_ms(),
            error=f"{len(violations)} foreign key violations",
        )

    logger.info("migration_applied", migration=migration.label, execution_time_ms=elapsed_ms())
    return MigrationResult(migration.version, migration.name, True, elapsed_ms())


async def _copy_database(source: Path, target: Path) -> None:
    async with aiosqlite.connect(source) as src, aiosqlite.connect(target) as dst:
        await src.backup(dst)


async def create_backup(db_path: Path) -> Path:
    """Online copy of ``db_path`` next to it, stamped with the UTC time."""
    stamp = datetime.now(UTC).strftime("%Y%m%dT%H%M%SZ")
    backup_path = db_path.with_name(f"{db_path.stem}.backup_{stamp}{db_path.suffix}")
    await _copy_database(db_path, backup_path)
    logger.info("database_backup_created", backup_path=str(backup_path))
    return backup_path


async def restore_backup(db_path: Path, backup_path: Path) -> None:
    """Overwrite ``db_path`` with the contents of ``backup_path``."""
    await _copy_database(backup_path, db_path)
    logger.warning("database_restored_from_backup", backup_path=str(backup_path))


async def initialize_database(
    db_path: Path | None = None,
    create_backup_before: bool = True,
) -> list[MigrationResult]:
    """
    Apply every pending migration.

    Returns one result per migration attempted; an empty list means the
    schema was already current. Stops at the first failure. An applied
    migration whose file no longer matches its recorded checksum is reported
    as a failed result.
    """
    db_path = db_path or get_settings().storage.db_path
    db_path.parent.mkdir(parents=True, exist_ok=True)
    logger.info("initializing_database", db_path=str(db_path))

    backup_path = None
    if create_backup_before and db_path.exists():
        backup_path = await create_backup(db_path)

    results: list[MigrationResult] = []
    try:
        async with aiosqlite.connect(db_path) as conn:
            await conn.execute("PRAGMA journal_mode=WAL")
            await conn.execute("PRAGMA foreign_keys=ON")
            applied = await _applied_checksums(conn)

            for migration in discover_migrations():
                recorded = applied.get(migration.version)
                if recorded == migration.checksum:
                    continue
                if recorded is not None:
                    logger.error(
                        "migration_checksum_changed",
                        migration=migration.label,
                        recorded=recorded,
                        found=migration.checksum,
                    )
                    results.append(
                        MigrationResult(
                            migration.version,
                            migration.name,
                            False,
                            0,
                            error="applied migration file changed since it ran",
                        )
                    )
                    break

                result = await _apply(conn, migration)
                results.append(result)
                if not result.success:
                    break
    except Exception as e:
        logger.error("database_initialization_failed", error=str(e))
        if backup_path is not None:
            await restore_backup(db_path, backup_path)
        raise

    if backup_path is not None:
        if all(r.success for r in results):
            backup_path.unlink()
        else:
            await restore_backup(db_path, backup_path)

    logger.info(
        "database_initialized",
        applied=[f"v{r.version}" for r in results if r.success],
        failed=[f"v{r.version}" for r in results if not r.success],
    )
    return results


# Alias used by the application lifespan
run_migrations = initialize_database


async def get_migration_status(db_path: Path | None = None) -> dict:
    """Applied and pending versions of the ledger database."""
    db_path = db_path or get_settings().storage.db_path
    discovered = discover_migrations()

    if not db_path.exists():
        return {
            "exists": False,
            "current_version": None,
            "applied_migrations": [],
            "pending_migrations": [m.version for m in discovered],
            "total_migrations": len(discovered),
        }

    async with aiosqlite.connect(db_path) as conn:
        applied = await _applied_checksums(conn)
        current = await get_current_version(conn)

    return {
        "exists": True,
        "current_version": current,
        "applied_migrations": sorted(applied, key=int),
        "pending_migrations": [m.version for m in discovered if m.version not in applied],
        "total_migrations": len(discovered),
    }


def _check(name: str, problems: list | int, **extra) -> dict:
    return {"check": name, "status": "FAIL" if problems else "PASS", **extra}


async def verify_schema_integrity(db_path: Path | None = None) -> list[dict]:
    """
    SQLite integrity plus the ledger's own structural invariants.

    Besides foreign keys and page integrity this reports missing tables or
    append-only triggers, item checkpoints pointing past the last movement,
    and snapshot days that have no closing header.
    """
    db_path = db_path or get_settings().storage.db_path

    async with aiosqlite.connect(db_path) as conn:
        cursor = await conn.execute("PRAGMA foreign_key_check")
        fk_violations = len(await cursor.fetchall())

        cursor = await conn.execute("PRAGMA integrity_check")
        integrity = (await cursor.fetchone())[0]

        cursor = await conn.execute("SELECT type, name FROM sqlite_master")
        schema = {(row[0], row[1]) for row in await cursor.fetchall()}
        missing_tables = [t for t in LEDGER_TABLES if ("table", t) not in schema]
        missing_triggers = [t for t in LEDGER_TRIGGERS if ("trigger", t) not in schema]

        checks = [
            _check("foreign_keys", fk_violations, violations=fk_violations),
            _check("integrity", integrity != "ok", result=integrity),
            _check("required_tables", missing_tables, missing=missing_tables),
            _check("immutability_triggers", missing_triggers, missing=missing_triggers),
        ]
        if missing_tables:
            return checks

        cursor = await conn.execute(
            """
            SELECT id FROM items
            WHERE checkpoint_movement_id > (SELECT COALESCE(MAX(id), 0) FROM stock_movements)
            """
        )
        ahead = [row[0] for row in await cursor.fetchall()]
        checks.append(_check("checkpoints", ahead, items=ahead))

        cursor = await conn.execute(
            """
            SELECT DISTINCT s.outlet_id, s.business_date
            FROM stock_snapshots s
            LEFT JOIN daily_closings c
                ON c.outlet_id = s.outlet_id AND c.business_date = s.business_date
            WHERE c.id IS NULL
            """
        )
        orphans = [f"{row[0]}/{row[1]}" for row in await cursor.fetchall()]
        checks.append(_check("closing_headers", orphans, days=orphans))

    return checks


def main() -> None:
    """CLI entry point: migrate, or report status / integrity."""
    import argparse

    parser = argparse.ArgumentParser(description="Cafe ledger database migrator")
    parser.add_argument("--db-path", type=Path, help="Database path (default from settings)")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--status", action="store_true", help="Show migration status")
    mode.add_argument("--verify", action="store_true", help="Check schema and ledger integrity")
    parser.add_argument("--no-backup", action="store_true", help="Skip backup before migrating")
    args = parser.parse_args()

    async def run() -> int:
        if args.status:
            status = await get_migration_status(args.db_path)
            print(f"Database exists: {status['exists']}")
            print(f"Current version: {status['current_version'] or 'none'}")
            print(f"Pending: {', '.join(status['pending_migrations']) or 'none'}")
            return 0

        if args.verify:
            checks = await verify_schema_integrity(args.db_path)
            for check in checks:
                print(f"[{check['status']}] {check['check']}")
            return 0 if all(c["status"] == "PASS" for c in checks) else 1

        results = await initialize_database(args.db_path, create_backup_before=not args.no_backup)
        for result in results:
            state = "ok" if result.success else f"FAILED: {result.error}"
            print(f"v{result.version}_{result.name}: {state} ({result.execution_time_ms}ms)")
        if not results:
            print("Database is up to date")
        return 0 if all(r.success for r in results) else 1

    raise SystemExit(asyncio.run(run()))


if __name__ == "__main__":
    main()

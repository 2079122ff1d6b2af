#!/usr/bin/env python3
"""
Cafe ledger management CLI.

Usage:
    python manage.py start       Start the API server in the background
    python manage.py stop        Stop the background server
    python manage.py dev         Run the API server in the foreground with reload
    python manage.py status      Show server and database status
    python manage.py migrate     Apply pending database migrations
    python manage.py verify      Check schema and ledger integrity
    python manage.py close-day   Close a business day for an outlet
"""

import argparse
import asyncio
import os
import signal
import subprocess
import sys
import time
from datetime import date
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parent
PID_FILE = ROOT_DIR / ".cafe_ledger.pid"
APP_PATH = "cafe_ledger.api.main:app"


def _is_pid_alive(pid: int) -> bool:
    try:
        os.kill(pid, 0)
        return True
    except OSError:
        return False


def _read_pid() -> int | None:
    """Read the server PID, dropping a stale PID file."""
    if not PID_FILE.exists():
        return None
    try:
        pid = int(PID_FILE.read_text().strip())
    except (ValueError, OSError):
        return None
    if _is_pid_alive(pid):
        return pid
    PID_FILE.unlink(missing_ok=True)
    return None


def _uvicorn_cmd(args: argparse.Namespace, reload: bool = False) -> list[str]:
    cmd = [
        sys.executable, "-m", "uvicorn",
        APP_PATH,
        "--host", args.host,
        "--port", str(args.port),
    ]
    if reload:
        cmd.append("--reload")
    return cmd


def cmd_start(args: argparse.Namespace) -> None:
    """Start uvicorn in the background and record its PID."""
    existing = _read_pid()
    if existing is not None:
        print(f"Server already running (PID {existing}). Use 'stop' first.")
        sys.exit(1)

    print(f"Starting server on {args.host}:{args.port}...")
    proc = subprocess.Popen(_uvicorn_cmd(args), cwd=str(ROOT_DIR))
    PID_FILE.write_text(str(proc.pid))
    print(f"Server started (PID {proc.pid}).")
    print(f"  API:      http://{args.host}:{args.port}/api/health")
    print(f"  PID file: {PID_FILE}")


def cmd_stop(args: argparse.Namespace) -> None:
    """Stop the background server."""
    pid = _read_pid()
    if pid is None:
        print("Server is not running.")
        return

    print(f"Stopping server (PID {pid})...")
    try:
        os.kill(pid, signal.SIGTERM)
    except OSError:
        pass
    for _ in range(30):
        if not _is_pid_alive(pid):
            break
        time.sleep(0.1)
    else:
        print("Warning: Process did not exit within 3 seconds.")

    PID_FILE.unlink(missing_ok=True)
    print("Server stopped." if not _is_pid_alive(pid) else "Warning: Server may still be running.")


def cmd_dev(args: argparse.Namespace) -> None:
    """Run uvicorn in the foreground with reload."""
    try:
        subprocess.run(_uvicorn_cmd(args, reload=True), cwd=str(ROOT_DIR))
    except KeyboardInterrupt:
        print("\nDev server stopped.")


def cmd_status(args: argparse.Namespace) -> None:
    """Report server process and migration state."""
    from cafe_ledger.config import get_settings
    from cafe_ledger.infrastructure.storage.sqlite.migrations import get_migration_status

    pid = _read_pid()
    print(f"Server is running (PID {pid})." if pid else "Server is not running.")

    status = asyncio.run(get_migration_status())
    print(f"Database: {get_settings().storage.db_path}")
    if not status["exists"]:
        print("  Not initialized. Run 'migrate'.")
        return
    print(f"  Current version: {status.get('current_version') or 'N/A'}")
    pending = status.get("pending_migrations", [])
    print(f"  Pending migrations: {', '.join(pending) if pending else 'none'}")


def cmd_migrate(args: argparse.Namespace) -> None:
    """Apply pending migrations."""
    from cafe_ledger.config import configure_logging
    from cafe_ledger.infrastructure.storage.sqlite.migrations import initialize_database

    configure_logging()
    results = asyncio.run(initialize_database(create_backup_before=not args.no_backup))
    for result in results:
        state = "OK" if result.success else f"FAILED: {result.error}"
        print(f"v{result.version}_{result.name}: {state}")
    if not results:
        print("Database is up to date.")
    if any(not r.success for r in results):
        sys.exit(1)


def cmd_verify(args: argparse.Namespace) -> None:
    """Run schema and ledger integrity checks."""
    from cafe_ledger.infrastructure.storage.sqlite.migrations import verify_schema_integrity

    checks = asyncio.run(verify_schema_integrity())
    for check in checks:
        print(f"[{check['status']}] {check['check']}")
    if any(c["status"] != "PASS" for c in checks):
        sys.exit(1)


def cmd_close_day(args: argparse.Namespace) -> None:
    """Close a business day from the command line (e.g. from cron)."""
    from cafe_ledger.application.dto.requests import CloseDayRequest
    from cafe_ledger.application.use_cases import CloseDayUseCase
    from cafe_ledger.config import configure_logging
    from cafe_ledger.core.exceptions import LedgerError
    from cafe_ledger.infrastructure.storage.sqlite import close_connection_pool

    configure_logging()
    request = CloseDayRequest(business_date=args.date) if args.date else None

    async def run() -> None:
        try:
            result = await CloseDayUseCase().execute(args.outlet_id, request)
        finally:
            await close_connection_pool()
        closing = result.closing
        print(
            f"Closed {closing.business_date.isoformat()} for outlet {closing.outlet_id}: "
            f"{len(result.snapshots)} snapshots, cutover movement {closing.cutover_movement_id}"
        )

    try:
        asyncio.run(run())
    except LedgerError as e:
        print(f"Error [{e.code}]: {e.message}")
        sys.exit(1)


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Cafe ledger management CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    sub = parser.add_subparsers(dest="command", required=True)

    for name, func, help_text in (
        ("start", cmd_start, "Start the server in the background"),
        ("dev", cmd_dev, "Run the server with reload"),
    ):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("--host", default="0.0.0.0", help="Bind host (default: 0.0.0.0)")
        p.add_argument("--port", type=int, default=8000, help="Bind port (default: 8000)")
        p.set_defaults(func=func)

    p_stop = sub.add_parser("stop", help="Stop the server")
    p_stop.set_defaults(func=cmd_stop)

    p_status = sub.add_parser("status", help="Show server and database status")
    p_status.set_defaults(func=cmd_status)

    p_migrate = sub.add_parser("migrate", help="Apply pending migrations")
    p_migrate.add_argument("--no-backup", action="store_true", help="Skip backup before migrating")
    p_migrate.set_defaults(func=cmd_migrate)

    p_verify = sub.add_parser("verify", help="Check schema and ledger integrity")
    p_verify.set_defaults(func=cmd_verify)

    p_close = sub.add_parser("close-day", help="Close a business day")
    p_close.add_argument("outlet_id", type=int, help="Outlet ID")
    p_close.add_argument(
        "--date",
        type=date.fromisoformat,
        help="Business date YYYY-MM-DD (default: today in the outlet timezone)",
    )
    p_close.set_defaults(func=cmd_close_day)

    args = parser.parse_args()
    args.func(args)


if __name__ == "__main__":
    main()

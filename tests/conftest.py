"""Pytest configuration and fixtures."""

from collections.abc import AsyncGenerator, Awaitable, Callable, Iterator
from datetime import UTC, datetime
from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient

import cafe_ledger.infrastructure.storage.sqlite as sqlite_storage
from cafe_ledger.application.dto.requests import (
    RecordMovementRequest,
    RegisterItemRequest,
    RegisterOutletRequest,
)
from cafe_ledger.application.services import reset_services, set_clock
from cafe_ledger.application.use_cases import (
    RecordMovementResult,
    RecordMovementUseCase,
    RegisterItemUseCase,
    RegisterOutletUseCase,
)
from cafe_ledger.config import get_settings, reset_settings
from cafe_ledger.core.entities import Direction, Item, MovementReason, Outlet
from cafe_ledger.core.services.clock import FixedClock
from cafe_ledger.infrastructure.storage.sqlite.connection import close_pool
from cafe_ledger.infrastructure.storage.sqlite.migrations import initialize_database

# 09:00 UTC on a Sunday; far from midnight in the timezones used by the tests
START = datetime(2024, 3, 10, 9, 0, tzinfo=UTC)


def _reset_store_singletons() -> None:
    sqlite_storage._outlet_store = None
    sqlite_storage._item_store = None
    sqlite_storage._movement_store = None
    sqlite_storage._snapshot_store = None


@pytest.fixture
async def ledger_db(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> AsyncGenerator[Path, None]:
    """Fresh migrated database in a temp dir, wired into the global pool."""
    monkeypatch.setenv("STORAGE_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("STORAGE_POOL_SIZE", "3")
    monkeypatch.setenv("STORAGE_BUSY_TIMEOUT", "10000")
    await close_pool()
    reset_settings()
    reset_services()
    _reset_store_singletons()

    results = await initialize_database(create_backup_before=False)
    assert results and all(r.success for r in results)

    yield get_settings().storage.db_path

    await close_pool()
    _reset_store_singletons()
    reset_services()
    reset_settings()


@pytest.fixture
def clock(ledger_db: Path) -> Iterator[FixedClock]:
    """Process clock pinned to START."""
    fixed = FixedClock(START)
    set_clock(fixed)
    yield fixed
    set_clock(None)


@pytest.fixture
async def outlet(ledger_db: Path) -> Outlet:
    return await RegisterOutletUseCase().execute(
        RegisterOutletRequest(name="Main Street", timezone="UTC")
    )


@pytest.fixture
def register_item(outlet: Outlet) -> Callable[..., Awaitable[Item]]:
    """Factory registering items in the default outlet."""

    async def _register(name: str = "Milk", **kwargs) -> Item:
        kwargs.setdefault("outlet_id", outlet.id)
        return await RegisterItemUseCase().execute(RegisterItemRequest(name=name, **kwargs))

    return _register


@pytest.fixture
def record(ledger_db: Path) -> Callable[..., Awaitable[RecordMovementResult]]:
    """Factory recording movements through the use case."""

    async def _record(
        item_id: int,
        direction: Direction,
        amount: float,
        reason: MovementReason | None = None,
        allow_negative_stock: bool | None = None,
        **kwargs,
    ) -> RecordMovementResult:
        if reason is None:
            reason = (
                MovementReason.PURCHASE
                if direction == Direction.INCOMING
                else MovementReason.ORDER_CONSUMPTION
            )
        request = RecordMovementRequest(
            item_id=item_id,
            direction=direction,
            amount=amount,
            reason=reason,
            **kwargs,
        )
        use_case = RecordMovementUseCase(allow_negative_stock=allow_negative_stock)
        return await use_case.execute(request)

    return _record


@pytest.fixture
async def api_client(ledger_db: Path, clock: FixedClock) -> AsyncGenerator[AsyncClient, None]:
    """Async client over the real app and a temp database."""
    from cafe_ledger.api.main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

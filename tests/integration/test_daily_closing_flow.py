"""End-to-end closing flows against a real SQLite database."""

from datetime import date, timedelta

import pytest

from cafe_ledger.application.dto.requests import (
    CloseDayRequest,
    RegisterOutletRequest,
    UpdateItemRequest,
)
from cafe_ledger.application.services import get_stock_projection_service
from cafe_ledger.application.use_cases import (
    CloseDayUseCase,
    RegisterOutletUseCase,
    RetireItemUseCase,
    UpdateItemUseCase,
)
from cafe_ledger.core.entities import Direction, MovementReason
from cafe_ledger.core.exceptions import (
    AlreadyClosedError,
    ClosingOrderError,
    ItemRetiredError,
    UnitChangeConflictError,
    ValidationError,
)
from cafe_ledger.infrastructure.storage.sqlite import (
    SQLiteSnapshotStore,
    get_item_store,
    get_movement_store,
    get_snapshot_store,
)


async def _stock(item_id: int) -> float:
    projection = await get_stock_projection_service()
    return (await projection.current_stock(item_id)).quantity


async def _ledger_sum(outlet_id: int, item_id: int) -> float:
    store = await get_movement_store()
    movements = await store.list_movements(outlet_id, item_id=item_id, limit=10_000)
    return round(sum(m.signed_amount for m in movements), 6)


class TestDailyClosing:
    async def test_milk_day(self, clock, outlet, register_item, record):
        milk = await register_item("Milk")
        assert milk.unit == "Liter"

        await record(milk.id, Direction.INCOMING, 10, MovementReason.OPENING_STOCK)
        await CloseDayUseCase().execute(outlet.id)

        clock.advance(days=1)
        await record(milk.id, Direction.INCOMING, 20, MovementReason.PURCHASE)
        await record(milk.id, Direction.OUTGOING, 5, MovementReason.ORDER_CONSUMPTION)
        await record(milk.id, Direction.OUTGOING, 2, MovementReason.WASTAGE)
        assert await _stock(milk.id) == 23.0

        clock.advance(hours=12)
        result = await CloseDayUseCase().execute(outlet.id)

        [snapshot] = result.snapshots
        assert snapshot.business_date == date(2024, 3, 11)
        assert snapshot.opening_stock == 10.0
        assert snapshot.received == 20.0
        assert snapshot.used_today == 5.0
        assert snapshot.wastage == 2.0
        assert snapshot.closing_stock == 23.0
        assert snapshot.locked

        item = await (await get_item_store()).get_item(milk.id)
        assert item.opening_stock == 23.0
        assert item.last_closed_date == date(2024, 3, 11)
        # nothing recorded since the closing
        assert await _stock(milk.id) == 23.0

    async def test_stock_always_equals_ledger_sum(self, clock, outlet, register_item, record):
        beans = await register_item("Coffee Beans", unit="kg")
        steps = [
            (Direction.INCOMING, 5.0, MovementReason.PURCHASE),
            (Direction.OUTGOING, 0.25, MovementReason.ORDER_CONSUMPTION),
            (Direction.OUTGOING, 0.1, MovementReason.WASTAGE),
            (Direction.INCOMING, 2.0, MovementReason.CORRECTION),
            (Direction.OUTGOING, 1.3, MovementReason.MANUAL_ADJUSTMENT),
        ]
        for day in range(3):
            for direction, amount, reason in steps:
                await record(beans.id, direction, amount, reason)
                assert await _stock(beans.id) == await _ledger_sum(outlet.id, beans.id)
            await CloseDayUseCase().execute(outlet.id)
            assert await _stock(beans.id) == await _ledger_sum(outlet.id, beans.id)
            clock.advance(days=1)

    async def test_checkpoint_continuity(self, clock, outlet, register_item, record):
        cups = await register_item("Cups")
        for amount in (100, 40, 25):
            await record(cups.id, Direction.INCOMING, amount)
            await record(cups.id, Direction.OUTGOING, amount / 5)
            await CloseDayUseCase().execute(outlet.id)
            clock.advance(days=1)

        snapshots = await (await get_snapshot_store()).list_snapshots(outlet.id, item_id=cups.id)
        assert len(snapshots) == 3
        assert snapshots[0].opening_stock == 0.0
        for previous, current in zip(snapshots, snapshots[1:]):
            assert current.opening_stock == previous.closing_stock
            assert current.closing_stock == (
                current.opening_stock + current.received - current.used_today - current.wastage
            )

    async def test_item_without_movements_carries_over(self, clock, outlet, register_item, record):
        sugar = await register_item("Sugar")
        await record(sugar.id, Direction.INCOMING, 3)
        await CloseDayUseCase().execute(outlet.id)
        clock.advance(days=1)

        result = await CloseDayUseCase().execute(outlet.id)
        [snapshot] = result.snapshots
        assert (snapshot.opening_stock, snapshot.received, snapshot.closing_stock) == (3.0, 0.0, 3.0)

    async def test_closing_is_final(self, clock, outlet, register_item, record):
        await register_item("Milk")
        await CloseDayUseCase().execute(outlet.id)
        with pytest.raises(AlreadyClosedError):
            await CloseDayUseCase().execute(outlet.id)

    async def test_cannot_close_future_day(self, clock, outlet):
        with pytest.raises(ValidationError):
            await CloseDayUseCase().execute(
                outlet.id, CloseDayRequest(business_date=date(2024, 3, 11))
            )

    async def test_past_day_closes_at_its_own_midnight(self, clock, outlet, register_item, record):
        milk = await register_item("Milk")
        await record(milk.id, Direction.INCOMING, 10)

        clock.advance(days=1)
        await record(milk.id, Direction.INCOMING, 5)

        result = await CloseDayUseCase().execute(
            outlet.id, CloseDayRequest(business_date=date(2024, 3, 10))
        )
        assert result.snapshots[0].received == 10.0
        assert result.snapshots[0].closing_stock == 10.0
        assert await _stock(milk.id) == 15.0

        clock.advance(hours=12)
        result = await CloseDayUseCase().execute(outlet.id)
        [snapshot] = result.snapshots
        assert (snapshot.opening_stock, snapshot.received, snapshot.closing_stock) == (
            10.0, 5.0, 15.0,
        )

    async def test_past_day_skips_items_registered_after_it(
        self, clock, outlet, register_item, record
    ):
        milk = await register_item("Milk")
        await record(milk.id, Direction.INCOMING, 10)

        clock.advance(days=1)
        tea = await register_item("Tea")
        await record(tea.id, Direction.INCOMING, 4)

        result = await CloseDayUseCase().execute(
            outlet.id, CloseDayRequest(business_date=date(2024, 3, 10))
        )
        assert [s.item_id for s in result.snapshots] == [milk.id]
        assert result.closing.item_count == 1
        snapshots = await (await get_snapshot_store()).list_snapshots(outlet.id, item_id=tea.id)
        assert snapshots == []

        # Tea is untouched by that closing and enters the next one
        assert (await (await get_item_store()).get_item(tea.id)).checkpoint_movement_id == 0
        clock.advance(hours=12)
        result = await CloseDayUseCase().execute(outlet.id)
        closing = {s.item_id: s.closing_stock for s in result.snapshots}
        assert closing == {milk.id: 10.0, tea.id: 4.0}

    async def test_registry_timestamps_follow_the_clock(self, clock, outlet, register_item):
        registered = clock.advance(days=1)
        tea = await register_item("Tea")
        assert tea.created_at == tea.updated_at == registered

        clock.advance(hours=2)
        await UpdateItemUseCase().execute(tea.id, UpdateItemRequest(name="Green Tea"))
        clock.advance(hours=1)
        await RetireItemUseCase().execute(tea.id)

        stored = await (await get_item_store()).get_item(tea.id)
        assert stored.created_at == registered
        assert stored.updated_at == registered + timedelta(hours=3)

    async def test_skipped_day_rolls_into_next_closing(self, clock, outlet, register_item, record):
        milk = await register_item("Milk")
        await record(milk.id, Direction.INCOMING, 10)
        await CloseDayUseCase().execute(outlet.id)

        clock.advance(days=1)
        await record(milk.id, Direction.OUTGOING, 3)
        clock.advance(days=1)
        await record(milk.id, Direction.OUTGOING, 2)

        result = await CloseDayUseCase().execute(outlet.id)
        [snapshot] = result.snapshots
        assert snapshot.business_date == date(2024, 3, 12)
        assert snapshot.used_today == 5.0
        assert snapshot.closing_stock == 5.0

        with pytest.raises(ClosingOrderError):
            await CloseDayUseCase().execute(
                outlet.id, CloseDayRequest(business_date=date(2024, 3, 11))
            )

    async def test_outlet_timezone_defines_today(self, clock, ledger_db):
        tokyo = await RegisterOutletUseCase().execute(
            RegisterOutletRequest(name="Shibuya", timezone="Asia/Tokyo")
        )
        clock.advance(hours=7)  # 16:00 UTC, 01:00 next day in Tokyo
        result = await CloseDayUseCase().execute(tokyo.id)
        assert result.closing.business_date == date(2024, 3, 11)

    async def test_retired_item_leaves_closing(self, clock, outlet, register_item, record):
        milk = await register_item("Milk")
        straws = await register_item("Straws")
        await record(straws.id, Direction.INCOMING, 50)
        await RetireItemUseCase().execute(straws.id)

        with pytest.raises(ItemRetiredError):
            await record(straws.id, Direction.OUTGOING, 1)
        # incoming corrections stay possible
        await record(straws.id, Direction.INCOMING, 1, MovementReason.CORRECTION)

        result = await CloseDayUseCase().execute(outlet.id)
        assert [s.item_id for s in result.snapshots] == [milk.id]
        assert await _stock(straws.id) == 51.0


class TestInterruptedClosing:
    async def test_failure_leaves_no_trace_and_retry_succeeds(
        self, clock, outlet, register_item, record, monkeypatch
    ):
        milk = await register_item("Milk")
        cups = await register_item("Cups")
        await record(milk.id, Direction.INCOMING, 10)
        await record(cups.id, Direction.INCOMING, 30)

        original = SQLiteSnapshotStore.add_snapshot
        calls = 0

        async def failing_add_snapshot(self, snapshot):
            nonlocal calls
            calls += 1
            if calls == 2:
                raise RuntimeError("disk I/O error")
            return await original(self, snapshot)

        with monkeypatch.context() as patched:
            patched.setattr(SQLiteSnapshotStore, "add_snapshot", failing_add_snapshot)
            with pytest.raises(RuntimeError):
                await CloseDayUseCase().execute(outlet.id)

        snapshots = await get_snapshot_store()
        assert await snapshots.count_snapshots(outlet.id, date(2024, 3, 10)) == 0
        assert await snapshots.get_closing(outlet.id, date(2024, 3, 10)) is None
        item = await (await get_item_store()).get_item(milk.id)
        assert item.checkpoint_movement_id == 0
        assert item.opening_stock == 0.0

        result = await CloseDayUseCase().execute(outlet.id)
        assert len(result.snapshots) == 2
        assert {s.item_id: s.closing_stock for s in result.snapshots} == {
            milk.id: 10.0,
            cups.id: 30.0,
        }


class TestUnitChange:
    async def test_unit_change_blocked_by_history(self, clock, outlet, register_item, record):
        milk = await register_item("Milk")
        await record(milk.id, Direction.INCOMING, 4)
        with pytest.raises(UnitChangeConflictError):
            await UpdateItemUseCase().execute(milk.id, UpdateItemRequest(unit="ml"))

    async def test_unit_change_allowed_after_zero_closing(self, clock, outlet, register_item, record):
        milk = await register_item("Milk")
        await record(milk.id, Direction.INCOMING, 4)
        await record(milk.id, Direction.OUTGOING, 4)
        await CloseDayUseCase().execute(outlet.id)

        updated = await UpdateItemUseCase().execute(milk.id, UpdateItemRequest(unit="ml"))
        assert updated.unit == "ml"

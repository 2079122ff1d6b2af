"""Concurrent writers against one SQLite database."""

import asyncio
from datetime import date

import pytest

from cafe_ledger.application.services import get_metrics_aggregator, get_stock_projection_service
from cafe_ledger.application.use_cases import CloseDayUseCase
from cafe_ledger.core.entities import Direction
from cafe_ledger.core.exceptions import AlreadyClosedError, InsufficientStockError
from cafe_ledger.infrastructure.storage.sqlite import (
    get_item_store,
    get_movement_store,
    get_snapshot_store,
)


async def _stock(item_id: int) -> float:
    projection = await get_stock_projection_service()
    return (await projection.current_stock(item_id)).quantity


class TestConcurrentMovements:
    async def test_two_outgoing_on_last_stock(self, clock, outlet, register_item, record):
        cups = await register_item("Cups")
        await record(cups.id, Direction.INCOMING, 6)

        results = await asyncio.gather(
            record(cups.id, Direction.OUTGOING, 5, allow_negative_stock=False),
            record(cups.id, Direction.OUTGOING, 5, allow_negative_stock=False),
            return_exceptions=True,
        )

        errors = [r for r in results if isinstance(r, Exception)]
        assert len(errors) == 1
        assert isinstance(errors[0], InsufficientStockError)
        assert await _stock(cups.id) == 1.0

    async def test_parallel_incoming_all_counted(self, clock, outlet, register_item, record):
        eggs = await register_item("Eggs")
        results = await asyncio.gather(
            *(record(eggs.id, Direction.INCOMING, 1) for _ in range(12))
        )

        ids = [r.movement.id for r in results]
        assert len(set(ids)) == 12
        assert await _stock(eggs.id) == 12.0


class TestConcurrentClosing:
    async def test_only_one_closing_wins(self, clock, outlet, register_item, record):
        milk = await register_item("Milk")
        await record(milk.id, Direction.INCOMING, 8)

        results = await asyncio.gather(
            CloseDayUseCase().execute(outlet.id),
            CloseDayUseCase().execute(outlet.id),
            return_exceptions=True,
        )

        errors = [r for r in results if isinstance(r, Exception)]
        assert len(errors) == 1
        assert isinstance(errors[0], AlreadyClosedError)
        snapshots = await get_snapshot_store()
        assert await snapshots.count_snapshots(outlet.id, date(2024, 3, 10)) == 1

    async def test_movement_during_closing_is_counted_once(
        self, clock, outlet, register_item, record
    ):
        milk = await register_item("Milk")
        await record(milk.id, Direction.INCOMING, 10)

        closing, late = await asyncio.gather(
            CloseDayUseCase().execute(outlet.id),
            record(milk.id, Direction.OUTGOING, 4),
        )

        [snapshot] = closing.snapshots
        # the movement lands either inside the closed period or after it, never both
        if late.movement.id <= closing.closing.cutover_movement_id:
            assert snapshot.closing_stock == 6.0
        else:
            assert snapshot.closing_stock == 10.0

        movements = await (await get_movement_store()).list_movements(outlet.id)
        assert await _stock(milk.id) == sum(m.signed_amount for m in movements) == 6.0


class TestReadsDuringClosing:
    async def test_levels_when_closing_commits_between_store_calls(
        self, clock, outlet, register_item, record, monkeypatch: pytest.MonkeyPatch
    ):
        milk = await register_item("Milk", low_stock_threshold=2)
        await record(milk.id, Direction.INCOMING, 10)
        item_store = await get_item_store()
        movement_store = await get_movement_store()
        closed: list[bool] = []

        def close_after(store, name):
            original = getattr(store, name)

            async def wrapped(*args, **kwargs):
                result = await original(*args, **kwargs)
                if not closed:
                    closed.append(True)
                    await CloseDayUseCase().execute(outlet.id)
                return result

            monkeypatch.setattr(store, name, wrapped)

        for store, name in (
            (item_store, "list_items"),
            (item_store, "get_item"),
            (movement_store, "open_period_totals"),
            (movement_store, "period_totals"),
        ):
            close_after(store, name)

        projection = await get_stock_projection_service()
        [level] = await projection.stock_levels(outlet.id)
        assert level.quantity == 10.0
        assert await projection.low_stock(outlet.id) == []

    async def test_outlet_reads_racing_a_closing(self, clock, outlet, register_item, record):
        milk = await register_item("Milk", low_stock_threshold=2)
        cups = await register_item("Cups", low_stock_threshold=2)
        await record(milk.id, Direction.INCOMING, 10)
        await record(cups.id, Direction.INCOMING, 5)
        await record(cups.id, Direction.OUTGOING, 1)
        projection = await get_stock_projection_service()
        metrics = await get_metrics_aggregator()

        results = await asyncio.gather(
            CloseDayUseCase().execute(outlet.id),
            *(projection.stock_levels(outlet.id) for _ in range(8)),
            *(metrics.per_item_daily(outlet.id) for _ in range(4)),
            *(projection.low_stock(outlet.id) for _ in range(4)),
        )

        for levels in results[1:9]:
            assert {lvl.item.name: lvl.quantity for lvl in levels} == {"Cups": 4.0, "Milk": 10.0}
        for rows in results[9:13]:
            assert {row.item_name: row.closing for row in rows} == {
                "Cups": 4.0,
                "Milk": 10.0,
            }
        for low in results[13:]:
            assert low == []

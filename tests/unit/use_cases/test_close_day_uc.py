"""Tests for CloseDayUseCase."""

from datetime import UTC, date, datetime
from unittest.mock import AsyncMock

import pytest

from cafe_ledger.application.dto.requests import CloseDayRequest
from cafe_ledger.application.use_cases.close_day import CloseDayUseCase
from cafe_ledger.core.entities import DailyClosing, Item, Outlet, PeriodTotals
from cafe_ledger.core.exceptions import (
    AlreadyClosedError,
    ClosingOrderError,
    OutletNotFoundError,
    ValidationError,
)
from cafe_ledger.core.services.clock import FixedClock

NOW = datetime(2024, 3, 10, 22, 0, tzinfo=UTC)
TODAY = date(2024, 3, 10)
REGISTERED = datetime(2024, 3, 1, 8, 0, tzinfo=UTC)


@pytest.fixture
def uow():
    mock = AsyncMock()
    mock.__aenter__.return_value = mock
    mock.__aexit__.return_value = None
    mock.outlets.get_outlet.return_value = Outlet(id=1, name="Main Street", timezone="UTC")
    mock.snapshots.get_closing.return_value = None
    mock.snapshots.count_snapshots.return_value = 0
    mock.snapshots.latest_closing.return_value = None
    mock.snapshots.add_snapshot.side_effect = lambda snapshot: snapshot
    mock.snapshots.add_closing.side_effect = lambda closing: closing
    mock.movements.last_movement_id.return_value = 42
    mock.items.list_items.return_value = [
        Item(id=1, outlet_id=1, name="Milk", unit="Liter", opening_stock=10.0,
             checkpoint_movement_id=30, created_at=REGISTERED),
        Item(id=2, outlet_id=1, name="Cups", unit="Pieces", opening_stock=50.0,
             checkpoint_movement_id=30, created_at=REGISTERED),
    ]
    mock.movements.open_period_totals.return_value = {
        1: PeriodTotals(received=20.0, used=5.0, wastage=2.0, movement_count=3),
    }
    return mock


@pytest.fixture
def use_case(uow):
    return CloseDayUseCase(uow_factory=lambda: uow, clock=FixedClock(NOW))


class TestCloseDayUseCase:
    async def test_snapshot_per_active_item(self, use_case, uow):
        result = await use_case.execute(1)

        assert result.closing.business_date == TODAY
        assert result.closing.cutover_movement_id == 42
        assert result.closing.item_count == 2
        milk, cups = result.snapshots
        assert (milk.opening_stock, milk.received, milk.used_today, milk.wastage) == (
            10.0, 20.0, 5.0, 2.0,
        )
        assert milk.closing_stock == 23.0
        assert milk.unit == "Liter"
        # no movements: carried over unchanged
        assert cups.closing_stock == 50.0

    async def test_period_bounded_by_cutover(self, use_case, uow):
        await use_case.execute(1)
        uow.movements.open_period_totals.assert_awaited_once_with(1, upto_movement_id=42)

    async def test_checkpoints_advanced(self, use_case, uow):
        await use_case.execute(1)
        calls = uow.items.advance_checkpoint.await_args_list
        assert len(calls) == 2
        assert calls[0].args == (1,)
        assert calls[0].kwargs == {
            "opening_stock": 23.0,
            "checkpoint_movement_id": 42,
            "closed_date": TODAY,
            "updated_at": NOW,
        }

    async def test_header_written_after_snapshots(self, use_case, uow):
        order = []
        uow.snapshots.add_snapshot.side_effect = lambda s: order.append("snapshot") or s
        uow.snapshots.add_closing.side_effect = lambda c: order.append("closing") or c
        await use_case.execute(1)
        assert order == ["snapshot", "snapshot", "closing"]

    async def test_past_day_cutover_at_day_end(self, use_case, uow):
        await use_case.execute(1, CloseDayRequest(business_date=date(2024, 3, 9)))
        uow.movements.last_movement_id.assert_awaited_once_with(
            before=datetime(2024, 3, 10, 0, 0, tzinfo=UTC)
        )

    async def test_past_day_skips_items_registered_later(self, use_case, uow):
        milk, cups = uow.items.list_items.return_value
        cups.created_at = datetime(2024, 3, 10, 7, 0, tzinfo=UTC)

        result = await use_case.execute(1, CloseDayRequest(business_date=date(2024, 3, 9)))

        assert [s.item_id for s in result.snapshots] == [milk.id]
        assert result.closing.item_count == 1
        [call] = uow.items.advance_checkpoint.await_args_list
        assert call.args == (milk.id,)

    async def test_future_day_rejected(self, use_case, uow):
        with pytest.raises(ValidationError):
            await use_case.execute(1, CloseDayRequest(business_date=date(2024, 3, 11)))
        uow.snapshots.add_snapshot.assert_not_awaited()

    async def test_already_closed(self, use_case, uow):
        uow.snapshots.get_closing.return_value = DailyClosing(
            outlet_id=1, business_date=TODAY, cutover_movement_id=40
        )
        with pytest.raises(AlreadyClosedError):
            await use_case.execute(1)

    async def test_orphan_snapshots_count_as_closed(self, use_case, uow):
        uow.snapshots.count_snapshots.return_value = 2
        with pytest.raises(AlreadyClosedError):
            await use_case.execute(1)

    async def test_out_of_order(self, use_case, uow):
        uow.snapshots.latest_closing.return_value = DailyClosing(
            outlet_id=1, business_date=TODAY, cutover_movement_id=40
        )
        with pytest.raises(ClosingOrderError):
            await use_case.execute(1, CloseDayRequest(business_date=date(2024, 3, 9)))

    async def test_unknown_outlet(self, use_case, uow):
        uow.outlets.get_outlet.return_value = None
        with pytest.raises(OutletNotFoundError):
            await use_case.execute(99)

    async def test_to_response(self, use_case):
        response = use_case.to_response(await use_case.execute(1))
        assert response.item_count == 2
        assert [s.item_id for s in response.snapshots] == [1, 2]
        assert all(s.locked for s in response.snapshots)

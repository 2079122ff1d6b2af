"""Tests for RecordMovementUseCase."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock

import pytest

from cafe_ledger.application.dto.requests import RecordMovementRequest
from cafe_ledger.application.use_cases.record_movement import RecordMovementUseCase
from cafe_ledger.core.entities import (
    Direction,
    Item,
    ItemStatus,
    Movement,
    MovementReason,
    PeriodTotals,
)
from cafe_ledger.core.exceptions import (
    IdempotencyConflictError,
    InsufficientStockError,
    ItemNotFoundError,
    ItemRetiredError,
)
from cafe_ledger.core.services.clock import FixedClock

NOW = datetime(2024, 3, 10, 9, 0, tzinfo=UTC)


def _assign_id(movement: Movement) -> Movement:
    movement.id = 101
    return movement


@pytest.fixture
def uow():
    mock = AsyncMock()
    mock.__aenter__.return_value = mock
    mock.__aexit__.return_value = None
    mock.items.get_item.return_value = Item(
        id=1, outlet_id=7, name="Milk", unit="Liter", opening_stock=6.0, checkpoint_movement_id=10
    )
    mock.movements.period_totals.return_value = PeriodTotals()
    mock.movements.get_by_idempotency_key.return_value = None
    mock.movements.add_movement.side_effect = _assign_id
    return mock


def _use_case(uow, allow_negative_stock=True):
    return RecordMovementUseCase(
        uow_factory=lambda: uow,
        clock=FixedClock(NOW),
        allow_negative_stock=allow_negative_stock,
    )


def _request(**overrides) -> RecordMovementRequest:
    data = {
        "item_id": 1,
        "direction": Direction.OUTGOING,
        "amount": 5.0,
        "reason": MovementReason.ORDER_CONSUMPTION,
    }
    data.update(overrides)
    return RecordMovementRequest(**data)


class TestRecordMovementUseCase:
    async def test_outgoing_reduces_stock(self, uow):
        result = await _use_case(uow).execute(_request())
        assert result.quantity_after == 1.0
        assert result.movement.id == 101
        assert not result.replayed

    async def test_movement_gets_outlet_and_server_time(self, uow):
        result = await _use_case(uow).execute(_request())
        saved = uow.movements.add_movement.call_args[0][0]
        assert saved.outlet_id == 7
        assert saved.created_at == NOW
        assert result.movement.signed_amount == -5.0

    async def test_sums_since_checkpoint(self, uow):
        await _use_case(uow).execute(_request())
        uow.movements.period_totals.assert_awaited_once_with(1, after_movement_id=10)

    async def test_negative_allowed_by_policy(self, uow):
        result = await _use_case(uow).execute(_request(amount=10.0))
        assert result.quantity_after == -4.0
        uow.movements.add_movement.assert_awaited_once()

    async def test_insufficient_stock_when_forbidden(self, uow):
        with pytest.raises(InsufficientStockError) as exc_info:
            await _use_case(uow, allow_negative_stock=False).execute(_request(amount=10.0))
        assert exc_info.value.details["available"] == 6.0
        uow.movements.add_movement.assert_not_awaited()

    async def test_incoming_never_checked(self, uow):
        uow.items.get_item.return_value = Item(id=1, outlet_id=7, name="Milk", opening_stock=-3.0)
        result = await _use_case(uow, allow_negative_stock=False).execute(
            _request(direction=Direction.INCOMING, amount=1.0, reason=MovementReason.PURCHASE)
        )
        assert result.quantity_after == -2.0

    async def test_item_not_found(self, uow):
        uow.items.get_item.return_value = None
        with pytest.raises(ItemNotFoundError):
            await _use_case(uow).execute(_request())

    async def test_retired_item_rejects_outgoing(self, uow):
        uow.items.get_item.return_value = Item(
            id=1, outlet_id=7, name="Milk", status=ItemStatus.RETIRED
        )
        with pytest.raises(ItemRetiredError):
            await _use_case(uow).execute(_request())

    async def test_retired_item_accepts_incoming_correction(self, uow):
        uow.items.get_item.return_value = Item(
            id=1, outlet_id=7, name="Milk", status=ItemStatus.RETIRED
        )
        result = await _use_case(uow).execute(
            _request(direction=Direction.INCOMING, reason=MovementReason.CORRECTION)
        )
        assert result.quantity_after == 5.0

    async def test_replay_returns_original(self, uow):
        original = Movement(
            id=55,
            item_id=1,
            outlet_id=7,
            direction=Direction.OUTGOING,
            amount=5.0,
            reason=MovementReason.ORDER_CONSUMPTION,
            idempotency_key="pos-1",
        )
        uow.movements.get_by_idempotency_key.return_value = original
        uow.movements.period_totals.return_value = PeriodTotals(used=5.0, movement_count=1)

        result = await _use_case(uow).execute(_request(idempotency_key="pos-1"))
        assert result.replayed
        assert result.movement.id == 55
        assert result.quantity_after == 1.0
        uow.movements.add_movement.assert_not_awaited()

    async def test_key_reuse_with_other_payload(self, uow):
        uow.movements.get_by_idempotency_key.return_value = Movement(
            id=55,
            item_id=1,
            outlet_id=7,
            direction=Direction.OUTGOING,
            amount=2.0,
            reason=MovementReason.ORDER_CONSUMPTION,
            idempotency_key="pos-1",
        )
        with pytest.raises(IdempotencyConflictError):
            await _use_case(uow).execute(_request(idempotency_key="pos-1"))
        uow.movements.add_movement.assert_not_awaited()

    async def test_policy_falls_back_to_settings(self, uow, monkeypatch):
        from cafe_ledger.config import reset_settings

        monkeypatch.setenv("LEDGER_ALLOW_NEGATIVE_STOCK", "false")
        reset_settings()
        try:
            use_case = RecordMovementUseCase(uow_factory=lambda: uow, clock=FixedClock(NOW))
            assert use_case.allow_negative_stock is False
        finally:
            monkeypatch.delenv("LEDGER_ALLOW_NEGATIVE_STOCK")
            reset_settings()

"""Tests for ledger entities and derived stock values."""

import pytest
from pydantic import ValidationError as PydanticValidationError

from cafe_ledger.core.entities import (
    Direction,
    Item,
    ItemStatus,
    Movement,
    MovementReason,
    PeriodTotals,
    StockLevel,
    normalize_quantity,
)


def _movement(**overrides) -> Movement:
    data = {
        "item_id": 1,
        "outlet_id": 1,
        "direction": Direction.OUTGOING,
        "amount": 5.0,
        "reason": MovementReason.ORDER_CONSUMPTION,
    }
    data.update(overrides)
    return Movement(**data)


class TestMovement:
    def test_signed_amount_follows_direction(self):
        assert _movement(direction=Direction.INCOMING).signed_amount == 5.0
        assert _movement(direction=Direction.OUTGOING).signed_amount == -5.0

    def test_amount_must_be_positive(self):
        with pytest.raises(PydanticValidationError):
            _movement(amount=0)
        with pytest.raises(PydanticValidationError):
            _movement(amount=-2)

    def test_wastage_is_outgoing_only(self):
        assert _movement(reason=MovementReason.WASTAGE).is_wastage
        assert not _movement(
            direction=Direction.INCOMING, reason=MovementReason.WASTAGE
        ).is_wastage
        assert not _movement().is_wastage

    def test_same_payload_ignores_key_and_time(self):
        first = _movement(idempotency_key="a", note="morning")
        second = _movement(idempotency_key="a", note="morning")
        assert first.same_payload(second)

    def test_same_payload_detects_changes(self):
        base = _movement(note=None)
        assert base.same_payload(_movement(note=""))
        assert not base.same_payload(_movement(amount=6.0))
        assert not base.same_payload(_movement(reason=MovementReason.WASTAGE))
        assert not base.same_payload(_movement(item_id=2))


class TestStockLevel:
    def test_quantity_is_opening_plus_net(self):
        item = Item(id=1, outlet_id=1, name="Milk", opening_stock=10.0)
        totals = PeriodTotals(received=20.0, used=5.0, wastage=2.0, movement_count=3)
        level = StockLevel(item=item, totals=totals)
        assert totals.net == 13.0
        assert level.quantity == 23.0

    def test_is_low_at_threshold(self):
        item = Item(id=1, outlet_id=1, name="Cups", low_stock_threshold=5.0, opening_stock=5.0)
        assert StockLevel(item=item, totals=PeriodTotals()).is_low

    def test_over_max_requires_a_max(self):
        item = Item(id=1, outlet_id=1, name="Cups", opening_stock=500.0)
        assert not StockLevel(item=item, totals=PeriodTotals()).is_over_max
        capped = item.model_copy(update={"max_stock_level": 100.0})
        assert StockLevel(item=capped, totals=PeriodTotals()).is_over_max

    def test_negative_stock_is_reported_as_is(self):
        item = Item(id=1, outlet_id=1, name="Eggs")
        level = StockLevel(item=item, totals=PeriodTotals(used=3.0, movement_count=1))
        assert level.quantity == -3.0


class TestNormalizeQuantity:
    def test_absorbs_float_noise(self):
        assert normalize_quantity(0.1 + 0.2) == 0.3

    def test_no_negative_zero(self):
        assert str(normalize_quantity(-0.0)) == "0.0"


def test_new_item_is_active():
    item = Item(outlet_id=1, name="Rice")
    assert item.status == ItemStatus.ACTIVE
    assert item.is_active
    assert item.opening_stock == 0.0
    assert item.checkpoint_movement_id == 0

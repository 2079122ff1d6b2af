"""Tests for category/unit suggestions."""

import pytest

from cafe_ledger.core.services.unit_inference import suggest_category_unit


@pytest.mark.parametrize(
    ("name", "category", "unit"),
    [
        ("Full Cream Milk", "Liquids", "Liter"),
        ("Basmati Rice", "Dry Goods", "kg"),
        ("EGGS (tray)", "Countables", "Pieces"),
        ("Paper cups 8oz", "Consumables", "Pieces"),
    ],
)
def test_keyword_match(name, category, unit):
    suggestion = suggest_category_unit(name)
    assert suggestion is not None
    assert suggestion.category == category
    assert suggestion.unit == unit


def test_first_keyword_wins():
    # "rice" is listed before "milk"
    suggestion = suggest_category_unit("rice milk")
    assert suggestion is not None
    assert suggestion.keyword == "rice"


def test_countables_have_no_decimals():
    assert suggest_category_unit("bread roll").decimals is False
    assert suggest_category_unit("olive oil").decimals is True


def test_no_match():
    assert suggest_category_unit("Espresso beans") is None
    assert suggest_category_unit("   ") is None

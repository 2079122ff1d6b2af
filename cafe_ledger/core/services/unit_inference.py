"""
Advisory category/unit suggestions from an item name.

Only used to pre-fill registration forms at the API boundary; nothing in the
ledger depends on it.
"""

import re
from dataclasses import dataclass


@dataclass(frozen=True)
class UnitSuggestion:
    """Suggested classification for an item name."""

    keyword: str
    category: str
    unit: str
    decimals: bool  # whether fractional quantities make sense


# Checked in order; first keyword contained in the name wins
KEYWORD_TABLE: tuple[UnitSuggestion, ...] = (
    UnitSuggestion("rice", "Dry Goods", "kg", True),
    UnitSuggestion("flour", "Dry Goods", "kg", True),
    UnitSuggestion("sugar", "Dry Goods", "kg", True),
    UnitSuggestion("milk", "Liquids", "Liter", True),
    UnitSuggestion("oil", "Liquids", "Liter", True),
    UnitSuggestion("syrup", "Liquids", "Liter", True),
    UnitSuggestion("egg", "Countables", "Pieces", False),
    UnitSuggestion("bread", "Countables", "Pieces", False),
    UnitSuggestion("cup", "Consumables", "Pieces", False),
    UnitSuggestion("straw", "Consumables", "Pieces", False),
)


def suggest_category_unit(name: str) -> UnitSuggestion | None:
    """Return the first keyword match for ``name``, or None."""
    normalized = re.sub(r"\s+", " ", name.strip().lower())
    if not normalized:
        return None
    for suggestion in KEYWORD_TABLE:
        if suggestion.keyword in normalized:
            return suggestion
    return None

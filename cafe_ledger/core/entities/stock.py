"""Derived stock values (never persisted)."""

from dataclasses import dataclass

from cafe_ledger.core.entities.item import Item

# Ledger sums are rounded to this many decimals to absorb float noise
QUANTITY_PRECISION = 6


def normalize_quantity(value: float) -> float:
    """Round a derived quantity to ledger precision."""
    result = round(float(value), QUANTITY_PRECISION)
    # Avoid "-0.0" in responses
    return result + 0.0


@dataclass(frozen=True)
class PeriodTotals:
    """Movement sums over one accounting period of an item."""

    received: float = 0.0
    used: float = 0.0  # outgoing, excluding wastage
    wastage: float = 0.0
    movement_count: int = 0

    @property
    def net(self) -> float:
        return normalize_quantity(self.received - self.used - self.wastage)


@dataclass(frozen=True)
class StockLevel:
    """Live stock of an item: opening checkpoint plus open-period activity."""

    item: Item
    totals: PeriodTotals

    @property
    def opening_stock(self) -> float:
        return self.item.opening_stock

    @property
    def quantity(self) -> float:
        return normalize_quantity(self.item.opening_stock + self.totals.net)

    @property
    def is_low(self) -> bool:
        return self.quantity <= self.item.low_stock_threshold

    @property
    def is_over_max(self) -> bool:
        max_level = self.item.max_stock_level
        return max_level is not None and self.quantity > max_level

"""Core domain entities."""

from cafe_ledger.core.entities.item import Item, ItemStatus
from cafe_ledger.core.entities.movement import Direction, Movement, MovementReason
from cafe_ledger.core.entities.outlet import Outlet
from cafe_ledger.core.entities.snapshot import DailyClosing, Snapshot
from cafe_ledger.core.entities.stock import (
    QUANTITY_PRECISION,
    PeriodTotals,
    StockLevel,
    normalize_quantity,
)

__all__ = [
    # Registry
    "Outlet",
    "Item",
    "ItemStatus",
    # Ledger
    "Movement",
    "Direction",
    "MovementReason",
    # Closing
    "Snapshot",
    "DailyClosing",
    # Projection
    "PeriodTotals",
    "StockLevel",
    "QUANTITY_PRECISION",
    "normalize_quantity",
]

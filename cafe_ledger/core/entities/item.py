"""Stock item entity (registry record, never carries live quantity)."""

from datetime import UTC, date, datetime
from enum import Enum

from pydantic import BaseModel, Field


class ItemStatus(str, Enum):
    """Item lifecycle status."""

    ACTIVE = "active"
    RETIRED = "retired"


class Item(BaseModel):
    """Identity and configuration of one stock-keeping unit."""

    id: int | None = None
    outlet_id: int
    name: str
    sku: str | None = None
    category: str = "General"
    unit: str = "Pieces"
    low_stock_threshold: float = 0.0
    max_stock_level: float | None = None
    status: ItemStatus = ItemStatus.ACTIVE

    # Checkpoint written only by the daily closing
    opening_stock: float = 0.0
    checkpoint_movement_id: int = 0
    last_closed_date: date | None = None

    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def is_active(self) -> bool:
        return self.status == ItemStatus.ACTIVE

"""Daily closing entities."""

from datetime import UTC, date, datetime

from pydantic import BaseModel, Field


class Snapshot(BaseModel):
    """Locked end-of-day record for one item."""

    id: int | None = None
    outlet_id: int
    item_id: int
    business_date: date
    opening_stock: float
    received: float = 0.0
    used_today: float = 0.0  # outgoing, excluding wastage
    wastage: float = 0.0
    closing_stock: float
    unit: str
    locked: bool = True
    cutover_movement_id: int = 0
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class DailyClosing(BaseModel):
    """Header marking a (outlet, business day) as closed."""

    id: int | None = None
    outlet_id: int
    business_date: date
    cutover_movement_id: int
    item_count: int = 0
    closed_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

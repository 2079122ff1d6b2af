"""Stock movement entities."""

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, Field


class Direction(str, Enum):
    """Direction of a stock movement. Carries the sign; amounts never do."""

    INCOMING = "Incoming"
    OUTGOING = "Outgoing"


class MovementReason(str, Enum):
    """Why stock moved."""

    PURCHASE = "Purchase"
    WASTAGE = "Wastage"
    ORDER_CONSUMPTION = "Order Consumption"
    OPENING_STOCK = "Opening Stock"
    MANUAL_ADJUSTMENT = "Manual Adjustment"
    CORRECTION = "Correction"


class Movement(BaseModel):
    """An immutable ledger entry recording one quantity change."""

    id: int | None = None
    item_id: int
    outlet_id: int
    direction: Direction
    amount: float = Field(..., gt=0)  # always positive
    reason: MovementReason
    note: str | None = None
    reference: str | None = None  # e.g. order number
    idempotency_key: str | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def signed_amount(self) -> float:
        """Amount with the direction's sign applied."""
        if self.direction == Direction.OUTGOING:
            return -self.amount
        return self.amount

    @property
    def is_wastage(self) -> bool:
        return (
            self.direction == Direction.OUTGOING
            and self.reason == MovementReason.WASTAGE
        )

    def same_payload(self, other: "Movement") -> bool:
        """True when both entries describe the same stock event."""
        return (
            self.item_id == other.item_id
            and self.direction == other.direction
            and self.amount == other.amount
            and self.reason == other.reason
            and (self.note or None) == (other.note or None)
            and (self.reference or None) == (other.reference or None)
        )

"""Request DTOs for API endpoints.

Pydantic v2 models for API request validation.
These are the ONLY contracts between API and use cases.
"""

from datetime import date, datetime

from pydantic import BaseModel, Field

from cafe_ledger.core.entities.movement import Direction, MovementReason

# --- Outlets ---


class RegisterOutletRequest(BaseModel):
    """Request to register an outlet."""

    name: str = Field(..., min_length=1, max_length=200, description="Outlet name")
    timezone: str | None = Field(
        default=None,
        description="IANA timezone of the outlet (defaults to LEDGER_DEFAULT_TIMEZONE)",
    )


# --- Item registry ---


class RegisterItemRequest(BaseModel):
    """Request to register a stock item."""

    outlet_id: int = Field(..., description="Owning outlet ID")
    name: str = Field(..., max_length=200, description="Item name")
    sku: str | None = Field(default=None, max_length=64, description="Optional SKU")
    category: str | None = Field(
        default=None,
        description="Category (suggested from the name when omitted)",
    )
    unit: str | None = Field(
        default=None,
        description="Unit of measure (suggested from the name when omitted)",
    )
    low_stock_threshold: float = Field(
        default=0.0,
        description="Quantity at or below which the item counts as low",
    )
    max_stock_level: float | None = Field(default=None, description="Optional upper bound")


class UpdateItemRequest(BaseModel):
    """Request to update identity fields of an item. Only set fields change."""

    name: str | None = Field(default=None, max_length=200)
    sku: str | None = Field(default=None, max_length=64)
    category: str | None = Field(default=None)
    unit: str | None = Field(default=None)
    low_stock_threshold: float | None = Field(default=None)
    max_stock_level: float | None = Field(default=None)


# --- Movement ledger ---


class RecordMovementRequest(BaseModel):
    """Request to append one movement to the ledger."""

    item_id: int = Field(..., description="Item ID")
    direction: Direction = Field(..., description="Incoming or Outgoing")
    amount: float = Field(..., gt=0, description="Positive quantity")
    reason: MovementReason = Field(..., description="Why stock moved")
    note: str | None = Field(default=None, max_length=500, description="Free-text note")
    reference: str | None = Field(
        default=None,
        max_length=100,
        description="External reference such as an order number",
    )
    idempotency_key: str | None = Field(
        default=None,
        max_length=200,
        description="Replays with the same key return the original movement",
    )


class OrderConsumptionLine(BaseModel):
    """One ingredient line consumed by an order."""

    item_id: int = Field(..., description="Item ID")
    quantity: float = Field(..., gt=0, description="Quantity consumed")


class RecordOrderConsumptionRequest(BaseModel):
    """Request to record stock consumed by a fulfilled order."""

    order_ref: str = Field(..., min_length=1, max_length=100, description="Order reference")
    lines: list[OrderConsumptionLine] = Field(..., min_length=1)
    note: str | None = Field(default=None, max_length=500)


class MovementHistoryRequest(BaseModel):
    """Query for a page of ledger history."""

    outlet_id: int
    item_id: int | None = None
    from_time: datetime | None = Field(default=None, description="Inclusive lower bound")
    to_time: datetime | None = Field(default=None, description="Exclusive upper bound")
    limit: int | None = Field(default=None, ge=1)
    offset: int = Field(default=0, ge=0)


# --- Daily closing ---


class CloseDayRequest(BaseModel):
    """Request to close a business day."""

    business_date: date | None = Field(
        default=None,
        description="Day to close (defaults to the outlet's local today)",
    )

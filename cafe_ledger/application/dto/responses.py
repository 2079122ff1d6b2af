"""Response DTOs for API endpoints.

Pydantic v2 models for API response serialization.
These are the ONLY contracts between use cases and API layer.
"""

from datetime import date, datetime

from pydantic import BaseModel, Field

from cafe_ledger.core.entities.item import Item
from cafe_ledger.core.entities.movement import Movement
from cafe_ledger.core.entities.outlet import Outlet
from cafe_ledger.core.entities.snapshot import Snapshot
from cafe_ledger.core.entities.stock import StockLevel


class OutletResponse(BaseModel):
    """Outlet response DTO."""

    id: int
    name: str
    timezone: str
    created_at: datetime

    @classmethod
    def from_entity(cls, outlet: Outlet) -> "OutletResponse":
        return cls(
            id=outlet.id,  # type: ignore[arg-type]
            name=outlet.name,
            timezone=outlet.timezone,
            created_at=outlet.created_at,
        )


class ItemResponse(BaseModel):
    """Item registry response DTO (no live quantity)."""

    id: int
    outlet_id: int
    name: str
    sku: str | None = None
    category: str
    unit: str
    low_stock_threshold: float
    max_stock_level: float | None = None
    status: str
    opening_stock: float
    last_closed_date: date | None = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, item: Item) -> "ItemResponse":
        return cls(
            id=item.id,  # type: ignore[arg-type]
            outlet_id=item.outlet_id,
            name=item.name,
            sku=item.sku,
            category=item.category,
            unit=item.unit,
            low_stock_threshold=item.low_stock_threshold,
            max_stock_level=item.max_stock_level,
            status=item.status.value,
            opening_stock=item.opening_stock,
            last_closed_date=item.last_closed_date,
            created_at=item.created_at,
            updated_at=item.updated_at,
        )


class ItemListResponse(BaseModel):
    """List of items."""

    items: list[ItemResponse]
    total: int


class UnitSuggestionResponse(BaseModel):
    """Advisory category/unit for an item name."""

    name: str
    matched: bool
    keyword: str | None = None
    category: str | None = None
    unit: str | None = None
    decimals: bool | None = None


class MovementResponse(BaseModel):
    """Ledger movement response DTO."""

    id: int
    item_id: int
    outlet_id: int
    direction: str
    amount: float
    signed_amount: float
    reason: str
    note: str | None = None
    reference: str | None = None
    idempotency_key: str | None = None
    created_at: datetime

    @classmethod
    def from_entity(cls, movement: Movement) -> "MovementResponse":
        return cls(
            id=movement.id,  # type: ignore[arg-type]
            item_id=movement.item_id,
            outlet_id=movement.outlet_id,
            direction=movement.direction.value,
            amount=movement.amount,
            signed_amount=movement.signed_amount,
            reason=movement.reason.value,
            note=movement.note,
            reference=movement.reference,
            idempotency_key=movement.idempotency_key,
            created_at=movement.created_at,
        )


class RecordMovementResponse(BaseModel):
    """Response for a recorded movement."""

    movement: MovementResponse
    quantity_after: float = Field(..., description="Current stock after the movement")
    replayed: bool = Field(
        default=False,
        description="True when an earlier movement with the same key was returned",
    )


class OrderConsumptionResponse(BaseModel):
    """Response for an order consumption batch."""

    order_ref: str
    movements: list[MovementResponse]
    replayed: bool = False


class MovementHistoryResponse(BaseModel):
    """One page of ledger history."""

    outlet_id: int
    item_id: int | None = None
    movements: list[MovementResponse]
    limit: int
    offset: int
    count: int


class StockLevelResponse(BaseModel):
    """Live stock of one item."""

    item_id: int
    item_name: str
    category: str
    unit: str
    status: str
    opening_stock: float
    received: float
    used: float
    wastage: float
    quantity: float
    low_stock_threshold: float
    max_stock_level: float | None = None
    is_low: bool
    is_over_max: bool

    @classmethod
    def from_level(cls, level: StockLevel) -> "StockLevelResponse":
        item = level.item
        return cls(
            item_id=item.id,  # type: ignore[arg-type]
            item_name=item.name,
            category=item.category,
            unit=item.unit,
            status=item.status.value,
            opening_stock=level.opening_stock,
            received=level.totals.received,
            used=level.totals.used,
            wastage=level.totals.wastage,
            quantity=level.quantity,
            low_stock_threshold=item.low_stock_threshold,
            max_stock_level=item.max_stock_level,
            is_low=level.is_low,
            is_over_max=level.is_over_max,
        )


class StockLevelsResponse(BaseModel):
    """Live stock of a set of items."""

    outlet_id: int
    items: list[StockLevelResponse]
    total: int


class SnapshotResponse(BaseModel):
    """Locked end-of-day record for one item."""

    item_id: int
    business_date: date
    opening_stock: float
    received: float
    used_today: float
    wastage: float
    closing_stock: float
    unit: str
    locked: bool
    cutover_movement_id: int
    created_at: datetime

    @classmethod
    def from_entity(cls, snapshot: Snapshot) -> "SnapshotResponse":
        return cls(
            item_id=snapshot.item_id,
            business_date=snapshot.business_date,
            opening_stock=snapshot.opening_stock,
            received=snapshot.received,
            used_today=snapshot.used_today,
            wastage=snapshot.wastage,
            closing_stock=snapshot.closing_stock,
            unit=snapshot.unit,
            locked=snapshot.locked,
            cutover_movement_id=snapshot.cutover_movement_id,
            created_at=snapshot.created_at,
        )


class ClosingResponse(BaseModel):
    """A closed business day with its snapshots."""

    outlet_id: int
    business_date: date
    cutover_movement_id: int
    item_count: int
    closed_at: datetime
    snapshots: list[SnapshotResponse]


class TodayMetricsResponse(BaseModel):
    """Outlet totals since local midnight."""

    outlet_id: int
    business_date: date
    consumption: float
    wastage: float
    received: float
    movement_count: int


class DailyItemRowResponse(BaseModel):
    """Opening/used/wastage/closing of one item."""

    item_id: int
    item_name: str
    unit: str
    opening: float
    received: float
    used: float
    wastage: float
    closing: float


class DailyTotalsResponse(BaseModel):
    """Column totals of a daily report."""

    received: float
    used: float
    wastage: float


class DailyMetricsResponse(BaseModel):
    """Per-item figures for a business day."""

    outlet_id: int
    business_date: date
    source: str = Field(..., description="snapshot, live or none")
    closed_at: datetime | None = None
    rows: list[DailyItemRowResponse]
    totals: DailyTotalsResponse


class ForecastRowResponse(BaseModel):
    """Days-of-cover indicator for one item."""

    item_id: int
    item_name: str
    unit: str
    quantity: float
    average_daily_usage: float | None = None
    days_of_cover: float | None = None
    sample_days: int
    below_threshold: bool
    over_max: bool


class ForecastResponse(BaseModel):
    """Stock forecast for an outlet."""

    outlet_id: int
    window_days: int
    items: list[ForecastRowResponse]


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str = "1.0.0"
    uptime_seconds: float
    database: str
    allow_negative_stock: bool
    default_timezone: str


class ErrorResponse(BaseModel):
    """Standardized error response DTO.

    Every error response includes:
    - error_code: machine-readable code (e.g. ITEM_NOT_FOUND)
    - message: human-readable description
    - hint: suggested recovery action
    - path: request path that triggered the error
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error description")
    hint: str | None = Field(default=None, description="Suggested recovery action")
    detail: str | None = Field(default=None, description="Additional details")
    path: str | None = Field(default=None, description="Request path")
    timestamp: datetime = Field(default_factory=datetime.now)

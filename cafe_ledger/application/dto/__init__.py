"""Data Transfer Objects for API layer.

Request DTOs: Validate and parse incoming API requests.
Response DTOs: Structure and serialize API responses.

These are the ONLY contracts between API handlers and use cases.
"""

from cafe_ledger.application.dto.requests import (
    CloseDayRequest,
    MovementHistoryRequest,
    OrderConsumptionLine,
    RecordMovementRequest,
    RecordOrderConsumptionRequest,
    RegisterItemRequest,
    RegisterOutletRequest,
    UpdateItemRequest,
)
from cafe_ledger.application.dto.responses import (
    ClosingResponse,
    DailyItemRowResponse,
    DailyMetricsResponse,
    DailyTotalsResponse,
    ErrorResponse,
    ForecastResponse,
    ForecastRowResponse,
    HealthResponse,
    ItemListResponse,
    ItemResponse,
    MovementHistoryResponse,
    MovementResponse,
    OrderConsumptionResponse,
    OutletResponse,
    RecordMovementResponse,
    SnapshotResponse,
    StockLevelResponse,
    StockLevelsResponse,
    TodayMetricsResponse,
    UnitSuggestionResponse,
)

__all__ = [
    # Requests
    "RegisterOutletRequest",
    "RegisterItemRequest",
    "UpdateItemRequest",
    "RecordMovementRequest",
    "OrderConsumptionLine",
    "RecordOrderConsumptionRequest",
    "MovementHistoryRequest",
    "CloseDayRequest",
    # Responses
    "OutletResponse",
    "ItemResponse",
    "ItemListResponse",
    "UnitSuggestionResponse",
    "MovementResponse",
    "RecordMovementResponse",
    "OrderConsumptionResponse",
    "MovementHistoryResponse",
    "StockLevelResponse",
    "StockLevelsResponse",
    "SnapshotResponse",
    "ClosingResponse",
    "TodayMetricsResponse",
    "DailyItemRowResponse",
    "DailyTotalsResponse",
    "DailyMetricsResponse",
    "ForecastRowResponse",
    "ForecastResponse",
    "HealthResponse",
    "ErrorResponse",
]

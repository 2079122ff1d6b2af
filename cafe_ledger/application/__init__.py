"""
Application layer - Use cases, DTOs, and service factories.

This layer orchestrates business logic by:
1. Defining request/response DTOs for API contracts
2. Implementing use cases that coordinate stores and core services
3. Providing factory functions for dependency injection

Use cases are the only entry point for API handlers that write.
"""

from cafe_ledger.application.dto.requests import (
    CloseDayRequest,
    RecordMovementRequest,
    RecordOrderConsumptionRequest,
    RegisterItemRequest,
    RegisterOutletRequest,
    UpdateItemRequest,
)
from cafe_ledger.application.dto.responses import (
    ClosingResponse,
    ErrorResponse,
    HealthResponse,
    ItemResponse,
    MovementResponse,
    OutletResponse,
    StockLevelResponse,
)
from cafe_ledger.application.services import (
    get_clock,
    get_metrics_aggregator,
    get_stock_projection_service,
    new_unit_of_work,
    reset_services,
    set_clock,
)
from cafe_ledger.application.use_cases import (
    CloseDayUseCase,
    RecordMovementUseCase,
    RecordOrderConsumptionUseCase,
    RegisterItemUseCase,
    RegisterOutletUseCase,
)

__all__ = [
    # Request DTOs
    "RegisterOutletRequest",
    "RegisterItemRequest",
    "UpdateItemRequest",
    "RecordMovementRequest",
    "RecordOrderConsumptionRequest",
    "CloseDayRequest",
    # Response DTOs
    "OutletResponse",
    "ItemResponse",
    "MovementResponse",
    "StockLevelResponse",
    "ClosingResponse",
    "HealthResponse",
    "ErrorResponse",
    # Use Cases
    "RegisterOutletUseCase",
    "RegisterItemUseCase",
    "RecordMovementUseCase",
    "RecordOrderConsumptionUseCase",
    "CloseDayUseCase",
    # Service factories
    "get_clock",
    "set_clock",
    "get_stock_projection_service",
    "get_metrics_aggregator",
    "new_unit_of_work",
    "reset_services",
]

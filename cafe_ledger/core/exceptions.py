"""
Domain exceptions for the stock ledger.

Provides specific exception types for different error scenarios.
"""

from datetime import date
from typing import Any


class LedgerError(Exception):
    """Base exception for all ledger errors."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


# Validation Exceptions
class ValidationError(LedgerError):
    """Input validation failed."""

    def __init__(self, field: str, message: str, value: Any = None):
        super().__init__(
            f"Validation error for '{field}': {message}",
            code="VALIDATION_ERROR",
            details={
                "field": field,
                "message": message,
                "value": str(value)[:100] if value is not None else None,
            },
        )


# Not Found Exceptions
class NotFoundError(LedgerError):
    """Referenced entity does not exist."""

    def __init__(self, entity: str, entity_id: Any, code: str = "NOT_FOUND"):
        super().__init__(
            f"{entity} not found: {entity_id}",
            code=code,
            details={"entity": entity, "id": entity_id},
        )


class OutletNotFoundError(NotFoundError):
    """Outlet not found."""

    def __init__(self, outlet_id: int):
        super().__init__("Outlet", outlet_id, code="OUTLET_NOT_FOUND")


class ItemNotFoundError(NotFoundError):
    """Stock item not found."""

    def __init__(self, item_id: int):
        super().__init__("Item", item_id, code="ITEM_NOT_FOUND")


# Conflict Exceptions
class ConflictError(LedgerError):
    """Operation conflicts with the current ledger state."""

    def __init__(
        self,
        message: str,
        code: str = "CONFLICT",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code=code, details=details)


class UnitChangeConflictError(ConflictError):
    """Unit of measure cannot change while stock history is measured in it."""

    def __init__(self, item_id: int, current_unit: str, requested_unit: str):
        super().__init__(
            f"Cannot change unit of item {item_id} from '{current_unit}' "
            f"to '{requested_unit}' while it has stock history",
            code="UNIT_CHANGE_CONFLICT",
            details={
                "item_id": item_id,
                "current_unit": current_unit,
                "requested_unit": requested_unit,
            },
        )


class ItemRetiredError(ConflictError):
    """Outgoing movement attempted against a retired item."""

    def __init__(self, item_id: int):
        super().__init__(
            f"Item {item_id} is retired; only incoming corrections are accepted",
            code="ITEM_RETIRED",
            details={"item_id": item_id},
        )


class IdempotencyConflictError(ConflictError):
    """Idempotency key reused with a different payload."""

    def __init__(self, idempotency_key: str, existing_id: int):
        super().__init__(
            f"Idempotency key '{idempotency_key}' was already used for a different movement",
            code="IDEMPOTENCY_CONFLICT",
            details={"idempotency_key": idempotency_key, "existing_id": existing_id},
        )


class ClosingOrderError(ConflictError):
    """Closing requested for a day earlier than the outlet's last closed day."""

    def __init__(self, outlet_id: int, business_date: date, last_closed: date):
        super().__init__(
            f"Outlet {outlet_id} was already closed through {last_closed}; "
            f"cannot close {business_date}",
            code="CLOSING_OUT_OF_ORDER",
            details={
                "outlet_id": outlet_id,
                "business_date": business_date.isoformat(),
                "last_closed_date": last_closed.isoformat(),
            },
        )


class AlreadyClosedError(ConflictError):
    """Day already closed for the outlet."""

    def __init__(self, outlet_id: int, business_date: date):
        super().__init__(
            f"Outlet {outlet_id} is already closed for {business_date}",
            code="ALREADY_CLOSED",
            details={
                "outlet_id": outlet_id,
                "business_date": business_date.isoformat(),
            },
        )


class InsufficientStockError(LedgerError):
    """Outgoing movement would take stock below zero."""

    def __init__(self, item_id: int, requested: float, available: float):
        super().__init__(
            f"Insufficient stock for item {item_id}: "
            f"requested {requested}, available {available}",
            code="INSUFFICIENT_STOCK",
            details={
                "item_id": item_id,
                "requested": requested,
                "available": available,
            },
        )


# Storage Exceptions
class StorageError(LedgerError):
    """Base exception for storage operations."""

    def __init__(
        self,
        message: str,
        code: str = "DATABASE_ERROR",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code=code, details=details)


class DatabaseError(StorageError):
    """Database operation failed."""

    def __init__(self, operation: str, error: str):
        super().__init__(
            f"Database error during {operation}: {error}",
            code="DATABASE_ERROR",
            details={"operation": operation, "error": error},
        )


class ConfigurationError(LedgerError):
    """Settings or database schema unusable at startup."""

    def __init__(self, message: str, code: str = "CONFIGURATION_ERROR"):
        super().__init__(message, code=code)

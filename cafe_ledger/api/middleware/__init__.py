"""API middleware."""

from cafe_ledger.api.middleware.error_handler import ErrorHandlerMiddleware
from cafe_ledger.api.middleware.logging import LoggingMiddleware

__all__ = ["LoggingMiddleware", "ErrorHandlerMiddleware"]

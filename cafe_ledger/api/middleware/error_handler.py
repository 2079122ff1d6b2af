"""
Error responses for the ledger API.

Every failure leaves the API as an ``ErrorResponse``: a machine-readable
``error_code`` (the ``LedgerError.code`` for domain errors), the message, a
recovery hint and the request path. Domain errors are expected outcomes and
are logged as warnings; anything else is a 500 logged with its traceback.
"""

import json
from collections.abc import Awaitable, Callable

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from cafe_ledger.application.dto.responses import ErrorResponse
from cafe_ledger.config import get_logger
from cafe_ledger.core.exceptions import (
    ConflictError,
    InsufficientStockError,
    LedgerError,
    NotFoundError,
    ValidationError,
)

logger = get_logger(__name__)

# Resolved along the exception's MRO; unlisted LedgerErrors are server faults
LEDGER_STATUS: dict[type[LedgerError], int] = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ConflictError: status.HTTP_409_CONFLICT,
    InsufficientStockError: status.HTTP_409_CONFLICT,
}

HINTS: dict[str, str] = {
    "OUTLET_NOT_FOUND": "Check the outlet ID; GET /api/outlets lists outlets.",
    "ITEM_NOT_FOUND": "Check the item ID; GET /api/items?outlet_id=... lists items.",
    "CLOSING_NOT_FOUND": (
        "The day is not closed. GET /api/outlets/{id}/metrics/daily shows live figures."
    ),
    "ITEM_RETIRED": "Retired items accept only Incoming movements.",
    "UNIT_CHANGE_CONFLICT": (
        "Close the day with zero stock first, or register a new item in the new unit."
    ),
    "IDEMPOTENCY_CONFLICT": "Use a new idempotency key for a different movement.",
    "INSUFFICIENT_STOCK": "Record the incoming stock first, or reduce the outgoing amount.",
    "ALREADY_CLOSED": "Closed days are final. Record a correction in the open day instead.",
    "CLOSING_OUT_OF_ORDER": "A later day is already closed; days close in calendar order.",
    "VALIDATION_ERROR": "Check the request fields against the API schema.",
    "DATABASE_ERROR": "The database was busy or failed. Retry, then check server logs.",
}

STATUS_CODES: dict[int, str] = {
    400: "BAD_REQUEST",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "CONFLICT",
    422: "VALIDATION_ERROR",
}

STATUS_HINTS: dict[int, str] = {
    400: "Check the request parameters and body.",
    404: "The requested resource was not found.",
    409: "The request conflicts with the current ledger state.",
    500: "An internal error occurred. Check server logs.",
}


def status_for(exc: Exception) -> int:
    for cls in type(exc).__mro__:
        if cls in LEDGER_STATUS:
            return LEDGER_STATUS[cls]
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def _error_json(
    request: Request,
    status_code: int,
    error_code: str,
    message: str,
    detail: str | None = None,
) -> JSONResponse:
    body = ErrorResponse(
        error_code=error_code,
        message=message,
        hint=HINTS.get(error_code) or STATUS_HINTS.get(status_code),
        detail=detail,
        path=request.url.path,
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


def build_error_response(request: Request, exc: Exception) -> JSONResponse:
    """Map any exception to a JSON error response and log it."""
    status_code = status_for(exc)
    request_id = getattr(request.state, "request_id", None)

    if isinstance(exc, LedgerError):
        error_code, message = exc.code, exc.message
        detail = json.dumps(exc.details, default=str) if exc.details else None
    else:
        error_code, message, detail = "INTERNAL_ERROR", "Unexpected server error", None

    if status_code >= 500:
        logger.error(
            "request_error",
            request_id=request_id,
            path=request.url.path,
            error_code=error_code,
            error=str(exc),
            exc_info=exc,
        )
    else:
        logger.warning(
            "request_rejected",
            request_id=request_id,
            path=request.url.path,
            error_code=error_code,
            error=message,
        )

    return _error_json(request, status_code, error_code, message, detail)


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Last-resort conversion of exceptions that escaped the route handlers."""

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        try:
            return await call_next(request)
        except Exception as e:
            return build_error_response(request, e)


def setup_exception_handlers(app: FastAPI) -> None:
    """Register handlers for domain, request-validation and HTTP errors."""

    @app.exception_handler(LedgerError)
    async def ledger_error_handler(request: Request, exc: LedgerError) -> JSONResponse:
        return build_error_response(request, exc)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        problems = [
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in exc.errors()
        ]
        logger.warning("request_invalid", path=request.url.path, problems=problems)
        return _error_json(
            request,
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            "VALIDATION_ERROR",
            "Request validation failed",
            detail="; ".join(problems),
        )

    @app.exception_handler(HTTPException)
    async def http_error_handler(request: Request, exc: HTTPException) -> JSONResponse:
        return _error_json(
            request,
            exc.status_code,
            STATUS_CODES.get(exc.status_code, "HTTP_ERROR"),
            str(exc.detail) if exc.detail else "An error occurred",
        )

"""Per-request logging and request ids."""

import re
import time
import uuid
from collections.abc import Awaitable, Callable

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from cafe_ledger.config import get_logger

logger = get_logger(__name__)

# Polled by load balancers; logged at debug only
QUIET_PATHS = frozenset({"/health", "/api/health"})

# Client-supplied ids are echoed into logs and headers, so keep them tame
CLIENT_REQUEST_ID = re.compile(r"[A-Za-z0-9._-]{1,64}")


def request_id_for(request: Request) -> str:
    supplied = request.headers.get("X-Request-ID", "")
    if CLIENT_REQUEST_ID.fullmatch(supplied):
        return supplied
    return uuid.uuid4().hex[:8]


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Log one start and one completion event per request.

    The request id is bound into structlog's context variables, so ledger
    events logged while serving the request (``movement_recorded``,
    ``day_closed``...) carry it too. It is returned as ``X-Request-ID`` along
    with ``X-Response-Time``.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        request_id = request_id_for(request)
        request.state.request_id = request_id
        path = request.url.path
        log = logger.debug if path in QUIET_PATHS else logger.info

        started = time.perf_counter()
        with structlog.contextvars.bound_contextvars(request_id=request_id):
            log("request_started", method=request.method, path=path)
            try:
                response = await call_next(request)
            except Exception:
                logger.exception(
                    "request_crashed",
                    method=request.method,
                    path=path,
                    duration_ms=round((time.perf_counter() - started) * 1000, 2),
                )
                raise

            duration_ms = (time.perf_counter() - started) * 1000
            log(
                "request_completed",
                method=request.method,
                path=path,
                status=response.status_code,
                duration_ms=round(duration_ms, 2),
            )

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time"] = f"{duration_ms:.2f}ms"
        return response

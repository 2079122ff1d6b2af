"""API route modules."""

from cafe_ledger.api.routes.closings import router as closings_router
from cafe_ledger.api.routes.exports import router as exports_router
from cafe_ledger.api.routes.health import router as health_router
from cafe_ledger.api.routes.items import router as items_router
from cafe_ledger.api.routes.metrics import router as metrics_router
from cafe_ledger.api.routes.movements import router as movements_router
from cafe_ledger.api.routes.outlets import router as outlets_router

__all__ = [
    "health_router",
    "outlets_router",
    "items_router",
    "movements_router",
    "closings_router",
    "metrics_router",
    "exports_router",
]

"""Cafe Stock Ledger HTTP API."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cafe_ledger import __version__
from cafe_ledger.api.middleware import ErrorHandlerMiddleware, LoggingMiddleware
from cafe_ledger.api.middleware.error_handler import setup_exception_handlers
from cafe_ledger.api.routes import (
    closings_router,
    exports_router,
    health_router,
    items_router,
    metrics_router,
    movements_router,
    outlets_router,
)
from cafe_ledger.config import Settings, configure_logging, get_logger, get_settings
from cafe_ledger.core.exceptions import ConfigurationError

logger = get_logger(__name__)

ROUTERS = (
    health_router,
    outlets_router,
    items_router,
    movements_router,
    closings_router,
    metrics_router,
    exports_router,
)


async def prepare_database(settings: Settings) -> None:
    """Migrate the ledger database and refuse to start on a broken schema."""
    from cafe_ledger.infrastructure.storage.sqlite.migrations import (
        run_migrations,
        verify_schema_integrity,
    )

    results = await run_migrations(settings.storage.db_path)
    failed = [r for r in results if not r.success]
    if failed:
        raise ConfigurationError(
            f"Migration v{failed[0].version}_{failed[0].name} failed: {failed[0].error}",
            code="MIGRATION_FAILED",
        )

    checks = await verify_schema_integrity(settings.storage.db_path)
    broken = [c["check"] for c in checks if c["status"] != "PASS"]
    if broken:
        # Ledger-level findings are reported, schema-level ones are fatal
        logger.warning("ledger_integrity_findings", checks=broken)
        if {"required_tables", "immutability_triggers", "integrity"} & set(broken):
            raise ConfigurationError(
                f"Ledger schema is damaged: {', '.join(broken)}", code="SCHEMA_DAMAGED"
            )

    logger.info("database_ready", migrations_applied=len(results))


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    from cafe_ledger.infrastructure.storage.sqlite import (
        close_connection_pool,
        get_connection_pool,
    )

    settings = get_settings()
    logger.info(
        "application_starting",
        version=__version__,
        db_path=str(settings.storage.db_path),
        allow_negative_stock=settings.ledger.allow_negative_stock,
        default_timezone=settings.ledger.default_timezone,
    )

    await prepare_database(settings)
    await get_connection_pool()

    yield

    logger.info("application_stopping")
    try:
        await close_connection_pool()
    except Exception as e:
        logger.warning("connection_pool_close_failed", error=str(e))


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the FastAPI app with middleware, error handlers and routers."""
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title="Cafe Stock Ledger API",
        description="Inventory movement ledger and daily closing engine for cafe outlets",
        version=settings.app_version,
        docs_url="/docs" if settings.api.debug else None,
        redoc_url="/redoc" if settings.api.debug else None,
        lifespan=lifespan,
    )

    # Starlette runs the last-added middleware first
    app.add_middleware(ErrorHandlerMiddleware)
    app.add_middleware(LoggingMiddleware)
    if settings.api.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.api.cors_origins,
            allow_methods=["GET", "POST", "PATCH"],
            allow_headers=["*"],
            expose_headers=["X-Request-ID", "Content-Disposition"],
        )

    setup_exception_handlers(app)
    for router in ROUTERS:
        app.include_router(router)

    @app.get("/health", include_in_schema=False)
    async def root_health() -> dict[str, str]:
        """Process liveness for container probes; no database round-trip."""
        return {"status": "healthy", "version": settings.app_version}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    api = get_settings().api
    uvicorn.run("cafe_ledger.api.main:app", host=api.host, port=api.port, reload=api.debug)

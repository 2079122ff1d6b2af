"""
Dependency injection container for FastAPI.

Provides service instances to route handlers.
"""

from cafe_ledger.application.services import (
    get_metrics_aggregator,
    get_stock_projection_service,
)
from cafe_ledger.application.use_cases import (
    CloseDayUseCase,
    ExportLedgerCsvUseCase,
    GetMovementHistoryUseCase,
    RecordMovementUseCase,
    RecordOrderConsumptionUseCase,
    RegisterItemUseCase,
    RegisterOutletUseCase,
    RetireItemUseCase,
    UpdateItemUseCase,
)
from cafe_ledger.config import Settings, get_settings
from cafe_ledger.core.services import MetricsAggregator, StockProjectionService
from cafe_ledger.infrastructure.storage.sqlite import (
    SQLiteItemStore,
    SQLiteOutletStore,
    SQLiteSnapshotStore,
    get_item_store,
    get_outlet_store,
    get_snapshot_store,
)


def get_app_settings() -> Settings:
    """Get application settings."""
    return get_settings()


# Service dependencies
async def get_projection() -> StockProjectionService:
    """Get live stock projection service."""
    return await get_stock_projection_service()


async def get_metrics() -> MetricsAggregator:
    """Get metrics aggregator."""
    return await get_metrics_aggregator()


# Store dependencies
async def get_out_store() -> SQLiteOutletStore:
    """Get outlet store."""
    return await get_outlet_store()


async def get_itm_store() -> SQLiteItemStore:
    """Get item store."""
    return await get_item_store()


async def get_snap_store() -> SQLiteSnapshotStore:
    """Get snapshot store."""
    return await get_snapshot_store()


# Use case dependencies
def get_register_outlet_use_case() -> RegisterOutletUseCase:
    """Get register outlet use case."""
    return RegisterOutletUseCase()


def get_register_item_use_case() -> RegisterItemUseCase:
    """Get register item use case."""
    return RegisterItemUseCase()


def get_update_item_use_case() -> UpdateItemUseCase:
    """Get update item use case."""
    return UpdateItemUseCase()


def get_retire_item_use_case() -> RetireItemUseCase:
    """Get retire item use case."""
    return RetireItemUseCase()


def get_record_movement_use_case() -> RecordMovementUseCase:
    """Get record movement use case."""
    return RecordMovementUseCase()


def get_order_consumption_use_case() -> RecordOrderConsumptionUseCase:
    """Get order consumption use case."""
    return RecordOrderConsumptionUseCase()


def get_movement_history_use_case() -> GetMovementHistoryUseCase:
    """Get movement history use case."""
    return GetMovementHistoryUseCase()


def get_close_day_use_case() -> CloseDayUseCase:
    """Get close day use case."""
    return CloseDayUseCase()


def get_export_use_case() -> ExportLedgerCsvUseCase:
    """Get CSV export use case."""
    return ExportLedgerCsvUseCase()

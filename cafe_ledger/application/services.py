"""
Service factory functions for dependency injection.

This module provides factory functions that wire infrastructure
implementations to core services. Use cases should import from here.
"""

from cafe_ledger.core.interfaces import IUnitOfWork
from cafe_ledger.core.services import (
    Clock,
    MetricsAggregator,
    StockProjectionService,
    SystemClock,
)

# Singleton service instances
_clock: Clock | None = None
_stock_projection_service: StockProjectionService | None = None
_metrics_aggregator: MetricsAggregator | None = None


def get_clock() -> Clock:
    """Get the process clock."""
    global _clock
    if _clock is None:
        _clock = SystemClock()
    return _clock


def set_clock(clock: Clock | None) -> None:
    """Replace the process clock (None restores the wall clock)."""
    global _clock, _metrics_aggregator
    _clock = clock
    _metrics_aggregator = None


async def get_stock_projection_service() -> StockProjectionService:
    """
    Get or create StockProjectionService instance.

    Returns:
        Projection bound to the singleton SQLite stores
    """
    global _stock_projection_service
    if _stock_projection_service is not None:
        return _stock_projection_service

    # Lazy import infrastructure to avoid circular imports
    from cafe_ledger.infrastructure.storage.sqlite import (
        get_item_store,
        get_movement_store,
        get_outlet_store,
    )

    _stock_projection_service = StockProjectionService(
        outlet_store=await get_outlet_store(),
        item_store=await get_item_store(),
        movement_store=await get_movement_store(),
    )
    return _stock_projection_service


async def get_metrics_aggregator() -> MetricsAggregator:
    """Get or create MetricsAggregator instance."""
    global _metrics_aggregator
    if _metrics_aggregator is not None:
        return _metrics_aggregator

    from cafe_ledger.infrastructure.storage.sqlite import (
        get_item_store,
        get_movement_store,
        get_outlet_store,
        get_snapshot_store,
    )

    _metrics_aggregator = MetricsAggregator(
        outlet_store=await get_outlet_store(),
        item_store=await get_item_store(),
        movement_store=await get_movement_store(),
        snapshot_store=await get_snapshot_store(),
        clock=get_clock(),
    )
    return _metrics_aggregator


def reset_services() -> None:
    """Reset all singleton services (for testing)."""
    global _clock, _stock_projection_service, _metrics_aggregator
    _clock = None
    _stock_projection_service = None
    _metrics_aggregator = None


def new_unit_of_work() -> IUnitOfWork:
    """Open a fresh write-locked unit of work on the SQLite pool."""
    from cafe_ledger.infrastructure.storage.sqlite import get_unit_of_work

    return get_unit_of_work()

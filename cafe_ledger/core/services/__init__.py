"""
Core business logic services.

Layer-pure services that depend only on:
- cafe_ledger/core/entities/*
- cafe_ledger/core/interfaces/*
- cafe_ledger/core/exceptions.py

NO infrastructure imports. All dependencies injected via constructor.
"""

from cafe_ledger.core.services.clock import (
    Clock,
    FixedClock,
    SystemClock,
    business_day_bounds,
    local_date,
)
from cafe_ledger.core.services.metrics_aggregator import (
    DailyItemRow,
    DailyMetrics,
    ForecastRow,
    MetricsAggregator,
    TodayMetrics,
)
from cafe_ledger.core.services.stock_projection import StockProjectionService
from cafe_ledger.core.services.unit_inference import UnitSuggestion, suggest_category_unit

__all__ = [
    # Time
    "Clock",
    "SystemClock",
    "FixedClock",
    "business_day_bounds",
    "local_date",
    # Projection
    "StockProjectionService",
    # Metrics
    "MetricsAggregator",
    "TodayMetrics",
    "DailyItemRow",
    "DailyMetrics",
    "ForecastRow",
    # Advisory helpers
    "UnitSuggestion",
    "suggest_category_unit",
]

"""Tests for MetricsAggregator with mocked stores."""

from datetime import UTC, date, datetime
from unittest.mock import AsyncMock

import pytest

from cafe_ledger.core.entities import (
    DailyClosing,
    Item,
    Outlet,
    PeriodTotals,
    Snapshot,
    StockLevel,
)
from cafe_ledger.core.exceptions import OutletNotFoundError, ValidationError
from cafe_ledger.core.services.clock import FixedClock
from cafe_ledger.core.services.metrics_aggregator import (
    SOURCE_LIVE,
    SOURCE_NONE,
    SOURCE_SNAPSHOT,
    MetricsAggregator,
)

NOW = datetime(2024, 3, 10, 16, 0, tzinfo=UTC)
MILK = Item(id=1, outlet_id=1, name="Milk", unit="Liter", opening_stock=10.0)


def _snapshot(day: date, used: float, wastage: float = 0.0, closing: float = 10.0) -> Snapshot:
    return Snapshot(
        outlet_id=1,
        item_id=1,
        business_date=day,
        opening_stock=closing + used + wastage,
        used_today=used,
        wastage=wastage,
        closing_stock=closing,
        unit="Liter",
    )


@pytest.fixture
def stores():
    outlet_store = AsyncMock()
    outlet_store.get_outlet.return_value = Outlet(id=1, name="Main Street", timezone="UTC")
    item_store = AsyncMock()
    item_store.list_items.return_value = [MILK]
    item_store.list_stock_levels.return_value = [
        StockLevel(
            item=MILK,
            totals=PeriodTotals(received=20.0, used=5.0, wastage=2.0, movement_count=3),
        )
    ]
    movement_store = AsyncMock()
    snapshot_store = AsyncMock()
    snapshot_store.get_closing.return_value = None
    snapshot_store.list_snapshots.return_value = []
    return outlet_store, item_store, movement_store, snapshot_store


@pytest.fixture
def aggregator(stores):
    outlet_store, item_store, movement_store, snapshot_store = stores
    return MetricsAggregator(
        outlet_store=outlet_store,
        item_store=item_store,
        movement_store=movement_store,
        snapshot_store=snapshot_store,
        clock=FixedClock(NOW),
    )


class TestTodayMetrics:
    async def test_window_is_local_day(self, aggregator, stores):
        outlet_store, _, movement_store, _ = stores
        outlet_store.get_outlet.return_value = Outlet(id=1, name="Tokyo", timezone="Asia/Tokyo")
        movement_store.window_totals.return_value = PeriodTotals(
            received=1.0, used=4.0, wastage=0.5, movement_count=3
        )

        metrics = await aggregator.today_metrics(1)

        assert metrics.business_date == date(2024, 3, 11)
        assert metrics.consumption == 4.0
        assert metrics.wastage == 0.5
        movement_store.window_totals.assert_awaited_once_with(
            1,
            datetime(2024, 3, 10, 15, 0, tzinfo=UTC),
            datetime(2024, 3, 11, 15, 0, tzinfo=UTC),
        )

    async def test_unknown_outlet(self, aggregator, stores):
        stores[0].get_outlet.return_value = None
        with pytest.raises(OutletNotFoundError):
            await aggregator.today_metrics(5)


class TestDailyMetrics:
    async def test_live_for_today(self, aggregator):
        daily = await aggregator.daily_metrics(1)
        assert daily.source == SOURCE_LIVE
        row = daily.rows[0]
        assert (row.opening, row.used, row.wastage, row.closing) == (10.0, 5.0, 2.0, 23.0)

    async def test_snapshot_for_closed_day(self, aggregator, stores):
        snapshot_store = stores[3]
        day = date(2024, 3, 9)
        snapshot_store.get_closing.return_value = DailyClosing(
            outlet_id=1, business_date=day, cutover_movement_id=9
        )
        snapshot_store.list_snapshots.return_value = [_snapshot(day, used=3.0, wastage=1.0)]

        daily = await aggregator.daily_metrics(1, day)

        assert daily.source == SOURCE_SNAPSHOT
        assert daily.rows[0].item_name == "Milk"
        assert daily.total_used == 3.0
        assert daily.total_wastage == 1.0

    async def test_none_for_unclosed_past_day(self, aggregator):
        daily = await aggregator.daily_metrics(1, date(2024, 3, 1))
        assert daily.source == SOURCE_NONE
        assert daily.rows == []


class TestStockForecast:
    async def test_days_of_cover(self, aggregator, stores):
        stores[3].list_snapshots.return_value = [
            _snapshot(date(2024, 3, 8), used=4.0, wastage=1.0),
            _snapshot(date(2024, 3, 9), used=6.0, wastage=1.0),
        ]
        [row] = await aggregator.stock_forecast(1, window_days=7)
        assert row.sample_days == 2
        assert row.average_daily_usage == 6.0
        assert row.quantity == 23.0
        assert row.days_of_cover == round(23.0 / 6.0, 2)

    async def test_no_history(self, aggregator):
        [row] = await aggregator.stock_forecast(1, window_days=7)
        assert row.average_daily_usage is None
        assert row.days_of_cover is None

    async def test_window_must_be_positive(self, aggregator):
        with pytest.raises(ValidationError):
            await aggregator.stock_forecast(1, window_days=0)

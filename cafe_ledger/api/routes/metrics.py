"""Dashboard metrics endpoints."""

from datetime import date

from fastapi import APIRouter, Depends, Query

from cafe_ledger.api.dependencies import get_app_settings, get_metrics
from cafe_ledger.application.dto.responses import (
    DailyItemRowResponse,
    DailyMetricsResponse,
    DailyTotalsResponse,
    ErrorResponse,
    ForecastResponse,
    ForecastRowResponse,
    TodayMetricsResponse,
)
from cafe_ledger.config import Settings
from cafe_ledger.core.services import DailyItemRow, MetricsAggregator

router = APIRouter(prefix="/api/outlets/{outlet_id}/metrics", tags=["metrics"])


def _row_response(row: DailyItemRow) -> DailyItemRowResponse:
    return DailyItemRowResponse(
        item_id=row.item_id,
        item_name=row.item_name,
        unit=row.unit,
        opening=row.opening,
        received=row.received,
        used=row.used,
        wastage=row.wastage,
        closing=row.closing,
    )


@router.get(
    "/today",
    response_model=TodayMetricsResponse,
    responses={404: {"model": ErrorResponse}},
)
async def today_metrics(
    outlet_id: int,
    metrics: MetricsAggregator = Depends(get_metrics),
) -> TodayMetricsResponse:
    """Consumption, wastage and receipts since local midnight."""
    result = await metrics.today_metrics(outlet_id)
    return TodayMetricsResponse(
        outlet_id=result.outlet_id,
        business_date=result.business_date,
        consumption=result.consumption,
        wastage=result.wastage,
        received=result.received,
        movement_count=result.movement_count,
    )


@router.get(
    "/items",
    response_model=list[DailyItemRowResponse],
    responses={404: {"model": ErrorResponse}},
)
async def per_item_daily(
    outlet_id: int,
    metrics: MetricsAggregator = Depends(get_metrics),
) -> list[DailyItemRowResponse]:
    """Provisional per-item figures for the open period."""
    return [_row_response(row) for row in await metrics.per_item_daily(outlet_id)]


@router.get(
    "/daily",
    response_model=DailyMetricsResponse,
    responses={404: {"model": ErrorResponse}},
)
async def daily_metrics(
    outlet_id: int,
    business_date: date | None = Query(default=None, alias="date"),
    metrics: MetricsAggregator = Depends(get_metrics),
) -> DailyMetricsResponse:
    """Snapshot rows for a closed day, live rows for today, otherwise none."""
    result = await metrics.daily_metrics(outlet_id, business_date)
    return DailyMetricsResponse(
        outlet_id=result.outlet_id,
        business_date=result.business_date,
        source=result.source,
        closed_at=result.closed_at,
        rows=[_row_response(row) for row in result.rows],
        totals=DailyTotalsResponse(
            received=result.total_received,
            used=result.total_used,
            wastage=result.total_wastage,
        ),
    )


@router.get(
    "/forecast",
    response_model=ForecastResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def stock_forecast(
    outlet_id: int,
    window_days: int | None = Query(default=None, ge=1, le=365),
    metrics: MetricsAggregator = Depends(get_metrics),
    settings: Settings = Depends(get_app_settings),
) -> ForecastResponse:
    """Average daily usage over recent closed days and the resulting days of cover."""
    window = window_days or settings.ledger.forecast_window_days
    rows = await metrics.stock_forecast(outlet_id, window)
    return ForecastResponse(
        outlet_id=outlet_id,
        window_days=window,
        items=[
            ForecastRowResponse(
                item_id=row.item_id,
                item_name=row.item_name,
                unit=row.unit,
                quantity=row.quantity,
                average_daily_usage=row.average_daily_usage,
                days_of_cover=row.days_of_cover,
                sample_days=row.sample_days,
                below_threshold=row.below_threshold,
                over_max=row.over_max,
            )
            for row in rows
        ],
    )

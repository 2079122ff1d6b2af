"""Tests for the clock and business-day helpers."""

from datetime import UTC, date, datetime, timedelta

from cafe_ledger.core.services.clock import FixedClock, business_day_bounds, local_date


class TestFixedClock:
    def test_naive_moment_is_utc(self):
        clock = FixedClock(datetime(2024, 1, 1, 12, 0))
        assert clock.now() == datetime(2024, 1, 1, 12, 0, tzinfo=UTC)

    def test_advance(self):
        clock = FixedClock(datetime(2024, 1, 1, 23, 30, tzinfo=UTC))
        clock.advance(hours=1)
        assert clock.now().date() == date(2024, 1, 2)


class TestBusinessDay:
    def test_local_date_crosses_midnight(self):
        # 16:00 UTC is already 01:00 next day in Tokyo
        moment = datetime(2024, 3, 10, 16, 0, tzinfo=UTC)
        assert local_date(moment, "UTC") == date(2024, 3, 10)
        assert local_date(moment, "Asia/Tokyo") == date(2024, 3, 11)

    def test_bounds_in_utc(self):
        start, end = business_day_bounds(date(2024, 3, 11), "Asia/Tokyo")
        assert start == datetime(2024, 3, 10, 15, 0, tzinfo=UTC)
        assert end == datetime(2024, 3, 11, 15, 0, tzinfo=UTC)

    def test_dst_day_is_23_hours(self):
        # US spring-forward
        start, end = business_day_bounds(date(2024, 3, 10), "America/New_York")
        assert end - start == timedelta(hours=23)

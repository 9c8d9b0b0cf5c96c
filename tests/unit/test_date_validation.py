"""
Unit tests for the trip date range policy
"""
from datetime import date, timedelta

import pytest

from tebitrip.core.exceptions import (
    DateTooEarlyError,
    DateTooFarError,
    EndBeforeStartError,
    ErrorCode,
    TripTooLongError,
    TripValidationError,
)
from tebitrip.services.date_validation import add_years, validate_trip_dates


class TestDateTooEarly:

    @pytest.mark.parametrize("days_ago", [1, 2, 30, 365])
    def test_past_single_day_trip_rejected(self, today, days_ago):
        d = today - timedelta(days=days_ago)
        with pytest.raises(DateTooEarlyError) as exc_info:
            validate_trip_dates(d, d, today=today)
        assert exc_info.value.error_code == ErrorCode.DATE_TOO_EARLY

    def test_today_is_allowed(self, today):
        assert validate_trip_dates(today, today, today=today) == (today, today)

    def test_early_start_wins_over_other_failures(self, today):
        """A past start with an end before it still reports the start first."""
        start = today - timedelta(days=1)
        with pytest.raises(DateTooEarlyError):
            validate_trip_dates(start, start - timedelta(days=10), today=today)


class TestDateTooFar:

    def test_exactly_two_years_ahead_is_allowed(self, today):
        start = date(2028, 3, 1)
        assert validate_trip_dates(start, start, today=today) == (start, start)

    def test_one_day_past_horizon_rejected(self, today):
        start = date(2028, 3, 2)
        with pytest.raises(DateTooFarError):
            validate_trip_dates(start, start, today=today)

    def test_too_far_checked_before_end_order(self, today):
        start = date(2029, 1, 1)
        with pytest.raises(DateTooFarError):
            validate_trip_dates(start, start - timedelta(days=3), today=today)

    def test_leap_day_horizon(self):
        assert add_years(date(2028, 2, 29), 2) == date(2030, 2, 28)


class TestEndBeforeStart:

    def test_end_before_start_rejected(self, today):
        start = today + timedelta(days=10)
        with pytest.raises(EndBeforeStartError):
            validate_trip_dates(start, start - timedelta(days=1), today=today)


class TestTripLength:

    def test_six_calendar_days_allowed(self, today):
        start = today + timedelta(days=7)
        end = start + timedelta(days=5)
        assert validate_trip_dates(start, end, today=today) == (start, end)

    @pytest.mark.parametrize("span", [6, 7, 30])
    def test_longer_trips_rejected(self, today, span):
        start = today + timedelta(days=7)
        with pytest.raises(TripTooLongError) as exc_info:
            validate_trip_dates(start, start + timedelta(days=span), today=today)
        assert exc_info.value.details["max_days"] == 6

    def test_failures_share_validation_base(self, today):
        start = today + timedelta(days=1)
        with pytest.raises(TripValidationError):
            validate_trip_dates(start, start + timedelta(days=9), today=today)


def test_defaults_to_local_today():
    start = date.today()
    assert validate_trip_dates(start, start) == (start, start)

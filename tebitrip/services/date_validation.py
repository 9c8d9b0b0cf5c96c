"""
Date range policy for trip requests.
"""
from datetime import date
from typing import Optional, Tuple

from tebitrip.core.exceptions import (
    DateTooEarlyError,
    DateTooFarError,
    EndBeforeStartError,
    TripTooLongError,
)

MAX_TRIP_DAYS = 6
PLANNING_HORIZON_YEARS = 2


def add_years(d: date, years: int) -> date:
    """Shift a date by whole years; Feb 29 lands on Feb 28 in non-leap years."""
    try:
        return d.replace(year=d.year + years)
    except ValueError:
        return d.replace(year=d.year + years, day=28)


def validate_trip_dates(
    start_date: date,
    end_date: date,
    today: Optional[date] = None,
) -> Tuple[date, date]:
    """
    Validate a proposed trip window.

    Rules are checked in order and the first failure wins.

    Args:
        start_date: First day of the trip
        end_date: Last day of the trip (inclusive)
        today: Reference day, defaults to the local calendar date

    Returns:
        The (start_date, end_date) pair, unchanged

    Raises:
        DateTooEarlyError: start_date is before today
        DateTooFarError: start_date is more than two years ahead
        EndBeforeStartError: end_date is before start_date
        TripTooLongError: the trip covers more than MAX_TRIP_DAYS days
    """
    today = today or date.today()

    if start_date < today:
        raise DateTooEarlyError(start_date, today)

    latest_start = add_years(today, PLANNING_HORIZON_YEARS)
    if start_date > latest_start:
        raise DateTooFarError(start_date, latest_start)

    if end_date < start_date:
        raise EndBeforeStartError(start_date, end_date)

    span = (end_date - start_date).days
    if span > MAX_TRIP_DAYS - 1:
        raise TripTooLongError(span + 1, MAX_TRIP_DAYS)

    return start_date, end_date

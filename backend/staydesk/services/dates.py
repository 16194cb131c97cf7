"""Half-open date range helpers.

Every range in the availability services is ``[start, end)``: the start date
is occupied, the end date (checkout day) is not.
"""

from collections.abc import Iterator
from datetime import date, timedelta

from staydesk.config import settings
from staydesk.errors import ValidationError

ONE_DAY = timedelta(days=1)


def iter_dates(start: date, end: date) -> Iterator[date]:
    """Yield every date in ``[start, end)``."""
    day = start
    while day < end:
        yield day
        day += ONE_DAY


def validate_range(start: date, end: date, max_days: int | None = None) -> None:
    """Reject empty, inverted and over-long ranges.

    Raises:
        ValidationError: ``end`` is not after ``start`` or the range spans
            more than ``max_days`` dates (``settings.max_calendar_days`` by default).
    """
    if end <= start:
        raise ValidationError("End date must be after start date")
    limit = settings.max_calendar_days if max_days is None else max_days
    if (end - start).days > limit:
        raise ValidationError(f"Date range cannot exceed {limit} days")


def slot_range(slot_date: date) -> tuple[date, date]:
    """The one-date range an activity slot occupies."""
    return slot_date, slot_date + ONE_DAY

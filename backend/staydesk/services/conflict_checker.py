"""Conflict checker — admit or reject a proposed claim against a calendar index.

Pure functions: no I/O, no error suppression. The same decision is used for
the advisory pre-check shown to users and for the authoritative re-check the
reservation writer runs inside its transaction.
"""

from dataclasses import dataclass, field
from datetime import date

from staydesk.errors import ConflictError, ValidationError
from staydesk.services.calendar_index import CalendarIndex, DateOccupancy
from staydesk.services.dates import iter_dates, validate_range

BLOCKED = "blocked"
AT_CAPACITY = "at_capacity"


@dataclass(frozen=True)
class DateDecision:
    date: date
    admitted: bool
    remaining_capacity: int
    reason: str | None = None
    block_reason: str | None = None


@dataclass(frozen=True)
class AvailabilityDecision:
    """Outcome of a claim over a whole range. Admitted only if every date is."""

    admitted: bool
    dates: list[DateDecision] = field(default_factory=list)

    @property
    def first_conflict(self) -> DateDecision | None:
        return next((d for d in self.dates if not d.admitted), None)

    @property
    def reason(self) -> str | None:
        conflict = self.first_conflict
        return conflict.reason if conflict else None


def decide_date(day: date, occupancy: DateOccupancy, party_size: int, capacity: int) -> DateDecision:
    """Decide one date. A block wins even when nothing else is booked."""
    if occupancy.blocked:
        return DateDecision(
            date=day,
            admitted=False,
            remaining_capacity=0,
            reason=BLOCKED,
            block_reason=occupancy.block_reason,
        )

    remaining = max(capacity - occupancy.booked_units, 0)
    if occupancy.booked_units + party_size > capacity:
        return DateDecision(date=day, admitted=False, remaining_capacity=remaining, reason=AT_CAPACITY)
    return DateDecision(date=day, admitted=True, remaining_capacity=remaining)


def check_availability(
    index: CalendarIndex,
    start: date,
    end: date,
    party_size: int,
    capacity: int,
) -> AvailabilityDecision:
    """Evaluate a claim of ``party_size`` units on every date of ``[start, end)``.

    Raises:
        ValidationError: Empty/inverted range or non-positive party size. These
            are input errors, never reported as conflicts.
    """
    validate_range(start, end)
    if party_size <= 0:
        raise ValidationError("Party size must be a positive number")

    decisions = [
        decide_date(day, index.get(day, DateOccupancy()), party_size, capacity) for day in iter_dates(start, end)
    ]
    return AvailabilityDecision(admitted=all(d.admitted for d in decisions), dates=decisions)


def conflict_error(decision: AvailabilityDecision, requested: int) -> ConflictError:
    """Build the user-facing error for a rejected decision."""
    conflict = decision.first_conflict
    if conflict is None:
        raise ValueError("conflict_error() called for an admitted decision")

    if conflict.reason == BLOCKED:
        message = f"Dates unavailable: {conflict.date.isoformat()} is blocked"
        if conflict.block_reason:
            message += f" ({conflict.block_reason})"
    else:
        message = (
            f"Dates unavailable: {conflict.date.isoformat()} is at capacity "
            f"({conflict.remaining_capacity} left, {requested} requested)"
        )
    return ConflictError(
        message,
        conflict_date=conflict.date,
        reason=conflict.reason,
        remaining_capacity=conflict.remaining_capacity,
        requested=requested,
    )

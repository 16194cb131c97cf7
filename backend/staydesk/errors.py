"""Domain errors raised by the availability and reservation services.

Services raise these; the API layer maps them to HTTP responses in
``staydesk.api.errors``.
"""

from datetime import date


class BookingError(Exception):
    """Base exception for availability and reservation errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def to_detail(self) -> dict:
        return {"message": self.message}


class ValidationError(BookingError):
    """Malformed input: inverted or empty range, bad party size, unknown slot."""


class NotFoundError(BookingError):
    """Resource or reservation does not exist."""


class UnavailableResourceError(NotFoundError):
    """Resource exists but is not active (maintenance, inactive)."""


class InvalidTransitionError(BookingError):
    """Reservation status change not allowed from its current status."""

    def __init__(self, current: str, target: str) -> None:
        self.current = current
        self.target = target
        super().__init__(f"Cannot change reservation status from '{current}' to '{target}'")

    def to_detail(self) -> dict:
        return {"message": self.message, "current": self.current, "target": self.target}


class ConflictError(BookingError):
    """Requested dates or slot are unavailable.

    Carries the first offending date and what was left on it so the caller
    can render an actionable message. Never carries other reservations' ids.
    """

    def __init__(
        self,
        message: str,
        *,
        conflict_date: date | None = None,
        reason: str | None = None,
        remaining_capacity: int | None = None,
        requested: int | None = None,
    ) -> None:
        self.conflict_date = conflict_date
        self.reason = reason
        self.remaining_capacity = remaining_capacity
        self.requested = requested
        super().__init__(message)

    def to_detail(self) -> dict:
        return {
            "message": self.message,
            "date": self.conflict_date.isoformat() if self.conflict_date else None,
            "reason": self.reason,
            "remaining_capacity": self.remaining_capacity,
            "requested": self.requested,
        }


class TransientPersistenceError(BookingError):
    """The store is unreachable or timed out. Retry the whole read-then-write pipeline."""

"""Reservation lifecycle — status transitions for bookings and activity bookings.

    pending ──► confirmed ──► completed
       │            │
       └────────────┴──► cancelled

``completed`` and ``cancelled`` are terminal. A cancelled reservation never
returns, so its units stay released for good.
"""

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from staydesk.database import translate_persistence_errors
from staydesk.errors import InvalidTransitionError, NotFoundError, ValidationError
from staydesk.models.booking import ActivityBooking, Booking
from staydesk.services.resources import ResourceKind

logger = logging.getLogger(__name__)

RESERVATION_STATUSES = ("pending", "confirmed", "completed", "cancelled")

ALLOWED_TRANSITIONS: dict[str, frozenset[str]] = {
    "pending": frozenset({"confirmed", "cancelled"}),
    "confirmed": frozenset({"completed", "cancelled"}),
    "completed": frozenset(),
    "cancelled": frozenset(),
}

_MODELS = {
    ResourceKind.PROPERTY: Booking,
    ResourceKind.ACTIVITY: ActivityBooking,
}


async def get_reservation(
    db: AsyncSession, kind: ResourceKind, reservation_id: uuid.UUID
) -> Booking | ActivityBooking:
    model = _MODELS[kind]
    result = await db.execute(select(model).where(model.id == reservation_id))
    reservation = result.scalar_one_or_none()
    if reservation is None:
        raise NotFoundError("Booking not found")
    return reservation


async def transition_status(
    db: AsyncSession,
    reservation: Booking | ActivityBooking,
    target: str,
    *,
    reason: str | None = None,
) -> Booking | ActivityBooking:
    """Move a reservation to ``target``.

    Re-applying the current status is a no-op, so redelivered payment
    notifications are harmless.

    Raises:
        ValidationError: ``target`` is not a known status.
        InvalidTransitionError: The transition table forbids the move.
    """
    if target not in ALLOWED_TRANSITIONS:
        raise ValidationError(f"Unknown reservation status '{target}'")

    current = reservation.status
    if target == current:
        return reservation
    if target not in ALLOWED_TRANSITIONS[current]:
        raise InvalidTransitionError(current, target)

    reservation.status = target
    if target == "cancelled":
        reservation.cancellation_reason = reason

    async with translate_persistence_errors():
        await db.flush()
        await db.refresh(reservation)

    logger.info("Reservation %s: %s -> %s", reservation.id, current, target)
    return reservation


async def change_status(
    db: AsyncSession,
    kind: ResourceKind,
    reservation_id: uuid.UUID,
    target: str,
    *,
    reason: str | None = None,
) -> Booking | ActivityBooking:
    async with translate_persistence_errors():
        reservation = await get_reservation(db, kind, reservation_id)
    return await transition_status(db, reservation, target, reason=reason)


async def confirm_payment(
    db: AsyncSession, kind: ResourceKind, reservation_id: uuid.UUID
) -> Booking | ActivityBooking:
    """Called once the payment collaborator has verified the payment."""
    return await change_status(db, kind, reservation_id, "confirmed")


async def cancel_reservation(
    db: AsyncSession,
    kind: ResourceKind,
    reservation_id: uuid.UUID,
    reason: str | None = None,
) -> Booking | ActivityBooking:
    return await change_status(db, kind, reservation_id, "cancelled", reason=reason)

"""Reservation writer — the authoritative admission of a new reservation.

The pre-check a user sees while choosing dates is advisory. Here the calendar
is rebuilt and re-checked inside the transaction that inserts the row, after
taking a row lock on the resource, so two requests racing for the last unit
are serialized and only one of them is admitted.

A detected conflict is raised as ``ConflictError``; the session owner rolls
the transaction back. This is also the only place where a store-level
uniqueness violation is turned into a ``ConflictError``.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from staydesk.database import translate_persistence_errors
from staydesk.errors import ConflictError, NotFoundError, ValidationError
from staydesk.models.add_on import BookingAddOn
from staydesk.models.booking import ActivityBooking, Booking
from staydesk.models.guest import Guest
from staydesk.services.add_on_service import AddOnSelection, add_ons_total, price_add_ons
from staydesk.services.calendar_index import build_index
from staydesk.services.conflict_checker import check_availability, conflict_error
from staydesk.services.dates import slot_range, validate_range
from staydesk.services.pricing_resolver import resolve_prices, total_for
from staydesk.services.resources import Resource, ResourceKind, load_resource

logger = logging.getLogger(__name__)

Reservation = Booking | ActivityBooking


@dataclass(frozen=True)
class ReservationRequest:
    """A claim on a resource.

    Properties use ``start`` (check-in) and ``end`` (check-out); activities use
    ``start`` as the slot date together with ``slot_time``. Add-ons can only
    be attached to stays.
    """

    kind: ResourceKind
    resource_id: uuid.UUID
    guest_id: uuid.UUID
    start: date
    end: date | None = None
    slot_time: str | None = None
    party_size: int = 1
    special_requests: str | None = None
    idempotency_key: str | None = None
    add_ons: tuple[AddOnSelection, ...] = ()

    def date_range(self) -> tuple[date, date]:
        if self.kind is ResourceKind.ACTIVITY:
            return slot_range(self.start)
        if self.end is None:
            raise ValidationError("Check-out date is required")
        return self.start, self.end


@dataclass(frozen=True)
class CommitResult:
    reservation: Reservation
    replayed: bool = False


async def commit_reservation(db: AsyncSession, request: ReservationRequest) -> CommitResult:
    """Admit and persist a reservation in ``pending`` status.

    A request carrying an idempotency key that was already used returns the
    original reservation with ``replayed=True`` and writes nothing.

    Raises:
        ValidationError: Bad range, party size, slot or add-on selection, or an
            idempotency key reused for a different request.
        NotFoundError: Unknown or inactive resource, unknown guest.
        ConflictError: The range is blocked or at capacity.
        TransientPersistenceError: The store is unreachable.
    """
    async with translate_persistence_errors():
        if request.idempotency_key:
            existing = await _find_by_idempotency_key(db, request.kind, request.idempotency_key)
            if existing is not None:
                _ensure_same_request(existing, request)
                logger.info("Idempotent replay of reservation %s", existing.id)
                return CommitResult(reservation=existing, replayed=True)

        start, end = request.date_range()
        validate_range(start, end)

        resource = await load_resource(db, request.kind, request.resource_id, lock=True)
        resource.validate_party_size(request.party_size)
        resource.validate_slot(request.slot_time)
        if request.add_ons and not resource.is_property:
            raise ValidationError("Add-ons can only be attached to stays")
        await _ensure_guest_exists(db, request.guest_id)

        index = await build_index(db, resource, start, end, slot_time=request.slot_time)
        units = resource.units_for(request.party_size)
        decision = check_availability(index, start, end, units, resource.capacity)
        if not decision.admitted:
            conflict = decision.first_conflict
            logger.warning(
                "Rejected %s reservation for %s: %s on %s",
                resource.kind.value,
                resource.id,
                conflict.reason,
                conflict.date,
            )
            raise conflict_error(decision, units)

        unit_prices = await resolve_prices(db, resource, start, end)
        add_on_lines = await price_add_ons(db, resource.id, request.add_ons)
        reservation = _build_reservation(
            request, resource, total_for(resource, unit_prices, request.party_size), add_on_lines
        )
        db.add(reservation)

        try:
            await db.flush()
        except IntegrityError as e:
            await db.rollback()
            if request.idempotency_key:
                existing = await _find_by_idempotency_key(db, request.kind, request.idempotency_key)
                if existing is not None:
                    _ensure_same_request(existing, request)
                    logger.info("Concurrent duplicate submission resolved to reservation %s", existing.id)
                    return CommitResult(reservation=existing, replayed=True)
            logger.warning("Uniqueness violation while committing %s reservation", resource.kind.value)
            raise ConflictError("Reservation conflicts with a concurrent booking, please pick another date") from e

        await db.refresh(reservation)
        await db.commit()

    logger.info(
        "Committed %s reservation %s on %s (%s units, total %s)",
        resource.kind.value,
        reservation.id,
        resource.id,
        units,
        reservation.total_price,
    )
    return CommitResult(reservation=reservation)


def _build_reservation(
    request: ReservationRequest,
    resource: Resource,
    total: Decimal,
    add_on_lines: list[BookingAddOn],
) -> Reservation:
    if resource.is_property:
        extras = add_ons_total(add_on_lines)
        return Booking(
            property_id=resource.id,
            guest_id=request.guest_id,
            check_in=request.start,
            check_out=request.end,
            num_guests=request.party_size,
            status="pending",
            total_price=total + extras,
            add_ons_total=extras,
            add_ons=add_on_lines,
            special_requests=request.special_requests,
            idempotency_key=request.idempotency_key,
        )
    return ActivityBooking(
        activity_id=resource.id,
        guest_id=request.guest_id,
        slot_date=request.start,
        slot_time=request.slot_time,
        participants=request.party_size,
        status="pending",
        total_price=total,
        special_requests=request.special_requests,
        idempotency_key=request.idempotency_key,
    )


async def _ensure_guest_exists(db: AsyncSession, guest_id: uuid.UUID) -> None:
    result = await db.execute(select(Guest.id).where(Guest.id == guest_id))
    if result.scalar_one_or_none() is None:
        raise NotFoundError("Guest not found")


async def _find_by_idempotency_key(db: AsyncSession, kind: ResourceKind, key: str) -> Reservation | None:
    model = Booking if kind is ResourceKind.PROPERTY else ActivityBooking
    result = await db.execute(select(model).where(model.idempotency_key == key))
    return result.scalar_one_or_none()


def _ensure_same_request(existing: Reservation, request: ReservationRequest) -> None:
    """Reject a key that is being reused for a different reservation."""
    if isinstance(existing, Booking):
        same = (
            existing.property_id == request.resource_id
            and existing.guest_id == request.guest_id
            and existing.check_in == request.start
            and existing.check_out == request.end
            and existing.num_guests == request.party_size
            and sorted((line.add_on_id, line.quantity) for line in existing.add_ons)
            == sorted((s.add_on_id, s.quantity) for s in request.add_ons)
        )
    else:
        same = (
            existing.activity_id == request.resource_id
            and existing.guest_id == request.guest_id
            and existing.slot_date == request.start
            and existing.slot_time == request.slot_time
            and existing.participants == request.party_size
        )
    if not same:
        raise ValidationError("Idempotency key was already used for a different reservation")

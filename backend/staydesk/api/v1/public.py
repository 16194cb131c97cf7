"""Public booking API — guests reserve without an account.

The guest is looked up (or registered) by email, then the request goes
through the same reservation writer as staff bookings.
"""

import uuid

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Response, status
from pydantic import EmailStr
from sqlalchemy.ext.asyncio import AsyncSession

from staydesk.api.deps import get_db
from staydesk.api.errors import http_error
from staydesk.errors import BookingError, NotFoundError
from staydesk.models.booking import ActivityBooking, Booking
from staydesk.schemas.booking import (
    ActivityBookingResponse,
    BookingDetailResponse,
    BookingResponse,
    PublicActivityBookingCreate,
    PublicBookingCreate,
)
from staydesk.services.add_on_service import selections_from
from staydesk.services.guest_service import normalize_email, upsert_guest
from staydesk.services.reservation_lifecycle import get_reservation
from staydesk.services.reservation_writer import ReservationRequest, commit_reservation
from staydesk.services.resources import ResourceKind

router = APIRouter(prefix="/api/v1/public", tags=["public"])


@router.post(
    "/bookings",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Book a stay as a guest",
)
async def create_public_booking(
    body: PublicBookingCreate,
    response: Response,
    idempotency_key: str | None = Header(None, alias="Idempotency-Key"),
    db: AsyncSession = Depends(get_db),
) -> Booking:
    try:
        guest = await upsert_guest(db, name=body.guest.name, email=body.guest.email, phone=body.guest.phone)
        request = ReservationRequest(
            kind=ResourceKind.PROPERTY,
            resource_id=body.property_id,
            guest_id=guest.id,
            start=body.check_in,
            end=body.check_out,
            party_size=body.num_guests,
            special_requests=body.special_requests,
            idempotency_key=idempotency_key or body.idempotency_key,
            add_ons=selections_from(body.add_ons),
        )
        result = await commit_reservation(db, request)
    except BookingError as e:
        raise http_error(e) from e

    if result.replayed:
        response.status_code = status.HTTP_200_OK
    return result.reservation


@router.post(
    "/activity-bookings",
    response_model=ActivityBookingResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Book an activity slot as a guest",
)
async def create_public_activity_booking(
    body: PublicActivityBookingCreate,
    response: Response,
    idempotency_key: str | None = Header(None, alias="Idempotency-Key"),
    db: AsyncSession = Depends(get_db),
) -> ActivityBooking:
    try:
        guest = await upsert_guest(db, name=body.guest.name, email=body.guest.email, phone=body.guest.phone)
        request = ReservationRequest(
            kind=ResourceKind.ACTIVITY,
            resource_id=body.activity_id,
            guest_id=guest.id,
            start=body.slot_date,
            slot_time=body.slot_time,
            party_size=body.participants,
            special_requests=body.special_requests,
            idempotency_key=idempotency_key or body.idempotency_key,
        )
        result = await commit_reservation(db, request)
    except BookingError as e:
        raise http_error(e) from e

    if result.replayed:
        response.status_code = status.HTTP_200_OK
    return result.reservation


@router.get(
    "/bookings/{booking_id}",
    response_model=BookingDetailResponse,
    summary="Look up a stay by id and guest email",
)
async def get_public_booking(
    booking_id: uuid.UUID,
    email: EmailStr = Query(..., description="Email the booking was made with"),
    db: AsyncSession = Depends(get_db),
) -> Booking:
    """Return the booking only to the guest who made it.

    A wrong email is reported exactly like an unknown id.
    """
    not_found = HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Booking not found")
    try:
        booking = await get_reservation(db, ResourceKind.PROPERTY, booking_id)
    except NotFoundError:
        raise not_found from None
    except BookingError as e:
        raise http_error(e) from e

    if booking.guest is None or booking.guest.email != normalize_email(email):
        raise not_found
    return booking

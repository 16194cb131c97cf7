"""Bookings API router — staff-facing stay reservations.

Every booking is admitted by the reservation writer, which re-checks the
calendar inside the inserting transaction. An ``Idempotency-Key`` header (or
body field) makes a retried submission return the original booking with
``200 OK`` instead of creating a second one.
"""

import uuid
from datetime import date

from fastapi import APIRouter, Depends, Header, Query, Response, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from staydesk.api.deps import get_current_admin, get_db
from staydesk.api.errors import http_error
from staydesk.errors import BookingError
from staydesk.models.booking import Booking
from staydesk.models.user import User
from staydesk.schemas.booking import (
    BookingCreate,
    BookingDetailResponse,
    BookingListResponse,
    BookingResponse,
    BookingStatusUpdate,
)
from staydesk.services.add_on_service import selections_from
from staydesk.services.reservation_lifecycle import change_status, get_reservation
from staydesk.services.reservation_writer import ReservationRequest, commit_reservation
from staydesk.services.resources import ResourceKind

router = APIRouter(prefix="/api/v1/bookings", tags=["bookings"])


@router.post(
    "",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new booking",
)
async def create_booking(
    body: BookingCreate,
    response: Response,
    idempotency_key: str | None = Header(None, alias="Idempotency-Key"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_admin),
) -> Booking:
    """Reserve a property for a registered guest.

    Returns 409 with the first unavailable date when the stay overlaps another
    booking or a blocked date; nothing is written in that case.
    """
    request = ReservationRequest(
        kind=ResourceKind.PROPERTY,
        resource_id=body.property_id,
        guest_id=body.guest_id,
        start=body.check_in,
        end=body.check_out,
        party_size=body.num_guests,
        special_requests=body.special_requests,
        idempotency_key=idempotency_key or body.idempotency_key,
        add_ons=selections_from(body.add_ons),
    )
    try:
        result = await commit_reservation(db, request)
    except BookingError as e:
        raise http_error(e) from e

    if result.replayed:
        response.status_code = status.HTTP_200_OK
    return result.reservation


@router.get(
    "",
    response_model=BookingListResponse,
    summary="List bookings",
)
async def list_bookings(
    property_id: uuid.UUID | None = Query(None, description="Filter by property"),
    guest_id: uuid.UUID | None = Query(None, description="Filter by guest"),
    status_filter: str | None = Query(None, alias="status", description="Filter by booking status"),
    check_in_from: date | None = Query(None, description="Bookings with check_in >= this date"),
    check_in_to: date | None = Query(None, description="Bookings with check_in <= this date"),
    skip: int = Query(0, ge=0, description="Pagination offset"),
    limit: int = Query(20, ge=1, le=100, description="Pagination limit"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_admin),
) -> dict:
    """Return a paginated list of bookings, newest first."""
    filters = []
    if property_id is not None:
        filters.append(Booking.property_id == property_id)
    if guest_id is not None:
        filters.append(Booking.guest_id == guest_id)
    if status_filter is not None:
        filters.append(Booking.status == status_filter)
    if check_in_from is not None:
        filters.append(Booking.check_in >= check_in_from)
    if check_in_to is not None:
        filters.append(Booking.check_in <= check_in_to)

    total_result = await db.execute(select(func.count()).select_from(Booking).where(*filters))
    total = total_result.scalar_one()

    items_query = select(Booking).where(*filters).order_by(Booking.created_at.desc()).offset(skip).limit(limit)
    result = await db.execute(items_query)
    items = list(result.scalars().all())

    return {"items": items, "total": total}


@router.get(
    "/{booking_id}",
    response_model=BookingDetailResponse,
    summary="Get booking detail with nested property and guest",
)
async def get_booking(
    booking_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_admin),
) -> Booking:
    try:
        return await get_reservation(db, ResourceKind.PROPERTY, booking_id)
    except BookingError as e:
        raise http_error(e) from e


@router.patch(
    "/{booking_id}/status",
    response_model=BookingResponse,
    summary="Change the status of a booking",
)
async def update_booking_status(
    booking_id: uuid.UUID,
    body: BookingStatusUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_admin),
) -> Booking:
    """Confirm, complete or cancel a booking.

    Cancelling releases the dates immediately. Completed and cancelled
    bookings cannot change again (409).
    """
    try:
        return await change_status(db, ResourceKind.PROPERTY, booking_id, body.status, reason=body.reason)
    except BookingError as e:
        raise http_error(e) from e

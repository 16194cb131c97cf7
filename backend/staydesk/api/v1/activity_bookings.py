"""Activity bookings API router — staff-facing seat reservations on activity slots."""

import uuid
from datetime import date

from fastapi import APIRouter, Depends, Header, Query, Response, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from staydesk.api.deps import get_current_admin, get_db
from staydesk.api.errors import http_error
from staydesk.errors import BookingError
from staydesk.models.booking import ActivityBooking
from staydesk.models.user import User
from staydesk.schemas.booking import (
    ActivityBookingCreate,
    ActivityBookingDetailResponse,
    ActivityBookingListResponse,
    ActivityBookingResponse,
    BookingStatusUpdate,
)
from staydesk.services.reservation_lifecycle import change_status, get_reservation
from staydesk.services.reservation_writer import ReservationRequest, commit_reservation
from staydesk.services.resources import ResourceKind

router = APIRouter(prefix="/api/v1/activity-bookings", tags=["activity-bookings"])


@router.post(
    "",
    response_model=ActivityBookingResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Reserve seats on an activity slot",
)
async def create_activity_booking(
    body: ActivityBookingCreate,
    response: Response,
    idempotency_key: str | None = Header(None, alias="Idempotency-Key"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_admin),
) -> ActivityBooking:
    request = ReservationRequest(
        kind=ResourceKind.ACTIVITY,
        resource_id=body.activity_id,
        guest_id=body.guest_id,
        start=body.slot_date,
        slot_time=body.slot_time,
        party_size=body.participants,
        special_requests=body.special_requests,
        idempotency_key=idempotency_key or body.idempotency_key,
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
    response_model=ActivityBookingListResponse,
    summary="List activity bookings",
)
async def list_activity_bookings(
    activity_id: uuid.UUID | None = Query(None),
    guest_id: uuid.UUID | None = Query(None),
    status_filter: str | None = Query(None, alias="status"),
    slot_date: date | None = Query(None),
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_admin),
) -> dict:
    filters = []
    if activity_id is not None:
        filters.append(ActivityBooking.activity_id == activity_id)
    if guest_id is not None:
        filters.append(ActivityBooking.guest_id == guest_id)
    if status_filter is not None:
        filters.append(ActivityBooking.status == status_filter)
    if slot_date is not None:
        filters.append(ActivityBooking.slot_date == slot_date)

    total_result = await db.execute(select(func.count()).select_from(ActivityBooking).where(*filters))
    total = total_result.scalar_one()

    items_query = (
        select(ActivityBooking)
        .where(*filters)
        .order_by(ActivityBooking.slot_date, ActivityBooking.slot_time)
        .offset(skip)
        .limit(limit)
    )
    result = await db.execute(items_query)
    return {"items": list(result.scalars().all()), "total": total}


@router.get(
    "/{booking_id}",
    response_model=ActivityBookingDetailResponse,
    summary="Get activity booking detail",
)
async def get_activity_booking(
    booking_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_admin),
) -> ActivityBooking:
    try:
        return await get_reservation(db, ResourceKind.ACTIVITY, booking_id)
    except BookingError as e:
        raise http_error(e) from e


@router.patch(
    "/{booking_id}/status",
    response_model=ActivityBookingResponse,
    summary="Change the status of an activity booking",
)
async def update_activity_booking_status(
    booking_id: uuid.UUID,
    body: BookingStatusUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_admin),
) -> ActivityBooking:
    try:
        return await change_status(db, ResourceKind.ACTIVITY, booking_id, body.status, reason=body.reason)
    except BookingError as e:
        raise http_error(e) from e

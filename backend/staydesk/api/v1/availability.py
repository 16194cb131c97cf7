"""Availability API routes — calendars and the advisory booking pre-check."""

import uuid
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from staydesk.api.deps import get_db
from staydesk.api.errors import http_error
from staydesk.errors import BookingError
from staydesk.schemas.activity import SLOT_TIME_PATTERN
from staydesk.schemas.availability import (
    AvailabilityCheckDay,
    AvailabilityCheckRequest,
    AvailabilityCheckResponse,
    AvailabilityDay,
    AvailabilityWindowResponse,
)
from staydesk.services.availability_service import availability_window, precheck
from staydesk.services.dates import slot_range
from staydesk.services.resources import ResourceKind

router = APIRouter(prefix="/api/v1/availability", tags=["availability"])


@router.get(
    "",
    response_model=AvailabilityWindowResponse,
    summary="Per-date availability and price of one resource",
)
async def get_availability(
    start_date: date = Query(..., description="First date of the window"),
    end_date: date = Query(..., description="Exclusive end of the window"),
    property_id: uuid.UUID | None = Query(None),
    activity_id: uuid.UUID | None = Query(None),
    slot_time: str | None = Query(None, pattern=SLOT_TIME_PATTERN),
    db: AsyncSession = Depends(get_db),
) -> AvailabilityWindowResponse:
    """Return one record per date of ``[start_date, end_date)``.

    Blocked dates report ``reason="blocked"`` and zero remaining capacity
    whatever their load; the block note is passed through as ``note``.
    """
    if (property_id is None) == (activity_id is None):
        raise HTTPException(
            status_code=422,
            detail="Provide exactly one of property_id or activity_id",
        )
    kind = ResourceKind.PROPERTY if property_id is not None else ResourceKind.ACTIVITY
    resource_id = property_id or activity_id

    try:
        _, window = await availability_window(db, kind, resource_id, start_date, end_date, slot_time=slot_time)
    except BookingError as e:
        raise http_error(e) from e

    return AvailabilityWindowResponse(
        resource_kind=kind.value,
        resource_id=resource_id,
        start_date=start_date,
        end_date=end_date,
        slot_time=slot_time,
        days=[
            AvailabilityDay(
                date=day.date,
                available=day.available,
                remaining_capacity=day.remaining_capacity,
                price=day.price,
                reason=day.reason,
                note=day.note,
            )
            for day in window
        ],
    )


@router.post(
    "/check",
    response_model=AvailabilityCheckResponse,
    summary="Pre-check a prospective reservation and quote its price",
)
async def check_availability(
    body: AvailabilityCheckRequest,
    db: AsyncSession = Depends(get_db),
) -> AvailabilityCheckResponse:
    """Advisory answer for the booking form. Nothing is reserved.

    A positive answer is not a promise: the reservation is admitted only when
    it is submitted, against the calendar at that moment.
    """
    if body.property_id is not None:
        kind, resource_id = ResourceKind.PROPERTY, body.property_id
        start, end = body.start_date, body.end_date
    else:
        kind, resource_id = ResourceKind.ACTIVITY, body.activity_id
        start, end = slot_range(body.start_date)

    try:
        result = await precheck(db, kind, resource_id, start, end, body.party_size, slot_time=body.slot_time)
    except BookingError as e:
        raise http_error(e) from e

    conflict = result.decision.first_conflict
    return AvailabilityCheckResponse(
        available=result.decision.admitted,
        reason=result.decision.reason,
        conflict_date=conflict.date if conflict else None,
        remaining_capacity=conflict.remaining_capacity if conflict else None,
        days=[
            AvailabilityCheckDay(
                date=d.date,
                admitted=d.admitted,
                remaining_capacity=d.remaining_capacity,
                reason=d.reason,
            )
            for d in result.decision.dates
        ],
        unit_prices=result.quote.unit_prices,
        total_price=result.quote.total,
    )

"""Blocked dates API — staff close a property or activity on given dates.

A block takes precedence over capacity: no new reservation is admitted on a
blocked date, whatever its load. Existing reservations are left untouched.
"""

import logging
import uuid
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from staydesk.api.deps import get_current_admin, get_db
from staydesk.api.errors import http_error
from staydesk.errors import BookingError
from staydesk.models.activity import Activity
from staydesk.models.calendar import BlockedDate
from staydesk.models.property import Property
from staydesk.models.user import User
from staydesk.schemas.calendar import BlockedDateCreate, BlockedDateListResponse, BlockedDateResponse
from staydesk.schemas.common import MessageResponse
from staydesk.services.dates import iter_dates, slot_range, validate_range

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/blocked-dates", tags=["calendar"])


async def ensure_resource_exists(
    db: AsyncSession,
    property_id: uuid.UUID | None,
    activity_id: uuid.UUID | None,
) -> None:
    """Raise 404 if the targeted property or activity does not exist."""
    if property_id is not None:
        query, label = select(Property.id).where(Property.id == property_id), "Property"
    else:
        query, label = select(Activity.id).where(Activity.id == activity_id), "Activity"
    if (await db.execute(query)).scalar_one_or_none() is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{label} not found",
        )


@router.get(
    "",
    response_model=BlockedDateListResponse,
    summary="List blocked dates",
)
async def list_blocked_dates(
    property_id: uuid.UUID | None = Query(None),
    activity_id: uuid.UUID | None = Query(None),
    start_date: date | None = Query(None, description="Blocks on or after this date"),
    end_date: date | None = Query(None, description="Blocks before this date"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_admin),
) -> BlockedDateListResponse:
    filters = []
    if property_id is not None:
        filters.append(BlockedDate.property_id == property_id)
    if activity_id is not None:
        filters.append(BlockedDate.activity_id == activity_id)
    if start_date is not None:
        filters.append(BlockedDate.date >= start_date)
    if end_date is not None:
        filters.append(BlockedDate.date < end_date)

    result = await db.execute(select(BlockedDate).where(*filters).order_by(BlockedDate.date))
    items = [BlockedDateResponse.model_validate(b) for b in result.scalars().all()]
    return BlockedDateListResponse(items=items, total=len(items))


@router.post(
    "",
    response_model=BlockedDateListResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Block one date or a range of dates",
)
async def create_blocked_dates(
    body: BlockedDateCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_admin),
) -> BlockedDateListResponse:
    """Block ``date``, or every date of ``[date, end_date)`` when ``end_date`` is set.

    Returns 409 if any of the dates is already blocked; nothing is written then.
    """
    start, end = (body.date, body.end_date) if body.end_date else slot_range(body.date)
    try:
        validate_range(start, end)
    except BookingError as e:
        raise http_error(e) from e

    await ensure_resource_exists(db, body.property_id, body.activity_id)

    blocks = [
        BlockedDate(
            property_id=body.property_id,
            activity_id=body.activity_id,
            date=day,
            reason=body.reason,
        )
        for day in iter_dates(start, end)
    ]
    db.add_all(blocks)
    try:
        await db.flush()
    except IntegrityError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="One or more of these dates is already blocked",
        ) from None

    for block in blocks:
        await db.refresh(block)
    logger.info("Blocked %d date(s) from %s (%s)", len(blocks), start, body.reason or "no reason")

    items = [BlockedDateResponse.model_validate(b) for b in blocks]
    return BlockedDateListResponse(items=items, total=len(items))


@router.delete(
    "/{blocked_date_id}",
    response_model=MessageResponse,
    summary="Unblock a date",
)
async def delete_blocked_date(
    blocked_date_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_admin),
) -> MessageResponse:
    result = await db.execute(select(BlockedDate).where(BlockedDate.id == blocked_date_id))
    block = result.scalar_one_or_none()
    if block is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Blocked date not found",
        )

    await db.delete(block)
    await db.flush()
    return MessageResponse(message="Date unblocked")


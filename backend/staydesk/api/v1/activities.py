"""Activities API routes — public search, admin-only management."""

import uuid
from datetime import date
from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from staydesk.api.deps import get_current_admin, get_db
from staydesk.api.errors import http_error
from staydesk.errors import BookingError
from staydesk.models.activity import Activity
from staydesk.models.user import User
from staydesk.schemas.activity import (
    SLOT_TIME_PATTERN,
    ActivityCreate,
    ActivityListResponse,
    ActivityResponse,
    ActivitySearchItem,
    ActivityUpdate,
)
from staydesk.schemas.common import MessageResponse
from staydesk.services.availability_service import annotate_availability
from staydesk.services.dates import slot_range
from staydesk.services.resources import resource_from_activity

router = APIRouter(prefix="/api/v1/activities", tags=["activities"])


async def _get_activity_or_404(db: AsyncSession, activity_id: uuid.UUID) -> Activity:
    result = await db.execute(select(Activity).where(Activity.id == activity_id))
    activity = result.scalar_one_or_none()
    if activity is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Activity not found",
        )
    return activity


async def _flush_or_409(db: AsyncSession, activity: Activity) -> None:
    try:
        await db.flush()
    except IntegrityError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="An activity with this slug already exists",
        ) from None
    await db.refresh(activity)


@router.post(
    "",
    response_model=ActivityResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new activity",
)
async def create_activity(
    body: ActivityCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_admin),
) -> ActivityResponse:
    activity = Activity(**body.model_dump())
    db.add(activity)
    await _flush_or_409(db, activity)
    return ActivityResponse.model_validate(activity)


@router.get(
    "",
    response_model=ActivityListResponse,
    summary="Search activities",
)
async def list_activities(
    status_filter: str | None = Query(None, alias="status", description="Defaults to active activities"),
    activity_type: str | None = Query(None),
    min_price: Decimal | None = Query(None, ge=0),
    max_price: Decimal | None = Query(None, ge=0),
    participants: int | None = Query(None, ge=1),
    on_date: date | None = Query(None, alias="date", description="Annotate availability on this date"),
    slot_time: str | None = Query(None, pattern=SLOT_TIME_PATTERN),
    available_only: bool = Query(False),
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
) -> ActivityListResponse:
    """Return paginated activities, annotated with seats left when ``date`` is given.

    Without ``slot_time`` the figure is for the emptiest slot of the day.
    """
    filters = [Activity.status == (status_filter or "active")]
    if activity_type is not None:
        filters.append(Activity.activity_type == activity_type)
    if min_price is not None:
        filters.append(Activity.price >= min_price)
    if max_price is not None:
        filters.append(Activity.price <= max_price)
    if participants is not None:
        filters.append(Activity.max_participants >= participants)

    query = select(Activity).where(*filters).order_by(Activity.created_at.desc())

    if on_date is None:
        count_query = select(func.count()).select_from(Activity).where(*filters)
        total = (await db.execute(count_query)).scalar_one()
        result = await db.execute(query.offset(skip).limit(limit))
        items = [ActivitySearchItem.model_validate(a) for a in result.scalars().all()]
        return ActivityListResponse(items=items, total=total)

    activities = list((await db.execute(query)).scalars().all())
    start, end = slot_range(on_date)
    try:
        annotations = await annotate_availability(
            db,
            [resource_from_activity(a) for a in activities],
            start,
            end,
            party_size=participants,
            slot_time=slot_time,
        )
    except BookingError as e:
        raise http_error(e) from e

    items = []
    for activity in activities:
        annotation = annotations[activity.id]
        item = ActivitySearchItem.model_validate(activity)
        item.is_available = annotation.is_available
        item.remaining_capacity = annotation.remaining_capacity
        if available_only and not item.is_available:
            continue
        items.append(item)

    return ActivityListResponse(items=items[skip : skip + limit], total=len(items))


@router.get(
    "/{activity_id}",
    response_model=ActivityResponse,
    summary="Get an activity by ID",
)
async def get_activity(
    activity_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
) -> ActivityResponse:
    activity = await _get_activity_or_404(db, activity_id)
    return ActivityResponse.model_validate(activity)


@router.put(
    "/{activity_id}",
    response_model=ActivityResponse,
    summary="Update an activity",
)
async def update_activity(
    activity_id: uuid.UUID,
    body: ActivityUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_admin),
) -> ActivityResponse:
    """Partially update an activity. Only explicitly set fields are changed."""
    activity = await _get_activity_or_404(db, activity_id)

    update_data = body.model_dump(exclude_unset=True)
    min_participants = update_data.get("min_participants", activity.min_participants)
    max_participants = update_data.get("max_participants", activity.max_participants)
    if min_participants > max_participants:
        raise HTTPException(
            status_code=422,
            detail="min_participants cannot exceed max_participants",
        )

    for field, value in update_data.items():
        setattr(activity, field, value)

    await _flush_or_409(db, activity)
    return ActivityResponse.model_validate(activity)


@router.delete(
    "/{activity_id}",
    response_model=MessageResponse,
    summary="Delete an activity",
)
async def delete_activity(
    activity_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_admin),
) -> MessageResponse:
    activity = await _get_activity_or_404(db, activity_id)

    await db.delete(activity)
    await db.flush()
    return MessageResponse(message="Activity deleted")

"""Properties API routes — public search, admin-only management."""

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
from staydesk.models.property import Property
from staydesk.models.user import User
from staydesk.schemas.common import MessageResponse
from staydesk.schemas.property import (
    PropertyCreate,
    PropertyListResponse,
    PropertyResponse,
    PropertySearchItem,
    PropertyUpdate,
)
from staydesk.services.availability_service import annotate_availability
from staydesk.services.resources import resource_from_property

router = APIRouter(prefix="/api/v1/properties", tags=["properties"])


async def _get_property_or_404(db: AsyncSession, property_id: uuid.UUID) -> Property:
    result = await db.execute(select(Property).where(Property.id == property_id))
    prop = result.scalar_one_or_none()
    if prop is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Property not found",
        )
    return prop


async def _flush_or_409(db: AsyncSession, prop: Property) -> None:
    try:
        await db.flush()
    except IntegrityError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="A property with this slug already exists",
        ) from None
    await db.refresh(prop)


@router.post(
    "",
    response_model=PropertyResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new property",
)
async def create_property(
    body: PropertyCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_admin),
) -> PropertyResponse:
    prop = Property(**body.model_dump())
    db.add(prop)
    await _flush_or_409(db, prop)
    return PropertyResponse.model_validate(prop)


@router.get(
    "",
    response_model=PropertyListResponse,
    summary="Search properties",
)
async def list_properties(
    status_filter: str | None = Query(None, alias="status", description="Defaults to active properties"),
    property_type: str | None = Query(None),
    location: str | None = Query(None, description="Case-insensitive substring match"),
    min_price: Decimal | None = Query(None, ge=0),
    max_price: Decimal | None = Query(None, ge=0),
    guests: int | None = Query(None, ge=1, description="Properties sleeping at least this many guests"),
    check_in: date | None = Query(None),
    check_out: date | None = Query(None),
    available_only: bool = Query(False, description="Drop properties unavailable for the given dates"),
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
) -> PropertyListResponse:
    """Return paginated properties.

    When ``check_in`` and ``check_out`` are both given each item carries
    ``is_available`` for that stay, computed by the same calendar rules the
    booking pipeline uses.
    """
    if (check_in is None) != (check_out is None):
        raise HTTPException(
            status_code=422,
            detail="check_in and check_out must be given together",
        )

    filters = [Property.status == (status_filter or "active")]
    if property_type is not None:
        filters.append(Property.property_type == property_type)
    if location is not None:
        filters.append(Property.location.ilike(f"%{location}%"))
    if min_price is not None:
        filters.append(Property.base_price_per_night >= min_price)
    if max_price is not None:
        filters.append(Property.base_price_per_night <= max_price)
    if guests is not None:
        filters.append(Property.max_guests >= guests)

    query = select(Property).where(*filters).order_by(Property.created_at.desc())

    if check_in is None:
        count_query = select(func.count()).select_from(Property).where(*filters)
        total = (await db.execute(count_query)).scalar_one()
        result = await db.execute(query.offset(skip).limit(limit))
        items = [PropertySearchItem.model_validate(p) for p in result.scalars().all()]
        return PropertyListResponse(items=items, total=total)

    # Availability depends on the calendar, so filter before paginating
    props = list((await db.execute(query)).scalars().all())
    try:
        annotations = await annotate_availability(
            db,
            [resource_from_property(p) for p in props],
            check_in,
            check_out,
            party_size=guests,
        )
    except BookingError as e:
        raise http_error(e) from e

    items = []
    for prop in props:
        item = PropertySearchItem.model_validate(prop)
        item.is_available = annotations[prop.id].is_available
        if available_only and not item.is_available:
            continue
        items.append(item)

    return PropertyListResponse(items=items[skip : skip + limit], total=len(items))


@router.get(
    "/{property_id}",
    response_model=PropertyResponse,
    summary="Get a property by ID",
)
async def get_property(
    property_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
) -> PropertyResponse:
    prop = await _get_property_or_404(db, property_id)
    return PropertyResponse.model_validate(prop)


@router.put(
    "/{property_id}",
    response_model=PropertyResponse,
    summary="Update a property",
)
async def update_property(
    property_id: uuid.UUID,
    body: PropertyUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_admin),
) -> PropertyResponse:
    """Partially update a property. Only explicitly set fields are changed."""
    prop = await _get_property_or_404(db, property_id)

    update_data = body.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        setattr(prop, field, value)

    await _flush_or_409(db, prop)
    return PropertyResponse.model_validate(prop)


@router.delete(
    "/{property_id}",
    response_model=MessageResponse,
    summary="Delete a property",
)
async def delete_property(
    property_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_admin),
) -> MessageResponse:
    """Delete a property together with its bookings and calendar overrides."""
    prop = await _get_property_or_404(db, property_id)

    await db.delete(prop)
    await db.flush()
    return MessageResponse(message="Property deleted")

"""Add-ons API routes — public catalogue, admin-only management.

Bookings keep their own copy of each add-on's name and price, so editing or
deleting a catalogue entry never changes what an existing booking owes.
"""

import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from staydesk.api.deps import get_current_admin, get_db
from staydesk.api.v1.blocked_dates import ensure_resource_exists
from staydesk.models.add_on import AddOn
from staydesk.models.user import User
from staydesk.schemas.add_on import AddOnCreate, AddOnListResponse, AddOnResponse, AddOnUpdate
from staydesk.schemas.common import MessageResponse

router = APIRouter(prefix="/api/v1/add-ons", tags=["add-ons"])


async def _get_add_on_or_404(db: AsyncSession, add_on_id: uuid.UUID) -> AddOn:
    result = await db.execute(select(AddOn).where(AddOn.id == add_on_id))
    add_on = result.scalar_one_or_none()
    if add_on is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Add-on not found",
        )
    return add_on


@router.get(
    "",
    response_model=AddOnListResponse,
    summary="List add-ons",
)
async def list_add_ons(
    property_id: uuid.UUID | None = Query(None, description="Only add-ons offered with this property"),
    db: AsyncSession = Depends(get_db),
) -> AddOnListResponse:
    """Return active add-ons ordered by name.

    With ``property_id`` the list holds the global add-ons plus the ones sold
    with that property, i.e. exactly what a stay there can be booked with.
    """
    query = select(AddOn).where(AddOn.is_active.is_(True))
    if property_id is not None:
        query = query.where(or_(AddOn.is_global.is_(True), AddOn.property_id == property_id))

    result = await db.execute(query.order_by(AddOn.name))
    items = [AddOnResponse.model_validate(a) for a in result.scalars().all()]
    return AddOnListResponse(items=items, total=len(items))


@router.post(
    "",
    response_model=AddOnResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create an add-on",
)
async def create_add_on(
    body: AddOnCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_admin),
) -> AddOnResponse:
    if body.property_id is not None:
        await ensure_resource_exists(db, body.property_id, None)

    add_on = AddOn(**body.model_dump())
    db.add(add_on)
    await db.flush()
    await db.refresh(add_on)
    return AddOnResponse.model_validate(add_on)


@router.get(
    "/{add_on_id}",
    response_model=AddOnResponse,
    summary="Get an add-on by ID",
)
async def get_add_on(
    add_on_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
) -> AddOnResponse:
    add_on = await _get_add_on_or_404(db, add_on_id)
    return AddOnResponse.model_validate(add_on)


@router.put(
    "/{add_on_id}",
    response_model=AddOnResponse,
    summary="Update an add-on",
)
async def update_add_on(
    add_on_id: uuid.UUID,
    body: AddOnUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_admin),
) -> AddOnResponse:
    """Partially update an add-on. Making it global detaches it from its property."""
    add_on = await _get_add_on_or_404(db, add_on_id)

    update_data = body.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        setattr(add_on, field, value)

    if add_on.is_global:
        add_on.property_id = None
    elif add_on.property_id is None:
        raise HTTPException(
            status_code=422,
            detail="property_id is required for a property-specific add-on",
        )
    else:
        await ensure_resource_exists(db, add_on.property_id, None)

    await db.flush()
    await db.refresh(add_on)
    return AddOnResponse.model_validate(add_on)


@router.delete(
    "/{add_on_id}",
    response_model=MessageResponse,
    summary="Delete an add-on",
)
async def delete_add_on(
    add_on_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_admin),
) -> MessageResponse:
    add_on = await _get_add_on_or_404(db, add_on_id)

    await db.delete(add_on)
    await db.flush()
    return MessageResponse(message="Add-on deleted")

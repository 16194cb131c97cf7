"""Price overrides API — date-specific rates replacing a resource's base price."""

import logging
import uuid
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from staydesk.api.deps import get_current_admin, get_db
from staydesk.api.v1.blocked_dates import ensure_resource_exists
from staydesk.models.calendar import PriceOverride
from staydesk.models.user import User
from staydesk.schemas.calendar import PriceOverrideListResponse, PriceOverrideResponse, PriceOverrideUpsert
from staydesk.schemas.common import MessageResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/price-overrides", tags=["calendar"])


@router.get(
    "",
    response_model=PriceOverrideListResponse,
    summary="List price overrides",
)
async def list_price_overrides(
    property_id: uuid.UUID | None = Query(None),
    activity_id: uuid.UUID | None = Query(None),
    start_date: date | None = Query(None),
    end_date: date | None = Query(None, description="Exclusive"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_admin),
) -> PriceOverrideListResponse:
    filters = []
    if property_id is not None:
        filters.append(PriceOverride.property_id == property_id)
    if activity_id is not None:
        filters.append(PriceOverride.activity_id == activity_id)
    if start_date is not None:
        filters.append(PriceOverride.date >= start_date)
    if end_date is not None:
        filters.append(PriceOverride.date < end_date)

    result = await db.execute(select(PriceOverride).where(*filters).order_by(PriceOverride.date))
    items = [PriceOverrideResponse.model_validate(o) for o in result.scalars().all()]
    return PriceOverrideListResponse(items=items, total=len(items))


@router.put(
    "",
    response_model=PriceOverrideResponse,
    summary="Set the price of a resource on one date",
)
async def upsert_price_override(
    body: PriceOverrideUpsert,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_admin),
) -> PriceOverrideResponse:
    """Create the override, or replace the price of the existing one for that date.

    Reservations already committed keep the total they were quoted.
    """
    await ensure_resource_exists(db, body.property_id, body.activity_id)

    if body.property_id is not None:
        target = PriceOverride.property_id == body.property_id
    else:
        target = PriceOverride.activity_id == body.activity_id
    result = await db.execute(select(PriceOverride).where(target, PriceOverride.date == body.date))
    override = result.scalar_one_or_none()

    if override is None:
        override = PriceOverride(
            property_id=body.property_id,
            activity_id=body.activity_id,
            date=body.date,
            price=body.price,
        )
        db.add(override)
    else:
        override.price = body.price

    await db.flush()
    await db.refresh(override)
    logger.info("Price override on %s set to %s", body.date, body.price)
    return PriceOverrideResponse.model_validate(override)


@router.delete(
    "/{override_id}",
    response_model=MessageResponse,
    summary="Remove a price override",
)
async def delete_price_override(
    override_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_admin),
) -> MessageResponse:
    result = await db.execute(select(PriceOverride).where(PriceOverride.id == override_id))
    override = result.scalar_one_or_none()
    if override is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Price override not found",
        )

    await db.delete(override)
    await db.flush()
    return MessageResponse(message="Price override removed")

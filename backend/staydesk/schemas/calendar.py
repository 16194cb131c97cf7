"""Pydantic v2 schemas for blocked dates and price overrides."""

import uuid
from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, model_validator


class _ResourceTarget(BaseModel):
    property_id: uuid.UUID | None = None
    activity_id: uuid.UUID | None = None

    @model_validator(mode="after")
    def check_target(self):
        """Exactly one of property_id / activity_id must be given."""
        if (self.property_id is None) == (self.activity_id is None):
            raise ValueError("Provide exactly one of property_id or activity_id")
        return self


# ---------------------------------------------------------------------------
# Blocked dates
# ---------------------------------------------------------------------------


class BlockedDateCreate(_ResourceTarget):
    """Block ``date`` (or every date of ``[date, end_date)``) for one resource."""

    date: date
    end_date: date | None = None
    reason: str | None = Field(None, max_length=255)

    @model_validator(mode="after")
    def check_range(self) -> "BlockedDateCreate":
        if self.end_date is not None and self.end_date <= self.date:
            raise ValueError("end_date must be after date")
        return self


class BlockedDateResponse(BaseModel):
    id: uuid.UUID
    property_id: uuid.UUID | None = None
    activity_id: uuid.UUID | None = None
    date: date
    reason: str | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class BlockedDateListResponse(BaseModel):
    items: list[BlockedDateResponse]
    total: int


# ---------------------------------------------------------------------------
# Price overrides
# ---------------------------------------------------------------------------


class PriceOverrideUpsert(_ResourceTarget):
    """Set the price of one resource on one date, replacing any earlier override."""

    date: date
    price: Decimal = Field(..., ge=0)


class PriceOverrideResponse(BaseModel):
    id: uuid.UUID
    property_id: uuid.UUID | None = None
    activity_id: uuid.UUID | None = None
    date: date
    price: Decimal
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PriceOverrideListResponse(BaseModel):
    items: list[PriceOverrideResponse]
    total: int

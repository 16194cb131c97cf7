"""Pydantic v2 request/response schemas for property endpoints."""

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

PROPERTY_TYPE_PATTERN = "^(lodge|cottage|villa|cabin|tent)$"
PROPERTY_STATUS_PATTERN = "^(active|maintenance|inactive)$"
SLUG_PATTERN = "^[a-z0-9]+(?:-[a-z0-9]+)*$"

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class PropertyCreate(BaseModel):
    """Schema for creating a new property."""

    name: str = Field(..., min_length=1, max_length=255)
    slug: str = Field(..., min_length=1, max_length=255, pattern=SLUG_PATTERN)
    description: str | None = None
    location: str | None = Field(None, max_length=255)
    property_type: str = Field(..., pattern=PROPERTY_TYPE_PATTERN)
    max_guests: int = Field(2, ge=1)
    base_price_per_night: Decimal = Field(..., gt=0)
    amenities: list[str] | None = None
    status: str = Field("active", pattern=PROPERTY_STATUS_PATTERN)


class PropertyUpdate(BaseModel):
    """Schema for partially updating a property. All fields optional."""

    name: str | None = Field(None, min_length=1, max_length=255)
    slug: str | None = Field(None, min_length=1, max_length=255, pattern=SLUG_PATTERN)
    description: str | None = None
    location: str | None = Field(None, max_length=255)
    property_type: str | None = Field(None, pattern=PROPERTY_TYPE_PATTERN)
    max_guests: int | None = Field(None, ge=1)
    base_price_per_night: Decimal | None = Field(None, gt=0)
    amenities: list[str] | None = None
    status: str | None = Field(None, pattern=PROPERTY_STATUS_PATTERN)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class PropertyResponse(BaseModel):
    """Public property information returned from the API."""

    id: uuid.UUID
    name: str
    slug: str
    description: str | None = None
    location: str | None = None
    property_type: str
    max_guests: int
    base_price_per_night: Decimal
    amenities: list | None = None
    status: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PropertySearchItem(PropertyResponse):
    """Property listing entry, annotated when the search carries dates."""

    is_available: bool | None = None


class PropertyListResponse(BaseModel):
    """Paginated list of properties."""

    items: list[PropertySearchItem]
    total: int

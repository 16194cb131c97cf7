"""Pydantic v2 request/response schemas for the add-on catalogue and booking line items."""

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, model_validator

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class AddOnCreate(BaseModel):
    """Schema for adding an extra to the catalogue.

    A global add-on is offered with every property; otherwise ``property_id``
    names the one property it is sold with.
    """

    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    price: Decimal = Field(..., ge=0)
    is_global: bool = True
    property_id: uuid.UUID | None = None
    is_active: bool = True

    @model_validator(mode="after")
    def check_scope(self) -> "AddOnCreate":
        if self.is_global and self.property_id is not None:
            raise ValueError("A global add-on cannot be tied to a property")
        if not self.is_global and self.property_id is None:
            raise ValueError("property_id is required for a property-specific add-on")
        return self


class AddOnUpdate(BaseModel):
    """Schema for partially updating an add-on. All fields optional."""

    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    price: Decimal | None = Field(None, ge=0)
    is_global: bool | None = None
    property_id: uuid.UUID | None = None
    is_active: bool | None = None


class AddOnSelection(BaseModel):
    """An add-on picked with a stay."""

    add_on_id: uuid.UUID
    quantity: int = Field(1, ge=1, le=99)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class AddOnResponse(BaseModel):
    id: uuid.UUID
    name: str
    description: str | None = None
    price: Decimal
    is_global: bool
    property_id: uuid.UUID | None = None
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AddOnListResponse(BaseModel):
    """List of add-ons."""

    items: list[AddOnResponse]
    total: int


class BookingAddOnResponse(BaseModel):
    """An add-on line on a booking, at the price it was booked for."""

    id: uuid.UUID
    add_on_id: uuid.UUID | None = None
    name: str
    quantity: int
    unit_price: Decimal
    total_price: Decimal

    model_config = ConfigDict(from_attributes=True)

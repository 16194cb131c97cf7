"""Pydantic v2 request/response schemas for booking endpoints."""

import uuid
from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from staydesk.schemas.activity import SLOT_TIME_PATTERN, ActivityResponse
from staydesk.schemas.add_on import AddOnSelection, BookingAddOnResponse
from staydesk.schemas.guest import GuestDetails, GuestResponse
from staydesk.schemas.property import PropertyResponse
from staydesk.services.reservation_lifecycle import RESERVATION_STATUSES

RESERVATION_STATUS_PATTERN = f"^({'|'.join(RESERVATION_STATUSES)})$"

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class BookingCreate(BaseModel):
    """Schema for creating a stay on behalf of a registered guest."""

    property_id: uuid.UUID
    guest_id: uuid.UUID
    check_in: date
    check_out: date
    num_guests: int = Field(1, ge=1)
    special_requests: str | None = None
    idempotency_key: str | None = Field(None, min_length=1, max_length=255)
    add_ons: list[AddOnSelection] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_dates(self) -> "BookingCreate":
        """Validate that check_out is strictly after check_in."""
        if self.check_out <= self.check_in:
            raise ValueError("check_out must be after check_in")
        return self


class ActivityBookingCreate(BaseModel):
    """Schema for reserving seats on an activity slot."""

    activity_id: uuid.UUID
    guest_id: uuid.UUID
    slot_date: date
    slot_time: str = Field(..., pattern=SLOT_TIME_PATTERN)
    participants: int = Field(1, ge=1)
    special_requests: str | None = None
    idempotency_key: str | None = Field(None, min_length=1, max_length=255)


class PublicBookingCreate(BaseModel):
    """Stay request submitted from the public booking page."""

    property_id: uuid.UUID
    check_in: date
    check_out: date
    num_guests: int = Field(1, ge=1)
    guest: GuestDetails
    special_requests: str | None = None
    idempotency_key: str | None = Field(None, min_length=1, max_length=255)
    add_ons: list[AddOnSelection] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_dates(self) -> "PublicBookingCreate":
        if self.check_out <= self.check_in:
            raise ValueError("check_out must be after check_in")
        return self


class PublicActivityBookingCreate(BaseModel):
    """Activity request submitted from the public booking page."""

    activity_id: uuid.UUID
    slot_date: date
    slot_time: str = Field(..., pattern=SLOT_TIME_PATTERN)
    participants: int = Field(1, ge=1)
    guest: GuestDetails
    special_requests: str | None = None
    idempotency_key: str | None = Field(None, min_length=1, max_length=255)


class BookingStatusUpdate(BaseModel):
    """Move a reservation along its lifecycle."""

    status: str = Field(..., pattern=RESERVATION_STATUS_PATTERN)
    reason: str | None = Field(None, max_length=1000)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class BookingResponse(BaseModel):
    """Standard booking response returned from booking operations."""

    id: uuid.UUID
    property_id: uuid.UUID
    guest_id: uuid.UUID
    check_in: date
    check_out: date
    num_guests: int
    status: str
    total_price: Decimal
    add_ons_total: Decimal = Decimal("0.00")
    add_ons: list[BookingAddOnResponse] = []
    special_requests: str | None = None
    cancellation_reason: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class BookingDetailResponse(BookingResponse):
    """Extended booking response with nested property and guest details.

    Used for single-booking detail views where the client needs the full
    context without extra round-trips.
    """

    property: PropertyResponse | None = None
    guest: GuestResponse | None = None


class BookingListResponse(BaseModel):
    """Paginated list of bookings."""

    items: list[BookingResponse]
    total: int


class ActivityBookingResponse(BaseModel):
    id: uuid.UUID
    activity_id: uuid.UUID
    guest_id: uuid.UUID
    slot_date: date
    slot_time: str
    participants: int
    status: str
    total_price: Decimal
    special_requests: str | None = None
    cancellation_reason: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ActivityBookingDetailResponse(ActivityBookingResponse):
    activity: ActivityResponse | None = None
    guest: GuestResponse | None = None


class ActivityBookingListResponse(BaseModel):
    """Paginated list of activity bookings."""

    items: list[ActivityBookingResponse]
    total: int

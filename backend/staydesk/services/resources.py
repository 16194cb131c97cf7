"""Bookable resource descriptors shared by the calendar, pricing and writer services.

A ``Resource`` is a read-only snapshot of a Property or an Activity reduced to
what availability decisions need: capacity, base price, party limits, slots.
"""

import uuid
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import lazyload

from staydesk.errors import NotFoundError, UnavailableResourceError, ValidationError
from staydesk.models.activity import Activity
from staydesk.models.property import Property


class ResourceKind(str, Enum):
    PROPERTY = "property"
    ACTIVITY = "activity"

    @property
    def label(self) -> str:
        return self.value.capitalize()


@dataclass(frozen=True)
class Resource:
    """Availability-relevant view of a property or activity."""

    kind: ResourceKind
    id: uuid.UUID
    capacity: int
    base_price: Decimal
    active: bool
    min_party: int = 1
    max_party: int | None = None
    time_slots: tuple[str, ...] = ()

    @property
    def is_property(self) -> bool:
        return self.kind is ResourceKind.PROPERTY

    def units_for(self, party_size: int) -> int:
        """Capacity units a party consumes.

        A property is occupied by one party whatever its size; an activity
        slot is consumed seat by seat.
        """
        return 1 if self.is_property else party_size

    @property
    def min_units(self) -> int:
        """Smallest claim that can still be admitted on a date."""
        return 1 if self.is_property else max(self.min_party, 1)

    def fits_party(self, party_size: int) -> bool:
        return party_size >= self.min_party and (self.max_party is None or party_size <= self.max_party)

    def offers_slot(self, slot_time: str | None) -> bool:
        """Whether ``slot_time`` is one of the activity's sessions. Unslotted activities take any time."""
        return self.is_property or not self.time_slots or slot_time in self.time_slots

    def validate_party_size(self, party_size: int) -> None:
        if party_size <= 0:
            raise ValidationError("Party size must be a positive number")
        if self.max_party is not None and party_size > self.max_party:
            raise ValidationError(f"{self.kind.label} accepts at most {self.max_party} guests per booking")
        if party_size < self.min_party:
            raise ValidationError(f"{self.kind.label} requires at least {self.min_party} participants")

    def validate_slot(self, slot_time: str | None) -> None:
        if self.is_property:
            return
        if not slot_time:
            raise ValidationError("A time slot is required for activity bookings")
        if not self.offers_slot(slot_time):
            raise ValidationError(
                f"Unknown time slot '{slot_time}'. Available slots: {', '.join(self.time_slots)}"
            )


def resource_from_property(prop: Property) -> Resource:
    return Resource(
        kind=ResourceKind.PROPERTY,
        id=prop.id,
        capacity=1,
        base_price=prop.base_price_per_night,
        active=prop.status == "active",
        min_party=1,
        max_party=prop.max_guests,
    )


def resource_from_activity(activity: Activity) -> Resource:
    return Resource(
        kind=ResourceKind.ACTIVITY,
        id=activity.id,
        capacity=activity.max_participants,
        base_price=activity.price,
        active=activity.status == "active",
        min_party=activity.min_participants or 1,
        max_party=activity.max_participants,
        time_slots=tuple(activity.time_slots or ()),
    )


_MODELS = {
    ResourceKind.PROPERTY: (Property, resource_from_property),
    ResourceKind.ACTIVITY: (Activity, resource_from_activity),
}


async def load_resource(
    db: AsyncSession,
    kind: ResourceKind,
    resource_id: uuid.UUID,
    *,
    lock: bool = False,
) -> Resource:
    """Fetch a resource, optionally row-locking it for the rest of the transaction.

    Raises:
        NotFoundError: The resource does not exist.
        UnavailableResourceError: The resource exists but is not active.
    """
    model, to_resource = _MODELS[kind]
    query = select(model).where(model.id == resource_id).options(lazyload("*"))
    if lock:
        query = query.with_for_update()

    result = await db.execute(query)
    obj = result.scalar_one_or_none()
    if obj is None:
        raise NotFoundError(f"{kind.label} not found")

    resource = to_resource(obj)
    if not resource.active:
        raise UnavailableResourceError(f"{kind.label} is not available for booking")
    return resource

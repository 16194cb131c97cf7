"""Read-side availability — calendars, pre-checks and search annotation.

Every read path goes through ``calendar_index`` and ``conflict_checker`` so
search results, calendars and the booking pre-check agree on the checkout-day
boundary and on block precedence.
"""

import uuid
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from staydesk.database import translate_persistence_errors
from staydesk.services.calendar_index import build_index, build_indexes
from staydesk.services.conflict_checker import AvailabilityDecision, check_availability, decide_date
from staydesk.services.dates import validate_range
from staydesk.services.pricing_resolver import Quote, quote, resolve_prices
from staydesk.services.resources import Resource, ResourceKind, load_resource


@dataclass(frozen=True)
class WindowDay:
    """One record of an availability window."""

    date: date
    available: bool
    remaining_capacity: int
    price: Decimal
    reason: str | None = None
    note: str | None = None


@dataclass(frozen=True)
class PrecheckResult:
    resource: Resource
    decision: AvailabilityDecision
    quote: Quote


@dataclass(frozen=True)
class SearchAvailability:
    is_available: bool
    remaining_capacity: int


async def availability_window(
    db: AsyncSession,
    kind: ResourceKind,
    resource_id: uuid.UUID,
    start: date,
    end: date,
    *,
    slot_time: str | None = None,
) -> tuple[Resource, list[WindowDay]]:
    """Per-date availability and price of a resource over ``[start, end)``.

    A date is available when a minimal claim (one stay, or the activity's
    minimum participants) still fits.
    """
    validate_range(start, end)
    async with translate_persistence_errors():
        resource = await load_resource(db, kind, resource_id)
        if slot_time is not None:
            resource.validate_slot(slot_time)
        index = await build_index(db, resource, start, end, slot_time=slot_time)
        prices = await resolve_prices(db, resource, start, end)

    window = []
    for day, occupancy in index.items():
        decision = decide_date(day, occupancy, resource.min_units, resource.capacity)
        window.append(
            WindowDay(
                date=day,
                available=decision.admitted,
                remaining_capacity=decision.remaining_capacity,
                price=prices[day],
                reason=decision.reason,
                note=decision.block_reason,
            )
        )
    return resource, window


async def precheck(
    db: AsyncSession,
    kind: ResourceKind,
    resource_id: uuid.UUID,
    start: date,
    end: date,
    party_size: int,
    *,
    slot_time: str | None = None,
) -> PrecheckResult:
    """Advisory admission check for fast feedback. Writes nothing.

    The answer can be stale by the time the user submits; the reservation
    writer repeats the check under lock.
    """
    validate_range(start, end)
    async with translate_persistence_errors():
        resource = await load_resource(db, kind, resource_id)
        resource.validate_party_size(party_size)
        resource.validate_slot(slot_time)
        index = await build_index(db, resource, start, end, slot_time=slot_time)
        decision = check_availability(index, start, end, resource.units_for(party_size), resource.capacity)
        price_quote = await quote(db, resource, start, end, party_size)
    return PrecheckResult(resource=resource, decision=decision, quote=price_quote)


async def annotate_availability(
    db: AsyncSession,
    resources: Sequence[Resource],
    start: date,
    end: date,
    *,
    party_size: int | None = None,
    slot_time: str | None = None,
) -> dict[uuid.UUID, SearchAvailability]:
    """Availability of many resources for one range, for search listings.

    ``remaining_capacity`` is the smallest number of units left on any date of
    the range. A resource the reservation writer would refuse for these
    parameters is reported unavailable: inactive resources and slots the
    activity does not run have no capacity, a party outside the resource's
    size limits keeps the real seat count.
    """
    validate_range(start, end)
    if not resources:
        return {}
    async with translate_persistence_errors():
        indexes = await build_indexes(db, resources, start, end, slot_time=slot_time)

    annotations = {}
    for resource in resources:
        units = resource.units_for(party_size) if party_size else resource.min_units
        decision = check_availability(indexes[resource.id], start, end, units, resource.capacity)
        remaining = min((d.remaining_capacity for d in decision.dates), default=0)
        offered = resource.active and (slot_time is None or resource.offers_slot(slot_time))
        fits = party_size is None or resource.fits_party(party_size)
        annotations[resource.id] = SearchAvailability(
            is_available=offered and fits and decision.admitted,
            remaining_capacity=remaining if offered else 0,
        )
    return annotations

"""Calendar index — per-date occupancy of a resource built from reservations and blocks.

The index is derived on demand from persisted rows and never cached between
requests. Reads only; errors from the store propagate to the caller.

Property bookings occupy ``[check_in, check_out)``: the checkout date is free
for the next guest. Activity bookings occupy their single ``slot_date``.
"""

import logging
import uuid
from collections import defaultdict
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from staydesk.models.booking import ActivityBooking, Booking
from staydesk.models.calendar import BlockedDate
from staydesk.services.dates import iter_dates, validate_range
from staydesk.services.resources import Resource, ResourceKind

logger = logging.getLogger(__name__)

CANCELLED = "cancelled"


@dataclass(frozen=True)
class DateOccupancy:
    """Load and block state of one resource on one date."""

    booked_units: int = 0
    blocked: bool = False
    block_reason: str | None = None


CalendarIndex = dict[date, DateOccupancy]


async def build_index(
    db: AsyncSession,
    resource: Resource,
    start: date,
    end: date,
    *,
    slot_time: str | None = None,
) -> CalendarIndex:
    """Build the occupancy map of one resource for ``[start, end)``."""
    indexes = await build_indexes(db, [resource], start, end, slot_time=slot_time)
    return indexes[resource.id]


async def build_indexes(
    db: AsyncSession,
    resources: Sequence[Resource],
    start: date,
    end: date,
    *,
    slot_time: str | None = None,
) -> dict[uuid.UUID, CalendarIndex]:
    """Build occupancy maps for many resources over the same range.

    Issues one reservation query and one block query per resource kind, so a
    search page costs a constant number of round-trips.

    ``slot_time`` narrows activity load to that slot. Without it, an activity
    date reports the load of its least-booked configured slot, i.e. the best
    seat availability left that day. Activities with no configured slots run
    as one shared session per date.
    """
    validate_range(start, end)

    units: dict[uuid.UUID, dict[date, int]] = {r.id: defaultdict(int) for r in resources}
    blocks: dict[uuid.UUID, dict[date, str | None]] = {r.id: {} for r in resources}

    properties = [r for r in resources if r.kind is ResourceKind.PROPERTY]
    activities = [r for r in resources if r.kind is ResourceKind.ACTIVITY]

    if properties:
        await _load_property_units(db, properties, start, end, units)
        await _load_blocks(db, BlockedDate.property_id, properties, start, end, blocks)
    if activities:
        await _load_activity_units(db, activities, start, end, slot_time, units)
        await _load_blocks(db, BlockedDate.activity_id, activities, start, end, blocks)

    indexes: dict[uuid.UUID, CalendarIndex] = {}
    for resource in resources:
        resource_units = units[resource.id]
        resource_blocks = blocks[resource.id]
        indexes[resource.id] = {
            day: DateOccupancy(
                booked_units=resource_units.get(day, 0),
                blocked=day in resource_blocks,
                block_reason=resource_blocks.get(day),
            )
            for day in iter_dates(start, end)
        }
    return indexes


async def _load_property_units(
    db: AsyncSession,
    resources: Sequence[Resource],
    start: date,
    end: date,
    units: dict[uuid.UUID, dict[date, int]],
) -> None:
    result = await db.execute(
        select(Booking.property_id, Booking.check_in, Booking.check_out).where(
            Booking.property_id.in_([r.id for r in resources]),
            Booking.status != CANCELLED,
            Booking.check_in < end,
            Booking.check_out > start,
        )
    )
    for property_id, check_in, check_out in result.all():
        for day in iter_dates(max(check_in, start), min(check_out, end)):
            units[property_id][day] += 1


async def _load_activity_units(
    db: AsyncSession,
    resources: Sequence[Resource],
    start: date,
    end: date,
    slot_time: str | None,
    units: dict[uuid.UUID, dict[date, int]],
) -> None:
    result = await db.execute(
        select(
            ActivityBooking.activity_id,
            ActivityBooking.slot_date,
            ActivityBooking.slot_time,
            func.sum(ActivityBooking.participants),
        )
        .where(
            ActivityBooking.activity_id.in_([r.id for r in resources]),
            ActivityBooking.status != CANCELLED,
            ActivityBooking.slot_date >= start,
            ActivityBooking.slot_date < end,
        )
        .group_by(ActivityBooking.activity_id, ActivityBooking.slot_date, ActivityBooking.slot_time)
    )

    # activity -> date -> slot -> participants
    loads: dict[uuid.UUID, dict[date, dict[str, int]]] = defaultdict(lambda: defaultdict(dict))
    for activity_id, slot_date, booked_slot, participants in result.all():
        loads[activity_id][slot_date][booked_slot] = int(participants or 0)

    for resource in resources:
        for day, per_slot in loads.get(resource.id, {}).items():
            if not resource.time_slots:
                units[resource.id][day] = sum(per_slot.values())
            elif slot_time is not None:
                units[resource.id][day] = per_slot.get(slot_time, 0)
            else:
                units[resource.id][day] = min(per_slot.get(s, 0) for s in resource.time_slots)


async def _load_blocks(
    db: AsyncSession,
    column,
    resources: Sequence[Resource],
    start: date,
    end: date,
    blocks: dict[uuid.UUID, dict[date, str | None]],
) -> None:
    result = await db.execute(
        select(column, BlockedDate.date, BlockedDate.reason).where(
            column.in_([r.id for r in resources]),
            BlockedDate.date >= start,
            BlockedDate.date < end,
        )
    )
    for resource_id, blocked_on, reason in result.all():
        blocks[resource_id][blocked_on] = reason

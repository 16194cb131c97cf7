"""Tests for building per-date occupancy from bookings and blocks."""

from datetime import date, timedelta
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from staydesk.models.activity import Activity
from staydesk.models.booking import ActivityBooking, Booking
from staydesk.models.calendar import BlockedDate
from staydesk.models.guest import Guest
from staydesk.models.property import Property
from staydesk.services.calendar_index import build_index, build_indexes
from staydesk.services.resources import resource_from_activity, resource_from_property

JUL_1 = date(2031, 7, 1)


def _day(offset: int) -> date:
    return JUL_1 + timedelta(days=offset)


async def _add_booking(db: AsyncSession, prop: Property, guest: Guest, start: int, end: int, status="confirmed"):
    db.add(
        Booking(
            property_id=prop.id,
            guest_id=guest.id,
            check_in=_day(start),
            check_out=_day(end),
            num_guests=2,
            status=status,
            total_price=Decimal("100.00") * (end - start),
        )
    )
    await db.commit()


async def _add_activity_booking(db: AsyncSession, activity: Activity, guest: Guest, slot: str, participants: int):
    db.add(
        ActivityBooking(
            activity_id=activity.id,
            guest_id=guest.id,
            slot_date=JUL_1,
            slot_time=slot,
            participants=participants,
            status="pending",
            total_price=Decimal("25.00") * participants,
        )
    )
    await db.commit()


class TestPropertyIndex:
    """Nightly occupancy of a property."""

    async def test_every_date_in_range_is_present(self, db_session, test_property):
        index = await build_index(db_session, resource_from_property(test_property), JUL_1, _day(5))
        assert list(index) == [_day(i) for i in range(5)]
        assert all(o.booked_units == 0 and not o.blocked for o in index.values())

    async def test_checkout_day_is_not_occupied(self, db_session, test_property, test_guest):
        """A stay from 1st to 3rd occupies the 1st and 2nd only."""
        await _add_booking(db_session, test_property, test_guest, 0, 2)

        index = await build_index(db_session, resource_from_property(test_property), JUL_1, _day(4))

        assert index[_day(0)].booked_units == 1
        assert index[_day(1)].booked_units == 1
        assert index[_day(2)].booked_units == 0
        assert index[_day(3)].booked_units == 0

    async def test_cancelled_bookings_release_dates(self, db_session, test_property, test_guest):
        await _add_booking(db_session, test_property, test_guest, 0, 2, status="cancelled")

        index = await build_index(db_session, resource_from_property(test_property), JUL_1, _day(2))

        assert all(o.booked_units == 0 for o in index.values())

    async def test_booking_overlapping_range_edges_is_clipped(self, db_session, test_property, test_guest):
        await _add_booking(db_session, test_property, test_guest, -3, 1)

        index = await build_index(db_session, resource_from_property(test_property), JUL_1, _day(2))

        assert index[_day(0)].booked_units == 1
        assert index[_day(1)].booked_units == 0

    async def test_blocked_date_carries_reason(self, db_session, test_property):
        db_session.add(BlockedDate(property_id=test_property.id, date=_day(1), reason="maintenance"))
        await db_session.commit()

        index = await build_index(db_session, resource_from_property(test_property), JUL_1, _day(3))

        assert index[_day(1)].blocked is True
        assert index[_day(1)].block_reason == "maintenance"
        assert index[_day(0)].blocked is False

    async def test_repeated_reads_are_identical(self, db_session, test_property, test_guest):
        """Reading the calendar twice without writes returns the same index."""
        await _add_booking(db_session, test_property, test_guest, 1, 3)
        resource = resource_from_property(test_property)

        first = await build_index(db_session, resource, JUL_1, _day(5))
        second = await build_index(db_session, resource, JUL_1, _day(5))

        assert first == second

    async def test_other_property_bookings_are_ignored(self, db_session, test_property, test_guest):
        other = Property(
            name="Hilltop Villa",
            slug="hilltop-villa",
            property_type="villa",
            max_guests=8,
            base_price_per_night=Decimal("400.00"),
        )
        db_session.add(other)
        await db_session.commit()
        await _add_booking(db_session, other, test_guest, 0, 3)

        indexes = await build_indexes(
            db_session,
            [resource_from_property(test_property), resource_from_property(other)],
            JUL_1,
            _day(3),
        )

        assert all(o.booked_units == 0 for o in indexes[test_property.id].values())
        assert all(o.booked_units == 1 for o in indexes[other.id].values())


class TestActivityIndex:
    """Seat occupancy of an activity slot."""

    async def test_slot_load_sums_participants(self, db_session, test_activity, test_guest):
        await _add_activity_booking(db_session, test_activity, test_guest, "09:00", 3)
        await _add_activity_booking(db_session, test_activity, test_guest, "09:00", 4)

        index = await build_index(
            db_session, resource_from_activity(test_activity), JUL_1, _day(1), slot_time="09:00"
        )

        assert index[JUL_1].booked_units == 7

    async def test_other_slot_is_independent(self, db_session, test_activity, test_guest):
        await _add_activity_booking(db_session, test_activity, test_guest, "09:00", 6)

        index = await build_index(
            db_session, resource_from_activity(test_activity), JUL_1, _day(1), slot_time="14:00"
        )

        assert index[JUL_1].booked_units == 0

    async def test_without_slot_reports_least_booked_slot(self, db_session, test_activity, test_guest):
        await _add_activity_booking(db_session, test_activity, test_guest, "09:00", 6)
        await _add_activity_booking(db_session, test_activity, test_guest, "14:00", 2)

        index = await build_index(db_session, resource_from_activity(test_activity), JUL_1, _day(1))

        assert index[JUL_1].booked_units == 2

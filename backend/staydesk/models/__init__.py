"""SQLAlchemy models for StayDesk.

All models are imported here so that Alembic's autogenerate can discover
them via Base.metadata. If you add a new model, import it in this file.
"""

from staydesk.models.activity import Activity
from staydesk.models.add_on import AddOn, BookingAddOn
from staydesk.models.booking import ActivityBooking, Booking
from staydesk.models.calendar import BlockedDate, PriceOverride
from staydesk.models.guest import Guest
from staydesk.models.property import Property
from staydesk.models.user import User

__all__ = [
    "Activity",
    "ActivityBooking",
    "AddOn",
    "BlockedDate",
    "Booking",
    "BookingAddOn",
    "Guest",
    "PriceOverride",
    "Property",
    "User",
]

"""Seed the database with a sample estate for local development.

Creates an admin user, lodgings, activities, add-ons, a few guests, blocked
dates, price overrides, and reservations committed through the reservation writer
so the calendar is consistent.

Run inside Docker:
    docker compose exec backend python -m scripts.seed_data
"""

import asyncio
import sys
from datetime import date, timedelta
from decimal import Decimal
from pathlib import Path

# Add backend to path so imports work when run as a script
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sqlalchemy import delete

from staydesk.auth.jwt import create_access_token
from staydesk.config import settings
from staydesk.database import Database
from staydesk.errors import ConflictError
from staydesk.models import Activity, AddOn, BlockedDate, Guest, PriceOverride, Property, User
from staydesk.services.add_on_service import AddOnSelection
from staydesk.services.reservation_writer import ReservationRequest, commit_reservation
from staydesk.services.resources import ResourceKind

# ---------------------------------------------------------------------------
# Seed data definitions
# ---------------------------------------------------------------------------

ADMIN_USER = {
    "email": "admin@staydesk.local",
    "name": "Estate Manager",
}

PROPERTIES = [
    {
        "name": "River Lodge",
        "slug": "river-lodge",
        "description": "Timber lodge on the riverbank with a wood stove and a private deck.",
        "location": "North bank",
        "property_type": "lodge",
        "max_guests": 6,
        "base_price_per_night": Decimal("180.00"),
        "amenities": ["wifi", "kitchen", "wood stove", "deck"],
    },
    {
        "name": "Orchard Cottage",
        "slug": "orchard-cottage",
        "description": "Stone cottage among the apple trees, ideal for couples.",
        "location": "Orchard",
        "property_type": "cottage",
        "max_guests": 2,
        "base_price_per_night": Decimal("100.00"),
        "amenities": ["wifi", "breakfast basket", "garden"],
    },
    {
        "name": "Hilltop Villa",
        "slug": "hilltop-villa",
        "description": "Four-bedroom villa with pool and valley views.",
        "location": "Hilltop",
        "property_type": "villa",
        "max_guests": 8,
        "base_price_per_night": Decimal("420.00"),
        "amenities": ["wifi", "pool", "air conditioning", "parking"],
    },
    {
        "name": "Meadow Bell Tent",
        "slug": "meadow-bell-tent",
        "description": "Furnished canvas bell tent with a fire pit.",
        "location": "East meadow",
        "property_type": "tent",
        "max_guests": 3,
        "base_price_per_night": Decimal("65.00"),
        "amenities": ["fire pit", "shared showers"],
        "status": "maintenance",
    },
]

ACTIVITIES = [
    {
        "name": "Guided Forest Walk",
        "slug": "guided-forest-walk",
        "description": "Two hours through the old forest with a ranger.",
        "location": "Trailhead",
        "activity_type": "hiking",
        "duration_minutes": 120,
        "price": Decimal("25.00"),
        "min_participants": 1,
        "max_participants": 12,
        "time_slots": ["09:00", "14:00"],
    },
    {
        "name": "Sunset Kayak",
        "slug": "sunset-kayak",
        "description": "Paddle the lake at dusk. Kayaks and vests provided.",
        "location": "Boathouse",
        "activity_type": "water",
        "duration_minutes": 90,
        "price": Decimal("40.00"),
        "min_participants": 2,
        "max_participants": 8,
        "time_slots": ["18:00"],
    },
]

GLOBAL_ADD_ONS = [
    {"name": "Airport Transfer", "description": "One-way transfer from the airport.", "price": Decimal("80.00")},
    {"name": "Welcome Basket", "description": "Local wine, cheese and fruit on arrival.", "price": Decimal("25.00")},
    {"name": "Late Check-out", "description": "Keep the room until 15:00.", "price": Decimal("30.00")},
    {"name": "Early Check-in", "description": "Arrive from 10:00.", "price": Decimal("25.00")},
]

GUESTS = [
    {"name": "Ana Kovač", "email": "ana.kovac@example.com", "phone": "+385 91 555 0101"},
    {"name": "Sam Okafor", "email": "sam.okafor@example.com", "phone": "+44 7700 900123"},
    {"name": "Lee Tanaka", "email": "lee.tanaka@example.com"},
]


async def _clear(session) -> None:
    """Remove previously seeded rows so the script can be re-run."""
    slugs = [p["slug"] for p in PROPERTIES]
    activity_slugs = [a["slug"] for a in ACTIVITIES]
    emails = [g["email"] for g in GUESTS]
    add_on_names = [a["name"] for a in GLOBAL_ADD_ONS]

    await session.execute(delete(Property).where(Property.slug.in_(slugs)))
    await session.execute(delete(Activity).where(Activity.slug.in_(activity_slugs)))
    await session.execute(delete(Guest).where(Guest.email.in_(emails)))
    await session.execute(delete(AddOn).where(AddOn.is_global.is_(True), AddOn.name.in_(add_on_names)))
    await session.execute(delete(User).where(User.email == ADMIN_USER["email"]))
    await session.commit()


async def seed() -> None:
    """Populate the database with the sample estate.

    Idempotent: seeded rows are deleted and re-created on every run.
    """
    database = Database.from_settings(settings)
    try:
        async with database.session_factory() as session:
            await _clear(session)

            # ------------------------------------------------------------------
            # 1. Admin user
            # ------------------------------------------------------------------
            admin = User(**ADMIN_USER, role="admin", is_active=True)
            session.add(admin)
            await session.flush()
            print(f"✅ Created admin user: {admin.email} (id={admin.id})")

            # ------------------------------------------------------------------
            # 2. Catalogue
            # ------------------------------------------------------------------
            properties = [Property(**data) for data in PROPERTIES]
            activities = [Activity(**data) for data in ACTIVITIES]
            guests = [Guest(**data) for data in GUESTS]
            session.add_all([*properties, *activities, *guests])
            await session.flush()
            for prop in properties:
                print(f"   🏠 {prop.name} ({prop.property_type}, ${prop.base_price_per_night}/night)")
            for activity in activities:
                print(f"   🛶 {activity.name} (up to {activity.max_participants}, slots {activity.time_slots})")

            # ------------------------------------------------------------------
            # 3. Calendar overrides
            # ------------------------------------------------------------------
            today = date.today()
            lodge, cottage, villa, _ = properties
            walk, kayak = activities

            session.add_all(
                [
                    BlockedDate(property_id=villa.id, date=today + timedelta(days=10), reason="maintenance"),
                    BlockedDate(property_id=villa.id, date=today + timedelta(days=11), reason="maintenance"),
                    BlockedDate(activity_id=kayak.id, date=today + timedelta(days=3), reason="lake closed"),
                ]
            )
            # Weekend rates for the next four weeks
            for offset in range(28):
                day = today + timedelta(days=offset)
                if day.weekday() in (4, 5):
                    session.add(PriceOverride(property_id=lodge.id, date=day, price=Decimal("220.00")))
                    session.add(PriceOverride(property_id=cottage.id, date=day, price=Decimal("150.00")))
            await session.commit()
            print("✅ Created blocked dates and weekend price overrides")

            firewood = AddOn(
                name="Firewood Bundle",
                description="A week of dry oak for the wood stove.",
                price=Decimal("15.00"),
                is_global=False,
                property_id=lodge.id,
            )
            add_ons = [AddOn(**data) for data in GLOBAL_ADD_ONS]
            session.add_all([*add_ons, firewood])
            await session.commit()
            print(f"✅ Created {len(add_ons) + 1} add-ons")
            airport_transfer = add_ons[0]

            # ------------------------------------------------------------------
            # 4. Reservations through the writer
            # ------------------------------------------------------------------
            requests = [
                ReservationRequest(
                    kind=ResourceKind.PROPERTY,
                    resource_id=lodge.id,
                    guest_id=guests[0].id,
                    start=today + timedelta(days=2),
                    end=today + timedelta(days=5),
                    party_size=4,
                    add_ons=(
                        AddOnSelection(add_on_id=airport_transfer.id),
                        AddOnSelection(add_on_id=firewood.id, quantity=2),
                    ),
                ),
                ReservationRequest(
                    kind=ResourceKind.PROPERTY,
                    resource_id=cottage.id,
                    guest_id=guests[1].id,
                    start=today + timedelta(days=1),
                    end=today + timedelta(days=4),
                    party_size=2,
                    special_requests="Late check-in",
                ),
                ReservationRequest(
                    kind=ResourceKind.ACTIVITY,
                    resource_id=walk.id,
                    guest_id=guests[2].id,
                    start=today + timedelta(days=2),
                    slot_time="09:00",
                    party_size=5,
                ),
                ReservationRequest(
                    kind=ResourceKind.ACTIVITY,
                    resource_id=kayak.id,
                    guest_id=guests[0].id,
                    start=today + timedelta(days=4),
                    slot_time="18:00",
                    party_size=4,
                ),
            ]
            committed = 0
            for request in requests:
                try:
                    result = await commit_reservation(session, request)
                except ConflictError as e:
                    await session.rollback()
                    print(f"   ⚠️  Skipped reservation: {e.message}")
                    continue
                committed += 1
                print(f"   📅 {request.kind.value} reservation {result.reservation.id} ({result.reservation.total_price})")

            token = create_access_token({"sub": str(admin.id)})

        print()
        print("=" * 60)
        print("📊 Seed Summary")
        print("=" * 60)
        print(f"   Properties:    {len(PROPERTIES)}")
        print(f"   Activities:    {len(ACTIVITIES)}")
        print(f"   Add-ons:       {len(GLOBAL_ADD_ONS) + 1}")
        print(f"   Guests:        {len(GUESTS)}")
        print(f"   Reservations:  {committed}")
        print("=" * 60)
        print(f"Admin bearer token ({settings.jwt_access_token_expire_minutes} min):")
        print(token)
    finally:
        await database.dispose()


if __name__ == "__main__":
    asyncio.run(seed())

"""Shared test configuration and fixtures.

Each test gets its own SQLite database file (aiosqlite driver) with the full
schema created up front, so tests are isolated without transactional tricks
and can open several sessions against the same store.
"""

import os

os.environ.setdefault("JWT_SECRET_KEY", "staydesk-test-secret-key-not-for-production")
os.environ.setdefault("ENVIRONMENT", "test")

from collections.abc import AsyncGenerator
from decimal import Decimal

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession

from staydesk.auth.jwt import create_access_token
from staydesk.database import Database
from staydesk.main import app
from staydesk.models.activity import Activity
from staydesk.models.add_on import AddOn
from staydesk.models.guest import Guest
from staydesk.models.property import Property
from staydesk.models.user import User

# ---------------------------------------------------------------------------
# Per-test database
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def database(tmp_path) -> AsyncGenerator[Database, None]:
    """A throwaway database with every table created."""
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'staydesk_test.db'}")
    await db.create_all()
    yield db
    await db.drop_all()
    await db.dispose()


@pytest_asyncio.fixture
async def serialized_database(database: Database) -> AsyncGenerator[Database, None]:
    """A second handle on the test database whose transactions take the write lock up front.

    SQLite ignores ``SELECT ... FOR UPDATE``. Starting every transaction with
    ``BEGIN IMMEDIATE`` makes concurrent writers queue the way the row lock
    makes them queue on PostgreSQL.
    """
    db = Database(database.url)

    @event.listens_for(db.engine.sync_engine, "connect")
    def _driver_autocommit(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(db.engine.sync_engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    yield db
    await db.dispose()


@pytest_asyncio.fixture
async def db_session(database: Database) -> AsyncGenerator[AsyncSession, None]:
    """Yield a session on the test database. Fixtures commit what they create."""
    async with database.session_factory() as session:
        yield session


# ---------------------------------------------------------------------------
# HTTP client
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def client(database: Database) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client wired to the app, with ``get_db`` serving the test database.

    The ASGI transport does not run the lifespan, so the database the lifespan
    would open is attached here instead.
    """
    app.state.database = database
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


# ---------------------------------------------------------------------------
# Staff identity
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def admin_user(db_session: AsyncSession) -> User:
    """Create an active admin user in the test database."""
    user = User(email="admin@staydesk.test", name="Test Admin", role="admin", is_active=True)
    db_session.add(user)
    await db_session.flush()
    await db_session.refresh(user)
    await db_session.commit()
    return user


@pytest_asyncio.fixture
async def auth_headers(admin_user: User) -> dict[str, str]:
    """Authorization headers carrying a valid admin access token."""
    token = create_access_token({"sub": str(admin_user.id)})
    return {"Authorization": f"Bearer {token}"}


# ---------------------------------------------------------------------------
# Catalogue
# ---------------------------------------------------------------------------


async def _persist(db_session: AsyncSession, obj):
    db_session.add(obj)
    await db_session.flush()
    await db_session.refresh(obj)
    await db_session.commit()
    return obj


@pytest_asyncio.fixture
async def test_property(db_session: AsyncSession) -> Property:
    """An active cottage for up to four guests at 100.00 a night."""
    return await _persist(
        db_session,
        Property(
            name="Orchard Cottage",
            slug="orchard-cottage",
            description="Stone cottage among the apple trees",
            location="Orchard",
            property_type="cottage",
            max_guests=4,
            base_price_per_night=Decimal("100.00"),
            amenities=["wifi", "garden"],
            status="active",
        ),
    )


@pytest_asyncio.fixture
async def test_activity(db_session: AsyncSession) -> Activity:
    """An active activity with two daily slots of ten seats at 25.00 per participant."""
    return await _persist(
        db_session,
        Activity(
            name="Guided Forest Walk",
            slug="guided-forest-walk",
            location="Trailhead",
            activity_type="hiking",
            duration_minutes=120,
            price=Decimal("25.00"),
            min_participants=1,
            max_participants=10,
            time_slots=["09:00", "14:00"],
            status="active",
        ),
    )


@pytest_asyncio.fixture
async def test_guest(db_session: AsyncSession) -> Guest:
    return await _persist(
        db_session,
        Guest(name="Ana Kovac", email="ana@example.com", phone="+385 91 555 0101"),
    )


@pytest_asyncio.fixture
async def airport_transfer(db_session: AsyncSession) -> AddOn:
    """A global add-on at 80.00, offered with every property."""
    return await _persist(
        db_session,
        AddOn(name="Airport Transfer", price=Decimal("80.00"), is_global=True, is_active=True),
    )


@pytest_asyncio.fixture
async def firewood(db_session: AsyncSession, test_property: Property) -> AddOn:
    """An add-on at 15.00 sold only with ``test_property``."""
    return await _persist(
        db_session,
        AddOn(
            name="Firewood Bundle",
            price=Decimal("15.00"),
            is_global=False,
            property_id=test_property.id,
            is_active=True,
        ),
    )

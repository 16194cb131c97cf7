"""Tests for the account-less public booking endpoints."""

import uuid
from decimal import Decimal
from unittest.mock import AsyncMock, patch

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from staydesk.models.activity import Activity
from staydesk.models.guest import Guest
from staydesk.models.property import Property

pytestmark = pytest.mark.asyncio

GUEST = {"name": "Marta Horvat", "email": "Marta@Example.com", "phone": "+385 98 123 4567"}


def _stay_payload(prop: Property, check_in: str = "2032-03-01", check_out: str = "2032-03-04", **extra) -> dict:
    return {
        "property_id": str(prop.id),
        "check_in": check_in,
        "check_out": check_out,
        "num_guests": 2,
        "guest": GUEST,
        **extra,
    }


async def _guest_count(db: AsyncSession) -> int:
    return (await db.execute(select(func.count()).select_from(Guest))).scalar_one()


# ---------------------------------------------------------------------------
# POST /api/v1/public/bookings
# ---------------------------------------------------------------------------


class TestPublicBooking:
    """Guests booking stays without an account."""

    async def test_books_and_registers_guest(
        self, client: AsyncClient, db_session: AsyncSession, test_property: Property
    ) -> None:
        response = await client.post("/api/v1/public/bookings", json=_stay_payload(test_property))

        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "pending"
        assert Decimal(data["total_price"]) == Decimal("300.00")

        guest = (await db_session.execute(select(Guest).where(Guest.email == "marta@example.com"))).scalar_one()
        assert str(guest.id) == data["guest_id"]

    async def test_returning_guest_is_reused(
        self, client: AsyncClient, db_session: AsyncSession, test_property: Property
    ) -> None:
        first = await client.post("/api/v1/public/bookings", json=_stay_payload(test_property))
        second = await client.post(
            "/api/v1/public/bookings",
            json=_stay_payload(test_property, "2032-03-10", "2032-03-12"),
        )

        assert second.json()["guest_id"] == first.json()["guest_id"]
        assert await _guest_count(db_session) == 1

    async def test_conflict_is_409(self, client: AsyncClient, test_property: Property) -> None:
        await client.post("/api/v1/public/bookings", json=_stay_payload(test_property))

        response = await client.post(
            "/api/v1/public/bookings",
            json=_stay_payload(test_property, "2032-03-03", "2032-03-05"),
        )
        assert response.status_code == 409
        assert response.json()["detail"]["date"] == "2032-03-03"

    async def test_idempotency_header_replays(self, client: AsyncClient, test_property: Property) -> None:
        headers = {"Idempotency-Key": "public-form-7"}
        first = await client.post("/api/v1/public/bookings", json=_stay_payload(test_property), headers=headers)
        second = await client.post("/api/v1/public/bookings", json=_stay_payload(test_property), headers=headers)

        assert first.status_code == 201
        assert second.status_code == 200
        assert second.json()["id"] == first.json()["id"]

    async def test_invalid_email_is_422(self, client: AsyncClient, test_property: Property) -> None:
        body = _stay_payload(test_property)
        body["guest"] = {**GUEST, "email": "not-an-email"}
        response = await client.post("/api/v1/public/bookings", json=body)
        assert response.status_code == 422

    async def test_activity_booking(self, client: AsyncClient, test_activity: Activity) -> None:
        response = await client.post(
            "/api/v1/public/activity-bookings",
            json={
                "activity_id": str(test_activity.id),
                "slot_date": "2032-03-01",
                "slot_time": "14:00",
                "participants": 3,
                "guest": GUEST,
            },
        )
        assert response.status_code == 201
        assert Decimal(response.json()["total_price"]) == Decimal("75.00")

    async def test_store_outage_during_guest_lookup_is_503(self, client: AsyncClient, test_property: Property) -> None:
        outage = OperationalError("SELECT guests", {}, ConnectionRefusedError("connection refused"))

        with patch("staydesk.services.guest_service.get_guest_by_email", AsyncMock(side_effect=outage)):
            response = await client.post("/api/v1/public/bookings", json=_stay_payload(test_property))

        assert response.status_code == 503
        assert "retry-after" in response.headers


# ---------------------------------------------------------------------------
# GET /api/v1/public/bookings/{id}
# ---------------------------------------------------------------------------


class TestPublicLookup:
    """Guests reading their own booking."""

    async def test_lookup_with_matching_email(self, client: AsyncClient, test_property: Property) -> None:
        created = await client.post("/api/v1/public/bookings", json=_stay_payload(test_property))

        response = await client.get(
            f"/api/v1/public/bookings/{created.json()['id']}",
            params={"email": "marta@example.com"},
        )
        assert response.status_code == 200
        assert response.json()["property"]["slug"] == "orchard-cottage"

    async def test_wrong_email_looks_like_unknown_booking(self, client: AsyncClient, test_property: Property) -> None:
        created = await client.post("/api/v1/public/bookings", json=_stay_payload(test_property))

        wrong_email = await client.get(
            f"/api/v1/public/bookings/{created.json()['id']}",
            params={"email": "someone@example.com"},
        )
        unknown = await client.get(
            f"/api/v1/public/bookings/{uuid.uuid4()}",
            params={"email": "marta@example.com"},
        )
        assert wrong_email.status_code == 404
        assert wrong_email.json() == unknown.json()


"""Tests for blocked dates and price override endpoints."""

import uuid
from decimal import Decimal

import pytest
from httpx import AsyncClient

from staydesk.models.activity import Activity
from staydesk.models.property import Property

pytestmark = pytest.mark.asyncio


# ---------------------------------------------------------------------------
# /api/v1/blocked-dates
# ---------------------------------------------------------------------------


class TestBlockedDates:
    """Closing resources on given dates."""

    async def test_block_range_creates_one_row_per_date(
        self, client: AsyncClient, auth_headers: dict, test_property: Property
    ) -> None:
        response = await client.post(
            "/api/v1/blocked-dates",
            json={
                "property_id": str(test_property.id),
                "date": "2032-02-01",
                "end_date": "2032-02-04",
                "reason": "roof repair",
            },
            headers=auth_headers,
        )
        assert response.status_code == 201
        data = response.json()
        assert data["total"] == 3
        assert [b["date"] for b in data["items"]] == ["2032-02-01", "2032-02-02", "2032-02-03"]
        assert all(b["reason"] == "roof repair" for b in data["items"])

    async def test_blocked_date_stops_booking(
        self, client: AsyncClient, auth_headers: dict, test_property: Property
    ) -> None:
        await client.post(
            "/api/v1/blocked-dates",
            json={"property_id": str(test_property.id), "date": "2032-02-02"},
            headers=auth_headers,
        )

        check = await client.post(
            "/api/v1/availability/check",
            json={"property_id": str(test_property.id), "start_date": "2032-02-01", "end_date": "2032-02-03"},
        )
        assert check.json()["reason"] == "blocked"
        assert check.json()["conflict_date"] == "2032-02-02"

    async def test_double_block_is_409(self, client: AsyncClient, auth_headers: dict, test_property: Property) -> None:
        body = {"property_id": str(test_property.id), "date": "2032-02-02"}
        await client.post("/api/v1/blocked-dates", json=body, headers=auth_headers)

        response = await client.post(
            "/api/v1/blocked-dates",
            json={**body, "date": "2032-02-01", "end_date": "2032-02-05"},
            headers=auth_headers,
        )
        assert response.status_code == 409

        listing = await client.get(
            "/api/v1/blocked-dates", params={"property_id": str(test_property.id)}, headers=auth_headers
        )
        assert listing.json()["total"] == 1

    async def test_block_activity(self, client: AsyncClient, auth_headers: dict, test_activity: Activity) -> None:
        response = await client.post(
            "/api/v1/blocked-dates",
            json={"activity_id": str(test_activity.id), "date": "2032-02-02", "reason": "storm warning"},
            headers=auth_headers,
        )
        assert response.status_code == 201
        assert response.json()["items"][0]["activity_id"] == str(test_activity.id)

    async def test_both_targets_is_422(
        self, client: AsyncClient, auth_headers: dict, test_property: Property, test_activity: Activity
    ) -> None:
        response = await client.post(
            "/api/v1/blocked-dates",
            json={"property_id": str(test_property.id), "activity_id": str(test_activity.id), "date": "2032-02-02"},
            headers=auth_headers,
        )
        assert response.status_code == 422

    async def test_unknown_property_is_404(self, client: AsyncClient, auth_headers: dict) -> None:
        response = await client.post(
            "/api/v1/blocked-dates",
            json={"property_id": str(uuid.uuid4()), "date": "2032-02-02"},
            headers=auth_headers,
        )
        assert response.status_code == 404

    async def test_unblock(self, client: AsyncClient, auth_headers: dict, test_property: Property) -> None:
        created = await client.post(
            "/api/v1/blocked-dates",
            json={"property_id": str(test_property.id), "date": "2032-02-02"},
            headers=auth_headers,
        )
        block_id = created.json()["items"][0]["id"]

        response = await client.delete(f"/api/v1/blocked-dates/{block_id}", headers=auth_headers)
        assert response.json() == {"message": "Date unblocked"}

        again = await client.delete(f"/api/v1/blocked-dates/{block_id}", headers=auth_headers)
        assert again.status_code == 404


# ---------------------------------------------------------------------------
# /api/v1/price-overrides
# ---------------------------------------------------------------------------


class TestPriceOverrides:
    """Date-specific pricing."""

    async def test_upsert_replaces_price_for_same_date(
        self, client: AsyncClient, auth_headers: dict, test_property: Property
    ) -> None:
        body = {"property_id": str(test_property.id), "date": "2032-02-14", "price": "180.00"}
        first = await client.put("/api/v1/price-overrides", json=body, headers=auth_headers)
        second = await client.put("/api/v1/price-overrides", json={**body, "price": "210.00"}, headers=auth_headers)

        assert second.json()["id"] == first.json()["id"]
        assert Decimal(second.json()["price"]) == Decimal("210.00")

        listing = await client.get(
            "/api/v1/price-overrides", params={"property_id": str(test_property.id)}, headers=auth_headers
        )
        assert listing.json()["total"] == 1

    async def test_override_feeds_quotes(
        self, client: AsyncClient, auth_headers: dict, test_property: Property
    ) -> None:
        await client.put(
            "/api/v1/price-overrides",
            json={"property_id": str(test_property.id), "date": "2032-02-14", "price": "180.00"},
            headers=auth_headers,
        )

        check = await client.post(
            "/api/v1/availability/check",
            json={"property_id": str(test_property.id), "start_date": "2032-02-13", "end_date": "2032-02-15"},
        )
        assert Decimal(check.json()["total_price"]) == Decimal("280.00")

    async def test_remove_override(self, client: AsyncClient, auth_headers: dict, test_activity: Activity) -> None:
        created = await client.put(
            "/api/v1/price-overrides",
            json={"activity_id": str(test_activity.id), "date": "2032-02-14", "price": "30.00"},
            headers=auth_headers,
        )

        response = await client.delete(f"/api/v1/price-overrides/{created.json()['id']}", headers=auth_headers)
        assert response.json() == {"message": "Price override removed"}

    async def test_negative_price_is_422(self, client: AsyncClient, auth_headers: dict, test_property: Property) -> None:
        response = await client.put(
            "/api/v1/price-overrides",
            json={"property_id": str(test_property.id), "date": "2032-02-14", "price": "-5.00"},
            headers=auth_headers,
        )
        assert response.status_code == 422

    async def test_requires_auth(self, client: AsyncClient, test_property: Property) -> None:
        response = await client.get("/api/v1/price-overrides")
        assert response.status_code in (401, 403)

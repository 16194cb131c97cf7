"""Tests for the Stripe webhook endpoint with signature verification mocked."""

import uuid
from datetime import date
from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import pytest
import stripe
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from staydesk.errors import TransientPersistenceError
from staydesk.models.booking import Booking
from staydesk.models.guest import Guest
from staydesk.models.property import Property
from staydesk.services.reservation_writer import ReservationRequest, commit_reservation
from staydesk.services.resources import ResourceKind

pytestmark = pytest.mark.asyncio

WEBHOOK_URL = "/api/v1/webhooks/stripe"


class _StripeObj(SimpleNamespace):
    def __getitem__(self, key: str):
        return getattr(self, key)


def _event(event_type: str, metadata: dict | None = None) -> _StripeObj:
    return _StripeObj(
        type=event_type,
        id=f"evt_test_{uuid.uuid4().hex[:8]}",
        data=_StripeObj(object=_StripeObj(id="cs_test_hook", metadata=metadata or {})),
    )


async def _pending_booking(db: AsyncSession, prop: Property, guest: Guest) -> Booking:
    result = await commit_reservation(
        db,
        ReservationRequest(
            kind=ResourceKind.PROPERTY,
            resource_id=prop.id,
            guest_id=guest.id,
            start=date(2032, 5, 1),
            end=date(2032, 5, 4),
            party_size=2,
        ),
    )
    return result.reservation


class TestStripeWebhook:
    """Signature handling and event dispatch."""

    async def test_invalid_signature_is_400(self, client: AsyncClient) -> None:
        with patch(
            "staydesk.api.v1.webhooks.construct_webhook_event",
            side_effect=stripe.SignatureVerificationError("bad signature", "t=1,v1=bad"),
        ):
            response = await client.post(WEBHOOK_URL, content=b"{}", headers={"stripe-signature": "t=1,v1=bad"})
        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid signature"

    async def test_invalid_payload_is_400(self, client: AsyncClient) -> None:
        with patch("staydesk.api.v1.webhooks.construct_webhook_event", side_effect=ValueError("not json")):
            response = await client.post(WEBHOOK_URL, content=b"garbage")
        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid payload"

    async def test_unhandled_event_type_is_ignored(self, client: AsyncClient) -> None:
        with patch("staydesk.api.v1.webhooks.construct_webhook_event", return_value=_event("customer.created")):
            response = await client.post(WEBHOOK_URL, content=b"{}")
        assert response.json() == {"status": "ignored"}

    async def test_checkout_completed_confirms_booking(
        self,
        client: AsyncClient,
        auth_headers: dict,
        db_session: AsyncSession,
        test_property: Property,
        test_guest: Guest,
    ) -> None:
        booking = await _pending_booking(db_session, test_property, test_guest)
        event = _event(
            "checkout.session.completed",
            {"reservation_id": str(booking.id), "reservation_kind": "property"},
        )

        with patch("staydesk.api.v1.webhooks.construct_webhook_event", return_value=event):
            response = await client.post(WEBHOOK_URL, content=b"{}")

        assert response.json() == {"status": "processed"}
        detail = await client.get(f"/api/v1/bookings/{booking.id}", headers=auth_headers)
        assert detail.json()["status"] == "confirmed"

    async def test_failed_payment_releases_dates(
        self,
        client: AsyncClient,
        auth_headers: dict,
        db_session: AsyncSession,
        test_property: Property,
        test_guest: Guest,
    ) -> None:
        booking = await _pending_booking(db_session, test_property, test_guest)
        event = _event("payment_intent.payment_failed", {"reservation_id": str(booking.id)})

        with patch("staydesk.api.v1.webhooks.construct_webhook_event", return_value=event):
            await client.post(WEBHOOK_URL, content=b"{}")

        detail = await client.get(f"/api/v1/bookings/{booking.id}", headers=auth_headers)
        assert detail.json()["status"] == "cancelled"
        assert detail.json()["cancellation_reason"] == "Payment failed"

    async def test_store_outage_is_503_so_stripe_retries(self, client: AsyncClient) -> None:
        event = _event("payment_intent.succeeded", {"reservation_id": str(uuid.uuid4())})

        with (
            patch("staydesk.api.v1.webhooks.construct_webhook_event", return_value=event),
            patch.dict(
                "staydesk.api.v1.webhooks.EVENT_HANDLERS",
                {"payment_intent.succeeded": AsyncMock(side_effect=TransientPersistenceError("down"))},
            ),
        ):
            response = await client.post(WEBHOOK_URL, content=b"{}")

        assert response.status_code == 503
        assert "retry-after" in response.headers

    async def test_handler_crash_is_500(self, client: AsyncClient) -> None:
        event = _event("payment_intent.succeeded", {"reservation_id": str(uuid.uuid4())})

        with (
            patch("staydesk.api.v1.webhooks.construct_webhook_event", return_value=event),
            patch.dict(
                "staydesk.api.v1.webhooks.EVENT_HANDLERS",
                {"payment_intent.succeeded": AsyncMock(side_effect=RuntimeError("boom"))},
            ),
        ):
            response = await client.post(WEBHOOK_URL, content=b"{}")

        assert response.status_code == 500

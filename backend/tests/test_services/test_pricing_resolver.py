"""Tests for per-date price resolution and totals."""

from datetime import date, timedelta
from decimal import Decimal

from staydesk.models.calendar import PriceOverride
from staydesk.services.pricing_resolver import quote, resolve_price, resolve_prices, total_for
from staydesk.services.resources import resource_from_activity, resource_from_property

AUG_1 = date(2031, 8, 1)


class TestResolvePrices:
    async def test_base_price_without_overrides(self, db_session, test_property):
        prices = await resolve_prices(db_session, resource_from_property(test_property), AUG_1, AUG_1 + timedelta(days=2))
        assert prices == {AUG_1: Decimal("100.00"), AUG_1 + timedelta(days=1): Decimal("100.00")}

    async def test_override_replaces_base_on_its_date_only(self, db_session, test_property):
        """Base 100 with 150 on the middle night totals 350 for three nights."""
        middle = AUG_1 + timedelta(days=1)
        db_session.add(PriceOverride(property_id=test_property.id, date=middle, price=Decimal("150.00")))
        await db_session.commit()
        resource = resource_from_property(test_property)

        result = await quote(db_session, resource, AUG_1, AUG_1 + timedelta(days=3), party_size=2)

        assert result.unit_prices[AUG_1] == Decimal("100.00")
        assert result.unit_prices[middle] == Decimal("150.00")
        assert result.unit_prices[AUG_1 + timedelta(days=2)] == Decimal("100.00")
        assert result.total == Decimal("350.00")

    async def test_resolve_single_date(self, db_session, test_property):
        db_session.add(PriceOverride(property_id=test_property.id, date=AUG_1, price=Decimal("180.00")))
        await db_session.commit()

        price = await resolve_price(db_session, resource_from_property(test_property), AUG_1)

        assert price == Decimal("180.00")

    async def test_activity_override_does_not_leak_to_property(self, db_session, test_property, test_activity):
        db_session.add(PriceOverride(activity_id=test_activity.id, date=AUG_1, price=Decimal("30.00")))
        await db_session.commit()

        property_price = await resolve_price(db_session, resource_from_property(test_property), AUG_1)
        activity_price = await resolve_price(db_session, resource_from_activity(test_activity), AUG_1)

        assert property_price == Decimal("100.00")
        assert activity_price == Decimal("30.00")


class TestTotals:
    def test_stay_total_ignores_party_size(self, test_property):
        prices = {AUG_1: Decimal("100.00"), AUG_1 + timedelta(days=1): Decimal("120.00")}
        assert total_for(resource_from_property(test_property), prices, 4) == Decimal("220.00")

    def test_activity_total_is_price_per_participant(self, test_activity):
        prices = {AUG_1: Decimal("25.00")}
        assert total_for(resource_from_activity(test_activity), prices, 3) == Decimal("75.00")

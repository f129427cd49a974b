"""Checkout — option tables and server-side cruise quotes."""

from __future__ import annotations

from decimal import Decimal

from tripgo.bookings.models import Booking
from tripgo.common.constants import BookingStatus, BookingType
from tests.conftest import future


async def test_options_expose_price_tables(client):
    resp = await client.get("/api/v1/checkout/options")
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["steps"] == ["details", "payment", "confirm"]
    assert set(data["cabins"]) == {"Interior", "Oceanview", "Balcony", "Suite"}
    assert Decimal(str(data["addons"]["drinks"])) == Decimal("25")
    assert Decimal(str(data["tax_rate"])) == Decimal("0.12")
    assert Decimal(str(data["service_fee"])) == Decimal("59")


async def test_quote_uses_stored_price(client, cruise):
    resp = await client.post(
        f"/api/v1/checkout/cruises/{cruise.id}/quote",
        json={"sailing_date": future().isoformat(), "adults": 2},
    )
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["bookable"] is True
    assert data["next_step"] == "payment"
    assert data["cruise_name"] == cruise.name
    assert data["quote"]["cabin"] == "Balcony"
    assert Decimal(str(data["quote"]["taxes"])) == Decimal("302")
    assert Decimal(str(data["quote"]["total"])) == Decimal("2881")


async def test_quote_with_promo_code(client, cruise):
    resp = await client.post(
        f"/api/v1/checkout/cruises/{cruise.id}/quote",
        json={"sailing_date": future().isoformat(), "adults": 2, "promo_code": " sail50 "},
    )
    quote = resp.json()["data"]["quote"]
    assert quote["promo_code"] == "SAIL50"
    assert quote["promo_applied"] is True
    assert Decimal(str(quote["discount"])) == Decimal("50")
    assert Decimal(str(quote["total"])) == Decimal("2825")


async def test_quote_over_capacity_not_bookable(client, db, tenant, customer, cruise):
    sailing = future(15)
    db.add(Booking(
        tenant_id=tenant.id, user_id=customer.id, reference="TG-CHK00001",
        booking_type=BookingType.cruise, cruise_id=cruise.id, sailing_date=sailing,
        guests=9, adults=9, total_amount=Decimal("1"), status=BookingStatus.confirmed,
    ))
    await db.commit()

    resp = await client.post(
        f"/api/v1/checkout/cruises/{cruise.id}/quote",
        json={"sailing_date": sailing.isoformat(), "adults": 2},
    )
    body = resp.json()
    assert body["data"]["bookable"] is False
    assert body["data"]["next_step"] is None
    assert body["data"]["availability"]["remaining_spots"] == 1
    assert body["message"] == "Only 1 spots remaining for this sailing."
    # The price is still computed for display
    assert Decimal(str(body["data"]["quote"]["total"])) == Decimal("2881")


async def test_quote_unknown_cabin(client, cruise):
    resp = await client.post(
        f"/api/v1/checkout/cruises/{cruise.id}/quote",
        json={"sailing_date": future().isoformat(), "cabin": "Penthouse"},
    )
    assert resp.status_code == 422
    assert "cabin" in resp.json()["error"]["errors"]


async def test_quote_requires_sailing_date(client, cruise):
    resp = await client.post(f"/api/v1/checkout/cruises/{cruise.id}/quote", json={"adults": 2})
    assert resp.status_code == 422


async def test_quote_unknown_cruise(client, tenant):
    resp = await client.post(
        "/api/v1/checkout/cruises/00000000-0000-0000-0000-000000000009/quote",
        json={"sailing_date": future().isoformat()},
    )
    assert resp.status_code == 404

"""Catalog — cruise categories, cruises, departures, availability, hotels, packages, reviews."""

from __future__ import annotations

import uuid
from datetime import timedelta
from decimal import Decimal

from tripgo.bookings.models import Booking
from tripgo.catalog.models import Cruise
from tripgo.common.constants import BookingStatus, BookingType
from tests.conftest import _make_cruise, future

CRUISE_BODY = {
    "name": "Greek Isles Explorer",
    "departure_port": "Piraeus",
    "destination": "Aegean Sea",
    "duration": 7,
    "capacity": 40,
    "price": "1499.00",
    "amenities": ["Pool", "Spa"],
}


def _booking(tenant_id, user_id, cruise_id, sailing_date, guests, status):
    return Booking(
        tenant_id=tenant_id,
        user_id=user_id,
        reference=f"TG-{guests:02d}{status.value[:6].upper()}",
        booking_type=BookingType.cruise,
        cruise_id=cruise_id,
        sailing_date=sailing_date,
        guests=guests,
        adults=guests,
        total_amount=Decimal("100"),
        status=status,
    )


# ═════════════════════════════════════════════════════════════════════
# Categories
# ═════════════════════════════════════════════════════════════════════


class TestCategories:

    async def test_create_list_with_counts(self, client, db, tenant, admin_headers):
        resp = await client.post(
            "/api/v1/cruise-categories", json={"name": "Luxury Sailing"}, headers=admin_headers,
        )
        assert resp.status_code == 201
        category = resp.json()["data"]
        assert category["slug"] == "luxury-sailing"

        db.add(Cruise(**_make_cruise(tenant.id, category_id=uuid.UUID(category["id"]))))
        await db.commit()

        listing = await client.get("/api/v1/cruise-categories")
        assert listing.status_code == 200
        items = listing.json()["data"]
        assert len(items) == 1
        assert items[0]["cruise_count"] == 1

    async def test_customer_cannot_create(self, client, customer_headers):
        resp = await client.post(
            "/api/v1/cruise-categories", json={"name": "Nope"}, headers=customer_headers,
        )
        assert resp.status_code == 403

    async def test_delete_in_use_rejected(self, client, db, tenant, admin_headers):
        resp = await client.post(
            "/api/v1/cruise-categories", json={"name": "Family"}, headers=admin_headers,
        )
        category_id = resp.json()["data"]["id"]
        db.add(Cruise(**_make_cruise(tenant.id, category_id=uuid.UUID(category_id))))
        await db.commit()

        resp = await client.delete(f"/api/v1/cruise-categories/{category_id}", headers=admin_headers)
        assert resp.status_code == 400

    async def test_duplicate_explicit_slug(self, client, admin_headers):
        body = {"name": "Expedition", "slug": "expedition"}
        await client.post("/api/v1/cruise-categories", json=body, headers=admin_headers)
        again = await client.post("/api/v1/cruise-categories", json=body, headers=admin_headers)
        assert again.status_code == 409


# ═════════════════════════════════════════════════════════════════════
# Cruises
# ═════════════════════════════════════════════════════════════════════


class TestCruises:

    async def test_create_and_fetch_by_slug(self, client, admin_headers):
        resp = await client.post("/api/v1/cruises", json=CRUISE_BODY, headers=admin_headers)
        assert resp.status_code == 201
        data = resp.json()["data"]
        assert data["slug"] == "greek-isles-explorer"
        assert data["departures"] == []

        by_slug = await client.get("/api/v1/cruises/greek-isles-explorer")
        assert by_slug.status_code == 200
        assert by_slug.json()["data"]["id"] == data["id"]

    async def test_same_name_gets_suffixed_slug(self, client, admin_headers):
        await client.post("/api/v1/cruises", json=CRUISE_BODY, headers=admin_headers)
        resp = await client.post("/api/v1/cruises", json=CRUISE_BODY, headers=admin_headers)
        assert resp.json()["data"]["slug"] == "greek-isles-explorer-2"

    async def test_unknown_category_rejected(self, client, admin_headers):
        resp = await client.post(
            "/api/v1/cruises",
            json={**CRUISE_BODY, "category_id": "00000000-0000-0000-0000-000000000001"},
            headers=admin_headers,
        )
        assert resp.status_code == 404

    async def test_list_filters(self, client, db, tenant):
        db.add_all([
            Cruise(**_make_cruise(tenant.id, name="Cheap Caribbean", price=Decimal("500"))),
            Cruise(**_make_cruise(tenant.id, name="Pricey Caribbean", price=Decimal("3000"))),
            Cruise(**_make_cruise(tenant.id, name="Alaska", destination="Alaska", price=Decimal("900"))),
            Cruise(**_make_cruise(tenant.id, name="Hidden", is_active=False)),
        ])
        await db.commit()

        resp = await client.get("/api/v1/cruises")
        assert resp.json()["data"]["pagination"]["total"] == 3

        resp = await client.get(
            "/api/v1/cruises", params={"destination": "carib", "max_price": "1000"},
        )
        assert [c["name"] for c in resp.json()["data"]["items"]] == ["Cheap Caribbean"]

        resp = await client.get("/api/v1/cruises", params={"search": "alaska"})
        assert [c["name"] for c in resp.json()["data"]["items"]] == ["Alaska"]

    async def test_inactive_only_for_staff(self, client, db, tenant, admin_headers, customer_headers):
        db.add(Cruise(**_make_cruise(tenant.id, name="Hidden", is_active=False)))
        await db.commit()

        staff = await client.get(
            "/api/v1/cruises", params={"include_inactive": "true"}, headers=admin_headers,
        )
        assert staff.json()["data"]["pagination"]["total"] == 1

        public = await client.get(
            "/api/v1/cruises", params={"include_inactive": "true"}, headers=customer_headers,
        )
        assert public.json()["data"]["pagination"]["total"] == 0

    async def test_update_and_delete(self, client, cruise, admin_headers):
        resp = await client.put(
            f"/api/v1/cruises/{cruise.id}", json={"price": "1200.00", "capacity": 12},
            headers=admin_headers,
        )
        assert resp.status_code == 200
        assert Decimal(str(resp.json()["data"]["price"])) == Decimal("1200")
        assert resp.json()["data"]["capacity"] == 12

        resp = await client.delete(f"/api/v1/cruises/{cruise.id}", headers=admin_headers)
        assert resp.status_code == 200
        assert (await client.get(f"/api/v1/cruises/{cruise.id}")).status_code == 404

    async def test_other_tenant_cannot_see_cruise(self, client, cruise, other_tenant):
        resp = await client.get(
            f"/api/v1/cruises/{cruise.id}", headers={"X-Tenant-ID": "acme-travel"},
        )
        assert resp.status_code == 404


# ═════════════════════════════════════════════════════════════════════
# Availability and departures
# ═════════════════════════════════════════════════════════════════════


class TestAvailability:

    async def test_remaining_spots_count_active_bookings(self, client, db, tenant, customer, cruise):
        sailing = future(40)
        db.add_all([
            _booking(tenant.id, customer.id, cruise.id, sailing, 3, BookingStatus.pending),
            _booking(tenant.id, customer.id, cruise.id, sailing, 4, BookingStatus.confirmed),
            _booking(tenant.id, customer.id, cruise.id, sailing, 2, BookingStatus.cancelled),
            _booking(tenant.id, customer.id, cruise.id, future(41), 5, BookingStatus.confirmed),
        ])
        await db.commit()

        resp = await client.post(
            f"/api/v1/cruises/{cruise.id}/availability",
            json={"sailing_date": sailing.isoformat(), "guests": 3},
        )
        data = resp.json()["data"]
        assert data["capacity"] == 10
        assert data["remaining_spots"] == 3
        assert data["available"] is True
        assert Decimal(str(data["total_price"])) == Decimal("3000")

        too_many = await client.post(
            f"/api/v1/cruises/{cruise.id}/availability",
            json={"sailing_date": sailing.isoformat(), "guests": 4},
        )
        assert too_many.json()["data"]["available"] is False
        assert too_many.json()["message"] == "Only 3 spots remaining for this sailing."

    async def test_past_sailing_not_available(self, client, cruise):
        resp = await client.post(
            f"/api/v1/cruises/{cruise.id}/availability",
            json={"sailing_date": (future(0) - timedelta(days=1)).isoformat(), "guests": 1},
        )
        data = resp.json()["data"]
        assert data["available"] is False
        assert data["reason"] == "Sailing date must be in the future."

    async def test_zero_guests_not_available(self, client, cruise):
        resp = await client.post(f"/api/v1/cruises/{cruise.id}/availability", json={"guests": 0})
        assert resp.json()["data"]["available"] is False

    async def test_inactive_cruise_not_available(self, client, db, tenant):
        row = Cruise(**_make_cruise(tenant.id, is_active=False))
        db.add(row)
        await db.commit()
        resp = await client.post(f"/api/v1/cruises/{row.id}/availability", json={"guests": 1})
        assert resp.json()["data"]["reason"] == "Cruise is not available for booking."

    async def test_departures_lifecycle(self, client, cruise, admin_headers):
        body = {
            "departure_date": future(20).isoformat(),
            "return_date": future(27).isoformat(),
            "available_cabins": 30,
        }
        resp = await client.post(
            f"/api/v1/cruises/{cruise.id}/departures", json=body, headers=admin_headers,
        )
        assert resp.status_code == 201
        departure_id = resp.json()["data"]["id"]

        clash = await client.post(
            f"/api/v1/cruises/{cruise.id}/departures", json=body, headers=admin_headers,
        )
        assert clash.status_code == 409

        bad = await client.put(
            f"/api/v1/cruises/departures/{departure_id}",
            json={"return_date": future(10).isoformat()},
            headers=admin_headers,
        )
        assert bad.status_code == 422

        listing = await client.get(f"/api/v1/cruises/{cruise.id}/departures")
        assert [d["id"] for d in listing.json()["data"]] == [departure_id]

        resp = await client.delete(f"/api/v1/cruises/departures/{departure_id}", headers=admin_headers)
        assert resp.status_code == 200


# ═════════════════════════════════════════════════════════════════════
# Hotels and packages
# ═════════════════════════════════════════════════════════════════════


class TestHotelsAndPackages:

    async def test_hotel_crud_and_city_filter(self, client, admin_headers):
        for name, city in (("Harbour View", "Lisbon"), ("Canal House", "Amsterdam")):
            resp = await client.post(
                "/api/v1/hotels",
                json={"name": name, "city": city, "country": "EU", "price_per_night": "120.00"},
                headers=admin_headers,
            )
            assert resp.status_code == 201

        resp = await client.get("/api/v1/hotels", params={"city": "lis"})
        assert [h["name"] for h in resp.json()["data"]["items"]] == ["Harbour View"]

        by_slug = await client.get("/api/v1/hotels/canal-house")
        assert by_slug.json()["data"]["city"] == "Amsterdam"

    async def test_package_create_and_duration_filter(self, client, admin_headers):
        for name, duration in (("Kyoto Week", 7), ("Safari Long", 12)):
            await client.post(
                "/api/v1/packages",
                json={"name": name, "destination": "Far", "duration": duration, "price": "999.00"},
                headers=admin_headers,
            )
        resp = await client.get("/api/v1/packages", params={"duration": 12})
        assert [p["name"] for p in resp.json()["data"]["items"]] == ["Safari Long"]

    async def test_employee_cannot_create_hotel(self, client, employee_headers):
        resp = await client.post(
            "/api/v1/hotels",
            json={"name": "X", "city": "Y", "country": "Z", "price_per_night": "1.00"},
            headers=employee_headers,
        )
        assert resp.status_code == 403


# ═════════════════════════════════════════════════════════════════════
# Reviews
# ═════════════════════════════════════════════════════════════════════


class TestReviews:

    async def test_reviews_update_rating(self, client, db, cruise, customer_headers, admin_headers):
        first = await client.post(
            f"/api/v1/cruises/{cruise.id}/reviews",
            json={"rating": 5, "comment": "Wonderful"},
            headers=customer_headers,
        )
        assert first.status_code == 201
        assert first.json()["data"]["user_name"] == "Casey User"

        await client.post(
            f"/api/v1/cruises/{cruise.id}/reviews", json={"rating": 4}, headers=admin_headers,
        )

        detail = await client.get(f"/api/v1/cruises/{cruise.id}")
        assert Decimal(str(detail.json()["data"]["rating"])) == Decimal("4.5")
        assert detail.json()["data"]["review_count"] == 2

        listing = await client.get(f"/api/v1/cruises/{cruise.id}/reviews")
        assert listing.json()["data"]["pagination"]["total"] == 2

    async def test_review_requires_login(self, client, hotel):
        resp = await client.post(f"/api/v1/hotels/{hotel.id}/reviews", json={"rating": 3})
        assert resp.status_code == 401

    async def test_rating_out_of_range(self, client, package, customer_headers):
        resp = await client.post(
            f"/api/v1/packages/{package.id}/reviews", json={"rating": 6}, headers=customer_headers,
        )
        assert resp.status_code == 422

"""Tenant resolution and super-admin tenant management."""

from __future__ import annotations

from decimal import Decimal

from tripgo.common.constants import BookingStatus, BookingType, TenantStatus
from tripgo.tenants.dependencies import host_subdomain
from tripgo.tenants.models import Tenant
from tests.conftest import _make_tenant, headers_for


# ═════════════════════════════════════════════════════════════════════
# Resolution
# ═════════════════════════════════════════════════════════════════════


class TestTenantResolution:

    async def test_default_tenant(self, client, tenant):
        resp = await client.get("/api/v1/tenants/current")
        assert resp.status_code == 200
        assert resp.json()["data"]["slug"] == "tripgo-main"

    async def test_header_wins(self, client, tenant, other_tenant):
        resp = await client.get("/api/v1/tenants/current", headers={"X-Tenant-ID": "acme-travel"})
        assert resp.json()["data"]["id"] == str(other_tenant.id)

    async def test_header_by_id(self, client, tenant, other_tenant):
        resp = await client.get(
            "/api/v1/tenants/current", headers={"X-Tenant-ID": str(other_tenant.id)},
        )
        assert resp.json()["data"]["slug"] == "acme-travel"

    async def test_host_subdomain(self, client, tenant, other_tenant):
        resp = await client.get(
            "/api/v1/tenants/current", headers={"Host": "acme-travel.tripgo.travel"},
        )
        assert resp.json()["data"]["slug"] == "acme-travel"

    async def test_custom_domain_host(self, client, tenant, other_tenant):
        resp = await client.get("/api/v1/tenants/current", headers={"Host": "trips.acme.com"})
        assert resp.json()["data"]["slug"] == "acme-travel"

    async def test_query_parameter(self, client, tenant, other_tenant):
        resp = await client.get("/api/v1/tenants/current", params={"tenant": "acme-travel"})
        assert resp.json()["data"]["slug"] == "acme-travel"

    async def test_unknown_header_falls_back_to_default(self, client, tenant):
        resp = await client.get("/api/v1/tenants/current", headers={"X-Tenant-ID": "nobody"})
        assert resp.json()["data"]["slug"] == "tripgo-main"

    async def test_no_tenant_at_all(self, client):
        resp = await client.get("/api/v1/tenants/current")
        assert resp.status_code == 404

    async def test_suspended_tenant_rejected(self, client, db):
        db.add(Tenant(**_make_tenant(slug="tripgo-main", status=TenantStatus.suspended)))
        await db.commit()
        resp = await client.get("/api/v1/tenants/current")
        assert resp.status_code == 403
        assert "suspended" in resp.json()["message"]

    async def test_by_domain_lookup(self, client, other_tenant):
        resp = await client.get("/api/v1/tenants/by-domain/trips.acme.com")
        assert resp.status_code == 200
        assert resp.json()["data"]["slug"] == "acme-travel"

        missing = await client.get("/api/v1/tenants/by-domain/unknown.example")
        assert missing.status_code == 404


def test_host_subdomain_parsing():
    assert host_subdomain("acme.tripgo.travel") == "acme"
    assert host_subdomain("acme.tripgo.travel:8443") == "acme"
    assert host_subdomain("www.tripgo.travel") is None
    assert host_subdomain("localhost:8000") is None
    assert host_subdomain("127.0.0.1") is None
    assert host_subdomain("") is None


# ═════════════════════════════════════════════════════════════════════
# Management
# ═════════════════════════════════════════════════════════════════════


class TestTenantManagement:

    async def test_admin_cannot_list(self, client, admin_headers):
        resp = await client.get("/api/v1/tenants", headers=admin_headers)
        assert resp.status_code == 403

    async def test_create_and_list(self, client, super_admin_headers):
        resp = await client.post(
            "/api/v1/tenants",
            json={"name": "Sun Seekers", "plan": "enterprise", "contact_email": "ops@sunseekers.com"},
            headers=super_admin_headers,
        )
        assert resp.status_code == 201
        data = resp.json()["data"]
        assert data["slug"] == "sun-seekers"
        assert data["subdomain"] == "sun-seekers"
        assert data["status"] == "active"

        listing = await client.get(
            "/api/v1/tenants", params={"plan": "enterprise"}, headers=super_admin_headers,
        )
        items = listing.json()["data"]["items"]
        assert [t["slug"] for t in items] == ["sun-seekers"]

    async def test_duplicate_slug_conflict(self, client, super_admin_headers, other_tenant):
        resp = await client.post(
            "/api/v1/tenants",
            json={"name": "Acme Again", "slug": "acme-travel"},
            headers=super_admin_headers,
        )
        assert resp.status_code == 409

    async def test_update(self, client, super_admin_headers, other_tenant):
        resp = await client.put(
            f"/api/v1/tenants/{other_tenant.id}",
            json={"name": "Acme Holidays", "settings": {"currency": "EUR"}},
            headers=super_admin_headers,
        )
        assert resp.status_code == 200
        assert resp.json()["data"]["name"] == "Acme Holidays"
        assert resp.json()["data"]["settings"] == {"currency": "EUR"}

    async def test_suspend_and_activate(self, client, super_admin_headers, other_tenant):
        resp = await client.post(
            f"/api/v1/tenants/{other_tenant.id}/suspend", headers=super_admin_headers,
        )
        assert resp.json()["data"]["status"] == "suspended"

        blocked = await client.get(
            "/api/v1/tenants/current", headers={"X-Tenant-ID": "acme-travel"},
        )
        assert blocked.status_code == 403

        resp = await client.post(
            f"/api/v1/tenants/{other_tenant.id}/activate", headers=super_admin_headers,
        )
        assert resp.json()["data"]["status"] == "active"

    async def test_stats(self, client, db, super_admin_headers, tenant, customer, cruise):
        from tripgo.bookings.models import Booking

        db.add(Booking(
            tenant_id=tenant.id, user_id=customer.id, reference="TG-STATS001",
            booking_type=BookingType.cruise, cruise_id=cruise.id, guests=2,
            total_amount=Decimal("2881"), status=BookingStatus.confirmed,
        ))
        await db.commit()

        resp = await client.get(f"/api/v1/tenants/{tenant.id}/stats", headers=super_admin_headers)
        assert resp.status_code == 200
        stats = resp.json()["data"]
        assert stats["users"] == 2
        assert stats["bookings"] == 1
        assert stats["confirmed_bookings"] == 1
        assert Decimal(stats["revenue"]) == Decimal("2881")
        assert stats["cruises"] == 1

    async def test_delete(self, client, super_admin_headers, other_tenant):
        resp = await client.delete(f"/api/v1/tenants/{other_tenant.id}", headers=super_admin_headers)
        assert resp.status_code == 200
        again = await client.get(f"/api/v1/tenants/{other_tenant.id}", headers=super_admin_headers)
        assert again.status_code == 404

    async def test_super_admin_reaches_other_tenant(self, client, db, super_admin, other_tenant):
        headers = await headers_for(db, super_admin)
        headers["X-Tenant-ID"] = "acme-travel"
        resp = await client.get("/api/v1/auth/me", headers=headers)
        assert resp.status_code == 200
        assert resp.json()["data"]["tenant"]["slug"] == "acme-travel"

"""Site content — settings, hero banners, footer, static pages and catalogue visibility."""

from __future__ import annotations

from sqlalchemy import select

from tripgo.catalog.models import Cruise
from tripgo.common.audit import AuditTrail
from tripgo.common.constants import UserRole
from tripgo.content.service import DEFAULT_SETTINGS
from tests.conftest import TestSessionFactory, _make_cruise, create_user, headers_for


async def _create_setting(client, headers, **overrides):
    body = {
        "key": "hero_tagline",
        "value": "Sail away with us",
        "category": "general",
        "label": "Hero Tagline",
        "is_public": True,
        **overrides,
    }
    resp = await client.post("/api/v1/settings", json=body, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]


async def _create_page(client, headers, **overrides):
    body = {"title": "About Us", "body": "We have been sailing since 1998.", **overrides}
    resp = await client.post("/api/v1/pages/admin/pages", json=body, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]


# ═════════════════════════════════════════════════════════════════════
# Settings
# ═════════════════════════════════════════════════════════════════════


class TestSettings:

    async def test_create_and_read_public_setting(self, client, admin_headers):
        created = await _create_setting(client, admin_headers)
        assert created["value_type"] == "text"
        assert created["updated_by"] is not None

        resp = await client.get("/api/v1/settings/hero_tagline")
        assert resp.status_code == 200
        assert resp.json()["data"]["value"] == "Sail away with us"

    async def test_duplicate_key_conflict(self, client, admin_headers):
        await _create_setting(client, admin_headers)
        resp = await client.post(
            "/api/v1/settings", json={"key": "hero_tagline", "value": "Again"}, headers=admin_headers,
        )
        assert resp.status_code == 409

    async def test_value_must_match_type(self, client, admin_headers):
        resp = await client.post(
            "/api/v1/settings",
            json={"key": "max_party_size", "value_type": "number", "value": "ten"},
            headers=admin_headers,
        )
        assert resp.status_code == 422
        assert "value" in resp.json()["error"]["errors"]

        resp = await client.post(
            "/api/v1/settings",
            json={"key": "max_party_size", "value_type": "number", "value": True},
            headers=admin_headers,
        )
        assert resp.status_code == 422

    async def test_private_setting_hidden_from_public(self, client, admin_headers):
        await _create_setting(client, admin_headers, key="stripe_account", is_public=False)

        anonymous = await client.get("/api/v1/settings/stripe_account")
        assert anonymous.status_code == 404

        as_admin = await client.get("/api/v1/settings/stripe_account", headers=admin_headers)
        assert as_admin.status_code == 200

    async def test_customer_cannot_manage(self, client, customer_headers):
        listing = await client.get("/api/v1/settings", headers=customer_headers)
        assert listing.status_code == 403

        resp = await client.post(
            "/api/v1/settings", json={"key": "site_name", "value": "Mine"}, headers=customer_headers,
        )
        assert resp.status_code == 403

    async def test_update_and_delete(self, client, admin_headers):
        await _create_setting(
            client, admin_headers, key="maintenance_mode", value_type="boolean", value=False,
            category="maintenance", is_public=False,
        )

        resp = await client.put(
            "/api/v1/settings/maintenance_mode", json={"value": True}, headers=admin_headers,
        )
        assert resp.status_code == 200
        assert resp.json()["data"]["value"] is True

        bad = await client.put(
            "/api/v1/settings/maintenance_mode", json={"value": "yes"}, headers=admin_headers,
        )
        assert bad.status_code == 422

        deleted = await client.delete("/api/v1/settings/maintenance_mode", headers=admin_headers)
        assert deleted.status_code == 200
        missing = await client.get("/api/v1/settings/maintenance_mode", headers=admin_headers)
        assert missing.status_code == 404

    async def test_defaults_initialised_once(self, client, admin_headers):
        first = await client.post("/api/v1/settings/defaults", headers=admin_headers)
        assert first.status_code == 200
        assert first.json()["data"]["created"] == len(DEFAULT_SETTINGS)

        second = await client.post("/api/v1/settings/defaults", headers=admin_headers)
        assert second.json()["data"]["created"] == 0

        site_name = await client.get("/api/v1/settings/site_name")
        assert site_name.json()["data"]["value"] == "TripGo Main"

    async def test_public_settings_grouped(self, client, admin_headers):
        await client.post("/api/v1/settings/defaults", headers=admin_headers)

        resp = await client.get("/api/v1/settings/public")
        grouped = resp.json()["data"]
        assert grouped["general"]["site_name"]["value"] == "TripGo Main"
        assert "currency" in grouped["business"]
        assert "timezone" not in grouped["business"]
        assert "maintenance_mode" not in grouped.get("maintenance", {})

    async def test_admin_listing_filters_by_category(self, client, admin_headers):
        await client.post("/api/v1/settings/defaults", headers=admin_headers)

        resp = await client.get(
            "/api/v1/settings", params={"category": "business"}, headers=admin_headers,
        )
        data = resp.json()["data"]
        assert [s["key"] for s in data["settings"]] == [
            "booking_cancellation_hours", "currency", "timezone",
        ]
        assert list(data["grouped"]) == ["business"]

    async def test_bulk_update_creates_missing_keys(self, client, admin_headers):
        await client.post("/api/v1/settings/defaults", headers=admin_headers)

        resp = await client.put(
            "/api/v1/settings/bulk",
            json={"settings": [
                {"key": "site_name", "value": "Blue Waves"},
                {"key": "booking_cancellation_hours", "value": 48},
                {"key": "promo_banner", "value": "Spring sale", "is_public": True},
            ]},
            headers=admin_headers,
        )
        assert resp.status_code == 200, resp.text
        assert {s["key"]: s["value"] for s in resp.json()["data"]} == {
            "site_name": "Blue Waves",
            "booking_cancellation_hours": 48,
            "promo_banner": "Spring sale",
        }

        promo = await client.get("/api/v1/settings/promo_banner")
        assert promo.json()["data"]["value_type"] == "text"

    async def test_bulk_update_is_all_or_nothing(self, client, admin_headers):
        await client.post("/api/v1/settings/defaults", headers=admin_headers)

        resp = await client.put(
            "/api/v1/settings/bulk",
            json={"settings": [
                {"key": "site_name", "value": "Blue Waves"},
                {"key": "booking_cancellation_hours", "value": "soon"},
            ]},
            headers=admin_headers,
        )
        assert resp.status_code == 422
        assert "booking_cancellation_hours" in resp.json()["error"]["errors"]

        site_name = await client.get("/api/v1/settings/site_name")
        assert site_name.json()["data"]["value"] == "TripGo Main"

    async def test_bulk_rejects_repeated_keys(self, client, admin_headers):
        resp = await client.put(
            "/api/v1/settings/bulk",
            json={"settings": [{"key": "site_name", "value": "A"}, {"key": "site_name", "value": "B"}]},
            headers=admin_headers,
        )
        assert resp.status_code == 422

    async def test_changes_are_audited(self, client, admin_headers):
        created = await _create_setting(client, admin_headers)
        await client.put(
            "/api/v1/settings/hero_tagline", json={"value": "Cruise in style"}, headers=admin_headers,
        )
        async with TestSessionFactory() as session:
            entries = (await session.execute(
                select(AuditTrail).where(AuditTrail.entity_type == "site_setting"),
            )).scalars().all()
        by_action = {e.action: e for e in entries}
        assert sorted(by_action) == ["create", "update"]
        assert {str(e.entity_id) for e in entries} == {created["id"]}
        assert by_action["update"].old_values == {"value": "Sail away with us"}


# ═════════════════════════════════════════════════════════════════════
# Hero
# ═════════════════════════════════════════════════════════════════════


class TestHero:

    async def test_upsert_creates_then_updates(self, client, admin_headers):
        created = await client.put(
            "/api/v1/hero/home",
            json={"title": "Sail the Mediterranean", "video_url": "/uploads/videos/med.mp4"},
            headers=admin_headers,
        )
        assert created.status_code == 200
        assert created.json()["message"] == "Hero settings created"
        hero = created.json()["data"]
        assert hero["page"] == "home"
        assert hero["video_loop"] is True
        assert hero["overlay_color"] == "#000000"

        updated = await client.put(
            "/api/v1/hero/home", json={"subtitle": "Seven nights from Barcelona"},
            headers=admin_headers,
        )
        assert updated.json()["message"] == "Hero settings saved successfully"
        assert updated.json()["data"]["id"] == hero["id"]
        assert updated.json()["data"]["title"] == "Sail the Mediterranean"

    async def test_public_read_skips_inactive(self, client, admin_headers):
        await client.put("/api/v1/hero/cruises", json={"title": "Cruises"}, headers=admin_headers)

        visible = await client.get("/api/v1/hero/cruises")
        assert visible.status_code == 200
        assert visible.json()["data"]["title"] == "Cruises"

        await client.put("/api/v1/hero/cruises", json={"is_active": False}, headers=admin_headers)
        hidden = await client.get("/api/v1/hero/cruises")
        assert hidden.status_code == 404

        listing = await client.get("/api/v1/hero", headers=admin_headers)
        assert [h["page"] for h in listing.json()["data"]] == ["cruises"]

    async def test_invalid_input_rejected(self, client, admin_headers):
        bad_page = await client.put("/api/v1/hero/Home", json={"title": "x"}, headers=admin_headers)
        assert bad_page.status_code == 422

        bad_opacity = await client.put(
            "/api/v1/hero/home", json={"overlay_opacity": 1.5}, headers=admin_headers,
        )
        assert bad_opacity.status_code == 422

        bad_color = await client.put(
            "/api/v1/hero/home", json={"overlay_color": "navy"}, headers=admin_headers,
        )
        assert bad_color.status_code == 422

    async def test_delete(self, client, admin_headers, customer_headers):
        await client.put("/api/v1/hero/hotels", json={"title": "Hotels"}, headers=admin_headers)

        forbidden = await client.delete("/api/v1/hero/hotels", headers=customer_headers)
        assert forbidden.status_code == 403

        resp = await client.delete("/api/v1/hero/hotels", headers=admin_headers)
        assert resp.status_code == 200
        again = await client.delete("/api/v1/hero/hotels", headers=admin_headers)
        assert again.status_code == 404


# ═════════════════════════════════════════════════════════════════════
# Footer
# ═════════════════════════════════════════════════════════════════════


class TestFooter:

    async def test_public_footer_empty_until_configured(self, client, tenant):
        resp = await client.get("/api/v1/footer")
        assert resp.status_code == 200
        assert resp.json()["data"] is None
        assert resp.json()["message"] == "No footer configuration found"

    async def test_admin_read_creates_defaults(self, client, admin_headers):
        resp = await client.get("/api/v1/footer/admin", headers=admin_headers)
        footer = resp.json()["data"]
        assert footer["company_name"] == "TripGo Main"
        assert [s["title"] for s in footer["sections"]] == ["Quick Links", "Company", "Support"]
        assert [link["label"] for link in footer["sections"][0]["links"]] == [
            "Home", "Cruises", "Hotels", "Packages",
        ]

        again = await client.get("/api/v1/footer/admin", headers=admin_headers)
        assert again.json()["data"]["id"] == footer["id"]

    async def test_update_footer(self, client, admin_headers):
        resp = await client.put(
            "/api/v1/footer/admin",
            json={
                "company_name": "Blue Waves",
                "social_links": {"instagram": "https://instagram.com/bluewaves"},
                "accent_color": "#0af",
            },
            headers=admin_headers,
        )
        assert resp.status_code == 200
        footer = resp.json()["data"]
        assert footer["company_name"] == "Blue Waves"
        assert footer["social_links"] == {"instagram": "https://instagram.com/bluewaves"}
        assert len(footer["sections"]) == 3

        bad = await client.put(
            "/api/v1/footer/admin", json={"text_color": "white"}, headers=admin_headers,
        )
        assert bad.status_code == 422

    async def test_inactive_sections_and_links_hidden_publicly(self, client, admin_headers):
        footer = (await client.get("/api/v1/footer/admin", headers=admin_headers)).json()["data"]
        quick_links, company, _support = footer["sections"]

        await client.put(
            f"/api/v1/footer/admin/sections/{company['id']}", json={"is_active": False},
            headers=admin_headers,
        )
        await client.put(
            f"/api/v1/footer/admin/links/{quick_links['links'][0]['id']}", json={"is_active": False},
            headers=admin_headers,
        )

        public = (await client.get("/api/v1/footer")).json()["data"]
        assert [s["title"] for s in public["sections"]] == ["Quick Links", "Support"]
        assert [link["label"] for link in public["sections"][0]["links"]] == [
            "Cruises", "Hotels", "Packages",
        ]

    async def test_section_and_link_crud(self, client, admin_headers):
        section = await client.post(
            "/api/v1/footer/admin/sections",
            json={"title": "Destinations", "display_order": 5},
            headers=admin_headers,
        )
        assert section.status_code == 201
        section_id = section.json()["data"]["id"]
        assert section.json()["data"]["links"] == []

        link = await client.post(
            f"/api/v1/footer/admin/sections/{section_id}/links",
            json={"label": "Norway", "url": "/destinations/norway", "icon": "flag"},
            headers=admin_headers,
        )
        assert link.status_code == 201
        link_id = link.json()["data"]["id"]
        assert link.json()["data"]["section_id"] == section_id

        renamed = await client.put(
            f"/api/v1/footer/admin/links/{link_id}",
            json={"label": "Norwegian Fjords", "icon": None},
            headers=admin_headers,
        )
        assert renamed.json()["data"]["label"] == "Norwegian Fjords"
        assert renamed.json()["data"]["icon"] is None

        footer = (await client.get("/api/v1/footer/admin", headers=admin_headers)).json()["data"]
        assert footer["sections"][-1]["title"] == "Destinations"
        assert [link["label"] for link in footer["sections"][-1]["links"]] == ["Norwegian Fjords"]

        assert (await client.delete(
            f"/api/v1/footer/admin/links/{link_id}", headers=admin_headers,
        )).status_code == 200
        assert (await client.delete(
            f"/api/v1/footer/admin/sections/{section_id}", headers=admin_headers,
        )).status_code == 200

        footer = (await client.get("/api/v1/footer/admin", headers=admin_headers)).json()["data"]
        assert [s["title"] for s in footer["sections"]] == ["Quick Links", "Company", "Support"]

    async def test_deleting_section_removes_its_links(self, client, admin_headers):
        footer = (await client.get("/api/v1/footer/admin", headers=admin_headers)).json()["data"]
        support = footer["sections"][2]

        resp = await client.delete(
            f"/api/v1/footer/admin/sections/{support['id']}", headers=admin_headers,
        )
        assert resp.status_code == 200

        link_id = support["links"][0]["id"]
        missing = await client.put(
            f"/api/v1/footer/admin/links/{link_id}", json={"label": "Gone"}, headers=admin_headers,
        )
        assert missing.status_code == 404

    async def test_sections_are_tenant_scoped(self, client, db, admin_headers, other_tenant):
        footer = (await client.get("/api/v1/footer/admin", headers=admin_headers)).json()["data"]
        section_id = footer["sections"][0]["id"]

        other_admin = await create_user(
            db, other_tenant.id, email="admin@acme.com", role=UserRole.admin,
        )
        other_headers = {**await headers_for(db, other_admin), "X-Tenant-ID": "acme-travel"}
        resp = await client.put(
            f"/api/v1/footer/admin/sections/{section_id}", json={"title": "Hijacked"},
            headers=other_headers,
        )
        assert resp.status_code == 404


# ═════════════════════════════════════════════════════════════════════
# Pages
# ═════════════════════════════════════════════════════════════════════


class TestPages:

    async def test_draft_hidden_until_published(self, client, admin_headers):
        page = await _create_page(client, admin_headers)
        assert page["slug"] == "about-us"
        assert page["published"] is False
        assert page["published_at"] is None

        assert (await client.get("/api/v1/pages/about-us")).status_code == 404

        published = await client.put(
            f"/api/v1/pages/admin/pages/{page['id']}", json={"published": True},
            headers=admin_headers,
        )
        assert published.json()["data"]["published_at"] is not None

        resp = await client.get("/api/v1/pages/about-us")
        assert resp.status_code == 200
        assert resp.json()["data"]["body"].startswith("We have been sailing")

        listing = await client.get("/api/v1/pages")
        assert [p["slug"] for p in listing.json()["data"]["items"]] == ["about-us"]

    async def test_unpublish_clears_date(self, client, admin_headers):
        page = await _create_page(client, admin_headers, published=True)
        assert page["published_at"] is not None

        resp = await client.put(
            f"/api/v1/pages/admin/pages/{page['id']}", json={"published": False},
            headers=admin_headers,
        )
        assert resp.json()["data"]["published_at"] is None
        assert (await client.get("/api/v1/pages/about-us")).status_code == 404

    async def test_slug_conflicts(self, client, admin_headers):
        await _create_page(client, admin_headers)
        duplicate = await client.post(
            "/api/v1/pages/admin/pages", json={"title": "About us!", "body": "Again"},
            headers=admin_headers,
        )
        assert duplicate.status_code == 409

        terms = await _create_page(
            client, admin_headers, title="Terms", slug="terms-of-service", body="Be nice.",
        )
        assert terms["slug"] == "terms-of-service"

        clash = await client.put(
            f"/api/v1/pages/admin/pages/{terms['id']}", json={"slug": "about-us"},
            headers=admin_headers,
        )
        assert clash.status_code == 409

    async def test_blank_title_rejected(self, client, admin_headers):
        resp = await client.post(
            "/api/v1/pages/admin/pages", json={"title": "   ", "body": "Text"},
            headers=admin_headers,
        )
        assert resp.status_code == 422

    async def test_admin_list_and_delete(self, client, admin_headers, customer_headers):
        draft = await _create_page(client, admin_headers)
        await _create_page(client, admin_headers, title="Privacy", body="We keep little.", published=True)

        forbidden = await client.get("/api/v1/pages/admin/pages", headers=customer_headers)
        assert forbidden.status_code == 403

        drafts = await client.get(
            "/api/v1/pages/admin/pages", params={"published": "false"}, headers=admin_headers,
        )
        assert [p["id"] for p in drafts.json()["data"]["items"]] == [draft["id"]]

        resp = await client.delete(f"/api/v1/pages/admin/pages/{draft['id']}", headers=admin_headers)
        assert resp.status_code == 200
        missing = await client.get(f"/api/v1/pages/admin/pages/{draft['id']}", headers=admin_headers)
        assert missing.status_code == 404


# ═════════════════════════════════════════════════════════════════════
# Catalogue visibility
# ═════════════════════════════════════════════════════════════════════


class TestCatalogVisibility:

    async def test_unpublish_then_publish_cruises(self, client, cruise, admin_headers):
        hidden = await client.post(
            "/api/v1/admin/content/bulk-unpublish",
            json={"content_type": "cruise", "content_ids": [str(cruise.id)]},
            headers=admin_headers,
        )
        assert hidden.status_code == 200
        assert hidden.json()["data"] == {"updated": 1}

        listing = await client.get("/api/v1/cruises")
        assert listing.json()["data"]["items"] == []

        shown = await client.post(
            "/api/v1/admin/content/bulk-publish",
            json={"content_type": "cruise", "content_ids": [str(cruise.id)]},
            headers=admin_headers,
        )
        assert shown.json()["data"] == {"updated": 1}
        listing = await client.get("/api/v1/cruises")
        assert [c["id"] for c in listing.json()["data"]["items"]] == [str(cruise.id)]

    async def test_other_tenant_items_untouched(self, client, db, other_tenant, admin_headers):
        foreign = Cruise(**_make_cruise(other_tenant.id))
        db.add(foreign)
        await db.commit()

        resp = await client.post(
            "/api/v1/admin/content/bulk-unpublish",
            json={"content_type": "cruise", "content_ids": [str(foreign.id)]},
            headers=admin_headers,
        )
        assert resp.json()["data"] == {"updated": 0}

        async with TestSessionFactory() as session:
            assert (await session.get(Cruise, foreign.id)).is_active is True

    async def test_rejects_unknown_type_and_empty_ids(self, client, hotel, admin_headers, customer_headers):
        bad_type = await client.post(
            "/api/v1/admin/content/bulk-publish",
            json={"content_type": "flight", "content_ids": [str(hotel.id)]},
            headers=admin_headers,
        )
        assert bad_type.status_code == 422

        empty = await client.post(
            "/api/v1/admin/content/bulk-publish",
            json={"content_type": "hotel", "content_ids": []},
            headers=admin_headers,
        )
        assert empty.status_code == 422

        forbidden = await client.post(
            "/api/v1/admin/content/bulk-publish",
            json={"content_type": "hotel", "content_ids": [str(hotel.id)]},
            headers=customer_headers,
        )
        assert forbidden.status_code == 403

"""Tests for common utilities — filters, pagination, slugs, audit, error envelope."""

from __future__ import annotations

from decimal import Decimal

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tripgo.catalog.models import Cruise
from tripgo.users.models import User
from tripgo.common.audit import AuditTrail, create_audit_entry
from tripgo.common.filters import _get_column, apply_filters, apply_search, apply_sorting, sortable_column
from tripgo.common.pagination import PaginationParams, paginate, total_pages
from tripgo.common.slugs import generate_slug, slug_exists, unique_slug
from tests.conftest import _make_cruise


def _params(page: int = 1, limit: int = 10, sort_by=None, sort_order: str = "desc") -> PaginationParams:
    return PaginationParams(page=page, limit=limit, sort_by=sort_by, sort_order=sort_order)


async def _seed_cruises(db: AsyncSession, tenant_id, specs) -> list[Cruise]:
    rows = []
    for name, price in specs:
        row = Cruise(**_make_cruise(tenant_id, name=name, price=Decimal(price)))
        db.add(row)
        rows.append(row)
    await db.flush()
    return rows


# ═════════════════════════════════════════════════════════════════════
# FILTER TESTS
# ═════════════════════════════════════════════════════════════════════


class TestApplyFilters:

    async def test_filter_by_equality(self, db: AsyncSession, tenant):
        await _seed_cruises(db, tenant.id, [("Alpha", "100"), ("Beta", "200")])
        query = apply_filters(select(Cruise), Cruise, {"name": "Alpha"})
        rows = (await db.execute(query)).scalars().all()
        assert [r.name for r in rows] == ["Alpha"]

    async def test_none_values_skipped(self, db: AsyncSession, tenant):
        await _seed_cruises(db, tenant.id, [("Alpha", "100"), ("Beta", "200")])
        query = apply_filters(select(Cruise), Cruise, {"name": None, "is_active": True})
        assert len((await db.execute(query)).scalars().all()) == 2

    async def test_range_and_ilike(self, db: AsyncSession, tenant):
        await _seed_cruises(
            db, tenant.id, [("Arctic Voyage", "500"), ("Arctic Light", "1500"), ("Nile", "900")],
        )
        query = apply_filters(
            select(Cruise), Cruise, {"name__ilike": "arctic", "price__gte": Decimal("600")},
        )
        rows = (await db.execute(query)).scalars().all()
        assert [r.name for r in rows] == ["Arctic Light"]

    async def test_in_filter(self, db: AsyncSession, tenant):
        await _seed_cruises(db, tenant.id, [("A", "1"), ("B", "2"), ("C", "3")])
        query = apply_filters(select(Cruise), Cruise, {"name__in": ["A", "C"]})
        names = sorted(r.name for r in (await db.execute(query)).scalars().all())
        assert names == ["A", "C"]

    async def test_unknown_column_ignored(self, db: AsyncSession, tenant):
        await _seed_cruises(db, tenant.id, [("A", "1")])
        query = apply_filters(select(Cruise), Cruise, {"nope": "x"})
        assert len((await db.execute(query)).scalars().all()) == 1


class TestSortingAndSearch:

    async def test_sort_descending(self, db: AsyncSession, tenant):
        await _seed_cruises(db, tenant.id, [("Cheap", "100"), ("Dear", "900"), ("Mid", "500")])
        query = apply_sorting(select(Cruise), Cruise, "-price")
        rows = (await db.execute(query)).scalars().all()
        assert [r.name for r in rows] == ["Dear", "Mid", "Cheap"]

    async def test_search_matches_any_column(self, db: AsyncSession, tenant):
        await _seed_cruises(db, tenant.id, [("Fjord Explorer", "1"), ("Island Hopper", "2")])
        query = apply_search(select(Cruise), Cruise, "  fjord ", ["name", "description"])
        rows = (await db.execute(query)).scalars().all()
        assert [r.name for r in rows] == ["Fjord Explorer"]

    async def test_blank_search_is_noop(self, db: AsyncSession, tenant):
        await _seed_cruises(db, tenant.id, [("A", "1"), ("B", "2")])
        query = apply_search(select(Cruise), Cruise, "   ", ["name"])
        assert len((await db.execute(query)).scalars().all()) == 2

    def test_get_column_rejects_non_columns(self):
        assert _get_column(Cruise, "price") is not None
        assert _get_column(Cruise, "__tablename__") is None
        assert _get_column(Cruise, "metadata") is None
        assert _get_column(Cruise, "category") is None

    def test_hidden_columns_not_sortable(self):
        assert sortable_column(User, "email") is User.email
        assert sortable_column(User, "password_hash") is None
        assert sortable_column(Cruise, None) is None


# ═════════════════════════════════════════════════════════════════════
# PAGINATION TESTS
# ═════════════════════════════════════════════════════════════════════


class TestPaginate:

    async def test_meta_and_page_slice(self, db: AsyncSession, tenant):
        await _seed_cruises(db, tenant.id, [(f"Cruise {i}", str(100 + i)) for i in range(7)])
        query = select(Cruise).order_by(Cruise.price.asc())
        result = await paginate(db, query, _params(page=2, limit=3), model=Cruise)
        assert result.meta.total == 7
        assert result.meta.pages == 3
        assert [c.name for c in result.data] == ["Cruise 3", "Cruise 4", "Cruise 5"]

    async def test_sort_by_model_attribute(self, db: AsyncSession, tenant):
        await _seed_cruises(db, tenant.id, [("Low", "10"), ("High", "99")])
        result = await paginate(
            db, select(Cruise), _params(sort_by="price", sort_order="asc"), model=Cruise,
        )
        assert [c.name for c in result.data] == ["Low", "High"]

    async def test_sort_by_non_column_ignored(self, db: AsyncSession, tenant):
        await _seed_cruises(db, tenant.id, [("Low", "10"), ("High", "99")])
        query = select(Cruise).order_by(Cruise.price.desc())
        for sort_by in ("metadata", "category", "__class__", "password_hash"):
            result = await paginate(db, query, _params(sort_by=sort_by), model=Cruise)
            assert [c.name for c in result.data] == ["High", "Low"]

    async def test_empty_result(self, db: AsyncSession, tenant):
        result = await paginate(db, select(Cruise), _params(), model=Cruise)
        assert result.data == []
        assert result.meta.total == 0
        assert result.meta.pages == 0

    def test_total_pages(self):
        assert total_pages(0, 10) == 0
        assert total_pages(10, 10) == 1
        assert total_pages(11, 10) == 2


# ═════════════════════════════════════════════════════════════════════
# SLUGS / AUDIT
# ═════════════════════════════════════════════════════════════════════


class TestSlugs:

    def test_generate_slug(self):
        assert generate_slug("  Caribbean Dream: 7 Nights! ") == "caribbean-dream-7-nights"
        assert generate_slug("Ünïcode & Co") == "n-code-co"
        assert generate_slug("") == ""

    async def test_unique_slug_suffixes(self, db: AsyncSession, tenant):
        row = Cruise(**_make_cruise(tenant.id, name="Blue Lagoon"))
        row.slug = "blue-lagoon"
        db.add(row)
        await db.flush()

        assert await slug_exists(db, Cruise, "blue-lagoon", tenant_id=tenant.id)
        assert await unique_slug(db, Cruise, "Blue Lagoon", tenant_id=tenant.id) == "blue-lagoon-2"
        assert await unique_slug(
            db, Cruise, "Blue Lagoon", tenant_id=tenant.id, exclude_id=row.id,
        ) == "blue-lagoon"

    async def test_slugs_are_tenant_scoped(self, db: AsyncSession, tenant, other_tenant):
        row = Cruise(**_make_cruise(tenant.id, name="Shared"))
        row.slug = "shared"
        db.add(row)
        await db.flush()
        assert await unique_slug(db, Cruise, "Shared", tenant_id=other_tenant.id) == "shared"


async def test_create_audit_entry(db: AsyncSession, tenant, admin):
    entry = await create_audit_entry(
        db,
        action="update",
        entity_type="cruise",
        entity_id=tenant.id,
        tenant_id=tenant.id,
        actor_id=admin.id,
        new_values={"price": "10.00"},
    )
    stored = (await db.execute(select(AuditTrail).where(AuditTrail.id == entry.id))).scalars().one()
    assert stored.action == "update"
    assert stored.new_values == {"price": "10.00"}


# ═════════════════════════════════════════════════════════════════════
# ERROR ENVELOPE
# ═════════════════════════════════════════════════════════════════════


async def test_health(client):
    resp = await client.get("/api/v1/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "healthy"


async def test_not_found_envelope(client, tenant):
    resp = await client.get("/api/v1/cruises/00000000-0000-0000-0000-000000000000")
    assert resp.status_code == 404
    body = resp.json()
    assert body["success"] is False
    assert body["error"]["status"] == 404
    assert body["error"]["type"].endswith("/not-found")


async def test_validation_envelope(client, tenant):
    resp = await client.post("/api/v1/auth/register", json={"email": "not-an-email"})
    assert resp.status_code == 422
    errors = resp.json()["error"]["errors"]
    assert "email" in errors
    assert "password" in errors


async def test_listing_ignores_non_column_sort(client, cruise):
    resp = await client.get("/api/v1/cruises", params={"sort_by": "metadata"})
    assert resp.status_code == 200
    assert resp.json()["data"]["pagination"]["total"] == 1


async def test_default_rate_limit_applies_to_every_route(client, tenant):
    statuses = [(await client.get("/api/v1/cruises")).status_code for _ in range(121)]
    assert statuses[:120] == [200] * 120
    assert statuses[120] == 429

    resp = await client.get("/api/v1/cruises")
    body = resp.json()
    assert body["success"] is False
    assert body["error"]["status"] == 429
    assert body["error"]["type"].endswith("/rate-limited")

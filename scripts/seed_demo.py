#!/usr/bin/env python3
"""Seed a TripGo database with a default tenant, an admin and a small catalogue.

Idempotent: existing rows (matched by slug / email) are left untouched.

Usage:
    python scripts/seed_demo.py
    python scripts/seed_demo.py --tenant acme-travel --admin-email ops@acme.example
    python scripts/seed_demo.py --dry-run
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from decimal import Decimal
from pathlib import Path

from dotenv import load_dotenv

# ── Path setup ────────────────────────────────────────────────────────
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

# Settings are read at import time, so .env must be loaded first
env_path = PROJECT_ROOT / ".env"
if env_path.exists():
    load_dotenv(env_path)

from sqlalchemy import select  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession  # noqa: E402

import tripgo.auth.models  # noqa: E402,F401
import tripgo.blog.models  # noqa: E402,F401
import tripgo.bookings.models  # noqa: E402,F401
import tripgo.content.models  # noqa: E402,F401
import tripgo.hr.models  # noqa: E402,F401
import tripgo.media.models  # noqa: E402,F401
from tripgo.auth.service import hash_password  # noqa: E402
from tripgo.catalog.models import Cruise, CruiseCategory, Hotel, Package  # noqa: E402
from tripgo.common.constants import TenantPlan, UserRole  # noqa: E402
from tripgo.common.logging import configure_logging  # noqa: E402
from tripgo.common.slugs import generate_slug  # noqa: E402
from tripgo.config import settings  # noqa: E402
from tripgo.database import async_session_factory, engine  # noqa: E402
from tripgo.tenants.models import Tenant  # noqa: E402
from tripgo.users.models import User  # noqa: E402

logger = logging.getLogger("seed_demo")

CATEGORIES = ["Luxury", "Family", "Expedition"]

CRUISES = [
    {
        "name": "Mediterranean Odyssey",
        "category": "Luxury",
        "departure_port": "Barcelona",
        "destination": "Mediterranean",
        "duration": 7,
        "capacity": 120,
        "price": Decimal("1899.00"),
        "amenities": ["Spa", "Pool", "Fine dining"],
    },
    {
        "name": "Caribbean Family Escape",
        "category": "Family",
        "departure_port": "Miami",
        "destination": "Caribbean",
        "duration": 5,
        "capacity": 200,
        "price": Decimal("999.00"),
        "amenities": ["Kids club", "Water park"],
    },
    {
        "name": "Norwegian Fjords Explorer",
        "category": "Expedition",
        "departure_port": "Bergen",
        "destination": "Norway",
        "duration": 10,
        "capacity": 80,
        "price": Decimal("2499.00"),
        "amenities": ["Observation deck", "Lectures"],
    },
]

HOTELS = [
    {"name": "Harbour View Hotel", "city": "Lisbon", "country": "Portugal",
     "price_per_night": Decimal("145.00"), "amenities": ["Breakfast", "Wi-Fi"]},
    {"name": "Alpine Lodge", "city": "Zermatt", "country": "Switzerland",
     "price_per_night": Decimal("320.00"), "amenities": ["Sauna", "Ski storage"]},
]

PACKAGES = [
    {"name": "Kyoto Culture Week", "destination": "Japan", "duration": 7,
     "price": Decimal("2150.00"), "inclusions": ["Hotel", "Rail pass", "Guided tours"]},
    {"name": "Safari Highlights", "destination": "Kenya", "duration": 6,
     "price": Decimal("2790.00"), "inclusions": ["Lodges", "Game drives", "Meals"]},
]


async def _get_or_create_tenant(db: AsyncSession, slug: str) -> Tenant:
    tenant = (await db.execute(select(Tenant).where(Tenant.slug == slug))).scalars().first()
    if tenant is not None:
        logger.info("Tenant %s already exists", slug)
        return tenant
    tenant = Tenant(
        name=slug.replace("-", " ").title(),
        slug=slug,
        subdomain=slug,
        plan=TenantPlan.premium,
        settings={"currency": "USD"},
    )
    db.add(tenant)
    await db.flush()
    logger.info("Created tenant %s (%s)", slug, tenant.id)
    return tenant


async def _ensure_admin(db: AsyncSession, tenant: Tenant, email: str, password: str) -> None:
    existing = await db.execute(
        select(User.id).where(User.tenant_id == tenant.id, User.email == email.lower()),
    )
    if existing.first() is not None:
        logger.info("Admin %s already exists", email)
        return
    db.add(
        User(
            tenant_id=tenant.id,
            email=email.lower(),
            password_hash=hash_password(password),
            first_name="TripGo",
            last_name="Admin",
            role=UserRole.super_admin,
        ),
    )
    await db.flush()
    logger.info("Created super admin %s", email)


async def _seed_catalog(db: AsyncSession, tenant: Tenant) -> int:
    created = 0
    categories: dict[str, CruiseCategory] = {}
    for order, name in enumerate(CATEGORIES):
        slug = generate_slug(name)
        category = (await db.execute(
            select(CruiseCategory).where(
                CruiseCategory.tenant_id == tenant.id, CruiseCategory.slug == slug,
            ),
        )).scalars().first()
        if category is None:
            category = CruiseCategory(tenant_id=tenant.id, name=name, slug=slug, sort_order=order)
            db.add(category)
            created += 1
        categories[name] = category
    await db.flush()

    for model, rows in ((Cruise, CRUISES), (Hotel, HOTELS), (Package, PACKAGES)):
        for row in rows:
            row = dict(row)
            slug = generate_slug(row["name"])
            exists = await db.execute(
                select(model.id).where(model.tenant_id == tenant.id, model.slug == slug),
            )
            if exists.first() is not None:
                continue
            category_name = row.pop("category", None)
            if category_name:
                row["category_id"] = categories[category_name].id
            db.add(model(tenant_id=tenant.id, slug=slug, **row))
            created += 1
    await db.flush()
    return created


async def seed(tenant_slug: str, admin_email: str, admin_password: str, dry_run: bool) -> None:
    async with async_session_factory() as db:
        tenant = await _get_or_create_tenant(db, tenant_slug)
        await _ensure_admin(db, tenant, admin_email, admin_password)
        created = await _seed_catalog(db, tenant)
        logger.info("Catalogue rows created: %d", created)
        if dry_run:
            await db.rollback()
            logger.info("Dry run: changes rolled back")
        else:
            await db.commit()
    await engine.dispose()


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed TripGo demo data")
    parser.add_argument("--tenant", default=settings.DEFAULT_TENANT_SLUG,
                        help=f"Tenant slug (default: {settings.DEFAULT_TENANT_SLUG})")
    parser.add_argument("--admin-email", default="admin@tripgo.example")
    parser.add_argument("--admin-password", default="ChangeMe123!")
    parser.add_argument("--dry-run", action="store_true", help="Roll back instead of committing")
    args = parser.parse_args()

    configure_logging()
    try:
        asyncio.run(seed(args.tenant, args.admin_email, args.admin_password, args.dry_run))
    except KeyboardInterrupt:
        sys.exit(130)


if __name__ == "__main__":
    main()

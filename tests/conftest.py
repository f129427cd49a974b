"""Shared test fixtures — async DB, client, auth helpers, factories.

Reusable across all test modules (auth, catalog, bookings, hr, media, etc.).
Uses SQLite + aiosqlite for fast isolated tests without PostgreSQL.
"""

from __future__ import annotations

import os
import tempfile

# Set test settings before any other import touches pydantic-settings
os.environ.setdefault("JWT_SECRET", "test-secret-for-ci-do-not-use-in-production")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="tripgo-uploads-"))

import uuid
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from jose import jwt
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from tripgo.auth.service import hash_password, hash_token
from tripgo.common.constants import TenantPlan, TenantStatus, UserRole
from tripgo.config import settings
from tripgo.database import Base, get_db
from tripgo.main import create_app

# Import ALL model modules so SQLAlchemy can resolve cross-module relationships
# (e.g. Booking → Cruise, BlogPost → User, Employee → Department)
import tripgo.auth.models  # noqa: F401
import tripgo.blog.models  # noqa: F401
import tripgo.bookings.models  # noqa: F401
import tripgo.catalog.models  # noqa: F401
import tripgo.common.audit  # noqa: F401
import tripgo.content.models  # noqa: F401
import tripgo.hr.models  # noqa: F401
import tripgo.media.models  # noqa: F401
import tripgo.tenants.models  # noqa: F401
import tripgo.users.models  # noqa: F401

# ── SQLite compat: compile PG-specific types to TEXT/BLOB ───────────

from sqlalchemy.dialects.postgresql import INET, JSONB, UUID as PG_UUID
from sqlalchemy.ext.compiler import compiles


@compiles(JSONB, "sqlite")
def _jsonb_sqlite(element, compiler, **kw):
    return "TEXT"


@compiles(INET, "sqlite")
def _inet_sqlite(element, compiler, **kw):
    return "TEXT"


@compiles(PG_UUID, "sqlite")
def _uuid_sqlite(element, compiler, **kw):
    return "CHAR(36)"


# ── Test database (SQLite in-memory) ────────────────────────────────

TEST_DATABASE_URL = "sqlite+aiosqlite://"

engine = create_async_engine(
    TEST_DATABASE_URL,
    echo=False,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


# Register PG-compatible functions for SQLite
@event.listens_for(engine.sync_engine, "connect")
def _register_sqlite_functions(dbapi_conn, connection_record):
    """Register NOW() and gen_random_uuid() as SQLite custom functions."""
    dbapi_conn.create_function(
        "NOW", 0, lambda: datetime.now(timezone.utc).isoformat(),
    )
    dbapi_conn.create_function(
        "gen_random_uuid", 0, lambda: str(uuid.uuid4()),
    )


TestSessionFactory = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False,
)


@pytest.fixture(autouse=True)
async def _setup_db():
    """Create all tables before each test, drop after."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture(autouse=True)
def _reset_rate_limiter():
    """Reset rate limiter storage between tests to prevent cross-test interference."""
    from tripgo.common.rate_limit import limiter

    limiter.reset()
    yield


async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
    async with TestSessionFactory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# ── FastAPI test client ─────────────────────────────────────────────

@pytest.fixture
async def app():
    """Create a fresh app instance with DB dependency overridden."""
    application = create_app()
    application.dependency_overrides[get_db] = _override_get_db
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client wired to the test app."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


# ── Database session (for direct DB operations in tests) ────────────

@pytest.fixture
async def db() -> AsyncGenerator[AsyncSession, None]:
    async with TestSessionFactory() as session:
        yield session
        await session.commit()


# ── Model factories ─────────────────────────────────────────────────

def _make_tenant(
    *,
    slug: str = "tripgo-main",
    name: str = "TripGo Main",
    domain: str | None = None,
    status: TenantStatus = TenantStatus.active,
) -> dict:
    return dict(
        id=uuid.uuid4(),
        name=name,
        slug=slug,
        subdomain=slug,
        domain=domain,
        plan=TenantPlan.premium,
        status=status,
        settings={"currency": "USD"},
    )


def _make_user(
    tenant_id: uuid.UUID,
    *,
    email: str | None = None,
    role: UserRole = UserRole.customer,
    first_name: str = "Test",
    last_name: str = "User",
    password: str = "Passw0rd!",
    is_active: bool = True,
) -> dict:
    return dict(
        id=uuid.uuid4(),
        tenant_id=tenant_id,
        email=email or f"{role.value}.{uuid.uuid4().hex[:6]}@example.com",
        password_hash=hash_password(password),
        first_name=first_name,
        last_name=last_name,
        role=role,
        is_active=is_active,
    )


def _make_cruise(
    tenant_id: uuid.UUID,
    *,
    name: str = "Caribbean Dream",
    price: Decimal = Decimal("1000"),
    capacity: int = 10,
    destination: str = "Caribbean",
    category_id: uuid.UUID | None = None,
    is_active: bool = True,
) -> dict:
    return dict(
        id=uuid.uuid4(),
        tenant_id=tenant_id,
        category_id=category_id,
        name=name,
        slug=f"{name.lower().replace(' ', '-')}-{uuid.uuid4().hex[:4]}",
        departure_port="Miami",
        destination=destination,
        duration=7,
        capacity=capacity,
        price=price,
        is_active=is_active,
    )


def _make_hotel(
    tenant_id: uuid.UUID,
    *,
    name: str = "Harbour View",
    city: str = "Lisbon",
    price_per_night: Decimal = Decimal("150"),
) -> dict:
    return dict(
        id=uuid.uuid4(),
        tenant_id=tenant_id,
        name=name,
        slug=f"{name.lower().replace(' ', '-')}-{uuid.uuid4().hex[:4]}",
        city=city,
        country="Portugal",
        price_per_night=price_per_night,
    )


def _make_package(
    tenant_id: uuid.UUID,
    *,
    name: str = "Kyoto Week",
    destination: str = "Japan",
    price: Decimal = Decimal("2000"),
) -> dict:
    return dict(
        id=uuid.uuid4(),
        tenant_id=tenant_id,
        name=name,
        slug=f"{name.lower().replace(' ', '-')}-{uuid.uuid4().hex[:4]}",
        destination=destination,
        duration=7,
        price=price,
    )


def future(days: int = 30) -> date:
    return datetime.now(timezone.utc).date() + timedelta(days=days)


# ── Fixtures: tenant, users, catalogue ─────────────────────────────

@pytest.fixture
async def tenant(db):
    """The default tenant every request without tenant hints resolves to."""
    from tripgo.tenants.models import Tenant

    row = Tenant(**_make_tenant(slug=settings.DEFAULT_TENANT_SLUG))
    db.add(row)
    await db.commit()
    return row


@pytest.fixture
async def other_tenant(db):
    from tripgo.tenants.models import Tenant

    row = Tenant(**_make_tenant(slug="acme-travel", name="Acme Travel", domain="trips.acme.com"))
    db.add(row)
    await db.commit()
    return row


async def create_user(db: AsyncSession, tenant_id: uuid.UUID, **kwargs):
    from tripgo.users.models import User

    user = User(**_make_user(tenant_id, **kwargs))
    db.add(user)
    await db.commit()
    return user


@pytest.fixture
async def customer(db, tenant):
    return await create_user(db, tenant.id, email="customer@example.com", first_name="Casey")


@pytest.fixture
async def admin(db, tenant):
    return await create_user(db, tenant.id, email="admin@example.com", role=UserRole.admin)


@pytest.fixture
async def super_admin(db, tenant):
    return await create_user(db, tenant.id, email="root@example.com", role=UserRole.super_admin)


@pytest.fixture
async def hr_manager(db, tenant):
    return await create_user(db, tenant.id, email="hr@example.com", role=UserRole.hr_manager)


@pytest.fixture
async def employee_user(db, tenant):
    return await create_user(
        db, tenant.id, email="staff@example.com", role=UserRole.employee,
        first_name="Sam", last_name="Staff",
    )


@pytest.fixture
async def cruise(db, tenant):
    from tripgo.catalog.models import Cruise

    row = Cruise(**_make_cruise(tenant.id))
    db.add(row)
    await db.commit()
    return row


@pytest.fixture
async def hotel(db, tenant):
    from tripgo.catalog.models import Hotel

    row = Hotel(**_make_hotel(tenant.id))
    db.add(row)
    await db.commit()
    return row


@pytest.fixture
async def package(db, tenant):
    from tripgo.catalog.models import Package

    row = Package(**_make_package(tenant.id))
    db.add(row)
    await db.commit()
    return row


# ── Auth helpers ────────────────────────────────────────────────────

def create_access_token(
    user_id: uuid.UUID,
    tenant_id: uuid.UUID,
    role: UserRole = UserRole.customer,
    expired: bool = False,
) -> str:
    """Generate a JWT access token for testing."""
    if expired:
        exp = datetime.now(timezone.utc) - timedelta(hours=1)
    else:
        exp = datetime.now(timezone.utc) + timedelta(hours=settings.JWT_EXPIRY_HOURS)
    payload = {
        "sub": str(user_id),
        "tenant_id": str(tenant_id),
        "role": role.value,
        "type": "access",
        "jti": uuid.uuid4().hex,
        "exp": exp,
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


async def headers_for(db: AsyncSession, user, *, expired: bool = False) -> dict[str, str]:
    """Return Bearer auth headers with a valid session persisted in the DB."""
    from tripgo.auth.models import UserSession

    token = create_access_token(user.id, user.tenant_id, user.role, expired=expired)
    db.add(
        UserSession(
            id=uuid.uuid4(),
            user_id=user.id,
            tenant_id=user.tenant_id,
            token_hash=hash_token(token),
            expires_at=datetime.now(timezone.utc) + timedelta(hours=settings.JWT_EXPIRY_HOURS),
            is_revoked=False,
        ),
    )
    await db.commit()
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def customer_headers(db, customer) -> dict[str, str]:
    return await headers_for(db, customer)


@pytest.fixture
async def admin_headers(db, admin) -> dict[str, str]:
    return await headers_for(db, admin)


@pytest.fixture
async def super_admin_headers(db, super_admin) -> dict[str, str]:
    return await headers_for(db, super_admin)


@pytest.fixture
async def hr_headers(db, hr_manager) -> dict[str, str]:
    return await headers_for(db, hr_manager)


@pytest.fixture
async def employee_headers(db, employee_user) -> dict[str, str]:
    return await headers_for(db, employee_user)

"""Tenant service layer — CRUD, suspension, usage statistics."""

from __future__ import annotations

import logging
import uuid
from decimal import Decimal
from typing import Optional

from fastapi.encoders import jsonable_encoder
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from tripgo.blog.models import BlogPost
from tripgo.bookings.models import Booking
from tripgo.bookings.service import REVENUE_STATUSES
from tripgo.catalog.models import Cruise, Hotel, Package
from tripgo.common.audit import create_audit_entry
from tripgo.common.constants import BookingStatus, TenantStatus
from tripgo.common.exceptions import BadRequestException, ConflictError, NotFoundException
from tripgo.common.filters import apply_filters, apply_search
from tripgo.common.pagination import PaginatedResponse, PaginationParams, paginate
from tripgo.common.slugs import generate_slug
from tripgo.media.models import MediaFile
from tripgo.tenants.models import Tenant
from tripgo.tenants.schemas import TenantCreate, TenantStats, TenantUpdate
from tripgo.users.models import User

logger = logging.getLogger(__name__)


class TenantService:
    """Super-admin management of tenants."""

    # ── List ────────────────────────────────────────────────────────

    @staticmethod
    async def list_tenants(
        db: AsyncSession,
        pagination: PaginationParams,
        *,
        search: Optional[str] = None,
        status: Optional[TenantStatus] = None,
        plan: Optional[str] = None,
    ) -> PaginatedResponse:
        query = select(Tenant).order_by(Tenant.created_at.desc())
        query = apply_filters(query, Tenant, {"status": status, "plan": plan})
        query = apply_search(query, Tenant, search, ["name", "slug", "domain", "subdomain"])
        return await paginate(db, query, pagination, model=Tenant)

    # ── Get ─────────────────────────────────────────────────────────

    @staticmethod
    async def get_tenant(db: AsyncSession, tenant_id: uuid.UUID) -> Tenant:
        tenant = await db.get(Tenant, tenant_id)
        if tenant is None:
            raise NotFoundException("Tenant", str(tenant_id))
        return tenant

    @staticmethod
    async def get_by_domain(db: AsyncSession, domain: str) -> Tenant:
        """Active tenant whose custom domain or subdomain is *domain*."""
        result = await db.execute(
            select(Tenant).where(
                or_(Tenant.domain == domain, Tenant.subdomain == domain),
                Tenant.status == TenantStatus.active,
            ),
        )
        tenant = result.scalars().first()
        if tenant is None:
            raise NotFoundException("Tenant", domain)
        return tenant

    # ── Create ──────────────────────────────────────────────────────

    @staticmethod
    async def create_tenant(
        db: AsyncSession,
        data: TenantCreate,
        *,
        actor_id: Optional[uuid.UUID] = None,
    ) -> Tenant:
        slug = data.slug or generate_slug(data.name)
        if not slug:
            raise BadRequestException("Tenant name must contain letters or digits.")
        subdomain = data.subdomain or slug

        await TenantService._ensure_unique(db, slug=slug, subdomain=subdomain, domain=data.domain)

        tenant = Tenant(
            name=data.name.strip(),
            slug=slug,
            subdomain=subdomain,
            domain=data.domain,
            plan=data.plan,
            contact_email=data.contact_email,
            settings=data.settings,
        )
        db.add(tenant)
        await db.flush()

        await create_audit_entry(
            db,
            action="create",
            entity_type="tenant",
            entity_id=tenant.id,
            tenant_id=tenant.id,
            actor_id=actor_id,
            new_values=data.model_dump(mode="json"),
        )
        logger.info("Created tenant %s (%s)", tenant.slug, tenant.id)
        return tenant

    # ── Update ──────────────────────────────────────────────────────

    @staticmethod
    async def update_tenant(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        data: TenantUpdate,
        *,
        actor_id: Optional[uuid.UUID] = None,
    ) -> Tenant:
        tenant = await TenantService.get_tenant(db, tenant_id)
        changes = data.model_dump(exclude_unset=True)

        await TenantService._ensure_unique(
            db,
            subdomain=changes.get("subdomain"),
            domain=changes.get("domain"),
            exclude_id=tenant.id,
        )

        old_values = {k: getattr(tenant, k) for k in changes}
        for field, value in changes.items():
            setattr(tenant, field, value)
        await db.flush()

        await create_audit_entry(
            db,
            action="update",
            entity_type="tenant",
            entity_id=tenant.id,
            tenant_id=tenant.id,
            actor_id=actor_id,
            old_values=jsonable_encoder(old_values),
            new_values=data.model_dump(mode="json", exclude_unset=True),
        )
        return tenant

    # ── Status ──────────────────────────────────────────────────────

    @staticmethod
    async def set_status(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        status: TenantStatus,
        *,
        actor_id: Optional[uuid.UUID] = None,
    ) -> Tenant:
        tenant = await TenantService.get_tenant(db, tenant_id)
        previous = tenant.status
        tenant.status = status
        await db.flush()

        await create_audit_entry(
            db,
            action="status_change",
            entity_type="tenant",
            entity_id=tenant.id,
            tenant_id=tenant.id,
            actor_id=actor_id,
            old_values={"status": previous.value},
            new_values={"status": status.value},
        )
        logger.info("Tenant %s status %s -> %s", tenant.slug, previous.value, status.value)
        return tenant

    # ── Delete ──────────────────────────────────────────────────────

    @staticmethod
    async def delete_tenant(db: AsyncSession, tenant_id: uuid.UUID) -> None:
        tenant = await TenantService.get_tenant(db, tenant_id)
        await db.delete(tenant)
        await db.flush()
        logger.info("Deleted tenant %s (%s)", tenant.slug, tenant_id)

    # ── Stats ───────────────────────────────────────────────────────

    @staticmethod
    async def get_stats(db: AsyncSession, tenant_id: uuid.UUID) -> TenantStats:
        await TenantService.get_tenant(db, tenant_id)

        async def _count(model, *conditions) -> int:
            result = await db.execute(
                select(func.count()).select_from(model).where(
                    model.tenant_id == tenant_id, *conditions,
                ),
            )
            return result.scalar() or 0

        revenue = (
            await db.execute(
                select(func.coalesce(func.sum(Booking.total_amount), 0)).where(
                    Booking.tenant_id == tenant_id,
                    Booking.status.in_(REVENUE_STATUSES),
                ),
            )
        ).scalar()

        return TenantStats(
            users=await _count(User),
            active_users=await _count(User, User.is_active.is_(True)),
            bookings=await _count(Booking),
            confirmed_bookings=await _count(Booking, Booking.status == BookingStatus.confirmed),
            revenue=Decimal(str(revenue or 0)),
            cruises=await _count(Cruise),
            hotels=await _count(Hotel),
            packages=await _count(Package),
            blog_posts=await _count(BlogPost),
            media_files=await _count(MediaFile),
        )

    # ── Internal ────────────────────────────────────────────────────

    @staticmethod
    async def _ensure_unique(
        db: AsyncSession,
        *,
        slug: Optional[str] = None,
        subdomain: Optional[str] = None,
        domain: Optional[str] = None,
        exclude_id: Optional[uuid.UUID] = None,
    ) -> None:
        checks = [("slug", slug), ("subdomain", subdomain), ("domain", domain)]
        for field, value in checks:
            if not value:
                continue
            query = select(Tenant.id).where(getattr(Tenant, field) == value)
            if exclude_id is not None:
                query = query.where(Tenant.id != exclude_id)
            if (await db.execute(query.limit(1))).first() is not None:
                raise ConflictError(field, value)

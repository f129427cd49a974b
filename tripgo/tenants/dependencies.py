"""Tenant resolution dependency.

The first strategy that yields a tenant wins:

1. ``X-Tenant-ID`` header — matched against id, slug, domain or subdomain.
2. Host subdomain (``acme.tripgo.travel`` → ``acme``), or the full host as a
   custom domain. ``localhost``, ``api``, ``www`` and IP hosts are skipped.
3. ``?tenant=`` query parameter — matched against id, slug or subdomain.
4. ``settings.DEFAULT_TENANT_SLUG``.
"""

from __future__ import annotations

import ipaddress
import logging
import uuid
from typing import Optional

from fastapi import Depends, Request
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from tripgo.common.constants import TenantStatus
from tripgo.common.exceptions import ForbiddenException, NotFoundException
from tripgo.config import settings
from tripgo.database import get_db
from tripgo.tenants.models import Tenant

logger = logging.getLogger(__name__)

_IGNORED_SUBDOMAINS = {"localhost", "api", "www"}


def _as_uuid(value: str) -> Optional[uuid.UUID]:
    try:
        return uuid.UUID(value)
    except (ValueError, AttributeError):
        return None


async def _find_tenant(
    db: AsyncSession,
    identifier: str,
    *,
    include_domain: bool = True,
) -> Optional[Tenant]:
    conditions = [Tenant.slug == identifier, Tenant.subdomain == identifier]
    if include_domain:
        conditions.append(Tenant.domain == identifier)
    tenant_uuid = _as_uuid(identifier)
    if tenant_uuid is not None:
        conditions.append(Tenant.id == tenant_uuid)
    result = await db.execute(select(Tenant).where(or_(*conditions)).limit(1))
    return result.scalars().first()


def host_subdomain(host: str) -> Optional[str]:
    """Return the first label of *host* when it can name a tenant."""
    hostname = host.split(":", 1)[0].strip().lower()
    if not hostname or "." not in hostname:
        return None
    try:
        ipaddress.ip_address(hostname)
        return None
    except ValueError:
        pass
    label = hostname.split(".", 1)[0]
    if label in _IGNORED_SUBDOMAINS:
        return None
    return label


async def _resolve(request: Request, db: AsyncSession) -> Optional[Tenant]:
    header = request.headers.get("X-Tenant-ID") or request.headers.get("X-Tenant-Domain")
    if header:
        tenant = await _find_tenant(db, header.strip())
        if tenant is not None:
            return tenant

    host = request.headers.get("host", "")
    label = host_subdomain(host)
    if label:
        result = await db.execute(
            select(Tenant)
            .where(or_(Tenant.subdomain == label, Tenant.domain == host.split(":", 1)[0]))
            .limit(1),
        )
        tenant = result.scalars().first()
        if tenant is not None:
            return tenant

    query_value = request.query_params.get("tenant")
    if query_value:
        tenant = await _find_tenant(db, query_value.strip(), include_domain=False)
        if tenant is not None:
            return tenant

    result = await db.execute(
        select(Tenant).where(Tenant.slug == settings.DEFAULT_TENANT_SLUG),
    )
    return result.scalars().first()


async def get_current_tenant(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> Tenant:
    """Resolve the tenant for this request and attach it to ``request.state``."""
    tenant = await _resolve(request, db)
    if tenant is None:
        raise NotFoundException("Tenant", request.headers.get("X-Tenant-ID", settings.DEFAULT_TENANT_SLUG))
    if tenant.status == TenantStatus.suspended:
        raise ForbiddenException(detail="Tenant is currently suspended.")
    if tenant.status != TenantStatus.active:
        raise ForbiddenException(detail="Tenant is not active.")

    request.state.tenant = tenant
    return tenant

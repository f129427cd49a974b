"""Tenants router — super-admin tenant management plus public lookups.

Routes:
    /tenants                    — List, create
    /tenants/current            — Tenant resolved for this request (public)
    /tenants/by-domain/{domain} — Public lookup by custom domain / subdomain
    /tenants/{id}               — Get, update, delete
    /tenants/{id}/suspend       — Suspend
    /tenants/{id}/activate      — Re-activate
    /tenants/{id}/stats         — Usage statistics
"""


import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from tripgo.auth.dependencies import require_role
from tripgo.common.constants import TenantPlan, TenantStatus, UserRole
from tripgo.common.pagination import PaginationParams
from tripgo.common.responses import paginated_response, success_response
from tripgo.database import get_db
from tripgo.tenants.dependencies import get_current_tenant
from tripgo.tenants.models import Tenant
from tripgo.tenants.schemas import TenantBrief, TenantCreate, TenantResponse, TenantUpdate
from tripgo.tenants.service import TenantService
from tripgo.users.models import User

router = APIRouter(prefix="", tags=["tenants"])

_super_admin = require_role(UserRole.super_admin)


# ── Public ──────────────────────────────────────────────────────────

@router.get("/current")
async def current_tenant(tenant: Tenant = Depends(get_current_tenant)):
    return success_response(TenantBrief.model_validate(tenant))


@router.get("/by-domain/{domain}")
async def tenant_by_domain(domain: str, db: AsyncSession = Depends(get_db)):
    tenant = await TenantService.get_by_domain(db, domain)
    return success_response(TenantBrief.model_validate(tenant))


# ── Super admin ─────────────────────────────────────────────────────

@router.get("")
async def list_tenants(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(_super_admin),
    pagination: PaginationParams = Depends(),
    search: Optional[str] = Query(None, description="Search by name, slug or domain"),
    status_filter: Optional[TenantStatus] = Query(None, alias="status"),
    plan: Optional[TenantPlan] = Query(None),
):
    result = await TenantService.list_tenants(
        db, pagination, search=search, status=status_filter, plan=plan,
    )
    items = [TenantResponse.model_validate(t) for t in result.data]
    return paginated_response(items, result.meta)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_tenant(
    body: TenantCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(_super_admin),
):
    tenant = await TenantService.create_tenant(db, body, actor_id=current_user.id)
    return success_response(TenantResponse.model_validate(tenant), "Tenant created successfully")


@router.get("/{tenant_id}")
async def get_tenant(
    tenant_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(_super_admin),
):
    tenant = await TenantService.get_tenant(db, tenant_id)
    return success_response(TenantResponse.model_validate(tenant))


@router.put("/{tenant_id}")
async def update_tenant(
    tenant_id: uuid.UUID,
    body: TenantUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(_super_admin),
):
    tenant = await TenantService.update_tenant(db, tenant_id, body, actor_id=current_user.id)
    return success_response(TenantResponse.model_validate(tenant), "Tenant updated successfully")


@router.delete("/{tenant_id}")
async def delete_tenant(
    tenant_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(_super_admin),
):
    await TenantService.delete_tenant(db, tenant_id)
    return success_response(None, "Tenant deleted successfully")


@router.post("/{tenant_id}/suspend")
async def suspend_tenant(
    tenant_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(_super_admin),
):
    tenant = await TenantService.set_status(
        db, tenant_id, TenantStatus.suspended, actor_id=current_user.id,
    )
    return success_response(TenantResponse.model_validate(tenant), "Tenant suspended")


@router.post("/{tenant_id}/activate")
async def activate_tenant(
    tenant_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(_super_admin),
):
    tenant = await TenantService.set_status(
        db, tenant_id, TenantStatus.active, actor_id=current_user.id,
    )
    return success_response(TenantResponse.model_validate(tenant), "Tenant activated")


@router.get("/{tenant_id}/stats")
async def tenant_stats(
    tenant_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(_super_admin),
):
    stats = await TenantService.get_stats(db, tenant_id)
    return success_response(stats)

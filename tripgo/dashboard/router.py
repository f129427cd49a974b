"""Dashboard router — tenant overview for the admin panel."""


from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from tripgo.auth.dependencies import require_permission
from tripgo.common.responses import success_response
from tripgo.dashboard.service import DashboardService
from tripgo.database import get_db
from tripgo.tenants.dependencies import get_current_tenant
from tripgo.tenants.models import Tenant
from tripgo.users.models import User

router = APIRouter(prefix="", tags=["dashboard"])


# ── GET /overview ───────────────────────────────────────────────────

@router.get("/overview")
async def dashboard_overview(
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(require_permission("dashboard:read")),
):
    """Totals, recent bookings, six months of revenue and top destinations."""
    return success_response(await DashboardService.overview(db, tenant.id))

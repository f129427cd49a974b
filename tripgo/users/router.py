"""Users router — tenant-scoped user administration."""


import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from tripgo.auth.dependencies import get_current_user, require_permission
from tripgo.common.constants import UserRole
from tripgo.common.exceptions import ForbiddenException
from tripgo.common.pagination import PaginationParams
from tripgo.common.responses import paginated_response, success_response
from tripgo.database import get_db
from tripgo.tenants.dependencies import get_current_tenant
from tripgo.tenants.models import Tenant
from tripgo.users.models import User
from tripgo.users.schemas import RoleUpdate, UserCreate, UserResponse, UserUpdate
from tripgo.users.service import UserService

router = APIRouter(prefix="", tags=["users"])


@router.get("")
async def list_users(
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(require_permission("user:read_all")),
    pagination: PaginationParams = Depends(),
    role: Optional[UserRole] = Query(None),
    is_active: Optional[bool] = Query(None),
    search: Optional[str] = Query(None, description="Search by name or email"),
):
    result = await UserService.list_users(
        db, tenant.id, pagination, role=role, is_active=is_active, search=search,
    )
    items = [UserResponse.model_validate(u) for u in result.data]
    return paginated_response(items, result.meta)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_user(
    body: UserCreate,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(require_permission("user:create")),
):
    user = await UserService.create_user(db, tenant.id, body, actor=current_user)
    return success_response(UserResponse.model_validate(user), "User created successfully")


@router.get("/{user_id}")
async def get_user(
    user_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(get_current_user),
):
    if current_user.id != user_id and current_user.role not in (UserRole.admin, UserRole.super_admin):
        raise ForbiddenException(detail="You can only view your own account.")
    user = await UserService.get_user(db, tenant.id, user_id)
    return success_response(UserResponse.model_validate(user))


@router.put("/{user_id}")
async def update_user(
    user_id: uuid.UUID,
    body: UserUpdate,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(get_current_user),
):
    user = await UserService.update_user(db, tenant.id, user_id, body, actor=current_user)
    return success_response(UserResponse.model_validate(user), "User updated successfully")


@router.delete("/{user_id}")
async def delete_user(
    user_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(require_permission("user:delete")),
):
    await UserService.delete_user(db, tenant.id, user_id, actor=current_user)
    return success_response(None, "User deactivated successfully")


@router.put("/{user_id}/role")
async def change_user_role(
    user_id: uuid.UUID,
    body: RoleUpdate,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(require_permission("user:update")),
):
    user = await UserService.change_role(db, tenant.id, user_id, body.role, actor=current_user)
    return success_response(UserResponse.model_validate(user), "Role updated successfully")

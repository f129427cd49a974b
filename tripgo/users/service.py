"""User service layer — tenant-scoped account administration."""

from __future__ import annotations

import logging
import uuid
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tripgo.auth.service import hash_password, revoke_all_sessions
from tripgo.common.audit import create_audit_entry
from tripgo.common.constants import UserRole
from tripgo.common.exceptions import (
    BadRequestException,
    ConflictError,
    ForbiddenException,
    NotFoundException,
)
from tripgo.common.filters import apply_filters, apply_search
from tripgo.common.pagination import PaginatedResponse, PaginationParams, paginate
from tripgo.users.models import User
from tripgo.users.schemas import UserCreate, UserUpdate

logger = logging.getLogger(__name__)


def _is_admin(user: User) -> bool:
    return user.role in (UserRole.admin, UserRole.super_admin)


class UserService:
    """Async CRUD operations for users inside one tenant."""

    @staticmethod
    async def list_users(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        pagination: PaginationParams,
        *,
        role: Optional[UserRole] = None,
        is_active: Optional[bool] = None,
        search: Optional[str] = None,
    ) -> PaginatedResponse:
        query = (
            select(User)
            .where(User.tenant_id == tenant_id)
            .order_by(User.created_at.desc())
        )
        query = apply_filters(query, User, {"role": role, "is_active": is_active})
        query = apply_search(query, User, search, ["first_name", "last_name", "email"])
        return await paginate(db, query, pagination, model=User)

    @staticmethod
    async def get_user(db: AsyncSession, tenant_id: uuid.UUID, user_id: uuid.UUID) -> User:
        result = await db.execute(
            select(User).where(User.id == user_id, User.tenant_id == tenant_id),
        )
        user = result.scalars().first()
        if user is None:
            raise NotFoundException("User", str(user_id))
        return user

    @staticmethod
    async def create_user(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        data: UserCreate,
        *,
        actor: User,
    ) -> User:
        if data.role == UserRole.super_admin and actor.role != UserRole.super_admin:
            raise ForbiddenException(detail="Only a super admin can grant the super_admin role.")

        email = data.email.lower()
        existing = await db.execute(
            select(User.id).where(User.tenant_id == tenant_id, User.email == email),
        )
        if existing.first() is not None:
            raise ConflictError("email", email)

        user = User(
            tenant_id=tenant_id,
            email=email,
            password_hash=hash_password(data.password),
            first_name=data.first_name,
            last_name=data.last_name,
            phone=data.phone,
            role=data.role,
        )
        db.add(user)
        await db.flush()

        await create_audit_entry(
            db,
            action="create",
            entity_type="user",
            entity_id=user.id,
            tenant_id=tenant_id,
            actor_id=actor.id,
            new_values=data.model_dump(mode="json", exclude={"password"}),
        )
        return user

    @staticmethod
    async def update_user(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        user_id: uuid.UUID,
        data: UserUpdate,
        *,
        actor: User,
    ) -> User:
        """Users may edit themselves; admins may edit anyone (and toggle ``is_active``)."""
        if actor.id != user_id and not _is_admin(actor):
            raise ForbiddenException(detail="You can only update your own account.")

        user = await UserService.get_user(db, tenant_id, user_id)
        changes = data.model_dump(exclude_unset=True)
        if "is_active" in changes and not _is_admin(actor):
            raise ForbiddenException(detail="Only administrators can change account status.")

        for field, value in changes.items():
            if value is not None:
                setattr(user, field, value)
        await db.flush()
        return user

    @staticmethod
    async def delete_user(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        user_id: uuid.UUID,
        *,
        actor: User,
    ) -> User:
        """Soft delete: the account is deactivated and its sessions revoked."""
        if actor.id == user_id:
            raise BadRequestException("You cannot delete your own account.")

        user = await UserService.get_user(db, tenant_id, user_id)
        user.is_active = False
        await revoke_all_sessions(db, user.id)

        await create_audit_entry(
            db,
            action="deactivate",
            entity_type="user",
            entity_id=user.id,
            tenant_id=tenant_id,
            actor_id=actor.id,
        )
        logger.info("User %s deactivated by %s", user.id, actor.id)
        return user

    @staticmethod
    async def change_role(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        user_id: uuid.UUID,
        role: UserRole,
        *,
        actor: User,
    ) -> User:
        if role == UserRole.super_admin and actor.role != UserRole.super_admin:
            raise ForbiddenException(detail="Only a super admin can grant the super_admin role.")

        user = await UserService.get_user(db, tenant_id, user_id)
        if user.role == UserRole.super_admin and actor.role != UserRole.super_admin:
            raise ForbiddenException(detail="Only a super admin can change a super admin's role.")

        previous = user.role
        user.role = role
        await db.flush()

        await create_audit_entry(
            db,
            action="role_change",
            entity_type="user",
            entity_id=user.id,
            tenant_id=tenant_id,
            actor_id=actor.id,
            old_values={"role": previous.value},
            new_values={"role": role.value},
        )
        return user

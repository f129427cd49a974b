"""Auth dependencies — JWT validation, tenant matching, RBAC enforcement."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Callable, Optional

from fastapi import Depends, Request
from jose import ExpiredSignatureError, JWTError, jwt
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tripgo.auth.models import UserSession
from tripgo.auth.service import hash_token
from tripgo.common.constants import PERMISSIONS, UserRole
from tripgo.common.exceptions import ForbiddenException, UnauthorizedException
from tripgo.config import settings
from tripgo.database import get_db
from tripgo.tenants.dependencies import get_current_tenant
from tripgo.tenants.models import Tenant
from tripgo.users.models import User

# Role hierarchy: each role includes the roles it supervises
_ROLE_HIERARCHY: dict[UserRole, set[UserRole]] = {
    UserRole.super_admin: set(UserRole),
    UserRole.admin: {UserRole.admin, UserRole.hr_manager, UserRole.employee, UserRole.customer},
    UserRole.hr_manager: {UserRole.hr_manager, UserRole.employee},
    UserRole.employee: {UserRole.employee},
    UserRole.customer: {UserRole.customer},
}


def extract_bearer(request: Request) -> Optional[str]:
    """Return the Bearer token from the Authorization header, if any."""
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        return None
    return auth_header[7:].strip() or None


def has_role(role: UserRole, *allowed_roles: UserRole) -> bool:
    effective_roles = _ROLE_HIERARCHY.get(role, {role})
    return bool(effective_roles.intersection(allowed_roles))


def has_permission(user: User, permission: str) -> bool:
    return permission in PERMISSIONS.get(user.role, [])


# ── Core dependency ─────────────────────────────────────────────────

async def _authenticate(
    request: Request,
    db: AsyncSession,
    tenant: Tenant,
    token: str,
) -> User:
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
        )
    except ExpiredSignatureError:
        raise UnauthorizedException("Token has expired.")
    except JWTError:
        raise UnauthorizedException("Invalid token.")

    if payload.get("type") != "access":
        raise UnauthorizedException("Invalid token type.")

    # Verify session exists, not revoked, not expired
    result = await db.execute(
        select(UserSession).where(
            UserSession.token_hash == hash_token(token),
            UserSession.is_revoked.is_(False),
            UserSession.expires_at > datetime.now(timezone.utc),
        ),
    )
    if result.scalars().first() is None:
        raise UnauthorizedException("Session invalid or expired.")

    try:
        user_id = uuid.UUID(payload["sub"])
    except (KeyError, ValueError):
        raise UnauthorizedException("Invalid token.")

    user_result = await db.execute(
        select(User).where(User.id == user_id, User.is_active.is_(True)),
    )
    user = user_result.scalars().first()
    if user is None:
        raise UnauthorizedException("User account is inactive or not found.")

    if user.tenant_id != tenant.id and user.role != UserRole.super_admin:
        raise ForbiddenException(detail="Token does not belong to this tenant.")

    # Attach role to request state for downstream use
    request.state.user_role = user.role
    return user


async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
) -> User:
    """Validate JWT, verify session, return the authenticated User."""
    token = extract_bearer(request)
    if token is None:
        raise UnauthorizedException("Missing or invalid Authorization header.")
    return await _authenticate(request, db, tenant, token)


async def get_optional_user(
    request: Request,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
) -> Optional[User]:
    """Like ``get_current_user`` but returns ``None`` for anonymous or invalid tokens."""
    token = extract_bearer(request)
    if token is None:
        return None
    try:
        return await _authenticate(request, db, tenant, token)
    except (UnauthorizedException, ForbiddenException):
        return None


# ── Role-based dependency ───────────────────────────────────────────

def require_role(*allowed_roles: UserRole) -> Callable:
    """Return a FastAPI dependency that enforces role membership.

    Respects hierarchy — e.g. admin can access hr_manager endpoints.
    """

    async def _check(user: User = Depends(get_current_user)) -> User:
        if not has_role(user.role, *allowed_roles):
            raise ForbiddenException(
                detail=f"Role '{user.role.value}' is not permitted. Required: {[r.value for r in allowed_roles]}.",
            )
        return user

    return _check


# ── Permission-based dependency ─────────────────────────────────────

def require_permission(permission: str) -> Callable:
    """Return a FastAPI dependency that enforces a specific permission string."""

    async def _check(user: User = Depends(get_current_user)) -> User:
        if not has_permission(user, permission):
            raise ForbiddenException(
                detail=f"Permission '{permission}' is not granted to role '{user.role.value}'.",
            )
        return user

    return _check

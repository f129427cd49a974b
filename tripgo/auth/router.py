"""Auth router — register, login, logout, profile, password change."""

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from tripgo.auth.dependencies import extract_bearer, get_current_user
from tripgo.auth.schemas import (
    AuthResponse,
    ChangePasswordRequest,
    LoginRequest,
    MeResponse,
    ProfileUpdate,
    RegisterRequest,
)
from tripgo.auth.service import (
    authenticate,
    change_password,
    create_session,
    hash_token,
    register_user,
    revoke_session,
    update_profile,
)
from tripgo.common.audit import create_audit_entry
from tripgo.common.constants import PERMISSIONS
from tripgo.common.rate_limit import AUTH_RATE_LIMIT, limiter
from tripgo.common.responses import success_response
from tripgo.database import get_db
from tripgo.tenants.dependencies import get_current_tenant
from tripgo.tenants.models import Tenant
from tripgo.tenants.schemas import TenantBrief
from tripgo.users.models import User
from tripgo.users.schemas import UserResponse

router = APIRouter(prefix="", tags=["auth"])


def _client(request: Request) -> tuple[str | None, str | None]:
    ip = request.client.host if request.client else None
    return ip, request.headers.get("user-agent")


async def _issue(
    db: AsyncSession,
    request: Request,
    user: User,
    tenant: Tenant,
) -> AuthResponse:
    ip, user_agent = _client(request)
    token, expires_in = await create_session(db, user, ip, user_agent)
    return AuthResponse(
        user=UserResponse.model_validate(user),
        tenant=TenantBrief.model_validate(tenant),
        token=token,
        expires_in=expires_in,
    )


# ── POST /register — Create a customer account ─────────────────────

@router.post("/register", status_code=status.HTTP_201_CREATED)
@limiter.limit(AUTH_RATE_LIMIT)
async def register(
    request: Request,
    body: RegisterRequest,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
):
    user = await register_user(db, tenant, body)
    result = await _issue(db, request, user, tenant)
    await create_audit_entry(
        db,
        action="register",
        entity_type="user",
        entity_id=user.id,
        tenant_id=tenant.id,
        actor_id=user.id,
    )
    return success_response(result, "Registration successful")


# ── POST /login — Email + password ──────────────────────────────────

@router.post("/login")
@limiter.limit(AUTH_RATE_LIMIT)
async def login(
    request: Request,
    body: LoginRequest,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
):
    user = await authenticate(db, tenant, body.email, body.password)
    result = await _issue(db, request, user, tenant)
    ip, user_agent = _client(request)
    await create_audit_entry(
        db,
        action="login",
        entity_type="user_session",
        entity_id=user.id,
        tenant_id=tenant.id,
        actor_id=user.id,
        new_values={"ip": ip, "user_agent": user_agent},
        ip_address=ip,
        user_agent=user_agent,
    )
    return success_response(result, "Login successful")


# ── POST /logout — Revoke current session ──────────────────────────

@router.post("/logout")
async def logout(
    request: Request,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    token = extract_bearer(request) or ""
    await revoke_session(db, hash_token(token))
    return success_response(None, "Logged out successfully")


# ── GET /me — Current user profile ─────────────────────────────────

@router.get("/me")
async def me(
    user: User = Depends(get_current_user),
    tenant: Tenant = Depends(get_current_tenant),
):
    return success_response(
        MeResponse(
            user=UserResponse.model_validate(user),
            tenant=TenantBrief.model_validate(tenant),
            permissions=PERMISSIONS.get(user.role, []),
        ),
    )


# ── PUT /profile — Update own profile ──────────────────────────────

@router.put("/profile")
async def update_my_profile(
    body: ProfileUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    user = await update_profile(db, user, body)
    return success_response(UserResponse.model_validate(user), "Profile updated successfully")


# ── PUT /change-password ────────────────────────────────────────────

@router.put("/change-password")
async def change_my_password(
    body: ChangePasswordRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await change_password(db, user, body.current_password, body.new_password)
    return success_response(None, "Password changed successfully")

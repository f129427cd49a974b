"""Auth service — password hashing, JWT issuance, session lifecycle, profile."""

from __future__ import annotations

import hashlib
import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from jose import jwt
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tripgo.auth.models import UserSession
from tripgo.auth.schemas import ProfileUpdate, RegisterRequest
from tripgo.common.constants import UserRole
from tripgo.common.exceptions import (
    BadRequestException,
    ConflictError,
    UnauthorizedException,
)
from tripgo.config import settings
from tripgo.tenants.models import Tenant
from tripgo.users.models import User

logger = logging.getLogger(__name__)


# ── Passwords ───────────────────────────────────────────────────────

def hash_password(plain_password: str) -> str:
    salt = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(plain_password.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return bcrypt.checkpw(
            plain_password.encode("utf-8"), hashed_password.encode("utf-8"),
        )
    except ValueError:
        # Malformed stored hash
        return False


# ── JWT helpers ─────────────────────────────────────────────────────

def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()


def create_access_token(
    user_id: uuid.UUID,
    tenant_id: uuid.UUID,
    role: UserRole,
) -> tuple[str, int]:
    """Return (encoded_jwt, expires_in_seconds)."""
    expires_in = settings.JWT_EXPIRY_HOURS * 3600
    payload = {
        "sub": str(user_id),
        "tenant_id": str(tenant_id),
        "role": role.value,
        "type": "access",
        "jti": uuid.uuid4().hex,  # distinct hash per login
        "exp": datetime.now(timezone.utc) + timedelta(hours=settings.JWT_EXPIRY_HOURS),
    }
    token = jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
    return token, expires_in


# ── Session management ──────────────────────────────────────────────

async def create_session(
    db: AsyncSession,
    user: User,
    ip: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> tuple[str, int]:
    """Issue an access token and persist its session row.  Returns (token, expires_in)."""
    token, expires_in = create_access_token(user.id, user.tenant_id, user.role)
    db.add(
        UserSession(
            user_id=user.id,
            tenant_id=user.tenant_id,
            token_hash=hash_token(token),
            ip_address=ip,
            user_agent=user_agent,
            expires_at=datetime.now(timezone.utc) + timedelta(seconds=expires_in),
        ),
    )
    await db.flush()
    return token, expires_in


async def revoke_session(db: AsyncSession, token_hash: str) -> None:
    """Mark a session as revoked by its token hash."""
    result = await db.execute(
        select(UserSession).where(UserSession.token_hash == token_hash),
    )
    session = result.scalars().first()
    if session:
        session.is_revoked = True
        await db.flush()


async def revoke_all_sessions(db: AsyncSession, user_id: uuid.UUID) -> None:
    result = await db.execute(
        select(UserSession).where(
            UserSession.user_id == user_id,
            UserSession.is_revoked.is_(False),
        ),
    )
    for session in result.scalars().all():
        session.is_revoked = True
    await db.flush()


# ── Registration / login ────────────────────────────────────────────

async def get_user_by_email(
    db: AsyncSession,
    tenant_id: uuid.UUID,
    email: str,
) -> Optional[User]:
    result = await db.execute(
        select(User).where(User.tenant_id == tenant_id, User.email == email.lower()),
    )
    return result.scalars().first()


async def register_user(
    db: AsyncSession,
    tenant: Tenant,
    data: RegisterRequest,
    *,
    role: UserRole = UserRole.customer,
) -> User:
    """Create a user in *tenant*; email must be unused there."""
    email = data.email.lower()
    if await get_user_by_email(db, tenant.id, email) is not None:
        raise ConflictError("email", email)

    user = User(
        tenant_id=tenant.id,
        email=email,
        password_hash=hash_password(data.password),
        first_name=data.first_name,
        last_name=data.last_name,
        phone=data.phone,
        role=role,
    )
    db.add(user)
    await db.flush()
    logger.info("Registered user %s in tenant %s", user.id, tenant.slug)
    return user


async def authenticate(
    db: AsyncSession,
    tenant: Tenant,
    email: str,
    password: str,
) -> User:
    """Return the user for valid credentials; 401 otherwise (same message either way)."""
    user = await get_user_by_email(db, tenant.id, email)
    if user is None or not verify_password(password, user.password_hash):
        raise UnauthorizedException("Invalid email or password.")
    if not user.is_active:
        raise UnauthorizedException("Account is deactivated.")

    user.last_login_at = datetime.now(timezone.utc)
    await db.flush()
    return user


# ── Profile ─────────────────────────────────────────────────────────

async def update_profile(db: AsyncSession, user: User, data: ProfileUpdate) -> User:
    for field, value in data.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(user, field, value)
    await db.flush()
    return user


async def change_password(
    db: AsyncSession,
    user: User,
    current_password: str,
    new_password: str,
) -> None:
    if not verify_password(current_password, user.password_hash):
        raise BadRequestException("Current password is incorrect.")
    if current_password == new_password:
        raise BadRequestException("New password must differ from the current password.")
    user.password_hash = hash_password(new_password)
    await db.flush()
    logger.info("Password changed for user %s", user.id)

"""Tenant Pydantic schemas."""


import uuid
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from tripgo.common.constants import TenantPlan, TenantStatus

_SLUG_PATTERN = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"


# ── Requests ────────────────────────────────────────────────────────

class TenantCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    slug: Optional[str] = Field(None, max_length=100, pattern=_SLUG_PATTERN)
    subdomain: Optional[str] = Field(None, max_length=100, pattern=_SLUG_PATTERN)
    domain: Optional[str] = Field(None, max_length=255)
    plan: TenantPlan = TenantPlan.basic
    contact_email: Optional[EmailStr] = None
    settings: dict[str, Any] = Field(default_factory=dict)


class TenantUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    domain: Optional[str] = Field(None, max_length=255)
    subdomain: Optional[str] = Field(None, max_length=100, pattern=_SLUG_PATTERN)
    plan: Optional[TenantPlan] = None
    contact_email: Optional[EmailStr] = None
    settings: Optional[dict[str, Any]] = None


# ── Responses ───────────────────────────────────────────────────────

class TenantBrief(BaseModel):
    """Public view of a tenant (no settings, no contact)."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    slug: str
    domain: Optional[str] = None
    subdomain: str


class TenantResponse(TenantBrief):
    plan: TenantPlan
    status: TenantStatus
    settings: Optional[dict[str, Any]] = None
    contact_email: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class TenantStats(BaseModel):
    users: int = 0
    active_users: int = 0
    bookings: int = 0
    confirmed_bookings: int = 0
    revenue: Decimal = Decimal("0")
    cruises: int = 0
    hotels: int = 0
    packages: int = 0
    blog_posts: int = 0
    media_files: int = 0

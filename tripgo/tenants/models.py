"""Tenant ORM model."""

from __future__ import annotations

import uuid
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from tripgo.common.audit import TimestampMixin
from tripgo.common.constants import TenantPlan, TenantStatus
from tripgo.database import Base


class Tenant(Base, TimestampMixin):
    """An organisation running its own storefront and back office."""

    __tablename__ = "tenants"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    slug: Mapped[str] = mapped_column(sa.String(100), unique=True, nullable=False)
    domain: Mapped[Optional[str]] = mapped_column(sa.String(255), unique=True)
    subdomain: Mapped[str] = mapped_column(sa.String(100), unique=True, nullable=False)
    plan: Mapped[TenantPlan] = mapped_column(
        sa.Enum(TenantPlan, name="tenant_plan"),
        nullable=False,
        default=TenantPlan.basic,
    )
    status: Mapped[TenantStatus] = mapped_column(
        sa.Enum(TenantStatus, name="tenant_status"),
        nullable=False,
        default=TenantStatus.active,
    )
    settings: Mapped[Optional[dict]] = mapped_column(JSONB, default=dict)
    contact_email: Mapped[Optional[str]] = mapped_column(sa.String(255))

    @property
    def is_active(self) -> bool:
        return self.status == TenantStatus.active

    def __repr__(self) -> str:
        return f"<Tenant {self.slug!r} ({self.status.value})>"

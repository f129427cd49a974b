"""Site content ORM models: SiteSetting, HeroSetting, Footer*, ContentPage.

Everything here is tenant-scoped storefront configuration edited from the
back office and read by the public site.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tripgo.common.audit import TimestampMixin
from tripgo.common.constants import SettingType
from tripgo.database import Base


def _tenant_fk() -> Mapped[uuid.UUID]:
    return mapped_column(
        UUID(as_uuid=True),
        sa.ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )


# ═════════════════════════════════════════════════════════════════════
# Settings
# ═════════════════════════════════════════════════════════════════════


class SiteSetting(Base, TimestampMixin):
    """One key/value pair; ``value`` is stored as JSON of the declared type."""

    __tablename__ = "site_settings"
    __table_args__ = (
        sa.UniqueConstraint("tenant_id", "key", name="uq_site_setting_key"),
        sa.Index("ix_site_settings_tenant_category", "tenant_id", "category"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    tenant_id: Mapped[uuid.UUID] = _tenant_fk()
    key: Mapped[str] = mapped_column(sa.String(100), nullable=False)
    value: Mapped[Any] = mapped_column(JSONB, nullable=True)
    value_type: Mapped[SettingType] = mapped_column(
        sa.Enum(SettingType, name="setting_type"),
        nullable=False,
        default=SettingType.text,
    )
    category: Mapped[str] = mapped_column(sa.String(50), nullable=False, default="general")
    label: Mapped[Optional[str]] = mapped_column(sa.String(150))
    description: Mapped[Optional[str]] = mapped_column(sa.Text)
    is_public: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, default=False)
    updated_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="SET NULL"),
    )

    def __repr__(self) -> str:
        return f"<SiteSetting {self.key!r}>"


# ═════════════════════════════════════════════════════════════════════
# Hero sections
# ═════════════════════════════════════════════════════════════════════


class HeroSetting(Base, TimestampMixin):
    """The hero banner of one storefront page (``home``, ``cruises`` ...)."""

    __tablename__ = "hero_settings"
    __table_args__ = (
        sa.UniqueConstraint("tenant_id", "page", name="uq_hero_page"),
        sa.CheckConstraint(
            "overlay_opacity >= 0 AND overlay_opacity <= 1", name="ck_hero_overlay",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    tenant_id: Mapped[uuid.UUID] = _tenant_fk()
    page: Mapped[str] = mapped_column(sa.String(50), nullable=False)
    title: Mapped[Optional[str]] = mapped_column(sa.String(200))
    subtitle: Mapped[Optional[str]] = mapped_column(sa.Text)
    cta_text: Mapped[Optional[str]] = mapped_column(sa.String(100))
    cta_link: Mapped[Optional[str]] = mapped_column(sa.String(500))
    video_url: Mapped[Optional[str]] = mapped_column(sa.String(500))
    video_poster: Mapped[Optional[str]] = mapped_column(sa.String(500))
    video_loop: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, default=True)
    video_autoplay: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, default=True)
    video_muted: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, default=True)
    fallback_image: Mapped[Optional[str]] = mapped_column(sa.String(500))
    overlay_color: Mapped[str] = mapped_column(sa.String(20), nullable=False, default="#000000")
    overlay_opacity: Mapped[Decimal] = mapped_column(
        sa.Numeric(3, 2), nullable=False, default=Decimal("0.40"),
    )
    display_order: Mapped[int] = mapped_column(sa.Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, default=True)

    def __repr__(self) -> str:
        return f"<HeroSetting {self.page!r}>"


# ═════════════════════════════════════════════════════════════════════
# Footer
# ═════════════════════════════════════════════════════════════════════


class FooterConfig(Base, TimestampMixin):
    """Footer of a tenant's storefront; at most one per tenant."""

    __tablename__ = "footer_configs"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    tenant_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        sa.ForeignKey("tenants.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    company_name: Mapped[Optional[str]] = mapped_column(sa.String(200))
    company_tagline: Mapped[Optional[str]] = mapped_column(sa.String(255))
    description: Mapped[Optional[str]] = mapped_column(sa.Text)
    logo: Mapped[Optional[str]] = mapped_column(sa.String(500))
    copyright_text: Mapped[Optional[str]] = mapped_column(sa.String(255))
    email: Mapped[Optional[str]] = mapped_column(sa.String(255))
    phone: Mapped[Optional[str]] = mapped_column(sa.String(50))
    address: Mapped[Optional[str]] = mapped_column(sa.Text)
    social_links: Mapped[dict] = mapped_column(JSONB, nullable=False, default=dict)
    show_newsletter: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, default=True)
    newsletter_title: Mapped[Optional[str]] = mapped_column(sa.String(200))
    newsletter_text: Mapped[Optional[str]] = mapped_column(sa.Text)
    background_color: Mapped[Optional[str]] = mapped_column(sa.String(20))
    text_color: Mapped[Optional[str]] = mapped_column(sa.String(20))
    accent_color: Mapped[Optional[str]] = mapped_column(sa.String(20))
    is_active: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, default=True)

    sections: Mapped[list[FooterSection]] = relationship(
        back_populates="footer",
        cascade="all, delete-orphan",
        order_by="FooterSection.display_order",
    )


class FooterSection(Base, TimestampMixin):
    __tablename__ = "footer_sections"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    tenant_id: Mapped[uuid.UUID] = _tenant_fk()
    footer_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        sa.ForeignKey("footer_configs.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(sa.String(100), nullable=False)
    display_order: Mapped[int] = mapped_column(sa.Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, default=True)

    footer: Mapped[FooterConfig] = relationship(back_populates="sections")
    links: Mapped[list[FooterLink]] = relationship(
        back_populates="section",
        cascade="all, delete-orphan",
        order_by="FooterLink.display_order",
    )


class FooterLink(Base, TimestampMixin):
    __tablename__ = "footer_links"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    tenant_id: Mapped[uuid.UUID] = _tenant_fk()
    section_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        sa.ForeignKey("footer_sections.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    label: Mapped[str] = mapped_column(sa.String(100), nullable=False)
    url: Mapped[str] = mapped_column(sa.String(500), nullable=False)
    icon: Mapped[Optional[str]] = mapped_column(sa.String(50))
    open_in_new_tab: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, default=False)
    display_order: Mapped[int] = mapped_column(sa.Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, default=True)

    section: Mapped[FooterSection] = relationship(back_populates="links")


# ═════════════════════════════════════════════════════════════════════
# Content pages
# ═════════════════════════════════════════════════════════════════════


class ContentPage(Base, TimestampMixin):
    """A static storefront page such as About, Terms or Privacy."""

    __tablename__ = "content_pages"
    __table_args__ = (
        sa.UniqueConstraint("tenant_id", "slug", name="uq_content_page_slug"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    tenant_id: Mapped[uuid.UUID] = _tenant_fk()
    title: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    slug: Mapped[str] = mapped_column(sa.String(220), nullable=False)
    body: Mapped[str] = mapped_column(sa.Text, nullable=False)
    seo_title: Mapped[Optional[str]] = mapped_column(sa.String(200))
    seo_description: Mapped[Optional[str]] = mapped_column(sa.String(500))
    published: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, default=False)
    published_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    updated_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="SET NULL"),
    )

    def __repr__(self) -> str:
        return f"<ContentPage {self.slug!r}>"

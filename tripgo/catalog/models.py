"""Catalog ORM models: CruiseCategory, Cruise, CruiseDeparture, Hotel, Package, Review.

Prices are stored as NUMERIC(10, 2) in the tenant's currency; JSONB columns
hold ordered lists (images, amenities, itinerary days, inclusions).
"""

from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tripgo.common.audit import TimestampMixin
from tripgo.common.constants import BookingType, DepartureStatus
from tripgo.database import Base

if TYPE_CHECKING:
    from tripgo.users.models import User


def _tenant_fk() -> Mapped[uuid.UUID]:
    return mapped_column(
        UUID(as_uuid=True),
        sa.ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )


# ═════════════════════════════════════════════════════════════════════
# Cruise categories
# ═════════════════════════════════════════════════════════════════════


class CruiseCategory(Base, TimestampMixin):
    __tablename__ = "cruise_categories"
    __table_args__ = (
        sa.UniqueConstraint("tenant_id", "slug", name="uq_cruise_category_slug"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    tenant_id: Mapped[uuid.UUID] = _tenant_fk()
    name: Mapped[str] = mapped_column(sa.String(150), nullable=False)
    slug: Mapped[str] = mapped_column(sa.String(160), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(sa.Text)
    icon: Mapped[Optional[str]] = mapped_column(sa.String(100))
    sort_order: Mapped[int] = mapped_column(sa.Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, default=True)

    cruises: Mapped[list[Cruise]] = relationship(back_populates="category")

    def __repr__(self) -> str:
        return f"<CruiseCategory {self.slug!r}>"


# ═════════════════════════════════════════════════════════════════════
# Cruises
# ═════════════════════════════════════════════════════════════════════


class Cruise(Base, TimestampMixin):
    """A sailing product; ``price`` is per person for the whole voyage."""

    __tablename__ = "cruises"
    __table_args__ = (
        sa.UniqueConstraint("tenant_id", "slug", name="uq_cruise_slug"),
        sa.CheckConstraint("capacity >= 0", name="ck_cruise_capacity"),
        sa.CheckConstraint("price >= 0", name="ck_cruise_price"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    tenant_id: Mapped[uuid.UUID] = _tenant_fk()
    category_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        sa.ForeignKey("cruise_categories.id", ondelete="SET NULL"),
    )
    name: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    slug: Mapped[str] = mapped_column(sa.String(220), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(sa.Text)
    departure_port: Mapped[str] = mapped_column(sa.String(150), nullable=False)
    destination: Mapped[str] = mapped_column(sa.String(150), nullable=False)
    duration: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    capacity: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    price: Mapped[Decimal] = mapped_column(sa.Numeric(10, 2), nullable=False)
    rating: Mapped[Decimal] = mapped_column(sa.Numeric(3, 2), nullable=False, default=Decimal("0"))
    review_count: Mapped[int] = mapped_column(sa.Integer, nullable=False, default=0)
    images: Mapped[list] = mapped_column(JSONB, nullable=False, default=list)
    amenities: Mapped[list] = mapped_column(JSONB, nullable=False, default=list)
    itinerary: Mapped[list] = mapped_column(JSONB, nullable=False, default=list)
    highlights: Mapped[list] = mapped_column(JSONB, nullable=False, default=list)
    is_active: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, default=True)

    # ── Relationships ───────────────────────────────────────────────
    category: Mapped[Optional[CruiseCategory]] = relationship(back_populates="cruises")
    departures: Mapped[list[CruiseDeparture]] = relationship(
        back_populates="cruise",
        cascade="all, delete-orphan",
        order_by="CruiseDeparture.departure_date",
    )

    def __repr__(self) -> str:
        return f"<Cruise {self.slug!r}>"


class CruiseDeparture(Base, TimestampMixin):
    """A dated sailing of a cruise."""

    __tablename__ = "cruise_departures"
    __table_args__ = (
        sa.UniqueConstraint("cruise_id", "departure_date", name="uq_cruise_departure_date"),
        sa.CheckConstraint("return_date > departure_date", name="ck_departure_dates"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    tenant_id: Mapped[uuid.UUID] = _tenant_fk()
    cruise_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        sa.ForeignKey("cruises.id", ondelete="CASCADE"),
        nullable=False,
    )
    departure_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    return_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    available_cabins: Mapped[int] = mapped_column(sa.Integer, nullable=False, default=0)
    price_override: Mapped[Optional[Decimal]] = mapped_column(sa.Numeric(10, 2))
    status: Mapped[DepartureStatus] = mapped_column(
        sa.Enum(DepartureStatus, name="departure_status"),
        nullable=False,
        default=DepartureStatus.scheduled,
    )

    cruise: Mapped[Cruise] = relationship(back_populates="departures")


# ═════════════════════════════════════════════════════════════════════
# Hotels
# ═════════════════════════════════════════════════════════════════════


class Hotel(Base, TimestampMixin):
    __tablename__ = "hotels"
    __table_args__ = (
        sa.UniqueConstraint("tenant_id", "slug", name="uq_hotel_slug"),
        sa.CheckConstraint("price_per_night >= 0", name="ck_hotel_price"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    tenant_id: Mapped[uuid.UUID] = _tenant_fk()
    name: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    slug: Mapped[str] = mapped_column(sa.String(220), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(sa.Text)
    address: Mapped[Optional[str]] = mapped_column(sa.Text)
    city: Mapped[str] = mapped_column(sa.String(120), nullable=False)
    country: Mapped[str] = mapped_column(sa.String(120), nullable=False)
    rating: Mapped[Decimal] = mapped_column(sa.Numeric(3, 2), nullable=False, default=Decimal("0"))
    review_count: Mapped[int] = mapped_column(sa.Integer, nullable=False, default=0)
    price_per_night: Mapped[Decimal] = mapped_column(sa.Numeric(10, 2), nullable=False)
    images: Mapped[list] = mapped_column(JSONB, nullable=False, default=list)
    amenities: Mapped[list] = mapped_column(JSONB, nullable=False, default=list)
    rooms: Mapped[list] = mapped_column(JSONB, nullable=False, default=list)
    is_active: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, default=True)

    def __repr__(self) -> str:
        return f"<Hotel {self.slug!r}>"


# ═════════════════════════════════════════════════════════════════════
# Packages
# ═════════════════════════════════════════════════════════════════════


class Package(Base, TimestampMixin):
    __tablename__ = "packages"
    __table_args__ = (
        sa.UniqueConstraint("tenant_id", "slug", name="uq_package_slug"),
        sa.CheckConstraint("price >= 0", name="ck_package_price"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    tenant_id: Mapped[uuid.UUID] = _tenant_fk()
    name: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    slug: Mapped[str] = mapped_column(sa.String(220), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(sa.Text)
    destination: Mapped[str] = mapped_column(sa.String(150), nullable=False)
    duration: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    price: Mapped[Decimal] = mapped_column(sa.Numeric(10, 2), nullable=False)
    rating: Mapped[Decimal] = mapped_column(sa.Numeric(3, 2), nullable=False, default=Decimal("0"))
    review_count: Mapped[int] = mapped_column(sa.Integer, nullable=False, default=0)
    images: Mapped[list] = mapped_column(JSONB, nullable=False, default=list)
    inclusions: Mapped[list] = mapped_column(JSONB, nullable=False, default=list)
    exclusions: Mapped[list] = mapped_column(JSONB, nullable=False, default=list)
    itinerary: Mapped[list] = mapped_column(JSONB, nullable=False, default=list)
    is_active: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, default=True)

    def __repr__(self) -> str:
        return f"<Package {self.slug!r}>"


# ═════════════════════════════════════════════════════════════════════
# Reviews (cruise / hotel / package)
# ═════════════════════════════════════════════════════════════════════


class Review(Base, TimestampMixin):
    __tablename__ = "reviews"
    __table_args__ = (
        sa.CheckConstraint("rating BETWEEN 1 AND 5", name="ck_review_rating"),
        sa.Index("ix_reviews_item", "item_type", "item_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    tenant_id: Mapped[uuid.UUID] = _tenant_fk()
    item_type: Mapped[BookingType] = mapped_column(
        sa.Enum(BookingType, name="review_item_type"), nullable=False,
    )
    item_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False)
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        sa.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    rating: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    comment: Mapped[Optional[str]] = mapped_column(sa.Text)

    user: Mapped[User] = relationship()

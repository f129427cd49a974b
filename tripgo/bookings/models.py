"""Booking ORM model."""

from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tripgo.common.audit import TimestampMixin
from tripgo.common.constants import BookingStatus, BookingType, PaymentStatus
from tripgo.database import Base

if TYPE_CHECKING:
    from tripgo.catalog.models import Cruise, Hotel, Package
    from tripgo.users.models import User


class Booking(Base, TimestampMixin):
    """A reservation of one cruise sailing, hotel stay or package.

    The price breakdown is computed server-side at creation time and frozen
    on the row; ``total_amount`` is never taken from the client.
    """

    __tablename__ = "bookings"
    __table_args__ = (
        sa.CheckConstraint("guests >= 1", name="ck_booking_guests"),
        sa.Index("ix_bookings_tenant_status", "tenant_id", "status"),
        sa.Index("ix_bookings_cruise_sailing", "cruise_id", "sailing_date"),
        sa.Index("ix_bookings_user", "user_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    tenant_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        sa.ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        sa.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    reference: Mapped[str] = mapped_column(sa.String(20), unique=True, nullable=False)
    booking_type: Mapped[BookingType] = mapped_column(
        sa.Enum(BookingType, name="booking_type"), nullable=False,
    )

    # ── Booked item (exactly one is set) ────────────────────────────
    cruise_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True), sa.ForeignKey("cruises.id", ondelete="SET NULL"),
    )
    hotel_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True), sa.ForeignKey("hotels.id", ondelete="SET NULL"),
    )
    package_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True), sa.ForeignKey("packages.id", ondelete="SET NULL"),
    )

    # ── Travellers / dates ──────────────────────────────────────────
    guests: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    adults: Mapped[int] = mapped_column(sa.Integer, nullable=False, default=1)
    children: Mapped[int] = mapped_column(sa.Integer, nullable=False, default=0)
    sailing_date: Mapped[Optional[date]] = mapped_column(sa.Date)
    travel_date: Mapped[Optional[date]] = mapped_column(sa.Date)
    check_in: Mapped[Optional[date]] = mapped_column(sa.Date)
    check_out: Mapped[Optional[date]] = mapped_column(sa.Date)

    # ── Cruise options ──────────────────────────────────────────────
    cabin_type: Mapped[Optional[str]] = mapped_column(sa.String(30))
    addons: Mapped[list] = mapped_column(JSONB, nullable=False, default=list)
    promo_code: Mapped[Optional[str]] = mapped_column(sa.String(50))

    # ── Price breakdown ─────────────────────────────────────────────
    subtotal: Mapped[Decimal] = mapped_column(sa.Numeric(12, 2), nullable=False, default=Decimal("0"))
    discount: Mapped[Decimal] = mapped_column(sa.Numeric(12, 2), nullable=False, default=Decimal("0"))
    taxes: Mapped[Decimal] = mapped_column(sa.Numeric(12, 2), nullable=False, default=Decimal("0"))
    fees: Mapped[Decimal] = mapped_column(sa.Numeric(12, 2), nullable=False, default=Decimal("0"))
    total_amount: Mapped[Decimal] = mapped_column(sa.Numeric(12, 2), nullable=False)

    # ── Lifecycle ───────────────────────────────────────────────────
    status: Mapped[BookingStatus] = mapped_column(
        sa.Enum(BookingStatus, name="booking_status"),
        nullable=False,
        default=BookingStatus.pending,
    )
    payment_status: Mapped[PaymentStatus] = mapped_column(
        sa.Enum(PaymentStatus, name="payment_status"),
        nullable=False,
        default=PaymentStatus.unpaid,
    )
    payment_reference: Mapped[Optional[str]] = mapped_column(sa.String(100))
    special_requests: Mapped[Optional[str]] = mapped_column(sa.Text)
    admin_notes: Mapped[Optional[str]] = mapped_column(sa.Text)
    cancellation_reason: Mapped[Optional[str]] = mapped_column(sa.Text)
    assigned_agent_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="SET NULL"),
    )
    confirmed_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    cancelled_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    completed_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    reminder_sent_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    confirmation_sent_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))

    # ── Relationships ───────────────────────────────────────────────
    user: Mapped[User] = relationship(foreign_keys=[user_id])
    assigned_agent: Mapped[Optional[User]] = relationship(foreign_keys=[assigned_agent_id])
    cruise: Mapped[Optional[Cruise]] = relationship()
    hotel: Mapped[Optional[Hotel]] = relationship()
    package: Mapped[Optional[Package]] = relationship()

    @property
    def item_name(self) -> Optional[str]:
        item = {
            BookingType.cruise: self.cruise,
            BookingType.hotel: self.hotel,
            BookingType.package: self.package,
        }.get(self.booking_type)
        return item.name if item is not None else None

    @property
    def nights(self) -> Optional[int]:
        if self.check_in and self.check_out:
            return (self.check_out - self.check_in).days
        return None

    def __repr__(self) -> str:
        return f"<Booking {self.reference} {self.status.value}>"

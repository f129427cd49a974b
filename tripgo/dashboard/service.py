"""Dashboard service — read-only aggregation across catalog, users and bookings.

Counts are done with COUNT at DB level; month bucketing is done in Python so
the same code runs on PostgreSQL and SQLite.
"""

from __future__ import annotations

import uuid
from collections import Counter
from datetime import date, datetime, time, timezone
from decimal import Decimal
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from tripgo.bookings.models import Booking
from tripgo.bookings.schemas import AdminBookingResponse
from tripgo.bookings.service import REVENUE_STATUSES
from tripgo.catalog.models import Cruise, Hotel, Package
from tripgo.common.constants import BookingStatus, UserRole
from tripgo.dashboard.schemas import (
    DashboardOverview,
    DashboardTotals,
    DestinationCount,
    MonthlyRevenue,
)
from tripgo.users.models import User

REVENUE_MONTHS = 6
TOP_DESTINATIONS = 5


def _month_starts(today: date, count: int) -> list[date]:
    """First day of the last *count* months, oldest first, current month last."""
    months = []
    year, month = today.year, today.month
    for _ in range(count):
        months.append(date(year, month, 1))
        month -= 1
        if month == 0:
            year, month = year - 1, 12
    return list(reversed(months))


class DashboardService:
    """Async dashboard aggregation queries."""

    @staticmethod
    async def overview(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        today: Optional[date] = None,
    ) -> DashboardOverview:
        today = today or datetime.now(timezone.utc).date()

        def _count(model, *conditions):
            return select(func.count(model.id)).where(model.tenant_id == tenant_id, *conditions)

        (
            users,
            customers,
            bookings,
            pending,
            revenue,
            cruises,
            hotels,
            packages,
        ) = await _multi_scalar(
            db,
            _count(User),
            _count(User, User.role == UserRole.customer),
            _count(Booking),
            _count(Booking, Booking.status == BookingStatus.pending),
            select(func.coalesce(func.sum(Booking.total_amount), 0)).where(
                Booking.tenant_id == tenant_id, Booking.status.in_(REVENUE_STATUSES),
            ),
            _count(Cruise),
            _count(Hotel),
            _count(Package),
        )

        totals = DashboardTotals(
            users=users or 0,
            customers=customers or 0,
            bookings=bookings or 0,
            pending_bookings=pending or 0,
            confirmed_revenue=Decimal(str(revenue or 0)),
            cruises=cruises or 0,
            hotels=hotels or 0,
            packages=packages or 0,
        )

        recent = (
            await db.execute(
                select(Booking)
                .where(Booking.tenant_id == tenant_id)
                .options(
                    selectinload(Booking.user),
                    selectinload(Booking.assigned_agent),
                    selectinload(Booking.cruise),
                    selectinload(Booking.hotel),
                    selectinload(Booking.package),
                )
                .order_by(Booking.created_at.desc())
                .limit(5),
            )
        ).scalars().all()

        return DashboardOverview(
            totals=totals,
            recent_bookings=[AdminBookingResponse.model_validate(b) for b in recent],
            revenue_by_month=await DashboardService.revenue_by_month(db, tenant_id, today),
            top_destinations=await DashboardService.top_destinations(db, tenant_id),
        )

    @staticmethod
    async def revenue_by_month(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        today: date,
        months: int = REVENUE_MONTHS,
    ) -> list[MonthlyRevenue]:
        starts = _month_starts(today, months)
        since = datetime.combine(starts[0], time.min, tzinfo=timezone.utc)
        rows = await db.execute(
            select(Booking.created_at, Booking.total_amount).where(
                Booking.tenant_id == tenant_id,
                Booking.status.in_(REVENUE_STATUSES),
                Booking.created_at >= since,
            ),
        )
        buckets = {s.strftime("%Y-%m"): [0, Decimal("0")] for s in starts}
        for created_at, amount in rows.all():
            key = created_at.strftime("%Y-%m")
            if key in buckets:
                buckets[key][0] += 1
                buckets[key][1] += Decimal(amount)
        return [
            MonthlyRevenue(month=key, bookings=count, revenue=total)
            for key, (count, total) in buckets.items()
        ]

    @staticmethod
    async def top_destinations(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        limit: int = TOP_DESTINATIONS,
    ) -> list[DestinationCount]:
        """Destinations ranked by non-cancelled bookings (cruises, packages, hotel cities)."""
        active = Booking.status != BookingStatus.cancelled
        counts: Counter[str] = Counter()
        for model, column, fk in (
            (Cruise, Cruise.destination, Booking.cruise_id == Cruise.id),
            (Package, Package.destination, Booking.package_id == Package.id),
            (Hotel, Hotel.city, Booking.hotel_id == Hotel.id),
        ):
            rows = await db.execute(
                select(column, func.count(Booking.id))
                .join(model, fk)
                .where(Booking.tenant_id == tenant_id, active)
                .group_by(column),
            )
            for destination, count in rows.all():
                if destination:
                    counts[destination] += count
        ranked = sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))[:limit]
        return [DestinationCount(destination=d, bookings=c) for d, c in ranked]


async def _multi_scalar(db: AsyncSession, *stmts) -> list:
    """Execute multiple scalar queries and return their results in order."""
    results = []
    for stmt in stmts:
        result = await db.execute(stmt)
        results.append(result.scalar())
    return results

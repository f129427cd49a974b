"""Dashboard response schemas."""


from decimal import Decimal

from pydantic import BaseModel

from tripgo.bookings.schemas import AdminBookingResponse


class DashboardTotals(BaseModel):
    users: int
    customers: int
    bookings: int
    pending_bookings: int
    confirmed_revenue: Decimal
    cruises: int
    hotels: int
    packages: int


class MonthlyRevenue(BaseModel):
    month: str  # YYYY-MM
    bookings: int
    revenue: Decimal


class DestinationCount(BaseModel):
    destination: str
    bookings: int


class DashboardOverview(BaseModel):
    totals: DashboardTotals
    recent_bookings: list[AdminBookingResponse]
    revenue_by_month: list[MonthlyRevenue]
    top_destinations: list[DestinationCount]

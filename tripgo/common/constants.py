"""Enums and constants for TripGo — matching PostgreSQL ENUM types."""

from __future__ import annotations

import enum


# ── Auth / Roles ────────────────────────────────────────────────────

class UserRole(str, enum.Enum):
    super_admin = "super_admin"
    admin = "admin"
    hr_manager = "hr_manager"
    employee = "employee"
    customer = "customer"


# ── Tenancy ─────────────────────────────────────────────────────────

class TenantStatus(str, enum.Enum):
    active = "active"
    suspended = "suspended"
    inactive = "inactive"


class TenantPlan(str, enum.Enum):
    basic = "basic"
    premium = "premium"
    enterprise = "enterprise"


# ── Bookings ────────────────────────────────────────────────────────

class BookingType(str, enum.Enum):
    cruise = "cruise"
    hotel = "hotel"
    package = "package"


class BookingStatus(str, enum.Enum):
    pending = "pending"
    confirmed = "confirmed"
    cancelled = "cancelled"
    completed = "completed"


class PaymentStatus(str, enum.Enum):
    unpaid = "unpaid"
    paid = "paid"
    refunded = "refunded"


class DepartureStatus(str, enum.Enum):
    scheduled = "scheduled"
    cancelled = "cancelled"


# ── HR ──────────────────────────────────────────────────────────────

class EmployeeStatus(str, enum.Enum):
    active = "active"
    on_leave = "on_leave"
    terminated = "terminated"


class AttendanceStatus(str, enum.Enum):
    present = "present"
    absent = "absent"
    late = "late"
    half_day = "half_day"


class LeaveStatus(str, enum.Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


class LeaveType(str, enum.Enum):
    annual = "annual"
    sick = "sick"
    personal = "personal"
    maternity = "maternity"
    paternity = "paternity"
    unpaid = "unpaid"


class PayrollStatus(str, enum.Enum):
    pending = "pending"
    processing = "processing"
    paid = "paid"


# ── Media ───────────────────────────────────────────────────────────

class MediaCategory(str, enum.Enum):
    image = "image"
    video = "video"
    document = "document"
    audio = "audio"
    archive = "archive"
    other = "other"


# ── Site content ────────────────────────────────────────────────────

class SettingType(str, enum.Enum):
    text = "text"
    textarea = "textarea"
    number = "number"
    boolean = "boolean"
    json = "json"
    image = "image"
    video = "video"


# ── Role-based permissions ──────────────────────────────────────────

_CONTENT_PERMISSIONS = [
    "cruise:create",
    "cruise:update",
    "cruise:delete",
    "hotel:create",
    "hotel:update",
    "hotel:delete",
    "package:create",
    "package:update",
    "package:delete",
    "blog:manage",
    "media:manage",
    "content:manage",
    "settings:manage",
]

PERMISSIONS: dict[UserRole, list[str]] = {
    UserRole.customer: [
        "booking:create",
        "booking:read_own",
        "review:create",
        "comment:create",
    ],
    UserRole.employee: [
        "booking:read_own",
        "hr:read_own",
        "attendance:mark_own",
        "leave:request",
        "comment:create",
    ],
    UserRole.hr_manager: [
        "booking:read_own",
        "hr:read_all",
        "hr:manage",
        "attendance:mark_all",
        "leave:request",
        "leave:decide",
        "payroll:manage",
        "comment:create",
    ],
    UserRole.admin: [
        "booking:create",
        "booking:read_own",
        "booking:read_all",
        "booking:manage",
        "review:create",
        "comment:create",
        "user:read_all",
        "user:create",
        "user:update",
        "user:delete",
        "hr:read_all",
        "hr:manage",
        "attendance:mark_all",
        "leave:request",
        "leave:decide",
        "payroll:manage",
        "dashboard:read",
        *_CONTENT_PERMISSIONS,
    ],
    UserRole.super_admin: [
        "booking:create",
        "booking:read_own",
        "booking:read_all",
        "booking:manage",
        "review:create",
        "comment:create",
        "user:read_all",
        "user:create",
        "user:update",
        "user:delete",
        "user:grant_super_admin",
        "hr:read_all",
        "hr:manage",
        "attendance:mark_all",
        "leave:request",
        "leave:decide",
        "payroll:manage",
        "dashboard:read",
        "tenant:manage",
        *_CONTENT_PERMISSIONS,
    ],
}

# ── Misc constants ──────────────────────────────────────────────────

DATE_FORMAT = "%Y-%m-%d"
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100
BOOKING_REFERENCE_PREFIX = "TG"

"""Common module — shared utilities for the TripGo backend."""

from tripgo.common.audit import AuditTrail, TimestampMixin, create_audit_entry, utcnow
from tripgo.common.constants import (
    DATE_FORMAT,
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    PERMISSIONS,
    AttendanceStatus,
    BookingStatus,
    BookingType,
    DepartureStatus,
    EmployeeStatus,
    LeaveStatus,
    LeaveType,
    MediaCategory,
    PaymentStatus,
    PayrollStatus,
    TenantPlan,
    TenantStatus,
    UserRole,
)
from tripgo.common.exceptions import (
    AppException,
    BadRequestException,
    ConflictError,
    ForbiddenException,
    NotFoundException,
    UnauthorizedException,
    ValidationException,
    register_exception_handlers,
)
from tripgo.common.filters import apply_filters, apply_search, apply_sorting
from tripgo.common.pagination import (
    PaginatedResponse,
    PaginationMeta,
    PaginationParams,
    paginate,
    total_pages,
)
from tripgo.common.responses import paginated_response, success_response
from tripgo.common.slugs import generate_slug, unique_slug

__all__ = [
    # Audit
    "AuditTrail",
    "TimestampMixin",
    "create_audit_entry",
    "utcnow",
    # Constants / Enums
    "AttendanceStatus",
    "BookingStatus",
    "BookingType",
    "DepartureStatus",
    "EmployeeStatus",
    "LeaveStatus",
    "LeaveType",
    "MediaCategory",
    "PaymentStatus",
    "PayrollStatus",
    "TenantPlan",
    "TenantStatus",
    "UserRole",
    "PERMISSIONS",
    "DATE_FORMAT",
    "DEFAULT_PAGE_SIZE",
    "MAX_PAGE_SIZE",
    # Exceptions
    "AppException",
    "BadRequestException",
    "ConflictError",
    "ForbiddenException",
    "NotFoundException",
    "UnauthorizedException",
    "ValidationException",
    "register_exception_handlers",
    # Filters
    "apply_filters",
    "apply_search",
    "apply_sorting",
    # Pagination
    "PaginatedResponse",
    "PaginationMeta",
    "PaginationParams",
    "paginate",
    "total_pages",
    # Responses
    "paginated_response",
    "success_response",
    # Slugs
    "generate_slug",
    "unique_slug",
]

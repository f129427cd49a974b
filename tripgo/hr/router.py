"""HR router — employees, attendance, leave, departments, payroll, dashboard.

Routes (``/api/v1/hr``):
    /employees                 — List (hr:read_all), create (hr:manage)
    /employees/me              — Caller's own profile
    /employees/{id}            — Detail (self or hr:read_all), update (hr:manage)
    /attendance                — Mark (upsert), list
    /leave                     — Request, list
    /leave/{id}/decision       — Approve / reject (leave:decide)
    /departments               — List with counts, create
    /payroll                   — Create, list (payroll:manage)
    /payroll/{id}/pay          — Mark paid
    /dashboard                 — HR overview
"""


import uuid
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from tripgo.auth.dependencies import require_permission, require_role
from tripgo.common.constants import (
    AttendanceStatus,
    EmployeeStatus,
    LeaveStatus,
    LeaveType,
    PayrollStatus,
    UserRole,
)
from tripgo.common.pagination import PaginationParams
from tripgo.common.responses import paginated_response, success_response
from tripgo.database import get_db
from tripgo.hr.models import Employee, LeaveRequest, PayrollRecord
from tripgo.hr.schemas import (
    AttendanceMark,
    AttendanceResponse,
    DepartmentCreate,
    DepartmentResponse,
    EmployeeCreate,
    EmployeeDetail,
    EmployeeResponse,
    EmployeeUpdate,
    LeaveCreate,
    LeaveDecision,
    LeaveResponse,
    PayrollCreate,
    PayrollResponse,
)
from tripgo.hr.service import (
    AttendanceService,
    DepartmentService,
    EmployeeService,
    HRDashboardService,
    LeaveService,
    PayrollService,
    own_employee,
)
from tripgo.tenants.dependencies import get_current_tenant
from tripgo.tenants.models import Tenant
from tripgo.users.models import User

router = APIRouter(prefix="", tags=["hr"])

# Any staff role; customers are excluded by the role hierarchy
_staff = require_role(UserRole.employee)


# ── Response builders ───────────────────────────────────────────────

def _employee_item(employee: Employee) -> EmployeeResponse:
    item = EmployeeResponse.model_validate(employee)
    item.email = employee.user.email if employee.user else None
    item.department_name = employee.department.name if employee.department else None
    return item


def _leave_item(leave: LeaveRequest) -> LeaveResponse:
    item = LeaveResponse.model_validate(leave)
    item.employee_name = leave.employee.full_name if leave.employee else None
    return item


def _payroll_item(record: PayrollRecord) -> PayrollResponse:
    item = PayrollResponse.model_validate(record)
    item.employee_name = record.employee.full_name if record.employee else None
    return item


# ═════════════════════════════════════════════════════════════════════
# Employees
# ═════════════════════════════════════════════════════════════════════


@router.get("/employees")
async def list_employees(
    pagination: PaginationParams = Depends(),
    department_id: Optional[uuid.UUID] = Query(None),
    status_filter: Optional[EmployeeStatus] = Query(None, alias="status"),
    position: Optional[str] = Query(None),
    search: Optional[str] = Query(None, max_length=100),
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(require_permission("hr:read_all")),
):
    result = await EmployeeService.list_employees(
        db,
        tenant.id,
        pagination,
        department_id=department_id,
        status=status_filter,
        position=position,
        search=search,
    )
    return paginated_response([_employee_item(e) for e in result.data], result.meta)


@router.post("/employees", status_code=status.HTTP_201_CREATED)
async def create_employee(
    body: EmployeeCreate,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(require_permission("hr:manage")),
):
    employee = await EmployeeService.create_employee(db, tenant.id, body, actor_id=current_user.id)
    return success_response(_employee_item(employee), "Employee created successfully")


@router.get("/employees/me")
async def my_employee_profile(
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(_staff),
):
    own = await own_employee(db, tenant.id, current_user)
    employee = await EmployeeService.load(db, tenant.id, own.id)
    return success_response(_employee_item(employee))


@router.get("/employees/{employee_id}")
async def get_employee(
    employee_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(_staff),
):
    employee, attendance, leaves = await EmployeeService.get_employee_detail(
        db, tenant.id, employee_id, current_user,
    )
    detail = EmployeeDetail(
        **_employee_item(employee).model_dump(),
        recent_attendance=[AttendanceResponse.model_validate(a) for a in attendance],
        recent_leaves=[LeaveResponse.model_validate(lv) for lv in leaves],
    )
    return success_response(detail)


@router.put("/employees/{employee_id}")
async def update_employee(
    employee_id: uuid.UUID,
    body: EmployeeUpdate,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(require_permission("hr:manage")),
):
    employee = await EmployeeService.update_employee(
        db, tenant.id, employee_id, body, actor_id=current_user.id,
    )
    return success_response(_employee_item(employee), "Employee updated successfully")


# ═════════════════════════════════════════════════════════════════════
# Attendance
# ═════════════════════════════════════════════════════════════════════


@router.post("/attendance")
async def mark_attendance(
    body: AttendanceMark,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(_staff),
):
    record = await AttendanceService.mark(db, tenant.id, current_user, body)
    return success_response(AttendanceResponse.model_validate(record), "Attendance recorded")


@router.get("/attendance")
async def list_attendance(
    pagination: PaginationParams = Depends(),
    employee_id: Optional[uuid.UUID] = Query(None),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    status_filter: Optional[AttendanceStatus] = Query(None, alias="status"),
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(_staff),
):
    result = await AttendanceService.list_records(
        db,
        tenant.id,
        current_user,
        pagination,
        employee_id=employee_id,
        date_from=date_from,
        date_to=date_to,
        status=status_filter,
    )
    return paginated_response(
        [AttendanceResponse.model_validate(r) for r in result.data], result.meta,
    )


# ═════════════════════════════════════════════════════════════════════
# Leave
# ═════════════════════════════════════════════════════════════════════


@router.post("/leave", status_code=status.HTTP_201_CREATED)
async def request_leave(
    body: LeaveCreate,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(_staff),
):
    leave = await LeaveService.create_request(db, tenant.id, current_user, body)
    return success_response(_leave_item(leave), "Leave request submitted")


@router.get("/leave")
async def list_leave(
    pagination: PaginationParams = Depends(),
    employee_id: Optional[uuid.UUID] = Query(None),
    status_filter: Optional[LeaveStatus] = Query(None, alias="status"),
    leave_type: Optional[LeaveType] = Query(None),
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(_staff),
):
    result = await LeaveService.list_requests(
        db,
        tenant.id,
        current_user,
        pagination,
        employee_id=employee_id,
        status=status_filter,
        leave_type=leave_type,
    )
    return paginated_response([_leave_item(lv) for lv in result.data], result.meta)


@router.put("/leave/{leave_id}/decision")
async def decide_leave(
    leave_id: uuid.UUID,
    body: LeaveDecision,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(require_permission("leave:decide")),
):
    leave = await LeaveService.decide(db, tenant.id, leave_id, body, actor=current_user)
    return success_response(_leave_item(leave), f"Leave request {leave.status.value}")


# ═════════════════════════════════════════════════════════════════════
# Departments
# ═════════════════════════════════════════════════════════════════════


@router.get("/departments")
async def list_departments(
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(_staff),
):
    rows = await DepartmentService.list_departments(db, tenant.id)
    items = []
    for department, count in rows:
        item = DepartmentResponse.model_validate(department)
        item.employee_count = count
        items.append(item)
    return success_response(items)


@router.post("/departments", status_code=status.HTTP_201_CREATED)
async def create_department(
    body: DepartmentCreate,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(require_permission("hr:manage")),
):
    department = await DepartmentService.create_department(
        db, tenant.id, body, actor_id=current_user.id,
    )
    return success_response(DepartmentResponse.model_validate(department), "Department created successfully")


# ═════════════════════════════════════════════════════════════════════
# Payroll
# ═════════════════════════════════════════════════════════════════════


@router.post("/payroll", status_code=status.HTTP_201_CREATED)
async def create_payroll(
    body: PayrollCreate,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(require_permission("payroll:manage")),
):
    record = await PayrollService.create_record(db, tenant.id, body, actor_id=current_user.id)
    return success_response(_payroll_item(record), "Payroll record created")


@router.get("/payroll")
async def list_payroll(
    pagination: PaginationParams = Depends(),
    employee_id: Optional[uuid.UUID] = Query(None),
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None, ge=2000, le=2100),
    status_filter: Optional[PayrollStatus] = Query(None, alias="status"),
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(require_permission("payroll:manage")),
):
    result = await PayrollService.list_records(
        db,
        tenant.id,
        pagination,
        employee_id=employee_id,
        month=month,
        year=year,
        status=status_filter,
    )
    return paginated_response([_payroll_item(r) for r in result.data], result.meta)


@router.post("/payroll/{payroll_id}/pay")
async def mark_payroll_paid(
    payroll_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(require_permission("payroll:manage")),
):
    record = await PayrollService.mark_paid(db, tenant.id, payroll_id, actor_id=current_user.id)
    return success_response(_payroll_item(record), "Payroll marked as paid")


# ═════════════════════════════════════════════════════════════════════
# Dashboard
# ═════════════════════════════════════════════════════════════════════


@router.get("/dashboard")
async def hr_dashboard(
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
    current_user: User = Depends(require_permission("hr:read_all")),
):
    return success_response(await HRDashboardService.overview(db, tenant.id))

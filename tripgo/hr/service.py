"""HR service layer — employees, attendance, leave, departments, payroll.

Staff without ``hr:read_all`` only ever see and act on their own employee
profile; the helpers below resolve "me" from the authenticated user.
"""

from __future__ import annotations

import logging
import uuid
from collections import Counter
from datetime import date, datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from tripgo.common.audit import create_audit_entry
from tripgo.common.constants import (
    PERMISSIONS,
    AttendanceStatus,
    EmployeeStatus,
    LeaveStatus,
    PayrollStatus,
)
from tripgo.common.exceptions import (
    BadRequestException,
    ConflictError,
    ForbiddenException,
    NotFoundException,
)
from tripgo.common.filters import apply_filters
from tripgo.common.pagination import PaginatedResponse, PaginationParams, paginate
from tripgo.hr.models import (
    AttendanceRecord,
    Department,
    Employee,
    LeaveRequest,
    PayrollRecord,
)
from tripgo.hr.schemas import (
    AttendanceMark,
    DepartmentCount,
    DepartmentCreate,
    EmployeeBrief,
    EmployeeCreate,
    EmployeeUpdate,
    HRDashboard,
    LeaveCreate,
    LeaveDecision,
    PayrollCreate,
    TodayAttendance,
)
from tripgo.users.models import User

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _has(user: User, permission: str) -> bool:
    return permission in PERMISSIONS.get(user.role, [])


def leave_days(start: date, end: date) -> int:
    """Calendar days covered by a leave, both ends inclusive."""
    return (end - start).days + 1


def net_salary(
    basic: Decimal,
    allowances: Decimal,
    deductions: Decimal,
    bonus: Decimal,
    overtime: Decimal,
) -> Decimal:
    return basic + allowances + bonus + overtime - deductions


async def own_employee(db: AsyncSession, tenant_id: uuid.UUID, user: User) -> Employee:
    result = await db.execute(
        select(Employee).where(Employee.tenant_id == tenant_id, Employee.user_id == user.id),
    )
    employee = result.scalars().first()
    if employee is None:
        raise NotFoundException("Employee profile", str(user.id))
    return employee


async def _resolve_target(
    db: AsyncSession,
    tenant_id: uuid.UUID,
    actor: User,
    employee_id: Optional[uuid.UUID],
    permission: str,
) -> Employee:
    """Return the employee *actor* acts on; others need *permission*."""
    if employee_id is None:
        return await own_employee(db, tenant_id, actor)
    employee = await EmployeeService.load(db, tenant_id, employee_id)
    if employee.user_id != actor.id and not _has(actor, permission):
        raise ForbiddenException(detail="You can only act on your own employee record.")
    return employee


# ═════════════════════════════════════════════════════════════════════
# Employees
# ═════════════════════════════════════════════════════════════════════


class EmployeeService:
    """Async CRUD operations for employees."""

    @staticmethod
    async def load(db: AsyncSession, tenant_id: uuid.UUID, employee_id: uuid.UUID) -> Employee:
        result = await db.execute(
            select(Employee)
            .where(Employee.id == employee_id, Employee.tenant_id == tenant_id)
            .options(selectinload(Employee.user), selectinload(Employee.department))
            .execution_options(populate_existing=True),
        )
        employee = result.scalars().first()
        if employee is None:
            raise NotFoundException("Employee", str(employee_id))
        return employee

    # ── List (paginated, searchable, filterable) ────────────────────

    @staticmethod
    async def list_employees(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        pagination: PaginationParams,
        *,
        department_id: Optional[uuid.UUID] = None,
        status: Optional[EmployeeStatus] = None,
        position: Optional[str] = None,
        search: Optional[str] = None,
    ) -> PaginatedResponse:
        query = (
            select(Employee)
            .where(Employee.tenant_id == tenant_id)
            .options(selectinload(Employee.user), selectinload(Employee.department))
            .order_by(Employee.employee_code)
        )
        query = apply_filters(
            query,
            Employee,
            {"department_id": department_id, "status": status, "position__ilike": position},
        )
        if search and search.strip():
            term = f"%{search.strip()}%"
            matching_users = select(User.id).where(
                User.tenant_id == tenant_id,
                or_(User.first_name.ilike(term), User.last_name.ilike(term), User.email.ilike(term)),
            )
            query = query.where(
                or_(Employee.employee_code.ilike(term), Employee.user_id.in_(matching_users)),
            )
        return await paginate(db, query, pagination, model=Employee)

    # ── Get single ──────────────────────────────────────────────────

    @staticmethod
    async def get_employee_detail(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        employee_id: uuid.UUID,
        actor: User,
    ) -> tuple[Employee, list[AttendanceRecord], list[LeaveRequest]]:
        """Employee plus the ten latest attendance days and five latest leave requests."""
        employee = await EmployeeService.load(db, tenant_id, employee_id)
        if employee.user_id != actor.id and not _has(actor, "hr:read_all"):
            raise ForbiddenException(detail="You can only view your own employee record.")

        attendance = (
            await db.execute(
                select(AttendanceRecord)
                .where(AttendanceRecord.employee_id == employee.id)
                .order_by(AttendanceRecord.date.desc())
                .limit(10),
            )
        ).scalars().all()
        leaves = (
            await db.execute(
                select(LeaveRequest)
                .where(LeaveRequest.employee_id == employee.id)
                .order_by(LeaveRequest.created_at.desc())
                .limit(5),
            )
        ).scalars().all()
        return employee, list(attendance), list(leaves)

    # ── Create / update ─────────────────────────────────────────────

    @staticmethod
    async def _check_references(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        department_id: Optional[uuid.UUID],
        manager_id: Optional[uuid.UUID],
    ) -> None:
        if department_id is not None:
            await DepartmentService.get_department(db, tenant_id, department_id)
        if manager_id is not None:
            found = await db.execute(
                select(Employee.id).where(Employee.id == manager_id, Employee.tenant_id == tenant_id),
            )
            if found.first() is None:
                raise NotFoundException("Employee", str(manager_id))

    @staticmethod
    async def _check_code(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        code: str,
        exclude_id: Optional[uuid.UUID] = None,
    ) -> None:
        query = select(Employee.id).where(
            Employee.tenant_id == tenant_id, Employee.employee_code == code,
        )
        if exclude_id is not None:
            query = query.where(Employee.id != exclude_id)
        if (await db.execute(query)).first() is not None:
            raise ConflictError("employee_code", code)

    @staticmethod
    async def create_employee(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        data: EmployeeCreate,
        *,
        actor_id: Optional[uuid.UUID] = None,
    ) -> Employee:
        user = (
            await db.execute(
                select(User).where(User.id == data.user_id, User.tenant_id == tenant_id),
            )
        ).scalars().first()
        if user is None:
            raise NotFoundException("User", str(data.user_id))

        existing = await db.execute(select(Employee.id).where(Employee.user_id == user.id))
        if existing.first() is not None:
            raise ConflictError("user_id", str(user.id), detail="This user already has an employee record.")

        await EmployeeService._check_code(db, tenant_id, data.employee_code)
        await EmployeeService._check_references(db, tenant_id, data.department_id, data.manager_id)

        employee = Employee(tenant_id=tenant_id, **data.model_dump())
        db.add(employee)
        await db.flush()

        await create_audit_entry(
            db,
            action="create",
            entity_type="employee",
            entity_id=employee.id,
            tenant_id=tenant_id,
            actor_id=actor_id,
            new_values=data.model_dump(mode="json"),
        )
        logger.info("Employee %s created for user %s", employee.employee_code, user.email)
        return await EmployeeService.load(db, tenant_id, employee.id)

    @staticmethod
    async def update_employee(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        employee_id: uuid.UUID,
        data: EmployeeUpdate,
        *,
        actor_id: Optional[uuid.UUID] = None,
    ) -> Employee:
        employee = await EmployeeService.load(db, tenant_id, employee_id)
        changes = data.model_dump(exclude_unset=True)

        if changes.get("employee_code") and changes["employee_code"] != employee.employee_code:
            await EmployeeService._check_code(db, tenant_id, changes["employee_code"], employee.id)
        if changes.get("manager_id") == employee.id:
            raise BadRequestException("An employee cannot be their own manager.")
        await EmployeeService._check_references(
            db, tenant_id, changes.get("department_id"), changes.get("manager_id"),
        )

        old_values: dict[str, Any] = {}
        for field, value in changes.items():
            if value is None and field in ("employee_code", "position", "salary", "hire_date", "status", "skills"):
                continue
            old_values[field] = getattr(employee, field)
            setattr(employee, field, value)
        await db.flush()

        await create_audit_entry(
            db,
            action="update",
            entity_type="employee",
            entity_id=employee.id,
            tenant_id=tenant_id,
            actor_id=actor_id,
            old_values={k: str(v) if v is not None else None for k, v in old_values.items()},
            new_values=data.model_dump(mode="json", exclude_unset=True),
        )
        return await EmployeeService.load(db, tenant_id, employee.id)


# ═════════════════════════════════════════════════════════════════════
# Attendance
# ═════════════════════════════════════════════════════════════════════


class AttendanceService:

    @staticmethod
    async def mark(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        actor: User,
        data: AttendanceMark,
    ) -> AttendanceRecord:
        """Upsert the record for (employee, date)."""
        employee = await _resolve_target(db, tenant_id, actor, data.employee_id, "attendance:mark_all")

        result = await db.execute(
            select(AttendanceRecord).where(
                AttendanceRecord.employee_id == employee.id,
                AttendanceRecord.date == data.date,
            ),
        )
        record = result.scalars().first()
        if record is None:
            record = AttendanceRecord(tenant_id=tenant_id, employee_id=employee.id, date=data.date)
            db.add(record)

        record.check_in = data.check_in
        record.check_out = data.check_out
        record.status = data.status
        record.notes = data.notes
        await db.flush()

        logger.info(
            "Attendance %s for %s on %s", data.status.value, employee.employee_code, data.date,
        )
        return record

    @staticmethod
    async def list_records(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        actor: User,
        pagination: PaginationParams,
        *,
        employee_id: Optional[uuid.UUID] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        status: Optional[AttendanceStatus] = None,
    ) -> PaginatedResponse:
        if not _has(actor, "hr:read_all"):
            own = await own_employee(db, tenant_id, actor)
            if employee_id is not None and employee_id != own.id:
                raise ForbiddenException(detail="You can only view your own attendance.")
            employee_id = own.id

        if date_from and date_to and date_to < date_from:
            raise BadRequestException("date_to must be on or after date_from.")

        query = (
            select(AttendanceRecord)
            .where(AttendanceRecord.tenant_id == tenant_id)
            .order_by(AttendanceRecord.date.desc())
        )
        query = apply_filters(
            query,
            AttendanceRecord,
            {
                "employee_id": employee_id,
                "date__from": date_from,
                "date__to": date_to,
                "status": status,
            },
        )
        return await paginate(db, query, pagination, model=AttendanceRecord)


# ═════════════════════════════════════════════════════════════════════
# Leave
# ═════════════════════════════════════════════════════════════════════


class LeaveService:

    @staticmethod
    async def _load(db: AsyncSession, tenant_id: uuid.UUID, leave_id: uuid.UUID) -> LeaveRequest:
        result = await db.execute(
            select(LeaveRequest)
            .where(LeaveRequest.id == leave_id, LeaveRequest.tenant_id == tenant_id)
            .options(selectinload(LeaveRequest.employee).selectinload(Employee.user))
            .execution_options(populate_existing=True),
        )
        leave = result.scalars().first()
        if leave is None:
            raise NotFoundException("LeaveRequest", str(leave_id))
        return leave

    @staticmethod
    async def create_request(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        actor: User,
        data: LeaveCreate,
    ) -> LeaveRequest:
        employee = await _resolve_target(db, tenant_id, actor, data.employee_id, "hr:manage")

        leave = LeaveRequest(
            tenant_id=tenant_id,
            employee_id=employee.id,
            leave_type=data.leave_type,
            start_date=data.start_date,
            end_date=data.end_date,
            days=leave_days(data.start_date, data.end_date),
            reason=data.reason,
        )
        db.add(leave)
        await db.flush()
        logger.info(
            "Leave %s requested for %s (%d days)", data.leave_type.value, employee.employee_code, leave.days,
        )
        return await LeaveService._load(db, tenant_id, leave.id)

    @staticmethod
    async def list_requests(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        actor: User,
        pagination: PaginationParams,
        *,
        employee_id: Optional[uuid.UUID] = None,
        status: Optional[LeaveStatus] = None,
        leave_type: Optional[str] = None,
    ) -> PaginatedResponse:
        if not _has(actor, "hr:read_all"):
            own = await own_employee(db, tenant_id, actor)
            if employee_id is not None and employee_id != own.id:
                raise ForbiddenException(detail="You can only view your own leave requests.")
            employee_id = own.id

        query = (
            select(LeaveRequest)
            .where(LeaveRequest.tenant_id == tenant_id)
            .options(selectinload(LeaveRequest.employee).selectinload(Employee.user))
            .order_by(LeaveRequest.created_at.desc())
        )
        query = apply_filters(
            query,
            LeaveRequest,
            {"employee_id": employee_id, "status": status, "leave_type": leave_type},
        )
        return await paginate(db, query, pagination, model=LeaveRequest)

    @staticmethod
    async def decide(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        leave_id: uuid.UUID,
        data: LeaveDecision,
        *,
        actor: User,
    ) -> LeaveRequest:
        if data.status == LeaveStatus.pending:
            raise BadRequestException("A decision must be either approved or rejected.")

        leave = await LeaveService._load(db, tenant_id, leave_id)
        if leave.status != LeaveStatus.pending:
            raise BadRequestException(f"Leave request is already {leave.status.value}.")
        if leave.employee.user_id == actor.id:
            raise ForbiddenException(detail="You cannot decide your own leave request.")

        leave.status = data.status
        leave.comments = data.comments
        leave.decided_by = actor.id
        leave.decided_at = _now()
        await db.flush()

        await create_audit_entry(
            db,
            action=data.status.value,
            entity_type="leave_request",
            entity_id=leave.id,
            tenant_id=tenant_id,
            actor_id=actor.id,
            old_values={"status": LeaveStatus.pending.value},
            new_values={"status": data.status.value, "comments": data.comments},
        )
        return await LeaveService._load(db, tenant_id, leave.id)


# ═════════════════════════════════════════════════════════════════════
# Departments
# ═════════════════════════════════════════════════════════════════════


class DepartmentService:

    @staticmethod
    async def get_department(db: AsyncSession, tenant_id: uuid.UUID, department_id: uuid.UUID) -> Department:
        result = await db.execute(
            select(Department).where(Department.id == department_id, Department.tenant_id == tenant_id),
        )
        department = result.scalars().first()
        if department is None:
            raise NotFoundException("Department", str(department_id))
        return department

    @staticmethod
    async def list_departments(db: AsyncSession, tenant_id: uuid.UUID) -> list[tuple[Department, int]]:
        count_sq = (
            select(Employee.department_id, func.count(Employee.id).label("cnt"))
            .where(Employee.tenant_id == tenant_id)
            .group_by(Employee.department_id)
            .subquery()
        )
        result = await db.execute(
            select(Department, func.coalesce(count_sq.c.cnt, 0))
            .outerjoin(count_sq, count_sq.c.department_id == Department.id)
            .where(Department.tenant_id == tenant_id)
            .order_by(Department.name),
        )
        return [(dept, int(count)) for dept, count in result.all()]

    @staticmethod
    async def create_department(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        data: DepartmentCreate,
        *,
        actor_id: Optional[uuid.UUID] = None,
    ) -> Department:
        name = data.name.strip()
        taken = await db.execute(
            select(Department.id).where(
                Department.tenant_id == tenant_id, func.lower(Department.name) == name.lower(),
            ),
        )
        if taken.first() is not None:
            raise ConflictError("name", name)
        if data.head_employee_id is not None:
            await EmployeeService.load(db, tenant_id, data.head_employee_id)

        department = Department(
            tenant_id=tenant_id,
            name=name,
            description=data.description,
            head_employee_id=data.head_employee_id,
            budget=data.budget,
        )
        db.add(department)
        await db.flush()

        await create_audit_entry(
            db,
            action="create",
            entity_type="department",
            entity_id=department.id,
            tenant_id=tenant_id,
            actor_id=actor_id,
            new_values=data.model_dump(mode="json"),
        )
        return department


# ═════════════════════════════════════════════════════════════════════
# Payroll
# ═════════════════════════════════════════════════════════════════════


class PayrollService:

    @staticmethod
    async def _load(db: AsyncSession, tenant_id: uuid.UUID, payroll_id: uuid.UUID) -> PayrollRecord:
        result = await db.execute(
            select(PayrollRecord)
            .where(PayrollRecord.id == payroll_id, PayrollRecord.tenant_id == tenant_id)
            .options(selectinload(PayrollRecord.employee).selectinload(Employee.user))
            .execution_options(populate_existing=True),
        )
        record = result.scalars().first()
        if record is None:
            raise NotFoundException("PayrollRecord", str(payroll_id))
        return record

    @staticmethod
    async def create_record(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        data: PayrollCreate,
        *,
        actor_id: Optional[uuid.UUID] = None,
    ) -> PayrollRecord:
        employee = await EmployeeService.load(db, tenant_id, data.employee_id)

        duplicate = await db.execute(
            select(PayrollRecord.id).where(
                PayrollRecord.employee_id == employee.id,
                PayrollRecord.month == data.month,
                PayrollRecord.year == data.year,
            ),
        )
        if duplicate.first() is not None:
            raise ConflictError(
                "period",
                f"{data.year}-{data.month:02d}",
                detail=f"Payroll for {data.year}-{data.month:02d} already exists for this employee.",
            )

        basic = data.basic_salary
        if basic is None:
            basic = (Decimal(employee.salary) / 12).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)

        record = PayrollRecord(
            tenant_id=tenant_id,
            employee_id=employee.id,
            month=data.month,
            year=data.year,
            basic_salary=basic,
            allowances=data.allowances,
            deductions=data.deductions,
            bonus=data.bonus,
            overtime=data.overtime,
            net_salary=net_salary(basic, data.allowances, data.deductions, data.bonus, data.overtime),
        )
        db.add(record)
        await db.flush()

        await create_audit_entry(
            db,
            action="create",
            entity_type="payroll",
            entity_id=record.id,
            tenant_id=tenant_id,
            actor_id=actor_id,
            new_values={"period": f"{data.year}-{data.month:02d}", "net_salary": str(record.net_salary)},
        )
        return await PayrollService._load(db, tenant_id, record.id)

    @staticmethod
    async def list_records(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        pagination: PaginationParams,
        *,
        employee_id: Optional[uuid.UUID] = None,
        month: Optional[int] = None,
        year: Optional[int] = None,
        status: Optional[PayrollStatus] = None,
    ) -> PaginatedResponse:
        query = (
            select(PayrollRecord)
            .where(PayrollRecord.tenant_id == tenant_id)
            .options(selectinload(PayrollRecord.employee).selectinload(Employee.user))
            .order_by(PayrollRecord.year.desc(), PayrollRecord.month.desc())
        )
        query = apply_filters(
            query,
            PayrollRecord,
            {"employee_id": employee_id, "month": month, "year": year, "status": status},
        )
        return await paginate(db, query, pagination, model=PayrollRecord)

    @staticmethod
    async def mark_paid(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        payroll_id: uuid.UUID,
        *,
        actor_id: Optional[uuid.UUID] = None,
    ) -> PayrollRecord:
        record = await PayrollService._load(db, tenant_id, payroll_id)
        if record.status == PayrollStatus.paid:
            raise BadRequestException("Payroll record is already paid.")
        record.status = PayrollStatus.paid
        record.paid_at = _now()
        await db.flush()

        await create_audit_entry(
            db,
            action="mark_paid",
            entity_type="payroll",
            entity_id=record.id,
            tenant_id=tenant_id,
            actor_id=actor_id,
        )
        return await PayrollService._load(db, tenant_id, record.id)


# ═════════════════════════════════════════════════════════════════════
# Dashboard
# ═════════════════════════════════════════════════════════════════════


class HRDashboardService:

    @staticmethod
    async def overview(db: AsyncSession, tenant_id: uuid.UUID, today: Optional[date] = None) -> HRDashboard:
        today = today or date.today()

        employees = (
            await db.execute(
                select(Employee)
                .where(Employee.tenant_id == tenant_id)
                .options(selectinload(Employee.user), selectinload(Employee.department)),
            )
        ).scalars().all()
        by_status = Counter(e.status for e in employees)

        pending_leaves = (
            await db.execute(
                select(func.count(LeaveRequest.id)).where(
                    LeaveRequest.tenant_id == tenant_id,
                    LeaveRequest.status == LeaveStatus.pending,
                ),
            )
        ).scalar() or 0

        marked = (
            await db.execute(
                select(AttendanceRecord.status).where(
                    AttendanceRecord.tenant_id == tenant_id,
                    AttendanceRecord.date == today,
                ),
            )
        ).scalars().all()
        marked_counts = Counter(marked)
        today_attendance = TodayAttendance(
            present=marked_counts[AttendanceStatus.present],
            absent=marked_counts[AttendanceStatus.absent],
            late=marked_counts[AttendanceStatus.late],
            half_day=marked_counts[AttendanceStatus.half_day],
            not_marked=max(0, by_status[EmployeeStatus.active] - len(marked)),
        )

        per_department: dict[Optional[uuid.UUID], DepartmentCount] = {}
        for emp in employees:
            key = emp.department_id
            if key not in per_department:
                per_department[key] = DepartmentCount(
                    department_id=key,
                    name=emp.department.name if emp.department else "Unassigned",
                    count=0,
                )
            per_department[key].count += 1

        recent = sorted(employees, key=lambda e: (e.hire_date, e.created_at), reverse=True)[:5]

        return HRDashboard(
            total_employees=len(employees),
            active_employees=by_status[EmployeeStatus.active],
            on_leave=by_status[EmployeeStatus.on_leave],
            pending_leaves=pending_leaves,
            today_attendance=today_attendance,
            departments=sorted(per_department.values(), key=lambda d: (-d.count, d.name)),
            recent_hires=[EmployeeBrief.model_validate(e) for e in recent],
        )

"""HR ORM models: Department, Employee, AttendanceRecord, LeaveRequest, PayrollRecord.

Every HR row is tenant-scoped. An employee is an HR profile attached to
exactly one ``users`` row.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tripgo.common.audit import TimestampMixin
from tripgo.common.constants import (
    AttendanceStatus,
    EmployeeStatus,
    LeaveStatus,
    LeaveType,
    PayrollStatus,
)
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


def _employee_fk() -> Mapped[uuid.UUID]:
    return mapped_column(
        UUID(as_uuid=True),
        sa.ForeignKey("employees.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )


# ═════════════════════════════════════════════════════════════════════
# Department
# ═════════════════════════════════════════════════════════════════════


class Department(Base, TimestampMixin):
    __tablename__ = "departments"
    __table_args__ = (
        sa.UniqueConstraint("tenant_id", "name", name="uq_department_name"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    tenant_id: Mapped[uuid.UUID] = _tenant_fk()
    name: Mapped[str] = mapped_column(sa.String(100), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(sa.Text)
    head_employee_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        sa.ForeignKey("employees.id", ondelete="SET NULL", use_alter=True, name="fk_dept_head"),
    )
    budget: Mapped[Optional[Decimal]] = mapped_column(sa.Numeric(14, 2))

    employees: Mapped[list[Employee]] = relationship(
        back_populates="department", foreign_keys="Employee.department_id",
    )
    head: Mapped[Optional[Employee]] = relationship(foreign_keys=[head_employee_id])

    def __repr__(self) -> str:
        return f"<Department {self.name!r}>"


# ═════════════════════════════════════════════════════════════════════
# Employee
# ═════════════════════════════════════════════════════════════════════


class Employee(Base, TimestampMixin):
    """HR profile for a staff user."""

    __tablename__ = "employees"
    __table_args__ = (
        sa.UniqueConstraint("tenant_id", "employee_code", name="uq_employee_code"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    tenant_id: Mapped[uuid.UUID] = _tenant_fk()
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        sa.ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    employee_code: Mapped[str] = mapped_column(sa.String(20), nullable=False)
    department_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True), sa.ForeignKey("departments.id", ondelete="SET NULL"),
    )
    position: Mapped[str] = mapped_column(sa.String(100), nullable=False)
    salary: Mapped[Decimal] = mapped_column(sa.Numeric(12, 2), nullable=False, default=Decimal("0"))
    hire_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    manager_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True), sa.ForeignKey("employees.id", ondelete="SET NULL"),
    )
    status: Mapped[EmployeeStatus] = mapped_column(
        sa.Enum(EmployeeStatus, name="employee_status"),
        nullable=False,
        default=EmployeeStatus.active,
    )
    skills: Mapped[list] = mapped_column(JSONB, nullable=False, default=list)
    bio: Mapped[Optional[str]] = mapped_column(sa.Text)
    address: Mapped[Optional[str]] = mapped_column(sa.Text)
    emergency_contact: Mapped[Optional[dict]] = mapped_column(JSONB)

    # ── Relationships ───────────────────────────────────────────────
    user: Mapped[User] = relationship()
    department: Mapped[Optional[Department]] = relationship(
        back_populates="employees", foreign_keys=[department_id],
    )
    manager: Mapped[Optional[Employee]] = relationship(remote_side="Employee.id")

    @property
    def full_name(self) -> str:
        return self.user.full_name if self.user else self.employee_code

    def __repr__(self) -> str:
        return f"<Employee {self.employee_code!r}>"


# ═════════════════════════════════════════════════════════════════════
# Attendance
# ═════════════════════════════════════════════════════════════════════


class AttendanceRecord(Base, TimestampMixin):
    """One row per employee per day; marking the same day again updates it."""

    __tablename__ = "attendance_records"
    __table_args__ = (
        sa.UniqueConstraint("employee_id", "date", name="uq_attendance_emp_date"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    tenant_id: Mapped[uuid.UUID] = _tenant_fk()
    employee_id: Mapped[uuid.UUID] = _employee_fk()
    date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    check_in: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    check_out: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    status: Mapped[AttendanceStatus] = mapped_column(
        sa.Enum(AttendanceStatus, name="attendance_status"),
        nullable=False,
        default=AttendanceStatus.present,
    )
    notes: Mapped[Optional[str]] = mapped_column(sa.Text)

    employee: Mapped[Employee] = relationship()

    @property
    def hours_worked(self) -> Optional[float]:
        if self.check_in is None or self.check_out is None:
            return None
        return round((self.check_out - self.check_in).total_seconds() / 3600, 2)


# ═════════════════════════════════════════════════════════════════════
# Leave
# ═════════════════════════════════════════════════════════════════════


class LeaveRequest(Base, TimestampMixin):
    __tablename__ = "leave_requests"
    __table_args__ = (
        sa.CheckConstraint("end_date >= start_date", name="ck_leave_dates"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    tenant_id: Mapped[uuid.UUID] = _tenant_fk()
    employee_id: Mapped[uuid.UUID] = _employee_fk()
    leave_type: Mapped[LeaveType] = mapped_column(
        sa.Enum(LeaveType, name="leave_type"), nullable=False,
    )
    start_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    end_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    days: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    reason: Mapped[Optional[str]] = mapped_column(sa.Text)
    status: Mapped[LeaveStatus] = mapped_column(
        sa.Enum(LeaveStatus, name="leave_status"),
        nullable=False,
        default=LeaveStatus.pending,
    )
    decided_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="SET NULL"),
    )
    decided_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    comments: Mapped[Optional[str]] = mapped_column(sa.Text)

    employee: Mapped[Employee] = relationship()


# ═════════════════════════════════════════════════════════════════════
# Payroll
# ═════════════════════════════════════════════════════════════════════


class PayrollRecord(Base, TimestampMixin):
    """Monthly pay slip; ``net_salary`` is computed by the service on write."""

    __tablename__ = "payroll_records"
    __table_args__ = (
        sa.UniqueConstraint("employee_id", "month", "year", name="uq_payroll_period"),
        sa.CheckConstraint("month BETWEEN 1 AND 12", name="ck_payroll_month"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    tenant_id: Mapped[uuid.UUID] = _tenant_fk()
    employee_id: Mapped[uuid.UUID] = _employee_fk()
    month: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    year: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    basic_salary: Mapped[Decimal] = mapped_column(sa.Numeric(12, 2), nullable=False)
    allowances: Mapped[Decimal] = mapped_column(sa.Numeric(12, 2), nullable=False, default=Decimal("0"))
    deductions: Mapped[Decimal] = mapped_column(sa.Numeric(12, 2), nullable=False, default=Decimal("0"))
    bonus: Mapped[Decimal] = mapped_column(sa.Numeric(12, 2), nullable=False, default=Decimal("0"))
    overtime: Mapped[Decimal] = mapped_column(sa.Numeric(12, 2), nullable=False, default=Decimal("0"))
    net_salary: Mapped[Decimal] = mapped_column(sa.Numeric(12, 2), nullable=False)
    status: Mapped[PayrollStatus] = mapped_column(
        sa.Enum(PayrollStatus, name="payroll_status"),
        nullable=False,
        default=PayrollStatus.pending,
    )
    paid_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))

    employee: Mapped[Employee] = relationship()

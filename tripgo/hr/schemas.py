"""HR Pydantic v2 schemas — request / response validation.

Naming conventions:
  - *Create / *Update / *Mark  → request bodies (write)
  - *Response / *Detail        → response bodies (read)
"""


import uuid
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from tripgo.common.constants import (
    AttendanceStatus,
    EmployeeStatus,
    LeaveStatus,
    LeaveType,
    PayrollStatus,
)


# ═════════════════════════════════════════════════════════════════════
# Department
# ═════════════════════════════════════════════════════════════════════


class DepartmentCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    head_employee_id: Optional[uuid.UUID] = None
    budget: Optional[Decimal] = Field(None, ge=0)


class DepartmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    description: Optional[str] = None
    head_employee_id: Optional[uuid.UUID] = None
    budget: Optional[Decimal] = None
    employee_count: int = 0
    created_at: datetime


class DepartmentCount(BaseModel):
    department_id: Optional[uuid.UUID] = None
    name: str
    count: int


# ═════════════════════════════════════════════════════════════════════
# Employee
# ═════════════════════════════════════════════════════════════════════


class EmployeeCreate(BaseModel):
    """Attach an HR profile to an existing user of the tenant."""

    user_id: uuid.UUID
    employee_code: str = Field(..., min_length=1, max_length=20)
    department_id: Optional[uuid.UUID] = None
    position: str = Field(..., min_length=1, max_length=100)
    salary: Decimal = Field(Decimal("0"), ge=0)
    hire_date: date
    manager_id: Optional[uuid.UUID] = None
    status: EmployeeStatus = EmployeeStatus.active
    skills: list[str] = Field(default_factory=list)
    bio: Optional[str] = None
    address: Optional[str] = None
    emergency_contact: Optional[dict[str, Any]] = None


class EmployeeUpdate(BaseModel):
    """Partial update — only supplied fields are changed."""

    employee_code: Optional[str] = Field(None, min_length=1, max_length=20)
    department_id: Optional[uuid.UUID] = None
    position: Optional[str] = Field(None, min_length=1, max_length=100)
    salary: Optional[Decimal] = Field(None, ge=0)
    hire_date: Optional[date] = None
    manager_id: Optional[uuid.UUID] = None
    status: Optional[EmployeeStatus] = None
    skills: Optional[list[str]] = None
    bio: Optional[str] = None
    address: Optional[str] = None
    emergency_contact: Optional[dict[str, Any]] = None


class EmployeeBrief(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    employee_code: str
    full_name: str
    position: str
    hire_date: date


class EmployeeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: uuid.UUID
    employee_code: str
    full_name: str
    email: Optional[str] = None
    department_id: Optional[uuid.UUID] = None
    department_name: Optional[str] = None
    position: str
    salary: Decimal
    hire_date: date
    manager_id: Optional[uuid.UUID] = None
    status: EmployeeStatus
    skills: list[str] = []
    bio: Optional[str] = None
    address: Optional[str] = None
    emergency_contact: Optional[dict[str, Any]] = None
    created_at: datetime
    updated_at: datetime


# ═════════════════════════════════════════════════════════════════════
# Attendance
# ═════════════════════════════════════════════════════════════════════


class AttendanceMark(BaseModel):
    """Mark (or re-mark) attendance for one employee-day.

    ``employee_id`` defaults to the caller's own employee profile.
    """

    employee_id: Optional[uuid.UUID] = None
    check_in: Optional[datetime] = None
    check_out: Optional[datetime] = None
    status: AttendanceStatus = AttendanceStatus.present
    notes: Optional[str] = Field(None, max_length=1000)
    date: date

    @field_validator("check_in", "check_out")
    @classmethod
    def _assume_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        # Naive times are taken as UTC so they compare with aware ones
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @model_validator(mode="after")
    def _check_out_not_before_check_in(self) -> "AttendanceMark":
        if self.check_in and self.check_out and self.check_out < self.check_in:
            raise ValueError("check_out must not be before check_in")
        return self


class AttendanceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    employee_id: uuid.UUID
    check_in: Optional[datetime] = None
    check_out: Optional[datetime] = None
    status: AttendanceStatus
    notes: Optional[str] = None
    hours_worked: Optional[float] = None
    date: date


# ═════════════════════════════════════════════════════════════════════
# Leave
# ═════════════════════════════════════════════════════════════════════


class LeaveCreate(BaseModel):
    employee_id: Optional[uuid.UUID] = None
    leave_type: LeaveType
    start_date: date
    end_date: date
    reason: Optional[str] = Field(None, max_length=2000)

    @model_validator(mode="after")
    def _end_not_before_start(self) -> "LeaveCreate":
        if self.end_date < self.start_date:
            raise ValueError("end_date must be on or after start_date")
        return self


class LeaveDecision(BaseModel):
    status: LeaveStatus
    comments: Optional[str] = Field(None, max_length=2000)


class LeaveResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    employee_id: uuid.UUID
    employee_name: Optional[str] = None
    leave_type: LeaveType
    start_date: date
    end_date: date
    days: int
    reason: Optional[str] = None
    status: LeaveStatus
    decided_by: Optional[uuid.UUID] = None
    decided_at: Optional[datetime] = None
    comments: Optional[str] = None
    created_at: datetime


class EmployeeDetail(EmployeeResponse):
    recent_attendance: list[AttendanceResponse] = []
    recent_leaves: list[LeaveResponse] = []


# ═════════════════════════════════════════════════════════════════════
# Payroll
# ═════════════════════════════════════════════════════════════════════


class PayrollCreate(BaseModel):
    """``basic_salary`` defaults to one twelfth of the employee's annual salary."""

    employee_id: uuid.UUID
    month: int = Field(..., ge=1, le=12)
    year: int = Field(..., ge=2000, le=2100)
    basic_salary: Optional[Decimal] = Field(None, ge=0)
    allowances: Decimal = Field(Decimal("0"), ge=0)
    deductions: Decimal = Field(Decimal("0"), ge=0)
    bonus: Decimal = Field(Decimal("0"), ge=0)
    overtime: Decimal = Field(Decimal("0"), ge=0)


class PayrollResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    employee_id: uuid.UUID
    employee_name: Optional[str] = None
    month: int
    year: int
    basic_salary: Decimal
    allowances: Decimal
    deductions: Decimal
    bonus: Decimal
    overtime: Decimal
    net_salary: Decimal
    status: PayrollStatus
    paid_at: Optional[datetime] = None
    created_at: datetime


# ═════════════════════════════════════════════════════════════════════
# Dashboard
# ═════════════════════════════════════════════════════════════════════


class TodayAttendance(BaseModel):
    present: int = 0
    absent: int = 0
    late: int = 0
    half_day: int = 0
    not_marked: int = 0


class HRDashboard(BaseModel):
    total_employees: int
    active_employees: int
    on_leave: int
    pending_leaves: int
    today_attendance: TodayAttendance
    departments: list[DepartmentCount]
    recent_hires: list[EmployeeBrief]

"""HR — employees, attendance, leave, departments, payroll, HR dashboard."""

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal

import pytest

from tripgo.common.constants import AttendanceStatus, EmployeeStatus, LeaveStatus, LeaveType, UserRole
from tripgo.hr.models import AttendanceRecord, Department, Employee, LeaveRequest
from tripgo.hr.service import leave_days, net_salary
from tests.conftest import create_user, headers_for


async def _add_employee(db, tenant_id, user, code, **overrides) -> Employee:
    fields = dict(
        tenant_id=tenant_id,
        user_id=user.id,
        employee_code=code,
        position="Travel Agent",
        salary=Decimal("60000"),
        hire_date=date(2024, 1, 15),
    )
    fields.update(overrides)
    employee = Employee(**fields)
    db.add(employee)
    await db.commit()
    return employee


@pytest.fixture
async def staff(db, tenant, employee_user) -> Employee:
    return await _add_employee(db, tenant.id, employee_user, "EMP-001")


@pytest.fixture
async def hr_profile(db, tenant, hr_manager) -> Employee:
    return await _add_employee(db, tenant.id, hr_manager, "HR-001", position="HR Lead")


def test_leave_days_inclusive():
    assert leave_days(date(2026, 3, 2), date(2026, 3, 2)) == 1
    assert leave_days(date(2026, 3, 2), date(2026, 3, 6)) == 5


def test_net_salary():
    assert net_salary(
        Decimal("5000"), Decimal("300"), Decimal("450"), Decimal("200"), Decimal("50"),
    ) == Decimal("5100")


# ═════════════════════════════════════════════════════════════════════
# Employees and departments
# ═════════════════════════════════════════════════════════════════════


class TestEmployees:

    async def test_create_department_and_employee(self, client, hr_headers, employee_user):
        dept = await client.post(
            "/api/v1/hr/departments", json={"name": " Sales ", "budget": "50000"}, headers=hr_headers,
        )
        assert dept.status_code == 201
        department_id = dept.json()["data"]["id"]
        assert dept.json()["data"]["name"] == "Sales"

        resp = await client.post(
            "/api/v1/hr/employees",
            json={
                "user_id": str(employee_user.id),
                "employee_code": "EMP-100",
                "department_id": department_id,
                "position": "Cruise Specialist",
                "salary": "48000",
                "hire_date": "2025-02-01",
            },
            headers=hr_headers,
        )
        assert resp.status_code == 201
        data = resp.json()["data"]
        assert data["full_name"] == "Sam Staff"
        assert data["email"] == "staff@example.com"
        assert data["department_name"] == "Sales"

        listing = await client.get("/api/v1/hr/departments", headers=hr_headers)
        assert listing.json()["data"][0]["employee_count"] == 1

    async def test_duplicate_department_name(self, client, hr_headers):
        await client.post("/api/v1/hr/departments", json={"name": "Finance"}, headers=hr_headers)
        resp = await client.post("/api/v1/hr/departments", json={"name": "finance"}, headers=hr_headers)
        assert resp.status_code == 409

    async def test_user_can_only_have_one_profile(self, client, hr_headers, staff, employee_user):
        resp = await client.post(
            "/api/v1/hr/employees",
            json={
                "user_id": str(employee_user.id),
                "employee_code": "EMP-777",
                "position": "Agent",
                "hire_date": "2025-02-01",
            },
            headers=hr_headers,
        )
        assert resp.status_code == 409

    async def test_duplicate_employee_code(self, client, db, tenant, hr_headers, staff):
        newcomer = await create_user(db, tenant.id, email="new.hire@example.com")
        resp = await client.post(
            "/api/v1/hr/employees",
            json={
                "user_id": str(newcomer.id),
                "employee_code": "EMP-001",
                "position": "Agent",
                "hire_date": "2025-02-01",
            },
            headers=hr_headers,
        )
        assert resp.status_code == 409

    async def test_list_and_search(self, client, hr_headers, staff, hr_profile):
        resp = await client.get("/api/v1/hr/employees", headers=hr_headers)
        assert [e["employee_code"] for e in resp.json()["data"]["items"]] == ["EMP-001", "HR-001"]

        resp = await client.get("/api/v1/hr/employees", params={"search": "sam"}, headers=hr_headers)
        assert [e["employee_code"] for e in resp.json()["data"]["items"]] == ["EMP-001"]

    async def test_employee_cannot_list(self, client, employee_headers, staff):
        resp = await client.get("/api/v1/hr/employees", headers=employee_headers)
        assert resp.status_code == 403

    async def test_customer_has_no_hr_access(self, client, customer_headers):
        resp = await client.get("/api/v1/hr/employees/me", headers=customer_headers)
        assert resp.status_code == 403

    async def test_me_and_detail(self, client, employee_headers, staff, hr_profile):
        me = await client.get("/api/v1/hr/employees/me", headers=employee_headers)
        assert me.json()["data"]["id"] == str(staff.id)

        own = await client.get(f"/api/v1/hr/employees/{staff.id}", headers=employee_headers)
        assert own.status_code == 200
        assert own.json()["data"]["recent_attendance"] == []

        other = await client.get(f"/api/v1/hr/employees/{hr_profile.id}", headers=employee_headers)
        assert other.status_code == 403

    async def test_me_without_profile(self, client, employee_headers):
        resp = await client.get("/api/v1/hr/employees/me", headers=employee_headers)
        assert resp.status_code == 404

    async def test_update_employee(self, client, hr_headers, staff):
        resp = await client.put(
            f"/api/v1/hr/employees/{staff.id}",
            json={"position": "Senior Agent", "status": "on_leave"},
            headers=hr_headers,
        )
        assert resp.status_code == 200
        assert resp.json()["data"]["position"] == "Senior Agent"
        assert resp.json()["data"]["status"] == "on_leave"

        self_manager = await client.put(
            f"/api/v1/hr/employees/{staff.id}", json={"manager_id": str(staff.id)}, headers=hr_headers,
        )
        assert self_manager.status_code == 400


# ═════════════════════════════════════════════════════════════════════
# Attendance
# ═════════════════════════════════════════════════════════════════════


class TestAttendance:

    async def test_mark_own_attendance_upserts(self, client, employee_headers, staff):
        day = date(2026, 5, 4)
        first = await client.post(
            "/api/v1/hr/attendance",
            json={
                "date": day.isoformat(),
                "check_in": "2026-05-04T09:00:00",
                "check_out": "2026-05-04T17:30:00",
            },
            headers=employee_headers,
        )
        assert first.status_code == 200
        assert first.json()["data"]["hours_worked"] == 8.5

        second = await client.post(
            "/api/v1/hr/attendance",
            json={"date": day.isoformat(), "status": "late", "notes": "Train delay"},
            headers=employee_headers,
        )
        assert second.json()["data"]["id"] == first.json()["data"]["id"]
        assert second.json()["data"]["status"] == "late"

        listing = await client.get("/api/v1/hr/attendance", headers=employee_headers)
        assert listing.json()["data"]["pagination"]["total"] == 1

    async def test_check_out_before_check_in(self, client, employee_headers, staff):
        resp = await client.post(
            "/api/v1/hr/attendance",
            json={
                "date": "2026-05-04",
                "check_in": "2026-05-04T17:00:00",
                "check_out": "2026-05-04T09:00:00",
            },
            headers=employee_headers,
        )
        assert resp.status_code == 422

    async def test_mixed_timezone_times_treated_as_utc(self, client, employee_headers, staff):
        resp = await client.post(
            "/api/v1/hr/attendance",
            json={
                "date": "2026-05-04",
                "check_in": "2026-05-04T09:00:00Z",
                "check_out": "2026-05-04T17:00:00",
            },
            headers=employee_headers,
        )
        assert resp.status_code == 200
        assert resp.json()["data"]["hours_worked"] == 8.0

        backwards = await client.post(
            "/api/v1/hr/attendance",
            json={
                "date": "2026-05-05",
                "check_in": "2026-05-05T17:00:00+00:00",
                "check_out": "2026-05-05T09:00:00",
            },
            headers=employee_headers,
        )
        assert backwards.status_code == 422

    async def test_employee_cannot_mark_others(self, client, employee_headers, staff, hr_profile):
        resp = await client.post(
            "/api/v1/hr/attendance",
            json={"employee_id": str(hr_profile.id), "date": "2026-05-04"},
            headers=employee_headers,
        )
        assert resp.status_code == 403

    async def test_hr_marks_and_filters(self, client, hr_headers, staff):
        for offset, status in ((0, "present"), (1, "absent")):
            await client.post(
                "/api/v1/hr/attendance",
                json={
                    "employee_id": str(staff.id),
                    "date": (date(2026, 5, 4) + timedelta(days=offset)).isoformat(),
                    "status": status,
                },
                headers=hr_headers,
            )
        resp = await client.get(
            "/api/v1/hr/attendance",
            params={"employee_id": str(staff.id), "status": "absent"},
            headers=hr_headers,
        )
        assert [r["date"] for r in resp.json()["data"]["items"]] == ["2026-05-05"]

    async def test_employee_cannot_read_others_attendance(self, client, employee_headers, staff, hr_profile):
        resp = await client.get(
            "/api/v1/hr/attendance", params={"employee_id": str(hr_profile.id)}, headers=employee_headers,
        )
        assert resp.status_code == 403


# ═════════════════════════════════════════════════════════════════════
# Leave
# ═════════════════════════════════════════════════════════════════════


class TestLeave:

    async def _request(self, client, headers, **overrides):
        body = {
            "leave_type": "annual",
            "start_date": "2026-07-06",
            "end_date": "2026-07-08",
            "reason": "Family trip",
            **overrides,
        }
        return await client.post("/api/v1/hr/leave", json=body, headers=headers)

    async def test_request_and_approve(self, client, employee_headers, hr_headers, staff, hr_manager):
        resp = await self._request(client, employee_headers)
        assert resp.status_code == 201
        leave = resp.json()["data"]
        assert leave["days"] == 3
        assert leave["status"] == "pending"
        assert leave["employee_name"] == "Sam Staff"

        decided = await client.put(
            f"/api/v1/hr/leave/{leave['id']}/decision",
            json={"status": "approved", "comments": "Enjoy"},
            headers=hr_headers,
        )
        assert decided.status_code == 200
        assert decided.json()["message"] == "Leave request approved"
        assert decided.json()["data"]["decided_by"] == str(hr_manager.id)

        again = await client.put(
            f"/api/v1/hr/leave/{leave['id']}/decision", json={"status": "rejected"}, headers=hr_headers,
        )
        assert again.status_code == 400

    async def test_end_before_start(self, client, employee_headers, staff):
        resp = await self._request(client, employee_headers, start_date="2026-07-08", end_date="2026-07-06")
        assert resp.status_code == 422

    async def test_employee_cannot_decide(self, client, employee_headers, staff):
        leave_id = (await self._request(client, employee_headers)).json()["data"]["id"]
        resp = await client.put(
            f"/api/v1/hr/leave/{leave_id}/decision", json={"status": "approved"}, headers=employee_headers,
        )
        assert resp.status_code == 403

    async def test_cannot_decide_own_leave(self, client, hr_headers, hr_profile):
        leave_id = (await self._request(client, hr_headers)).json()["data"]["id"]
        resp = await client.put(
            f"/api/v1/hr/leave/{leave_id}/decision", json={"status": "approved"}, headers=hr_headers,
        )
        assert resp.status_code == 403

    async def test_pending_is_not_a_decision(self, client, employee_headers, hr_headers, staff):
        leave_id = (await self._request(client, employee_headers)).json()["data"]["id"]
        resp = await client.put(
            f"/api/v1/hr/leave/{leave_id}/decision", json={"status": "pending"}, headers=hr_headers,
        )
        assert resp.status_code == 400

    async def test_list_scoped_to_self(self, client, employee_headers, hr_headers, staff, hr_profile):
        await self._request(client, employee_headers)
        await self._request(client, hr_headers, leave_type="sick")

        own = await client.get("/api/v1/hr/leave", headers=employee_headers)
        assert own.json()["data"]["pagination"]["total"] == 1

        everyone = await client.get("/api/v1/hr/leave", headers=hr_headers)
        assert everyone.json()["data"]["pagination"]["total"] == 2

        sick = await client.get("/api/v1/hr/leave", params={"leave_type": "sick"}, headers=hr_headers)
        assert [lv["leave_type"] for lv in sick.json()["data"]["items"]] == ["sick"]


# ═════════════════════════════════════════════════════════════════════
# Payroll
# ═════════════════════════════════════════════════════════════════════


class TestPayroll:

    async def test_create_defaults_basic_from_salary(self, client, hr_headers, staff):
        resp = await client.post(
            "/api/v1/hr/payroll",
            json={
                "employee_id": str(staff.id),
                "month": 6,
                "year": 2026,
                "allowances": "300",
                "deductions": "450",
                "bonus": "200",
            },
            headers=hr_headers,
        )
        assert resp.status_code == 201
        data = resp.json()["data"]
        assert Decimal(str(data["basic_salary"])) == Decimal("5000")
        assert Decimal(str(data["net_salary"])) == Decimal("5050")
        assert data["status"] == "pending"
        assert data["employee_name"] == "Sam Staff"

    async def test_duplicate_period(self, client, hr_headers, staff):
        body = {"employee_id": str(staff.id), "month": 6, "year": 2026}
        await client.post("/api/v1/hr/payroll", json=body, headers=hr_headers)
        resp = await client.post("/api/v1/hr/payroll", json=body, headers=hr_headers)
        assert resp.status_code == 409

    async def test_mark_paid_once(self, client, hr_headers, staff):
        record = (await client.post(
            "/api/v1/hr/payroll",
            json={"employee_id": str(staff.id), "month": 1, "year": 2026, "basic_salary": "4000"},
            headers=hr_headers,
        )).json()["data"]

        paid = await client.post(f"/api/v1/hr/payroll/{record['id']}/pay", headers=hr_headers)
        assert paid.json()["data"]["status"] == "paid"
        assert paid.json()["data"]["paid_at"] is not None

        again = await client.post(f"/api/v1/hr/payroll/{record['id']}/pay", headers=hr_headers)
        assert again.status_code == 400

        listing = await client.get("/api/v1/hr/payroll", params={"status": "paid"}, headers=hr_headers)
        assert listing.json()["data"]["pagination"]["total"] == 1

    async def test_employee_cannot_manage_payroll(self, client, employee_headers, staff):
        resp = await client.get("/api/v1/hr/payroll", headers=employee_headers)
        assert resp.status_code == 403


# ═════════════════════════════════════════════════════════════════════
# Dashboard
# ═════════════════════════════════════════════════════════════════════


async def test_hr_dashboard(client, db, tenant, hr_headers, employee_user):
    sales = Department(tenant_id=tenant.id, name="Sales")
    db.add(sales)
    await db.commit()

    alice = await _add_employee(
        db, tenant.id, employee_user, "EMP-001", department_id=sales.id, hire_date=date(2025, 6, 1),
    )
    bob_user = await create_user(db, tenant.id, email="bob@example.com", first_name="Bob")
    await _add_employee(db, tenant.id, bob_user, "EMP-002", hire_date=date(2023, 3, 1))
    cara_user = await create_user(db, tenant.id, email="cara@example.com", first_name="Cara")
    await _add_employee(
        db, tenant.id, cara_user, "EMP-003", status=EmployeeStatus.on_leave, hire_date=date(2024, 9, 1),
    )

    db.add(AttendanceRecord(
        tenant_id=tenant.id, employee_id=alice.id, date=date.today(), status=AttendanceStatus.present,
    ))
    db.add(LeaveRequest(
        tenant_id=tenant.id, employee_id=alice.id, leave_type=LeaveType.sick,
        start_date=date(2026, 8, 3), end_date=date(2026, 8, 3), days=1, status=LeaveStatus.pending,
    ))
    await db.commit()

    resp = await client.get("/api/v1/hr/dashboard", headers=hr_headers)
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["total_employees"] == 3
    assert data["active_employees"] == 2
    assert data["on_leave"] == 1
    assert data["pending_leaves"] == 1
    assert data["today_attendance"]["present"] == 1
    assert data["today_attendance"]["not_marked"] == 1
    assert data["departments"][0] == {"department_id": None, "name": "Unassigned", "count": 2}
    assert [e["employee_code"] for e in data["recent_hires"]] == ["EMP-001", "EMP-003", "EMP-002"]


async def test_hr_dashboard_requires_read_all(client, employee_headers):
    resp = await client.get("/api/v1/hr/dashboard", headers=employee_headers)
    assert resp.status_code == 403


async def test_hr_is_tenant_scoped(client, db, other_tenant, staff):
    outsider = await create_user(db, other_tenant.id, email="hr@acme.example", role=UserRole.hr_manager)
    headers = await headers_for(db, outsider)
    headers["X-Tenant-ID"] = "acme-travel"
    resp = await client.get(f"/api/v1/hr/employees/{staff.id}", headers=headers)
    assert resp.status_code == 404

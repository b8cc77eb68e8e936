from datetime import date, timedelta

import pytest
from sqlalchemy import func, select

from app.api.v1.attendance.schemas import StudentAttendanceBulkMark
from app.api.v1.attendance.service import save_student_attendance
from app.core.exceptions import ConflictError
from app.core.models import StudentAttendance
from app.core.tenant_scope import TenantScope


class _ScopeMissingSavedMarks(TenantScope):
    """Reads as if another request had not yet committed its marks for the day."""

    async def all(self, stmt):
        return [row for row in await super().all(stmt) if not isinstance(row, StudentAttendance)]


async def test_saving_twice_keeps_one_row_with_latest_status(api_a, db_session) -> None:
    setup = await api_a.academic_setup()
    student = await api_a.admit(setup, "Asha")
    today = date.today().isoformat()
    marks = {"date": today, "records": [{"studentSessionId": student["studentSessionId"], "status": "present"}]}

    first = (await api_a.post("/api/v1/attendance/students", marks, expected=200))["data"]
    assert first == {"created": 1, "updated": 0}

    marks["records"][0]["status"] = "absent"
    second = (await api_a.post("/api/v1/attendance/students", marks, expected=200))["data"]
    assert second == {"created": 0, "updated": 1}

    count = await db_session.scalar(select(func.count(StudentAttendance.id)))
    assert count == 1

    day = (
        await api_a.get(
            "/api/v1/attendance/students",
            params={"classId": setup["class_id"], "sectionId": setup["section_id"], "date": today},
        )
    )["data"]
    assert [r["status"] for r in day["records"]] == ["absent"]
    assert day["totalAbsent"] == 1
    assert day["totalPresent"] == 0


async def test_unmarked_students_show_null_status(api_a) -> None:
    setup = await api_a.academic_setup()
    await api_a.admit(setup, "Asha")
    day = (
        await api_a.get(
            "/api/v1/attendance/students",
            params={"classId": setup["class_id"], "sectionId": setup["section_id"], "date": date.today().isoformat()},
        )
    )["data"]
    assert day["records"][0]["status"] is None
    assert day["totalUnmarked"] == 1


async def test_future_dates_are_rejected(api_a) -> None:
    setup = await api_a.academic_setup()
    student = await api_a.admit(setup, "Asha")
    tomorrow = (date.today() + timedelta(days=1)).isoformat()
    body = await api_a.post(
        "/api/v1/attendance/students",
        {"date": tomorrow, "records": [{"studentSessionId": student["studentSessionId"], "status": "present"}]},
        expected=400,
    )
    assert body["error"] == "Cannot mark attendance for future dates"


async def test_monthly_summary_counts_statuses(api_a) -> None:
    setup = await api_a.academic_setup()
    student = await api_a.admit(setup, "Asha")
    enrollment = student["studentSessionId"]
    first_of_month = date.today().replace(day=1)
    days = [first_of_month + timedelta(days=i) for i in range(3) if first_of_month + timedelta(days=i) <= date.today()]
    for i, day in enumerate(days):
        status = "present" if i % 2 == 0 else "late"
        await api_a.post(
            "/api/v1/attendance/students",
            {"date": day.isoformat(), "records": [{"studentSessionId": enrollment, "status": status}]},
            expected=200,
        )

    summary = (
        await api_a.get(
            f"/api/v1/attendance/students/{student['id']}/monthly",
            params={"year": first_of_month.year, "month": first_of_month.month},
        )
    )["data"]
    assert summary["totalMarkedDays"] == len(days)
    assert summary["presentDays"] + summary["lateDays"] == len(days)


async def test_staff_attendance_upsert(api_a) -> None:
    staff = (await api_a.post("/api/v1/staff", {"firstName": "Meera"}))["data"]
    today = date.today().isoformat()
    payload = {"date": today, "records": [{"staffId": staff["id"], "status": "present"}]}
    assert (await api_a.post("/api/v1/attendance/staff", payload, expected=200))["data"] == {"created": 1, "updated": 0}
    payload["records"][0]["status"] = "half_day"
    assert (await api_a.post("/api/v1/attendance/staff", payload, expected=200))["data"] == {"created": 0, "updated": 1}

    day = (await api_a.get("/api/v1/attendance/staff", params={"date": today}))["data"]
    assert day["records"][0]["status"] == "half_day"
    assert day["totalHalfDay"] == 1


async def test_concurrent_first_save_is_a_conflict(api_a, db_session) -> None:
    setup = await api_a.academic_setup()
    student = await api_a.admit(setup, "Asha")
    marks = {
        "date": date.today().isoformat(),
        "records": [{"studentSessionId": student["studentSessionId"], "status": "present"}],
    }
    await api_a.post("/api/v1/attendance/students", marks, expected=200)

    scope = _ScopeMissingSavedMarks(db_session, api_a.ctx.school.id)
    with pytest.raises(ConflictError):
        await save_student_attendance(scope, api_a.ctx.user.id, StudentAttendanceBulkMark.model_validate(marks))

    count = await db_session.scalar(select(func.count(StudentAttendance.id)))
    assert count == 1

"""Daily attendance for students (per active-session enrollment) and staff."""

from calendar import monthrange
from datetime import date
from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy import and_, select
from sqlalchemy.exc import IntegrityError

from app.api.v1.academic_sessions.service import require_active_session
from app.api.v1.students.service import resolve_class_section
from app.core.exceptions import ConflictError, ValidationFailed
from app.core.models import (
    Staff,
    StaffAttendance,
    Student,
    StudentAttendance,
    StudentSession,
)
from app.core.tenant_scope import TenantScope

from .schemas import (
    MonthlyAttendanceSummary,
    SaveResult,
    StaffAttendanceBulkMark,
    StaffAttendanceDay,
    StaffAttendanceRow,
    StudentAttendanceBulkMark,
    StudentAttendanceDay,
    StudentAttendanceRow,
)

_TOTAL_FIELDS = {
    "present": "total_present",
    "absent": "total_absent",
    "late": "total_late",
    "half_day": "total_half_day",
    "holiday": "total_holiday",
}


def _full_name(first: str, last: Optional[str]) -> str:
    return f"{first} {last}".strip() if last else first


def _totals(statuses: List[Optional[str]]) -> Dict[str, int]:
    out = {field: 0 for field in _TOTAL_FIELDS.values()}
    out["total_unmarked"] = 0
    for s in statuses:
        if s is None:
            out["total_unmarked"] += 1
        elif s in _TOTAL_FIELDS:
            out[_TOTAL_FIELDS[s]] += 1
    return out


def _reject_future(day: date) -> None:
    if day > date.today():
        raise ValidationFailed("Cannot mark attendance for future dates")


# ----- Student Attendance -----
async def get_student_attendance_day(
    scope: TenantScope,
    class_id: UUID,
    section_id: UUID,
    att_date: date,
) -> StudentAttendanceDay:
    """Roster of the class-section in the active session with that day's marks (status null when unmarked)."""
    session = await require_active_session(scope)
    class_section = await resolve_class_section(scope, class_id, section_id)
    stmt = (
        select(StudentSession, Student, StudentAttendance)
        .join(Student, Student.id == StudentSession.student_id)
        .outerjoin(
            StudentAttendance,
            and_(
                StudentAttendance.student_session_id == StudentSession.id,
                StudentAttendance.date == att_date,
            ),
        )
        .where(
            scope.where(StudentSession),
            StudentSession.session_id == session.id,
            StudentSession.class_section_id == class_section.id,
            Student.is_active.is_(True),
        )
        .order_by(StudentSession.roll_no.nullslast(), Student.first_name)
    )
    records = []
    for enrollment, student, mark in (await scope.db.execute(stmt)).all():
        records.append(
            StudentAttendanceRow(
                student_session_id=enrollment.id,
                student_id=student.id,
                admission_no=student.admission_no,
                student_name=_full_name(student.first_name, student.last_name),
                roll_no=enrollment.roll_no,
                attendance_id=mark.id if mark else None,
                status=mark.status if mark else None,
                remark=mark.remark if mark else None,
            )
        )
    return StudentAttendanceDay(
        date=att_date,
        session_id=session.id,
        class_id=class_id,
        section_id=section_id,
        records=records,
        **_totals([r.status for r in records]),
    )


async def save_student_attendance(
    scope: TenantScope,
    user_id: UUID,
    payload: StudentAttendanceBulkMark,
) -> SaveResult:
    """Upsert keyed on (student_session_id, date): saving twice leaves one row with the latest status."""
    _reject_future(payload.date)
    session = await require_active_session(scope)
    marks = {rec.student_session_id: rec for rec in payload.records}

    enrollments = await scope.all(
        scope.select(
            StudentSession,
            StudentSession.id.in_(list(marks)),
            StudentSession.session_id == session.id,
        )
    )
    if len(enrollments) != len(marks):
        raise ValidationFailed("Invalid student for the active session")
    student_of = {e.id: e.student_id for e in enrollments}

    existing = {
        a.student_session_id: a
        for a in await scope.all(
            scope.select(
                StudentAttendance,
                StudentAttendance.student_session_id.in_(list(marks)),
                StudentAttendance.date == payload.date,
            )
        )
    }
    created = updated = 0
    for enrollment_id, rec in marks.items():
        row = existing.get(enrollment_id)
        if row is None:
            scope.add(
                StudentAttendance(
                    student_session_id=enrollment_id,
                    student_id=student_of[enrollment_id],
                    date=payload.date,
                    status=rec.status.value,
                    remark=rec.remark,
                    marked_by=user_id,
                )
            )
            created += 1
        else:
            row.status = rec.status.value
            row.remark = rec.remark
            row.marked_by = user_id
            updated += 1
    try:
        await scope.db.commit()
    except IntegrityError:
        await scope.db.rollback()
        raise ConflictError("Attendance was saved concurrently, please reload and retry")
    return SaveResult(created=created, updated=updated)


async def get_student_monthly_attendance(
    scope: TenantScope,
    student_id: UUID,
    year: int,
    month: int,
) -> MonthlyAttendanceSummary:
    await scope.get_or_404(Student, student_id, "Student")
    first = date(year, month, 1)
    last = date(year, month, monthrange(year, month)[1])
    rows = await scope.all(
        select(StudentAttendance.status).where(
            scope.where(StudentAttendance),
            StudentAttendance.student_id == student_id,
            StudentAttendance.date >= first,
            StudentAttendance.date <= last,
        )
    )
    return MonthlyAttendanceSummary(
        year=year,
        month=month,
        present_days=rows.count("present"),
        absent_days=rows.count("absent"),
        late_days=rows.count("late"),
        half_day_days=rows.count("half_day"),
        holiday_days=rows.count("holiday"),
        total_marked_days=len(rows),
    )


# ----- Staff Attendance -----
async def get_staff_attendance_day(
    scope: TenantScope,
    att_date: date,
    role_id: Optional[UUID] = None,
    department_id: Optional[UUID] = None,
) -> StaffAttendanceDay:
    stmt = (
        select(Staff, StaffAttendance)
        .outerjoin(
            StaffAttendance,
            and_(StaffAttendance.staff_id == Staff.id, StaffAttendance.date == att_date),
        )
        .where(scope.where(Staff), Staff.is_active.is_(True))
    )
    if role_id is not None:
        stmt = stmt.where(Staff.role_id == role_id)
    if department_id is not None:
        stmt = stmt.where(Staff.department_id == department_id)
    stmt = stmt.order_by(Staff.first_name, Staff.last_name)

    records = [
        StaffAttendanceRow(
            staff_id=staff.id,
            employee_id=staff.employee_id,
            staff_name=_full_name(staff.first_name, staff.last_name),
            role_id=staff.role_id,
            department_id=staff.department_id,
            attendance_id=mark.id if mark else None,
            status=mark.status if mark else None,
            remark=mark.remark if mark else None,
        )
        for staff, mark in (await scope.db.execute(stmt)).all()
    ]
    return StaffAttendanceDay(date=att_date, records=records, **_totals([r.status for r in records]))


async def save_staff_attendance(
    scope: TenantScope,
    user_id: UUID,
    payload: StaffAttendanceBulkMark,
) -> SaveResult:
    """Upsert keyed on (staff_id, date)."""
    _reject_future(payload.date)
    marks = {rec.staff_id: rec for rec in payload.records}
    if await scope.count(Staff, Staff.id.in_(list(marks))) != len(marks):
        raise ValidationFailed("Invalid staff")

    existing = {
        a.staff_id: a
        for a in await scope.all(
            scope.select(
                StaffAttendance,
                StaffAttendance.staff_id.in_(list(marks)),
                StaffAttendance.date == payload.date,
            )
        )
    }
    created = updated = 0
    for staff_id, rec in marks.items():
        row = existing.get(staff_id)
        if row is None:
            scope.add(
                StaffAttendance(
                    staff_id=staff_id,
                    date=payload.date,
                    status=rec.status.value,
                    remark=rec.remark,
                    marked_by=user_id,
                )
            )
            created += 1
        else:
            row.status = rec.status.value
            row.remark = rec.remark
            row.marked_by = user_id
            updated += 1
    try:
        await scope.db.commit()
    except IntegrityError:
        await scope.db.rollback()
        raise ConflictError("Attendance was saved concurrently, please reload and retry")
    return SaveResult(created=created, updated=updated)

from datetime import date
from typing import List, Optional
from uuid import UUID

from pydantic import Field

from app.core.enums import AttendanceStatus
from app.core.schemas import CamelModel


# ----- Student Attendance -----
class StudentAttendanceMark(CamelModel):
    student_session_id: UUID
    status: AttendanceStatus
    remark: Optional[str] = Field(None, max_length=255)


class StudentAttendanceBulkMark(CamelModel):
    """Save a day's marks; each (studentSessionId, date) is inserted or overwritten."""

    date: date
    records: List[StudentAttendanceMark] = Field(..., min_length=1)


class StudentAttendanceRow(CamelModel):
    student_session_id: UUID
    student_id: UUID
    admission_no: str
    student_name: str
    roll_no: Optional[str] = None
    attendance_id: Optional[UUID] = None
    status: Optional[str] = None
    remark: Optional[str] = None


class StudentAttendanceDay(CamelModel):
    date: date
    session_id: UUID
    class_id: UUID
    section_id: UUID
    total_present: int = 0
    total_absent: int = 0
    total_late: int = 0
    total_half_day: int = 0
    total_holiday: int = 0
    total_unmarked: int = 0
    records: List[StudentAttendanceRow]


class MonthlyAttendanceSummary(CamelModel):
    year: int
    month: int
    present_days: int = 0
    absent_days: int = 0
    late_days: int = 0
    half_day_days: int = 0
    holiday_days: int = 0
    total_marked_days: int = 0


# ----- Staff Attendance -----
class StaffAttendanceMark(CamelModel):
    staff_id: UUID
    status: AttendanceStatus
    remark: Optional[str] = Field(None, max_length=255)


class StaffAttendanceBulkMark(CamelModel):
    date: date
    records: List[StaffAttendanceMark] = Field(..., min_length=1)


class StaffAttendanceRow(CamelModel):
    staff_id: UUID
    employee_id: str
    staff_name: str
    role_id: Optional[UUID] = None
    department_id: Optional[UUID] = None
    attendance_id: Optional[UUID] = None
    status: Optional[str] = None
    remark: Optional[str] = None


class StaffAttendanceDay(CamelModel):
    date: date
    total_present: int = 0
    total_absent: int = 0
    total_late: int = 0
    total_half_day: int = 0
    total_holiday: int = 0
    total_unmarked: int = 0
    records: List[StaffAttendanceRow]


class SaveResult(CamelModel):
    created: int
    updated: int

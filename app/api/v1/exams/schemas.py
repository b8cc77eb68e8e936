from datetime import date, datetime, time
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import Field, model_validator

from app.core.schemas import CamelModel


class ExamSubjectIn(CamelModel):
    subject_id: UUID
    exam_date: Optional[date] = None
    start_time: Optional[time] = None
    duration_minutes: Optional[int] = Field(None, ge=1)
    room_no: Optional[str] = Field(None, max_length=50)
    max_marks: Decimal = Field(Decimal("100"), gt=0)
    min_marks: Decimal = Field(Decimal("33"), ge=0)

    @model_validator(mode="after")
    def validate_marks(self) -> "ExamSubjectIn":
        if self.min_marks > self.max_marks:
            raise ValueError("minMarks cannot exceed maxMarks")
        return self


class ExamCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=150)
    description: Optional[str] = None
    session_id: Optional[UUID] = Field(None, description="Defaults to the active session")
    is_published: bool = False
    subjects: List[ExamSubjectIn] = Field(default_factory=list)


class ExamUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=150)
    description: Optional[str] = None
    is_published: Optional[bool] = None
    is_active: Optional[bool] = None
    subjects: Optional[List[ExamSubjectIn]] = Field(None, description="Desired subject set; matched by subjectId")


class ExamSubjectResponse(CamelModel):
    id: UUID
    subject_id: UUID
    subject_name: Optional[str] = None
    subject_code: Optional[str] = None
    exam_date: Optional[date] = None
    start_time: Optional[time] = None
    duration_minutes: Optional[int] = None
    room_no: Optional[str] = None
    max_marks: Decimal
    min_marks: Decimal


class ExamResponse(CamelModel):
    id: UUID
    school_id: UUID
    session_id: Optional[UUID] = None
    name: str
    description: Optional[str] = None
    is_published: bool
    is_active: bool
    subjects: List[ExamSubjectResponse]
    created_at: datetime
    updated_at: datetime


class ExamResultIn(CamelModel):
    student_session_id: UUID
    marks_obtained: Optional[Decimal] = Field(None, ge=0)
    is_absent: bool = False
    note: Optional[str] = Field(None, max_length=255)


class ExamResultsSave(CamelModel):
    exam_subject_id: UUID
    results: List[ExamResultIn] = Field(..., min_length=1)


class ExamResultRow(CamelModel):
    student_session_id: UUID
    student_id: UUID
    admission_no: str
    student_name: str
    roll_no: Optional[str] = None
    result_id: Optional[UUID] = None
    marks_obtained: Optional[Decimal] = None
    is_absent: bool = False
    passed: Optional[bool] = None
    note: Optional[str] = None


class ExamResultSheet(CamelModel):
    exam_id: UUID
    exam_subject_id: UUID
    subject_name: Optional[str] = None
    max_marks: Decimal
    min_marks: Decimal
    records: List[ExamResultRow]


class SaveResult(CamelModel):
    created: int
    updated: int

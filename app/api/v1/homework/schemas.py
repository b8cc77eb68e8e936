from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import Field, model_validator

from app.core.enums import EvaluationStatus
from app.core.schemas import CamelModel


class HomeworkCreate(CamelModel):
    class_id: UUID
    section_id: Optional[UUID] = None
    subject_id: Optional[UUID] = None
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    homework_date: date
    submission_date: date

    @model_validator(mode="after")
    def _check_dates(self):
        if self.submission_date < self.homework_date:
            raise ValueError("Submission date cannot be before homework date")
        return self


class HomeworkUpdate(CamelModel):
    section_id: Optional[UUID] = None
    subject_id: Optional[UUID] = None
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    homework_date: Optional[date] = None
    submission_date: Optional[date] = None


class HomeworkResponse(CamelModel):
    id: UUID
    school_id: UUID
    session_id: Optional[UUID] = None
    class_id: UUID
    class_name: Optional[str] = None
    section_id: Optional[UUID] = None
    section_name: Optional[str] = None
    subject_id: Optional[UUID] = None
    subject_name: Optional[str] = None
    title: str
    description: Optional[str] = None
    homework_date: date
    submission_date: date
    created_by: Optional[UUID] = None
    submission_count: int = 0
    created_at: datetime
    updated_at: datetime


# --- Submissions ---
class SubmissionCreate(CamelModel):
    homework_id: UUID
    student_id: UUID
    document: Optional[str] = Field(None, max_length=500)
    message: Optional[str] = None


class SubmissionEvaluate(CamelModel):
    status: EvaluationStatus
    marks: Optional[Decimal] = Field(None, ge=0)
    feedback: Optional[str] = None


class SubmissionResponse(CamelModel):
    id: UUID
    homework_id: UUID
    homework_title: str
    student_id: UUID
    admission_no: str
    student_name: str
    document: Optional[str] = None
    message: Optional[str] = None
    status: str
    marks: Optional[Decimal] = None
    feedback: Optional[str] = None
    submitted_at: datetime
    evaluated_at: Optional[datetime] = None
    evaluated_by: Optional[UUID] = None

from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import Field, model_validator

from app.core.enums import MemberType
from app.core.schemas import CamelModel


# --- Books ---
class BookCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=255)
    book_no: Optional[str] = Field(None, max_length=50)
    isbn: Optional[str] = Field(None, max_length=30)
    author: Optional[str] = Field(None, max_length=255)
    publisher: Optional[str] = Field(None, max_length=255)
    subject: Optional[str] = Field(None, max_length=100)
    rack_no: Optional[str] = Field(None, max_length=50)
    quantity: int = Field(1, ge=1)
    price: Optional[Decimal] = Field(None, ge=0)


class BookUpdate(CamelModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    book_no: Optional[str] = Field(None, max_length=50)
    isbn: Optional[str] = Field(None, max_length=30)
    author: Optional[str] = Field(None, max_length=255)
    publisher: Optional[str] = Field(None, max_length=255)
    subject: Optional[str] = Field(None, max_length=100)
    rack_no: Optional[str] = Field(None, max_length=50)
    quantity: Optional[int] = Field(None, ge=1)
    price: Optional[Decimal] = Field(None, ge=0)
    is_active: Optional[bool] = None


class BookResponse(CamelModel):
    id: UUID
    school_id: UUID
    title: str
    book_no: Optional[str] = None
    isbn: Optional[str] = None
    author: Optional[str] = None
    publisher: Optional[str] = None
    subject: Optional[str] = None
    rack_no: Optional[str] = None
    quantity: int
    available: int
    price: Optional[Decimal] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime


# --- Members ---
class MemberCreate(CamelModel):
    member_type: MemberType
    student_id: Optional[UUID] = None
    staff_id: Optional[UUID] = None
    library_card_no: str = Field(..., min_length=1, max_length=50)

    @model_validator(mode="after")
    def validate_target(self) -> "MemberCreate":
        if self.member_type == MemberType.STUDENT and not self.student_id:
            raise ValueError("studentId is required for student members")
        if self.member_type == MemberType.STAFF and not self.staff_id:
            raise ValueError("staffId is required for staff members")
        return self


class MemberUpdate(CamelModel):
    library_card_no: Optional[str] = Field(None, min_length=1, max_length=50)
    is_active: Optional[bool] = None


class MemberResponse(CamelModel):
    id: UUID
    member_type: str
    student_id: Optional[UUID] = None
    staff_id: Optional[UUID] = None
    member_name: Optional[str] = None
    library_card_no: str
    is_active: bool
    created_at: datetime


# --- Issues ---
class BookIssueCreate(CamelModel):
    book_id: UUID
    member_id: UUID
    issue_date: Optional[date] = None
    due_date: Optional[date] = None


class BookReturnRequest(CamelModel):
    return_date: Optional[date] = None


class BookIssueResponse(CamelModel):
    id: UUID
    book_id: UUID
    book_title: Optional[str] = None
    member_id: UUID
    member_name: Optional[str] = None
    library_card_no: Optional[str] = None
    issue_date: date
    due_date: date
    return_date: Optional[date] = None
    status: str
    is_overdue: bool = False
    overdue_days: int = 0
    created_at: datetime

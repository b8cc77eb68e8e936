from datetime import date, datetime
from typing import Optional
from uuid import UUID

from pydantic import EmailStr, Field

from app.core.schemas import CamelModel


class StudentProfileFields(CamelModel):
    admission_date: Optional[date] = None
    last_name: Optional[str] = Field(None, max_length=100)
    gender: Optional[str] = Field(None, max_length=20)
    dob: Optional[date] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)
    blood_group: Optional[str] = Field(None, max_length=10)
    category_id: Optional[UUID] = None
    school_house_id: Optional[UUID] = None
    current_address: Optional[str] = None
    father_name: Optional[str] = Field(None, max_length=200)
    mother_name: Optional[str] = Field(None, max_length=200)
    guardian_name: Optional[str] = Field(None, max_length=200)
    guardian_phone: Optional[str] = Field(None, max_length=50)
    parent_id: Optional[UUID] = None


class StudentCreate(StudentProfileFields):
    """Admission: creates the student and the enrollment for the session in one go."""

    first_name: str = Field(..., min_length=1, max_length=100)
    admission_no: Optional[str] = Field(None, max_length=50, description="Generated when omitted")
    class_id: UUID
    section_id: UUID
    session_id: Optional[UUID] = Field(None, description="Defaults to the active session")
    roll_no: Optional[str] = Field(None, max_length=20)


class StudentUpdate(StudentProfileFields):
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    is_active: Optional[bool] = None
    # enrollment change within the active session
    class_id: Optional[UUID] = None
    section_id: Optional[UUID] = None
    roll_no: Optional[str] = Field(None, max_length=20)


class StudentResponse(CamelModel):
    id: UUID
    school_id: UUID
    admission_no: str
    admission_date: Optional[date] = None
    first_name: str
    last_name: Optional[str] = None
    gender: Optional[str] = None
    dob: Optional[date] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    blood_group: Optional[str] = None
    category_id: Optional[UUID] = None
    school_house_id: Optional[UUID] = None
    current_address: Optional[str] = None
    father_name: Optional[str] = None
    mother_name: Optional[str] = None
    guardian_name: Optional[str] = None
    guardian_phone: Optional[str] = None
    parent_id: Optional[UUID] = None
    pickup_point_id: Optional[UUID] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime
    # enrollment in the requested (default: active) session
    student_session_id: Optional[UUID] = None
    session_id: Optional[UUID] = None
    class_id: Optional[UUID] = None
    class_name: Optional[str] = None
    section_id: Optional[UUID] = None
    section_name: Optional[str] = None
    roll_no: Optional[str] = None

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import EmailStr, Field

from app.core.schemas import CamelModel


class ParentCreate(CamelModel):
    guardian_name: str = Field(..., min_length=1, max_length=200)
    guardian_relation: Optional[str] = Field(None, max_length=50)
    father_name: Optional[str] = Field(None, max_length=200)
    mother_name: Optional[str] = Field(None, max_length=200)
    phone: Optional[str] = Field(None, max_length=50)
    email: Optional[EmailStr] = None
    occupation: Optional[str] = Field(None, max_length=100)
    address: Optional[str] = None


class ParentUpdate(CamelModel):
    guardian_name: Optional[str] = Field(None, min_length=1, max_length=200)
    guardian_relation: Optional[str] = Field(None, max_length=50)
    father_name: Optional[str] = Field(None, max_length=200)
    mother_name: Optional[str] = Field(None, max_length=200)
    phone: Optional[str] = Field(None, max_length=50)
    email: Optional[EmailStr] = None
    occupation: Optional[str] = Field(None, max_length=100)
    address: Optional[str] = None


class ParentResponse(CamelModel):
    id: UUID
    school_id: UUID
    guardian_name: str
    guardian_relation: Optional[str] = None
    father_name: Optional[str] = None
    mother_name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    occupation: Optional[str] = None
    address: Optional[str] = None
    student_count: int = 0
    created_at: datetime
    updated_at: datetime

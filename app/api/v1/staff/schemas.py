from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import EmailStr, Field, model_validator

from app.core.schemas import CamelModel


class StaffBase(CamelModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    gender: Optional[str] = Field(None, max_length=20)
    dob: Optional[date] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)
    date_of_joining: Optional[date] = None
    qualification: Optional[str] = Field(None, max_length=255)
    basic_salary: Optional[Decimal] = Field(None, ge=0)
    address: Optional[str] = None
    role_id: Optional[UUID] = None
    department_id: Optional[UUID] = None
    designation_id: Optional[UUID] = None


class StaffCreate(StaffBase):
    employee_id: Optional[str] = Field(None, max_length=50, description="Generated when omitted")
    password: Optional[str] = Field(None, min_length=6, description="Creates a login for the staff member")

    @model_validator(mode="after")
    def login_needs_email_and_role(self) -> "StaffCreate":
        if self.password and (not self.email or not self.role_id):
            raise ValueError("email and roleId are required to create a login")
        return self


class StaffUpdate(CamelModel):
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    gender: Optional[str] = Field(None, max_length=20)
    dob: Optional[date] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)
    date_of_joining: Optional[date] = None
    qualification: Optional[str] = Field(None, max_length=255)
    basic_salary: Optional[Decimal] = Field(None, ge=0)
    address: Optional[str] = None
    role_id: Optional[UUID] = None
    department_id: Optional[UUID] = None
    designation_id: Optional[UUID] = None
    is_active: Optional[bool] = None


class StaffResponse(CamelModel):
    id: UUID
    school_id: UUID
    user_id: Optional[UUID] = None
    employee_id: str
    first_name: str
    last_name: Optional[str] = None
    gender: Optional[str] = None
    dob: Optional[date] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    date_of_joining: Optional[date] = None
    qualification: Optional[str] = None
    basic_salary: Optional[Decimal] = None
    address: Optional[str] = None
    role_id: Optional[UUID] = None
    role_name: Optional[str] = None
    department_id: Optional[UUID] = None
    department_name: Optional[str] = None
    designation_id: Optional[UUID] = None
    designation_name: Optional[str] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime

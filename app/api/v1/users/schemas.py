from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import EmailStr, Field

from app.core.schemas import CamelModel


class UserCreate(CamelModel):
    username: str = Field(..., min_length=3, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6)
    role_id: Optional[UUID] = None
    is_active: bool = True


class UserUpdate(CamelModel):
    username: Optional[str] = Field(None, min_length=3, max_length=100)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=6)
    role_id: Optional[UUID] = None
    is_active: Optional[bool] = None


class ResetPasswordRequest(CamelModel):
    new_password: str = Field(..., min_length=6)


class UserResponse(CamelModel):
    id: UUID
    school_id: UUID
    username: str
    email: str
    role_id: Optional[UUID] = None
    role_name: Optional[str] = None
    is_active: bool
    last_login: Optional[datetime] = None
    created_at: datetime

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import Field

from app.core.schemas import CamelModel


class DepartmentCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None


class DepartmentUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    is_active: Optional[bool] = None


class DepartmentResponse(CamelModel):
    id: UUID
    school_id: UUID
    name: str
    description: Optional[str] = None
    is_active: bool
    staff_count: int = 0
    created_at: datetime
    updated_at: datetime


class DesignationCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)


class DesignationUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    is_active: Optional[bool] = None


class DesignationResponse(CamelModel):
    id: UUID
    school_id: UUID
    name: str
    is_active: bool
    staff_count: int = 0
    created_at: datetime
    updated_at: datetime


class DropdownItem(CamelModel):
    label: str
    value: UUID

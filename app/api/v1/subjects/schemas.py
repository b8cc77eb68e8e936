from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import Field

from app.core.enums import SubjectType
from app.core.schemas import CamelModel


class SubjectCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    code: Optional[str] = Field(None, max_length=20)
    type: SubjectType = SubjectType.THEORY


class SubjectUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    code: Optional[str] = Field(None, max_length=20)
    type: Optional[SubjectType] = None
    is_active: Optional[bool] = None


class SubjectResponse(CamelModel):
    id: UUID
    school_id: UUID
    name: str
    code: Optional[str] = None
    type: str
    is_active: bool
    created_at: datetime
    updated_at: datetime


class SubjectDropdownItem(CamelModel):
    label: str
    value: UUID

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import Field

from app.core.schemas import CamelModel


class ClassCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=50)
    sort_order: Optional[int] = None
    section_ids: List[UUID] = Field(default_factory=list)


class ClassUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=50)
    sort_order: Optional[int] = None
    is_active: Optional[bool] = None
    section_ids: Optional[List[UUID]] = Field(None, description="Replaces the class's section set when given")


class ClassSectionItem(CamelModel):
    id: UUID
    section_id: UUID
    name: str
    capacity: Optional[int] = None


class ClassResponse(CamelModel):
    id: UUID
    school_id: UUID
    name: str
    sort_order: Optional[int] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime
    sections: Optional[List[ClassSectionItem]] = None

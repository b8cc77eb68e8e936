from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import Field

from app.core.schemas import CamelModel


class ExamGroupCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=150)
    description: Optional[str] = None
    exam_type: str = Field("term", min_length=1, max_length=30)
    exam_ids: List[UUID] = Field(default_factory=list)


class ExamGroupUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=150)
    description: Optional[str] = None
    exam_type: Optional[str] = Field(None, min_length=1, max_length=30)
    is_active: Optional[bool] = None
    exam_ids: Optional[List[UUID]] = Field(None, description="Replaces the group's exams when given")


class ExamGroupMember(CamelModel):
    exam_id: UUID
    name: str
    session_id: Optional[UUID] = None
    is_published: bool


class ExamGroupResponse(CamelModel):
    id: UUID
    school_id: UUID
    name: str
    description: Optional[str] = None
    exam_type: str
    is_active: bool
    exams: List[ExamGroupMember]
    created_at: datetime
    updated_at: datetime

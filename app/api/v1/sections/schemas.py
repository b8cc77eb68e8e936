from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import Field

from app.core.schemas import CamelModel


class SectionCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=50)


class SectionUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=50)
    is_active: Optional[bool] = None


class SectionResponse(CamelModel):
    id: UUID
    school_id: UUID
    name: str
    is_active: bool
    class_count: int = Field(0, description="Classes this section is assigned to")
    created_at: datetime
    updated_at: datetime

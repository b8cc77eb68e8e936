from datetime import date, datetime
from typing import Optional
from uuid import UUID

from pydantic import Field, model_validator

from app.core.schemas import CamelModel


class AcademicSessionCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=50, description="e.g. 2025-26")
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    is_active: bool = False

    @model_validator(mode="after")
    def validate_dates(self) -> "AcademicSessionCreate":
        if self.start_date and self.end_date and self.end_date <= self.start_date:
            raise ValueError("endDate must be after startDate")
        return self


class AcademicSessionUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=50)
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class AcademicSessionResponse(CamelModel):
    id: UUID
    school_id: UUID
    name: str
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime

from datetime import date, datetime
from typing import Optional
from uuid import UUID

from pydantic import Field, model_validator

from app.core.schemas import CamelModel


class LessonPlanFields(CamelModel):
    sub_topic: Optional[str] = Field(None, max_length=255)
    general_objectives: Optional[str] = None
    teaching_method: Optional[str] = None
    previous_knowledge: Optional[str] = None
    comprehensive_questions: Optional[str] = None
    presentation: Optional[str] = None
    note: Optional[str] = None
    youtube_url: Optional[str] = Field(None, max_length=500)
    document: Optional[str] = Field(None, max_length=500)
    staff_id: Optional[UUID] = None


class LessonPlanCreate(LessonPlanFields):
    subject_id: UUID
    lesson_name: str = Field(..., min_length=1, max_length=255)
    lesson_date: date
    class_id: Optional[UUID] = None
    section_id: Optional[UUID] = None
    status: str = Field("pending", min_length=1, max_length=30)

    @model_validator(mode="after")
    def _class_and_section_together(self):
        if (self.class_id is None) != (self.section_id is None):
            raise ValueError("classId and sectionId must be given together")
        return self


class LessonPlanUpdate(LessonPlanFields):
    subject_id: Optional[UUID] = None
    lesson_name: Optional[str] = Field(None, min_length=1, max_length=255)
    lesson_date: Optional[date] = None
    class_id: Optional[UUID] = None
    section_id: Optional[UUID] = None
    status: Optional[str] = Field(None, min_length=1, max_length=30)


class LessonPlanResponse(CamelModel):
    id: UUID
    school_id: UUID
    class_section_id: Optional[UUID] = None
    class_id: Optional[UUID] = None
    class_name: Optional[str] = None
    section_id: Optional[UUID] = None
    section_name: Optional[str] = None
    subject_id: UUID
    subject_name: Optional[str] = None
    staff_id: Optional[UUID] = None
    staff_name: Optional[str] = None
    lesson_name: str
    lesson_date: date
    sub_topic: Optional[str] = None
    general_objectives: Optional[str] = None
    teaching_method: Optional[str] = None
    previous_knowledge: Optional[str] = None
    comprehensive_questions: Optional[str] = None
    presentation: Optional[str] = None
    note: Optional[str] = None
    youtube_url: Optional[str] = None
    document: Optional[str] = None
    status: str
    created_by: Optional[UUID] = None
    created_at: datetime
    updated_at: datetime

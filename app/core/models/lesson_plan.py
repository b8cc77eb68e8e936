import uuid
from datetime import datetime

from sqlalchemy import Column, Date, DateTime, ForeignKey, String, Text
from sqlalchemy.dialects.postgresql import UUID

from app.db.session import Base


class LessonPlan(Base):
    """
    A teacher's plan for one lesson of a subject, optionally tied to a class-section
    and the staff member delivering it. status: pending | completed (open string).
    """

    __tablename__ = "lesson_plans"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    school_id = Column(UUID(as_uuid=True), ForeignKey("schools.id"), nullable=False, index=True)
    class_section_id = Column(UUID(as_uuid=True), ForeignKey("class_sections.id", ondelete="SET NULL"), nullable=True)
    subject_id = Column(UUID(as_uuid=True), ForeignKey("subjects.id"), nullable=False)
    staff_id = Column(UUID(as_uuid=True), ForeignKey("staff.id", ondelete="SET NULL"), nullable=True)
    lesson_name = Column(String(255), nullable=False)
    lesson_date = Column(Date, nullable=False)
    sub_topic = Column(String(255), nullable=True)
    general_objectives = Column(Text, nullable=True)
    teaching_method = Column(Text, nullable=True)
    previous_knowledge = Column(Text, nullable=True)
    comprehensive_questions = Column(Text, nullable=True)
    presentation = Column(Text, nullable=True)
    note = Column(Text, nullable=True)
    youtube_url = Column(String(500), nullable=True)
    document = Column(String(500), nullable=True)
    status = Column(String(30), nullable=False, default="pending")
    created_by = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

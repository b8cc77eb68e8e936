import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Integer, Numeric, String, Text, Time, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.db.session import Base


class Exam(Base):
    __tablename__ = "exams"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    school_id = Column(UUID(as_uuid=True), ForeignKey("schools.id"), nullable=False, index=True)
    session_id = Column(UUID(as_uuid=True), ForeignKey("academic_sessions.id"), nullable=True)
    name = Column(String(150), nullable=False)
    description = Column(Text, nullable=True)
    is_published = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    subjects = relationship(
        "ExamSubject",
        back_populates="exam",
        cascade="all, delete-orphan",
        order_by="ExamSubject.exam_date",
    )


class ExamSubject(Base):
    """A subject paper within an exam: schedule slot (date, time, room) and mark bounds."""

    __tablename__ = "exam_subjects"
    __table_args__ = (UniqueConstraint("exam_id", "subject_id", name="uq_exam_subject"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    exam_id = Column(UUID(as_uuid=True), ForeignKey("exams.id", ondelete="CASCADE"), nullable=False)
    subject_id = Column(UUID(as_uuid=True), ForeignKey("subjects.id"), nullable=False)
    exam_date = Column(Date, nullable=True)
    start_time = Column(Time, nullable=True)
    duration_minutes = Column(Integer, nullable=True)
    room_no = Column(String(50), nullable=True)
    max_marks = Column(Numeric(6, 2), nullable=False, default=100)
    min_marks = Column(Numeric(6, 2), nullable=False, default=33)

    exam = relationship("Exam", back_populates="subjects")


class ExamResult(Base):
    """Marks for one student-session in one exam subject; saved by upsert."""

    __tablename__ = "exam_results"
    __table_args__ = (
        UniqueConstraint("exam_subject_id", "student_session_id", name="uq_exam_result_subject_student"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    school_id = Column(UUID(as_uuid=True), ForeignKey("schools.id"), nullable=False, index=True)
    exam_subject_id = Column(UUID(as_uuid=True), ForeignKey("exam_subjects.id", ondelete="CASCADE"), nullable=False)
    student_session_id = Column(UUID(as_uuid=True), ForeignKey("student_sessions.id", ondelete="CASCADE"), nullable=False)
    student_id = Column(UUID(as_uuid=True), ForeignKey("students.id", ondelete="CASCADE"), nullable=False)
    marks_obtained = Column(Numeric(6, 2), nullable=True)
    is_absent = Column(Boolean, nullable=False, default=False)
    note = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class ExamGroup(Base):
    """Named grouping of exams (e.g. all term exams of a year). exam_type: term | unit | final | other."""

    __tablename__ = "exam_groups"
    __table_args__ = (UniqueConstraint("school_id", "name", name="uq_exam_group_school_name"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    school_id = Column(UUID(as_uuid=True), ForeignKey("schools.id"), nullable=False, index=True)
    name = Column(String(150), nullable=False)
    description = Column(Text, nullable=True)
    exam_type = Column(String(30), nullable=False, default="term")
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    members = relationship("ExamGroupExam", back_populates="exam_group", cascade="all, delete-orphan")


class ExamGroupExam(Base):
    __tablename__ = "exam_group_exams"
    __table_args__ = (UniqueConstraint("exam_group_id", "exam_id", name="uq_exam_group_exam"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    exam_group_id = Column(UUID(as_uuid=True), ForeignKey("exam_groups.id", ondelete="CASCADE"), nullable=False)
    exam_id = Column(UUID(as_uuid=True), ForeignKey("exams.id", ondelete="CASCADE"), nullable=False)

    exam_group = relationship("ExamGroup", back_populates="members")

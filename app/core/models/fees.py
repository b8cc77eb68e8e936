"""
Fee models.

FeeType      named charge category (Tuition, Transport, ...)
FeeGroup     bundle of FeeGroupType lines; each line carries amount, due date and fine policy
FeesMaster   FeeGroup assigned to a Class for a Session
StudentFeesMaster  per-student materialization of a FeesMaster
FeePayment   append-only payment event against a StudentFeesMaster; never updated or deleted
"""
import uuid
from datetime import datetime

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.db.session import Base


class FeeType(Base):
    __tablename__ = "fee_types"
    __table_args__ = (UniqueConstraint("school_id", "code", name="uq_fee_type_school_code"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    school_id = Column(UUID(as_uuid=True), ForeignKey("schools.id"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    code = Column(String(50), nullable=False)
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class FeeGroup(Base):
    __tablename__ = "fee_groups"
    __table_args__ = (UniqueConstraint("school_id", "name", name="uq_fee_group_school_name"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    school_id = Column(UUID(as_uuid=True), ForeignKey("schools.id"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    lines = relationship(
        "FeeGroupType",
        back_populates="fee_group",
        cascade="all, delete-orphan",
        order_by="FeeGroupType.due_date",
    )


class FeeGroupType(Base):
    """One charge line of a fee group. fine_type: none | fixed | percentage."""

    __tablename__ = "fee_group_types"
    __table_args__ = (UniqueConstraint("fee_group_id", "fee_type_id", name="uq_fee_group_type"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    fee_group_id = Column(UUID(as_uuid=True), ForeignKey("fee_groups.id", ondelete="CASCADE"), nullable=False)
    fee_type_id = Column(UUID(as_uuid=True), ForeignKey("fee_types.id"), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    due_date = Column(Date, nullable=True)
    fine_type = Column(String(20), nullable=False, default="none")
    fine_percent = Column(Numeric(5, 2), nullable=True)
    fine_amount = Column(Numeric(12, 2), nullable=True)

    fee_group = relationship("FeeGroup", back_populates="lines")


class FeesMaster(Base):
    __tablename__ = "fees_masters"
    __table_args__ = (
        UniqueConstraint("session_id", "fee_group_id", "class_id", name="uq_fees_master_session_group_class"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    school_id = Column(UUID(as_uuid=True), ForeignKey("schools.id"), nullable=False, index=True)
    session_id = Column(UUID(as_uuid=True), ForeignKey("academic_sessions.id"), nullable=False)
    fee_group_id = Column(UUID(as_uuid=True), ForeignKey("fee_groups.id"), nullable=False)
    class_id = Column(UUID(as_uuid=True), ForeignKey("classes.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)


class StudentFeesMaster(Base):
    __tablename__ = "student_fees_masters"
    __table_args__ = (
        UniqueConstraint("student_session_id", "fees_master_id", name="uq_student_fees_master"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    school_id = Column(UUID(as_uuid=True), ForeignKey("schools.id"), nullable=False, index=True)
    student_session_id = Column(UUID(as_uuid=True), ForeignKey("student_sessions.id", ondelete="CASCADE"), nullable=False)
    fees_master_id = Column(UUID(as_uuid=True), ForeignKey("fees_masters.id", ondelete="CASCADE"), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)


class FeePayment(Base):
    """Immutable. discount and fine are recorded for collection reports; dues sum amount only."""

    __tablename__ = "fee_payments"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    school_id = Column(UUID(as_uuid=True), ForeignKey("schools.id"), nullable=False, index=True)
    student_id = Column(UUID(as_uuid=True), ForeignKey("students.id"), nullable=False)
    student_fees_master_id = Column(
        UUID(as_uuid=True), ForeignKey("student_fees_masters.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    amount = Column(Numeric(12, 2), nullable=False)
    discount = Column(Numeric(12, 2), nullable=False, default=0)
    fine = Column(Numeric(12, 2), nullable=False, default=0)
    payment_mode = Column(String(30), nullable=False, default="Cash")
    payment_date = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    transaction_id = Column(String(100), nullable=True)
    note = Column(Text, nullable=True)
    collected_by = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

"""Front-office logs. Complaint and enquiry status are free strings with no enforced transitions."""
import uuid
from datetime import datetime

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.dialects.postgresql import UUID

from app.db.session import Base


class Complaint(Base):
    __tablename__ = "complaints"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    school_id = Column(UUID(as_uuid=True), ForeignKey("schools.id"), nullable=False, index=True)
    complaint_type = Column(String(100), nullable=True)
    source = Column(String(100), nullable=True)
    complainant_name = Column(String(200), nullable=False)
    phone = Column(String(50), nullable=True)
    date = Column(Date, nullable=False)
    description = Column(Text, nullable=True)
    action_taken = Column(Text, nullable=True)
    assigned_to = Column(String(200), nullable=True)
    note = Column(Text, nullable=True)
    status = Column(String(30), nullable=False, default="pending")
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class Enquiry(Base):
    __tablename__ = "enquiries"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    school_id = Column(UUID(as_uuid=True), ForeignKey("schools.id"), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    phone = Column(String(50), nullable=True)
    email = Column(String(255), nullable=True)
    address = Column(Text, nullable=True)
    description = Column(Text, nullable=True)
    note = Column(Text, nullable=True)
    date = Column(Date, nullable=False)
    follow_up_date = Column(Date, nullable=True)
    class_id = Column(UUID(as_uuid=True), ForeignKey("classes.id", ondelete="SET NULL"), nullable=True)
    source = Column(String(100), nullable=True)
    reference = Column(String(100), nullable=True)
    no_of_child = Column(Integer, nullable=True)
    status = Column(String(30), nullable=False, default="active")
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class Visitor(Base):
    __tablename__ = "visitors"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    school_id = Column(UUID(as_uuid=True), ForeignKey("schools.id"), nullable=False, index=True)
    purpose = Column(String(200), nullable=True)
    name = Column(String(200), nullable=False)
    phone = Column(String(50), nullable=True)
    id_card = Column(String(100), nullable=True)
    no_of_people = Column(Integer, nullable=False, default=1)
    date = Column(Date, nullable=False)
    in_time = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    out_time = Column(DateTime(timezone=True), nullable=True)
    note = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)


class PhoneCallLog(Base):
    __tablename__ = "phone_call_logs"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    school_id = Column(UUID(as_uuid=True), ForeignKey("schools.id"), nullable=False, index=True)
    name = Column(String(200), nullable=True)
    phone = Column(String(50), nullable=False)
    date = Column(Date, nullable=False)
    description = Column(Text, nullable=True)
    follow_up_date = Column(Date, nullable=True)
    call_duration = Column(String(20), nullable=True)
    note = Column(Text, nullable=True)
    call_type = Column(String(20), nullable=False)  # incoming | outgoing
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)


class PostalRecord(Base):
    __tablename__ = "postal_records"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    school_id = Column(UUID(as_uuid=True), ForeignKey("schools.id"), nullable=False, index=True)
    postal_type = Column(String(20), nullable=False)  # dispatch | receive
    reference_no = Column(String(100), nullable=True)
    to_title = Column(String(200), nullable=True)
    from_title = Column(String(200), nullable=True)
    address = Column(Text, nullable=True)
    note = Column(Text, nullable=True)
    date = Column(Date, nullable=False)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, String, Text
from sqlalchemy.dialects.postgresql import UUID

from app.db.session import Base


class School(Base):
    """
    Tenant root. Every tenant-scoped row references schools.id through school_id.

    - id: internal primary key, the only FK target.
    - code: public short identifier (login, employee-ID prefix). Unique globally, immutable.
    """

    __tablename__ = "schools"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    code = Column(String(20), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    address = Column(Text, nullable=True)
    country = Column(String(100), nullable=True)
    currency_code = Column(String(10), nullable=False, default="USD")
    currency_symbol = Column(String(10), nullable=False, default="$")
    date_format = Column(String(20), nullable=False, default="YYYY-MM-DD")
    timezone = Column(String(100), nullable=False, default="UTC")
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

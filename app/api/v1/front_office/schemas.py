import datetime as dt
from typing import Optional
from uuid import UUID

from pydantic import Field

from app.core.enums import CallType, PostalType
from app.core.schemas import CamelModel


# --- Complaints ---
class ComplaintCreate(CamelModel):
    complaint_type: Optional[str] = Field(None, max_length=100)
    source: Optional[str] = Field(None, max_length=100)
    complainant_name: str = Field(..., min_length=1, max_length=200)
    phone: Optional[str] = Field(None, max_length=50)
    date: dt.date
    description: Optional[str] = None
    action_taken: Optional[str] = None
    assigned_to: Optional[str] = Field(None, max_length=200)
    note: Optional[str] = None
    status: str = Field("pending", min_length=1, max_length=30)


class ComplaintUpdate(CamelModel):
    complaint_type: Optional[str] = Field(None, max_length=100)
    source: Optional[str] = Field(None, max_length=100)
    complainant_name: Optional[str] = Field(None, min_length=1, max_length=200)
    phone: Optional[str] = Field(None, max_length=50)
    date: Optional[dt.date] = None
    description: Optional[str] = None
    action_taken: Optional[str] = None
    assigned_to: Optional[str] = Field(None, max_length=200)
    note: Optional[str] = None
    status: Optional[str] = Field(None, min_length=1, max_length=30)


class ComplaintResponse(CamelModel):
    id: UUID
    complaint_type: Optional[str] = None
    source: Optional[str] = None
    complainant_name: str
    phone: Optional[str] = None
    date: dt.date
    description: Optional[str] = None
    action_taken: Optional[str] = None
    assigned_to: Optional[str] = None
    note: Optional[str] = None
    status: str
    created_at: dt.datetime
    updated_at: dt.datetime


# --- Enquiries ---
class EnquiryCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=200)
    phone: Optional[str] = Field(None, max_length=50)
    email: Optional[str] = Field(None, max_length=255)
    address: Optional[str] = None
    description: Optional[str] = None
    note: Optional[str] = None
    date: dt.date
    follow_up_date: Optional[dt.date] = None
    class_id: Optional[UUID] = None
    source: Optional[str] = Field(None, max_length=100)
    reference: Optional[str] = Field(None, max_length=100)
    no_of_child: Optional[int] = Field(None, ge=0)
    status: str = Field("active", min_length=1, max_length=30)


class EnquiryUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    phone: Optional[str] = Field(None, max_length=50)
    email: Optional[str] = Field(None, max_length=255)
    address: Optional[str] = None
    description: Optional[str] = None
    note: Optional[str] = None
    date: Optional[dt.date] = None
    follow_up_date: Optional[dt.date] = None
    class_id: Optional[UUID] = None
    source: Optional[str] = Field(None, max_length=100)
    reference: Optional[str] = Field(None, max_length=100)
    no_of_child: Optional[int] = Field(None, ge=0)
    status: Optional[str] = Field(None, min_length=1, max_length=30)


class EnquiryResponse(CamelModel):
    id: UUID
    name: str
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    description: Optional[str] = None
    note: Optional[str] = None
    date: dt.date
    follow_up_date: Optional[dt.date] = None
    class_id: Optional[UUID] = None
    source: Optional[str] = None
    reference: Optional[str] = None
    no_of_child: Optional[int] = None
    status: str
    created_at: dt.datetime
    updated_at: dt.datetime


# --- Visitors ---
class VisitorCreate(CamelModel):
    purpose: Optional[str] = Field(None, max_length=200)
    name: str = Field(..., min_length=1, max_length=200)
    phone: Optional[str] = Field(None, max_length=50)
    id_card: Optional[str] = Field(None, max_length=100)
    no_of_people: int = Field(1, ge=1)
    date: dt.date
    in_time: Optional[dt.datetime] = None
    note: Optional[str] = None


class VisitorUpdate(CamelModel):
    purpose: Optional[str] = Field(None, max_length=200)
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    phone: Optional[str] = Field(None, max_length=50)
    id_card: Optional[str] = Field(None, max_length=100)
    no_of_people: Optional[int] = Field(None, ge=1)
    date: Optional[dt.date] = None
    note: Optional[str] = None


class VisitorResponse(CamelModel):
    id: UUID
    purpose: Optional[str] = None
    name: str
    phone: Optional[str] = None
    id_card: Optional[str] = None
    no_of_people: int
    date: dt.date
    in_time: dt.datetime
    out_time: Optional[dt.datetime] = None
    note: Optional[str] = None
    created_at: dt.datetime


# --- Phone calls ---
class PhoneCallCreate(CamelModel):
    name: Optional[str] = Field(None, max_length=200)
    phone: str = Field(..., min_length=1, max_length=50)
    date: dt.date
    description: Optional[str] = None
    follow_up_date: Optional[dt.date] = None
    call_duration: Optional[str] = Field(None, max_length=20)
    note: Optional[str] = None
    call_type: CallType


class PhoneCallUpdate(CamelModel):
    name: Optional[str] = Field(None, max_length=200)
    phone: Optional[str] = Field(None, min_length=1, max_length=50)
    date: Optional[dt.date] = None
    description: Optional[str] = None
    follow_up_date: Optional[dt.date] = None
    call_duration: Optional[str] = Field(None, max_length=20)
    note: Optional[str] = None
    call_type: Optional[CallType] = None


class PhoneCallResponse(CamelModel):
    id: UUID
    name: Optional[str] = None
    phone: str
    date: dt.date
    description: Optional[str] = None
    follow_up_date: Optional[dt.date] = None
    call_duration: Optional[str] = None
    note: Optional[str] = None
    call_type: str
    created_at: dt.datetime


# --- Postal ---
class PostalCreate(CamelModel):
    postal_type: PostalType
    reference_no: Optional[str] = Field(None, max_length=100)
    to_title: Optional[str] = Field(None, max_length=200)
    from_title: Optional[str] = Field(None, max_length=200)
    address: Optional[str] = None
    note: Optional[str] = None
    date: dt.date


class PostalUpdate(CamelModel):
    reference_no: Optional[str] = Field(None, max_length=100)
    to_title: Optional[str] = Field(None, max_length=200)
    from_title: Optional[str] = Field(None, max_length=200)
    address: Optional[str] = None
    note: Optional[str] = None
    date: Optional[dt.date] = None


class PostalResponse(CamelModel):
    id: UUID
    postal_type: str
    reference_no: Optional[str] = None
    to_title: Optional[str] = None
    from_title: Optional[str] = None
    address: Optional[str] = None
    note: Optional[str] = None
    date: dt.date
    created_at: dt.datetime

"""
Front office registers: complaints, enquiries, visitors, phone calls, postal.

Complaint and enquiry statuses are free-form strings; any value may follow
any other. A visitor is checked out once.
"""
from datetime import date, datetime
from enum import Enum
from typing import Optional, Type
from uuid import UUID

from sqlalchemy import or_

from app.core.enums import CallType, PostalType
from app.core.exceptions import ConflictError, ValidationFailed
from app.core.identifiers import first_free, format_postal_reference
from app.core.models import Complaint, Enquiry, PhoneCallLog, PostalRecord, SchoolClass, Visitor
from app.core.pagination import PageParams
from app.core.schemas import CamelModel, Page
from app.core.tenant_scope import TenantScope

from .schemas import (
    ComplaintCreate,
    ComplaintResponse,
    ComplaintUpdate,
    EnquiryCreate,
    EnquiryResponse,
    EnquiryUpdate,
    PhoneCallCreate,
    PhoneCallResponse,
    PhoneCallUpdate,
    PostalCreate,
    PostalResponse,
    PostalUpdate,
    VisitorCreate,
    VisitorResponse,
    VisitorUpdate,
)


def _date_range(stmt, model, from_date: Optional[date], to_date: Optional[date]):
    if from_date is not None:
        stmt = stmt.where(model.date >= from_date)
    if to_date is not None:
        stmt = stmt.where(model.date <= to_date)
    return stmt


def _values(payload: CamelModel, exclude_unset: bool = False) -> dict:
    data = payload.model_dump(exclude_unset=exclude_unset)
    return {k: v.value if isinstance(v, Enum) else v for k, v in data.items()}


async def _create(scope: TenantScope, obj, response: Type[CamelModel]):
    scope.add(obj)
    await scope.db.commit()
    await scope.db.refresh(obj)
    return response.model_validate(obj)


async def _update(
    scope: TenantScope,
    model,
    obj_id: UUID,
    label: str,
    payload: CamelModel,
    response: Type[CamelModel],
):
    obj = await scope.get_or_404(model, obj_id, label)
    columns = model.__table__.c
    for field, value in _values(payload, exclude_unset=True).items():
        # an explicit null never clears a NOT NULL column
        if value is None and not columns[field].nullable:
            continue
        setattr(obj, field, value)
    await scope.db.commit()
    await scope.db.refresh(obj)
    return response.model_validate(obj)


async def _delete(scope: TenantScope, model, obj_id: UUID, label: str) -> None:
    obj = await scope.get_or_404(model, obj_id, label)
    await scope.db.delete(obj)
    await scope.db.commit()


async def _get(scope: TenantScope, model, obj_id: UUID, label: str, response: Type[CamelModel]):
    return response.model_validate(await scope.get_or_404(model, obj_id, label))


# --- Complaints ---
async def list_complaints(
    scope: TenantScope,
    params: PageParams,
    status: Optional[str] = None,
    search: Optional[str] = None,
    from_date: Optional[date] = None,
    to_date: Optional[date] = None,
) -> Page:
    stmt = scope.select(Complaint)
    if status:
        stmt = stmt.where(Complaint.status == status)
    if search:
        like = f"%{search.strip()}%"
        stmt = stmt.where(or_(Complaint.complainant_name.ilike(like), Complaint.complaint_type.ilike(like)))
    stmt = _date_range(stmt, Complaint, from_date, to_date)
    page = await scope.paginate(stmt.order_by(Complaint.date.desc(), Complaint.created_at.desc()), params)
    return page.map(ComplaintResponse.model_validate)


async def get_complaint(scope: TenantScope, complaint_id: UUID) -> ComplaintResponse:
    return await _get(scope, Complaint, complaint_id, "Complaint", ComplaintResponse)


async def create_complaint(scope: TenantScope, payload: ComplaintCreate) -> ComplaintResponse:
    return await _create(scope, Complaint(**_values(payload)), ComplaintResponse)


async def update_complaint(scope: TenantScope, complaint_id: UUID, payload: ComplaintUpdate) -> ComplaintResponse:
    return await _update(scope, Complaint, complaint_id, "Complaint", payload, ComplaintResponse)


async def delete_complaint(scope: TenantScope, complaint_id: UUID) -> None:
    await _delete(scope, Complaint, complaint_id, "Complaint")


# --- Enquiries ---
async def _check_class(scope: TenantScope, class_id: Optional[UUID]) -> None:
    if class_id is not None and not await scope.exists(SchoolClass, SchoolClass.id == class_id):
        raise ValidationFailed("Invalid class")


async def list_enquiries(
    scope: TenantScope,
    params: PageParams,
    status: Optional[str] = None,
    search: Optional[str] = None,
    from_date: Optional[date] = None,
    to_date: Optional[date] = None,
) -> Page:
    stmt = scope.select(Enquiry)
    if status:
        stmt = stmt.where(Enquiry.status == status)
    if search:
        like = f"%{search.strip()}%"
        stmt = stmt.where(or_(Enquiry.name.ilike(like), Enquiry.phone.ilike(like), Enquiry.email.ilike(like)))
    stmt = _date_range(stmt, Enquiry, from_date, to_date)
    page = await scope.paginate(stmt.order_by(Enquiry.date.desc(), Enquiry.created_at.desc()), params)
    return page.map(EnquiryResponse.model_validate)


async def get_enquiry(scope: TenantScope, enquiry_id: UUID) -> EnquiryResponse:
    return await _get(scope, Enquiry, enquiry_id, "Enquiry", EnquiryResponse)


async def create_enquiry(scope: TenantScope, payload: EnquiryCreate) -> EnquiryResponse:
    await _check_class(scope, payload.class_id)
    return await _create(scope, Enquiry(**_values(payload)), EnquiryResponse)


async def update_enquiry(scope: TenantScope, enquiry_id: UUID, payload: EnquiryUpdate) -> EnquiryResponse:
    await _check_class(scope, payload.class_id)
    return await _update(scope, Enquiry, enquiry_id, "Enquiry", payload, EnquiryResponse)


async def delete_enquiry(scope: TenantScope, enquiry_id: UUID) -> None:
    await _delete(scope, Enquiry, enquiry_id, "Enquiry")


# --- Visitors ---
async def list_visitors(
    scope: TenantScope,
    params: PageParams,
    search: Optional[str] = None,
    from_date: Optional[date] = None,
    to_date: Optional[date] = None,
    checked_out: Optional[bool] = None,
) -> Page:
    stmt = scope.select(Visitor)
    if search:
        like = f"%{search.strip()}%"
        stmt = stmt.where(or_(Visitor.name.ilike(like), Visitor.phone.ilike(like), Visitor.purpose.ilike(like)))
    if checked_out is not None:
        stmt = stmt.where(Visitor.out_time.isnot(None) if checked_out else Visitor.out_time.is_(None))
    stmt = _date_range(stmt, Visitor, from_date, to_date)
    page = await scope.paginate(stmt.order_by(Visitor.date.desc(), Visitor.in_time.desc()), params)
    return page.map(VisitorResponse.model_validate)


async def get_visitor(scope: TenantScope, visitor_id: UUID) -> VisitorResponse:
    return await _get(scope, Visitor, visitor_id, "Visitor", VisitorResponse)


async def create_visitor(scope: TenantScope, payload: VisitorCreate) -> VisitorResponse:
    data = _values(payload)
    if data["in_time"] is None:
        data["in_time"] = datetime.utcnow()
    return await _create(scope, Visitor(**data), VisitorResponse)


async def update_visitor(scope: TenantScope, visitor_id: UUID, payload: VisitorUpdate) -> VisitorResponse:
    return await _update(scope, Visitor, visitor_id, "Visitor", payload, VisitorResponse)


async def checkout_visitor(scope: TenantScope, visitor_id: UUID) -> VisitorResponse:
    visitor = await scope.get_or_404(Visitor, visitor_id, "Visitor")
    if visitor.out_time is not None:
        raise ConflictError("Visitor already checked out")
    visitor.out_time = datetime.utcnow()
    await scope.db.commit()
    await scope.db.refresh(visitor)
    return VisitorResponse.model_validate(visitor)


async def delete_visitor(scope: TenantScope, visitor_id: UUID) -> None:
    await _delete(scope, Visitor, visitor_id, "Visitor")


# --- Phone calls ---
async def list_phone_calls(
    scope: TenantScope,
    params: PageParams,
    call_type: Optional[CallType] = None,
    search: Optional[str] = None,
    from_date: Optional[date] = None,
    to_date: Optional[date] = None,
) -> Page:
    stmt = scope.select(PhoneCallLog)
    if call_type is not None:
        stmt = stmt.where(PhoneCallLog.call_type == call_type.value)
    if search:
        like = f"%{search.strip()}%"
        stmt = stmt.where(or_(PhoneCallLog.name.ilike(like), PhoneCallLog.phone.ilike(like)))
    stmt = _date_range(stmt, PhoneCallLog, from_date, to_date)
    page = await scope.paginate(stmt.order_by(PhoneCallLog.date.desc(), PhoneCallLog.created_at.desc()), params)
    return page.map(PhoneCallResponse.model_validate)


async def get_phone_call(scope: TenantScope, call_id: UUID) -> PhoneCallResponse:
    return await _get(scope, PhoneCallLog, call_id, "Phone call", PhoneCallResponse)


async def create_phone_call(scope: TenantScope, payload: PhoneCallCreate) -> PhoneCallResponse:
    return await _create(scope, PhoneCallLog(**_values(payload)), PhoneCallResponse)


async def update_phone_call(scope: TenantScope, call_id: UUID, payload: PhoneCallUpdate) -> PhoneCallResponse:
    return await _update(scope, PhoneCallLog, call_id, "Phone call", payload, PhoneCallResponse)


async def delete_phone_call(scope: TenantScope, call_id: UUID) -> None:
    await _delete(scope, PhoneCallLog, call_id, "Phone call")


# --- Postal ---
async def list_postal(
    scope: TenantScope,
    params: PageParams,
    postal_type: Optional[PostalType] = None,
    search: Optional[str] = None,
    from_date: Optional[date] = None,
    to_date: Optional[date] = None,
) -> Page:
    stmt = scope.select(PostalRecord)
    if postal_type is not None:
        stmt = stmt.where(PostalRecord.postal_type == postal_type.value)
    if search:
        like = f"%{search.strip()}%"
        stmt = stmt.where(
            or_(
                PostalRecord.reference_no.ilike(like),
                PostalRecord.to_title.ilike(like),
                PostalRecord.from_title.ilike(like),
            )
        )
    stmt = _date_range(stmt, PostalRecord, from_date, to_date)
    page = await scope.paginate(stmt.order_by(PostalRecord.date.desc(), PostalRecord.created_at.desc()), params)
    return page.map(PostalResponse.model_validate)


async def get_postal(scope: TenantScope, record_id: UUID) -> PostalResponse:
    return await _get(scope, PostalRecord, record_id, "Postal record", PostalResponse)


async def _next_postal_reference(scope: TenantScope, postal_type: str) -> str:
    count = await scope.count(PostalRecord, PostalRecord.postal_type == postal_type)

    async def taken(candidate: str) -> bool:
        return await scope.exists(PostalRecord, PostalRecord.reference_no == candidate)

    return await first_free(count + 1, lambda seq: format_postal_reference(postal_type, seq), taken)


async def create_postal(scope: TenantScope, payload: PostalCreate) -> PostalResponse:
    data = _values(payload)
    if not data.get("reference_no"):
        data["reference_no"] = await _next_postal_reference(scope, data["postal_type"])
    return await _create(scope, PostalRecord(**data), PostalResponse)


async def update_postal(scope: TenantScope, record_id: UUID, payload: PostalUpdate) -> PostalResponse:
    return await _update(scope, PostalRecord, record_id, "Postal record", payload, PostalResponse)


async def delete_postal(scope: TenantScope, record_id: UUID) -> None:
    await _delete(scope, PostalRecord, record_id, "Postal record")

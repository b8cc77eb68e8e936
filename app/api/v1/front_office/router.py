from datetime import date
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from app.auth.dependencies import get_tenant_scope
from app.auth.rbac import check_permission
from app.core.enums import CallType, PostalType
from app.core.pagination import PageParams
from app.core.schemas import ApiResponse, ok, paged
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
from . import service

router = APIRouter(prefix="/api/v1/front-office", tags=["front-office"])

_view = [Depends(check_permission("front_office", "view"))]
_create = [Depends(check_permission("front_office", "create"))]
_edit = [Depends(check_permission("front_office", "edit"))]
_delete = [Depends(check_permission("front_office", "delete"))]


# ----- Complaints -----
@router.get("/complaints", response_model=ApiResponse[List[ComplaintResponse]], dependencies=_view)
async def list_complaints(
    complaint_status: Optional[str] = Query(None, alias="status"),
    search: Optional[str] = Query(None),
    from_date: Optional[date] = Query(None, alias="fromDate"),
    to_date: Optional[date] = Query(None, alias="toDate"),
    params: PageParams = Depends(),
    scope: TenantScope = Depends(get_tenant_scope),
):
    page = await service.list_complaints(
        scope, params, status=complaint_status, search=search, from_date=from_date, to_date=to_date
    )
    return paged(page)


@router.post(
    "/complaints",
    response_model=ApiResponse[ComplaintResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=_create,
)
async def create_complaint(payload: ComplaintCreate, scope: TenantScope = Depends(get_tenant_scope)):
    return ok(await service.create_complaint(scope, payload), message="Complaint created successfully")


@router.get("/complaints/{complaint_id}", response_model=ApiResponse[ComplaintResponse], dependencies=_view)
async def get_complaint(complaint_id: UUID, scope: TenantScope = Depends(get_tenant_scope)):
    return ok(await service.get_complaint(scope, complaint_id))


@router.put("/complaints/{complaint_id}", response_model=ApiResponse[ComplaintResponse], dependencies=_edit)
async def update_complaint(
    complaint_id: UUID, payload: ComplaintUpdate, scope: TenantScope = Depends(get_tenant_scope)
):
    return ok(await service.update_complaint(scope, complaint_id, payload), message="Complaint updated successfully")


@router.delete("/complaints/{complaint_id}", response_model=ApiResponse[None], dependencies=_delete)
async def delete_complaint(complaint_id: UUID, scope: TenantScope = Depends(get_tenant_scope)):
    await service.delete_complaint(scope, complaint_id)
    return ok(message="Complaint deleted successfully")


# ----- Enquiries -----
@router.get("/enquiries", response_model=ApiResponse[List[EnquiryResponse]], dependencies=_view)
async def list_enquiries(
    enquiry_status: Optional[str] = Query(None, alias="status"),
    search: Optional[str] = Query(None),
    from_date: Optional[date] = Query(None, alias="fromDate"),
    to_date: Optional[date] = Query(None, alias="toDate"),
    params: PageParams = Depends(),
    scope: TenantScope = Depends(get_tenant_scope),
):
    page = await service.list_enquiries(
        scope, params, status=enquiry_status, search=search, from_date=from_date, to_date=to_date
    )
    return paged(page)


@router.post(
    "/enquiries",
    response_model=ApiResponse[EnquiryResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=_create,
)
async def create_enquiry(payload: EnquiryCreate, scope: TenantScope = Depends(get_tenant_scope)):
    return ok(await service.create_enquiry(scope, payload), message="Enquiry created successfully")


@router.get("/enquiries/{enquiry_id}", response_model=ApiResponse[EnquiryResponse], dependencies=_view)
async def get_enquiry(enquiry_id: UUID, scope: TenantScope = Depends(get_tenant_scope)):
    return ok(await service.get_enquiry(scope, enquiry_id))


@router.put("/enquiries/{enquiry_id}", response_model=ApiResponse[EnquiryResponse], dependencies=_edit)
async def update_enquiry(enquiry_id: UUID, payload: EnquiryUpdate, scope: TenantScope = Depends(get_tenant_scope)):
    return ok(await service.update_enquiry(scope, enquiry_id, payload), message="Enquiry updated successfully")


@router.delete("/enquiries/{enquiry_id}", response_model=ApiResponse[None], dependencies=_delete)
async def delete_enquiry(enquiry_id: UUID, scope: TenantScope = Depends(get_tenant_scope)):
    await service.delete_enquiry(scope, enquiry_id)
    return ok(message="Enquiry deleted successfully")


# ----- Visitors -----
@router.get("/visitors", response_model=ApiResponse[List[VisitorResponse]], dependencies=_view)
async def list_visitors(
    search: Optional[str] = Query(None),
    from_date: Optional[date] = Query(None, alias="fromDate"),
    to_date: Optional[date] = Query(None, alias="toDate"),
    checked_out: Optional[bool] = Query(None, alias="checkedOut"),
    params: PageParams = Depends(),
    scope: TenantScope = Depends(get_tenant_scope),
):
    page = await service.list_visitors(
        scope, params, search=search, from_date=from_date, to_date=to_date, checked_out=checked_out
    )
    return paged(page)


@router.post(
    "/visitors",
    response_model=ApiResponse[VisitorResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=_create,
)
async def create_visitor(payload: VisitorCreate, scope: TenantScope = Depends(get_tenant_scope)):
    return ok(await service.create_visitor(scope, payload), message="Visitor entry created successfully")


@router.get("/visitors/{visitor_id}", response_model=ApiResponse[VisitorResponse], dependencies=_view)
async def get_visitor(visitor_id: UUID, scope: TenantScope = Depends(get_tenant_scope)):
    return ok(await service.get_visitor(scope, visitor_id))


@router.put("/visitors/{visitor_id}", response_model=ApiResponse[VisitorResponse], dependencies=_edit)
async def update_visitor(visitor_id: UUID, payload: VisitorUpdate, scope: TenantScope = Depends(get_tenant_scope)):
    return ok(await service.update_visitor(scope, visitor_id, payload), message="Visitor entry updated successfully")


@router.post("/visitors/{visitor_id}/checkout", response_model=ApiResponse[VisitorResponse], dependencies=_edit)
async def checkout_visitor(visitor_id: UUID, scope: TenantScope = Depends(get_tenant_scope)):
    return ok(await service.checkout_visitor(scope, visitor_id), message="Visitor checked out successfully")


@router.delete("/visitors/{visitor_id}", response_model=ApiResponse[None], dependencies=_delete)
async def delete_visitor(visitor_id: UUID, scope: TenantScope = Depends(get_tenant_scope)):
    await service.delete_visitor(scope, visitor_id)
    return ok(message="Visitor entry deleted successfully")


# ----- Phone calls -----
@router.get("/phone-calls", response_model=ApiResponse[List[PhoneCallResponse]], dependencies=_view)
async def list_phone_calls(
    call_type: Optional[CallType] = Query(None, alias="callType"),
    search: Optional[str] = Query(None),
    from_date: Optional[date] = Query(None, alias="fromDate"),
    to_date: Optional[date] = Query(None, alias="toDate"),
    params: PageParams = Depends(),
    scope: TenantScope = Depends(get_tenant_scope),
):
    page = await service.list_phone_calls(
        scope, params, call_type=call_type, search=search, from_date=from_date, to_date=to_date
    )
    return paged(page)


@router.post(
    "/phone-calls",
    response_model=ApiResponse[PhoneCallResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=_create,
)
async def create_phone_call(payload: PhoneCallCreate, scope: TenantScope = Depends(get_tenant_scope)):
    return ok(await service.create_phone_call(scope, payload), message="Phone call logged successfully")


@router.get("/phone-calls/{call_id}", response_model=ApiResponse[PhoneCallResponse], dependencies=_view)
async def get_phone_call(call_id: UUID, scope: TenantScope = Depends(get_tenant_scope)):
    return ok(await service.get_phone_call(scope, call_id))


@router.put("/phone-calls/{call_id}", response_model=ApiResponse[PhoneCallResponse], dependencies=_edit)
async def update_phone_call(call_id: UUID, payload: PhoneCallUpdate, scope: TenantScope = Depends(get_tenant_scope)):
    return ok(await service.update_phone_call(scope, call_id, payload), message="Phone call updated successfully")


@router.delete("/phone-calls/{call_id}", response_model=ApiResponse[None], dependencies=_delete)
async def delete_phone_call(call_id: UUID, scope: TenantScope = Depends(get_tenant_scope)):
    await service.delete_phone_call(scope, call_id)
    return ok(message="Phone call deleted successfully")


# ----- Postal -----
@router.get("/postal", response_model=ApiResponse[List[PostalResponse]], dependencies=_view)
async def list_postal(
    postal_type: Optional[PostalType] = Query(None, alias="postalType"),
    search: Optional[str] = Query(None),
    from_date: Optional[date] = Query(None, alias="fromDate"),
    to_date: Optional[date] = Query(None, alias="toDate"),
    params: PageParams = Depends(),
    scope: TenantScope = Depends(get_tenant_scope),
):
    page = await service.list_postal(
        scope, params, postal_type=postal_type, search=search, from_date=from_date, to_date=to_date
    )
    return paged(page)


@router.post(
    "/postal",
    response_model=ApiResponse[PostalResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=_create,
)
async def create_postal(payload: PostalCreate, scope: TenantScope = Depends(get_tenant_scope)):
    return ok(await service.create_postal(scope, payload), message="Postal record created successfully")


@router.get("/postal/{record_id}", response_model=ApiResponse[PostalResponse], dependencies=_view)
async def get_postal(record_id: UUID, scope: TenantScope = Depends(get_tenant_scope)):
    return ok(await service.get_postal(scope, record_id))


@router.put("/postal/{record_id}", response_model=ApiResponse[PostalResponse], dependencies=_edit)
async def update_postal(record_id: UUID, payload: PostalUpdate, scope: TenantScope = Depends(get_tenant_scope)):
    return ok(await service.update_postal(scope, record_id, payload), message="Postal record updated successfully")


@router.delete("/postal/{record_id}", response_model=ApiResponse[None], dependencies=_delete)
async def delete_postal(record_id: UUID, scope: TenantScope = Depends(get_tenant_scope)):
    await service.delete_postal(scope, record_id)
    return ok(message="Postal record deleted successfully")

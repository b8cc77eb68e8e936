from datetime import date
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from app.auth.dependencies import get_current_user, get_tenant_scope
from app.auth.rbac import check_permission
from app.auth.schemas import CurrentUser
from app.core.enums import PaymentMode
from app.core.pagination import PageParams
from app.core.schemas import ApiResponse, ok, paged
from app.core.tenant_scope import TenantScope

from .schemas import (
    DueReport,
    FeeAssignRequest,
    FeeAssignResult,
    FeeGroupCreate,
    FeeGroupResponse,
    FeeGroupUpdate,
    FeesMasterResponse,
    FeeTypeCreate,
    FeeTypeResponse,
    FeeTypeUpdate,
    PaymentCreate,
    PaymentResponse,
)
from . import service

router = APIRouter(prefix="/api/v1/fees", tags=["fees"])


# --- Fee types ---
@router.get(
    "/types",
    response_model=ApiResponse[List[FeeTypeResponse]],
    dependencies=[Depends(check_permission("fees", "view"))],
)
async def list_fee_types(
    search: Optional[str] = Query(None),
    params: PageParams = Depends(),
    scope: TenantScope = Depends(get_tenant_scope),
):
    return paged(await service.list_fee_types(scope, params, search=search))


@router.post(
    "/types",
    response_model=ApiResponse[FeeTypeResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(check_permission("fees", "create"))],
)
async def create_fee_type(payload: FeeTypeCreate, scope: TenantScope = Depends(get_tenant_scope)):
    return ok(await service.create_fee_type(scope, payload), message="Fee type created successfully")


@router.get(
    "/types/{fee_type_id}",
    response_model=ApiResponse[FeeTypeResponse],
    dependencies=[Depends(check_permission("fees", "view"))],
)
async def get_fee_type(fee_type_id: UUID, scope: TenantScope = Depends(get_tenant_scope)):
    return ok(await service.get_fee_type(scope, fee_type_id))


@router.put(
    "/types/{fee_type_id}",
    response_model=ApiResponse[FeeTypeResponse],
    dependencies=[Depends(check_permission("fees", "edit"))],
)
async def update_fee_type(fee_type_id: UUID, payload: FeeTypeUpdate, scope: TenantScope = Depends(get_tenant_scope)):
    return ok(await service.update_fee_type(scope, fee_type_id, payload), message="Fee type updated successfully")


@router.delete(
    "/types/{fee_type_id}",
    response_model=ApiResponse[None],
    dependencies=[Depends(check_permission("fees", "delete"))],
)
async def delete_fee_type(fee_type_id: UUID, scope: TenantScope = Depends(get_tenant_scope)):
    await service.delete_fee_type(scope, fee_type_id)
    return ok(message="Fee type deleted successfully")


# --- Fee groups ---
@router.get(
    "/groups",
    response_model=ApiResponse[List[FeeGroupResponse]],
    dependencies=[Depends(check_permission("fees", "view"))],
)
async def list_fee_groups(
    search: Optional[str] = Query(None),
    params: PageParams = Depends(),
    scope: TenantScope = Depends(get_tenant_scope),
):
    return paged(await service.list_fee_groups(scope, params, search=search))


@router.post(
    "/groups",
    response_model=ApiResponse[FeeGroupResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(check_permission("fees", "create"))],
)
async def create_fee_group(payload: FeeGroupCreate, scope: TenantScope = Depends(get_tenant_scope)):
    return ok(await service.create_fee_group(scope, payload), message="Fee group created successfully")


@router.get(
    "/groups/{group_id}",
    response_model=ApiResponse[FeeGroupResponse],
    dependencies=[Depends(check_permission("fees", "view"))],
)
async def get_fee_group(group_id: UUID, scope: TenantScope = Depends(get_tenant_scope)):
    return ok(await service.get_fee_group(scope, group_id))


@router.put(
    "/groups/{group_id}",
    response_model=ApiResponse[FeeGroupResponse],
    dependencies=[Depends(check_permission("fees", "edit"))],
)
async def update_fee_group(group_id: UUID, payload: FeeGroupUpdate, scope: TenantScope = Depends(get_tenant_scope)):
    return ok(await service.update_fee_group(scope, group_id, payload), message="Fee group updated successfully")


@router.delete(
    "/groups/{group_id}",
    response_model=ApiResponse[None],
    dependencies=[Depends(check_permission("fees", "delete"))],
)
async def delete_fee_group(group_id: UUID, scope: TenantScope = Depends(get_tenant_scope)):
    await service.delete_fee_group(scope, group_id)
    return ok(message="Fee group deleted successfully")


# --- Assignment ---
@router.post(
    "/assign",
    response_model=ApiResponse[FeeAssignResult],
    dependencies=[Depends(check_permission("fees", "create"))],
)
async def assign_fee_group(payload: FeeAssignRequest, scope: TenantScope = Depends(get_tenant_scope)):
    return ok(await service.assign_fee_group(scope, payload), message="Fees assigned successfully")


@router.get(
    "/assign",
    response_model=ApiResponse[List[FeesMasterResponse]],
    dependencies=[Depends(check_permission("fees", "view"))],
)
async def list_fee_assignments(
    session_id: Optional[UUID] = Query(None, alias="sessionId"),
    class_id: Optional[UUID] = Query(None, alias="classId"),
    scope: TenantScope = Depends(get_tenant_scope),
):
    return ok(await service.list_fee_assignments(scope, session_id=session_id, class_id=class_id))


@router.delete(
    "/assign",
    response_model=ApiResponse[None],
    dependencies=[Depends(check_permission("fees", "delete"))],
)
async def remove_fee_assignment(
    fees_master_id: Optional[UUID] = Query(None, alias="feesMasterId"),
    student_fees_master_id: Optional[UUID] = Query(None, alias="studentFeesMasterId"),
    scope: TenantScope = Depends(get_tenant_scope),
):
    await service.remove_fee_assignment(
        scope, fees_master_id=fees_master_id, student_fees_master_id=student_fees_master_id
    )
    return ok(message="Fee assignment removed successfully")


# --- Collection ---
@router.post(
    "/collect",
    response_model=ApiResponse[PaymentResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(check_permission("fees", "create"))],
)
async def collect_fee(
    payload: PaymentCreate,
    scope: TenantScope = Depends(get_tenant_scope),
    current_user: CurrentUser = Depends(get_current_user),
):
    return ok(await service.collect_fee(scope, current_user.id, payload), message="Payment recorded successfully")


@router.get(
    "/collect",
    response_model=ApiResponse[List[PaymentResponse]],
    dependencies=[Depends(check_permission("fees", "view"))],
)
async def list_payments(
    student_id: Optional[UUID] = Query(None, alias="studentId"),
    from_date: Optional[date] = Query(None, alias="fromDate"),
    to_date: Optional[date] = Query(None, alias="toDate"),
    payment_mode: Optional[PaymentMode] = Query(None, alias="paymentMode"),
    params: PageParams = Depends(),
    scope: TenantScope = Depends(get_tenant_scope),
):
    page = await service.list_payments(
        scope,
        params,
        student_id=student_id,
        from_date=from_date,
        to_date=to_date,
        payment_mode=payment_mode.value if payment_mode else None,
    )
    return paged(page)


# --- Due report ---
@router.get(
    "/due",
    response_model=ApiResponse[DueReport],
    dependencies=[Depends(check_permission("fees", "view"))],
)
async def get_due_report(
    class_id: Optional[UUID] = Query(None, alias="classId"),
    student_id: Optional[UUID] = Query(None, alias="studentId"),
    session_id: Optional[UUID] = Query(None, alias="sessionId"),
    only_due: bool = Query(False, alias="onlyDue"),
    as_of: Optional[date] = Query(None, alias="asOf", description="Evaluation date for fines; defaults to today"),
    scope: TenantScope = Depends(get_tenant_scope),
):
    report = await service.get_due_report(
        scope,
        class_id=class_id,
        student_id=student_id,
        session_id=session_id,
        only_due=only_due,
        as_of=as_of,
    )
    return ok(report)

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from app.auth.dependencies import get_tenant_scope
from app.auth.rbac import check_permission
from app.core.pagination import PageParams
from app.core.schemas import ApiResponse, ok, paged
from app.core.tenant_scope import TenantScope

from .schemas import StaffCreate, StaffResponse, StaffUpdate
from . import service

router = APIRouter(prefix="/api/v1/staff", tags=["staff"])


@router.get(
    "",
    response_model=ApiResponse[List[StaffResponse]],
    dependencies=[Depends(check_permission("staff", "view"))],
)
async def list_staff(
    search: Optional[str] = Query(None),
    department_id: Optional[UUID] = Query(None, alias="departmentId"),
    designation_id: Optional[UUID] = Query(None, alias="designationId"),
    role_id: Optional[UUID] = Query(None, alias="roleId"),
    is_active: Optional[bool] = Query(None, alias="isActive"),
    params: PageParams = Depends(),
    scope: TenantScope = Depends(get_tenant_scope),
):
    page = await service.list_staff(
        scope,
        params,
        search=search,
        department_id=department_id,
        designation_id=designation_id,
        role_id=role_id,
        is_active=is_active,
    )
    return paged(page)


@router.get(
    "/generate-id",
    response_model=ApiResponse[str],
    dependencies=[Depends(check_permission("staff", "create"))],
)
async def generate_employee_id(scope: TenantScope = Depends(get_tenant_scope)):
    return ok(await service.generate_employee_id(scope))


@router.post(
    "",
    response_model=ApiResponse[StaffResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(check_permission("staff", "create"))],
)
async def create_staff(payload: StaffCreate, scope: TenantScope = Depends(get_tenant_scope)):
    return ok(await service.create_staff(scope, payload), message="Staff created successfully")


@router.get(
    "/{staff_id}",
    response_model=ApiResponse[StaffResponse],
    dependencies=[Depends(check_permission("staff", "view"))],
)
async def get_staff(staff_id: UUID, scope: TenantScope = Depends(get_tenant_scope)):
    return ok(await service.get_staff(scope, staff_id))


@router.put(
    "/{staff_id}",
    response_model=ApiResponse[StaffResponse],
    dependencies=[Depends(check_permission("staff", "edit"))],
)
async def update_staff(staff_id: UUID, payload: StaffUpdate, scope: TenantScope = Depends(get_tenant_scope)):
    return ok(await service.update_staff(scope, staff_id, payload), message="Staff updated successfully")


@router.delete(
    "/{staff_id}",
    response_model=ApiResponse[None],
    dependencies=[Depends(check_permission("staff", "delete"))],
)
async def delete_staff(staff_id: UUID, scope: TenantScope = Depends(get_tenant_scope)):
    await service.delete_staff(scope, staff_id)
    return ok(message="Staff deleted successfully")

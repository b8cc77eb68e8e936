from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from app.auth.dependencies import get_tenant_scope
from app.auth.rbac import check_permission
from app.core.pagination import PageParams
from app.core.schemas import ApiResponse, ok, paged
from app.core.tenant_scope import TenantScope

from .schemas import (
    DepartmentCreate,
    DepartmentResponse,
    DepartmentUpdate,
    DesignationCreate,
    DesignationResponse,
    DesignationUpdate,
    DropdownItem,
)
from . import service

router = APIRouter(prefix="/api/v1/departments", tags=["departments"])
designations_router = APIRouter(prefix="/api/v1/designations", tags=["designations"])


@router.post(
    "",
    response_model=ApiResponse[DepartmentResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(check_permission("staff", "create"))],
)
async def create_department(payload: DepartmentCreate, scope: TenantScope = Depends(get_tenant_scope)):
    return ok(await service.create_department(scope, payload), message="Department created successfully")


@router.get(
    "",
    response_model=ApiResponse[List[DepartmentResponse]],
    dependencies=[Depends(check_permission("staff", "view"))],
)
async def list_departments(
    search: Optional[str] = Query(None),
    params: PageParams = Depends(),
    scope: TenantScope = Depends(get_tenant_scope),
):
    return paged(await service.list_departments(scope, params, search=search))


@router.get(
    "/dropdown",
    response_model=ApiResponse[List[DropdownItem]],
    dependencies=[Depends(check_permission("staff", "view"))],
)
async def list_departments_dropdown(scope: TenantScope = Depends(get_tenant_scope)):
    return ok(await service.list_departments_dropdown(scope))


@router.get(
    "/{department_id}",
    response_model=ApiResponse[DepartmentResponse],
    dependencies=[Depends(check_permission("staff", "view"))],
)
async def get_department(department_id: UUID, scope: TenantScope = Depends(get_tenant_scope)):
    return ok(await service.get_department(scope, department_id))


@router.put(
    "/{department_id}",
    response_model=ApiResponse[DepartmentResponse],
    dependencies=[Depends(check_permission("staff", "edit"))],
)
async def update_department(
    department_id: UUID,
    payload: DepartmentUpdate,
    scope: TenantScope = Depends(get_tenant_scope),
):
    return ok(
        await service.update_department(scope, department_id, payload),
        message="Department updated successfully",
    )


@router.delete(
    "/{department_id}",
    response_model=ApiResponse[None],
    dependencies=[Depends(check_permission("staff", "delete"))],
)
async def delete_department(department_id: UUID, scope: TenantScope = Depends(get_tenant_scope)):
    await service.delete_department(scope, department_id)
    return ok(message="Department deleted successfully")


@designations_router.post(
    "",
    response_model=ApiResponse[DesignationResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(check_permission("staff", "create"))],
)
async def create_designation(payload: DesignationCreate, scope: TenantScope = Depends(get_tenant_scope)):
    return ok(await service.create_designation(scope, payload), message="Designation created successfully")


@designations_router.get(
    "",
    response_model=ApiResponse[List[DesignationResponse]],
    dependencies=[Depends(check_permission("staff", "view"))],
)
async def list_designations(
    search: Optional[str] = Query(None),
    params: PageParams = Depends(),
    scope: TenantScope = Depends(get_tenant_scope),
):
    return paged(await service.list_designations(scope, params, search=search))


@designations_router.get(
    "/{designation_id}",
    response_model=ApiResponse[DesignationResponse],
    dependencies=[Depends(check_permission("staff", "view"))],
)
async def get_designation(designation_id: UUID, scope: TenantScope = Depends(get_tenant_scope)):
    return ok(await service.get_designation(scope, designation_id))


@designations_router.put(
    "/{designation_id}",
    response_model=ApiResponse[DesignationResponse],
    dependencies=[Depends(check_permission("staff", "edit"))],
)
async def update_designation(
    designation_id: UUID,
    payload: DesignationUpdate,
    scope: TenantScope = Depends(get_tenant_scope),
):
    return ok(
        await service.update_designation(scope, designation_id, payload),
        message="Designation updated successfully",
    )


@designations_router.delete(
    "/{designation_id}",
    response_model=ApiResponse[None],
    dependencies=[Depends(check_permission("staff", "delete"))],
)
async def delete_designation(designation_id: UUID, scope: TenantScope = Depends(get_tenant_scope)):
    await service.delete_designation(scope, designation_id)
    return ok(message="Designation deleted successfully")

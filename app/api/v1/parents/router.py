from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from app.auth.dependencies import get_tenant_scope
from app.auth.rbac import check_permission
from app.core.pagination import PageParams
from app.core.schemas import ApiResponse, ok, paged
from app.core.tenant_scope import TenantScope

from .schemas import ParentCreate, ParentResponse, ParentUpdate
from . import service

router = APIRouter(prefix="/api/v1/parents", tags=["parents"])


@router.get(
    "",
    response_model=ApiResponse[List[ParentResponse]],
    dependencies=[Depends(check_permission("students", "view"))],
)
async def list_parents(
    search: Optional[str] = Query(None),
    params: PageParams = Depends(),
    scope: TenantScope = Depends(get_tenant_scope),
):
    return paged(await service.list_parents(scope, params, search=search))


@router.post(
    "",
    response_model=ApiResponse[ParentResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(check_permission("students", "create"))],
)
async def create_parent(payload: ParentCreate, scope: TenantScope = Depends(get_tenant_scope)):
    return ok(await service.create_parent(scope, payload), message="Parent created successfully")


@router.get(
    "/{parent_id}",
    response_model=ApiResponse[ParentResponse],
    dependencies=[Depends(check_permission("students", "view"))],
)
async def get_parent(parent_id: UUID, scope: TenantScope = Depends(get_tenant_scope)):
    return ok(await service.get_parent(scope, parent_id))


@router.put(
    "/{parent_id}",
    response_model=ApiResponse[ParentResponse],
    dependencies=[Depends(check_permission("students", "edit"))],
)
async def update_parent(parent_id: UUID, payload: ParentUpdate, scope: TenantScope = Depends(get_tenant_scope)):
    return ok(await service.update_parent(scope, parent_id, payload), message="Parent updated successfully")


@router.delete(
    "/{parent_id}",
    response_model=ApiResponse[None],
    dependencies=[Depends(check_permission("students", "delete"))],
)
async def delete_parent(parent_id: UUID, scope: TenantScope = Depends(get_tenant_scope)):
    await service.delete_parent(scope, parent_id)
    return ok(message="Parent deleted successfully")

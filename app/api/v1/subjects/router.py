from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from app.auth.dependencies import get_tenant_scope
from app.auth.rbac import check_permission
from app.core.enums import SubjectType
from app.core.pagination import PageParams
from app.core.schemas import ApiResponse, ok, paged
from app.core.tenant_scope import TenantScope

from .schemas import SubjectCreate, SubjectDropdownItem, SubjectResponse, SubjectUpdate
from . import service

router = APIRouter(prefix="/api/v1/subjects", tags=["subjects"])


@router.post(
    "",
    response_model=ApiResponse[SubjectResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(check_permission("academics", "create"))],
)
async def create_subject(payload: SubjectCreate, scope: TenantScope = Depends(get_tenant_scope)):
    return ok(await service.create_subject(scope, payload), message="Subject created successfully")


@router.get(
    "",
    response_model=ApiResponse[List[SubjectResponse]],
    dependencies=[Depends(check_permission("academics", "view"))],
)
async def list_subjects(
    search: Optional[str] = Query(None),
    type: Optional[SubjectType] = Query(None),
    is_active: Optional[bool] = Query(None, alias="isActive"),
    params: PageParams = Depends(),
    scope: TenantScope = Depends(get_tenant_scope),
):
    page = await service.list_subjects(
        scope, params, search=search, type=type.value if type else None, is_active=is_active
    )
    return paged(page)


@router.get(
    "/dropdown",
    response_model=ApiResponse[List[SubjectDropdownItem]],
    dependencies=[Depends(check_permission("academics", "view"))],
)
async def list_subjects_dropdown(scope: TenantScope = Depends(get_tenant_scope)):
    return ok(await service.list_subjects_dropdown(scope))


@router.get(
    "/{subject_id}",
    response_model=ApiResponse[SubjectResponse],
    dependencies=[Depends(check_permission("academics", "view"))],
)
async def get_subject(subject_id: UUID, scope: TenantScope = Depends(get_tenant_scope)):
    return ok(await service.get_subject(scope, subject_id))


@router.put(
    "/{subject_id}",
    response_model=ApiResponse[SubjectResponse],
    dependencies=[Depends(check_permission("academics", "edit"))],
)
async def update_subject(subject_id: UUID, payload: SubjectUpdate, scope: TenantScope = Depends(get_tenant_scope)):
    return ok(await service.update_subject(scope, subject_id, payload), message="Subject updated successfully")


@router.delete(
    "/{subject_id}",
    response_model=ApiResponse[None],
    dependencies=[Depends(check_permission("academics", "delete"))],
)
async def delete_subject(subject_id: UUID, scope: TenantScope = Depends(get_tenant_scope)):
    await service.delete_subject(scope, subject_id)
    return ok(message="Subject deleted successfully")

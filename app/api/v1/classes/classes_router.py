from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from app.auth.dependencies import get_tenant_scope
from app.auth.rbac import check_permission
from app.core.pagination import PageParams
from app.core.schemas import ApiResponse, ok, paged
from app.core.tenant_scope import TenantScope

from .schemas import ClassCreate, ClassResponse, ClassUpdate
from . import service

router = APIRouter(prefix="/api/v1/classes", tags=["classes"])


@router.post(
    "",
    response_model=ApiResponse[ClassResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(check_permission("academics", "create"))],
)
async def create_class(payload: ClassCreate, scope: TenantScope = Depends(get_tenant_scope)):
    return ok(await service.create_class(scope, payload), message="Class created successfully")


@router.get(
    "",
    response_model=ApiResponse[List[ClassResponse]],
    dependencies=[Depends(check_permission("academics", "view"))],
)
async def list_classes(
    search: Optional[str] = Query(None),
    is_active: Optional[bool] = Query(None, alias="isActive"),
    with_sections: bool = Query(False, alias="withSections", description="Expand each class's sections"),
    params: PageParams = Depends(),
    scope: TenantScope = Depends(get_tenant_scope),
):
    page = await service.list_classes(
        scope, params, search=search, is_active=is_active, with_sections=with_sections
    )
    return paged(page)


@router.get(
    "/{class_id}",
    response_model=ApiResponse[ClassResponse],
    dependencies=[Depends(check_permission("academics", "view"))],
)
async def get_class(class_id: UUID, scope: TenantScope = Depends(get_tenant_scope)):
    return ok(await service.get_class(scope, class_id))


@router.put(
    "/{class_id}",
    response_model=ApiResponse[ClassResponse],
    dependencies=[Depends(check_permission("academics", "edit"))],
)
async def update_class(class_id: UUID, payload: ClassUpdate, scope: TenantScope = Depends(get_tenant_scope)):
    return ok(await service.update_class(scope, class_id, payload), message="Class updated successfully")


@router.delete(
    "/{class_id}",
    response_model=ApiResponse[None],
    dependencies=[Depends(check_permission("academics", "delete"))],
)
async def delete_class(class_id: UUID, scope: TenantScope = Depends(get_tenant_scope)):
    await service.delete_class(scope, class_id)
    return ok(message="Class deleted successfully")

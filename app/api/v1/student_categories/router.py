from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from app.auth.dependencies import get_tenant_scope
from app.auth.rbac import check_permission
from app.core.pagination import PageParams
from app.core.schemas import ApiResponse, ok, paged
from app.core.tenant_scope import TenantScope

from .schemas import StudentCategoryCreate, StudentCategoryResponse, StudentCategoryUpdate
from . import service

# mounted before the students router so "categories" is not read as a student id
router = APIRouter(prefix="/api/v1/students/categories", tags=["student-categories"])


@router.get(
    "",
    response_model=ApiResponse[List[StudentCategoryResponse]],
    dependencies=[Depends(check_permission("students", "view"))],
)
async def list_categories(
    search: Optional[str] = Query(None),
    is_active: Optional[bool] = Query(None, alias="isActive"),
    params: PageParams = Depends(),
    scope: TenantScope = Depends(get_tenant_scope),
):
    return paged(await service.list_categories(scope, params, search=search, is_active=is_active))


@router.post(
    "",
    response_model=ApiResponse[StudentCategoryResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(check_permission("students", "create"))],
)
async def create_category(payload: StudentCategoryCreate, scope: TenantScope = Depends(get_tenant_scope)):
    return ok(await service.create_category(scope, payload), message="Category created successfully")


@router.get(
    "/{category_id}",
    response_model=ApiResponse[StudentCategoryResponse],
    dependencies=[Depends(check_permission("students", "view"))],
)
async def get_category(category_id: UUID, scope: TenantScope = Depends(get_tenant_scope)):
    return ok(await service.get_category(scope, category_id))


@router.put(
    "/{category_id}",
    response_model=ApiResponse[StudentCategoryResponse],
    dependencies=[Depends(check_permission("students", "edit"))],
)
async def update_category(
    category_id: UUID,
    payload: StudentCategoryUpdate,
    scope: TenantScope = Depends(get_tenant_scope),
):
    return ok(await service.update_category(scope, category_id, payload), message="Category updated successfully")


@router.delete(
    "/{category_id}",
    response_model=ApiResponse[None],
    dependencies=[Depends(check_permission("students", "delete"))],
)
async def delete_category(category_id: UUID, scope: TenantScope = Depends(get_tenant_scope)):
    await service.delete_category(scope, category_id)
    return ok(message="Category deleted successfully")

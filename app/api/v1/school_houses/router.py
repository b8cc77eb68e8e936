from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from app.auth.dependencies import get_tenant_scope
from app.auth.rbac import check_permission
from app.core.pagination import PageParams
from app.core.schemas import ApiResponse, ok, paged
from app.core.tenant_scope import TenantScope

from .schemas import SchoolHouseCreate, SchoolHouseResponse, SchoolHouseUpdate
from . import service

router = APIRouter(prefix="/api/v1/settings/school-houses", tags=["school-houses"])


@router.get(
    "",
    response_model=ApiResponse[List[SchoolHouseResponse]],
    dependencies=[Depends(check_permission("settings", "view"))],
)
async def list_houses(
    search: Optional[str] = Query(None),
    is_active: Optional[bool] = Query(None, alias="isActive"),
    params: PageParams = Depends(),
    scope: TenantScope = Depends(get_tenant_scope),
):
    return paged(await service.list_houses(scope, params, search=search, is_active=is_active))


@router.post(
    "",
    response_model=ApiResponse[SchoolHouseResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(check_permission("settings", "create"))],
)
async def create_house(payload: SchoolHouseCreate, scope: TenantScope = Depends(get_tenant_scope)):
    return ok(await service.create_house(scope, payload), message="School house created successfully")


@router.get(
    "/{house_id}",
    response_model=ApiResponse[SchoolHouseResponse],
    dependencies=[Depends(check_permission("settings", "view"))],
)
async def get_house(house_id: UUID, scope: TenantScope = Depends(get_tenant_scope)):
    return ok(await service.get_house(scope, house_id))


@router.put(
    "/{house_id}",
    response_model=ApiResponse[SchoolHouseResponse],
    dependencies=[Depends(check_permission("settings", "edit"))],
)
async def update_house(
    house_id: UUID,
    payload: SchoolHouseUpdate,
    scope: TenantScope = Depends(get_tenant_scope),
):
    return ok(await service.update_house(scope, house_id, payload), message="School house updated successfully")


@router.delete(
    "/{house_id}",
    response_model=ApiResponse[None],
    dependencies=[Depends(check_permission("settings", "delete"))],
)
async def delete_house(house_id: UUID, scope: TenantScope = Depends(get_tenant_scope)):
    await service.delete_house(scope, house_id)
    return ok(message="School house deleted successfully")

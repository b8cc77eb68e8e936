from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from app.auth.dependencies import get_tenant_scope
from app.auth.rbac import check_permission
from app.core.pagination import PageParams
from app.core.schemas import ApiResponse, ok, paged
from app.core.tenant_scope import TenantScope

from .schemas import SectionCreate, SectionResponse, SectionUpdate
from . import service

router = APIRouter(prefix="/api/v1/sections", tags=["sections"])


@router.post(
    "",
    response_model=ApiResponse[SectionResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(check_permission("academics", "create"))],
)
async def create_section(payload: SectionCreate, scope: TenantScope = Depends(get_tenant_scope)):
    return ok(await service.create_section(scope, payload), message="Section created successfully")


@router.get(
    "",
    response_model=ApiResponse[List[SectionResponse]],
    dependencies=[Depends(check_permission("academics", "view"))],
)
async def list_sections(
    search: Optional[str] = Query(None),
    params: PageParams = Depends(),
    scope: TenantScope = Depends(get_tenant_scope),
):
    return paged(await service.list_sections(scope, params, search=search))


@router.get(
    "/{section_id}",
    response_model=ApiResponse[SectionResponse],
    dependencies=[Depends(check_permission("academics", "view"))],
)
async def get_section(section_id: UUID, scope: TenantScope = Depends(get_tenant_scope)):
    return ok(await service.get_section(scope, section_id))


@router.put(
    "/{section_id}",
    response_model=ApiResponse[SectionResponse],
    dependencies=[Depends(check_permission("academics", "edit"))],
)
async def update_section(section_id: UUID, payload: SectionUpdate, scope: TenantScope = Depends(get_tenant_scope)):
    return ok(await service.update_section(scope, section_id, payload), message="Section updated successfully")


@router.delete(
    "/{section_id}",
    response_model=ApiResponse[None],
    dependencies=[Depends(check_permission("academics", "delete"))],
)
async def delete_section(section_id: UUID, scope: TenantScope = Depends(get_tenant_scope)):
    await service.delete_section(scope, section_id)
    return ok(message="Section deleted successfully")

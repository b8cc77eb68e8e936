from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from app.auth.dependencies import get_tenant_scope
from app.auth.rbac import check_permission
from app.core.pagination import PageParams
from app.core.schemas import ApiResponse, ok, paged
from app.core.tenant_scope import TenantScope

from .schemas import AcademicSessionCreate, AcademicSessionResponse, AcademicSessionUpdate
from . import service

router = APIRouter(prefix="/api/v1/sessions", tags=["sessions"])


@router.get(
    "",
    response_model=ApiResponse[List[AcademicSessionResponse]],
    dependencies=[Depends(check_permission("settings", "view"))],
)
async def list_sessions(
    search: Optional[str] = Query(None),
    params: PageParams = Depends(),
    scope: TenantScope = Depends(get_tenant_scope),
):
    return paged(await service.list_sessions(scope, params, search=search))


@router.get(
    "/active",
    response_model=ApiResponse[AcademicSessionResponse],
)
async def get_active_session(scope: TenantScope = Depends(get_tenant_scope)):
    """Current session; data is null when none has been activated."""
    active = await service.get_active_session(scope)
    return ok(AcademicSessionResponse.model_validate(active) if active else None)


@router.post(
    "",
    response_model=ApiResponse[AcademicSessionResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(check_permission("settings", "edit"))],
)
async def create_session(payload: AcademicSessionCreate, scope: TenantScope = Depends(get_tenant_scope)):
    return ok(await service.create_session(scope, payload), message="Session created successfully")


@router.get(
    "/{session_id}",
    response_model=ApiResponse[AcademicSessionResponse],
    dependencies=[Depends(check_permission("settings", "view"))],
)
async def get_session(session_id: UUID, scope: TenantScope = Depends(get_tenant_scope)):
    return ok(await service.get_session(scope, session_id))


@router.put(
    "/{session_id}",
    response_model=ApiResponse[AcademicSessionResponse],
    dependencies=[Depends(check_permission("settings", "edit"))],
)
async def update_session(
    session_id: UUID,
    payload: AcademicSessionUpdate,
    scope: TenantScope = Depends(get_tenant_scope),
):
    return ok(await service.update_session(scope, session_id, payload), message="Session updated successfully")


@router.post(
    "/{session_id}/activate",
    response_model=ApiResponse[AcademicSessionResponse],
    dependencies=[Depends(check_permission("settings", "edit"))],
)
async def activate_session(session_id: UUID, scope: TenantScope = Depends(get_tenant_scope)):
    return ok(await service.activate_session(scope, session_id), message="Session activated successfully")


@router.delete(
    "/{session_id}",
    response_model=ApiResponse[None],
    dependencies=[Depends(check_permission("settings", "edit"))],
)
async def delete_session(session_id: UUID, scope: TenantScope = Depends(get_tenant_scope)):
    await service.delete_session(scope, session_id)
    return ok(message="Session deleted successfully")

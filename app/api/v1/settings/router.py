from fastapi import APIRouter, Depends

from app.auth.dependencies import get_tenant_scope
from app.auth.rbac import check_permission
from app.core.schemas import ApiResponse, ok
from app.core.tenant_scope import TenantScope

from .schemas import SchoolSettingsResponse, SchoolSettingsUpdate
from . import service

router = APIRouter(prefix="/api/v1/settings", tags=["settings"])


@router.get(
    "/school",
    response_model=ApiResponse[SchoolSettingsResponse],
    dependencies=[Depends(check_permission("settings", "view"))],
)
async def get_school_settings(scope: TenantScope = Depends(get_tenant_scope)):
    return ok(await service.get_school_settings(scope))


@router.put(
    "/school",
    response_model=ApiResponse[SchoolSettingsResponse],
    dependencies=[Depends(check_permission("settings", "edit"))],
)
async def update_school_settings(payload: SchoolSettingsUpdate, scope: TenantScope = Depends(get_tenant_scope)):
    return ok(await service.update_school_settings(scope, payload), message="Settings updated successfully")

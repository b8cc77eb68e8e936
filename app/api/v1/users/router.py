from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from app.auth.dependencies import get_current_user, get_tenant_scope
from app.auth.rbac import check_permission
from app.auth.schemas import CurrentUser
from app.core.pagination import PageParams
from app.core.schemas import ApiResponse, ok, paged
from app.core.tenant_scope import TenantScope

from .schemas import ResetPasswordRequest, UserCreate, UserResponse, UserUpdate
from . import service

router = APIRouter(prefix="/api/v1/users", tags=["users"])


@router.get(
    "",
    response_model=ApiResponse[List[UserResponse]],
    dependencies=[Depends(check_permission("settings", "view"))],
)
async def list_users(
    search: Optional[str] = Query(None),
    role_id: Optional[UUID] = Query(None, alias="roleId"),
    is_active: Optional[bool] = Query(None, alias="isActive"),
    params: PageParams = Depends(),
    scope: TenantScope = Depends(get_tenant_scope),
):
    return paged(await service.list_users(scope, params, search=search, role_id=role_id, is_active=is_active))


@router.post(
    "",
    response_model=ApiResponse[UserResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(check_permission("settings", "edit"))],
)
async def create_user(payload: UserCreate, scope: TenantScope = Depends(get_tenant_scope)):
    return ok(await service.create_user(scope, payload), message="User created successfully")


@router.get(
    "/{user_id}",
    response_model=ApiResponse[UserResponse],
    dependencies=[Depends(check_permission("settings", "view"))],
)
async def get_user(user_id: UUID, scope: TenantScope = Depends(get_tenant_scope)):
    return ok(await service.get_user(scope, user_id))


@router.put(
    "/{user_id}",
    response_model=ApiResponse[UserResponse],
    dependencies=[Depends(check_permission("settings", "edit"))],
)
async def update_user(user_id: UUID, payload: UserUpdate, scope: TenantScope = Depends(get_tenant_scope)):
    return ok(await service.update_user(scope, user_id, payload), message="User updated successfully")


@router.post(
    "/{user_id}/reset-password",
    response_model=ApiResponse[None],
    dependencies=[Depends(check_permission("settings", "edit"))],
)
async def reset_password(
    user_id: UUID,
    payload: ResetPasswordRequest,
    scope: TenantScope = Depends(get_tenant_scope),
):
    await service.reset_password(scope, user_id, payload.new_password)
    return ok(message="Password reset successfully")


@router.delete(
    "/{user_id}",
    response_model=ApiResponse[None],
    dependencies=[Depends(check_permission("settings", "edit"))],
)
async def delete_user(
    user_id: UUID,
    scope: TenantScope = Depends(get_tenant_scope),
    current_user: CurrentUser = Depends(get_current_user),
):
    await service.delete_user(scope, user_id, current_user.id)
    return ok(message="User deleted successfully")

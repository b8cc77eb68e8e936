import re
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError

from app.auth.dependencies import get_tenant_scope, load_role_permissions
from app.auth.models import Permission, Role, RolePermission, User
from app.auth.rbac import check_permission
from app.auth.schemas import (
    PermissionResponse,
    RoleCreate,
    RolePermissionsUpdate,
    RoleResponse,
    RoleUpdate,
)
from app.core.app_logger import get_logger
from app.core.exceptions import ConflictError, ValidationFailed
from app.core.schemas import ApiResponse, ok
from app.core.tenant_scope import TenantScope

router = APIRouter(prefix="/api/v1/roles", tags=["roles"])
permissions_router = APIRouter(prefix="/api/v1/permissions", tags=["roles"])

logger = get_logger("roles")


def slugify(name: str) -> str:
    return re.sub(r"\s+", "-", name.strip().lower())


async def _role_response(scope: TenantScope, role: Role) -> RoleResponse:
    user_count = await scope.count(User, User.role_id == role.id)
    return RoleResponse(
        id=role.id,
        name=role.name,
        slug=role.slug,
        description=role.description,
        is_system=role.is_system,
        permissions=await load_role_permissions(scope.db, role.id),
        user_count=user_count,
        created_at=role.created_at,
    )


async def _replace_permissions(scope: TenantScope, role: Role, permission_ids: List[UUID]) -> None:
    wanted = set(permission_ids)
    if wanted:
        result = await scope.db.execute(select(Permission.id).where(Permission.id.in_(wanted)))
        found = set(result.scalars().all())
        missing = wanted - found
        if missing:
            raise ValidationFailed(f"Unknown permission id(s): {', '.join(sorted(str(m) for m in missing))}")
    await scope.db.execute(delete(RolePermission).where(RolePermission.role_id == role.id))
    for permission_id in wanted:
        scope.db.add(RolePermission(role_id=role.id, permission_id=permission_id))


@permissions_router.get(
    "",
    response_model=ApiResponse[List[PermissionResponse]],
    dependencies=[Depends(check_permission("settings", "view"))],
)
async def list_permissions(scope: TenantScope = Depends(get_tenant_scope)):
    result = await scope.db.execute(select(Permission).order_by(Permission.module, Permission.name))
    return ok([PermissionResponse.model_validate(p) for p in result.scalars().all()])


@router.get(
    "",
    response_model=ApiResponse[List[RoleResponse]],
    dependencies=[Depends(check_permission("settings", "view"))],
)
async def list_roles(scope: TenantScope = Depends(get_tenant_scope)):
    roles = await scope.all(scope.select(Role).order_by(Role.is_system.desc(), Role.name))
    return ok([await _role_response(scope, r) for r in roles])


@router.post(
    "",
    response_model=ApiResponse[RoleResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(check_permission("settings", "edit"))],
)
async def create_role(
    payload: RoleCreate,
    scope: TenantScope = Depends(get_tenant_scope),
):
    name = payload.name.strip()
    slug = slugify(name)
    await scope.ensure_unique(Role, "Role name already exists", func.lower(Role.name) == name.lower())
    await scope.ensure_unique(Role, "Role slug already exists", Role.slug == slug)
    role = scope.add(Role(name=name, slug=slug, description=payload.description, is_system=False))
    try:
        await scope.db.flush()
        await _replace_permissions(scope, role, payload.permission_ids)
        await scope.db.commit()
    except IntegrityError:
        await scope.db.rollback()
        raise ConflictError("Role name already exists")
    await scope.db.refresh(role)
    return ok(await _role_response(scope, role), message="Role created successfully")


@router.get(
    "/{role_id}",
    response_model=ApiResponse[RoleResponse],
    dependencies=[Depends(check_permission("settings", "view"))],
)
async def get_role(role_id: UUID, scope: TenantScope = Depends(get_tenant_scope)):
    role = await scope.get_or_404(Role, role_id, "Role")
    return ok(await _role_response(scope, role))


@router.put(
    "/{role_id}",
    response_model=ApiResponse[RoleResponse],
    dependencies=[Depends(check_permission("settings", "edit"))],
)
async def update_role(
    role_id: UUID,
    payload: RoleUpdate,
    scope: TenantScope = Depends(get_tenant_scope),
):
    role = await scope.get_or_404(Role, role_id, "Role")
    if role.is_system:
        raise ConflictError("Cannot modify system role")
    if payload.name is not None:
        name = payload.name.strip()
        slug = slugify(name)
        await scope.ensure_unique(
            Role, "Role name already exists", func.lower(Role.name) == name.lower(), exclude_id=role.id
        )
        await scope.ensure_unique(Role, "Role slug already exists", Role.slug == slug, exclude_id=role.id)
        role.name = name
        role.slug = slug
    if payload.description is not None:
        role.description = payload.description
    try:
        await scope.db.commit()
    except IntegrityError:
        await scope.db.rollback()
        raise ConflictError("Role name already exists")
    await scope.db.refresh(role)
    return ok(await _role_response(scope, role), message="Role updated successfully")


@router.put(
    "/{role_id}/permissions",
    response_model=ApiResponse[RoleResponse],
    dependencies=[Depends(check_permission("settings", "edit"))],
)
async def set_role_permissions(
    role_id: UUID,
    payload: RolePermissionsUpdate,
    scope: TenantScope = Depends(get_tenant_scope),
):
    role = await scope.get_or_404(Role, role_id, "Role")
    if role.is_system:
        raise ConflictError("Cannot modify system role")
    await _replace_permissions(scope, role, payload.permission_ids)
    await scope.db.commit()
    logger.info("Permissions of role %s replaced (%d granted)", role.id, len(set(payload.permission_ids)))
    return ok(await _role_response(scope, role), message="Permissions updated successfully")


@router.delete(
    "/{role_id}",
    response_model=ApiResponse[None],
    dependencies=[Depends(check_permission("settings", "edit"))],
)
async def delete_role(role_id: UUID, scope: TenantScope = Depends(get_tenant_scope)):
    role = await scope.get_or_404(Role, role_id, "Role")
    if role.is_system:
        raise ConflictError("Cannot delete system role")
    if await scope.count(User, User.role_id == role.id):
        raise ConflictError("Cannot delete role with assigned users")
    await scope.db.execute(delete(RolePermission).where(RolePermission.role_id == role.id))
    await scope.db.delete(role)
    await scope.db.commit()
    return ok(message="Role deleted successfully")

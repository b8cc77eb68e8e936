from typing import Optional
from uuid import UUID

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError

from app.auth.models import Role, User
from app.auth.security import hash_password
from app.core.exceptions import ConflictError, ValidationFailed
from app.core.pagination import PageParams
from app.core.schemas import Page
from app.core.tenant_scope import TenantScope

from .schemas import UserCreate, UserResponse, UserUpdate


async def _role_names(scope: TenantScope) -> dict:
    roles = await scope.all(scope.select(Role))
    return {r.id: r.name for r in roles}


def _to_response(user: User, role_names: dict) -> UserResponse:
    return UserResponse(
        id=user.id,
        school_id=user.school_id,
        username=user.username,
        email=user.email,
        role_id=user.role_id,
        role_name=role_names.get(user.role_id),
        is_active=user.is_active,
        last_login=user.last_login,
        created_at=user.created_at,
    )


async def _validate_role(scope: TenantScope, role_id: Optional[UUID]) -> None:
    if role_id is not None and await scope.get(Role, role_id) is None:
        raise ValidationFailed("Invalid role")


async def _check_unique(scope: TenantScope, username: Optional[str], email: Optional[str], exclude_id=None) -> None:
    if username is not None:
        await scope.ensure_unique(
            User, "Username already exists", func.lower(User.username) == username.lower(), exclude_id=exclude_id
        )
    if email is not None:
        await scope.ensure_unique(
            User, "Email already exists", func.lower(User.email) == email.lower(), exclude_id=exclude_id
        )


async def list_users(
    scope: TenantScope,
    params: PageParams,
    search: Optional[str] = None,
    role_id: Optional[UUID] = None,
    is_active: Optional[bool] = None,
) -> Page:
    stmt = scope.select(User)
    if search:
        like = f"%{search.strip()}%"
        stmt = stmt.where(or_(User.username.ilike(like), User.email.ilike(like)))
    if role_id is not None:
        stmt = stmt.where(User.role_id == role_id)
    if is_active is not None:
        stmt = stmt.where(User.is_active.is_(is_active))
    stmt = stmt.order_by(User.created_at.desc())
    page = await scope.paginate(stmt, params)
    role_names = await _role_names(scope)
    return page.map(lambda u: _to_response(u, role_names))


async def get_user(scope: TenantScope, user_id: UUID) -> UserResponse:
    user = await scope.get_or_404(User, user_id, "User")
    return _to_response(user, await _role_names(scope))


async def create_user(scope: TenantScope, payload: UserCreate) -> UserResponse:
    username = payload.username.strip()
    await _check_unique(scope, username, payload.email)
    await _validate_role(scope, payload.role_id)
    user = scope.add(
        User(
            username=username,
            email=payload.email,
            password_hash=hash_password(payload.password),
            role_id=payload.role_id,
            is_active=payload.is_active,
        )
    )
    try:
        await scope.db.commit()
    except IntegrityError:
        await scope.db.rollback()
        raise ConflictError("Username or email already exists")
    await scope.db.refresh(user)
    return _to_response(user, await _role_names(scope))


async def update_user(scope: TenantScope, user_id: UUID, payload: UserUpdate) -> UserResponse:
    user = await scope.get_or_404(User, user_id, "User")
    username = payload.username.strip() if payload.username is not None else None
    await _check_unique(scope, username, payload.email, exclude_id=user.id)
    if username is not None:
        user.username = username
    if payload.email is not None:
        user.email = payload.email
    if "role_id" in payload.model_fields_set:
        await _validate_role(scope, payload.role_id)
        user.role_id = payload.role_id
    if payload.is_active is not None:
        user.is_active = payload.is_active
    if payload.password:
        user.password_hash = hash_password(payload.password)
    try:
        await scope.db.commit()
    except IntegrityError:
        await scope.db.rollback()
        raise ConflictError("Username or email already exists")
    await scope.db.refresh(user)
    return _to_response(user, await _role_names(scope))


async def reset_password(scope: TenantScope, user_id: UUID, new_password: str) -> None:
    user = await scope.get_or_404(User, user_id, "User")
    user.password_hash = hash_password(new_password)
    await scope.db.commit()


async def delete_user(scope: TenantScope, user_id: UUID, current_user_id: UUID) -> None:
    """Hard delete; the caller's own account is protected (deactivate via is_active instead)."""
    if user_id == current_user_id:
        raise ConflictError("Cannot delete your own account")
    user = await scope.get_or_404(User, user_id, "User")
    await scope.db.delete(user)
    await scope.db.commit()

from typing import List
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.models import Permission, Role, RolePermission, User
from app.auth.schemas import CurrentUser
from app.auth.security import decode_access_token
from app.core.models import School
from app.core.tenant_scope import TenantScope
from app.db.session import get_db


oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login-oauth", auto_error=False)


async def load_role_permissions(db: AsyncSession, role_id: UUID) -> List[str]:
    stmt = (
        select(Permission.name)
        .join(RolePermission, RolePermission.permission_id == Permission.id)
        .where(RolePermission.role_id == role_id)
        .order_by(Permission.name)
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> CurrentUser:
    """Resolve {user, school, role, permissions} from the access token."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Unauthorized",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if not token:
        raise credentials_exception

    try:
        payload = decode_access_token(token)
    except JWTError:
        raise credentials_exception

    user_id_str = payload.get("sub")
    school_id_str = payload.get("schoolId")
    if not user_id_str or not school_id_str:
        raise credentials_exception

    try:
        user_id = UUID(user_id_str)
        school_id = UUID(school_id_str)
    except ValueError:
        raise credentials_exception

    result = await db.execute(select(User).where(User.id == user_id, User.school_id == school_id))
    user = result.scalar_one_or_none()
    if not user or not user.is_active:
        raise credentials_exception

    school = await db.get(School, school_id)
    if not school or not school.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="School is inactive",
            headers={"WWW-Authenticate": "Bearer"},
        )

    role = None
    permissions: List[str] = []
    if user.role_id:
        role = await db.get(Role, user.role_id)
        if role is not None and role.school_id == school_id:
            permissions = await load_role_permissions(db, role.id)
        else:
            role = None

    return CurrentUser(
        id=user.id,
        school_id=school.id,
        school_name=school.name,
        school_code=school.code,
        role_id=role.id if role else None,
        role=role.name if role else None,
        role_slug=role.slug if role else None,
        permissions=permissions,
    )


async def get_tenant_scope(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> TenantScope:
    """Service entry point bound to the caller's school."""
    return TenantScope(db, current_user.school_id)

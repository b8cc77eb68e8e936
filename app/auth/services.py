from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.dependencies import load_role_permissions
from app.auth.models import Role, User
from app.auth.schemas import CurrentUser, LoginRequest, LoginResponse
from app.auth.security import create_access_token, verify_password
from app.core.app_logger import get_logger
from app.core.exceptions import UnauthorizedError, ValidationFailed
from app.core.models import School

logger = get_logger("auth")


def build_token_subject(user: User, school: School, role: Optional[Role], permissions: List[str]) -> dict:
    return {
        "sub": str(user.id),
        "role": role.name if role else None,
        "schoolId": str(school.id),
        "schoolName": school.name,
        "schoolCode": school.code,
        "permissions": permissions,
    }


async def login_user(db: AsyncSession, payload: LoginRequest) -> LoginResponse:
    # 1. Find active user in an active school (case-insensitive email, optional school code)
    stmt = (
        select(User, School)
        .join(School, School.id == User.school_id)
        .where(
            func.lower(User.email) == payload.email.lower(),
            User.is_active.is_(True),
            School.is_active.is_(True),
        )
    )
    if payload.school_code:
        stmt = stmt.where(School.code == payload.school_code.strip().upper())
    result = await db.execute(stmt)
    rows = result.all()
    if not rows:
        raise UnauthorizedError("Invalid email or password")
    if len(rows) > 1:
        raise ValidationFailed("School code is required for this account")
    user, school = rows[0]

    # 2. Verify password hash
    if not verify_password(payload.password, user.password_hash):
        raise UnauthorizedError("Invalid email or password")

    # 3. Role and permissions
    role = await db.get(Role, user.role_id) if user.role_id else None
    permissions = await load_role_permissions(db, role.id) if role else []

    user.last_login = datetime.now(timezone.utc)
    await db.commit()
    logger.info("User %s logged in to school %s", user.id, school.code)

    token = create_access_token(subject=build_token_subject(user, school, role, permissions))
    return LoginResponse(
        access_token=token,
        user=CurrentUser(
            id=user.id,
            school_id=school.id,
            school_name=school.name,
            school_code=school.code,
            role_id=role.id if role else None,
            role=role.name if role else None,
            role_slug=role.slug if role else None,
            permissions=permissions,
        ),
    )

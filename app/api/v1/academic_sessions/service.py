from typing import Optional
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError

from app.core.app_logger import get_logger
from app.core.exceptions import ConflictError, ValidationFailed
from app.core.models import AcademicSession, StudentSession
from app.core.pagination import PageParams
from app.core.schemas import Page
from app.core.tenant_scope import TenantScope

from .schemas import AcademicSessionCreate, AcademicSessionResponse, AcademicSessionUpdate

logger = get_logger("sessions")


def _to_response(s: AcademicSession) -> AcademicSessionResponse:
    return AcademicSessionResponse.model_validate(s)


async def _deactivate_all(scope: TenantScope) -> None:
    await scope.db.execute(
        update(AcademicSession).where(scope.where(AcademicSession)).values(is_active=False)
    )


async def list_sessions(scope: TenantScope, params: PageParams, search: Optional[str] = None) -> Page:
    stmt = scope.select(AcademicSession)
    if search:
        stmt = stmt.where(AcademicSession.name.ilike(f"%{search.strip()}%"))
    stmt = stmt.order_by(AcademicSession.start_date.desc().nullslast(), AcademicSession.name.desc())
    page = await scope.paginate(stmt, params)
    return page.map(_to_response)


async def get_session(scope: TenantScope, session_id: UUID) -> AcademicSessionResponse:
    return _to_response(await scope.get_or_404(AcademicSession, session_id, "Session"))


async def get_active_session(scope: TenantScope) -> Optional[AcademicSession]:
    """The current session for the school, or None when no session was ever activated."""
    result = await scope.db.execute(scope.select(AcademicSession, AcademicSession.is_active.is_(True)))
    return result.scalars().first()


async def require_active_session(scope: TenantScope) -> AcademicSession:
    active = await get_active_session(scope)
    if active is None:
        raise ValidationFailed("No active session found")
    return active


async def create_session(scope: TenantScope, payload: AcademicSessionCreate) -> AcademicSessionResponse:
    """Create a session. If is_active, all sibling sessions are deactivated in the same transaction."""
    name = payload.name.strip()
    await scope.ensure_unique(AcademicSession, "Session name already exists", AcademicSession.name == name)
    if payload.is_active:
        await _deactivate_all(scope)
    obj = scope.add(
        AcademicSession(
            name=name,
            start_date=payload.start_date,
            end_date=payload.end_date,
            is_active=payload.is_active,
        )
    )
    try:
        await scope.db.commit()
    except IntegrityError:
        await scope.db.rollback()
        raise ConflictError("Session name already exists")
    await scope.db.refresh(obj)
    return _to_response(obj)


async def update_session(
    scope: TenantScope,
    session_id: UUID,
    payload: AcademicSessionUpdate,
) -> AcademicSessionResponse:
    obj = await scope.get_or_404(AcademicSession, session_id, "Session")
    if payload.name is not None:
        name = payload.name.strip()
        await scope.ensure_unique(
            AcademicSession, "Session name already exists", AcademicSession.name == name, exclude_id=obj.id
        )
        obj.name = name
    if "start_date" in payload.model_fields_set:
        obj.start_date = payload.start_date
    if "end_date" in payload.model_fields_set:
        obj.end_date = payload.end_date
    if obj.start_date and obj.end_date and obj.end_date <= obj.start_date:
        raise ValidationFailed("endDate must be after startDate")
    try:
        await scope.db.commit()
    except IntegrityError:
        await scope.db.rollback()
        raise ConflictError("Session name already exists")
    await scope.db.refresh(obj)
    return _to_response(obj)


async def activate_session(scope: TenantScope, session_id: UUID) -> AcademicSessionResponse:
    """Make this the only active session: deactivate-all then activate-one, committed together."""
    obj = await scope.get_or_404(AcademicSession, session_id, "Session")
    try:
        await _deactivate_all(scope)
        obj.is_active = True
        await scope.db.commit()
    except Exception:
        await scope.db.rollback()
        raise
    await scope.db.refresh(obj)
    logger.info("Session %s activated for school %s", obj.id, scope.school_id)
    return _to_response(obj)


async def delete_session(scope: TenantScope, session_id: UUID) -> None:
    obj = await scope.get_or_404(AcademicSession, session_id, "Session")
    if obj.is_active:
        raise ConflictError("Cannot delete active session")
    if await scope.count(StudentSession, StudentSession.session_id == obj.id):
        raise ConflictError("Cannot delete session with enrolled students")
    await scope.db.delete(obj)
    await scope.db.commit()

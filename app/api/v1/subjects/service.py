from typing import List, Optional
from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError

from app.core.exceptions import ConflictError
from app.core.models import ExamSubject, Homework, LessonPlan, Subject
from app.core.pagination import PageParams
from app.core.schemas import Page
from app.core.tenant_scope import TenantScope

from .schemas import SubjectCreate, SubjectDropdownItem, SubjectResponse, SubjectUpdate


def _clean_code(code: Optional[str]) -> Optional[str]:
    if code is None:
        return None
    code = code.strip().upper()
    return code or None


async def _check_unique(scope: TenantScope, name: Optional[str], code: Optional[str], exclude_id=None) -> None:
    if name is not None:
        await scope.ensure_unique(Subject, "Subject name already exists", Subject.name == name, exclude_id=exclude_id)
    if code is not None:
        await scope.ensure_unique(Subject, "Subject code already exists", Subject.code == code, exclude_id=exclude_id)


async def list_subjects(
    scope: TenantScope,
    params: PageParams,
    search: Optional[str] = None,
    type: Optional[str] = None,
    is_active: Optional[bool] = None,
) -> Page:
    stmt = scope.select(Subject)
    if search:
        like = f"%{search.strip()}%"
        stmt = stmt.where(or_(Subject.name.ilike(like), Subject.code.ilike(like)))
    if type:
        stmt = stmt.where(Subject.type == type)
    if is_active is not None:
        stmt = stmt.where(Subject.is_active.is_(is_active))
    stmt = stmt.order_by(Subject.name)
    page = await scope.paginate(stmt, params)
    return page.map(SubjectResponse.model_validate)


async def list_subjects_dropdown(scope: TenantScope) -> List[SubjectDropdownItem]:
    """Active subjects as {label, value} for select inputs."""
    rows = await scope.all(scope.select(Subject, Subject.is_active.is_(True)).order_by(Subject.name))
    return [
        SubjectDropdownItem(label=f"{s.name} ({s.code})" if s.code else s.name, value=s.id)
        for s in rows
    ]


async def get_subject(scope: TenantScope, subject_id: UUID) -> SubjectResponse:
    return SubjectResponse.model_validate(await scope.get_or_404(Subject, subject_id, "Subject"))


async def create_subject(scope: TenantScope, payload: SubjectCreate) -> SubjectResponse:
    name = payload.name.strip()
    code = _clean_code(payload.code)
    await _check_unique(scope, name, code)
    obj = scope.add(Subject(name=name, code=code, type=payload.type.value, is_active=True))
    try:
        await scope.db.commit()
    except IntegrityError:
        await scope.db.rollback()
        raise ConflictError("Subject name or code already exists")
    await scope.db.refresh(obj)
    return SubjectResponse.model_validate(obj)


async def update_subject(scope: TenantScope, subject_id: UUID, payload: SubjectUpdate) -> SubjectResponse:
    obj = await scope.get_or_404(Subject, subject_id, "Subject")
    name = payload.name.strip() if payload.name is not None else None
    code = _clean_code(payload.code) if "code" in payload.model_fields_set else None
    await _check_unique(scope, name, code, exclude_id=obj.id)
    if name is not None:
        obj.name = name
    if "code" in payload.model_fields_set:
        obj.code = code
    if payload.type is not None:
        obj.type = payload.type.value
    if payload.is_active is not None:
        obj.is_active = payload.is_active
    try:
        await scope.db.commit()
    except IntegrityError:
        await scope.db.rollback()
        raise ConflictError("Subject name or code already exists")
    await scope.db.refresh(obj)
    return SubjectResponse.model_validate(obj)


async def delete_subject(scope: TenantScope, subject_id: UUID) -> None:
    obj = await scope.get_or_404(Subject, subject_id, "Subject")
    # exam_subjects carry no school_id; the subject id is already tenant-checked above
    used = await scope.db.execute(select(ExamSubject.id).where(ExamSubject.subject_id == obj.id).limit(1))
    if used.first() is not None:
        raise ConflictError("Cannot delete subject used in exams")
    if await scope.count(Homework, Homework.subject_id == obj.id):
        raise ConflictError("Cannot delete subject used in homework")
    if await scope.count(LessonPlan, LessonPlan.subject_id == obj.id):
        raise ConflictError("Cannot delete subject used in lesson plans")
    await scope.db.delete(obj)
    await scope.db.commit()

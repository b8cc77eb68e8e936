"""
Exam groups bundle existing exams (e.g. the term exams of a session) for
reporting. Membership is a plain link table; deleting a group leaves its exams.
"""
from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload

from app.core.exceptions import ConflictError, NotFoundError, ValidationFailed
from app.core.models import Exam, ExamGroup, ExamGroupExam
from app.core.pagination import PageParams
from app.core.schemas import Page
from app.core.tenant_scope import TenantScope

from .schemas import ExamGroupCreate, ExamGroupMember, ExamGroupResponse, ExamGroupUpdate


async def _exams_by_id(scope: TenantScope, ids) -> Dict[UUID, Exam]:
    if not ids:
        return {}
    return {e.id: e for e in await scope.all(scope.select(Exam, Exam.id.in_(list(ids))))}


def _to_response(group: ExamGroup, exams: Dict[UUID, Exam]) -> ExamGroupResponse:
    members = []
    for link in group.members:
        exam = exams.get(link.exam_id)
        if exam is None:
            continue
        members.append(
            ExamGroupMember(exam_id=exam.id, name=exam.name, session_id=exam.session_id, is_published=exam.is_published)
        )
    members.sort(key=lambda m: m.name)
    return ExamGroupResponse(
        id=group.id,
        school_id=group.school_id,
        name=group.name,
        description=group.description,
        exam_type=group.exam_type,
        is_active=group.is_active,
        exams=members,
        created_at=group.created_at,
        updated_at=group.updated_at,
    )


async def _load_group(scope: TenantScope, group_id: UUID) -> ExamGroup:
    stmt = (
        scope.select(ExamGroup, ExamGroup.id == group_id)
        .options(selectinload(ExamGroup.members))
        .execution_options(populate_existing=True)
    )
    group = (await scope.db.execute(stmt)).scalar_one_or_none()
    if group is None:
        raise NotFoundError("Exam group not found")
    return group


async def _build_members(scope: TenantScope, exam_ids: List[UUID]) -> List[ExamGroupExam]:
    if len(set(exam_ids)) != len(exam_ids):
        raise ValidationFailed("An exam can appear only once in a group")
    if exam_ids and await scope.count(Exam, Exam.id.in_(exam_ids)) != len(exam_ids):
        raise ValidationFailed("Invalid exam")
    return [ExamGroupExam(exam_id=exam_id) for exam_id in exam_ids]


async def list_exam_groups(
    scope: TenantScope,
    params: PageParams,
    search: Optional[str] = None,
    exam_type: Optional[str] = None,
) -> Page:
    stmt = scope.select(ExamGroup).options(selectinload(ExamGroup.members))
    if search:
        stmt = stmt.where(ExamGroup.name.ilike(f"%{search.strip()}%"))
    if exam_type:
        stmt = stmt.where(ExamGroup.exam_type == exam_type.strip())
    page = await scope.paginate(stmt.order_by(ExamGroup.created_at.desc()), params)
    exams = await _exams_by_id(scope, {link.exam_id for g in page.items for link in g.members})
    return page.map(lambda g: _to_response(g, exams))


async def get_exam_group(scope: TenantScope, group_id: UUID) -> ExamGroupResponse:
    group = await _load_group(scope, group_id)
    return _to_response(group, await _exams_by_id(scope, {link.exam_id for link in group.members}))


async def create_exam_group(scope: TenantScope, payload: ExamGroupCreate) -> ExamGroupResponse:
    name = payload.name.strip()
    await scope.ensure_unique(ExamGroup, "Exam group name already exists", ExamGroup.name == name)
    members = await _build_members(scope, payload.exam_ids)
    group = scope.add(
        ExamGroup(
            name=name,
            description=payload.description,
            exam_type=payload.exam_type.strip(),
            is_active=True,
            members=members,
        )
    )
    try:
        await scope.db.commit()
    except IntegrityError:
        await scope.db.rollback()
        raise ConflictError("Exam group name already exists")
    return await get_exam_group(scope, group.id)


async def update_exam_group(scope: TenantScope, group_id: UUID, payload: ExamGroupUpdate) -> ExamGroupResponse:
    group = await _load_group(scope, group_id)
    if payload.name is not None:
        name = payload.name.strip()
        await scope.ensure_unique(
            ExamGroup, "Exam group name already exists", ExamGroup.name == name, exclude_id=group.id
        )
        group.name = name
    if "description" in payload.model_fields_set:
        group.description = payload.description
    if payload.exam_type is not None:
        group.exam_type = payload.exam_type.strip()
    if payload.is_active is not None:
        group.is_active = payload.is_active
    if payload.exam_ids is not None:
        members = await _build_members(scope, payload.exam_ids)
        group.members.clear()
        await scope.db.flush()
        group.members.extend(members)
    try:
        await scope.db.commit()
    except IntegrityError:
        await scope.db.rollback()
        raise ConflictError("Exam group name already exists")
    return await get_exam_group(scope, group.id)


async def delete_exam_group(scope: TenantScope, group_id: UUID) -> None:
    group = await _load_group(scope, group_id)
    await scope.db.delete(group)
    await scope.db.commit()

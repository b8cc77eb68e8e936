from typing import Dict, Optional, Sequence
from uuid import UUID

from sqlalchemy import func, or_, select

from app.core.exceptions import ConflictError
from app.core.models import Parent, Student
from app.core.pagination import PageParams
from app.core.schemas import Page
from app.core.tenant_scope import TenantScope

from .schemas import ParentCreate, ParentResponse, ParentUpdate


async def _student_counts(scope: TenantScope, parent_ids: Sequence[UUID]) -> Dict[UUID, int]:
    if not parent_ids:
        return {}
    stmt = (
        select(Student.parent_id, func.count(Student.id))
        .where(scope.where(Student), Student.parent_id.in_(parent_ids))
        .group_by(Student.parent_id)
    )
    return {pid: n for pid, n in (await scope.db.execute(stmt)).all()}


def _to_response(p: Parent, student_count: int = 0) -> ParentResponse:
    data = ParentResponse.model_validate(p)
    data.student_count = student_count
    return data


async def list_parents(scope: TenantScope, params: PageParams, search: Optional[str] = None) -> Page:
    stmt = scope.select(Parent)
    if search:
        like = f"%{search.strip()}%"
        stmt = stmt.where(
            or_(
                Parent.guardian_name.ilike(like),
                Parent.father_name.ilike(like),
                Parent.mother_name.ilike(like),
                Parent.phone.ilike(like),
                Parent.email.ilike(like),
            )
        )
    page = await scope.paginate(stmt.order_by(Parent.guardian_name), params)
    counts = await _student_counts(scope, [p.id for p in page.items])
    return page.map(lambda p: _to_response(p, counts.get(p.id, 0)))


async def get_parent(scope: TenantScope, parent_id: UUID) -> ParentResponse:
    obj = await scope.get_or_404(Parent, parent_id, "Parent")
    counts = await _student_counts(scope, [obj.id])
    return _to_response(obj, counts.get(obj.id, 0))


async def create_parent(scope: TenantScope, payload: ParentCreate) -> ParentResponse:
    data = payload.model_dump()
    data["guardian_name"] = data["guardian_name"].strip()
    obj = scope.add(Parent(**data))
    await scope.db.commit()
    await scope.db.refresh(obj)
    return _to_response(obj)


async def update_parent(scope: TenantScope, parent_id: UUID, payload: ParentUpdate) -> ParentResponse:
    obj = await scope.get_or_404(Parent, parent_id, "Parent")
    for field, value in payload.model_dump(exclude_unset=True).items():
        if field == "guardian_name":
            if value is None:
                continue
            value = value.strip()
        setattr(obj, field, value)
    await scope.db.commit()
    return await get_parent(scope, obj.id)


async def delete_parent(scope: TenantScope, parent_id: UUID) -> None:
    obj = await scope.get_or_404(Parent, parent_id, "Parent")
    if await scope.count(Student, Student.parent_id == obj.id):
        raise ConflictError("Cannot delete parent linked to students")
    await scope.db.delete(obj)
    await scope.db.commit()

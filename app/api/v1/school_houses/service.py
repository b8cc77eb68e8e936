"""School houses: school-unique names that students point at through school_house_id."""
from typing import Dict, Optional, Sequence
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from app.core.exceptions import ConflictError
from app.core.models import SchoolHouse, Student
from app.core.pagination import PageParams
from app.core.schemas import Page
from app.core.tenant_scope import TenantScope

from .schemas import SchoolHouseCreate, SchoolHouseResponse, SchoolHouseUpdate


async def _student_counts(scope: TenantScope, ids: Sequence[UUID]) -> Dict[UUID, int]:
    if not ids:
        return {}
    stmt = (
        select(Student.school_house_id, func.count(Student.id))
        .where(scope.where(Student), Student.school_house_id.in_(ids))
        .group_by(Student.school_house_id)
    )
    return {k: n for k, n in (await scope.db.execute(stmt)).all()}


def _to_response(h: SchoolHouse, student_count: int = 0) -> SchoolHouseResponse:
    data = SchoolHouseResponse.model_validate(h)
    data.student_count = student_count
    return data


async def list_houses(
    scope: TenantScope,
    params: PageParams,
    search: Optional[str] = None,
    is_active: Optional[bool] = None,
) -> Page:
    stmt = scope.select(SchoolHouse)
    if search:
        stmt = stmt.where(SchoolHouse.name.ilike(f"%{search.strip()}%"))
    if is_active is not None:
        stmt = stmt.where(SchoolHouse.is_active.is_(is_active))
    page = await scope.paginate(stmt.order_by(SchoolHouse.name), params)
    counts = await _student_counts(scope, [h.id for h in page.items])
    return page.map(lambda h: _to_response(h, counts.get(h.id, 0)))


async def get_house(scope: TenantScope, house_id: UUID) -> SchoolHouseResponse:
    obj = await scope.get_or_404(SchoolHouse, house_id, "School house")
    counts = await _student_counts(scope, [obj.id])
    return _to_response(obj, counts.get(obj.id, 0))


async def create_house(scope: TenantScope, payload: SchoolHouseCreate) -> SchoolHouseResponse:
    name = payload.name.strip()
    await scope.ensure_unique(SchoolHouse, "House name already exists", SchoolHouse.name == name)
    obj = scope.add(SchoolHouse(name=name, description=payload.description, is_active=True))
    try:
        await scope.db.commit()
    except IntegrityError:
        await scope.db.rollback()
        raise ConflictError("House name already exists")
    await scope.db.refresh(obj)
    return _to_response(obj)


async def update_house(
    scope: TenantScope, house_id: UUID, payload: SchoolHouseUpdate
) -> SchoolHouseResponse:
    obj = await scope.get_or_404(SchoolHouse, house_id, "School house")
    if payload.name is not None:
        name = payload.name.strip()
        await scope.ensure_unique(
            SchoolHouse, "House name already exists", SchoolHouse.name == name, exclude_id=obj.id
        )
        obj.name = name
    if "description" in payload.model_fields_set:
        obj.description = payload.description
    if payload.is_active is not None:
        obj.is_active = payload.is_active
    try:
        await scope.db.commit()
    except IntegrityError:
        await scope.db.rollback()
        raise ConflictError("House name already exists")
    return await get_house(scope, obj.id)


async def delete_house(scope: TenantScope, house_id: UUID) -> None:
    obj = await scope.get_or_404(SchoolHouse, house_id, "School house")
    if await scope.count(Student, Student.school_house_id == obj.id):
        raise ConflictError("Cannot delete house assigned to students")
    await scope.db.delete(obj)
    await scope.db.commit()

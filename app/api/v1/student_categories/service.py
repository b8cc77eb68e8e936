"""Student categories: school-unique names that students point at through category_id."""
from typing import Dict, Optional, Sequence
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from app.core.exceptions import ConflictError
from app.core.models import Student, StudentCategory
from app.core.pagination import PageParams
from app.core.schemas import Page
from app.core.tenant_scope import TenantScope

from .schemas import StudentCategoryCreate, StudentCategoryResponse, StudentCategoryUpdate


async def _student_counts(scope: TenantScope, ids: Sequence[UUID]) -> Dict[UUID, int]:
    if not ids:
        return {}
    stmt = (
        select(Student.category_id, func.count(Student.id))
        .where(scope.where(Student), Student.category_id.in_(ids))
        .group_by(Student.category_id)
    )
    return {k: n for k, n in (await scope.db.execute(stmt)).all()}


def _to_response(c: StudentCategory, student_count: int = 0) -> StudentCategoryResponse:
    data = StudentCategoryResponse.model_validate(c)
    data.student_count = student_count
    return data


async def list_categories(
    scope: TenantScope,
    params: PageParams,
    search: Optional[str] = None,
    is_active: Optional[bool] = None,
) -> Page:
    stmt = scope.select(StudentCategory)
    if search:
        stmt = stmt.where(StudentCategory.name.ilike(f"%{search.strip()}%"))
    if is_active is not None:
        stmt = stmt.where(StudentCategory.is_active.is_(is_active))
    page = await scope.paginate(stmt.order_by(StudentCategory.name), params)
    counts = await _student_counts(scope, [c.id for c in page.items])
    return page.map(lambda c: _to_response(c, counts.get(c.id, 0)))


async def get_category(scope: TenantScope, category_id: UUID) -> StudentCategoryResponse:
    obj = await scope.get_or_404(StudentCategory, category_id, "Student category")
    counts = await _student_counts(scope, [obj.id])
    return _to_response(obj, counts.get(obj.id, 0))


async def create_category(scope: TenantScope, payload: StudentCategoryCreate) -> StudentCategoryResponse:
    name = payload.name.strip()
    await scope.ensure_unique(StudentCategory, "Category name already exists", StudentCategory.name == name)
    obj = scope.add(StudentCategory(name=name, description=payload.description, is_active=True))
    try:
        await scope.db.commit()
    except IntegrityError:
        await scope.db.rollback()
        raise ConflictError("Category name already exists")
    await scope.db.refresh(obj)
    return _to_response(obj)


async def update_category(
    scope: TenantScope, category_id: UUID, payload: StudentCategoryUpdate
) -> StudentCategoryResponse:
    obj = await scope.get_or_404(StudentCategory, category_id, "Student category")
    if payload.name is not None:
        name = payload.name.strip()
        await scope.ensure_unique(
            StudentCategory, "Category name already exists", StudentCategory.name == name, exclude_id=obj.id
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
        raise ConflictError("Category name already exists")
    return await get_category(scope, obj.id)


async def delete_category(scope: TenantScope, category_id: UUID) -> None:
    obj = await scope.get_or_404(StudentCategory, category_id, "Student category")
    if await scope.count(Student, Student.category_id == obj.id):
        raise ConflictError("Cannot delete category assigned to students")
    await scope.db.delete(obj)
    await scope.db.commit()

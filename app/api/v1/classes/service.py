from typing import Dict, List, Optional, Sequence
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from app.core.exceptions import ConflictError, ValidationFailed
from app.core.models import ClassSection, SchoolClass, Section, StudentSession
from app.core.pagination import PageParams
from app.core.schemas import Page
from app.core.tenant_scope import TenantScope

from .schemas import ClassCreate, ClassResponse, ClassSectionItem, ClassUpdate


def _class_to_response(c: SchoolClass, sections: Optional[List[ClassSectionItem]] = None) -> ClassResponse:
    return ClassResponse(
        id=c.id,
        school_id=c.school_id,
        name=c.name,
        sort_order=c.sort_order,
        is_active=c.is_active,
        created_at=c.created_at,
        updated_at=c.updated_at,
        sections=sections,
    )


async def _sections_by_class(scope: TenantScope, class_ids: Sequence[UUID]) -> Dict[UUID, List[ClassSectionItem]]:
    out: Dict[UUID, List[ClassSectionItem]] = {cid: [] for cid in class_ids}
    if not class_ids:
        return out
    stmt = (
        select(ClassSection, Section.name)
        .join(Section, Section.id == ClassSection.section_id)
        .where(scope.where(ClassSection), ClassSection.class_id.in_(class_ids))
        .order_by(ClassSection.sort_order.nullslast(), Section.name)
    )
    for cs, section_name in (await scope.db.execute(stmt)).all():
        out[cs.class_id].append(
            ClassSectionItem(id=cs.id, section_id=cs.section_id, name=section_name, capacity=cs.capacity)
        )
    return out


async def _validate_sections(scope: TenantScope, section_ids: Sequence[UUID]) -> List[UUID]:
    unique_ids = list(dict.fromkeys(section_ids))
    if not unique_ids:
        return []
    found = await scope.all(select(Section.id).where(scope.where(Section), Section.id.in_(unique_ids)))
    if len(found) != len(unique_ids):
        raise ValidationFailed("Invalid section")
    return unique_ids


async def _next_sort_order(scope: TenantScope) -> int:
    result = await scope.db.execute(select(func.max(SchoolClass.sort_order)).where(scope.where(SchoolClass)))
    return (result.scalar() or 0) + 1


async def _sync_sections(scope: TenantScope, class_id: UUID, section_ids: List[UUID]) -> None:
    """Make the class's ClassSection rows match section_ids. Removing a section with enrollments is refused."""
    existing = await scope.all(scope.select(ClassSection, ClassSection.class_id == class_id))
    by_section = {cs.section_id: cs for cs in existing}
    for section_id, cs in by_section.items():
        if section_id in section_ids:
            continue
        if await scope.count(StudentSession, StudentSession.class_section_id == cs.id):
            raise ConflictError("Cannot remove section with assigned students")
        await scope.db.delete(cs)
    for order, section_id in enumerate(section_ids, start=1):
        if section_id in by_section:
            by_section[section_id].sort_order = order
        else:
            scope.add(ClassSection(class_id=class_id, section_id=section_id, sort_order=order))


async def list_classes(
    scope: TenantScope,
    params: PageParams,
    search: Optional[str] = None,
    is_active: Optional[bool] = None,
    with_sections: bool = False,
) -> Page:
    stmt = scope.select(SchoolClass)
    if search:
        stmt = stmt.where(SchoolClass.name.ilike(f"%{search.strip()}%"))
    if is_active is not None:
        stmt = stmt.where(SchoolClass.is_active.is_(is_active))
    stmt = stmt.order_by(SchoolClass.sort_order.nullslast(), SchoolClass.name)
    page = await scope.paginate(stmt, params)
    if not with_sections:
        return page.map(_class_to_response)
    sections = await _sections_by_class(scope, [c.id for c in page.items])
    return page.map(lambda c: _class_to_response(c, sections[c.id]))


async def get_class(scope: TenantScope, class_id: UUID) -> ClassResponse:
    obj = await scope.get_or_404(SchoolClass, class_id, "Class")
    sections = await _sections_by_class(scope, [obj.id])
    return _class_to_response(obj, sections[obj.id])


async def create_class(scope: TenantScope, payload: ClassCreate) -> ClassResponse:
    name = payload.name.strip()
    await scope.ensure_unique(SchoolClass, "Class name already exists", SchoolClass.name == name)
    section_ids = await _validate_sections(scope, payload.section_ids)
    sort_order = payload.sort_order if payload.sort_order is not None else await _next_sort_order(scope)
    obj = scope.add(SchoolClass(name=name, sort_order=sort_order, is_active=True))
    try:
        await scope.db.flush()
        await _sync_sections(scope, obj.id, section_ids)
        await scope.db.commit()
    except IntegrityError:
        await scope.db.rollback()
        raise ConflictError("Class name already exists")
    await scope.db.refresh(obj)
    return await get_class(scope, obj.id)


async def update_class(scope: TenantScope, class_id: UUID, payload: ClassUpdate) -> ClassResponse:
    obj = await scope.get_or_404(SchoolClass, class_id, "Class")
    if payload.name is not None:
        name = payload.name.strip()
        await scope.ensure_unique(SchoolClass, "Class name already exists", SchoolClass.name == name, exclude_id=obj.id)
        obj.name = name
    if payload.sort_order is not None:
        obj.sort_order = payload.sort_order
    if payload.is_active is not None:
        obj.is_active = payload.is_active
    if payload.section_ids is not None:
        section_ids = await _validate_sections(scope, payload.section_ids)
        await _sync_sections(scope, obj.id, section_ids)
    try:
        await scope.db.commit()
    except IntegrityError:
        await scope.db.rollback()
        raise ConflictError("Class name already exists")
    return await get_class(scope, obj.id)


async def delete_class(scope: TenantScope, class_id: UUID) -> None:
    obj = await scope.get_or_404(SchoolClass, class_id, "Class")
    class_section_ids = select(ClassSection.id).where(ClassSection.class_id == obj.id)
    if await scope.count(StudentSession, StudentSession.class_section_id.in_(class_section_ids)):
        raise ConflictError("Cannot delete class with assigned students")
    for cs in await scope.all(scope.select(ClassSection, ClassSection.class_id == obj.id)):
        await scope.db.delete(cs)
    await scope.db.flush()
    await scope.db.delete(obj)
    await scope.db.commit()

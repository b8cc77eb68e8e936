from typing import Dict, Optional, Sequence
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from app.core.exceptions import ConflictError
from app.core.models import ClassSection, Section
from app.core.pagination import PageParams
from app.core.schemas import Page
from app.core.tenant_scope import TenantScope

from .schemas import SectionCreate, SectionResponse, SectionUpdate


def _section_to_response(s: Section, class_count: int = 0) -> SectionResponse:
    return SectionResponse(
        id=s.id,
        school_id=s.school_id,
        name=s.name,
        is_active=s.is_active,
        class_count=class_count,
        created_at=s.created_at,
        updated_at=s.updated_at,
    )


async def _class_counts(scope: TenantScope, section_ids: Sequence[UUID]) -> Dict[UUID, int]:
    if not section_ids:
        return {}
    stmt = (
        select(ClassSection.section_id, func.count(ClassSection.id))
        .where(scope.where(ClassSection), ClassSection.section_id.in_(section_ids))
        .group_by(ClassSection.section_id)
    )
    return {sid: n for sid, n in (await scope.db.execute(stmt)).all()}


async def list_sections(scope: TenantScope, params: PageParams, search: Optional[str] = None) -> Page:
    stmt = scope.select(Section)
    if search:
        stmt = stmt.where(Section.name.ilike(f"%{search.strip()}%"))
    stmt = stmt.order_by(Section.name)
    page = await scope.paginate(stmt, params)
    counts = await _class_counts(scope, [s.id for s in page.items])
    return page.map(lambda s: _section_to_response(s, counts.get(s.id, 0)))


async def get_section(scope: TenantScope, section_id: UUID) -> SectionResponse:
    obj = await scope.get_or_404(Section, section_id, "Section")
    counts = await _class_counts(scope, [obj.id])
    return _section_to_response(obj, counts.get(obj.id, 0))


async def create_section(scope: TenantScope, payload: SectionCreate) -> SectionResponse:
    name = payload.name.strip()
    await scope.ensure_unique(Section, "Section name already exists", Section.name == name)
    obj = scope.add(Section(name=name, is_active=True))
    try:
        await scope.db.commit()
    except IntegrityError:
        await scope.db.rollback()
        raise ConflictError("Section name already exists")
    await scope.db.refresh(obj)
    return _section_to_response(obj)


async def update_section(scope: TenantScope, section_id: UUID, payload: SectionUpdate) -> SectionResponse:
    obj = await scope.get_or_404(Section, section_id, "Section")
    if payload.name is not None:
        name = payload.name.strip()
        await scope.ensure_unique(Section, "Section name already exists", Section.name == name, exclude_id=obj.id)
        obj.name = name
    if payload.is_active is not None:
        obj.is_active = payload.is_active
    try:
        await scope.db.commit()
    except IntegrityError:
        await scope.db.rollback()
        raise ConflictError("Section name already exists")
    return await get_section(scope, obj.id)


async def delete_section(scope: TenantScope, section_id: UUID) -> None:
    obj = await scope.get_or_404(Section, section_id, "Section")
    if await scope.count(ClassSection, ClassSection.section_id == obj.id):
        raise ConflictError("Cannot delete section assigned to classes")
    await scope.db.delete(obj)
    await scope.db.commit()

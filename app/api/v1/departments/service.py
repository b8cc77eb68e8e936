"""
Departments and designations share one shape: a named, school-unique catalog
row that staff point at. Both refuse deletion while any staff row references them.
"""
from typing import Dict, List, Optional, Sequence
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from app.core.exceptions import ConflictError
from app.core.models import Department, Designation, Staff
from app.core.pagination import PageParams
from app.core.schemas import Page
from app.core.tenant_scope import TenantScope

from .schemas import (
    DepartmentCreate,
    DepartmentResponse,
    DepartmentUpdate,
    DesignationCreate,
    DesignationResponse,
    DesignationUpdate,
    DropdownItem,
)


async def _staff_counts(scope: TenantScope, fk_column, ids: Sequence[UUID]) -> Dict[UUID, int]:
    if not ids:
        return {}
    stmt = (
        select(fk_column, func.count(Staff.id))
        .where(scope.where(Staff), fk_column.in_(ids))
        .group_by(fk_column)
    )
    return {k: n for k, n in (await scope.db.execute(stmt)).all()}


# ----- Departments -----


def _department_to_response(d: Department, staff_count: int = 0) -> DepartmentResponse:
    return DepartmentResponse(
        id=d.id,
        school_id=d.school_id,
        name=d.name,
        description=d.description,
        is_active=d.is_active,
        staff_count=staff_count,
        created_at=d.created_at,
        updated_at=d.updated_at,
    )


async def list_departments(scope: TenantScope, params: PageParams, search: Optional[str] = None) -> Page:
    stmt = scope.select(Department)
    if search:
        stmt = stmt.where(Department.name.ilike(f"%{search.strip()}%"))
    page = await scope.paginate(stmt.order_by(Department.name), params)
    counts = await _staff_counts(scope, Staff.department_id, [d.id for d in page.items])
    return page.map(lambda d: _department_to_response(d, counts.get(d.id, 0)))


async def list_departments_dropdown(scope: TenantScope) -> List[DropdownItem]:
    rows = await scope.all(scope.select(Department, Department.is_active.is_(True)).order_by(Department.name))
    return [DropdownItem(label=d.name, value=d.id) for d in rows]


async def get_department(scope: TenantScope, department_id: UUID) -> DepartmentResponse:
    obj = await scope.get_or_404(Department, department_id, "Department")
    counts = await _staff_counts(scope, Staff.department_id, [obj.id])
    return _department_to_response(obj, counts.get(obj.id, 0))


async def create_department(scope: TenantScope, payload: DepartmentCreate) -> DepartmentResponse:
    name = payload.name.strip()
    await scope.ensure_unique(Department, "Department name already exists", Department.name == name)
    obj = scope.add(Department(name=name, description=payload.description, is_active=True))
    try:
        await scope.db.commit()
    except IntegrityError:
        await scope.db.rollback()
        raise ConflictError("Department name already exists")
    await scope.db.refresh(obj)
    return _department_to_response(obj)


async def update_department(scope: TenantScope, department_id: UUID, payload: DepartmentUpdate) -> DepartmentResponse:
    obj = await scope.get_or_404(Department, department_id, "Department")
    if payload.name is not None:
        name = payload.name.strip()
        await scope.ensure_unique(
            Department, "Department name already exists", Department.name == name, exclude_id=obj.id
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
        raise ConflictError("Department name already exists")
    return await get_department(scope, obj.id)


async def delete_department(scope: TenantScope, department_id: UUID) -> None:
    obj = await scope.get_or_404(Department, department_id, "Department")
    if await scope.count(Staff, Staff.department_id == obj.id):
        raise ConflictError("Cannot delete department with assigned staff")
    await scope.db.delete(obj)
    await scope.db.commit()


# ----- Designations -----


def _designation_to_response(d: Designation, staff_count: int = 0) -> DesignationResponse:
    return DesignationResponse(
        id=d.id,
        school_id=d.school_id,
        name=d.name,
        is_active=d.is_active,
        staff_count=staff_count,
        created_at=d.created_at,
        updated_at=d.updated_at,
    )


async def list_designations(scope: TenantScope, params: PageParams, search: Optional[str] = None) -> Page:
    stmt = scope.select(Designation)
    if search:
        stmt = stmt.where(Designation.name.ilike(f"%{search.strip()}%"))
    page = await scope.paginate(stmt.order_by(Designation.name), params)
    counts = await _staff_counts(scope, Staff.designation_id, [d.id for d in page.items])
    return page.map(lambda d: _designation_to_response(d, counts.get(d.id, 0)))


async def get_designation(scope: TenantScope, designation_id: UUID) -> DesignationResponse:
    obj = await scope.get_or_404(Designation, designation_id, "Designation")
    counts = await _staff_counts(scope, Staff.designation_id, [obj.id])
    return _designation_to_response(obj, counts.get(obj.id, 0))


async def create_designation(scope: TenantScope, payload: DesignationCreate) -> DesignationResponse:
    name = payload.name.strip()
    await scope.ensure_unique(Designation, "Designation name already exists", Designation.name == name)
    obj = scope.add(Designation(name=name, is_active=True))
    try:
        await scope.db.commit()
    except IntegrityError:
        await scope.db.rollback()
        raise ConflictError("Designation name already exists")
    await scope.db.refresh(obj)
    return _designation_to_response(obj)


async def update_designation(
    scope: TenantScope,
    designation_id: UUID,
    payload: DesignationUpdate,
) -> DesignationResponse:
    obj = await scope.get_or_404(Designation, designation_id, "Designation")
    if payload.name is not None:
        name = payload.name.strip()
        await scope.ensure_unique(
            Designation, "Designation name already exists", Designation.name == name, exclude_id=obj.id
        )
        obj.name = name
    if payload.is_active is not None:
        obj.is_active = payload.is_active
    try:
        await scope.db.commit()
    except IntegrityError:
        await scope.db.rollback()
        raise ConflictError("Designation name already exists")
    return await get_designation(scope, obj.id)


async def delete_designation(scope: TenantScope, designation_id: UUID) -> None:
    obj = await scope.get_or_404(Designation, designation_id, "Designation")
    if await scope.count(Staff, Staff.designation_id == obj.id):
        raise ConflictError("Cannot delete designation with assigned staff")
    await scope.db.delete(obj)
    await scope.db.commit()

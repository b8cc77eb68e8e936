from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError

from app.auth.models import Role, User
from app.auth.security import hash_password
from app.core.app_logger import get_logger
from app.core.exceptions import ConflictError, ValidationFailed
from app.core.identifiers import first_free, format_employee_id, trailing_number
from app.core.models import Department, Designation, School, Staff, StaffAttendance
from app.core.pagination import PageParams
from app.core.schemas import Page
from app.core.tenant_scope import TenantScope

from .schemas import StaffCreate, StaffResponse, StaffUpdate

logger = get_logger("staff")

_REFERENCES = (
    ("role_id", Role, "Invalid role"),
    ("department_id", Department, "Invalid department"),
    ("designation_id", Designation, "Invalid designation"),
)


def _staff_stmt(scope: TenantScope):
    return (
        select(Staff, Role.name, Department.name, Designation.name)
        .outerjoin(Role, Role.id == Staff.role_id)
        .outerjoin(Department, Department.id == Staff.department_id)
        .outerjoin(Designation, Designation.id == Staff.designation_id)
        .where(scope.where(Staff))
    )


def _row_to_response(row) -> StaffResponse:
    staff, role_name, department_name, designation_name = row
    data = StaffResponse.model_validate(staff)
    data.role_name = role_name
    data.department_name = department_name
    data.designation_name = designation_name
    return data


async def _validate_references(scope: TenantScope, values: dict) -> None:
    for field, model, message in _REFERENCES:
        ref_id = values.get(field)
        if ref_id is not None and await scope.get(model, ref_id) is None:
            raise ValidationFailed(message)


async def generate_employee_id(scope: TenantScope) -> str:
    """Next <CODE>-<YY>-<NNNN> for the school, based on the most recently created staff row."""
    school = await scope.db.get(School, scope.school_id)
    latest = await scope.db.execute(
        select(Staff.employee_id).where(scope.where(Staff)).order_by(Staff.created_at.desc()).limit(1)
    )
    next_seq = trailing_number(latest.scalar()) + 1
    year = datetime.utcnow().year

    async def taken(candidate: str) -> bool:
        return await scope.exists(Staff, Staff.employee_id == candidate)

    return await first_free(
        next_seq,
        lambda seq: format_employee_id(school.code if school else None, year, seq),
        taken,
    )


async def list_staff(
    scope: TenantScope,
    params: PageParams,
    search: Optional[str] = None,
    department_id: Optional[UUID] = None,
    designation_id: Optional[UUID] = None,
    role_id: Optional[UUID] = None,
    is_active: Optional[bool] = None,
) -> Page:
    stmt = _staff_stmt(scope)
    if search:
        like = f"%{search.strip()}%"
        stmt = stmt.where(
            or_(
                Staff.first_name.ilike(like),
                Staff.last_name.ilike(like),
                Staff.employee_id.ilike(like),
                Staff.email.ilike(like),
                Staff.phone.ilike(like),
            )
        )
    if department_id is not None:
        stmt = stmt.where(Staff.department_id == department_id)
    if designation_id is not None:
        stmt = stmt.where(Staff.designation_id == designation_id)
    if role_id is not None:
        stmt = stmt.where(Staff.role_id == role_id)
    if is_active is not None:
        stmt = stmt.where(Staff.is_active.is_(is_active))
    stmt = stmt.order_by(Staff.first_name, Staff.last_name)
    page = await scope.paginate(stmt, params, scalars=False)
    return page.map(_row_to_response)


async def get_staff(scope: TenantScope, staff_id: UUID) -> StaffResponse:
    await scope.get_or_404(Staff, staff_id, "Staff")
    row = (await scope.db.execute(_staff_stmt(scope).where(Staff.id == staff_id))).one()
    return _row_to_response(row)


async def create_staff(scope: TenantScope, payload: StaffCreate) -> StaffResponse:
    """Create a staff member; generates employee_id when omitted and optionally a login user."""
    data = payload.model_dump(exclude={"employee_id", "password"})
    await _validate_references(scope, data)

    if payload.employee_id:
        employee_id = payload.employee_id.strip()
        await scope.ensure_unique(Staff, "Employee ID already exists", Staff.employee_id == employee_id)
    else:
        employee_id = await generate_employee_id(scope)

    user_id = None
    if payload.password:
        await scope.ensure_unique(User, "Email already exists", func.lower(User.email) == payload.email.lower())
        user = scope.add(
            User(
                username=employee_id,
                email=payload.email,
                password_hash=hash_password(payload.password),
                role_id=payload.role_id,
                is_active=True,
            )
        )
        await scope.db.flush()
        user_id = user.id

    obj = scope.add(Staff(**data, employee_id=employee_id, user_id=user_id, is_active=True))
    try:
        await scope.db.commit()
    except IntegrityError:
        await scope.db.rollback()
        raise ConflictError("Employee ID already exists")
    logger.info("Staff %s created for school %s", employee_id, scope.school_id)
    return await get_staff(scope, obj.id)


async def update_staff(scope: TenantScope, staff_id: UUID, payload: StaffUpdate) -> StaffResponse:
    obj = await scope.get_or_404(Staff, staff_id, "Staff")
    data = payload.model_dump(exclude_unset=True)
    await _validate_references(scope, data)
    if data.get("first_name") is None:
        data.pop("first_name", None)
    if data.get("is_active") is None:
        data.pop("is_active", None)
    for field, value in data.items():
        setattr(obj, field, value)
    await scope.db.commit()
    return await get_staff(scope, obj.id)


async def delete_staff(scope: TenantScope, staff_id: UUID) -> None:
    obj = await scope.get_or_404(Staff, staff_id, "Staff")
    for mark in await scope.all(scope.select(StaffAttendance, StaffAttendance.staff_id == obj.id)):
        await scope.db.delete(mark)
    await scope.db.flush()
    await scope.db.delete(obj)
    await scope.db.commit()

"""
Lesson plans: one planned lesson of a subject, optionally for a class-section
and a staff member. Status is an open string (pending, completed, ...).
"""
from datetime import date
from typing import Optional
from uuid import UUID

from sqlalchemy import or_, select

from app.api.v1.students.service import resolve_class_section
from app.core.app_logger import get_logger
from app.core.exceptions import NotFoundError, ValidationFailed
from app.core.models import ClassSection, LessonPlan, SchoolClass, Section, Staff, Subject
from app.core.pagination import PageParams
from app.core.schemas import Page
from app.core.tenant_scope import TenantScope

from .schemas import LessonPlanCreate, LessonPlanResponse, LessonPlanUpdate

logger = get_logger("lesson_plans")


def _plan_stmt(scope: TenantScope):
    return (
        select(LessonPlan, ClassSection, SchoolClass.name, Section.name, Subject.name, Staff)
        .outerjoin(ClassSection, ClassSection.id == LessonPlan.class_section_id)
        .outerjoin(SchoolClass, SchoolClass.id == ClassSection.class_id)
        .outerjoin(Section, Section.id == ClassSection.section_id)
        .outerjoin(Subject, Subject.id == LessonPlan.subject_id)
        .outerjoin(Staff, Staff.id == LessonPlan.staff_id)
        .where(scope.where(LessonPlan))
    )


def _row_to_response(row) -> LessonPlanResponse:
    plan, class_section, class_name, section_name, subject_name, staff = row
    data = LessonPlanResponse.model_validate(plan)
    if class_section is not None:
        data.class_id = class_section.class_id
        data.section_id = class_section.section_id
        data.class_name = class_name
        data.section_name = section_name
    data.subject_name = subject_name
    if staff is not None:
        data.staff_name = f"{staff.first_name} {staff.last_name or ''}".strip()
    return data


async def _validate_refs(scope: TenantScope, subject_id: Optional[UUID], staff_id: Optional[UUID]) -> None:
    if subject_id is not None and not await scope.exists(Subject, Subject.id == subject_id):
        raise ValidationFailed("Invalid subject")
    if staff_id is not None and not await scope.exists(Staff, Staff.id == staff_id):
        raise ValidationFailed("Invalid staff")


async def list_lesson_plans(
    scope: TenantScope,
    params: PageParams,
    search: Optional[str] = None,
    class_id: Optional[UUID] = None,
    section_id: Optional[UUID] = None,
    subject_id: Optional[UUID] = None,
    staff_id: Optional[UUID] = None,
    status: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> Page:
    stmt = _plan_stmt(scope)
    if search:
        like = f"%{search.strip()}%"
        stmt = stmt.where(or_(LessonPlan.lesson_name.ilike(like), LessonPlan.sub_topic.ilike(like)))
    if class_id is not None:
        stmt = stmt.where(ClassSection.class_id == class_id)
    if section_id is not None:
        stmt = stmt.where(ClassSection.section_id == section_id)
    if subject_id is not None:
        stmt = stmt.where(LessonPlan.subject_id == subject_id)
    if staff_id is not None:
        stmt = stmt.where(LessonPlan.staff_id == staff_id)
    if status:
        stmt = stmt.where(LessonPlan.status == status)
    if start_date is not None:
        stmt = stmt.where(LessonPlan.lesson_date >= start_date)
    if end_date is not None:
        stmt = stmt.where(LessonPlan.lesson_date <= end_date)
    stmt = stmt.order_by(LessonPlan.lesson_date.desc(), LessonPlan.created_at.desc())
    page = await scope.paginate(stmt, params, scalars=False)
    return page.map(_row_to_response)


async def get_lesson_plan(scope: TenantScope, plan_id: UUID) -> LessonPlanResponse:
    row = (await scope.db.execute(_plan_stmt(scope).where(LessonPlan.id == plan_id))).first()
    if row is None:
        raise NotFoundError("Lesson plan not found")
    return _row_to_response(row)


async def create_lesson_plan(scope: TenantScope, user_id: UUID, payload: LessonPlanCreate) -> LessonPlanResponse:
    await _validate_refs(scope, payload.subject_id, payload.staff_id)
    class_section_id = None
    if payload.class_id is not None:
        class_section_id = (await resolve_class_section(scope, payload.class_id, payload.section_id)).id
    data = payload.model_dump(exclude={"class_id", "section_id"})
    data["lesson_name"] = data["lesson_name"].strip()
    plan = scope.add(LessonPlan(**data, class_section_id=class_section_id, created_by=user_id))
    await scope.db.commit()
    logger.info("Lesson plan %s created for subject %s", plan.id, payload.subject_id)
    return await get_lesson_plan(scope, plan.id)


async def update_lesson_plan(scope: TenantScope, plan_id: UUID, payload: LessonPlanUpdate) -> LessonPlanResponse:
    plan = await scope.get_or_404(LessonPlan, plan_id, "Lesson plan")
    data = payload.model_dump(exclude_unset=True, exclude={"class_id", "section_id"})
    await _validate_refs(scope, data.get("subject_id"), data.get("staff_id"))

    if payload.model_fields_set & {"class_id", "section_id"}:
        if payload.class_id is None and payload.section_id is None:
            plan.class_section_id = None
        else:
            current = await scope.db.get(ClassSection, plan.class_section_id) if plan.class_section_id else None
            class_id = payload.class_id or (current.class_id if current else None)
            section_id = payload.section_id or (current.section_id if current else None)
            if class_id is None or section_id is None:
                raise ValidationFailed("classId and sectionId must be given together")
            plan.class_section_id = (await resolve_class_section(scope, class_id, section_id)).id

    if data.get("lesson_name"):
        data["lesson_name"] = data["lesson_name"].strip()
    for field, value in data.items():
        if field in ("subject_id", "lesson_name", "lesson_date", "status") and value is None:
            continue
        setattr(plan, field, value)
    await scope.db.commit()
    return await get_lesson_plan(scope, plan.id)


async def delete_lesson_plan(scope: TenantScope, plan_id: UUID) -> None:
    plan = await scope.get_or_404(LessonPlan, plan_id, "Lesson plan")
    await scope.db.delete(plan)
    await scope.db.commit()

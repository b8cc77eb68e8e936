from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import and_, delete, or_, select
from sqlalchemy.exc import IntegrityError

from app.api.v1.academic_sessions.service import get_active_session
from app.core.app_logger import get_logger
from app.core.exceptions import ConflictError, NotFoundError, ValidationFailed
from app.core.identifiers import admission_sequence, first_free, format_admission_no
from app.core.models import (
    AcademicSession,
    BookIssue,
    ClassSection,
    ExamResult,
    FeePayment,
    HomeworkSubmission,
    LibraryMember,
    Parent,
    SchoolClass,
    SchoolHouse,
    Section,
    Student,
    StudentAttendance,
    StudentCategory,
    StudentFeesMaster,
    StudentSession,
)
from app.core.pagination import PageParams
from app.core.schemas import Page
from app.core.tenant_scope import TenantScope

from .schemas import StudentCreate, StudentResponse, StudentUpdate

logger = get_logger("students")


def _student_stmt(scope: TenantScope, session_id: Optional[UUID]):
    """Students with their enrollment (if any) in session_id."""
    return (
        select(Student, StudentSession, ClassSection, SchoolClass.name, Section.name)
        .outerjoin(
            StudentSession,
            and_(StudentSession.student_id == Student.id, StudentSession.session_id == session_id),
        )
        .outerjoin(ClassSection, ClassSection.id == StudentSession.class_section_id)
        .outerjoin(SchoolClass, SchoolClass.id == ClassSection.class_id)
        .outerjoin(Section, Section.id == ClassSection.section_id)
        .where(scope.where(Student))
    )


def _row_to_response(row) -> StudentResponse:
    student, enrollment, class_section, class_name, section_name = row
    data = StudentResponse.model_validate(student)
    if enrollment is not None:
        data.student_session_id = enrollment.id
        data.session_id = enrollment.session_id
        data.roll_no = enrollment.roll_no
    if class_section is not None:
        data.class_id = class_section.class_id
        data.section_id = class_section.section_id
        data.class_name = class_name
        data.section_name = section_name
    return data


async def _resolve_session_id(scope: TenantScope, session_id: Optional[UUID]) -> Optional[UUID]:
    if session_id is not None:
        await scope.get_or_404(AcademicSession, session_id, "Session")
        return session_id
    active = await get_active_session(scope)
    return active.id if active else None


async def resolve_class_section(scope: TenantScope, class_id: UUID, section_id: UUID) -> ClassSection:
    result = await scope.db.execute(
        scope.select(ClassSection, ClassSection.class_id == class_id, ClassSection.section_id == section_id)
    )
    class_section = result.scalar_one_or_none()
    if class_section is None:
        raise ValidationFailed("Section is not assigned to this class")
    return class_section


async def _ensure_roll_free(
    scope: TenantScope,
    class_section_id: UUID,
    session_id: UUID,
    roll_no: Optional[str],
    exclude_id: Optional[UUID] = None,
) -> None:
    if not roll_no:
        return
    await scope.ensure_unique(
        StudentSession,
        "Roll number already exists in this section",
        StudentSession.class_section_id == class_section_id,
        StudentSession.session_id == session_id,
        StudentSession.roll_no == roll_no,
        exclude_id=exclude_id,
    )


async def _validate_parent(scope: TenantScope, parent_id: Optional[UUID]) -> None:
    if parent_id is not None and await scope.get(Parent, parent_id) is None:
        raise ValidationFailed("Invalid parent")


async def _validate_groupings(scope: TenantScope, data: dict) -> None:
    """Category and house references must belong to the caller's school."""
    if data.get("category_id") is not None and await scope.get(StudentCategory, data["category_id"]) is None:
        raise ValidationFailed("Invalid student category")
    if data.get("school_house_id") is not None and await scope.get(SchoolHouse, data["school_house_id"]) is None:
        raise ValidationFailed("Invalid school house")


async def generate_admission_no(scope: TenantScope) -> str:
    """Next YYYYNNNN: current year plus the latest admission's sequence + 1, skipping taken values."""
    latest = await scope.db.execute(
        select(Student.admission_no).where(scope.where(Student)).order_by(Student.created_at.desc()).limit(1)
    )
    next_seq = admission_sequence(latest.scalar()) + 1
    year = datetime.utcnow().year

    async def taken(candidate: str) -> bool:
        return await scope.exists(Student, Student.admission_no == candidate)

    return await first_free(next_seq, lambda seq: format_admission_no(year, seq), taken)


async def list_students(
    scope: TenantScope,
    params: PageParams,
    search: Optional[str] = None,
    class_id: Optional[UUID] = None,
    section_id: Optional[UUID] = None,
    session_id: Optional[UUID] = None,
    is_active: Optional[bool] = None,
    category_id: Optional[UUID] = None,
    school_house_id: Optional[UUID] = None,
) -> Page:
    target_session = await _resolve_session_id(scope, session_id)
    stmt = _student_stmt(scope, target_session)
    if search:
        like = f"%{search.strip()}%"
        stmt = stmt.where(
            or_(
                Student.first_name.ilike(like),
                Student.last_name.ilike(like),
                Student.admission_no.ilike(like),
                Student.phone.ilike(like),
                Student.guardian_phone.ilike(like),
            )
        )
    if class_id is not None:
        stmt = stmt.where(ClassSection.class_id == class_id)
    if section_id is not None:
        stmt = stmt.where(ClassSection.section_id == section_id)
    if is_active is not None:
        stmt = stmt.where(Student.is_active.is_(is_active))
    if category_id is not None:
        stmt = stmt.where(Student.category_id == category_id)
    if school_house_id is not None:
        stmt = stmt.where(Student.school_house_id == school_house_id)
    stmt = stmt.order_by(Student.admission_no)
    page = await scope.paginate(stmt, params, scalars=False)
    return page.map(_row_to_response)


async def get_student(scope: TenantScope, student_id: UUID, session_id: Optional[UUID] = None) -> StudentResponse:
    target_session = await _resolve_session_id(scope, session_id)
    row = (await scope.db.execute(_student_stmt(scope, target_session).where(Student.id == student_id))).first()
    if row is None:
        raise NotFoundError("Student not found")
    return _row_to_response(row)


async def create_student(scope: TenantScope, payload: StudentCreate) -> StudentResponse:
    """Admit a student: Student row and its StudentSession are committed together or not at all."""
    session_id = await _resolve_session_id(scope, payload.session_id)
    if session_id is None:
        raise ValidationFailed("No active session found")
    class_section = await resolve_class_section(scope, payload.class_id, payload.section_id)
    await _validate_parent(scope, payload.parent_id)
    await _validate_groupings(scope, payload.model_dump(include={"category_id", "school_house_id"}))
    roll_no = payload.roll_no.strip() if payload.roll_no else None
    await _ensure_roll_free(scope, class_section.id, session_id, roll_no)

    if payload.admission_no:
        admission_no = payload.admission_no.strip()
        await scope.ensure_unique(Student, "Admission number already exists", Student.admission_no == admission_no)
    else:
        admission_no = await generate_admission_no(scope)

    data = payload.model_dump(exclude={"admission_no", "class_id", "section_id", "session_id", "roll_no"})
    student = scope.add(Student(**data, admission_no=admission_no, is_active=True))
    try:
        await scope.db.flush()
        scope.add(
            StudentSession(
                student_id=student.id,
                session_id=session_id,
                class_section_id=class_section.id,
                roll_no=roll_no,
                is_active=True,
            )
        )
        await scope.db.commit()
    except IntegrityError:
        await scope.db.rollback()
        raise ConflictError("Admission number already exists")
    logger.info("Student %s admitted for school %s", admission_no, scope.school_id)
    return await get_student(scope, student.id, session_id)


async def update_student(scope: TenantScope, student_id: UUID, payload: StudentUpdate) -> StudentResponse:
    student = await scope.get_or_404(Student, student_id, "Student")
    data = payload.model_dump(exclude_unset=True, exclude={"class_id", "section_id", "roll_no"})
    if "parent_id" in data:
        await _validate_parent(scope, data["parent_id"])
    await _validate_groupings(scope, data)
    for field in ("first_name", "is_active"):
        if field in data and data[field] is None:
            data.pop(field)
    for field, value in data.items():
        setattr(student, field, value)

    enrollment_fields = payload.model_fields_set & {"class_id", "section_id", "roll_no"}
    if enrollment_fields:
        await _update_enrollment(scope, student, payload)

    await scope.db.commit()
    return await get_student(scope, student.id)


async def _update_enrollment(scope: TenantScope, student: Student, payload: StudentUpdate) -> None:
    active = await get_active_session(scope)
    if active is None:
        raise ValidationFailed("No active session found")
    result = await scope.db.execute(
        scope.select(StudentSession, StudentSession.student_id == student.id, StudentSession.session_id == active.id)
    )
    enrollment = result.scalar_one_or_none()

    class_section_id = enrollment.class_section_id if enrollment else None
    if payload.class_id is not None or payload.section_id is not None:
        current = await scope.db.get(ClassSection, class_section_id) if class_section_id else None
        class_id = payload.class_id or (current.class_id if current else None)
        section_id = payload.section_id or (current.section_id if current else None)
        if class_id is None or section_id is None:
            raise ValidationFailed("classId and sectionId are required")
        class_section_id = (await resolve_class_section(scope, class_id, section_id)).id
    if class_section_id is None:
        raise ValidationFailed("classId and sectionId are required")

    roll_no = enrollment.roll_no if enrollment else None
    if "roll_no" in payload.model_fields_set:
        roll_no = payload.roll_no.strip() if payload.roll_no else None
    await _ensure_roll_free(
        scope, class_section_id, active.id, roll_no, exclude_id=enrollment.id if enrollment else None
    )

    if enrollment is None:
        scope.add(
            StudentSession(
                student_id=student.id,
                session_id=active.id,
                class_section_id=class_section_id,
                roll_no=roll_no,
                is_active=True,
            )
        )
    else:
        enrollment.class_section_id = class_section_id
        enrollment.roll_no = roll_no


async def delete_student(scope: TenantScope, student_id: UUID) -> None:
    """Hard delete with enrollment-level records. Refused once money or library books are involved."""
    student = await scope.get_or_404(Student, student_id, "Student")
    if await scope.count(FeePayment, FeePayment.student_id == student.id):
        raise ConflictError("Cannot delete student with fee payments")
    member_ids = select(LibraryMember.id).where(scope.where(LibraryMember), LibraryMember.student_id == student.id)
    if await scope.count(BookIssue, BookIssue.member_id.in_(member_ids)):
        raise ConflictError("Cannot delete student with library issues")

    enrollment_ids = select(StudentSession.id).where(
        scope.where(StudentSession), StudentSession.student_id == student.id
    )
    await scope.db.execute(
        delete(StudentFeesMaster)
        .where(scope.where(StudentFeesMaster), StudentFeesMaster.student_session_id.in_(enrollment_ids))
        .execution_options(synchronize_session=False)
    )
    for model in (StudentAttendance, ExamResult, HomeworkSubmission, LibraryMember, StudentSession):
        await scope.db.execute(
            delete(model)
            .where(scope.where(model), model.student_id == student.id)
            .execution_options(synchronize_session=False)
        )
    await scope.db.delete(student)
    await scope.db.commit()

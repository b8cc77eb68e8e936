"""
Homework and submissions.

A submission is pending until a teacher evaluates it once (accepted or
rejected). Marks, feedback and the evaluator are written only at that step;
a pending submission may be re-submitted, which replaces its content.
"""
from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError

from app.api.v1.academic_sessions.service import get_active_session
from app.api.v1.students.service import resolve_class_section
from app.core.app_logger import get_logger
from app.core.enums import SubmissionStatus
from app.core.exceptions import ConflictError, NotFoundError, ValidationFailed
from app.core.models import Homework, HomeworkSubmission, SchoolClass, Section, Student, Subject
from app.core.pagination import PageParams
from app.core.schemas import Page
from app.core.tenant_scope import TenantScope

from .schemas import (
    HomeworkCreate,
    HomeworkResponse,
    HomeworkUpdate,
    SubmissionCreate,
    SubmissionEvaluate,
    SubmissionResponse,
)

logger = get_logger("homework")


def _homework_stmt(scope: TenantScope):
    submissions = (
        select(HomeworkSubmission.homework_id, func.count(HomeworkSubmission.id).label("cnt"))
        .group_by(HomeworkSubmission.homework_id)
        .subquery()
    )
    return (
        select(Homework, SchoolClass.name, Section.name, Subject.name, submissions.c.cnt)
        .join(SchoolClass, SchoolClass.id == Homework.class_id)
        .outerjoin(Section, Section.id == Homework.section_id)
        .outerjoin(Subject, Subject.id == Homework.subject_id)
        .outerjoin(submissions, submissions.c.homework_id == Homework.id)
        .where(scope.where(Homework))
    )


def _homework_to_response(row) -> HomeworkResponse:
    hw, class_name, section_name, subject_name, count = row
    return HomeworkResponse(
        id=hw.id,
        school_id=hw.school_id,
        session_id=hw.session_id,
        class_id=hw.class_id,
        class_name=class_name,
        section_id=hw.section_id,
        section_name=section_name,
        subject_id=hw.subject_id,
        subject_name=subject_name,
        title=hw.title,
        description=hw.description,
        homework_date=hw.homework_date,
        submission_date=hw.submission_date,
        created_by=hw.created_by,
        submission_count=count or 0,
        created_at=hw.created_at,
        updated_at=hw.updated_at,
    )


async def _validate_target(
    scope: TenantScope, class_id: UUID, section_id: Optional[UUID], subject_id: Optional[UUID]
) -> None:
    if section_id is not None:
        await resolve_class_section(scope, class_id, section_id)
    elif not await scope.exists(SchoolClass, SchoolClass.id == class_id):
        raise ValidationFailed("Invalid class")
    if subject_id is not None and not await scope.exists(Subject, Subject.id == subject_id):
        raise ValidationFailed("Invalid subject")


async def list_homework(
    scope: TenantScope,
    params: PageParams,
    class_id: Optional[UUID] = None,
    section_id: Optional[UUID] = None,
    subject_id: Optional[UUID] = None,
    search: Optional[str] = None,
) -> Page:
    stmt = _homework_stmt(scope)
    if class_id is not None:
        stmt = stmt.where(Homework.class_id == class_id)
    if section_id is not None:
        stmt = stmt.where(Homework.section_id == section_id)
    if subject_id is not None:
        stmt = stmt.where(Homework.subject_id == subject_id)
    if search:
        stmt = stmt.where(Homework.title.ilike(f"%{search.strip()}%"))
    stmt = stmt.order_by(Homework.homework_date.desc(), Homework.created_at.desc())
    page = await scope.paginate(stmt, params, scalars=False)
    return page.map(_homework_to_response)


async def get_homework(scope: TenantScope, homework_id: UUID) -> HomeworkResponse:
    row = (await scope.db.execute(_homework_stmt(scope).where(Homework.id == homework_id))).first()
    if row is None:
        raise NotFoundError("Homework not found")
    return _homework_to_response(row)


async def create_homework(scope: TenantScope, user_id: UUID, payload: HomeworkCreate) -> HomeworkResponse:
    await _validate_target(scope, payload.class_id, payload.section_id, payload.subject_id)
    session = await get_active_session(scope)
    data = payload.model_dump()
    data["title"] = data["title"].strip()
    hw = scope.add(Homework(**data, session_id=session.id if session else None, created_by=user_id))
    await scope.db.commit()
    return await get_homework(scope, hw.id)


async def update_homework(scope: TenantScope, homework_id: UUID, payload: HomeworkUpdate) -> HomeworkResponse:
    hw = await scope.get_or_404(Homework, homework_id, "Homework")
    data = payload.model_dump(exclude_unset=True)
    if "section_id" in data or "subject_id" in data:
        await _validate_target(
            scope,
            hw.class_id,
            data.get("section_id", hw.section_id),
            data.get("subject_id", hw.subject_id),
        )
    if data.get("title"):
        data["title"] = data["title"].strip()
    for field, value in data.items():
        if field in ("title", "homework_date", "submission_date") and value is None:
            continue
        setattr(hw, field, value)
    if hw.submission_date < hw.homework_date:
        raise ValidationFailed("Submission date cannot be before homework date")
    await scope.db.commit()
    return await get_homework(scope, hw.id)


async def delete_homework(scope: TenantScope, homework_id: UUID) -> None:
    hw = await scope.get_or_404(Homework, homework_id, "Homework")
    await scope.db.execute(delete(HomeworkSubmission).where(HomeworkSubmission.homework_id == hw.id))
    await scope.db.delete(hw)
    await scope.db.commit()


# --- Submissions ---
def _submission_stmt(scope: TenantScope):
    return (
        select(HomeworkSubmission, Homework.title, Student)
        .join(Homework, Homework.id == HomeworkSubmission.homework_id)
        .join(Student, Student.id == HomeworkSubmission.student_id)
        .where(scope.where(HomeworkSubmission))
    )


def _submission_to_response(row) -> SubmissionResponse:
    sub, title, student = row
    name = f"{student.first_name} {student.last_name}".strip() if student.last_name else student.first_name
    return SubmissionResponse(
        id=sub.id,
        homework_id=sub.homework_id,
        homework_title=title,
        student_id=student.id,
        admission_no=student.admission_no,
        student_name=name,
        document=sub.document,
        message=sub.message,
        status=sub.status,
        marks=sub.marks,
        feedback=sub.feedback,
        submitted_at=sub.submitted_at,
        evaluated_at=sub.evaluated_at,
        evaluated_by=sub.evaluated_by,
    )


async def _get_submission(scope: TenantScope, submission_id: UUID) -> SubmissionResponse:
    row = (await scope.db.execute(_submission_stmt(scope).where(HomeworkSubmission.id == submission_id))).first()
    if row is None:
        raise NotFoundError("Submission not found")
    return _submission_to_response(row)


async def list_submissions(
    scope: TenantScope,
    params: PageParams,
    homework_id: Optional[UUID] = None,
    student_id: Optional[UUID] = None,
    status: Optional[SubmissionStatus] = None,
) -> Page:
    stmt = _submission_stmt(scope)
    if homework_id is not None:
        stmt = stmt.where(HomeworkSubmission.homework_id == homework_id)
    if student_id is not None:
        stmt = stmt.where(HomeworkSubmission.student_id == student_id)
    if status is not None:
        stmt = stmt.where(HomeworkSubmission.status == status.value)
    page = await scope.paginate(stmt.order_by(HomeworkSubmission.submitted_at.desc()), params, scalars=False)
    return page.map(_submission_to_response)


async def submit_homework(scope: TenantScope, payload: SubmissionCreate) -> tuple:
    """Returns (submission, created). Re-submitting replaces a pending submission."""
    hw = await scope.get_or_404(Homework, payload.homework_id, "Homework")
    await scope.get_or_404(Student, payload.student_id, "Student")

    existing = (
        await scope.db.execute(
            scope.select(
                HomeworkSubmission,
                HomeworkSubmission.homework_id == hw.id,
                HomeworkSubmission.student_id == payload.student_id,
            )
        )
    ).scalar_one_or_none()
    if existing is not None:
        if existing.status != SubmissionStatus.PENDING.value:
            raise ConflictError("Submission already evaluated")
        existing.document = payload.document
        existing.message = payload.message
        existing.submitted_at = datetime.utcnow()
        await scope.db.commit()
        return await _get_submission(scope, existing.id), False

    sub = scope.add(
        HomeworkSubmission(
            homework_id=hw.id,
            student_id=payload.student_id,
            document=payload.document,
            message=payload.message,
            status=SubmissionStatus.PENDING.value,
            submitted_at=datetime.utcnow(),
        )
    )
    try:
        await scope.db.commit()
    except IntegrityError:
        await scope.db.rollback()
        raise ConflictError("Homework already submitted")
    return await _get_submission(scope, sub.id), True


async def evaluate_submission(
    scope: TenantScope,
    user_id: UUID,
    submission_id: UUID,
    payload: SubmissionEvaluate,
) -> SubmissionResponse:
    sub = await scope.get_or_404(HomeworkSubmission, submission_id, "Submission")
    if sub.status != SubmissionStatus.PENDING.value:
        raise ConflictError("Submission already evaluated")
    sub.status = payload.status.value
    sub.marks = payload.marks
    sub.feedback = payload.feedback
    sub.evaluated_at = datetime.utcnow()
    sub.evaluated_by = user_id
    await scope.db.commit()
    logger.info("Submission %s evaluated as %s", sub.id, sub.status)
    return await _get_submission(scope, sub.id)

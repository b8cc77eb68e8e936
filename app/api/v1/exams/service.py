from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy import and_, delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload

from app.api.v1.academic_sessions.service import get_active_session
from app.api.v1.students.service import resolve_class_section
from app.core.exceptions import ConflictError, NotFoundError, ValidationFailed
from app.core.models import (
    AcademicSession,
    Exam,
    ExamGroupExam,
    ExamResult,
    ExamSubject,
    Student,
    StudentSession,
    Subject,
)
from app.core.pagination import PageParams
from app.core.schemas import Page
from app.core.tenant_scope import TenantScope

from .schemas import (
    ExamCreate,
    ExamResponse,
    ExamResultRow,
    ExamResultSheet,
    ExamResultsSave,
    ExamSubjectIn,
    ExamSubjectResponse,
    ExamUpdate,
    SaveResult,
)


def _schedule_key(es: ExamSubject):
    return (es.exam_date is None, es.exam_date, es.start_time is None, es.start_time)


async def _subjects_by_id(scope: TenantScope) -> Dict[UUID, Subject]:
    return {s.id: s for s in await scope.all(scope.select(Subject))}


def _exam_subject_response(es: ExamSubject, subjects: Dict[UUID, Subject]) -> ExamSubjectResponse:
    data = ExamSubjectResponse.model_validate(es)
    subject = subjects.get(es.subject_id)
    if subject is not None:
        data.subject_name = subject.name
        data.subject_code = subject.code
    return data


def _exam_to_response(exam: Exam, subjects: Dict[UUID, Subject]) -> ExamResponse:
    return ExamResponse(
        id=exam.id,
        school_id=exam.school_id,
        session_id=exam.session_id,
        name=exam.name,
        description=exam.description,
        is_published=exam.is_published,
        is_active=exam.is_active,
        subjects=[_exam_subject_response(es, subjects) for es in sorted(exam.subjects, key=_schedule_key)],
        created_at=exam.created_at,
        updated_at=exam.updated_at,
    )


async def _load_exam(scope: TenantScope, exam_id: UUID) -> Exam:
    stmt = (
        scope.select(Exam, Exam.id == exam_id)
        .options(selectinload(Exam.subjects))
        .execution_options(populate_existing=True)
    )
    exam = (await scope.db.execute(stmt)).scalar_one_or_none()
    if exam is None:
        raise NotFoundError("Exam not found")
    return exam


async def _validate_subjects(scope: TenantScope, items: List[ExamSubjectIn]) -> None:
    ids = [i.subject_id for i in items]
    if len(set(ids)) != len(ids):
        raise ValidationFailed("A subject can appear only once in an exam")
    if ids and await scope.count(Subject, Subject.id.in_(ids)) != len(ids):
        raise ValidationFailed("Invalid subject")


def _apply_subject(es: ExamSubject, item: ExamSubjectIn) -> None:
    es.exam_date = item.exam_date
    es.start_time = item.start_time
    es.duration_minutes = item.duration_minutes
    es.room_no = item.room_no
    es.max_marks = item.max_marks
    es.min_marks = item.min_marks


async def list_exams(
    scope: TenantScope,
    params: PageParams,
    search: Optional[str] = None,
    session_id: Optional[UUID] = None,
) -> Page:
    stmt = scope.select(Exam).options(selectinload(Exam.subjects))
    if search:
        stmt = stmt.where(Exam.name.ilike(f"%{search.strip()}%"))
    if session_id is not None:
        stmt = stmt.where(Exam.session_id == session_id)
    page = await scope.paginate(stmt.order_by(Exam.created_at.desc()), params)
    subjects = await _subjects_by_id(scope)
    return page.map(lambda e: _exam_to_response(e, subjects))


async def get_exam(scope: TenantScope, exam_id: UUID) -> ExamResponse:
    exam = await _load_exam(scope, exam_id)
    return _exam_to_response(exam, await _subjects_by_id(scope))


async def get_exam_schedule(scope: TenantScope, exam_id: UUID) -> List[ExamSubjectResponse]:
    """Exam papers ordered by date then start time; undated papers last."""
    return (await get_exam(scope, exam_id)).subjects


async def create_exam(scope: TenantScope, payload: ExamCreate) -> ExamResponse:
    if payload.session_id is not None:
        await scope.get_or_404(AcademicSession, payload.session_id, "Session")
        session_id = payload.session_id
    else:
        active = await get_active_session(scope)
        session_id = active.id if active else None
    await _validate_subjects(scope, payload.subjects)

    subjects = []
    for item in payload.subjects:
        es = ExamSubject(subject_id=item.subject_id)
        _apply_subject(es, item)
        subjects.append(es)
    exam = scope.add(
        Exam(
            name=payload.name.strip(),
            description=payload.description,
            session_id=session_id,
            is_published=payload.is_published,
            is_active=True,
            subjects=subjects,
        )
    )
    await scope.db.commit()
    return await get_exam(scope, exam.id)


async def update_exam(scope: TenantScope, exam_id: UUID, payload: ExamUpdate) -> ExamResponse:
    """Partial update. subjects, when given, is the desired set: existing papers are updated in place
    (keeping their results), new ones added, and missing ones removed unless they already have results."""
    exam = await _load_exam(scope, exam_id)
    if payload.name is not None:
        exam.name = payload.name.strip()
    if "description" in payload.model_fields_set:
        exam.description = payload.description
    if payload.is_published is not None:
        exam.is_published = payload.is_published
    if payload.is_active is not None:
        exam.is_active = payload.is_active

    if payload.subjects is not None:
        await _validate_subjects(scope, payload.subjects)
        wanted = {item.subject_id: item for item in payload.subjects}
        for es in list(exam.subjects):
            if es.subject_id in wanted:
                _apply_subject(es, wanted.pop(es.subject_id))
                continue
            if await scope.count(ExamResult, ExamResult.exam_subject_id == es.id):
                raise ConflictError("Cannot remove exam subject with results")
            exam.subjects.remove(es)
        for subject_id, item in wanted.items():
            es = ExamSubject(subject_id=subject_id)
            _apply_subject(es, item)
            exam.subjects.append(es)
    try:
        await scope.db.commit()
    except IntegrityError:
        await scope.db.rollback()
        raise ConflictError("A subject can appear only once in an exam")
    return await get_exam(scope, exam.id)


async def delete_exam(scope: TenantScope, exam_id: UUID) -> None:
    exam = await _load_exam(scope, exam_id)
    subject_ids = [es.id for es in exam.subjects]
    if subject_ids and await scope.count(ExamResult, ExamResult.exam_subject_id.in_(subject_ids)):
        raise ConflictError("Cannot delete exam with results")
    await scope.db.execute(delete(ExamGroupExam).where(ExamGroupExam.exam_id == exam.id))
    await scope.db.delete(exam)
    await scope.db.commit()


# ----- Results -----
async def _load_exam_subject(scope: TenantScope, exam_subject_id: UUID):
    """ExamSubject plus its Exam, only when the exam belongs to the caller's school."""
    row = (
        await scope.db.execute(
            select(ExamSubject, Exam)
            .join(Exam, Exam.id == ExamSubject.exam_id)
            .where(ExamSubject.id == exam_subject_id, scope.where(Exam))
        )
    ).first()
    if row is None:
        raise NotFoundError("Exam subject not found")
    return row


def _full_name(student: Student) -> str:
    return f"{student.first_name} {student.last_name}".strip() if student.last_name else student.first_name


async def get_results(
    scope: TenantScope,
    exam_subject_id: UUID,
    class_id: UUID,
    section_id: UUID,
) -> ExamResultSheet:
    """Mark sheet: the class-section roster in the exam's session with any saved marks."""
    es, exam = await _load_exam_subject(scope, exam_subject_id)
    class_section = await resolve_class_section(scope, class_id, section_id)
    session_id = exam.session_id
    if session_id is None:
        active = await get_active_session(scope)
        if active is None:
            raise ValidationFailed("No active session found")
        session_id = active.id

    stmt = (
        select(StudentSession, Student, ExamResult)
        .join(Student, Student.id == StudentSession.student_id)
        .outerjoin(
            ExamResult,
            and_(ExamResult.student_session_id == StudentSession.id, ExamResult.exam_subject_id == es.id),
        )
        .where(
            scope.where(StudentSession),
            StudentSession.session_id == session_id,
            StudentSession.class_section_id == class_section.id,
        )
        .order_by(StudentSession.roll_no.nullslast(), Student.first_name)
    )
    records = []
    for enrollment, student, result in (await scope.db.execute(stmt)).all():
        passed = None
        if result is not None:
            passed = (
                not result.is_absent
                and result.marks_obtained is not None
                and result.marks_obtained >= es.min_marks
            )
        records.append(
            ExamResultRow(
                student_session_id=enrollment.id,
                student_id=student.id,
                admission_no=student.admission_no,
                student_name=_full_name(student),
                roll_no=enrollment.roll_no,
                result_id=result.id if result else None,
                marks_obtained=result.marks_obtained if result else None,
                is_absent=result.is_absent if result else False,
                passed=passed,
                note=result.note if result else None,
            )
        )
    subject = await scope.get(Subject, es.subject_id)
    return ExamResultSheet(
        exam_id=exam.id,
        exam_subject_id=es.id,
        subject_name=subject.name if subject else None,
        max_marks=es.max_marks,
        min_marks=es.min_marks,
        records=records,
    )


async def save_results(scope: TenantScope, payload: ExamResultsSave) -> SaveResult:
    """Upsert keyed on (exam_subject_id, student_session_id); marks are bounded by the paper's max marks."""
    es, exam = await _load_exam_subject(scope, payload.exam_subject_id)
    entries = {r.student_session_id: r for r in payload.results}
    for r in entries.values():
        if r.marks_obtained is not None and r.marks_obtained > es.max_marks:
            raise ValidationFailed(f"Marks cannot exceed maximum marks ({es.max_marks})")

    criteria = [StudentSession.id.in_(list(entries))]
    if exam.session_id is not None:
        criteria.append(StudentSession.session_id == exam.session_id)
    enrollments = await scope.all(scope.select(StudentSession, *criteria))
    if len(enrollments) != len(entries):
        raise ValidationFailed("Invalid student for this exam")
    student_of = {e.id: e.student_id for e in enrollments}

    existing = {
        r.student_session_id: r
        for r in await scope.all(
            scope.select(
                ExamResult,
                ExamResult.exam_subject_id == es.id,
                ExamResult.student_session_id.in_(list(entries)),
            )
        )
    }
    created = updated = 0
    for enrollment_id, entry in entries.items():
        marks = None if entry.is_absent else entry.marks_obtained
        row = existing.get(enrollment_id)
        if row is None:
            scope.add(
                ExamResult(
                    exam_subject_id=es.id,
                    student_session_id=enrollment_id,
                    student_id=student_of[enrollment_id],
                    marks_obtained=marks,
                    is_absent=entry.is_absent,
                    note=entry.note,
                )
            )
            created += 1
        else:
            row.marks_obtained = marks
            row.is_absent = entry.is_absent
            row.note = entry.note
            updated += 1
    await scope.db.commit()
    return SaveResult(created=created, updated=updated)

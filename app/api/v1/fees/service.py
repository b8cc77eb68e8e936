"""Fees service: fee types, fee groups, class assignment, collection and the due report."""

from collections import defaultdict
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload

from app.api.v1.academic_sessions.service import get_active_session
from app.core.app_logger import get_logger
from app.core.exceptions import ConflictError, NotFoundError, ValidationFailed
from app.core.models import (
    AcademicSession,
    ClassSection,
    FeeGroup,
    FeeGroupType,
    FeePayment,
    FeesMaster,
    FeeType,
    SchoolClass,
    Section,
    Student,
    StudentFeesMaster,
    StudentSession,
)
from app.core.pagination import PageParams
from app.core.schemas import Page
from app.core.tenant_scope import TenantScope

from . import ledger
from .schemas import (
    DueFeeGroup,
    DueFeeLine,
    DueReport,
    DueReportSummary,
    DueSession,
    FeeAssignRequest,
    FeeAssignResult,
    FeeGroupCreate,
    FeeGroupLineIn,
    FeeGroupLineResponse,
    FeeGroupResponse,
    FeeGroupUpdate,
    FeesMasterResponse,
    FeeTypeCreate,
    FeeTypeResponse,
    FeeTypeUpdate,
    LedgerFigures,
    PaymentCreate,
    PaymentResponse,
    StudentDue,
)

logger = get_logger("fees")


def _full_name(student: Student) -> str:
    return f"{student.first_name} {student.last_name}".strip() if student.last_name else student.first_name


# --- Fee types ---
async def list_fee_types(scope: TenantScope, params: PageParams, search: Optional[str] = None) -> Page:
    stmt = scope.select(FeeType)
    if search:
        like = f"%{search.strip()}%"
        stmt = stmt.where(FeeType.name.ilike(like) | FeeType.code.ilike(like))
    page = await scope.paginate(stmt.order_by(FeeType.name), params)
    return page.map(FeeTypeResponse.model_validate)


async def get_fee_type(scope: TenantScope, fee_type_id: UUID) -> FeeTypeResponse:
    return FeeTypeResponse.model_validate(await scope.get_or_404(FeeType, fee_type_id, "Fee type"))


async def create_fee_type(scope: TenantScope, payload: FeeTypeCreate) -> FeeTypeResponse:
    code = payload.code.strip().upper()
    await scope.ensure_unique(FeeType, "Fee type code already exists", FeeType.code == code)
    obj = scope.add(
        FeeType(name=payload.name.strip(), code=code, description=payload.description, is_active=True)
    )
    try:
        await scope.db.commit()
    except IntegrityError:
        await scope.db.rollback()
        raise ConflictError("Fee type code already exists")
    await scope.db.refresh(obj)
    return FeeTypeResponse.model_validate(obj)


async def update_fee_type(scope: TenantScope, fee_type_id: UUID, payload: FeeTypeUpdate) -> FeeTypeResponse:
    obj = await scope.get_or_404(FeeType, fee_type_id, "Fee type")
    if payload.code is not None:
        code = payload.code.strip().upper()
        await scope.ensure_unique(FeeType, "Fee type code already exists", FeeType.code == code, exclude_id=obj.id)
        obj.code = code
    if payload.name is not None:
        obj.name = payload.name.strip()
    if "description" in payload.model_fields_set:
        obj.description = payload.description
    if payload.is_active is not None:
        obj.is_active = payload.is_active
    try:
        await scope.db.commit()
    except IntegrityError:
        await scope.db.rollback()
        raise ConflictError("Fee type code already exists")
    await scope.db.refresh(obj)
    return FeeTypeResponse.model_validate(obj)


async def delete_fee_type(scope: TenantScope, fee_type_id: UUID) -> None:
    obj = await scope.get_or_404(FeeType, fee_type_id, "Fee type")
    used = await scope.db.execute(select(FeeGroupType.id).where(FeeGroupType.fee_type_id == obj.id).limit(1))
    if used.first() is not None:
        raise ConflictError("Cannot delete fee type used in a fee group")
    await scope.db.delete(obj)
    await scope.db.commit()


# --- Fee groups ---
async def _load_group(scope: TenantScope, group_id: UUID) -> FeeGroup:
    stmt = (
        scope.select(FeeGroup, FeeGroup.id == group_id)
        .options(selectinload(FeeGroup.lines))
        .execution_options(populate_existing=True)
    )
    group = (await scope.db.execute(stmt)).scalar_one_or_none()
    if group is None:
        raise NotFoundError("Fee group not found")
    return group


async def _fee_types_by_id(scope: TenantScope) -> Dict[UUID, FeeType]:
    return {t.id: t for t in await scope.all(scope.select(FeeType))}


def _group_to_response(group: FeeGroup, fee_types: Dict[UUID, FeeType]) -> FeeGroupResponse:
    lines = []
    for line in group.lines:
        fee_type = fee_types.get(line.fee_type_id)
        lines.append(
            FeeGroupLineResponse(
                id=line.id,
                fee_type_id=line.fee_type_id,
                fee_type_name=fee_type.name if fee_type else None,
                fee_type_code=fee_type.code if fee_type else None,
                amount=line.amount,
                due_date=line.due_date,
                fine_type=line.fine_type,
                fine_percent=line.fine_percent,
                fine_amount=line.fine_amount,
            )
        )
    return FeeGroupResponse(
        id=group.id,
        school_id=group.school_id,
        name=group.name,
        description=group.description,
        is_active=group.is_active,
        total_amount=sum((ledger.to_decimal(line.amount) for line in group.lines), Decimal("0")),
        lines=lines,
        created_at=group.created_at,
        updated_at=group.updated_at,
    )


async def _build_lines(scope: TenantScope, lines_in: List[FeeGroupLineIn]) -> List[FeeGroupType]:
    fee_type_ids = [line.fee_type_id for line in lines_in]
    if len(set(fee_type_ids)) != len(fee_type_ids):
        raise ValidationFailed("A fee type can appear only once in a fee group")
    if fee_type_ids and await scope.count(FeeType, FeeType.id.in_(fee_type_ids)) != len(fee_type_ids):
        raise ValidationFailed("Invalid fee type")
    return [
        FeeGroupType(
            fee_type_id=line.fee_type_id,
            amount=line.amount,
            due_date=line.due_date,
            fine_type=line.fine_type.value,
            fine_percent=line.fine_percent,
            fine_amount=line.fine_amount,
        )
        for line in lines_in
    ]


async def list_fee_groups(scope: TenantScope, params: PageParams, search: Optional[str] = None) -> Page:
    stmt = scope.select(FeeGroup).options(selectinload(FeeGroup.lines))
    if search:
        stmt = stmt.where(FeeGroup.name.ilike(f"%{search.strip()}%"))
    page = await scope.paginate(stmt.order_by(FeeGroup.name), params)
    fee_types = await _fee_types_by_id(scope)
    return page.map(lambda g: _group_to_response(g, fee_types))


async def get_fee_group(scope: TenantScope, group_id: UUID) -> FeeGroupResponse:
    group = await _load_group(scope, group_id)
    return _group_to_response(group, await _fee_types_by_id(scope))


async def create_fee_group(scope: TenantScope, payload: FeeGroupCreate) -> FeeGroupResponse:
    name = payload.name.strip()
    await scope.ensure_unique(FeeGroup, "Fee group name already exists", FeeGroup.name == name)
    lines = await _build_lines(scope, payload.lines)
    group = scope.add(FeeGroup(name=name, description=payload.description, is_active=True, lines=lines))
    try:
        await scope.db.commit()
    except IntegrityError:
        await scope.db.rollback()
        raise ConflictError("Fee group name already exists")
    return await get_fee_group(scope, group.id)


async def update_fee_group(scope: TenantScope, group_id: UUID, payload: FeeGroupUpdate) -> FeeGroupResponse:
    """Partial update; when lines are given they replace the group's lines entirely."""
    group = await _load_group(scope, group_id)
    if payload.name is not None:
        name = payload.name.strip()
        await scope.ensure_unique(FeeGroup, "Fee group name already exists", FeeGroup.name == name, exclude_id=group.id)
        group.name = name
    if "description" in payload.model_fields_set:
        group.description = payload.description
    if payload.is_active is not None:
        group.is_active = payload.is_active
    if payload.lines is not None:
        new_lines = await _build_lines(scope, payload.lines)
        # old rows must be gone before re-inserting the same (group, fee type) pairs
        group.lines.clear()
        await scope.db.flush()
        group.lines.extend(new_lines)
    try:
        await scope.db.commit()
    except IntegrityError:
        await scope.db.rollback()
        raise ConflictError("Fee group name already exists")
    return await get_fee_group(scope, group.id)


async def delete_fee_group(scope: TenantScope, group_id: UUID) -> None:
    group = await _load_group(scope, group_id)
    if await scope.count(FeesMaster, FeesMaster.fee_group_id == group.id):
        raise ConflictError("Cannot delete fee group assigned to classes")
    await scope.db.delete(group)
    await scope.db.commit()


# --- Assignment ---
def _enrolled_in_class(scope: TenantScope, class_id: UUID, session_id: UUID):
    return (
        select(StudentSession.id)
        .join(ClassSection, ClassSection.id == StudentSession.class_section_id)
        .where(
            scope.where(StudentSession),
            StudentSession.session_id == session_id,
            ClassSection.class_id == class_id,
        )
    )


async def _master_responses(scope: TenantScope, masters: List[FeesMaster]) -> List[FeesMasterResponse]:
    if not masters:
        return []
    ids = [m.id for m in masters]
    sessions = {s.id: s.name for s in await scope.all(scope.select(AcademicSession))}
    classes = {c.id: c.name for c in await scope.all(scope.select(SchoolClass))}
    groups = {
        g.id: g
        for g in await scope.all(
            scope.select(FeeGroup, FeeGroup.id.in_([m.fee_group_id for m in masters])).options(
                selectinload(FeeGroup.lines)
            )
        )
    }
    counts_stmt = (
        select(StudentFeesMaster.fees_master_id, func.count(StudentFeesMaster.id))
        .where(scope.where(StudentFeesMaster), StudentFeesMaster.fees_master_id.in_(ids))
        .group_by(StudentFeesMaster.fees_master_id)
    )
    counts = {mid: n for mid, n in (await scope.db.execute(counts_stmt)).all()}
    out = []
    for m in masters:
        group = groups.get(m.fee_group_id)
        out.append(
            FeesMasterResponse(
                id=m.id,
                session_id=m.session_id,
                session_name=sessions.get(m.session_id),
                class_id=m.class_id,
                class_name=classes.get(m.class_id),
                fee_group_id=m.fee_group_id,
                fee_group_name=group.name if group else None,
                total_amount=sum((ledger.to_decimal(line.amount) for line in group.lines), Decimal("0"))
                if group
                else Decimal("0"),
                student_count=counts.get(m.id, 0),
                created_at=m.created_at,
            )
        )
    return out


async def assign_fee_group(scope: TenantScope, payload: FeeAssignRequest) -> FeeAssignResult:
    """
    Upsert the FeesMaster for (session, group, class) and, when requested, create the
    missing StudentFeesMaster rows for every enrolled student. One transaction.
    """
    if payload.session_id is not None:
        session = await scope.get_or_404(AcademicSession, payload.session_id, "Session")
    else:
        session = await get_active_session(scope)
        if session is None:
            raise ValidationFailed("No active session found")
    if await scope.get(SchoolClass, payload.class_id) is None:
        raise ValidationFailed("Invalid class")
    if await scope.get(FeeGroup, payload.fee_group_id) is None:
        raise ValidationFailed("Invalid fee group")

    result = await scope.db.execute(
        scope.select(
            FeesMaster,
            FeesMaster.session_id == session.id,
            FeesMaster.fee_group_id == payload.fee_group_id,
            FeesMaster.class_id == payload.class_id,
        )
    )
    master = result.scalar_one_or_none()
    if master is None:
        master = scope.add(
            FeesMaster(session_id=session.id, fee_group_id=payload.fee_group_id, class_id=payload.class_id)
        )
        await scope.db.flush()

    assigned = 0
    if payload.assign_to_students:
        enrollment_ids = await scope.all(_enrolled_in_class(scope, payload.class_id, session.id))
        already = set(
            await scope.all(
                select(StudentFeesMaster.student_session_id).where(
                    scope.where(StudentFeesMaster), StudentFeesMaster.fees_master_id == master.id
                )
            )
        )
        for enrollment_id in enrollment_ids:
            if enrollment_id in already:
                continue
            scope.add(StudentFeesMaster(student_session_id=enrollment_id, fees_master_id=master.id, is_active=True))
            assigned += 1
    try:
        await scope.db.commit()
    except IntegrityError:
        await scope.db.rollback()
        raise ConflictError("Fee group already assigned")
    await scope.db.refresh(master)
    logger.info(
        "Fee group %s assigned to class %s (session %s): %d students",
        payload.fee_group_id,
        payload.class_id,
        session.id,
        assigned,
    )
    return FeeAssignResult(fees_master=(await _master_responses(scope, [master]))[0], students_assigned=assigned)


async def list_fee_assignments(
    scope: TenantScope,
    session_id: Optional[UUID] = None,
    class_id: Optional[UUID] = None,
) -> List[FeesMasterResponse]:
    stmt = scope.select(FeesMaster)
    if session_id is not None:
        stmt = stmt.where(FeesMaster.session_id == session_id)
    if class_id is not None:
        stmt = stmt.where(FeesMaster.class_id == class_id)
    masters = await scope.all(stmt.order_by(FeesMaster.created_at))
    return await _master_responses(scope, masters)


async def _has_payments(scope: TenantScope, *criteria) -> bool:
    return await scope.exists(FeePayment, *criteria)


async def remove_fee_assignment(
    scope: TenantScope,
    fees_master_id: Optional[UUID] = None,
    student_fees_master_id: Optional[UUID] = None,
) -> None:
    """Remove a class assignment (with its student rows) or a single student's row. Never once paid against."""
    if (fees_master_id is None) == (student_fees_master_id is None):
        raise ValidationFailed("Provide exactly one of feesMasterId or studentFeesMasterId")

    if student_fees_master_id is not None:
        sfm = await scope.get_or_404(StudentFeesMaster, student_fees_master_id, "Fee assignment")
        if await _has_payments(scope, FeePayment.student_fees_master_id == sfm.id):
            raise ConflictError("Cannot remove fee assignment with payments")
        await scope.db.delete(sfm)
        await scope.db.commit()
        return

    master = await scope.get_or_404(FeesMaster, fees_master_id, "Fee assignment")
    sfm_ids = select(StudentFeesMaster.id).where(
        scope.where(StudentFeesMaster), StudentFeesMaster.fees_master_id == master.id
    )
    if await _has_payments(scope, FeePayment.student_fees_master_id.in_(sfm_ids)):
        raise ConflictError("Cannot remove fee assignment with payments")
    for sfm in await scope.all(scope.select(StudentFeesMaster, StudentFeesMaster.fees_master_id == master.id)):
        await scope.db.delete(sfm)
    await scope.db.delete(master)
    await scope.db.commit()


# --- Collection ---
def _payment_stmt(scope: TenantScope):
    return (
        select(FeePayment, Student, FeeGroup.name)
        .join(Student, Student.id == FeePayment.student_id)
        .join(StudentFeesMaster, StudentFeesMaster.id == FeePayment.student_fees_master_id)
        .join(FeesMaster, FeesMaster.id == StudentFeesMaster.fees_master_id)
        .join(FeeGroup, FeeGroup.id == FeesMaster.fee_group_id)
        .where(scope.where(FeePayment))
    )


def _payment_to_response(row) -> PaymentResponse:
    payment, student, group_name = row
    data = PaymentResponse.model_validate(payment)
    data.student_name = _full_name(student)
    data.admission_no = student.admission_no
    data.fee_group_name = group_name
    return data


async def collect_fee(scope: TenantScope, user_id: UUID, payload: PaymentCreate) -> PaymentResponse:
    """Record a payment. Payments are append-only: there is no update or delete."""
    student = await scope.get_or_404(Student, payload.student_id, "Student")
    sfm = await scope.get_or_404(StudentFeesMaster, payload.student_fees_master_id, "Fee assignment")
    enrollment = await scope.get(StudentSession, sfm.student_session_id)
    if enrollment is None or enrollment.student_id != student.id:
        raise ValidationFailed("Fee assignment does not belong to this student")
    if not sfm.is_active:
        raise ValidationFailed("Fee assignment is inactive")

    payment = scope.add(
        FeePayment(
            student_id=student.id,
            student_fees_master_id=sfm.id,
            amount=payload.amount,
            discount=payload.discount,
            fine=payload.fine,
            payment_mode=payload.payment_mode.value,
            payment_date=payload.payment_date or datetime.utcnow(),
            transaction_id=(payload.transaction_id or "").strip() or None,
            note=payload.note,
            collected_by=user_id,
        )
    )
    await scope.db.commit()
    logger.info("Payment %s of %s collected for student %s", payment.id, payload.amount, student.id)
    row = (await scope.db.execute(_payment_stmt(scope).where(FeePayment.id == payment.id))).one()
    return _payment_to_response(row)


async def list_payments(
    scope: TenantScope,
    params: PageParams,
    student_id: Optional[UUID] = None,
    from_date: Optional[date] = None,
    to_date: Optional[date] = None,
    payment_mode: Optional[str] = None,
) -> Page:
    stmt = _payment_stmt(scope)
    if student_id is not None:
        stmt = stmt.where(FeePayment.student_id == student_id)
    if from_date is not None:
        stmt = stmt.where(FeePayment.payment_date >= datetime.combine(from_date, time.min))
    if to_date is not None:
        stmt = stmt.where(FeePayment.payment_date < datetime.combine(to_date + timedelta(days=1), time.min))
    if payment_mode:
        stmt = stmt.where(FeePayment.payment_mode == payment_mode)
    stmt = stmt.order_by(FeePayment.payment_date.desc())
    page = await scope.paginate(stmt, params, scalars=False)
    return page.map(_payment_to_response)


# --- Due report ---
def _due_line(row: FeeGroupType, fee_line: ledger.FeeLine, fee_types: Dict[UUID, FeeType], as_of: date) -> DueFeeLine:
    fee_type = fee_types.get(row.fee_type_id)
    return DueFeeLine(
        fee_group_type_id=row.id,
        fee_type_id=row.fee_type_id,
        fee_type_name=fee_type.name if fee_type else None,
        fee_type_code=fee_type.code if fee_type else None,
        amount=fee_line.amount,
        due_date=row.due_date,
        fine_type=row.fine_type,
        fine_percent=row.fine_percent,
        fine_amount=row.fine_amount,
        is_overdue=fee_line.is_overdue(as_of),
        fine=fee_line.fine(as_of),
    )


async def get_due_report(
    scope: TenantScope,
    class_id: Optional[UUID] = None,
    student_id: Optional[UUID] = None,
    session_id: Optional[UUID] = None,
    only_due: bool = False,
    as_of: Optional[date] = None,
) -> DueReport:
    """
    Per student and per enrolled session: assigned, paid, due, fine and grand total,
    rolled up into a per-student summary. only_due keeps students whose grand total is > 0.
    """
    as_of = as_of or date.today()

    # enrollments in scope of the filters, with display names
    enrollment_stmt = (
        select(StudentSession, AcademicSession.name, ClassSection.class_id, SchoolClass.name, Section.name)
        .join(AcademicSession, AcademicSession.id == StudentSession.session_id)
        .join(ClassSection, ClassSection.id == StudentSession.class_section_id)
        .join(SchoolClass, SchoolClass.id == ClassSection.class_id)
        .join(Section, Section.id == ClassSection.section_id)
        .where(scope.where(StudentSession))
    )
    if class_id is not None:
        enrollment_stmt = enrollment_stmt.where(ClassSection.class_id == class_id)
    if student_id is not None:
        enrollment_stmt = enrollment_stmt.where(StudentSession.student_id == student_id)
    if session_id is not None:
        enrollment_stmt = enrollment_stmt.where(StudentSession.session_id == session_id)
    enrollment_rows = (await scope.db.execute(enrollment_stmt.order_by(AcademicSession.name))).all()

    student_ids = list(dict.fromkeys(row[0].student_id for row in enrollment_rows))
    students = {
        s.id: s
        for s in await scope.all(scope.select(Student, Student.id.in_(student_ids)).order_by(Student.admission_no))
    }

    enrollment_ids = [row[0].id for row in enrollment_rows]
    sfm_rows = (
        await scope.db.execute(
            select(StudentFeesMaster, FeesMaster.fee_group_id)
            .join(FeesMaster, FeesMaster.id == StudentFeesMaster.fees_master_id)
            .where(
                scope.where(StudentFeesMaster),
                StudentFeesMaster.student_session_id.in_(enrollment_ids),
                StudentFeesMaster.is_active.is_(True),
            )
            .order_by(StudentFeesMaster.created_at)
        )
    ).all()

    group_ids = list({group_id for _, group_id in sfm_rows})
    groups = {g.id: g for g in await scope.all(scope.select(FeeGroup, FeeGroup.id.in_(group_ids)))}
    fee_types = await _fee_types_by_id(scope)
    # (row, ledger line) pairs per group
    lines_by_group: Dict[UUID, List[tuple]] = defaultdict(list)
    for line in await scope.all(select(FeeGroupType).where(FeeGroupType.fee_group_id.in_(group_ids))):
        fee_line = ledger.FeeLine(
            amount=ledger.to_decimal(line.amount),
            due_date=line.due_date,
            fine_type=line.fine_type,
            fine_percent=line.fine_percent,
            fine_amount=line.fine_amount,
        )
        lines_by_group[line.fee_group_id].append((line, fee_line))

    sfm_ids = [sfm.id for sfm, _ in sfm_rows]
    payments_by_sfm: Dict[UUID, List[Decimal]] = defaultdict(list)
    payment_rows = await scope.db.execute(
        select(FeePayment.student_fees_master_id, FeePayment.amount).where(
            scope.where(FeePayment), FeePayment.student_fees_master_id.in_(sfm_ids)
        )
    )
    for sfm_id, amount in payment_rows.all():
        payments_by_sfm[sfm_id].append(ledger.to_decimal(amount))

    sfms_by_enrollment: Dict[UUID, list] = defaultdict(list)
    for sfm, group_id in sfm_rows:
        sfms_by_enrollment[sfm.student_session_id].append((sfm, group_id))

    sessions_by_student: Dict[UUID, List[DueSession]] = defaultdict(list)
    totals_by_student: Dict[UUID, List[ledger.LedgerTotals]] = defaultdict(list)
    for enrollment, session_name, _class_id, class_name, section_name in enrollment_rows:
        group_entries = []
        group_totals = []
        for sfm, group_id in sfms_by_enrollment.get(enrollment.id, []):
            group_lines = lines_by_group.get(group_id, [])
            totals = ledger.compute_master(
                ledger.MasterInput(lines=[fl for _, fl in group_lines], payments=payments_by_sfm.get(sfm.id, [])),
                as_of,
            )
            group_totals.append(totals)
            group = groups.get(group_id)
            group_entries.append(
                DueFeeGroup(
                    student_fees_master_id=sfm.id,
                    fee_group_id=group_id,
                    fee_group_name=group.name if group else "",
                    lines=[_due_line(row, fl, fee_types, as_of) for row, fl in group_lines],
                    **totals.as_dict(),
                )
            )
        session_totals = ledger.rollup(group_totals)
        totals_by_student[enrollment.student_id].append(session_totals)
        sessions_by_student[enrollment.student_id].append(
            DueSession(
                session_id=enrollment.session_id,
                session_name=session_name,
                class_name=class_name,
                section_name=section_name,
                fee_groups=group_entries,
                **session_totals.as_dict(),
            )
        )

    result: List[StudentDue] = []
    total_due_amount = Decimal("0")
    for sid, student in students.items():
        summary = ledger.rollup(totals_by_student.get(sid, []))
        if only_due and summary.grand_total <= 0:
            continue
        total_due_amount += summary.grand_total
        result.append(
            StudentDue(
                student_id=sid,
                admission_no=student.admission_no,
                student_name=_full_name(student),
                sessions=sessions_by_student.get(sid, []),
                summary=LedgerFigures(**summary.as_dict()),
            )
        )
    return DueReport(
        as_of=as_of,
        students=result,
        summary=DueReportSummary(total_students=len(result), total_due_amount=total_due_amount),
    )

"""
Library: books, members, issues.

Book.available is the shelf counter. Issue decrements it with a conditional
UPDATE (available > 0) in the same transaction as the issue row; return
increments it in the same transaction that stamps return_date.
"""
from datetime import date, timedelta
from typing import Optional
from uuid import UUID

from sqlalchemy import or_, select, update
from sqlalchemy.exc import IntegrityError

from app.core.app_logger import get_logger
from app.core.config import settings
from app.core.enums import BookIssueFilter, BookIssueStatus, MemberType
from app.core.exceptions import ConflictError, NotFoundError, ValidationFailed
from app.core.models import Book, BookIssue, LibraryMember, Staff, Student
from app.core.pagination import PageParams
from app.core.schemas import Page
from app.core.tenant_scope import TenantScope

from .schemas import (
    BookCreate,
    BookIssueCreate,
    BookIssueResponse,
    BookResponse,
    BookReturnRequest,
    BookUpdate,
    MemberCreate,
    MemberResponse,
    MemberUpdate,
)

logger = get_logger("library")


def _name(first: Optional[str], last: Optional[str]) -> Optional[str]:
    if first is None:
        return None
    return f"{first} {last}".strip() if last else first


# --- Books ---
async def list_books(scope: TenantScope, params: PageParams, search: Optional[str] = None) -> Page:
    stmt = scope.select(Book)
    if search:
        like = f"%{search.strip()}%"
        stmt = stmt.where(
            or_(Book.title.ilike(like), Book.author.ilike(like), Book.isbn.ilike(like), Book.book_no.ilike(like))
        )
    page = await scope.paginate(stmt.order_by(Book.title), params)
    return page.map(BookResponse.model_validate)


async def get_book(scope: TenantScope, book_id: UUID) -> BookResponse:
    return BookResponse.model_validate(await scope.get_or_404(Book, book_id, "Book"))


async def create_book(scope: TenantScope, payload: BookCreate) -> BookResponse:
    data = payload.model_dump()
    data["title"] = data["title"].strip()
    if data.get("book_no"):
        data["book_no"] = data["book_no"].strip()
        await scope.ensure_unique(Book, "Book number already exists", Book.book_no == data["book_no"])
    obj = scope.add(Book(**data, available=payload.quantity, is_active=True))
    try:
        await scope.db.commit()
    except IntegrityError:
        await scope.db.rollback()
        raise ConflictError("Book number already exists")
    await scope.db.refresh(obj)
    return BookResponse.model_validate(obj)


async def update_book(scope: TenantScope, book_id: UUID, payload: BookUpdate) -> BookResponse:
    """Changing quantity moves available by the same delta; copies out on loan cannot be removed."""
    obj = await scope.get_or_404(Book, book_id, "Book")
    data = payload.model_dump(exclude_unset=True)
    if data.get("book_no"):
        data["book_no"] = data["book_no"].strip()
        await scope.ensure_unique(Book, "Book number already exists", Book.book_no == data["book_no"], exclude_id=obj.id)
    quantity = data.pop("quantity", None)
    if quantity is not None and quantity != obj.quantity:
        # delta applied against the current counter; the row must still hold the quantity read above
        delta = quantity - obj.quantity
        result = await scope.db.execute(
            update(Book)
            .where(scope.where(Book), Book.id == obj.id, Book.quantity == obj.quantity, Book.available + delta >= 0)
            .values(quantity=quantity, available=Book.available + delta)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            await scope.db.rollback()
            raise ValidationFailed("Quantity cannot be less than issued copies")
    for field, value in data.items():
        if field in ("title", "is_active") and value is None:
            continue
        setattr(obj, field, value)
    try:
        await scope.db.commit()
    except IntegrityError:
        await scope.db.rollback()
        raise ConflictError("Book number already exists")
    await scope.db.refresh(obj)
    return BookResponse.model_validate(obj)


async def delete_book(scope: TenantScope, book_id: UUID) -> None:
    obj = await scope.get_or_404(Book, book_id, "Book")
    if await scope.count(BookIssue, BookIssue.book_id == obj.id):
        raise ConflictError("Cannot delete book with issue history")
    await scope.db.delete(obj)
    await scope.db.commit()


# --- Members ---
def _member_stmt(scope: TenantScope):
    return (
        select(LibraryMember, Student.first_name, Student.last_name, Staff.first_name, Staff.last_name)
        .outerjoin(Student, Student.id == LibraryMember.student_id)
        .outerjoin(Staff, Staff.id == LibraryMember.staff_id)
        .where(scope.where(LibraryMember))
    )


def _member_row_to_response(row) -> MemberResponse:
    member, s_first, s_last, t_first, t_last = row
    data = MemberResponse.model_validate(member)
    data.member_name = _name(s_first, s_last) if member.member_type == MemberType.STUDENT.value else _name(t_first, t_last)
    return data


async def list_members(
    scope: TenantScope,
    params: PageParams,
    member_type: Optional[str] = None,
    search: Optional[str] = None,
) -> Page:
    stmt = _member_stmt(scope)
    if member_type:
        stmt = stmt.where(LibraryMember.member_type == member_type)
    if search:
        like = f"%{search.strip()}%"
        stmt = stmt.where(
            or_(
                LibraryMember.library_card_no.ilike(like),
                Student.first_name.ilike(like),
                Staff.first_name.ilike(like),
            )
        )
    page = await scope.paginate(stmt.order_by(LibraryMember.library_card_no), params, scalars=False)
    return page.map(_member_row_to_response)


async def get_member(scope: TenantScope, member_id: UUID) -> MemberResponse:
    row = (await scope.db.execute(_member_stmt(scope).where(LibraryMember.id == member_id))).first()
    if row is None:
        raise NotFoundError("Member not found")
    return _member_row_to_response(row)


async def create_member(scope: TenantScope, payload: MemberCreate) -> MemberResponse:
    card_no = payload.library_card_no.strip()
    await scope.ensure_unique(LibraryMember, "Library card number already exists", LibraryMember.library_card_no == card_no)
    if payload.member_type == MemberType.STUDENT:
        await scope.get_or_404(Student, payload.student_id, "Student")
        await scope.ensure_unique(LibraryMember, "Already a library member", LibraryMember.student_id == payload.student_id)
        target = {"student_id": payload.student_id}
    else:
        await scope.get_or_404(Staff, payload.staff_id, "Staff")
        await scope.ensure_unique(LibraryMember, "Already a library member", LibraryMember.staff_id == payload.staff_id)
        target = {"staff_id": payload.staff_id}
    obj = scope.add(
        LibraryMember(member_type=payload.member_type.value, library_card_no=card_no, is_active=True, **target)
    )
    try:
        await scope.db.commit()
    except IntegrityError:
        await scope.db.rollback()
        raise ConflictError("Library card number already exists")
    return await get_member(scope, obj.id)


async def update_member(scope: TenantScope, member_id: UUID, payload: MemberUpdate) -> MemberResponse:
    obj = await scope.get_or_404(LibraryMember, member_id, "Member")
    if payload.library_card_no is not None:
        card_no = payload.library_card_no.strip()
        await scope.ensure_unique(
            LibraryMember,
            "Library card number already exists",
            LibraryMember.library_card_no == card_no,
            exclude_id=obj.id,
        )
        obj.library_card_no = card_no
    if payload.is_active is not None:
        obj.is_active = payload.is_active
    await scope.db.commit()
    return await get_member(scope, obj.id)


async def delete_member(scope: TenantScope, member_id: UUID) -> None:
    obj = await scope.get_or_404(LibraryMember, member_id, "Member")
    if await scope.count(BookIssue, BookIssue.member_id == obj.id):
        raise ConflictError("Cannot delete member with issue history")
    await scope.db.delete(obj)
    await scope.db.commit()


# --- Issues ---
def _issue_stmt(scope: TenantScope):
    return (
        select(BookIssue, Book.title, LibraryMember, Student.first_name, Student.last_name, Staff.first_name, Staff.last_name)
        .join(Book, Book.id == BookIssue.book_id)
        .join(LibraryMember, LibraryMember.id == BookIssue.member_id)
        .outerjoin(Student, Student.id == LibraryMember.student_id)
        .outerjoin(Staff, Staff.id == LibraryMember.staff_id)
        .where(scope.where(BookIssue))
    )


def overdue_days(issue: BookIssue, as_of: date) -> int:
    """Days past due: up to the return date once returned, else up to as_of."""
    end = issue.return_date or as_of
    return max((end - issue.due_date).days, 0)


def _issue_row_to_response(row, today: date) -> BookIssueResponse:
    issue, title, member, s_first, s_last, t_first, t_last = row
    days = overdue_days(issue, today)
    return BookIssueResponse(
        id=issue.id,
        book_id=issue.book_id,
        book_title=title,
        member_id=issue.member_id,
        member_name=_name(s_first, s_last) if member.member_type == MemberType.STUDENT.value else _name(t_first, t_last),
        library_card_no=member.library_card_no,
        issue_date=issue.issue_date,
        due_date=issue.due_date,
        return_date=issue.return_date,
        status=issue.status,
        is_overdue=issue.status == BookIssueStatus.ISSUED.value and days > 0,
        overdue_days=days,
        created_at=issue.created_at,
    )


async def list_issues(
    scope: TenantScope,
    params: PageParams,
    status: Optional[BookIssueFilter] = None,
    member_id: Optional[UUID] = None,
    book_id: Optional[UUID] = None,
) -> Page:
    today = date.today()
    stmt = _issue_stmt(scope)
    if status == BookIssueFilter.OVERDUE:
        stmt = stmt.where(BookIssue.status == BookIssueStatus.ISSUED.value, BookIssue.due_date < today)
    elif status is not None:
        stmt = stmt.where(BookIssue.status == status.value)
    if member_id is not None:
        stmt = stmt.where(BookIssue.member_id == member_id)
    if book_id is not None:
        stmt = stmt.where(BookIssue.book_id == book_id)
    page = await scope.paginate(stmt.order_by(BookIssue.issue_date.desc(), BookIssue.created_at.desc()), params, scalars=False)
    return page.map(lambda row: _issue_row_to_response(row, today))


async def _get_issue(scope: TenantScope, issue_id: UUID) -> BookIssueResponse:
    row = (await scope.db.execute(_issue_stmt(scope).where(BookIssue.id == issue_id))).first()
    if row is None:
        raise NotFoundError("Book issue not found")
    return _issue_row_to_response(row, date.today())


async def issue_book(scope: TenantScope, user_id: UUID, payload: BookIssueCreate) -> BookIssueResponse:
    """Lend one copy. The availability decrement only succeeds while available > 0."""
    await scope.get_or_404(Book, payload.book_id, "Book")
    member = await scope.get_or_404(LibraryMember, payload.member_id, "Member")
    if not member.is_active:
        raise ValidationFailed("Library member is inactive")
    issue_date = payload.issue_date or date.today()
    due_date = payload.due_date or issue_date + timedelta(days=settings.book_issue_days)
    if due_date < issue_date:
        raise ValidationFailed("Due date cannot be before issue date")

    result = await scope.db.execute(
        update(Book)
        .where(scope.where(Book), Book.id == payload.book_id, Book.available > 0)
        .values(available=Book.available - 1)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        await scope.db.rollback()
        raise ConflictError("Book not available")
    issue = scope.add(
        BookIssue(
            book_id=payload.book_id,
            member_id=member.id,
            issue_date=issue_date,
            due_date=due_date,
            status=BookIssueStatus.ISSUED.value,
            issued_by=user_id,
        )
    )
    await scope.db.commit()
    logger.info("Book %s issued to member %s", payload.book_id, member.id)
    return await _get_issue(scope, issue.id)


async def return_book(scope: TenantScope, issue_id: UUID, payload: Optional[BookReturnRequest] = None):
    """Close an issue and put the copy back on the shelf. Returns (issue, overdue_days)."""
    issue = await scope.get_or_404(BookIssue, issue_id, "Book issue")
    if issue.status == BookIssueStatus.RETURNED.value:
        raise ConflictError("Book already returned")
    return_date = (payload.return_date if payload else None) or date.today()
    if return_date < issue.issue_date:
        raise ValidationFailed("Return date cannot be before issue date")

    closed = await scope.db.execute(
        update(BookIssue)
        .where(scope.where(BookIssue), BookIssue.id == issue.id, BookIssue.status == BookIssueStatus.ISSUED.value)
        .values(status=BookIssueStatus.RETURNED.value, return_date=return_date)
        .execution_options(synchronize_session=False)
    )
    if closed.rowcount == 0:
        await scope.db.rollback()
        raise ConflictError("Book already returned")
    await scope.db.execute(
        update(Book)
        .where(scope.where(Book), Book.id == issue.book_id, Book.available < Book.quantity)
        .values(available=Book.available + 1)
        .execution_options(synchronize_session=False)
    )
    await scope.db.commit()
    await scope.db.refresh(issue)
    days = overdue_days(issue, return_date)
    logger.info("Book issue %s returned (%d days overdue)", issue.id, days)
    return await _get_issue(scope, issue.id), days

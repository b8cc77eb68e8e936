from datetime import date, timedelta
from uuid import UUID

import pytest

from app.api.v1.library.schemas import BookUpdate
from app.api.v1.library.service import return_book, update_book
from app.core.exceptions import ConflictError
from app.core.models import Book, BookIssue
from app.core.tenant_scope import TenantScope


async def _member(api, setup) -> dict:
    student = await api.admit(setup, "Asha")
    payload = {"memberType": "student", "studentId": student["id"], "libraryCardNo": "LIB-001"}
    member = (await api.post("/api/v1/library/members", payload))["data"]
    assert member["memberName"] == "Asha"
    return member


async def test_issue_and_return_track_availability(api_a) -> None:
    setup = await api_a.academic_setup()
    member = await _member(api_a, setup)
    book = (await api_a.post("/api/v1/library/books", {"title": "Wings of Fire", "quantity": 1}))["data"]
    assert book["available"] == 1

    issue = (await api_a.post("/api/v1/library/issues", {"bookId": book["id"], "memberId": member["id"]}))["data"]
    assert issue["status"] == "issued"
    assert (await api_a.get(f"/api/v1/library/books/{book['id']}"))["data"]["available"] == 0

    body = await api_a.post(
        "/api/v1/library/issues", {"bookId": book["id"], "memberId": member["id"]}, expected=400
    )
    assert body == {"success": False, "error": "Book not available"}

    returned = (await api_a.post(f"/api/v1/library/issues/{issue['id']}/return", expected=200))["data"]
    assert returned["status"] == "returned"
    assert (await api_a.get(f"/api/v1/library/books/{book['id']}"))["data"]["available"] == 1

    body = await api_a.post(f"/api/v1/library/issues/{issue['id']}/return", expected=400)
    assert body["error"] == "Book already returned"
    assert (await api_a.get(f"/api/v1/library/books/{book['id']}"))["data"]["available"] == 1


async def test_late_return_reports_overdue_days(api_a) -> None:
    setup = await api_a.academic_setup()
    member = await _member(api_a, setup)
    book = (await api_a.post("/api/v1/library/books", {"title": "Gitanjali", "quantity": 2}))["data"]
    issue_date = date.today() - timedelta(days=20)
    due_date = issue_date + timedelta(days=7)
    issue = (
        await api_a.post(
            "/api/v1/library/issues",
            {
                "bookId": book["id"],
                "memberId": member["id"],
                "issueDate": issue_date.isoformat(),
                "dueDate": due_date.isoformat(),
            },
        )
    )["data"]
    assert issue["isOverdue"] is True

    overdue = (await api_a.get("/api/v1/library/issues", params={"status": "overdue"}))["data"]
    assert [i["id"] for i in overdue] == [issue["id"]]

    body = await api_a.post(
        f"/api/v1/library/issues/{issue['id']}/return",
        json={"returnDate": (due_date + timedelta(days=3)).isoformat()},
        expected=200,
    )
    assert body["data"]["overdueDays"] == 3
    assert body["message"] == "Book returned successfully (3 days overdue)"


async def test_book_quantity_cannot_drop_below_issued(api_a) -> None:
    setup = await api_a.academic_setup()
    member = await _member(api_a, setup)
    book = (await api_a.post("/api/v1/library/books", {"title": "Malgudi Days", "quantity": 2}))["data"]
    await api_a.post("/api/v1/library/issues", {"bookId": book["id"], "memberId": member["id"]})
    await api_a.post("/api/v1/library/issues", {"bookId": book["id"], "memberId": member["id"]})

    body = await api_a.put(f"/api/v1/library/books/{book['id']}", {"quantity": 1}, expected=400)
    assert body["error"] == "Quantity cannot be less than issued copies"

    updated = (await api_a.put(f"/api/v1/library/books/{book['id']}", {"quantity": 5}))["data"]
    assert updated["quantity"] == 5
    assert updated["available"] == 3

    body = await api_a.delete(f"/api/v1/library/books/{book['id']}", expected=400)
    assert body["error"] == "Cannot delete book with issue history"


async def test_duplicate_library_card(api_a) -> None:
    setup = await api_a.academic_setup()
    await _member(api_a, setup)
    staff = (await api_a.post("/api/v1/staff", {"firstName": "Meera"}))["data"]
    body = await api_a.post(
        "/api/v1/library/members",
        {"memberType": "staff", "staffId": staff["id"], "libraryCardNo": "LIB-001"},
        expected=400,
    )
    assert body["error"] == "Library card number already exists"


async def test_return_from_stale_read_does_not_restock_twice(api_a, db_session) -> None:
    setup = await api_a.academic_setup()
    member = await _member(api_a, setup)
    book = (await api_a.post("/api/v1/library/books", {"title": "Malgudi Days", "quantity": 2}))["data"]
    first = (await api_a.post("/api/v1/library/issues", {"bookId": book["id"], "memberId": member["id"]}))["data"]
    await api_a.post("/api/v1/library/issues", {"bookId": book["id"], "memberId": member["id"]})

    # a second request that loaded the issue while it was still out on loan
    scope = TenantScope(db_session, api_a.ctx.school.id)
    loaded = await scope.get_or_404(BookIssue, UUID(first["id"]))
    assert loaded.status == "issued"

    await api_a.post(f"/api/v1/library/issues/{first['id']}/return", expected=200)
    assert (await api_a.get(f"/api/v1/library/books/{book['id']}"))["data"]["available"] == 1

    with pytest.raises(ConflictError, match="Book already returned"):
        await return_book(scope, loaded.id)
    assert (await api_a.get(f"/api/v1/library/books/{book['id']}"))["data"]["available"] == 1


async def test_quantity_change_keeps_concurrent_issue(api_a, db_session) -> None:
    setup = await api_a.academic_setup()
    member = await _member(api_a, setup)
    book = (await api_a.post("/api/v1/library/books", {"title": "Godan", "quantity": 2}))["data"]

    scope = TenantScope(db_session, api_a.ctx.school.id)
    loaded = await scope.get_or_404(Book, UUID(book["id"]))
    assert loaded.available == 2

    # a copy goes out after the book was read
    await api_a.post("/api/v1/library/issues", {"bookId": book["id"], "memberId": member["id"]})

    updated = await update_book(scope, loaded.id, BookUpdate(quantity=3))
    assert updated.quantity == 3
    assert updated.available == 2
    fetched = (await api_a.get(f"/api/v1/library/books/{book['id']}"))["data"]
    assert (fetched["quantity"], fetched["available"]) == (3, 2)

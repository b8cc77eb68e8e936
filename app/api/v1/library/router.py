from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Query, status

from app.auth.dependencies import get_current_user, get_tenant_scope
from app.auth.rbac import check_permission
from app.auth.schemas import CurrentUser
from app.core.enums import BookIssueFilter, MemberType
from app.core.pagination import PageParams
from app.core.schemas import ApiResponse, ok, paged
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
from . import service

router = APIRouter(prefix="/api/v1/library", tags=["library"])


# --- Books ---
@router.get(
    "/books",
    response_model=ApiResponse[List[BookResponse]],
    dependencies=[Depends(check_permission("library", "view"))],
)
async def list_books(
    search: Optional[str] = Query(None),
    params: PageParams = Depends(),
    scope: TenantScope = Depends(get_tenant_scope),
):
    return paged(await service.list_books(scope, params, search=search))


@router.post(
    "/books",
    response_model=ApiResponse[BookResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(check_permission("library", "create"))],
)
async def create_book(payload: BookCreate, scope: TenantScope = Depends(get_tenant_scope)):
    return ok(await service.create_book(scope, payload), message="Book created successfully")


@router.get(
    "/books/{book_id}",
    response_model=ApiResponse[BookResponse],
    dependencies=[Depends(check_permission("library", "view"))],
)
async def get_book(book_id: UUID, scope: TenantScope = Depends(get_tenant_scope)):
    return ok(await service.get_book(scope, book_id))


@router.put(
    "/books/{book_id}",
    response_model=ApiResponse[BookResponse],
    dependencies=[Depends(check_permission("library", "edit"))],
)
async def update_book(book_id: UUID, payload: BookUpdate, scope: TenantScope = Depends(get_tenant_scope)):
    return ok(await service.update_book(scope, book_id, payload), message="Book updated successfully")


@router.delete(
    "/books/{book_id}",
    response_model=ApiResponse[None],
    dependencies=[Depends(check_permission("library", "delete"))],
)
async def delete_book(book_id: UUID, scope: TenantScope = Depends(get_tenant_scope)):
    await service.delete_book(scope, book_id)
    return ok(message="Book deleted successfully")


# --- Members ---
@router.get(
    "/members",
    response_model=ApiResponse[List[MemberResponse]],
    dependencies=[Depends(check_permission("library", "view"))],
)
async def list_members(
    member_type: Optional[MemberType] = Query(None, alias="memberType"),
    search: Optional[str] = Query(None),
    params: PageParams = Depends(),
    scope: TenantScope = Depends(get_tenant_scope),
):
    page = await service.list_members(
        scope, params, member_type=member_type.value if member_type else None, search=search
    )
    return paged(page)


@router.post(
    "/members",
    response_model=ApiResponse[MemberResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(check_permission("library", "create"))],
)
async def create_member(payload: MemberCreate, scope: TenantScope = Depends(get_tenant_scope)):
    return ok(await service.create_member(scope, payload), message="Member added successfully")


@router.get(
    "/members/{member_id}",
    response_model=ApiResponse[MemberResponse],
    dependencies=[Depends(check_permission("library", "view"))],
)
async def get_member(member_id: UUID, scope: TenantScope = Depends(get_tenant_scope)):
    return ok(await service.get_member(scope, member_id))


@router.put(
    "/members/{member_id}",
    response_model=ApiResponse[MemberResponse],
    dependencies=[Depends(check_permission("library", "edit"))],
)
async def update_member(member_id: UUID, payload: MemberUpdate, scope: TenantScope = Depends(get_tenant_scope)):
    return ok(await service.update_member(scope, member_id, payload), message="Member updated successfully")


@router.delete(
    "/members/{member_id}",
    response_model=ApiResponse[None],
    dependencies=[Depends(check_permission("library", "delete"))],
)
async def delete_member(member_id: UUID, scope: TenantScope = Depends(get_tenant_scope)):
    await service.delete_member(scope, member_id)
    return ok(message="Member deleted successfully")


# --- Issues ---
@router.get(
    "/issues",
    response_model=ApiResponse[List[BookIssueResponse]],
    dependencies=[Depends(check_permission("library", "view"))],
)
async def list_issues(
    issue_status: Optional[BookIssueFilter] = Query(None, alias="status"),
    member_id: Optional[UUID] = Query(None, alias="memberId"),
    book_id: Optional[UUID] = Query(None, alias="bookId"),
    params: PageParams = Depends(),
    scope: TenantScope = Depends(get_tenant_scope),
):
    return paged(await service.list_issues(scope, params, status=issue_status, member_id=member_id, book_id=book_id))


@router.post(
    "/issues",
    response_model=ApiResponse[BookIssueResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(check_permission("library", "create"))],
)
async def issue_book(
    payload: BookIssueCreate,
    scope: TenantScope = Depends(get_tenant_scope),
    current_user: CurrentUser = Depends(get_current_user),
):
    return ok(await service.issue_book(scope, current_user.id, payload), message="Book issued successfully")


@router.post(
    "/issues/{issue_id}/return",
    response_model=ApiResponse[BookIssueResponse],
    dependencies=[Depends(check_permission("library", "edit"))],
)
async def return_book(
    issue_id: UUID,
    payload: Optional[BookReturnRequest] = Body(None),
    scope: TenantScope = Depends(get_tenant_scope),
):
    issue, overdue_days = await service.return_book(scope, issue_id, payload)
    message = "Book returned successfully"
    if overdue_days:
        message = f"{message} ({overdue_days} days overdue)"
    return ok(issue, message=message)

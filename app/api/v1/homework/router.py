"""Homework API router."""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status

from app.auth.dependencies import get_current_user, get_tenant_scope
from app.auth.rbac import check_permission
from app.auth.schemas import CurrentUser
from app.core.enums import SubmissionStatus
from app.core.pagination import PageParams
from app.core.schemas import ApiResponse, ok, paged
from app.core.tenant_scope import TenantScope

from . import service
from .schemas import (
    HomeworkCreate,
    HomeworkResponse,
    HomeworkUpdate,
    SubmissionCreate,
    SubmissionEvaluate,
    SubmissionResponse,
)

router = APIRouter(prefix="/api/v1/homework", tags=["homework"])


# ----- Submissions (declared before /{homework_id}) -----
@router.get(
    "/submissions",
    response_model=ApiResponse[List[SubmissionResponse]],
    dependencies=[Depends(check_permission("homework", "view"))],
)
async def list_submissions(
    homework_id: Optional[UUID] = Query(None, alias="homeworkId"),
    student_id: Optional[UUID] = Query(None, alias="studentId"),
    submission_status: Optional[SubmissionStatus] = Query(None, alias="status"),
    params: PageParams = Depends(),
    scope: TenantScope = Depends(get_tenant_scope),
):
    page = await service.list_submissions(
        scope, params, homework_id=homework_id, student_id=student_id, status=submission_status
    )
    return paged(page)


@router.post(
    "/submissions",
    response_model=ApiResponse[SubmissionResponse],
    dependencies=[Depends(check_permission("homework", "create"))],
)
async def submit_homework(
    payload: SubmissionCreate,
    response: Response,
    scope: TenantScope = Depends(get_tenant_scope),
):
    submission, created = await service.submit_homework(scope, payload)
    if created:
        response.status_code = status.HTTP_201_CREATED
        return ok(submission, message="Homework submitted successfully")
    return ok(submission, message="Homework re-submitted successfully")


@router.patch(
    "/submissions/{submission_id}",
    response_model=ApiResponse[SubmissionResponse],
    dependencies=[Depends(check_permission("homework", "edit"))],
)
async def evaluate_submission(
    submission_id: UUID,
    payload: SubmissionEvaluate,
    current_user: CurrentUser = Depends(get_current_user),
    scope: TenantScope = Depends(get_tenant_scope),
):
    result = await service.evaluate_submission(scope, current_user.id, submission_id, payload)
    return ok(result, message="Submission evaluated successfully")


# ----- Homework -----
@router.get(
    "",
    response_model=ApiResponse[List[HomeworkResponse]],
    dependencies=[Depends(check_permission("homework", "view"))],
)
async def list_homework(
    class_id: Optional[UUID] = Query(None, alias="classId"),
    section_id: Optional[UUID] = Query(None, alias="sectionId"),
    subject_id: Optional[UUID] = Query(None, alias="subjectId"),
    search: Optional[str] = Query(None),
    params: PageParams = Depends(),
    scope: TenantScope = Depends(get_tenant_scope),
):
    page = await service.list_homework(
        scope, params, class_id=class_id, section_id=section_id, subject_id=subject_id, search=search
    )
    return paged(page)


@router.post(
    "",
    response_model=ApiResponse[HomeworkResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(check_permission("homework", "create"))],
)
async def create_homework(
    payload: HomeworkCreate,
    current_user: CurrentUser = Depends(get_current_user),
    scope: TenantScope = Depends(get_tenant_scope),
):
    return ok(await service.create_homework(scope, current_user.id, payload), message="Homework created successfully")


@router.get(
    "/{homework_id}",
    response_model=ApiResponse[HomeworkResponse],
    dependencies=[Depends(check_permission("homework", "view"))],
)
async def get_homework(homework_id: UUID, scope: TenantScope = Depends(get_tenant_scope)):
    return ok(await service.get_homework(scope, homework_id))


@router.put(
    "/{homework_id}",
    response_model=ApiResponse[HomeworkResponse],
    dependencies=[Depends(check_permission("homework", "edit"))],
)
async def update_homework(homework_id: UUID, payload: HomeworkUpdate, scope: TenantScope = Depends(get_tenant_scope)):
    return ok(await service.update_homework(scope, homework_id, payload), message="Homework updated successfully")


@router.delete(
    "/{homework_id}",
    response_model=ApiResponse[None],
    dependencies=[Depends(check_permission("homework", "delete"))],
)
async def delete_homework(homework_id: UUID, scope: TenantScope = Depends(get_tenant_scope)):
    await service.delete_homework(scope, homework_id)
    return ok(message="Homework deleted successfully")

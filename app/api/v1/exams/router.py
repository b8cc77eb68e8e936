from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from app.auth.dependencies import get_tenant_scope
from app.auth.rbac import check_permission
from app.core.pagination import PageParams
from app.core.schemas import ApiResponse, ok, paged
from app.core.tenant_scope import TenantScope

from .schemas import (
    ExamCreate,
    ExamResponse,
    ExamResultSheet,
    ExamResultsSave,
    ExamSubjectResponse,
    ExamUpdate,
    SaveResult,
)
from . import service

router = APIRouter(prefix="/api/v1/exams", tags=["exams"])


# ----- Results -----
@router.get(
    "/results",
    response_model=ApiResponse[ExamResultSheet],
    dependencies=[Depends(check_permission("exams", "view"))],
)
async def get_results(
    exam_subject_id: UUID = Query(..., alias="examSubjectId"),
    class_id: UUID = Query(..., alias="classId"),
    section_id: UUID = Query(..., alias="sectionId"),
    scope: TenantScope = Depends(get_tenant_scope),
):
    return ok(await service.get_results(scope, exam_subject_id, class_id, section_id))


@router.post(
    "/results",
    response_model=ApiResponse[SaveResult],
    dependencies=[Depends(check_permission("exams", "create"))],
)
async def save_results(payload: ExamResultsSave, scope: TenantScope = Depends(get_tenant_scope)):
    return ok(await service.save_results(scope, payload), message="Results saved successfully")


# ----- Exams -----
@router.get(
    "",
    response_model=ApiResponse[List[ExamResponse]],
    dependencies=[Depends(check_permission("exams", "view"))],
)
async def list_exams(
    search: Optional[str] = Query(None),
    session_id: Optional[UUID] = Query(None, alias="sessionId"),
    params: PageParams = Depends(),
    scope: TenantScope = Depends(get_tenant_scope),
):
    return paged(await service.list_exams(scope, params, search=search, session_id=session_id))


@router.post(
    "",
    response_model=ApiResponse[ExamResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(check_permission("exams", "create"))],
)
async def create_exam(payload: ExamCreate, scope: TenantScope = Depends(get_tenant_scope)):
    return ok(await service.create_exam(scope, payload), message="Exam created successfully")


@router.get(
    "/{exam_id}",
    response_model=ApiResponse[ExamResponse],
    dependencies=[Depends(check_permission("exams", "view"))],
)
async def get_exam(exam_id: UUID, scope: TenantScope = Depends(get_tenant_scope)):
    return ok(await service.get_exam(scope, exam_id))


@router.get(
    "/{exam_id}/schedule",
    response_model=ApiResponse[List[ExamSubjectResponse]],
    dependencies=[Depends(check_permission("exams", "view"))],
)
async def get_exam_schedule(exam_id: UUID, scope: TenantScope = Depends(get_tenant_scope)):
    return ok(await service.get_exam_schedule(scope, exam_id))


@router.put(
    "/{exam_id}",
    response_model=ApiResponse[ExamResponse],
    dependencies=[Depends(check_permission("exams", "edit"))],
)
async def update_exam(exam_id: UUID, payload: ExamUpdate, scope: TenantScope = Depends(get_tenant_scope)):
    return ok(await service.update_exam(scope, exam_id, payload), message="Exam updated successfully")


@router.delete(
    "/{exam_id}",
    response_model=ApiResponse[None],
    dependencies=[Depends(check_permission("exams", "delete"))],
)
async def delete_exam(exam_id: UUID, scope: TenantScope = Depends(get_tenant_scope)):
    await service.delete_exam(scope, exam_id)
    return ok(message="Exam deleted successfully")

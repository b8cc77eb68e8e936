from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from app.auth.dependencies import get_tenant_scope
from app.auth.rbac import check_permission
from app.core.pagination import PageParams
from app.core.schemas import ApiResponse, ok, paged
from app.core.tenant_scope import TenantScope

from .schemas import ExamGroupCreate, ExamGroupResponse, ExamGroupUpdate
from . import service

router = APIRouter(prefix="/api/v1/exams/groups", tags=["exam-groups"])


@router.get(
    "",
    response_model=ApiResponse[List[ExamGroupResponse]],
    dependencies=[Depends(check_permission("exams", "view"))],
)
async def list_exam_groups(
    search: Optional[str] = Query(None),
    exam_type: Optional[str] = Query(None, alias="examType"),
    params: PageParams = Depends(),
    scope: TenantScope = Depends(get_tenant_scope),
):
    return paged(await service.list_exam_groups(scope, params, search=search, exam_type=exam_type))


@router.post(
    "",
    response_model=ApiResponse[ExamGroupResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(check_permission("exams", "create"))],
)
async def create_exam_group(payload: ExamGroupCreate, scope: TenantScope = Depends(get_tenant_scope)):
    return ok(await service.create_exam_group(scope, payload), message="Exam group created successfully")


@router.get(
    "/{group_id}",
    response_model=ApiResponse[ExamGroupResponse],
    dependencies=[Depends(check_permission("exams", "view"))],
)
async def get_exam_group(group_id: UUID, scope: TenantScope = Depends(get_tenant_scope)):
    return ok(await service.get_exam_group(scope, group_id))


@router.put(
    "/{group_id}",
    response_model=ApiResponse[ExamGroupResponse],
    dependencies=[Depends(check_permission("exams", "edit"))],
)
async def update_exam_group(group_id: UUID, payload: ExamGroupUpdate, scope: TenantScope = Depends(get_tenant_scope)):
    return ok(await service.update_exam_group(scope, group_id, payload), message="Exam group updated successfully")


@router.delete(
    "/{group_id}",
    response_model=ApiResponse[None],
    dependencies=[Depends(check_permission("exams", "delete"))],
)
async def delete_exam_group(group_id: UUID, scope: TenantScope = Depends(get_tenant_scope)):
    await service.delete_exam_group(scope, group_id)
    return ok(message="Exam group deleted successfully")

from datetime import date
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from app.auth.dependencies import get_current_user, get_tenant_scope
from app.auth.rbac import check_permission
from app.auth.schemas import CurrentUser
from app.core.pagination import PageParams
from app.core.schemas import ApiResponse, ok, paged
from app.core.tenant_scope import TenantScope

from .schemas import LessonPlanCreate, LessonPlanResponse, LessonPlanUpdate
from . import service

router = APIRouter(prefix="/api/v1/academics/lesson-plans", tags=["lesson-plans"])


@router.get(
    "",
    response_model=ApiResponse[List[LessonPlanResponse]],
    dependencies=[Depends(check_permission("academics", "view"))],
)
async def list_lesson_plans(
    search: Optional[str] = Query(None),
    class_id: Optional[UUID] = Query(None, alias="classId"),
    section_id: Optional[UUID] = Query(None, alias="sectionId"),
    subject_id: Optional[UUID] = Query(None, alias="subjectId"),
    staff_id: Optional[UUID] = Query(None, alias="staffId"),
    plan_status: Optional[str] = Query(None, alias="status"),
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    params: PageParams = Depends(),
    scope: TenantScope = Depends(get_tenant_scope),
):
    page = await service.list_lesson_plans(
        scope,
        params,
        search=search,
        class_id=class_id,
        section_id=section_id,
        subject_id=subject_id,
        staff_id=staff_id,
        status=plan_status,
        start_date=start_date,
        end_date=end_date,
    )
    return paged(page)


@router.post(
    "",
    response_model=ApiResponse[LessonPlanResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(check_permission("academics", "create"))],
)
async def create_lesson_plan(
    payload: LessonPlanCreate,
    current_user: CurrentUser = Depends(get_current_user),
    scope: TenantScope = Depends(get_tenant_scope),
):
    plan = await service.create_lesson_plan(scope, current_user.id, payload)
    return ok(plan, message="Lesson plan created successfully")


@router.get(
    "/{plan_id}",
    response_model=ApiResponse[LessonPlanResponse],
    dependencies=[Depends(check_permission("academics", "view"))],
)
async def get_lesson_plan(plan_id: UUID, scope: TenantScope = Depends(get_tenant_scope)):
    return ok(await service.get_lesson_plan(scope, plan_id))


@router.put(
    "/{plan_id}",
    response_model=ApiResponse[LessonPlanResponse],
    dependencies=[Depends(check_permission("academics", "edit"))],
)
async def update_lesson_plan(plan_id: UUID, payload: LessonPlanUpdate, scope: TenantScope = Depends(get_tenant_scope)):
    return ok(await service.update_lesson_plan(scope, plan_id, payload), message="Lesson plan updated successfully")


@router.delete(
    "/{plan_id}",
    response_model=ApiResponse[None],
    dependencies=[Depends(check_permission("academics", "delete"))],
)
async def delete_lesson_plan(plan_id: UUID, scope: TenantScope = Depends(get_tenant_scope)):
    await service.delete_lesson_plan(scope, plan_id)
    return ok(message="Lesson plan deleted successfully")

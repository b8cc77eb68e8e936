from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from app.auth.dependencies import get_tenant_scope
from app.auth.rbac import check_permission
from app.core.pagination import PageParams
from app.core.schemas import ApiResponse, ok, paged
from app.core.tenant_scope import TenantScope

from .schemas import StudentCreate, StudentResponse, StudentUpdate
from . import service

router = APIRouter(prefix="/api/v1/students", tags=["students"])


@router.get(
    "",
    response_model=ApiResponse[List[StudentResponse]],
    dependencies=[Depends(check_permission("students", "view"))],
)
async def list_students(
    search: Optional[str] = Query(None),
    class_id: Optional[UUID] = Query(None, alias="classId"),
    section_id: Optional[UUID] = Query(None, alias="sectionId"),
    session_id: Optional[UUID] = Query(None, alias="sessionId"),
    is_active: Optional[bool] = Query(None, alias="isActive"),
    category_id: Optional[UUID] = Query(None, alias="categoryId"),
    school_house_id: Optional[UUID] = Query(None, alias="schoolHouseId"),
    params: PageParams = Depends(),
    scope: TenantScope = Depends(get_tenant_scope),
):
    page = await service.list_students(
        scope,
        params,
        search=search,
        class_id=class_id,
        section_id=section_id,
        session_id=session_id,
        is_active=is_active,
        category_id=category_id,
        school_house_id=school_house_id,
    )
    return paged(page)


@router.get(
    "/generate-admission-no",
    response_model=ApiResponse[str],
    dependencies=[Depends(check_permission("students", "create"))],
)
async def generate_admission_no(scope: TenantScope = Depends(get_tenant_scope)):
    return ok(await service.generate_admission_no(scope))


@router.post(
    "",
    response_model=ApiResponse[StudentResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(check_permission("students", "create"))],
)
async def create_student(payload: StudentCreate, scope: TenantScope = Depends(get_tenant_scope)):
    return ok(await service.create_student(scope, payload), message="Student admitted successfully")


@router.get(
    "/{student_id}",
    response_model=ApiResponse[StudentResponse],
    dependencies=[Depends(check_permission("students", "view"))],
)
async def get_student(
    student_id: UUID,
    session_id: Optional[UUID] = Query(None, alias="sessionId"),
    scope: TenantScope = Depends(get_tenant_scope),
):
    return ok(await service.get_student(scope, student_id, session_id))


@router.put(
    "/{student_id}",
    response_model=ApiResponse[StudentResponse],
    dependencies=[Depends(check_permission("students", "edit"))],
)
async def update_student(student_id: UUID, payload: StudentUpdate, scope: TenantScope = Depends(get_tenant_scope)):
    return ok(await service.update_student(scope, student_id, payload), message="Student updated successfully")


@router.delete(
    "/{student_id}",
    response_model=ApiResponse[None],
    dependencies=[Depends(check_permission("students", "delete"))],
)
async def delete_student(student_id: UUID, scope: TenantScope = Depends(get_tenant_scope)):
    await service.delete_student(scope, student_id)
    return ok(message="Student deleted successfully")

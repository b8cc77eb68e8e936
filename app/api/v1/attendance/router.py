from datetime import date
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from app.auth.dependencies import get_current_user, get_tenant_scope
from app.auth.rbac import check_permission
from app.auth.schemas import CurrentUser
from app.core.schemas import ApiResponse, ok
from app.core.tenant_scope import TenantScope

from .schemas import (
    MonthlyAttendanceSummary,
    SaveResult,
    StaffAttendanceBulkMark,
    StaffAttendanceDay,
    StudentAttendanceBulkMark,
    StudentAttendanceDay,
)
from . import service

router = APIRouter(prefix="/api/v1/attendance", tags=["attendance"])


# ----- Student Attendance -----
@router.get(
    "/students",
    response_model=ApiResponse[StudentAttendanceDay],
    dependencies=[Depends(check_permission("attendance", "view"))],
)
async def get_student_attendance_day(
    class_id: UUID = Query(..., alias="classId"),
    section_id: UUID = Query(..., alias="sectionId"),
    att_date: date = Query(..., alias="date"),
    scope: TenantScope = Depends(get_tenant_scope),
):
    return ok(await service.get_student_attendance_day(scope, class_id, section_id, att_date))


@router.post(
    "/students",
    response_model=ApiResponse[SaveResult],
    dependencies=[Depends(check_permission("attendance", "create"))],
)
async def save_student_attendance(
    payload: StudentAttendanceBulkMark,
    scope: TenantScope = Depends(get_tenant_scope),
    current_user: CurrentUser = Depends(get_current_user),
):
    result = await service.save_student_attendance(scope, current_user.id, payload)
    return ok(result, message="Attendance saved successfully")


@router.get(
    "/students/{student_id}/monthly",
    response_model=ApiResponse[MonthlyAttendanceSummary],
    dependencies=[Depends(check_permission("attendance", "view"))],
)
async def get_student_monthly_attendance(
    student_id: UUID,
    year: int = Query(..., ge=2000, le=2100),
    month: int = Query(..., ge=1, le=12),
    scope: TenantScope = Depends(get_tenant_scope),
):
    return ok(await service.get_student_monthly_attendance(scope, student_id, year, month))


# ----- Staff Attendance -----
@router.get(
    "/staff",
    response_model=ApiResponse[StaffAttendanceDay],
    dependencies=[Depends(check_permission("attendance", "view"))],
)
async def get_staff_attendance_day(
    att_date: date = Query(..., alias="date"),
    role_id: Optional[UUID] = Query(None, alias="roleId"),
    department_id: Optional[UUID] = Query(None, alias="departmentId"),
    scope: TenantScope = Depends(get_tenant_scope),
):
    return ok(await service.get_staff_attendance_day(scope, att_date, role_id=role_id, department_id=department_id))


@router.post(
    "/staff",
    response_model=ApiResponse[SaveResult],
    dependencies=[Depends(check_permission("attendance", "create"))],
)
async def save_staff_attendance(
    payload: StaffAttendanceBulkMark,
    scope: TenantScope = Depends(get_tenant_scope),
    current_user: CurrentUser = Depends(get_current_user),
):
    result = await service.save_staff_attendance(scope, current_user.id, payload)
    return ok(result, message="Attendance saved successfully")

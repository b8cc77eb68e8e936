from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from app.auth.dependencies import get_tenant_scope
from app.auth.rbac import check_permission
from app.core.pagination import PageParams
from app.core.schemas import ApiResponse, ok, paged
from app.core.tenant_scope import TenantScope

from .schemas import (
    RouteCreate,
    RouteResponse,
    RouteUpdate,
    TransportAssignmentResponse,
    TransportAssignRequest,
    VehicleCreate,
    VehicleResponse,
    VehicleUpdate,
)
from . import service

router = APIRouter(prefix="/api/v1/transport", tags=["transport"])


# --- Vehicles ---
@router.get(
    "/vehicles",
    response_model=ApiResponse[List[VehicleResponse]],
    dependencies=[Depends(check_permission("transport", "view"))],
)
async def list_vehicles(
    search: Optional[str] = Query(None),
    params: PageParams = Depends(),
    scope: TenantScope = Depends(get_tenant_scope),
):
    return paged(await service.list_vehicles(scope, params, search=search))


@router.post(
    "/vehicles",
    response_model=ApiResponse[VehicleResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(check_permission("transport", "create"))],
)
async def create_vehicle(payload: VehicleCreate, scope: TenantScope = Depends(get_tenant_scope)):
    return ok(await service.create_vehicle(scope, payload), message="Vehicle created successfully")


@router.get(
    "/vehicles/{vehicle_id}",
    response_model=ApiResponse[VehicleResponse],
    dependencies=[Depends(check_permission("transport", "view"))],
)
async def get_vehicle(vehicle_id: UUID, scope: TenantScope = Depends(get_tenant_scope)):
    return ok(await service.get_vehicle(scope, vehicle_id))


@router.put(
    "/vehicles/{vehicle_id}",
    response_model=ApiResponse[VehicleResponse],
    dependencies=[Depends(check_permission("transport", "edit"))],
)
async def update_vehicle(vehicle_id: UUID, payload: VehicleUpdate, scope: TenantScope = Depends(get_tenant_scope)):
    return ok(await service.update_vehicle(scope, vehicle_id, payload), message="Vehicle updated successfully")


@router.delete(
    "/vehicles/{vehicle_id}",
    response_model=ApiResponse[None],
    dependencies=[Depends(check_permission("transport", "delete"))],
)
async def delete_vehicle(vehicle_id: UUID, scope: TenantScope = Depends(get_tenant_scope)):
    await service.delete_vehicle(scope, vehicle_id)
    return ok(message="Vehicle deleted successfully")


# --- Routes ---
@router.get(
    "/routes",
    response_model=ApiResponse[List[RouteResponse]],
    dependencies=[Depends(check_permission("transport", "view"))],
)
async def list_routes(
    search: Optional[str] = Query(None),
    params: PageParams = Depends(),
    scope: TenantScope = Depends(get_tenant_scope),
):
    return paged(await service.list_routes(scope, params, search=search))


@router.post(
    "/routes",
    response_model=ApiResponse[RouteResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(check_permission("transport", "create"))],
)
async def create_route(payload: RouteCreate, scope: TenantScope = Depends(get_tenant_scope)):
    return ok(await service.create_route(scope, payload), message="Route created successfully")


@router.get(
    "/routes/{route_id}",
    response_model=ApiResponse[RouteResponse],
    dependencies=[Depends(check_permission("transport", "view"))],
)
async def get_route(route_id: UUID, scope: TenantScope = Depends(get_tenant_scope)):
    return ok(await service.get_route(scope, route_id))


@router.put(
    "/routes/{route_id}",
    response_model=ApiResponse[RouteResponse],
    dependencies=[Depends(check_permission("transport", "edit"))],
)
async def update_route(route_id: UUID, payload: RouteUpdate, scope: TenantScope = Depends(get_tenant_scope)):
    return ok(await service.update_route(scope, route_id, payload), message="Route updated successfully")


@router.delete(
    "/routes/{route_id}",
    response_model=ApiResponse[None],
    dependencies=[Depends(check_permission("transport", "delete"))],
)
async def delete_route(route_id: UUID, scope: TenantScope = Depends(get_tenant_scope)):
    await service.delete_route(scope, route_id)
    return ok(message="Route deleted successfully")


# --- Student assignment ---
@router.post(
    "/assign",
    response_model=ApiResponse[TransportAssignmentResponse],
    dependencies=[Depends(check_permission("transport", "create"))],
)
async def assign_transport(payload: TransportAssignRequest, scope: TenantScope = Depends(get_tenant_scope)):
    return ok(await service.assign_transport(scope, payload), message="Transport assigned successfully")


@router.get(
    "/assign",
    response_model=ApiResponse[List[TransportAssignmentResponse]],
    dependencies=[Depends(check_permission("transport", "view"))],
)
async def list_transport_assignments(
    route_id: Optional[UUID] = Query(None, alias="routeId"),
    pickup_point_id: Optional[UUID] = Query(None, alias="pickupPointId"),
    params: PageParams = Depends(),
    scope: TenantScope = Depends(get_tenant_scope),
):
    page = await service.list_transport_assignments(
        scope, params, route_id=route_id, pickup_point_id=pickup_point_id
    )
    return paged(page)


@router.delete(
    "/assign",
    response_model=ApiResponse[None],
    dependencies=[Depends(check_permission("transport", "delete"))],
)
async def remove_transport_assignment(
    student_id: UUID = Query(..., alias="studentId"),
    scope: TenantScope = Depends(get_tenant_scope),
):
    await service.remove_transport_assignment(scope, student_id)
    return ok(message="Transport assignment removed successfully")

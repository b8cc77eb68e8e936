from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload

from app.core.exceptions import ConflictError, NotFoundError, ValidationFailed
from app.core.models import PickupPoint, RouteVehicle, Student, TransportRoute, Vehicle
from app.core.pagination import PageParams
from app.core.schemas import Page
from app.core.tenant_scope import TenantScope

from .schemas import (
    PickupPointIn,
    PickupPointResponse,
    RouteCreate,
    RouteResponse,
    RouteUpdate,
    RouteVehicleItem,
    TransportAssignmentResponse,
    TransportAssignRequest,
    VehicleCreate,
    VehicleResponse,
    VehicleUpdate,
)


# --- Vehicles ---
async def list_vehicles(scope: TenantScope, params: PageParams, search: Optional[str] = None) -> Page:
    stmt = scope.select(Vehicle)
    if search:
        like = f"%{search.strip()}%"
        stmt = stmt.where(or_(Vehicle.vehicle_no.ilike(like), Vehicle.driver_name.ilike(like)))
    page = await scope.paginate(stmt.order_by(Vehicle.vehicle_no), params)
    return page.map(VehicleResponse.model_validate)


async def get_vehicle(scope: TenantScope, vehicle_id: UUID) -> VehicleResponse:
    return VehicleResponse.model_validate(await scope.get_or_404(Vehicle, vehicle_id, "Vehicle"))


async def create_vehicle(scope: TenantScope, payload: VehicleCreate) -> VehicleResponse:
    data = payload.model_dump()
    data["vehicle_no"] = data["vehicle_no"].strip().upper()
    await scope.ensure_unique(Vehicle, "Vehicle number already exists", Vehicle.vehicle_no == data["vehicle_no"])
    obj = scope.add(Vehicle(**data, is_active=True))
    try:
        await scope.db.commit()
    except IntegrityError:
        await scope.db.rollback()
        raise ConflictError("Vehicle number already exists")
    await scope.db.refresh(obj)
    return VehicleResponse.model_validate(obj)


async def update_vehicle(scope: TenantScope, vehicle_id: UUID, payload: VehicleUpdate) -> VehicleResponse:
    obj = await scope.get_or_404(Vehicle, vehicle_id, "Vehicle")
    data = payload.model_dump(exclude_unset=True)
    if data.get("vehicle_no"):
        data["vehicle_no"] = data["vehicle_no"].strip().upper()
        await scope.ensure_unique(
            Vehicle, "Vehicle number already exists", Vehicle.vehicle_no == data["vehicle_no"], exclude_id=obj.id
        )
    for field, value in data.items():
        if field in ("vehicle_no", "is_active") and value is None:
            continue
        setattr(obj, field, value)
    try:
        await scope.db.commit()
    except IntegrityError:
        await scope.db.rollback()
        raise ConflictError("Vehicle number already exists")
    await scope.db.refresh(obj)
    return VehicleResponse.model_validate(obj)


async def delete_vehicle(scope: TenantScope, vehicle_id: UUID) -> None:
    obj = await scope.get_or_404(Vehicle, vehicle_id, "Vehicle")
    if await scope.count(RouteVehicle, RouteVehicle.vehicle_id == obj.id):
        raise ConflictError("Cannot delete vehicle assigned to a route")
    await scope.db.delete(obj)
    await scope.db.commit()


# --- Routes ---
async def _load_route(scope: TenantScope, route_id: UUID) -> TransportRoute:
    stmt = (
        scope.select(TransportRoute, TransportRoute.id == route_id)
        .options(selectinload(TransportRoute.pickup_points))
        .execution_options(populate_existing=True)
    )
    route = (await scope.db.execute(stmt)).scalar_one_or_none()
    if route is None:
        raise NotFoundError("Route not found")
    return route


async def _vehicles_by_route(scope: TenantScope, route_ids: List[UUID]) -> Dict[UUID, List[RouteVehicleItem]]:
    out: Dict[UUID, List[RouteVehicleItem]] = {rid: [] for rid in route_ids}
    if not route_ids:
        return out
    stmt = (
        select(RouteVehicle.route_id, Vehicle)
        .join(Vehicle, Vehicle.id == RouteVehicle.vehicle_id)
        .where(scope.where(RouteVehicle), RouteVehicle.route_id.in_(route_ids))
        .order_by(Vehicle.vehicle_no)
    )
    for route_id, vehicle in (await scope.db.execute(stmt)).all():
        out[route_id].append(
            RouteVehicleItem(vehicle_id=vehicle.id, vehicle_no=vehicle.vehicle_no, driver_name=vehicle.driver_name)
        )
    return out


def _route_to_response(route: TransportRoute, vehicles: List[RouteVehicleItem]) -> RouteResponse:
    return RouteResponse(
        id=route.id,
        school_id=route.school_id,
        title=route.title,
        fare=route.fare,
        is_active=route.is_active,
        vehicles=vehicles,
        pickup_points=[
            PickupPointResponse.model_validate(p) for p in sorted(route.pickup_points, key=lambda p: p.stop_order)
        ],
        created_at=route.created_at,
        updated_at=route.updated_at,
    )


async def _validate_vehicles(scope: TenantScope, vehicle_ids: List[UUID]) -> List[UUID]:
    unique_ids = list(dict.fromkeys(vehicle_ids))
    if unique_ids and await scope.count(Vehicle, Vehicle.id.in_(unique_ids)) != len(unique_ids):
        raise ValidationFailed("Invalid vehicle")
    return unique_ids


async def _sync_vehicles(scope: TenantScope, route_id: UUID, vehicle_ids: List[UUID]) -> None:
    existing = await scope.all(scope.select(RouteVehicle, RouteVehicle.route_id == route_id))
    current = {rv.vehicle_id: rv for rv in existing}
    for vehicle_id, rv in current.items():
        if vehicle_id not in vehicle_ids:
            await scope.db.delete(rv)
    for vehicle_id in vehicle_ids:
        if vehicle_id not in current:
            scope.add(RouteVehicle(route_id=route_id, vehicle_id=vehicle_id))


async def _sync_pickup_points(scope: TenantScope, route: TransportRoute, points: List[PickupPointIn]) -> None:
    """Points with an id update the existing stop; others are added; omitted stops are removed
    unless students ride from them."""
    by_id = {p.id: p for p in route.pickup_points}
    keep = set()
    for item in points:
        if item.id is not None:
            point = by_id.get(item.id)
            if point is None:
                raise ValidationFailed("Invalid pickup point")
            point.name = item.name.strip()
            point.stop_order = item.stop_order
            point.fare = item.fare
            keep.add(point.id)
        else:
            route.pickup_points.append(PickupPoint(name=item.name.strip(), stop_order=item.stop_order, fare=item.fare))
    for point_id, point in by_id.items():
        if point_id in keep:
            continue
        if await scope.count(Student, Student.pickup_point_id == point_id):
            raise ConflictError("Cannot remove pickup point with assigned students")
        route.pickup_points.remove(point)


async def list_routes(scope: TenantScope, params: PageParams, search: Optional[str] = None) -> Page:
    stmt = scope.select(TransportRoute).options(selectinload(TransportRoute.pickup_points))
    if search:
        stmt = stmt.where(TransportRoute.title.ilike(f"%{search.strip()}%"))
    page = await scope.paginate(stmt.order_by(TransportRoute.title), params)
    vehicles = await _vehicles_by_route(scope, [r.id for r in page.items])
    return page.map(lambda r: _route_to_response(r, vehicles[r.id]))


async def get_route(scope: TenantScope, route_id: UUID) -> RouteResponse:
    route = await _load_route(scope, route_id)
    vehicles = await _vehicles_by_route(scope, [route.id])
    return _route_to_response(route, vehicles[route.id])


async def create_route(scope: TenantScope, payload: RouteCreate) -> RouteResponse:
    title = payload.title.strip()
    await scope.ensure_unique(TransportRoute, "Route title already exists", TransportRoute.title == title)
    vehicle_ids = await _validate_vehicles(scope, payload.vehicle_ids)
    if any(p.id is not None for p in payload.pickup_points):
        raise ValidationFailed("Invalid pickup point")
    route = scope.add(
        TransportRoute(
            title=title,
            fare=payload.fare,
            is_active=True,
            pickup_points=[
                PickupPoint(name=p.name.strip(), stop_order=p.stop_order, fare=p.fare) for p in payload.pickup_points
            ],
        )
    )
    try:
        await scope.db.flush()
        await _sync_vehicles(scope, route.id, vehicle_ids)
        await scope.db.commit()
    except IntegrityError:
        await scope.db.rollback()
        raise ConflictError("Route title already exists")
    return await get_route(scope, route.id)


async def update_route(scope: TenantScope, route_id: UUID, payload: RouteUpdate) -> RouteResponse:
    route = await _load_route(scope, route_id)
    if payload.title is not None:
        title = payload.title.strip()
        await scope.ensure_unique(
            TransportRoute, "Route title already exists", TransportRoute.title == title, exclude_id=route.id
        )
        route.title = title
    if "fare" in payload.model_fields_set:
        route.fare = payload.fare
    if payload.is_active is not None:
        route.is_active = payload.is_active
    if payload.vehicle_ids is not None:
        await _sync_vehicles(scope, route.id, await _validate_vehicles(scope, payload.vehicle_ids))
    if payload.pickup_points is not None:
        await _sync_pickup_points(scope, route, payload.pickup_points)
    try:
        await scope.db.commit()
    except IntegrityError:
        await scope.db.rollback()
        raise ConflictError("Route title already exists")
    return await get_route(scope, route.id)


async def delete_route(scope: TenantScope, route_id: UUID) -> None:
    route = await _load_route(scope, route_id)
    point_ids = [p.id for p in route.pickup_points]
    if point_ids and await scope.count(Student, Student.pickup_point_id.in_(point_ids)):
        raise ConflictError("Cannot delete route with assigned students")
    for rv in await scope.all(scope.select(RouteVehicle, RouteVehicle.route_id == route.id)):
        await scope.db.delete(rv)
    await scope.db.flush()
    await scope.db.delete(route)
    await scope.db.commit()


# --- Student assignment ---
def _assignment_stmt(scope: TenantScope):
    return (
        select(Student, PickupPoint, TransportRoute)
        .join(PickupPoint, PickupPoint.id == Student.pickup_point_id)
        .join(TransportRoute, TransportRoute.id == PickupPoint.route_id)
        .where(scope.where(Student), scope.where(TransportRoute))
    )


def _assignment_to_response(row) -> TransportAssignmentResponse:
    student, point, route = row
    name = f"{student.first_name} {student.last_name}".strip() if student.last_name else student.first_name
    return TransportAssignmentResponse(
        student_id=student.id,
        admission_no=student.admission_no,
        student_name=name,
        route_id=route.id,
        route_title=route.title,
        pickup_point_id=point.id,
        pickup_point_name=point.name,
        fare=point.fare if point.fare is not None else route.fare,
    )


async def assign_transport(scope: TenantScope, payload: TransportAssignRequest) -> TransportAssignmentResponse:
    student = await scope.get_or_404(Student, payload.student_id, "Student")
    # pickup points are owned through their route
    point_row = (
        await scope.db.execute(
            select(PickupPoint.id)
            .join(TransportRoute, TransportRoute.id == PickupPoint.route_id)
            .where(PickupPoint.id == payload.pickup_point_id, scope.where(TransportRoute))
        )
    ).first()
    if point_row is None:
        raise ValidationFailed("Invalid pickup point")
    student.pickup_point_id = payload.pickup_point_id
    await scope.db.commit()
    row = (await scope.db.execute(_assignment_stmt(scope).where(Student.id == student.id))).one()
    return _assignment_to_response(row)


async def list_transport_assignments(
    scope: TenantScope,
    params: PageParams,
    route_id: Optional[UUID] = None,
    pickup_point_id: Optional[UUID] = None,
) -> Page:
    stmt = _assignment_stmt(scope)
    if route_id is not None:
        stmt = stmt.where(TransportRoute.id == route_id)
    if pickup_point_id is not None:
        stmt = stmt.where(PickupPoint.id == pickup_point_id)
    stmt = stmt.order_by(TransportRoute.title, PickupPoint.stop_order, Student.first_name)
    page = await scope.paginate(stmt, params, scalars=False)
    return page.map(_assignment_to_response)


async def remove_transport_assignment(scope: TenantScope, student_id: UUID) -> None:
    student = await scope.get_or_404(Student, student_id, "Student")
    if student.pickup_point_id is None:
        raise NotFoundError("Transport assignment not found")
    student.pickup_point_id = None
    await scope.db.commit()

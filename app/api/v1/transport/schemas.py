from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import Field

from app.core.schemas import CamelModel


# --- Vehicles ---
class VehicleCreate(CamelModel):
    vehicle_no: str = Field(..., min_length=1, max_length=50)
    vehicle_model: Optional[str] = Field(None, max_length=100)
    manufacturer: Optional[str] = Field(None, max_length=100)
    driver_name: Optional[str] = Field(None, max_length=100)
    driver_license: Optional[str] = Field(None, max_length=50)
    driver_phone: Optional[str] = Field(None, max_length=50)
    capacity: Optional[int] = Field(None, ge=1)


class VehicleUpdate(CamelModel):
    vehicle_no: Optional[str] = Field(None, min_length=1, max_length=50)
    vehicle_model: Optional[str] = Field(None, max_length=100)
    manufacturer: Optional[str] = Field(None, max_length=100)
    driver_name: Optional[str] = Field(None, max_length=100)
    driver_license: Optional[str] = Field(None, max_length=50)
    driver_phone: Optional[str] = Field(None, max_length=50)
    capacity: Optional[int] = Field(None, ge=1)
    is_active: Optional[bool] = None


class VehicleResponse(CamelModel):
    id: UUID
    school_id: UUID
    vehicle_no: str
    vehicle_model: Optional[str] = None
    manufacturer: Optional[str] = None
    driver_name: Optional[str] = None
    driver_license: Optional[str] = None
    driver_phone: Optional[str] = None
    capacity: Optional[int] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime


# --- Routes ---
class PickupPointIn(CamelModel):
    id: Optional[UUID] = Field(None, description="Existing pickup point to keep and update")
    name: str = Field(..., min_length=1, max_length=150)
    stop_order: int = Field(0, ge=0)
    fare: Optional[Decimal] = Field(None, ge=0)


class RouteCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=150)
    fare: Optional[Decimal] = Field(None, ge=0)
    vehicle_ids: List[UUID] = Field(default_factory=list)
    pickup_points: List[PickupPointIn] = Field(default_factory=list)


class RouteUpdate(CamelModel):
    title: Optional[str] = Field(None, min_length=1, max_length=150)
    fare: Optional[Decimal] = Field(None, ge=0)
    is_active: Optional[bool] = None
    vehicle_ids: Optional[List[UUID]] = None
    pickup_points: Optional[List[PickupPointIn]] = None


class PickupPointResponse(CamelModel):
    id: UUID
    name: str
    stop_order: int
    fare: Optional[Decimal] = None


class RouteVehicleItem(CamelModel):
    vehicle_id: UUID
    vehicle_no: str
    driver_name: Optional[str] = None


class RouteResponse(CamelModel):
    id: UUID
    school_id: UUID
    title: str
    fare: Optional[Decimal] = None
    is_active: bool
    vehicles: List[RouteVehicleItem]
    pickup_points: List[PickupPointResponse]
    created_at: datetime
    updated_at: datetime


# --- Student assignment ---
class TransportAssignRequest(CamelModel):
    student_id: UUID
    pickup_point_id: UUID


class TransportAssignmentResponse(CamelModel):
    student_id: UUID
    admission_no: str
    student_name: str
    route_id: UUID
    route_title: str
    pickup_point_id: UUID
    pickup_point_name: str
    fare: Optional[Decimal] = None

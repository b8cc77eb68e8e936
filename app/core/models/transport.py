import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, Numeric, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.db.session import Base


class Vehicle(Base):
    __tablename__ = "vehicles"
    __table_args__ = (UniqueConstraint("school_id", "vehicle_no", name="uq_vehicle_school_no"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    school_id = Column(UUID(as_uuid=True), ForeignKey("schools.id"), nullable=False, index=True)
    vehicle_no = Column(String(50), nullable=False)
    vehicle_model = Column(String(100), nullable=True)
    manufacturer = Column(String(100), nullable=True)
    driver_name = Column(String(100), nullable=True)
    driver_license = Column(String(50), nullable=True)
    driver_phone = Column(String(50), nullable=True)
    capacity = Column(Integer, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class TransportRoute(Base):
    __tablename__ = "transport_routes"
    __table_args__ = (UniqueConstraint("school_id", "title", name="uq_route_school_title"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    school_id = Column(UUID(as_uuid=True), ForeignKey("schools.id"), nullable=False, index=True)
    title = Column(String(150), nullable=False)
    fare = Column(Numeric(12, 2), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    pickup_points = relationship(
        "PickupPoint",
        back_populates="route",
        cascade="all, delete-orphan",
        order_by="PickupPoint.stop_order",
    )


class RouteVehicle(Base):
    """Vehicle scheduled on a route. A vehicle with any row here cannot be deleted."""

    __tablename__ = "route_vehicles"
    __table_args__ = (UniqueConstraint("route_id", "vehicle_id", name="uq_route_vehicle"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    school_id = Column(UUID(as_uuid=True), ForeignKey("schools.id"), nullable=False, index=True)
    route_id = Column(UUID(as_uuid=True), ForeignKey("transport_routes.id", ondelete="CASCADE"), nullable=False)
    vehicle_id = Column(UUID(as_uuid=True), ForeignKey("vehicles.id"), nullable=False)


class PickupPoint(Base):
    __tablename__ = "pickup_points"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    route_id = Column(UUID(as_uuid=True), ForeignKey("transport_routes.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(150), nullable=False)
    stop_order = Column(Integer, nullable=False, default=0)
    fare = Column(Numeric(12, 2), nullable=True)

    route = relationship("TransportRoute", back_populates="pickup_points")

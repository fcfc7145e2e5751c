"""
SQLAlchemy ORM models  (maps to PostgreSQL + PostGIS).

Tables
------
* ``vehicle_types``          -- tariff-bearing vehicle classes (Angkot, Elf ...)
* ``vehicles``               -- fleet units, bound to a transport order while booked
* ``tour_packages``          -- sellable tour packages
* ``orders``                 -- one row per customer order (TRANSPORT | TOUR)
* ``transportation_orders``  -- validated distance / price of a TRANSPORT order
* ``destinations``           -- normalized stops of a transport order
* ``package_orders``         -- package + departure of a TOUR order
* ``payments``               -- amount due per order

Indexes
-------
* **GIST** on ``destinations.point`` for spatial queries.
* **B-Tree** on foreign keys and ``orders.order_status``.
"""

from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    func,
)
from geoalchemy2 import Geometry

from .database import Base
from src.domain.enums import OrderStatus, OrderType, PaymentStatus


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class VehicleTypeModel(Base):
    __tablename__ = "vehicle_types"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(120), unique=True, nullable=False)
    seat_capacity = Column(Integer, default=12, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, server_default=func.now())


class VehicleModel(Base):
    __tablename__ = "vehicles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    vehicle_type_id = Column(Integer, ForeignKey("vehicle_types.id"), nullable=False)
    plate_number = Column(String(20), unique=True, nullable=False)
    transportation_order_id = Column(
        Integer, ForeignKey("transportation_orders.id"), nullable=True
    )
    created_at = Column(DateTime(timezone=True), default=_utcnow, server_default=func.now())

    __table_args__ = (
        Index("idx_vehicles_type_order", "vehicle_type_id", "transportation_order_id"),
    )


class TourPackageModel(Base):
    __tablename__ = "tour_packages"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    price = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, server_default=func.now())


class OrderModel(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_type = Column(Enum(OrderType), nullable=False)
    order_status = Column(Enum(OrderStatus), default=OrderStatus.PENDING, nullable=False)
    full_name = Column(String(120), nullable=False)
    phone_number = Column(String(30), nullable=False)
    email = Column(String(255), nullable=True)
    total_passengers = Column(Integer, default=1, nullable=False)
    note = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), default=_utcnow, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (Index("idx_orders_status", "order_status"),)


class TransportationOrderModel(Base):
    __tablename__ = "transportation_orders"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("orders.id"), unique=True, nullable=False)
    vehicle_type_id = Column(Integer, ForeignKey("vehicle_types.id"), nullable=False)
    departure_date = Column(DateTime(timezone=True), nullable=False)
    pickup_location = Column(Text, nullable=False)
    destination = Column(Text, nullable=False)
    passenger_count = Column(Integer, default=1, nullable=False)
    vehicle_count = Column(Integer, default=1, nullable=False)
    round_trip = Column(Boolean, default=False, nullable=False)

    # Server-validated figures, never the client's
    total_distance = Column(Float, nullable=False)  # meters
    base_price = Column(Integer, nullable=False)
    inter_trip_charges = Column(Integer, default=0, nullable=False)
    total_price = Column(Integer, nullable=False)

    created_at = Column(DateTime(timezone=True), default=_utcnow, server_default=func.now())


class DestinationModel(Base):
    __tablename__ = "destinations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    transportation_order_id = Column(
        Integer, ForeignKey("transportation_orders.id"), nullable=False
    )
    address = Column(Text, nullable=False)

    # Stored as PostGIS geometry for spatial indexing
    point = Column(Geometry("POINT", srid=4326, spatial_index=False), nullable=True)

    # Also stored as plain floats for fast reads (avoids ST_X / ST_Y)
    lat = Column(Float, nullable=True)
    lng = Column(Float, nullable=True)

    arrival_time = Column(String(5), nullable=True)
    departure_date = Column(Date, nullable=False)
    is_pickup_location = Column(Boolean, default=False, nullable=False)
    sequence = Column(Integer, nullable=False)

    __table_args__ = (
        Index("idx_destinations_point", "point", postgresql_using="gist"),
        Index("idx_destinations_transportation", "transportation_order_id"),
    )


class PackageOrderModel(Base):
    __tablename__ = "package_orders"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("orders.id"), unique=True, nullable=False)
    package_id = Column(Integer, ForeignKey("tour_packages.id"), nullable=False)
    departure_date = Column(DateTime(timezone=True), nullable=False)


class PaymentModel(Base):
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False)
    total_price = Column(Integer, nullable=False)
    payment_status = Column(
        Enum(PaymentStatus), default=PaymentStatus.PENDING, nullable=False
    )
    created_at = Column(DateTime(timezone=True), default=_utcnow, server_default=func.now())

    __table_args__ = (Index("idx_payments_order", "order_id"),)

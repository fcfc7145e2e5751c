"""
Shared test fixtures.

Uses an in-memory SQLite database (via aiosqlite) so tests run without
Docker / PostgreSQL / Redis.  PostGIS-specific features (Geometry columns)
are mocked by using plain String columns in the test models, and the
production repositories are subclassed onto those models.
"""

from contextlib import ExitStack
from datetime import datetime, timezone
from typing import AsyncGenerator
from unittest.mock import patch

import pytest
import pytest_asyncio
from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from src.infrastructure.repositories import (
    DestinationRepository,
    OrderRepository,
    PackageOrderRepository,
    PaymentRepository,
    TourPackageRepository,
    TransportationRepository,
    VehicleRepository,
    VehicleTypeRepository,
)


# ── Test DB (SQLite in-memory) ────────────────────────────────────────

TEST_DB_URL = "sqlite+aiosqlite:///:memory:"

test_engine = create_async_engine(TEST_DB_URL, echo=False, poolclass=StaticPool)
TestSessionFactory = async_sessionmaker(
    test_engine, class_=AsyncSession, expire_on_commit=False
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TestBase(DeclarativeBase):
    __test__ = False


# Mirror the production models but without PostGIS Geometry columns
# (SQLite doesn't support them) and with enums stored as plain strings.

class TestVehicleTypeModel(TestBase):
    __tablename__ = "vehicle_types"
    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(120), unique=True, nullable=False)
    seat_capacity = Column(Integer, default=12, nullable=False)
    created_at = Column(DateTime, default=_utcnow)


class TestTourPackageModel(TestBase):
    __tablename__ = "tour_packages"
    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    price = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=_utcnow)


class TestOrderModel(TestBase):
    __tablename__ = "orders"
    id = Column(Integer, primary_key=True, autoincrement=True)
    order_type = Column(String(20), nullable=False)
    order_status = Column(String(20), default="PENDING", nullable=False)
    full_name = Column(String(120), nullable=False)
    phone_number = Column(String(30), nullable=False)
    email = Column(String(255), nullable=True)
    total_passengers = Column(Integer, default=1, nullable=False)
    note = Column(Text, nullable=True)
    created_at = Column(DateTime, default=_utcnow)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class TestTransportationOrderModel(TestBase):
    __tablename__ = "transportation_orders"
    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("orders.id"), unique=True, nullable=False)
    vehicle_type_id = Column(Integer, ForeignKey("vehicle_types.id"), nullable=False)
    departure_date = Column(DateTime, nullable=False)
    pickup_location = Column(Text, nullable=False)
    destination = Column(Text, nullable=False)
    passenger_count = Column(Integer, default=1, nullable=False)
    vehicle_count = Column(Integer, default=1, nullable=False)
    round_trip = Column(Boolean, default=False, nullable=False)
    total_distance = Column(Float, nullable=False)
    base_price = Column(Integer, nullable=False)
    inter_trip_charges = Column(Integer, default=0, nullable=False)
    total_price = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=_utcnow)


class TestVehicleModel(TestBase):
    __tablename__ = "vehicles"
    id = Column(Integer, primary_key=True, autoincrement=True)
    vehicle_type_id = Column(Integer, ForeignKey("vehicle_types.id"), nullable=False)
    plate_number = Column(String(20), unique=True, nullable=False)
    transportation_order_id = Column(
        Integer, ForeignKey("transportation_orders.id"), nullable=True
    )
    created_at = Column(DateTime, default=_utcnow)


class TestDestinationModel(TestBase):
    __tablename__ = "destinations"
    id = Column(Integer, primary_key=True, autoincrement=True)
    transportation_order_id = Column(
        Integer, ForeignKey("transportation_orders.id"), nullable=False
    )
    address = Column(Text, nullable=False)
    point = Column(String, nullable=True)  # stub for Geometry
    lat = Column(Float, nullable=True)
    lng = Column(Float, nullable=True)
    arrival_time = Column(String(5), nullable=True)
    departure_date = Column(Date, nullable=False)
    is_pickup_location = Column(Boolean, default=False, nullable=False)
    sequence = Column(Integer, nullable=False)


class TestPackageOrderModel(TestBase):
    __tablename__ = "package_orders"
    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("orders.id"), unique=True, nullable=False)
    package_id = Column(Integer, ForeignKey("tour_packages.id"), nullable=False)
    departure_date = Column(DateTime, nullable=False)


class TestPaymentModel(TestBase):
    __tablename__ = "payments"
    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False)
    total_price = Column(Integer, nullable=False)
    payment_status = Column(String(20), default="PENDING", nullable=False)
    created_at = Column(DateTime, default=_utcnow)


# ── Repositories bound to the test models ─────────────────────────────


class _TestVehicleTypeRepository(VehicleTypeRepository):
    model = TestVehicleTypeModel


class _TestVehicleRepository(VehicleRepository):
    model = TestVehicleModel


class _TestTourPackageRepository(TourPackageRepository):
    model = TestTourPackageModel


class _TestOrderRepository(OrderRepository):
    model = TestOrderModel


class _TestTransportationRepository(TransportationRepository):
    model = TestTransportationOrderModel


class _TestDestinationRepository(DestinationRepository):
    model = TestDestinationModel

    @staticmethod
    def _point(lat: float, lng: float):
        return f"POINT({lng} {lat})"


class _TestPackageOrderRepository(PackageOrderRepository):
    model = TestPackageOrderModel


class _TestPaymentRepository(PaymentRepository):
    model = TestPaymentModel


TEST_REPOSITORIES = {
    "VehicleTypeRepository": _TestVehicleTypeRepository,
    "VehicleRepository": _TestVehicleRepository,
    "TourPackageRepository": _TestTourPackageRepository,
    "OrderRepository": _TestOrderRepository,
    "TransportationRepository": _TestTransportationRepository,
    "DestinationRepository": _TestDestinationRepository,
    "PackageOrderRepository": _TestPackageOrderRepository,
    "PaymentRepository": _TestPaymentRepository,
}


# ── Fixtures ──────────────────────────────────────────────────────────


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create tables, yield a session, then drop everything."""
    async with test_engine.begin() as conn:
        await conn.run_sync(TestBase.metadata.create_all)

    async with TestSessionFactory() as session:
        yield session

    async with test_engine.begin() as conn:
        await conn.run_sync(TestBase.metadata.drop_all)
    await test_engine.dispose()


@pytest.fixture
def test_repositories():
    """Point every repository the services and routes build at the test models."""
    targets = [f"src.services.orders.{name}" for name in TEST_REPOSITORIES]
    targets += [
        "src.api.routes.pricing.VehicleTypeRepository",
        "src.api.routes.admin.VehicleTypeRepository",
    ]
    with ExitStack() as stack:
        for target in targets:
            name = target.rsplit(".", 1)[1]
            stack.enter_context(patch(target, TEST_REPOSITORIES[name]))
        yield

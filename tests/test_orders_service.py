"""Service-level tests for order creation and status updates."""

from datetime import date, datetime, timezone

import pytest
import pytest_asyncio

from src.domain.entities import Coordinate, Destination
from src.domain.enums import OrderStatus, VehicleClass
from src.domain.errors import (
    InvalidOrderField,
    InvalidStateTransition,
    NotEnoughVehicles,
    OrderNotFound,
)
from src.domain.reconstruction import group_into_trips, reconstruct_destinations
from src.services.orders import OrderService, default_departure_date, resolve_timezone, to_utc
from src.services.transport_pricing import price_trips
from tests.conftest import TestTourPackageModel, TestVehicleModel

# 20:00 UTC on Oct 19 is already Oct 20 in Jakarta (UTC+7)
NOW = datetime(2026, 10, 19, 20, 0, tzinfo=timezone.utc)


def _undated_stops():
    return [
        Destination(address="Alun-Alun Malang", coordinate=Coordinate(-7.9826, 112.6308), sequence=0),
        Destination(address="Universitas Brawijaya", coordinate=Coordinate(-7.9525, 112.6144), sequence=1),
    ]


@pytest_asyncio.fixture
async def service(db_session, test_repositories):
    svc = OrderService(db_session)
    angkot = await svc.vehicle_types.create(name="Angkot", seat_capacity=12)
    db_session.add(TestVehicleModel(vehicle_type_id=angkot.id, plate_number="N 2001 AB"))
    db_session.add(TestTourPackageModel(name="Batu City Family Day", price=650_000))
    await db_session.flush()
    return svc


async def _quote(destinations):
    breakdown = await price_trips(
        group_into_trips(destinations), VehicleClass.ANGKOT, 1, None
    )
    return breakdown.total_price, breakdown.total_distance_km * 1000


def test_default_departure_date_uses_customer_timezone():
    assert default_departure_date("Asia/Jakarta", NOW) == date(2026, 10, 25)
    assert default_departure_date("UTC", NOW) == date(2026, 10, 24)


def test_unknown_timezone():
    with pytest.raises(InvalidOrderField, match="timezone"):
        resolve_timezone("Mars/Olympus_Mons")


def test_to_utc():
    assert to_utc(date(2026, 11, 2), "08:00", "Asia/Jakarta") == datetime(
        2026, 11, 2, 1, 0, tzinfo=timezone.utc
    )
    assert to_utc(date(2026, 11, 2), None, "UTC").hour == 0


@pytest.mark.asyncio
async def test_transport_order_uses_default_date_and_server_figures(service):
    expected = reconstruct_destinations(_undated_stops(), date(2026, 10, 25))
    price, meters = await _quote(expected)

    record = await service.create_transport_order(
        raw_destinations=_undated_stops(),
        vehicle_type_id=1,
        vehicle_count=1,
        client_distance_meters=meters * 1.05,
        client_price=price * 0.95,
        round_trip=False,
        timezone_name="Asia/Jakarta",
        full_name="Budi Santoso",
        phone_number="+6281234567890",
        today=NOW,
    )

    assert record.transportation.total_price == price
    assert record.transportation.total_distance == pytest.approx(meters)
    assert record.payment.total_price == price
    assert [d.departure_date for d in record.destinations] == [date(2026, 10, 25)] * 2
    assert record.destinations[0].point == "POINT(112.6308 -7.9826)"

    vehicles = await service.vehicles.get_available(1, 5)
    assert vehicles == []


@pytest.mark.asyncio
async def test_transport_order_needs_free_vehicles(service):
    expected = reconstruct_destinations(_undated_stops(), date(2026, 10, 25))
    price, meters = await _quote(expected)
    with pytest.raises(NotEnoughVehicles) as exc_info:
        await service.create_transport_order(
            raw_destinations=_undated_stops(),
            vehicle_type_id=1,
            vehicle_count=2,
            client_distance_meters=meters,
            client_price=price * 2,
            round_trip=True,
            timezone_name="Asia/Jakarta",
            full_name="Budi Santoso",
            phone_number="+6281234567890",
            today=NOW,
        )
    assert exc_info.value.available == 1


@pytest.mark.asyncio
async def test_status_lifecycle(service):
    record = await service.create_tour_order(
        package_id=1,
        departure_date=date(2026, 11, 10),
        departure_time="07:00",
        timezone_name="Asia/Jakarta",
        full_name="Sari Dewi",
        phone_number="+6281111111111",
    )
    assert record.payment.total_price == 650_000

    confirmed = await service.update_status(record.order.id, OrderStatus.CONFIRMED)
    assert confirmed.order.order_status == "CONFIRMED"

    completed = await service.update_status(record.order.id, OrderStatus.COMPLETED)
    assert completed.order.order_status == "COMPLETED"

    with pytest.raises(InvalidStateTransition):
        await service.update_status(record.order.id, OrderStatus.CANCELED)


async def _book_only_vehicle(service):
    expected = reconstruct_destinations(_undated_stops(), date(2026, 10, 25))
    price, meters = await _quote(expected)
    return await service.create_transport_order(
        raw_destinations=_undated_stops(),
        vehicle_type_id=1,
        vehicle_count=1,
        client_distance_meters=meters,
        client_price=price,
        round_trip=False,
        timezone_name="Asia/Jakarta",
        full_name="Budi Santoso",
        phone_number="+6281234567890",
        today=NOW,
    )


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "path",
    [
        [OrderStatus.CANCELED],
        [OrderStatus.CONFIRMED, OrderStatus.COMPLETED],
    ],
)
async def test_terminal_status_releases_vehicles(service, path):
    record = await _book_only_vehicle(service)
    with pytest.raises(NotEnoughVehicles):
        await _book_only_vehicle(service)

    for status in path:
        await service.update_status(record.order.id, status)

    assert len(await service.vehicles.get_available(1, 5)) == 1
    rebooked = await _book_only_vehicle(service)
    assert rebooked.order.id != record.order.id


@pytest.mark.asyncio
async def test_confirming_keeps_vehicles_booked(service):
    record = await _book_only_vehicle(service)
    await service.update_status(record.order.id, OrderStatus.CONFIRMED)
    assert await service.vehicles.get_available(1, 5) == []


@pytest.mark.asyncio
async def test_get_missing_order(service):
    with pytest.raises(OrderNotFound):
        await service.get_order(404)

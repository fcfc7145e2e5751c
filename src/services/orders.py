"""
Order creation and status management.

Every public coroutine runs inside the caller's session (one request = one
transaction): validation happens before the first insert, and any error
raised afterwards rolls back order, transport, destinations, vehicle
assignment and payment together.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Optional, Sequence
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from sqlalchemy.ext.asyncio import AsyncSession

from src.config import settings
from src.domain.entities import Destination, Order
from src.domain.enums import ORDER_TRANSITIONS, OrderStatus, OrderType
from src.domain.errors import (
    InvalidOrderField,
    NotEnoughVehicles,
    OrderNotFound,
    TourPackageNotFound,
)
from src.domain.reconstruction import reconstruct_destinations, require_destinations
from src.domain.routing import RoutingProvider
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
from src.services.transport_pricing import validate_transport_pricing

logger = logging.getLogger(__name__)


@dataclass
class OrderRecord:
    order: Any
    payment: Any = None
    transportation: Any = None
    destinations: list = field(default_factory=list)
    package_order: Any = None


def resolve_timezone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        raise InvalidOrderField("timezone", f"is not a known timezone: {name!r}") from None


def default_departure_date(tz_name: str, now: Optional[datetime] = None) -> date:
    """Today in the customer's timezone plus the configured offset."""
    tz = resolve_timezone(tz_name)
    current = now.astimezone(tz) if now is not None else datetime.now(tz)
    return current.date() + timedelta(days=settings.default_departure_offset_days)


def to_utc(day: date, hhmm: Optional[str], tz_name: str) -> datetime:
    hours, minutes = (int(part) for part in (hhmm or "00:00").split(":"))
    local = datetime.combine(day, time(hours, minutes), tzinfo=resolve_timezone(tz_name))
    return local.astimezone(timezone.utc)


class OrderService:
    def __init__(self, session: AsyncSession, router: Optional[RoutingProvider] = None):
        self.session = session
        self.router = router
        self.orders = OrderRepository(session)
        self.transportations = TransportationRepository(session)
        self.destinations = DestinationRepository(session)
        self.package_orders = PackageOrderRepository(session)
        self.payments = PaymentRepository(session)
        self.vehicle_types = VehicleTypeRepository(session)
        self.vehicles = VehicleRepository(session)
        self.packages = TourPackageRepository(session)

    async def create_transport_order(
        self,
        *,
        raw_destinations: Sequence[Destination],
        vehicle_type_id: int,
        vehicle_count: int,
        client_distance_meters: float,
        client_price: float,
        round_trip: bool,
        timezone_name: str,
        full_name: str,
        phone_number: str,
        email: Optional[str] = None,
        total_passengers: int = 1,
        note: Optional[str] = None,
        today: Optional[datetime] = None,
    ) -> OrderRecord:
        destinations = reconstruct_destinations(
            raw_destinations, default_departure_date(timezone_name, today)
        )
        require_destinations(destinations)

        validated = await validate_transport_pricing(
            destinations,
            vehicle_type_id,
            vehicle_count,
            client_distance_meters,
            client_price,
            vehicle_types=self.vehicle_types,
            router=self.router,
        )

        vehicles = await self.vehicles.get_available(vehicle_type_id, vehicle_count)
        if len(vehicles) < vehicle_count:
            raise NotEnoughVehicles(vehicle_count, len(vehicles))

        first_trip = validated.trips[0]
        order = await self.orders.create_order(
            order_type=OrderType.TRANSPORT,
            full_name=full_name,
            phone_number=phone_number,
            email=email,
            total_passengers=total_passengers,
            note=note,
        )
        transportation = await self.transportations.create(
            order_id=order.id,
            vehicle_type_id=vehicle_type_id,
            departure_date=to_utc(
                first_trip.departure_date, first_trip.start_time, timezone_name
            ),
            pickup_location=destinations[0].address,
            destination=destinations[-1].address,
            passenger_count=total_passengers,
            vehicle_count=vehicle_count,
            round_trip=round_trip,
            validated=validated,
        )
        rows = await self.destinations.add_all(transportation.id, destinations)
        await self.vehicles.assign(vehicles, transportation.id)
        payment = await self.payments.create(
            order_id=order.id, total_price=validated.validated_price
        )

        logger.info(
            "Transport order %d created: %s x%d, %.0f m, %d IDR",
            order.id,
            validated.vehicle_class.value,
            vehicle_count,
            validated.validated_distance,
            validated.validated_price,
        )
        return OrderRecord(
            order=order,
            payment=payment,
            transportation=transportation,
            destinations=rows,
        )

    async def create_tour_order(
        self,
        *,
        package_id: int,
        departure_date: date,
        departure_time: Optional[str],
        timezone_name: str,
        full_name: str,
        phone_number: str,
        email: Optional[str] = None,
        total_passengers: int = 1,
        note: Optional[str] = None,
    ) -> OrderRecord:
        package = await self.packages.get_by_id(package_id)
        if package is None:
            raise TourPackageNotFound(package_id)
        departure = to_utc(departure_date, departure_time, timezone_name)

        order = await self.orders.create_order(
            order_type=OrderType.TOUR,
            full_name=full_name,
            phone_number=phone_number,
            email=email,
            total_passengers=total_passengers,
            note=note,
        )
        package_order = await self.package_orders.create(
            order_id=order.id, package_id=package_id, departure_date=departure
        )
        payment = await self.payments.create(order_id=order.id, total_price=package.price)

        logger.info("Tour order %d created for package %d", order.id, package_id)
        return OrderRecord(order=order, payment=payment, package_order=package_order)

    async def get_order(self, order_id: int) -> OrderRecord:
        order = await self.orders.get_by_id(order_id)
        if order is None:
            raise OrderNotFound(order_id)

        record = OrderRecord(order=order, payment=await self.payments.get_by_order(order_id))
        if OrderType(order.order_type) == OrderType.TRANSPORT:
            record.transportation = await self.transportations.get_by_order(order_id)
            if record.transportation is not None:
                record.destinations = await self.destinations.get_for_transportation(
                    record.transportation.id
                )
        else:
            record.package_order = await self.package_orders.get_by_order(order_id)
        return record

    async def update_status(self, order_id: int, new_status: OrderStatus) -> OrderRecord:
        record = await self.get_order(order_id)
        entity = Order(
            id=record.order.id,
            order_type=OrderType(record.order.order_type),
            status=OrderStatus(record.order.order_status),
        )
        entity.transition_to(new_status)
        record.order.order_status = entity.status.value
        await self.session.flush()
        logger.info("Order %d -> %s", order_id, entity.status.value)

        if not ORDER_TRANSITIONS[entity.status] and record.transportation is not None:
            released = await self.vehicles.release(record.transportation.id)
            logger.info("Order %d released %d vehicle(s)", order_id, released)
        return record

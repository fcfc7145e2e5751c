"""
Repository Pattern -- abstracts DB access so domain logic stays DB-agnostic.

Each repository receives an ``AsyncSession`` (unit-of-work) and exposes
domain-relevant queries only.  The mapped class is a class attribute so a
repository can be pointed at a differently-mapped table of the same shape.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import (
    DestinationModel,
    OrderModel,
    PackageOrderModel,
    PaymentModel,
    TourPackageModel,
    TransportationOrderModel,
    VehicleModel,
    VehicleTypeModel,
)
from src.domain.entities import Destination, ValidatedTransportData
from src.domain.enums import OrderStatus, OrderType, PaymentStatus


class VehicleTypeRepository:
    model = VehicleTypeModel

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, vehicle_type_id: int):
        return await self.session.get(self.model, vehicle_type_id)

    async def get_by_name(self, name: str):
        result = await self.session.execute(
            select(self.model).where(func.lower(self.model.name) == name.lower())
        )
        return result.scalar_one_or_none()

    async def create(self, *, name: str, seat_capacity: int):
        vehicle_type = self.model(name=name, seat_capacity=seat_capacity)
        self.session.add(vehicle_type)
        await self.session.flush()
        return vehicle_type


class VehicleRepository:
    model = VehicleModel

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_available(self, vehicle_type_id: int, limit: int) -> list:
        """Unbooked vehicles of a type, locked until the transaction ends."""
        result = await self.session.execute(
            select(self.model)
            .where(
                self.model.vehicle_type_id == vehicle_type_id,
                self.model.transportation_order_id.is_(None),
            )
            .order_by(self.model.id)
            .limit(limit)
            .with_for_update(skip_locked=True)
        )
        return list(result.scalars().all())

    async def assign(self, vehicles: Sequence, transportation_order_id: int) -> None:
        for vehicle in vehicles:
            vehicle.transportation_order_id = transportation_order_id
        await self.session.flush()

    async def release(self, transportation_order_id: int) -> int:
        """Return the vehicles booked by a transport order to the pool."""
        result = await self.session.execute(
            select(self.model)
            .where(self.model.transportation_order_id == transportation_order_id)
            .with_for_update()
        )
        vehicles = list(result.scalars().all())
        for vehicle in vehicles:
            vehicle.transportation_order_id = None
        await self.session.flush()
        return len(vehicles)


class TourPackageRepository:
    model = TourPackageModel

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, package_id: int):
        return await self.session.get(self.model, package_id)


class OrderRepository:
    model = OrderModel

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_order(
        self,
        *,
        order_type: OrderType,
        full_name: str,
        phone_number: str,
        email: str | None = None,
        total_passengers: int = 1,
        note: str | None = None,
    ):
        order = self.model(
            order_type=order_type.value,
            order_status=OrderStatus.PENDING.value,
            full_name=full_name,
            phone_number=phone_number,
            email=email,
            total_passengers=total_passengers,
            note=note,
        )
        self.session.add(order)
        await self.session.flush()
        return order

    async def get_by_id(self, order_id: int):
        return await self.session.get(self.model, order_id)


class TransportationRepository:
    model = TransportationOrderModel

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(
        self,
        *,
        order_id: int,
        vehicle_type_id: int,
        departure_date: datetime,
        pickup_location: str,
        destination: str,
        passenger_count: int,
        vehicle_count: int,
        round_trip: bool,
        validated: ValidatedTransportData,
    ):
        transportation = self.model(
            order_id=order_id,
            vehicle_type_id=vehicle_type_id,
            departure_date=departure_date,
            pickup_location=pickup_location,
            destination=destination,
            passenger_count=passenger_count,
            vehicle_count=vehicle_count,
            round_trip=round_trip,
            total_distance=validated.validated_distance,
            base_price=validated.base_price,
            inter_trip_charges=validated.inter_trip_charges,
            total_price=validated.validated_price,
        )
        self.session.add(transportation)
        await self.session.flush()
        return transportation

    async def get_by_order(self, order_id: int):
        result = await self.session.execute(
            select(self.model).where(self.model.order_id == order_id)
        )
        return result.scalar_one_or_none()


class DestinationRepository:
    model = DestinationModel

    def __init__(self, session: AsyncSession):
        self.session = session

    @staticmethod
    def _point(lat: float, lng: float):
        from geoalchemy2.functions import ST_MakePoint, ST_SetSRID

        return ST_SetSRID(ST_MakePoint(lng, lat), 4326)

    async def add_all(
        self, transportation_order_id: int, destinations: Sequence[Destination]
    ) -> list:
        rows = []
        for dest in destinations:
            coord = dest.coordinate
            rows.append(
                self.model(
                    transportation_order_id=transportation_order_id,
                    address=dest.address,
                    point=self._point(coord.lat, coord.lng) if coord else None,
                    lat=coord.lat if coord else None,
                    lng=coord.lng if coord else None,
                    arrival_time=dest.arrival_time,
                    departure_date=dest.departure_date,
                    is_pickup_location=dest.is_pickup_location,
                    sequence=dest.sequence,
                )
            )
        self.session.add_all(rows)
        await self.session.flush()
        return rows

    async def get_for_transportation(self, transportation_order_id: int) -> list:
        result = await self.session.execute(
            select(self.model)
            .where(self.model.transportation_order_id == transportation_order_id)
            .order_by(self.model.sequence)
        )
        return list(result.scalars().all())


class PackageOrderRepository:
    model = PackageOrderModel

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, *, order_id: int, package_id: int, departure_date: datetime):
        package_order = self.model(
            order_id=order_id, package_id=package_id, departure_date=departure_date
        )
        self.session.add(package_order)
        await self.session.flush()
        return package_order

    async def get_by_order(self, order_id: int):
        result = await self.session.execute(
            select(self.model).where(self.model.order_id == order_id)
        )
        return result.scalar_one_or_none()


class PaymentRepository:
    model = PaymentModel

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, *, order_id: int, total_price: int):
        payment = self.model(
            order_id=order_id,
            total_price=total_price,
            payment_status=PaymentStatus.PENDING.value,
        )
        self.session.add(payment)
        await self.session.flush()
        return payment

    async def get_by_order(self, order_id: int) -> Optional[PaymentModel]:
        result = await self.session.execute(
            select(self.model)
            .where(self.model.order_id == order_id)
            .order_by(self.model.id.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

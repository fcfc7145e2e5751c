"""
Server-side validation gate for transport orders.

The client computes distance and price in the browser and submits them;
none of it is trusted.  The gate recomputes both from the normalized
destinations and rejects the order when either figure is outside the
tolerance band:

    |server_price - client_price|       <= price_tolerance    x server_price
    |server_distance - client_distance| <= distance_tolerance x server_distance

Every trip-day must have at least two located stops, and a server price
of 0 is never accepted.  Only the server figures are returned, and only
they are persisted.
"""

from __future__ import annotations

import logging
from typing import Optional, Protocol, Sequence

from src.config import settings
from src.domain.distance import validate_price
from src.domain.entities import (
    Destination,
    PriceBreakdown,
    Trip,
    ValidatedTransportData,
)
from src.domain.enums import VehicleClass
from src.domain.errors import (
    DistanceValidationFailed,
    PickupOutsideServiceArea,
    PriceValidationFailed,
    UnbillableTrip,
    VehicleTypeNotFound,
)
from src.domain.pricing import calculate_total_price, resolve_vehicle_class
from src.domain.reconstruction import group_into_trips
from src.domain.routing import RoutingProvider, route_distance
from src.domain.service_areas import validate_pickup_location

logger = logging.getLogger(__name__)


class VehicleTypeLookup(Protocol):
    async def get_by_id(self, vehicle_type_id: int): ...


def within_tolerance(server_value: float, client_value: float, tolerance: float) -> bool:
    return abs(server_value - client_value) <= tolerance * server_value


async def measure_trips(
    trips: Sequence[Trip], router: Optional[RoutingProvider]
) -> float:
    """Fill in each trip's route metrics (date order); return total meters."""
    total_meters = 0.0
    for trip in sorted(trips, key=lambda t: t.departure_date):
        metrics = await route_distance(trip.waypoints, router)
        trip.distance_meters = metrics.distance_meters
        trip.duration_seconds = metrics.duration_seconds
        total_meters += metrics.distance_meters
    return total_meters


async def price_trips(
    trips: Sequence[Trip],
    vehicle_class: VehicleClass,
    vehicle_count: int,
    router: Optional[RoutingProvider],
) -> PriceBreakdown:
    total_meters = await measure_trips(trips, router)
    return calculate_total_price(vehicle_class, total_meters / 1000, vehicle_count, trips)


def check_pickup_area(trips: Sequence[Trip], vehicle_class: VehicleClass, enforce: bool) -> None:
    if not trips or not trips[0].destinations:
        return
    pickup = trips[0].destinations[0]
    if pickup.coordinate is None:
        return
    check = validate_pickup_location(pickup.coordinate, vehicle_class)
    if check.is_valid:
        return
    if enforce:
        raise PickupOutsideServiceArea(check.message or "Pickup outside service area")
    logger.warning("Pickup %r outside service area: %s", pickup.address, check.message)


async def validate_transport_pricing(
    destinations: Sequence[Destination],
    vehicle_type_id: int,
    vehicle_count: int,
    client_distance_meters: float,
    client_price: float,
    *,
    vehicle_types: VehicleTypeLookup,
    router: Optional[RoutingProvider] = None,
    price_tolerance: Optional[float] = None,
    distance_tolerance: Optional[float] = None,
    enforce_pickup_areas: Optional[bool] = None,
) -> ValidatedTransportData:
    if price_tolerance is None:
        price_tolerance = settings.price_tolerance
    if distance_tolerance is None:
        distance_tolerance = settings.distance_tolerance
    if enforce_pickup_areas is None:
        enforce_pickup_areas = settings.enforce_pickup_areas

    vehicle_type = await vehicle_types.get_by_id(vehicle_type_id)
    if vehicle_type is None:
        raise VehicleTypeNotFound(vehicle_type_id)
    vehicle_class = resolve_vehicle_class(vehicle_type.name)

    trips = group_into_trips(destinations)
    for trip in trips:
        if not trip.is_billable:
            raise UnbillableTrip(trip.departure_date)
    check_pickup_area(trips, vehicle_class, enforce_pickup_areas)

    server_meters = await measure_trips(trips, router)
    breakdown = calculate_total_price(
        vehicle_class, server_meters / 1000, vehicle_count, trips
    )
    server_price = breakdown.total_price

    sanity = validate_price(server_price)
    if not sanity.is_valid:
        logger.warning("Server price %d for %s: %s", server_price, vehicle_type.name, sanity.message)
    if server_price <= 0:
        raise PriceValidationFailed(server_price, client_price)

    if not within_tolerance(server_price, client_price, price_tolerance):
        logger.warning(
            "Price mismatch for %s: server=%d client=%s",
            vehicle_type.name, server_price, client_price,
        )
        raise PriceValidationFailed(server_price, client_price)

    if not within_tolerance(server_meters, client_distance_meters, distance_tolerance):
        logger.warning(
            "Distance mismatch for %s: server=%.0fm client=%.0fm",
            vehicle_type.name, server_meters, client_distance_meters,
        )
        raise DistanceValidationFailed(server_meters, client_distance_meters)

    if server_price != client_price or server_meters != client_distance_meters:
        logger.info(
            "Accepted within tolerance: price %d vs %s, distance %.0f vs %.0f",
            server_price, client_price, server_meters, client_distance_meters,
        )

    return ValidatedTransportData(
        validated_distance=server_meters,
        validated_price=server_price,
        inter_trip_charges=breakdown.inter_trip_charges,
        base_price=breakdown.base_price,
        vehicle_class=vehicle_class,
        trips=tuple(trips),
    )

"""
Price preview endpoint
======================

POST /api/v1/calculate-price -- quote a multi-day itinerary before ordering

Uses the same pricing functions as the order validation gate, so a quote
accepted here passes the gate for the same destinations.  Each trip is one
trip-day, so a date may appear only once.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import get_db, get_routing_provider
from src.api.middleware import limiter
from src.api.schemas import (
    InterTripDetailResponse,
    PriceBreakdownResponse,
    PriceCalculationRequest,
    PriceCalculationResponse,
    PriceEnvelope,
    TripDistanceResponse,
    TripRequest,
)
from src.config import settings
from src.domain.entities import Coordinate, Destination, Trip
from src.domain.errors import InvalidOrderField, VehicleTypeNotFound
from src.domain.pricing import resolve_vehicle_class
from src.domain.reconstruction import normalize_time
from src.domain.routing import RoutingProvider
from src.infrastructure.repositories import VehicleTypeRepository
from src.services.transport_pricing import price_trips

router = APIRouter(tags=["pricing"])


def _to_trip(index: int, trip: TripRequest) -> Trip:
    located = [
        loc for loc in trip.location
        if loc.lat is not None and loc.lng is not None
    ]
    destinations = [
        Destination(
            address=loc.address.strip(),
            coordinate=Coordinate(loc.lat, loc.lng),
            arrival_time=normalize_time(loc.time, f"trips[{index}].location[{seq}].time"),
            is_pickup_location=seq == 0,
            sequence=seq,
            departure_date=trip.trip_date,
        )
        for seq, loc in enumerate(located)
    ]
    return Trip(
        departure_date=trip.trip_date,
        destinations=destinations,
        start_time=normalize_time(trip.start_time, f"trips[{index}].startTime"),
    )


@router.post(
    "/calculate-price",
    response_model=PriceEnvelope,
    summary="Quote a transport itinerary",
    responses={404: {"description": "Vehicle type not found"}},
)
@limiter.limit(settings.rate_limit)
async def calculate_price(
    request: Request,
    body: PriceCalculationRequest,
    db: AsyncSession = Depends(get_db),
    routing: Optional[RoutingProvider] = Depends(get_routing_provider),
):
    vehicle_type = await VehicleTypeRepository(db).get_by_id(body.vehicle_type_id)
    if vehicle_type is None:
        raise VehicleTypeNotFound(body.vehicle_type_id)
    vehicle_class = resolve_vehicle_class(vehicle_type.name)

    seen: set = set()
    for i, trip in enumerate(body.trips):
        if trip.trip_date in seen:
            raise InvalidOrderField(
                f"trips[{i}].date", f"repeats an earlier trip: {trip.trip_date.isoformat()}"
            )
        seen.add(trip.trip_date)

    trips = [_to_trip(i, t) for i, t in enumerate(body.trips)]
    breakdown = await price_trips(trips, vehicle_class, body.vehicle_count, routing)

    return PriceEnvelope(
        message="Price calculated successfully",
        data=PriceCalculationResponse(
            vehicle_type=vehicle_type.name,
            vehicle_class=vehicle_class.value,
            vehicle_count=body.vehicle_count,
            total_distance_km=breakdown.total_distance_km,
            base_price=breakdown.base_price,
            inter_trip_charges=breakdown.inter_trip_charges,
            total_price=breakdown.total_price,
            breakdown=PriceBreakdownResponse(
                trip_distances=[
                    TripDistanceResponse(trip_date=d.date, distance_meters=d.distance_meters)
                    for d in breakdown.per_trip_distances
                ],
                inter_trip_details=[
                    InterTripDetailResponse.model_validate(d)
                    for d in breakdown.inter_trip_details
                ],
            ),
        ),
    )

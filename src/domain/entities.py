"""
Domain entities and value objects.

Patterns used
-------------
- **Value Objects** (``Coordinate``, ``RouteMetrics``, ``PriceBreakdown`` ...)
  are request-scoped and carry no persistent identity.
- **State Pattern** on ``Order``: enforces valid lifecycle transitions
  (PENDING -> CONFIRMED -> COMPLETED, PENDING | CONFIRMED -> CANCELED).
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from .enums import (
    ORDER_TRANSITIONS,
    OrderStatus,
    OrderType,
    RouteSource,
    VehicleClass,
)
from .errors import InvalidStateTransition


# ── Value Objects ─────────────────────────────────────────────────────


@dataclass(frozen=True)
class Coordinate:
    lat: float
    lng: float

    def is_valid(self) -> bool:
        """True when both components are finite and inside the WGS84 range."""
        if math.isnan(self.lat) or math.isnan(self.lng):
            return False
        return -90.0 <= self.lat <= 90.0 and -180.0 <= self.lng <= 180.0


@dataclass
class Destination:
    """A single stop.  Partial while parsed, canonical after normalization."""

    address: str
    coordinate: Optional[Coordinate] = None
    arrival_time: Optional[str] = None  # HH:MM
    is_pickup_location: bool = False
    sequence: int = 0
    departure_date: Optional[date] = None
    departure_time: Optional[str] = None  # HH:MM, start of the trip-day
    trip_index: Optional[int] = None


@dataclass
class Trip:
    """One trip-day: destinations sharing a departure date."""

    departure_date: date
    destinations: list[Destination] = field(default_factory=list)
    start_time: Optional[str] = None
    distance_meters: float = 0.0
    duration_seconds: float = 0.0

    @property
    def waypoints(self) -> list[Coordinate]:
        return [d.coordinate for d in self.destinations if d.coordinate is not None]

    @property
    def is_billable(self) -> bool:
        return len(self.waypoints) >= 2


@dataclass(frozen=True)
class RouteMetrics:
    distance_meters: float
    duration_seconds: float
    source: RouteSource = RouteSource.PROVIDER


@dataclass(frozen=True)
class TripDistance:
    date: date
    distance_meters: float


@dataclass(frozen=True)
class InterTripDetail:
    from_address: str
    to_address: str
    distance_km: float
    charge: int


@dataclass(frozen=True)
class PriceBreakdown:
    base_price: int
    inter_trip_charges: int
    total_price: int
    total_distance_km: float
    per_trip_distances: tuple[TripDistance, ...] = ()
    inter_trip_details: tuple[InterTripDetail, ...] = ()


@dataclass(frozen=True)
class ValidatedTransportData:
    """Server-computed figures; these, not the client's, get persisted."""

    validated_distance: float  # meters
    validated_price: int
    inter_trip_charges: int
    base_price: int
    vehicle_class: VehicleClass
    trips: tuple[Trip, ...] = ()


# ── Entities ──────────────────────────────────────────────────────────


@dataclass
class Order:
    id: Optional[int] = None
    order_type: OrderType = OrderType.TRANSPORT
    status: OrderStatus = OrderStatus.PENDING
    created_at: Optional[datetime] = None

    def transition_to(self, new_status: OrderStatus) -> None:
        """Move to *new_status* if the transition is legal, else raise."""
        allowed = ORDER_TRANSITIONS.get(self.status, set())
        if new_status not in allowed:
            raise InvalidStateTransition(
                f"Cannot transition from {self.status.value} to {new_status.value}"
            )
        self.status = new_status

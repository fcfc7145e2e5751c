"""
Geodesy primitives and coarse sanity filters.

``haversine_km`` is the great-circle fallback used whenever the routing
provider is unavailable, and the sole metric for inter-trip gaps.

``validate_distance`` / ``validate_price`` catch obviously corrupt figures
(antipodal geocoding results, NaN) before they reach pricing.  They are
independent of the tolerance cross-check performed by the validation gate.

Complexity: O(1) per call.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional

from .entities import Coordinate

logger = logging.getLogger(__name__)

EARTH_RADIUS_KM = 6_371.0

MIN_DISTANCE_KM = 0.1
MAX_REASONABLE_DISTANCE_KM = 2_000.0  # country-scale upper bound

MIN_REASONABLE_PRICE = 50_000  # IDR
MAX_REASONABLE_PRICE = 100_000_000  # IDR

# Indonesia, approximate
COUNTRY_BOUNDS = {"north": 6.0, "south": -11.0, "east": 141.0, "west": 95.0}


def haversine_km(a: Coordinate, b: Coordinate) -> float:
    """Return the great-circle distance in **km** between two points."""
    lat1_r, lat2_r = math.radians(a.lat), math.radians(b.lat)
    dlat = math.radians(b.lat - a.lat)
    dlng = math.radians(b.lng - a.lng)

    h = (
        math.sin(dlat / 2) ** 2
        + math.cos(lat1_r) * math.cos(lat2_r) * math.sin(dlng / 2) ** 2
    )
    return 2 * EARTH_RADIUS_KM * math.atan2(math.sqrt(h), math.sqrt(max(0.0, 1 - h)))


@dataclass(frozen=True)
class SanityCheck:
    is_valid: bool
    message: Optional[str] = None


def validate_distance(distance_km: float) -> SanityCheck:
    if math.isnan(distance_km) or distance_km < 0:
        return SanityCheck(False, "Invalid coordinates or uncomputable distance")
    if distance_km < MIN_DISTANCE_KM:
        return SanityCheck(False, "Distance too short: minimum is 100 m")
    if distance_km > MAX_REASONABLE_DISTANCE_KM:
        return SanityCheck(False, "Distance too long: maximum is 2000 km per order")
    return SanityCheck(True)


def validate_price(price: float) -> SanityCheck:
    if math.isnan(price) or price < 0:
        return SanityCheck(False, "Invalid price")
    if price < MIN_REASONABLE_PRICE:
        return SanityCheck(False, "Price unusually low")
    if price > MAX_REASONABLE_PRICE:
        return SanityCheck(False, "Price unusually high")
    return SanityCheck(True)


def within_country_bounds(coordinate: Coordinate) -> bool:
    """Advisory only: callers log, they never reject on this."""
    return (
        COUNTRY_BOUNDS["south"] <= coordinate.lat <= COUNTRY_BOUNDS["north"]
        and COUNTRY_BOUNDS["west"] <= coordinate.lng <= COUNTRY_BOUNDS["east"]
    )

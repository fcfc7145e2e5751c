"""
Route distance aggregation for one trip-day.

The waypoint order reflects the customer's itinerary, not the shortest
path, so providers are always asked for the route *as given*.

Fallback
--------
A provider failure is never surfaced.  The aggregator makes one attempt,
then sums consecutive Haversine legs and estimates the duration at
~50 km/h (120 s per km).
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Optional, Sequence

from .distance import haversine_km
from .entities import Coordinate, RouteMetrics
from .enums import RouteSource
from .errors import RoutingProviderError
from .rounding import round_half_up

logger = logging.getLogger(__name__)

SECONDS_PER_KM = 120


class RoutingProvider(ABC):
    @abstractmethod
    async def route(self, waypoints: Sequence[Coordinate]) -> RouteMetrics:
        """Return summed leg metrics; raise ``RoutingProviderError`` on failure."""


def haversine_route(waypoints: Sequence[Coordinate]) -> RouteMetrics:
    """Sum great-circle legs between consecutive waypoints.  O(n)."""
    total_km = 0.0
    for a, b in zip(waypoints, waypoints[1:]):
        total_km += haversine_km(a, b)
    return RouteMetrics(
        distance_meters=total_km * 1000,
        duration_seconds=round_half_up(total_km * SECONDS_PER_KM),
        source=RouteSource.HAVERSINE,
    )


async def route_distance(
    waypoints: Sequence[Coordinate],
    provider: Optional[RoutingProvider] = None,
) -> RouteMetrics:
    if len(waypoints) < 2:
        return RouteMetrics(0.0, 0.0, RouteSource.HAVERSINE)
    if provider is None:
        return haversine_route(waypoints)

    try:
        return await provider.route(waypoints)
    except RoutingProviderError as exc:
        logger.warning(
            "Routing provider failed (%s: %s); using Haversine fallback",
            exc.status,
            exc.message,
        )
        return haversine_route(waypoints)

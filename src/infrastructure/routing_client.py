"""
Google Maps Directions API client.

One request per trip-day: origin = first waypoint, destination = last,
intermediate stops passed as ``waypoints`` in the given order (the
``optimize:`` flag is never sent, so Google keeps the itinerary order).
Leg distances and durations are summed.

Every failure mode is reported as ``RoutingProviderError``; the route
aggregator turns that into a Haversine estimate.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

import httpx

from src.config import settings
from src.domain.entities import Coordinate, RouteMetrics
from src.domain.enums import RouteSource
from src.domain.errors import RoutingProviderError
from src.domain.routing import RoutingProvider

logger = logging.getLogger(__name__)


def _latlng(c: Coordinate) -> str:
    return f"{c.lat},{c.lng}"


def _status_and_routes(data) -> tuple[str, list]:
    if not isinstance(data, dict):
        raise RoutingProviderError(
            f"Directions API body is a {type(data).__name__}, not an object",
            status="BAD_RESPONSE",
        )
    status = data.get("status", "UNKNOWN")
    routes = data.get("routes") or []
    if not isinstance(routes, list):
        raise RoutingProviderError("Directions API routes is not a list", status="BAD_RESPONSE")
    return str(status), routes


def _leg_value(leg: dict, key: str) -> float:
    """``leg[key]["value"]``; meters for distance, seconds for duration."""
    value = leg[key]["value"]
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"{key}.value is {type(value).__name__}")
    return float(value)


class GoogleDirectionsClient(RoutingProvider):
    def __init__(
        self,
        client: httpx.AsyncClient,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
    ):
        self.client = client
        self.api_key = api_key if api_key is not None else settings.google_maps_api_key
        self.base_url = base_url or settings.google_directions_url

    def build_params(self, waypoints: Sequence[Coordinate]) -> dict[str, str]:
        params = {
            "origin": _latlng(waypoints[0]),
            "destination": _latlng(waypoints[-1]),
            "mode": "driving",
            "key": self.api_key or "",
        }
        if len(waypoints) > 2:
            params["waypoints"] = "|".join(_latlng(c) for c in waypoints[1:-1])
        return params

    async def route(self, waypoints: Sequence[Coordinate]) -> RouteMetrics:
        if not self.api_key:
            raise RoutingProviderError(
                "Google Maps API key is not configured", status="CONFIG_ERROR"
            )
        if len(waypoints) < 2:
            raise RoutingProviderError("At least two waypoints are required", "INVALID_REQUEST")

        try:
            response = await self.client.get(
                self.base_url, params=self.build_params(waypoints)
            )
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as exc:
            raise RoutingProviderError(
                f"Directions API returned HTTP {exc.response.status_code}",
                status="HTTP_ERROR",
            ) from exc
        except httpx.HTTPError as exc:
            raise RoutingProviderError(
                f"Unable to reach Directions API: {exc!r}", status="CONNECTION_ERROR"
            ) from exc
        except ValueError as exc:
            raise RoutingProviderError(
                "Directions API returned a malformed body", status="BAD_RESPONSE"
            ) from exc

        status, routes = _status_and_routes(data)
        if status != "OK" or not routes:
            raise RoutingProviderError(f"Directions API status {status}", status=status)

        try:
            legs = routes[0]["legs"]
            distance = sum(_leg_value(leg, "distance") for leg in legs)
            duration = sum(_leg_value(leg, "duration") for leg in legs)
        except (AttributeError, TypeError, KeyError, IndexError, ValueError) as exc:
            raise RoutingProviderError(
                f"Directions API returned an unexpected route shape: {exc!r}",
                status="BAD_RESPONSE",
            ) from exc
        if not legs:
            raise RoutingProviderError("Directions API route has no legs", status="BAD_RESPONSE")

        logger.info(
            "Directions route: %d waypoints, %.0f m, %.0f s",
            len(waypoints), distance, duration,
        )
        return RouteMetrics(distance, duration, RouteSource.PROVIDER)

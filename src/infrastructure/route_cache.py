"""
Redis-backed cache in front of a routing provider.

Only successful provider answers are cached, keyed on the waypoint list
rounded to 6 decimals (~0.1 m).  Redis failures are logged and the
inner provider is called directly; an undecodable entry counts as a miss.
"""

from __future__ import annotations

import hashlib
import json
import logging
from typing import Sequence

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from src.domain.entities import Coordinate, RouteMetrics
from src.domain.enums import RouteSource
from src.domain.routing import RoutingProvider

logger = logging.getLogger(__name__)

_PREFIX = "booking:route"


def route_key(waypoints: Sequence[Coordinate]) -> str:
    raw = ";".join(f"{c.lat:.6f},{c.lng:.6f}" for c in waypoints)
    return f"{_PREFIX}:{hashlib.sha256(raw.encode()).hexdigest()[:32]}"


class CachedRoutingProvider(RoutingProvider):
    def __init__(
        self, inner: RoutingProvider, client: aioredis.Redis, ttl_seconds: int
    ):
        self.inner = inner
        self.redis = client
        self.ttl = ttl_seconds

    async def route(self, waypoints: Sequence[Coordinate]) -> RouteMetrics:
        key = route_key(waypoints)
        try:
            raw = await self.redis.get(key)
        except RedisError as exc:
            logger.warning("Route cache read failed: %s", exc)
            raw = None

        if raw is not None:
            try:
                cached = json.loads(raw)
                return RouteMetrics(
                    float(cached["distance_meters"]),
                    float(cached["duration_seconds"]),
                    RouteSource.CACHE,
                )
            except (TypeError, KeyError, ValueError) as exc:
                logger.warning("Ignoring undecodable route cache entry %s: %r", key, exc)

        metrics = await self.inner.route(waypoints)
        try:
            await self.redis.set(
                key,
                json.dumps(
                    {
                        "distance_meters": metrics.distance_meters,
                        "duration_seconds": metrics.duration_seconds,
                    }
                ),
                ex=self.ttl,
            )
        except RedisError as exc:
            logger.warning("Route cache write failed: %s", exc)
        return metrics

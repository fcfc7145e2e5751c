"""
FastAPI application factory.

* Registers routes for orders, price preview and admin.
* Builds the routing provider (Google Directions behind the Redis route
  cache) on startup and closes its HTTP client on shutdown.
* Maps domain errors to ``{"message": ..., "data": null}`` responses.
* Applies rate-limiting middleware.
* Swagger / OpenAPI UI available at ``/docs``.
"""

from contextlib import asynccontextmanager
import logging

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from src.api.middleware import limiter
from src.api.routes import admin, orders, pricing
from src.config import settings
from src.domain.errors import (
    BookingError,
    DistanceValidationFailed,
    DuplicateVehicleType,
    InvalidOrderField,
    InvalidStateTransition,
    NotEnoughVehicles,
    NoValidDestinations,
    OrderNotFound,
    PickupOutsideServiceArea,
    PriceValidationFailed,
    TourPackageNotFound,
    UnbillableTrip,
    VehicleTypeNotFound,
)
from src.infrastructure.redis_client import get_redis
from src.infrastructure.route_cache import CachedRoutingProvider
from src.infrastructure.routing_client import GoogleDirectionsClient

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

ERROR_STATUS: dict[type[BookingError], int] = {
    InvalidOrderField: 400,
    NoValidDestinations: 400,
    NotEnoughVehicles: 400,
    PriceValidationFailed: 400,
    DistanceValidationFailed: 400,
    PickupOutsideServiceArea: 400,
    UnbillableTrip: 400,
    VehicleTypeNotFound: 404,
    TourPackageNotFound: 404,
    OrderNotFound: 404,
    InvalidStateTransition: 409,
    DuplicateVehicleType: 409,
}


def _error_body(message: str) -> dict:
    return {"message": message, "data": None}


async def booking_error_handler(request: Request, exc: BookingError) -> JSONResponse:
    status = ERROR_STATUS.get(type(exc), 400)
    logger.info("%s %s -> %d: %s", request.method, request.url.path, status, exc.message)
    return JSONResponse(status_code=status, content=_error_body(exc.message))


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    error = exc.errors()[0]
    field = ".".join(str(part) for part in error["loc"] if part != "body") or "body"
    reason = "is required" if error["type"] == "missing" else error["msg"]
    return JSONResponse(status_code=400, content=_error_body(f"Field {field} {reason}"))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content=_error_body("Internal Server Error"))


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the routing provider on startup; close its HTTP client on shutdown."""
    http_client = httpx.AsyncClient(timeout=settings.routing_timeout_seconds)
    provider = None
    if settings.google_maps_api_key:
        provider = GoogleDirectionsClient(http_client)
        if settings.route_cache_ttl_seconds > 0:
            provider = CachedRoutingProvider(
                provider, await get_redis(), settings.route_cache_ttl_seconds
            )
    else:
        logger.warning("GOOGLE_MAPS_API_KEY not set; route distances use Haversine only")
    app.state.routing_provider = provider
    yield
    await http_client.aclose()


def create_app() -> FastAPI:
    app = FastAPI(
        title="Tour & Transport Booking API",
        description=(
            "Accepts tour and multi-day transport orders.  Transport prices "
            "and distances submitted by the client are recomputed on the "
            "server and rejected outside a tolerance band."
        ),
        version="1.0.0",
        lifespan=lifespan,
    )

    # Rate limiter
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # Error envelopes
    app.add_exception_handler(BookingError, booking_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    # Routers
    app.include_router(orders.router, prefix="/api/v1")
    app.include_router(pricing.router, prefix="/api/v1")
    app.include_router(admin.router, prefix="/api/v1")

    return app

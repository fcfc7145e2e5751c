"""
Admin / observability endpoints
===============================

POST /api/v1/admin/vehicle-types -- register a vehicle type (tariff resolved by name)
GET  /api/v1/admin/health        -- simple health check
"""

import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import get_db
from src.api.middleware import limiter
from src.api.schemas import HealthResponse, VehicleTypeCreate, VehicleTypeResponse
from src.config import settings
from src.domain.errors import DuplicateVehicleType
from src.domain.pricing import resolve_vehicle_class
from src.infrastructure.repositories import VehicleTypeRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


@router.post(
    "/vehicle-types",
    status_code=201,
    response_model=VehicleTypeResponse,
    summary="Create a vehicle type",
    responses={409: {"description": "A vehicle type with this name exists"}},
)
@limiter.limit(settings.rate_limit)
async def create_vehicle_type(
    request: Request,
    body: VehicleTypeCreate,
    db: AsyncSession = Depends(get_db),
):
    repo = VehicleTypeRepository(db)
    name = body.name.strip()
    if await repo.get_by_name(name) is not None:
        raise DuplicateVehicleType(name)

    vehicle_type = await repo.create(name=name, seat_capacity=body.seat_capacity)
    logger.info(
        "Vehicle type %r created, billed as %s",
        name, resolve_vehicle_class(name).value,
    )
    return vehicle_type


@router.get("/health", response_model=HealthResponse, summary="Health check")
async def health():
    return HealthResponse()

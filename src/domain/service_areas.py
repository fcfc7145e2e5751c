"""
Pickup service areas per vehicle class.

Each area is a set of (center, radius) circles; a pickup is inside the
area when it falls in any circle.  Angkot and Elf operate from greater
Malang, Hiace only from the Malang or Surabaya city centres.  Unknown
classes get the most restrictive (Malang-only) rule.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .distance import haversine_km
from .entities import Coordinate
from .enums import VehicleClass


@dataclass(frozen=True)
class AreaCircle:
    name: str
    center: Coordinate
    radius_km: float


AREAS: dict[str, tuple[AreaCircle, ...]] = {
    "MALANG": (
        AreaCircle("Kota Malang", Coordinate(-7.983908, 112.621391), 15.0),
        AreaCircle("Kabupaten Malang", Coordinate(-8.16667, 112.66667), 50.0),
    ),
    "MALANG_HIACE": (
        AreaCircle("Pusat Kota Malang", Coordinate(-7.983908, 112.621391), 8.0),
    ),
    "SURABAYA_HIACE": (
        AreaCircle("Pusat Kota Surabaya", Coordinate(-7.250445, 112.768845), 8.0),
    ),
}

PICKUP_AREAS: dict[VehicleClass, tuple[str, ...]] = {
    VehicleClass.ANGKOT: ("MALANG",),
    VehicleClass.ELF: ("MALANG",),
    VehicleClass.HIACE_COMMUTER: ("MALANG_HIACE", "SURABAYA_HIACE"),
    VehicleClass.HIACE_PREMIO: ("MALANG_HIACE", "SURABAYA_HIACE"),
    VehicleClass.DEFAULT: ("MALANG",),
}


@dataclass(frozen=True)
class AreaCheck:
    is_valid: bool
    message: Optional[str] = None
    allowed_areas: tuple[str, ...] = ()


def in_area(coordinate: Coordinate, area: str) -> bool:
    return any(
        haversine_km(coordinate, circle.center) <= circle.radius_km
        for circle in AREAS[area]
    )


def validate_pickup_location(
    coordinate: Coordinate, vehicle_class: VehicleClass
) -> AreaCheck:
    allowed = PICKUP_AREAS[vehicle_class]
    if not coordinate.is_valid():
        return AreaCheck(False, "Invalid pickup coordinates", allowed)
    if any(in_area(coordinate, area) for area in allowed):
        return AreaCheck(True, allowed_areas=allowed)
    return AreaCheck(
        False,
        f"{vehicle_class.value} picks up only in {' and '.join(allowed)}",
        allowed,
    )

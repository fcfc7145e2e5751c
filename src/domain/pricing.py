"""
Transport Pricing Engine  (Strategy Pattern)
============================================

Formula (fixed tariffs)
-----------------------
Price = round((Fixed_Base + Distance x Rate_Per_KM) x (1 + Tax_Rate)) x Vehicle_Count

Formula (default tariff)
------------------------
Price = round(6000 x Distance x Vehicle_Count)

Total = Base_Price + Inter_Trip_Charges

The base price is billed on the *aggregate* distance of every trip-day.
The same functions back the price preview endpoint and the order
validation gate; a tariff change here changes both at once.

Complexity: O(1) per tariff, O(T) for the total over T trip-days.
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from typing import Sequence, Union

from .distance import validate_distance
from .entities import PriceBreakdown, Trip, TripDistance
from .enums import VehicleClass
from .rounding import round_half_up
from .surcharge import inter_trip_details

logger = logging.getLogger(__name__)


# ── Strategy hierarchy ────────────────────────────────────────────────


class TariffStrategy(ABC):
    @abstractmethod
    def calculate(self, distance_km: float, vehicle_count: int) -> int: ...


class FixedPlusDistanceTariff(TariffStrategy):
    """Fixed base fare plus a per-km rate, taxed, per vehicle."""

    def __init__(self, fixed_base: int, per_km_rate: int, tax_rate: float):
        self.fixed_base = fixed_base
        self.per_km_rate = per_km_rate
        self.tax_rate = tax_rate

    def calculate(self, distance_km: float, vehicle_count: int) -> int:
        raw = (self.fixed_base + self.per_km_rate * distance_km) * (1 + self.tax_rate)
        return round_half_up(raw) * vehicle_count


class FlatRateTariff(TariffStrategy):
    def __init__(self, per_km_rate: int):
        self.per_km_rate = per_km_rate

    def calculate(self, distance_km: float, vehicle_count: int) -> int:
        return round_half_up(self.per_km_rate * distance_km * vehicle_count)


TARIFFS: dict[VehicleClass, TariffStrategy] = {
    VehicleClass.ANGKOT: FixedPlusDistanceTariff(150_000, 4_100, 0.20),
    VehicleClass.HIACE_COMMUTER: FixedPlusDistanceTariff(1_000_000, 2_500, 0.10),
    VehicleClass.HIACE_PREMIO: FixedPlusDistanceTariff(1_150_000, 25_000, 0.10),
    VehicleClass.ELF: FixedPlusDistanceTariff(1_250_000, 2_500, 0.10),
    VehicleClass.DEFAULT: FlatRateTariff(6_000),
}


# ── Vehicle class resolution ──────────────────────────────────────────


def resolve_vehicle_class(vehicle_type_name: str) -> VehicleClass:
    """Map a vehicle type name to its tariff profile.

    Exact identifiers win (``"HIACE_PREMIO"``, ``"hiace premio"``); legacy
    free-form names fall back to the substring rules the fleet was first
    configured with.
    """
    name = (vehicle_type_name or "").strip().lower()
    normalized = re.sub(r"[\s\-]+", "_", name).upper()
    if normalized in VehicleClass.__members__:
        return VehicleClass[normalized]

    if "angkot" in name:
        return VehicleClass.ANGKOT
    if "hiace" in name and "commuter" in name:
        return VehicleClass.HIACE_COMMUTER
    if "hiace" in name and "premio" in name:
        return VehicleClass.HIACE_PREMIO
    if "elf" in name:
        return VehicleClass.ELF
    return VehicleClass.DEFAULT


# ── Engine functions ──────────────────────────────────────────────────


def tariff_base_price(
    vehicle_class: VehicleClass, distance_km: float, vehicle_count: int
) -> int:
    check = validate_distance(distance_km)
    if not check.is_valid:
        logger.warning(
            "Invalid distance for %s: %s km (%s); pricing at 0",
            vehicle_class.value,
            distance_km,
            check.message,
        )
        return 0
    return TARIFFS[vehicle_class].calculate(distance_km, vehicle_count)


def calculate_total_price(
    vehicle_class: Union[VehicleClass, str],
    total_distance_km: float,
    vehicle_count: int,
    trips: Sequence[Trip],
) -> PriceBreakdown:
    """Price a whole order.  Pure and deterministic for fixed inputs."""
    if not isinstance(vehicle_class, VehicleClass):
        vehicle_class = resolve_vehicle_class(vehicle_class)

    base_price = tariff_base_price(vehicle_class, total_distance_km, vehicle_count)
    details = inter_trip_details(trips)
    surcharge = sum(d.charge for d in details)

    return PriceBreakdown(
        base_price=base_price,
        inter_trip_charges=surcharge,
        total_price=base_price + surcharge,
        total_distance_km=total_distance_km,
        per_trip_distances=tuple(
            TripDistance(t.departure_date, t.distance_meters)
            for t in sorted(trips, key=lambda t: t.departure_date)
        ),
        inter_trip_details=tuple(details),
    )

"""
Inter-trip repositioning surcharge.

When the fleet has to travel from where one trip-day ends to where the next
one starts, every started 10 km beyond a 50 km free radius costs 50,000.

    charge = ceil((gap_km - 50) / 10) * 50_000      if gap_km > 50

The gap is directional (end of day *n* -> start of day *n+1*), so trips are
always walked in ascending date order.
"""

from __future__ import annotations

import math
from typing import Sequence

from .distance import haversine_km
from .entities import InterTripDetail, Trip

FREE_RADIUS_KM = 50.0
BRACKET_KM = 10.0
BRACKET_CHARGE = 50_000


def gap_surcharge(distance_km: float) -> int:
    if not distance_km > FREE_RADIUS_KM:
        return 0
    brackets = math.ceil((distance_km - FREE_RADIUS_KM) / BRACKET_KM)
    return brackets * BRACKET_CHARGE


def inter_trip_details(trips: Sequence[Trip]) -> list[InterTripDetail]:
    """One entry per adjacent pair of trip-days that can be measured."""
    ordered = sorted(trips, key=lambda t: t.departure_date)
    details: list[InterTripDetail] = []
    for current, following in zip(ordered, ordered[1:]):
        if not current.destinations or not following.destinations:
            continue
        last = current.destinations[-1]
        first = following.destinations[0]
        if last.coordinate is None or first.coordinate is None:
            continue

        gap_km = haversine_km(last.coordinate, first.coordinate)
        details.append(
            InterTripDetail(
                from_address=last.address,
                to_address=first.address,
                distance_km=gap_km,
                charge=gap_surcharge(gap_km),
            )
        )
    return details


def inter_trip_charges(trips: Sequence[Trip]) -> int:
    return sum(d.charge for d in inter_trip_details(trips))

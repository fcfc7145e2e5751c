"""
Destination reconstruction & normalization.

The order form submits destinations as flat, index-addressed fields::

    destinations[3].address      = "Jl. Ijen 1, Malang"
    destinations[3].lat          = "-7.97"
    destinations[3].departureDate = "2025-07-01"
    ...

``parse_destination_fields`` turns them into partial ``Destination``
records; ``reconstruct_destinations`` produces the canonical, dated and
densely sequenced list; ``group_into_trips`` splits it into trip-days.

Sequence-to-day binding
-----------------------
Undated destinations are bound to a day by an explicit ``tripIndex`` when
the client sends one.  Otherwise the client's ``tripIndex * 100 + locIndex``
sequence encoding is decoded: sequence < 100 is the first day, anything
else the second day (or the first, when only one date is known).
"""

from __future__ import annotations

import logging
import math
import re
from collections import defaultdict
from dataclasses import replace
from datetime import date
from typing import Iterable, Mapping, Optional, Sequence

from .distance import within_country_bounds
from .entities import Coordinate, Destination, Trip
from .errors import InvalidOrderField, NoValidDestinations

logger = logging.getLogger(__name__)

FIELD_PATTERN = re.compile(r"^destinations\[(\d+)\]\.(\w+)$")
TIME_PATTERN = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)$")
SECOND_DAY_SEQUENCE = 100


# ── Field coercion ────────────────────────────────────────────────────


def _blank(value: Optional[str]) -> bool:
    return value is None or str(value).strip() == ""


def _parse_float(value: Optional[str], field: str) -> Optional[float]:
    if _blank(value):
        return None
    try:
        parsed = float(value)
    except ValueError:
        raise InvalidOrderField(field, f"is not a number: {value!r}") from None
    if not math.isfinite(parsed):
        raise InvalidOrderField(field, f"is not a finite number: {value!r}")
    return parsed


def _parse_int(value: Optional[str], field: str) -> Optional[int]:
    if _blank(value):
        return None
    try:
        return int(str(value).strip())
    except ValueError:
        raise InvalidOrderField(field, f"is not an integer: {value!r}") from None


def parse_date(value: Optional[str], field: str) -> Optional[date]:
    """Accept ``YYYY-MM-DD`` or a full ISO timestamp (date part is used)."""
    if _blank(value):
        return None
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError:
        raise InvalidOrderField(field, f"is not a YYYY-MM-DD date: {value!r}") from None


def normalize_time(value: Optional[str], field: str) -> Optional[str]:
    """``"9:05"`` -> ``"09:05"``; rejects anything that is not HH:MM."""
    if _blank(value):
        return None
    match = TIME_PATTERN.match(str(value).strip())
    if not match:
        raise InvalidOrderField(field, f"is not an HH:MM time: {value!r}")
    return f"{int(match.group(1)):02d}:{match.group(2)}"


def _parse_bool(value: Optional[str]) -> bool:
    return not _blank(value) and str(value).strip().lower() in {"true", "1", "on", "yes"}


# ── Parsing ───────────────────────────────────────────────────────────


def parse_destination_fields(form: Mapping[str, str]) -> list[Destination]:
    """Collect ``destinations[<idx>].<field>`` keys into partial records.

    Entries are returned in index order.  Rows without an address are kept
    here and dropped by ``reconstruct_destinations``.
    """
    rows: dict[int, dict[str, str]] = defaultdict(dict)
    for key, value in form.items():
        match = FIELD_PATTERN.match(key)
        if match:
            rows[int(match.group(1))][match.group(2)] = value

    destinations: list[Destination] = []
    for index in sorted(rows):
        row = rows[index]
        prefix = f"destinations[{index}]"

        lat = _parse_float(row.get("lat"), f"{prefix}.lat")
        lng = _parse_float(row.get("lng"), f"{prefix}.lng")
        coordinate = None
        if lat is not None and lng is not None:
            coordinate = Coordinate(lat, lng)
            if not coordinate.is_valid():
                raise InvalidOrderField(f"{prefix}.lat", "is out of the WGS84 range")
            if not within_country_bounds(coordinate):
                logger.warning(
                    "Destination %d (%.5f, %.5f) is outside the country bounds",
                    index, lat, lng,
                )

        sequence = _parse_int(row.get("sequence"), f"{prefix}.sequence")
        destinations.append(
            Destination(
                address=(row.get("address") or "").strip(),
                coordinate=coordinate,
                arrival_time=normalize_time(row.get("arrivalTime"), f"{prefix}.arrivalTime"),
                is_pickup_location=_parse_bool(row.get("isPickupLocation")),
                sequence=index if sequence is None else sequence,
                departure_date=parse_date(row.get("departureDate"), f"{prefix}.departureDate"),
                departure_time=normalize_time(
                    row.get("departureTime"), f"{prefix}.departureTime"
                ),
                trip_index=_parse_int(row.get("tripIndex"), f"{prefix}.tripIndex"),
            )
        )
    return destinations


# ── Normalization ─────────────────────────────────────────────────────


def _assign_date(dest: Destination, available_dates: Sequence[date]) -> date:
    if dest.trip_index is not None:
        index = min(max(dest.trip_index, 0), len(available_dates) - 1)
        return available_dates[index]
    if dest.sequence < SECOND_DAY_SEQUENCE:
        return available_dates[0]
    if len(available_dates) > 1:
        return available_dates[1]
    return available_dates[0]


def reconstruct_destinations(
    destinations: Iterable[Destination], default_departure_date: date
) -> list[Destination]:
    """Return the canonical destination list.  Inputs are not mutated.

    Idempotent: feeding the result back in returns an equal list.
    """
    valid = [d for d in destinations if d.address and d.address.strip()]

    dated = [d for d in valid if d.departure_date is not None]
    undated = [d for d in valid if d.departure_date is None]

    available_dates = sorted({d.departure_date for d in dated}) or [default_departure_date]

    assigned = [
        replace(d, departure_date=_assign_date(d, available_dates))
        for d in sorted(undated, key=lambda d: d.sequence)
    ]

    merged = sorted(dated + assigned, key=lambda d: (d.departure_date, d.sequence))

    normalized: list[Destination] = []
    previous_date: Optional[date] = None
    for new_sequence, dest in enumerate(merged):
        normalized.append(
            replace(
                dest,
                sequence=new_sequence,
                is_pickup_location=dest.departure_date != previous_date,
            )
        )
        previous_date = dest.departure_date
    return normalized


def require_destinations(destinations: Sequence[Destination]) -> None:
    if not destinations:
        raise NoValidDestinations()


def group_into_trips(destinations: Iterable[Destination]) -> list[Trip]:
    """Split normalized destinations into trip-days, ascending by date."""
    by_date: dict[date, list[Destination]] = defaultdict(list)
    for dest in destinations:
        if dest.departure_date is None:
            raise ValueError("destinations must be normalized before grouping")
        by_date[dest.departure_date].append(dest)

    trips: list[Trip] = []
    for day in sorted(by_date):
        stops = sorted(by_date[day], key=lambda d: d.sequence)
        trips.append(
            Trip(
                departure_date=day,
                destinations=stops,
                start_time=stops[0].departure_time,
            )
        )
    return trips

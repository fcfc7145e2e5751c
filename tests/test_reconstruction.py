"""Unit tests for destination parsing, normalization and trip grouping."""

import logging
from datetime import date

import pytest

from src.domain.entities import Coordinate, Destination
from src.domain.errors import InvalidOrderField, NoValidDestinations
from src.domain.reconstruction import (
    group_into_trips,
    normalize_time,
    parse_date,
    parse_destination_fields,
    reconstruct_destinations,
    require_destinations,
)

D1 = date(2026, 11, 2)
D2 = date(2026, 11, 3)
D3 = date(2026, 11, 4)
DEFAULT = date(2026, 10, 24)


def _dest(address, sequence, departure_date=None, trip_index=None, **kwargs):
    return Destination(
        address=address,
        coordinate=Coordinate(-7.98, 112.63),
        sequence=sequence,
        departure_date=departure_date,
        trip_index=trip_index,
        **kwargs,
    )


# ── Parsing ───────────────────────────────────────────────────────────


class TestParseDestinationFields:
    def test_collects_fields_in_index_order(self):
        form = {
            "destinations[10].address": "Batu",
            "destinations[2].address": "Malang",
            "destinations[2].lat": "-7.9826",
            "destinations[2].lng": "112.6308",
            "destinations[2].arrivalTime": "9:05",
            "destinations[2].isPickupLocation": "true",
            "destinations[2].departureDate": "2026-11-02T00:00:00.000Z",
            "destinations[2].tripIndex": "0",
            "fullName": "ignored",
        }
        first, second = parse_destination_fields(form)

        assert first.address == "Malang"
        assert first.coordinate == Coordinate(-7.9826, 112.6308)
        assert first.arrival_time == "09:05"
        assert first.is_pickup_location is True
        assert first.departure_date == D1
        assert first.trip_index == 0
        assert first.sequence == 2  # index when no sequence is sent

        assert second.address == "Batu"
        assert second.coordinate is None
        assert second.departure_date is None

    def test_half_coordinate_is_no_coordinate(self):
        (dest,) = parse_destination_fields(
            {"destinations[0].address": "X", "destinations[0].lat": "-7.9"}
        )
        assert dest.coordinate is None

    @pytest.mark.parametrize(
        "key, value",
        [
            ("lat", "north"),
            ("lat", "95"),
            ("lng", "inf"),
            ("sequence", "1.5"),
            ("departureDate", "02/11/2026"),
            ("departureTime", "25:00"),
        ],
    )
    def test_malformed_field_is_named(self, key, value):
        form = {
            "destinations[3].address": "Malang",
            "destinations[3].lat": "-7.98",
            "destinations[3].lng": "112.63",
            f"destinations[3].{key}": value,
        }
        with pytest.raises(InvalidOrderField) as exc_info:
            parse_destination_fields(form)
        assert exc_info.value.field.startswith("destinations[3].")

    def test_outside_country_only_warns(self, caplog):
        form = {
            "destinations[0].address": "London",
            "destinations[0].lat": "51.5",
            "destinations[0].lng": "-0.12",
        }
        with caplog.at_level(logging.WARNING):
            (dest,) = parse_destination_fields(form)
        assert dest.coordinate == Coordinate(51.5, -0.12)
        assert "outside the country bounds" in caplog.text


def test_normalize_time():
    assert normalize_time("7:30", "t") == "07:30"
    assert normalize_time("23:59", "t") == "23:59"
    assert normalize_time("", "t") is None


def test_parse_date_takes_date_part():
    assert parse_date("2026-11-02", "d") == D1
    assert parse_date("2026-11-02T17:00:00+07:00", "d") == D1
    assert parse_date(None, "d") is None


# ── Normalization ─────────────────────────────────────────────────────


class TestReconstructDestinations:
    def test_blank_addresses_are_dropped(self):
        result = reconstruct_destinations(
            [_dest("Malang", 0), _dest("  ", 1), _dest("", 2)], DEFAULT
        )
        assert [d.address for d in result] == ["Malang"]

    def test_undated_without_any_date_gets_default(self):
        result = reconstruct_destinations([_dest("A", 0), _dest("B", 1)], DEFAULT)
        assert {d.departure_date for d in result} == {DEFAULT}

    def test_legacy_sequence_heuristic(self):
        result = reconstruct_destinations(
            [
                _dest("day1 start", 0, D1),
                _dest("day2 start", 100, D2),
                _dest("day1 undated", 5),
                _dest("day2 undated", 105),
            ],
            DEFAULT,
        )
        by_address = {d.address: d.departure_date for d in result}
        assert by_address["day1 undated"] == D1
        assert by_address["day2 undated"] == D2

    def test_legacy_heuristic_with_single_date(self):
        result = reconstruct_destinations(
            [_dest("start", 0, D1), _dest("later", 150)], DEFAULT
        )
        assert {d.departure_date for d in result} == {D1}

    def test_legacy_heuristic_never_reaches_third_day(self):
        result = reconstruct_destinations(
            [_dest("a", 0, D1), _dest("b", 100, D2), _dest("c", 200, D3), _dest("x", 205)],
            DEFAULT,
        )
        assert {d.address: d.departure_date for d in result}["x"] == D2

    def test_trip_index_overrides_sequence(self):
        result = reconstruct_destinations(
            [
                _dest("a", 0, D1),
                _dest("b", 100, D2),
                _dest("c", 200, D3),
                _dest("x", 3, trip_index=2),
                _dest("y", 4, trip_index=9),
            ],
            DEFAULT,
        )
        by_address = {d.address: d.departure_date for d in result}
        assert by_address["x"] == D3
        assert by_address["y"] == D3  # clamped to the last known day

    def test_sorted_and_densely_resequenced(self):
        result = reconstruct_destinations(
            [_dest("d2-b", 101, D2), _dest("d1-b", 7, D1), _dest("d2-a", 100, D2), _dest("d1-a", 3, D1)],
            DEFAULT,
        )
        assert [d.address for d in result] == ["d1-a", "d1-b", "d2-a", "d2-b"]
        assert [d.sequence for d in result] == [0, 1, 2, 3]

    def test_exactly_one_pickup_per_date(self):
        result = reconstruct_destinations(
            [
                _dest("a", 0, D1, is_pickup_location=False),
                _dest("b", 1, D1, is_pickup_location=True),
                _dest("c", 100, D2, is_pickup_location=True),
                _dest("d", 101, D2, is_pickup_location=True),
            ],
            DEFAULT,
        )
        assert [d.is_pickup_location for d in result] == [True, False, True, False]

    def test_idempotent(self):
        raw = [_dest("b", 105), _dest("a", 0, D1), _dest("c", 100, D2), _dest(" ", 9)]
        once = reconstruct_destinations(raw, DEFAULT)
        twice = reconstruct_destinations(once, DEFAULT)
        assert once == twice

    def test_inputs_are_not_mutated(self):
        raw = [_dest("b", 40), _dest("a", 10)]
        reconstruct_destinations(raw, DEFAULT)
        assert [(d.sequence, d.departure_date) for d in raw] == [(40, None), (10, None)]

    def test_empty_input(self):
        assert reconstruct_destinations([], DEFAULT) == []


def test_require_destinations():
    with pytest.raises(NoValidDestinations, match="No valid destinations provided"):
        require_destinations([])
    require_destinations([_dest("a", 0, D1)])


# ── Grouping ──────────────────────────────────────────────────────────


class TestGroupIntoTrips:
    def test_groups_by_date_ascending(self):
        dests = reconstruct_destinations(
            [
                _dest("c", 100, D2, departure_time="07:00"),
                _dest("a", 0, D1, departure_time="08:30"),
                _dest("b", 1, D1),
            ],
            DEFAULT,
        )
        trips = group_into_trips(dests)
        assert [t.departure_date for t in trips] == [D1, D2]
        assert [d.address for d in trips[0].destinations] == ["a", "b"]
        assert trips[0].start_time == "08:30"
        assert trips[1].start_time == "07:00"
        assert trips[0].is_billable
        assert not trips[1].is_billable

    def test_undated_destination_is_rejected(self):
        with pytest.raises(ValueError):
            group_into_trips([_dest("a", 0)])

"""Unit tests for geodesy primitives and sanity filters."""

import math

import pytest

from src.domain.distance import (
    haversine_km,
    validate_distance,
    validate_price,
    within_country_bounds,
)
from src.domain.entities import Coordinate
from src.domain.rounding import round_half_up


class TestHaversine:
    def test_same_point_is_zero(self):
        p = Coordinate(-7.9826, 112.6308)
        assert haversine_km(p, p) == 0.0

    def test_one_degree_of_longitude_at_equator(self):
        assert haversine_km(Coordinate(0, 0), Coordinate(0, 1)) == pytest.approx(111.195, abs=0.01)

    def test_symmetric(self):
        a, b = Coordinate(-7.9826, 112.6308), Coordinate(-7.2458, 112.7378)
        assert haversine_km(a, b) == pytest.approx(haversine_km(b, a))

    def test_antipodal_points(self):
        d = haversine_km(Coordinate(0, 0), Coordinate(0, 180))
        assert d == pytest.approx(math.pi * 6_371.0)

    def test_nan_propagates(self):
        assert math.isnan(haversine_km(Coordinate(float("nan"), 0), Coordinate(0, 0)))


class TestSanityFilters:
    @pytest.mark.parametrize("km", [0.1, 5.0, 2_000.0])
    def test_reasonable_distances(self, km):
        assert validate_distance(km).is_valid

    @pytest.mark.parametrize("km", [float("nan"), -1.0, 0.0, 0.09, 2_000.1])
    def test_unreasonable_distances(self, km):
        check = validate_distance(km)
        assert not check.is_valid
        assert check.message

    def test_price_bounds(self):
        assert validate_price(278_400).is_valid
        assert validate_price(49_999).message == "Price unusually low"
        assert validate_price(100_000_001).message == "Price unusually high"
        assert not validate_price(-1).is_valid

    def test_country_bounds(self):
        assert within_country_bounds(Coordinate(-7.9826, 112.6308))
        assert not within_country_bounds(Coordinate(51.5, -0.12))


class TestCoordinate:
    def test_valid_range(self):
        assert Coordinate(90, 180).is_valid()
        assert not Coordinate(90.5, 0).is_valid()
        assert not Coordinate(0, -180.5).is_valid()
        assert not Coordinate(float("nan"), 0).is_valid()


@pytest.mark.parametrize(
    "value, expected",
    [(0.5, 1), (1.5, 2), (2.5, 3), (2.4999, 2), (-0.5, 0), (-1.5, -1)],
)
def test_round_half_up(value, expected):
    assert round_half_up(value) == expected

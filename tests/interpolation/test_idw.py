"""Tests for inverse-distance-weighted interpolation."""

from __future__ import annotations

import math

import numpy as np
import pytest

from swell_map.errors import ConfigurationError
from swell_map.interpolation import (
    great_circle_distance,
    interpolate,
    interpolate_field,
    valid_observations,
)
from swell_map.models import Observation


def _obs(name: str, lon, lat, value) -> Observation:
    return Observation(name=name, lon=lon, lat=lat, value=value)


def test_great_circle_distance_known_values() -> None:
    assert float(great_circle_distance(0.0, 0.0, 0.0, 0.0)) == pytest.approx(0.0)
    assert float(great_circle_distance(0.0, 0.0, 90.0, 0.0)) == pytest.approx(math.pi / 2)
    assert float(great_circle_distance(0.0, 0.0, 180.0, 0.0)) == pytest.approx(math.pi)
    assert float(great_circle_distance(0.0, -90.0, 0.0, 90.0)) == pytest.approx(math.pi)


def test_great_circle_distance_is_symmetric() -> None:
    forward = great_circle_distance(4.78, 53.06, 3.49, 51.56)
    backward = great_circle_distance(3.49, 51.56, 4.78, 53.06)
    assert float(forward) == pytest.approx(float(backward))
    assert float(forward) > 0.0


def test_empty_observations_interpolate_to_zero() -> None:
    assert interpolate(4.5, 52.5, []) == 0.0
    assert interpolate(4.5, 52.5, [None, None]) == 0.0


def test_single_observation_at_query_point_returns_its_value() -> None:
    assert interpolate(4.5, 52.5, [_obs("a", 4.5, 52.5, 1.25)]) == pytest.approx(1.25, rel=1e-12)


def test_single_observation_dominates_everywhere() -> None:
    observations = [_obs("a", 4.5, 52.5, 0.8)]
    field = interpolate_field(np.array([3.0, 6.0, 100.0]), np.array([51.0, 54.0, -20.0]), observations)
    np.testing.assert_allclose(field, 0.8)


def test_result_is_a_weighted_average() -> None:
    rng = np.random.default_rng(42)
    values = rng.uniform(0.1, 2.5, size=12)
    observations = [
        _obs(f"p{index}", float(lon), float(lat), float(value))
        for index, (lon, lat, value) in enumerate(
            zip(rng.uniform(2.0, 8.0, size=12), rng.uniform(50.0, 55.0, size=12), values)
        )
    ]
    query_lon = rng.uniform(0.0, 10.0, size=(20, 20))
    query_lat = rng.uniform(48.0, 57.0, size=(20, 20))

    field = interpolate_field(query_lon, query_lat, observations)

    assert field.shape == (20, 20)
    assert np.all(field >= values.min() - 1e-12)
    assert np.all(field <= values.max() + 1e-12)


def test_invalid_observations_are_skipped_not_zeroed() -> None:
    observations = [
        _obs("good", 4.5, 52.5, 1.0),
        _obs("nan value", 4.6, 52.6, float("nan")),
        _obs("missing value", 4.6, 52.6, None),
        _obs("missing location", None, 52.6, 3.0),
        _obs("infinite location", float("inf"), 52.6, 3.0),
        None,
    ]

    assert len(valid_observations(observations)) == 1
    assert interpolate(5.0, 53.0, observations) == pytest.approx(1.0)


def test_distant_observations_favour_the_nearest() -> None:
    observations = [
        _obs("west", 0.0, 0.0, 0.5),
        _obs("middle", 30.0, 0.0, 1.0),
        _obs("east", 90.0, 0.0, 1.5),
    ]

    value = interpolate(30.0, 0.0, observations)

    assert abs(value - 1.0) < abs(value - 0.5)
    assert abs(value - 1.0) < abs(value - 1.5)


def test_custom_distance_function_is_used() -> None:
    calls = []

    def flat_distance(lon1, lat1, lon2, lat2):
        calls.append(True)
        return np.hypot(np.asarray(lon2) - lon1, np.asarray(lat2) - lat1)

    observations = [_obs("a", 0.0, 0.0, 0.0), _obs("b", 2.0, 0.0, 2.0)]
    assert interpolate(1.0, 0.0, observations, distance=flat_distance) == pytest.approx(1.0)
    assert calls


@pytest.mark.parametrize("epsilon", [0.0, -0.5])
def test_non_positive_epsilon_is_rejected(epsilon: float) -> None:
    with pytest.raises(ConfigurationError):
        interpolate(4.5, 52.5, [_obs("a", 4.5, 52.5, 1.0)], epsilon=epsilon)

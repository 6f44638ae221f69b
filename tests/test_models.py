"""Tests for the plain value types."""

from __future__ import annotations

import pytest

from swell_map.models import Observation, finite_or_none


@pytest.mark.parametrize(
    "value, expected",
    [(1.5, 1.5), (0, 0.0), (None, None), (float("nan"), None), (float("-inf"), None)],
)
def test_finite_or_none(value, expected) -> None:
    assert finite_or_none(value) == expected


def test_observation_location_and_value_checks() -> None:
    located = Observation("Texel", lon=4.78, lat=53.06, value=float("nan"))
    unlocated = Observation("Nowhere", lon=None, lat=53.06, value=1.0)

    assert located.has_location
    assert not located.is_valid
    assert not unlocated.has_location
    assert not unlocated.is_valid
    assert Observation("Texel", lon=4.78, lat=53.06, value=1.0).is_valid

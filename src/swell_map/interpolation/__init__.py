"""Spatial interpolation of sparse swell observations."""

from __future__ import annotations

from .idw import (
    DEFAULT_EPSILON,
    GreatCircleDistance,
    great_circle_distance,
    interpolate,
    interpolate_field,
    valid_observations,
)

__all__ = [
    "DEFAULT_EPSILON",
    "GreatCircleDistance",
    "great_circle_distance",
    "interpolate",
    "interpolate_field",
    "valid_observations",
]

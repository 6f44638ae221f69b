"""Inverse-distance-weighted interpolation of the swell field.

Each valid observation contributes with weight ``1 / (d**2 + epsilon)``
where ``d`` is the great-circle angular distance in radians between the
query point and the observation. The additive ``epsilon`` bounds the weight
of an observation sitting exactly on the query point.
"""

from __future__ import annotations

from typing import Callable, Iterable, Sequence

import numpy as np

from swell_map.errors import ConfigurationError
from swell_map.models import Observation

__all__ = [
    "DEFAULT_EPSILON",
    "GreatCircleDistance",
    "great_circle_distance",
    "interpolate",
    "interpolate_field",
    "valid_observations",
]

DEFAULT_EPSILON = 0.01

GreatCircleDistance = Callable[[np.ndarray, np.ndarray, np.ndarray, np.ndarray], np.ndarray]


def great_circle_distance(lon1, lat1, lon2, lat2) -> np.ndarray:
    """Return the angular distance in radians between points given in degrees.

    Uses the haversine formulation, which stays accurate for the short
    distances separating neighbouring grid cells. Inputs broadcast.
    """

    lam1 = np.radians(np.asarray(lon1, dtype="float64"))
    phi1 = np.radians(np.asarray(lat1, dtype="float64"))
    lam2 = np.radians(np.asarray(lon2, dtype="float64"))
    phi2 = np.radians(np.asarray(lat2, dtype="float64"))

    sin_dphi = np.sin((phi2 - phi1) / 2.0)
    sin_dlam = np.sin((lam2 - lam1) / 2.0)
    a = sin_dphi**2 + np.cos(phi1) * np.cos(phi2) * sin_dlam**2
    return 2.0 * np.arcsin(np.sqrt(np.clip(a, 0.0, 1.0)))


def valid_observations(observations: Iterable[Observation | None]) -> list[Observation]:
    """Drop missing entries and observations lacking a finite location or value."""

    return [obs for obs in observations if obs is not None and obs.is_valid]


def interpolate_field(
    lons: np.ndarray,
    lats: np.ndarray,
    observations: Sequence[Observation | None],
    *,
    epsilon: float = DEFAULT_EPSILON,
    distance: GreatCircleDistance = great_circle_distance,
) -> np.ndarray:
    """Interpolate the observed values at every query point.

    Parameters
    ----------
    lons, lats:
        Query coordinates in degrees; any matching shapes.
    observations:
        Point observations. ``None`` entries and observations with a
        missing or non-finite location or value are skipped entirely.
    epsilon:
        Additive softening term in the weight denominator.
    distance:
        Great-circle distance function returning radians.

    Returns
    -------
    numpy.ndarray
        Weighted averages with the shape of the query arrays. Points where no
        observation contributes receive ``0.0``.
    """

    if epsilon <= 0.0:
        raise ConfigurationError(f"epsilon must be positive; received {epsilon!r}.")

    query_lon = np.asarray(lons, dtype="float64")
    query_lat = np.asarray(lats, dtype="float64")
    shape = np.broadcast(query_lon, query_lat).shape

    usable = valid_observations(observations)
    if not usable:
        return np.zeros(shape, dtype="float64")

    obs_lon = np.array([float(obs.lon) for obs in usable])
    obs_lat = np.array([float(obs.lat) for obs in usable])
    obs_value = np.array([float(obs.value) for obs in usable])

    # Trailing axis runs over observations.
    d = distance(query_lon[..., np.newaxis], query_lat[..., np.newaxis], obs_lon, obs_lat)
    weights = 1.0 / (np.square(d) + epsilon)
    weights = np.where(np.isfinite(weights), weights, 0.0)

    total_weight = weights.sum(axis=-1)
    weighted_sum = (weights * obs_value).sum(axis=-1)
    with np.errstate(invalid="ignore", divide="ignore"):
        result = np.where(total_weight > 0.0, weighted_sum / total_weight, 0.0)
    return np.broadcast_to(result, shape).astype("float64")


def interpolate(
    lon: float,
    lat: float,
    observations: Sequence[Observation | None],
    *,
    epsilon: float = DEFAULT_EPSILON,
    distance: GreatCircleDistance = great_circle_distance,
) -> float:
    """Interpolate the observed values at a single query point."""

    result = interpolate_field(
        np.array([lon], dtype="float64"),
        np.array([lat], dtype="float64"),
        observations,
        epsilon=epsilon,
        distance=distance,
    )
    return float(result[0])

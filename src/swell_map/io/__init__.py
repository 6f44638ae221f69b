"""Observation sources: the marine API adapter and offline snapshots."""

from __future__ import annotations

from .locations import (
    DEFAULT_LOCATIONS,
    load_locations,
    load_observations,
    observations_to_records,
    write_observations,
)
from .marine import (
    HOURLY_FIELDS,
    OPEN_METEO_MARINE_URL,
    extract_current_reading,
    fetch_marine_observations,
    observation_from_payload,
    select_current_index,
)

__all__ = [
    "DEFAULT_LOCATIONS",
    "HOURLY_FIELDS",
    "OPEN_METEO_MARINE_URL",
    "extract_current_reading",
    "fetch_marine_observations",
    "load_locations",
    "load_observations",
    "observation_from_payload",
    "observations_to_records",
    "select_current_index",
    "write_observations",
]

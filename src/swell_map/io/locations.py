"""Surf-spot locations and offline observation snapshots."""

from __future__ import annotations

import json
import math
from pathlib import Path
from typing import Mapping, Sequence, Tuple

from swell_map.config import read_json_config
from swell_map.errors import ConfigurationError
from swell_map.models import Location, Observation

__all__ = [
    "DEFAULT_LOCATIONS",
    "load_locations",
    "load_observations",
    "observations_to_records",
    "write_observations",
]

_DEFAULT_LOCATIONS_PATH = Path("config") / "locations.json"

DEFAULT_LOCATIONS: Tuple[Location, ...] = (
    Location("Texel", lon=4.78, lat=53.06),
    Location("Callantsoog", lon=4.69, lat=52.86),
    Location("Wijk aan Zee", lon=4.60, lat=52.52),
    Location("Zandvoort", lon=4.53, lat=52.37),
    Location("Noordwijk", lon=4.43, lat=52.23),
    Location("Katwijk", lon=4.39, lat=52.20),
    Location("Scheveningen", lon=4.27, lat=52.11),
    Location("Ouddorp", lon=3.92, lat=51.80),
    Location("Domburg", lon=3.49, lat=51.56),
)


def load_locations(path: str | Path | None = None) -> Tuple[Location, ...]:
    """Load query locations from JSON, defaulting to the Dutch surf spots."""

    target_path = Path(path) if path is not None else _DEFAULT_LOCATIONS_PATH
    if not target_path.exists():
        return DEFAULT_LOCATIONS

    payload = read_json_config(target_path, label="locations")
    if isinstance(payload, Mapping):
        payload = payload.get("locations", [])
    if not isinstance(payload, list) or not payload:
        raise ConfigurationError(f"Locations configuration must list at least one location: {target_path}")

    locations: list[Location] = []
    for entry in payload:
        if not isinstance(entry, Mapping):
            raise ConfigurationError("Each location must be a JSON object.")
        try:
            location = Location(
                name=str(entry["name"]),
                lon=float(entry["lon"]),
                lat=float(entry["lat"]),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise ConfigurationError(f"Invalid location entry: {entry!r}") from exc
        if not (math.isfinite(location.lon) and math.isfinite(location.lat)):
            raise ConfigurationError(f"Location {location.name!r} has non-finite coordinates.")
        locations.append(location)
    return tuple(locations)


def _optional_float(value: object) -> float | None:
    if value is None:
        return None
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def load_observations(path: str | Path) -> list[Observation | None]:
    """Read an observation snapshot; ``null`` entries stand for failed locations."""

    source = Path(path)
    if not source.exists():
        raise FileNotFoundError(f"Observation snapshot not found: {source}")
    try:
        payload = json.loads(source.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Cannot decode observation snapshot: {source}") from exc
    if isinstance(payload, Mapping):
        payload = payload.get("observations", [])
    if not isinstance(payload, list):
        raise ValueError(f"Observation snapshot must contain a list: {source}")

    observations: list[Observation | None] = []
    for entry in payload:
        if not isinstance(entry, Mapping):
            observations.append(None)
            continue
        observations.append(
            Observation(
                name=str(entry.get("name", "")),
                lon=_optional_float(entry.get("lon")),
                lat=_optional_float(entry.get("lat")),
                value=_optional_float(entry.get("value", entry.get("height"))),
                direction=_optional_float(entry.get("direction")),
                period=_optional_float(entry.get("period")),
            )
        )
    return observations


def observations_to_records(observations: Sequence[Observation | None]) -> list[dict[str, object] | None]:
    """Convert observations to JSON-friendly dictionaries."""

    records: list[dict[str, object] | None] = []
    for obs in observations:
        if obs is None:
            records.append(None)
            continue
        records.append(
            {
                "name": obs.name,
                "lon": obs.lon,
                "lat": obs.lat,
                "value": obs.value,
                "direction": obs.direction,
                "period": obs.period,
            }
        )
    return records


def write_observations(path: str | Path, observations: Sequence[Observation | None]) -> Path:
    """Persist an observation snapshot for offline runs."""

    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(
        json.dumps({"observations": observations_to_records(observations)}, indent=2),
        encoding="utf-8",
    )
    return target

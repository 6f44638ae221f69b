"""Adapter for the Open-Meteo marine forecast API.

Only the current value of each hourly series feeds the interpolation core.
The adapter tolerates partial failure: a location whose data cannot be
fetched or parsed becomes a ``None`` entry instead of aborting the batch.
"""

from __future__ import annotations

import concurrent.futures
import logging
import math
from datetime import datetime, timezone
from typing import Mapping, Sequence

import numpy as np
import pandas as pd
import requests

from swell_map.models import Location, Observation, SwellReading

__all__ = [
    "HOURLY_FIELDS",
    "OPEN_METEO_MARINE_URL",
    "extract_current_reading",
    "fetch_marine_observations",
    "observation_from_payload",
    "select_current_index",
]

LOGGER = logging.getLogger(__name__)

OPEN_METEO_MARINE_URL = "https://marine-api.open-meteo.com/v1/marine"
HOURLY_FIELDS = ("swell_wave_height", "swell_wave_period", "swell_wave_direction")


def _to_utc_timestamp(instant: datetime | str | pd.Timestamp) -> pd.Timestamp:
    stamp = pd.Timestamp(instant)
    if stamp.tzinfo is None:
        return stamp.tz_localize("UTC")
    return stamp.tz_convert("UTC")


def select_current_index(
    times: Sequence[object],
    now: datetime | str | pd.Timestamp,
    *,
    utc_offset_seconds: int = 0,
) -> int:
    """Return the index of the first timestamp strictly after *now*.

    Naive timestamps are local to the series and shifted by
    *utc_offset_seconds*; a naive *now* is read as UTC. Returns ``0`` when
    the series is empty or no timestamp lies in the future. Unparseable
    entries never match.
    """

    if times is None or len(times) == 0:
        return 0

    stamps = pd.DatetimeIndex(pd.to_datetime(list(times), errors="coerce"))
    if stamps.tz is None:
        stamps = (stamps - pd.Timedelta(seconds=utc_offset_seconds)).tz_localize("UTC")
    else:
        stamps = stamps.tz_convert("UTC")

    after = np.flatnonzero(np.asarray(stamps > _to_utc_timestamp(now), dtype=bool))
    return int(after[0]) if after.size else 0


def _safe_get(values: object, index: int, default: float = 0.0) -> float:
    if not isinstance(values, Sequence) or isinstance(values, (str, bytes)):
        return default
    if index < 0 or index >= len(values):
        return default
    raw = values[index]
    if raw is None or isinstance(raw, bool):
        return default
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return default
    return value if not math.isnan(value) else default


def extract_current_reading(
    hourly: Mapping[str, object],
    now: datetime | str | pd.Timestamp,
    *,
    utc_offset_seconds: int = 0,
) -> SwellReading:
    """Pick the current swell height, period and direction from an hourly block.

    Missing, ``null`` or NaN entries default to ``0``.
    """

    times = hourly.get("time") or []
    index = select_current_index(
        times if isinstance(times, Sequence) else [], now, utc_offset_seconds=utc_offset_seconds
    )
    height_key, period_key, direction_key = HOURLY_FIELDS
    return SwellReading(
        height=_safe_get(hourly.get(height_key), index),
        period=_safe_get(hourly.get(period_key), index),
        direction=_safe_get(hourly.get(direction_key), index),
    )


def observation_from_payload(
    location: Location,
    payload: object,
    now: datetime | str | pd.Timestamp,
) -> Observation | None:
    """Turn a single-location API payload into an observation, or ``None``."""

    if not isinstance(payload, Mapping):
        LOGGER.warning("No valid wave data for %s", location.name)
        return None
    hourly = payload.get("hourly")
    if not isinstance(hourly, Mapping) or hourly.get(HOURLY_FIELDS[0]) is None:
        LOGGER.warning("No valid wave data for %s", location.name)
        return None

    try:
        offset = int(payload.get("utc_offset_seconds") or 0)
    except (TypeError, ValueError):
        offset = 0
    reading = extract_current_reading(hourly, now, utc_offset_seconds=offset)
    return Observation.from_reading(location, reading)


def _request_params(locations: Sequence[Location]) -> dict[str, str]:
    return {
        "latitude": ",".join(f"{location.lat}" for location in locations),
        "longitude": ",".join(f"{location.lon}" for location in locations),
        "hourly": ",".join(HOURLY_FIELDS),
        "timezone": "auto",
    }


def _get_json(session: requests.Session, url: str, params: Mapping[str, str], timeout: float) -> object:
    response = session.get(url, params=params, timeout=timeout)
    response.raise_for_status()
    return response.json()


def _fetch_batch(
    session: requests.Session,
    locations: Sequence[Location],
    *,
    now: datetime,
    timeout: float,
    base_url: str,
) -> list[Observation | None]:
    try:
        payload = _get_json(session, base_url, _request_params(locations), timeout)
    except (requests.RequestException, ValueError) as exc:
        LOGGER.error("Failed to fetch marine data: %s", exc)
        return [None] * len(locations)

    # A single-location request returns a bare object instead of a list.
    if isinstance(payload, Mapping) and len(locations) == 1:
        payload = [payload]
    if not isinstance(payload, list):
        LOGGER.warning("Expected a list from the marine API, got %s", type(payload).__name__)
        return [None] * len(locations)
    if len(payload) != len(locations):
        LOGGER.warning(
            "Marine API returned %d entries for %d locations", len(payload), len(locations)
        )

    results: list[Observation | None] = []
    for index, location in enumerate(locations):
        entry = payload[index] if index < len(payload) else None
        results.append(observation_from_payload(location, entry, now))
    return results


def _fetch_single(
    session: requests.Session,
    location: Location,
    *,
    now: datetime,
    timeout: float,
    base_url: str,
) -> Observation | None:
    try:
        payload = _get_json(session, base_url, _request_params([location]), timeout)
    except (requests.RequestException, ValueError) as exc:
        LOGGER.warning("Marine request failed for %s: %s", location.name, exc)
        return None
    return observation_from_payload(location, payload, now)


def fetch_marine_observations(
    locations: Sequence[Location],
    *,
    session: requests.Session | None = None,
    now: datetime | None = None,
    timeout: float = 30.0,
    base_url: str = OPEN_METEO_MARINE_URL,
    batch: bool = True,
    max_workers: int = 4,
) -> list[Observation | None]:
    """Fetch the current swell state for every location.

    Parameters
    ----------
    locations:
        Query points, in the order the results are returned.
    session:
        Optional :class:`requests.Session`; a private one is created and
        closed otherwise.
    now:
        Reference instant for choosing the current hour. Defaults to the
        current UTC time.
    timeout:
        Per-request timeout in seconds.
    base_url:
        Marine endpoint.
    batch:
        When True (default) all locations share one request. Otherwise one
        request per location is issued concurrently and the call waits for
        the full batch.
    max_workers:
        Thread-pool size for the per-location mode.

    Returns
    -------
    list
        One entry per location: an :class:`Observation` or ``None`` when the
        location could not be fetched.
    """

    if not locations:
        return []
    if now is None:
        now = datetime.now(timezone.utc)

    owns_session = session is None
    active = session if session is not None else requests.Session()
    try:
        if batch:
            results = _fetch_batch(active, locations, now=now, timeout=timeout, base_url=base_url)
        else:
            results = [None] * len(locations)
            workers = max(1, min(max_workers, len(locations)))
            with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as executor:
                future_to_index = {
                    executor.submit(
                        _fetch_single, active, location, now=now, timeout=timeout, base_url=base_url
                    ): index
                    for index, location in enumerate(locations)
                }
                for future in concurrent.futures.as_completed(future_to_index):
                    results[future_to_index[future]] = future.result()
    finally:
        if owns_session:
            active.close()

    valid = sum(1 for item in results if item is not None)
    LOGGER.info("Loaded weather data for %d/%d locations", valid, len(locations))
    return results

"""Tests for location configuration and observation snapshots."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from swell_map.errors import ConfigurationError
from swell_map.io import DEFAULT_LOCATIONS, load_locations, load_observations, write_observations
from swell_map.models import Observation


def test_default_locations_cover_the_dutch_coast() -> None:
    names = [location.name for location in DEFAULT_LOCATIONS]

    assert len(names) == 9
    assert names[0] == "Texel"
    assert names[-1] == "Domburg"


def test_load_locations_missing_file_returns_defaults(tmp_path: Path) -> None:
    assert load_locations(tmp_path / "absent.json") == DEFAULT_LOCATIONS


def test_load_locations_accepts_wrapped_and_bare_lists(tmp_path: Path) -> None:
    entries = [{"name": "Petten", "lon": 4.66, "lat": 52.77}]
    wrapped = tmp_path / "wrapped.json"
    wrapped.write_text(json.dumps({"locations": entries}), encoding="utf-8")
    bare = tmp_path / "bare.json"
    bare.write_text(json.dumps(entries), encoding="utf-8")

    assert load_locations(wrapped) == load_locations(bare)
    assert load_locations(bare)[0].lon == pytest.approx(4.66)


@pytest.mark.parametrize(
    "payload",
    [
        [],
        {"locations": []},
        [{"name": "Petten", "lon": 4.66}],
        [{"name": "Petten", "lon": "east", "lat": 52.77}],
        ["Petten"],
    ],
)
def test_load_locations_rejects_invalid_entries(tmp_path: Path, payload) -> None:
    config_path = tmp_path / "locations.json"
    config_path.write_text(json.dumps(payload), encoding="utf-8")

    with pytest.raises(ConfigurationError):
        load_locations(config_path)


def test_observation_snapshot_round_trip(tmp_path: Path) -> None:
    observations = [
        Observation("Texel", lon=4.78, lat=53.06, value=1.2, direction=270.0, period=8.5),
        None,
    ]

    target = write_observations(tmp_path / "nested" / "observations.json", observations)

    assert target.exists()
    assert load_observations(target) == observations


def test_load_observations_tolerates_partial_entries(tmp_path: Path) -> None:
    snapshot = tmp_path / "observations.json"
    snapshot.write_text(
        json.dumps([{"name": "Zandvoort", "lon": 4.53, "lat": 52.37, "height": 0.9}, "junk", None]),
        encoding="utf-8",
    )

    observations = load_observations(snapshot)

    assert observations[0] is not None
    assert observations[0].value == pytest.approx(0.9)
    assert observations[0].direction is None
    assert observations[1] is None
    assert observations[2] is None


def test_load_observations_errors(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_observations(tmp_path / "absent.json")

    broken = tmp_path / "broken.json"
    broken.write_text("[{", encoding="utf-8")
    with pytest.raises(ValueError):
        load_observations(broken)

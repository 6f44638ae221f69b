"""Integration tests for the heatmap pipeline."""

from __future__ import annotations

import numpy as np
import pytest
from shapely.geometry import Polygon

from swell_map.config import GridConfig
from swell_map.geo import MarkerPolicy
from swell_map.models import Observation
from swell_map.pipeline import build_map, compute_heatmap
from swell_map.render import ColorScale

# Land in the west plus a thin northern strip so the extent spans (3, 51, 7, 54).
COAST = Polygon([(3.0, 51.0), (5.0, 51.0), (5.0, 53.8), (7.0, 53.8), (7.0, 54.0), (3.0, 54.0)])
GRID = GridConfig(rows=6, cols=8, width_px=160, height_px=120)

OFFSHORE = Observation("Offshore", lon=6.5, lat=52.5, value=1.0, direction=270.0, period=8.0)
INLAND = Observation("Inland", lon=3.5, lat=52.5, value=0.5, direction=90.0, period=6.0)
FAR_AWAY = Observation("Bergen", lon=20.0, lat=60.0, value=1.5)


@pytest.fixture(scope="module")
def coast_map():
    return build_map(COAST, GRID)


def test_build_map_classifies_static_grid(coast_map) -> None:
    grid, projection = coast_map

    assert (grid.rows, grid.cols) == (6, 8)
    assert (projection.rows, projection.cols) == (6, 8)
    assert grid.is_land(3, 2)
    assert not grid.is_land(3, 7)


def test_build_map_accepts_injected_containment() -> None:
    class _Ocean:
        def contains_xy(self, lon, lat):
            return np.zeros(np.shape(lon), dtype=bool)

    grid, _ = build_map(COAST, GRID, containment=_Ocean())

    assert grid.land_count == 0


def test_compute_heatmap_colours_sea_cells_only(coast_map) -> None:
    grid, projection = coast_map

    frame = compute_heatmap(grid, projection, [OFFSHORE, None, INLAND, FAR_AWAY], ColorScale())

    assert frame.has_data
    assert frame.observation_count == 3
    assert np.isnan(frame.field[grid.land_mask]).all()
    assert all(color is None for color in frame.colors[grid.land_mask])
    sea = frame.field[~grid.land_mask]
    assert np.isfinite(sea).all()
    assert sea.min() >= 0.5 - 1e-12
    assert sea.max() <= 1.5 + 1e-12
    assert all(isinstance(color, str) for color in frame.colors[~grid.land_mask])


def test_compute_heatmap_places_and_skips_markers(coast_map) -> None:
    grid, projection = coast_map

    frame = compute_heatmap(grid, projection, [OFFSHORE, INLAND, FAR_AWAY], ColorScale())

    placed = {record.observation.name: record for record in frame.markers}
    assert set(placed) == {"Offshore", "Inland"}
    assert placed["Inland"].placement.on_land
    assert not placed["Offshore"].placement.on_land
    assert placed["Offshore"].symbol == "→"
    assert [item.name for item in frame.skipped] == ["Bergen"]


def test_coastal_marker_policy_colours_marker_cell(coast_map) -> None:
    grid, projection = coast_map
    observations = [OFFSHORE, INLAND]

    default = compute_heatmap(grid, projection, observations, ColorScale())
    painted = compute_heatmap(
        grid,
        projection,
        observations,
        ColorScale(),
        policy=MarkerPolicy(color_coastal_marker_cells=True),
    )

    inland = next(record.placement for record in painted.markers if record.observation.name == "Inland")
    assert default.colors[inland.row, inland.col] is None
    assert painted.colors[inland.row, inland.col] is not None
    assert np.isfinite(painted.field[inland.row, inland.col])


def test_compute_heatmap_without_observations(coast_map) -> None:
    grid, projection = coast_map

    frame = compute_heatmap(grid, projection, [None, None], ColorScale())

    assert not frame.has_data
    assert np.isnan(frame.field).all()
    assert all(color is None for color in frame.colors.ravel())
    assert frame.markers == ()


def test_heatmap_frame_exports(coast_map) -> None:
    grid, projection = coast_map
    frame = compute_heatmap(grid, projection, [OFFSHORE, INLAND], ColorScale())

    table = frame.to_dataframe()
    records = frame.markers_to_records()

    assert len(table) == grid.rows * grid.cols
    assert {"swell_height", "color", "marker"} <= set(table.columns)
    assert set(table["marker"].dropna()) == {"Offshore", "Inland"}
    offshore = next(record for record in records if record["name"] == "Offshore")
    assert offshore["swell_height"] == pytest.approx(1.0)
    assert offshore["coastal"] is False
    assert offshore["symbol"] == "→"


def test_observation_without_height_keeps_its_marker(coast_map) -> None:
    grid, projection = coast_map
    unmeasured = Observation("Unmeasured", lon=6.0, lat=52.5, value=float("nan"), direction=90.0)
    unlocated = Observation("Unlocated", lon=None, lat=52.5, value=0.7)

    frame = compute_heatmap(grid, projection, [OFFSHORE, unmeasured, unlocated], ColorScale())

    assert {record.observation.name for record in frame.markers} == {"Offshore", "Unmeasured"}
    assert frame.observation_count == 1
    # Only the offshore reading enters the interpolation.
    np.testing.assert_allclose(frame.field[~grid.land_mask], 1.0)
    record = next(item for item in frame.markers_to_records() if item["name"] == "Unmeasured")
    assert record["swell_height"] is None
    assert record["symbol"] == "←"


def test_markers_only_batch_has_no_data(coast_map) -> None:
    grid, projection = coast_map
    unmeasured = Observation("Unmeasured", lon=6.0, lat=52.5, value=None)

    frame = compute_heatmap(grid, projection, [unmeasured], ColorScale())

    assert not frame.has_data
    assert [record.observation.name for record in frame.markers] == ["Unmeasured"]
    assert all(color is None for color in frame.colors.ravel())

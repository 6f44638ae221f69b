"""Linear swell-map pipeline connecting the pure computation stages.

Stages run in order and exchange plain values:

1. fetch observations (the only I/O-bound stage, see :mod:`swell_map.io`);
2. extract the current reading per location;
3. classify the grid into land and sea (once per boundary and grid);
4. interpolate the swell field over sea cells;
5. colorize the field;
6. place location markers.

Everything after the fetch is synchronous and side-effect free. Rendering
the resulting :class:`HeatmapFrame` is left to read-only consumers.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence, Tuple

import numpy as np
import pandas as pd
from shapely.geometry.base import BaseGeometry

from swell_map.config import GridConfig
from swell_map.geo import (
    LAND,
    SEA,
    GridProjection,
    LandSeaBufferConfig,
    LandSeaGrid,
    MarkerPlacement,
    MarkerPolicy,
    OutOfBounds,
    PointInPolygon,
    ShapelyContainment,
    build_land_sea_grid,
    direction_symbol,
    fit_projection,
    place,
)
from swell_map.interpolation import DEFAULT_EPSILON, interpolate_field, valid_observations
from swell_map.models import Observation, finite_or_none
from swell_map.render import ColorScale

__all__ = [
    "HeatmapFrame",
    "MarkerRecord",
    "build_map",
    "compute_heatmap",
]

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class MarkerRecord:
    """Placed marker together with the observation it represents."""

    observation: Observation
    placement: MarkerPlacement

    @property
    def symbol(self) -> str:
        return direction_symbol(self.observation.direction)

    def to_dict(self) -> dict[str, object]:
        return {
            "name": self.observation.name,
            "row": self.placement.row,
            "col": self.placement.col,
            "coastal": self.placement.on_land,
            "lon": self.observation.lon,
            "lat": self.observation.lat,
            "swell_height": finite_or_none(self.observation.value),
            "swell_period": finite_or_none(self.observation.period),
            "swell_direction": finite_or_none(self.observation.direction),
            "symbol": self.symbol,
        }


@dataclass(frozen=True, eq=False)
class HeatmapFrame:
    """Result of one observation batch over a fixed land/sea grid."""

    grid: LandSeaGrid
    field: np.ndarray
    colors: np.ndarray
    markers: Tuple[MarkerRecord, ...]
    skipped: Tuple[OutOfBounds, ...]
    observation_count: int

    @property
    def has_data(self) -> bool:
        return self.observation_count > 0

    def to_dataframe(self) -> pd.DataFrame:
        """Return one row per cell with classification, value and colour."""

        frame = self.grid.to_dataframe()
        frame["swell_height"] = self.field.ravel()
        frame["color"] = self.colors.ravel()
        marker_cells = {(record.placement.row, record.placement.col): record.observation.name for record in self.markers}
        frame["marker"] = [
            marker_cells.get((row, col)) for row, col in zip(frame["row"], frame["col"])
        ]
        return frame

    def markers_to_records(self) -> list[dict[str, object]]:
        return [record.to_dict() for record in self.markers]


def build_map(
    boundary: BaseGeometry,
    grid_config: GridConfig,
    *,
    buffer: LandSeaBufferConfig | None = None,
    containment: PointInPolygon | None = None,
) -> tuple[LandSeaGrid, GridProjection]:
    """Fit the projection to *boundary* and classify the static grid."""

    projection = fit_projection(boundary, grid_config.cols, grid_config.rows)
    if containment is None:
        containment = ShapelyContainment(boundary)
    grid = build_land_sea_grid(containment, projection, grid_config, buffer=buffer)
    return grid, projection


def compute_heatmap(
    grid: LandSeaGrid,
    projection: GridProjection,
    observations: Sequence[Observation | None],
    scale: ColorScale,
    *,
    policy: MarkerPolicy | None = None,
    epsilon: float = DEFAULT_EPSILON,
) -> HeatmapFrame:
    """Interpolate, colorize and place markers for one observation batch.

    Parameters
    ----------
    grid:
        Static land/sea classification.
    projection:
        Projection the grid was built with.
    observations:
        One entry per location; ``None`` marks a failed fetch and is dropped.
        Entries without a finite value are still placed as markers but do not
        enter the interpolation.
    scale:
        Colour scale used for sea cells.
    policy:
        Coastal marker policy; defaults to :class:`MarkerPolicy`.
    epsilon:
        Inverse-distance weight softening term.

    Returns
    -------
    HeatmapFrame
        Field values (NaN on uncoloured land cells), colours, markers and the
        markers skipped because they fell outside the grid.
    """

    if policy is None:
        policy = MarkerPolicy()

    usable = valid_observations(observations)
    LOGGER.info("Computing heatmap from %d/%d observations", len(usable), len(observations))

    # Markers only need a location; a missing height still gets a marker.
    located = [obs for obs in observations if obs is not None and obs.has_location]

    markers: list[MarkerRecord] = []
    skipped: list[OutOfBounds] = []
    for observation in located:
        outcome = place(
            float(observation.lon),  # type: ignore[arg-type]
            float(observation.lat),  # type: ignore[arg-type]
            projection,
            grid.rows,
            grid.cols,
            grid=grid,
            name=observation.name,
        )
        if isinstance(outcome, OutOfBounds):
            LOGGER.warning("%s", outcome.describe())
            skipped.append(outcome)
            continue
        LOGGER.debug(
            "%s at (%d, %d) - %s", observation.name, outcome.row, outcome.col, LAND if outcome.on_land else SEA
        )
        markers.append(MarkerRecord(observation=observation, placement=outcome))

    coloured = ~grid.land_mask
    if policy.color_coastal_marker_cells:
        for record in markers:
            coloured[record.placement.row, record.placement.col] = True

    field = np.full((grid.rows, grid.cols), np.nan, dtype="float64")
    if usable:
        field[coloured] = interpolate_field(
            grid.lon[coloured], grid.lat[coloured], usable, epsilon=epsilon
        )
        colors = scale.colorize(field)
    else:
        colors = np.full((grid.rows, grid.cols), None, dtype=object)

    return HeatmapFrame(
        grid=grid,
        field=field,
        colors=colors,
        markers=tuple(markers),
        skipped=tuple(skipped),
        observation_count=len(usable),
    )

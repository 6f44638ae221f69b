"""Placement of observation markers onto grid cells."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from swell_map.config import read_json_config
from swell_map.errors import ConfigurationError

from .classifier import LandSeaGrid
from .projection import GridProjection

__all__ = [
    "MarkerPlacement",
    "MarkerPolicy",
    "OutOfBounds",
    "direction_symbol",
    "load_marker_policy",
    "place",
]

LOGGER = logging.getLogger(__name__)

_DEFAULT_POLICY_PATH = Path("config") / "marker_policy.json"
_DIRECTION_SYMBOLS = ("↓", "↙", "←", "↖", "↑", "↗", "→", "↘")


@dataclass(frozen=True)
class MarkerPlacement:
    """Marker anchored to the cell containing its location."""

    name: str | None
    row: int
    col: int
    on_land: bool = False

    @property
    def is_coastal(self) -> bool:
        """Return True for markers sitting on a land-classified cell."""

        return self.on_land


@dataclass(frozen=True)
class OutOfBounds:
    """Marker whose location does not project onto the grid."""

    name: str | None
    col: float
    row: float
    reason: str

    def describe(self) -> str:
        label = self.name or "Location"
        return f"{label} outside bounds: ({self.col:.1f}, {self.row:.1f}) [{self.reason}]"


@dataclass(frozen=True)
class MarkerPolicy:
    """Rendering policy for markers placed on land cells.

    ``color_coastal_marker_cells`` decides whether the heatmap also paints the
    land cell underneath a coastal marker. Markers are placed on land cells
    regardless of this flag.
    """

    color_coastal_marker_cells: bool = False


def load_marker_policy(path: str | Path | None = None) -> MarkerPolicy:
    """Load the coastal marker policy from JSON configuration."""

    target_path = Path(path) if path is not None else _DEFAULT_POLICY_PATH
    if not target_path.exists():
        return MarkerPolicy()

    payload = read_json_config(target_path, label="marker policy")
    if not isinstance(payload, Mapping):
        raise ConfigurationError(f"Marker policy must be a JSON object: {target_path}")
    flag = payload.get("color_coastal_marker_cells", False)
    if not isinstance(flag, bool):
        raise ConfigurationError("color_coastal_marker_cells must be a boolean.")
    return MarkerPolicy(color_coastal_marker_cells=flag)


def place(
    lon: float,
    lat: float,
    projection: GridProjection,
    rows: int,
    cols: int,
    *,
    grid: LandSeaGrid | None = None,
    name: str | None = None,
) -> MarkerPlacement | OutOfBounds:
    """Map a location onto the grid cell containing it.

    The location is projected to fractional ``(col, row)`` and floored. A
    non-finite projection or indices outside ``[0, cols) x [0, rows)`` yield
    :class:`OutOfBounds`; the caller decides whether to skip or log. When
    *grid* is given, placements on land cells are flagged ``on_land``.
    """

    col, row = projection.project(lon, lat)
    if not (math.isfinite(col) and math.isfinite(row)):
        return OutOfBounds(name=name, col=col, row=row, reason="non_finite")

    row_index = math.floor(row)
    col_index = math.floor(col)
    if not (0 <= row_index < rows and 0 <= col_index < cols):
        return OutOfBounds(name=name, col=col, row=row, reason="outside_grid")

    on_land = False
    if grid is not None and grid.contains_cell(row_index, col_index):
        on_land = grid.is_land(row_index, col_index)
    if on_land:
        LOGGER.debug("%s placed on land cell (%d, %d) as coastal marker", name, row_index, col_index)
    return MarkerPlacement(name=name, row=row_index, col=col_index, on_land=on_land)


def direction_symbol(bearing: float | None) -> str:
    """Return the arrow glyph for a compass bearing in degrees.

    The glyph points the way the swell travels; ``None`` or a non-finite
    bearing yields an empty string.
    """

    if bearing is None or not math.isfinite(bearing):
        return ""
    # Half-sectors round up, so 22.5 degrees already maps to the next glyph.
    sector = math.floor(bearing / 45.0 + 0.5)
    return _DIRECTION_SYMBOLS[sector % len(_DIRECTION_SYMBOLS)]

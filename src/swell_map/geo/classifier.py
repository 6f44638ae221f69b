"""Land/sea classification of grid cells against the boundary polygon.

A point counts as land only when it lies inside the boundary *and* enough of
its four cardinal probe points (offset by a small distance in degrees) are
inside too. The probe rule keeps narrow coastal sea cells, whose centre may
fall just within a jagged coastline polygon, classified as sea.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Mapping, Protocol, runtime_checkable

import numpy as np
import pandas as pd
import shapely
from shapely.geometry.base import BaseGeometry

from swell_map.config import GridConfig, read_json_config
from swell_map.errors import ConfigurationError

from .projection import GridProjection

__all__ = [
    "LAND",
    "SEA",
    "GridCell",
    "LandSeaBufferConfig",
    "LandSeaGrid",
    "PointInPolygon",
    "ShapelyContainment",
    "build_land_sea_grid",
    "classify",
    "classify_points",
    "load_land_sea_buffer_config",
]

LOGGER = logging.getLogger(__name__)

LAND = "land"
SEA = "sea"

_DEFAULT_BUFFER_CONFIG_PATH = Path("config") / "land_sea_buffer.json"
_PROBE_DIRECTIONS = ((-1.0, 0.0), (1.0, 0.0), (0.0, -1.0), (0.0, 1.0))


@runtime_checkable
class PointInPolygon(Protocol):
    """Containment test against the land boundary."""

    def contains_xy(self, lon: np.ndarray, lat: np.ndarray) -> np.ndarray:
        """Return a boolean array flagging points strictly inside the boundary."""


class ShapelyContainment:
    """:class:`PointInPolygon` backed by a prepared shapely geometry."""

    def __init__(self, geometry: BaseGeometry) -> None:
        if geometry.is_empty:
            raise ConfigurationError("Land boundary geometry is empty.")
        shapely.prepare(geometry)
        self._geometry = geometry

    @property
    def geometry(self) -> BaseGeometry:
        return self._geometry

    def contains_xy(self, lon: np.ndarray, lat: np.ndarray) -> np.ndarray:
        lon_arr = np.asarray(lon, dtype="float64")
        lat_arr = np.asarray(lat, dtype="float64")
        finite = np.isfinite(lon_arr) & np.isfinite(lat_arr)
        inside = np.zeros(np.broadcast(lon_arr, lat_arr).shape, dtype=bool)
        if finite.any():
            inside[finite] = shapely.contains_xy(
                self._geometry, lon_arr[finite], lat_arr[finite]
            )
        return inside


@dataclass(frozen=True)
class LandSeaBufferConfig:
    """Tunable constants of the coastal probe rule.

    Both values are heuristics tuned for the Dutch coastline rather than
    derived quantities.
    """

    probe_offset_deg: float = 0.01
    min_inland_probes: int = 3

    def __post_init__(self) -> None:
        if not np.isfinite(self.probe_offset_deg) or self.probe_offset_deg <= 0.0:
            raise ConfigurationError(
                f"probe_offset_deg must be a positive number; received {self.probe_offset_deg!r}."
            )
        if not 0 <= self.min_inland_probes <= len(_PROBE_DIRECTIONS):
            raise ConfigurationError(
                f"min_inland_probes must lie within [0, {len(_PROBE_DIRECTIONS)}]; "
                f"received {self.min_inland_probes!r}."
            )


def load_land_sea_buffer_config(path: str | Path | None = None) -> LandSeaBufferConfig:
    """Load the coastal probe parameters from JSON configuration."""

    target_path = Path(path) if path is not None else _DEFAULT_BUFFER_CONFIG_PATH
    base = LandSeaBufferConfig()
    if not target_path.exists():
        return base

    payload = read_json_config(target_path, label="land/sea buffer")
    if not isinstance(payload, Mapping):
        raise ConfigurationError(f"Land/sea buffer configuration must be a JSON object: {target_path}")

    try:
        probe_offset_deg = float(payload.get("probe_offset_deg", base.probe_offset_deg))
        min_inland_probes = int(payload.get("min_inland_probes", base.min_inland_probes))
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Land/sea buffer values must be numeric: {target_path}") from exc

    return LandSeaBufferConfig(probe_offset_deg=probe_offset_deg, min_inland_probes=min_inland_probes)


def classify_points(
    containment: PointInPolygon,
    lons: np.ndarray,
    lats: np.ndarray,
    *,
    config: LandSeaBufferConfig | None = None,
) -> np.ndarray:
    """Return a land mask for arrays of points; ``True`` marks land."""

    if config is None:
        config = LandSeaBufferConfig()

    lon_arr = np.asarray(lons, dtype="float64")
    lat_arr = np.asarray(lats, dtype="float64")
    centre_inside = np.asarray(containment.contains_xy(lon_arr, lat_arr), dtype=bool)

    inland_probes = np.zeros(centre_inside.shape, dtype=int)
    offset = config.probe_offset_deg
    for d_lon, d_lat in _PROBE_DIRECTIONS:
        probe_inside = containment.contains_xy(lon_arr + d_lon * offset, lat_arr + d_lat * offset)
        inland_probes += np.asarray(probe_inside, dtype=int)

    finite = np.isfinite(lon_arr) & np.isfinite(lat_arr)
    return centre_inside & (inland_probes >= config.min_inland_probes) & finite


def classify(
    containment: PointInPolygon,
    lon: float,
    lat: float,
    *,
    config: LandSeaBufferConfig | None = None,
) -> str:
    """Classify a single point as :data:`LAND` or :data:`SEA`.

    Invalid coordinates fail open to :data:`SEA`.
    """

    mask = classify_points(
        containment, np.array([lon], dtype="float64"), np.array([lat], dtype="float64"), config=config
    )
    return LAND if bool(mask[0]) else SEA


@dataclass(frozen=True)
class GridCell:
    """A single grid cell with its fixed classification."""

    row: int
    col: int
    classification: str

    @property
    def is_land(self) -> bool:
        return self.classification == LAND


@dataclass(frozen=True, eq=False)
class LandSeaGrid:
    """Immutable land/sea classification of the whole map grid."""

    rows: int
    cols: int
    land_mask: np.ndarray
    lon: np.ndarray
    lat: np.ndarray

    def __post_init__(self) -> None:
        expected = (self.rows, self.cols)
        for name in ("land_mask", "lon", "lat"):
            array = getattr(self, name)
            if array.shape != expected:
                raise ConfigurationError(
                    f"{name} has shape {array.shape}; expected {expected}."
                )
            array.setflags(write=False)

    @property
    def land_count(self) -> int:
        return int(self.land_mask.sum())

    @property
    def sea_count(self) -> int:
        return self.rows * self.cols - self.land_count

    def contains_cell(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.cols

    def is_land(self, row: int, col: int) -> bool:
        if not self.contains_cell(row, col):
            raise IndexError(f"Cell ({row}, {col}) lies outside the {self.rows}x{self.cols} grid.")
        return bool(self.land_mask[row, col])

    def cell(self, row: int, col: int) -> GridCell:
        return GridCell(row=row, col=col, classification=LAND if self.is_land(row, col) else SEA)

    def iter_cells(self) -> Iterator[GridCell]:
        """Iterate over all cells in row-major order."""

        for row in range(self.rows):
            for col in range(self.cols):
                yield self.cell(row, col)

    def sea_cells(self) -> Iterator[GridCell]:
        return (cell for cell in self.iter_cells() if not cell.is_land)

    def to_dataframe(self) -> pd.DataFrame:
        """Return one row per cell with its centre coordinates and classification."""

        rows, cols = np.indices((self.rows, self.cols))
        return pd.DataFrame(
            {
                "row": rows.ravel(),
                "col": cols.ravel(),
                "lon": self.lon.ravel(),
                "lat": self.lat.ravel(),
                "classification": np.where(self.land_mask.ravel(), LAND, SEA),
            }
        )


def build_land_sea_grid(
    containment: PointInPolygon,
    projection: GridProjection,
    grid_config: GridConfig,
    *,
    buffer: LandSeaBufferConfig | None = None,
) -> LandSeaGrid:
    """Classify every cell of the grid, sampling each cell at its centre.

    Parameters
    ----------
    containment:
        Point-in-polygon test for the land boundary.
    projection:
        Projection fitted to the same grid dimensions.
    grid_config:
        Static grid dimensions.
    buffer:
        Optional probe parameters; defaults to :class:`LandSeaBufferConfig`.

    Returns
    -------
    LandSeaGrid
        Read-only classification and cell-centre coordinates.
    """

    if (projection.rows, projection.cols) != (grid_config.rows, grid_config.cols):
        raise ConfigurationError(
            f"Projection fitted to {projection.cols}x{projection.rows} cannot serve a "
            f"{grid_config.cols}x{grid_config.rows} grid."
        )

    rows, cols = np.indices((grid_config.rows, grid_config.cols), dtype="float64")
    lon, lat = projection.invert(cols + 0.5, rows + 0.5)
    land_mask = classify_points(containment, lon, lat, config=buffer)

    grid = LandSeaGrid(
        rows=grid_config.rows,
        cols=grid_config.cols,
        land_mask=land_mask,
        lon=np.asarray(lon, dtype="float64"),
        lat=np.asarray(lat, dtype="float64"),
    )
    LOGGER.info(
        "Classified %d cells: %d land, %d sea", grid.rows * grid.cols, grid.land_count, grid.sea_count
    )
    return grid

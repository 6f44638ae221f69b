"""Web Mercator projection fitted onto the map grid.

Geographic coordinates are projected to EPSG:3857 through :mod:`pyproj` and
then scaled uniformly so that the boundary extent fits the
``[0, cols] x [0, rows]`` rectangle, centred along the slack axis. Row ``0``
is the northern edge of the grid. Both directions accept scalars or numpy
arrays and fractional grid coordinates.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from functools import lru_cache
from typing import Sequence, Tuple

import numpy as np
from pyproj import Transformer
from shapely.geometry.base import BaseGeometry

from swell_map.errors import ConfigurationError

__all__ = ["GridProjection", "fit_projection"]

Bounds = Tuple[float, float, float, float]


@lru_cache(maxsize=1)
def _mercator_transformers() -> tuple[Transformer, Transformer]:
    forward = Transformer.from_crs("EPSG:4326", "EPSG:3857", always_xy=True)
    inverse = Transformer.from_crs("EPSG:3857", "EPSG:4326", always_xy=True)
    return forward, inverse


def _coerce(values, scalar: bool):
    if scalar:
        return float(values)
    return np.asarray(values, dtype="float64")


@dataclass(frozen=True)
class GridProjection:
    """Bidirectional mapping between (lon, lat) and fractional (col, row)."""

    cols: int
    rows: int
    scale: float
    x_origin: float
    y_origin: float
    col_offset: float
    row_offset: float

    def project(self, lon, lat):
        """Return the fractional ``(col, row)`` position of ``(lon, lat)``."""

        scalar = np.ndim(lon) == 0 and np.ndim(lat) == 0
        forward, _ = _mercator_transformers()
        x, y = forward.transform(_coerce(lon, scalar), _coerce(lat, scalar))
        col = self.col_offset + (_coerce(x, scalar) - self.x_origin) * self.scale
        row = self.row_offset + (self.y_origin - _coerce(y, scalar)) * self.scale
        return col, row

    def invert(self, col, row):
        """Return the ``(lon, lat)`` located at fractional grid position ``(col, row)``."""

        scalar = np.ndim(col) == 0 and np.ndim(row) == 0
        _, inverse = _mercator_transformers()
        x = self.x_origin + (_coerce(col, scalar) - self.col_offset) / self.scale
        y = self.y_origin - (_coerce(row, scalar) - self.row_offset) / self.scale
        lon, lat = inverse.transform(x, y)
        return _coerce(lon, scalar), _coerce(lat, scalar)

    def cell_center(self, row: int, col: int) -> tuple[float, float]:
        """Return the ``(lon, lat)`` at the centre of cell ``(row, col)``."""

        return self.invert(col + 0.5, row + 0.5)


def fit_projection(
    extent: BaseGeometry | Sequence[float],
    cols: int,
    rows: int,
) -> GridProjection:
    """Fit a Web Mercator projection so *extent* fills a ``cols x rows`` grid.

    Parameters
    ----------
    extent:
        Shapely geometry (typically the land boundary) or a
        ``(min_lon, min_lat, max_lon, max_lat)`` bounds tuple.
    cols, rows:
        Target grid dimensions.

    Returns
    -------
    GridProjection
        Projection whose uniform scale is the smaller of the two per-axis
        scales, with the extent centred on the other axis.

    Raises
    ------
    ConfigurationError
        If the grid has no cells or the extent is empty or collapses to a
        single point.
    """

    if cols <= 0 or rows <= 0:
        raise ConfigurationError(f"Grid must have positive dimensions; received {cols}x{rows}.")

    bounds = _resolve_bounds(extent)
    forward, _ = _mercator_transformers()
    min_lon, min_lat, max_lon, max_lat = bounds
    x0, y0 = forward.transform(min_lon, min_lat)
    x1, y1 = forward.transform(max_lon, max_lat)
    if not all(math.isfinite(value) for value in (x0, y0, x1, y1)):
        raise ConfigurationError(f"Extent {bounds} cannot be projected to Web Mercator.")

    width = x1 - x0
    height = y1 - y0
    candidate_scales = []
    if width > 0.0:
        candidate_scales.append(cols / width)
    if height > 0.0:
        candidate_scales.append(rows / height)
    if not candidate_scales:
        raise ConfigurationError("Cannot fit a projection to a zero-size extent.")

    scale = min(candidate_scales)
    return GridProjection(
        cols=cols,
        rows=rows,
        scale=scale,
        x_origin=x0,
        y_origin=y1,
        col_offset=(cols - width * scale) / 2.0,
        row_offset=(rows - height * scale) / 2.0,
    )


def _resolve_bounds(extent: BaseGeometry | Sequence[float]) -> Bounds:
    if isinstance(extent, BaseGeometry):
        if extent.is_empty:
            raise ConfigurationError("Cannot fit a projection to an empty geometry.")
        raw = extent.bounds
    else:
        raw = tuple(extent)
        if len(raw) != 4:
            raise ConfigurationError("Bounds must be (min_lon, min_lat, max_lon, max_lat).")

    bounds = tuple(float(value) for value in raw)
    if not all(math.isfinite(value) for value in bounds):
        raise ConfigurationError(f"Extent bounds must be finite; received {bounds}.")
    min_lon, min_lat, max_lon, max_lat = bounds
    if min_lon > max_lon or min_lat > max_lat:
        raise ConfigurationError(f"Extent bounds are inverted: {bounds}.")
    return bounds  # type: ignore[return-value]

"""Geometry helpers: boundary loading, projection, classification and markers."""

from __future__ import annotations

from .boundary import boundary_from_geojson, load_boundary
from .classifier import (
    LAND,
    SEA,
    GridCell,
    LandSeaBufferConfig,
    LandSeaGrid,
    PointInPolygon,
    ShapelyContainment,
    build_land_sea_grid,
    classify,
    classify_points,
    load_land_sea_buffer_config,
)
from .markers import (
    MarkerPlacement,
    MarkerPolicy,
    OutOfBounds,
    direction_symbol,
    load_marker_policy,
    place,
)
from .projection import GridProjection, fit_projection

__all__ = [
    "LAND",
    "SEA",
    "GridCell",
    "GridProjection",
    "LandSeaBufferConfig",
    "LandSeaGrid",
    "MarkerPlacement",
    "MarkerPolicy",
    "OutOfBounds",
    "PointInPolygon",
    "ShapelyContainment",
    "boundary_from_geojson",
    "build_land_sea_grid",
    "classify",
    "classify_points",
    "direction_symbol",
    "fit_projection",
    "load_boundary",
    "load_land_sea_buffer_config",
    "load_marker_policy",
    "place",
]

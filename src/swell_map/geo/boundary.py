"""Loading of the static land boundary geometry.

The boundary is read once at start-up from a GeoJSON document and reduced to
a single polygonal shapely geometry. Downstream code treats it as opaque
ring data handed to the point-in-polygon test.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable, Mapping

from shapely.errors import GEOSException
from shapely.geometry import shape
from shapely.geometry.base import BaseGeometry
from shapely.ops import unary_union

from swell_map.errors import ConfigurationError

__all__ = ["boundary_from_geojson", "load_boundary"]

_POLYGONAL_TYPES = {"Polygon", "MultiPolygon"}


def load_boundary(path: str | Path) -> BaseGeometry:
    """Read a GeoJSON file and return the union of its polygonal parts."""

    source = Path(path)
    if not source.exists():
        raise FileNotFoundError(f"Boundary GeoJSON not found: {source}")
    try:
        payload = json.loads(source.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"Cannot decode boundary GeoJSON: {source}") from exc
    return boundary_from_geojson(payload)


def boundary_from_geojson(payload: Mapping[str, object]) -> BaseGeometry:
    """Build the land geometry from an in-memory GeoJSON mapping.

    Accepts ``FeatureCollection``, ``Feature``, ``GeometryCollection``,
    ``Polygon`` and ``MultiPolygon`` objects. Non-polygonal members (points,
    lines) are ignored; a document without any polygon is rejected.
    """

    if not isinstance(payload, Mapping):
        raise ConfigurationError("Boundary GeoJSON must be a JSON object.")

    parts = [geometry for geometry in _iter_geometries(payload) if not geometry.is_empty]
    if not parts:
        raise ConfigurationError("Boundary GeoJSON does not contain any polygon.")
    merged = unary_union(parts)
    if merged.is_empty:
        raise ConfigurationError("Boundary GeoJSON resolves to an empty geometry.")
    return merged


def _iter_geometries(payload: Mapping[str, object]) -> Iterable[BaseGeometry]:
    kind = payload.get("type")
    if kind == "FeatureCollection":
        features = payload.get("features") or []
        if not isinstance(features, list):
            raise ConfigurationError("FeatureCollection 'features' must be a list.")
        for feature in features:
            if isinstance(feature, Mapping):
                yield from _iter_geometries(feature)
    elif kind == "Feature":
        geometry = payload.get("geometry")
        if isinstance(geometry, Mapping):
            yield from _iter_geometries(geometry)
    elif kind == "GeometryCollection":
        for geometry in payload.get("geometries") or []:
            if isinstance(geometry, Mapping):
                yield from _iter_geometries(geometry)
    elif kind in _POLYGONAL_TYPES:
        try:
            yield shape(payload)
        except (TypeError, ValueError, IndexError, GEOSException) as exc:
            raise ConfigurationError(f"Malformed {kind} coordinates in boundary GeoJSON.") from exc
    elif kind is None:
        raise ConfigurationError("GeoJSON object is missing its 'type' member.")

"""Colour mapping for the heatmap layer."""

from __future__ import annotations

from .colors import (
    DEFAULT_COLOR_STOPS,
    ColorInterpolator,
    ColorScale,
    ColorStop,
    RGBColor,
    color_for,
    interpolate_rgb,
    load_color_stops,
    parse_color_stops,
)

__all__ = [
    "DEFAULT_COLOR_STOPS",
    "ColorInterpolator",
    "ColorScale",
    "ColorStop",
    "RGBColor",
    "color_for",
    "interpolate_rgb",
    "load_color_stops",
    "parse_color_stops",
]

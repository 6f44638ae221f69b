"""Piecewise-linear colour scale over named stops.

The stop table is configuration data (``config/heatmap_palette.json``) so the
palette can be swapped without touching the mapping logic. Colour strings are
parsed with :mod:`matplotlib.colors`, which accepts hex codes and named
colours alike.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, Mapping, Sequence, Tuple

import numpy as np
from matplotlib import colors as mcolors

from swell_map.config import read_json_config
from swell_map.errors import ConfigurationError

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

_DEFAULT_PALETTE_PATH = Path("config") / "heatmap_palette.json"


@dataclass(frozen=True)
class RGBColor:
    """8-bit sRGB colour."""

    red: int
    green: int
    blue: int

    def __post_init__(self) -> None:
        for channel in (self.red, self.green, self.blue):
            if not 0 <= channel <= 255:
                raise ConfigurationError(f"Colour channels must lie within [0, 255]; received {channel!r}.")

    @classmethod
    def parse(cls, spec: str | Sequence[float]) -> "RGBColor":
        """Parse a hex string, colour name or 0-1 float triple."""

        try:
            red, green, blue = mcolors.to_rgb(spec)
        except ValueError as exc:
            raise ConfigurationError(f"Unrecognised colour specification: {spec!r}") from exc
        return cls(round(red * 255), round(green * 255), round(blue * 255))

    @property
    def hex(self) -> str:
        return mcolors.to_hex((self.red / 255.0, self.green / 255.0, self.blue / 255.0))

    @property
    def css(self) -> str:
        return f"rgb({self.red}, {self.green}, {self.blue})"

    def as_tuple(self) -> Tuple[int, int, int]:
        return (self.red, self.green, self.blue)


ColorInterpolator = Callable[[RGBColor, RGBColor, float], RGBColor]


def interpolate_rgb(start: RGBColor, end: RGBColor, t: float) -> RGBColor:
    """Blend two colours channel by channel in sRGB space."""

    a = np.array(start.as_tuple(), dtype="float64")
    b = np.array(end.as_tuple(), dtype="float64")
    channels = np.clip(np.rint(a + (b - a) * t), 0, 255).astype(int)
    return RGBColor(int(channels[0]), int(channels[1]), int(channels[2]))


@dataclass(frozen=True)
class ColorStop:
    """Anchor of the gradient: a threshold and the colour at that threshold."""

    threshold: float
    color: RGBColor

    @classmethod
    def from_spec(cls, threshold: float | str, color: str | Sequence[float]) -> "ColorStop":
        try:
            value = float(threshold)
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"Colour stop threshold must be numeric; received {threshold!r}.") from exc
        return cls(threshold=value, color=RGBColor.parse(color))


DEFAULT_COLOR_STOPS: Tuple[ColorStop, ...] = tuple(
    ColorStop.from_spec(threshold, color)
    for threshold, color in (
        (0.0, "#0a0a23"),
        (0.2, "#1a0b3d"),
        (0.4, "#2d1b69"),
        (0.6, "#ff006e"),
        (0.8, "#ff4081"),
        (1.0, "#00f5ff"),
        (1.2, "#39ff14"),
        (1.5, "#ffff00"),
    )
)


@dataclass(frozen=True)
class ColorScale:
    """Maps scalar values to colours by linear interpolation between stops.

    Values are clamped to the ``[first, last]`` threshold range. The stop
    table must hold at least two stops with finite, strictly increasing
    thresholds; anything else is a :class:`ConfigurationError`.
    """

    stops: Tuple[ColorStop, ...] = DEFAULT_COLOR_STOPS
    interpolator: ColorInterpolator = field(default=interpolate_rgb, compare=False)

    def __post_init__(self) -> None:
        stops = tuple(self.stops)
        if len(stops) < 2:
            raise ConfigurationError("A colour scale requires at least two stops.")
        for stop in stops:
            if not math.isfinite(stop.threshold):
                raise ConfigurationError(f"Colour stop thresholds must be finite; received {stop.threshold!r}.")
        for previous, current in zip(stops, stops[1:]):
            if current.threshold <= previous.threshold:
                raise ConfigurationError(
                    "Colour stop thresholds must be strictly increasing; "
                    f"{current.threshold!r} follows {previous.threshold!r}."
                )
        object.__setattr__(self, "stops", stops)

    @property
    def lower(self) -> float:
        return self.stops[0].threshold

    @property
    def upper(self) -> float:
        return self.stops[-1].threshold

    def color_for(self, value: float) -> RGBColor:
        """Return the colour for *value*; NaN maps to the lowest stop."""

        value = float(value)
        if math.isnan(value):
            return self.stops[0].color
        clamped = min(max(value, self.lower), self.upper)
        if clamped == self.upper:
            return self.stops[-1].color

        for previous, following in zip(self.stops, self.stops[1:]):
            if previous.threshold <= clamped <= following.threshold:
                t = (clamped - previous.threshold) / (following.threshold - previous.threshold)
                if t <= 0.0:
                    return previous.color
                if t >= 1.0:
                    return following.color
                return self.interpolator(previous.color, following.color, t)
        return self.stops[-1].color

    def colorize(self, values: np.ndarray) -> np.ndarray:
        """Map an array of values to hex strings; NaN entries map to ``None``."""

        array = np.asarray(values, dtype="float64")
        output = np.empty(array.shape, dtype=object)
        for index, value in np.ndenumerate(array):
            output[index] = None if math.isnan(value) else self.color_for(value).hex
        return output


def color_for(value: float, stops: Sequence[ColorStop]) -> RGBColor:
    """Functional form of :meth:`ColorScale.color_for` validating *stops* first."""

    return ColorScale(stops=tuple(stops)).color_for(value)


def parse_color_stops(payload: object) -> Tuple[ColorStop, ...]:
    """Build stops from ``[{"threshold": .., "color": ..}, ..]`` or ``{"0.0": "#hex", ..}``."""

    entries: Iterable[tuple[object, object]]
    if isinstance(payload, Mapping):
        raw_stops = payload.get("stops", payload)
    else:
        raw_stops = payload

    if isinstance(raw_stops, Mapping):
        # Object keys carry no order of their own; lists must already be sorted.
        entries = sorted(raw_stops.items(), key=lambda item: _threshold_key(item[0]))
    elif isinstance(raw_stops, list):
        pairs: list[tuple[object, object]] = []
        for item in raw_stops:
            if not isinstance(item, Mapping) or "threshold" not in item or "color" not in item:
                raise ConfigurationError("Each colour stop must declare 'threshold' and 'color'.")
            pairs.append((item["threshold"], item["color"]))
        entries = pairs
    else:
        raise ConfigurationError("Colour stops must be a list or a JSON object.")

    stops = tuple(ColorStop.from_spec(threshold, color) for threshold, color in entries)  # type: ignore[arg-type]
    ColorScale(stops=stops)
    return stops


def _threshold_key(raw: object) -> float:
    try:
        return float(raw)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Colour stop threshold must be numeric; received {raw!r}.") from exc


def load_color_stops(path: str | Path | None = None) -> Tuple[ColorStop, ...]:
    """Load the heatmap palette from JSON, defaulting to the built-in stops."""

    target_path = Path(path) if path is not None else _DEFAULT_PALETTE_PATH
    if not target_path.exists():
        return DEFAULT_COLOR_STOPS
    return parse_color_stops(read_json_config(target_path, label="heatmap palette"))

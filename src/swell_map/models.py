"""Plain value types passed between the pipeline stages."""

from __future__ import annotations

import math
from dataclasses import dataclass

__all__ = ["Location", "Observation", "SwellReading", "finite_or_none"]


@dataclass(frozen=True)
class Location:
    """Fixed coastal query point."""

    name: str
    lon: float
    lat: float


@dataclass(frozen=True)
class SwellReading:
    """Current swell state extracted from an hourly series."""

    height: float
    period: float
    direction: float


@dataclass(frozen=True)
class Observation:
    """Named point observation of the swell field.

    ``value`` is the scalar being interpolated (swell height in metres).
    ``direction`` is a compass bearing in degrees or ``None`` when unknown.
    """

    name: str
    lon: float | None
    lat: float | None
    value: float | None
    direction: float | None = None
    period: float | None = None

    @classmethod
    def from_reading(cls, location: Location, reading: SwellReading) -> "Observation":
        return cls(
            name=location.name,
            lon=location.lon,
            lat=location.lat,
            value=reading.height,
            direction=reading.direction,
            period=reading.period,
        )

    @property
    def has_location(self) -> bool:
        """Return True when both coordinates are finite numbers."""

        return _is_finite_number(self.lon) and _is_finite_number(self.lat)

    @property
    def is_valid(self) -> bool:
        """Return True when both location and value are finite numbers."""

        return all(
            _is_finite_number(item) for item in (self.lon, self.lat, self.value)
        )


def finite_or_none(value: float | None) -> float | None:
    """Return *value* as a float, or ``None`` when missing or non-finite."""

    if value is None or not math.isfinite(value):
        return None
    return float(value)


def _is_finite_number(value: object) -> bool:
    if value is None or isinstance(value, bool):
        return False
    try:
        return math.isfinite(float(value))  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return False

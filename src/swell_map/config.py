"""Static grid configuration for the swell map."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from .errors import ConfigurationError

__all__ = ["GridConfig", "load_grid_config", "read_json_config"]

_DEFAULT_GRID_CONFIG_PATH = Path("config") / "map_grid.json"


@dataclass(frozen=True)
class GridConfig:
    """Grid dimensions and the pixel size of the rendered map."""

    rows: int = 35
    cols: int = 40
    width_px: int = 1000
    height_px: int = 875

    def __post_init__(self) -> None:
        for attr in ("rows", "cols", "width_px", "height_px"):
            value = getattr(self, attr)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigurationError(f"{attr} must be an integer; received {value!r}.")
            if value <= 0:
                raise ConfigurationError(f"{attr} must be positive; received {value!r}.")

    @property
    def cell_count(self) -> int:
        return self.rows * self.cols


def read_json_config(path: Path, *, label: str) -> Mapping[str, object] | list:
    """Decode a JSON configuration file, wrapping decode errors."""

    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"Invalid JSON in {label} configuration: {path}") from exc


def load_grid_config(path: str | Path | None = None) -> GridConfig:
    """Load grid dimensions from JSON, falling back to the built-in defaults."""

    target_path = Path(path) if path is not None else _DEFAULT_GRID_CONFIG_PATH
    base = GridConfig()
    if not target_path.exists():
        return base

    payload = read_json_config(target_path, label="grid")
    if not isinstance(payload, Mapping):
        raise ConfigurationError(f"Grid configuration must be a JSON object: {target_path}")

    try:
        rows = int(payload.get("rows", base.rows))
        cols = int(payload.get("cols", base.cols))
        width_px = int(payload.get("width_px", payload.get("width", base.width_px)))
        height_px = int(payload.get("height_px", payload.get("height", base.height_px)))
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Grid configuration values must be integers: {target_path}") from exc

    return GridConfig(rows=rows, cols=cols, width_px=width_px, height_px=height_px)

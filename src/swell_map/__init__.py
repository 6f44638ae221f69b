"""Top-level package for the North Sea swell map."""

from __future__ import annotations

from . import cli

__all__ = ["__version__", "cli"]

__version__ = "0.1.0"

"""Exception types shared across the swell-map package."""

from __future__ import annotations

__all__ = ["ConfigurationError"]


class ConfigurationError(ValueError):
    """Raised when static configuration cannot produce a valid map.

    Covers malformed colour-stop tables, zero-size grids, degenerate
    projection fits and unreadable JSON configuration. Data-quality issues
    (missing values, empty observation batches) never raise this error.
    """

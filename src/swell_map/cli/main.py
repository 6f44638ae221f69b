"""Command-line entry point for the North Sea swell map.

Two sub-commands are provided:

``compute``
    Loads the land boundary, classifies the grid, obtains observations
    (live from the marine API or from a snapshot written by ``fetch``),
    interpolates and colours the swell field, and writes ``cells.csv`` plus
    ``markers.json`` to the output directory.

``fetch``
    Queries the marine API for every configured location and stores the
    current readings as a JSON snapshot, so ``compute`` can run offline.
"""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Sequence

from swell_map.config import load_grid_config
from swell_map.errors import ConfigurationError
from swell_map.geo import load_boundary, load_land_sea_buffer_config, load_marker_policy
from swell_map.io import (
    fetch_marine_observations,
    load_locations,
    load_observations,
    write_observations,
)
from swell_map.models import finite_or_none
from swell_map.pipeline import build_map, compute_heatmap
from swell_map.render import ColorScale, load_color_stops

__all__ = ["build_parser", "main"]


def _build_logger(verbose: bool) -> logging.Logger:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s %(message)s")
    return logging.getLogger("swell_map.cli")


def _handle_compute(args: argparse.Namespace) -> int:
    logger = _build_logger(args.verbose)

    try:
        grid_config = load_grid_config(args.grid_config)
        buffer = load_land_sea_buffer_config(args.buffer_config)
        policy = load_marker_policy(args.marker_policy)
        scale = ColorScale(stops=load_color_stops(args.palette))
        boundary = load_boundary(args.boundary)
    except (ConfigurationError, FileNotFoundError) as exc:
        logger.error("Failed to load: %s", exc)
        return 2

    logger.info("Building %dx%d grid from %s", grid_config.cols, grid_config.rows, args.boundary)
    try:
        grid, projection = build_map(boundary, grid_config, buffer=buffer)
    except ConfigurationError as exc:
        logger.error("Failed to build grid: %s", exc)
        return 2

    if args.observations is not None:
        try:
            observations = load_observations(args.observations)
        except (FileNotFoundError, ValueError) as exc:
            logger.error("Failed to load observations: %s", exc)
            return 2
        logger.info("Loaded %d observation entries from %s", len(observations), args.observations)
    else:
        try:
            locations = load_locations(args.locations)
        except ConfigurationError as exc:
            logger.error("Failed to load locations: %s", exc)
            return 2
        logger.info("Loading weather data for %d locations", len(locations))
        observations = fetch_marine_observations(
            locations,
            timeout=args.timeout,
            batch=not args.per_location,
        )

    frame = compute_heatmap(grid, projection, observations, scale, policy=policy)

    output_dir: Path = args.output_dir
    output_dir.mkdir(parents=True, exist_ok=True)
    cells_path = output_dir / "cells.csv"
    markers_path = output_dir / "markers.json"
    frame.to_dataframe().to_csv(cells_path, index=False)
    markers_path.write_text(
        json.dumps(
            {
                "markers": frame.markers_to_records(),
                "skipped": [
                    {
                        "name": item.name,
                        "col": finite_or_none(item.col),
                        "row": finite_or_none(item.row),
                        "reason": item.reason,
                    }
                    for item in frame.skipped
                ],
            },
            indent=2,
            allow_nan=False,
        ),
        encoding="utf-8",
    )
    logger.info("Wrote %s and %s", cells_path, markers_path)

    if not frame.has_data:
        logger.error("No weather data available. Please try again later.")
        return 1
    return 0


def _handle_fetch(args: argparse.Namespace) -> int:
    logger = _build_logger(args.verbose)
    try:
        locations = load_locations(args.locations)
    except ConfigurationError as exc:
        logger.error("Failed to load locations: %s", exc)
        return 2

    observations = fetch_marine_observations(
        locations,
        timeout=args.timeout,
        batch=not args.per_location,
    )
    target = write_observations(args.output, observations)
    logger.info("Stored observation snapshot at %s", target)
    if all(item is None for item in observations):
        logger.error("No weather data available. Please try again later.")
        return 1
    return 0


def _add_common_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--locations",
        type=Path,
        default=None,
        help="JSON list of locations (default: config/locations.json or built-in surf spots).",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=30.0,
        help="Marine API request timeout in seconds (default: 30).",
    )
    parser.add_argument(
        "--per-location",
        action="store_true",
        help="Issue one concurrent request per location instead of a single batched request.",
    )
    parser.add_argument("--verbose", action="store_true", help="Increase logging verbosity.")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="swell-map",
        description="Interpolated swell-height heatmap over the Dutch North Sea coast.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    compute = subparsers.add_parser(
        "compute",
        help="Classify the grid, interpolate the swell field and export cells and markers.",
    )
    compute.add_argument(
        "--boundary",
        type=Path,
        required=True,
        help="GeoJSON file describing the land area.",
    )
    compute.add_argument(
        "--observations",
        type=Path,
        default=None,
        help="Observation snapshot written by 'fetch'; skips the live API call when given.",
    )
    compute.add_argument(
        "--output-dir",
        type=Path,
        default=Path("artifacts/swell_map"),
        help="Directory receiving cells.csv and markers.json (default: artifacts/swell_map).",
    )
    compute.add_argument("--grid-config", type=Path, default=None, help="Grid dimensions JSON.")
    compute.add_argument("--buffer-config", type=Path, default=None, help="Coastal probe parameters JSON.")
    compute.add_argument("--palette", type=Path, default=None, help="Colour-stop table JSON.")
    compute.add_argument("--marker-policy", type=Path, default=None, help="Coastal marker policy JSON.")
    _add_common_options(compute)
    compute.set_defaults(func=_handle_compute)

    fetch = subparsers.add_parser(
        "fetch",
        help="Store the current marine readings for every location as a JSON snapshot.",
    )
    fetch.add_argument(
        "--output",
        type=Path,
        default=Path("artifacts/swell_map/observations.json"),
        help="Snapshot destination (default: artifacts/swell_map/observations.json).",
    )
    _add_common_options(fetch)
    fetch.set_defaults(func=_handle_fetch)

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    return args.func(args)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())

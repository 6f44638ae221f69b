"""Tests for the colour-stop scale."""

from __future__ import annotations

import json
from pathlib import Path

import numpy as np
import pytest

from swell_map.errors import ConfigurationError
from swell_map.render import (
    DEFAULT_COLOR_STOPS,
    ColorScale,
    ColorStop,
    RGBColor,
    color_for,
    load_color_stops,
    parse_color_stops,
)

GREYSCALE = (ColorStop.from_spec(0.0, "#000000"), ColorStop.from_spec(1.0, "#ffffff"))


def test_rgb_color_parsing_and_formatting() -> None:
    color = RGBColor.parse("#ff006e")

    assert color.as_tuple() == (255, 0, 110)
    assert color.hex == "#ff006e"
    assert color.css == "rgb(255, 0, 110)"
    assert RGBColor.parse("white") == RGBColor(255, 255, 255)


def test_rgb_color_rejects_unknown_spec() -> None:
    with pytest.raises(ConfigurationError):
        RGBColor.parse("not-a-colour")


def test_stop_thresholds_return_stop_colours() -> None:
    for stop in DEFAULT_COLOR_STOPS:
        assert color_for(stop.threshold, DEFAULT_COLOR_STOPS) == stop.color


def test_values_outside_range_are_clamped() -> None:
    scale = ColorScale()

    assert scale.color_for(-3.0) == scale.color_for(scale.lower)
    assert scale.color_for(9.0) == scale.color_for(scale.upper)
    assert scale.color_for(float("inf")) == DEFAULT_COLOR_STOPS[-1].color
    assert scale.color_for(float("-inf")) == DEFAULT_COLOR_STOPS[0].color


def test_nan_maps_to_lowest_stop() -> None:
    assert ColorScale().color_for(float("nan")) == DEFAULT_COLOR_STOPS[0].color


def test_linear_blend_between_stops() -> None:
    scale = ColorScale(stops=GREYSCALE)

    assert scale.color_for(0.25) == RGBColor(64, 64, 64)
    assert scale.color_for(0.75).as_tuple() == (191, 191, 191)


@pytest.mark.parametrize("stop", DEFAULT_COLOR_STOPS[1:-1])
def test_scale_is_continuous_across_interior_stops(stop: ColorStop) -> None:
    scale = ColorScale()
    below = np.array(scale.color_for(stop.threshold - 1e-9).as_tuple())
    above = np.array(scale.color_for(stop.threshold + 1e-9).as_tuple())

    assert np.abs(below - np.array(stop.color.as_tuple())).max() <= 1
    assert np.abs(above - np.array(stop.color.as_tuple())).max() <= 1


def test_custom_interpolator_is_used() -> None:
    def step(start: RGBColor, end: RGBColor, t: float) -> RGBColor:
        return start if t < 0.5 else end

    scale = ColorScale(stops=GREYSCALE, interpolator=step)

    assert scale.color_for(0.4) == RGBColor(0, 0, 0)
    assert scale.color_for(0.6) == RGBColor(255, 255, 255)


def test_colorize_maps_nan_to_none() -> None:
    colors = ColorScale(stops=GREYSCALE).colorize(np.array([[0.0, np.nan], [1.0, 2.0]]))

    assert colors.shape == (2, 2)
    assert colors[0, 0] == "#000000"
    assert colors[0, 1] is None
    assert colors[1, 0] == "#ffffff"
    assert colors[1, 1] == "#ffffff"


@pytest.mark.parametrize(
    "stops",
    [
        (ColorStop.from_spec(0.0, "#000000"),),
        (ColorStop.from_spec(1.0, "#000000"), ColorStop.from_spec(0.5, "#ffffff")),
        (ColorStop.from_spec(0.5, "#000000"), ColorStop.from_spec(0.5, "#ffffff")),
        (ColorStop.from_spec(0.0, "#000000"), ColorStop.from_spec(float("nan"), "#ffffff")),
    ],
)
def test_invalid_stop_tables_are_rejected(stops) -> None:
    with pytest.raises(ConfigurationError):
        ColorScale(stops=stops)


def test_parse_color_stops_accepts_mapping_and_sorts_keys() -> None:
    stops = parse_color_stops({"1.0": "#ffffff", "0.0": "#000000", "0.5": "red"})

    assert [stop.threshold for stop in stops] == [0.0, 0.5, 1.0]
    assert stops[1].color == RGBColor(255, 0, 0)


def test_parse_color_stops_accepts_list_form() -> None:
    stops = parse_color_stops(
        {"stops": [{"threshold": 0.0, "color": "#0a0a23"}, {"threshold": 1.5, "color": "#ffff00"}]}
    )

    assert len(stops) == 2
    assert stops[-1].color.hex == "#ffff00"


def test_parse_color_stops_rejects_unsorted_list() -> None:
    with pytest.raises(ConfigurationError):
        parse_color_stops([{"threshold": 1.0, "color": "#fff"}, {"threshold": 0.0, "color": "#000"}])


def test_parse_color_stops_rejects_incomplete_entries() -> None:
    with pytest.raises(ConfigurationError):
        parse_color_stops([{"threshold": 0.0}, {"threshold": 1.0, "color": "#fff"}])


def test_load_color_stops(tmp_path: Path) -> None:
    palette = tmp_path / "palette.json"
    palette.write_text(
        json.dumps({"stops": [{"threshold": 0, "color": "#000000"}, {"threshold": 2, "color": "#ffffff"}]}),
        encoding="utf-8",
    )

    stops = load_color_stops(palette)

    assert ColorScale(stops=stops).color_for(1.0) == RGBColor(128, 128, 128)
    assert load_color_stops(tmp_path / "absent.json") == DEFAULT_COLOR_STOPS

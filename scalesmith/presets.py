"""Example scales used to seed new palettes."""

from __future__ import annotations

from typing import Callable, Union

from scalesmith.colorspace import hex_to_color
from scalesmith.types import Scale

# Each entry is a hex ramp, or a single hex for a one-color scale.
EXAMPLE_SCALES: dict[str, Union[str, list[str]]] = {
    "black": "#000000",
    "white": "#ffffff",
    "gray": [
        "#f6f8fa", "#eaeef2", "#d0d7de", "#afb8c1", "#8c959f",
        "#6e7781", "#57606a", "#424a53", "#32383f", "#24292f",
    ],
    "blue": [
        "#ddf4ff", "#b6e3ff", "#80ccff", "#54aeff", "#218bff",
        "#0969da", "#0550ae", "#033d8b", "#0a3069", "#002155",
    ],
    "green": [
        "#dafbe1", "#aceebb", "#6fdd8b", "#4ac26b", "#2da44e",
        "#1a7f37", "#116329", "#044f1e", "#003d16", "#002d11",
    ],
    "red": [
        "#ffebe9", "#ffcecb", "#ffaba8", "#ff8182", "#fa4549",
        "#cf222e", "#a40e26", "#82071e", "#660018", "#4c0014",
    ],
}


def build_scale(scale_id: str, name: str, hex_colors: Union[str, list[str]]) -> Scale:
    """Build a scale from one hex string or a list of them."""
    if isinstance(hex_colors, str):
        hex_colors = [hex_colors]
    return Scale(
        id=scale_id,
        name=name,
        colors=tuple(hex_to_color(h) for h in hex_colors),
    )


def example_scales(new_id: Callable[[], str]) -> dict[str, Scale]:
    """Fresh copies of the example scales, keyed by newly generated ids."""
    scales: dict[str, Scale] = {}
    for name, hex_colors in EXAMPLE_SCALES.items():
        scale = build_scale(new_id(), name, hex_colors)
        scales[scale.id] = scale
    return scales

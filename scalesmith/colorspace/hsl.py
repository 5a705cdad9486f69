"""Hex <-> HSL conversions for document colors.

Document colors use hue in degrees [0, 360] and saturation/lightness in
percent [0, 100]. ``colorsys`` works in [0, 1] HLS, so every conversion goes
through the scaling helpers below.
"""

from __future__ import annotations

import colorsys

from scalesmith import defaults
from scalesmith.types import Color


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def hex_to_rgb(hex_color: str) -> tuple[float, float, float]:
    """Convert hex color string to RGB tuple (0-1 range).

    Accepts ``#rrggbb`` and the short ``#rgb`` form, with or without '#'.

    Example:
        >>> hex_to_rgb("ff0000")
        (1.0, 0.0, 0.0)
    """
    hex_color = hex_color.strip().lstrip('#')
    if len(hex_color) == 3:
        hex_color = ''.join(c * 2 for c in hex_color)
    if len(hex_color) != 6:
        raise ValueError(f"Invalid hex color: {hex_color!r}")
    r = int(hex_color[0:2], 16) / 255.0
    g = int(hex_color[2:4], 16) / 255.0
    b = int(hex_color[4:6], 16) / 255.0
    return (r, g, b)


def rgb_to_hex(rgb: tuple[float, float, float]) -> str:
    """Convert RGB in [0, 1] to ``#rrggbb``."""
    return "#{:02x}{:02x}{:02x}".format(
        *(int(round(_clamp(c, 0.0, 1.0) * 255.0)) for c in rgb)
    )


def hex_to_color(hex_color: str) -> Color:
    """Parse a hex string into an HSL ``Color``."""
    r, g, b = hex_to_rgb(hex_color)
    h, l, s = colorsys.rgb_to_hls(r, g, b)
    return Color(
        hue=round(h * defaults.MAX_HUE, 2),
        saturation=round(s * defaults.MAX_SATURATION, 2),
        lightness=round(l * defaults.MAX_LIGHTNESS, 2),
    )


def color_to_hex(color: Color) -> str:
    """Render an absolute HSL ``Color`` as ``#rrggbb``.

    Hue wraps around; saturation and lightness are clamped to their range,
    since curve-derived values can land outside it.
    """
    h = (color.hue % defaults.MAX_HUE) / defaults.MAX_HUE
    s = _clamp(color.saturation, 0.0, defaults.MAX_SATURATION) / defaults.MAX_SATURATION
    l = _clamp(color.lightness, 0.0, defaults.MAX_LIGHTNESS) / defaults.MAX_LIGHTNESS
    return rgb_to_hex(colorsys.hls_to_rgb(h, l, s))

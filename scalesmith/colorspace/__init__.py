"""Color utilities: hex/HSL conversion, CSS named colors, easing functions.

Example:
    from scalesmith.colorspace import hex_to_color, color_to_hex

    color = hex_to_color("#336699")
    assert color_to_hex(color) == "#336699"
"""

from .hsl import (
    hex_to_rgb,
    rgb_to_hex,
    hex_to_color,
    color_to_hex,
)

from .css_names import (
    CSS_COLORS,
    CSS_COLOR_NAMES,
    random_css_color,
)

from .easing import (
    EasingFunction,
    EASINGS,
    cubic_bezier,
    get_easing,
    lerp,
    linear,
)

__all__ = [
    'hex_to_rgb',
    'rgb_to_hex',
    'hex_to_color',
    'color_to_hex',
    'CSS_COLORS',
    'CSS_COLOR_NAMES',
    'random_css_color',
    'EasingFunction',
    'EASINGS',
    'cubic_bezier',
    'get_easing',
    'lerp',
    'linear',
]

"""Easing functions for reshaping curves.

An easing function maps t in [0, 1] to a progress value, with
``f(0) == 0`` and ``f(1) == 1``. Cubic-bezier easings follow the CSS
``cubic-bezier(x1, y1, x2, y2)`` definition: the curve is parameterized by
an internal ``s``, so evaluating at ``t`` means solving ``x(s) = t`` first.
"""

from __future__ import annotations

from typing import Callable

from scipy.optimize import brentq

EasingFunction = Callable[[float], float]


def lerp(start: float, end: float, t: float) -> float:
    """Linear interpolation between ``start`` and ``end``."""
    return start + (end - start) * t


def linear(t: float) -> float:
    return t


def _bezier_component(s: float, p1: float, p2: float) -> float:
    # Endpoints fixed at 0 and 1
    inv = 1.0 - s
    return 3.0 * inv * inv * s * p1 + 3.0 * inv * s * s * p2 + s * s * s


def cubic_bezier(x1: float, y1: float, x2: float, y2: float) -> EasingFunction:
    """Build a CSS-style cubic-bezier easing.

    Args:
        x1, y1: First control point (x1 must lie in [0, 1])
        x2, y2: Second control point (x2 must lie in [0, 1])

    Raises:
        ValueError: If an x control coordinate is outside [0, 1]
    """
    if not (0.0 <= x1 <= 1.0 and 0.0 <= x2 <= 1.0):
        raise ValueError(f"Bezier x values must be in [0, 1], got x1={x1}, x2={x2}")

    if x1 == y1 and x2 == y2:
        return linear

    def easing(t: float) -> float:
        if t <= 0.0:
            return 0.0
        if t >= 1.0:
            return 1.0
        # x(s) is monotonic on [0, 1] when x1, x2 are in range
        s = brentq(lambda s: _bezier_component(s, x1, x2) - t, 0.0, 1.0, xtol=1e-9)
        return _bezier_component(s, y1, y2)

    return easing


# CSS timing-function keywords
EASINGS: dict[str, EasingFunction] = {
    "linear": linear,
    "ease": cubic_bezier(0.25, 0.1, 0.25, 1.0),
    "ease-in": cubic_bezier(0.42, 0.0, 1.0, 1.0),
    "ease-out": cubic_bezier(0.0, 0.0, 0.58, 1.0),
    "ease-in-out": cubic_bezier(0.42, 0.0, 0.58, 1.0),
}


def get_easing(name: str) -> EasingFunction:
    """Look up a named easing.

    Raises:
        ValueError: If the name is unknown
    """
    try:
        return EASINGS[name]
    except KeyError:
        raise ValueError(
            f"Unknown easing {name!r}, expected one of {sorted(EASINGS)}"
        ) from None

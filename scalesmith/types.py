"""Core document types for scalesmith - framework-agnostic.

Every entity is a frozen dataclass and every sequence is a tuple, so a
document snapshot can be shared between history entries without copying.
Edits build new objects with ``dataclasses.replace``.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field, replace
from typing import Callable, Mapping, Optional


class Channel(enum.Enum):
    """HSL channel a curve can drive."""

    HUE = "hue"
    SATURATION = "saturation"
    LIGHTNESS = "lightness"


CHANNELS: tuple[Channel, ...] = (Channel.HUE, Channel.SATURATION, Channel.LIGHTNESS)


@dataclass(frozen=True)
class Color:
    """A single HSL color.

    Attributes:
        hue: Degrees in [0, 360]
        saturation: Percent in [0, 100]
        lightness: Percent in [0, 100]

    When a scale drives a channel from a curve, the stored value for that
    channel is an offset added to the curve value, not an absolute value.
    """

    hue: float = 0.0
    saturation: float = 0.0
    lightness: float = 0.0

    def get(self, channel: Channel) -> float:
        return getattr(self, channel.value)

    def with_channel(self, channel: Channel, value: float) -> Color:
        """Return a copy with one channel replaced."""
        return replace(self, **{channel.value: value})

    def offset(self, channel: Channel, amount: float) -> Color:
        """Return a copy with ``amount`` added to one channel."""
        return self.with_channel(channel, self.get(channel) + amount)

    def merge(self, values: Mapping[Channel, float]) -> Color:
        """Overlay a partial set of channel values."""
        if not values:
            return self
        return replace(self, **{channel.value: value for channel, value in values.items()})


@dataclass(frozen=True)
class Curve:
    """Reusable sequence of values driving one channel across a scale."""

    id: str
    name: str
    type: Channel
    values: tuple[float, ...] = ()


@dataclass(frozen=True)
class NamingScheme:
    """Ordered labels for scale positions; also fixes the scale's color count."""

    id: str
    name: str
    names: tuple[str, ...] = ()


@dataclass(frozen=True)
class Scale:
    """Ordered ramp of colors.

    Attributes:
        id: Unique ID
        name: Display name
        colors: Stored colors (absolute, or offsets for curve-driven channels)
        curves: Channel -> curve id back-references (at most one per channel)
        naming_scheme_id: Attached naming scheme, if any
    """

    id: str
    name: str
    colors: tuple[Color, ...] = ()
    curves: dict[Channel, str] = field(default_factory=dict)
    naming_scheme_id: Optional[str] = None


@dataclass(frozen=True)
class Palette:
    """Top-level document: owns its scales, curves and naming schemes."""

    id: str
    name: str
    background_color: str
    scales: dict[str, Scale] = field(default_factory=dict)
    curves: dict[str, Curve] = field(default_factory=dict)
    naming_schemes: dict[str, NamingScheme] = field(default_factory=dict)


Palettes = dict[str, Palette]


def clone_scale(scale: Scale, new_id: str, name: Optional[str] = None) -> Scale:
    """Copy a scale under a new id.

    Colors are immutable so the color tuple is shared; the curve map is copied.
    """
    return replace(
        scale,
        id=new_id,
        name=scale.name if name is None else name,
        curves=dict(scale.curves),
    )


def clone_palette(
    palette: Palette,
    new_id: Callable[[], str],
    name: Optional[str] = None,
) -> Palette:
    """Deep-copy a palette, assigning fresh ids to every owned entity.

    Curve and naming-scheme references inside scales are rewritten to the
    new ids. References that point outside the palette are kept as-is.
    """
    curve_ids = {old: new_id() for old in palette.curves}
    scheme_ids = {old: new_id() for old in palette.naming_schemes}

    curves = {
        curve_ids[old]: replace(curve, id=curve_ids[old])
        for old, curve in palette.curves.items()
    }
    naming_schemes = {
        scheme_ids[old]: replace(scheme, id=scheme_ids[old])
        for old, scheme in palette.naming_schemes.items()
    }

    scales: dict[str, Scale] = {}
    for scale in palette.scales.values():
        scale_id = new_id()
        scales[scale_id] = replace(
            scale,
            id=scale_id,
            curves={ch: curve_ids.get(cid, cid) for ch, cid in scale.curves.items()},
            naming_scheme_id=scheme_ids.get(scale.naming_scheme_id, scale.naming_scheme_id)
            if scale.naming_scheme_id is not None
            else None,
        )

    palette_id = new_id()
    return Palette(
        id=palette_id,
        name=palette.name if name is None else name,
        background_color=palette.background_color,
        scales=scales,
        curves=curves,
        naming_schemes=naming_schemes,
    )

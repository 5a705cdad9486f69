"""Curve engine: derive effective colors from stored offsets plus curves.

A scale may hand any channel over to a curve. For such a channel, the value
stored in each color is an offset and the rendered value is
``curve.values[index] + offset``. Attaching and detaching rewrite the
stored values so that the rendered colors do not jump.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Mapping

from scalesmith.types import CHANNELS, Channel, Color, Curve, Palette, Scale


def curve_value(curve: Curve, index: int) -> float:
    """Value of ``curve`` at ``index``.

    A curve shorter than the scale it drives contributes its last value for
    the missing positions; an empty curve contributes 0.
    """
    if not curve.values:
        return 0.0
    if index < len(curve.values):
        return curve.values[index]
    return curve.values[-1]


def resolve_color(curves: Mapping[str, Curve], scale: Scale, index: int) -> Color:
    """Effective color of ``scale`` at ``index``.

    Args:
        curves: The palette's curve map
        scale: Scale to read from
        index: Position in ``scale.colors`` (caller guarantees range)

    Returns:
        Absolute color with every curve-driven channel resolved
    """
    color = scale.colors[index]
    overrides: dict[Channel, float] = {}
    for channel in CHANNELS:
        curve_id = scale.curves.get(channel)
        if curve_id is None:
            continue
        overrides[channel] = curve_value(curves[curve_id], index) + color.get(channel)
    return color.merge(overrides)


def resolve_scale(curves: Mapping[str, Curve], scale: Scale) -> tuple[Color, ...]:
    """Effective colors for every position of ``scale``."""
    return tuple(resolve_color(curves, scale, i) for i in range(len(scale.colors)))


def channel_values(curves: Mapping[str, Curve], scale: Scale, channel: Channel) -> tuple[float, ...]:
    """Effective values of one channel across ``scale``."""
    return tuple(color.get(channel) for color in resolve_scale(curves, scale))


def zero_channel(scale: Scale, channel: Channel) -> Scale:
    """Reset the stored value of ``channel`` to 0 for every color."""
    return replace(
        scale,
        colors=tuple(color.with_channel(channel, 0.0) for color in scale.colors),
    )


def attach_curve(scale: Scale, channel: Channel, curve_id: str) -> Scale:
    """Drive ``channel`` from ``curve_id``; stored values become zero offsets."""
    scale = zero_channel(scale, channel)
    return replace(scale, curves={**scale.curves, channel: curve_id})


def detach_curve(curves: Mapping[str, Curve], scale: Scale, channel: Channel) -> Scale:
    """Stop driving ``channel`` from a curve, baking the effective values back.

    A channel without a curve is returned unchanged.
    """
    curve_id = scale.curves.get(channel)
    if curve_id is None:
        return scale
    curve = curves[curve_id]
    colors = tuple(
        color.offset(channel, curve_value(curve, i))
        for i, color in enumerate(scale.colors)
    )
    remaining = {ch: cid for ch, cid in scale.curves.items() if ch is not channel}
    return replace(scale, colors=colors, curves=remaining)


def curve_from_scale(
    curves: Mapping[str, Curve],
    scale: Scale,
    channel: Channel,
    curve_id: str,
) -> tuple[Curve, Scale]:
    """Capture a scale's current channel values as a new curve and attach it.

    Returns:
        (new curve, updated scale); the scale renders exactly as before
    """
    curve = Curve(
        id=curve_id,
        name=f"{scale.name} {channel.value}",
        type=channel,
        values=channel_values(curves, scale, channel),
    )
    return curve, attach_curve(scale, channel, curve_id)


def delete_curve(palette: Palette, curve_id: str) -> Palette:
    """Detach ``curve_id`` from every scale that uses it, then drop it.

    Any channel mapped to the curve id is detached, whatever the curve's
    declared type.
    """
    scales: dict[str, Scale] = {}
    for scale_id, scale in palette.scales.items():
        for channel in [ch for ch, cid in scale.curves.items() if cid == curve_id]:
            scale = detach_curve(palette.curves, scale, channel)
        scales[scale_id] = scale
    remaining = {cid: curve for cid, curve in palette.curves.items() if cid != curve_id}
    return replace(palette, scales=scales, curves=remaining)

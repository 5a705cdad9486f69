"""Pure reducers for every document command.

Each reducer takes the current palettes mapping, a command and an
``ActionContext`` and returns a new mapping. Nothing is mutated: only the
objects along the edited path are rebuilt, everything else is shared with
the previous snapshot. A command that is a no-op by policy returns the
input mapping itself, so ``result is palettes`` means nothing changed.

Unknown palette/scale/curve ids are a caller error and surface as KeyError.
"""

from __future__ import annotations

import random
import uuid
from dataclasses import dataclass, field, replace
from typing import Callable, Optional

import numpy as np

from scalesmith import defaults
from scalesmith.app.commands import (
    ApplyEasingFunction,
    ChangeColorValue,
    ChangeCurveName,
    ChangeCurveValue,
    ChangeCurveValues,
    ChangePaletteBackgroundColor,
    ChangePaletteName,
    ChangeScaleColors,
    ChangeScaleCurve,
    ChangeScaleName,
    ChangeScaleNamingScheme,
    Command,
    CommandType,
    CreateColor,
    CreateCurveFromScale,
    CreateNamingSchemeFromScale,
    CreatePalette,
    CreateScale,
    DeleteColor,
    DeleteCurve,
    DeletePalette,
    DeleteScale,
    DuplicatePalette,
    DuplicateScale,
    ImportScales,
    PopColor,
    UpdateNamingScheme,
)
from scalesmith.colorspace.css_names import random_css_color
from scalesmith.colorspace.easing import lerp
from scalesmith.curves import attach_curve, curve_from_scale, delete_curve, detach_curve
from scalesmith.presets import example_scales
from scalesmith.types import (
    Channel,
    Color,
    Curve,
    NamingScheme,
    Palette,
    Palettes,
    Scale,
    clone_palette,
    clone_scale,
)


def _uuid() -> str:
    return str(uuid.uuid4())


@dataclass
class ActionContext:
    """Sources of non-determinism used by reducers (injectable for tests)."""

    new_id: Callable[[], str] = _uuid
    rng: random.Random = field(default_factory=random.Random)


@dataclass(frozen=True)
class ActionResult:
    """Outcome of applying one command."""

    palettes: Palettes
    navigate_to: Optional[str] = None


def palette_path(palette_id: str) -> str:
    return f"{defaults.ROUTE_PREFIX}/local/{palette_id}"


def scale_path(palette_id: str, scale_id: str) -> str:
    return f"{palette_path(palette_id)}/scale/{scale_id}"


# ============================================================================
# Path helpers
# ============================================================================

def _set_palette(palettes: Palettes, palette: Palette) -> Palettes:
    return {**palettes, palette.id: palette}


def _update_palette(
    palettes: Palettes,
    palette_id: str,
    fn: Callable[[Palette], Palette],
) -> Palettes:
    palette = palettes[palette_id]
    updated = fn(palette)
    if updated is palette:
        return palettes
    return _set_palette(palettes, updated)


def _update_scale(
    palettes: Palettes,
    palette_id: str,
    scale_id: str,
    fn: Callable[[Scale], Scale],
) -> Palettes:
    def edit(palette: Palette) -> Palette:
        scale = palette.scales[scale_id]
        updated = fn(scale)
        if updated is scale:
            return palette
        return replace(palette, scales={**palette.scales, scale_id: updated})

    return _update_palette(palettes, palette_id, edit)


def _update_curve(
    palettes: Palettes,
    palette_id: str,
    curve_id: str,
    fn: Callable[[Curve], Curve],
) -> Palettes:
    def edit(palette: Palette) -> Palette:
        curve = palette.curves[curve_id]
        updated = fn(curve)
        if updated is curve:
            return palette
        return replace(palette, curves={**palette.curves, curve_id: updated})

    return _update_palette(palettes, palette_id, edit)


def _fit_colors(colors: tuple[Color, ...], count: int, ctx: ActionContext) -> tuple[Color, ...]:
    """Truncate or pad ``colors`` to ``count``, padding with the last color."""
    if len(colors) >= count:
        return colors[:count]
    if colors:
        filler = colors[-1]
    else:
        _, filler = random_css_color(ctx.rng)
    return colors + (filler,) * (count - len(colors))


def _round_half_up(values: np.ndarray, decimals: int) -> np.ndarray:
    scale = 10.0 ** decimals
    return np.floor(values * scale + 0.5) / scale


# ============================================================================
# Palettes
# ============================================================================

def create_palette(palettes: Palettes, command: CreatePalette, ctx: ActionContext) -> Palettes:
    """Add an ``Untitled`` palette seeded with the example scales."""
    palette_id = ctx.new_id()
    palette = Palette(
        id=palette_id,
        name=defaults.DEFAULT_PALETTE_NAME,
        background_color=defaults.DEFAULT_BACKGROUND_COLOR,
        scales=example_scales(ctx.new_id),
    )
    return _set_palette(palettes, palette)


def duplicate_palette(palettes: Palettes, command: DuplicatePalette, ctx: ActionContext) -> Palettes:
    existing = palettes[command.palette_id]
    copy = clone_palette(existing, ctx.new_id, name=f"{existing.name}{defaults.COPY_SUFFIX}")
    return _set_palette(palettes, copy)


def delete_palette(palettes: Palettes, command: DeletePalette, ctx: ActionContext) -> Palettes:
    if command.palette_id not in palettes:
        return palettes
    return {pid: p for pid, p in palettes.items() if pid != command.palette_id}


def change_palette_name(palettes: Palettes, command: ChangePaletteName, ctx: ActionContext) -> Palettes:
    return _update_palette(
        palettes, command.palette_id, lambda p: replace(p, name=command.name)
    )


def change_palette_background_color(
    palettes: Palettes,
    command: ChangePaletteBackgroundColor,
    ctx: ActionContext,
) -> Palettes:
    return _update_palette(
        palettes,
        command.palette_id,
        lambda p: replace(p, background_color=command.background_color),
    )


def import_scales(palettes: Palettes, command: ImportScales, ctx: ActionContext) -> Palettes:
    """Replace the palette's scales, or merge the imported ones in."""
    def edit(palette: Palette) -> Palette:
        if command.replace:
            return replace(palette, scales=dict(command.scales))
        return replace(palette, scales={**palette.scales, **command.scales})

    return _update_palette(palettes, command.palette_id, edit)


# ============================================================================
# Scales
# ============================================================================

def create_scale(palettes: Palettes, command: CreateScale, ctx: ActionContext) -> Palettes:
    """Add a one-color scale named after a random CSS color."""
    name, color = random_css_color(ctx.rng)
    scale = Scale(id=ctx.new_id(), name=name, colors=(color,))

    return _update_palette(
        palettes,
        command.palette_id,
        lambda p: replace(p, scales={**p.scales, scale.id: scale}),
    )


def delete_scale(palettes: Palettes, command: DeleteScale, ctx: ActionContext) -> Palettes:
    return _update_palette(
        palettes,
        command.palette_id,
        lambda p: replace(
            p, scales={sid: s for sid, s in p.scales.items() if sid != command.scale_id}
        ),
    )


def duplicate_scale(palettes: Palettes, command: DuplicateScale, ctx: ActionContext) -> Palettes:
    def edit(palette: Palette) -> Palette:
        existing = palette.scales[command.scale_id]
        copy = clone_scale(existing, ctx.new_id(), name=f"{existing.name}{defaults.COPY_SUFFIX}")
        return replace(palette, scales={**palette.scales, copy.id: copy})

    return _update_palette(palettes, command.palette_id, edit)


def change_scale_name(palettes: Palettes, command: ChangeScaleName, ctx: ActionContext) -> Palettes:
    return _update_scale(
        palettes, command.palette_id, command.scale_id,
        lambda s: replace(s, name=command.name),
    )


def change_scale_colors(palettes: Palettes, command: ChangeScaleColors, ctx: ActionContext) -> Palettes:
    return _update_scale(
        palettes, command.palette_id, command.scale_id,
        lambda s: replace(s, colors=tuple(command.colors)),
    )


# ============================================================================
# Colors
# ============================================================================

def create_color(palettes: Palettes, command: CreateColor, ctx: ActionContext) -> Palettes:
    """Insert a color after ``after_index`` (default: at the end).

    The new color copies the one at ``after_index``; when appended at the
    end it is darkened by ``APPEND_DARKEN_STEP`` (floored at 0). Without a
    source color (empty scale, out-of-range index) a random CSS color is used.
    """
    def edit(scale: Scale) -> Scale:
        colors = scale.colors
        last = len(colors) - 1
        after = command.after_index if command.after_index is not None else last

        if 0 <= after <= last:
            color = colors[after]
            if after == last:
                color = color.with_channel(
                    Channel.LIGHTNESS,
                    max(0.0, color.lightness - defaults.APPEND_DARKEN_STEP),
                )
        else:
            _, color = random_css_color(ctx.rng)

        insert_at = min(max(after + 1, 0), len(colors))
        return replace(scale, colors=colors[:insert_at] + (color,) + colors[insert_at:])

    return _update_scale(palettes, command.palette_id, command.scale_id, edit)


def pop_color(palettes: Palettes, command: PopColor, ctx: ActionContext) -> Palettes:
    """Drop the last color, keeping at least one; naming schemes own the count."""
    def edit(scale: Scale) -> Scale:
        if scale.naming_scheme_id is not None or len(scale.colors) <= 1:
            return scale
        return replace(scale, colors=scale.colors[:-1])

    return _update_scale(palettes, command.palette_id, command.scale_id, edit)


def delete_color(palettes: Palettes, command: DeleteColor, ctx: ActionContext) -> Palettes:
    def edit(scale: Scale) -> Scale:
        if scale.naming_scheme_id is not None or len(scale.colors) <= 1:
            return scale
        if not (0 <= command.index < len(scale.colors)):
            return scale
        colors = scale.colors[:command.index] + scale.colors[command.index + 1:]
        return replace(scale, colors=colors)

    return _update_scale(palettes, command.palette_id, command.scale_id, edit)


def change_color_value(palettes: Palettes, command: ChangeColorValue, ctx: ActionContext) -> Palettes:
    def edit(scale: Scale) -> Scale:
        if not (0 <= command.index < len(scale.colors)):
            return scale
        colors = list(scale.colors)
        colors[command.index] = colors[command.index].merge(command.value)
        return replace(scale, colors=tuple(colors))

    return _update_scale(palettes, command.palette_id, command.scale_id, edit)


# ============================================================================
# Curves
# ============================================================================

def create_curve_from_scale(
    palettes: Palettes,
    command: CreateCurveFromScale,
    ctx: ActionContext,
) -> Palettes:
    """Capture the scale's current channel values as a new curve and attach it."""
    def edit(palette: Palette) -> Palette:
        scale = palette.scales[command.scale_id]
        curve, scale = curve_from_scale(palette.curves, scale, command.curve_type, ctx.new_id())
        return replace(
            palette,
            curves={**palette.curves, curve.id: curve},
            scales={**palette.scales, scale.id: scale},
        )

    return _update_palette(palettes, command.palette_id, edit)


def change_curve_name(palettes: Palettes, command: ChangeCurveName, ctx: ActionContext) -> Palettes:
    return _update_curve(
        palettes, command.palette_id, command.curve_id,
        lambda c: replace(c, name=command.name),
    )


def delete_curve_action(palettes: Palettes, command: DeleteCurve, ctx: ActionContext) -> Palettes:
    return _update_palette(
        palettes, command.palette_id, lambda p: delete_curve(p, command.curve_id)
    )


def change_scale_curve(palettes: Palettes, command: ChangeScaleCurve, ctx: ActionContext) -> Palettes:
    """Attach an existing curve to a channel, or detach the channel."""
    def edit(palette: Palette) -> Palette:
        scale = palette.scales[command.scale_id]
        if command.curve_id:
            scale = attach_curve(scale, command.curve_type, command.curve_id)
        else:
            scale = detach_curve(palette.curves, scale, command.curve_type)
        return replace(palette, scales={**palette.scales, scale.id: scale})

    return _update_palette(palettes, command.palette_id, edit)


def change_curve_value(palettes: Palettes, command: ChangeCurveValue, ctx: ActionContext) -> Palettes:
    def edit(curve: Curve) -> Curve:
        if not (0 <= command.index < len(curve.values)):
            return curve
        values = list(curve.values)
        values[command.index] = command.value
        return replace(curve, values=tuple(values))

    return _update_curve(palettes, command.palette_id, command.curve_id, edit)


def change_curve_values(palettes: Palettes, command: ChangeCurveValues, ctx: ActionContext) -> Palettes:
    return _update_curve(
        palettes, command.palette_id, command.curve_id,
        lambda c: replace(c, values=tuple(command.values)),
    )


def apply_easing_function(
    palettes: Palettes,
    command: ApplyEasingFunction,
    ctx: ActionContext,
) -> Palettes:
    """Re-space a curve between its endpoints along an easing function.

    Values become ``lerp(first, last, easing(i / (n - 1)))`` rounded half-up
    to one decimal. Curves with fewer than two values are left alone.
    """
    def edit(curve: Curve) -> Curve:
        values = curve.values
        if len(values) < 2:
            return curve
        start, end = values[0], values[-1]
        if start is None or end is None:
            return curve

        t = np.linspace(0.0, 1.0, len(values))
        eased = np.array([lerp(start, end, command.easing(float(x))) for x in t])
        rounded = _round_half_up(eased, defaults.EASING_DECIMALS)
        return replace(curve, values=tuple(float(v) for v in rounded))

    return _update_curve(palettes, command.palette_id, command.curve_id, edit)


# ============================================================================
# Naming schemes
# ============================================================================

def create_naming_scheme_from_scale(
    palettes: Palettes,
    command: CreateNamingSchemeFromScale,
    ctx: ActionContext,
) -> Palettes:
    """Create a scheme labelling each position by its index, and attach it."""
    def edit(palette: Palette) -> Palette:
        scale = palette.scales[command.scale_id]
        scheme = NamingScheme(
            id=ctx.new_id(),
            name=f"{scale.name}{defaults.NAMING_SCHEME_SUFFIX}",
            names=tuple(str(i) for i in range(len(scale.colors))),
        )
        return replace(
            palette,
            naming_schemes={**palette.naming_schemes, scheme.id: scheme},
            scales={**palette.scales, scale.id: replace(scale, naming_scheme_id=scheme.id)},
        )

    return _update_palette(palettes, command.palette_id, edit)


def change_scale_naming_scheme(
    palettes: Palettes,
    command: ChangeScaleNamingScheme,
    ctx: ActionContext,
) -> Palettes:
    """Attach or clear a naming scheme; attaching resizes the colors to fit."""
    def edit(palette: Palette) -> Palette:
        scale = replace(
            palette.scales[command.scale_id], naming_scheme_id=command.naming_scheme_id
        )
        if command.naming_scheme_id:
            names = palette.naming_schemes[command.naming_scheme_id].names
            scale = replace(scale, colors=_fit_colors(scale.colors, len(names), ctx))
        return replace(palette, scales={**palette.scales, scale.id: scale})

    return _update_palette(palettes, command.palette_id, edit)


def update_naming_scheme(
    palettes: Palettes,
    command: UpdateNamingScheme,
    ctx: ActionContext,
) -> Palettes:
    """Replace a naming scheme and resize every scale that uses it."""
    scheme = command.naming_scheme

    def edit(palette: Palette) -> Palette:
        scales = {
            sid: replace(s, colors=_fit_colors(s.colors, len(scheme.names), ctx))
            if s.naming_scheme_id == scheme.id
            else s
            for sid, s in palette.scales.items()
        }
        return replace(
            palette,
            naming_schemes={**palette.naming_schemes, scheme.id: scheme},
            scales=scales,
        )

    return _update_palette(palettes, command.palette_id, edit)


# ============================================================================
# Dispatch
# ============================================================================

REDUCERS: dict[CommandType, Callable[[Palettes, Command, ActionContext], Palettes]] = {
    CommandType.CREATE_PALETTE: create_palette,
    CommandType.DUPLICATE_PALETTE: duplicate_palette,
    CommandType.DELETE_PALETTE: delete_palette,
    CommandType.CHANGE_PALETTE_NAME: change_palette_name,
    CommandType.CHANGE_PALETTE_BACKGROUND_COLOR: change_palette_background_color,
    CommandType.IMPORT_SCALES: import_scales,
    CommandType.CREATE_SCALE: create_scale,
    CommandType.DELETE_SCALE: delete_scale,
    CommandType.DUPLICATE_SCALE: duplicate_scale,
    CommandType.CHANGE_SCALE_NAME: change_scale_name,
    CommandType.CHANGE_SCALE_COLORS: change_scale_colors,
    CommandType.CREATE_COLOR: create_color,
    CommandType.POP_COLOR: pop_color,
    CommandType.DELETE_COLOR: delete_color,
    CommandType.CHANGE_COLOR_VALUE: change_color_value,
    CommandType.CREATE_CURVE_FROM_SCALE: create_curve_from_scale,
    CommandType.CHANGE_CURVE_NAME: change_curve_name,
    CommandType.DELETE_CURVE: delete_curve_action,
    CommandType.CHANGE_SCALE_CURVE: change_scale_curve,
    CommandType.CHANGE_CURVE_VALUE: change_curve_value,
    CommandType.CHANGE_CURVE_VALUES: change_curve_values,
    CommandType.APPLY_EASING_FUNCTION: apply_easing_function,
    CommandType.CREATE_NAMING_SCHEME_FROM_SCALE: create_naming_scheme_from_scale,
    CommandType.CHANGE_SCALE_NAMING_SCHEME: change_scale_naming_scheme,
    CommandType.UPDATE_NAMING_SCHEME: update_naming_scheme,
}


def _navigation_target(command: Command, before: Palettes, after: Palettes) -> Optional[str]:
    """Path of the entity a creating command just added, if it navigates."""
    if command.type in (CommandType.CREATE_PALETTE, CommandType.DUPLICATE_PALETTE):
        added = [pid for pid in after if pid not in before]
        return palette_path(added[0]) if added else None
    if command.type is CommandType.DUPLICATE_SCALE:
        old_scales = before[command.palette_id].scales
        added = [sid for sid in after[command.palette_id].scales if sid not in old_scales]
        return scale_path(command.palette_id, added[0]) if added else None
    return None


def apply_command(palettes: Palettes, command: Command, ctx: ActionContext) -> ActionResult:
    """Run the reducer for ``command``.

    Raises:
        ValueError: For history commands, which the store handles itself
    """
    reducer = REDUCERS.get(command.type)
    if reducer is None:
        raise ValueError(f"{command.type.value} is not a document command")
    updated = reducer(palettes, command, ctx)
    return ActionResult(
        palettes=updated,
        navigate_to=_navigation_target(command, palettes, updated),
    )

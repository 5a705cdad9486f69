"""Command records accepted by the palette store.

Every command is a frozen dataclass tagged with a ``CommandType``. UI layers
that speak plain dicts (``{"type": "CREATE_COLOR", "paletteId": ...}``) go
through ``parse_command``, which is also where raw numeric input gets
normalized before it reaches a reducer.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, fields
from typing import Any, Callable, ClassVar, Mapping, Optional, Union

import numpy as np

from scalesmith.colorspace.easing import EasingFunction, cubic_bezier, get_easing
from scalesmith.types import Channel, Color, NamingScheme, Scale


class CommandType(enum.Enum):
    """Tags for every command the store understands."""

    # Palettes
    CREATE_PALETTE = "CREATE_PALETTE"
    DUPLICATE_PALETTE = "DUPLICATE_PALETTE"
    DELETE_PALETTE = "DELETE_PALETTE"
    CHANGE_PALETTE_NAME = "CHANGE_PALETTE_NAME"
    CHANGE_PALETTE_BACKGROUND_COLOR = "CHANGE_PALETTE_BACKGROUND_COLOR"
    IMPORT_SCALES = "IMPORT_SCALES"

    # Scales
    CREATE_SCALE = "CREATE_SCALE"
    DELETE_SCALE = "DELETE_SCALE"
    DUPLICATE_SCALE = "DUPLICATE_SCALE"
    CHANGE_SCALE_NAME = "CHANGE_SCALE_NAME"
    CHANGE_SCALE_COLORS = "CHANGE_SCALE_COLORS"

    # Colors
    CREATE_COLOR = "CREATE_COLOR"
    POP_COLOR = "POP_COLOR"
    DELETE_COLOR = "DELETE_COLOR"
    CHANGE_COLOR_VALUE = "CHANGE_COLOR_VALUE"

    # Curves
    CREATE_CURVE_FROM_SCALE = "CREATE_CURVE_FROM_SCALE"
    CHANGE_CURVE_NAME = "CHANGE_CURVE_NAME"
    DELETE_CURVE = "DELETE_CURVE"
    CHANGE_SCALE_CURVE = "CHANGE_SCALE_CURVE"
    CHANGE_CURVE_VALUE = "CHANGE_CURVE_VALUE"
    CHANGE_CURVE_VALUES = "CHANGE_CURVE_VALUES"
    APPLY_EASING_FUNCTION = "APPLY_EASING_FUNCTION"

    # Naming schemes
    CREATE_NAMING_SCHEME_FROM_SCALE = "CREATE_NAMING_SCHEME_FROM_SCALE"
    CHANGE_SCALE_NAMING_SCHEME = "CHANGE_SCALE_NAMING_SCHEME"
    UPDATE_NAMING_SCHEME = "UPDATE_NAMING_SCHEME"

    # History
    UNDO = "UNDO"
    REDO = "REDO"


# Applied right away, outside the debounced edit window (no undo checkpoint).
IMMEDIATE_COMMANDS: frozenset[CommandType] = frozenset({
    CommandType.CREATE_PALETTE,
    CommandType.DUPLICATE_PALETTE,
    CommandType.DELETE_PALETTE,
})

HISTORY_COMMANDS: frozenset[CommandType] = frozenset({
    CommandType.UNDO,
    CommandType.REDO,
})


@dataclass(frozen=True)
class CreatePalette:
    type: ClassVar[CommandType] = CommandType.CREATE_PALETTE


@dataclass(frozen=True)
class DuplicatePalette:
    type: ClassVar[CommandType] = CommandType.DUPLICATE_PALETTE
    palette_id: str


@dataclass(frozen=True)
class DeletePalette:
    type: ClassVar[CommandType] = CommandType.DELETE_PALETTE
    palette_id: str


@dataclass(frozen=True)
class ChangePaletteName:
    type: ClassVar[CommandType] = CommandType.CHANGE_PALETTE_NAME
    palette_id: str
    name: str


@dataclass(frozen=True)
class ChangePaletteBackgroundColor:
    type: ClassVar[CommandType] = CommandType.CHANGE_PALETTE_BACKGROUND_COLOR
    palette_id: str
    background_color: str


@dataclass(frozen=True)
class ImportScales:
    type: ClassVar[CommandType] = CommandType.IMPORT_SCALES
    palette_id: str
    scales: Mapping[str, Scale]
    replace: bool = False


@dataclass(frozen=True)
class CreateScale:
    type: ClassVar[CommandType] = CommandType.CREATE_SCALE
    palette_id: str


@dataclass(frozen=True)
class DeleteScale:
    type: ClassVar[CommandType] = CommandType.DELETE_SCALE
    palette_id: str
    scale_id: str


@dataclass(frozen=True)
class DuplicateScale:
    type: ClassVar[CommandType] = CommandType.DUPLICATE_SCALE
    palette_id: str
    scale_id: str


@dataclass(frozen=True)
class ChangeScaleName:
    type: ClassVar[CommandType] = CommandType.CHANGE_SCALE_NAME
    palette_id: str
    scale_id: str
    name: str


@dataclass(frozen=True)
class ChangeScaleColors:
    type: ClassVar[CommandType] = CommandType.CHANGE_SCALE_COLORS
    palette_id: str
    scale_id: str
    colors: tuple[Color, ...]


@dataclass(frozen=True)
class CreateColor:
    type: ClassVar[CommandType] = CommandType.CREATE_COLOR
    palette_id: str
    scale_id: str
    after_index: Optional[int] = None


@dataclass(frozen=True)
class PopColor:
    type: ClassVar[CommandType] = CommandType.POP_COLOR
    palette_id: str
    scale_id: str


@dataclass(frozen=True)
class DeleteColor:
    type: ClassVar[CommandType] = CommandType.DELETE_COLOR
    palette_id: str
    scale_id: str
    index: int


@dataclass(frozen=True)
class ChangeColorValue:
    type: ClassVar[CommandType] = CommandType.CHANGE_COLOR_VALUE
    palette_id: str
    scale_id: str
    index: int
    value: Mapping[Channel, float]


@dataclass(frozen=True)
class CreateCurveFromScale:
    type: ClassVar[CommandType] = CommandType.CREATE_CURVE_FROM_SCALE
    palette_id: str
    scale_id: str
    curve_type: Channel


@dataclass(frozen=True)
class ChangeCurveName:
    type: ClassVar[CommandType] = CommandType.CHANGE_CURVE_NAME
    palette_id: str
    curve_id: str
    name: str


@dataclass(frozen=True)
class DeleteCurve:
    type: ClassVar[CommandType] = CommandType.DELETE_CURVE
    palette_id: str
    curve_id: str


@dataclass(frozen=True)
class ChangeScaleCurve:
    """Attach ``curve_id`` to a channel, or detach the channel when None."""

    type: ClassVar[CommandType] = CommandType.CHANGE_SCALE_CURVE
    palette_id: str
    scale_id: str
    curve_type: Channel
    curve_id: Optional[str] = None


@dataclass(frozen=True)
class ChangeCurveValue:
    type: ClassVar[CommandType] = CommandType.CHANGE_CURVE_VALUE
    palette_id: str
    curve_id: str
    index: int
    value: float


@dataclass(frozen=True)
class ChangeCurveValues:
    type: ClassVar[CommandType] = CommandType.CHANGE_CURVE_VALUES
    palette_id: str
    curve_id: str
    values: tuple[float, ...]


@dataclass(frozen=True)
class ApplyEasingFunction:
    type: ClassVar[CommandType] = CommandType.APPLY_EASING_FUNCTION
    palette_id: str
    curve_id: str
    easing: EasingFunction


@dataclass(frozen=True)
class CreateNamingSchemeFromScale:
    type: ClassVar[CommandType] = CommandType.CREATE_NAMING_SCHEME_FROM_SCALE
    palette_id: str
    scale_id: str


@dataclass(frozen=True)
class ChangeScaleNamingScheme:
    """Attach a naming scheme to a scale, or detach it when None."""

    type: ClassVar[CommandType] = CommandType.CHANGE_SCALE_NAMING_SCHEME
    palette_id: str
    scale_id: str
    naming_scheme_id: Optional[str] = None


@dataclass(frozen=True)
class UpdateNamingScheme:
    type: ClassVar[CommandType] = CommandType.UPDATE_NAMING_SCHEME
    palette_id: str
    naming_scheme: NamingScheme


@dataclass(frozen=True)
class Undo:
    type: ClassVar[CommandType] = CommandType.UNDO


@dataclass(frozen=True)
class Redo:
    type: ClassVar[CommandType] = CommandType.REDO


Command = Union[
    CreatePalette, DuplicatePalette, DeletePalette, ChangePaletteName,
    ChangePaletteBackgroundColor, ImportScales,
    CreateScale, DeleteScale, DuplicateScale, ChangeScaleName, ChangeScaleColors,
    CreateColor, PopColor, DeleteColor, ChangeColorValue,
    CreateCurveFromScale, ChangeCurveName, DeleteCurve, ChangeScaleCurve,
    ChangeCurveValue, ChangeCurveValues, ApplyEasingFunction,
    CreateNamingSchemeFromScale, ChangeScaleNamingScheme, UpdateNamingScheme,
    Undo, Redo,
]

COMMAND_CLASSES: dict[CommandType, type] = {
    cls.type: cls
    for cls in (
        CreatePalette, DuplicatePalette, DeletePalette, ChangePaletteName,
        ChangePaletteBackgroundColor, ImportScales,
        CreateScale, DeleteScale, DuplicateScale, ChangeScaleName, ChangeScaleColors,
        CreateColor, PopColor, DeleteColor, ChangeColorValue,
        CreateCurveFromScale, ChangeCurveName, DeleteCurve, ChangeScaleCurve,
        ChangeCurveValue, ChangeCurveValues, ApplyEasingFunction,
        CreateNamingSchemeFromScale, ChangeScaleNamingScheme, UpdateNamingScheme,
        Undo, Redo,
    )
}


def is_debounced(command: Command) -> bool:
    """Whether ``command`` opens or extends the debounced edit window."""
    return command.type not in IMMEDIATE_COMMANDS and command.type not in HISTORY_COMMANDS


# ============================================================================
# Boundary normalization
# ============================================================================

def coerce_number(raw: Any) -> float:
    """Normalize raw numeric input; anything non-numeric or non-finite is 0."""
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return 0.0
    if not np.isfinite(value):
        return 0.0
    return value


def _parse_channel(raw: Any) -> Channel:
    return raw if isinstance(raw, Channel) else Channel(raw)


def _parse_partial_color(raw: Mapping[Any, Any]) -> dict[Channel, float]:
    return {_parse_channel(k): coerce_number(v) for k, v in raw.items()}


def _parse_color(raw: Any) -> Color:
    if isinstance(raw, Color):
        return raw
    return Color(
        hue=coerce_number(raw.get('hue')),
        saturation=coerce_number(raw.get('saturation')),
        lightness=coerce_number(raw.get('lightness')),
    )


def _parse_index(raw: Any) -> int:
    return int(coerce_number(raw))


def _parse_optional_index(raw: Any) -> Optional[int]:
    return None if raw is None else _parse_index(raw)


def _parse_easing(raw: Any) -> EasingFunction:
    if callable(raw):
        return raw
    if isinstance(raw, str):
        return get_easing(raw)
    x1, y1, x2, y2 = (float(v) for v in raw)
    return cubic_bezier(x1, y1, x2, y2)


def _parse_scales(raw: Mapping[str, Any]) -> dict[str, Scale]:
    from scalesmith.serialization import scale_from_dict

    return {
        scale_id: scale if isinstance(scale, Scale) else scale_from_dict(scale)
        for scale_id, scale in raw.items()
    }


def _parse_flag(raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, str) and raw.strip().lower() in ('true', 'false'):
        return raw.strip().lower() == 'true'
    raise ValueError(f"Expected a boolean, got {raw!r}")


def _parse_naming_scheme(raw: Any) -> NamingScheme:
    if isinstance(raw, NamingScheme):
        return raw
    from scalesmith.serialization import naming_scheme_from_dict

    return naming_scheme_from_dict(raw)


_FIELD_PARSERS: dict[str, Callable[[Any], Any]] = {
    'curve_type': _parse_channel,
    'colors': lambda raw: tuple(_parse_color(c) for c in raw),
    'values': lambda raw: tuple(coerce_number(v) for v in raw),
    'index': _parse_index,
    'after_index': _parse_optional_index,
    'easing': _parse_easing,
    'scales': _parse_scales,
    'naming_scheme': _parse_naming_scheme,
    'replace': _parse_flag,
}


def _camel(name: str) -> str:
    head, *rest = name.split('_')
    return head + ''.join(part.title() for part in rest)


def parse_command(payload: Mapping[str, Any]) -> Command:
    """Build a command from a tagged dict payload.

    Keys may be camelCase (``paletteId``) or snake_case (``palette_id``).
    ``easingFunction`` is accepted as an alias of ``easing`` and may be a
    callable, a keyword such as ``"ease-in"``, or four bezier control values.

    Raises:
        ValueError: If the tag is unknown or a required field is missing
    """
    try:
        command_type = CommandType(payload['type'])
    except (KeyError, ValueError):
        raise ValueError(f"Unknown command type: {payload.get('type')!r}") from None

    cls = COMMAND_CLASSES[command_type]
    kwargs: dict[str, Any] = {}
    for f in fields(cls):
        if f.name in payload:
            raw = payload[f.name]
        elif _camel(f.name) in payload:
            raw = payload[_camel(f.name)]
        elif f.name == 'easing' and 'easingFunction' in payload:
            raw = payload['easingFunction']
        else:
            continue

        if f.name == 'value':
            raw = (
                _parse_partial_color(raw)
                if command_type is CommandType.CHANGE_COLOR_VALUE
                else coerce_number(raw)
            )
        elif f.name in _FIELD_PARSERS:
            raw = _FIELD_PARSERS[f.name](raw)
        kwargs[f.name] = raw

    try:
        return cls(**kwargs)
    except TypeError as e:
        raise ValueError(f"Invalid payload for {command_type.value}: {e}") from None

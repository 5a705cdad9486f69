"""Document serialization - snapshots of palettes plus undo history as JSON.

Format:
    {
      "schema_version": "1",
      "context": {
        "palettes": {"<paletteId>": {...}},
        "past":     [{"<paletteId>": {...}}, ...],
        "future":   [{"<paletteId>": {...}}, ...]
      }
    }

Keys inside palettes are camelCase (``backgroundColor``, ``namingSchemes``,
``namingSchemeId``) so documents written by the browser editor load as-is.
Snapshots without ``schema_version`` are treated as that legacy format.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Protocol, Union

from scalesmith import defaults
from scalesmith.types import Channel, Color, Curve, NamingScheme, Palette, Palettes, Scale

logger = logging.getLogger(__name__)

SCHEMA_VERSION = "1"


class SnapshotLoadError(Exception):
    """Error decoding a persisted snapshot."""
    pass


@dataclass(frozen=True)
class Snapshot:
    """Everything the store persists: the document and its history."""

    palettes: Palettes = field(default_factory=dict)
    past: tuple[Palettes, ...] = ()
    future: tuple[Palettes, ...] = ()


class PersistenceGateway(Protocol):
    """Where snapshots live between sessions.

    ``load`` returns None when nothing usable is stored. ``save`` is
    best-effort and must not raise. Gateways holding resources may also
    define ``close``, which ``PaletteStore.close`` calls.
    """

    def load(self) -> Optional[Snapshot]:
        ...

    def save(self, snapshot: Snapshot) -> None:
        ...


# ============================================================================
# Conversion helpers
# ============================================================================

def color_to_dict(color: Color) -> dict[str, float]:
    return {
        'hue': color.hue,
        'saturation': color.saturation,
        'lightness': color.lightness,
    }


def color_from_dict(data: dict[str, Any]) -> Color:
    return Color(
        hue=float(data['hue']),
        saturation=float(data['saturation']),
        lightness=float(data['lightness']),
    )


def scale_to_dict(scale: Scale) -> dict[str, Any]:
    return {
        'id': scale.id,
        'name': scale.name,
        'colors': [color_to_dict(c) for c in scale.colors],
        'curves': {channel.value: curve_id for channel, curve_id in scale.curves.items()},
        'namingSchemeId': scale.naming_scheme_id,
    }


def scale_from_dict(data: dict[str, Any]) -> Scale:
    return Scale(
        id=data['id'],
        name=data['name'],
        colors=tuple(color_from_dict(c) for c in data['colors']),
        curves={
            Channel(channel): curve_id
            for channel, curve_id in (data.get('curves') or {}).items()
            if curve_id is not None
        },
        naming_scheme_id=data.get('namingSchemeId'),
    )


def curve_to_dict(curve: Curve) -> dict[str, Any]:
    return {
        'id': curve.id,
        'name': curve.name,
        'type': curve.type.value,
        'values': list(curve.values),
    }


def curve_from_dict(data: dict[str, Any]) -> Curve:
    return Curve(
        id=data['id'],
        name=data['name'],
        type=Channel(data['type']),
        values=tuple(float(v) for v in data['values']),
    )


def naming_scheme_to_dict(scheme: NamingScheme) -> dict[str, Any]:
    return {
        'id': scheme.id,
        'name': scheme.name,
        'names': list(scheme.names),
    }


def naming_scheme_from_dict(data: dict[str, Any]) -> NamingScheme:
    return NamingScheme(
        id=data['id'],
        name=data['name'],
        names=tuple(str(n) for n in data['names']),
    )


def palette_to_dict(palette: Palette) -> dict[str, Any]:
    return {
        'id': palette.id,
        'name': palette.name,
        'backgroundColor': palette.background_color,
        'scales': {sid: scale_to_dict(s) for sid, s in palette.scales.items()},
        'curves': {cid: curve_to_dict(c) for cid, c in palette.curves.items()},
        'namingSchemes': {nid: naming_scheme_to_dict(n) for nid, n in palette.naming_schemes.items()},
    }


def palette_from_dict(data: dict[str, Any]) -> Palette:
    """Reconstruct a palette; documents predating naming schemes get an empty map."""
    return Palette(
        id=data['id'],
        name=data['name'],
        background_color=data.get('backgroundColor', defaults.DEFAULT_BACKGROUND_COLOR),
        scales={sid: scale_from_dict(s) for sid, s in data['scales'].items()},
        curves={cid: curve_from_dict(c) for cid, c in (data.get('curves') or {}).items()},
        naming_schemes={
            nid: naming_scheme_from_dict(n)
            for nid, n in (data.get('namingSchemes') or {}).items()
        },
    )


def palettes_to_dict(palettes: Palettes) -> dict[str, Any]:
    return {pid: palette_to_dict(p) for pid, p in palettes.items()}


def palettes_from_dict(data: dict[str, Any]) -> Palettes:
    return {pid: palette_from_dict(p) for pid, p in data.items()}


def snapshot_to_dict(snapshot: Snapshot) -> dict[str, Any]:
    """Convert a snapshot to a JSON-serializable dict."""
    return {
        'schema_version': SCHEMA_VERSION,
        'context': {
            'palettes': palettes_to_dict(snapshot.palettes),
            'past': [palettes_to_dict(p) for p in snapshot.past],
            'future': [palettes_to_dict(p) for p in snapshot.future],
        },
    }


def snapshot_from_dict(data: Any) -> Snapshot:
    """Reconstruct a snapshot.

    Raises:
        SnapshotLoadError: On an unsupported schema version or a malformed document
    """
    if not isinstance(data, dict):
        raise SnapshotLoadError(f"Expected a JSON object, got {type(data).__name__}")

    schema_version = data.get('schema_version', SCHEMA_VERSION)
    if schema_version != SCHEMA_VERSION:
        raise SnapshotLoadError(
            f"Schema version {schema_version} not supported. Expected {SCHEMA_VERSION}."
        )

    try:
        context = data['context']
        return Snapshot(
            palettes=palettes_from_dict(context['palettes']),
            past=tuple(palettes_from_dict(p) for p in context.get('past') or []),
            future=tuple(palettes_from_dict(p) for p in context.get('future') or []),
        )
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise SnapshotLoadError(f"Malformed snapshot: {e!r}") from e


def dumps_snapshot(snapshot: Snapshot) -> str:
    return json.dumps(snapshot_to_dict(snapshot))


def loads_snapshot(text: str) -> Snapshot:
    """Parse a JSON snapshot.

    Raises:
        SnapshotLoadError: If the text is not valid JSON or not a snapshot
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise SnapshotLoadError(f"Invalid JSON: {e}") from e
    return snapshot_from_dict(data)


# ============================================================================
# Gateways
# ============================================================================

class MemoryPersistence:
    """In-process gateway holding the serialized JSON text."""

    def __init__(self, text: Optional[str] = None) -> None:
        self.text = text
        self.saves = 0

    def load(self) -> Optional[Snapshot]:
        if not self.text:
            return None
        try:
            return loads_snapshot(self.text)
        except SnapshotLoadError as e:
            logger.warning("Discarding stored snapshot: %s", e)
            return None

    def save(self, snapshot: Snapshot) -> None:
        self.text = dumps_snapshot(snapshot)
        self.saves += 1


class JsonFilePersistence:
    """Gateway storing the snapshot as a JSON file.

    Writes run on a single background worker so they never block command
    processing; each write replaces the file atomically.
    """

    def __init__(
        self,
        filepath: Union[str, Path] = defaults.SNAPSHOT_FILENAME,
        *,
        executor: Optional[ThreadPoolExecutor] = None,
    ) -> None:
        self.filepath = Path(filepath)
        self._executor = executor if executor is not None else ThreadPoolExecutor(max_workers=1)
        self._last_write: Optional[Future] = None

    def load(self) -> Optional[Snapshot]:
        if not self.filepath.exists():
            return None
        try:
            return loads_snapshot(self.filepath.read_text(encoding='utf-8'))
        except (OSError, UnicodeDecodeError, SnapshotLoadError) as e:
            logger.warning("Discarding snapshot %s: %s", self.filepath, e)
            return None

    def save(self, snapshot: Snapshot) -> None:
        future = self._executor.submit(self._write, snapshot)
        future.add_done_callback(self._report)
        self._last_write = future

    def wait(self, timeout: Optional[float] = None) -> None:
        """Block until the most recent write has finished."""
        if self._last_write is not None:
            self._last_write.exception(timeout=timeout)

    def close(self) -> None:
        self._executor.shutdown(wait=True)

    def _write(self, snapshot: Snapshot) -> None:
        text = dumps_snapshot(snapshot)
        self.filepath.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=self.filepath.name, suffix='.tmp', dir=self.filepath.parent
        )
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                f.write(text)
            os.replace(tmp_name, self.filepath)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.debug("Saved snapshot to %s", self.filepath)

    def _report(self, future: Future) -> None:
        error = future.exception()
        if error is not None:
            logger.warning(
                "Saving snapshot to %s failed", self.filepath,
                exc_info=(type(error), error, error.__traceback__),
            )

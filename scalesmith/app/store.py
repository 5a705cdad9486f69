"""The palette store: single writer for the palette document.

PaletteStore mediates every document change, providing:
- One dispatch path for all commands (reducers never run elsewhere)
- Debounced undo checkpoints via ``HistoryManager``
- Subscriber notifications (outside the lock)
- Navigation requests for commands that create a navigable entity
- Debounced, fire-and-forget persistence through a ``PersistenceGateway``
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Mapping, Optional, Union

from scalesmith import defaults
from scalesmith.app.actions import ActionContext, apply_command
from scalesmith.app.commands import Command, CommandType, Redo, Undo, is_debounced, parse_command
from scalesmith.app.history import (
    HistoryManager,
    HistoryState,
    Scheduler,
    ThreadingScheduler,
    TimerHandle,
)
from scalesmith.curves import resolve_scale
from scalesmith.serialization import PersistenceGateway, Snapshot
from scalesmith.types import Color, Palette, Palettes

logger = logging.getLogger(__name__)

Subscriber = Callable[[Command, Palettes], None]


class PaletteStore:
    """Holds the current palettes and applies commands to them.

    Dispatch is synchronous: when ``dispatch`` returns, the command has been
    fully applied (or ignored by policy) and ``palettes`` reflects it.
    Readers always see a complete snapshot; snapshots are never mutated.
    """

    def __init__(
        self,
        palettes: Optional[Palettes] = None,
        *,
        past: Optional[list[Palettes]] = None,
        future: Optional[list[Palettes]] = None,
        scheduler: Optional[Scheduler] = None,
        persistence: Optional[PersistenceGateway] = None,
        navigate: Optional[Callable[[str], None]] = None,
        context: Optional[ActionContext] = None,
        lock: Optional[threading.RLock] = None,
        debounce_ms: float = defaults.DEBOUNCE_MS,
        history_limit: int = defaults.HISTORY_LIMIT,
    ) -> None:
        self._palettes: Palettes = dict(palettes or {})
        self._scheduler = scheduler if scheduler is not None else ThreadingScheduler()
        self._persistence = persistence
        self._navigate = navigate
        self._context = context if context is not None else ActionContext()
        self._lock = lock if lock is not None else threading.RLock()
        self._debounce_ms = debounce_ms

        self._history = HistoryManager(
            self._scheduler,
            self._lock,
            debounce_ms=debounce_ms,
            limit=history_limit,
            past=past,
            future=future,
        )

        self._subscribers: list[Subscriber] = []
        self._persist_handle: Optional[TimerHandle] = None
        self._persist_generation = 0

    @classmethod
    def from_persistence(cls, persistence: PersistenceGateway, **kwargs: Any) -> PaletteStore:
        """Restore the store from ``persistence``, or start empty if nothing loads."""
        snapshot = persistence.load()
        if snapshot is None:
            logger.info("No stored snapshot, starting with an empty document")
            snapshot = Snapshot()
        return cls(
            snapshot.palettes,
            past=list(snapshot.past),
            future=list(snapshot.future),
            persistence=persistence,
            **kwargs,
        )

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def palettes(self) -> Palettes:
        return self._palettes

    @property
    def past(self) -> tuple[Palettes, ...]:
        return self._history.past

    @property
    def future(self) -> tuple[Palettes, ...]:
        return self._history.future

    @property
    def state(self) -> HistoryState:
        return self._history.state

    def can_undo(self) -> bool:
        return self._history.can_undo()

    def can_redo(self) -> bool:
        return self._history.can_redo()

    def get_palette(self, palette_id: str) -> Palette:
        return self._palettes[palette_id]

    def resolved_colors(self, palette_id: str, scale_id: str) -> tuple[Color, ...]:
        """Effective colors of a scale, with curve-driven channels applied."""
        palette = self._palettes[palette_id]
        return resolve_scale(palette.curves, palette.scales[scale_id])

    def snapshot(self) -> Snapshot:
        with self._lock:
            return Snapshot(
                palettes=self._palettes,
                past=self._history.past,
                future=self._history.future,
            )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def dispatch(self, command: Union[Command, Mapping[str, Any]]) -> None:
        """Apply a command (or a tagged dict payload).

        Never reports success or failure: commands that are no-ops by
        policy leave the document untouched.
        """
        if isinstance(command, Mapping):
            command = parse_command(command)

        navigate_to: Optional[str] = None
        with self._lock:
            if command.type is CommandType.UNDO:
                self._palettes = self._history.undo(self._palettes)
            elif command.type is CommandType.REDO:
                self._palettes = self._history.redo(self._palettes)
            else:
                result = apply_command(self._palettes, command, self._context)
                if is_debounced(command):
                    self._history.begin_edit(self._palettes)
                self._palettes = result.palettes
                navigate_to = result.navigate_to
            palettes = self._palettes
            self._schedule_persist()

        self._notify(command, palettes)
        if navigate_to is not None and self._navigate is not None:
            self._request_navigation(navigate_to)

    def undo(self) -> None:
        self.dispatch(Undo())

    def redo(self) -> None:
        self.dispatch(Redo())

    def subscribe(self, callback: Subscriber) -> None:
        """Register *callback*, called as ``(command, palettes)`` after each dispatch."""
        self._subscribers.append(callback)

    def unsubscribe(self, callback: Subscriber) -> None:
        """Remove a previously registered callback."""
        try:
            self._subscribers.remove(callback)
        except ValueError:
            pass

    def flush(self) -> None:
        """Close the editing window and write any pending snapshot right away."""
        with self._lock:
            self._history.settle()
            pending = self._persist_handle is not None
            if pending:
                self._persist_handle.cancel()
                self._persist_handle = None
                self._persist_generation += 1
        if pending:
            self._persist()

    def close(self) -> None:
        """Flush, then close the persistence gateway if it supports it."""
        self.flush()
        close = getattr(self._persistence, 'close', None)
        if close is not None:
            close()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _schedule_persist(self) -> None:
        if self._persistence is None:
            return
        if self._persist_handle is not None:
            self._persist_handle.cancel()
        self._persist_generation += 1
        generation = self._persist_generation
        self._persist_handle = self._scheduler.schedule_once(
            self._debounce_ms, lambda: self._on_persist_timeout(generation)
        )

    def _on_persist_timeout(self, generation: int) -> None:
        with self._lock:
            if generation != self._persist_generation:
                return
            self._persist_handle = None
        self._persist()

    def _persist(self) -> None:
        if self._persistence is None:
            return
        snapshot = self.snapshot()
        try:
            self._persistence.save(snapshot)
        except Exception:
            logger.warning("Persisting snapshot failed", exc_info=True)

    def _notify(self, command: Command, palettes: Palettes) -> None:
        """Call all subscribers, isolating exceptions."""
        for cb in list(self._subscribers):
            try:
                cb(command, palettes)
            except Exception:
                logger.warning(
                    "Subscriber %r raised for %s", cb, command.type.value, exc_info=True,
                )

    def _request_navigation(self, path: str) -> None:
        try:
            self._navigate(path)
        except Exception:
            logger.warning("Navigation to %s failed", path, exc_info=True)

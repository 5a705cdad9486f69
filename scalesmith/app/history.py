"""Snapshot-based undo/redo with a debounced checkpoint.

Edits arrive in bursts (dragging a slider fires dozens of commands). The
history manager collapses each burst into a single undo step:

- ``idle`` -> ``debouncing`` on the first edit of a burst. Leaving ``idle``
  pushes the pre-edit document onto ``past`` (capped) and clears ``future``.
- ``debouncing`` -> ``debouncing`` on every further edit; the timer restarts.
- ``debouncing`` -> ``idle`` once the debounce window passes without edits.
- UNDO and REDO close the window first, so the next edit starts a new burst.

Timers go through a ``Scheduler`` so tests can drive time by hand.
"""

from __future__ import annotations

import enum
import logging
import threading
from typing import Callable, Optional, Protocol

from scalesmith import defaults
from scalesmith.types import Palettes

logger = logging.getLogger(__name__)


class TimerHandle(Protocol):
    def cancel(self) -> None:
        ...


class Scheduler(Protocol):
    """Runs a callback once after a delay; the returned handle cancels it."""

    def schedule_once(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
        ...


class ThreadingScheduler:
    """Scheduler backed by ``threading.Timer`` (callbacks run on a timer thread)."""

    def schedule_once(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
        timer = threading.Timer(delay_ms / 1000.0, callback)
        timer.daemon = True
        timer.start()
        return timer


class HistoryState(enum.Enum):
    IDLE = "idle"
    DEBOUNCING = "debouncing"


class HistoryManager:
    """Past/future stacks plus the idle/debouncing state machine.

    The manager never applies edits itself. The store calls ``begin_edit``
    with the document as it was before each debounced command, and
    ``undo``/``redo`` with the current document; both return the document
    that should become current.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        lock: threading.RLock,
        *,
        debounce_ms: float = defaults.DEBOUNCE_MS,
        limit: int = defaults.HISTORY_LIMIT,
        past: Optional[list[Palettes]] = None,
        future: Optional[list[Palettes]] = None,
    ) -> None:
        self._scheduler = scheduler
        self._lock = lock
        self.debounce_ms = debounce_ms
        self.limit = limit

        self._past: list[Palettes] = list(past or [])[-limit:]
        self._future: list[Palettes] = list(future or [])

        self._state = HistoryState.IDLE
        self._handle: Optional[TimerHandle] = None
        # Bumped on every (re)schedule so a timer that fires after being
        # cancelled can tell it is stale.
        self._generation = 0

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def state(self) -> HistoryState:
        return self._state

    @property
    def past(self) -> tuple[Palettes, ...]:
        return tuple(self._past)

    @property
    def future(self) -> tuple[Palettes, ...]:
        return tuple(self._future)

    def can_undo(self) -> bool:
        return bool(self._past)

    def can_redo(self) -> bool:
        return bool(self._future)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def begin_edit(self, present: Palettes) -> None:
        """Enter or extend the editing window for a debounced command.

        Args:
            present: The document before the command is applied
        """
        with self._lock:
            if self._state is HistoryState.IDLE:
                self._checkpoint(present)
                self._state = HistoryState.DEBOUNCING
            self._restart_timer()

    def undo(self, present: Palettes) -> Palettes:
        """Step back one checkpoint; returns ``present`` itself when empty."""
        with self._lock:
            if not self._past:
                return present
            self.settle()
            self._future.append(present)
            previous = self._past.pop()
            logger.debug("Undo: %d past, %d future", len(self._past), len(self._future))
            return previous

    def redo(self, present: Palettes) -> Palettes:
        """Step forward; takes the oldest ``future`` entry first."""
        with self._lock:
            if not self._future:
                return present
            self.settle()
            self._past.append(present)
            following = self._future.pop(0)
            logger.debug("Redo: %d past, %d future", len(self._past), len(self._future))
            return following

    def settle(self) -> None:
        """Close the editing window now instead of waiting for the timer."""
        with self._lock:
            self._cancel_timer()
            self._state = HistoryState.IDLE

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _checkpoint(self, present: Palettes) -> None:
        self._past.append(present)
        if len(self._past) > self.limit:
            del self._past[:-self.limit]
        self._future.clear()
        logger.debug("Checkpoint: %d past entries", len(self._past))

    def _restart_timer(self) -> None:
        self._cancel_timer()
        self._generation += 1
        generation = self._generation
        self._handle = self._scheduler.schedule_once(
            self.debounce_ms, lambda: self._on_timeout(generation)
        )

    def _cancel_timer(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _on_timeout(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation:
                return
            self._handle = None
            self._state = HistoryState.IDLE

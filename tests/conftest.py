"""Test configuration for scalesmith."""

import random
import threading

import pytest

from scalesmith.app.actions import ActionContext
from scalesmith.app.store import PaletteStore
from scalesmith.serialization import MemoryPersistence
from scalesmith.types import Color, Palette, Scale


class FakeHandle:
    def __init__(self, scheduler, due, callback):
        self._scheduler = scheduler
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class FakeScheduler:
    """Deterministic scheduler: callbacks fire only when time is advanced."""

    def __init__(self):
        self.now = 0.0
        self.handles = []

    def schedule_once(self, delay_ms, callback):
        handle = FakeHandle(self, self.now + delay_ms, callback)
        self.handles.append(handle)
        return handle

    def advance(self, ms):
        self.now += ms
        while True:
            due = [h for h in self.handles if not h.cancelled and h.due <= self.now]
            if not due:
                break
            for handle in sorted(due, key=lambda h: h.due):
                self.handles.remove(handle)
                handle.callback()

    @property
    def pending(self):
        return [h for h in self.handles if not h.cancelled]


class SequentialIds:
    """Predictable id generator: id-1, id-2, ..."""

    def __init__(self, prefix="id"):
        self.prefix = prefix
        self.count = 0

    def __call__(self):
        self.count += 1
        return f"{self.prefix}-{self.count}"


@pytest.fixture
def scheduler():
    return FakeScheduler()


@pytest.fixture
def lock():
    return threading.RLock()


@pytest.fixture
def ids():
    return SequentialIds()


@pytest.fixture
def ctx(ids):
    return ActionContext(new_id=ids, rng=random.Random(1234))


@pytest.fixture
def palette():
    """Palette with one three-color scale and no curves."""
    scale = Scale(
        id="s1",
        name="blue",
        colors=(
            Color(210.0, 80.0, 10.0),
            Color(210.0, 80.0, 20.0),
            Color(210.0, 80.0, 30.0),
        ),
    )
    return Palette(
        id="p1",
        name="Test",
        background_color="#ffffff",
        scales={"s1": scale},
    )


@pytest.fixture
def palettes(palette):
    return {palette.id: palette}


@pytest.fixture
def persistence():
    return MemoryPersistence()


@pytest.fixture
def navigations():
    return []


@pytest.fixture
def store(palettes, scheduler, ctx, persistence, navigations):
    return PaletteStore(
        palettes,
        scheduler=scheduler,
        context=ctx,
        persistence=persistence,
        navigate=navigations.append,
    )

"""
Pytest fixtures for Playroom tests.
"""

import random

import pytest

from ..activities.base import Activity
from ..runtime import Element, EventKind, ManualScheduler, Rect, Surface
from ..services import MemoryStorage, Services, Store


class RecordingCuePlayer:
    """Cue player that remembers every cue."""

    def __init__(self):
        self.cues = []

    def play_cue(self, kind):
        self.cues.append(kind)


class RecordingAnnouncer:
    """Announcer that remembers every sentence."""

    def __init__(self):
        self.spoken = []
        self.stops = 0

    def speak(self, text):
        self.spoken.append(text)

    def speak_positive(self):
        self.spoken.append("Bravo !")

    def stop(self):
        self.stops += 1


class RecordingEffect:
    """Particle effect that remembers every burst."""

    def __init__(self):
        self.bursts = []
        self.center_bursts = 0

    def burst(self, x, y, count=30):
        self.bursts.append((x, y, count))

    def burst_center(self):
        self.center_bursts += 1


class TickerActivity(Activity):
    """
    Minimal activity: one periodic timer and one tap listener, acquired
    straight through the scope.
    """
    activity_id = "ticker"
    name = "Ticker"
    icon = "⏱️"

    def __init__(self, *args, interval_ms=1500, **kwargs):
        super().__init__(*args, **kwargs)
        self.interval_ms = interval_ms
        self.ticks = []
        self.taps = 0
        self.button = None

    def build(self, surface):
        self.button = surface.append(Element("button", Rect(10, 10, 100, 100), classes=["ticker-button"]))
        self.scope.schedule_periodic(lambda: self.ticks.append(surface.scheduler.now()), self.interval_ms)
        self.scope.listen(self.button, EventKind.POINTER_DOWN, self._tap)

    def _tap(self, event):
        self.taps += 1


class BrokenActivity(Activity):
    """Acquires a timer, then fails while building."""
    activity_id = "broken"
    name = "Broken"
    icon = "💥"

    def build(self, surface):
        surface.append(Element("div", Rect(0, 0, 50, 50), classes=["half-built"]))
        self.scope.schedule_periodic(lambda: None, 100)
        raise RuntimeError("missing asset")


class FaultyTimerActivity(Activity):
    """Mounts fine; its first timer raises."""
    activity_id = "faulty_timer"
    name = "Faulty Timer"
    icon = "⏰"

    def build(self, surface):
        self.scope.schedule_periodic(lambda: None, 1000)
        self.after(100, self._explode)

    def _explode(self):
        raise ValueError("boom")


@pytest.fixture
def scheduler() -> ManualScheduler:
    """A virtual clock at t=0."""
    return ManualScheduler()


@pytest.fixture
def surface(scheduler: ManualScheduler) -> Surface:
    """A 1024x768 surface on the virtual clock."""
    return Surface(1024, 768, scheduler=scheduler)


@pytest.fixture
def services() -> Services:
    """Recording doubles for audio, voice and effects."""
    return Services(
        audio=RecordingCuePlayer(),
        voice=RecordingAnnouncer(),
        effects=RecordingEffect(),
    )


@pytest.fixture
def rng() -> random.Random:
    """Seeded randomness for reproducible layouts."""
    return random.Random(1234)


@pytest.fixture
def store() -> Store:
    """A store backed by memory."""
    return Store(MemoryStorage())

"""
Whack-a-Mole - Tap the moles before they hide again.

At most one mole is up at a time. Moles come faster and stay shorter as
the level rises; one in ten is a golden mole worth more points.
"""

from __future__ import annotations
from typing import Any

from ..runtime.events import EventKind, PointerEvent
from ..runtime.geometry import Rect
from ..runtime.scope import ScopeHandle
from ..runtime.surface import Element, Surface
from ..services import CueKind
from .base import Activity

HOLE_COUNT = 6
HOLE_COLUMNS = 3
HOLE_SIZE = 160
HOLE_GAP = 40

FIRST_SPAWN_DELAY_MS = 1000
BASE_SPAWN_INTERVAL_MS = 1000
MIN_SPAWN_INTERVAL_MS = 500
SPAWN_INTERVAL_DECREASE_MS = 50
BASE_DISPLAY_TIME_MS = 2000
MIN_DISPLAY_TIME_MS = 800
DISPLAY_TIME_DECREASE_MS = 100
HIDE_ANIMATION_MS = 200
CAUGHT_HIDE_DELAY_MS = 300
LEVEL_MESSAGE_MS = 2000

MOLES_PER_LEVEL = 5
GOLDEN_MOLE_CHANCE = 0.1
POINTS_PER_MOLE = 10
POINTS_PER_GOLDEN_MOLE = 50

MOLE = "🐹"
GOLDEN_MOLE = "👑"


def spawn_interval_ms(level: int) -> float:
    return max(MIN_SPAWN_INTERVAL_MS, BASE_SPAWN_INTERVAL_MS - (level - 1) * SPAWN_INTERVAL_DECREASE_MS)


def display_time_ms(level: int) -> float:
    return max(MIN_DISPLAY_TIME_MS, BASE_DISPLAY_TIME_MS - (level - 1) * DISPLAY_TIME_DECREASE_MS)


class MoleGame(Activity):
    activity_id = "mole_game"
    name = "Whack-a-Mole"
    icon = "🐹"

    def __init__(self, *args: Any, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.score = 0
        self.level = 1
        self.moles_caught = 0
        self.active_hole: int | None = None
        self.moles: list[Element] = []
        self.score_display: Element | None = None
        self.level_display: Element | None = None
        self.level_message: Element | None = None
        self._hide_timer: ScopeHandle | None = None

    def build(self, surface: Surface):
        self.score = 0
        self.level = 1
        self.moles_caught = 0
        self.active_hole = None
        self.moles = []
        self._hide_timer = None

        self.score_display = surface.append(Element(
            "div", Rect(20, 10, 200, 40), text="Score: 0", classes=["score-display"],
        ))
        self.level_display = surface.append(Element(
            "div", Rect(surface.width - 220, 10, 200, 40), text="Level 1", classes=["level-display"],
        ))
        self.level_message = surface.append(Element(
            "div",
            Rect(surface.width / 2 - 200, 60, 400, 60),
            text="Niveau suivant!",
            classes=["level-up-message"],
        ))
        for element in (self.score_display, self.level_display, self.level_message):
            element.pointer_events = False

        rows = -(-HOLE_COUNT // HOLE_COLUMNS)
        grid_width = HOLE_COLUMNS * HOLE_SIZE + (HOLE_COLUMNS - 1) * HOLE_GAP
        grid_height = rows * HOLE_SIZE + (rows - 1) * HOLE_GAP
        left = (surface.width - grid_width) / 2
        top = (surface.height - grid_height) / 2 + 40
        for index in range(HOLE_COUNT):
            row, col = divmod(index, HOLE_COLUMNS)
            rect = Rect(left + col * (HOLE_SIZE + HOLE_GAP), top + row * (HOLE_SIZE + HOLE_GAP), HOLE_SIZE, HOLE_SIZE)
            hole = surface.append(Element("div", rect, classes=["mole-hole"], data={"index": index}))
            mole = hole.append(Element("button", rect, classes=["mole-character"], data={"golden": False}))
            mole.hidden = True
            self.moles.append(mole)
            self.on(mole, EventKind.POINTER_DOWN, lambda event, index=index: self.whack(index, event))

        self.audio.play_cue(CueKind.POP)
        self.voice.speak("Attrape les taupes !")
        self.after(FIRST_SPAWN_DELAY_MS, self._tick)

    def teardown(self):
        self.moles = []
        self.active_hole = None
        self._hide_timer = None
        self.score_display = None
        self.level_display = None
        self.level_message = None

    def _tick(self):
        self.spawn_mole()
        self.after(spawn_interval_ms(self.level), self._tick)

    def spawn_mole(self) -> int | None:
        """Raise a mole in a random free hole. No-op while one is up."""
        if self.active_hole is not None:
            return None
        available = [i for i, mole in enumerate(self.moles) if mole.hidden]
        if not available:
            return None

        index = self.rng.choice(available)
        golden = self.rng.random() < GOLDEN_MOLE_CHANCE
        mole = self.moles[index]
        mole.text = GOLDEN_MOLE if golden else MOLE
        mole.data["golden"] = golden
        mole.remove_class("golden-mole", "caught", "popping-down")
        if golden:
            mole.add_class("golden-mole")
        mole.add_class("popping-up")
        mole.hidden = False
        self.active_hole = index

        self._hide_timer = self.after(display_time_ms(self.level), lambda: self.hide_mole(index))
        return index

    def hide_mole(self, index: int):
        mole = self.moles[index]
        mole.remove_class("popping-up")
        mole.add_class("popping-down")

        def gone():
            mole.hidden = True
            mole.remove_class("popping-down", "golden-mole", "caught")
            if self.active_hole == index:
                self.active_hole = None

        self.after(HIDE_ANIMATION_MS, gone)

    def whack(self, index: int, event: PointerEvent | None = None):
        mole = self.moles[index]
        if mole.hidden or mole.has_class("caught") or mole.has_class("popping-down"):
            return
        if event is not None:
            event.prevent_default()

        mole.add_class("caught")
        golden = bool(mole.data.get("golden"))
        self.score += POINTS_PER_GOLDEN_MOLE if golden else POINTS_PER_MOLE
        self.moles_caught += 1
        self._update_hud()

        if self.moles_caught % MOLES_PER_LEVEL == 0:
            self.level_up()

        if golden:
            self.audio.play_cue(CueKind.MAGICAL_CHIME)
            self.voice.speak("Taupe magique !")
        else:
            self.audio.play_cue(CueKind.SUCCESS)
        center = mole.bounds().center
        self.effects.burst(center.x, center.y, 40 if golden else 20)

        if self._hide_timer is not None:
            self._hide_timer.cancel()
            self._hide_timer = None
        self.after(CAUGHT_HIDE_DELAY_MS, lambda: self.hide_mole(index))

    def level_up(self):
        self.level += 1
        self.voice.speak(f"Niveau {self.level} !")
        if self.level_message is not None:
            message = self.level_message
            message.add_class("show")
            self.after(LEVEL_MESSAGE_MS, lambda: message.remove_class("show"))
        self._update_hud()
        self.audio.play_cue(CueKind.SUCCESS)
        self.effects.burst_center()

    def _update_hud(self):
        if self.score_display is not None:
            self.score_display.text = f"Score: {self.score}"
        if self.level_display is not None:
            self.level_display.text = f"Level {self.level}"

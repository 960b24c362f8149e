"""
Balloon Pop - Balloons float up from the bottom; a tap pops them.

Each balloon rises through its own frame loop (one frame callback that
re-registers itself), so popping a balloon or unmounting the activity
stops its animation between two frames.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any

from ..runtime.events import EventKind, PointerEvent
from ..runtime.geometry import Rect
from ..runtime.scope import ScopeHandle
from ..runtime.surface import Element, Surface
from ..services import CueKind
from .base import Activity

SPAWN_INTERVAL_MS = 1500
POP_BURST = 25
POP_REMOVE_DELAY_MS = 200
BALLOON_WIDTH = 80
BALLOON_HEIGHT = 100

BALLOON_COLORS = (
    ("#FF6B6B", "Rouge"),
    ("#0C67C3", "Bleu"),
    ("#FFE66D", "Jaune"),
    ("#26E472", "Vert"),
    ("#000000", "Noir"),
    ("#AA96DA", "Violet"),
    ("#FCBAD3", "Rose"),
    ("#FFFFFF", "Blanc"),
)


@dataclass(eq=False)
class Balloon:
    element: Element
    color: str
    color_name: str
    speed: float
    popped: bool = False
    frame: ScopeHandle | None = None
    listener: ScopeHandle | None = None


class BalloonPop(Activity):
    activity_id = "balloon_pop"
    name = "Balloon Pop"
    icon = "🎈"

    def __init__(self, *args: Any, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.balloons: list[Balloon] = []
        self.popped_count = 0
        self.area: Element | None = None

    def build(self, surface: Surface):
        self.balloons = []
        self.popped_count = 0

        self.area = surface.append(
            Element("div", surface.bounds(), classes=["balloon-game-area"])
        )
        instruction = self.area.append(Element(
            "div",
            Rect(0, 0, surface.width, 60),
            text="🎈 Éclate les ballons!",
            classes=["balloon-instruction"],
        ))
        instruction.pointer_events = False

        self.spawn_balloon()
        self.every(SPAWN_INTERVAL_MS, self.spawn_balloon)

        self.audio.play_cue(CueKind.POP)
        self.voice.speak("Éclate les ballons!")

    def teardown(self):
        for balloon in self.balloons:
            balloon.popped = True
        self.balloons = []
        self.area = None

    def spawn_balloon(self) -> Balloon | None:
        if self.area is None or self.surface is None:
            return None

        color, color_name = self.rng.choice(BALLOON_COLORS)
        width, height = self.surface.width, self.surface.height
        x = width * (0.05 + self.rng.random() * 0.8)
        element = self.area.append(Element(
            "div",
            Rect(x, height + 20, BALLOON_WIDTH, BALLOON_HEIGHT),
            classes=["balloon"],
            data={"color": color, "color_name": color_name},
        ))
        balloon = Balloon(
            element=element,
            color=color,
            color_name=color_name,
            speed=2 + self.rng.random() * 5,
        )
        self.balloons.append(balloon)

        balloon.listener = self.on(
            element, EventKind.POINTER_DOWN, lambda event: self.pop(balloon, event)
        )
        self._animate(balloon)
        return balloon

    def _animate(self, balloon: Balloon):
        def step(_timestamp: float):
            if balloon.popped or not balloon.element.is_attached:
                return
            element = balloon.element
            element.move_to(element.rect.x, element.rect.y - balloon.speed)
            if element.rect.bottom < -100:
                balloon.popped = True
                self._remove(balloon)
                return
            balloon.frame = self.next_frame(step)

        balloon.frame = self.next_frame(step)

    def pop(self, balloon: Balloon, event: PointerEvent | None = None):
        if balloon.popped:
            return
        if event is not None:
            event.prevent_default()
            event.stop_propagation()

        balloon.popped = True
        self.popped_count += 1
        if balloon.frame is not None:
            balloon.frame.cancel()
            balloon.frame = None

        self.audio.play_cue(CueKind.POP)
        self.voice.speak(balloon.color_name)
        center = balloon.element.bounds().center
        self.effects.burst(center.x, center.y, POP_BURST)

        element = balloon.element
        element.scale = 1.3
        element.opacity = 0.0
        element.pointer_events = False
        self.after(POP_REMOVE_DELAY_MS, lambda: self._remove(balloon))

    def _remove(self, balloon: Balloon):
        if balloon.listener is not None:
            balloon.listener.cancel()
            balloon.listener = None
        balloon.element.remove()
        if balloon in self.balloons:
            self.balloons.remove(balloon)

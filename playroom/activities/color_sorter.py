"""
Color Sorter - Drag coloured balls into the bucket of the same colour.

Buckets accept any number of balls. A wrong bucket plays the thud cue
and shakes the ball, which the drag controller has already put back.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any

from ..interaction import DragController, DragOutcome, DragSession, DropTarget
from ..runtime.geometry import Rect
from ..runtime.surface import Element, Surface
from ..services import CueKind
from .base import Activity

SPAWN_INTERVAL_MS = 2000
MAX_BALLS = 5
MATCH_POINTS = 10
MATCH_BURST = 30
REMOVE_DELAY_MS = 200
SHAKE_MS = 500
BALL_SIZE = 70
BUCKET_WIDTH = 200
BUCKET_HEIGHT = 160


@dataclass(frozen=True)
class BallColor:
    name: str
    name_fr: str
    hex: str
    emoji: str


COLORS = (
    BallColor("red", "Rouge", "#FF6B6B", "🔴"),
    BallColor("blue", "Bleu", "#006FEE", "🔵"),
    BallColor("green", "Vert", "#95E1D3", "🟢"),
)


class ColorSorter(Activity):
    activity_id = "color_sorter"
    name = "Color Sorter"
    icon = "🗑️"

    def __init__(self, *args: Any, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.score = 0
        self.balls: list[Element] = []
        self.buckets: dict[str, Element] = {}
        self.drag: DragController | None = None
        self.score_display: Element | None = None

    def build(self, surface: Surface):
        self.score = 0
        self.balls = []
        self.buckets = {}

        self.score_display = surface.append(Element(
            "div", Rect(20, 10, 200, 40), text="Score: 0", classes=["sorter-score"],
        ))
        self.score_display.pointer_events = False
        instruction = surface.append(Element(
            "div",
            Rect(0, 60, surface.width, 40),
            text="🗑️ Trie les balles par couleur!",
            classes=["sorter-instruction"],
        ))
        instruction.pointer_events = False

        self.drag = DragController(
            self.scope,
            surface.input_source,
            on_pick_up=self._picked_up,
            on_match=self._sorted,
            on_mismatch=self._wrong_bucket,
        )

        gap = (surface.width - len(COLORS) * BUCKET_WIDTH) / (len(COLORS) + 1)
        for i, color in enumerate(COLORS):
            bucket = surface.append(Element(
                "div",
                Rect(gap + i * (BUCKET_WIDTH + gap), 140, BUCKET_WIDTH, BUCKET_HEIGHT),
                text=color.name_fr,
                classes=["sorter-bucket"],
                data={"color": color.name, "color_fr": color.name_fr},
            ))
            self.buckets[color.name] = bucket
            self.drag.add_target(
                color.name,
                bucket.bounds,
                accept=lambda ball_color, target: ball_color.name == target.key,
                payload=bucket,
                capacity=None,
            )

        self.spawn_ball()
        self.every(SPAWN_INTERVAL_MS, self.spawn_ball)

        self.audio.play_cue(CueKind.POP)
        self.voice.speak("Trie les balles par couleur!")

    def teardown(self):
        self.balls = []
        self.buckets = {}
        self.drag = None
        self.score_display = None

    def spawn_ball(self) -> Element | None:
        if self.surface is None or self.drag is None or len(self.balls) >= MAX_BALLS:
            return None

        color = self.rng.choice(COLORS)
        x = self.surface.width * (0.1 + self.rng.random() * 0.8) - BALL_SIZE / 2
        ball = self.surface.append(Element(
            "div",
            Rect(x, self.surface.height - 140, BALL_SIZE, BALL_SIZE),
            text=color.emoji,
            classes=["sorter-ball"],
            data={"color": color.name, "color_fr": color.name_fr},
        ))
        self.balls.append(ball)
        self.drag.register(ball, color)
        return ball

    def _picked_up(self, session: DragSession):
        self.audio.play_cue(CueKind.POP)

    def _sorted(self, outcome: DragOutcome):
        color: BallColor = outcome.item
        self.score += MATCH_POINTS
        self._update_score()

        self.audio.play_cue(CueKind.SUCCESS)
        self.voice.speak(color.name_fr)
        target: DropTarget = outcome.target
        center = target.bounds().center
        self.effects.burst(center.x, center.y, MATCH_BURST)

        ball = outcome.element
        ball.scale = 0.0
        self.after(REMOVE_DELAY_MS, lambda: self._remove_ball(ball))

    def _wrong_bucket(self, outcome: DragOutcome):
        self.audio.play_cue(CueKind.THUD)
        ball = outcome.element
        ball.add_class("shake")
        self.after(SHAKE_MS, lambda: ball.remove_class("shake"))

    def _remove_ball(self, ball: Element):
        if self.drag is not None:
            self.drag.unregister(ball)
        ball.remove()
        if ball in self.balls:
            self.balls.remove(ball)

    def _update_score(self):
        if self.score_display is not None:
            self.score_display.text = f"Score: {self.score}"

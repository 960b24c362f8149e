"""
Shape Match - Drag each shape into the outline of the same shape.

Level n shows the first n shapes (up to four). Each outline holds one
shape. Like the Memory Game, every level is a fresh mount with the score
handed over; after the last level the game celebrates and starts over.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any

from ..interaction import DragController, DragOutcome, DragSession
from ..runtime.geometry import Rect
from ..runtime.surface import Element, Surface
from ..services import CueKind
from .base import Activity

MAX_LEVELS = 4
MATCH_POINTS = 20
MATCH_BURST = 30
LEVEL_CHECK_DELAY_MS = 500
NEXT_LEVEL_DELAY_MS = 2500
RESTART_DELAY_MS = 4000
BOUNCE_MS = 400
FINAL_BURSTS = 5
FINAL_BURST_INTERVAL_MS = 300
OUTLINE_SIZE = 150
SHAPE_SIZE = 110


@dataclass(frozen=True)
class Shape:
    emoji: str
    kind: str
    name_fr: str
    color: str


SHAPES = (
    Shape("🔴", "circle", "Le cercle", "#ff6b6b"),
    Shape("🟦", "square", "Le carré", "#4ecdc4"),
    Shape("🔺", "triangle", "Le triangle", "#ffe66d"),
    Shape("⭐", "star", "L'étoile", "#ffd700"),
)


class ShapeMatch(Activity):
    activity_id = "shape_match"
    name = "Shape Match"
    icon = "🔺"

    def __init__(self, *args: Any, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.level = 1
        self.score = 0
        self.matched_count = 0
        self.level_complete = False
        self.pieces: list[Element] = []
        self.outlines: dict[str, Element] = {}
        self.drag: DragController | None = None
        self.score_display: Element | None = None
        self.level_display: Element | None = None
        self.message: Element | None = None
        self._carry: tuple[int, int] | None = None

    @property
    def level_shapes(self) -> tuple[Shape, ...]:
        return SHAPES[:self.level]

    def build(self, surface: Surface):
        self.level, self.score = self._carry or (1, 0)
        self._carry = None
        self.matched_count = 0
        self.level_complete = False
        self.pieces = []
        self.outlines = {}

        self.score_display = surface.append(Element(
            "div", Rect(20, 10, 200, 40), text=f"Score: {self.score}", classes=["score-display"],
        ))
        self.level_display = surface.append(Element(
            "div", Rect(surface.width - 220, 10, 200, 40), text=f"Level {self.level}", classes=["level-display"],
        ))
        self.message = surface.append(Element(
            "div",
            Rect(surface.width / 2 - 200, 60, 400, 60),
            text="Niveau suivant!",
            classes=["level-complete-message"],
        ))
        for element in (self.score_display, self.level_display, self.message):
            element.pointer_events = False

        self.drag = DragController(
            self.scope,
            surface.input_source,
            on_pick_up=self._picked_up,
            on_match=self._placed,
            on_mismatch=self._bounced,
            on_miss=self._bounced,
        )

        shapes = self.level_shapes
        gap = (surface.width - len(shapes) * OUTLINE_SIZE) / (len(shapes) + 1)
        for i, shape in enumerate(shapes):
            outline = surface.append(Element(
                "div",
                Rect(gap + i * (OUTLINE_SIZE + gap), 160, OUTLINE_SIZE, OUTLINE_SIZE),
                text=shape.emoji,
                classes=["shape-target"],
                data={"shape": shape.kind},
            ))
            self.outlines[shape.kind] = outline
            self.drag.add_target(
                shape.kind,
                outline.bounds,
                accept=lambda piece, target: piece.kind == target.key,
                payload=outline,
            )

        shuffled = self.rng.sample(shapes, len(shapes))
        gap = (surface.width - len(shuffled) * SHAPE_SIZE) / (len(shuffled) + 1)
        top = surface.height - SHAPE_SIZE - 120
        for i, shape in enumerate(shuffled):
            piece = surface.append(Element(
                "div",
                Rect(gap + i * (SHAPE_SIZE + gap), top, SHAPE_SIZE, SHAPE_SIZE),
                text=shape.emoji,
                classes=["draggable-shape"],
                data={"shape": shape.kind},
            ))
            self.pieces.append(piece)
            self.drag.register(piece, shape)

        self.audio.play_cue(CueKind.POP)

    def teardown(self):
        self.pieces = []
        self.outlines = {}
        self.drag = None
        self.score_display = None
        self.level_display = None
        self.message = None

    def _picked_up(self, session: DragSession):
        self.voice.speak(session.item.name_fr)
        self.audio.play_cue(CueKind.POP)

    def _placed(self, outcome: DragOutcome):
        outline: Element = outcome.target.payload
        outline.add_class("filled")
        outcome.element.add_class("placed")
        self.matched_count += 1
        self.score += MATCH_POINTS
        self._update_hud()

        self.voice.speak_positive()
        self.audio.play_cue(CueKind.SUCCESS)
        center = outline.bounds().center
        self.effects.burst(center.x, center.y, MATCH_BURST)

        self.after(LEVEL_CHECK_DELAY_MS, self.check_level_complete)

    def _bounced(self, outcome: DragOutcome):
        self.audio.play_cue(CueKind.THUD)
        piece = outcome.element
        piece.add_class("bounce-back")
        self.after(BOUNCE_MS, lambda: piece.remove_class("bounce-back"))

    def check_level_complete(self):
        if self.level_complete or self.matched_count != len(self.level_shapes):
            return
        self.level_complete = True

        self.voice.speak("Niveau terminé !")
        if self.message is not None:
            self.message.text = "Bravo!"
            self.message.add_class("show")
        self.audio.play_cue(CueKind.SUCCESS)
        self.effects.burst_center()
        self.after(NEXT_LEVEL_DELAY_MS, self._advance)

    def _advance(self):
        if self.level < MAX_LEVELS:
            self.restart_at(self.level + 1, self.score)
        else:
            self.show_final_celebration()

    def show_final_celebration(self):
        surface = self.surface
        self.voice.speak(
            f"Tu as terminé tous les niveaux ! Score final : {self.score} points !"
        )
        overlay = surface.append(Element(
            "div",
            surface.bounds(),
            text=f"🏆 Tu as terminé tous les niveaux ! Score final : {self.score}",
            classes=["completion-celebration"],
            z_index=500,
        ))
        overlay.pointer_events = False

        def burst():
            self.effects.burst(
                self.rng.random() * surface.width,
                self.rng.random() * surface.height,
                40,
            )

        for i in range(FINAL_BURSTS):
            self.after(i * FINAL_BURST_INTERVAL_MS, burst)
        self.after(RESTART_DELAY_MS, lambda: self.restart_at(1, 0))

    def restart_at(self, level: int, score: int):
        """Mount again on the same surface, starting from level / score."""
        surface = self.surface
        self._carry = (level, score)
        self.mount(surface)

    def _update_hud(self):
        if self.score_display is not None:
            self.score_display.text = f"Score: {self.score}"
        if self.level_display is not None:
            self.level_display.text = f"Level {self.level}"

"""
Memory Game - Flip two cards, keep them if they match.

Levels grow from 2 to 4 pairs. Each level is a fresh mount of the
activity; progress (level, score) is handed to the next mount.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any

from ..runtime.events import EventKind
from ..runtime.geometry import Rect
from ..runtime.surface import Element, Surface
from ..services import CueKind
from .base import Activity

MATCH_DELAY_MS = 500
MISMATCH_DELAY_MS = 1000
MATCH_POINTS = 50
MISMATCH_PENALTY = 5
MATCH_BURST = 20
LEVEL_COMPLETE_DELAY_MS = 1000
NEXT_LEVEL_DELAY_MS = 3000
RESTART_DELAY_MS = 5000
FINAL_BURSTS = 5
FINAL_BURST_INTERVAL_MS = 300
CARD_SIZE = 140
CARD_GAP = 20
FACE_DOWN = "❓"


@dataclass(frozen=True)
class CardFace:
    emoji: str
    kind: str
    name_fr: str


CARD_FACES = (
    CardFace("🐶", "dog", "Le chien"),
    CardFace("🍎", "apple", "La pomme"),
    CardFace("🐱", "cat", "Le chat"),
    CardFace("🍌", "banana", "La banane"),
    CardFace("🐰", "rabbit", "Le lapin"),
    CardFace("🍊", "orange", "L'orange"),
    CardFace("🐻", "bear", "L'ours"),
    CardFace("🍇", "grapes", "Les raisins"),
)

# level -> (pairs, columns); always two rows
LEVELS = {
    1: (2, 2),
    2: (3, 3),
    3: (4, 4),
}
MAX_LEVEL = max(LEVELS)


class MemoryGame(Activity):
    activity_id = "memory_game"
    name = "Memory Game"
    icon = "🃏"

    def __init__(self, *args: Any, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.level = 1
        self.score = 0
        self.cards: list[Element] = []
        self.flipped: list[Element] = []
        self.matched_pairs = 0
        self.can_flip = True
        self.score_display: Element | None = None
        self.level_display: Element | None = None
        self.message: Element | None = None
        self._carry: tuple[int, int] | None = None

    @property
    def pairs_in_level(self) -> int:
        return LEVELS.get(self.level, LEVELS[1])[0]

    def build(self, surface: Surface):
        self.level, self.score = self._carry or (1, 0)
        self._carry = None
        self.cards = []
        self.flipped = []
        self.matched_pairs = 0
        self.can_flip = True

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

        pairs, columns = LEVELS.get(self.level, LEVELS[1])
        faces = self.rng.sample(CARD_FACES, pairs)
        deck = [face for face in faces for _ in range(2)]
        self.rng.shuffle(deck)

        grid_width = columns * CARD_SIZE + (columns - 1) * CARD_GAP
        grid_height = 2 * CARD_SIZE + CARD_GAP
        left = (surface.width - grid_width) / 2
        top = (surface.height - grid_height) / 2
        for index, face in enumerate(deck):
            row, col = divmod(index, columns)
            card = surface.append(Element(
                "div",
                Rect(left + col * (CARD_SIZE + CARD_GAP), top + row * (CARD_SIZE + CARD_GAP), CARD_SIZE, CARD_SIZE),
                text=FACE_DOWN,
                classes=["memory-card"],
                data={"index": index, "kind": face.kind, "face": face},
            ))
            self.cards.append(card)
            self.on(card, EventKind.POINTER_DOWN, lambda event, card=card: self.flip(card))

        self.audio.play_cue(CueKind.POP)

    def teardown(self):
        self.cards = []
        self.flipped = []
        self.score_display = None
        self.level_display = None
        self.message = None

    def flip(self, card: Element):
        if not self.can_flip or card.has_class("flipped") or card.has_class("matched"):
            return

        card.add_class("flipped")
        card.text = card.data["face"].emoji
        self.flipped.append(card)
        self.audio.play_cue(CueKind.POP)

        if len(self.flipped) == 2:
            self.can_flip = False
            first, second = self.flipped
            if first.data["kind"] == second.data["kind"]:
                self.after(MATCH_DELAY_MS, self._matched)
            else:
                self.after(MISMATCH_DELAY_MS, self._mismatched)

    def _matched(self):
        first, second = self.flipped
        for card in (first, second):
            card.add_class("matched")
            center = card.bounds().center
            self.effects.burst(center.x, center.y, MATCH_BURST)
        self.matched_pairs += 1
        self.score += MATCH_POINTS
        self._update_hud()

        face: CardFace = first.data["face"]
        self.voice.speak(f"{face.name_fr} ! Une paire !")
        self.audio.play_cue(CueKind.SUCCESS)

        self.flipped = []
        self.can_flip = True
        if self.matched_pairs == self.pairs_in_level:
            self.after(LEVEL_COMPLETE_DELAY_MS, self._level_complete)

    def _mismatched(self):
        self.score = max(0, self.score - MISMATCH_PENALTY)
        self._update_hud()
        self.audio.play_cue(CueKind.THUD)
        for card in self.flipped:
            card.remove_class("flipped")
            card.text = FACE_DOWN
        self.flipped = []
        self.can_flip = True

    def _level_complete(self):
        self.voice.speak(f"Niveau {self.level} terminé !")
        if self.message is not None:
            self.message.text = f"Level {self.level} Complete! Score: {self.score}"
            self.message.add_class("show")
        self.audio.play_cue(CueKind.SUCCESS)
        self.effects.burst_center()
        self.after(NEXT_LEVEL_DELAY_MS, self._advance)

    def _advance(self):
        if self.level < MAX_LEVEL:
            self.restart_at(self.level + 1, self.score)
        else:
            self.show_final_celebration()

    def show_final_celebration(self):
        surface = self.surface
        self.voice.speak(f"Tu as gagné ! Score final : {self.score} points !")
        overlay = surface.append(Element(
            "div",
            surface.bounds(),
            text=f"🎉 Tu as gagné ! Score final : {self.score}",
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

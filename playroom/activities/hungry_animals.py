"""
Hungry Animals - Drag each food onto the animal that eats it.

Level n shows n animal/food pairs. An animal that has eaten is full and
refuses any other food. After the last level the activity celebrates and
starts over by mounting itself again.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any

from ..interaction import DragController, DragOutcome
from ..runtime.geometry import Rect
from ..runtime.surface import Element, Surface
from ..services import CueKind
from .base import Activity

MAX_LEVELS = 3
MATCH_POINTS = 20
MATCH_BURST = 30
LEVEL_CHECK_DELAY_MS = 2000
NEXT_LEVEL_DELAY_MS = 2500
RESTART_DELAY_MS = 4000
HEAD_SHAKE_MS = 600
FOOD_FADE_DELAY_MS = 1500
FOOD_REMOVE_DELAY_MS = 300
HEART_COUNT = 3
HEART_INTERVAL_MS = 200
HEART_LIFETIME_MS = 1500
FINAL_BURSTS = 5
FINAL_BURST_INTERVAL_MS = 300

ANIMAL_WIDTH = 180
ANIMAL_HEIGHT = 200
FOOD_SIZE = 90


@dataclass(frozen=True)
class AnimalPair:
    animal: str
    animal_name: str
    animal_type: str
    food: str
    food_name: str


PAIRS = (
    AnimalPair("🐰", "Le lapin", "rabbit", "🥕", "la carotte"),
    AnimalPair("🐶", "Le chien", "dog", "🦴", "l'os"),
    AnimalPair("🐵", "Le singe", "monkey", "🍌", "la banane"),
    AnimalPair("🐱", "Le chat", "cat", "🐟", "le poisson"),
    AnimalPair("🐼", "Le panda", "panda", "🎋", "le bambou"),
    AnimalPair("🦁", "Le lion", "lion", "🥩", "la viande"),
)


class HungryAnimals(Activity):
    activity_id = "hungry_animals"
    name = "Hungry Animals"
    icon = "🍽️"

    def __init__(self, *args: Any, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.level = 1
        self.score = 0
        self.matches_completed = 0
        self.level_complete = False
        self.pairs: list[AnimalPair] = []
        self.drag: DragController | None = None
        self.score_display: Element | None = None
        self.celebration: Element | None = None
        self.animals_area: Element | None = None
        self.food_area: Element | None = None

    def build(self, surface: Surface):
        self.level = 1
        self.score = 0

        self.score_display = surface.append(Element(
            "div", Rect(20, 10, 200, 40), text="Score: 0", classes=["hungry-score"],
        ))
        instruction = surface.append(Element(
            "div",
            Rect(0, 60, surface.width, 40),
            text="🍽️ Nourris les animaux!",
            classes=["hungry-instruction"],
        ))
        self.animals_area = surface.append(Element(
            "div", Rect(0, 120, surface.width, ANIMAL_HEIGHT + 40), classes=["hungry-animals-area"],
        ))
        self.food_area = surface.append(Element(
            "div",
            Rect(0, surface.height - FOOD_SIZE - 80, surface.width, FOOD_SIZE + 40),
            classes=["hungry-food-area"],
        ))
        self.celebration = surface.append(Element(
            "div",
            Rect(surface.width / 2 - 200, surface.height / 2 - 50, 400, 100),
            classes=["level-complete-message"],
        ))
        for element in (self.score_display, instruction, self.celebration):
            element.pointer_events = False

        self.drag = DragController(
            self.scope,
            surface.input_source,
            on_pick_up=lambda session: self.audio.play_cue(CueKind.POP),
            on_match=self._fed,
            on_mismatch=self._refused,
        )

        self.setup_level()
        self.audio.play_cue(CueKind.POP)
        self.voice.speak("Nourris les animaux!")

    def teardown(self):
        self.drag = None
        self.pairs = []
        self.score_display = None
        self.celebration = None
        self.animals_area = None
        self.food_area = None

    def setup_level(self):
        """Lay out level pairs: animals on top, their foods shuffled below."""
        if self.drag is None or self.animals_area is None or self.food_area is None:
            return

        self.animals_area.clear()
        self.food_area.clear()
        self.drag.reset()
        self.matches_completed = 0
        self.level_complete = False

        self.pairs = self.rng.sample(PAIRS, self.level)
        foods = self.rng.sample(self.pairs, len(self.pairs))

        area = self.animals_area.bounds()
        gap = (area.width - len(self.pairs) * ANIMAL_WIDTH) / (len(self.pairs) + 1)
        for i, pair in enumerate(self.pairs):
            container = self.animals_area.append(Element(
                "div",
                Rect(area.x + gap + i * (ANIMAL_WIDTH + gap), area.y + 20, ANIMAL_WIDTH, ANIMAL_HEIGHT),
                classes=["hungry-animal-container"],
                data={"animal_type": pair.animal_type},
            ))
            rect = container.bounds()
            container.append(Element(
                "div",
                Rect(rect.x, rect.y, rect.width, rect.height - 40),
                text=pair.animal,
                classes=["hungry-animal"],
            ))
            container.append(Element(
                "div",
                Rect(rect.x, rect.bottom - 40, rect.width, 40),
                text=pair.animal_name,
                classes=["hungry-animal-label"],
            ))
            self.drag.add_target(
                pair.animal_type,
                container.bounds,
                accept=lambda food, target: food.animal_type == target.key,
                payload=container,
                capacity=1,
            )

        area = self.food_area.bounds()
        gap = (area.width - len(foods) * FOOD_SIZE) / (len(foods) + 1)
        for i, pair in enumerate(foods):
            food = self.food_area.append(Element(
                "div",
                Rect(area.x + gap + i * (FOOD_SIZE + gap), area.y + 20, FOOD_SIZE, FOOD_SIZE),
                text=pair.food,
                classes=["hungry-food"],
                data={"animal_type": pair.animal_type},
            ))
            self.drag.register(food, pair)

    def _fed(self, outcome: DragOutcome):
        pair: AnimalPair = outcome.item
        container: Element = outcome.target.payload
        food = outcome.element

        container.add_class("fed")
        self.matches_completed += 1
        self.score += MATCH_POINTS
        self._update_score()

        self.audio.play_cue(CueKind.SUCCESS)
        self.voice.speak(f"{pair.animal_name} mange {pair.food_name}!")

        animal = container.find("hungry-animal")
        if animal is not None:
            animal.add_class("eating")
        center = container.bounds().center
        self.effects.burst(center.x, center.y, MATCH_BURST)
        self._show_hearts(container)

        food.scale = 0.8
        self.after(FOOD_FADE_DELAY_MS, lambda: self._fade_food(food))
        self.after(LEVEL_CHECK_DELAY_MS, self.check_level_complete)

    def _refused(self, outcome: DragOutcome):
        self.audio.play_cue(CueKind.THUD)
        container: Element = outcome.target.payload
        animal = container.find("hungry-animal")
        food = outcome.element
        if animal is not None:
            animal.add_class("head-shake")
        food.add_class("bounce-back")

        def settle():
            if animal is not None:
                animal.remove_class("head-shake")
            food.remove_class("bounce-back")

        self.after(HEAD_SHAKE_MS, settle)

    def _fade_food(self, food: Element):
        food.opacity = 0.0
        food.scale = 0.0
        self.after(FOOD_REMOVE_DELAY_MS, food.remove)

    def _show_hearts(self, container: Element):
        rect = container.bounds()

        def add_heart():
            heart = container.append(Element(
                "div",
                Rect(rect.x + rect.width * (0.2 + self.rng.random() * 0.6), rect.y, 30, 30),
                text="❤️",
                classes=["hungry-heart"],
            ))
            heart.pointer_events = False
            self.after(HEART_LIFETIME_MS, heart.remove)

        for i in range(HEART_COUNT):
            self.after(i * HEART_INTERVAL_MS, add_heart)

    def check_level_complete(self):
        if self.level_complete or self.matches_completed != self.level:
            return
        self.level_complete = True
        if self.level < MAX_LEVELS:
            if self.celebration is not None:
                self.celebration.text = "Level Complete!"
                self.celebration.add_class("show")
            self.voice.speak("Bravo! Niveau suivant!")
            self.effects.burst_center()
            self.after(NEXT_LEVEL_DELAY_MS, self._next_level)
        else:
            self.show_final_celebration()

    def _next_level(self):
        if self.celebration is not None:
            self.celebration.remove_class("show")
        self.level += 1
        self.setup_level()

    def show_final_celebration(self):
        surface = self.surface
        overlay = surface.append(Element(
            "div",
            surface.bounds(),
            text=f"🏆 Tous les animaux sont nourris! Score: {self.score}",
            classes=["completion-celebration"],
            z_index=500,
        ))
        overlay.pointer_events = False
        self.voice.speak(
            f"Félicitations! Tu as nourri tous les animaux! Score final: {self.score} points!"
        )

        def burst():
            self.effects.burst(
                self.rng.random() * surface.width,
                self.rng.random() * surface.height,
                40,
            )

        for i in range(FINAL_BURSTS):
            self.after(i * FINAL_BURST_INTERVAL_MS, burst)
        self.after(RESTART_DELAY_MS, lambda: self.mount(surface))

    def _update_score(self):
        if self.score_display is not None:
            self.score_display.text = f"Score: {self.score}"

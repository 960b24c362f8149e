"""
Activities Module - The Activity contract and the built-in catalogue.
"""

from __future__ import annotations
import random

from .base import Activity
from .balloon_pop import BalloonPop
from .color_sorter import ColorSorter
from .drawing_pad import DrawingPad
from .hungry_animals import HungryAnimals
from .memory_game import MemoryGame
from .mole_game import MoleGame
from .shape_match import ShapeMatch
from ..services import Services

# Menu order
CATALOGUE: tuple[type[Activity], ...] = (
    BalloonPop,
    ColorSorter,
    ShapeMatch,
    MemoryGame,
    MoleGame,
    DrawingPad,
    HungryAnimals,
)


def default_activities(
    services: Services | None = None,
    rng: random.Random | None = None,
) -> list[Activity]:
    """One instance of every built-in activity, sharing services and rng."""
    return [cls(services=services, rng=rng) for cls in CATALOGUE]


__all__ = [
    "Activity",
    "BalloonPop",
    "ColorSorter",
    "DrawingPad",
    "HungryAnimals",
    "MemoryGame",
    "MoleGame",
    "ShapeMatch",
    "CATALOGUE",
    "default_activities",
]

"""
Particle Effects - Celebration bursts.

Particle rendering is a presentation detail; the effect records where a
burst was requested and hands it to a sink.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Callable
import logging

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Burst:
    x: float
    y: float
    count: int


class NullEffect:
    """Draws nothing."""

    def burst(self, x: float, y: float, count: int = 30):
        pass

    def burst_center(self):
        pass


class ParticleEffect:
    """
    Fire-and-forget particle bursts.

    burst_center() needs the viewport size, which is the surface size of
    the shell the effect belongs to.
    """

    def __init__(
        self,
        width: float = 1024,
        height: float = 768,
        sink: Callable[[Burst], None] | None = None,
    ):
        self.width = width
        self.height = height
        self.sink = sink or (lambda b: logger.debug("burst: %d at (%.0f, %.0f)", b.count, b.x, b.y))

    def burst(self, x: float, y: float, count: int = 30):
        self.sink(Burst(x=x, y=y, count=max(0, int(count))))

    def burst_center(self):
        self.burst(self.width / 2, self.height / 2, 50)

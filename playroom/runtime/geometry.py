"""
Geometry - Points and axis-aligned rectangles in surface coordinates.

All element positions are absolute: (0, 0) is the top-left corner of the
surface, x grows right, y grows down.
"""

from __future__ import annotations
from dataclasses import dataclass


@dataclass(frozen=True)
class Point:
    """A position on the surface."""
    x: float
    y: float


@dataclass(frozen=True)
class Rect:
    """
    An axis-aligned rectangle.

    Containment is edge-inclusive, so a point on the border of two
    adjacent rects is inside both.
    """
    x: float
    y: float
    width: float
    height: float

    @classmethod
    def from_edges(cls, left: float, top: float, right: float, bottom: float) -> Rect:
        return cls(left, top, right - left, bottom - top)

    @property
    def left(self) -> float:
        return self.x

    @property
    def top(self) -> float:
        return self.y

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def origin(self) -> Point:
        return Point(self.x, self.y)

    @property
    def center(self) -> Point:
        return Point(self.x + self.width / 2, self.y + self.height / 2)

    def contains(self, point: Point) -> bool:
        return (
            self.left <= point.x <= self.right
            and self.top <= point.y <= self.bottom
        )

    def moved_to(self, x: float, y: float) -> Rect:
        return Rect(x, y, self.width, self.height)

    def centered_on(self, point: Point) -> Rect:
        return Rect(
            point.x - self.width / 2,
            point.y - self.height / 2,
            self.width,
            self.height,
        )

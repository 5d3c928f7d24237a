"""Integer geometry in device pixels."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class Point:
    x: int = 0
    y: int = 0


@dataclass(slots=True, frozen=True)
class Rectangle:
    """Axis-aligned rectangle; ``max`` is exclusive."""

    min: Point
    max: Point

    @classmethod
    def from_bounds(cls, x0: int, y0: int, x1: int, y1: int) -> "Rectangle":
        return cls(Point(x0, y0), Point(x1, y1))

    @property
    def width(self) -> int:
        return self.max.x - self.min.x

    @property
    def height(self) -> int:
        return self.max.y - self.min.y

    def includes(self, point: Point) -> bool:
        return self.min.x <= point.x < self.max.x and self.min.y <= point.y < self.max.y

    def shrink(self, edge: "Edge") -> "Rectangle":
        """Return the rectangle inset by ``edge`` on each side."""
        return Rectangle.from_bounds(
            self.min.x + edge.left,
            self.min.y + edge.top,
            self.max.x - edge.right,
            self.max.y - edge.bottom,
        )


@dataclass(slots=True)
class Edge:
    """Box edge widths (margin, padding)."""

    top: int = 0
    right: int = 0
    bottom: int = 0
    left: int = 0

    @classmethod
    def uniform(cls, value: int) -> "Edge":
        return cls(value, value, value, value)

    def copy(self) -> "Edge":
        return Edge(self.top, self.right, self.bottom, self.left)

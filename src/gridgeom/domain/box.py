"""Axis-aligned bounding boxes."""

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from gridgeom.domain.point import Point, Pt2D


@dataclass(frozen=True, slots=True)
class Box2D:
    """An axis-aligned integer box.

    Attributes:
        low: Minimum corner
        high: Maximum corner
    """

    low: Pt2D
    high: Pt2D

    @classmethod
    def around(cls, points: Iterable[Pt2D]) -> "Box2D":
        """Smallest box containing all the given points.

        Raises:
            ValueError: If no points are given
        """
        pts = list(points)
        if not pts:
            raise ValueError("Cannot build a bounding box around no points")
        return cls(
            Pt2D(min(p.x for p in pts), min(p.y for p in pts)),
            Pt2D(max(p.x for p in pts), max(p.y for p in pts)),
        )

    @property
    def width(self) -> int:
        return self.high.x - self.low.x

    @property
    def height(self) -> int:
        return self.high.y - self.low.y

    @property
    def size(self) -> Pt2D:
        """Width and height as a point."""
        return Pt2D(self.width, self.height)

    @property
    def center(self) -> Pt2D:
        """Grid centre, rounded down towards the low corner."""
        return Pt2D(self.low.x + self.width // 2, self.low.y + self.height // 2)

    def contains(self, point: Point) -> bool:
        """True if the point lies inside or on the box."""
        return (
            self.low.x <= point.x <= self.high.x
            and self.low.y <= point.y <= self.high.y
        )

    def union(self, other: "Box2D") -> "Box2D":
        """Smallest box containing both boxes."""
        return Box2D.around([self.low, self.high, other.low, other.high])

    def expand(self, margin: int) -> "Box2D":
        """Grow the box by margin on every side."""
        return Box2D(self.low.shift(-margin, -margin), self.high.shift(margin, margin))

    def corners(self) -> tuple[Pt2D, Pt2D, Pt2D, Pt2D]:
        """Corners in counter-clockwise order starting at the low corner."""
        return (
            self.low,
            Pt2D(self.high.x, self.low.y),
            self.high,
            Pt2D(self.low.x, self.high.y),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"low": self.low.to_dict(), "high": self.high.to_dict()}

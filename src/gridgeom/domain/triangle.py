"""Triangles produced by triangulation."""

from dataclasses import dataclass
from typing import Any

from gridgeom.core import geometry
from gridgeom.domain.point import Point, Pt2D, Pt2Df, WindingDirection
from gridgeom.domain.polygon import Polygon


@dataclass(frozen=True, slots=True)
class Triangle:
    """Three grid points.

    A Triangle is not a Polygon subtype; ``polygon`` gives the polygon view
    when the general polygon queries are needed.

    Attributes:
        a: First vertex
        b: Second vertex
        c: Third vertex
    """

    a: Pt2D
    b: Pt2D
    c: Pt2D

    @property
    def vertices(self) -> tuple[Pt2D, Pt2D, Pt2D]:
        return (self.a, self.b, self.c)

    @property
    def polygon(self) -> Polygon:
        return Polygon(self.vertices)

    @property
    def centroid(self) -> Pt2Df:
        return Pt2Df((self.a.x + self.b.x + self.c.x) / 3, (self.a.y + self.b.y + self.c.y) / 3)

    def is_degenerate(self) -> bool:
        """True if the three vertices are collinear."""
        return geometry.collinear(self.a, self.b, self.c)

    @property
    def winding_direction(self) -> WindingDirection:
        turn = geometry.turn_direction(self.a, self.b, self.c)
        if turn == geometry.LEFT:
            return WindingDirection.COUNTER_CLOCKWISE
        if turn == geometry.RIGHT:
            return WindingDirection.CLOCKWISE
        return WindingDirection.INDETERMINATE

    def area(self) -> float:
        return abs(geometry.cross(self.a, self.b, self.c)) / 2

    def contains(self, point: Point, include_edges: bool = True) -> bool:
        """Half-plane containment test.

        The point must lie on the inner side of all three edges, where the
        inner side follows the triangle's own winding. A point on an edge
        counts only when include_edges is set. Degenerate triangles contain
        nothing.
        """
        winding = self.winding_direction
        if winding is WindingDirection.INDETERMINATE:
            return False
        sign = 1 if winding is WindingDirection.COUNTER_CLOCKWISE else -1
        sides = (
            sign * geometry.cross(self.a, self.b, point),
            sign * geometry.cross(self.b, self.c, point),
            sign * geometry.cross(self.c, self.a, point),
        )
        if any(s < 0 for s in sides):
            return False
        if any(s == 0 for s in sides):
            return include_edges
        return True

    def contains_exclude_edges(self, point: Point) -> bool:
        return self.contains(point, include_edges=False)

    def to_dict(self) -> dict[str, Any]:
        return {"vertices": [[v.x, v.y] for v in self.vertices]}

    def __str__(self) -> str:
        return f"Triangle({self.a}, {self.b}, {self.c})"

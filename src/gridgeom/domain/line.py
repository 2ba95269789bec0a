"""Line segments with exact 45-degree intersection.

A Line is an ordered pair of points (integer or float). Every line has one
classification: degenerate, horizontal, vertical, positive or negative
45-degree diagonal, or non-45. Horizontal, vertical and diagonal lines are
"45-compliant", and for two compliant lines the intersection point comes
from a closed-form case table, which is exact.
"""

import math
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any

from gridgeom.core import geometry
from gridgeom.domain.point import Point, Pt2D, Pt2Df


class LineKind(Enum):
    """Classification of a line segment by direction."""

    DEGENERATE = auto()
    HORIZONTAL = auto()
    VERTICAL = auto()
    DIAGONAL_POSITIVE = auto()
    DIAGONAL_NEGATIVE = auto()
    NON_45 = auto()


_COMPLIANT = frozenset(
    {
        LineKind.HORIZONTAL,
        LineKind.VERTICAL,
        LineKind.DIAGONAL_POSITIVE,
        LineKind.DIAGONAL_NEGATIVE,
    }
)


@dataclass(frozen=True, slots=True)
class Line:
    """A directed line segment.

    Attributes:
        start: First endpoint
        end: Second endpoint
    """

    start: Point
    end: Point

    @classmethod
    def of(cls, x1: int, y1: int, x2: int, y2: int) -> "Line":
        """Build an integer line from four coordinates."""
        return cls(Pt2D(x1, y1), Pt2D(x2, y2))

    # -- classification -------------------------------------------------

    @property
    def dx(self):
        return self.end.x - self.start.x

    @property
    def dy(self):
        return self.end.y - self.start.y

    @property
    def kind(self) -> LineKind:
        dx, dy = self.dx, self.dy
        if dx == 0 and dy == 0:
            return LineKind.DEGENERATE
        if dy == 0:
            return LineKind.HORIZONTAL
        if dx == 0:
            return LineKind.VERTICAL
        if dx == dy:
            return LineKind.DIAGONAL_POSITIVE
        if dx == -dy:
            return LineKind.DIAGONAL_NEGATIVE
        return LineKind.NON_45

    def is_degenerate(self) -> bool:
        return self.kind is LineKind.DEGENERATE

    def is_horizontal(self) -> bool:
        return self.kind is LineKind.HORIZONTAL

    def is_vertical(self) -> bool:
        return self.kind is LineKind.VERTICAL

    def is_diagonal(self) -> bool:
        """True for either 45-degree diagonal."""
        return self.kind in (LineKind.DIAGONAL_POSITIVE, LineKind.DIAGONAL_NEGATIVE)

    def is_45_compliant(self) -> bool:
        """True for horizontal, vertical and 45-degree diagonal lines."""
        return self.kind in _COMPLIANT

    # -- measurements ---------------------------------------------------

    @property
    def dist_x(self):
        return abs(self.dx)

    @property
    def dist_y(self):
        return abs(self.dy)

    @property
    def length(self) -> float:
        return math.hypot(self.dx, self.dy)

    @property
    def slope(self) -> float:
        """Slope dy/dx (+0.0 horizontal, +inf vertical, -inf degenerate)."""
        return self.start.slope_to(self.end)

    @property
    def intercept(self) -> float | None:
        """y value where the infinite line crosses x = 0.

        None for vertical and degenerate lines, which have no such value.
        """
        if self.dx == 0:
            return None
        return self.start.y - self.slope * self.start.x

    @property
    def angle(self) -> float:
        """Direction clockwise from "up", see geometry.line_angle.

        Raises:
            DegenerateLineError: If the line is degenerate
        """
        return geometry.line_angle(self.start, self.end)

    def midpoint(self) -> Pt2Df:
        return Pt2Df((self.start.x + self.end.x) / 2, (self.start.y + self.end.y) / 2)

    # -- transforms -----------------------------------------------------

    def shift(self, dx, dy) -> "Line":
        return Line(self.start.shift(dx, dy), self.end.shift(dx, dy))

    def reversed(self) -> "Line":
        return Line(self.end, self.start)

    def to_float(self) -> "Line":
        """Same line with float endpoints."""
        return Line(self.start.to_float(), self.end.to_float())

    # -- point relations ------------------------------------------------

    def has_vertex(self, point: Point) -> bool:
        """True if point equals either endpoint (int and float compare by value)."""
        return self.start.equals_value(point) or self.end.equals_value(point)

    def bounding_box_contains(self, point: Point) -> bool:
        return (
            min(self.start.x, self.end.x) <= point.x <= max(self.start.x, self.end.x)
            and min(self.start.y, self.end.y) <= point.y <= max(self.start.y, self.end.y)
        )

    def contains(self, point: Point) -> bool:
        """True if point lies on the closed segment (exact cross product test)."""
        return self.bounding_box_contains(point) and geometry.cross(self.start, self.end, point) == 0

    def contains_45(self, point: Point) -> bool:
        """Containment test specialised for compliant lines.

        Diagonals only need equal absolute x and y offsets from the start.
        Non-compliant lines fall back to contains().
        """
        if not self.bounding_box_contains(point):
            return False
        kind = self.kind
        if kind in (LineKind.HORIZONTAL, LineKind.VERTICAL, LineKind.DEGENERATE):
            return True
        if kind is LineKind.NON_45:
            return self.contains(point)
        return abs(point.x - self.start.x) == abs(point.y - self.start.y)

    # -- line relations -------------------------------------------------

    def is_parallel(self, other: "Line") -> bool:
        """True if both lines are non-degenerate with the same direction (or reversed)."""
        if self.is_degenerate() or other.is_degenerate():
            return False
        return self.dx * other.dy - self.dy * other.dx == 0

    def is_collinear_with(self, other: "Line") -> bool:
        """True if both lines lie on the same infinite line."""
        return (
            self.is_parallel(other)
            and geometry.cross(self.start, self.end, other.start) == 0
        )

    def overlap(self, other: "Line") -> tuple[Point, ...]:
        """Endpoints of either line that lie on the other, for collinear lines.

        Returns an empty tuple when the lines are not collinear.
        """
        if not self.is_collinear_with(other):
            return ()
        found: list[Point] = []
        for p in (self.start, self.end):
            if other.contains(p):
                found.append(p)
        for p in (other.start, other.end):
            if self.contains(p) and not any(q.equals_value(p) for q in found):
                found.append(p)
        return tuple(found)

    def intersection_point(self, other: "Line") -> Pt2Df | None:
        """Point where two segments cross, by solving the line equations.

        Works for any slopes but is only guaranteed exact for compliant
        lines. Parallel or degenerate lines never intersect here, even when
        they overlap.

        Returns:
            The crossing point, or None if the segments do not cross
        """
        if self.is_degenerate() or other.is_degenerate():
            return None
        den = self.dx * other.dy - self.dy * other.dx
        if den == 0:
            return None
        ox = other.start.x - self.start.x
        oy = other.start.y - self.start.y
        t_num = ox * other.dy - oy * other.dx
        u_num = ox * self.dy - oy * self.dx
        if den < 0:
            den, t_num, u_num = -den, -t_num, -u_num
        if not (0 <= t_num <= den and 0 <= u_num <= den):
            return None
        if self.is_vertical():
            x = float(self.start.x)
        else:
            x = (self.start.x * den + self.dx * t_num) / den
        if self.is_horizontal():
            y = float(self.start.y)
        else:
            y = (self.start.y * den + self.dy * t_num) / den
        return Pt2Df(x, y)

    def intersection_point_45(self, other: "Line") -> Pt2Df | None:
        """Exact crossing point of two 45-compliant segments.

        Uses a closed-form formula for each pairing of classifications:
        horizontal y = c, vertical x = c, positive diagonal y = x + k and
        negative diagonal y = -x + k.

        Returns:
            The crossing point, or None if either line is not compliant, the
            lines share a classification (parallel) or the segments miss
        """
        a, b = self.kind, other.kind
        if a not in _COMPLIANT or b not in _COMPLIANT or a is b:
            return None

        point = _compliant_crossing(self, other)
        if point is None:
            point = _compliant_crossing(other, self)
        if point is None:
            return None
        if self.contains_45(point) and other.contains_45(point):
            return point
        return None

    def intersects(self, other: "Line") -> bool:
        return self.intersection_point(other) is not None

    def intersects_45(self, other: "Line") -> bool:
        return self.intersection_point_45(other) is not None

    def intersects_ignore_shared_ends(self, other: "Line") -> bool:
        """Like intersects() but a crossing at a vertex of both lines does not count."""
        point = self.intersection_point(other)
        return point is not None and not (self.has_vertex(point) and other.has_vertex(point))

    def intersects_45_ignore_shared_ends(self, other: "Line") -> bool:
        point = self.intersection_point_45(other)
        return point is not None and not (self.has_vertex(point) and other.has_vertex(point))

    def intersects_45_ignore_ends(self, other: "Line") -> bool:
        """Like intersects_45() but touching at an endpoint of either line does not count."""
        point = self.intersection_point_45(other)
        return point is not None and not (self.has_vertex(point) or other.has_vertex(point))

    def to_dict(self) -> dict[str, Any]:
        return {"start": [self.start.x, self.start.y], "end": [self.end.x, self.end.y]}

    def __str__(self) -> str:
        return f"{self.start}->{self.end}"


def _compliant_crossing(first: Line, second: Line) -> Pt2Df | None:
    """Case table for two compliant lines of different kinds.

    Handles pairs where first is the horizontal or vertical line, or first is
    the positive diagonal and second the negative one. Returns None for the
    remaining orderings so the caller can retry with the arguments swapped.
    """
    a, b = first.kind, second.kind
    sx, sy = first.start.x, first.start.y
    ox, oy = second.start.x, second.start.y

    if a is LineKind.HORIZONTAL:
        y = sy
        if b is LineKind.VERTICAL:
            x = ox
        elif b is LineKind.DIAGONAL_POSITIVE:
            x = y - (oy - ox)
        else:
            x = (oy + ox) - y
        return Pt2Df(float(x), float(y))

    if a is LineKind.VERTICAL and b is not LineKind.HORIZONTAL:
        x = sx
        if b is LineKind.DIAGONAL_POSITIVE:
            y = x + (oy - ox)
        else:
            y = (oy + ox) - x
        return Pt2Df(float(x), float(y))

    if a is LineKind.DIAGONAL_POSITIVE and b is LineKind.DIAGONAL_NEGATIVE:
        k1 = sy - sx
        k2 = oy + ox
        return Pt2Df((k2 - k1) / 2, (k1 + k2) / 2)

    return None

"""Point types for the integer grid.

This module defines the value types every other part of gridgeom builds on:
- Pt2D: An integer grid point, the coordinate type of all shape vertices
- Pt2Df: A float point, produced by intersection calculations
- WindingDirection: Enum for polygon winding direction

Both point types are immutable and hashable. Float points compare with exact
float equality: intersections between horizontal, vertical and 45-degree
lines always land on whole or half-integer values, so no epsilon is needed.
"""

from dataclasses import dataclass
from enum import Enum, auto
from functools import total_ordering
from typing import Any, Union


class WindingDirection(Enum):
    """Polygon winding direction.

    Outlines of top-level shapes wind counter-clockwise, their holes wind
    clockwise, islands inside holes counter-clockwise again, and so on.
    A polygon with as many left as right turns (including one whose vertices
    are all collinear) is INDETERMINATE.
    """

    CLOCKWISE = auto()
    COUNTER_CLOCKWISE = auto()
    INDETERMINATE = auto()

    def opposite(self) -> "WindingDirection":
        """Return the reverse winding (INDETERMINATE stays INDETERMINATE)."""
        if self is WindingDirection.CLOCKWISE:
            return WindingDirection.COUNTER_CLOCKWISE
        if self is WindingDirection.COUNTER_CLOCKWISE:
            return WindingDirection.CLOCKWISE
        return WindingDirection.INDETERMINATE


class _PointOps:
    """Transforms shared by integer and float points."""

    __slots__ = ()

    x: Any
    y: Any

    def shift(self, dx, dy):
        """Return this point translated by (dx, dy)."""
        return type(self)(self.x + dx, self.y + dy)

    def sum(self, other: "Point"):
        """Return the componentwise sum of two points."""
        return type(self)(self.x + other.x, self.y + other.y)

    def reflect_x(self, center):
        """Mirror across the vertical line x = center."""
        return type(self)(center - (self.x - center), self.y)

    def reflect_y(self, center):
        """Mirror across the horizontal line y = center."""
        return type(self)(self.x, center - (self.y - center))

    def rotate90(self, cx, cy):
        """Rotate a quarter turn clockwise about (cx, cy)."""
        return type(self)(cx + (self.y - cy), cy - (self.x - cx))

    def slope_to(self, other: "Point") -> float:
        """Slope of the line from this point to another.

        Horizontal lines give +0.0 (never -0.0), vertical lines +inf and a
        coincident point -inf.
        """
        dx = other.x - self.x
        dy = other.y - self.y
        if dx == 0 and dy == 0:
            return float("-inf")
        if dy == 0:
            return 0.0
        if dx == 0:
            return float("inf")
        return dy / dx

    def equals_value(self, other: "Point") -> bool:
        """Compare coordinates regardless of integer or float representation."""
        return self.x == other.x and self.y == other.y

    def to_tuple(self) -> tuple:
        """Convert to simple (x, y) tuple."""
        return (self.x, self.y)

    def _sort_key(self) -> tuple:
        return (self.y, self.x)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, _PointOps):
            return NotImplemented
        return self._sort_key() < other._sort_key()


@total_ordering
@dataclass(frozen=True, slots=True)
class Pt2D(_PointOps):
    """An integer point on the grid.

    Points order by y first, then x.

    Attributes:
        x: X coordinate
        y: Y coordinate
    """

    x: int
    y: int

    def to_float(self) -> "Pt2Df":
        """Convert to a float point."""
        return Pt2Df(float(self.x), float(self.y))

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary.

        Returns:
            Dictionary with x and y fields
        """
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Pt2D":
        """Deserialize from dictionary.

        Args:
            data: Dictionary with x and y fields

        Returns:
            Pt2D instance
        """
        return cls(x=int(data["x"]), y=int(data["y"]))

    def __str__(self) -> str:
        return f"({self.x}, {self.y})"


@total_ordering
@dataclass(frozen=True, slots=True)
class Pt2Df(_PointOps):
    """A float point, used for intersection results and sub-grid positions.

    Attributes:
        x: X coordinate
        y: Y coordinate
    """

    x: float
    y: float

    def to_float(self) -> "Pt2Df":
        return self

    def is_integral(self) -> bool:
        """True when both coordinates are whole numbers."""
        return float(self.x).is_integer() and float(self.y).is_integer()

    def to_int(self) -> Pt2D:
        """Convert to an integer point.

        Raises:
            ValueError: If either coordinate is not a whole number
        """
        if not self.is_integral():
            raise ValueError(f"{self} is not on the integer grid")
        return Pt2D(int(self.x), int(self.y))

    def __str__(self) -> str:
        return f"({self.x:g}, {self.y:g})"


Point = Union[Pt2D, Pt2Df]

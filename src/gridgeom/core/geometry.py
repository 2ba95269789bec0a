"""Exact geometric predicates for the 45-degree grid.

This module provides the primitive calculations every other module builds on:
- Line angles measured clockwise from "up", exact for the eight grid directions
- Signed turn angles and turn directions (basis of winding and convexity)
- Orientation tests (collinearity, left/right side of a line)
- Signed area (shoelace formula) and point-in-polygon (ray casting)

Coordinates are y-up: a left turn is counter-clockwise. Orientation tests use
integer cross products, so they are exact for grid points. All functions are
pure and accept any object with ``x`` and ``y`` attributes.
"""

import math
from collections.abc import Sequence

from gridgeom.domain.point import Point, Pt2D, Pt2Df
from gridgeom.exceptions import DegenerateLineError

EIGHTH_TURN = math.pi / 4
QUARTER_TURN = math.pi / 2
HALF_TURN = math.pi
FULL_TURN = 2 * math.pi

LEFT = -1
STRAIGHT = 0
RIGHT = 1


def cross(o: Point, a: Point, b: Point) -> float:
    """Z component of (a - o) x (b - o).

    Positive when b lies to the left of the directed line o->a, negative when
    it lies to the right and zero when the three points are collinear.
    """
    return (a.x - o.x) * (b.y - o.y) - (a.y - o.y) * (b.x - o.x)


def direction_octant(p1: Point, p2: Point) -> int | None:
    """Grid direction of p1->p2 in eighth turns clockwise from up.

    Returns:
        0 (up) to 7 (up-left), or None for a degenerate or non-45 direction
    """
    dx = p2.x - p1.x
    dy = p2.y - p1.y
    if dx == 0:
        if dy > 0:
            return 0
        if dy < 0:
            return 4
        return None
    if dy == 0:
        return 2 if dx > 0 else 6
    if dx == dy:
        return 1 if dx > 0 else 5
    if dx == -dy:
        return 3 if dx > 0 else 7
    return None


def line_angle(p1: Point, p2: Point) -> float:
    """Direction of the line p1->p2 as an angle in [0, 2*pi).

    The angle is measured clockwise from "up" (positive y). Horizontal,
    vertical and 45-degree directions are returned as exact multiples of
    pi/4; anything else falls back to atan with a quadrant correction.

    Args:
        p1: Start point
        p2: End point

    Returns:
        Angle in radians

    Raises:
        DegenerateLineError: If p1 and p2 coincide

    Examples:
        >>> line_angle(Pt2D(0, 0), Pt2D(0, 5))
        0.0
        >>> line_angle(Pt2D(0, 0), Pt2D(3, 0)) == math.pi / 2
        True
    """
    dx = p2.x - p1.x
    dy = p2.y - p1.y
    if dx == 0 and dy == 0:
        raise DegenerateLineError((p1, p2))

    octant = direction_octant(p1, p2)
    if octant is not None:
        return octant * EIGHTH_TURN

    base = math.atan(abs(dx) / abs(dy))
    if dx > 0 and dy > 0:
        return base
    if dx > 0:
        return HALF_TURN - base
    if dy < 0:
        return HALF_TURN + base
    return FULL_TURN - base


def angle_turned(a: Point, b: Point, c: Point) -> float:
    """Signed angle turned when travelling a->b then b->c.

    Left (counter-clockwise) turns are positive, right turns negative.
    Continuing straight on returns 0.0 and doubling back returns -pi. The
    side of the turn comes from an exact cross product, so the result never
    flips sign through rounding; for 45-degree compliant segments the value
    is an exact multiple of pi/4.

    Raises:
        DegenerateLineError: If a equals b or b equals c
    """
    if (a.x == b.x and a.y == b.y) or (b.x == c.x and b.y == c.y):
        raise DegenerateLineError((a, b) if a.x == b.x and a.y == b.y else (b, c))

    turn = cross(a, b, c)
    if turn == 0:
        dot = (b.x - a.x) * (c.x - b.x) + (b.y - a.y) * (c.y - b.y)
        return 0.0 if dot > 0 else -HALF_TURN

    o1 = direction_octant(a, b)
    o2 = direction_octant(b, c)
    if o1 is not None and o2 is not None:
        if turn > 0:
            return ((o1 - o2) % 8) * EIGHTH_TURN
        return -((o2 - o1) % 8) * EIGHTH_TURN

    t1 = line_angle(a, b)
    t2 = line_angle(b, c)
    if turn > 0:
        return (t1 - t2) % FULL_TURN
    return -((t2 - t1) % FULL_TURN)


def turn_direction(a: Point, b: Point, c: Point) -> int:
    """Classify the turn a->b->c.

    Returns:
        LEFT (-1) for a counter-clockwise turn, RIGHT (1) for a clockwise
        turn, STRAIGHT (0) when the points are collinear
    """
    turn = cross(a, b, c)
    if turn > 0:
        return LEFT
    if turn < 0:
        return RIGHT
    return STRAIGHT


def angle(a: Point, b: Point, c: Point) -> float:
    """Unsigned angle ABC at vertex b, in [0, pi].

    Raises:
        DegenerateLineError: If a or c coincides with b
    """
    if (a.x == b.x and a.y == b.y) or (c.x == b.x and c.y == b.y):
        raise DegenerateLineError((a, b, c))
    ux, uy = a.x - b.x, a.y - b.y
    vx, vy = c.x - b.x, c.y - b.y
    return math.atan2(abs(ux * vy - uy * vx), ux * vx + uy * vy)


def collinear(a: Point, b: Point, c: Point) -> bool:
    """True if the three points lie on one line."""
    return cross(a, b, c) == 0


def on_relative_left_side(point: Point, start: Point, end: Point) -> bool:
    """True if point lies strictly left of the directed line start->end."""
    return cross(start, end, point) > 0


def on_relative_right_side(point: Point, start: Point, end: Point) -> bool:
    """True if point lies strictly right of the directed line start->end."""
    return cross(start, end, point) < 0


def point_is_on_line(point: Point, start: Point, end: Point) -> bool:
    """True if point lies on the closed segment start-end."""
    return (
        min(start.x, end.x) <= point.x <= max(start.x, end.x)
        and min(start.y, end.y) <= point.y <= max(start.y, end.y)
        and cross(start, end, point) == 0
    )


def signed_area(points: Sequence[Point]) -> float:
    """Calculate signed area of a polygon using the shoelace formula.

    The sign of the area indicates winding direction:
    - Positive area: counter-clockwise winding
    - Negative area: clockwise winding

    Args:
        points: Vertices of the polygon, without a closing duplicate

    Returns:
        Signed area in square units. Returns 0.0 for degenerate polygons.

    Examples:
        >>> square = [Pt2D(0, 0), Pt2D(1, 0), Pt2D(1, 1), Pt2D(0, 1)]
        >>> signed_area(square)
        1.0
        >>> signed_area(square[::-1])
        -1.0
    """
    n = len(points)
    if n < 3:
        return 0.0

    area = 0
    for i in range(n):
        j = (i + 1) % n
        area += points[i].x * points[j].y
        area -= points[j].x * points[i].y

    return area / 2.0


def point_in_polygon(point: Point, polygon: Sequence[Point]) -> bool:
    """Determine if a point is inside a polygon using ray casting algorithm.

    Casts a horizontal ray from the point to the right and counts intersections
    with polygon edges. Odd number of intersections = inside, even = outside.
    Points exactly on an edge may fall either way.

    Args:
        point: The point to test
        polygon: Vertices of the polygon boundary

    Returns:
        True if point is inside polygon, False otherwise
    """
    n = len(polygon)
    if n < 3:
        return False

    inside = False
    x, y = point.x, point.y
    j = n - 1

    for i in range(n):
        xi, yi = polygon[i].x, polygon[i].y
        xj, yj = polygon[j].x, polygon[j].y

        # Check if ray from point intersects edge (j, i)
        if ((yi > y) != (yj > y)) and (x < (xj - xi) * (y - yi) / (yj - yi) + xi):
            inside = not inside

        j = i

    return inside


def dist_squared(a: Point, b: Point) -> float:
    """Squared euclidean distance; exact for grid points."""
    return (b.x - a.x) ** 2 + (b.y - a.y) ** 2


def dist(a: Point, b: Point) -> float:
    """Euclidean distance between two points."""
    return math.hypot(b.x - a.x, b.y - a.y)


def mid_point_int(a: Pt2D, b: Pt2D) -> Pt2D:
    """Midpoint of two grid points, rounded down onto the grid."""
    return Pt2D((a.x + b.x) // 2, (a.y + b.y) // 2)


def circle_point(center: Point, radius: float, theta: float) -> Pt2Df:
    """Point at distance radius from center in direction theta.

    theta is measured clockwise from "up", matching line_angle.
    """
    return Pt2Df(center.x + radius * math.sin(theta), center.y + radius * math.cos(theta))

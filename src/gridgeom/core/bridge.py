"""Divide-and-conquer triangulation of shapes with holes.

A shape with sub-shapes is triangulated by cutting each direct hole open
into the outline:

1. Find an outline edge vo1->vo2 and a hole edge vs1->vs2 such that the
   bridge triangles (vo1, vo2, vs1) and (vo1, vs1, vs2) both wind
   counter-clockwise, none of the segments vo2-vs1, vs1-vo1 and vs2-vo1
   crosses the outline or any hole, and no vertex lies inside either triangle.
2. Emit the two bridge triangles and splice the hole's vertices into the
   outline between vo1 and vo2, giving one simple polygon.
3. After every hole is merged, ear clip the merged polygon.
4. Recurse into each hole's own sub-shapes (islands) independently.

A hole that already shares a vertex with the outline (or with a hole merged
before it) needs no bridge: it is spliced in at the shared vertex, which
then appears twice in the merged polygon.

For an outline of n vertices with holes of m1..mk vertices, k of them
bridged, the result has n + m1 + ... + mk + 2k - 2 triangles.
"""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from gridgeom.config import TriangulationConfig
from gridgeom.core.geometry import angle_turned
from gridgeom.core.triangulation import EarClipper
from gridgeom.domain.line import Line
from gridgeom.domain.point import Pt2D, WindingDirection
from gridgeom.domain.polygon import Polygon
from gridgeom.domain.triangle import Triangle
from gridgeom.exceptions import BridgeNotFoundError

if TYPE_CHECKING:
    from gridgeom.domain.shape import Shape45

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Bridge:
    """A pair of edges joining an outline to a hole.

    Attributes:
        outline_index: Index of vo1 in the (merged) outline
        hole_index: Index of vs1 in the hole
        vo1: Start of the outline edge
        vo2: End of the outline edge
        vs1: Start of the hole edge
        vs2: End of the hole edge
    """

    outline_index: int
    hole_index: int
    vo1: Pt2D
    vo2: Pt2D
    vs1: Pt2D
    vs2: Pt2D

    @property
    def triangles(self) -> tuple[Triangle, Triangle]:
        return (
            Triangle(self.vo1, self.vo2, self.vs1),
            Triangle(self.vo1, self.vs1, self.vs2),
        )

    @property
    def segments(self) -> tuple[Line, Line, Line]:
        return (
            Line(self.vo2, self.vs1),
            Line(self.vs1, self.vo1),
            Line(self.vs2, self.vo1),
        )


def triangulate_shape(shape: "Shape45", config: TriangulationConfig | None = None) -> list[Triangle]:
    """Triangulate a shape and all of its nested sub-shapes.

    Shapes without sub-shapes triangulate their outline directly; anything
    with holes is bridged regardless of convexity.

    Raises:
        TriangulationError: If an outline cannot be ear clipped or a hole
            cannot be bridged
    """
    if not shape.sub_shapes:
        return shape.outline.triangulate(config)
    return HoleBridger(config).triangulate(shape)


class HoleBridger:
    """Merges holes into their outline and triangulates the result."""

    def __init__(self, config: TriangulationConfig | None = None) -> None:
        self.config = config or TriangulationConfig()

    def triangulate(self, shape: "Shape45") -> list[Triangle]:
        """Triangulate a shape with sub-shapes.

        Raises:
            BridgeNotFoundError: If a hole cannot be joined to the outline;
                triangles made so far are attached to the error
            EarClippingError: If the merged polygon cannot be ear clipped
        """
        holes = [sub.outline for sub in shape.sub_shapes]
        merged = shape.outline.vertices
        triangles: list[Triangle] = []

        for index, hole in enumerate(holes):
            pinch = find_pinch(merged, hole.vertices)
            if pinch is not None:
                logger.debug(
                    "Sub-shape %d touches the outline at %s", index, merged[pinch[0]]
                )
                merged = splice(merged, hole.vertices, *pinch)
                continue

            others = holes[index + 1:]
            bridge = self.find_bridge(Polygon(merged), hole, others)
            if bridge is None:
                logger.debug("No bridge for sub-shape %d of %d", index, len(holes))
                raise BridgeNotFoundError(index, triangles)
            logger.debug(
                "Bridge for sub-shape %d: %s->%s to %s->%s",
                index,
                bridge.vo1,
                bridge.vo2,
                bridge.vs1,
                bridge.vs2,
            )
            triangles.extend(bridge.triangles)
            merged = splice(merged, hole.vertices, bridge.outline_index, bridge.hole_index)

        triangles.extend(EarClipper(Polygon(merged), self.config).run())

        for sub in shape.sub_shapes:
            for island in sub.sub_shapes:
                triangles.extend(triangulate_shape(island, self.config))

        logger.debug(
            "Shape with %d sub-shapes: %d triangles", len(holes), len(triangles)
        )
        return triangles

    def find_bridge(
        self, outline: Polygon, hole: Polygon, others: list[Polygon]
    ) -> Bridge | None:
        """Search outline and hole edges for the first valid bridge.

        Args:
            outline: Current outline, possibly with earlier holes merged in
            hole: Hole to merge
            others: Holes not merged yet, which the bridge must avoid

        Returns:
            The first valid Bridge, or None if there is none
        """
        obstacles = [outline, hole, *others]
        points = [v for poly in obstacles for v in poly.vertices]
        for i, outline_edge in enumerate(outline.edges):
            for j, hole_edge in enumerate(hole.edges):
                bridge = Bridge(
                    i,
                    j,
                    outline_edge.start,
                    outline_edge.end,
                    hole_edge.start,
                    hole_edge.end,
                )
                if self._is_valid(bridge, obstacles, points):
                    return bridge
        return None

    def _is_valid(self, bridge: Bridge, obstacles: list[Polygon], points: list[Pt2D]) -> bool:
        first, second = bridge.triangles
        if first.winding_direction is not WindingDirection.COUNTER_CLOCKWISE:
            return False
        if second.winding_direction is not WindingDirection.COUNTER_CLOCKWISE:
            return False
        for segment in bridge.segments:
            for poly in obstacles:
                if poly.intersects_ignore_shared_vertices_include_parallel(segment):
                    return False
        corners = {bridge.vo1, bridge.vo2, bridge.vs1, bridge.vs2}
        for point in points:
            if point in corners:
                continue
            if first.contains_exclude_edges(point) or second.contains_exclude_edges(point):
                return False
        return True


def find_pinch(
    outline: tuple[Pt2D, ...], hole: tuple[Pt2D, ...]
) -> tuple[int, int] | None:
    """Find a vertex the hole shares with the outline.

    The outline may already contain the point more than once, so only an
    occurrence whose interior angle holds both hole edges at that point
    counts.

    Returns:
        (outline index, hole index) of the shared vertex, or None
    """
    n = len(outline)
    m = len(hole)
    for i, point in enumerate(outline):
        prev, nxt = outline[i - 1], outline[(i + 1) % n]
        limit = angle_turned(prev, point, nxt)
        for j, corner in enumerate(hole):
            if corner != point:
                continue
            neighbours = (hole[(j + 1) % m], hole[j - 1])
            if all(angle_turned(prev, point, q) > limit for q in neighbours):
                return i, j
    return None


def splice(
    outline: tuple[Pt2D, ...], hole: tuple[Pt2D, ...], outline_index: int, hole_index: int
) -> tuple[Pt2D, ...]:
    """Insert a hole's vertices into an outline after outline_index.

    The hole is walked from the vertex after hole_index all the way round
    to hole_index itself. Along a bridge (vo1 at outline_index, vs1 at
    hole_index) the result jumps from vo1 to vs2, follows the hole round to
    vs1, then jumps to vo2; the quadrilateral covered by the bridge
    triangles is left out. At a shared vertex the two indices name the same
    point, which then appears once before and once after the hole.
    """
    n = len(hole)
    around_hole = tuple(hole[(hole_index + 1 + k) % n] for k in range(n))
    return outline[: outline_index + 1] + around_hole + outline[outline_index + 1:]

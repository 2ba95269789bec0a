"""Polygon triangulation.

This module turns simple polygons into triangles:
- triangulate: dispatch to a convex fan or to ear clipping
- triangulate_convex: fan from vertex 0, for convex polygons
- EarClipper: ear clipping for any simple counter-clockwise polygon

An n-vertex polygon always yields n - 2 triangles. Ear clipping carries a
retry counter so malformed input ends in an EarClippingError instead of
looping forever.
"""

import logging

from gridgeom.config import TriangulationConfig
from gridgeom.core.geometry import angle_turned
from gridgeom.domain.line import Line
from gridgeom.domain.point import WindingDirection
from gridgeom.domain.polygon import Polygon
from gridgeom.domain.triangle import Triangle
from gridgeom.exceptions import EarClippingError

logger = logging.getLogger(__name__)


def triangulate(polygon: Polygon, config: TriangulationConfig | None = None) -> list[Triangle]:
    """Triangulate a polygon.

    Convex polygons (no straight vertices, one turn direction) use a fan from
    vertex 0. Everything else goes through ear clipping, which requires a
    counter-clockwise polygon.

    Args:
        polygon: Polygon to triangulate
        config: Triangulation settings (defaults if None)

    Returns:
        num_vertices - 2 triangles; empty for fewer than three vertices

    Raises:
        EarClippingError: If the polygon is not counter-clockwise or ear
            clipping runs out of attempts
    """
    config = config or TriangulationConfig()
    if polygon.num_vertices < 3:
        return []

    if config.prefer_convex_fan and polygon.is_convex:
        return triangulate_convex(polygon)

    if polygon.winding_direction is not WindingDirection.COUNTER_CLOCKWISE:
        raise EarClippingError(
            f"ear clipping needs counter-clockwise winding, got {polygon.winding_direction.name}"
        )
    return EarClipper(polygon, config).run()


def triangulate_convex(polygon: Polygon) -> list[Triangle]:
    """Fan triangulation from vertex 0.

    Only correct for convex polygons without zero-degree vertices.
    """
    v = polygon.vertices
    triangles = [Triangle(v[0], v[i + 1], v[i + 2]) for i in range(len(v) - 2)]
    logger.debug("Convex fan: %d triangles", len(triangles))
    return triangles


class EarClipper:
    """Ear clipping triangulator for one polygon.

    Keeps a used flag per vertex and a window (a, b, c) of consecutive unused
    vertices. The window triangle is an ear, and b is clipped, when:

    1. no triangle edge crosses a polygon edge (edges that are themselves
       polygon edges are skipped, shared vertices are ignored, collinear
       overlaps count),
    2. the triangle winds counter-clockwise,
    3. at c, the turn towards a is sharper to the left than the turn towards
       the next unused vertex d, so the diagonal c->a stays inside the polygon,
    4. no other polygon vertex lies strictly inside the triangle.

    A rejected window slides forward by one (a becomes b).
    """

    def __init__(self, polygon: Polygon, config: TriangulationConfig | None = None) -> None:
        self.polygon = polygon
        self.config = config or TriangulationConfig()
        self._vertices = polygon.vertices
        self._used = [False] * len(self._vertices)
        self._remaining = len(self._vertices)

    def run(self) -> list[Triangle]:
        """Clip ears until one triangle is left.

        Raises:
            EarClippingError: If more than ear_clip_attempt_factor times the
                remaining vertex count windows fail in a row
        """
        triangles: list[Triangle] = []
        v = self._vertices
        a = 0
        attempts = 0

        while self._remaining >= 3:
            b = self._next_index(a)
            c = self._next_index(b)
            triangle = Triangle(v[a], v[b], v[c])

            if self._is_ear(a, b, c, triangle):
                triangles.append(triangle)
                self._used[b] = True
                self._remaining -= 1
                attempts = 0
                logger.debug(
                    "Ear clipped at %d (%d, %d): %d remaining", b, a, c, self._remaining
                )
                continue

            a = b
            attempts += 1
            if attempts > self.config.ear_clip_attempt_factor * self._remaining:
                logger.debug(
                    "Ear clipping gave up after %d attempts with %d vertices remaining",
                    attempts,
                    self._remaining,
                )
                raise EarClippingError(
                    f"no ear found after {attempts} attempts "
                    f"({self._remaining} vertices remaining)",
                    triangles,
                )

        return triangles

    def _next_index(self, i: int) -> int:
        n = len(self._used)
        i = (i + 1) % n
        while self._used[i]:
            i = (i + 1) % n
        return i

    def _is_ear(self, a: int, b: int, c: int, triangle: Triangle) -> bool:
        return (
            not self._triangle_intersects(a, b, c)
            and triangle.winding_direction is WindingDirection.COUNTER_CLOCKWISE
            and self._angle_is_inside(a, b, c)
            and not self._encloses_vertex(a, b, c, triangle)
        )

    def _triangle_intersects(self, a: int, b: int, c: int) -> bool:
        return (
            self._edge_intersects(a, b)
            or self._edge_intersects(b, c)
            or self._edge_intersects(c, a)
        )

    def _edge_intersects(self, i1: int, i2: int) -> bool:
        if self._is_polygon_edge(i1, i2):
            return False
        line = Line(self._vertices[i1], self._vertices[i2])
        return self.polygon.intersects_ignore_shared_vertices_include_parallel(line)

    def _is_polygon_edge(self, i1: int, i2: int) -> bool:
        n = len(self._vertices)
        return i2 == i1 + 1 or (i1 == n - 1 and i2 == 0)

    def _angle_is_inside(self, a: int, b: int, c: int) -> bool:
        if self._remaining < 4:
            return True
        d = self._next_index(c)
        v = self._vertices
        if v[a] == v[c] or v[d] == v[c]:
            return False
        return angle_turned(v[b], v[c], v[a]) > angle_turned(v[b], v[c], v[d])

    def _encloses_vertex(self, a: int, b: int, c: int, triangle: Triangle) -> bool:
        corners = {self._vertices[a], self._vertices[b], self._vertices[c]}
        for i, vertex in enumerate(self._vertices):
            if self._used[i] or vertex in corners:
                continue
            if triangle.contains_exclude_edges(vertex):
                return True
        return False

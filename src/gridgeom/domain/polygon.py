"""Immutable polygons on the integer grid.

A Polygon is an ordered, cyclically indexed sequence of grid points with no
closing duplicate. It never changes after construction: every transform
returns a new Polygon, and derived values (edges, winding, convexity) are
computed once on first access.

Winding and convexity come from counting left and right turns around the
vertex sequence rather than summing angles, so polygons with collinear
vertices are classified correctly.
"""

from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass
from functools import cached_property
from typing import TYPE_CHECKING, Any, Union

from gridgeom.core import geometry
from gridgeom.domain.box import Box2D
from gridgeom.domain.line import Line
from gridgeom.domain.point import Point, Pt2D, Pt2Df, WindingDirection
from gridgeom.exceptions import VertexIndexError

if TYPE_CHECKING:
    from gridgeom.config.settings import TriangulationConfig
    from gridgeom.domain.triangle import Triangle


@dataclass(frozen=True)
class Polygon:
    """A closed polygon.

    Attributes:
        vertices: Vertex sequence; the last vertex connects back to the first
    """

    vertices: tuple[Pt2D, ...]

    def __post_init__(self) -> None:
        if not isinstance(self.vertices, tuple):
            object.__setattr__(self, "vertices", tuple(self.vertices))

    @classmethod
    def from_coords(cls, coords: Iterable[Sequence[int]]) -> "Polygon":
        """Build a polygon from (x, y) pairs.

        Examples:
            >>> Polygon.from_coords([(0, 0), (2, 0), (2, 2)]).num_vertices
            3
        """
        return cls(tuple(Pt2D(int(x), int(y)) for x, y in coords))

    # -- vertices and edges ---------------------------------------------

    @property
    def num_vertices(self) -> int:
        return len(self.vertices)

    def __len__(self) -> int:
        return len(self.vertices)

    def __iter__(self) -> Iterator[Pt2D]:
        return iter(self.vertices)

    def vertex(self, index: int) -> Pt2D:
        """Vertex at a direct index.

        Raises:
            VertexIndexError: If index is outside [0, num_vertices)
        """
        if not 0 <= index < len(self.vertices):
            raise VertexIndexError(index, len(self.vertices))
        return self.vertices[index]

    def vertex_wrapped(self, index: int) -> Pt2D:
        """Vertex at index modulo the vertex count (negative indices allowed)."""
        return self.vertices[index % len(self.vertices)]

    def has_vertex(self, point: Point) -> bool:
        return any(v.equals_value(point) for v in self.vertices)

    @cached_property
    def edges(self) -> tuple[Line, ...]:
        """Edges in vertex order; edge i runs from vertex i to vertex i + 1."""
        n = len(self.vertices)
        if n < 2:
            return ()
        return tuple(Line(self.vertices[i], self.vertices[(i + 1) % n]) for i in range(n))

    def edge(self, index: int) -> Line:
        """Edge starting at vertex index.

        Raises:
            VertexIndexError: If index is out of range
        """
        if not 0 <= index < len(self.edges):
            raise VertexIndexError(index, len(self.edges))
        return self.edges[index]

    # -- turns, winding, convexity --------------------------------------

    @cached_property
    def _turn_counts(self) -> tuple[int, int, int]:
        lefts = rights = straights = 0
        n = len(self.vertices)
        if n < 3:
            return (0, 0, n)
        for i in range(n):
            turn = geometry.turn_direction(
                self.vertices[i - 1], self.vertices[i], self.vertices[(i + 1) % n]
            )
            if turn == geometry.LEFT:
                lefts += 1
            elif turn == geometry.RIGHT:
                rights += 1
            else:
                straights += 1
        return (lefts, rights, straights)

    @property
    def num_left_turns(self) -> int:
        return self._turn_counts[0]

    @property
    def num_right_turns(self) -> int:
        return self._turn_counts[1]

    @property
    def num_straight_turns(self) -> int:
        return self._turn_counts[2]

    @cached_property
    def winding_direction(self) -> WindingDirection:
        """CCW if left turns outnumber right turns, CW if the reverse, else INDETERMINATE."""
        lefts, rights, _ = self._turn_counts
        if lefts > rights:
            return WindingDirection.COUNTER_CLOCKWISE
        if rights > lefts:
            return WindingDirection.CLOCKWISE
        return WindingDirection.INDETERMINATE

    @cached_property
    def is_convex(self) -> bool:
        """True if every turn goes the same way.

        Any straight (collinear) vertex makes the polygon non-convex: a fan
        triangulated across it would contain a zero-area triangle.
        """
        lefts, rights, straights = self._turn_counts
        if len(self.vertices) < 3 or straights:
            return False
        return lefts == 0 or rights == 0

    def turn_at_vertex(self, index: int) -> float:
        """Signed turn angle at a vertex (positive for left turns)."""
        return geometry.angle_turned(
            self.vertex_wrapped(index - 1), self.vertex(index), self.vertex_wrapped(index + 1)
        )

    def angle_at_vertex(self, index: int) -> float:
        """Unsigned angle between the two edges meeting at a vertex, in [0, pi]."""
        return geometry.angle(
            self.vertex_wrapped(index - 1), self.vertex(index), self.vertex_wrapped(index + 1)
        )

    def is_45_compliant(self) -> bool:
        """True if every edge is horizontal, vertical or a 45-degree diagonal."""
        return bool(self.edges) and all(e.is_45_compliant() for e in self.edges)

    # -- diagnostics ----------------------------------------------------

    def num_duplicate_vertices(self) -> int:
        """Number of vertices that repeat an earlier vertex."""
        return len(self.vertices) - len(set(self.vertices))

    def self_intersection_points(self) -> set[Pt2Df]:
        """Points where two non-adjacent edges cross or touch."""
        return self._self_intersections(exact45=False)

    def self_intersection_points_45(self) -> set[Pt2Df]:
        """Like self_intersection_points() using the exact 45-degree formulas."""
        return self._self_intersections(exact45=True)

    @cached_property
    def num_self_intersections(self) -> int:
        if self.is_45_compliant():
            return len(self.self_intersection_points_45())
        return len(self.self_intersection_points())

    def _self_intersections(self, exact45: bool) -> set[Pt2Df]:
        edges = self.edges
        n = len(edges)
        found: set[Pt2Df] = set()
        for i in range(n):
            for j in range(i + 2, n):
                if i == 0 and j == n - 1:
                    continue
                found.update(_edge_intersections(edges[i], edges[j], exact45, True))
        return found

    def is_valid(self) -> bool:
        """At least three distinct vertices, no self-intersection and a definite winding."""
        return (
            len(self.vertices) >= 3
            and self.num_duplicate_vertices() == 0
            and self.num_self_intersections == 0
            and self.winding_direction is not WindingDirection.INDETERMINATE
        )

    # -- intersections with other lines and polygons --------------------

    def intersection_points(self, other: Union[Line, "Polygon"]) -> set[Pt2Df]:
        """Points where this polygon's edges cross the other's (general formula)."""
        return self._intersections(other, exact45=False, include_parallel=False, ignore_shared=False)

    def intersection_points_include_parallel(self, other: Union[Line, "Polygon"]) -> set[Pt2Df]:
        """As intersection_points(), also reporting the ends of collinear overlaps."""
        return self._intersections(other, exact45=False, include_parallel=True, ignore_shared=False)

    def intersection_points_ignore_shared_vertices(self, other: Union[Line, "Polygon"]) -> set[Pt2Df]:
        return self._intersections(other, exact45=False, include_parallel=False, ignore_shared=True)

    def intersects(self, other: Union[Line, "Polygon"]) -> bool:
        return bool(self.intersection_points(other))

    def intersects_ignore_shared_vertices(self, other: Union[Line, "Polygon"]) -> bool:
        return bool(self.intersection_points_ignore_shared_vertices(other))

    def intersects_ignore_shared_vertices_include_parallel(
        self, other: Union[Line, "Polygon"]
    ) -> bool:
        return bool(
            self._intersections(other, exact45=False, include_parallel=True, ignore_shared=True)
        )

    def intersection_points_45(self, other: Union[Line, "Polygon"]) -> set[Pt2Df]:
        """Exact crossing points against another compliant line or polygon.

        Non-compliant edge pairs contribute nothing.
        """
        return self._intersections(other, exact45=True, include_parallel=False, ignore_shared=False)

    def intersection_points_45_include_parallel(self, other: Union[Line, "Polygon"]) -> set[Pt2Df]:
        return self._intersections(other, exact45=True, include_parallel=True, ignore_shared=False)

    def intersection_points_45_ignore_shared_vertices(
        self, other: Union[Line, "Polygon"]
    ) -> set[Pt2Df]:
        """Exact crossing points, dropping corners that are vertices of both inputs."""
        return self._intersections(other, exact45=True, include_parallel=False, ignore_shared=True)

    def intersects_45(self, other: Union[Line, "Polygon"]) -> bool:
        return bool(self.intersection_points_45(other))

    def intersects_45_ignore_shared_vertices(self, other: Union[Line, "Polygon"]) -> bool:
        return bool(self.intersection_points_45_ignore_shared_vertices(other))

    def _intersections(
        self,
        other: Union[Line, "Polygon"],
        exact45: bool,
        include_parallel: bool,
        ignore_shared: bool,
    ) -> set[Pt2Df]:
        other_edges = (other,) if isinstance(other, Line) else other.edges
        found: set[Pt2Df] = set()
        for mine in self.edges:
            for theirs in other_edges:
                found.update(_edge_intersections(mine, theirs, exact45, include_parallel))
        if ignore_shared:
            found = {p for p in found if not (self.has_vertex(p) and other.has_vertex(p))}
        return found

    # -- measurements ---------------------------------------------------

    def signed_area(self) -> float:
        """Shoelace area: positive for counter-clockwise vertex order."""
        return geometry.signed_area(self.vertices)

    def area(self) -> float:
        return abs(self.signed_area())

    @cached_property
    def bounding_box(self) -> Box2D:
        return Box2D.around(self.vertices)

    @property
    def center(self) -> Pt2D:
        return self.bounding_box.center

    def contains(self, point: Point) -> bool:
        """Even-odd containment test (points on edges may fall either way)."""
        return geometry.point_in_polygon(point, self.vertices)

    # -- transforms -----------------------------------------------------

    def shift(self, dx: int, dy: int) -> "Polygon":
        return Polygon(tuple(v.shift(dx, dy) for v in self.vertices))

    def reverse_winding(self) -> "Polygon":
        """Same vertices in reverse order."""
        return Polygon(self.vertices[::-1])

    def reflect_x(self, center: int) -> "Polygon":
        """Mirror across x = center (this reverses the winding)."""
        return Polygon(tuple(v.reflect_x(center) for v in self.vertices))

    def reflect_y(self, center: int) -> "Polygon":
        """Mirror across y = center (this reverses the winding)."""
        return Polygon(tuple(v.reflect_y(center) for v in self.vertices))

    def rotate90(self, cx: int, cy: int) -> "Polygon":
        """Quarter turn clockwise about (cx, cy)."""
        return Polygon(tuple(v.rotate90(cx, cy) for v in self.vertices))

    def rotate_vertex_order(self, steps: int = 1) -> "Polygon":
        """Same polygon starting at vertex ``steps`` instead of vertex 0."""
        if not self.vertices:
            return self
        k = steps % len(self.vertices)
        return Polygon(self.vertices[k:] + self.vertices[:k])

    def with_vertex(self, index: int, point: Pt2D) -> "Polygon":
        """Copy with the vertex at index replaced."""
        self.vertex(index)
        return Polygon(self.vertices[:index] + (point,) + self.vertices[index + 1:])

    def without_vertex(self, index: int) -> "Polygon":
        """Copy with the vertex at index removed."""
        self.vertex(index)
        return Polygon(self.vertices[:index] + self.vertices[index + 1:])

    def with_vertex_after(self, index: int, point: Pt2D) -> "Polygon":
        """Copy with point inserted after the vertex at index."""
        self.vertex(index)
        return Polygon(self.vertices[:index + 1] + (point,) + self.vertices[index + 1:])

    # -- triangulation --------------------------------------------------

    def triangulate(self, config: "TriangulationConfig | None" = None) -> list["Triangle"]:
        """Triangulate this polygon: convex fan if convex, otherwise ear clipping.

        Raises:
            TriangulationError: If ear clipping cannot finish
        """
        from gridgeom.core.triangulation import triangulate

        return triangulate(self, config)

    # -- serialization --------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary.

        Returns:
            Dictionary with a list of [x, y] vertex pairs
        """
        return {"vertices": [[v.x, v.y] for v in self.vertices]}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Polygon":
        """Deserialize from dictionary.

        Args:
            data: Dictionary with a "vertices" list of [x, y] pairs

        Returns:
            Polygon instance
        """
        return cls.from_coords(data["vertices"])

    def __str__(self) -> str:
        return "[" + ", ".join(str(v) for v in self.vertices) + "]"


def _edge_intersections(
    first: Line, second: Line, exact45: bool, include_parallel: bool
) -> tuple[Pt2Df, ...]:
    """Intersection points of two edges as float points."""
    if include_parallel and first.is_collinear_with(second):
        return tuple(p.to_float() for p in first.overlap(second))
    point = first.intersection_point_45(second) if exact45 else first.intersection_point(second)
    return () if point is None else (point,)

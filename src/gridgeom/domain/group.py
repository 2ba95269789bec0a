"""Groups of independent shapes on one plane.

A ShapeGroup holds top-level Shape45 instances that share a coordinate space.
Vertices and sub-shapes are addressed with the same global depth-first
indices as in Shape45, continued from one shape to the next. Like Shape45,
the group is immutable and every edit returns a new group.
"""

import logging
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass
from functools import cached_property
from typing import TYPE_CHECKING, Any

from gridgeom.domain.box import Box2D
from gridgeom.domain.point import Point, Pt2D, Pt2Df
from gridgeom.domain.polygon import Polygon
from gridgeom.domain.shape import Shape45
from gridgeom.domain.triangle import Triangle
from gridgeom.exceptions import (
    SubShapeIndexError,
    TriangleIndexError,
    TriangulationError,
    VertexIndexError,
)

if TYPE_CHECKING:
    from gridgeom.core.boolean import BooleanOperation

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ShapeGroup:
    """An ordered collection of top-level shapes.

    Attributes:
        shapes: Top-level shapes in index order
    """

    shapes: tuple[Shape45, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.shapes, tuple):
            object.__setattr__(self, "shapes", tuple(self.shapes))

    @classmethod
    def of(cls, *shapes: Shape45) -> "ShapeGroup":
        return cls(tuple(shapes))

    def __iter__(self) -> Iterator[Shape45]:
        return iter(self.shapes)

    def __len__(self) -> int:
        return len(self.shapes)

    # -- shapes ---------------------------------------------------------

    @property
    def num_shapes(self) -> int:
        return len(self.shapes)

    def shape(self, index: int) -> Shape45:
        """Top-level shape at index.

        Raises:
            SubShapeIndexError: If index is out of range
        """
        if not 0 <= index < len(self.shapes):
            raise SubShapeIndexError(index, len(self.shapes))
        return self.shapes[index]

    @property
    def num_shapes_recursive(self) -> int:
        return sum(s.num_shapes_recursive for s in self.shapes)

    def shape_recursive(self, index: int) -> Shape45:
        """Shape at a global shape index across the group.

        Raises:
            SubShapeIndexError: If index is out of range
        """
        local = index
        for s in self.shapes:
            if 0 <= local < s.num_shapes_recursive:
                return s.sub_shape_recursive(local)
            local -= s.num_shapes_recursive
        raise SubShapeIndexError(index, self.num_shapes_recursive)

    @cached_property
    def nested_depth(self) -> int:
        return max((s.nested_depth for s in self.shapes), default=0)

    # -- vertices -------------------------------------------------------

    @cached_property
    def num_vertices(self) -> int:
        """Vertices of every shape, including all nested sub-shapes."""
        return sum(s.total_num_vertices for s in self.shapes)

    def vertices(self) -> Iterator[Pt2D]:
        for s in self.shapes:
            yield from s.vertices()

    def _find_vertex(self, index: int) -> tuple[int, int] | None:
        """(shape position, index within that shape) for a global vertex index."""
        local = index
        for i, s in enumerate(self.shapes):
            if 0 <= local < s.total_num_vertices:
                return i, local
            local -= s.total_num_vertices
        return None

    def vertex(self, index: int) -> Pt2D:
        """Vertex at a global index.

        Raises:
            VertexIndexError: If index is out of range
        """
        found = self._find_vertex(index)
        if found is None:
            raise VertexIndexError(index, self.num_vertices)
        i, local = found
        return self.shapes[i].vertex(local)

    def shape_for_vertex_index(self, index: int) -> Shape45:
        """Shape (top-level or nested) whose outline holds the vertex at index.

        Raises:
            VertexIndexError: If index is out of range
        """
        return self.shape_recursive(self.sub_shape_index_for_vertex_index(index))

    def sub_shape_index_for_vertex_index(self, index: int) -> int:
        """Global shape index of the shape holding the vertex at index.

        Raises:
            VertexIndexError: If index is out of range
        """
        found = self._find_vertex(index)
        if found is None:
            raise VertexIndexError(index, self.num_vertices)
        i, local = found
        before = sum(s.num_shapes_recursive for s in self.shapes[:i])
        return before + self.shapes[i].sub_shape_index_for_vertex_index(local)

    # -- triangles ------------------------------------------------------

    @cached_property
    def _triangulation(self) -> tuple[tuple[Triangle, ...], tuple[tuple[int, TriangulationError], ...]]:
        triangles: list[Triangle] = []
        failures: list[tuple[int, TriangulationError]] = []
        for i, s in enumerate(self.shapes):
            try:
                triangles.extend(s.triangles())
            except TriangulationError as e:
                logger.warning("Triangulation failed for shape %d: %s", i, e)
                triangles.extend(e.triangles)
                failures.append((i, e))
        return tuple(triangles), tuple(failures)

    def triangles(self) -> list[Triangle]:
        """Triangles of every shape that could be triangulated.

        A shape whose triangulation fails contributes the triangles made
        before the failure; see triangulation_failures().
        """
        return list(self._triangulation[0])

    def triangulation_failures(self) -> list[tuple[int, TriangulationError]]:
        """(shape position, error) for every shape whose triangulation failed."""
        return list(self._triangulation[1])

    @property
    def num_triangles(self) -> int:
        return len(self._triangulation[0])

    def triangle(self, index: int) -> Triangle:
        """Triangle at index.

        Raises:
            TriangleIndexError: If index is out of range
        """
        triangles = self._triangulation[0]
        if not 0 <= index < len(triangles):
            raise TriangleIndexError(index, len(triangles))
        return triangles[index]

    # -- geometry -------------------------------------------------------

    def is_valid(self) -> bool:
        """Every shape is valid and no two top-level outlines cross."""
        if not all(s.is_valid() for s in self.shapes):
            return False
        for i, first in enumerate(self.shapes):
            for second in self.shapes[i + 1:]:
                if first.outline.intersects_ignore_shared_vertices(second.outline):
                    return False
        return True

    @cached_property
    def bounding_box(self) -> Box2D:
        """Box around every vertex.

        Raises:
            ValueError: If the group has no vertices
        """
        return Box2D.around(self.vertices())

    @property
    def center(self) -> Pt2D:
        return self.bounding_box.center

    def contains(self, point: Point) -> bool:
        """True if any triangle contains the point, edges included."""
        return any(t.contains(point) for t in self._triangulation[0])

    def contains_exclude_edges(self, point: Point) -> bool:
        """Like contains() but points on any outline edge are outside."""
        if any(edge.contains(point) for p in self.polygons() for edge in p.edges):
            return False
        return self.contains(point)

    def polygons(self) -> list[Polygon]:
        return [p for s in self.shapes for p in s.polygons()]

    def intersection_points_45(self, other: "ShapeGroup") -> set[Pt2Df]:
        """Exact crossing points between top-level outlines of the two groups."""
        found: set[Pt2Df] = set()
        for mine in self.shapes:
            for theirs in other.shapes:
                found |= mine.outline.intersection_points_45(theirs.outline)
        return found

    # -- whole-group transforms -----------------------------------------

    def _map(self, transform: Callable[[Shape45], Shape45]) -> "ShapeGroup":
        return ShapeGroup(tuple(transform(s) for s in self.shapes))

    def shift(self, dx: int, dy: int) -> "ShapeGroup":
        return self._map(lambda s: s.shift(dx, dy))

    def reflect_x(self) -> "ShapeGroup":
        """Mirror about the vertical line through the group centre."""
        center = self.center.x
        return self._map(lambda s: s.reflect_x(center))

    def reflect_y(self) -> "ShapeGroup":
        """Mirror about the horizontal line through the group centre."""
        center = self.center.y
        return self._map(lambda s: s.reflect_y(center))

    def rotate90(self, cx: int, cy: int) -> "ShapeGroup":
        return self._map(lambda s: s.rotate90(cx, cy))

    def reverse_winding(self) -> "ShapeGroup":
        return self._map(Shape45.reverse_winding)

    def add_containing_box(self) -> "ShapeGroup":
        """Wrap everything in a box one unit larger; the old shapes become its holes."""
        box = self.bounding_box.expand(1)
        container = Shape45(
            Polygon(box.corners()), tuple(s.reverse_winding() for s in self.shapes)
        )
        return ShapeGroup((container,))

    # -- edits by global vertex index -----------------------------------

    def _edit_vertex(self, index: int, edit: Callable[[Shape45, int], Shape45]) -> "ShapeGroup":
        found = self._find_vertex(index)
        if found is None:
            return self
        i, local = found
        shapes = list(self.shapes)
        shapes[i] = edit(shapes[i], local)
        return ShapeGroup(tuple(shapes))

    def set_vertex(self, index: int, x: int, y: int) -> "ShapeGroup":
        return self._edit_vertex(index, lambda s, i: s.set_vertex(i, x, y))

    def shift_vertex(self, index: int, dx: int, dy: int) -> "ShapeGroup":
        return self._edit_vertex(index, lambda s, i: s.shift_vertex(i, dx, dy))

    def delete_vertex(self, index: int) -> "ShapeGroup":
        return self._edit_vertex(index, lambda s, i: s.delete_vertex(i))

    def add_vertex_after(self, index: int) -> "ShapeGroup":
        return self._edit_vertex(index, lambda s, i: s.add_vertex_after(i))

    # -- edits by global shape index ------------------------------------

    def _edit_shape(
        self, index: int, edit: Callable[[Shape45, int], Shape45 | None]
    ) -> "ShapeGroup":
        if not 0 <= index < self.num_shapes_recursive:
            return self
        shapes: list[Shape45] = []
        local = index
        for s in self.shapes:
            if 0 <= local < s.num_shapes_recursive:
                edited = edit(s, local)
                if edited is not None:
                    shapes.append(edited)
            else:
                shapes.append(s)
            local -= s.num_shapes_recursive
        return ShapeGroup(tuple(shapes))

    def shift_sub_shape(self, index: int, dx: int, dy: int) -> "ShapeGroup":
        return self._edit_shape(index, lambda s, i: s.shift_sub_shape(i, dx, dy))

    def reverse_sub_shape_winding(self, index: int) -> "ShapeGroup":
        return self._edit_shape(index, lambda s, i: s.reverse_sub_shape_winding(i))

    def rotate_sub_shape_vertex_order(self, index: int, steps: int = 1) -> "ShapeGroup":
        return self._edit_shape(
            index, lambda s, i: s.rotate_sub_shape_outline_vertex_order(i, steps)
        )

    def delete_sub_shape(self, index: int) -> "ShapeGroup":
        """Delete the shape at a global shape index (a top-level index removes the whole shape)."""
        return self._edit_shape(index, lambda s, i: s.delete_sub_shape_recursive(i))

    def add_sub_shape(self, index: int, sub_shape: Shape45) -> "ShapeGroup":
        """Add sub_shape inside the shape at a global shape index."""
        return self._edit_shape(index, lambda s, i: s.add_sub_shape_recursive(i, sub_shape))

    def add_sub_shape_at_same_level(self, index: int, sub_shape: Shape45) -> "ShapeGroup":
        """Add sub_shape as a sibling of the shape at a global shape index.

        A top-level index adds a new top-level shape.
        """
        if not 0 <= index < self.num_shapes_recursive:
            return self
        local = index
        for s in self.shapes:
            if local == 0:
                return ShapeGroup(self.shapes + (sub_shape,))
            local -= s.num_shapes_recursive

        def add_sibling(shape: Shape45, i: int) -> Shape45:
            return shape.add_sub_shape_recursive(shape.parent_index(i), sub_shape)

        return self._edit_shape(index, add_sibling)

    # -- boolean operations ---------------------------------------------

    def combine(self, other: "ShapeGroup", operation: "BooleanOperation") -> "ShapeGroup":
        from gridgeom.core.boolean import combine

        return ShapeGroup(tuple(combine(self.shapes, other.shapes, operation)))

    def union(self, other: "ShapeGroup") -> "ShapeGroup":
        from gridgeom.core.boolean import BooleanOperation

        return self.combine(other, BooleanOperation.UNION)

    def subtract(self, other: "ShapeGroup") -> "ShapeGroup":
        from gridgeom.core.boolean import BooleanOperation

        return self.combine(other, BooleanOperation.SUBTRACT)

    def intersect(self, other: "ShapeGroup") -> "ShapeGroup":
        from gridgeom.core.boolean import BooleanOperation

        return self.combine(other, BooleanOperation.INTERSECT)

    # -- serialization --------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        return {"shapes": [s.to_dict() for s in self.shapes]}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ShapeGroup":
        return cls(tuple(Shape45.from_dict(s) for s in data.get("shapes", [])))

    @classmethod
    def from_shapes(cls, shapes: Iterable[Shape45]) -> "ShapeGroup":
        return cls(tuple(shapes))


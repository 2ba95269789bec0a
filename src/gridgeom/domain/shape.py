"""Nested 45-degree shapes.

A Shape45 is a tree: an outline polygon plus owned sub-shapes. Direct
sub-shapes are holes, their sub-shapes are islands inside the holes, and so
on. The expected winding alternates with depth: the root outline winds
counter-clockwise, holes clockwise, islands counter-clockwise again.

Vertices and shapes are addressed by global depth-first (pre-order) indices:
the outline first, then each sub-shape's own enumeration in order. Shape
index 0 is the shape itself. Every index lookup and every edit goes through
one traversal (``_nodes``), so "index for shape", "shape for index" and "edit
at index" always agree.

Edits never mutate. They return a new tree in which the edited node and its
ancestors are rebuilt and untouched subtrees are shared. Edits given an
out-of-range global index return the shape unchanged; direct accessors raise.
"""

from collections.abc import Callable, Iterable, Iterator, Sequence
from dataclasses import dataclass
from enum import Enum
from functools import cached_property
from typing import TYPE_CHECKING, Any, NamedTuple, Union

from gridgeom.core import geometry
from gridgeom.domain.box import Box2D
from gridgeom.domain.line import Line
from gridgeom.domain.point import Point, Pt2D, Pt2Df, WindingDirection
from gridgeom.domain.polygon import Polygon
from gridgeom.exceptions import SubShapeIndexError, TriangleIndexError, VertexIndexError

if TYPE_CHECKING:
    from gridgeom.config.settings import TriangulationConfig
    from gridgeom.domain.triangle import Triangle


class ShapeProblem(str, Enum):
    """Reasons a shape fails validation."""

    TOO_FEW_VERTICES = "too_few_vertices"
    NOT_45_COMPLIANT = "not_45_compliant"
    WRONG_WINDING = "wrong_winding"
    DUPLICATE_VERTICES = "duplicate_vertices"
    SELF_INTERSECTING = "self_intersecting"
    SUB_SHAPES_INTERSECT = "sub_shapes_intersect"
    SUB_SHAPE_CROSSES_OUTLINE = "sub_shape_crosses_outline"
    SUB_SHAPE_OUTSIDE_OUTLINE = "sub_shape_outside_outline"
    INVALID_SUB_SHAPE = "invalid_sub_shape"


class _Node(NamedTuple):
    path: tuple[int, ...]
    shape: "Shape45"
    first_vertex: int
    depth: int


@dataclass(frozen=True)
class Shape45:
    """An outline with nested sub-shapes.

    Attributes:
        outline: Outline polygon
        sub_shapes: Owned sub-shapes, each expected to wind opposite to this one
    """

    outline: Polygon
    sub_shapes: tuple["Shape45", ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.outline, Polygon):
            object.__setattr__(self, "outline", Polygon(tuple(self.outline)))
        if not isinstance(self.sub_shapes, tuple):
            object.__setattr__(self, "sub_shapes", tuple(self.sub_shapes))

    @classmethod
    def from_coords(cls, coords: Iterable[Sequence[int]], *sub_shapes: "Shape45") -> "Shape45":
        """Build a shape from outline (x, y) pairs and optional sub-shapes."""
        return cls(Polygon.from_coords(coords), tuple(sub_shapes))

    # -- traversal ------------------------------------------------------

    @cached_property
    def _nodes(self) -> tuple[_Node, ...]:
        return tuple(self._iter_nodes((), 0, 0))

    def _iter_nodes(self, path: tuple[int, ...], offset: int, depth: int) -> Iterator[_Node]:
        yield _Node(path, self, offset, depth)
        offset += self.outline.num_vertices
        for i, sub in enumerate(self.sub_shapes):
            yield from sub._iter_nodes(path + (i,), offset, depth + 1)
            offset += sub.total_num_vertices

    def _locate_vertex(self, index: int) -> tuple[int, int] | None:
        """Global shape index and outline-local index for a global vertex index."""
        if index < 0:
            return None
        for shape_index, node in enumerate(self._nodes):
            local = index - node.first_vertex
            if 0 <= local < node.shape.outline.num_vertices:
                return shape_index, local
        return None

    def _replace_at(
        self, path: tuple[int, ...], edit: Callable[["Shape45"], "Shape45 | None"]
    ) -> "Shape45 | None":
        if not path:
            return edit(self)
        head, rest = path[0], path[1:]
        new_subs = []
        for i, sub in enumerate(self.sub_shapes):
            if i == head:
                replaced = sub._replace_at(rest, edit)
                if replaced is not None:
                    new_subs.append(replaced)
            else:
                new_subs.append(sub)
        return Shape45(self.outline, tuple(new_subs))

    def _edit_shape(self, shape_index: int, edit: Callable[["Shape45"], "Shape45 | None"]):
        if not 0 <= shape_index < self.num_shapes_recursive:
            return self
        return self._replace_at(self._nodes[shape_index].path, edit)

    def _edit_vertex(self, index: int, edit: Callable[[Polygon, int], Polygon]) -> "Shape45":
        found = self._locate_vertex(index)
        if found is None:
            return self
        shape_index, local = found
        return self._replace_at(
            self._nodes[shape_index].path, lambda s: s.with_outline(edit(s.outline, local))
        )

    # -- structure queries ----------------------------------------------

    @property
    def num_vertices(self) -> int:
        """Number of outline vertices (sub-shapes excluded)."""
        return self.outline.num_vertices

    @cached_property
    def total_num_vertices(self) -> int:
        """Vertices of the outline and every nested sub-shape."""
        return self.outline.num_vertices + sum(s.total_num_vertices for s in self.sub_shapes)

    @property
    def num_sub_shapes(self) -> int:
        return len(self.sub_shapes)

    def sub_shape(self, index: int) -> "Shape45":
        """Direct sub-shape at index.

        Raises:
            SubShapeIndexError: If index is out of range
        """
        if not 0 <= index < len(self.sub_shapes):
            raise SubShapeIndexError(index, len(self.sub_shapes))
        return self.sub_shapes[index]

    @property
    def num_shapes_recursive(self) -> int:
        """This shape plus every nested sub-shape."""
        return len(self._nodes)

    def sub_shape_recursive(self, index: int) -> "Shape45":
        """Shape at a global shape index (0 is this shape).

        Raises:
            SubShapeIndexError: If index is out of range
        """
        if not 0 <= index < len(self._nodes):
            raise SubShapeIndexError(index, len(self._nodes))
        return self._nodes[index].shape

    def parent_index(self, index: int) -> int:
        """Global shape index of the parent of the shape at index.

        Raises:
            SubShapeIndexError: If index is out of range or 0 (the root has no parent)
        """
        if not 0 < index < len(self._nodes):
            raise SubShapeIndexError(index, len(self._nodes))
        parent_path = self._nodes[index].path[:-1]
        return next(i for i, node in enumerate(self._nodes) if node.path == parent_path)

    @cached_property
    def nested_depth(self) -> int:
        """0 for a shape without sub-shapes, else 1 + the deepest sub-shape's depth."""
        if not self.sub_shapes:
            return 0
        return 1 + max(s.nested_depth for s in self.sub_shapes)

    def vertex(self, index: int) -> Pt2D:
        """Vertex at a global depth-first index.

        Raises:
            VertexIndexError: If index is out of range
        """
        found = self._locate_vertex(index)
        if found is None:
            raise VertexIndexError(index, self.total_num_vertices)
        shape_index, local = found
        return self._nodes[shape_index].shape.outline.vertices[local]

    def vertices(self) -> Iterator[Pt2D]:
        """All vertices in global index order."""
        for node in self._nodes:
            yield from node.shape.outline.vertices

    def has_vertex(self, point: Point) -> bool:
        return any(v.equals_value(point) for v in self.vertices())

    def shape_for_vertex_index(self, index: int) -> "Shape45":
        """Shape whose outline holds the vertex at a global index.

        Raises:
            VertexIndexError: If index is out of range
        """
        return self.sub_shape_recursive(self.sub_shape_index_for_vertex_index(index))

    def sub_shape_index_for_vertex_index(self, index: int) -> int:
        """Global shape index of the shape holding the vertex at a global index.

        Raises:
            VertexIndexError: If index is out of range
        """
        found = self._locate_vertex(index)
        if found is None:
            raise VertexIndexError(index, self.total_num_vertices)
        return found[0]

    def vertex_index_range_for_sub_shape(self, shape_index: int) -> range:
        """Global vertex indices of the outline of the shape at a global shape index.

        Raises:
            SubShapeIndexError: If shape_index is out of range
        """
        self.sub_shape_recursive(shape_index)
        node = self._nodes[shape_index]
        return range(node.first_vertex, node.first_vertex + node.shape.outline.num_vertices)

    def polygons(self) -> list[Polygon]:
        """Outlines of this shape and every sub-shape, in shape index order."""
        return [node.shape.outline for node in self._nodes]

    @property
    def bounding_box(self) -> Box2D:
        return self.outline.bounding_box

    @property
    def center(self) -> Pt2D:
        return self.outline.center

    def is_45_compliant(self) -> bool:
        return all(p.is_45_compliant() for p in self.polygons())

    # -- validity -------------------------------------------------------

    def expected_winding(self, depth: int = 0) -> WindingDirection:
        """Expected outline winding for a shape at the given depth below a root."""
        if depth % 2 == 0:
            return WindingDirection.COUNTER_CLOCKWISE
        return WindingDirection.CLOCKWISE

    def expected_winding_for_sub_shape(self, index: int) -> WindingDirection:
        """Expected winding of the shape at a global shape index.

        Raises:
            SubShapeIndexError: If index is out of range
        """
        self.sub_shape_recursive(index)
        return self.expected_winding(self._nodes[index].depth)

    def problems(self) -> list[ShapeProblem]:
        """Everything that makes this shape invalid, treating it as a root shape."""
        return list(self._problems_as_root)

    def is_valid(self) -> bool:
        return not self._problems_as_root

    @cached_property
    def _problems_as_root(self) -> tuple[ShapeProblem, ...]:
        return self._find_problems(WindingDirection.COUNTER_CLOCKWISE)

    @cached_property
    def _problems_as_hole(self) -> tuple[ShapeProblem, ...]:
        return self._find_problems(WindingDirection.CLOCKWISE)

    def _problems_for(self, expected: WindingDirection) -> tuple[ShapeProblem, ...]:
        if expected is WindingDirection.COUNTER_CLOCKWISE:
            return self._problems_as_root
        return self._problems_as_hole

    def _find_problems(self, expected: WindingDirection) -> tuple[ShapeProblem, ...]:
        outline = self.outline
        found: list[ShapeProblem] = []
        if outline.num_vertices < 3:
            found.append(ShapeProblem.TOO_FEW_VERTICES)
        if not outline.is_45_compliant():
            found.append(ShapeProblem.NOT_45_COMPLIANT)
        if outline.winding_direction is not expected:
            found.append(ShapeProblem.WRONG_WINDING)
        if outline.num_duplicate_vertices() > 0:
            found.append(ShapeProblem.DUPLICATE_VERTICES)
        if outline.num_self_intersections > 0:
            found.append(ShapeProblem.SELF_INTERSECTING)

        subs = self.sub_shapes
        if any(
            _outlines_cross(subs[i].outline, subs[j].outline)
            for i in range(len(subs))
            for j in range(i + 1, len(subs))
        ):
            found.append(ShapeProblem.SUB_SHAPES_INTERSECT)
        if any(_outlines_cross(outline, sub.outline) for sub in subs):
            found.append(ShapeProblem.SUB_SHAPE_CROSSES_OUTLINE)
        if any(not _lies_within(sub.outline, outline) for sub in subs):
            found.append(ShapeProblem.SUB_SHAPE_OUTSIDE_OUTLINE)
        if any(sub._problems_for(expected.opposite()) for sub in subs):
            found.append(ShapeProblem.INVALID_SUB_SHAPE)
        return tuple(found)

    # -- containment and intersection -----------------------------------

    def contains(self, point: Point) -> bool:
        """Even-odd containment over every nested outline."""
        inside = sum(1 for p in self.polygons() if p.contains(point))
        return inside % 2 == 1

    def intersection_points_45(self, other: Union["Shape45", Line]) -> set[Pt2Df]:
        """Exact crossing points between any outline here and any outline (or line) there."""
        targets = [other] if isinstance(other, Line) else other.polygons()
        found: set[Pt2Df] = set()
        for mine in self.polygons():
            for target in targets:
                found |= mine.intersection_points_45(target)
        return found

    def intersection_points_45_ignore_shared_vertices(
        self, other: Union["Shape45", Line]
    ) -> set[Pt2Df]:
        targets = [other] if isinstance(other, Line) else other.polygons()
        found: set[Pt2Df] = set()
        for mine in self.polygons():
            for target in targets:
                found |= mine.intersection_points_45_ignore_shared_vertices(target)
        return found

    # -- triangulation --------------------------------------------------

    def triangles(self, config: "TriangulationConfig | None" = None) -> list["Triangle"]:
        """Triangles covering the shape (holes excluded, islands included).

        The default-config result is computed once and reused.

        Raises:
            TriangulationError: If the outline cannot be ear clipped or a
                hole cannot be bridged
        """
        if config is not None:
            from gridgeom.core.bridge import triangulate_shape

            return triangulate_shape(self, config)
        return list(self._triangles)

    @cached_property
    def _triangles(self) -> tuple["Triangle", ...]:
        from gridgeom.core.bridge import triangulate_shape

        return tuple(triangulate_shape(self))

    @property
    def num_triangles(self) -> int:
        return len(self._triangles)

    def triangle(self, index: int) -> "Triangle":
        """Triangle at index.

        Raises:
            TriangleIndexError: If index is out of range
        """
        if not 0 <= index < len(self._triangles):
            raise TriangleIndexError(index, len(self._triangles))
        return self._triangles[index]

    # -- whole-shape transforms -----------------------------------------

    def with_outline(self, outline: Polygon) -> "Shape45":
        return Shape45(outline, self.sub_shapes)

    def with_sub_shapes(self, sub_shapes: Iterable["Shape45"]) -> "Shape45":
        return Shape45(self.outline, tuple(sub_shapes))

    def _map(self, transform: Callable[[Polygon], Polygon]) -> "Shape45":
        return Shape45(transform(self.outline), tuple(s._map(transform) for s in self.sub_shapes))

    def shift(self, dx: int, dy: int) -> "Shape45":
        return self._map(lambda p: p.shift(dx, dy))

    def reverse_winding(self) -> "Shape45":
        """Reverse the vertex order of every outline in the tree."""
        return self._map(Polygon.reverse_winding)

    def reflect_x(self, center: int) -> "Shape45":
        return self._map(lambda p: p.reflect_x(center))

    def reflect_y(self, center: int) -> "Shape45":
        return self._map(lambda p: p.reflect_y(center))

    def rotate90(self, cx: int, cy: int) -> "Shape45":
        return self._map(lambda p: p.rotate90(cx, cy))

    # -- edits by global vertex index -----------------------------------

    def set_vertex(self, index: int, x: int, y: int) -> "Shape45":
        return self._edit_vertex(index, lambda poly, i: poly.with_vertex(i, Pt2D(x, y)))

    def shift_vertex(self, index: int, dx: int, dy: int) -> "Shape45":
        return self._edit_vertex(
            index, lambda poly, i: poly.with_vertex(i, poly.vertices[i].shift(dx, dy))
        )

    def delete_vertex(self, index: int) -> "Shape45":
        return self._edit_vertex(index, lambda poly, i: poly.without_vertex(i))

    def add_vertex_after(self, index: int) -> "Shape45":
        """Insert a vertex halfway along the edge leaving the vertex at index.

        The midpoint is rounded onto the grid and moved up one unit at a time
        until it does not duplicate an existing vertex.
        """
        existing = set(self.vertices())

        def insert(poly: Polygon, i: int) -> Polygon:
            point = geometry.mid_point_int(poly.vertices[i], poly.vertex_wrapped(i + 1))
            while point in existing:
                point = point.shift(0, 1)
            return poly.with_vertex_after(i, point)

        return self._edit_vertex(index, insert)

    # -- edits by global shape index ------------------------------------

    def shift_sub_shape(self, index: int, dx: int, dy: int) -> "Shape45":
        """Move the shape at a global shape index, with everything nested in it."""
        return self._edit_shape(index, lambda s: s.shift(dx, dy))

    def add_sub_shape_recursive(self, index: int, sub_shape: "Shape45") -> "Shape45":
        """Append sub_shape to the sub-shapes of the shape at a global shape index."""
        return self._edit_shape(index, lambda s: s.with_sub_shapes(s.sub_shapes + (sub_shape,)))

    def delete_sub_shape_recursive(self, index: int) -> "Shape45 | None":
        """Remove the shape at a global shape index.

        Index 0 is the shape itself, so deleting it returns None.
        """
        return self._edit_shape(index, lambda s: None)

    def reverse_sub_shape_winding(self, index: int) -> "Shape45":
        """Reverse the outline of the shape at a global shape index (its sub-shapes are kept)."""
        return self._edit_shape(index, lambda s: s.with_outline(s.outline.reverse_winding()))

    def rotate_sub_shape_outline_vertex_order(self, index: int, steps: int = 1) -> "Shape45":
        return self._edit_shape(
            index, lambda s: s.with_outline(s.outline.rotate_vertex_order(steps))
        )

    # -- serialization --------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary.

        Returns:
            Dictionary with "outline" as [x, y] pairs and nested "sub_shapes"
        """
        return {
            "outline": [[v.x, v.y] for v in self.outline.vertices],
            "sub_shapes": [s.to_dict() for s in self.sub_shapes],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Shape45":
        """Deserialize from dictionary.

        Args:
            data: Dictionary produced by to_dict()

        Returns:
            Shape45 instance
        """
        return cls(
            Polygon.from_coords(data["outline"]),
            tuple(cls.from_dict(s) for s in data.get("sub_shapes", [])),
        )


def _outlines_cross(first: Polygon, second: Polygon) -> bool:
    if first.is_45_compliant() and second.is_45_compliant():
        return first.intersects_45_ignore_shared_vertices(second)
    return first.intersects_ignore_shared_vertices(second)


def _lies_within(inner: Polygon, outer: Polygon) -> bool:
    """True if every inner vertex is inside outer or on its boundary."""
    for vertex in inner.vertices:
        if any(edge.contains(vertex) for edge in outer.edges):
            continue
        if not outer.contains(vertex):
            return False
    return True

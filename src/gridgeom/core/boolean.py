"""Boolean combination of shape sets.

Two operands (sequences of Shape45, each the even-odd region of all of its
nested outlines) are combined through an IntersectionGraph:

1. Every outline of operand A is inserted with id 0, every outline of B with
   id 1, so all edges are split at every crossing.
2. For each undirected graph segment u-v, each operand is sampled just left
   and just right of u->v. A connection u->v tagged by the operand means the
   operand lies on its left (outlines keep their interior on the left), v->u
   means it lies on the right, and an untagged segment takes the even-odd
   containment of its midpoint on both sides.
3. The operation is applied to the left and right samples. A segment whose
   result is inside on exactly one side becomes a boundary edge, directed
   so the result lies on its left.
4. Boundary edges are stitched into closed loops, taking the sharpest left
   turn at junctions so regions touching at a point separate.
5. Straight vertices are dropped, loops are classified by winding
   (counter-clockwise solid, clockwise hole) and nested into Shape45 trees.
"""

import logging
from collections.abc import Sequence
from enum import Enum

from gridgeom.config import GraphConfig
from gridgeom.core.digraph import IntersectionGraph
from gridgeom.core.geometry import STRAIGHT, angle_turned, turn_direction
from gridgeom.domain.point import Pt2D, Pt2Df
from gridgeom.domain.polygon import Polygon
from gridgeom.domain.shape import Shape45
from gridgeom.exceptions import BooleanOperationError

logger = logging.getLogger(__name__)

OPERAND_A = 0
OPERAND_B = 1


class BooleanOperation(str, Enum):
    """Supported boolean operations."""

    UNION = "union"
    SUBTRACT = "subtract"
    INTERSECT = "intersect"

    def apply(self, in_a: bool, in_b: bool) -> bool:
        if self is BooleanOperation.UNION:
            return in_a or in_b
        if self is BooleanOperation.INTERSECT:
            return in_a and in_b
        return in_a and not in_b


def combine(
    a: Sequence[Shape45],
    b: Sequence[Shape45],
    operation: BooleanOperation,
    config: GraphConfig | None = None,
) -> list[Shape45]:
    """Combine two sets of shapes.

    Args:
        a: First operand
        b: Second operand
        operation: Operation to apply (A op B)
        config: Graph settings (defaults if None)

    Returns:
        Result shapes, each a counter-clockwise outline with nested holes

    Raises:
        BooleanOperationError: If a result vertex falls off the integer grid
            or a result hole has no enclosing outline
    """
    graph = IntersectionGraph(config)
    polygons = {OPERAND_A: [], OPERAND_B: []}
    for operand, shapes in ((OPERAND_A, a), (OPERAND_B, b)):
        for shape in shapes:
            for polygon in shape.polygons():
                graph.add_polygon(polygon, operand)
                polygons[operand].append(polygon)

    edges = _boundary_edges(graph, operation, polygons)
    loops = _stitch(graph, edges)
    outlines = [_to_polygon(loop) for loop in loops]
    outlines = [p for p in outlines if p.num_vertices >= 3]
    logger.debug(
        "%s: %d graph nodes, %d boundary edges, %d loops",
        operation.value,
        graph.num_nodes,
        len(edges),
        len(outlines),
    )
    return _nest(outlines)


def union(a: Sequence[Shape45], b: Sequence[Shape45]) -> list[Shape45]:
    return combine(a, b, BooleanOperation.UNION)


def subtract(a: Sequence[Shape45], b: Sequence[Shape45]) -> list[Shape45]:
    return combine(a, b, BooleanOperation.SUBTRACT)


def intersect(a: Sequence[Shape45], b: Sequence[Shape45]) -> list[Shape45]:
    return combine(a, b, BooleanOperation.INTERSECT)


def _inside(point: Pt2Df, polygons: list[Polygon]) -> bool:
    return sum(1 for p in polygons if p.contains(point)) % 2 == 1


def _sides(
    graph: IntersectionGraph, u: int, v: int, operand: int, polygons: list[Polygon]
) -> tuple[bool, bool]:
    """(left, right) membership of an operand beside the segment u->v."""
    forward = graph.connection_between(u, v)
    backward = graph.connection_between(v, u)
    on_forward = forward is not None and operand in forward.shape_ids
    on_backward = backward is not None and operand in backward.shape_ids
    if on_forward and not on_backward:
        return True, False
    if on_backward and not on_forward:
        return False, True
    if on_forward and on_backward:
        return True, True
    line = (forward or backward).line
    inside = _inside(line.midpoint(), polygons)
    return inside, inside


def _boundary_edges(
    graph: IntersectionGraph,
    operation: BooleanOperation,
    polygons: dict[int, list[Polygon]],
) -> list[tuple[int, int]]:
    seen: set[tuple[int, int]] = set()
    edges: list[tuple[int, int]] = []
    for conn in graph.connections():
        u, v = sorted((conn.origin, conn.dest))
        if (u, v) in seen:
            continue
        seen.add((u, v))
        a_left, a_right = _sides(graph, u, v, OPERAND_A, polygons[OPERAND_A])
        b_left, b_right = _sides(graph, u, v, OPERAND_B, polygons[OPERAND_B])
        left = operation.apply(a_left, b_left)
        right = operation.apply(a_right, b_right)
        if left and not right:
            edges.append((u, v))
        elif right and not left:
            edges.append((v, u))
    return edges


def _stitch(graph: IntersectionGraph, edges: list[tuple[int, int]]) -> list[list[Pt2Df]]:
    """Join directed boundary edges into closed loops of points."""
    outgoing: dict[int, list[int]] = {}
    for u, v in edges:
        outgoing.setdefault(u, []).append(v)
    unused = set(edges)
    loops: list[list[Pt2Df]] = []

    for first in edges:
        if first not in unused:
            continue
        unused.discard(first)
        start, current = first
        previous = start
        loop = [start]
        while current != start:
            loop.append(current)
            candidates = [d for d in outgoing.get(current, []) if (current, d) in unused]
            if not candidates:
                raise BooleanOperationError(
                    f"boundary is not closed at {graph.node(current).point}"
                )
            p_prev = graph.node(previous).point
            p_cur = graph.node(current).point
            nxt = max(
                candidates,
                key=lambda d: angle_turned(p_prev, p_cur, graph.node(d).point),
            )
            unused.discard((current, nxt))
            previous, current = current, nxt
        loops.append([graph.node(h).point for h in loop])
    return loops


def _to_polygon(loop: list[Pt2Df]) -> Polygon:
    """Drop straight vertices and snap the loop onto the integer grid."""
    points = list(loop)
    changed = True
    while changed and len(points) >= 3:
        changed = False
        for i in range(len(points)):
            prev_pt = points[i - 1]
            next_pt = points[(i + 1) % len(points)]
            if turn_direction(prev_pt, points[i], next_pt) == STRAIGHT:
                del points[i]
                changed = True
                break

    vertices: list[Pt2D] = []
    for point in points:
        if not point.is_integral():
            raise BooleanOperationError(f"result vertex {point} is not on the integer grid")
        vertices.append(point.to_int())
    return Polygon(tuple(vertices))


def _within(inner: Polygon, outer: Polygon) -> bool:
    """Containment of inner in outer, judged at the first point off outer's boundary."""
    samples = [v.to_float() for v in inner.vertices] + [e.midpoint() for e in inner.edges]
    for point in samples:
        if any(edge.contains(point) for edge in outer.edges):
            continue
        return outer.contains(point)
    return False


def _nest(outlines: list[Polygon]) -> list[Shape45]:
    """Arrange loops into shape trees by containment."""
    ordered = sorted(outlines, key=lambda p: p.area(), reverse=True)
    parents: list[int | None] = []
    for i, outline in enumerate(ordered):
        parent = None
        for j in range(i - 1, -1, -1):
            if _within(outline, ordered[j]):
                parent = j
                break
        parents.append(parent)

    for i, outline in enumerate(ordered):
        solid = outline.signed_area() > 0
        parent = parents[i]
        if parent is None and not solid:
            raise BooleanOperationError(f"hole {outline} has no enclosing outline")

    def build(index: int) -> Shape45:
        children = [build(j) for j, p in enumerate(parents) if p == index]
        return Shape45(ordered[index], tuple(children))

    return [build(i) for i, p in enumerate(parents) if p is None]

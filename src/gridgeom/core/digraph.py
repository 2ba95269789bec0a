"""Planar intersection graph for boolean shape modeling.

IntersectionGraph is a directed graph of point nodes. Line segments are
inserted one at a time, each tagged with the id of the shape that produced
it. Whenever a new segment meets existing ones, both sides are split at the
meeting point, so no connection ever crosses another or passes through a
node. Connections produced by several shapes carry the union of their ids.

Nodes live in an arena addressed by integer handles. Each node keeps the
handles of the nodes it connects to (forward) and from (backward); the
connection objects themselves are keyed by (origin, destination) handles.

The graph is mutable and not synchronised: build it from one thread.
"""

import logging
from dataclasses import dataclass, field

from gridgeom.config import GraphConfig
from gridgeom.core.geometry import dist_squared
from gridgeom.domain.line import Line
from gridgeom.domain.point import Point, Pt2Df
from gridgeom.domain.polygon import Polygon
from gridgeom.exceptions import SelfConnectionError

logger = logging.getLogger(__name__)


@dataclass
class Node:
    """A graph node.

    Attributes:
        handle: Stable arena handle
        point: Location of the node
        forward: Handles of nodes this node connects to
        backward: Handles of nodes connecting to this node
    """

    handle: int
    point: Pt2Df
    forward: set[int] = field(default_factory=set)
    backward: set[int] = field(default_factory=set)

    def __str__(self) -> str:
        return f"Node {self.handle} {self.point}: {len(self.forward)} forward / {len(self.backward)} backward"


@dataclass
class Connection:
    """A directed edge between two nodes.

    Attributes:
        origin: Handle of the origin node
        dest: Handle of the destination node
        shape_ids: Ids of every shape that produced this edge
        line: The edge as a float line
    """

    origin: int
    dest: int
    shape_ids: set[int]
    line: Line

    def __str__(self) -> str:
        ids = ", ".join(str(i) for i in sorted(self.shape_ids))
        return f"<Connection ids=[{ids}] {self.line}>"


class IntersectionGraph:
    """Directed planar graph built by inserting shape-tagged segments.

    Example:
        >>> graph = IntersectionGraph()
        >>> graph.insert_line(Pt2D(2, 6), Pt2D(10, 6), 0)
        >>> graph.insert_line(Pt2D(7, 3), Pt2D(7, 9), 1)
        >>> graph.num_nodes
        5
        >>> graph.is_connected(Pt2D(2, 6), Pt2D(7, 6))
        True
    """

    def __init__(self, config: GraphConfig | None = None) -> None:
        self.config = config or GraphConfig()
        self._nodes: dict[int, Node] = {}
        self._handles: dict[Pt2Df, int] = {}
        self._connections: dict[tuple[int, int], Connection] = {}
        self._next_handle = 0

    # -- lookup ---------------------------------------------------------

    @property
    def num_nodes(self) -> int:
        return len(self._nodes)

    @property
    def num_connections(self) -> int:
        return len(self._connections)

    def node(self, handle: int) -> Node:
        """Node for a handle.

        Raises:
            KeyError: If no node has this handle
        """
        return self._nodes[handle]

    def node_at(self, point: Point) -> Node | None:
        """Node at a point, or None if there is none."""
        handle = self._handles.get(point.to_float())
        return None if handle is None else self._nodes[handle]

    def contains(self, point: Point) -> bool:
        return point.to_float() in self._handles

    def nodes(self) -> list[Node]:
        """Nodes in creation order."""
        return list(self._nodes.values())

    def connections(self) -> list[Connection]:
        return list(self._connections.values())

    def connection(self, origin: Point, dest: Point) -> Connection | None:
        """Forward connection from origin to dest, or None."""
        o = self._handles.get(origin.to_float())
        d = self._handles.get(dest.to_float())
        if o is None or d is None:
            return None
        return self._connections.get((o, d))

    def connection_between(self, origin: int, dest: int) -> Connection | None:
        """Forward connection between two node handles, or None."""
        return self._connections.get((origin, dest))

    def is_connected(self, p1: Point, p2: Point) -> bool:
        """True if the node at p1 has a forward connection to the node at p2."""
        return self.connection(p1, p2) is not None

    def is_connected_backward(self, p1: Point, p2: Point) -> bool:
        """True if the node at p1 has a backward connection from the node at p2."""
        return self.connection(p2, p1) is not None

    # -- construction ---------------------------------------------------

    def add_line(self, line: Line, shape_id: int) -> None:
        self.insert_line(line.start, line.end, shape_id)

    def add_polygon(self, polygon: Polygon, shape_id: int) -> None:
        """Insert every edge of a polygon, in vertex order."""
        for edge in polygon.edges:
            self.insert_line(edge.start, edge.end, shape_id)

    def insert_line(self, p1: Point, p2: Point, shape_id: int) -> None:
        """Insert the segment p1->p2 for a shape, splitting at every crossing.

        Crossing points inside the new segment become nodes on its path.
        Existing connections crossed away from their own endpoints are
        replaced by two halves that keep their shape ids. Where a connection
        between two nodes already exists, shape_id is added to its ids.

        Raises:
            SelfConnectionError: If p1 and p2 are the same point
        """
        start = p1.to_float()
        end = p2.to_float()
        if start == end:
            raise SelfConnectionError(start)
        new_line = Line(start, end)

        path_points: set[Pt2Df] = set()
        splits: dict[tuple[int, int], set[Pt2Df]] = {}

        for key, conn in list(self._connections.items()):
            on_new, on_old = self._meeting_points(new_line, conn.line)
            for point in on_new:
                if not new_line.has_vertex(point):
                    path_points.add(point)
            for point in on_old:
                if not conn.line.has_vertex(point):
                    splits.setdefault(key, set()).add(point)

        chain = [start, *sorted(path_points, key=lambda p: dist_squared(start, p)), end]
        for origin, dest in zip(chain, chain[1:]):
            self._connect(self._get_or_add(origin), self._get_or_add(dest), {shape_id})
        logger.debug("Inserted %s for shape %d as %d segments", new_line, shape_id, len(chain) - 1)

        for key, points in splits.items():
            self._split(key, points)

    def _meeting_points(
        self, new_line: Line, old_line: Line
    ) -> tuple[list[Pt2Df], list[Pt2Df]]:
        """Points where the new line should be split and where the old one should."""
        if new_line.is_45_compliant() and old_line.is_45_compliant():
            point = new_line.intersection_point_45(old_line)
        else:
            point = new_line.intersection_point(old_line)
        if point is not None:
            return [point], [point]

        if self.config.split_collinear_overlaps and new_line.is_collinear_with(old_line):
            on_new = [p for p in (old_line.start, old_line.end) if new_line.contains(p)]
            on_old = [p for p in (new_line.start, new_line.end) if old_line.contains(p)]
            return on_new, on_old
        return [], []

    def _get_or_add(self, point: Pt2Df) -> int:
        handle = self._handles.get(point)
        if handle is None:
            handle = self._next_handle
            self._next_handle += 1
            self._nodes[handle] = Node(handle, point)
            self._handles[point] = handle
        return handle

    def _connect(self, origin: int, dest: int, shape_ids: set[int]) -> None:
        if origin == dest:
            raise SelfConnectionError(self._nodes[origin].point)
        existing = self._connections.get((origin, dest))
        if existing is not None:
            existing.shape_ids |= shape_ids
            return
        line = Line(self._nodes[origin].point, self._nodes[dest].point)
        self._connections[(origin, dest)] = Connection(origin, dest, set(shape_ids), line)
        self._nodes[origin].forward.add(dest)
        self._nodes[dest].backward.add(origin)

    def _disconnect(self, origin: int, dest: int) -> Connection | None:
        conn = self._connections.pop((origin, dest), None)
        if conn is not None:
            self._nodes[origin].forward.discard(dest)
            self._nodes[dest].backward.discard(origin)
        return conn

    def _split(self, key: tuple[int, int], points: set[Pt2Df]) -> None:
        conn = self._disconnect(*key)
        if conn is None:
            return
        origin_point = self._nodes[conn.origin].point
        ordered = sorted(points, key=lambda p: dist_squared(origin_point, p))
        handles = [conn.origin, *(self._get_or_add(p) for p in ordered), conn.dest]
        for origin, dest in zip(handles, handles[1:]):
            self._connect(origin, dest, conn.shape_ids)
        logger.debug("Split %s at %d points", conn.line, len(ordered))

    def remove(self, point: Point) -> bool:
        """Remove the node at point with all of its connections in both directions.

        Returns:
            True if a node was removed
        """
        handle = self._handles.get(point.to_float())
        if handle is None:
            return False
        node = self._nodes[handle]
        for dest in list(node.forward):
            self._disconnect(handle, dest)
        for origin in list(node.backward):
            self._disconnect(origin, handle)
        del self._nodes[handle]
        del self._handles[node.point]
        return True

    def __str__(self) -> str:
        lines = [f"IntersectionGraph: {self.num_nodes} nodes"]
        for count, node in enumerate(self._nodes.values(), start=1):
            lines.append(f"{count}: {node}")
            for dest in sorted(node.forward):
                lines.append(f"... forward ---> {self._connections[(node.handle, dest)]}")
            for origin in sorted(node.backward):
                lines.append(f"... backward --> {self._connections[(origin, node.handle)]}")
        return "\n".join(lines)

"""Exception hierarchy for gridgeom."""

from typing import Any


class GridGeomError(Exception):
    """Base exception for all gridgeom errors."""

    pass


class GeometryError(GridGeomError):
    """Errors in geometric calculations."""

    pass


class DegenerateLineError(GeometryError):
    """A direction was requested for a zero-length line."""

    def __init__(self, line: Any) -> None:
        self.line = line
        super().__init__(f"Line {line} is degenerate (start equals end)")


class IndexRangeError(GeometryError, IndexError):
    """A direct accessor was given an index outside its range."""

    kind = "index"

    def __init__(self, index: int, size: int) -> None:
        self.index = index
        self.size = size
        super().__init__(f"{self.kind} {index} out of range (size {size})")


class VertexIndexError(IndexRangeError):
    """Vertex index out of range."""

    kind = "Vertex index"


class SubShapeIndexError(IndexRangeError):
    """Sub-shape index out of range."""

    kind = "Sub-shape index"


class TriangleIndexError(IndexRangeError):
    """Triangle index out of range."""

    kind = "Triangle index"


class TriangulationError(GridGeomError):
    """Triangulation could not complete.

    Attributes:
        reason: Human readable reason
        triangles: Triangles produced before the failure
    """

    def __init__(self, reason: str, triangles: list[Any] | None = None) -> None:
        self.reason = reason
        self.triangles = list(triangles or [])
        super().__init__(f"Triangulation failed: {reason}")


class EarClippingError(TriangulationError):
    """Ear clipping gave up on a polygon."""

    pass


class BridgeNotFoundError(TriangulationError):
    """No valid bridge joins a hole to its enclosing outline."""

    def __init__(self, hole_index: int, triangles: list[Any] | None = None) -> None:
        self.hole_index = hole_index
        super().__init__(f"no valid bridge found for sub-shape {hole_index}", triangles)


class GraphError(GridGeomError):
    """Errors in intersection graph construction."""

    pass


class SelfConnectionError(GraphError):
    """A node may not be connected to itself."""

    def __init__(self, point: Any) -> None:
        self.point = point
        super().__init__(f"Cannot connect node {point} to itself")


class BooleanOperationError(GridGeomError):
    """A boolean combination produced an unusable result."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Boolean operation failed: {reason}")


class ShapeDocumentError(GridGeomError):
    """Error reading or writing a shape document."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid shape document '{path}': {reason}")

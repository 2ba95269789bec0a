"""Domain models for gridgeom.

This module contains the value types of the geometry kernel. All models are
designed to be:

- Immutable (frozen dataclasses; every edit returns a new instance)
- Serializable to plain dictionaries for shape documents
- Exact on the integer grid

Key classes:
- Pt2D / Pt2Df: Integer and float points
- Line: A line segment with 45-degree classification and intersection
- Box2D: Axis-aligned bounding box
- Polygon: A closed vertex sequence with winding and validity diagnostics
- Triangle: Output of triangulation
- Shape45: An outline with nested holes and islands
- ShapeGroup: Independent shapes sharing one plane
"""

from gridgeom.domain.box import Box2D
from gridgeom.domain.group import ShapeGroup
from gridgeom.domain.line import Line, LineKind
from gridgeom.domain.point import Point, Pt2D, Pt2Df, WindingDirection
from gridgeom.domain.polygon import Polygon
from gridgeom.domain.shape import Shape45, ShapeProblem
from gridgeom.domain.triangle import Triangle

__all__: list[str] = [
    # Enums
    "WindingDirection",
    "LineKind",
    "ShapeProblem",
    # Core types
    "Point",
    "Pt2D",
    "Pt2Df",
    "Line",
    "Box2D",
    "Polygon",
    "Triangle",
    "Shape45",
    "ShapeGroup",
]

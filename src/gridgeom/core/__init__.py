"""Core algorithms for gridgeom.

This module contains the algorithms that operate on the domain types:

- Exact geometric predicates (angles, turns, orientation, area)
- Polygon triangulation (convex fan and ear clipping)
- Divide-and-conquer hole bridging for nested shapes
- The planar intersection graph used for boolean operations
- Boolean combination of shape sets (union, subtraction, intersection)
- Batch processing of shape groups

Only the geometric predicates are re-exported here; the domain types depend
on them, so the heavier modules are imported from their own submodules:

Key modules:
- gridgeom.core.triangulation: triangulate, EarClipper
- gridgeom.core.bridge: HoleBridger, triangulate_shape
- gridgeom.core.digraph: IntersectionGraph, Node, Connection
- gridgeom.core.boolean: BooleanOperation, combine, union, subtract, intersect
- gridgeom.core.processor: ShapeProcessor
"""

from gridgeom.core.geometry import (
    angle,
    angle_turned,
    circle_point,
    collinear,
    dist,
    dist_squared,
    line_angle,
    mid_point_int,
    on_relative_left_side,
    on_relative_right_side,
    point_in_polygon,
    point_is_on_line,
    signed_area,
    turn_direction,
)

__all__ = [
    "angle",
    "angle_turned",
    "circle_point",
    "collinear",
    "dist",
    "dist_squared",
    "line_angle",
    "mid_point_int",
    "on_relative_left_side",
    "on_relative_right_side",
    "point_in_polygon",
    "point_is_on_line",
    "signed_area",
    "turn_direction",
]

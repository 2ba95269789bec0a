"""gridgeom - exact 45-degree grid geometry.

gridgeom is a small geometry kernel for integer-grid shapes whose edges run
horizontally, vertically or at 45 degrees. It models nested shapes (outlines
with holes, holes with islands), checks them for validity, triangulates them
and combines them with boolean operations built on a planar intersection graph.

Example:
    >>> from gridgeom.domain import Polygon, Shape45
    >>> square = Shape45(Polygon.from_coords([(0, 0), (4, 0), (4, 4), (0, 4)]))
    >>> square.is_valid()
    True
    >>> len(square.triangles())
    2
"""

__version__ = "0.1.0"
__author__ = "Dimosthenis Kaponis"

__all__ = ["__author__", "__version__"]

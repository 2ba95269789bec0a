"""Shape document I/O layer for gridgeom.

This module handles reading and writing shape documents: JSON files
holding a list of nested shapes. It keeps file handling out of the
domain models, which only know how to convert to and from dictionaries.

Document format:
    {"shapes": [{"outline": [[x, y], ...], "sub_shapes": [...]}, ...]}

Key classes:
- ShapeReader: Load a document into a ShapeGroup
- ShapeWriter: Save a ShapeGroup, optionally with its triangulation
"""

from gridgeom.io.reader import ShapeReader
from gridgeom.io.writer import ShapeWriter

__all__ = [
    "ShapeReader",
    "ShapeWriter",
]

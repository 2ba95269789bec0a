"""Shape document writer.

This module provides the ShapeWriter class for saving shape groups,
and their triangulations, as JSON shape documents.
"""

import json
from pathlib import Path
from typing import Any

from gridgeom.domain.group import ShapeGroup


class ShapeWriter:
    """Writes shape groups as JSON documents.

    Example:
        writer = ShapeWriter(Path("result.json"))
        writer.save(group, include_triangles=True)
    """

    def __init__(self, output_path: Path) -> None:
        """Initialize the writer.

        Args:
            output_path: Path where the document will be saved
        """
        self._output_path = output_path

    @staticmethod
    def build_document(group: ShapeGroup, include_triangles: bool = False) -> dict[str, Any]:
        """Build the document dictionary for a group.

        Args:
            group: Shapes to write
            include_triangles: Also store the group's triangulation and the
                positions of shapes that failed to triangulate

        Returns:
            JSON-serializable dictionary
        """
        document = group.to_dict()
        if include_triangles:
            document["triangles"] = [t.to_dict()["vertices"] for t in group.triangles()]
            document["triangulation_failures"] = [
                {"shape": index, "error": str(error)}
                for index, error in group.triangulation_failures()
            ]
        return document

    def save(self, group: ShapeGroup, include_triangles: bool = False) -> None:
        """Save the group to the output path.

        Raises:
            OSError: If the file cannot be written
        """
        self.save_document(self.build_document(group, include_triangles))

    def save_document(self, document: dict[str, Any]) -> None:
        """Save an already built document dictionary."""
        self._output_path.write_text(json.dumps(document, indent=2), encoding="utf-8")

    @staticmethod
    def get_result_path(input_path: Path, suffix: str) -> Path:
        """Generate an output path next to the input.

        Converts: shapes.json -> shapes-triangulated.json

        Args:
            input_path: Original document path
            suffix: Word appended to the stem

        Returns:
            Path with -<suffix> before the extension
        """
        return input_path.parent / f"{input_path.stem}-{suffix}{input_path.suffix}"

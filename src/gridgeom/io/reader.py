"""Shape document reader.

This module provides the ShapeReader class for loading JSON shape
documents into domain models.
"""

import json
from collections.abc import Iterator
from pathlib import Path
from typing import Any

from gridgeom.domain.group import ShapeGroup
from gridgeom.domain.shape import Shape45
from gridgeom.exceptions import ShapeDocumentError


class ShapeReader:
    """Loads shape documents and converts them to domain models.

    Example:
        reader = ShapeReader(Path("shapes.json"))
        reader.load()
        for shape in reader.iter_shapes():
            print(shape.num_vertices)
    """

    def __init__(self, path: Path) -> None:
        """Initialize the reader.

        Args:
            path: Path to the JSON shape document
        """
        self._path = path
        self._data: dict[str, Any] | None = None

    def load(self) -> None:
        """Read and parse the document.

        Raises:
            FileNotFoundError: If the document does not exist
            ShapeDocumentError: If the document is not valid JSON or has
                no "shapes" list
        """
        if not self._path.exists():
            raise FileNotFoundError(f"Shape document not found: {self._path}")

        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ShapeDocumentError(str(self._path), f"not valid JSON ({e.msg})") from e

        if not isinstance(data, dict) or not isinstance(data.get("shapes"), list):
            raise ShapeDocumentError(str(self._path), "expected an object with a 'shapes' list")
        self._data = data

    @property
    def shape_count(self) -> int:
        """Number of top-level shapes in the document.

        Raises:
            RuntimeError: If the document has not been loaded yet
        """
        return len(self._require_loaded()["shapes"])

    def iter_shapes(self) -> Iterator[Shape45]:
        """Iterate over top-level shapes in document order.

        Raises:
            RuntimeError: If the document has not been loaded yet
            ShapeDocumentError: If a shape entry is malformed
        """
        for index, entry in enumerate(self._require_loaded()["shapes"]):
            yield self._parse_shape(index, entry)

    def read_group(self) -> ShapeGroup:
        """Load every shape as a ShapeGroup."""
        return ShapeGroup.from_shapes(self.iter_shapes())

    def _parse_shape(self, index: int, entry: Any) -> Shape45:
        try:
            return Shape45.from_dict(entry)
        except (KeyError, TypeError, ValueError) as e:
            raise ShapeDocumentError(str(self._path), f"shape {index} is malformed ({e})") from e

    def _require_loaded(self) -> dict[str, Any]:
        if self._data is None:
            raise RuntimeError("Document not loaded. Call load() first.")
        return self._data

    def __enter__(self) -> "ShapeReader":
        """Context manager entry."""
        self.load()
        return self

    def __exit__(self, _exc_type: object, _exc_val: object, _exc_tb: object) -> None:
        """Context manager exit."""
        self._data = None

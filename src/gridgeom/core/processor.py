"""Batch processing orchestration for shape documents.

This module coordinates the document-level workflows the command line
exposes: validating every shape, triangulating every shape, and combining
two documents with a boolean operation. Shapes are processed one after
another; each outcome is logged and counted so a bad shape never stops
the run.

Key components:
- ShapeProcessor: Main orchestrator class for shape documents
"""

import time
import traceback
from collections.abc import Callable
from pathlib import Path

from gridgeom.config import GridGeomSettings
from gridgeom.core.boolean import BooleanOperation, combine
from gridgeom.domain import ShapeGroup, Triangle
from gridgeom.exceptions import TriangulationError
from gridgeom.io import ShapeReader, ShapeWriter
from gridgeom.utils import ShapeProcessingLogger, ShapeProcessingStats, configure_logging


class ShapeProcessor:
    """Orchestrates validation, triangulation and combination of shape documents.

    Manages the complete workflow:
    1. Load the shape document
    2. Check every shape for validity problems
    3. Triangulate the valid shapes
    4. Collect results and update statistics
    5. Save the result document

    Example:
        settings = GridGeomSettings()
        processor = ShapeProcessor(settings)
        stats = processor.process(
            input_path=Path("shapes.json"),
            output_path=Path("shapes-triangulated.json"),
        )
    """

    def __init__(self, config: GridGeomSettings, quiet: bool = False) -> None:
        """Initialize the processor with configuration.

        Args:
            config: Settings for triangulation, graph building and logging
            quiet: Suppress console logging except errors
        """
        self.config = config
        self.logger = configure_logging(
            log_file=config.logging.log_file,
            console_level=config.logging.log_level,
            file_level=config.logging.file_log_level,
            quiet=quiet,
        )
        self.processing_logger = ShapeProcessingLogger(self.logger)

    @property
    def stats(self) -> ShapeProcessingStats:
        return self.processing_logger.stats

    def load(self, path: Path) -> ShapeGroup:
        """Read a shape document into a group."""
        with ShapeReader(path) as reader:
            group = reader.read_group()
        self.logger.info("Document loaded", input=str(path), shapes=group.num_shapes)
        return group

    def validate(self, group: ShapeGroup) -> dict[int, list[str]]:
        """Check every top-level shape.

        Args:
            group: Shapes to check

        Returns:
            Problems per shape position; valid shapes map to an empty list
        """
        report: dict[int, list[str]] = {}
        for index, shape in enumerate(group):
            problems = [p.value for p in shape.problems()]
            report[index] = problems
            if problems:
                self.processing_logger.log_shape_invalid(index, problems)
        return report

    def triangulate(
        self,
        group: ShapeGroup,
        progress_callback: Callable[[int, int, bool], None] | None = None,
    ) -> dict[int, list[Triangle]]:
        """Triangulate every valid shape of a group.

        Invalid shapes are logged and skipped. A shape whose triangulation
        raises is logged as an error and contributes no triangles.

        Args:
            group: Shapes to triangulate
            progress_callback: Optional callback(completed, total, success)

        Returns:
            Triangles per shape position, for the shapes that succeeded
        """
        stats = self.processing_logger.stats
        stats.start_time = time.time()
        results: dict[int, list[Triangle]] = {}
        total = group.num_shapes

        for index, shape in enumerate(group):
            start = time.time()
            success = False
            self.processing_logger.log_shape_start(index, shape.total_num_vertices)

            problems = shape.problems()
            if problems:
                self.processing_logger.log_shape_invalid(index, [p.value for p in problems])
            else:
                try:
                    triangles = shape.triangles(self.config.triangulation)
                except TriangulationError as e:
                    self.processing_logger.log_shape_error(index, e, traceback.format_exc())
                else:
                    success = True
                    results[index] = triangles
                    self.processing_logger.log_shape_complete(
                        shape_index=index,
                        triangles=len(triangles),
                        duration_ms=(time.time() - start) * 1000,
                    )

            if progress_callback is not None:
                progress_callback(index + 1, total, success)

        stats.end_time = time.time()
        self.processing_logger.log_run_complete("Triangulation complete")
        return results

    def process(
        self,
        input_path: Path,
        output_path: Path | None = None,
        progress_callback: Callable[[int, int, bool], None] | None = None,
    ) -> ShapeProcessingStats:
        """Triangulate a shape document and save shapes plus triangles.

        Args:
            input_path: Shape document to read
            output_path: Result path (auto-generated if None)
            progress_callback: Optional callback(completed, total, success)

        Returns:
            ShapeProcessingStats with counts, timing, and error details

        Raises:
            FileNotFoundError: If the document does not exist
            ShapeDocumentError: If the document is malformed
        """
        if output_path is None:
            output_path = ShapeWriter.get_result_path(input_path, "triangulated")

        group = self.load(input_path)
        results = self.triangulate(group, progress_callback)

        document = ShapeWriter.build_document(group)
        document["triangles"] = {
            str(index): [t.to_dict()["vertices"] for t in triangles]
            for index, triangles in results.items()
        }
        document["errors"] = [
            {"shape": index, "error": message} for index, message in self.stats.errors
        ]
        ShapeWriter(output_path).save_document(document)

        self.logger.info("Result saved", output=str(output_path), shapes=len(results))
        return self.stats

    def combine(
        self,
        first_path: Path,
        second_path: Path,
        operation: BooleanOperation,
        output_path: Path | None = None,
    ) -> ShapeGroup:
        """Combine two shape documents and save the result.

        Args:
            first_path: Document for the first operand
            second_path: Document for the second operand
            operation: Boolean operation to apply
            output_path: Result path (auto-generated if None)

        Returns:
            The combined shapes

        Raises:
            BooleanOperationError: If the result cannot be expressed as shapes
        """
        if output_path is None:
            output_path = ShapeWriter.get_result_path(first_path, operation.value)

        first = self.load(first_path)
        second = self.load(second_path)
        shapes = combine(first.shapes, second.shapes, operation, self.config.graph)
        result = ShapeGroup.from_shapes(shapes)

        ShapeWriter(output_path).save(result)
        self.logger.info(
            "Combination saved",
            operation=operation.value,
            output=str(output_path),
            shapes=result.num_shapes,
        )
        return result

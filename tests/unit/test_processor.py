"""Tests for shape document processing orchestration."""

import json
from pathlib import Path
from unittest.mock import Mock, patch

import pytest

from gridgeom.config import GridGeomSettings
from gridgeom.core.boolean import BooleanOperation
from gridgeom.core.processor import ShapeProcessor
from gridgeom.domain import Shape45, ShapeGroup
from gridgeom.exceptions import TriangulationError


@pytest.fixture
def settings() -> GridGeomSettings:
    return GridGeomSettings()


@pytest.fixture
def processor(settings: GridGeomSettings) -> ShapeProcessor:
    """Processor with logging replaced by a mock."""
    with patch("gridgeom.core.processor.configure_logging") as mock_logging:
        mock_logging.return_value = Mock()
        return ShapeProcessor(settings)


@pytest.fixture
def mixed_group() -> ShapeGroup:
    """A valid square, a bow tie and an unbridgeable shape."""
    square = Shape45.from_coords([(0, 0), (4, 0), (4, 4), (0, 4)])
    bow_tie = Shape45.from_coords([(10, 0), (12, 2), (12, 0), (10, 2)])
    unbridgeable = Shape45.from_coords(
        [(20, 0), (24, 0), (24, 4), (20, 4)],
        Shape45.from_coords([(20, 0), (20, 4), (24, 4), (24, 0)]),
    )
    return ShapeGroup.of(square, bow_tie, unbridgeable)


class TestShapeProcessor:
    """Tests for ShapeProcessor class."""

    def test_init(self, settings: GridGeomSettings):
        """Test processor initialization configures logging."""
        with patch("gridgeom.core.processor.configure_logging") as mock_logging:
            mock_logging.return_value = Mock()
            processor = ShapeProcessor(settings, quiet=True)
        assert processor.config == settings
        assert mock_logging.call_args.kwargs["quiet"] is True
        assert processor.stats.processed_count == 0

    def test_validate(self, processor, mixed_group):
        """Test problems are reported per shape."""
        report = processor.validate(mixed_group)
        assert report[0] == []
        assert "self_intersecting" in report[1]
        assert processor.stats.invalid_count == sum(1 for p in report.values() if p)

    def test_triangulate_counts_outcomes(self, processor):
        """Test valid shapes are triangulated and errors are counted."""
        square = Shape45.from_coords([(0, 0), (4, 0), (4, 4), (0, 4)])
        bow_tie = Shape45.from_coords([(10, 0), (12, 2), (12, 0), (10, 2)])
        progress = Mock()

        results = processor.triangulate(ShapeGroup.of(square, bow_tie), progress)

        assert list(results) == [0]
        assert len(results[0]) == 2
        stats = processor.stats
        assert stats.processed_count == 1
        assert stats.invalid_count == 1
        assert stats.triangles_produced == 2
        assert progress.call_count == 2
        progress.assert_called_with(2, 2, False)
        assert stats.duration_seconds >= 0.0

    def test_triangulation_error_is_logged(self, processor):
        """Test a triangulation failure is recorded without stopping the run."""
        failing = Shape45.from_coords([(0, 0), (4, 0), (4, 4), (0, 4)])
        square = Shape45.from_coords([(10, 0), (12, 0), (12, 2), (10, 2)])
        group = ShapeGroup.of(failing, square)

        with patch.object(Shape45, "problems", return_value=[]):
            with patch.object(Shape45, "triangles", side_effect=[TriangulationError("boom"), []]):
                results = processor.triangulate(group)

        assert results == {1: []}
        assert processor.stats.error_count == 1
        assert processor.stats.errors[0][0] == 0

    def test_process_writes_document(self, processor, tmp_path: Path):
        """Test processing a document end to end."""
        source = tmp_path / "shapes.json"
        group = ShapeGroup.of(
            Shape45.from_coords([(0, 0), (4, 0), (4, 2), (2, 2), (2, 4), (0, 4)]),
            Shape45.from_coords([(10, 0), (12, 2), (12, 0), (10, 2)]),
        )
        source.write_text(json.dumps(group.to_dict()), encoding="utf-8")

        stats = processor.process(source)

        output = tmp_path / "shapes-triangulated.json"
        data = json.loads(output.read_text(encoding="utf-8"))
        assert len(data["shapes"]) == 2
        assert list(data["triangles"]) == ["0"]
        assert len(data["triangles"]["0"]) == 4
        assert data["errors"] == []
        assert stats.processed_count == 1
        assert stats.invalid_count == 1

    def test_combine_writes_result(self, processor, tmp_path: Path):
        """Test combining two documents."""
        first = tmp_path / "a.json"
        second = tmp_path / "b.json"
        first.write_text(
            json.dumps(ShapeGroup.of(Shape45.from_coords([(0, 0), (4, 0), (4, 4), (0, 4)])).to_dict()),
            encoding="utf-8",
        )
        second.write_text(
            json.dumps(ShapeGroup.of(Shape45.from_coords([(2, 2), (6, 2), (6, 6), (2, 6)])).to_dict()),
            encoding="utf-8",
        )

        result = processor.combine(first, second, BooleanOperation.SUBTRACT)

        assert result.num_shapes == 1
        assert result.shape(0).outline.area() == 12.0
        saved = json.loads((tmp_path / "a-subtract.json").read_text(encoding="utf-8"))
        assert ShapeGroup.from_dict(saved) == result

"""Unit tests for Shape45 trees: indexing, validity and edits."""

import pytest

from gridgeom.domain import Line, Pt2D, Pt2Df, Shape45, ShapeProblem, WindingDirection
from gridgeom.exceptions import SubShapeIndexError, VertexIndexError


@pytest.fixture
def island() -> Shape45:
    """A counter-clockwise 2x2 square inside hole A."""
    return Shape45.from_coords([(4, 4), (6, 4), (6, 6), (4, 6)])


@pytest.fixture
def nested(island) -> Shape45:
    """20x20 square with two holes; the first hole holds an island.

    Shape indices: 0 root, 1 hole A, 2 island, 3 hole B.
    Vertex indices: 0-3 root, 4-7 hole A, 8-11 island, 12-15 hole B.
    """
    hole_a = Shape45.from_coords([(2, 2), (2, 8), (8, 8), (8, 2)], island)
    hole_b = Shape45.from_coords([(10, 2), (10, 8), (18, 8), (18, 2)])
    return Shape45.from_coords([(0, 0), (20, 0), (20, 20), (0, 20)], hole_a, hole_b)


# Valid and invalid shapes for properties that must hold either way
SAMPLE_SHAPES = {
    "hole-touching-outline": Shape45.from_coords(
        [(0, 0), (8, 0), (8, 8), (4, 4), (0, 8)],
        Shape45.from_coords([(4, 4), (6, 2), (2, 2)]),
    ),
    "clockwise": Shape45.from_coords([(0, 0), (0, 4), (4, 4), (4, 0)]),
    "bow-tie": Shape45.from_coords([(0, 0), (2, 2), (2, 0), (0, 2)]),
    "shallow-edge": Shape45.from_coords([(0, 0), (4, 1), (0, 4)]),
    "overlapping-holes": Shape45.from_coords(
        [(0, 0), (10, 0), (10, 10), (0, 10)],
        Shape45.from_coords([(1, 1), (1, 5), (5, 5), (5, 1)]),
        Shape45.from_coords([(3, 3), (3, 7), (7, 7), (7, 3)]),
    ),
}


@pytest.fixture(params=["nested", *SAMPLE_SHAPES])
def any_shape(request) -> Shape45:
    if request.param == "nested":
        return request.getfixturevalue("nested")
    return SAMPLE_SHAPES[request.param]


class TestIndexing:
    """Tests for global vertex and shape indices."""

    def test_counts(self, nested):
        """Test recursive counts and depth."""
        assert nested.num_vertices == 4
        assert nested.total_num_vertices == 16
        assert nested.num_sub_shapes == 2
        assert nested.num_shapes_recursive == 4
        assert nested.nested_depth == 2

    def test_vertex_lookup(self, nested):
        """Test depth-first vertex numbering."""
        assert nested.vertex(0) == Pt2D(0, 0)
        assert nested.vertex(4) == Pt2D(2, 2)
        assert nested.vertex(8) == Pt2D(4, 4)
        assert nested.vertex(12) == Pt2D(10, 2)
        assert nested.vertex(15) == Pt2D(18, 2)
        assert list(nested.vertices())[11] == Pt2D(4, 6)

    @pytest.mark.parametrize("index", [-1, 16, 100])
    def test_vertex_out_of_range(self, nested, index):
        """Test direct vertex access raises."""
        with pytest.raises(VertexIndexError):
            nested.vertex(index)

    def test_shape_lookup(self, nested, island):
        """Test pre-order shape numbering."""
        assert nested.sub_shape_recursive(0) is nested
        assert nested.sub_shape_recursive(2) == island
        assert nested.sub_shape_recursive(3).vertex(0) == Pt2D(10, 2)
        with pytest.raises(SubShapeIndexError):
            nested.sub_shape_recursive(4)
        with pytest.raises(SubShapeIndexError):
            nested.sub_shape(2)

    def test_parent_index(self, nested):
        """Test parents of nested shapes."""
        assert nested.parent_index(1) == 0
        assert nested.parent_index(2) == 1
        assert nested.parent_index(3) == 0
        with pytest.raises(SubShapeIndexError):
            nested.parent_index(0)

    def test_vertex_to_shape(self, nested):
        """Test mapping vertex indices to shape indices and back."""
        assert nested.sub_shape_index_for_vertex_index(9) == 2
        assert nested.sub_shape_index_for_vertex_index(7) == 1
        assert nested.vertex_index_range_for_sub_shape(3) == range(12, 16)
        assert nested.shape_for_vertex_index(13).vertex(0) == Pt2D(10, 2)

    def test_vertex_indices_are_consistent(self, nested):
        """Test every vertex index agrees across all lookups."""
        for index in range(nested.total_num_vertices):
            shape_index = nested.sub_shape_index_for_vertex_index(index)
            indices = nested.vertex_index_range_for_sub_shape(shape_index)
            assert index in indices
            shape = nested.shape_for_vertex_index(index)
            assert shape is nested.sub_shape_recursive(shape_index)
            assert shape.outline.vertex(index - indices.start) == nested.vertex(index)

    def test_shape_ranges_partition_vertices(self, nested):
        """Test the per-shape ranges cover every vertex exactly once."""
        covered = []
        for shape_index in range(nested.num_shapes_recursive):
            covered.extend(nested.vertex_index_range_for_sub_shape(shape_index))
        assert covered == list(range(nested.total_num_vertices))

    def test_expected_winding_per_shape(self, nested):
        """Test the expected winding alternates with depth and matches the fixture."""
        for shape_index in range(nested.num_shapes_recursive):
            expected = nested.expected_winding_for_sub_shape(shape_index)
            actual = nested.sub_shape_recursive(shape_index).outline.winding_direction
            assert expected is actual
        assert nested.expected_winding_for_sub_shape(1) is WindingDirection.CLOCKWISE


class TestValidity:
    """Tests for problems() and is_valid()."""

    def test_nested_shape_is_valid(self, nested):
        """Test the fixture is valid."""
        assert nested.problems() == []
        assert nested.is_valid()
        assert nested.is_45_compliant()

    def test_wrong_root_winding(self, nested):
        """Test a clockwise root outline."""
        reversed_shape = nested.reverse_winding()
        assert ShapeProblem.WRONG_WINDING in reversed_shape.problems()
        assert ShapeProblem.INVALID_SUB_SHAPE in reversed_shape.problems()

    def test_wrong_hole_winding(self, nested):
        """Test a counter-clockwise hole invalidates its parent."""
        bad = nested.reverse_sub_shape_winding(3)
        assert bad.problems() == [ShapeProblem.INVALID_SUB_SHAPE]

    def test_too_few_vertices(self):
        """Test a two-vertex outline."""
        shape = Shape45.from_coords([(0, 0), (4, 0)])
        assert ShapeProblem.TOO_FEW_VERTICES in shape.problems()

    def test_not_45_compliant(self):
        """Test a shallow edge."""
        shape = Shape45.from_coords([(0, 0), (4, 1), (0, 4)])
        assert shape.problems() == [ShapeProblem.NOT_45_COMPLIANT]

    def test_duplicate_vertices(self):
        """Test a repeated vertex."""
        shape = Shape45.from_coords([(0, 0), (4, 0), (4, 4), (4, 0), (0, 4)])
        assert ShapeProblem.DUPLICATE_VERTICES in shape.problems()

    def test_self_intersecting(self):
        """Test a bow tie outline."""
        shape = Shape45.from_coords([(0, 0), (2, 2), (2, 0), (0, 2)])
        assert ShapeProblem.SELF_INTERSECTING in shape.problems()

    def test_sub_shapes_intersect(self):
        """Test two holes that overlap."""
        shape = Shape45.from_coords(
            [(0, 0), (10, 0), (10, 10), (0, 10)],
            Shape45.from_coords([(1, 1), (1, 5), (5, 5), (5, 1)]),
            Shape45.from_coords([(3, 3), (3, 7), (7, 7), (7, 3)]),
        )
        assert shape.problems() == [ShapeProblem.SUB_SHAPES_INTERSECT]

    def test_sub_shape_crosses_outline(self):
        """Test a hole poking out of its outline."""
        shape = Shape45.from_coords(
            [(0, 0), (4, 0), (4, 4), (0, 4)],
            Shape45.from_coords([(2, 1), (2, 3), (6, 3), (6, 1)]),
        )
        problems = shape.problems()
        assert ShapeProblem.SUB_SHAPE_CROSSES_OUTLINE in problems
        assert ShapeProblem.SUB_SHAPE_OUTSIDE_OUTLINE in problems

    def test_sub_shape_outside_outline(self):
        """Test a hole entirely outside its outline."""
        shape = Shape45.from_coords(
            [(0, 0), (4, 0), (4, 4), (0, 4)],
            Shape45.from_coords([(6, 1), (6, 3), (8, 3), (8, 1)]),
        )
        assert shape.problems() == [ShapeProblem.SUB_SHAPE_OUTSIDE_OUTLINE]

    def test_hole_touching_outline_vertex(self):
        """Test a hole sharing a vertex with its outline stays valid."""
        shape = Shape45.from_coords(
            [(0, 0), (8, 0), (8, 8), (4, 4), (0, 8)],
            Shape45.from_coords([(4, 4), (6, 2), (2, 2)]),
        )
        assert shape.is_valid()


class TestContainment:
    """Tests for even-odd containment and intersection queries."""

    @pytest.mark.parametrize(
        ("point", "inside"),
        [
            (Pt2D(1, 1), True),
            (Pt2Df(3.5, 3.5), False),
            (Pt2D(5, 5), True),
            (Pt2D(14, 5), False),
            (Pt2D(14, 15), True),
            (Pt2D(25, 5), False),
        ],
    )
    def test_contains(self, nested, point, inside):
        """Test holes are outside and islands inside."""
        assert nested.contains(point) is inside

    def test_intersection_points_with_line(self, nested):
        """Test a horizontal line through both holes."""
        line = Line.of(-1, 5, 21, 5)
        points = nested.intersection_points_45(line)
        xs = sorted(p.x for p in points)
        assert xs == [0.0, 2.0, 4.0, 6.0, 8.0, 10.0, 18.0, 20.0]


class TestEdits:
    """Tests for edits by global index."""

    def test_set_vertex(self, nested):
        """Test replacing a vertex leaves the original untouched."""
        edited = nested.set_vertex(9, 5, 4)
        assert edited.vertex(9) == Pt2D(5, 4)
        assert nested.vertex(9) == Pt2D(6, 4)
        assert edited.sub_shapes[1] is nested.sub_shapes[1]

    @pytest.mark.parametrize("index", range(16))
    def test_set_vertex_then_lookup(self, nested, index):
        """Test an edit at any global index is what lookup returns there."""
        edited = nested.set_vertex(index, 30, 40 + index)
        assert edited.vertex(index) == Pt2D(30, 40 + index)
        assert edited.total_num_vertices == nested.total_num_vertices
        for other in range(nested.total_num_vertices):
            if other != index:
                assert edited.vertex(other) == nested.vertex(other)

    @pytest.mark.parametrize("index", range(16))
    def test_shift_vertex_then_lookup(self, nested, index):
        """Test a shift at any global index moves only that vertex."""
        edited = nested.shift_vertex(index, 1, -1)
        assert edited.vertex(index) == nested.vertex(index).shift(1, -1)
        assert edited.shape_for_vertex_index(index).num_vertices == (
            nested.shape_for_vertex_index(index).num_vertices
        )

    def test_out_of_range_edit_is_noop(self, nested):
        """Test edits outside the index range return the same shape."""
        assert nested.set_vertex(99, 1, 1) is nested
        assert nested.shift_vertex(-1, 1, 1) is nested
        assert nested.delete_vertex(16) is nested
        assert nested.shift_sub_shape(4, 1, 1) is nested

    def test_shift_vertex(self, nested):
        """Test moving a vertex by an offset."""
        assert nested.shift_vertex(14, 1, 2).vertex(14) == Pt2D(19, 10)

    def test_delete_vertex(self, nested):
        """Test removing a vertex shifts later indices down."""
        edited = nested.delete_vertex(12)
        assert edited.total_num_vertices == 15
        assert edited.vertex(12) == Pt2D(10, 8)

    def test_add_vertex_after(self, nested):
        """Test inserting an edge midpoint."""
        edited = nested.add_vertex_after(0)
        assert edited.total_num_vertices == 17
        assert edited.vertex(1) == Pt2D(10, 0)
        assert edited.vertex(2) == Pt2D(20, 0)

    def test_add_vertex_after_avoids_duplicates(self):
        """Test the midpoint moves up until it is unique."""
        shape = Shape45.from_coords(
            [(0, 0), (4, 0), (4, 4), (0, 4)],
            Shape45.from_coords([(2, 0), (1, 1), (2, 1)]),
        )
        assert shape.add_vertex_after(0).vertex(1) == Pt2D(2, 2)

    def test_shift_sub_shape_moves_descendants(self, nested):
        """Test shifting a hole moves its island too."""
        edited = nested.shift_sub_shape(1, 1, 1)
        assert edited.vertex(4) == Pt2D(3, 3)
        assert edited.vertex(8) == Pt2D(5, 5)
        assert edited.vertex(12) == Pt2D(10, 2)

    def test_delete_sub_shape(self, nested):
        """Test deleting a hole deletes its island."""
        edited = nested.delete_sub_shape_recursive(1)
        assert edited.num_shapes_recursive == 2
        assert edited.vertex(4) == Pt2D(10, 2)
        assert nested.delete_sub_shape_recursive(0) is None

    def test_add_sub_shape(self, nested, island):
        """Test appending a sub-shape at a global shape index."""
        edited = nested.add_sub_shape_recursive(3, island.shift(8, 0))
        assert edited.num_shapes_recursive == 5
        assert edited.parent_index(4) == 3
        assert edited.vertex_index_range_for_sub_shape(4) == range(16, 20)

    def test_rotate_sub_shape_vertex_order(self, nested):
        """Test re-basing one outline."""
        edited = nested.rotate_sub_shape_outline_vertex_order(3)
        assert edited.vertex(12) == Pt2D(10, 8)
        assert edited.vertex(15) == Pt2D(10, 2)

    def test_whole_shape_transforms(self, nested):
        """Test transforms reach every nested outline."""
        assert nested.shift(1, 0).vertex(8) == Pt2D(5, 4)
        rotated = nested.rotate90(0, 0)
        assert rotated.is_valid()
        assert rotated.vertex(1) == Pt2D(0, -20)
        mirrored = nested.reflect_y(10)
        assert mirrored.outline.winding_direction is WindingDirection.CLOCKWISE


class TestTransformProperties:
    """Tests for properties transforms keep on valid and invalid shapes."""

    @pytest.mark.parametrize(("dx", "dy"), [(0, 0), (3, -2)])
    def test_shift_keeps_validity(self, any_shape, dx, dy):
        """Test moving a shape does not change its problems."""
        shifted = any_shape.shift(dx, dy)
        assert shifted.is_valid() == any_shape.is_valid()
        assert shifted.problems() == any_shape.problems()

    def test_zero_shift_is_identity(self, any_shape):
        """Test a zero offset returns an equal shape."""
        assert any_shape.shift(0, 0) == any_shape

    def test_double_reverse_restores_outlines(self, any_shape):
        """Test reversing every outline twice gives the original sequences."""
        restored = any_shape.reverse_winding().reverse_winding()
        assert restored == any_shape
        assert [p.vertices for p in restored.polygons()] == [
            p.vertices for p in any_shape.polygons()
        ]


class TestSerialization:
    """Tests for to_dict/from_dict."""

    def test_roundtrip(self, nested):
        """Test the tree survives serialization."""
        data = nested.to_dict()
        assert data["outline"][1] == [20, 0]
        assert len(data["sub_shapes"]) == 2
        assert Shape45.from_dict(data) == nested

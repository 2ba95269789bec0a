"""Unit tests for the intersection graph."""

import itertools

import pytest

from gridgeom.config import GraphConfig
from gridgeom.core.digraph import IntersectionGraph
from gridgeom.domain import Line, Polygon, Pt2D, Pt2Df
from gridgeom.exceptions import SelfConnectionError


def edge_set(graph: IntersectionGraph) -> set[tuple[Pt2Df, Pt2Df]]:
    return {(c.line.start, c.line.end) for c in graph.connections()}


def labelled_edges(graph: IntersectionGraph) -> set[tuple[Pt2Df, Pt2Df, frozenset[int]]]:
    return {(c.line.start, c.line.end, frozenset(c.shape_ids)) for c in graph.connections()}


@pytest.fixture
def cross() -> IntersectionGraph:
    """A horizontal and a vertical line crossing at (7, 6)."""
    graph = IntersectionGraph()
    graph.insert_line(Pt2D(2, 6), Pt2D(10, 6), 0)
    graph.insert_line(Pt2D(7, 3), Pt2D(7, 9), 1)
    return graph


class TestInsertion:
    """Tests for insert_line."""

    def test_disjoint_lines(self):
        """Test lines that do not meet keep their own nodes."""
        graph = IntersectionGraph()
        graph.insert_line(Pt2D(0, 0), Pt2D(2, 0), 0)
        graph.insert_line(Pt2D(0, 1), Pt2D(2, 1), 0)
        assert graph.num_nodes == 4
        assert graph.num_connections == 2

    def test_crossing_lines_split(self, cross):
        """Test both lines are split at the crossing."""
        assert cross.num_nodes == 5
        assert cross.num_connections == 4
        assert cross.contains(Pt2D(7, 6))
        assert cross.is_connected(Pt2D(2, 6), Pt2D(7, 6))
        assert cross.is_connected(Pt2D(7, 6), Pt2D(10, 6))
        assert cross.is_connected(Pt2D(7, 3), Pt2D(7, 6))
        assert not cross.is_connected(Pt2D(2, 6), Pt2D(10, 6))
        assert cross.is_connected_backward(Pt2D(7, 6), Pt2D(2, 6))

    def test_split_keeps_shape_ids(self, cross):
        """Test each half carries the id of the line it came from."""
        assert cross.connection(Pt2D(2, 6), Pt2D(7, 6)).shape_ids == {0}
        assert cross.connection(Pt2D(7, 6), Pt2D(7, 9)).shape_ids == {1}

    def test_node_links(self, cross):
        """Test forward and backward handles of the crossing node."""
        node = cross.node_at(Pt2D(7, 6))
        assert node is not None
        assert len(node.forward) == 2
        assert len(node.backward) == 2
        assert cross.node_at(Pt2D(0, 0)) is None

    def test_insertion_order_does_not_matter(self, cross):
        """Test inserting the lines the other way round gives the same graph."""
        other = IntersectionGraph()
        other.insert_line(Pt2D(7, 3), Pt2D(7, 9), 1)
        other.insert_line(Pt2D(2, 6), Pt2D(10, 6), 0)
        assert edge_set(other) == edge_set(cross)

    @pytest.mark.parametrize(
        "segments",
        [
            pytest.param([((0, 0), (3, 3)), ((0, 3), (3, 0))], id="diagonal-x-diagonal"),
            pytest.param([((0, 0), (4, 4)), ((0, 4), (4, 0))], id="diagonals-on-grid"),
            pytest.param([((0, 0), (4, 4)), ((4, 0), (4, 6))], id="diagonal-x-vertical"),
            pytest.param([((0, 0), (4, 0)), ((2, 0), (2, 3))], id="t-junction"),
            pytest.param([((0, 0), (4, 4)), ((2, 2), (5, -1))], id="diagonal-t-junction"),
            pytest.param([((0, 0), (4, 0)), ((2, 0), (6, 0))], id="collinear-overlap"),
            pytest.param([((0, 0), (6, 0)), ((2, 0), (4, 0))], id="collinear-contained"),
            pytest.param([((0, 0), (4, 4)), ((2, 2), (6, 6))], id="diagonal-overlap"),
            pytest.param([((0, 0), (4, 0)), ((4, 0), (0, 0))], id="same-segment-reversed"),
            pytest.param(
                [((0, 0), (4, 4)), ((0, 2), (4, 2)), ((2, 0), (2, 4))], id="three-through-one-point"
            ),
            pytest.param(
                [((0, 0), (6, 0)), ((2, 0), (4, 0)), ((3, -2), (3, 2))], id="overlap-and-crossing"
            ),
        ],
    )
    def test_any_insertion_order_gives_same_graph(self, segments):
        """Test every insertion order yields the same edges with the same ids."""
        graphs = []
        for order in itertools.permutations(range(len(segments))):
            graph = IntersectionGraph()
            for shape_id in order:
                (x1, y1), (x2, y2) = segments[shape_id]
                graph.insert_line(Pt2D(x1, y1), Pt2D(x2, y2), shape_id)
            graphs.append(graph)
        first = labelled_edges(graphs[0])
        for graph in graphs[1:]:
            assert labelled_edges(graph) == first
            assert graph.num_nodes == graphs[0].num_nodes

    def test_t_junction(self):
        """Test a line ending on another splits only the other."""
        graph = IntersectionGraph()
        graph.insert_line(Pt2D(0, 0), Pt2D(4, 0), 0)
        graph.insert_line(Pt2D(2, 0), Pt2D(2, 3), 1)
        assert graph.num_nodes == 4
        assert graph.num_connections == 3
        assert graph.is_connected(Pt2D(0, 0), Pt2D(2, 0))

    def test_diagonals_on_half_grid(self):
        """Test diagonal crossings may create half-integer nodes."""
        graph = IntersectionGraph()
        graph.insert_line(Pt2D(0, 0), Pt2D(3, 3), 0)
        graph.insert_line(Pt2D(0, 3), Pt2D(3, 0), 1)
        assert graph.contains(Pt2Df(1.5, 1.5))

    def test_non_45_lines(self):
        """Test the general intersection is used for other slopes."""
        graph = IntersectionGraph()
        graph.insert_line(Pt2D(0, 0), Pt2D(2, 4), 0)
        graph.insert_line(Pt2D(0, 4), Pt2D(2, 0), 1)
        assert graph.num_nodes == 5
        assert graph.contains(Pt2D(1, 2))

    def test_self_connection(self):
        """Test a zero-length line is refused."""
        graph = IntersectionGraph()
        with pytest.raises(SelfConnectionError):
            graph.insert_line(Pt2D(1, 1), Pt2D(1, 1), 0)


class TestCollinearOverlap:
    """Tests for coincident segments."""

    def test_overlap_shares_connection(self):
        """Test the shared stretch carries both ids."""
        graph = IntersectionGraph()
        graph.insert_line(Pt2D(0, 0), Pt2D(4, 0), 0)
        graph.insert_line(Pt2D(2, 0), Pt2D(6, 0), 1)
        assert graph.num_nodes == 4
        assert graph.num_connections == 3
        assert graph.connection(Pt2D(0, 0), Pt2D(2, 0)).shape_ids == {0}
        assert graph.connection(Pt2D(2, 0), Pt2D(4, 0)).shape_ids == {0, 1}
        assert graph.connection(Pt2D(4, 0), Pt2D(6, 0)).shape_ids == {1}

    def test_opposite_directions_stay_separate(self):
        """Test a shared edge traversed both ways keeps two connections."""
        graph = IntersectionGraph()
        graph.add_polygon(Polygon.from_coords([(0, 0), (4, 0), (4, 4), (0, 4)]), 0)
        graph.add_polygon(Polygon.from_coords([(4, 0), (8, 0), (8, 4), (4, 4)]), 1)
        assert graph.num_nodes == 6
        assert graph.connection(Pt2D(4, 0), Pt2D(4, 4)).shape_ids == {0}
        assert graph.connection(Pt2D(4, 4), Pt2D(4, 0)).shape_ids == {1}

    def test_overlap_splitting_can_be_disabled(self):
        """Test coincident segments are left alone when configured."""
        graph = IntersectionGraph(GraphConfig(split_collinear_overlaps=False))
        graph.insert_line(Pt2D(0, 0), Pt2D(4, 0), 0)
        graph.insert_line(Pt2D(2, 0), Pt2D(6, 0), 1)
        assert graph.num_connections == 2


class TestRemoval:
    """Tests for node removal and dumps."""

    def test_remove_node(self, cross):
        """Test removing the crossing removes every connection through it."""
        assert cross.remove(Pt2D(7, 6))
        assert cross.num_nodes == 4
        assert cross.num_connections == 0
        for node in cross.nodes():
            assert not node.forward and not node.backward
        assert not cross.remove(Pt2D(7, 6))

    def test_add_line_and_str(self):
        """Test the text dump."""
        graph = IntersectionGraph()
        graph.add_line(Line.of(0, 0, 2, 0), 3)
        dump = str(graph)
        assert dump.startswith("IntersectionGraph: 2 nodes")
        assert "ids=[3]" in dump

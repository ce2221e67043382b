"""Tests for Eulerian predicates, mixed-graph orientation and Euler tours."""

import logging
import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from arcgraph.data import GraphKind  # noqa: E402
from arcgraph.euler import (  # noqa: E402
    direct_undirected_cycles,
    euler_tour,
    is_eulerian,
    is_strongly_eulerian,
)
from arcgraph.exceptions import InvalidGraphError  # noqa: E402
from arcgraph.graph import Graph  # noqa: E402
from arcgraph.utils import validate_tour  # noqa: E402


def _triangle(kind=GraphKind.UNDIRECTED) -> Graph:
    graph = Graph(kind, n=3)
    graph.add_link(1, 2, 1)
    graph.add_link(2, 3, 1)
    graph.add_link(3, 1, 1)
    return graph


def _bowtie_mixed() -> Graph:
    # Two triangles sharing vertex 1: one of arcs, one of edges.
    graph = Graph(GraphKind.MIXED, n=5)
    graph.add_link(1, 2, 1, directed=True)
    graph.add_link(2, 3, 1, directed=True)
    graph.add_link(3, 1, 1, directed=True)
    graph.add_link(1, 4, 2)
    graph.add_link(4, 5, 2)
    graph.add_link(5, 1, 2)
    return graph


class TestPredicates:
    """Degree-based Eulerian checks."""

    def test_undirected_even_degrees(self):
        """Test an undirected cycle is Eulerian and a path is not."""
        assert is_eulerian(_triangle())
        path = Graph(GraphKind.UNDIRECTED, n=3)
        path.add_link(1, 2, 1)
        path.add_link(2, 3, 1)
        assert not is_eulerian(path)

    def test_directed_balance(self):
        """Test directed graphs need in-degree equal to out-degree."""
        assert is_eulerian(_triangle(GraphKind.DIRECTED))
        graph = _triangle(GraphKind.DIRECTED)
        graph.add_link(1, 2, 1)
        assert not is_eulerian(graph)

    def test_windy_uses_undirected_degrees(self):
        """Test windy graphs only need even degrees."""
        graph = Graph(GraphKind.WINDY, n=2)
        graph.add_link(1, 2, 1, reverse_cost=4)
        graph.add_link(2, 1, 3, reverse_cost=2)
        assert is_eulerian(graph)

    def test_strongly_eulerian_mixed(self):
        """Test even and balanced vertices make a mixed graph strongly Eulerian."""
        graph = _bowtie_mixed()
        assert is_strongly_eulerian(graph)
        assert is_eulerian(graph)

    def test_odd_edge_degree_fails(self):
        """Test one odd undirected degree fails the strong condition."""
        graph = _bowtie_mixed()
        graph.add_link(2, 4, 1)
        assert not is_strongly_eulerian(graph)

    def test_unbalanced_arcs_fail(self):
        """Test a vertex with unequal in and out arcs fails the strong condition."""
        graph = _bowtie_mixed()
        graph.add_link(1, 3, 1, directed=True)
        graph.add_link(3, 2, 1, directed=True)
        assert not is_strongly_eulerian(graph)

    def test_detached_vertex_warns(self, caplog):
        """Test an isolated vertex is rejected with a warning."""
        graph = _bowtie_mixed()
        graph.add_vertex()

        with caplog.at_level(logging.WARNING, logger="arcgraph.euler"):
            assert not is_strongly_eulerian(graph)
        assert any("detached" in record.getMessage() for record in caplog.records)


class TestDirectUndirectedCycles:
    """Orienting the edges of a strongly Eulerian mixed graph."""

    def test_orientation_is_balanced(self):
        """Test the result is directed, balanced and keeps every link."""
        graph = _bowtie_mixed()
        directed = direct_undirected_cycles(graph)

        assert directed.kind is GraphKind.DIRECTED
        assert directed.num_links == graph.num_links
        assert all(v.in_degree == v.out_degree for v in directed.vertices)

    def test_match_ids_point_back(self):
        """Test every arc remembers the mixed link it was made from."""
        graph = _bowtie_mixed()
        directed = direct_undirected_cycles(graph)

        assert sorted(link.match_id for link in directed.links) == [1, 2, 3, 4, 5, 6]
        for link in directed.links:
            original = graph.link(link.match_id)
            assert set(link.endpoint_ids) == set(original.endpoint_ids)
            assert link.cost == original.cost
            if original.directed:
                assert link.endpoint_ids == original.endpoint_ids

    def test_shares_context_and_depot(self):
        """Test the reduction keeps the identity context and depot."""
        graph = _bowtie_mixed()
        graph.depot_id = 4
        directed = direct_undirected_cycles(graph)
        assert directed.context is graph.context
        assert directed.depot_id == 4

    def test_rejects_other_kinds(self):
        """Test only strongly Eulerian mixed graphs are accepted."""
        with pytest.raises(InvalidGraphError):
            direct_undirected_cycles(_triangle())
        graph = _bowtie_mixed()
        graph.add_link(2, 4, 1)
        with pytest.raises(InvalidGraphError):
            direct_undirected_cycles(graph)


class TestEulerTour:
    """Closed walks through every link."""

    def test_triangle_tour(self):
        """Test the undirected triangle is toured in link order."""
        assert euler_tour(_triangle()) == [1, 2, 3]

    def test_directed_figure_eight(self):
        """Test sub-circuits are spliced into the main trail."""
        graph = Graph(GraphKind.DIRECTED, n=3)
        graph.add_link(1, 2, 1)
        graph.add_link(2, 1, 1)
        graph.add_link(2, 3, 1)
        graph.add_link(3, 2, 1)

        tour = euler_tour(graph)
        assert len(tour) == 4
        assert validate_tour(graph, tour)

    def test_tour_starts_at_depot(self):
        """Test the walk starts and ends at the depot."""
        graph = _triangle()
        graph.depot_id = 2
        tour = euler_tour(graph)
        assert validate_tour(graph, tour)
        assert 2 in graph.link(tour[0]).endpoint_ids

    def test_mixed_tour_maps_to_original_ids(self):
        """Test mixed tours are reported in the mixed graph's link ids."""
        graph = _bowtie_mixed()
        tour = euler_tour(graph)
        assert sorted(tour) == [1, 2, 3, 4, 5, 6]
        assert validate_tour(graph, tour)

    def test_self_loops(self):
        """Test self-loops are traversed once."""
        graph = Graph(GraphKind.UNDIRECTED, n=2)
        graph.add_link(1, 1, 1)
        graph.add_link(1, 2, 1)
        graph.add_link(2, 1, 1)

        tour = euler_tour(graph)
        assert sorted(tour) == [1, 2, 3]
        assert validate_tour(graph, tour)

    def test_empty_graph(self):
        """Test a graph without links has an empty tour."""
        assert euler_tour(Graph(GraphKind.UNDIRECTED, n=3)) == []

    def test_non_eulerian_rejected(self):
        """Test odd degrees are rejected before any walking."""
        graph = Graph(GraphKind.UNDIRECTED, n=2)
        graph.add_link(1, 2, 1)
        with pytest.raises(InvalidGraphError, match="not Eulerian"):
            euler_tour(graph)

    def test_links_unreachable_from_depot(self):
        """Test a second component of links makes the tour fail."""
        graph = _triangle()
        for _ in range(3):
            graph.add_vertex()
        graph.add_link(4, 5, 1)
        graph.add_link(5, 6, 1)
        graph.add_link(6, 4, 1)

        with pytest.raises(InvalidGraphError, match="reachable from depot"):
            euler_tour(graph)

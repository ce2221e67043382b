"""Tests for core data structures and options."""

import math
import sys
from pathlib import Path

import numpy as np
import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from arcgraph.data import (  # noqa: E402
    AllPairsResult,
    Components,
    FlowOptions,
    GraphKind,
    IdentityContext,
    LinkKind,
    ShortestPathResult,
)
from arcgraph.exceptions import InvalidGraphError, SolverConfigurationError  # noqa: E402
from arcgraph.graph import Graph  # noqa: E402


def test_identity_context_is_isolated():
    """Test that separate contexts issue independent guid sequences."""
    first = IdentityContext()
    second = IdentityContext(start=10)

    assert [first.next_guid() for _ in range(3)] == [1, 2, 3]
    assert second.next_guid() == 10
    assert first.next_guid() == 4


def test_link_kind_derived_from_fields():
    """Test that LinkKind follows directedness and reverse cost."""
    mixed = Graph(GraphKind.MIXED, n=2)
    windy = Graph(GraphKind.WINDY, n=2)

    assert mixed.add_link(1, 2, 3).kind is LinkKind.EDGE
    assert mixed.add_link(1, 2, 3, directed=True).kind is LinkKind.ARC
    assert windy.add_link(1, 2, 3, reverse_cost=5).kind is LinkKind.WINDY


def test_cost_from_uses_reverse_cost_from_head():
    """Test that windy links charge the reverse cost when leaving the head."""
    graph = Graph(GraphKind.WINDY, n=2)
    link = graph.add_link(1, 2, 3, reverse_cost=7)

    assert link.cost_from(1) == 3
    assert link.cost_from(2) == 7
    assert link.other(1) == 2
    assert link.other(2) == 1


def test_vertex_delta_and_demand_state():
    """Test degree bookkeeping and the unset demand state."""
    graph = Graph(GraphKind.DIRECTED, n=2)
    graph.add_link(1, 2, 1)
    graph.add_link(1, 2, 1)

    assert graph.vertex(1).delta == 2
    assert graph.vertex(2).delta == -2
    assert not graph.vertex(1).is_demand_set
    graph.vertex(1).demand = 0
    assert graph.vertex(1).is_demand_set


def test_shortest_path_result_path_to():
    """Test reconstructing a path from predecessor labels."""
    result = ShortestPathResult(
        source=1,
        dist=[math.inf, 0, 4, 9, math.inf],
        path=[0, 0, 1, 2, 0],
        edge_path=[0, 0, 7, 8, 0],
    )

    assert result.path_to(3) == ([1, 2, 3], [7, 8])
    assert result.path_to(1) == ([1], [])
    assert result.path_to(4) == ([], [])


def test_path_to_rejects_predecessor_cycle():
    """Test that labels looping between two vertices raise instead of truncating."""
    result = ShortestPathResult(
        source=1,
        dist=[math.inf, 0, 4, 9],
        path=[0, 0, 3, 2],
        edge_path=[0, 0, 5, 6],
    )

    with pytest.raises(InvalidGraphError, match="do not lead from 1 to 3"):
        result.path_to(3)


def test_path_to_on_width_labels():
    """Test that infinite source width and -inf unreachable widths reconstruct correctly."""
    result = ShortestPathResult(
        source=1,
        dist=[-math.inf, math.inf, 6, -math.inf],
        path=[0, 0, 1, 0],
        edge_path=[0, 0, 4, 0],
    )

    assert result.path_to(1) == ([1], [])
    assert result.path_to(2) == ([1, 2], [4])
    assert result.path_to(3) == ([], [])


def test_all_pairs_result_size():
    """Test AllPairsResult reports its vertex count."""
    result = AllPairsResult(
        dist=np.zeros((4, 4)),
        path=np.zeros((4, 4), dtype=np.int64),
        edge_path=np.zeros((4, 4), dtype=np.int64),
    )
    assert result.n == 3


def test_components_members():
    """Test grouping vertices by component index."""
    components = Components(count=2, component=[0, 1, 2, 1])
    assert components.members() == {1: [1, 3], 2: [2]}


def test_flow_options_defaults():
    """Test FlowOptions defaults."""
    options = FlowOptions()
    assert options.potential_algorithm == "slf"
    assert options.max_augmentations is None
    assert options.method == "successive_shortest_paths"


@pytest.mark.parametrize("algorithm", ["slf", "pape", "bellman_ford"])
def test_flow_options_accepts_label_correcting_algorithms(algorithm):
    """Test every label-correcting algorithm is accepted for potentials."""
    assert FlowOptions(potential_algorithm=algorithm).potential_algorithm == algorithm


@pytest.mark.parametrize("limit", [0, -3])
def test_flow_options_rejects_non_positive_limits(limit):
    """Test that max_augmentations must be positive."""
    with pytest.raises(SolverConfigurationError, match="max_augmentations must be positive"):
        FlowOptions(max_augmentations=limit)


def test_flow_options_rejects_unknown_method():
    """Test that only the supported flow engines can be selected."""
    assert FlowOptions(method="cycle_canceling").method == "cycle_canceling"
    with pytest.raises(SolverConfigurationError, match="Invalid flow method 'network_simplex'"):
        FlowOptions(method="network_simplex")

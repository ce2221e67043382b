"""Tests for progress callbacks and logging during solver execution."""

import logging
import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from arcgraph import (  # noqa: E402
    FlowOptions,
    Graph,
    GraphKind,
    InfeasibleProblemError,
    ProgressInfo,
    solve_min_cost_flow,
)


def _parallel_routes(routes: int) -> Graph:
    """Supply of `routes` units with one unit-capacity arc per route, costs 1..routes."""
    graph = Graph(GraphKind.DIRECTED, n=2)
    graph.vertex(1).demand = routes
    graph.vertex(2).demand = -routes
    for cost in range(1, routes + 1):
        graph.add_link(1, 2, cost, capacity=1)
    return graph


def test_progress_callback_called():
    """Test that progress callback is invoked during solve."""
    progress_calls = []

    def callback(info: ProgressInfo) -> None:
        progress_calls.append(info)

    result = solve_min_cost_flow(_parallel_routes(3), progress_callback=callback, progress_interval=1)

    assert result.status == "optimal"
    assert len(progress_calls) == 3


def test_progress_info_fields():
    """Test that ProgressInfo reports routed supply and running cost."""
    progress_calls = []

    def callback(info: ProgressInfo) -> None:
        progress_calls.append(info)

    solve_min_cost_flow(_parallel_routes(3), progress_callback=callback)

    assert [info.iteration for info in progress_calls] == [1, 2, 3]
    assert [info.routed for info in progress_calls] == [1, 2, 3]
    assert [info.objective_estimate for info in progress_calls] == [1, 3, 6]
    assert all(info.total_supply == 3 for info in progress_calls)
    assert all(info.elapsed_time >= 0 for info in progress_calls)


def test_progress_interval():
    """Test that progress_interval controls callback frequency."""
    progress_calls = []

    def callback(info: ProgressInfo) -> None:
        progress_calls.append(info)

    solve_min_cost_flow(_parallel_routes(6), progress_callback=callback, progress_interval=4)

    assert [info.iteration for info in progress_calls] == [4]


def test_no_callback_when_nothing_to_route():
    """Test the trivial exit never reports progress."""
    progress_calls = []
    graph = Graph(GraphKind.DIRECTED, n=2)
    graph.add_link(1, 2, 1)

    solve_min_cost_flow(graph, progress_callback=progress_calls.append)
    assert progress_calls == []


def test_info_logging_on_solve(caplog):
    """Test that solver start and finish are logged at INFO level."""
    with caplog.at_level(logging.INFO, logger="arcgraph"):
        solve_min_cost_flow(_parallel_routes(2))

    messages = [record.getMessage() for record in caplog.records]
    assert "Starting successive shortest paths solver" in messages
    assert "Successive shortest paths solver finished" in messages

    finished = next(r for r in caplog.records if r.getMessage().endswith("finished"))
    assert finished.status == "optimal"
    assert finished.iterations == 2
    assert finished.objective == 3


def test_debug_logging_per_augmentation(caplog):
    """Test that each augmentation is logged at DEBUG level."""
    with caplog.at_level(logging.DEBUG, logger="arcgraph.successive_paths"):
        solve_min_cost_flow(_parallel_routes(2))

    augmentations = [r for r in caplog.records if r.getMessage() == "Augmented along shortest path"]
    assert [r.iteration for r in augmentations] == [1, 2]


def test_warning_logged_on_iteration_limit(caplog):
    """Test that stopping at the augmentation limit logs a warning."""
    with caplog.at_level(logging.WARNING, logger="arcgraph"):
        result = solve_min_cost_flow(_parallel_routes(3), FlowOptions(max_augmentations=2))

    assert result.status == "iteration_limit"
    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert len(warnings) == 1
    assert warnings[0].routed == 2


def test_error_logged_before_raising(caplog):
    """Test that infeasibility is logged at ERROR level before the exception propagates."""
    graph = _parallel_routes(2)
    graph.vertex(2).demand = -1

    with caplog.at_level(logging.ERROR, logger="arcgraph"):
        with pytest.raises(InfeasibleProblemError, match="sum to zero"):
            solve_min_cost_flow(graph)

    assert any(r.levelno == logging.ERROR and getattr(r, "imbalance", None) == 1 for r in caplog.records)

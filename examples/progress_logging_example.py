"""Example demonstrating progress callbacks and logging for min-cost flow solves."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from arcgraph import Graph, GraphKind, ProgressInfo, solve_min_cost_flow  # noqa: E402


def build_transport_graph(suppliers: int = 10, customers: int = 10) -> Graph:
    """Suppliers 1..S ship 20 units each to customers S+1..S+C through capacitated arcs."""
    graph = Graph(GraphKind.DIRECTED, n=suppliers + customers)
    for i in range(1, suppliers + 1):
        graph.vertex(i).demand = 20
    per_customer = 20 * suppliers // customers
    for j in range(suppliers + 1, suppliers + customers + 1):
        graph.vertex(j).demand = -per_customer
    for i in range(1, suppliers + 1):
        for j in range(suppliers + 1, suppliers + customers + 1):
            cost = abs(i - (j - suppliers)) + 1  # Cost increases with distance
            graph.add_link(i, j, cost, capacity=7)
    return graph


def main() -> None:
    """Demonstrate progress reporting during successive shortest path augmentation."""

    print("=" * 70)
    print("PROGRESS LOGGING DEMONSTRATION")
    print("=" * 70)

    graph = build_transport_graph()
    print(f"\n  Vertices: {graph.num_vertices}")
    print(f"  Arcs: {graph.num_links}")

    last_percent = -1

    def progress_callback(info: ProgressInfo) -> None:
        nonlocal last_percent
        percent = int(100 * info.routed / info.total_supply)

        # Only print when percentage changes to avoid too much output
        if percent != last_percent:
            last_percent = percent
            print(
                f"\rRouted: {percent:3d}% | "
                f"Augmentations: {info.iteration:5d} | "
                f"Cost so far: {info.objective_estimate:8d} | "
                f"Time: {info.elapsed_time:6.2f}s",
                end="",
                flush=True,
            )

    print("\nSolving with progress logging...")
    print("-" * 70)

    result = solve_min_cost_flow(graph, progress_callback=progress_callback, progress_interval=5)

    print()  # New line after progress bar
    print("-" * 70)

    print("\nSolution found:")
    print(f"  Status: {result.status}")
    print(f"  Objective: {result.objective}")
    print(f"  Augmentations: {result.iterations}")
    print(f"  Non-zero flows: {sum(1 for flow in result.flows.values() if flow)}")

    print("\nThe same solve with INFO logging enabled:")
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    solve_min_cost_flow(graph)


if __name__ == "__main__":
    main()

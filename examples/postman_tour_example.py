"""Example script building a directed postman tour from min-cost flow and an Euler tour."""

from __future__ import annotations

import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from arcgraph import (  # noqa: E402
    Graph,
    GraphKind,
    add_flow_copies,
    balance_demands,
    euler_tour,
    solve_min_cost_flow,
)


def main() -> None:
    graph = Graph(GraphKind.DIRECTED, n=3)
    for tail, head, cost in [(1, 2, 10), (2, 1, 20), (2, 3, 5), (3, 1, 7), (2, 3, 8)]:
        graph.add_link(tail, head, cost)

    demands = balance_demands(graph)
    result = solve_min_cost_flow(graph)
    augmented = add_flow_copies(graph, result)
    tour = euler_tour(augmented)

    print(f"Demands: {demands}")
    print(f"Balancing flow: status={result.status}, objective={result.objective}")

    # Node potentials double as shortest path distances from the supply side
    if result.potentials:
        print("\nNode potentials:")
        for vertex_id, potential in sorted(result.potentials.items()):
            print(f"  {vertex_id}: {potential}")

    print(f"\nTour from depot {graph.depot_id}:")
    for link_id in tour:
        link = augmented.link(link_id)
        copy = " (copy)" if not link.required else ""
        print(f"  {link.tail.id} -> {link.head.id}  cost {link.cost}  arc {link.match_id}{copy}")
    print(f"Total cost: {sum(augmented.link(link_id).cost for link_id in tour)}")


if __name__ == "__main__":
    main()

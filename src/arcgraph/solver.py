"""Public solver entrypoints."""

from __future__ import annotations

from .cycle_canceling import CycleCanceling
from .data import FlowOptions, FlowResult, ProgressCallback
from .exceptions import SolverConfigurationError
from .graph import Graph
from .successive_paths import SuccessiveShortestPaths


def solve_min_cost_flow(
    graph: Graph,
    options: FlowOptions | None = None,
    progress_callback: ProgressCallback | None = None,
    progress_interval: int = 1,
) -> FlowResult:
    """Solve a minimum-cost flow problem.

    The default engine augments along successive shortest paths under node
    potentials; ``FlowOptions(method="cycle_canceling")`` routes a feasible flow
    first and then cancels negative residual cycles.

    Vertex demands are read from ``Vertex.demand``: positive values are supply,
    negative values are demand, and vertices without a demand are transit
    vertices. Link capacities of None are unbounded. Arc costs may be negative
    as long as no negative cycle is reachable from a supply vertex.

    Args:
        graph: A directed graph. It is not modified.
        options: Solver configuration. If None, uses defaults.
                 See FlowOptions for the available knobs.
        progress_callback: Optional callback function to receive progress updates.
                          Called every progress_interval augmentations with ProgressInfo.
        progress_interval: Number of augmentations between progress callbacks (default: 1).

    Returns:
        FlowResult containing:
        - objective: Total cost of the solution
        - flows: Net flow on every link id of ``graph``
        - status: 'optimal' or 'iteration_limit'
        - iterations: Number of augmenting paths (and cancelled cycles) used
        - potentials: Final node potentials of the vertices reachable from supply

    Raises:
        InvalidGraphError: If graph is not directed.
        InfeasibleProblemError: If demands do not balance or cannot be routed.
        NegativeCycleError: If a negative cycle is reachable from a supply vertex.
        SolverConfigurationError: If progress_interval is not positive.

    Time Complexity:
        O(U (n + m) log n) where U is the total supply; every augmentation
        routes at least one unit.

    Examples:
        >>> g = Graph(GraphKind.DIRECTED, n=2)
        >>> g.vertex(1).demand, g.vertex(2).demand = 3, -3
        >>> _ = g.add_link(1, 2, cost=4, capacity=5)
        >>> result = solve_min_cost_flow(g)
        >>> result.objective, result.flows
        (12, {1: 3})

    See Also:
        - FlowOptions: Configuration and tuning parameters
        - FlowResult: Solution output format
        - utils.validate_flow: Independent feasibility check of a result
    """
    if progress_interval < 1:
        raise SolverConfigurationError(
            f"progress_interval must be positive, got {progress_interval}."
        )
    options = options if options is not None else FlowOptions()
    # Instantiate a fresh solver each call to avoid cross-run state sharing.
    solver_class = CycleCanceling if options.method == "cycle_canceling" else SuccessiveShortestPaths
    solver = solver_class(graph, options=options)
    return solver.solve(progress_callback=progress_callback, progress_interval=progress_interval)


def balance_demands(graph: Graph) -> dict[int, int]:
    """Set each vertex's demand from its degree imbalance and return the demands.

    A vertex with more incoming than outgoing arcs gets demand
    ``in_degree - out_degree`` (a supply of extra departures), and a vertex with
    more outgoing arcs gets the negative of the difference. Routing this
    demand with solve_min_cost_flow and duplicating every arc once per unit of
    flow yields a balanced digraph.
    """
    demands: dict[int, int] = {}
    for vertex in graph.vertices:
        vertex.demand = vertex.in_degree - vertex.out_degree
        demands[vertex.id] = vertex.demand
    return demands


def add_flow_copies(graph: Graph, result: FlowResult) -> Graph:
    """Return a deep copy of graph with one extra copy of each link per unit of flow.

    Added links are marked not required and carry the id of the link they copy
    as their match id.
    """
    augmented = graph.get_deep_copy()
    for link_id, flow in sorted(result.flows.items()):
        link = graph.link(link_id)
        for _ in range(flow):
            augmented.add_link(
                link.tail.id,
                link.head.id,
                link.cost,
                directed=link.directed,
                required=False,
                capacity=link.capacity,
                match_id=link.id,
                label=link.label,
            )
    return augmented

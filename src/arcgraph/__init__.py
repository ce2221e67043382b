"""High-level entrypoints for the arcgraph routing engine."""

from .all_pairs import add_shortest_path, floyd_warshall, reconstruct_path, remove_shortest_path
from .connectivity import (
    connected_components,
    graph_components,
    graph_strong_components,
    is_connected,
    is_strongly_connected,
    strongly_connected_components,
)
from .data import (
    AllPairsResult,
    Components,
    FlowOptions,
    FlowResult,
    HopLimitedWidthResult,
    GraphKind,
    IdentityContext,
    Link,
    LinkKind,
    ProgressCallback,
    ProgressInfo,
    ShortestPathResult,
    Vertex,
)
from .euler import direct_undirected_cycles, euler_tour, is_eulerian, is_strongly_eulerian
from .exceptions import (
    GraphEngineError,
    InfeasibleProblemError,
    InvalidGraphError,
    NegativeCycleError,
    NoDemandSetError,
    SolverConfigurationError,
)
from .external import (
    ArborescenceSolver,
    MatchingSolver,
    NetworkXArborescenceSolver,
    NetworkXMatchingSolver,
    min_cost_matching,
    min_spanning_arborescence,
)
from .graph import Graph
from .shortest_paths import (
    bellman_ford,
    dijkstra,
    hop_limited_widest_paths,
    pape,
    shortest_paths,
    slf,
    widest_paths,
)
from .solver import add_flow_copies, balance_demands, solve_min_cost_flow
from .trees import min_spanning_tree
from .utils import ValidationResult, is_valid_augmentation, validate_flow, validate_tour

__version__ = "0.1.0"

__all__ = [
    # Graph model
    "Graph",
    "GraphKind",
    "LinkKind",
    "IdentityContext",
    "Vertex",
    "Link",
    # Connectivity
    "connected_components",
    "strongly_connected_components",
    "graph_components",
    "graph_strong_components",
    "is_connected",
    "is_strongly_connected",
    # Shortest paths
    "dijkstra",
    "bellman_ford",
    "pape",
    "slf",
    "shortest_paths",
    "widest_paths",
    "hop_limited_widest_paths",
    "floyd_warshall",
    "reconstruct_path",
    "add_shortest_path",
    "remove_shortest_path",
    # Euler tours
    "is_eulerian",
    "is_strongly_eulerian",
    "direct_undirected_cycles",
    "euler_tour",
    # Min-cost flow
    "solve_min_cost_flow",
    "balance_demands",
    "add_flow_copies",
    "FlowOptions",
    # Trees and external solvers
    "min_spanning_tree",
    "min_cost_matching",
    "min_spanning_arborescence",
    "MatchingSolver",
    "ArborescenceSolver",
    "NetworkXMatchingSolver",
    "NetworkXArborescenceSolver",
    # Results
    "ShortestPathResult",
    "HopLimitedWidthResult",
    "AllPairsResult",
    "Components",
    "FlowResult",
    "ValidationResult",
    # Progress tracking
    "ProgressCallback",
    "ProgressInfo",
    # Utilities
    "validate_flow",
    "validate_tour",
    "is_valid_augmentation",
    # Exceptions
    "GraphEngineError",
    "InvalidGraphError",
    "InfeasibleProblemError",
    "NegativeCycleError",
    "NoDemandSetError",
    "SolverConfigurationError",
]

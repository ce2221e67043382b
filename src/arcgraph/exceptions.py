"""Custom exceptions for the arcgraph engine."""

from __future__ import annotations


class GraphEngineError(Exception):
    """Base exception for all graph engine errors.

    All custom exceptions in the arcgraph package inherit from this class,
    allowing callers to catch every engine failure with a single except clause.

    Example:
        try:
            tour = euler_tour(graph)
        except GraphEngineError as e:
            print(f"Engine error: {e}")
    """


class InvalidGraphError(GraphEngineError):
    """Raised when an algorithm is called with arguments that violate its preconditions.

    This includes:
    - Running the Euler tour constructor on a non-Eulerian graph
    - Running Dijkstra's algorithm on a graph with negative costs
    - Referencing a vertex or link id that does not exist in the graph
    - Adding a link whose kind is not allowed in the graph (an arc in an undirected graph)
    - Calling the flow engine on a graph that is not directed

    These always indicate a caller bug, never a recoverable runtime condition.

    Example:
        InvalidGraphError("Vertex 7 does not exist in a graph with 5 vertices")
    """


class InfeasibleProblemError(GraphEngineError):
    """Raised when a problem has no feasible solution.

    This occurs when:
    - The total signed demand of a flow problem does not sum to zero
    - The super sink is unreachable from the super source
    - Augmentation stops before all supply has been routed (insufficient capacity)
    - An external matching solver cannot produce a perfect matching

    Example:
        InfeasibleProblemError(
            "No feasible flow exists: 3 units of supply could not be routed",
            unrouted=3,
        )
    """

    def __init__(self, message: str, unrouted: int = 0):
        """Initialize with message and optional amount of supply left unrouted."""
        super().__init__(message)
        self.unrouted = unrouted


class NegativeCycleError(GraphEngineError):
    """Raised by the label-correcting, all-pairs and flow algorithms when a negative cycle exists.

    The offending cycle is carried on the exception so callers can diagnose or
    display it.

    Attributes:
        vertex: A vertex lying on the cycle (the cycle starts and ends here).
        vertices: Ordered vertex ids along the cycle, first == last == vertex.
        link_ids: Ordered ids of the links traversed, len(vertices) - 1 entries.
        cost: Total cost of the cycle in traversal direction.

    Example:
        NegativeCycleError(
            "Graph contains a negative cycle through vertex 2",
            vertex=2,
            vertices=[2, 3, 1, 2],
            link_ids=[2, 3, 1],
            cost=-2,
        )
    """

    def __init__(
        self,
        message: str,
        vertex: int | None = None,
        vertices: list[int] | None = None,
        link_ids: list[int] | None = None,
        cost: int | None = None,
    ):
        """Initialize with message and the cycle that was found."""
        super().__init__(message)
        self.vertex = vertex
        self.vertices = vertices if vertices is not None else []
        self.link_ids = link_ids if link_ids is not None else []
        self.cost = cost


class NoDemandSetError(GraphEngineError):
    """Raised when reading the demand of a vertex that has none.

    "No demand" is a distinct state from a demand of zero.
    """


class SolverConfigurationError(GraphEngineError):
    """Raised when solver configuration or options are invalid.

    Example:
        SolverConfigurationError("max_augmentations must be positive, got -1")
    """

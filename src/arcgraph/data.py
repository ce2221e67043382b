"""Core data structures for the graph engine: vertices, links, and algorithm results."""

from __future__ import annotations

import itertools
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

import numpy as np

from .exceptions import InvalidGraphError, NoDemandSetError, SolverConfigurationError

LABEL_CORRECTING_ALGORITHMS = ("slf", "pape", "bellman_ford")
FLOW_METHODS = ("successive_shortest_paths", "cycle_canceling")


class GraphKind(Enum):
    """Flavors of graph, each admitting a fixed set of link kinds."""

    UNDIRECTED = "undirected"
    DIRECTED = "directed"
    MIXED = "mixed"
    WINDY = "windy"


class LinkKind(Enum):
    """Kinds of link, derived from a link's directedness and reverse cost."""

    EDGE = "edge"
    ARC = "arc"
    WINDY = "windy"


@dataclass
class IdentityContext:
    """Issues globally unique link guids for one graph-construction session.

    A graph owns a context; deep copies share it so that guids stay unique
    across a graph and all of its working copies. Create a fresh context to get
    deterministic ids (e.g. in tests).

    Examples:
        >>> context = IdentityContext()
        >>> context.next_guid(), context.next_guid()
        (1, 2)
    """

    start: int = 1
    _counter: itertools.count = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._counter = itertools.count(self.start)

    def next_guid(self) -> int:
        return next(self._counter)


@dataclass(eq=False)
class Vertex:
    """A graph vertex with optional demand and planar coordinates.

    Attributes:
        id: Graph-local id, dense in 1..N and assigned on insertion.
        label: Free-form label.
        demand: Signed demand. Positive values are supply, negative values are
                demand, and None means "no demand set" (distinct from 0).
        coordinates: Optional (x, y) pair.
        neighbors: Maps each adjacent vertex id to the links usable from this
                   vertex towards it. Owned by the graph; mutate only through
                   Graph.add_link / Graph.remove_link.
        degree: Number of incident undirected links (self-loops count twice).
        in_degree: Number of incoming arcs.
        out_degree: Number of outgoing arcs.
    """

    id: int
    label: str = ""
    demand: int | None = None
    coordinates: tuple[float, float] | None = None
    neighbors: dict[int, list[Link]] = field(default_factory=dict, repr=False)
    degree: int = 0
    in_degree: int = 0
    out_degree: int = 0

    @property
    def delta(self) -> int:
        """Out-degree minus in-degree."""
        return self.out_degree - self.in_degree

    @property
    def is_demand_set(self) -> bool:
        return self.demand is not None

    def required_demand(self) -> int:
        """Return the demand, raising NoDemandSetError if none was set."""
        if self.demand is None:
            raise NoDemandSetError(f"Vertex {self.id} has no demand set")
        return self.demand


@dataclass(eq=False)
class Link:
    """An edge, arc, or windy edge between two vertices of one graph.

    Attributes:
        guid: Unique across the identity context that created the link.
        tail: First endpoint (the tail of an arc).
        head: Second endpoint (the head of an arc).
        cost: Traversal cost tail -> head (and head -> tail for plain edges).
        directed: True for arcs.
        reverse_cost: Traversal cost head -> tail for windy edges, else None.
        capacity: Upper bound on flow. None means unbounded.
        required: Whether a route must cover this link.
        label: Free-form label.
        id: Graph-local id, dense in 1..M; -1 until inserted.
        match_id: Advisory id correlating this link with a counterpart in
                  another graph (a copy or a transformed graph).
    """

    guid: int
    tail: Vertex
    head: Vertex
    cost: int
    directed: bool
    reverse_cost: int | None = None
    capacity: int | None = None
    required: bool = True
    label: str = ""
    id: int = -1
    match_id: int = -1

    @property
    def kind(self) -> LinkKind:
        if self.directed:
            return LinkKind.ARC
        if self.reverse_cost is not None:
            return LinkKind.WINDY
        return LinkKind.EDGE

    @property
    def endpoint_ids(self) -> tuple[int, int]:
        return self.tail.id, self.head.id

    @property
    def is_capacity_set(self) -> bool:
        return self.capacity is not None

    def other(self, vertex_id: int) -> int:
        """Return the id of the endpoint opposite to vertex_id."""
        return self.head.id if self.tail.id == vertex_id else self.tail.id

    def cost_from(self, vertex_id: int) -> int:
        """Cost of traversing this link starting from vertex_id."""
        if self.reverse_cost is not None and self.tail.id != vertex_id:
            return self.reverse_cost
        return self.cost


@dataclass
class ShortestPathResult:
    """Single-source shortest path labels.

    All lists are indexed by vertex id (slot 0 is unused).

    Attributes:
        source: The source vertex id.
        dist: Shortest distance from source; math.inf when unreachable.
        path: Predecessor vertex on the shortest path; 0 when none.
        edge_path: Id of the link entering the vertex on the shortest path
                   (always an id of the input graph); 0 when none.
    """

    source: int
    dist: list[float]
    path: list[int]
    edge_path: list[int]

    def path_to(self, target: int) -> tuple[list[int], list[int]]:
        """Return (vertex ids, link ids) of the shortest path from source to target.

        Returns two empty lists when target is unreachable.

        Raises:
            InvalidGraphError: If the predecessor labels do not lead back to source.
        """
        if target != self.source and self.path[target] == 0:
            return [], []
        vertices = [target]
        links: list[int] = []
        current = target
        while current != self.source:
            if len(vertices) > len(self.dist) or current == 0:
                raise InvalidGraphError(
                    f"Predecessor labels do not lead from {self.source} to {target}"
                )
            links.append(self.edge_path[current])
            current = self.path[current]
            vertices.append(current)
        vertices.reverse()
        links.reverse()
        return vertices, links


@dataclass
class HopLimitedWidthResult:
    """Widest-path labels under a cap on the number of links per path.

    Matrices have shape (max_links + 1, n + 1). Row i describes walks from the
    source of at most i links; column 0 is unused.

    Attributes:
        source: The source vertex id.
        width: Largest bottleneck width; inf at the source, -inf when no walk
               within the limit reaches the vertex.
        path: Predecessor vertex on the widest walk; 0 when none.
        edge_path: Id of the link entering the vertex on that walk; 0 when none.
        hops: Number of links on that walk.
    """

    source: int
    width: np.ndarray
    path: np.ndarray
    edge_path: np.ndarray
    hops: np.ndarray

    @property
    def max_links(self) -> int:
        return self.width.shape[0] - 1

    def path_to(self, target: int, max_links: int | None = None) -> tuple[list[int], list[int]]:
        """Return (vertex ids, link ids) of the widest walk to target within max_links.

        Defaults to the largest limit the result was computed for. Returns two
        empty lists when target is unreachable within the limit.
        """
        limit = self.max_links if max_links is None else max_links
        if not 0 <= limit <= self.max_links:
            raise InvalidGraphError(f"Hop limit {limit} outside 0..{self.max_links}")
        if np.isneginf(self.width[limit, target]):
            return [], []
        vertices = [target]
        links: list[int] = []
        current = target
        row = int(self.hops[limit, target])
        # Row h of a walk's last vertex records its final link; the prefix is
        # the widest walk of at most h - 1 links to the predecessor.
        while row > 0:
            links.append(int(self.edge_path[row, current]))
            current = int(self.path[row, current])
            vertices.append(current)
            row = int(self.hops[row - 1, current])
        vertices.reverse()
        links.reverse()
        return vertices, links


@dataclass
class AllPairsResult:
    """All-pairs shortest path matrices, shape (n + 1, n + 1); row/column 0 unused.

    Attributes:
        dist: float64 distances; inf when j is unreachable from i.
        path: Next vertex after i on the shortest i -> j path; 0 when none.
        edge_path: Id of the first link on the shortest i -> j path; 0 when none.
    """

    dist: np.ndarray
    path: np.ndarray
    edge_path: np.ndarray

    @property
    def n(self) -> int:
        return self.dist.shape[0] - 1


@dataclass
class Components:
    """Connected (or strongly connected) components of a graph.

    Attributes:
        count: Number of components.
        component: component[v] is the 1-based component index of vertex v;
                   slot 0 is unused.
    """

    count: int
    component: list[int]

    def members(self) -> dict[int, list[int]]:
        """Map each component index to the vertex ids it contains."""
        groups: dict[int, list[int]] = {}
        for vertex_id in range(1, len(self.component)):
            groups.setdefault(self.component[vertex_id], []).append(vertex_id)
        return groups


@dataclass
class FlowResult:
    """Represents the output of a minimum-cost flow computation.

    Attributes:
        objective: Total cost of the solution (sum of cost * flow).
        flows: Maps every link id of the input graph to its net flow.
        status: 'optimal' or 'iteration_limit'.
        iterations: Number of augmenting paths used.
        potentials: Final node potentials keyed by vertex id (reachable vertices only).

    Examples:
        >>> result = solve_min_cost_flow(graph)
        >>> print(f"Status: {result.status}, cost: {result.objective}")
        Status: optimal, cost: 12
    """

    objective: int
    flows: dict[int, int] = field(default_factory=dict)
    status: str = "optimal"
    iterations: int = 0
    potentials: dict[int, int] = field(default_factory=dict)


@dataclass(frozen=True)
class ProgressInfo:
    """Progress information provided during min-cost flow augmentation.

    Attributes:
        iteration: Number of augmenting paths applied so far.
        routed: Units of supply routed so far.
        total_supply: Units of supply that must be routed.
        objective_estimate: Cost of the flow routed so far.
        elapsed_time: Elapsed time in seconds since the solve started.
    """

    iteration: int
    routed: int
    total_supply: int
    objective_estimate: int
    elapsed_time: float


# Type alias for progress callback function
ProgressCallback = Callable[[ProgressInfo], None]


@dataclass
class FlowOptions:
    """Configuration options for the min-cost flow engines.

    Attributes:
        method: Flow algorithm:
                - "successive_shortest_paths" (default): augment along shortest
                  paths under node potentials
                - "cycle_canceling": route any feasible flow, then cancel
                  negative-cost residual cycles until none remain
        potential_algorithm: Label-correcting algorithm used for the initial
                             potentials, which tolerates negative arc costs:
                             - "slf" (default): shortest-label-first
                             - "pape": Pape's deque discipline
                             - "bellman_ford": FIFO queue
                             Ignored by cycle canceling.
        max_augmentations: Maximum number of augmenting paths (for cycle
                           canceling, augmenting paths plus cancelled cycles).
                           None means unlimited. When the limit is reached the
                           result has status "iteration_limit" and may not
                           route all supply or may not be optimal.

    Examples:
        >>> options = FlowOptions(potential_algorithm="pape")
        >>> options = FlowOptions(max_augmentations=50)
        >>> options = FlowOptions(method="cycle_canceling")
    """

    potential_algorithm: str = "slf"
    max_augmentations: int | None = None
    method: str = "successive_shortest_paths"

    def __post_init__(self) -> None:
        if self.method not in FLOW_METHODS:
            raise SolverConfigurationError(
                f"Invalid flow method '{self.method}'. Must be one of {', '.join(FLOW_METHODS)}."
            )
        if self.potential_algorithm not in LABEL_CORRECTING_ALGORITHMS:
            raise SolverConfigurationError(
                f"Invalid potential algorithm '{self.potential_algorithm}'. "
                f"Must be one of {', '.join(LABEL_CORRECTING_ALGORITHMS)}."
            )
        if self.max_augmentations is not None and self.max_augmentations <= 0:
            raise SolverConfigurationError(
                f"max_augmentations must be positive, got {self.max_augmentations}."
            )

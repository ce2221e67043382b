"""All-pairs shortest paths (Floyd-Warshall) and path surgery helpers."""

from __future__ import annotations

import logging

import numpy as np

from .data import AllPairsResult, Link
from .exceptions import InfeasibleProblemError, InvalidGraphError, NegativeCycleError
from .graph import Graph
from .shortest_paths import cheapest_arcs, directed_projection

logger = logging.getLogger(__name__)


def floyd_warshall(graph: Graph) -> AllPairsResult:
    """Compute shortest paths between every ordered pair of vertices.

    Direct distances come from the cheapest projected arc between each pair,
    with both traversal directions of edges and windy edges considered
    independently. Relaxation runs over intermediate vertices k = 1..n, one
    vectorised sweep per k. Alongside the distance matrix the result records
    the next vertex and the id of the first link on every shortest path.

    Self-distances are infinite unless a cycle makes them finite; after
    relaxation, any diagonal entry that is infinite or positive is reported as 0.

    Args:
        graph: Graph of any kind. Negative costs are allowed.

    Returns:
        AllPairsResult with (n + 1) x (n + 1) matrices; row and column 0 unused.

    Raises:
        NegativeCycleError: If any diagonal entry becomes negative.

    Time Complexity:
        O(n³) arithmetic, O(n²) memory

    Examples:
        >>> g = Graph(GraphKind.WINDY, n=2)
        >>> _ = g.add_link(1, 2, cost=3, reverse_cost=8)
        >>> result = floyd_warshall(g)
        >>> float(result.dist[1, 2]), float(result.dist[2, 1])
        (3.0, 8.0)
    """
    n = graph.num_vertices
    dist = np.full((n + 1, n + 1), np.inf, dtype=np.float64)
    path = np.zeros((n + 1, n + 1), dtype=np.int64)
    edge_path = np.zeros((n + 1, n + 1), dtype=np.int64)

    for (tail, head), arc in cheapest_arcs(directed_projection(graph)).items():
        dist[tail, head] = arc.cost
        path[tail, head] = head
        edge_path[tail, head] = arc.link_id
    direct = dist.copy()

    _check_diagonal(dist, path, edge_path, direct)
    for k in range(1, n + 1):
        through = dist[:, k : k + 1] + dist[k : k + 1, :]
        improved = through < dist
        if not improved.any():
            continue
        dist = np.where(improved, through, dist)
        path = np.where(improved, path[:, k : k + 1], path)
        edge_path = np.where(improved, edge_path[:, k : k + 1], edge_path)
        _check_diagonal(dist, path, edge_path, direct)

    diagonal = np.arange(1, n + 1)
    clamp = diagonal[~(dist[diagonal, diagonal] < 0)]
    dist[clamp, clamp] = 0.0
    path[clamp, clamp] = 0
    edge_path[clamp, clamp] = 0

    if logger.isEnabledFor(logging.DEBUG):
        finite = int(np.isfinite(dist[1:, 1:]).sum())
        logger.debug(
            "Computed all-pairs shortest paths",
            extra={"vertices": n, "finite_pairs": finite},
        )
    return AllPairsResult(dist=dist, path=path, edge_path=edge_path)


def reconstruct_path(result: AllPairsResult, source: int, target: int) -> tuple[list[int], list[int]]:
    """Return (vertex ids, link ids) of the shortest source -> target path.

    A path from a vertex to itself is the single vertex with no links.
    Returns two empty lists when target is unreachable.
    """
    n = result.n
    if not (1 <= source <= n and 1 <= target <= n):
        raise InvalidGraphError(f"Vertex pair ({source}, {target}) outside 1..{n}")
    if source == target:
        return [source], []
    if not np.isfinite(result.dist[source, target]):
        return [], []

    vertices = [source]
    links: list[int] = []
    current = source
    while current != target:
        links.append(int(result.edge_path[current, target]))
        current = int(result.path[current, target])
        vertices.append(current)
        if len(links) > n:
            raise InvalidGraphError(
                f"Next-hop matrix does not lead from {source} to {target}"
            )
    return vertices, links


def add_shortest_path(graph: Graph, result: AllPairsResult, source: int, target: int) -> list[Link]:
    """Duplicate every link on the shortest source -> target path.

    Copies keep the endpoint order, costs and capacity of the link they copy
    and carry its id as their match id. ``result`` must have been computed on
    ``graph`` (or on a graph whose link ids are still valid in it).

    Returns:
        The links that were added, in path order.

    Raises:
        InfeasibleProblemError: If target is unreachable from source.
    """
    links = [graph.link(link_id) for link_id in _path_link_ids(result, source, target)]
    added: list[Link] = []
    for link in links:
        tail, head = link.endpoint_ids
        added.append(
            graph.add_link(
                tail,
                head,
                link.cost,
                directed=link.directed,
                reverse_cost=link.reverse_cost,
                required=link.required,
                capacity=link.capacity,
                match_id=link.id,
                label=link.label,
            )
        )
    return added


def remove_shortest_path(graph: Graph, result: AllPairsResult, source: int, target: int) -> list[Link]:
    """Remove every link on the shortest source -> target path from graph.

    Links are resolved before any removal, so id compaction during removal does
    not affect which links are deleted.

    Returns:
        The removed links, in path order.

    Raises:
        InfeasibleProblemError: If target is unreachable from source.
    """
    links = [graph.link(link_id) for link_id in _path_link_ids(result, source, target)]
    for link in links:
        graph.remove_link(link)
    return links


def _path_link_ids(result: AllPairsResult, source: int, target: int) -> list[int]:
    vertices, link_ids = reconstruct_path(result, source, target)
    if not vertices:
        logger.error(
            "No path between requested vertices",
            extra={"source": source, "target": target},
        )
        raise InfeasibleProblemError(f"Vertex {target} is unreachable from vertex {source}")
    return link_ids


def _check_diagonal(
    dist: np.ndarray, path: np.ndarray, edge_path: np.ndarray, direct: np.ndarray
) -> None:
    negative = np.flatnonzero(np.diag(dist)[1:] < 0)
    if negative.size == 0:
        return
    vertex = int(negative[0]) + 1
    vertices = [vertex]
    link_ids: list[int] = []
    cost = 0
    current = vertex
    n = dist.shape[0] - 1
    while len(link_ids) <= n:
        following = int(path[current, vertex])
        if following == 0:
            break
        link_ids.append(int(edge_path[current, vertex]))
        cost += int(direct[current, following])
        vertices.append(following)
        current = following
        if current == vertex:
            break
    if vertices[-1] != vertex or len(vertices) == 1:
        vertices, link_ids, cost = [], [], int(dist[vertex, vertex])

    logger.error(
        "Negative cycle detected during Floyd-Warshall relaxation",
        extra={"vertex": vertex, "cycle": vertices, "cost": cost},
    )
    raise NegativeCycleError(
        f"Graph contains a negative cycle through vertex {vertex}",
        vertex=vertex,
        vertices=vertices,
        link_ids=link_ids,
        cost=cost,
    )

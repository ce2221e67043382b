"""Min-cost flow by canceling negative residual cycles."""

from __future__ import annotations

import logging
import math
import time
from collections import deque

from .data import FlowOptions, FlowResult, ProgressCallback
from .exceptions import InfeasibleProblemError, NegativeCycleError
from .graph import Graph
from .shortest_paths import _Labels, _trace_cycle
from .successive_paths import SuccessiveShortestPaths


class CycleCanceling(SuccessiveShortestPaths):
    """Min-cost flow by negative cycle canceling.

    Works on the same residual network as SuccessiveShortestPaths. The first
    phase routes all supply along breadth-first augmenting paths that ignore
    cost (Edmonds-Karp). The second phase repeatedly looks for a negative-cost
    cycle among arcs with residual capacity and pushes the cycle's bottleneck
    around it. The flow is optimal once no negative cycle remains.

    Cycles are searched from a virtual root joined to every vertex, so negative
    cycles are cancelled wherever they lie, not only where reachable from a
    supply vertex. Only a negative cycle without a capacity bound fails the
    solve.

    Note:
        This class is internal. Use solve_min_cost_flow() with
        ``FlowOptions(method="cycle_canceling")`` instead.
    """

    def __init__(self, graph: Graph, options: FlowOptions | None = None):
        super().__init__(graph, options=options)
        self.logger = logging.getLogger(__name__)

    def solve(
        self,
        progress_callback: ProgressCallback | None = None,
        progress_interval: int = 1,
    ) -> FlowResult:
        """Route all supply to the demand vertices, then cancel negative cycles.

        Returns:
            FlowResult with the net flow on every link id of the input graph.
            ``iterations`` counts augmenting paths plus cancelled cycles.

        Raises:
            InfeasibleProblemError: If demands do not sum to zero or supply
                remains once no augmenting path exists.
            NegativeCycleError: If a negative cycle has unbounded capacity.
        """
        flows = {link.id: 0 for link in self.graph.links}
        if not any(self.demands):
            self.logger.info("No vertex carries a demand; returning the zero flow")
            return FlowResult(objective=0, flows=flows, status="optimal", iterations=0)

        self._check_balance()

        start_time = time.time()
        self.logger.info(
            "Starting cycle canceling solver",
            extra={
                "vertices": self.n,
                "links": self.graph.num_links,
                "total_supply": self.total_supply,
                "max_augmentations": self.options.max_augmentations,
            },
        )

        outgoing: list[list[int]] = [[] for _ in range(self.sink + 1)]
        for index, arc in enumerate(self.arcs):
            outgoing[arc.tail].append(index)

        routed = 0
        iterations = 0
        limit = self.options.max_augmentations
        while routed < self.total_supply:
            if limit is not None and iterations >= limit:
                break
            path = self._augmenting_path(outgoing)
            if path is None:
                unrouted = self.total_supply - routed
                self.logger.error(
                    "No augmenting path remains but supply is left",
                    extra={"routed": routed, "unrouted": unrouted},
                )
                raise InfeasibleProblemError(
                    f"No feasible flow exists: {unrouted} units of supply could not be routed",
                    unrouted=unrouted,
                )
            amount = min(self.arcs[index].residual for index in path)
            for index in path:
                self._push(index, amount, flows)
            routed += int(amount)
            iterations += 1
            if progress_callback is not None and iterations % progress_interval == 0:
                self._report_progress(progress_callback, iterations, routed, flows, start_time)

        status = "optimal"
        potentials: dict[int, int] = {}
        if routed < self.total_supply:
            status = "iteration_limit"
            self.logger.warning(
                "Augmentation limit reached before all supply was routed",
                extra={"iterations": iterations, "routed": routed},
            )
        else:
            cancelled = 0
            while True:
                cycle, labels = self._negative_cycle()
                if cycle is None:
                    potentials = {v: int(labels.dist[v]) for v in range(1, self.n + 1)}
                    break
                if limit is not None and iterations >= limit:
                    status = "iteration_limit"
                    self.logger.warning(
                        "Augmentation limit reached before all negative cycles were cancelled",
                        extra={"iterations": iterations, "cancelled": cancelled},
                    )
                    break
                amount = min(self.arcs[index].residual for index in cycle)
                if math.isinf(amount):
                    self._raise_unbounded(cycle)
                for index in cycle:
                    self._push(index, amount, flows)
                iterations += 1
                cancelled += 1

                if self.logger.isEnabledFor(logging.DEBUG):
                    self.logger.debug(
                        "Cancelled negative cycle",
                        extra={"iteration": iterations, "amount": amount, "length": len(cycle)},
                    )
                if progress_callback is not None and iterations % progress_interval == 0:
                    self._report_progress(progress_callback, iterations, routed, flows, start_time)

        objective = self._objective(flows)
        self.logger.info(
            "Cycle canceling solver finished",
            extra={
                "status": status,
                "iterations": iterations,
                "objective": objective,
                "elapsed_ms": (time.time() - start_time) * 1000,
            },
        )
        return FlowResult(
            objective=objective,
            flows=flows,
            status=status,
            iterations=iterations,
            potentials=potentials,
        )

    def _augmenting_path(self, outgoing: list[list[int]]) -> list[int] | None:
        """Breadth-first search for a source-to-sink path of residual arcs."""
        visited = [False] * (self.sink + 1)
        entering = [0] * (self.sink + 1)
        visited[self.source] = True
        queue: deque[int] = deque([self.source])
        while queue:
            u = queue.popleft()
            for index in outgoing[u]:
                arc = self.arcs[index]
                if arc.residual <= 0 or visited[arc.head]:
                    continue
                visited[arc.head] = True
                entering[arc.head] = index
                if arc.head == self.sink:
                    return self._trace(entering)
                queue.append(arc.head)
        return None

    def _negative_cycle(self) -> tuple[list[int] | None, _Labels]:
        """Bellman-Ford over residual arcs from a virtual root at distance zero.

        Returns the arc indices of a negative cycle in traversal order, or None
        together with labels that serve as node potentials.
        """
        size = self.sink + 1
        labels = _Labels([0] * size, [0] * size, [0] * size, [0] * size)
        last = 0
        for _ in range(size):
            last = 0
            for index, arc in enumerate(self.arcs):
                if arc.residual <= 0:
                    continue
                alt = labels.dist[arc.tail] + arc.cost
                if alt < labels.dist[arc.head]:
                    labels.dist[arc.head] = alt
                    labels.path[arc.head] = arc.tail
                    labels.edge[arc.head] = index
                    labels.edge_cost[arc.head] = arc.cost
                    last = arc.head
            if not last:
                return None, labels

        # A vertex relaxed in the final round has a predecessor chain longer
        # than the vertex count, so walking back that far lands on the cycle.
        vertex = last
        for _ in range(size):
            vertex = labels.path[vertex]
        _, keys, _ = _trace_cycle(vertex, labels)
        return keys, labels

    def _raise_unbounded(self, cycle: list[int]) -> None:
        vertices = [self.arcs[cycle[0]].tail] + [self.arcs[index].head for index in cycle]
        link_ids = [self.arcs[index].link_id for index in cycle]
        cost = sum(self.arcs[index].cost for index in cycle)
        self.logger.error(
            "Negative cycle with unbounded capacity",
            extra={"cycle": vertices, "link_ids": link_ids, "cost": cost},
        )
        raise NegativeCycleError(
            f"Flow cost is unbounded: uncapacitated negative cycle through vertex {vertices[0]} "
            f"(cost {cost})",
            vertex=vertices[0],
            vertices=vertices,
            link_ids=link_ids,
            cost=cost,
        )

"""Successive shortest augmenting paths with node potentials for min-cost flow."""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass

from .data import FlowOptions, FlowResult, GraphKind, ProgressCallback, ProgressInfo
from .exceptions import InfeasibleProblemError, InvalidGraphError
from .graph import Graph
from .shortest_paths import DISCIPLINE_BY_ALGORITHM, _dijkstra_core, _label_correcting_core


@dataclass
class ArcState:
    """One residual arc. Arcs come in pairs: a real arc and its reverse.

    ``residual`` is math.inf for uncapacitated real arcs. A reverse arc's
    residual always equals the flow currently on its real partner. ``link_id``
    is 0 for the synthetic super source and super sink arcs.
    """

    tail: int
    head: int
    cost: int
    residual: float
    link_id: int
    reverse: bool
    partner: int


class SuccessiveShortestPaths:
    """Min-cost flow by successive shortest augmenting paths.

    The residual network holds every arc of the input graph plus a super source
    (id n + 1) joined to each supply vertex and a super sink (id n + 2) joined
    from each demand vertex, capacities equal to the vertex demands. Initial
    potentials come from one label-correcting pass, so arc costs may be
    negative. Every following search is Dijkstra on reduced costs
    ``cost + pot[tail] - pot[head]``, which stay non-negative because potentials
    grow by the distances of each search.

    Attributes:
        graph: The directed graph being solved. It is never mutated.
        options: FlowOptions for this run.
        arcs: Residual arcs; arcs[2 * i] is real and arcs[2 * i + 1] its reverse.

    Note:
        This class is internal. Use solve_min_cost_flow() instead of
        instantiating it directly.
    """

    def __init__(self, graph: Graph, options: FlowOptions | None = None):
        self.options = options if options is not None else FlowOptions()
        self.logger = logging.getLogger(__name__)

        if graph.kind is not GraphKind.DIRECTED:
            self.logger.error(
                "Min-cost flow requires a directed graph",
                extra={"kind": graph.kind.value},
            )
            raise InvalidGraphError(
                f"Min-cost flow is only defined on directed graphs, got {graph.kind.value}"
            )

        self.graph = graph
        self.n = graph.num_vertices
        self.source = self.n + 1
        self.sink = self.n + 2
        self.demands = [0] + [vertex.demand or 0 for vertex in graph.vertices]
        self.total_supply = sum(d for d in self.demands if d > 0)
        self.arcs: list[ArcState] = []

        for link in graph.links:
            capacity = math.inf if link.capacity is None else link.capacity
            self._add_arc_pair(link.tail.id, link.head.id, link.cost, capacity, link.id)
        for vertex_id in range(1, self.n + 1):
            demand = self.demands[vertex_id]
            if demand > 0:
                self._add_arc_pair(self.source, vertex_id, 0, demand, 0)
            elif demand < 0:
                self._add_arc_pair(vertex_id, self.sink, 0, -demand, 0)

    def _add_arc_pair(self, tail: int, head: int, cost: int, capacity: float, link_id: int) -> None:
        index = len(self.arcs)
        self.arcs.append(ArcState(tail, head, cost, capacity, link_id, False, index + 1))
        self.arcs.append(ArcState(head, tail, -cost, 0, link_id, True, index))

    def solve(
        self,
        progress_callback: ProgressCallback | None = None,
        progress_interval: int = 1,
    ) -> FlowResult:
        """Route all supply to the demand vertices at minimum cost.

        Returns:
            FlowResult with the net flow on every link id of the input graph.

        Raises:
            InfeasibleProblemError: If demands do not sum to zero, the super sink
                is unreachable, or supply remains once no augmenting path exists.
            NegativeCycleError: If the initial potentials run into a negative
                cycle reachable from a supply vertex.
        """
        flows = {link.id: 0 for link in self.graph.links}
        if not any(self.demands):
            self.logger.info("No vertex carries a demand; returning the zero flow")
            return FlowResult(objective=0, flows=flows, status="optimal", iterations=0)

        self._check_balance()

        start_time = time.time()
        self.logger.info(
            "Starting successive shortest paths solver",
            extra={
                "vertices": self.n,
                "links": self.graph.num_links,
                "total_supply": self.total_supply,
                "potential_algorithm": self.options.potential_algorithm,
                "max_augmentations": self.options.max_augmentations,
            },
        )

        potentials = self._initial_potentials()
        if math.isinf(potentials[self.sink]):
            self.logger.error(
                "Super sink unreachable from super source",
                extra={"total_supply": self.total_supply},
            )
            raise InfeasibleProblemError(
                "No feasible flow exists: demand vertices are unreachable from supply vertices",
                unrouted=self.total_supply,
            )

        routed = 0
        iterations = 0
        limit = self.options.max_augmentations
        while routed < self.total_supply:
            if limit is not None and iterations >= limit:
                break
            labels = _dijkstra_core(self.sink, self._reduced_adjacency(potentials), self.source)
            if math.isinf(labels.dist[self.sink]):
                break

            path = self._trace(labels.edge)
            amount = min(self.arcs[index].residual for index in path)
            for index in path:
                self._push(index, amount, flows)
            routed += int(amount)
            iterations += 1

            for vertex, distance in enumerate(labels.dist):
                potentials[vertex] = potentials[vertex] + distance if vertex else 0

            if self.logger.isEnabledFor(logging.DEBUG):
                self.logger.debug(
                    "Augmented along shortest path",
                    extra={"iteration": iterations, "amount": amount, "length": len(path)},
                )
            if progress_callback is not None and iterations % progress_interval == 0:
                self._report_progress(progress_callback, iterations, routed, flows, start_time)

        status = "optimal"
        if routed < self.total_supply:
            if limit is not None and iterations >= limit:
                status = "iteration_limit"
                self.logger.warning(
                    "Augmentation limit reached before all supply was routed",
                    extra={"iterations": iterations, "routed": routed},
                )
            else:
                unrouted = self.total_supply - routed
                self.logger.error(
                    "No augmenting path remains but supply is left",
                    extra={"routed": routed, "unrouted": unrouted},
                )
                raise InfeasibleProblemError(
                    f"No feasible flow exists: {unrouted} units of supply could not be routed",
                    unrouted=unrouted,
                )

        objective = self._objective(flows)
        self.logger.info(
            "Successive shortest paths solver finished",
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
            potentials={
                vertex: int(potentials[vertex])
                for vertex in range(1, self.n + 1)
                if not math.isinf(potentials[vertex])
            },
        )

    def _initial_potentials(self) -> list[float]:
        adjacency: list[list[tuple[int, int, int]]] = [[] for _ in range(self.sink + 1)]
        for arc in self.arcs:
            if arc.residual > 0:
                adjacency[arc.tail].append((arc.head, arc.cost, arc.link_id))
        discipline = DISCIPLINE_BY_ALGORITHM[self.options.potential_algorithm]
        labels = _label_correcting_core(self.sink, adjacency, self.source, discipline)
        return labels.dist

    def _reduced_adjacency(self, potentials: list[float]) -> list[list[tuple[int, int, int]]]:
        adjacency: list[list[tuple[int, int, int]]] = [[] for _ in range(self.sink + 1)]
        for index, arc in enumerate(self.arcs):
            if arc.residual <= 0:
                continue
            tail_potential = potentials[arc.tail]
            head_potential = potentials[arc.head]
            if math.isinf(tail_potential) or math.isinf(head_potential):
                continue
            reduced = int(arc.cost + tail_potential - head_potential)
            adjacency[arc.tail].append((arc.head, reduced, index))
        return adjacency

    def _trace(self, edge: list[int]) -> list[int]:
        path: list[int] = []
        vertex = self.sink
        while vertex != self.source:
            index = edge[vertex]
            path.append(index)
            vertex = self.arcs[index].tail
        path.reverse()
        return path

    def _push(self, index: int, amount: float, flows: dict[int, int]) -> None:
        arc = self.arcs[index]
        arc.residual -= amount
        self.arcs[arc.partner].residual += amount
        if arc.link_id:
            flows[arc.link_id] += -int(amount) if arc.reverse else int(amount)

    def _objective(self, flows: dict[int, int]) -> int:
        return sum(self.graph.link(link_id).cost * flow for link_id, flow in flows.items())

    def _check_balance(self) -> None:
        imbalance = sum(self.demands)
        if imbalance != 0:
            self.logger.error(
                "Vertex demands do not sum to zero",
                extra={"imbalance": imbalance},
            )
            raise InfeasibleProblemError(
                f"Vertex demands must sum to zero, got {imbalance}",
                unrouted=abs(imbalance),
            )

    def _report_progress(
        self,
        progress_callback: ProgressCallback,
        iterations: int,
        routed: int,
        flows: dict[int, int],
        start_time: float,
    ) -> None:
        progress_callback(
            ProgressInfo(
                iteration=iterations,
                routed=routed,
                total_supply=self.total_supply,
                objective_estimate=self._objective(flows),
                elapsed_time=time.time() - start_time,
            )
        )

"""Utility functions for validating flows, tours and graph augmentations."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from .data import FlowResult
from .graph import Graph


@dataclass
class ValidationResult:
    """Results from validating a flow solution.

    Attributes:
        is_valid: True if the flow satisfies all constraints.
        errors: List of validation error messages (empty if valid).
        flow_balance: Dict mapping vertex ids to demand - outflow + inflow.
        capacity_violations: Ids of links whose flow exceeds their capacity.
        negative_flows: Ids of links carrying negative flow.
    """

    is_valid: bool
    errors: list[str]
    flow_balance: dict[int, int]
    capacity_violations: list[int]
    negative_flows: list[int]


def validate_flow(graph: Graph, result: FlowResult) -> ValidationResult:
    """Validate that a flow solution satisfies all problem constraints.

    Checks:
    - Flow conservation at each vertex (inflow - outflow + demand = 0)
    - Capacity constraints (flow <= capacity for each link with one)
    - Non-negativity (flow >= 0 for each link)

    Vertices without a demand are treated as transit vertices. Links missing
    from ``result.flows`` carry no flow.

    Args:
        graph: Directed graph the flow was computed on.
        result: Solution to validate.

    Returns:
        ValidationResult with detailed information about any violations.
    """
    errors: list[str] = []
    flow_balance = {vertex.id: vertex.demand or 0 for vertex in graph.vertices}
    capacity_violations: list[int] = []
    negative_flows: list[int] = []

    for link in graph.links:
        flow = result.flows.get(link.id, 0)
        flow_balance[link.tail.id] -= flow
        flow_balance[link.head.id] += flow

        if link.capacity is not None and flow > link.capacity:
            capacity_violations.append(link.id)
            errors.append(f"Link {link.id}: flow {flow} exceeds capacity {link.capacity}")
        if flow < 0:
            negative_flows.append(link.id)
            errors.append(f"Link {link.id}: negative flow {flow}")

    for vertex_id, balance in flow_balance.items():
        if balance != 0:
            errors.append(f"Vertex {vertex_id}: flow imbalance {balance} (should be zero)")

    unknown = sorted(set(result.flows) - {link.id for link in graph.links})
    for link_id in unknown:
        errors.append(f"Link {link_id}: flow reported for a link that does not exist")

    return ValidationResult(
        is_valid=not errors,
        errors=errors,
        flow_balance=flow_balance,
        capacity_violations=capacity_violations,
        negative_flows=negative_flows,
    )


def validate_tour(graph: Graph, tour: Sequence[int]) -> bool:
    """Check that tour is a closed walk from the depot using every link exactly once.

    Arcs must be traversed tail to head; edges and windy edges in either
    direction.
    """
    if len(tour) != graph.num_links or len(set(tour)) != len(tour):
        return False
    current = graph.depot_id
    for link_id in tour:
        if not 1 <= link_id <= graph.num_links:
            return False
        link = graph.link(link_id)
        tail, head = link.endpoint_ids
        if link.directed:
            if tail != current:
                return False
            current = head
        elif current in (tail, head):
            current = link.other(current)
        else:
            return False
    return current == graph.depot_id


def is_valid_augmentation(original: Graph, augmented: Graph) -> bool:
    """Check that every link of augmented is a copy of some link of original.

    A copy joins the same vertices (in the same orientation for arcs) at the
    same cost; an undirected link is never a copy of an arc. The graphs must be
    of the same kind and have the same vertices.
    """
    if original.kind is not augmented.kind:
        return False
    if original.num_vertices != augmented.num_vertices:
        return False

    for link in augmented.links:
        tail, head = link.endpoint_ids
        candidates = original.vertex(tail).neighbors.get(head, [])
        if not any(
            candidate.cost == link.cost and not (candidate.directed and not link.directed)
            for candidate in candidates
        ):
            return False
    return True

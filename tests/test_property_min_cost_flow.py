import sys
from pathlib import Path
from typing import Dict, List, Tuple

import pytest

hypothesis = pytest.importorskip("hypothesis")
from hypothesis import HealthCheck, given, settings  # type: ignore  # noqa: E402
from hypothesis import strategies as st  # type: ignore  # noqa: E402

PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from arcgraph.data import FlowOptions, GraphKind, IdentityContext  # noqa: E402
from arcgraph.graph import Graph  # noqa: E402
from arcgraph.solver import solve_min_cost_flow  # noqa: E402
from arcgraph.utils import validate_flow  # noqa: E402

Instance = Tuple[List[int], List[Tuple[int, int, int, int]]]


@st.composite
def _network_instances(draw) -> Instance:
    # Build moderately sized graphs exercising multiple supply/demand shapes.
    supply_count = draw(st.integers(min_value=1, max_value=4))
    demand_count = draw(st.integers(min_value=1, max_value=4))
    relay_count = draw(st.integers(min_value=0, max_value=2))

    supply_nodes = list(range(1, supply_count + 1))
    demand_nodes = list(range(supply_count + 1, supply_count + demand_count + 1))
    relay_nodes = list(
        range(supply_count + demand_count + 1, supply_count + demand_count + relay_count + 1)
    )

    supplies = [draw(st.integers(min_value=1, max_value=18)) for _ in supply_nodes]
    total_supply = sum(supplies)

    demands: List[int] = list(supplies)
    remaining = total_supply
    for idx in range(demand_count):
        if idx == demand_count - 1:
            amount = remaining
        else:
            amount = draw(st.integers(min_value=0, max_value=remaining))
        remaining -= amount
        demands.append(-amount)
    demands.extend(0 for _ in relay_nodes)

    arcs: List[Tuple[int, int, int, int]] = []
    cost_strategy = st.integers(min_value=1, max_value=12)

    def capacity() -> int:
        return draw(st.integers(min_value=total_supply, max_value=total_supply + 20))

    # Direct arcs carry the whole supply on their own, so every instance is feasible.
    for tail in supply_nodes:
        for head in demand_nodes:
            arcs.append((tail, head, draw(cost_strategy), capacity()))
    for relay in relay_nodes:
        for tail in supply_nodes:
            arcs.append((tail, relay, draw(cost_strategy), capacity()))
        for head in demand_nodes:
            arcs.append((relay, head, draw(cost_strategy), capacity()))

    return demands, arcs


def _build(instance: Instance) -> Graph:
    demands, arcs = instance
    graph = Graph(GraphKind.DIRECTED, context=IdentityContext())
    for demand in demands:
        graph.add_vertex(demand=demand)
    for tail, head, cost, capacity in arcs:
        graph.add_link(tail, head, cost, capacity=capacity)
    return graph


def _compute_node_balance(graph: Graph, flows: Dict[int, int]) -> Dict[int, int]:
    balance = {vertex.id: vertex.demand or 0 for vertex in graph.vertices}
    for link in graph.links:
        balance[link.tail.id] -= flows[link.id]
        balance[link.head.id] += flows[link.id]
    return balance


@settings(max_examples=50, suppress_health_check=[HealthCheck.too_slow], deadline=None)
@given(_network_instances())
def test_min_cost_flow_respects_mass_balance(instance: Instance):
    # Property: solutions balance every vertex and stay within capacity for any draw.
    graph = _build(instance)
    result = solve_min_cost_flow(graph)

    assert result.status == "optimal"
    assert set(result.flows) == {link.id for link in graph.links}
    for link in graph.links:
        assert 0 <= result.flows[link.id] <= link.capacity

    computed_objective = sum(link.cost * result.flows[link.id] for link in graph.links)
    assert result.objective == computed_objective

    for vertex_id, residual in _compute_node_balance(graph, result.flows).items():
        assert residual == 0, f"Vertex {vertex_id} imbalance {residual}"

    supply_out = sum(
        result.flows[link.id] for link in graph.links if (link.tail.demand or 0) > 0
    )
    assert supply_out == sum(d for d in instance[0] if d > 0)
    assert validate_flow(graph, result).is_valid


@settings(max_examples=50, suppress_health_check=[HealthCheck.too_slow], deadline=None)
@given(_network_instances())
def test_min_cost_flow_matches_networkx_objective(instance: Instance):
    # Property: the optimal objective agrees with an independent solver.
    nx = pytest.importorskip("networkx")
    graph = _build(instance)
    result = solve_min_cost_flow(graph)

    oracle = nx.DiGraph()
    for vertex in graph.vertices:
        oracle.add_node(vertex.id, demand=-(vertex.demand or 0))
    for link in graph.links:
        oracle.add_edge(link.tail.id, link.head.id, weight=link.cost, capacity=link.capacity)

    assert result.objective == nx.min_cost_flow_cost(oracle)


@settings(max_examples=30, suppress_health_check=[HealthCheck.too_slow], deadline=None)
@given(_network_instances())
def test_min_cost_flow_is_deterministic_on_deep_copies(instance: Instance):
    # Property: a deep copy yields the same flow once mapped back through match ids.
    graph = _build(instance)
    copy = graph.get_deep_copy()

    original = solve_min_cost_flow(graph)
    copied = solve_min_cost_flow(copy)

    remapped = {copy.link(link_id).match_id: flow for link_id, flow in copied.flows.items()}
    assert remapped == original.flows
    assert copied.objective == original.objective


@settings(max_examples=30, suppress_health_check=[HealthCheck.too_slow], deadline=None)
@given(_network_instances())
def test_cycle_canceling_matches_successive_shortest_paths(instance: Instance):
    # Property: both flow engines reach the same optimum on feasible draws.
    graph = _build(instance)
    expected = solve_min_cost_flow(graph)
    result = solve_min_cost_flow(graph, FlowOptions(method="cycle_canceling"))

    assert result.status == "optimal"
    assert result.objective == expected.objective
    assert validate_flow(graph, result).is_valid
    for link in graph.links:
        # Optimal potentials leave no residual arc with negative reduced cost.
        reduced = link.cost + result.potentials[link.tail.id] - result.potentials[link.head.id]
        if result.flows[link.id] < link.capacity:
            assert reduced >= 0
        if result.flows[link.id] > 0:
            assert reduced <= 0

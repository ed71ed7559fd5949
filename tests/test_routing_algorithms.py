import math

import networkx as nx
import numpy as np
import pytest

from forwarding_sim.core.enums import NextHopStrategy
from forwarding_sim.core.routing_algorithms import (
    all_pairs_shortest_paths,
    dijkstra,
    select_next_hop,
)


@pytest.fixture
def triangle(make_graph):
    """A->B(1), B->C(1), A->C(5) with A, B, C = 1, 2, 3."""
    graph = make_graph()
    for router_id in (1, 2, 3):
        graph.add_router(router_id)
    graph.add_edge(1, 2, 1)
    graph.add_edge(2, 3, 1)
    graph.add_edge(1, 3, 5)
    return graph


def test_shortest_distance_goes_through_intermediate(triangle):
    distances = dijkstra(triangle.routers.values(), triangle.get_router(1))
    assert distances == {1: 0, 2: 1, 3: 2}


def test_unreachable_is_infinite(triangle):
    distances = dijkstra(triangle.routers.values(), triangle.get_router(3))
    assert distances[3] == 0
    assert distances[1] == math.inf
    assert distances[2] == math.inf


def test_all_pairs_has_every_source(triangle):
    table = all_pairs_shortest_paths(triangle.routers.values())
    assert set(table) == {1, 2, 3}
    assert table[2][3] == 1
    assert table[2][1] == math.inf


def test_matches_networkx_on_random_graph(make_graph):
    rng = np.random.default_rng(3)
    graph = make_graph()
    for router_id in range(12):
        graph.add_router(router_id)
    for _ in range(40):
        u, v = (int(x) for x in rng.choice(12, size=2, replace=False))
        graph.add_edge(u, v, int(rng.integers(1, 20)))

    table = graph.calculate_shortest_paths()
    # parallel edges collapse in the DiGraph mirror, so rebuild with minima
    reference = nx.DiGraph()
    reference.add_nodes_from(graph.routers)
    for edge in graph.edges():
        u, v = edge.source.id, edge.destination.id
        if not reference.has_edge(u, v) or reference[u][v]["weight"] > edge.weight:
            reference.add_edge(u, v, weight=edge.weight)

    for source in graph.routers:
        expected = nx.single_source_dijkstra_path_length(reference, source)
        for destination, distance in table[source].items():
            assert distance == expected.get(destination, math.inf)


def test_next_hop_follows_shortest_path(triangle):
    table = triangle.calculate_shortest_paths()
    a, c = triangle.get_router(1), triangle.get_router(3)
    assert select_next_hop(a, c, table) is triangle.get_router(2)


def test_next_hop_tie_keeps_first_edge(make_graph):
    graph = make_graph()
    for router_id in (1, 2, 3, 4):
        graph.add_router(router_id)
    graph.add_edge(1, 3, 1)
    graph.add_edge(1, 2, 1)
    graph.add_edge(2, 4, 1)
    graph.add_edge(3, 4, 1)
    table = graph.calculate_shortest_paths()
    assert select_next_hop(graph.get_router(1), graph.get_router(4), table).id == 3


def test_next_hop_none_without_route(triangle):
    table = triangle.calculate_shortest_paths()
    c, a = triangle.get_router(3), triangle.get_router(1)
    assert select_next_hop(c, a, table) is None
    assert select_next_hop(c, a, table, NextHopStrategy.LAST_EDGE) is None


def test_last_edge_strategy_takes_last_edge(triangle):
    table = triangle.calculate_shortest_paths()
    a, b = triangle.get_router(1), triangle.get_router(2)
    assert select_next_hop(a, b, table) is b
    assert select_next_hop(a, b, table, NextHopStrategy.LAST_EDGE) is triangle.get_router(3)


def test_next_hop_skips_dead_end_neighbours(make_graph):
    graph = make_graph()
    for router_id in (1, 2, 3):
        graph.add_router(router_id)
    graph.add_edge(1, 2, 1)
    graph.add_edge(1, 3, 10)
    graph.add_edge(3, 2, 1)
    graph.add_router(4)
    graph.add_edge(3, 4, 1)
    table = graph.calculate_shortest_paths()
    # router 2 is a dead end, so the only way to 4 is through 3
    assert select_next_hop(graph.get_router(1), graph.get_router(4), table).id == 3

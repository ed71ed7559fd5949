import pytest

from forwarding_sim.core.admission import REDPolicy, TailDropPolicy


def test_add_edge_with_unknown_router_fails(make_graph):
    graph = make_graph()
    graph.add_router(1)
    with pytest.raises(ValueError, match="does not exist"):
        graph.add_edge(1, 2, 1)
    with pytest.raises(ValueError):
        graph.add_edge(3, 1, 1)
    assert graph.get_router(1).outgoing_edges == []


def test_duplicate_router_id_fails(make_graph):
    graph = make_graph()
    graph.add_router(1)
    with pytest.raises(ValueError):
        graph.add_router(1)


def test_non_positive_weight_fails(make_graph):
    graph = make_graph()
    graph.add_router(1)
    graph.add_router(2)
    with pytest.raises(ValueError):
        graph.add_edge(1, 2, 0)


def test_create_packet_resolves_routers(two_routers):
    packet = two_routers.create_packet(1, 2, "hello")
    assert packet.source is two_routers.get_router(1)
    assert packet.destination is two_routers.get_router(2)
    with pytest.raises(ValueError):
        two_routers.create_packet(1, 9, "lost")


def test_routers_use_config_defaults(make_graph):
    graph = make_graph(queue_capacity=7, bucket_capacity=3, token_rate=2)
    router = graph.add_router(1)
    assert router.queue_capacity == 7
    assert router.token_bucket.capacity == 3
    assert router.token_bucket.rate == 2
    assert isinstance(router.admission_policy, TailDropPolicy)

    custom = graph.add_router(2, bucket_capacity=20, token_rate=5)
    assert custom.token_bucket.capacity == 20
    assert custom.token_bucket.rate == 5


def test_red_router_parameters(make_graph):
    graph = make_graph(drop_probability=0.2, average_queue_size=40)
    router = graph.add_red_router(1, min_threshold=0.3)
    policy = router.admission_policy
    assert isinstance(policy, REDPolicy)
    assert policy.min_threshold == 0.3
    assert policy.max_threshold == 1.0
    assert policy.drop_probability == 0.2
    assert policy.average_queue_size == 40


def test_shortest_paths_recomputed_after_new_edge(make_graph):
    graph = make_graph()
    for router_id in (1, 2, 3):
        graph.add_router(router_id)
    graph.add_edge(1, 2, 4)
    graph.add_edge(2, 3, 4)
    assert graph.shortest_paths[1][3] == 8
    assert graph.shortest_paths is graph.shortest_paths

    graph.add_edge(1, 3, 1)
    assert graph.shortest_paths[1][3] == 1


def test_networkx_mirror(two_routers):
    assert list(two_routers.graph.edges(data="weight")) == [(1, 2, 1)]
    assert len(two_routers) == 2
    assert 1 in two_routers
    assert [r.id for r in two_routers] == [1, 2]


def test_parallel_edges(make_graph):
    graph = make_graph()
    graph.add_router(1)
    graph.add_router(2)
    graph.add_edge(1, 2, 1)
    graph.add_edge(1, 2, 9)

    assert [edge.weight for edge in graph.edges()] == [1, 9]
    assert repr(graph) == "Graph(2 routers, 2 edges)"
    assert list(graph.graph.edges(data="weight")) == [(1, 2, 1)]
    assert graph.shortest_paths[1][2] == 1


def test_red_routers_seeded_from_config(make_graph):
    first = make_graph(seed=7).add_red_router(3).admission_policy
    second = make_graph(seed=7).add_red_router(3).admission_policy
    other = make_graph(seed=7).add_red_router(4).admission_policy
    draws = [first.rng.random() for _ in range(5)]
    assert draws == [second.rng.random() for _ in range(5)]
    assert draws != [other.rng.random() for _ in range(5)]

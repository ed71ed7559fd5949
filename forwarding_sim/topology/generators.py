"""Network and workload builders for the forwarding simulation.

This module provides functions for populating a Graph with routers, wiring
them into standard topologies (bus, star, ring, mesh, tree) and generating
packet workloads.
"""

import string
from typing import Callable, List, Optional, Union

import networkx as nx
import numpy as np

from forwarding_sim.core.enums import TopologyType
from forwarding_sim.core.graph import Graph
from forwarding_sim.core.packet import Packet


def add_routers(
    graph: Graph,
    num_routers: int,
    red: bool = False,
    bucket_capacity: Optional[int] = None,
    token_rate: Optional[float] = None,
) -> None:
    """Add routers with ids ``1..num_routers``.

    Args:
        graph: Network to populate.
        num_routers: Number of routers to create.
        red: Whether the routers use RED admission.
        bucket_capacity: Token bucket capacity (default from config).
        token_rate: Token refill rate (default from config).
    """
    if num_routers <= 0:
        raise ValueError(f"Number of routers must be positive, got {num_routers}")
    add = graph.add_red_router if red else graph.add_router
    for router_id in range(1, num_routers + 1):
        add(router_id, bucket_capacity, token_rate)


def _undirected_template(kind: TopologyType, nodes: range) -> nx.Graph:
    if kind is TopologyType.BUS:
        return nx.path_graph(nodes)
    if kind is TopologyType.STAR:
        return nx.star_graph(nodes)
    if kind is TopologyType.RING:
        return nx.cycle_graph(nodes)
    if kind is TopologyType.MESH:
        return nx.complete_graph(nodes)
    raise ValueError(f"{kind} has no undirected template")


def build_topology(
    graph: Graph,
    kind: Union[TopologyType, str],
    weight: int = 1,
) -> None:
    """Wire the routers ``1..n`` already in ``graph`` into a topology.

    Bus, star, ring and mesh links run in both directions. Tree links point
    from router ``i`` to ``2i`` and ``2i + 1``; children beyond ``n`` are
    skipped.

    Args:
        graph: Network whose routers are numbered 1..n.
        kind: Topology type or its name.
        weight: Weight given to every edge.
    """
    kind = TopologyType(kind)
    num_routers = len(graph)
    if sorted(graph.routers) != list(range(1, num_routers + 1)):
        raise ValueError("Topologies need routers numbered 1..n")
    nodes = range(1, num_routers + 1)

    if kind is TopologyType.TREE:
        for parent in range(1, num_routers // 2 + 1):
            for child in (2 * parent, 2 * parent + 1):
                if child <= num_routers:
                    graph.add_edge(parent, child, weight)
        return

    template = _undirected_template(kind, nodes)
    for u, v in template.edges():
        if u != v:
            graph.add_bidirectional_edge(u, v, weight)


def constant_length(length: int) -> Callable[[np.random.Generator], int]:
    """Payloads of a fixed length."""
    return lambda rng: length


def variable_length(min_length: int, max_length: int) -> Callable[[np.random.Generator], int]:
    """Payload lengths drawn uniformly from ``[min_length, max_length]``."""
    return lambda rng: int(rng.integers(min_length, max_length + 1))


def bimodal_length(
    short_length: int, long_length: int, short_prob: float = 0.7
) -> Callable[[np.random.Generator], int]:
    """Generate bimodal payload lengths (e.g., short and long payloads).

    Args:
        short_length: Length of short payloads.
        long_length: Length of long payloads.
        short_prob: Probability of a short payload (default: 0.7).

    Returns:
        Function returning either length given a random generator.
    """
    return lambda rng: short_length if rng.random() < short_prob else long_length


def random_payload(rng: np.random.Generator, length: int) -> str:
    letters = np.array(list(string.ascii_lowercase))
    return "".join(rng.choice(letters, size=length))


def random_packets(
    graph: Graph,
    count: int,
    rng: Optional[np.random.Generator] = None,
    payload_length: Callable[[np.random.Generator], int] = variable_length(1, 8),
) -> List[Packet]:
    """Create packets between random distinct routers.

    Args:
        graph: Network with at least two routers.
        count: Number of packets.
        rng: Random generator (default: a fresh unseeded one).
        payload_length: Function drawing a payload length.

    Returns:
        The created packets.
    """
    if len(graph) < 2:
        raise ValueError("Random packets need at least two routers")
    if rng is None:
        rng = np.random.default_rng()
    router_ids = list(graph.routers)
    packets = []
    for _ in range(count):
        source_id, destination_id = rng.choice(router_ids, size=2, replace=False)
        data = random_payload(rng, payload_length(rng))
        packets.append(graph.create_packet(int(source_id), int(destination_id), data))
    return packets

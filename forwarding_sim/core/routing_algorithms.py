"""Shortest path computation and next hop selection.

Distances are computed with Dijkstra's algorithm over the directed, positively
weighted edge set. Tables are keyed by router id:
``shortest_paths[source_id][destination_id] -> distance``, with ``math.inf``
for unreachable destinations.
"""

from itertools import count
import heapq
import math
from typing import Dict, Iterable, Optional

from forwarding_sim.core.enums import NextHopStrategy
from forwarding_sim.core.node import Router

DistanceTable = Dict[int, float]
ShortestPaths = Dict[int, DistanceTable]


def dijkstra(routers: Iterable[Router], source: Router) -> DistanceTable:
    """Single-source shortest distances from ``source``.

    Args:
        routers: Every router of the network.
        source: Router to measure distances from.

    Returns:
        Distance to every router, ``math.inf`` when unreachable.
    """
    distances: DistanceTable = {router.id: math.inf for router in routers}
    distances[source.id] = 0
    visited = set()
    # (distance, push order, router)
    order = count()
    queue = [(0, next(order), source)]

    while queue:
        current_distance, _, current = heapq.heappop(queue)
        if current.id in visited:
            continue
        visited.add(current.id)

        for edge in current.outgoing_edges:
            neighbour = edge.destination
            new_distance = current_distance + edge.weight
            if new_distance < distances[neighbour.id]:
                distances[neighbour.id] = new_distance
                heapq.heappush(queue, (new_distance, next(order), neighbour))

    return distances


def all_pairs_shortest_paths(routers: Iterable[Router]) -> ShortestPaths:
    """Run Dijkstra from every router.

    Args:
        routers: Every router of the network.

    Returns:
        Mapping source id -> (destination id -> distance).
    """
    routers = list(routers)
    return {router.id: dijkstra(routers, router) for router in routers}


def select_next_hop(
    router: Router,
    destination: Router,
    shortest_paths: ShortestPaths,
    strategy: NextHopStrategy = NextHopStrategy.SHORTEST_PATH,
) -> Optional[Router]:
    """
    Pick the neighbour a packet for ``destination`` should move to.

    With SHORTEST_PATH the neighbour minimising ``edge weight + distance from
    the neighbour to the destination`` wins; the first edge wins ties. With
    LAST_EDGE the last outgoing edge is used whenever the destination is
    reachable from this router.

    Args:
        router: Router currently holding the packet.
        destination: Packet destination.
        shortest_paths: All-pairs distance table.
        strategy: Selection strategy.

    Returns:
        The next hop router, or None if no neighbour leads to the destination.
    """
    if strategy is NextHopStrategy.LAST_EDGE:
        if not router.outgoing_edges:
            return None
        if shortest_paths[router.id].get(destination.id, math.inf) == math.inf:
            return None
        return router.outgoing_edges[-1].destination

    best_distance = math.inf
    next_hop = None
    for edge in router.outgoing_edges:
        neighbour = edge.destination
        distance = edge.weight + shortest_paths[neighbour.id].get(destination.id, math.inf)
        if distance < best_distance:
            best_distance = distance
            next_hop = neighbour
    return next_hop

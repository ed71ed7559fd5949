"""Graph class for the forwarding simulation.

This module defines the Graph class, which owns every router by id, builds
the directed edges between them and computes the all-pairs shortest path
table the forwarding engine routes with.
"""

import logging
import time
from typing import Callable, Dict, Iterator, List, Optional

import networkx as nx

from forwarding_sim.config import SimulationConfig
from forwarding_sim.core.admission import AdmissionPolicy, admission_policy_factory
from forwarding_sim.core.link import Edge
from forwarding_sim.core.node import Router
from forwarding_sim.core.packet import Packet
from forwarding_sim.core.routing_algorithms import ShortestPaths, all_pairs_shortest_paths

logger = logging.getLogger(__name__)


class Graph:
    """Router network.

    Attributes:
        config: Simulation configuration supplying router defaults.
        clock: Time source handed to every router's token bucket.
        routers: Router objects keyed by id, in insertion order.
        graph: NetworkX directed graph mirroring the edges. Parallel edges
            collapse into one carrying the lowest ``weight``.
    """

    def __init__(
        self,
        config: Optional[SimulationConfig] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize an empty network.

        Args:
            config: Simulation configuration (default: ``SimulationConfig()``).
            clock: Time source for token buckets.
        """
        self.config = config or SimulationConfig()
        self.clock = clock
        self.routers: Dict[int, Router] = {}
        self.graph = nx.DiGraph()
        self._shortest_paths: Optional[ShortestPaths] = None

    def add_router(
        self,
        router_id: int,
        bucket_capacity: Optional[int] = None,
        token_rate: Optional[float] = None,
        admission_policy: Optional[AdmissionPolicy] = None,
    ) -> Router:
        """Add a router to the network.

        Args:
            router_id: Unique identifier for the router.
            bucket_capacity: Token bucket capacity (default from config).
            token_rate: Token refill rate (default from config).
            admission_policy: Admission policy (default: tail drop).

        Returns:
            The created Router object.
        """
        if router_id in self.routers:
            raise ValueError(f"Router {router_id} already exists")
        config = self.config
        router = Router(
            router_id,
            config.bucket_capacity if bucket_capacity is None else bucket_capacity,
            config.token_rate if token_rate is None else token_rate,
            admission_policy=admission_policy or admission_policy_factory("tail_drop"),
            queue_capacity=config.queue_capacity,
            clock=self.clock,
            propagation_delay=config.propagation_delay,
            transmission_delay_per_char=config.transmission_delay_per_char,
            processing_delay=config.processing_delay,
        )
        self.routers[router_id] = router
        self.graph.add_node(router_id)
        self._shortest_paths = None
        logger.debug("Added %r", router)
        return router

    def add_red_router(
        self,
        router_id: int,
        bucket_capacity: Optional[int] = None,
        token_rate: Optional[float] = None,
        min_threshold: Optional[float] = None,
        max_threshold: Optional[float] = None,
        drop_probability: Optional[float] = None,
        average_queue_size: Optional[float] = None,
    ) -> Router:
        """Add a router using RED admission.

        RED parameters left as None fall back to the configuration defaults.

        Returns:
            The created Router object.
        """
        params = self.config.red_parameters()
        overrides = {
            "min_threshold": min_threshold,
            "max_threshold": max_threshold,
            "drop_probability": drop_probability,
            "average_queue_size": average_queue_size,
        }
        params.update({k: v for k, v in overrides.items() if v is not None})
        seed = None if self.config.seed is None else self.config.seed + router_id
        policy = admission_policy_factory("red", seed=seed, **params)
        return self.add_router(router_id, bucket_capacity, token_rate, policy)

    def add_edge(self, source_id: int, destination_id: int, weight: int) -> Edge:
        """Add a directed edge between two existing routers.

        Args:
            source_id: Source router ID.
            destination_id: Destination router ID.
            weight: Positive integer weight.

        Returns:
            The created Edge object.
        """
        source = self.routers.get(source_id)
        destination = self.routers.get(destination_id)
        if source is None or destination is None:
            raise ValueError(
                f"Source or destination router does not exist: {source_id} -> {destination_id}"
            )
        edge = Edge(source, destination, weight)
        source.add_outgoing_edge(edge)
        if self.graph.has_edge(source_id, destination_id):
            weight = min(weight, self.graph[source_id][destination_id]["weight"])
        self.graph.add_edge(source_id, destination_id, weight=weight)
        self._shortest_paths = None
        return edge

    def add_bidirectional_edge(self, first_id: int, second_id: int, weight: int = 1) -> None:
        """Add edges in both directions between two routers."""
        self.add_edge(first_id, second_id, weight)
        self.add_edge(second_id, first_id, weight)

    def get_router(self, router_id: int) -> Router:
        """Return the router with the given id, raising if it does not exist."""
        try:
            return self.routers[router_id]
        except KeyError:
            raise ValueError(f"Router {router_id} does not exist") from None

    def create_packet(self, source_id: int, destination_id: int, data: str) -> Packet:
        """Create a packet between two existing routers.

        Args:
            source_id: Source router ID.
            destination_id: Destination router ID.
            data: Payload string.

        Returns:
            The created Packet object.
        """
        return Packet(self.get_router(source_id), self.get_router(destination_id), data)

    def calculate_shortest_paths(self) -> ShortestPaths:
        """Recompute the all-pairs shortest distance table."""
        self._shortest_paths = all_pairs_shortest_paths(self.routers.values())
        return self._shortest_paths

    @property
    def shortest_paths(self) -> ShortestPaths:
        """Shortest distance table, recomputed after any topology change."""
        if self._shortest_paths is None:
            return self.calculate_shortest_paths()
        return self._shortest_paths

    def edges(self) -> List[Edge]:
        return [edge for router in self.routers.values() for edge in router.outgoing_edges]

    def __iter__(self) -> Iterator[Router]:
        return iter(self.routers.values())

    def __len__(self) -> int:
        return len(self.routers)

    def __contains__(self, router_id: int) -> bool:
        return router_id in self.routers

    def __repr__(self) -> str:
        return f"Graph({len(self.routers)} routers, {len(self.edges())} edges)"

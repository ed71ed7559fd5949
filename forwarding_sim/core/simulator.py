"""Forwarding engine for the network simulation.

This module defines the ForwardingEngine class, which injects packets at
their source routers and runs forwarding passes over the network: every
router drains a snapshot of its queue, spending tokens, choosing next hops
from the shortest path table and handing packets to the next router's
admission policy.
"""

from collections import deque
from dataclasses import dataclass, fields
import logging
import time
from typing import Any, Callable, Dict, Iterable, List, Optional

import simpy

from forwarding_sim.config import SimulationConfig
from forwarding_sim.core.enums import DropReason
from forwarding_sim.core.graph import Graph
from forwarding_sim.core.node import Router
from forwarding_sim.core.packet import Packet
from forwarding_sim.core.routing_algorithms import ShortestPaths, select_next_hop

logger = logging.getLogger(__name__)


@dataclass
class PassReport:
    """Outcome counts of one or more forwarding passes.

    Attributes:
        injected: Packets accepted by their source router.
        forwarded: Packets moved to a next hop.
        dropped: Packets lost, at injection or at a next hop's admission.
        token_starved: Forwarding attempts refused by a token bucket.
        unroutable: Attempts where no next hop led to the destination.
        delivered: Packets that reached their destination router, each counted
            once across passes.
        total_delay: Delay accumulated by forwarded packets.
    """

    injected: int = 0
    forwarded: int = 0
    dropped: int = 0
    token_starved: int = 0
    unroutable: int = 0
    delivered: int = 0
    total_delay: int = 0

    def merge(self, other: "PassReport") -> "PassReport":
        """Add the counts of ``other`` to this report in place."""
        for f in fields(self):
            setattr(self, f.name, getattr(self, f.name) + getattr(other, f.name))
        return self


class ForwardingEngine:
    """Runs forwarding passes over a Graph.

    Attributes:
        graph: Network being simulated.
        config: Simulation configuration.
        passes_run: Number of completed forwarding passes.
        execution_time: Wall time spent in the last simulation call, seconds.
        hooks: Callbacks keyed by event type.
    """

    def __init__(self, graph: Graph, config: Optional[SimulationConfig] = None):
        """Initialize the engine.

        Args:
            graph: Network to forward packets through.
            config: Simulation configuration (default: the graph's).
        """
        self.graph = graph
        self.config = config or graph.config
        self.passes_run = 0
        self.execution_time = 0.0

        self.hooks: Dict[str, List[Callable[..., Any]]] = {
            "packet_forwarded": [],  # packet, router, next hop, delay
            "packet_dropped": [],  # packet, router, reason
            "packet_stalled": [],  # packet, router, cause
            "packet_delivered": [],  # packet, router
            "pass_end": [],  # pass number, report
        }

    def register_hook(self, event_type: str, callback: Callable[..., Any]) -> None:
        """Register a callback function for a specific event type.

        Args:
            event_type: The type of event to register for.
            callback: The function to call when the event occurs.
        """
        if event_type not in self.hooks:
            raise ValueError(f"Unknown hook type: {event_type}")
        self.hooks[event_type].append(callback)

    def call_hooks(self, event_type: str, *args: Any) -> None:
        for callback in self.hooks[event_type]:
            callback(*args)

    def inject_packets(self, packets: Iterable[Packet]) -> PassReport:
        """Enqueue every packet at its source router.

        Args:
            packets: Packets to inject.

        Returns:
            Report with injected and dropped counts.
        """
        report = PassReport()
        for packet in packets:
            source = packet.source
            if self.graph.routers.get(source.id) is not source:
                raise ValueError(f"{packet} does not start at a router of this network")
            reason = source.offer_packet(packet)
            if reason is None:
                report.injected += 1
            else:
                logger.info("Packet dropped at source router %s: %s", source.id, packet)
                report.dropped += 1
                self.call_hooks("packet_dropped", packet, source, reason)
        return report

    def forward_packets(self, router: Router, shortest_paths: ShortestPaths) -> PassReport:
        """Try to forward every packet queued at ``router``.

        The queue is snapshotted first, so packets arriving during the pass
        wait for the next one.

        Args:
            router: Router whose queue is drained.
            shortest_paths: All-pairs distance table.

        Returns:
            Report of the outcomes at this router.
        """
        report = PassReport()
        removed = set()

        for packet in list(router.queue):
            if packet.destination is router:
                if packet.id not in router.delivered_ids:
                    router.delivered_ids.add(packet.id)
                    report.delivered += 1
                    self.call_hooks("packet_delivered", packet, router)
                continue

            if not router.token_bucket.try_consume(1):
                logger.debug("Insufficient tokens at router %s for packet: %s", router.id, packet)
                report.token_starved += 1
                self.call_hooks("packet_stalled", packet, router, "tokens")
                continue

            next_hop = select_next_hop(
                router, packet.destination, shortest_paths, self.config.next_hop_strategy
            )
            if next_hop is None:
                if self._handle_unroutable(router, packet, report):
                    removed.add(packet.id)
                continue

            router.stalled_passes.pop(packet.id, None)
            logger.debug("Forwarding %s from router %s to router %s", packet, router.id, next_hop.id)
            removed.add(packet.id)
            reason = next_hop.offer_packet(packet)
            if reason is None:
                delay = router.record_forward(packet)
                report.forwarded += 1
                report.total_delay += delay
                self.call_hooks("packet_forwarded", packet, router, next_hop, delay)
            else:
                report.dropped += 1
                self.call_hooks("packet_dropped", packet, next_hop, reason)

        if removed:
            router.queue = deque(p for p in router.queue if p.id not in removed)
        return report

    def _handle_unroutable(self, router: Router, packet: Packet, report: PassReport) -> bool:
        """Count a pass without a route; return True if the packet is dropped."""
        stalled = router.stalled_passes.get(packet.id, 0) + 1
        limit = self.config.max_stalled_passes
        if limit is not None and stalled >= limit:
            router.stalled_passes.pop(packet.id, None)
            router.record_drop(DropReason.NO_ROUTE)
            logger.info("No route from router %s, dropping packet: %s", router.id, packet)
            report.dropped += 1
            self.call_hooks("packet_dropped", packet, router, DropReason.NO_ROUTE)
            return True
        router.stalled_passes[packet.id] = stalled
        logger.debug("No route from router %s for packet: %s", router.id, packet)
        report.unroutable += 1
        self.call_hooks("packet_stalled", packet, router, "no_route")
        return False

    def forward_pass(self, shortest_paths: Optional[ShortestPaths] = None) -> PassReport:
        """Visit every router once, in insertion order, and forward its queue.

        Args:
            shortest_paths: Distance table (default: the graph's current one).

        Returns:
            Report of the whole pass.
        """
        if shortest_paths is None:
            shortest_paths = self.graph.shortest_paths
        report = PassReport()
        for router in self.graph:
            report.merge(self.forward_packets(router, shortest_paths))
        self.passes_run += 1
        logger.info(
            "Pass %d: forwarded=%d dropped=%d token_starved=%d unroutable=%d delivered=%d",
            self.passes_run,
            report.forwarded,
            report.dropped,
            report.token_starved,
            report.unroutable,
            report.delivered,
        )
        self.call_hooks("pass_end", self.passes_run, report)
        return report

    def simulate_traffic(self, packets: Iterable[Packet]) -> PassReport:
        """Inject packets and run exactly one forwarding pass.

        Args:
            packets: Packets to inject at their source routers.

        Returns:
            Combined report of injection and the pass.
        """
        logger.info("Simulating traffic...")
        start_time = time.perf_counter()
        shortest_paths = self.graph.calculate_shortest_paths()
        report = self.inject_packets(packets)
        report.merge(self.forward_pass(shortest_paths))
        self.execution_time = time.perf_counter() - start_time
        logger.info("Traffic simulation completed.")
        return report

    def run(
        self,
        env: simpy.Environment,
        packets: Iterable[Packet],
        passes: int,
        interval: float = 1.0,
    ) -> PassReport:
        """Inject packets once, then run repeated passes in simulated time.

        Token buckets refill from the graph clock, so build the graph with
        ``clock=lambda: env.now`` for the interval to replenish tokens.

        Args:
            env: SimPy environment driving the passes.
            packets: Packets to inject before the first pass.
            passes: Number of forwarding passes.
            interval: Simulated seconds between passes.

        Returns:
            Combined report of injection and all passes.
        """
        if passes <= 0:
            raise ValueError(f"passes must be positive, got {passes}")
        report = PassReport()

        def forwarding_process():
            shortest_paths = self.graph.calculate_shortest_paths()
            report.merge(self.inject_packets(packets))
            for i in range(passes):
                if i:
                    yield env.timeout(interval)
                report.merge(self.forward_pass(shortest_paths))

        start_time = time.perf_counter()
        env.process(forwarding_process())
        env.run()
        self.execution_time = time.perf_counter() - start_time
        return report

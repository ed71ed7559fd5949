"""Router class for the forwarding simulation.

This module defines the Router class, which owns an outgoing edge list, a
bounded FIFO queue, a token bucket, an admission policy and the counters the
statistics reporting reads after a simulation.
"""

from collections import Counter, deque
import logging
import time
from typing import Callable, Deque, Dict, List, Optional, Set

from forwarding_sim.core.admission import AdmissionPolicy, TailDropPolicy
from forwarding_sim.core.enums import DropReason
from forwarding_sim.core.link import Edge
from forwarding_sim.core.packet import Packet
from forwarding_sim.core.token_bucket import TokenBucket

logger = logging.getLogger(__name__)

DEFAULT_QUEUE_CAPACITY = 100
PROPAGATION_DELAY = 10
TRANSMISSION_DELAY_PER_CHAR = 2
PROCESSING_DELAY = 5


class Router:
    """Represents a router with congestion control.

    Attributes:
        id: Unique identifier for the router.
        outgoing_edges: Outgoing edges in insertion order.
        queue: FIFO queue of packets waiting to be forwarded.
        queue_capacity: Maximum number of queued packets.
        token_bucket: Rate limiter spending one token per forwarding attempt.
        admission_policy: Decides whether arriving packets join the queue.
        total_delay: Accumulated delay of forwarded packets.
        packets_forwarded: Number of packets moved to a next hop.
        packets_dropped: Number of packets this router refused or discarded.
        drops_by_reason: Drop counts keyed by DropReason.
        stalled_passes: Consecutive unroutable passes keyed by packet id.
        delivered_ids: Ids of packets already counted as delivered here.
    """

    def __init__(
        self,
        router_id: int,
        bucket_capacity: int,
        token_rate: float,
        admission_policy: Optional[AdmissionPolicy] = None,
        queue_capacity: int = DEFAULT_QUEUE_CAPACITY,
        clock: Callable[[], float] = time.monotonic,
        propagation_delay: int = PROPAGATION_DELAY,
        transmission_delay_per_char: int = TRANSMISSION_DELAY_PER_CHAR,
        processing_delay: int = PROCESSING_DELAY,
    ) -> None:
        """Initialize a router.

        Args:
            router_id: Unique identifier for the router.
            bucket_capacity: Token bucket capacity.
            token_rate: Token refill rate in tokens per second.
            admission_policy: Queue admission policy (default: tail drop).
            queue_capacity: Maximum queue length.
            clock: Time source handed to the token bucket.
            propagation_delay: Fixed propagation delay per hop.
            transmission_delay_per_char: Transmission delay per payload character.
            processing_delay: Fixed processing delay per hop.
        """
        if queue_capacity <= 0:
            raise ValueError(f"Queue capacity must be positive, got {queue_capacity}")
        self.id = router_id
        self.outgoing_edges: List[Edge] = []
        self.queue: Deque[Packet] = deque()
        self.queue_capacity = queue_capacity
        self.token_bucket = TokenBucket(bucket_capacity, token_rate, clock)
        self.admission_policy = admission_policy or TailDropPolicy()
        self.propagation_delay = propagation_delay
        self.transmission_delay_per_char = transmission_delay_per_char
        self.processing_delay = processing_delay
        self.total_delay = 0
        self.packets_forwarded = 0
        self.packets_dropped = 0
        self.drops_by_reason: Counter = Counter()
        self.stalled_passes: Dict[int, int] = {}
        self.delivered_ids: Set[int] = set()

    def add_outgoing_edge(self, edge: Edge) -> None:
        """Append an outgoing edge.

        Args:
            edge: The edge to add, its source must be this router.
        """
        if edge.source is not self:
            raise ValueError(f"Edge {edge} does not start at router {self.id}")
        self.outgoing_edges.append(edge)

    def enqueue_packet(self, packet: Packet) -> bool:
        """Queue a packet if the admission policy accepts it.

        Returns:
            True if the packet was queued, False if it was dropped.
        """
        return self.offer_packet(packet) is None

    def offer_packet(self, packet: Packet) -> Optional[DropReason]:
        """Offer a packet to the queue through the admission policy.

        Args:
            packet: The arriving packet.

        Returns:
            None if the packet was queued, otherwise the drop reason.
        """
        reason = self.admission_policy.admit(len(self.queue), self.queue_capacity)
        if reason is None:
            self.queue.append(packet)
            return None
        if reason is DropReason.RED:
            logger.info("Packet dropped due to RED at router %s: %s", self.id, packet)
        else:
            logger.info("Queue at router %s is full. Dropping packet: %s", self.id, packet)
        self.record_drop(reason)
        return reason

    def dequeue_packet(self) -> Optional[Packet]:
        """Remove and return the oldest queued packet, or None if empty."""
        return self.queue.popleft() if self.queue else None

    def record_drop(self, reason: DropReason) -> None:
        self.packets_dropped += 1
        self.drops_by_reason[reason] += 1

    def record_forward(self, packet: Packet) -> int:
        """Credit a forwarded packet and return the delay it added."""
        delay = self.calculate_delay(packet)
        self.packets_forwarded += 1
        self.total_delay += delay
        return delay

    def calculate_delay(self, packet: Packet) -> int:
        """Propagation plus transmission plus processing delay for one hop."""
        transmission_delay = packet.length * self.transmission_delay_per_char
        return self.propagation_delay + transmission_delay + self.processing_delay

    def calculate_utilization(self) -> float:
        total_packets = self.packets_forwarded + self.packets_dropped
        return self.packets_forwarded / total_packets if total_packets > 0 else 0.0

    def calculate_path_efficiency(self) -> float:
        total_weight = sum(edge.weight for edge in self.outgoing_edges)
        return 1 / total_weight if total_weight > 0 else 0.0

    def calculate_packet_delivery_ratio(self) -> float:
        total_packets = self.packets_forwarded + self.packets_dropped
        return self.packets_forwarded / total_packets if total_packets > 0 else 0.0

    def calculate_network_load(self) -> int:
        return len(self.queue)

    def __repr__(self) -> str:
        """Return string representation of the router.

        Returns:
            String representation of the router.
        """
        return f"Router({self.id}, {self.admission_policy})"

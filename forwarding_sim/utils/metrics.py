"""Metrics utilities for the forwarding simulation.

This module reads the counters routers accumulate during forwarding passes
and turns them into router-wise and network-wide statistics, including
throughput, latency and drop breakdowns, and saves them to JSON or CSV.
"""

import csv
from dataclasses import asdict, dataclass, field
import json
import os
import tracemalloc
from typing import Any, Dict, List, Optional

import numpy as np

from forwarding_sim.core.enums import DropReason
from forwarding_sim.core.graph import Graph
from forwarding_sim.core.node import Router


@dataclass
class RouterStatistics:
    """Statistics of a single router."""

    router_id: int
    policy: str
    total_delay: int
    packets_forwarded: int
    packets_dropped: int
    utilization: float
    path_efficiency: float
    packet_delivery_ratio: float
    network_load: int
    drops_by_reason: Dict[str, int] = field(default_factory=dict)

    @classmethod
    def from_router(cls, router: Router) -> "RouterStatistics":
        return cls(
            router_id=router.id,
            policy=router.admission_policy.name,
            total_delay=router.total_delay,
            packets_forwarded=router.packets_forwarded,
            packets_dropped=router.packets_dropped,
            utilization=router.calculate_utilization(),
            path_efficiency=router.calculate_path_efficiency(),
            packet_delivery_ratio=router.calculate_packet_delivery_ratio(),
            network_load=router.calculate_network_load(),
            drops_by_reason={
                reason.value: router.drops_by_reason[reason]
                for reason in DropReason
                if router.drops_by_reason[reason]
            },
        )


@dataclass
class NetworkStatistics:
    """Network-wide statistics.

    Attributes:
        routers: Per-router statistics in graph order.
        total_packets_forwarded: Sum of forwarded counters.
        total_packets_dropped: Sum of dropped counters.
        total_delay: Sum of router delays.
        execution_time_ms: Wall time of the simulation in milliseconds.
        throughput: Forwarded packets per millisecond, 0 if no time elapsed.
        latency: Average delay per forwarded packet, 0 if none was forwarded.
        memory_usage: Bytes traced by ``tracemalloc``, None when not tracing.
    """

    routers: List[RouterStatistics]
    total_packets_forwarded: int
    total_packets_dropped: int
    total_delay: int
    execution_time_ms: float
    throughput: float
    latency: float
    memory_usage: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def router_statistics(graph: Graph) -> List[RouterStatistics]:
    """Collect statistics for every router in graph order."""
    return [RouterStatistics.from_router(router) for router in graph]


def get_memory_usage() -> Optional[int]:
    """Current traced memory in bytes, or None if tracemalloc is not running."""
    if not tracemalloc.is_tracing():
        return None
    current, _ = tracemalloc.get_traced_memory()
    return current


def calculate_network_statistics(graph: Graph, execution_time: float = 0.0) -> NetworkStatistics:
    """Aggregate router counters into network-wide statistics.

    Args:
        graph: Simulated network.
        execution_time: Wall time of the simulation in seconds.

    Returns:
        The network statistics.
    """
    rows = router_statistics(graph)
    forwarded = np.array([row.packets_forwarded for row in rows], dtype=np.int64)
    dropped = np.array([row.packets_dropped for row in rows], dtype=np.int64)
    delays = np.array([row.total_delay for row in rows], dtype=np.int64)

    total_forwarded = int(forwarded.sum())
    total_delay = int(delays.sum())
    execution_time_ms = execution_time * 1000

    return NetworkStatistics(
        routers=rows,
        total_packets_forwarded=total_forwarded,
        total_packets_dropped=int(dropped.sum()),
        total_delay=total_delay,
        execution_time_ms=execution_time_ms,
        throughput=total_forwarded / execution_time_ms if execution_time_ms > 0 else 0.0,
        latency=total_delay / total_forwarded if total_forwarded > 0 else 0.0,
        memory_usage=get_memory_usage(),
    )


def format_router_statistics(stats: NetworkStatistics) -> str:
    """Router-wise statistics as printable text."""
    lines = []
    for row in stats.routers:
        lines.extend(
            [
                f"Router {row.router_id} statistics ({row.policy}):",
                f"Total delay: {row.total_delay}",
                f"Packets forwarded: {row.packets_forwarded}",
                f"Packets dropped: {row.packets_dropped}",
                f"Utilization: {row.utilization:.4f}",
                f"Path efficiency: {row.path_efficiency:.4f}",
                f"Packet delivery ratio: {row.packet_delivery_ratio:.4f}",
                f"Network load: {row.network_load}",
            ]
        )
        if row.drops_by_reason:
            reasons = ", ".join(f"{k}={v}" for k, v in row.drops_by_reason.items())
            lines.append(f"Drops by reason: {reasons}")
        lines.append("")
    return "\n".join(lines)


def format_network_statistics(stats: NetworkStatistics) -> str:
    """Network-wide statistics as printable text."""
    memory = "n/a" if stats.memory_usage is None else f"{stats.memory_usage} bytes"
    return "\n".join(
        [
            f"Total execution time: {stats.execution_time_ms:.3f} ms",
            f"Total memory usage: {memory}",
            f"Throughput: {stats.throughput:.4f} packets/ms",
            f"Latency: {stats.latency:.4f} per packet",
            f"Total packets forwarded: {stats.total_packets_forwarded}",
            f"Total packets dropped: {stats.total_packets_dropped}",
        ]
    )


def save_metrics_to_json(
    stats: NetworkStatistics, filename: str = "results/metrics.json"
) -> None:
    """Save network statistics to a JSON file.

    Args:
        stats: Statistics to save.
        filename: Output filename.
    """
    directory = os.path.dirname(filename)
    if directory:
        os.makedirs(directory, exist_ok=True)

    with open(filename, "w") as f:
        json.dump(stats.to_dict(), f, indent=2)


def save_router_statistics_to_csv(
    stats: NetworkStatistics, filename: str = "results/router_statistics.csv"
) -> None:
    """Save router-wise statistics to a CSV file.

    Args:
        stats: Statistics to save.
        filename: Output filename.
    """
    directory = os.path.dirname(filename)
    if directory:
        os.makedirs(directory, exist_ok=True)

    with open(filename, "w", newline="") as f:
        writer = csv.writer(f)

        writer.writerow(
            [
                "Router",
                "Policy",
                "Total Delay",
                "Packets Forwarded",
                "Packets Dropped",
                "Utilization",
                "Path Efficiency",
                "Packet Delivery Ratio",
                "Network Load",
            ]
        )

        for row in stats.routers:
            writer.writerow(
                [
                    row.router_id,
                    row.policy,
                    row.total_delay,
                    row.packets_forwarded,
                    row.packets_dropped,
                    row.utilization,
                    row.path_efficiency,
                    row.packet_delivery_ratio,
                    row.network_load,
                ]
            )

#!/usr/bin/env python3
"""Example forwarding simulation using the forwarding_sim package.

This script builds the same congested star network twice, once with tail-drop
routers and once with RED routers, runs several forwarding passes in
simulated time and compares the resulting statistics.
"""

from typing import Dict, List
import numpy as np
import simpy

from forwarding_sim.config import SimulationConfig
from forwarding_sim.core.graph import Graph
from forwarding_sim.core.simulator import ForwardingEngine
from forwarding_sim.topology.generators import add_routers, bimodal_length, build_topology, random_packets
from forwarding_sim.utils.logging_setup import configure_logging
from forwarding_sim.utils.metrics import (
    NetworkStatistics,
    calculate_network_statistics,
    format_network_statistics,
    save_metrics_to_json,
)
from forwarding_sim.utils.visualization import (
    plot_policy_comparison,
    plot_router_statistics,
    save_network_visualization,
)


def run_policy(
    red: bool,
    config: SimulationConfig,
    num_routers: int,
    num_packets: int,
    passes: int,
) -> tuple[Graph, NetworkStatistics]:
    """Build the star network with one admission policy and simulate it.

    Args:
        red: Whether routers use RED admission.
        config: Simulation configuration.
        num_routers: Number of routers in the star.
        num_packets: Number of random packets.
        passes: Number of forwarding passes, one simulated second apart.

    Returns:
        The simulated graph and its statistics.
    """
    env = simpy.Environment()
    graph = Graph(config, lambda: env.now)
    add_routers(graph, num_routers, red=red)
    build_topology(graph, "star")

    rng = np.random.default_rng(config.seed)
    packets = random_packets(graph, num_packets, rng, bimodal_length(2, 16, 0.8))

    engine = ForwardingEngine(graph)
    engine.run(env, packets, passes, interval=1.0)
    return graph, calculate_network_statistics(graph, engine.execution_time)


def main() -> None:
    """Run both admission policies and compare results."""
    configure_logging("WARNING")

    output_dir: str = "results"

    # A small hub queue makes router 1 the bottleneck
    config = SimulationConfig(
        queue_capacity=20,
        bucket_capacity=8,
        token_rate=8,
        min_threshold=0.4,
        max_threshold=0.9,
        drop_probability=0.3,
        average_queue_size=20,
        max_stalled_passes=3,
        seed=42,
    )

    results: Dict[str, NetworkStatistics] = {}
    labels: List[str] = ["Tail-Drop", "RED"]
    for label in labels:
        print(f"Running simulation with {label} routers...")
        graph, stats = run_policy(label == "RED", config, 8, 150, 5)
        results[label] = stats

        save_metrics_to_json(stats, f"{output_dir}/{label.lower()}_metrics.json")
        plot_router_statistics(stats, f"{output_dir}/{label.lower()}")
        print(format_network_statistics(stats))
        print()

    save_network_visualization(graph, f"{output_dir}/topology.png")
    plot_policy_comparison(results, output_dir)

    print(f"\nSimulation complete. Results saved to '{output_dir}' directory.")


if __name__ == "__main__":
    main()

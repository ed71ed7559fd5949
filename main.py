import argparse
import logging
import time
import tracemalloc
from typing import List, Optional

import numpy as np
import simpy

from forwarding_sim.config import SimulationConfig
from forwarding_sim.core.enums import NextHopStrategy, TopologyType
from forwarding_sim.core.graph import Graph
from forwarding_sim.core.packet import Packet
from forwarding_sim.core.simulator import ForwardingEngine, PassReport
from forwarding_sim.topology.generators import add_routers, build_topology, random_packets
from forwarding_sim.utils.logging_setup import configure_logging
from forwarding_sim.utils.metrics import (
    NetworkStatistics,
    calculate_network_statistics,
    format_network_statistics,
    format_router_statistics,
    save_metrics_to_json,
    save_router_statistics_to_csv,
)

logger = logging.getLogger(__name__)

CONFIG_OVERRIDES = (
    "queue_capacity",
    "bucket_capacity",
    "token_rate",
    "min_threshold",
    "max_threshold",
    "drop_probability",
    "average_queue_size",
    "next_hop_strategy",
    "max_stalled_passes",
    "seed",
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Packet forwarding simulation")
    parser.add_argument("--config", help="JSON configuration file")
    parser.add_argument(
        "--topology",
        choices=[t.value for t in TopologyType] + ["manual"],
        default="bus",
        help="Network shape; 'manual' uses the --edge arguments",
    )
    parser.add_argument("--routers", type=int, default=5, help="Number of routers")
    parser.add_argument("--red", action="store_true", help="Use RED admission on every router")
    parser.add_argument(
        "--red-router", type=int, action="append", default=[], metavar="ID",
        help="Use RED admission on this router (repeatable)",
    )
    parser.add_argument(
        "--edge", type=int, nargs=3, action="append", default=[],
        metavar=("SRC", "DST", "WEIGHT"), help="Directed edge for manual networks (repeatable)",
    )
    parser.add_argument(
        "--packet", nargs=3, action="append", default=[],
        metavar=("SRC", "DST", "DATA"), help="Explicit packet (repeatable)",
    )
    parser.add_argument("--packets", type=int, default=0, help="Number of random packets")
    parser.add_argument("--passes", type=int, default=1, help="Number of forwarding passes")
    parser.add_argument(
        "--interval", type=float, default=1.0, help="Simulated seconds between passes"
    )

    parser.add_argument("--queue-capacity", dest="queue_capacity", type=int)
    parser.add_argument("--bucket-capacity", dest="bucket_capacity", type=int)
    parser.add_argument("--token-rate", dest="token_rate", type=float)
    parser.add_argument("--min-threshold", dest="min_threshold", type=float)
    parser.add_argument("--max-threshold", dest="max_threshold", type=float)
    parser.add_argument("--drop-probability", dest="drop_probability", type=float)
    parser.add_argument("--average-queue-size", dest="average_queue_size", type=float)
    parser.add_argument(
        "--next-hop", dest="next_hop_strategy", choices=[s.value for s in NextHopStrategy]
    )
    parser.add_argument("--max-stalled-passes", dest="max_stalled_passes", type=int)
    parser.add_argument("--seed", type=int)

    parser.add_argument("--output-dir", help="Directory for JSON/CSV statistics")
    parser.add_argument("--visualize", action="store_true", help="Plot network and statistics")
    parser.add_argument("--log-level", default="INFO", help="Logging level")
    parser.add_argument("--log-file", help="Append logs to this file")
    return parser


def load_config(args: argparse.Namespace) -> SimulationConfig:
    """Configuration file (if any) with command line overrides applied."""
    data = {}
    if args.config:
        data = SimulationConfig.load_from_file(args.config).to_dict()
    for key in CONFIG_OVERRIDES:
        value = getattr(args, key)
        if value is not None:
            data[key] = value
    return SimulationConfig.from_dict(data)


def build_network(args: argparse.Namespace, graph: Graph) -> None:
    """Create routers and edges described by the arguments."""
    if args.edge and args.topology != "manual":
        raise ValueError("--edge requires --topology manual")
    red_ids = set(args.red_router)
    unknown = sorted(i for i in red_ids if not 1 <= i <= args.routers)
    if unknown:
        raise ValueError(f"--red-router ids out of range 1..{args.routers}: {unknown}")
    if not red_ids:
        add_routers(graph, args.routers, red=args.red)
    else:
        for router_id in range(1, args.routers + 1):
            if args.red or router_id in red_ids:
                graph.add_red_router(router_id)
            else:
                graph.add_router(router_id)

    if args.topology == "manual":
        for source_id, destination_id, weight in args.edge:
            graph.add_edge(source_id, destination_id, weight)
    else:
        build_topology(graph, args.topology)


def build_packets(args: argparse.Namespace, graph: Graph) -> List[Packet]:
    packets = [
        graph.create_packet(int(source_id), int(destination_id), data)
        for source_id, destination_id, data in args.packet
    ]
    if args.packets:
        rng = np.random.default_rng(graph.config.seed)
        packets.extend(random_packets(graph, args.packets, rng))
    return packets


def run_simulation(args: argparse.Namespace) -> NetworkStatistics:
    """Build the network, forward the packets and return the statistics."""
    config = load_config(args)

    env = simpy.Environment()
    clock = (lambda: env.now) if args.passes > 1 else time.monotonic
    graph = Graph(config, clock)

    build_network(args, graph)
    packets = build_packets(args, graph)
    logger.info("Built %r with %d packets", graph, len(packets))

    engine = ForwardingEngine(graph)
    if args.passes > 1:
        report: PassReport = engine.run(env, packets, args.passes, args.interval)
    else:
        report = engine.simulate_traffic(packets)
    logger.info("Simulation report: %s", report)

    stats = calculate_network_statistics(graph, engine.execution_time)

    if args.output_dir:
        save_metrics_to_json(stats, f"{args.output_dir}/metrics.json")
        save_router_statistics_to_csv(stats, f"{args.output_dir}/router_statistics.csv")

    if args.visualize:
        from forwarding_sim.utils.visualization import (
            plot_router_statistics,
            save_network_visualization,
        )

        network_file = f"{args.output_dir}/network.png" if args.output_dir else None
        save_network_visualization(graph, network_file)
        plot_router_statistics(stats, args.output_dir)

    return stats


def main(argv: Optional[List[str]] = None) -> None:
    """Main function to run the simulation"""
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(args.log_level, args.log_file)
    tracemalloc.start()
    try:
        stats = run_simulation(args)
    except ValueError as e:
        parser.error(str(e))
    finally:
        tracemalloc.stop()

    print("\nRouter-wise statistics:\n")
    print(format_router_statistics(stats))
    print("Network-wide statistics:\n")
    print(format_network_statistics(stats))


if __name__ == "__main__":
    main()

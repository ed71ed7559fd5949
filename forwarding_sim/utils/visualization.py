"""Visualization utilities for the forwarding simulation.

This module provides functions for drawing the router network and plotting
per-router statistics after a simulation.
"""

from typing import Dict, Optional, Tuple
import matplotlib.pyplot as plt
import networkx as nx
import numpy as np
import os

from forwarding_sim.core.graph import Graph
from forwarding_sim.utils.metrics import NetworkStatistics


def save_network_visualization(
    graph: Graph,
    filename: str | None = None,
    figsize: Tuple[int, int] = (10, 8),
    seed: Optional[int] = 42,
    block=True,
) -> None:
    """Save router network visualization to a file.

    RED routers are drawn in orange, tail-drop routers in light blue. Node
    size grows with the router's current queue length.

    Args:
        graph: Network to draw.
        filename: Output filename, or None to show it immediately.
        figsize: Figure size as (width, height) in inches.
        seed: Seed for the spring layout.
    """
    fig = plt.figure(figsize=figsize)

    digraph = graph.graph
    pos = nx.spring_layout(digraph, seed=seed)

    colors = [
        "orange" if graph.routers[n].admission_policy.name == "RED" else "lightblue"
        for n in digraph.nodes()
    ]
    sizes = [500 + 20 * graph.routers[n].calculate_network_load() for n in digraph.nodes()]
    nx.draw_networkx_nodes(digraph, pos, node_size=sizes, node_color=colors)

    nx.draw_networkx_edges(
        digraph,
        pos,
        edge_color="gray",
        arrows=True,
        arrowsize=15,
        connectionstyle="arc3,rad=0.1",
    )

    nx.draw_networkx_labels(digraph, pos, font_size=14)

    edge_labels = {(u, v): str(d["weight"]) for u, v, d in digraph.edges(data=True)}
    nx.draw_networkx_edge_labels(
        digraph,
        pos,
        edge_labels=edge_labels,
        font_size=10,
        rotate=False,
        bbox=dict(facecolor="white", edgecolor="none", alpha=0.7),
    )

    plt.axis("off")
    plt.tight_layout()

    if filename:
        directory = os.path.dirname(filename)
        if directory:
            os.makedirs(directory, exist_ok=True)
        fig.savefig(filename)
        plt.close(fig)
    else:
        plt.show(block=block)
        if not block:
            plt.pause(0.001)


def plot_router_statistics(
    stats: NetworkStatistics,
    output_dir: str | None = None,
    show=True,
) -> None:
    """Plot forwarded/dropped counts, delay and delivery ratio per router.

    Args:
        stats: Network statistics to plot.
        output_dir: Directory to save ``router_statistics.png`` into.
        show: Whether to display the plot when not saving.
    """
    router_ids = [str(row.router_id) for row in stats.routers]
    forwarded = [row.packets_forwarded for row in stats.routers]
    dropped = [row.packets_dropped for row in stats.routers]
    delays = [row.total_delay for row in stats.routers]
    ratios = [row.packet_delivery_ratio for row in stats.routers]

    fig, axes = plt.subplots(1, 3, figsize=(14, 5))

    x = np.arange(len(router_ids))
    width = 0.4

    # Forwarded vs dropped
    axes[0].bar(x - width / 2, forwarded, width=width, label="Forwarded")
    axes[0].bar(x + width / 2, dropped, width=width, color="red", label="Dropped")
    axes[0].set_ylabel("Packets")
    axes[0].set_title("Packets per Router")
    axes[0].set_xlabel("Router")
    axes[0].set_xticks(x)
    axes[0].set_xticklabels(router_ids)
    axes[0].legend()

    # Total delay
    axes[1].bar(x, delays, width=width, color="orange")
    axes[1].set_ylabel("Total Delay")
    axes[1].set_title("Accumulated Delay")
    axes[1].set_xlabel("Router")
    axes[1].set_xticks(x)
    axes[1].set_xticklabels(router_ids)

    # Delivery ratio
    axes[2].bar(x, ratios, width=width, color="green")
    axes[2].set_ylabel("Packet Delivery Ratio")
    axes[2].set_title("Delivery Ratio")
    axes[2].set_xlabel("Router")
    axes[2].set_xticks(x)
    axes[2].set_xticklabels(router_ids)
    axes[2].set_ylim(0, 1)

    plt.tight_layout()

    if output_dir:
        os.makedirs(output_dir, exist_ok=True)
        plt.savefig(os.path.join(output_dir, "router_statistics.png"))
        plt.close(fig)
    elif show:
        plt.show()


def plot_policy_comparison(
    results: Dict[str, NetworkStatistics],
    output_dir: str | None = None,
    show=True,
) -> None:
    """Plot network-wide statistics of runs using different admission policies.

    Args:
        results: Network statistics keyed by policy label.
        output_dir: Directory to save ``policy_comparison.png`` into.
        show: Whether to display the plot when not saving.
    """
    labels = list(results)
    forwarded = [s.total_packets_forwarded for s in results.values()]
    dropped = [s.total_packets_dropped for s in results.values()]
    latencies = [s.latency for s in results.values()]

    fig, axes = plt.subplots(1, 3, figsize=(12, 5))

    x = np.arange(len(labels))

    axes[0].bar(x, forwarded, width=0.4)
    axes[0].set_ylabel("Packets Forwarded")
    axes[0].set_title("Forwarded Comparison")

    axes[1].bar(x, dropped, width=0.4, color="red")
    axes[1].set_ylabel("Packets Dropped")
    axes[1].set_title("Drop Comparison")

    axes[2].bar(x, latencies, width=0.4, color="orange")
    axes[2].set_ylabel("Latency (per packet)")
    axes[2].set_title("Latency Comparison")

    for ax in axes:
        ax.set_xlabel("Admission Policy")
        ax.set_xticks(x)
        ax.set_xticklabels(labels)

    plt.tight_layout()

    if output_dir:
        os.makedirs(output_dir, exist_ok=True)
        plt.savefig(os.path.join(output_dir, "policy_comparison.png"))
        plt.close(fig)
    elif show:
        plt.show()

"""Enumerations for the forwarding simulation.

This module defines enumerations used throughout the forwarding engine.
"""

from enum import Enum


class DropReason(Enum):
    """Enum for the reasons a packet can be dropped.

    Attributes:
        QUEUE_FULL: Tail drop, the receiving queue was at capacity.
        RED: Random Early Detection rejected the packet.
        NO_ROUTE: The packet stayed unroutable for too many passes.
    """

    QUEUE_FULL = "queue_full"
    RED = "red"
    NO_ROUTE = "no_route"


class TopologyType(Enum):
    """Enum for the prebuilt network topologies.

    Attributes:
        BUS: Routers connected in a line.
        STAR: Every router connected to router 1.
        RING: A bus with the two ends joined.
        MESH: Every pair of routers connected.
        TREE: Binary tree rooted at router 1, links point away from the root.
    """

    BUS = "bus"
    STAR = "star"
    RING = "ring"
    MESH = "mesh"
    TREE = "tree"


class NextHopStrategy(Enum):
    """Enum for next hop selection.

    Attributes:
        SHORTEST_PATH: Neighbour minimising edge weight plus its distance
            to the destination.
        LAST_EDGE: Last reachable outgoing edge, reproducing the legacy
            selection loop that compared the same distance for every edge.
    """

    SHORTEST_PATH = "shortest_path"
    LAST_EDGE = "last_edge"

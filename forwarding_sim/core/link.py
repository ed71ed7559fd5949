"""Edge class for the forwarding simulation.

This module defines the Edge class, which represents a directed, weighted
link between two routers in the simulated network.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from forwarding_sim.core.node import Router


@dataclass(frozen=True, eq=False)
class Edge:
    """Represents a directed link between routers.

    The edge belongs to the outgoing edge list of its source router; the
    destination is only referenced.

    Attributes:
        source: Router the link leaves from.
        destination: Router the link leads to.
        weight: Positive integer cost used by shortest path computation.
    """

    source: "Router"
    destination: "Router"
    weight: int

    def __post_init__(self):
        """Validate the link weight."""
        if isinstance(self.weight, bool) or not isinstance(self.weight, int):
            raise ValueError(f"Edge weight must be an integer, got {self.weight!r}")
        if self.weight <= 0:
            raise ValueError(f"Edge weight must be positive, got {self.weight}")
        if self.source is self.destination:
            raise ValueError(f"Edge cannot loop on router {self.source.id}")

    def __repr__(self) -> str:
        """Return string representation of the edge.

        Returns:
            String representation of the edge.
        """
        return f"Edge({self.source.id}->{self.destination.id}, w={self.weight})"

"""Packet class for the forwarding simulation.

This module defines the Packet class, which represents an addressed unit of
data moved hop by hop between routers.
"""

from dataclasses import dataclass, field
from itertools import count
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from forwarding_sim.core.node import Router


_packet_ids = count(1)


@dataclass(frozen=True, eq=False)
class Packet:
    """Represents a network packet.

    Packets compare by identity, so two packets carrying the same payload
    between the same routers are still distinct queue entries.

    Attributes:
        source: Router where the packet enters the network.
        destination: Router the packet is addressed to.
        data: Payload string, its length drives the transmission delay.
        id: Unique identifier for the packet.
    """

    source: "Router"
    destination: "Router"
    data: str
    id: int = field(init=False)

    def __post_init__(self):
        """Assign the packet identifier."""
        object.__setattr__(self, "id", next(_packet_ids))

    @property
    def length(self) -> int:
        """Payload length in characters."""
        return len(self.data)

    def __repr__(self) -> str:
        return (
            f"Packet{{source={self.source.id}, destination={self.destination.id}, "
            f"data='{self.data}'}}"
        )

"""Simulation configuration.

``SimulationConfig`` gathers every tunable of the forwarding engine. It can
be built directly, from a dictionary, or from a JSON file whose keys match
the attribute names.
"""

from dataclasses import asdict, dataclass, fields
import json
from typing import Any, Dict, Optional

from forwarding_sim.core.enums import NextHopStrategy


@dataclass
class SimulationConfig:
    """Configuration for network construction and forwarding.

    Attributes:
        queue_capacity: Maximum packets queued per router.
        bucket_capacity: Default token bucket capacity for new routers.
        token_rate: Default token refill rate (tokens per second).
        min_threshold: Default RED minimum threshold (fraction of
            ``average_queue_size``).
        max_threshold: Default RED maximum threshold.
        drop_probability: Default RED maximum drop probability.
        average_queue_size: Default RED reference occupancy.
        propagation_delay: Fixed propagation delay per hop.
        transmission_delay_per_char: Transmission delay per payload character.
        processing_delay: Fixed processing delay per hop.
        next_hop_strategy: How routers pick the next hop.
        max_stalled_passes: Drop unroutable packets after this many
            consecutive passes; ``None`` keeps them queued forever.
        seed: Seed for RED randomness and random packet generation.
    """

    queue_capacity: int = 100
    bucket_capacity: int = 10
    token_rate: float = 10
    min_threshold: float = 0.5
    max_threshold: float = 1.0
    drop_probability: float = 0.1
    average_queue_size: float = 100
    propagation_delay: int = 10
    transmission_delay_per_char: int = 2
    processing_delay: int = 5
    next_hop_strategy: NextHopStrategy = NextHopStrategy.SHORTEST_PATH
    max_stalled_passes: Optional[int] = None
    seed: Optional[int] = None

    def __post_init__(self):
        """Normalise enum fields and validate values."""
        if not isinstance(self.next_hop_strategy, NextHopStrategy):
            self.next_hop_strategy = NextHopStrategy(self.next_hop_strategy)
        if self.queue_capacity <= 0:
            raise ValueError(f"queue_capacity must be positive, got {self.queue_capacity}")
        if self.bucket_capacity <= 0:
            raise ValueError(f"bucket_capacity must be positive, got {self.bucket_capacity}")
        if self.token_rate < 0:
            raise ValueError(f"token_rate must not be negative, got {self.token_rate}")
        if self.max_stalled_passes is not None and self.max_stalled_passes <= 0:
            raise ValueError(
                f"max_stalled_passes must be positive or None, got {self.max_stalled_passes}"
            )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SimulationConfig":
        """Build a configuration from a mapping, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")
        return cls(**data)

    @classmethod
    def load_from_file(cls, path: str) -> "SimulationConfig":
        """Load a configuration from a JSON file."""
        with open(path) as f:
            return cls.from_dict(json.load(f))

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["next_hop_strategy"] = self.next_hop_strategy.value
        return data

    def red_parameters(self) -> Dict[str, float]:
        """Default RED parameters as keyword arguments."""
        return {
            "min_threshold": self.min_threshold,
            "max_threshold": self.max_threshold,
            "drop_probability": self.drop_probability,
            "average_queue_size": self.average_queue_size,
        }

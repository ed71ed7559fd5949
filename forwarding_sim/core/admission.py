from abc import ABC, abstractmethod
from typing import Optional
import numpy as np

from forwarding_sim.core.enums import DropReason


class AdmissionPolicy(ABC):
    """Abstract base class for queue admission policies"""

    def __init__(self):
        self.name = "Base Policy"

    @abstractmethod
    def admit(self, queue_length: int, capacity: int) -> Optional[DropReason]:
        """
        Decide whether a packet may join a queue

        Args:
            queue_length: Number of packets currently queued
            capacity: Maximum number of packets the queue holds

        Returns:
            None if the packet is admitted, otherwise the reason it is dropped
        """
        pass

    def __repr__(self) -> str:
        return self.name


class TailDropPolicy(AdmissionPolicy):
    """Admit while there is room, drop deterministically once full"""

    def __init__(self):
        super().__init__()
        self.name = "Tail-Drop"

    def admit(self, queue_length, capacity):
        if queue_length < capacity:
            return None
        return DropReason.QUEUE_FULL


class REDPolicy(TailDropPolicy):
    """Random Early Detection admission.

    Below capacity every packet is admitted. At capacity a RED draw happens
    first; a packet that survives it still goes through the tail-drop check.
    """

    def __init__(
        self,
        min_threshold: float,
        max_threshold: float,
        drop_probability: float,
        average_queue_size: float,
        seed: Optional[int] = None,
    ):
        """
        Args:
            min_threshold: Fraction of average_queue_size where dropping starts
            max_threshold: Fraction of average_queue_size where the drop
                probability reaches drop_probability
            drop_probability: Maximum drop probability
            average_queue_size: Reference queue occupancy
            seed: Seed for the private random generator
        """
        super().__init__()
        if not 0 <= min_threshold <= max_threshold:
            raise ValueError(
                f"RED thresholds must satisfy 0 <= min <= max, got {min_threshold}, {max_threshold}"
            )
        if not 0 <= drop_probability <= 1:
            raise ValueError(f"RED drop probability must be in [0, 1], got {drop_probability}")
        if average_queue_size <= 0:
            raise ValueError(f"RED average queue size must be positive, got {average_queue_size}")
        self.name = "RED"
        self.min_threshold = min_threshold
        self.max_threshold = max_threshold
        self.drop_probability = drop_probability
        self.average_queue_size = average_queue_size
        self.rng = np.random.default_rng(seed)

    def calculate_drop_probability(self, queue_length: float) -> float:
        """Drop probability for the given occupancy, linear between thresholds"""
        low = self.min_threshold * self.average_queue_size
        high = self.max_threshold * self.average_queue_size
        if queue_length < low:
            return 0.0
        if queue_length < high:
            return (
                self.drop_probability
                * (queue_length - low)
                / (self.average_queue_size * (self.max_threshold - self.min_threshold))
            )
        return self.drop_probability

    def admit(self, queue_length, capacity):
        if queue_length < capacity:
            return None
        if self.rng.random() < self.calculate_drop_probability(queue_length):
            return DropReason.RED
        return super().admit(queue_length, capacity)


def admission_policy_factory(policy_type: str, **kwargs) -> AdmissionPolicy:
    """
    Factory function to create the appropriate admission policy

    Args:
        policy_type: "tail_drop" or "red"
        **kwargs: Parameters forwarded to the policy constructor

    Returns:
        An instance of the selected admission policy
    """
    if policy_type == "red":
        return REDPolicy(**kwargs)
    elif policy_type == "tail_drop":
        return TailDropPolicy(**kwargs)
    raise ValueError(f"Unknown admission policy: {policy_type}")

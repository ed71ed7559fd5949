import pytest

from forwarding_sim.config import SimulationConfig
from forwarding_sim.core.graph import Graph


class FakeClock:
    """Manually advanced time source."""

    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_graph(clock):
    """Build a Graph on the frozen clock, with config overrides."""

    def _make(**overrides) -> Graph:
        return Graph(SimulationConfig(**overrides), clock)

    return _make


@pytest.fixture
def two_routers(make_graph) -> Graph:
    """Routers 1 and 2 with a single edge 1 -> 2 of weight 1."""
    graph = make_graph(queue_capacity=100, bucket_capacity=10, token_rate=10)
    graph.add_router(1)
    graph.add_router(2)
    graph.add_edge(1, 2, 1)
    return graph

import csv
import json
import tracemalloc

import pytest

from forwarding_sim.core.simulator import ForwardingEngine
from forwarding_sim.utils.metrics import (
    calculate_network_statistics,
    format_network_statistics,
    format_router_statistics,
    get_memory_usage,
    save_metrics_to_json,
    save_router_statistics_to_csv,
)


@pytest.fixture
def simulated(two_routers):
    ForwardingEngine(two_routers).simulate_traffic(
        [two_routers.create_packet(1, 2, "x"), two_routers.create_packet(1, 2, "yy")]
    )
    return two_routers


def test_network_totals(simulated):
    stats = calculate_network_statistics(simulated, execution_time=0.5)
    assert stats.total_packets_forwarded == 2
    assert stats.total_packets_dropped == 0
    assert stats.total_delay == 17 + 19
    assert stats.latency == 18.0
    assert stats.execution_time_ms == 500.0
    assert stats.throughput == pytest.approx(2 / 500)


def test_router_rows(simulated):
    first, second = calculate_network_statistics(simulated).routers
    assert first.router_id == 1
    assert first.policy == "Tail-Drop"
    assert first.utilization == 1.0
    assert first.path_efficiency == 1.0
    assert first.network_load == 0
    assert second.network_load == 2
    assert second.packet_delivery_ratio == 0.0


def test_zero_division_guards(make_graph):
    graph = make_graph()
    graph.add_router(1)
    stats = calculate_network_statistics(graph)
    assert stats.throughput == 0.0
    assert stats.latency == 0.0


def test_drops_by_reason_uses_names(make_graph):
    graph = make_graph(queue_capacity=1)
    graph.add_router(1)
    graph.add_router(2)
    ForwardingEngine(graph).inject_packets(
        [graph.create_packet(1, 2, "a"), graph.create_packet(1, 2, "b")]
    )
    row = calculate_network_statistics(graph).routers[0]
    assert row.drops_by_reason == {"queue_full": 1}
    assert "Drops by reason: queue_full=1" in format_router_statistics(
        calculate_network_statistics(graph)
    )


def test_memory_usage_only_while_tracing(simulated):
    assert not tracemalloc.is_tracing()
    assert get_memory_usage() is None
    tracemalloc.start()
    try:
        stats = calculate_network_statistics(simulated)
    finally:
        tracemalloc.stop()
    assert isinstance(stats.memory_usage, int)


def test_format_network_statistics(simulated):
    text = format_network_statistics(calculate_network_statistics(simulated))
    assert "Total packets dropped: 0" in text
    assert "Total memory usage: n/a" in text


def test_save_json(simulated, tmp_path):
    filename = tmp_path / "out" / "metrics.json"
    save_metrics_to_json(calculate_network_statistics(simulated), str(filename))
    data = json.loads(filename.read_text())
    assert data["total_packets_forwarded"] == 2
    assert data["routers"][0]["total_delay"] == 36


def test_save_csv(simulated, tmp_path):
    filename = tmp_path / "routers.csv"
    save_router_statistics_to_csv(calculate_network_statistics(simulated), str(filename))
    with open(filename, newline="") as f:
        rows = list(csv.reader(f))
    assert rows[0][0] == "Router"
    assert [row[0] for row in rows[1:]] == ["1", "2"]

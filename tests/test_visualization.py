import matplotlib

matplotlib.use("Agg")

from forwarding_sim.core.simulator import ForwardingEngine
from forwarding_sim.topology.generators import add_routers, build_topology
from forwarding_sim.utils.metrics import calculate_network_statistics
from forwarding_sim.utils.visualization import (
    plot_policy_comparison,
    plot_router_statistics,
    save_network_visualization,
)


def test_saves_network_and_statistics_plots(make_graph, tmp_path):
    graph = make_graph()
    add_routers(graph, 4)
    graph.add_red_router(5)
    build_topology(graph, "bus", weight=2)
    ForwardingEngine(graph).simulate_traffic([graph.create_packet(1, 5, "hi")])

    network_file = tmp_path / "plots" / "network.png"
    save_network_visualization(graph, str(network_file))
    plot_router_statistics(calculate_network_statistics(graph), str(tmp_path))

    assert network_file.exists()
    assert (tmp_path / "router_statistics.png").exists()


def test_topology_drawing(make_graph, tmp_path):
    graph = make_graph()
    add_routers(graph, 5)
    build_topology(graph, "tree")
    save_network_visualization(graph, str(tmp_path / "tree.png"))
    assert (tmp_path / "tree.png").exists()


def test_policy_comparison_plot(make_graph, tmp_path):
    results = {}
    for label, red in (("Tail-Drop", False), ("RED", True)):
        graph = make_graph()
        add_routers(graph, 3, red=red)
        build_topology(graph, "bus")
        ForwardingEngine(graph).simulate_traffic([graph.create_packet(1, 3, "x")])
        results[label] = calculate_network_statistics(graph)

    plot_policy_comparison(results, str(tmp_path))
    assert (tmp_path / "policy_comparison.png").exists()

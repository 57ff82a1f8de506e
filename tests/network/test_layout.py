import math

import pytest

from settlegraph.network.layout import (
    GraphNode,
    PositionStore,
    bend_direction,
    compute_layout,
    lane_offset,
    ring_radius,
)
from settlegraph.network.model import GraphLink, GraphModel


def _graph(*links):
    nodes = []
    for source, target, _ in links:
        for node_id in (source, target):
            if node_id not in nodes:
                nodes.append(node_id)
    return GraphModel(
        nodes=nodes,
        links=[GraphLink(source=s, target=t, amount=a) for s, t, a in links],
    )


def _positions(layout):
    return {node.id: (node.x, node.y) for node in layout.nodes}


def test_empty_graph():
    layout = compute_layout(GraphModel(), 640, 320)
    assert layout.mode == "empty"
    assert layout.nodes == [] and layout.links == []


def test_bipartite_lanes():
    layout = compute_layout(_graph(("B", "A", 50), ("B", "C", 50)), 640, 320)
    positions = _positions(layout)

    assert layout.mode == "bipartite"
    left = lane_offset(640)
    assert left == pytest.approx(115.2)
    assert positions["B"] == pytest.approx((left, 160))
    assert positions["A"] == pytest.approx((640 - left, 320 / 3))
    assert positions["C"] == pytest.approx((640 - left, 640 / 3))


def test_debtors_left_of_creditors():
    layout = compute_layout(
        _graph(("d1", "c1", 10), ("d2", "c2", 30), ("d3", "c1", 5), ("d2", "c1", 1)),
        800, 400,
    )
    positions = _positions(layout)

    debtor_x = {positions[n][0] for n in ("d1", "d2", "d3")}
    creditor_x = {positions[n][0] for n in ("c1", "c2")}
    assert max(debtor_x) < min(creditor_x)


def test_creditors_ordered_by_incoming_then_name():
    layout = compute_layout(_graph(("d", "zed", 30), ("d", "amy", 30), ("e", "bob", 50)), 640, 480)
    positions = _positions(layout)

    assert positions["bob"][1] < positions["amy"][1] < positions["zed"][1]


def test_neutral_nodes_in_middle_lane():
    layout = compute_layout(_graph(("a", "m", 10), ("m", "z", 10)), 640, 320)
    assert _positions(layout)["m"][0] == pytest.approx(320)


def test_lane_offsets():
    assert lane_offset(300) == pytest.approx(96)
    assert lane_offset(2000) == pytest.approx(360)


def test_circular_layout_when_balanced():
    layout = compute_layout(_graph(("A", "B", 10), ("B", "C", 10), ("C", "A", 10)), 640, 320)
    positions = _positions(layout)

    assert layout.mode == "circular"
    ring = ring_radius(640, 320)
    assert ring == 100
    assert positions["A"] == pytest.approx((320, 160 - ring))
    for x, y in positions.values():
        assert math.hypot(x - 320, y - 160) == pytest.approx(ring)


def test_ring_radius_small_viewport():
    assert ring_radius(100, 100) == 25


def test_layout_is_deterministic():
    graph = _graph(("B", "A", 50), ("B", "C", 20), ("D", "A", 5))
    assert _positions(compute_layout(graph, 640, 320)) == _positions(compute_layout(graph, 640, 320))


def test_store_preserves_velocity_and_flags():
    graph = _graph(("B", "A", 50))
    store = PositionStore({"A": GraphNode(id="A", x=1, y=1, vx=3, vy=-2, pinned=True, fixed=True)})

    layout = compute_layout(graph, 640, 320, store)
    node = layout.node_map()["A"]

    assert (node.vx, node.vy) == (3, -2)
    assert node.pinned and node.fixed
    assert (node.x, node.y) != (1, 1)


def test_dragged_node_keeps_position():
    graph = _graph(("B", "A", 50))
    store = PositionStore({"A": GraphNode(id="A", x=11, y=22, fixed=True)})

    layout = compute_layout(graph, 640, 320, store, dragging_id="A")

    assert (layout.node_map()["A"].x, layout.node_map()["A"].y) == (11, 22)


def test_store_is_not_mutated():
    store = PositionStore()
    layout = compute_layout(_graph(("B", "A", 50)), 640, 320, store)

    assert len(store) == 0
    assert "A" in layout.store and "B" in layout.store
    layout.store.get("A").x = -1
    assert layout.store.get("A").x != -1


def test_departed_nodes_stay_in_store():
    first = compute_layout(_graph(("B", "A", 50), ("C", "A", 5)), 640, 320)
    second = compute_layout(_graph(("B", "A", 50)), 640, 320, first.store)

    assert "C" in second.store
    assert [n.id for n in second.nodes] == ["B", "A"]


def test_antiparallel_links_bend_the_same_way():
    positions = {"A": (100, 100), "B": (500, 200)}
    assert bend_direction("A", "B", positions) == bend_direction("B", "A", positions) == 1
    positions = {"A": (100, 200), "B": (500, 100)}
    assert bend_direction("A", "B", positions) == -1
    assert bend_direction("A", "B", {"A": (0, 100), "B": (400, 105)}) == 1


def test_label_width_set():
    layout = compute_layout(_graph(("Bo Jones", "A", 1)), 640, 320)
    assert layout.node_map()["Bo Jones"].label_width == 43

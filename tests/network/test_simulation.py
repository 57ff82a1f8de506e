import math

import pytest

from settlegraph.network.layout import GraphNode, PositionedLink
from settlegraph.network.simulation import BOUNDS_PADDING, desired_length, simulate_step


def _distance(a, b):
    return math.hypot(a.x - b.x, a.y - b.y)


def test_desired_length_shrinks_with_amount():
    assert desired_length(100, 100, 100) == pytest.approx(60)
    assert desired_length(0, 100, 100) == pytest.approx(100)
    assert desired_length(500, 100, 100) == pytest.approx(60)


def test_close_nodes_repel():
    a = GraphNode(id="a", x=300, y=160)
    b = GraphNode(id="b", x=310, y=160)

    simulate_step([a, b], [], 640, 320)

    assert a.x < 300
    assert b.x > 310
    assert _distance(a, b) > 10


def test_spring_pulls_distant_nodes_together():
    a = GraphNode(id="a", x=40, y=160)
    b = GraphNode(id="b", x=600, y=160)
    link = PositionedLink(source="a", target="b", amount=10)

    for _ in range(5):
        simulate_step([a, b], [link], 640, 320)

    assert _distance(a, b) < 560


def test_anchored_nodes_do_not_move():
    pinned = GraphNode(id="p", x=200, y=100, pinned=True)
    dragged = GraphNode(id="d", x=210, y=100, fixed=True)
    free = GraphNode(id="f", x=220, y=100)

    simulate_step([pinned, dragged, free], [], 640, 320)

    assert (pinned.x, pinned.y) == (200, 100)
    assert (dragged.x, dragged.y) == (210, 100)
    assert free.x != 220


def test_nodes_stay_inside_viewport():
    node = GraphNode(id="n", x=5, y=400)

    simulate_step([node], [], 640, 320)

    assert BOUNDS_PADDING <= node.x <= 640 - BOUNDS_PADDING
    assert BOUNDS_PADDING <= node.y <= 320 - BOUNDS_PADDING


def test_velocity_damped_and_capped():
    node = GraphNode(id="n", x=320, y=160, vx=10_000, vy=0)

    simulate_step([node], [], 640, 320)

    assert math.hypot(node.vx, node.vy) <= 120 + 1e-9


def test_empty_is_noop():
    simulate_step([], [], 640, 320)

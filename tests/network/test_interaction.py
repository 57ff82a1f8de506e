import pytest

from settlegraph.network.geometry import Point
from settlegraph.network.interaction import (
    InteractionController,
    InteractionMode,
    is_outside,
)
from settlegraph.network.layout import GraphNode
from settlegraph.network.simulation import simulate_step


@pytest.fixture
def controller():
    return InteractionController([
        GraphNode(id="alice", x=100, y=100),
        GraphNode(id="bob", x=200, y=100),
    ])


def test_hit_test_uses_radius_plus_tolerance(controller):
    assert controller.node_at(118, 100).id == "alice"
    assert controller.node_at(119, 100) is None
    assert controller.node_at(150, 150) is None


def test_topmost_node_wins():
    controller = InteractionController([
        GraphNode(id="under", x=100, y=100),
        GraphNode(id="over", x=105, y=100),
    ])
    assert controller.node_at(102, 100).id == "over"


def test_drag_moves_node_and_releases(controller):
    assert controller.pointer_down(105, 100)
    node = controller.nodes["alice"]
    assert node.fixed
    assert controller.mode == InteractionMode.DRAGGING

    assert controller.pointer_move(150, 150)
    assert (node.x, node.y) == (145, 150)
    assert (node.vx, node.vy) == (0, 0)

    assert controller.pointer_up()
    assert not node.fixed
    assert controller.mode == InteractionMode.IDLE


def test_pointer_down_on_empty_space(controller):
    assert not controller.pointer_down(400, 400)
    assert controller.mode == InteractionMode.IDLE


def test_pinned_node_stays_fixed_after_drag(controller):
    assert controller.double_click(200, 100)
    node = controller.nodes["bob"]
    assert node.pinned

    controller.pointer_down(200, 100)
    controller.pointer_up()

    assert node.fixed
    assert node.anchored

    controller.double_click(200, 100)
    assert not node.pinned
    assert not node.fixed
    assert not node.anchored

    before = (node.x, node.y)
    simulate_step(list(controller.nodes.values()), [], 640, 320)
    assert (node.x, node.y) != before


def test_unpin_while_dragging_keeps_node_held(controller):
    controller.double_click(200, 100)
    controller.pointer_down(200, 100)

    controller.double_click(200, 100)
    node = controller.nodes["bob"]
    assert not node.pinned
    assert node.fixed

    controller.pointer_up()
    assert not node.fixed


def test_hover_tooltip(controller):
    assert controller.pointer_move(202, 98)
    assert controller.mode == InteractionMode.HOVERING
    assert controller.hovered_id == "bob"
    assert controller.tooltip.visible
    assert controller.tooltip.text == "bob"
    assert (controller.tooltip.x, controller.tooltip.y) == (214, 110)

    # same node, nothing to redraw
    assert not controller.pointer_move(201, 99)

    assert controller.pointer_move(150, 300)
    assert controller.tooltip.visible is False
    assert controller.mode == InteractionMode.IDLE


def test_pointer_leave_cancels_drag_and_hover(controller):
    controller.pointer_down(100, 100)

    assert controller.pointer_leave()
    assert controller.dragging_id is None
    assert not controller.nodes["alice"].fixed
    assert controller.mode == InteractionMode.IDLE
    assert not controller.pointer_leave()


def test_replace_nodes_forgets_vanished_ids(controller):
    controller.pointer_move(200, 100)
    controller.replace_nodes([GraphNode(id="alice", x=100, y=100)])

    assert controller.hovered_id is None
    assert controller.mode == InteractionMode.IDLE


def test_is_outside():
    button = (0, 0, 40, 20)
    dropdown = (0, 20, 200, 300)
    assert not is_outside(Point(10, 10), button, dropdown)
    assert not is_outside(Point(100, 100), button, dropdown)
    assert is_outside(Point(300, 10), button, dropdown)

"""
Pointer interaction over the laid-out network.

One mode is active at a time: idle, hovering a node, or dragging one.
Dragging writes the node position directly and never goes through the
force simulation; pinning is a separate persistent flag.
"""

import math
from enum import Enum
from typing import Dict, Iterable, Optional, Tuple

from pydantic import BaseModel

from settlegraph.network.geometry import Point, point_in_rect
from settlegraph.network.layout import GraphNode

HIT_TOLERANCE = 6.0
TOOLTIP_OFFSET = 12.0


class InteractionMode(str, Enum):
    IDLE = "idle"
    HOVERING = "hovering"
    DRAGGING = "dragging"


class Tooltip(BaseModel):
    visible: bool = False
    text: str = ""
    x: float = 0.0
    y: float = 0.0


class InteractionController:
    def __init__(self, nodes: Iterable[GraphNode]):
        self.nodes: Dict[str, GraphNode] = {node.id: node for node in nodes}
        self.mode = InteractionMode.IDLE
        self.dragging_id: Optional[str] = None
        self.drag_offset: Tuple[float, float] = (0.0, 0.0)
        self.hovered_id: Optional[str] = None
        self.tooltip = Tooltip()

    def replace_nodes(self, nodes: Iterable[GraphNode]) -> None:
        """Swap in a rebuilt node set, dropping state about vanished ids."""
        self.nodes = {node.id: node for node in nodes}
        if self.dragging_id not in self.nodes:
            self.dragging_id = None
        if self.hovered_id not in self.nodes:
            self.hovered_id = None
            self.tooltip = Tooltip()
        self.mode = self._resting_mode()

    def _resting_mode(self) -> InteractionMode:
        if self.dragging_id is not None:
            return InteractionMode.DRAGGING
        if self.hovered_id is not None:
            return InteractionMode.HOVERING
        return InteractionMode.IDLE

    def node_at(self, x: float, y: float) -> Optional[GraphNode]:
        """Topmost node whose circle (radius plus tolerance) contains the point."""
        for node in reversed(list(self.nodes.values())):
            reach = node.radius + HIT_TOLERANCE
            if math.hypot(x - node.x, y - node.y) <= reach:
                return node
        return None

    def pointer_down(self, x: float, y: float) -> bool:
        node = self.node_at(x, y)
        if node is None:
            return False
        node.fixed = True
        node.vx = 0.0
        node.vy = 0.0
        self.dragging_id = node.id
        self.drag_offset = (x - node.x, y - node.y)
        self.mode = InteractionMode.DRAGGING
        return True

    def pointer_move(self, x: float, y: float) -> bool:
        """Returns True when the scene must be redrawn."""
        if self.dragging_id is not None:
            node = self.nodes[self.dragging_id]
            node.x = x - self.drag_offset[0]
            node.y = y - self.drag_offset[1]
            node.vx = 0.0
            node.vy = 0.0
            return True

        hovered = self.node_at(x, y)
        hovered_id = hovered.id if hovered else None
        changed = hovered_id != self.hovered_id
        self.hovered_id = hovered_id
        if hovered is None:
            self.tooltip = Tooltip()
            self.mode = InteractionMode.IDLE
        else:
            self.tooltip = Tooltip(
                visible=True,
                text=hovered.id,
                x=x + TOOLTIP_OFFSET,
                y=y + TOOLTIP_OFFSET,
            )
            self.mode = InteractionMode.HOVERING
        return changed

    def _release(self) -> None:
        if self.dragging_id is not None:
            node = self.nodes.get(self.dragging_id)
            if node is not None and not node.pinned:
                node.fixed = False
        self.dragging_id = None

    def pointer_up(self) -> bool:
        dragging = self.dragging_id is not None
        self._release()
        self.mode = self._resting_mode()
        return dragging

    def pointer_leave(self) -> bool:
        changed = self.dragging_id is not None or self.hovered_id is not None
        self._release()
        self.hovered_id = None
        self.tooltip = Tooltip()
        self.mode = InteractionMode.IDLE
        return changed

    def double_click(self, x: float, y: float) -> bool:
        node = self.node_at(x, y)
        if node is None:
            return False
        node.pinned = not node.pinned
        if not node.pinned and node.id != self.dragging_id:
            node.fixed = False
        return True


def is_outside(point: Point, *boxes: Tuple[float, float, float, float]) -> bool:
    """
    True when a click lands outside every (x, y, width, height) box.

    Used to close popovers such as the notification dropdown when the user
    clicks anywhere else; the toggle button is passed as one of the boxes.
    """
    return not any(point_in_rect(point, *box) for box in boxes)

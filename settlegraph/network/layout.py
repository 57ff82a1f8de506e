"""
Layout engine: deterministic node placement for the debt network.

When the graph splits into debtor-side and creditor-side participants the
nodes go into two vertical lanes (debtors left, creditors right, neutral
nodes in the middle). Otherwise they are spread around a circle. Ties are
always broken by participant name so identical input gives identical
coordinates.
"""

import logging
import math
from typing import Dict, Iterable, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict

from settlegraph.core.constants import EPSILON
from settlegraph.network.model import GraphLink, GraphModel
from settlegraph.network.text import node_label, pill_size

logger = logging.getLogger(__name__)

NODE_RADIUS = 12.0
LANE_MARGIN = 40.0
LANE_FRACTION_MIN = 0.18
LANE_FRACTION_MAX = 0.32
LANE_MIN_OFFSET = 100.0
RING_MARGIN = 60.0
HORIZONTAL_THRESHOLD = 12.0


class GraphNode(BaseModel):
    id: str
    x: float = 0.0
    y: float = 0.0
    vx: float = 0.0
    vy: float = 0.0
    fx: float = 0.0
    fy: float = 0.0
    fixed: bool = False
    pinned: bool = False
    radius: float = NODE_RADIUS
    label_width: float = 0.0

    @property
    def anchored(self) -> bool:
        """Dragged or pinned nodes are never moved by forces."""
        return self.fixed or self.pinned


class PositionedLink(GraphLink):
    direction: int = 1   # bend sign, fixed at layout time


class PositionStore:
    """
    Last known node state per participant id.

    Never mutated: `with_nodes` returns a new store. Ids that drop out of
    the graph keep their entry so a returning participant lands where it
    was before.
    """

    def __init__(self, nodes: Optional[Mapping[str, GraphNode]] = None):
        self._nodes: Dict[str, GraphNode] = {
            node_id: node.model_copy() for node_id, node in (nodes or {}).items()
        }

    def get(self, node_id: str) -> Optional[GraphNode]:
        node = self._nodes.get(node_id)
        return node.model_copy() if node is not None else None

    def with_nodes(self, nodes: Iterable[GraphNode]) -> "PositionStore":
        merged = dict(self._nodes)
        for node in nodes:
            merged[node.id] = node
        return PositionStore(merged)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)


class LayoutResult(BaseModel):
    width: float
    height: float
    mode: str   # "bipartite", "circular" or "empty"
    nodes: List[GraphNode] = []
    links: List[PositionedLink] = []
    store: PositionStore

    model_config = ConfigDict(arbitrary_types_allowed=True)

    def node_map(self) -> Dict[str, GraphNode]:
        return {node.id: node for node in self.nodes}


def flow_scores(links: Iterable[GraphLink]) -> Dict[str, float]:
    """Incoming amounts minus outgoing amounts per node."""
    scores: Dict[str, float] = {}
    for link in links:
        amount = abs(link.amount)
        scores[link.source] = scores.get(link.source, 0.0) - amount
        scores[link.target] = scores.get(link.target, 0.0) + amount
    return scores


def _order_creditors(creditors: List[str], links: List[GraphLink]) -> List[str]:
    incoming: Dict[str, float] = {}
    for link in links:
        incoming[link.target] = incoming.get(link.target, 0.0) + abs(link.amount)
    return sorted(creditors, key=lambda node_id: (-incoming.get(node_id, 0.0), node_id))


def _order_debtors(debtors: List[str], creditors: List[str], links: List[GraphLink]) -> List[str]:
    """Sort debtors by the amount-weighted average rank of the creditors they owe."""
    rank = {node_id: idx for idx, node_id in enumerate(creditors)}
    fallback = len(creditors) / 2 if creditors else 0.0

    targets: Dict[str, List[GraphLink]] = {}
    for link in links:
        targets.setdefault(link.source, []).append(link)

    def average_rank(node_id: str) -> float:
        weighted = 0.0
        total = 0.0
        for link in targets.get(node_id, []):
            idx = rank.get(link.target)
            if idx is None:
                continue
            weight = abs(link.amount)
            weighted += (idx + 1) * weight
            total += weight
        return weighted / total if total else fallback

    return sorted(debtors, key=lambda node_id: (average_rank(node_id), node_id))


def _place_lane(ids: List[str], x: float, height: float, positions: Dict[str, tuple]) -> None:
    spacing = height / (len(ids) + 1)
    for idx, node_id in enumerate(ids):
        y = min(height - LANE_MARGIN, max(LANE_MARGIN, spacing * (idx + 1)))
        positions[node_id] = (x, y)


def lane_offset(width: float) -> float:
    """x of the debtor lane; the creditor lane mirrors it from the right."""
    return min(width * LANE_FRACTION_MAX, max(LANE_MIN_OFFSET, width * LANE_FRACTION_MIN))


def ring_radius(width: float, height: float) -> float:
    half = min(width, height) / 2
    return max(half - RING_MARGIN, half / 2)


def bend_direction(source: str, target: str, positions: Mapping[str, tuple]) -> int:
    """
    Curve sign for a link.

    Computed from the name-ordered endpoint pair so both links of an
    antiparallel pair get the same sign, which puts them on opposite sides
    of the straight line.
    """
    low, high = sorted((source, target))
    start = positions.get(low)
    end = positions.get(high)
    if start is None or end is None:
        return 1
    dy = end[1] - start[1]
    if abs(dy) < HORIZONTAL_THRESHOLD:
        return 1
    return 1 if dy > 0 else -1


def compute_layout(
    graph: GraphModel,
    width: float,
    height: float,
    store: Optional[PositionStore] = None,
    dragging_id: Optional[str] = None,
) -> LayoutResult:
    """
    Assign coordinates to every node of the graph.

    Nodes seen in an earlier pass keep their velocity and fixed/pinned
    flags from `store`; a node being dragged also keeps its position.
    """
    store = store or PositionStore()
    if graph.is_empty:
        return LayoutResult(width=width, height=height, mode="empty", store=store)

    scores = flow_scores(graph.links)
    creditors = [n for n in graph.nodes if scores.get(n, 0.0) > EPSILON]
    debtors = [n for n in graph.nodes if scores.get(n, 0.0) < -EPSILON]
    neutral = sorted(n for n in graph.nodes if abs(scores.get(n, 0.0)) <= EPSILON)

    positions: Dict[str, tuple] = {}
    if creditors and debtors:
        mode = "bipartite"
        creditors = _order_creditors(creditors, graph.links)
        debtors = _order_debtors(debtors, creditors, graph.links)
        left = lane_offset(width)
        _place_lane(debtors, left, height, positions)
        _place_lane(creditors, width - left, height, positions)
        if neutral:
            _place_lane(neutral, width / 2, height, positions)
    else:
        mode = "circular"
        cx = width / 2
        cy = height / 2
        ring = ring_radius(width, height)
        ordered = sorted(graph.nodes)
        for idx, node_id in enumerate(ordered):
            angle = (idx / len(ordered)) * math.pi * 2 - math.pi / 2
            positions[node_id] = (cx + ring * math.cos(angle), cy + ring * math.sin(angle))

    nodes: List[GraphNode] = []
    for node_id in graph.nodes:
        x, y = positions.get(node_id, (width / 2, height / 2))
        previous = store.get(node_id)
        if previous is None:
            node = GraphNode(id=node_id, x=x, y=y)
        elif node_id == dragging_id:
            node = previous
        else:
            node = previous.model_copy(update={"x": x, "y": y})
        node.label_width = pill_size(node_label(node_id))[0]
        positions[node_id] = (node.x, node.y)
        nodes.append(node)

    links = [
        PositionedLink(
            source=link.source,
            target=link.target,
            amount=link.amount,
            direction=bend_direction(link.source, link.target, positions),
        )
        for link in graph.links
    ]

    logger.debug("Laid out %d nodes (%s)", len(nodes), mode)
    return LayoutResult(
        width=width,
        height=height,
        mode=mode,
        nodes=nodes,
        links=links,
        store=store.with_nodes(nodes),
    )

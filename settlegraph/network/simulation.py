"""
Force simulation for free-form positioning.

Only used while the interactive view runs its frame loop; the static
layout from `layout.compute_layout` is the default presentation. One call
to `simulate_step` advances every free node by one fixed time step.
"""

import math
from typing import Dict, Iterable, List

from settlegraph.network.layout import GraphNode, PositionedLink

TIME_STEP = 0.016
K_REPEL = 6000.0
REPEL_EPSILON = 0.01
K_SPRING = 0.08
K_CENTER = 0.02
DAMPING = 0.82
MAX_VELOCITY = 120.0
BOUNDS_PADDING = 30.0
BASE_LENGTH_DIVISOR = 0.45


def desired_length(amount: float, max_amount: float, base_length: float) -> float:
    """Larger obligations pull their endpoints closer together."""
    share = min(1.0, abs(amount) / max_amount) if max_amount else 0.0
    return base_length * (0.6 + 0.4 * (1 - share))


def _apply_repulsion(nodes: List[GraphNode]) -> None:
    for i in range(len(nodes)):
        for j in range(i + 1, len(nodes)):
            a = nodes[i]
            b = nodes[j]
            dx = a.x - b.x
            dy = a.y - b.y
            dist2 = dx * dx + dy * dy + REPEL_EPSILON
            dist = math.sqrt(dist2)
            force = K_REPEL / dist2
            ux = dx / dist
            uy = dy / dist
            a.fx += ux * force
            a.fy += uy * force
            b.fx -= ux * force
            b.fy -= uy * force


def _apply_springs(by_id: Dict[str, GraphNode], links: List[PositionedLink], base_length: float) -> None:
    max_amount = max([abs(link.amount) for link in links] + [1.0])
    for link in links:
        source = by_id.get(link.source)
        target = by_id.get(link.target)
        if source is None or target is None:
            continue
        dx = target.x - source.x
        dy = target.y - source.y
        dist = math.hypot(dx, dy) or 1.0
        stretch = dist - desired_length(link.amount, max_amount, base_length)
        fx = (dx / dist) * (K_SPRING * stretch)
        fy = (dy / dist) * (K_SPRING * stretch)
        source.fx += fx
        source.fy += fy
        target.fx -= fx
        target.fy -= fy


def _integrate(node: GraphNode, width: float, height: float, dt: float) -> None:
    node.fx += (width / 2 - node.x) * K_CENTER
    node.fy += (height / 2 - node.y) * K_CENTER

    node.vx = (node.vx + node.fx * dt) * DAMPING
    node.vy = (node.vy + node.fy * dt) * DAMPING
    speed = math.hypot(node.vx, node.vy)
    if speed > MAX_VELOCITY:
        node.vx = node.vx / speed * MAX_VELOCITY
        node.vy = node.vy / speed * MAX_VELOCITY

    node.x = max(BOUNDS_PADDING, min(width - BOUNDS_PADDING, node.x + node.vx * dt))
    node.y = max(BOUNDS_PADDING, min(height - BOUNDS_PADDING, node.y + node.vy * dt))


def simulate_step(
    nodes: Iterable[GraphNode],
    links: Iterable[PositionedLink],
    width: float,
    height: float,
    dt: float = TIME_STEP,
) -> None:
    """Advance the simulation in place. Anchored nodes do not move."""
    nodes = list(nodes)
    links = list(links)
    if not nodes:
        return

    for node in nodes:
        node.fx = 0.0
        node.fy = 0.0

    _apply_repulsion(nodes)
    _apply_springs({node.id: node for node in nodes}, links, min(width, height) / BASE_LENGTH_DIVISOR)

    for node in nodes:
        if node.anchored:
            continue
        _integrate(node, width, height, dt)

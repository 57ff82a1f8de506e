"""
Pure 2D geometry for drawing debt edges.

Everything here works on plain points so the same math backs the SVG
output, the JSON scene and the tests.
"""

import math
from typing import NamedTuple, Tuple


class Point(NamedTuple):
    x: float
    y: float


# Edge endpoint spacing
START_GAP = 16.0
ARROW_SIZE = 18.0
END_GAP = 24.0
MIN_SPAN = 40.0
MIN_START_CLEARANCE = 6.0
MIN_END_CLEARANCE = 8.0

# Curvature
MIN_CURVE = 12.0
MAX_CURVE = 80.0
CURVE_DIVISOR = 8.0
LABEL_NORMAL_OFFSET = 12.0
ARROW_WING_RATIO = 0.55

# Magnitude colours
ALERT_COLOR = "#ef4444"
WARNING_COLOR = "#f59e0b"
NORMAL_COLOR = "#10b981"


def tangent_and_normal(a: Point, b: Point) -> Tuple[Point, Point, float]:
    """Unit tangent a->b, its left-hand unit normal and the distance."""
    dx = b.x - a.x
    dy = b.y - a.y
    dist = math.hypot(dx, dy) or 1.0
    return Point(dx / dist, dy / dist), Point(-dy / dist, dx / dist), dist


def ellipse_boundary_distance(direction: Point, rx: float, ry: float) -> float:
    """Distance from an ellipse's centre to its boundary along a unit direction."""
    denom = math.sqrt((direction.x ** 2) / (rx ** 2) + (direction.y ** 2) / (ry ** 2)) or 1.0
    return 1.0 / denom


def endpoint_offsets(dist: float, boundary_start: float, boundary_end: float) -> Tuple[float, float]:
    """
    How far to pull the line in from each node centre.

    The destination end reserves room for the arrowhead and a visual gap.
    When the remaining span gets shorter than MIN_SPAN both offsets shrink,
    and they are finally scaled so the line can never turn inside out.
    """
    start = boundary_start + START_GAP
    end = boundary_end + END_GAP + ARROW_SIZE

    available = dist - (start + end)
    if available < MIN_SPAN:
        deficit = MIN_SPAN - available
        reduce_start = max(0.0, min(start - (boundary_start + MIN_START_CLEARANCE), deficit / 2))
        start -= reduce_start
        reduce_end = max(0.0, min(end - (boundary_end + MIN_END_CLEARANCE), deficit - reduce_start))
        end -= reduce_end

    total = start + end
    if total > dist:
        scale = dist / total if total else 0.0
        start *= scale
        end *= scale
    return start, end


def curve_offset(dist: float, direction: int) -> float:
    """Signed normal offset of the control point, bounded to MAX_CURVE."""
    return min(MAX_CURVE, max(MIN_CURVE, dist / CURVE_DIVISOR)) * (direction or 1)


def control_point(start: Point, end: Point, normal: Point, offset: float) -> Point:
    return Point(
        (start.x + end.x) / 2 + normal.x * offset,
        (start.y + end.y) / 2 + normal.y * offset,
    )


def quadratic_point(start: Point, control: Point, end: Point, t: float) -> Point:
    u = 1 - t
    return Point(
        u * u * start.x + 2 * u * t * control.x + t * t * end.x,
        u * u * start.y + 2 * u * t * control.y + t * t * end.y,
    )


def arrowhead(end: Point, target_center: Point, size: float = ARROW_SIZE) -> Tuple[Point, Point, Point]:
    """Triangle (tip, left, right) continuing from `end` towards the target node."""
    dx = target_center.x - end.x
    dy = target_center.y - end.y
    length = math.hypot(dx, dy) or 1.0
    ux = dx / length
    uy = dy / length
    wing = size * ARROW_WING_RATIO

    tip = Point(end.x + ux * size, end.y + uy * size)
    left = Point(tip.x - ux * size - uy * wing, tip.y - uy * size + ux * wing)
    right = Point(tip.x - ux * size + uy * wing, tip.y - uy * size - ux * wing)
    return tip, left, right


def magnitude_color(amount: float, max_amount: float) -> str:
    """Top third of the range is alert, middle third warning, rest normal."""
    amount = abs(amount)
    if amount >= max_amount * 0.66:
        return ALERT_COLOR
    if amount >= max_amount * 0.33:
        return WARNING_COLOR
    return NORMAL_COLOR


def point_in_rect(point: Point, x: float, y: float, width: float, height: float) -> bool:
    return x <= point.x <= x + width and y <= point.y <= y + height

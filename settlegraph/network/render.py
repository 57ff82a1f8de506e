"""
Scene renderer for the debt network.

`build_scene` turns a layout into plain shapes (pills, curved arrows and
amount labels); `draw_scene` paints those shapes on any DrawingSurface.
Keeping the two apart lets the API ship the scene as JSON and the SVG
endpoint reuse exactly the same geometry.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel

from settlegraph.network import geometry
from settlegraph.network.geometry import Point
from settlegraph.network.layout import GraphNode, LayoutResult, PositionedLink
from settlegraph.network.model import ViewMode
from settlegraph.network.surface import DrawingSurface, SvgSurface
from settlegraph.network.text import (
    AMOUNT_FONT_SIZE,
    NODE_FONT_SIZE,
    PLACEHOLDER_FONT_SIZE,
    estimate_text_width,
    node_label,
    pill_size,
)
from settlegraph.utils.formatting import format_amount

NODE_FILL = "#2563eb"
NODE_STROKE = "#ffffff"
NODE_TEXT = "#ffffff"
NODE_STROKE_WIDTH = 3

BASE_STROKE = "rgba(15,23,42,0.1)"
BASE_STROKE_HIGHLIGHT = "rgba(2,6,23,0.18)"
BASE_STROKE_WIDTH = 0.8
EDGE_STROKE_WIDTH = 3
ARROW_OUTLINE = "rgba(15,23,42,0.6)"
ARROW_OUTLINE_WIDTH = 1.2

LABEL_FILL = "rgba(255,255,255,0.92)"
LABEL_STROKE = "rgba(148,163,184,0.55)"
LABEL_TEXT = "#0f172a"
LABEL_PADDING = 20
LABEL_HEIGHT = 28
LABEL_RADIUS = 14

PLACEHOLDER_COLOR = "#6b7280"
PLACEHOLDERS = {
    ViewMode.RAW: "No transactions yet",
    ViewMode.OPTIMIZED: "No settlements yet",
}


class NodeShape(BaseModel):
    id: str
    label: str
    x: float
    y: float
    width: float
    height: float
    pinned: bool = False
    hovered: bool = False


class EdgeLabel(BaseModel):
    text: str
    x: float
    y: float
    width: float
    height: float


class EdgeShape(BaseModel):
    source: str
    target: str
    amount: float
    color: str
    highlighted: bool
    start: Point
    control: Point
    end: Point
    arrow: List[Point]
    label: EdgeLabel


class Scene(BaseModel):
    width: float
    height: float
    view_mode: ViewMode
    layout_mode: str
    placeholder: Optional[str] = None
    nodes: List[NodeShape] = []
    edges: List[EdgeShape] = []


def _edge_shape(
    link: PositionedLink,
    a: GraphNode,
    b: GraphNode,
    dims: Dict[str, tuple],
    max_amount: float,
    hovered_id: Optional[str],
) -> EdgeShape:
    center_a = Point(a.x, a.y)
    center_b = Point(b.x, b.y)
    tangent, normal, dist = geometry.tangent_and_normal(center_a, center_b)

    width_a, height_a = dims[a.id]
    width_b, height_b = dims[b.id]
    boundary_a = geometry.ellipse_boundary_distance(tangent, width_a / 2, height_a / 2)
    boundary_b = geometry.ellipse_boundary_distance(tangent, width_b / 2, height_b / 2)
    start_offset, end_offset = geometry.endpoint_offsets(dist, boundary_a, boundary_b)

    start = Point(a.x + tangent.x * start_offset, a.y + tangent.y * start_offset)
    end = Point(b.x - tangent.x * end_offset, b.y - tangent.y * end_offset)
    control = geometry.control_point(start, end, normal, geometry.curve_offset(dist, link.direction))

    mid = geometry.quadratic_point(start, control, end, 0.5)
    text = format_amount(link.amount)
    label = EdgeLabel(
        text=text,
        x=mid.x + normal.x * geometry.LABEL_NORMAL_OFFSET,
        y=mid.y + normal.y * geometry.LABEL_NORMAL_OFFSET,
        width=estimate_text_width(text, AMOUNT_FONT_SIZE, bold=True) + LABEL_PADDING,
        height=LABEL_HEIGHT,
    )

    return EdgeShape(
        source=link.source,
        target=link.target,
        amount=link.amount,
        color=geometry.magnitude_color(link.amount, max_amount),
        highlighted=hovered_id is not None and hovered_id in (a.id, b.id),
        start=start,
        control=control,
        end=end,
        arrow=list(geometry.arrowhead(end, center_b)),
        label=label,
    )


def build_scene(
    layout: LayoutResult,
    view_mode: ViewMode = ViewMode.RAW,
    hovered_id: Optional[str] = None,
) -> Scene:
    scene = Scene(
        width=layout.width,
        height=layout.height,
        view_mode=view_mode,
        layout_mode=layout.mode,
    )
    if not layout.nodes or not layout.links:
        scene.placeholder = PLACEHOLDERS[view_mode]
        return scene

    by_id = layout.node_map()
    dims = {node.id: pill_size(node_label(node.id)) for node in layout.nodes}
    max_amount = max([abs(link.amount) for link in layout.links] + [1.0])

    for link in layout.links:
        a = by_id.get(link.source)
        b = by_id.get(link.target)
        if a is None or b is None:
            continue
        scene.edges.append(_edge_shape(link, a, b, dims, max_amount, hovered_id))

    for node in layout.nodes:
        width, height = dims[node.id]
        scene.nodes.append(NodeShape(
            id=node.id,
            label=node_label(node.id),
            x=node.x,
            y=node.y,
            width=width,
            height=height,
            pinned=node.pinned,
            hovered=node.id == hovered_id,
        ))
    return scene


def draw_scene(scene: Scene, surface: DrawingSurface) -> None:
    """Paint edges first, then nodes on top."""
    surface.clear()
    if scene.placeholder:
        surface.draw_text(
            scene.placeholder, scene.width / 2, scene.height / 2,
            PLACEHOLDER_COLOR, PLACEHOLDER_FONT_SIZE
        )
        return

    for edge in scene.edges:
        base = BASE_STROKE_HIGHLIGHT if edge.highlighted else BASE_STROKE
        surface.draw_curve(edge.start, edge.control, edge.end, base, BASE_STROKE_WIDTH)
        surface.draw_curve(edge.start, edge.control, edge.end, edge.color, EDGE_STROKE_WIDTH)
        surface.draw_polygon(edge.arrow, edge.color, ARROW_OUTLINE, ARROW_OUTLINE_WIDTH)

        label = edge.label
        surface.draw_rounded_rect(
            label.x - label.width / 2, label.y - label.height / 2, label.width, label.height,
            LABEL_RADIUS, LABEL_FILL, LABEL_STROKE, 1
        )
        surface.draw_text(label.text, label.x, label.y, LABEL_TEXT, AMOUNT_FONT_SIZE, bold=True)

    for node in scene.nodes:
        surface.draw_rounded_rect(
            node.x - node.width / 2, node.y - node.height / 2, node.width, node.height,
            node.height / 2, NODE_FILL, NODE_STROKE, NODE_STROKE_WIDTH
        )
        surface.draw_text(node.label, node.x, node.y, NODE_TEXT, NODE_FONT_SIZE)


def render_svg(scene: Scene) -> str:
    surface = SvgSurface(scene.width, scene.height)
    draw_scene(scene, surface)
    return surface.to_svg()

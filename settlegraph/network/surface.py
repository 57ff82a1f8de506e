"""
Drawing surfaces the scene renderer can paint on.

`SvgSurface` produces a standalone SVG document; `RecordingSurface` keeps
the calls as data, which is what the tests inspect.
"""

import html
from typing import List, Protocol, Sequence

from pydantic import BaseModel

from settlegraph.network.geometry import Point
from settlegraph.network.text import estimate_text_width

FONT_FAMILY = "sans-serif"


class DrawingSurface(Protocol):
    width: float
    height: float

    def clear(self) -> None: ...

    def draw_curve(self, start: Point, control: Point, end: Point, stroke: str, stroke_width: float) -> None: ...

    def draw_polygon(self, points: Sequence[Point], fill: str, stroke: str, stroke_width: float) -> None: ...

    def draw_rounded_rect(
        self, x: float, y: float, width: float, height: float, radius: float,
        fill: str, stroke: str, stroke_width: float
    ) -> None: ...

    def draw_text(self, text: str, x: float, y: float, color: str, font_size: float, bold: bool = False) -> None: ...

    def measure_text(self, text: str, font_size: float, bold: bool = False) -> float: ...


class DrawCall(BaseModel):
    kind: str
    args: dict


class RecordingSurface:
    def __init__(self, width: float, height: float):
        self.width = width
        self.height = height
        self.calls: List[DrawCall] = []

    def _record(self, kind: str, **args) -> None:
        self.calls.append(DrawCall(kind=kind, args=args))

    def clear(self) -> None:
        self.calls = []

    def draw_curve(self, start, control, end, stroke, stroke_width):
        self._record("curve", start=start, control=control, end=end, stroke=stroke, stroke_width=stroke_width)

    def draw_polygon(self, points, fill, stroke, stroke_width):
        self._record("polygon", points=list(points), fill=fill, stroke=stroke, stroke_width=stroke_width)

    def draw_rounded_rect(self, x, y, width, height, radius, fill, stroke, stroke_width):
        self._record(
            "rounded_rect", x=x, y=y, width=width, height=height, radius=radius,
            fill=fill, stroke=stroke, stroke_width=stroke_width
        )

    def draw_text(self, text, x, y, color, font_size, bold=False):
        self._record("text", text=text, x=x, y=y, color=color, font_size=font_size, bold=bold)

    def measure_text(self, text, font_size, bold=False):
        return estimate_text_width(text, font_size, bold)

    def of_kind(self, kind: str) -> List[DrawCall]:
        return [call for call in self.calls if call.kind == kind]


class SvgSurface:
    def __init__(self, width: float, height: float, background: str = "#ffffff"):
        self.width = width
        self.height = height
        self.background = background
        self.parts: List[str] = []

    def clear(self) -> None:
        self.parts = []

    def draw_curve(self, start, control, end, stroke, stroke_width):
        self.parts.append(
            f'<path d="M {start.x:.1f},{start.y:.1f} Q {control.x:.1f},{control.y:.1f} {end.x:.1f},{end.y:.1f}" '
            f'fill="none" stroke="{stroke}" stroke-width="{stroke_width}" stroke-linecap="round"/>'
        )

    def draw_polygon(self, points, fill, stroke, stroke_width):
        pts = " ".join(f"{p.x:.1f},{p.y:.1f}" for p in points)
        self.parts.append(
            f'<polygon points="{pts}" fill="{fill}" stroke="{stroke}" stroke-width="{stroke_width}"/>'
        )

    def draw_rounded_rect(self, x, y, width, height, radius, fill, stroke, stroke_width):
        r = min(radius, height / 2, width / 2)
        self.parts.append(
            f'<rect x="{x:.1f}" y="{y:.1f}" width="{width:.1f}" height="{height:.1f}" rx="{r:.1f}" '
            f'fill="{fill}" stroke="{stroke}" stroke-width="{stroke_width}"/>'
        )

    def draw_text(self, text, x, y, color, font_size, bold=False):
        weight = ' font-weight="bold"' if bold else ""
        self.parts.append(
            f'<text x="{x:.1f}" y="{y:.1f}" fill="{color}" font-family="{FONT_FAMILY}" '
            f'font-size="{font_size}"{weight} text-anchor="middle" dominant-baseline="central">'
            f'{html.escape(text, quote=True)}</text>'
        )

    def measure_text(self, text, font_size, bold=False):
        return estimate_text_width(text, font_size, bold)

    def to_svg(self) -> str:
        header = (
            f'<svg xmlns="http://www.w3.org/2000/svg" width="{self.width:.0f}" height="{self.height:.0f}" '
            f'viewBox="0 0 {self.width:.0f} {self.height:.0f}" style="background:{self.background}">'
        )
        return "\n".join([header, *self.parts, "</svg>"]) + "\n"

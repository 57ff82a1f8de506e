"""Label text and pill sizing shared by layout, renderer and surfaces."""

import math
from typing import Tuple

NODE_FONT_SIZE = 13
AMOUNT_FONT_SIZE = 12
PLACEHOLDER_FONT_SIZE = 14

PILL_PADDING_X = 14
PILL_HEIGHT = 26
PILL_MIN_WIDTH = 34

# Average glyph advance as a fraction of the font size for a sans-serif face.
REGULAR_ADVANCE = 0.55
BOLD_ADVANCE = 0.6


def node_label(node_id: str) -> str:
    """Nodes show the first word of the participant name."""
    parts = (node_id or "").split()
    return parts[0] if parts else ""


def estimate_text_width(text: str, font_size: float, bold: bool = False) -> float:
    advance = BOLD_ADVANCE if bold else REGULAR_ADVANCE
    return len(text) * font_size * advance


def pill_size(label: str) -> Tuple[float, float]:
    """(width, height) of the pill drawn around a node label."""
    text_width = math.ceil(estimate_text_width(label, NODE_FONT_SIZE))
    return max(PILL_MIN_WIDTH, text_width + PILL_PADDING_X * 2), PILL_HEIGHT

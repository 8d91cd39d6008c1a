"""
Dimension System for Foundation Plans

Computes the geometry of a single linear dimension:
- Two extension lines from the measured object out past the dimension line
- A dimension line with arrowheads at both ends
- A measurement label, rotated for vertical dimensions unless told otherwise
- The bounding box of all of the above, including the estimated label extent

Components:
- DimensionStyle: Offsets, padding and font size shared by all dimensions
- DimensionSpec: One requested measurement
- DimensionResult: Primitives and bounds produced for a DimensionSpec
- draw_dimension: The calculator itself
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from .constants import (
    ARROW_COLOR,
    ARROW_MARKER_ID,
    DEFAULT_DIM_FONT_SIZE,
    DIMENSION_PADDING,
    DIMENSION_TEXT_OFFSET,
    EXTENSION_LINE_GAP,
    EXTENSION_LINE_OVERSHOOT,
    MIN_DIM_FONT_SIZE,
    TEXT_WIDTH_FACTOR,
)
from .scene import Line, Marker, Rotation, Text
from .view_area import BoundingBox


# =============================================================================
# DATA CLASSES
# =============================================================================

@dataclass(frozen=True)
class DimensionStyle:
    """
    Styling shared by every dimension of one drawing.

    All distances are absolute drawing units; they do not depend on the
    scale the plan is later fitted at.
    """
    extension_line_gap: float = EXTENSION_LINE_GAP
    extension_line_overshoot: float = EXTENSION_LINE_OVERSHOOT
    text_offset: float = DIMENSION_TEXT_OFFSET
    padding: float = DIMENSION_PADDING
    font_size: float = DEFAULT_DIM_FONT_SIZE
    marker_id: str = ARROW_MARKER_ID


@dataclass(frozen=True)
class DimensionSpec:
    """
    A single linear dimension to draw.

    The reference points share their x coordinate (vertical dimension) or
    their y coordinate (horizontal dimension). The sign of ``offset`` picks
    the side: positive is right/down, negative is left/up.

    Attributes:
        x1, y1, x2, y2: Reference points on the measured object's edge
        offset: Signed distance from the reference points to the dimension line
        label: Measurement text
        orientation: "horizontal" or "vertical"
        text_x: Fixed label x position (aligns labels of several dimensions
            in one column)
        text_anchor: Label alignment override
        text_offset: Label distance override
        rotate_text: Rotate vertical labels by 90 degrees
        font_size: Font size override
    """
    x1: float
    y1: float
    x2: float
    y2: float
    offset: float
    label: str
    orientation: str = "horizontal"
    text_x: float | None = None
    text_anchor: str | None = None
    text_offset: float | None = None
    rotate_text: bool = True
    font_size: float | None = None


@dataclass(frozen=True)
class DimensionResult:
    """Primitives for one dimension plus the box enclosing all of them."""
    guides: tuple[Line, Line]
    line: Line
    label: Text
    font_size: float
    bounds: BoundingBox


# =============================================================================
# HELPERS
# =============================================================================

def arrow_marker(marker_id: str = ARROW_MARKER_ID) -> Marker:
    """Filled arrowhead used at both ends of every dimension line."""
    return Marker(id=marker_id, path="M 0 0 L 10 5 L 0 10 z", fill=ARROW_COLOR)


def clamp_font_size(value: float | None) -> float:
    """Font size for dimension labels, never below the readable minimum."""
    try:
        size = float(value) if value is not None else DEFAULT_DIM_FONT_SIZE
    except (TypeError, ValueError):
        size = DEFAULT_DIM_FONT_SIZE
    if not math.isfinite(size) or size <= 0:
        size = DEFAULT_DIM_FONT_SIZE
    return max(MIN_DIM_FONT_SIZE, size)


def format_cm(value: float) -> str:
    """Label text for a centimeter value: whole numbers without decimals."""
    number = float(value) if math.isfinite(value) else 0.0
    if number.is_integer():
        return str(int(number))
    return f"{number:.2f}"


def estimate_text_width(text: str, font_size: float) -> float:
    """
    Approximate rendered width of a label.

    This is a heuristic, not a glyph measurement: it assumes an average
    character width of ``TEXT_WIDTH_FACTOR`` em. The dimension padding
    absorbs the error.
    """
    return len(text or "") * font_size * TEXT_WIDTH_FACTOR


def estimate_text_box(text: Text, font_size: float) -> BoundingBox:
    """Estimated extent of a Text node, honoring anchor, baseline and rotation."""
    width = estimate_text_width(text.content, font_size)

    if text.anchor == "middle":
        left = text.x - width / 2
    elif text.anchor == "end":
        left = text.x - width
    else:
        left = text.x

    if text.baseline == "middle":
        top = text.y - font_size / 2
    elif text.baseline == "hanging":
        top = text.y
    else:
        # Alphabetic baseline: ascenders above, descenders slightly below
        top = text.y - font_size

    bottom = top + font_size * (1.25 if text.baseline is None else 1.0)
    corners = np.array([
        [left, top],
        [left + width, top],
        [left, bottom],
        [left + width, bottom],
    ])

    if text.rotation is not None and text.rotation.angle % 360 != 0:
        theta = math.radians(text.rotation.angle)
        rot = np.array([
            [math.cos(theta), -math.sin(theta)],
            [math.sin(theta), math.cos(theta)],
        ])
        pivot = np.array([text.rotation.cx, text.rotation.cy])
        corners = (corners - pivot) @ rot.T + pivot

    return BoundingBox.from_points(corners)


# =============================================================================
# CALCULATOR
# =============================================================================

def draw_dimension(spec: DimensionSpec, style: DimensionStyle | None = None) -> DimensionResult:
    """
    Compute the full annotation geometry for one dimension.

    Generates:
    1. Extension lines starting a small gap away from the object and
       overshooting the dimension line
    2. Dimension line with arrow markers on both ends
    3. Label at the midpoint, pushed outward by the text offset

    Args:
        spec: The measurement to draw
        style: Shared dimension styling

    Returns:
        DimensionResult with primitives and padded bounds
    """
    if style is None:
        style = DimensionStyle()

    font_size = clamp_font_size(spec.font_size if spec.font_size is not None else style.font_size)
    text_offset = spec.text_offset if spec.text_offset is not None else style.text_offset
    gap = style.extension_line_gap
    overshoot = style.extension_line_overshoot
    direction = 1 if spec.offset >= 0 else -1
    marker = style.marker_id

    if spec.orientation == "horizontal":
        base_y = (spec.y1 + spec.y2) / 2
        dim_y = base_y + spec.offset
        ext_start_y = base_y + direction * gap
        ext_end_y = dim_y + direction * overshoot

        guides = (
            Line(spec.x1, ext_start_y, spec.x1, ext_end_y),
            Line(spec.x2, ext_start_y, spec.x2, ext_end_y),
        )
        line = Line(spec.x1, dim_y, spec.x2, dim_y, marker_start=marker, marker_end=marker)

        # Label sits on the far side of the dimension line
        text_x = spec.text_x if spec.text_x is not None else (spec.x1 + spec.x2) / 2
        label = Text(
            x=text_x,
            y=dim_y + direction * text_offset,
            content=spec.label,
            anchor=spec.text_anchor or "middle",
            baseline="hanging" if direction > 0 else None,
        )
    else:
        base_x = (spec.x1 + spec.x2) / 2
        dim_x = base_x + spec.offset
        ext_start_x = base_x + direction * gap
        ext_end_x = dim_x + direction * overshoot

        guides = (
            Line(ext_start_x, spec.y1, ext_end_x, spec.y1),
            Line(ext_start_x, spec.y2, ext_end_x, spec.y2),
        )
        line = Line(dim_x, spec.y1, dim_x, spec.y2, marker_start=marker, marker_end=marker)

        text_x = spec.text_x if spec.text_x is not None else dim_x + direction * text_offset
        text_y = (spec.y1 + spec.y2) / 2
        if spec.rotate_text:
            label = Text(
                x=text_x,
                y=text_y,
                content=spec.label,
                anchor=spec.text_anchor or "middle",
                rotation=Rotation(90, text_x, text_y),
            )
        else:
            label = Text(
                x=text_x,
                y=text_y,
                content=spec.label,
                anchor=spec.text_anchor or "middle",
                baseline="middle",
            )

    points = [(g.x1, g.y1) for g in guides] + [(g.x2, g.y2) for g in guides]
    points += [(line.x1, line.y1), (line.x2, line.y2)]
    text_box = estimate_text_box(label, font_size)
    points += [(text_box.min_x, text_box.min_y), (text_box.max_x, text_box.max_y)]
    bounds = BoundingBox.from_points(points).expand(style.padding)

    return DimensionResult(
        guides=guides,
        line=line,
        label=label,
        font_size=font_size,
        bounds=bounds,
    )

"""
Foundation plan generator.

Turns a StructuralConfig into a plan-view scene: the barrel body, one
foundation strip and one foot per row position, and every dimension the
plan needs. The result carries two independent bounding boxes, one for the
drawn shapes and one for the annotations, so the page layout engine can
decide how to fit them.

Axis convention (drawing units, y grows downward):
- X is the cross axis: body width, foot width, foundation strip width
- Y is the row axis: body length, foot thickness, gaps, foundation width
- The body is centered on the origin; the first foundation strip's outer
  edge lies on the body's bottom edge and the row grows upward
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Mapping

from ..structure import (
    PlanMetrics,
    StructuralConfig,
    compute_foot_placements,
    compute_metrics,
    sanitize_config,
)
from .constants import DEFAULT_POLICY, FONT_FAMILY, PLAN_STYLE, AnnotationPolicy, cm
from .dimensions import (
    DimensionResult,
    DimensionSpec,
    DimensionStyle,
    arrow_marker,
    clamp_font_size,
    draw_dimension,
    format_cm,
)
from .scene import Document, Group, Rect
from .view_area import BoundingBox, union_all

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Foundation plan"


@dataclass(frozen=True)
class PlanDrawing:
    """
    Output of :func:`generate_plan`.

    Attributes:
        document: Scene with a geometry group and an annotation group
        metrics: Row measurements in centimeters
        warnings: Human-readable notes about sanitized or suspicious input
        geometry_bounds: Union of all drawn shapes
        annotation_bounds: Union of all dimension boxes
        dim_font_size: Font size the dimension labels were laid out with
        config: The sanitized configuration the plan was drawn from
    """
    document: Document
    metrics: PlanMetrics
    warnings: tuple[str, ...]
    geometry_bounds: BoundingBox
    annotation_bounds: BoundingBox
    dim_font_size: float
    config: StructuralConfig

    @property
    def shapes(self) -> tuple[Rect, ...]:
        """All structural rectangles in paint order."""
        geometry = self.document.children[0]
        return tuple(
            shape
            for layer in geometry.children
            for shape in layer.children
        )


@dataclass
class PlanBuilder:
    """
    Accumulates shapes, annotations and bounds for a single render.

    A new builder is created per call to :func:`generate_plan` and dropped
    when it returns.
    """
    style: DimensionStyle
    body: list[Rect] = field(default_factory=list)
    foundations: list[Rect] = field(default_factory=list)
    feet: list[Rect] = field(default_factory=list)
    dimensions: list[DimensionResult] = field(default_factory=list)

    def add_rect_from_center(self, layer: list[Rect], cx: float, cy: float,
                             width: float, height: float) -> Rect:
        rect = Rect(x=cx - width / 2, y=cy - height / 2, width=width, height=height)
        layer.append(rect)
        return rect

    def add_dimension(self, spec: DimensionSpec) -> DimensionResult:
        result = draw_dimension(spec, self.style)
        self.dimensions.append(result)
        return result

    @property
    def geometry_bounds(self) -> BoundingBox:
        boxes = [
            BoundingBox(r.x, r.y, r.x + r.width, r.y + r.height)
            for r in self.body + self.foundations + self.feet
        ]
        return union_all(boxes) or BoundingBox(0, 0, 0, 0)

    @property
    def annotation_bounds(self) -> BoundingBox | None:
        return union_all(d.bounds for d in self.dimensions)

    def build(self, aria_label: str) -> tuple[Document, BoundingBox, BoundingBox]:
        geometry_bounds = self.geometry_bounds
        annotation_bounds = self.annotation_bounds or geometry_bounds
        full = geometry_bounds.union(annotation_bounds)

        geometry = Group(
            children=(
                Group(tuple(self.body), css_class="layer-body"),
                Group(tuple(self.foundations), css_class="layer-foundation"),
                Group(tuple(self.feet), css_class="layer-feet"),
            ),
            group_id="geometry",
            css_class="geometry-group layer-geometry",
        )
        annotation = Group(
            children=(
                Group(tuple(line for d in self.dimensions for line in d.guides),
                      css_class="layer-guides"),
                Group(tuple(d.line for d in self.dimensions), css_class="layer-dimensions"),
                Group(tuple(d.label for d in self.dimensions), css_class="layer-text"),
            ),
            group_id="annotation",
            css_class="annotation-group layer-annotation",
        )

        min_x = math.floor(full.min_x)
        min_y = math.floor(full.min_y)
        document = Document(
            children=(geometry, annotation),
            view_box=(min_x, min_y, math.ceil(full.max_x - min_x), math.ceil(full.max_y - min_y)),
            markers=(arrow_marker(self.style.marker_id),),
            styles=(PLAN_STYLE % {"font_family": FONT_FAMILY, "font_size": _css_number(self.style.font_size)},),
            aria_label=aria_label,
        )
        return document, geometry_bounds, annotation_bounds


def _css_number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else f"{value:g}"


def _validate_sizes(config: StructuralConfig) -> list[str]:
    """Non-fatal checks on the cleaned primary dimensions."""
    warnings = []
    if config.main_body_width <= 0 or config.main_body_length <= 0:
        warnings.append("Warning: main body size is invalid (width/length <= 0).")
    if config.foot_width <= 0 or config.foot_thickness <= 0:
        warnings.append("Warning: foot size is invalid (width/thickness <= 0).")
    if config.foundation_width <= 0:
        warnings.append("Warning: foundation width is invalid (<= 0).")
    for message in warnings:
        logger.warning(message)

    if len(config.foot_gaps) < 2:
        hint = "Note: at least 3 feet (2 or more foot gaps) are recommended for a row foundation."
        logger.info(hint)
        warnings.append(hint)
    return warnings


def generate_plan(
    config: StructuralConfig | Mapping[str, Any],
    title: str | None = None,
    dim_font_size_px: float | None = None,
    policy: AnnotationPolicy | None = None,
) -> PlanDrawing:
    """
    Compute the plan geometry and all dimensions for a configuration.

    Never raises for bad numbers: invalid values are replaced by 0 and
    reported in ``warnings``.

    Args:
        config: Structural parameters (or a raw mapping of them)
        title: Accessible name of the drawing
        dim_font_size_px: Dimension label size in px (minimum 9)
        policy: Annotation placement policy

    Returns:
        PlanDrawing with the scene, metrics, warnings and both bounding boxes
    """
    if not isinstance(config, StructuralConfig):
        config = StructuralConfig.from_dict(config)
    policy = policy or DEFAULT_POLICY

    clean, warnings = sanitize_config(config)
    warnings += _validate_sizes(clean)
    metrics = compute_metrics(clean)

    font_size = clamp_font_size(dim_font_size_px)
    builder = PlanBuilder(style=DimensionStyle(font_size=font_size))

    body_x = cm(clean.main_body_width)
    body_y = cm(clean.main_body_length)
    foot_x = cm(clean.foot_width)
    foot_y = cm(clean.foot_thickness)
    # The strip matches the foot across the row; foundation_width runs along it
    foundation_x = foot_x
    foundation_y = cm(clean.foundation_width)

    builder.add_rect_from_center(builder.body, 0, 0, body_x, body_y)
    body_top = -body_y / 2
    body_bottom = body_y / 2

    # Row coordinates grow upward from the body's bottom edge; y_svg = -y_up
    first_center_up = -body_y / 2 + foundation_y / 2
    leading_edge_up = first_center_up - foot_y / 2
    centers_up = [leading_edge_up + cm(p.center_offset) for p in compute_foot_placements(clean)]

    for center_up in centers_up:
        builder.add_rect_from_center(builder.foundations, 0, -center_up, foundation_x, foundation_y)
        builder.add_rect_from_center(builder.feet, 0, -center_up, foot_x, foot_y)

    geometry = builder.geometry_bounds

    # Left: per-foot margins, thickness and foundation width
    left_ref_x = geometry.min_x
    left_detail = -cm(policy.detail_offset)
    left_overall = -cm(policy.foundation_offset)
    left_most_x = left_ref_x + min(left_detail, left_overall)
    detail_text_x = left_most_x - cm(policy.detail_text_gap)
    overall_text_x = detail_text_x - cm(policy.foundation_text_gap)
    margin_cm = (clean.foundation_width - clean.foot_thickness) / 2

    def left_dimension(y_from_up: float, y_to_up: float, offset: float,
                       label: str, text_x: float) -> None:
        if policy.rotate_detail_labels:
            overrides: dict[str, Any] = {}
        else:
            overrides = {"text_x": text_x, "text_anchor": "end", "rotate_text": False}
        builder.add_dimension(DimensionSpec(
            x1=left_ref_x, y1=-y_from_up, x2=left_ref_x, y2=-y_to_up,
            offset=offset, label=label, orientation="vertical", **overrides,
        ))

    for center_up in centers_up:
        foundation_top = center_up + foundation_y / 2
        foot_top = center_up + foot_y / 2
        foot_bottom = center_up - foot_y / 2
        foundation_bottom = center_up - foundation_y / 2

        left_dimension(foundation_top, foot_top, left_detail, format_cm(margin_cm), detail_text_x)
        left_dimension(foot_top, foot_bottom, left_detail, format_cm(clean.foot_thickness), detail_text_x)
        left_dimension(foot_bottom, foundation_bottom, left_detail, format_cm(margin_cm), detail_text_x)
        left_dimension(foundation_top, foundation_bottom, left_overall,
                       format_cm(clean.foundation_width), overall_text_x)

    # Right: clear gaps, overall foot span, body length (outermost)
    right_ref_x = geometry.max_x
    for i, gap in enumerate(clean.foot_gaps):
        upper_edge_of_current = centers_up[i] + foot_y / 2
        lower_edge_of_next = centers_up[i + 1] - foot_y / 2
        builder.add_dimension(DimensionSpec(
            x1=right_ref_x, y1=-upper_edge_of_current,
            x2=right_ref_x, y2=-lower_edge_of_next,
            offset=cm(policy.gap_offset), label=format_cm(gap), orientation="vertical",
        ))

    builder.add_dimension(DimensionSpec(
        x1=right_ref_x, y1=-leading_edge_up,
        x2=right_ref_x, y2=-(leading_edge_up + cm(metrics.total_foot_span)),
        offset=cm(policy.foot_span_offset), label=format_cm(metrics.total_foot_span),
        orientation="vertical",
    ))
    builder.add_dimension(DimensionSpec(
        x1=right_ref_x, y1=body_top, x2=right_ref_x, y2=body_bottom,
        offset=cm(policy.body_length_offset), label=format_cm(clean.main_body_length),
        orientation="vertical",
    ))

    # Below: foot width, then body width (outermost)
    bottom_ref_y = geometry.max_y
    builder.add_dimension(DimensionSpec(
        x1=-foot_x / 2, y1=bottom_ref_y, x2=foot_x / 2, y2=bottom_ref_y,
        offset=cm(policy.foot_width_offset), label=format_cm(clean.foot_width),
    ))
    builder.add_dimension(DimensionSpec(
        x1=-body_x / 2, y1=bottom_ref_y, x2=body_x / 2, y2=bottom_ref_y,
        offset=cm(policy.body_width_offset), label=format_cm(clean.main_body_width),
        text_offset=cm(policy.body_width_text_offset),
    ))

    document, geometry_bounds, annotation_bounds = builder.build(title or DEFAULT_TITLE)
    logger.debug(
        "Plan generated: %d feet, %d dimensions, geometry %s, annotations %s",
        metrics.foot_count, len(builder.dimensions), geometry_bounds, annotation_bounds,
    )

    return PlanDrawing(
        document=document,
        metrics=metrics,
        warnings=tuple(warnings),
        geometry_bounds=geometry_bounds,
        annotation_bounds=annotation_bounds,
        dim_font_size=font_size,
        config=clean,
    )


def geometry_only(plan: PlanDrawing) -> Document:
    """
    Document holding just the geometry layer, framed to the geometry bounds.

    Used for thumbnails where dimensions would be unreadable anyway.
    """
    bounds = plan.geometry_bounds
    return Document(
        children=(plan.document.children[0],),
        view_box=(bounds.min_x, bounds.min_y, bounds.width, bounds.height),
        styles=plan.document.styles,
        aria_label=plan.document.aria_label,
    )

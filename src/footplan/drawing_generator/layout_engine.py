"""
Layout engine for composed plan pages.

This module fits a generated plan into the content band of a page template:
- Page partitioning into header / content / legend bands
- Uniform scale and centering of the plan inside the content band
- Re-projection of every annotation primitive through the fit, so labels
  and arrowheads keep their size while their positions follow the geometry
- Page furniture (title, subtitle, legend, band dividers)

The geometry group is placed under a single SVG transform. Annotations are
not: their coordinates are projected one by one so that stroke widths and
font sizes stay unscaled.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from typing import Any, Mapping, Sequence

import numpy as np

from .constants import (
    FALLBACK_VIEW_SIZE,
    FONT_FAMILY,
    MIN_DOMINANT_COVERAGE,
    PAGE_STYLE,
    TARGET_FILL_RATIO,
    mm_to_px,
)
from .plan import PlanDrawing
from .scene import Circle, Document, Group, Line, Node, Rect, Rotation, Text, find_group
from .svg_writer import format_number
from .templates import PageTemplate, get_template
from .title_block import DEFAULT_TITLE, TitleBlock, TitleBlockInfo
from .view_area import BoundingBox, ViewArea

logger = logging.getLogger(__name__)


# =============================================================================
# BOUNDS
# =============================================================================

def normalize_bounds(bounds: Any) -> BoundingBox | None:
    """
    Validate and convert bounds from any of the accepted shapes.

    Accepts a BoundingBox, a (min_x, min_y, max_x, max_y) sequence, or a
    mapping with ``min_x``/``minX``/``xMin`` style keys plus either max
    values or ``width``/``height``.

    Returns:
        A BoundingBox, or None if the input is missing, non-finite or
        degenerate (zero or negative extent)
    """
    if bounds is None:
        return None

    if isinstance(bounds, BoundingBox):
        values = [bounds.min_x, bounds.min_y, bounds.max_x, bounds.max_y]
    elif isinstance(bounds, Mapping):
        def pick(*keys):
            for key in keys:
                if bounds.get(key) is not None:
                    return bounds[key]
            return None

        min_x = pick("min_x", "minX", "xMin")
        min_y = pick("min_y", "minY", "yMin")
        max_x = pick("max_x", "maxX", "xMax")
        max_y = pick("max_y", "maxY", "yMax")
        width = pick("width")
        height = pick("height")
        try:
            if max_x is None and min_x is not None and width is not None:
                max_x = float(min_x) + float(width)
            if max_y is None and min_y is not None and height is not None:
                max_y = float(min_y) + float(height)
        except (TypeError, ValueError):
            return None
        values = [min_x, min_y, max_x, max_y]
    elif isinstance(bounds, Sequence) and not isinstance(bounds, str) and len(bounds) == 4:
        values = list(bounds)
    else:
        return None

    try:
        min_x, min_y, max_x, max_y = (float(v) for v in values)
    except (TypeError, ValueError):
        return None

    if not all(math.isfinite(v) for v in (min_x, min_y, max_x, max_y)):
        return None
    if max_x <= min_x or max_y <= min_y:
        return None

    return BoundingBox(min_x, min_y, max_x, max_y)


def bounds_from_view_box(document: Document) -> BoundingBox:
    """Declared view box of a document, 1000 x 1000 on each missing axis."""
    vb = document.view_box
    has_width = vb is not None and math.isfinite(vb[2]) and vb[2] > 0
    has_height = vb is not None and math.isfinite(vb[3]) and vb[3] > 0
    min_x = vb[0] if has_width else 0.0
    min_y = vb[1] if has_height else 0.0
    width = vb[2] if has_width else FALLBACK_VIEW_SIZE
    height = vb[3] if has_height else FALLBACK_VIEW_SIZE
    return BoundingBox(min_x, min_y, min_x + width, min_y + height)


# =============================================================================
# FIT
# =============================================================================

@dataclass(frozen=True)
class Coverage:
    """How much of the target slot the fitted plan occupies."""
    width_ratio: float
    height_ratio: float
    dominant_ratio: float


@dataclass(frozen=True)
class FitResult:
    """
    Uniform scale and translation that maps plan units into a page slot.

    ``project(x, y) = offset + ((x, y) - source_min) * scale``

    Attributes:
        source_bounds: Region of the plan that was fitted
        annotation_bounds: Annotation bounds that were unioned in (if valid)
        target_slot: Page rectangle the plan was fitted into
        scale: Uniform scale factor
        offset_x, offset_y: Page position of the source_bounds corner
        coverage: Fill diagnostics
        warnings: Advisory messages collected while fitting and composing
    """
    source_bounds: BoundingBox
    annotation_bounds: BoundingBox | None
    target_slot: ViewArea
    scale: float
    offset_x: float
    offset_y: float
    coverage: Coverage
    warnings: tuple[str, ...] = ()

    @property
    def matrix(self) -> np.ndarray:
        """3x3 homogeneous matrix of the projection."""
        s = self.scale
        return np.array([
            [s, 0.0, self.offset_x - self.source_bounds.min_x * s],
            [0.0, s, self.offset_y - self.source_bounds.min_y * s],
            [0.0, 0.0, 1.0],
        ])

    @property
    def svg_transform(self) -> str:
        """Equivalent SVG transform list for wrapping the geometry group."""
        return (
            f"translate({format_number(self.offset_x)} {format_number(self.offset_y)}) "
            f"scale({format_number(self.scale)}) "
            f"translate({format_number(-self.source_bounds.min_x)} {format_number(-self.source_bounds.min_y)})"
        )

    def project_point(self, x: float, y: float) -> tuple[float, float]:
        px, py, _ = self.matrix @ np.array([x, y, 1.0])
        return float(px), float(py)

    def project_length(self, value: float) -> float:
        return value * self.scale


def _log_warning(message: str) -> None:
    if message.startswith("Info:"):
        logger.info(message)
    else:
        logger.warning(message)


def compute_fit(
    slot: ViewArea,
    geometry_bounds: Any,
    annotation_bounds: Any = None,
    fallback_bounds: BoundingBox | None = None,
) -> FitResult:
    """
    Fit plan bounds into a slot.

    Steps:
    1. Normalize the geometry bounds; fall back to ``fallback_bounds`` (or a
       1000 x 1000 box) with a warning if they are unusable
    2. Union in the annotation bounds when they are valid
    3. ``scale = TARGET_FILL_RATIO * min(slot_w / src_w, slot_h / src_h)``,
       replaced by 1 with a warning if not finite and positive
    4. Center the scaled source inside the slot

    No rotation is applied: the plan's X axis stays the page's X axis.
    """
    warnings: list[str] = []

    source = normalize_bounds(geometry_bounds)
    if source is None:
        source = fallback_bounds or BoundingBox(0, 0, FALLBACK_VIEW_SIZE, FALLBACK_VIEW_SIZE)
        warnings.append("Warning: geometry bounds are invalid. Falling back to the document view box.")

    annotations = normalize_bounds(annotation_bounds)
    if annotations is not None:
        source = source.union(annotations)

    scale = TARGET_FILL_RATIO * min(slot.width / source.width, slot.height / source.height)
    if not math.isfinite(scale) or scale <= 0:
        scale = 1.0
        warnings.append("Warning: fit scale is invalid. Falling back to scale 1.")

    draw_w = source.width * scale
    draw_h = source.height * scale
    offset_x = slot.x + (slot.width - draw_w) / 2
    offset_y = slot.y + (slot.height - draw_h) / 2

    width_ratio = draw_w / slot.width if slot.width > 0 else 0.0
    height_ratio = draw_h / slot.height if slot.height > 0 else 0.0
    coverage = Coverage(width_ratio, height_ratio, max(width_ratio, height_ratio))
    if coverage.dominant_ratio < MIN_DOMINANT_COVERAGE:
        warnings.append(
            f"Info: the plan covers only {coverage.dominant_ratio:.1%} of the content area "
            f"(expected at least {MIN_DOMINANT_COVERAGE:.1%})."
        )

    for message in warnings:
        _log_warning(message)

    return FitResult(
        source_bounds=source,
        annotation_bounds=annotations,
        target_slot=slot,
        scale=scale,
        offset_x=offset_x,
        offset_y=offset_y,
        coverage=coverage,
        warnings=tuple(warnings),
    )


# =============================================================================
# ANNOTATION PROJECTION
# =============================================================================

def project_node(node: Node, fit: FitResult) -> Node:
    """
    Re-express one annotation node in page coordinates.

    Points (line ends, text anchors, rect corners, circle centers, rotation
    pivots) go through the fit projection. Lengths (width, height, rx, r)
    are multiplied by the scale. Rotation angles, stroke widths and font
    sizes are left alone. Group transforms are dropped since their content
    is projected directly.
    """
    if isinstance(node, Group):
        return replace(
            node,
            children=tuple(project_node(child, fit) for child in node.children),
            transform=None,
        )
    if isinstance(node, Line):
        x1, y1 = fit.project_point(node.x1, node.y1)
        x2, y2 = fit.project_point(node.x2, node.y2)
        return replace(node, x1=x1, y1=y1, x2=x2, y2=y2)
    if isinstance(node, Text):
        x, y = fit.project_point(node.x, node.y)
        rotation = node.rotation
        if rotation is not None:
            cx, cy = fit.project_point(rotation.cx, rotation.cy)
            rotation = Rotation(rotation.angle, cx, cy)
        return replace(node, x=x, y=y, rotation=rotation)
    if isinstance(node, Rect):
        x, y = fit.project_point(node.x, node.y)
        rx = fit.project_length(node.rx) if node.rx is not None else None
        return replace(
            node,
            x=x,
            y=y,
            width=fit.project_length(node.width),
            height=fit.project_length(node.height),
            rx=rx,
        )
    if isinstance(node, Circle):
        cx, cy = fit.project_point(node.cx, node.cy)
        return replace(node, cx=cx, cy=cy, r=fit.project_length(node.r))
    return node


# =============================================================================
# COMPOSITION
# =============================================================================

@dataclass(frozen=True)
class ComposedDocument:
    """
    A plan placed on a page.

    Attributes:
        template_id, template_label: Template the page was composed with
        page_mm: Sheet size in millimeters (width, height)
        page_px: Sheet size in page drawing units (width, height)
        slots: Named page bands ("header", "content", "legend")
        fit: The fit of the plan into the content band
        document: The page scene
    """
    template_id: str
    template_label: str
    page_mm: tuple[float, float]
    page_px: tuple[float, float]
    slots: dict[str, ViewArea]
    fit: FitResult
    document: Document
    orientation: str = "portrait"

    @property
    def warnings(self) -> tuple[str, ...]:
        return self.fit.warnings


def page_slots(template: PageTemplate) -> dict[str, ViewArea]:
    """Split a template page into header, content and legend bands (px)."""
    page_w = mm_to_px(template.width_mm)
    page_h = mm_to_px(template.height_mm)
    margins = template.margins

    left = mm_to_px(margins.left_mm)
    top = mm_to_px(margins.top_mm)
    right = page_w - mm_to_px(margins.right_mm)
    inner_width = right - left

    header_h = mm_to_px(template.regions.header_mm)
    legend_h = mm_to_px(template.regions.legend_mm)
    content_top = top + header_h
    content_h = max(1.0, page_h - (top + mm_to_px(margins.bottom_mm) + header_h + legend_h))

    return {
        "header": ViewArea(left, top, inner_width, header_h),
        "content": ViewArea(left, content_top, inner_width, content_h),
        "legend": ViewArea(left, content_top + content_h, inner_width, legend_h),
    }


def compose_plan_document(
    template: PageTemplate | str | None,
    plan: PlanDrawing | Document | None,
    geometry_bounds: Any = None,
    annotation_bounds: Any = None,
    title: str | None = None,
    model_name: str | None = None,
    notes: list[str] | None = None,
    foundation_depth: float | None = None,
) -> ComposedDocument:
    """
    Compose a plan onto a page template.

    Args:
        template: Page template, or a template id
        plan: Generated plan, or a bare plan Document
        geometry_bounds: Overrides the plan's geometry bounds
        annotation_bounds: Overrides the plan's annotation bounds
        title: Page title
        model_name: Shown in the subtitle
        notes: Legend lines (at most four are used)
        foundation_depth: Mentioned in the default legend when known

    Returns:
        ComposedDocument with the page scene and fit diagnostics

    Raises:
        ValueError: If no plan document is given
    """
    if isinstance(plan, PlanDrawing):
        source = plan.document
        if geometry_bounds is None:
            geometry_bounds = plan.geometry_bounds
        if annotation_bounds is None:
            annotation_bounds = plan.annotation_bounds
        if foundation_depth is None:
            foundation_depth = plan.config.foundation_depth
    elif isinstance(plan, Document):
        source = plan
    else:
        raise ValueError("Plan document is missing; nothing to lay out.")

    if not isinstance(template, PageTemplate):
        template = get_template(template)

    slots = page_slots(template)
    fit = compute_fit(slots["content"], geometry_bounds, annotation_bounds, bounds_from_view_box(source))
    warnings = list(fit.warnings)

    info = TitleBlockInfo(
        title=title or DEFAULT_TITLE,
        model_name=model_name or "",
        template_label=template.label,
        notes=list(notes or []),
        foundation_depth=foundation_depth,
    )
    furniture = TitleBlock(info, slots["header"], slots["content"], slots["legend"])
    children: list[Node] = list(furniture.generate())

    geometry = find_group(source, "geometry")
    if geometry is not None:
        children.append(Group((geometry,), group_id="plan-geometry", transform=fit.svg_transform))
    else:
        children.append(Group(source.children, group_id="plan-geometry", transform=fit.svg_transform))
        warnings.append("Warning: geometry group is missing. The whole plan document was placed instead.")
        _log_warning(warnings[-1])

    annotation = find_group(source, "annotation")
    if annotation is not None:
        children.append(project_node(annotation, fit))
    else:
        warnings.append("Warning: annotation group is missing. No separate annotation overlay was projected.")
        _log_warning(warnings[-1])

    page_w = mm_to_px(template.width_mm)
    page_h = mm_to_px(template.height_mm)
    document = Document(
        children=tuple(children),
        view_box=(0, 0, page_w, page_h),
        width=page_w,
        height=page_h,
        markers=source.markers,
        styles=(PAGE_STYLE % {"font_family": FONT_FAMILY},) + source.styles,
        aria_label=info.title,
    )

    logger.debug("Composed plan on %s: scale=%.4f, slot=%s", template.id, fit.scale, slots["content"])

    return ComposedDocument(
        template_id=template.id,
        template_label=template.label,
        page_mm=(template.width_mm, template.height_mm),
        page_px=(page_w, page_h),
        slots=slots,
        fit=replace(fit, warnings=tuple(warnings)),
        document=document,
        orientation=template.orientation,
    )

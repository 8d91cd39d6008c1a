"""
Drawing generator constants.

Drawing units, page conversion, styling, and the annotation placement policy
for foundation plans.
"""

from dataclasses import dataclass

# =============================================================================
# UNITS
# =============================================================================

# Structural inputs are centimeters; all layout math happens in drawing units.
SCALE = 10  # 1 cm = 10 drawing units

# Page templates are in millimeters; composed pages use 96 DPI drawing units.
MM_TO_PX = 96 / 25.4


def cm(value: float) -> float:
    """Convert centimeters to drawing units."""
    return value * SCALE


def mm_to_px(value: float) -> float:
    """Convert page millimeters to page drawing units."""
    return value * MM_TO_PX


# =============================================================================
# DIMENSION STYLING
# =============================================================================

DEFAULT_DIM_FONT_SIZE = 13     # px - dimension label size
MIN_DIM_FONT_SIZE = 9          # px - labels never shrink below this
EXTENSION_LINE_OVERSHOOT = cm(0.8)  # past the dimension line
EXTENSION_LINE_GAP = cm(0.4)        # between object and extension line start
DIMENSION_TEXT_OFFSET = cm(2.8)     # dimension line to label anchor
DIMENSION_PADDING = cm(1.8)         # padding around each dimension's bounds

# Glyph metrics are unknown at layout time; label width is estimated as
# len(label) * font_size * TEXT_WIDTH_FACTOR.
TEXT_WIDTH_FACTOR = 0.56

ARROW_MARKER_ID = "dim-arrow"
ARROW_COLOR = "#0f172a"


# =============================================================================
# PAGE FITTING
# =============================================================================

TARGET_FILL_RATIO = 0.98       # leave breathing room inside the content slot
MIN_DOMINANT_COVERAGE = 2 / 3  # advisory threshold for "plan looks too small"
FALLBACK_VIEW_SIZE = 1000      # used when a document declares no view box
PDF_PAGE_MARGIN_MM = 6


# =============================================================================
# SVG STYLING
# =============================================================================

FONT_FAMILY = "'Segoe UI', Tahoma, sans-serif"

PLAN_STYLE = """
    .layer-body rect {
      fill: #f3f4f6;
      stroke: #111827;
      stroke-width: 2.4;
      vector-effect: non-scaling-stroke;
    }
    .layer-foundation rect {
      fill: #374151;
      stroke: #000000;
      stroke-width: 3.6;
      vector-effect: non-scaling-stroke;
      opacity: 0.96;
    }
    .layer-feet rect {
      fill: #f59e0b;
      stroke: #78350f;
      stroke-width: 2.8;
      vector-effect: non-scaling-stroke;
      opacity: 0.98;
    }
    .layer-guides line {
      stroke: #4b5563;
      stroke-width: 1.5;
      vector-effect: non-scaling-stroke;
    }
    .layer-dimensions line {
      stroke: #0f172a;
      stroke-width: 2;
      vector-effect: non-scaling-stroke;
    }
    .layer-text text {
      fill: #111827;
      font-family: %(font_family)s;
      font-size: %(font_size)spx;
      font-weight: 600;
    }
"""

PAGE_STYLE = """
    .slot-divider {
      stroke: #d1d5db;
      stroke-width: 1;
      vector-effect: non-scaling-stroke;
    }
    .title {
      font-family: %(font_family)s;
      font-size: 18px;
      font-weight: 600;
      fill: #111827;
    }
    .subtitle, .legend-text {
      font-family: %(font_family)s;
      font-size: 12px;
      fill: #374151;
    }
"""


# =============================================================================
# ANNOTATION PLACEMENT POLICY
# =============================================================================

@dataclass(frozen=True)
class AnnotationPolicy:
    """
    Where each family of dimensions is drawn, in centimeters.

    Offsets are measured from the outermost geometry edge on their side
    (leftmost, rightmost or bottom), so no dimension crosses a shape.
    Within each side the offsets grow from the nearest dimension to the
    outermost (grand total) one.

    Attributes:
        detail_offset: Per-foot margin and thickness dimensions (left)
        foundation_offset: Per-foot foundation width dimension (left)
        detail_text_gap: Label column distance beyond the outermost left line
        foundation_text_gap: Extra distance of the foundation label column
        gap_offset: Inter-foot gap dimensions (right)
        foot_span_offset: Overall foot span dimension (right)
        body_length_offset: Main body length dimension (right, outermost)
        foot_width_offset: Foot width dimension (below)
        body_width_offset: Main body width dimension (below, outermost)
        body_width_text_offset: Label offset of the body width dimension
        rotate_detail_labels: Rotate the left labels instead of aligning them
            in horizontal columns
    """

    detail_offset: float = 30
    foundation_offset: float = 44
    detail_text_gap: float = 6
    foundation_text_gap: float = 7
    gap_offset: float = 22
    foot_span_offset: float = 36
    body_length_offset: float = 50
    foot_width_offset: float = 20
    body_width_offset: float = 42
    body_width_text_offset: float = 6
    rotate_detail_labels: bool = False


DEFAULT_POLICY = AnnotationPolicy()

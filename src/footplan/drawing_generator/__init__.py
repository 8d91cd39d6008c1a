"""
Drawing Generator Module

Generates dimensioned foundation plans for a barrel body standing on a row
of feet, fits them onto template pages and exports them as SVG or PDF.

Features:
- Plan view with body, foundation strips and feet
- Automatic dimensions (per-foot margins, gaps, spans, overall sizes)
- A4 portrait / landscape page templates with title and legend
- PDF and SVG export

Usage:
    from footplan.drawing_generator import compose_plan_document, export_plan, generate_plan

    plan = generate_plan(config, title="Barrel sauna 220")
    page = compose_plan_document("A4_PORTRAIT_STANDARD", plan, model_name="Barrel sauna 220")
    export_plan(page, "pdf", "out", "barrel_sauna_220")
"""

from .constants import DEFAULT_POLICY, MM_TO_PX, SCALE, AnnotationPolicy
from .dimensions import DimensionResult, DimensionSpec, DimensionStyle, draw_dimension, format_cm
from .export import SVGLIB_AVAILABLE, export_plan, render_pdf, render_svg, sanitize_file_name
from .layout_engine import ComposedDocument, FitResult, compose_plan_document, compute_fit, normalize_bounds
from .plan import PlanDrawing, generate_plan, geometry_only
from .scene import Circle, Document, Group, Line, Rect, Rotation, Text
from .svg_writer import to_svg
from .templates import PageTemplate, get_default_template, get_template, list_templates, load_templates
from .title_block import TitleBlock, TitleBlockInfo
from .view_area import BoundingBox, ViewArea

__all__ = [
    # Main entry points
    'generate_plan',
    'geometry_only',
    'compose_plan_document',
    'export_plan',
    'render_svg',
    'render_pdf',
    'to_svg',
    # Results
    'PlanDrawing',
    'ComposedDocument',
    'FitResult',
    # Dimensions
    'DimensionSpec',
    'DimensionStyle',
    'DimensionResult',
    'draw_dimension',
    'format_cm',
    # Layout helpers
    'compute_fit',
    'normalize_bounds',
    'BoundingBox',
    'ViewArea',
    'TitleBlock',
    'TitleBlockInfo',
    # Templates
    'PageTemplate',
    'list_templates',
    'get_template',
    'get_default_template',
    'load_templates',
    # Scene graph
    'Document',
    'Group',
    'Rect',
    'Line',
    'Text',
    'Circle',
    'Rotation',
    # Constants
    'SCALE',
    'MM_TO_PX',
    'AnnotationPolicy',
    'DEFAULT_POLICY',
    'SVGLIB_AVAILABLE',
    'sanitize_file_name',
]

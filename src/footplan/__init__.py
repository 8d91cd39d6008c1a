"""
footplan - dimensioned foundation plans for a barrel body on a row of feet.

Usage:
    from footplan import StructuralConfig
    from footplan.drawing_generator import compose_plan_document, export_plan, generate_plan

    config = StructuralConfig(
        main_body_length=220, main_body_width=210,
        foot_width=200, foot_thickness=8,
        foundation_width=40, foundation_depth=80,
        foot_gaps=(79, 100, 79),
    )
    plan = generate_plan(config)
    page = compose_plan_document("A4_PORTRAIT_STANDARD", plan)
    export_plan(page, "svg", "out", "sauna")
"""

from .records import PlanRecord, create_empty_record, sanitize_record, validate_record
from .store import ConfigStore
from .structure import PlanMetrics, StructuralConfig, compute_metrics, sanitize_config

__version__ = "0.1.0"

__all__ = [
    'StructuralConfig',
    'PlanMetrics',
    'compute_metrics',
    'sanitize_config',
    'PlanRecord',
    'create_empty_record',
    'sanitize_record',
    'validate_record',
    'ConfigStore',
]

"""
Structural parameters of a barrel body standing on a row of feet.

All values are centimeters. The feet repeat along one axis; ``foot_gaps``
holds the clear (edge-to-edge) distance between neighboring feet, so a
configuration with N gaps has N + 1 feet.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping

import yaml

logger = logging.getLogger(__name__)

SCALAR_FIELDS = (
    "main_body_length",
    "main_body_width",
    "foot_width",
    "foot_thickness",
    "foundation_width",
    "foundation_depth",
)

# Accepted spellings for each field when reading raw records
FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "main_body_length": ("main_body_length", "mainBodyLength", "barrelLength", "barrel_length"),
    "main_body_width": ("main_body_width", "mainBodyWidth", "barrelWidth", "barrel_width"),
    "foot_width": ("foot_width", "footWidth"),
    "foot_thickness": ("foot_thickness", "footThickness"),
    "foundation_width": ("foundation_width", "foundationWidth"),
    "foundation_depth": ("foundation_depth", "foundationDepth"),
    "foot_gaps": ("foot_gaps", "footGaps", "footDistances", "foot_distances"),
}


def to_number(value: Any) -> float:
    """Convert a raw value to float; anything unparseable becomes NaN."""
    if isinstance(value, bool):
        return math.nan
    try:
        return float(value)
    except (TypeError, ValueError):
        return math.nan


def clean_length(value: Any) -> float:
    """A usable length: finite and non-negative, otherwise 0."""
    number = to_number(value)
    if not math.isfinite(number) or number < 0:
        return 0.0
    return number


@dataclass(frozen=True)
class StructuralConfig:
    """
    Input parameters for one foundation plan.

    Attributes:
        main_body_length: Body extent along the row of feet
        main_body_width: Body extent across the row of feet
        foot_width: Foot extent across the row
        foot_thickness: Foot extent along the row
        foundation_width: Foundation strip extent along the row
        foundation_depth: Frost depth of the foundation (not drawn in plan)
        foot_gaps: Clear gaps between adjacent feet, in row order
    """
    main_body_length: float = 0.0
    main_body_width: float = 0.0
    foot_width: float = 0.0
    foot_thickness: float = 0.0
    foundation_width: float = 0.0
    foundation_depth: float = 0.0
    foot_gaps: tuple[float, ...] = ()

    def __post_init__(self):
        # Lists from YAML/JSON become tuples so the record stays hashable
        if not isinstance(self.foot_gaps, tuple):
            gaps = self.foot_gaps if self.foot_gaps is not None else ()
            object.__setattr__(self, "foot_gaps", tuple(gaps))

    @property
    def foot_count(self) -> int:
        return len(self.foot_gaps) + 1

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "StructuralConfig":
        """
        Build a config from a raw mapping.

        Unknown keys are ignored, missing keys default to 0 and values are
        converted to float (unparseable values become NaN and are cleaned up
        later by :func:`sanitize_config`).
        """
        data = data if isinstance(data, Mapping) else {}
        values: dict[str, Any] = {}
        for name, aliases in FIELD_ALIASES.items():
            raw = next((data[key] for key in aliases if key in data), None)
            if name == "foot_gaps":
                items = raw if isinstance(raw, (list, tuple)) else []
                values[name] = tuple(to_number(item) for item in items)
            else:
                values[name] = to_number(raw) if raw is not None else 0.0
        return cls(**values)

    def to_dict(self) -> dict[str, Any]:
        """Plain dictionary suitable for YAML or JSON serialization."""
        result: dict[str, Any] = {f.name: getattr(self, f.name) for f in fields(self)}
        result["foot_gaps"] = list(self.foot_gaps)
        return result

    @classmethod
    def from_yaml(cls, yaml_path: str | Path) -> "StructuralConfig":
        """Load a config from a YAML file (optionally nested under ``config``)."""
        with open(yaml_path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if isinstance(data, Mapping) and isinstance(data.get("config"), Mapping):
            data = data["config"]
        return cls.from_dict(data)

    def to_yaml(self, yaml_path: str | Path) -> None:
        """Save the config to a YAML file."""
        with open(yaml_path, "w", encoding="utf-8") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)


def sanitize_config(config: StructuralConfig) -> tuple[StructuralConfig, list[str]]:
    """
    Replace negative or non-finite values by 0.

    Returns:
        (clean config, warnings) - one warning per cleaned scalar field and
        one for the gap list if any gap had to be replaced
    """
    warnings: list[str] = []
    values: dict[str, Any] = {}

    for name in SCALAR_FIELDS:
        raw = getattr(config, name)
        clean = clean_length(raw)
        if clean != raw:
            warnings.append(f"Warning: {name} has an invalid value ({raw!r}); it was set to 0.")
        values[name] = clean

    gaps = tuple(clean_length(gap) for gap in config.foot_gaps)
    if any(clean != raw for clean, raw in zip(gaps, config.foot_gaps)):
        warnings.append("Warning: foot_gaps contains invalid values. They were set to 0.")
    values["foot_gaps"] = gaps

    for message in warnings:
        logger.warning(message)

    return StructuralConfig(**values), warnings


# =============================================================================
# PLACEMENT
# =============================================================================

@dataclass(frozen=True)
class FootPlacement:
    """
    Position of one foot along the row.

    ``center_offset`` is measured from the first foot's leading edge.
    """
    index: int
    center_offset: float
    thickness: float

    @property
    def start(self) -> float:
        return self.center_offset - self.thickness / 2

    @property
    def end(self) -> float:
        return self.center_offset + self.thickness / 2


@dataclass(frozen=True)
class FoundationPlacement:
    """Foundation strip under a foot, centered on the same row coordinate."""
    index: int
    center_offset: float
    width: float

    @property
    def start(self) -> float:
        return self.center_offset - self.width / 2

    @property
    def end(self) -> float:
        return self.center_offset + self.width / 2


@dataclass(frozen=True)
class PlanMetrics:
    """Derived row measurements in centimeters."""
    foot_count: int
    total_foot_span: float
    first_to_last: float


def compute_foot_centers(config: StructuralConfig) -> list[float]:
    """
    Foot centers along the row, relative to the first foot's leading edge.

    ``center[0] = t / 2`` and ``center[i] = center[i - 1] + t + gap[i - 1]``.
    """
    thickness = clean_length(config.foot_thickness)
    centers = [thickness / 2]
    for gap in config.foot_gaps:
        centers.append(centers[-1] + thickness + clean_length(gap))
    return centers


def compute_foot_placements(config: StructuralConfig) -> list[FootPlacement]:
    thickness = clean_length(config.foot_thickness)
    return [
        FootPlacement(index=i, center_offset=center, thickness=thickness)
        for i, center in enumerate(compute_foot_centers(config))
    ]


def compute_foundation_placements(config: StructuralConfig) -> list[FoundationPlacement]:
    width = clean_length(config.foundation_width)
    return [
        FoundationPlacement(index=i, center_offset=center, width=width)
        for i, center in enumerate(compute_foot_centers(config))
    ]


def compute_metrics(config: StructuralConfig) -> PlanMetrics:
    """
    Foot count and spans, summed directly from the inputs.

    The spans are never derived from rendered coordinates.
    """
    thickness = clean_length(config.foot_thickness)
    foot_count = len(config.foot_gaps) + 1
    inner_sum = sum(clean_length(gap) for gap in config.foot_gaps)
    total_foot_span = inner_sum + foot_count * thickness
    first_to_last = max(0.0, total_foot_span - thickness)
    return PlanMetrics(
        foot_count=foot_count,
        total_foot_span=total_foot_span,
        first_to_last=first_to_last,
    )

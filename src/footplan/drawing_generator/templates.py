"""
Page templates for composed plan documents.

A template fixes the page size, the outer margins and the heights of the
header and legend bands; the content band takes whatever is left.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Mapping

import yaml

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PageMargins:
    """Outer page margins in millimeters."""
    top_mm: float = 2
    right_mm: float = 2
    bottom_mm: float = 2
    left_mm: float = 2


@dataclass(frozen=True)
class PageRegions:
    """Band heights in millimeters."""
    header_mm: float = 22
    legend_mm: float = 30
    footer_mm: float = 0
    gap_mm: float = 4


@dataclass(frozen=True)
class PageTemplate:
    """
    A page layout.

    Attributes:
        id: Stable identifier stored with plan records
        label: Human-readable name shown in the page subtitle
        width_mm, height_mm: Sheet size
        orientation: "portrait" or "landscape"
        margins: Outer margins
        regions: Header/legend band heights
    """
    id: str
    label: str
    width_mm: float
    height_mm: float
    orientation: str = "portrait"
    margins: PageMargins = field(default_factory=PageMargins)
    regions: PageRegions = field(default_factory=PageRegions)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PageTemplate":
        page = data.get("page", {}) or {}
        width = float(page.get("width_mm", data.get("width_mm", 210)))
        height = float(page.get("height_mm", data.get("height_mm", 297)))
        orientation = page.get("orientation", data.get("orientation"))
        if orientation not in ("portrait", "landscape"):
            orientation = "landscape" if width > height else "portrait"
        return cls(
            id=str(data["id"]),
            label=str(data.get("label") or data["id"]),
            width_mm=width,
            height_mm=height,
            orientation=orientation,
            margins=PageMargins(**(data.get("margins") or {})),
            regions=PageRegions(**(data.get("regions") or {})),
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


A4_PORTRAIT_STANDARD = PageTemplate(
    id="A4_PORTRAIT_STANDARD",
    label="A4 Portrait Standard",
    width_mm=210,
    height_mm=297,
    orientation="portrait",
    margins=PageMargins(2, 2, 2, 2),
    regions=PageRegions(header_mm=22, legend_mm=30, footer_mm=0, gap_mm=4),
)

A4_LANDSCAPE_STANDARD = PageTemplate(
    id="A4_LANDSCAPE_STANDARD",
    label="A4 Landscape Standard",
    width_mm=297,
    height_mm=210,
    orientation="landscape",
    margins=PageMargins(2, 2, 2, 2),
    regions=PageRegions(header_mm=20, legend_mm=24, footer_mm=0, gap_mm=4),
)


class TemplateRegistry:
    """
    Catalog of page templates.

    The first registered template is the default. Lookups of unknown ids
    return the default instead of raising.
    """

    def __init__(self, templates: list[PageTemplate] | None = None):
        self._templates: dict[str, PageTemplate] = {}
        for template in templates if templates is not None else [A4_PORTRAIT_STANDARD, A4_LANDSCAPE_STANDARD]:
            self.register(template)

    def register(self, template: PageTemplate) -> None:
        if template.id in self._templates:
            logger.info("Replacing page template %s", template.id)
        self._templates[template.id] = template

    def list(self) -> list[PageTemplate]:
        return list(self._templates.values())

    def default(self) -> PageTemplate:
        return next(iter(self._templates.values()))

    def get(self, template_id: str | None) -> PageTemplate:
        template = self._templates.get(template_id or "")
        if template is None:
            if template_id:
                logger.warning("Unknown page template %r, using %s", template_id, self.default().id)
            return self.default()
        return template


_registry = TemplateRegistry()


def list_templates() -> list[PageTemplate]:
    """All known templates, default first."""
    return _registry.list()


def get_default_template() -> PageTemplate:
    return _registry.default()


def get_template(template_id: str | None) -> PageTemplate:
    """Template by id; unknown or empty ids give the default template."""
    return _registry.get(template_id)


def load_templates(yaml_path: str | Path, registry: TemplateRegistry | None = None) -> list[PageTemplate]:
    """
    Read additional templates from a YAML file and register them.

    The file holds a list of templates, either at the top level or under a
    ``templates`` key::

        templates:
          - id: A3_LANDSCAPE
            label: A3 Landscape
            page: {width_mm: 420, height_mm: 297}
            regions: {header_mm: 24, legend_mm: 30}

    Returns:
        The templates read from the file
    """
    with open(yaml_path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or []
    if isinstance(data, Mapping):
        data = data.get("templates", [])
    if not isinstance(data, list):
        raise ValueError(f"Template file {yaml_path} must contain a list of templates")

    target = registry if registry is not None else _registry
    loaded = [PageTemplate.from_dict(item) for item in data]
    for template in loaded:
        target.register(template)
    logger.debug("Loaded %d page template(s) from %s", len(loaded), yaml_path)
    return loaded

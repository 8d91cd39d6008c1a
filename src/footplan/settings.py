"""
Application settings.

Settings come from an optional YAML file; ``FOOTPLAN_STORE`` and
``FOOTPLAN_OUTPUT_DIR`` in the environment take precedence over the file.
"""

from __future__ import annotations

import logging
import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

STORE_ENV = "FOOTPLAN_STORE"
OUTPUT_DIR_ENV = "FOOTPLAN_OUTPUT_DIR"


@dataclass
class Settings:
    """
    Defaults used by the command line interface.

    Attributes:
        store_path: YAML file of the record store
        output_dir: Directory exported files are written to
        template_id: Page template used when none is given
        export_format: "pdf" or "svg"
        dim_font_size: Dimension label size in px
        templates_file: Optional YAML file with additional page templates
    """
    store_path: str = "footplan_store.yaml"
    output_dir: str = "."
    template_id: str = "A4_PORTRAIT_STANDARD"
    export_format: str = "pdf"
    dim_font_size: float = 13
    templates_file: str | None = None

    def __post_init__(self):
        if self.export_format not in ("pdf", "svg"):
            logger.warning("Unknown export format %r in settings, using pdf", self.export_format)
            self.export_format = "pdf"

    @classmethod
    def from_yaml(cls, yaml_path: str | Path | None = None) -> "Settings":
        """Load settings from YAML (if given) and apply environment overrides."""
        data: dict[str, Any] = {}
        if yaml_path is not None:
            with open(yaml_path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
            known = {f.name for f in fields(cls)}
            unknown = set(data) - known
            if unknown:
                logger.warning("Ignoring unknown settings: %s", ", ".join(sorted(unknown)))
            data = {key: value for key, value in data.items() if key in known}

        if os.environ.get(STORE_ENV):
            data["store_path"] = os.environ[STORE_ENV]
        if os.environ.get(OUTPUT_DIR_ENV):
            data["output_dir"] = os.environ[OUTPUT_DIR_ENV]
        return cls(**data)

    def to_yaml(self, yaml_path: str | Path) -> None:
        """Save the settings to a YAML file."""
        with open(yaml_path, "w", encoding="utf-8") as f:
            yaml.dump(asdict(self), f, default_flow_style=False, sort_keys=False)

"""
Stored plan records.

A record bundles one structural configuration with its name, revision
history markers, attached reference images and per-record export settings.
Records coming from files are always passed through :func:`sanitize_record`
so downstream code can rely on well-formed values.
"""

from __future__ import annotations

import logging
import math
import re
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Mapping

from .structure import FIELD_ALIASES, SCALAR_FIELDS, StructuralConfig, to_number

logger = logging.getLogger(__name__)

IMAGE_MAX_BYTES = 5 * 1024 * 1024
ALLOWED_IMAGE_MIME_TYPES = ("image/png", "image/jpeg", "image/webp")
EXPORT_FORMATS = ("pdf", "svg")
DEFAULT_TEMPLATE_ID = "A4_PORTRAIT_STANDARD"
DEFAULT_RECORD_NAME = "New model"
UNNAMED = "Unnamed"

_DATA_URL_MIME = re.compile(r"^data:(image/[a-zA-Z0-9.+-]+);base64,")


# =============================================================================
# HELPERS
# =============================================================================

def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def sanitize_iso_date(value: Any) -> str:
    """ISO timestamp normalized to UTC, or "" if the value is not a date."""
    if not isinstance(value, str) or not value.strip():
        return ""
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return ""
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def sanitize_number(value: Any) -> float:
    """Non-negative finite number rounded to 2 decimals, otherwise 0."""
    number = to_number(value)
    if not math.isfinite(number) or number < 0:
        return 0.0
    return round(number, 2)


def _clean_text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _pick(source: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in source:
            return source[key]
    return None


def new_record_id() -> str:
    return f"plan-{uuid.uuid4().hex[:12]}"


def new_image_id() -> str:
    return f"img-{uuid.uuid4().hex[:12]}"


def extract_image_mime_type(data_url: str) -> str:
    match = _DATA_URL_MIME.match(data_url or "")
    return match.group(1).lower() if match else ""


def estimate_data_url_bytes(data_url: str) -> int:
    """Decoded payload size of a base64 data URL, without decoding it."""
    _, sep, payload = (data_url or "").partition(",")
    if not sep:
        return 0
    padding = len(payload) - len(payload.rstrip("="))
    return max(0, (len(payload) * 3) // 4 - padding)


# =============================================================================
# DATA CLASSES
# =============================================================================

@dataclass(frozen=True)
class ImageAttachment:
    """Reference picture attached to a record, kept as a data URL."""
    id: str
    data_url: str
    mime_type: str
    bytes: int
    created_at: str
    label: str | None = None

    @classmethod
    def from_data_url(cls, data_url: str, label: str | None = None) -> "ImageAttachment | None":
        data_url = (data_url or "").strip()
        mime_type = extract_image_mime_type(data_url)
        if not mime_type:
            return None
        return cls(
            id=new_image_id(),
            data_url=data_url,
            mime_type=mime_type,
            bytes=estimate_data_url_bytes(data_url),
            created_at=utc_now(),
            label=label,
        )

    def to_dict(self) -> dict[str, Any]:
        data = {
            "id": self.id,
            "data_url": self.data_url,
            "mime_type": self.mime_type,
            "bytes": self.bytes,
            "created_at": self.created_at,
        }
        if self.label:
            data["label"] = self.label
        return data


@dataclass(frozen=True)
class ExportSettings:
    """Per-record export preferences."""
    template_id: str = DEFAULT_TEMPLATE_ID
    format: str = "pdf"
    dim_font_size: float | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"template_id": self.template_id, "format": self.format}
        if self.dim_font_size is not None:
            data["dim_font_size"] = self.dim_font_size
        return data


@dataclass(frozen=True)
class PlanRecord:
    """
    One stored model.

    Attributes:
        id: Unique record id
        name: Display name
        revision: Increases by one with every saved change (>= 1)
        created_at, updated_at: ISO 8601 UTC timestamps
        config: Structural parameters of the model
        images: Reference pictures
        export_settings: Template and format used when exporting
    """
    id: str
    name: str
    revision: int
    created_at: str
    updated_at: str
    config: StructuralConfig
    images: tuple[ImageAttachment, ...] = ()
    export_settings: ExportSettings = field(default_factory=ExportSettings)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "revision": self.revision,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "config": self.config.to_dict(),
            "images": [image.to_dict() for image in self.images],
            "export_settings": self.export_settings.to_dict(),
        }


# =============================================================================
# OPERATIONS
# =============================================================================

def create_empty_record() -> PlanRecord:
    """A new record with the default barrel sauna configuration."""
    now = utc_now()
    return PlanRecord(
        id=new_record_id(),
        name=DEFAULT_RECORD_NAME,
        revision=1,
        created_at=now,
        updated_at=now,
        config=StructuralConfig(
            main_body_length=220,
            main_body_width=210,
            foot_width=200,
            foot_thickness=8,
            foundation_width=40,
            foundation_depth=80,
            foot_gaps=(79, 100, 79),
        ),
    )


def _sanitize_config(raw: Any) -> StructuralConfig:
    source = raw if isinstance(raw, Mapping) else {}
    values: dict[str, Any] = {}
    for name in SCALAR_FIELDS:
        values[name] = sanitize_number(_pick(source, *FIELD_ALIASES[name]))
    gaps = _pick(source, *FIELD_ALIASES["foot_gaps"])
    values["foot_gaps"] = tuple(sanitize_number(g) for g in gaps) if isinstance(gaps, (list, tuple)) else ()
    return StructuralConfig(**values)


def _sanitize_image(raw: Any) -> ImageAttachment | None:
    source = raw if isinstance(raw, Mapping) else {}
    data_url = _clean_text(_pick(source, "data_url", "dataUrl"))
    mime_type = extract_image_mime_type(data_url)
    if not mime_type:
        return None

    size = to_number(source.get("bytes"))
    return ImageAttachment(
        id=_clean_text(source.get("id")) or new_image_id(),
        data_url=data_url,
        mime_type=mime_type,
        bytes=int(max(0, size)) if math.isfinite(size) else estimate_data_url_bytes(data_url),
        created_at=sanitize_iso_date(_pick(source, "created_at", "createdAt")) or utc_now(),
        label=_clean_text(source.get("label")) or None,
    )


def _sanitize_images(source: Mapping[str, Any]) -> tuple[ImageAttachment, ...]:
    images = []
    raw_images = source.get("images")
    if isinstance(raw_images, (list, tuple)):
        images = [image for image in map(_sanitize_image, raw_images) if image is not None]

    # Older records carried a single picture in imageDataUrl
    legacy = _pick(source, "image_data_url", "imageDataUrl")
    if not images and isinstance(legacy, str) and legacy.startswith("data:image/"):
        image = ImageAttachment.from_data_url(legacy)
        if image is not None:
            logger.debug("Migrated legacy image to images list")
            images.append(image)

    return tuple(images)


def _sanitize_export_settings(raw: Any) -> ExportSettings:
    source = raw if isinstance(raw, Mapping) else {}
    template_id = _clean_text(_pick(source, "template_id", "templateId")) or DEFAULT_TEMPLATE_ID
    fmt = source.get("format")
    font_size = to_number(_pick(source, "dim_font_size", "dimFontSize"))
    return ExportSettings(
        template_id=template_id,
        format="svg" if fmt == "svg" else "pdf",
        dim_font_size=font_size if math.isfinite(font_size) and font_size > 0 else None,
    )


def _sanitize_revision(value: Any) -> int:
    number = to_number(value)
    if not math.isfinite(number) or number < 1:
        return 1
    return int(math.floor(number))


def sanitize_record(raw: Any) -> PlanRecord:
    """
    Build a well-formed record from arbitrary input.

    Never raises: missing ids are generated, blank names become "Unnamed",
    timestamps are normalized to UTC, numbers are cleaned and rounded to
    two decimals, and a legacy ``imageDataUrl`` is migrated to ``images``.
    """
    if isinstance(raw, PlanRecord):
        raw = raw.to_dict()
    source = raw if isinstance(raw, Mapping) else {}
    now = utc_now()

    export_settings = _pick(source, "export_settings", "exportSettings")
    return PlanRecord(
        id=_clean_text(source.get("id")) or new_record_id(),
        name=_clean_text(source.get("name")) or UNNAMED,
        revision=_sanitize_revision(source.get("revision")),
        created_at=sanitize_iso_date(_pick(source, "created_at", "createdAt")) or now,
        updated_at=sanitize_iso_date(_pick(source, "updated_at", "updatedAt")) or now,
        config=_sanitize_config(source.get("config")),
        images=_sanitize_images(source),
        export_settings=_sanitize_export_settings(export_settings),
    )


def next_revision(record: PlanRecord | Mapping[str, Any]) -> PlanRecord:
    """Sanitized copy with the revision bumped and ``updated_at`` set to now."""
    clean = sanitize_record(record)
    return replace(clean, revision=clean.revision + 1, updated_at=utc_now())


def validate_record(record: PlanRecord) -> list[str]:
    """
    Plausibility checks that do not block saving or rendering.

    Returns:
        Human-readable warnings, empty if everything looks fine
    """
    warnings = []
    config = record.config

    if config.main_body_length <= 0 or config.main_body_width <= 0:
        warnings.append("Main body dimensions should be greater than 0 cm.")
    if config.foot_width <= 0 or config.foot_thickness <= 0:
        warnings.append("Foot dimensions should be greater than 0 cm.")
    if config.foundation_width <= 0 or config.foundation_depth <= 0:
        warnings.append("Foundation width and frost depth should be greater than 0 cm.")
    if not config.foot_gaps:
        warnings.append("No foot gap is defined, so only a single foot is assumed.")
    if any(gap < 0 for gap in config.foot_gaps):
        warnings.append("Gaps between feet must not be negative.")

    for image in record.images:
        if not image.data_url.startswith("data:image/"):
            warnings.append("An image has no valid data URL.")
            continue
        if image.mime_type not in ALLOWED_IMAGE_MIME_TYPES:
            warnings.append("Invalid image format. Allowed are PNG, JPEG or WebP.")
        if image.bytes > IMAGE_MAX_BYTES:
            warnings.append("An image is larger than 5 MB.")

    if record.export_settings.format not in EXPORT_FORMATS:
        warnings.append("Invalid export format. Falling back to PDF.")

    for message in warnings:
        logger.info("Record %s: %s", record.id, message)
    return warnings

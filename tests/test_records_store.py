#!/usr/bin/env python3
"""
Tests for plan records and the YAML record store.

Tests cover:
- Record sanitization (legacy keys, rounding, timestamps, images)
- Plausibility warnings
- Revision bumps
- Store CRUD, persistence and JSON import/export
"""

import json
from dataclasses import replace

import pytest

from footplan.records import (
    ExportSettings,
    ImageAttachment,
    PlanRecord,
    create_empty_record,
    estimate_data_url_bytes,
    next_revision,
    sanitize_iso_date,
    sanitize_record,
    validate_record,
)
from footplan.store import ConfigStore
from footplan.structure import StructuralConfig


PNG_URL = "data:image/png;base64,iVBORw0KGgo="

LEGACY_RECORD = {
    "id": "sauna-1",
    "name": "  Barrel sauna 220  ",
    "revision": 3,
    "createdAt": "2024-05-01T10:00:00+02:00",
    "updatedAt": "2024-05-02T08:30:00Z",
    "config": {
        "barrelLength": 220,
        "barrelWidth": 210,
        "footWidth": 200,
        "footThickness": 8,
        "foundationWidth": 40,
        "foundationDepth": 80,
        "footDistances": [79, 100, 79],
    },
    "imageDataUrl": PNG_URL,
    "exportSettings": {"templateId": "A4_LANDSCAPE_STANDARD", "format": "svg"},
}


# =============================================================================
# SANITIZATION TESTS
# =============================================================================


class TestSanitizeRecord:
    """Test building well-formed records from raw input."""

    def test_empty_record(self):
        """A new record should carry the default sauna configuration."""
        record = create_empty_record()
        assert record.id.startswith("plan-")
        assert record.name == "New model"
        assert record.revision == 1
        assert record.config.foot_count == 4
        assert record.created_at == record.updated_at
        assert record.created_at.endswith("Z")

    def test_legacy_record(self):
        """camelCase keys and the legacy image field should be migrated."""
        record = sanitize_record(LEGACY_RECORD)
        assert record.id == "sauna-1"
        assert record.name == "Barrel sauna 220"
        assert record.revision == 3
        assert record.created_at == "2024-05-01T08:00:00.000Z"
        assert record.updated_at == "2024-05-02T08:30:00.000Z"
        assert record.config == StructuralConfig(220, 210, 200, 8, 40, 80, (79, 100, 79))
        assert record.export_settings == ExportSettings("A4_LANDSCAPE_STANDARD", "svg")

        (image,) = record.images
        assert image.mime_type == "image/png"
        assert image.bytes == 8
        assert image.id.startswith("img-")

    def test_garbage_input(self):
        """Non-mapping input should give a usable record."""
        record = sanitize_record("nonsense")
        assert record.name == "Unnamed"
        assert record.revision == 1
        assert record.config == StructuralConfig()
        assert record.export_settings.format == "pdf"

    def test_numbers_cleaned_and_rounded(self):
        """Numbers should be rounded to 2 decimals and invalid ones set to 0."""
        record = sanitize_record({"config": {"foot_width": 12.3456, "foot_thickness": -3, "foot_gaps": [1.005, "x"]}})
        assert record.config.foot_width == 12.35
        assert record.config.foot_thickness == 0
        assert record.config.foot_gaps[1] == 0

    @pytest.mark.parametrize("revision,expected", [(0, 1), (-4, 1), ("x", 1), (2.7, 2), (5, 5)])
    def test_revision(self, revision, expected):
        assert sanitize_record({"revision": revision}).revision == expected

    @pytest.mark.parametrize("fmt,expected", [("svg", "svg"), ("pdf", "pdf"), ("png", "pdf"), (None, "pdf")])
    def test_export_format(self, fmt, expected):
        """Only svg is kept as is; everything else becomes pdf."""
        record = sanitize_record({"export_settings": {"format": fmt}})
        assert record.export_settings.format == expected

    def test_images_list_preferred_over_legacy(self):
        """A legacy image is only migrated when there is no image list."""
        record = sanitize_record({
            "images": [{"id": "a", "data_url": "data:image/jpeg;base64,/9j/", "bytes": 3}, {"data_url": "nope"}],
            "imageDataUrl": PNG_URL,
        })
        assert [image.id for image in record.images] == ["a"]
        assert record.images[0].mime_type == "image/jpeg"

    def test_idempotent(self):
        """Sanitizing a sanitized record should change nothing."""
        record = sanitize_record(LEGACY_RECORD)
        assert sanitize_record(record) == record

    @pytest.mark.parametrize("value", ["", "yesterday", None, 42])
    def test_invalid_dates(self, value):
        assert sanitize_iso_date(value) == ""

    def test_data_url_size(self):
        assert estimate_data_url_bytes(PNG_URL) == 8
        assert estimate_data_url_bytes("no comma") == 0


# =============================================================================
# VALIDATION TESTS
# =============================================================================


class TestValidateRecord:
    """Test non-blocking plausibility warnings."""

    def test_default_record_is_valid(self):
        assert validate_record(create_empty_record()) == []

    def test_zero_dimensions(self):
        """All-zero dimensions should warn about every group."""
        record = replace(create_empty_record(), config=StructuralConfig())
        warnings = validate_record(record)
        assert "Main body dimensions should be greater than 0 cm." in warnings
        assert "Foot dimensions should be greater than 0 cm." in warnings
        assert "Foundation width and frost depth should be greater than 0 cm." in warnings
        assert "No foot gap is defined, so only a single foot is assumed." in warnings

    def test_negative_gap(self):
        """Negative gaps can only come from unsanitized records."""
        record = replace(create_empty_record(), config=StructuralConfig(220, 210, 200, 8, 40, 80, (79, -1)))
        assert "Gaps between feet must not be negative." in validate_record(record)

    def test_image_checks(self):
        """Image type and size should be checked."""
        gif = ImageAttachment("a", "data:image/gif;base64,R0lG", "image/gif", 3, "2024-01-01T00:00:00.000Z")
        huge = ImageAttachment("b", PNG_URL, "image/png", 6 * 1024 * 1024, "2024-01-01T00:00:00.000Z")
        broken = ImageAttachment("c", "http://example.com/a.png", "image/png", 10, "2024-01-01T00:00:00.000Z")
        record = replace(create_empty_record(), images=(gif, huge, broken))
        warnings = validate_record(record)
        assert "Invalid image format. Allowed are PNG, JPEG or WebP." in warnings
        assert "An image is larger than 5 MB." in warnings
        assert "An image has no valid data URL." in warnings

    def test_invalid_export_format(self):
        record = replace(create_empty_record(), export_settings=ExportSettings(format="png"))
        assert validate_record(record) == ["Invalid export format. Falling back to PDF."]


class TestNextRevision:
    """Test revision bumps."""

    def test_bump(self):
        """The revision should grow by one and updated_at should move."""
        record = sanitize_record(LEGACY_RECORD)
        bumped = next_revision(record)
        assert bumped.revision == 4
        assert bumped.created_at == record.created_at
        assert bumped.updated_at != record.updated_at
        assert bumped.id == record.id


# =============================================================================
# STORE TESTS
# =============================================================================


class TestConfigStore:
    """Test the YAML record store."""

    def test_missing_file_is_empty(self, tmp_path):
        store = ConfigStore(tmp_path / "store.yaml")
        assert store.list() == []
        assert not (tmp_path / "store.yaml").exists()

    def test_put_get_delete(self, tmp_path):
        """Records should be inserted, replaced and removed by id."""
        store = ConfigStore(tmp_path / "store.yaml")
        record = store.put(create_empty_record())
        assert store.get(record.id) == record

        renamed = store.put(replace(record, name="Renamed"))
        assert [r.name for r in store.list()] == ["Renamed"]
        assert store.get(record.id) == renamed

        assert store.delete(record.id) is True
        assert store.delete(record.id) is False
        assert store.get(record.id) is None

    def test_persistence(self, tmp_path):
        """A second store on the same file should see the saved records."""
        path = tmp_path / "nested" / "store.yaml"
        record = ConfigStore(path).put(sanitize_record(LEGACY_RECORD))
        reopened = ConfigStore(path)
        assert reopened.list() == [record]

    def test_put_sanitizes(self, tmp_path):
        """Raw mappings should be sanitized when stored."""
        store = ConfigStore(tmp_path / "store.yaml")
        record = store.put({"name": "", "config": {"foot_width": -5}})
        assert isinstance(record, PlanRecord)
        assert record.name == "Unnamed"
        assert record.config.foot_width == 0

    def test_invalid_store_file(self, tmp_path):
        path = tmp_path / "store.yaml"
        path.write_text("records: 5\n")
        with pytest.raises(ValueError):
            ConfigStore(path)

    def test_json_export_import(self, tmp_path):
        """Exported JSON should import into another store unchanged."""
        source = ConfigStore(tmp_path / "a.yaml")
        source.put(sanitize_record(LEGACY_RECORD))
        source.put(create_empty_record())
        exported = source.export_json(tmp_path / "records.json")

        target = ConfigStore(tmp_path / "b.yaml")
        target.put(create_empty_record())
        imported = target.import_json(exported)
        assert imported == source.list()
        assert ConfigStore(tmp_path / "b.yaml").list() == source.list()

    def test_import_legacy_json(self, tmp_path):
        path = tmp_path / "legacy.json"
        path.write_text(json.dumps([LEGACY_RECORD]))
        store = ConfigStore(tmp_path / "store.yaml")
        (record,) = store.import_json(path)
        assert record.images[0].bytes == 8

    @pytest.mark.parametrize("content", ["{not json", '{"records": []}'])
    def test_import_errors(self, tmp_path, content):
        """Invalid JSON or a non-list payload should be rejected and keep the store."""
        path = tmp_path / "bad.json"
        path.write_text(content)
        store = ConfigStore(tmp_path / "store.yaml")
        existing = store.put(create_empty_record())
        with pytest.raises(ValueError):
            store.import_json(path)
        assert store.list() == [existing]

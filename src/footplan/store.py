"""
YAML-file backed store of plan records.

The store file looks like::

    records:
      - id: plan-3f2a9c1d0b7e
        name: Barrel sauna 220
        revision: 3
        config: {...}

Every record is sanitized on the way in and on the way out.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Mapping

import yaml

from .records import PlanRecord, sanitize_record

logger = logging.getLogger(__name__)


class ConfigStore:
    """
    Persistent collection of :class:`PlanRecord` objects.

    Args:
        path: YAML file holding the records; created on first write
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._records: list[PlanRecord] = self._load()

    def _load(self) -> list[PlanRecord]:
        if not self.path.exists():
            logger.debug("Store %s does not exist yet, starting empty", self.path)
            return []
        with open(self.path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        items = data.get("records", []) if isinstance(data, Mapping) else data
        if not isinstance(items, list):
            raise ValueError(f"Store file {self.path} must contain a list of records")
        return [sanitize_record(item) for item in items]

    def _save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            yaml.safe_dump(
                {"records": [record.to_dict() for record in self._records]},
                f,
                default_flow_style=False,
                sort_keys=False,
                allow_unicode=True,
            )

    def list(self) -> list[PlanRecord]:
        return [sanitize_record(record) for record in self._records]

    def get(self, record_id: str) -> PlanRecord | None:
        for record in self._records:
            if record.id == record_id:
                return sanitize_record(record)
        return None

    def put(self, record: PlanRecord | Mapping[str, Any]) -> PlanRecord:
        """Insert or replace a record (matched by id) and save the store."""
        clean = sanitize_record(record)
        for i, existing in enumerate(self._records):
            if existing.id == clean.id:
                self._records[i] = clean
                break
        else:
            self._records.append(clean)
        self._save()
        return clean

    def delete(self, record_id: str) -> bool:
        """Remove a record; returns False if no record had that id."""
        remaining = [record for record in self._records if record.id != record_id]
        if len(remaining) == len(self._records):
            return False
        self._records = remaining
        self._save()
        return True

    def import_json(self, path: str | Path) -> list[PlanRecord]:
        """
        Replace all records with the contents of a JSON file.

        Raises:
            ValueError: If the file is not JSON or does not hold a list
        """
        text = Path(path).read_text(encoding="utf-8")
        try:
            payload = json.loads(text)
        except json.JSONDecodeError as e:
            raise ValueError(f"{path} does not contain valid JSON") from e
        if not isinstance(payload, list):
            raise ValueError(f"{path} must contain a JSON array of plan records")

        self._records = [sanitize_record(item) for item in payload]
        self._save()
        logger.info("Imported %d record(s) from %s", len(self._records), path)
        return self.list()

    def export_json(self, path: str | Path) -> Path:
        """Write all records to a JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            json.dumps([record.to_dict() for record in self.list()], indent=2, ensure_ascii=False),
            encoding="utf-8",
        )
        logger.info("Exported %d record(s) to %s", len(self._records), path)
        return path

"""
Recorded game logs.

Two formats are supported:
  - YAML (.yaml/.yml): a mapping with a `records` list. Each record is
    either {player, parts: [text | {icon: token}]} or {html: "<div>..."}.
    The document is validated against schemas/log_record.schema.json.
  - HTML (.html/.htm): a saved chat log, one top-level element per entry.
"""

import json
import logging
from pathlib import Path
from typing import Optional

import jsonschema
import yaml

from .markup import record_from_html, records_from_chat_log
from .models import Icon, LogRecord

logger = logging.getLogger(__name__)

SCHEMA_DIR = Path(__file__).parent.parent / "schemas"


class LogSourceError(ValueError):
    """A recorded log could not be read or failed validation."""


def load_schema(schema_name: str) -> dict:
    """Load a JSON schema from the schemas directory."""
    schema_path = SCHEMA_DIR / f"{schema_name}.schema.json"
    if not schema_path.exists():
        raise FileNotFoundError(f"Schema not found: {schema_path}")

    with open(schema_path, encoding="utf-8") as f:
        return json.load(f)


def records_from_data(data: dict) -> list[LogRecord]:
    """Validate a parsed log document and convert it to records."""
    try:
        jsonschema.validate(instance=data, schema=load_schema("log_record"))
    except jsonschema.ValidationError as e:
        raise LogSourceError(f"Recorded log failed schema validation: {e.message}") from e

    records = []
    for entry in data["records"]:
        if "html" in entry:
            records.append(record_from_html(entry["html"]))
            continue
        parts = tuple(
            Icon(part["icon"]) if isinstance(part, dict) else part
            for part in entry["parts"]
        )
        records.append(LogRecord(parts, entry.get("player")))
    return records


def load_records(path: str | Path, entry_class: Optional[str] = None) -> list[LogRecord]:
    """Load a recorded log file, choosing the format by extension."""
    path = Path(path)
    if not path.exists():
        raise LogSourceError(f"Log file not found: {path}")

    suffix = path.suffix.lower()
    if suffix in (".html", ".htm"):
        records = records_from_chat_log(path.read_text(encoding="utf-8"), entry_class)
    elif suffix in (".yaml", ".yml"):
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
        except yaml.YAMLError as e:
            raise LogSourceError(f"Invalid YAML in {path}: {e}") from e
        if not isinstance(data, dict):
            raise LogSourceError(f"Recorded log must be a mapping: {path}")
        records = records_from_data(data)
    else:
        raise LogSourceError(f"Unsupported log format: {path.suffix}")

    logger.info("Loaded %d records from %s", len(records), path)
    return records


def load_log_username(path: str | Path) -> Optional[str]:
    """The `username` a YAML log declares for "you", if any."""
    path = Path(path)
    if path.suffix.lower() not in (".yaml", ".yml"):
        return None
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    return data.get("username") if isinstance(data, dict) else None

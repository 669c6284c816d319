"""Logging helpers."""

from __future__ import annotations

import json
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from hsv_inspector.utils.io import ensure_dir


def iso_timestamp() -> str:
    """Return an ISO-8601 UTC timestamp string.

    @return Timestamp in UTC (YYYY-MM-DDTHH:MM:SSZ).
    """
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def log_jsonl(path: Optional[Path], record: Dict[str, Any]) -> None:
    """Append a record to a JSONL file. Does nothing when ``path`` is None.

    @param path JSONL file path.
    @param record Serializable dict to append.
    @return None
    """
    if path is None:
        return
    ensure_dir(path.parent)
    with path.open("a", encoding="utf-8") as f:
        f.write(json.dumps(record, ensure_ascii=True) + "\n")


def log_event(path: Optional[Path], event: str, **fields: Any) -> Dict[str, Any]:
    """Build a timestamped event record and append it to ``path``.

    @param path JSONL file path (None disables writing).
    @param event Event name.
    @param fields Extra serializable fields.
    @return The record.
    """
    record: Dict[str, Any] = {"timestamp": iso_timestamp(), "event": event}
    record.update(fields)
    log_jsonl(path, record)
    return record


def diag(message: str) -> None:
    """Print a diagnostic line to stderr."""
    print(message, file=sys.stderr)

"""Utility helpers."""

from .annotate import draw_status, overlay_text
from .io import ensure_dir
from .logging_utils import diag, iso_timestamp, log_event, log_jsonl

__all__ = ["draw_status", "overlay_text", "ensure_dir", "diag", "iso_timestamp", "log_event", "log_jsonl"]

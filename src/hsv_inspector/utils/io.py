"""Filesystem helpers."""

from __future__ import annotations

from pathlib import Path


def ensure_dir(path: Path) -> None:
    """Create a directory if it doesn't exist.

    @param path Directory path to create.
    @return None
    """
    path.mkdir(parents=True, exist_ok=True)

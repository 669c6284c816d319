"""Configuration objects and naming helpers."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple


HUE_MAX = 179
SAT_MAX = 255
VAL_MAX = 255

# Inclusive upper bound per inspection channel (H, S, V). All lower bounds are 0.
CHANNEL_DOMAINS: Tuple[int, int, int] = (HUE_MAX, SAT_MAX, VAL_MAX)
CHANNEL_NAMES: Tuple[str, str, str] = ("Hue", "Sat", "Val")

BYTES_PER_PIXEL = 4


def frame_size(width: int, height: int) -> int:
    """Return the byte size of one shared frame.

    @param width Frame width.
    @param height Frame height.
    @return width * height * 4.
    """
    return width * height * BYTES_PER_PIXEL


def segment_name(name: str) -> str:
    """Normalise a shared memory name to the POSIX form with a leading slash.

    @param name Name as given on the command line.
    @return Name starting with "/".
    """
    return name if name.startswith("/") else f"/{name}"


def lock_name_for(name: str) -> str:
    """Return the name of the semaphore guarding segment ``name``.

    @param name Shared memory name.
    @return Semaphore name.
    """
    return f"{segment_name(name)}.lock"


@dataclass(frozen=True)
class ControlDefaults:
    """Initial values for the nine live controls.

    @field ranges (min, max) per channel, fully open.
    @field add Additive bias per channel.
    @field sub Subtractive bias per channel.
    """

    ranges: Tuple[Tuple[int, int], ...] = ((0, HUE_MAX), (0, SAT_MAX), (0, VAL_MAX))
    add: Tuple[int, int, int] = (0, 0, 0)
    sub: Tuple[int, int, int] = (0, 0, 0)


@dataclass(frozen=True)
class InspectorConfig:
    """Top-level inspector configuration.

    @field poll_interval_ms Bounded wait per loop iteration.
    @field control_window Window holding the trackbars and the raw view.
    @field mask_window Window for the mask-only view.
    @field masked_window Window for the adjusted and masked view.
    @field quit_keys Key codes that cancel the loop.
    @field status_every_n Print a status line every N frames (0 disables).
    @field show_status Draw fps/range overlay on the raw view.
    @field clamp_after_subtract Floor at 0 between subtract and add.
    @field events_log_path Optional JSONL session log path; nothing is written when None.
    @field controls Initial control values.
    """

    poll_interval_ms: int = 10
    control_window: str = "Inspector"
    mask_window: str = "Mask only"
    masked_window: str = "Adjusted and masked"
    quit_keys: Tuple[int, ...] = (ord("q"), ord("Q"), 27)
    status_every_n: int = 300
    show_status: bool = True
    clamp_after_subtract: bool = False
    events_log_path: Optional[Path] = None
    controls: ControlDefaults = field(default_factory=ControlDefaults)

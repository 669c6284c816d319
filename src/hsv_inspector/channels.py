"""Per-channel parameter types."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence


@dataclass(frozen=True)
class ChannelRange:
    """Inclusive (min, max) bounds for one inspection channel."""

    min: int
    max: int


@dataclass(frozen=True)
class ChannelBias:
    """Additive and subtractive offsets for one inspection channel."""

    add: int = 0
    sub: int = 0


def clamp(value: int, hi: int) -> int:
    """Clamp ``value`` into [0, hi]."""
    return max(0, min(int(value), hi))


def check_three(values: Sequence[object], what: str) -> None:
    """Raise ValueError unless exactly one entry per channel is given.

    @param values Per-channel sequence.
    @param what Name used in the error message.
    @return None
    """
    if len(values) != 3:
        raise ValueError(f"Expected 3 {what}, got {len(values)}")

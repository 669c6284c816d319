"""Annotation helpers."""

from __future__ import annotations

from typing import Sequence, Tuple

import cv2
import numpy as np

from hsv_inspector.channels import ChannelRange
from hsv_inspector.config import CHANNEL_NAMES


def overlay_text(image: np.ndarray, text: str, origin: Tuple[int, int]) -> None:
    """Draw outlined text on an image in place.

    @param image Image to draw on.
    @param text Text string.
    @param origin (x, y) origin.
    @return None
    """
    cv2.putText(image, text, origin, cv2.FONT_HERSHEY_SIMPLEX, 0.5, (0, 0, 0), 2, cv2.LINE_AA)
    cv2.putText(
        image, text, origin, cv2.FONT_HERSHEY_SIMPLEX, 0.5, (255, 255, 255), 1, cv2.LINE_AA
    )


def format_ranges(ranges: Sequence[ChannelRange]) -> str:
    """Format channel ranges as ``H 0-179 S 0-255 V 0-255``."""
    return " ".join(f"{name[0]} {r.min}-{r.max}" for name, r in zip(CHANNEL_NAMES, ranges))


def draw_status(image: np.ndarray, fps: float, ranges: Sequence[ChannelRange]) -> np.ndarray:
    """Return a copy of the image with fps and the active ranges drawn on it.

    @param image BGR image.
    @param fps Current loop rate.
    @param ranges Active channel ranges.
    @return Annotated copy.
    """
    annotated = image.copy()
    overlay_text(annotated, f"FPS: {fps:.1f}", (10, 20))
    overlay_text(annotated, format_ranges(ranges), (10, 42))
    return annotated

"""Color conversion between the shared BGRA frame and HSV inspection space."""

from __future__ import annotations

from typing import Sequence

import cv2
import numpy as np

from hsv_inspector.channels import ChannelBias, check_three
from hsv_inspector.config import CHANNEL_DOMAINS


def to_inspection_space(frame: np.ndarray) -> np.ndarray:
    """Convert a raw 4-channel frame to HSV.

    The fourth byte of every pixel is ignored; the first three are read as
    B, G, R. Hue is in [0, 179], saturation and value in [0, 255].

    @param frame HxWx4 uint8 frame.
    @return HxWx3 uint8 HSV image.
    """
    if frame.ndim != 3 or frame.shape[2] != 4:
        raise ValueError(f"Expected an HxWx4 frame, got shape {frame.shape}")
    if frame.dtype != np.uint8:
        raise ValueError(f"Expected uint8 frame, got {frame.dtype}")
    bgr = cv2.cvtColor(frame, cv2.COLOR_BGRA2BGR)
    return cv2.cvtColor(bgr, cv2.COLOR_BGR2HSV)


def apply_bias(
    hsv: np.ndarray,
    biases: Sequence[ChannelBias],
    clamp_after_subtract: bool = False,
) -> np.ndarray:
    """Apply per-channel ``clip(v - sub + add)`` to an HSV image.

    The arithmetic runs in int16 so the intermediate may leave [0, 255];
    the result is clipped once into the channel domain. With
    ``clamp_after_subtract`` the intermediate is floored at 0 before the
    addition instead.

    @param hsv HxWx3 uint8 HSV image.
    @param biases One ChannelBias per channel (H, S, V).
    @param clamp_after_subtract Floor at 0 between subtract and add.
    @return New HxWx3 uint8 HSV image.
    """
    check_three(biases, "channel biases")
    if hsv.ndim != 3 or hsv.shape[2] != 3:
        raise ValueError(f"Expected an HxWx3 image, got shape {hsv.shape}")

    wide = hsv.astype(np.int16)
    out = np.empty(hsv.shape, dtype=np.uint8)
    for c, (bias, hi) in enumerate(zip(biases, CHANNEL_DOMAINS)):
        channel = wide[..., c] - int(bias.sub)
        if clamp_after_subtract:
            channel = np.maximum(channel, 0)
        channel = channel + int(bias.add)
        out[..., c] = np.clip(channel, 0, hi)
    return out


def to_display_space(hsv: np.ndarray) -> np.ndarray:
    """Convert an HSV image back to BGR for presentation.

    @param hsv HxWx3 uint8 HSV image.
    @return HxWx3 uint8 BGR image.
    """
    return cv2.cvtColor(hsv, cv2.COLOR_HSV2BGR)


def frame_to_bgr(frame: np.ndarray) -> np.ndarray:
    """Drop the ignored channel of a raw frame for display."""
    return cv2.cvtColor(frame, cv2.COLOR_BGRA2BGR)

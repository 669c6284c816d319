"""Range masking and compositing."""

from __future__ import annotations

from typing import Sequence

import cv2
import numpy as np

from hsv_inspector.channels import ChannelRange, check_three


def compute_mask(hsv: np.ndarray, ranges: Sequence[ChannelRange]) -> np.ndarray:
    """Return a 0/255 mask of pixels inside every channel range.

    A range with min > max matches nothing on that channel, so the mask is
    empty.

    @param hsv HxWx3 uint8 HSV image.
    @param ranges One ChannelRange per channel (H, S, V).
    @return HxW uint8 mask.
    """
    check_three(ranges, "channel ranges")
    lower = np.array([r.min for r in ranges], dtype=np.int32)
    upper = np.array([r.max for r in ranges], dtype=np.int32)
    if np.any(lower > upper):
        return np.zeros(hsv.shape[:2], dtype=np.uint8)
    lower = np.clip(lower, 0, 255).astype(np.uint8)
    upper = np.clip(upper, 0, 255).astype(np.uint8)
    return cv2.inRange(hsv, lower, upper)


def composite(image: np.ndarray, mask: np.ndarray) -> np.ndarray:
    """Keep ``image`` where ``mask`` is set and black out the rest.

    @param image HxW or HxWxC uint8 image.
    @param mask HxW uint8 mask.
    @return Masked copy of the image.
    """
    if image.shape[:2] != mask.shape[:2]:
        raise ValueError(
            f"Mask size {mask.shape[:2]} does not match image size {image.shape[:2]}"
        )
    return cv2.bitwise_and(image, image, mask=mask)

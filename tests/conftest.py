from __future__ import annotations

import sys
import uuid
from typing import Dict, List

import numpy as np
import pytest

from hsv_inspector.channels import ChannelBias, ChannelRange
from hsv_inspector.config import CHANNEL_DOMAINS


class FakeSurface:
    """In-memory control surface recording everything presented."""

    def __init__(self, keys: List[int] | None = None) -> None:
        self.values: Dict[str, int] = {}
        self.limits: Dict[str, tuple] = {}
        self.presented: Dict[str, np.ndarray] = {}
        self.present_order: List[str] = []
        self.keys = list(keys or [])
        self.polls: List[int] = []
        self.closed = False
        self.events: List[str] = []

    def register_int_control(self, label, lo, hi, initial):
        self.values[label] = initial
        self.limits[label] = (lo, hi)
        return label

    def read_control(self, handle):
        self.events.append("control")
        return self.values[handle]

    def set(self, label, value):
        self.values[label] = value

    def present(self, label, image):
        self.presented[label] = image
        self.present_order.append(label)

    def poll(self, delay_ms):
        self.polls.append(delay_ms)
        return self.keys.pop(0) if self.keys else -1

    def close(self):
        self.closed = True


class FakeSource:
    """Frame source returning a fixed frame."""

    def __init__(self, frame: np.ndarray, events: List[str] | None = None) -> None:
        self.frame = frame
        self.reads = 0
        self.events = events if events is not None else []
        self.name = "/fake"
        self.size = frame.size
        self.closed = False

    def read_frame(self):
        self.reads += 1
        self.events.append("frame")
        return self.frame.copy()

    def close(self):
        self.closed = True


def full_ranges():
    return tuple(ChannelRange(0, hi) for hi in CHANNEL_DOMAINS)


def zero_biases():
    return (ChannelBias(), ChannelBias(), ChannelBias())


def bgra(pixels, width: int, height: int) -> np.ndarray:
    """Build an HxWx4 frame from a flat list of (B, G, R) tuples."""
    frame = np.full((height, width, 4), 255, dtype=np.uint8)
    frame[..., :3] = np.array(pixels, dtype=np.uint8).reshape(height, width, 3)
    return frame


@pytest.fixture
def surface():
    return FakeSurface()


@pytest.fixture
def shm_name():
    if not sys.platform.startswith("linux"):
        pytest.skip("POSIX shared memory tests run on Linux")
    from hsv_inspector.synth.producer import destroy_segment

    name = f"hsvtest_{uuid.uuid4().hex[:10]}"
    yield name
    destroy_segment(name)

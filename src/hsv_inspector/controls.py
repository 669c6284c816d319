"""Live integer controls and the windowing capability they sit on."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Tuple

import cv2
import numpy as np

from hsv_inspector.channels import ChannelBias, ChannelRange, clamp
from hsv_inspector.config import CHANNEL_DOMAINS, CHANNEL_NAMES, ControlDefaults


class ControlSurface:
    """Minimal windowing interface used by the inspector."""

    def register_int_control(self, label: str, lo: int, hi: int, initial: int) -> str:
        """Create an integer control and return a handle for reading it.

        @param label Control label.
        @param lo Minimum value.
        @param hi Maximum value.
        @param initial Starting value.
        @return Handle for read_control.
        """
        raise NotImplementedError

    def read_control(self, handle: str) -> int:
        raise NotImplementedError

    def present(self, label: str, image: np.ndarray) -> None:
        raise NotImplementedError

    def poll(self, delay_ms: int) -> int:
        """Process window events for up to ``delay_ms`` and return a key code or -1."""
        raise NotImplementedError

    def close(self) -> None:
        pass


class OpenCVSurface(ControlSurface):
    """HighGUI windows with trackbars attached to one control window."""

    def __init__(self, control_window: str) -> None:
        self.control_window = control_window
        cv2.namedWindow(control_window, cv2.WINDOW_AUTOSIZE)

    def register_int_control(self, label: str, lo: int, hi: int, initial: int) -> str:
        cv2.createTrackbar(label, self.control_window, clamp(initial, hi), hi, _ignore)
        if lo > 0:
            cv2.setTrackbarMin(label, self.control_window, lo)
        return label

    def read_control(self, handle: str) -> int:
        return int(cv2.getTrackbarPos(handle, self.control_window))

    def present(self, label: str, image: np.ndarray) -> None:
        cv2.imshow(label, image)

    def poll(self, delay_ms: int) -> int:
        return cv2.waitKey(max(1, delay_ms))

    def close(self) -> None:
        cv2.destroyAllWindows()


def _ignore(_value: int) -> None:
    pass


@dataclass(frozen=True)
class ControlValues:
    """Snapshot of all nine controls for one loop iteration."""

    ranges: Tuple[ChannelRange, ChannelRange, ChannelRange]
    biases: Tuple[ChannelBias, ChannelBias, ChannelBias]


class ControlPanel:
    """Registers the range and bias controls and reads them each frame.

    Labels follow the inspector layout: "Hue (min)", "Hue (max)", ... for
    ranges, "Hadd"/"Hsub", "Sadd"/"Ssub", "Vadd"/"Vsub" for biases. Every
    control spans the domain of its channel.
    """

    def __init__(self, surface: ControlSurface, defaults: ControlDefaults | None = None) -> None:
        self.surface = surface
        defaults = defaults or ControlDefaults()
        self._handles: Dict[str, str] = {}

        for c, name in enumerate(CHANNEL_NAMES):
            lo, hi = defaults.ranges[c]
            self._register(f"{name} (min)", c, lo)
            self._register(f"{name} (max)", c, hi)
        for c, name in enumerate(CHANNEL_NAMES):
            self._register(f"{name[0]}add", c, defaults.add[c])
        for c, name in enumerate(CHANNEL_NAMES):
            self._register(f"{name[0]}sub", c, defaults.sub[c])

    def _register(self, label: str, channel: int, initial: int) -> None:
        hi = CHANNEL_DOMAINS[channel]
        self._handles[label] = self.surface.register_int_control(label, 0, hi, clamp(initial, hi))

    @property
    def labels(self) -> List[str]:
        return list(self._handles)

    def _read(self, label: str, channel: int) -> int:
        return clamp(self.surface.read_control(self._handles[label]), CHANNEL_DOMAINS[channel])

    def read(self) -> ControlValues:
        """Read every control, clamped to its channel domain.

        @return ControlValues with three ranges and three biases.
        """
        ranges = []
        biases = []
        for c, name in enumerate(CHANNEL_NAMES):
            lo = self._read(f"{name} (min)", c)
            hi = self._read(f"{name} (max)", c)
            add = self._read(f"{name[0]}add", c)
            sub = self._read(f"{name[0]}sub", c)
            ranges.append(ChannelRange(lo, hi))
            biases.append(ChannelBias(add=add, sub=sub))
        return ControlValues(tuple(ranges), tuple(biases))  # type: ignore[arg-type]

"""Per-frame inspection loop: read, convert, bias, mask, present."""

from __future__ import annotations

import enum
import threading
import time
from dataclasses import dataclass
from typing import Optional

import numpy as np

from hsv_inspector.config import InspectorConfig
from hsv_inspector.controls import ControlPanel, ControlSurface, ControlValues
from hsv_inspector.mask import composite, compute_mask
from hsv_inspector.transform import apply_bias, frame_to_bgr, to_display_space, to_inspection_space
from hsv_inspector.utils.annotate import draw_status, format_ranges
from hsv_inspector.utils.logging_utils import log_event


class LoopState(enum.Enum):
    RUNNING = "running"
    TERMINATED = "terminated"


@dataclass
class FrameViews:
    """Images derived from one frame.

    @field raw Source frame as BGR.
    @field mask 0/255 inclusion mask.
    @field adjusted Biased HSV converted back to BGR.
    @field adjusted_masked ``adjusted`` with excluded pixels blacked out.
    """

    raw: np.ndarray
    mask: np.ndarray
    adjusted: np.ndarray
    adjusted_masked: np.ndarray


def process_frame(
    frame: np.ndarray, controls: ControlValues, clamp_after_subtract: bool = False
) -> FrameViews:
    """Run the transform and mask pipeline on one copied frame.

    @param frame HxWx4 uint8 frame.
    @param controls Current control values.
    @param clamp_after_subtract Passed to apply_bias.
    @return FrameViews for presentation.
    """
    hsv = to_inspection_space(frame)
    biased = apply_bias(hsv, controls.biases, clamp_after_subtract=clamp_after_subtract)
    mask = compute_mask(biased, controls.ranges)
    adjusted = to_display_space(biased)
    return FrameViews(
        raw=frame_to_bgr(frame),
        mask=mask,
        adjusted=adjusted,
        adjusted_masked=composite(adjusted, mask),
    )


class DisplayLoop:
    """Free-running inspection loop.

    Each iteration copies whatever the shared buffer currently holds; it never
    waits for the producer to signal a new frame, so a paused producer leaves
    the last image on screen while the controls stay responsive. The only
    wait is the surface poll of ``poll_interval_ms`` per iteration.
    """

    def __init__(
        self,
        source,
        surface: ControlSurface,
        config: InspectorConfig | None = None,
        panel: ControlPanel | None = None,
    ) -> None:
        self.source = source
        self.surface = surface
        self.config = config or InspectorConfig()
        self.panel = panel or ControlPanel(surface, self.config.controls)
        self.state = LoopState.RUNNING
        self.frames = 0
        self.fps = 0.0
        self.exit_reason: Optional[str] = None
        self._cancel = threading.Event()
        self._last_fps_time = time.time()
        self._fps_count = 0

    def cancel(self, reason: str = "cancelled") -> None:
        """Request termination; honoured at the next iteration boundary."""
        if not self._cancel.is_set():
            self.exit_reason = reason
            self._cancel.set()

    @property
    def cancelled(self) -> bool:
        return self._cancel.is_set()

    def step(self) -> FrameViews:
        """Run one iteration and present its views.

        @return FrameViews of this iteration.
        """
        controls = self.panel.read()
        frame = self.source.read_frame()
        views = process_frame(frame, controls, self.config.clamp_after_subtract)

        self._tick()
        raw_view = views.raw
        if self.config.show_status:
            raw_view = draw_status(raw_view, self.fps, controls.ranges)

        self.surface.present(self.config.control_window, raw_view)
        self.surface.present(self.config.mask_window, views.mask)
        self.surface.present(self.config.masked_window, views.adjusted_masked)

        if self.config.status_every_n > 0 and self.frames % self.config.status_every_n == 0:
            print(f"[LOOP] frames={self.frames} fps={self.fps:.1f} {format_ranges(controls.ranges)}")
        return views

    def _tick(self) -> None:
        self.frames += 1
        self._fps_count += 1
        now = time.time()
        elapsed = now - self._last_fps_time
        if self._fps_count >= 10 and elapsed > 0:
            self.fps = self._fps_count / elapsed
            self._fps_count = 0
            self._last_fps_time = now

    def run(self) -> LoopState:
        """Iterate until cancelled.

        @return Final state (always TERMINATED).
        """
        started = time.time()
        try:
            while self.state is LoopState.RUNNING:
                if self._cancel.is_set():
                    self.state = LoopState.TERMINATED
                    break
                self.step()
                key = self.surface.poll(self.config.poll_interval_ms)
                if key is not None and key >= 0 and (key & 0xFF) in self.config.quit_keys:
                    self.cancel("key")
        finally:
            self.state = LoopState.TERMINATED
            elapsed = time.time() - started
            log_event(
                self.config.events_log_path,
                "session_end",
                frames=self.frames,
                mean_fps=round(self.frames / elapsed, 2) if elapsed > 0 else 0.0,
                reason=self.exit_reason or "error",
            )
        return self.state

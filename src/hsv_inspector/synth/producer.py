"""Synthetic frame producer writing BGRA test patterns into shared memory."""

from __future__ import annotations

import argparse
import mmap
import time
from dataclasses import dataclass
from typing import List, Optional

import cv2
import numpy as np
import posix_ipc

from hsv_inspector.config import frame_size, lock_name_for, segment_name


@dataclass
class Segment:
    """Producer side of a shared frame buffer.

    @field name Normalised shared memory name.
    @field width Frame width.
    @field height Frame height.
    @field buffer Writable mapping of the segment.
    @field lock Semaphore guarding the buffer.
    """

    name: str
    width: int
    height: int
    buffer: mmap.mmap
    lock: posix_ipc.Semaphore

    def close(self) -> None:
        self.buffer.close()
        self.lock.close()


def create_segment(name: str, width: int, height: int, size: Optional[int] = None) -> Segment:
    """Create a zeroed segment and its lock.

    @param name Shared memory name.
    @param width Frame width.
    @param height Frame height.
    @param size Override segment size (defaults to width*height*4).
    @return Segment ready for writing.
    """
    size = frame_size(width, height) if size is None else size
    shm = posix_ipc.SharedMemory(segment_name(name), posix_ipc.O_CREX, size=size)
    try:
        buffer = mmap.mmap(shm.fd, size)
    finally:
        shm.close_fd()
    lock = posix_ipc.Semaphore(lock_name_for(name), posix_ipc.O_CREX, initial_value=1)
    return Segment(segment_name(name), width, height, buffer, lock)


def destroy_segment(name: str) -> None:
    """Unlink a segment and its lock, ignoring ones that are already gone."""
    for unlink in (
        lambda: posix_ipc.unlink_shared_memory(segment_name(name)),
        lambda: posix_ipc.unlink_semaphore(lock_name_for(name)),
    ):
        try:
            unlink()
        except posix_ipc.ExistentialError:
            pass


def write_frame(segment: Segment, frame: np.ndarray) -> None:
    """Copy a BGRA frame into the segment under its lock.

    @param segment Target segment.
    @param frame HxWx4 uint8 frame matching the segment size.
    @return None
    """
    expected = (segment.height, segment.width, 4)
    if frame.shape != expected or frame.dtype != np.uint8:
        raise ValueError(f"Expected uint8 frame of shape {expected}, got {frame.dtype} {frame.shape}")
    data = np.ascontiguousarray(frame).tobytes()
    with segment.lock:
        segment.buffer.seek(0)
        segment.buffer.write(data)


def generate_frame(width: int = 640, height: int = 480, t: float = 0.0) -> np.ndarray:
    """Render a BGRA test pattern.

    Hue sweeps left to right, saturation falls top to bottom in the upper
    half and value falls in the lower half. A white block moves with ``t``.

    @param width Output width.
    @param height Output height.
    @param t Time in seconds, drives the moving block.
    @return HxWx4 uint8 frame with the fourth channel set to 255.
    """
    xs = np.linspace(0, 179, width, dtype=np.float32)
    ys = np.linspace(1.0, 0.0, height, dtype=np.float32)
    hsv = np.zeros((height, width, 3), dtype=np.uint8)
    hsv[..., 0] = xs[np.newaxis, :].astype(np.uint8)
    upper = ys >= 0.5
    sat = np.where(upper, (ys - 0.5) * 2.0, 1.0)
    val = np.where(upper, 1.0, ys * 2.0)
    hsv[..., 1] = (sat[:, np.newaxis] * 255).astype(np.uint8)
    hsv[..., 2] = (val[:, np.newaxis] * 255).astype(np.uint8)
    bgr = cv2.cvtColor(hsv, cv2.COLOR_HSV2BGR)

    block = max(1, min(width, height) // 8)
    x = int((t * 60.0) % max(1, width - block + 1))
    y = (height - block) // 2
    cv2.rectangle(bgr, (x, y), (x + block - 1, y + block - 1), (255, 255, 255), -1)
    return cv2.cvtColor(bgr, cv2.COLOR_BGR2BGRA)


def run_producer(name: str, width: int, height: int, fps: float = 30.0, frames: int = 0) -> None:
    """Create a segment and keep writing test frames until interrupted.

    @param name Shared memory name.
    @param width Frame width.
    @param height Frame height.
    @param fps Target write rate.
    @param frames Stop after this many frames (0 runs forever).
    @return None
    """
    segment = create_segment(name, width, height)
    print(f"[PRODUCER] created '{segment.name}' ({frame_size(width, height)} bytes)")
    period = 1.0 / fps if fps > 0 else 0.0
    started = time.time()
    count = 0
    try:
        while frames <= 0 or count < frames:
            write_frame(segment, generate_frame(width, height, time.time() - started))
            count += 1
            if period:
                time.sleep(period)
    except KeyboardInterrupt:
        pass
    finally:
        segment.close()
        destroy_segment(name)
        print(f"[PRODUCER] wrote {count} frames, removed '{segment.name}'")


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="hsv-inspector-producer", description="Write synthetic BGRA frames to shared memory"
    )
    parser.add_argument("--name", required=True)
    parser.add_argument("--width", type=int, default=640)
    parser.add_argument("--height", type=int, default=480)
    parser.add_argument("--fps", type=float, default=30.0)
    parser.add_argument("--frames", type=int, default=0)
    args = parser.parse_args(argv)
    run_producer(args.name, args.width, args.height, fps=args.fps, frames=args.frames)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

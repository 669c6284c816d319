"""Read access to a frame buffer kept in named POSIX shared memory.

An external producer owns the segment and a named semaphore (initial value
1) used as its lock. This module only attaches to both, takes the lock for
the duration of a byte copy, and detaches again. It never creates or
unlinks either object.
"""

from __future__ import annotations

import mmap
from contextlib import contextmanager
from typing import Callable, Iterator, Optional, TypeVar

import numpy as np
import posix_ipc

from hsv_inspector.config import BYTES_PER_PIXEL, frame_size, lock_name_for, segment_name

T = TypeVar("T")


class AttachError(RuntimeError):
    """The shared frame buffer could not be attached."""


def _copy_bytes(view: memoryview) -> np.ndarray:
    return np.frombuffer(view, dtype=np.uint8).copy()


class FrameSource:
    """Attachment to a shared WIDTHxHEIGHTx4 frame buffer."""

    def __init__(
        self,
        name: str,
        width: int,
        height: int,
        buffer: mmap.mmap,
        lock: posix_ipc.Semaphore,
        lock_timeout: Optional[float] = None,
    ) -> None:
        self.name = name
        self.width = width
        self.height = height
        self.size = frame_size(width, height)
        self.lock_timeout = lock_timeout
        self._buffer: Optional[mmap.mmap] = buffer
        self._lock: Optional[posix_ipc.Semaphore] = lock

    @classmethod
    def attach(
        cls,
        name: str,
        width: int,
        height: int,
        lock_timeout: Optional[float] = None,
    ) -> "FrameSource":
        """Attach to segment ``name`` and its lock.

        @param name Shared memory name.
        @param width Frame width in pixels.
        @param height Frame height in pixels.
        @param lock_timeout Seconds to wait for the lock; None blocks.
        @return Attached FrameSource.
        @raise AttachError If the segment or lock is unavailable or the
            segment size is not width * height * 4.
        """
        if width <= 0 or height <= 0:
            raise AttachError(f"Invalid frame size {width}x{height}")

        expected = frame_size(width, height)
        shm_name = segment_name(name)
        try:
            shm = posix_ipc.SharedMemory(shm_name, read_only=True)
        except posix_ipc.ExistentialError as exc:
            raise AttachError(f"Shared memory '{shm_name}' does not exist") from exc
        except posix_ipc.PermissionsError as exc:
            raise AttachError(f"Permission denied for shared memory '{shm_name}'") from exc

        try:
            if shm.size != expected:
                raise AttachError(
                    f"Shared memory '{shm_name}' has {shm.size} bytes, expected "
                    f"{expected} ({width}x{height}x{BYTES_PER_PIXEL})"
                )
            buffer = mmap.mmap(shm.fd, expected, access=mmap.ACCESS_READ)
        finally:
            shm.close_fd()

        sem_name = lock_name_for(name)
        try:
            lock = posix_ipc.Semaphore(sem_name)
        except posix_ipc.Error as exc:
            buffer.close()
            raise AttachError(f"Lock '{sem_name}' for '{shm_name}' unavailable: {exc}") from exc

        return cls(shm_name, width, height, buffer, lock, lock_timeout=lock_timeout)

    @property
    def closed(self) -> bool:
        return self._buffer is None

    @contextmanager
    def frame(self) -> Iterator[memoryview]:
        """Hold the lock and yield a read-only view of the frame bytes.

        The body should do nothing but copy; the producer is blocked until
        the block exits. The lock is released on every exit path. After a
        normal exit the view is released too, so nothing built on it may be
        kept; if the body raises, its exception propagates unchanged and the
        view is left to be collected with the traceback.

        @return Context manager yielding a memoryview of width*height*4 bytes.
        """
        if self._buffer is None or self._lock is None:
            raise RuntimeError(f"Frame source '{self.name}' is closed")
        self._lock.acquire(self.lock_timeout)
        view = memoryview(self._buffer)[: self.size]
        try:
            yield view
        finally:
            self._lock.release()
        view.release()

    def with_frame(self, fn: Callable[[memoryview], T]) -> T:
        """Run ``fn`` on the frame bytes while holding the lock.

        @param fn Callable receiving the locked view.
        @return Whatever ``fn`` returns.
        """
        with self.frame() as view:
            return fn(view)

    def read_frame(self) -> np.ndarray:
        """Copy the current frame out of shared memory.

        Does not wait for a new frame; if the producer has not written since
        the last call the same image is returned again.

        @return HxWx4 uint8 array owned by the caller.
        """
        raw = self.with_frame(_copy_bytes)
        return raw.reshape(self.height, self.width, BYTES_PER_PIXEL)

    def close(self) -> None:
        """Detach from the segment and lock without removing them."""
        if self._buffer is not None:
            self._buffer.close()
            self._buffer = None
        if self._lock is not None:
            self._lock.close()
            self._lock = None

    def __enter__(self) -> "FrameSource":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

import gc

import numpy as np
import posix_ipc
import pytest

from hsv_inspector.config import segment_name
from hsv_inspector.frame_source import AttachError, FrameSource
from hsv_inspector.synth.producer import create_segment, generate_frame, write_frame


@pytest.fixture
def segment(shm_name):
    seg = create_segment(shm_name, 8, 6)
    yield seg
    seg.close()


def test_attach_and_read_copy(shm_name, segment):
    frame = generate_frame(8, 6, t=0.5)
    write_frame(segment, frame)

    with FrameSource.attach(shm_name, 8, 6) as source:
        assert source.size == 8 * 6 * 4
        assert source.name == segment_name(shm_name)
        got = source.read_frame()
        assert got.shape == (6, 8, 4)
        assert np.array_equal(got, frame)

        write_frame(segment, np.zeros_like(frame))
        # the earlier copy is not a view into shared memory
        assert np.array_equal(got, frame)
        assert not source.read_frame().any()


def test_unchanged_buffer_is_read_again(shm_name, segment):
    write_frame(segment, generate_frame(8, 6))
    with FrameSource.attach(shm_name, 8, 6) as source:
        assert np.array_equal(source.read_frame(), source.read_frame())


def test_with_frame_exposes_exact_byte_count(shm_name, segment):
    with FrameSource.attach(shm_name, 8, 6) as source:
        assert source.with_frame(len) == 8 * 6 * 4


def test_lock_released_when_body_raises(shm_name, segment):
    def boom(view):
        raise KeyError("boom")

    with FrameSource.attach(shm_name, 8, 6, lock_timeout=1.0) as source:
        with pytest.raises(KeyError):
            source.with_frame(boom)
        gc.collect()
        assert source.read_frame().shape == (6, 8, 4)
    assert segment.lock.value == 1


def test_body_error_is_not_masked_by_a_held_view(shm_name, segment):
    held = []

    def keep_and_fail(view):
        held.append(np.frombuffer(view, dtype=np.uint8))
        raise KeyError("body failed")

    source = FrameSource.attach(shm_name, 8, 6, lock_timeout=1.0)
    with pytest.raises(KeyError, match="body failed"):
        source.with_frame(keep_and_fail)
    assert segment.lock.value == 1

    held.clear()
    gc.collect()
    source.close()
    assert source.closed


def test_read_waits_for_producer_lock(shm_name, segment):
    with FrameSource.attach(shm_name, 8, 6, lock_timeout=0.05) as source:
        segment.lock.acquire()
        try:
            with pytest.raises(posix_ipc.BusyError):
                source.read_frame()
        finally:
            segment.lock.release()
        source.read_frame()


def test_missing_segment_raises(shm_name):
    with pytest.raises(AttachError, match="does not exist"):
        FrameSource.attach(shm_name, 8, 6)


def test_wrong_size_raises(shm_name):
    seg = create_segment(shm_name, 8, 6)
    try:
        with pytest.raises(AttachError, match="expected 256"):
            FrameSource.attach(shm_name, 8, 8)
    finally:
        seg.close()


def test_missing_lock_raises(shm_name):
    shm = posix_ipc.SharedMemory(segment_name(shm_name), posix_ipc.O_CREX, size=4)
    shm.close_fd()
    with pytest.raises(AttachError, match="Lock"):
        FrameSource.attach(shm_name, 1, 1)


@pytest.mark.parametrize("width,height", [(0, 10), (10, -1)])
def test_non_positive_size_raises(width, height):
    with pytest.raises(AttachError):
        FrameSource.attach("unused", width, height)


def test_closed_source_refuses_reads(shm_name, segment):
    source = FrameSource.attach(shm_name, 8, 6)
    source.close()
    assert source.closed
    with pytest.raises(RuntimeError):
        source.read_frame()
    source.close()

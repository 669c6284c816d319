import numpy as np
import pytest

from hsv_inspector.channels import ChannelRange
from hsv_inspector.mask import composite, compute_mask

from conftest import full_ranges


def test_full_ranges_include_every_pixel():
    rng = np.random.default_rng(3)
    hsv = np.stack(
        [
            rng.integers(0, 180, (6, 5)),
            rng.integers(0, 256, (6, 5)),
            rng.integers(0, 256, (6, 5)),
        ],
        axis=-1,
    ).astype(np.uint8)
    mask = compute_mask(hsv, full_ranges())
    assert mask.shape == (6, 5)
    assert mask.dtype == np.uint8
    assert np.all(mask == 255)


def test_mask_is_and_of_channel_checks():
    hsv = np.array(
        [[[10, 100, 100], [10, 20, 100], [50, 100, 100], [10, 100, 250]]], dtype=np.uint8
    )
    ranges = (ChannelRange(5, 20), ChannelRange(50, 150), ChannelRange(0, 200))
    mask = compute_mask(hsv, ranges)
    assert mask[0].tolist() == [255, 0, 0, 0]


def test_bounds_are_inclusive():
    hsv = np.array([[[5, 50, 0], [20, 150, 200]]], dtype=np.uint8)
    ranges = (ChannelRange(5, 20), ChannelRange(50, 150), ChannelRange(0, 200))
    assert compute_mask(hsv, ranges)[0].tolist() == [255, 255]


def test_hue_zero_range_excludes_hue_90():
    hsv = np.array([[[90, 255, 255], [0, 255, 255]]], dtype=np.uint8)
    ranges = (ChannelRange(0, 0), ChannelRange(0, 255), ChannelRange(0, 255))
    assert compute_mask(hsv, ranges)[0].tolist() == [0, 255]


def test_inverted_range_gives_empty_mask():
    hsv = np.zeros((3, 3, 3), dtype=np.uint8)
    ranges = (ChannelRange(0, 179), ChannelRange(100, 10), ChannelRange(0, 255))
    mask = compute_mask(hsv, ranges)
    assert mask.shape == (3, 3)
    assert not mask.any()


def test_composite_keeps_masked_pixels_and_zeroes_the_rest():
    image = np.full((2, 2, 3), 77, dtype=np.uint8)
    mask = np.array([[255, 0], [0, 255]], dtype=np.uint8)
    out = composite(image, mask)
    assert out[0, 0].tolist() == [77, 77, 77]
    assert out[1, 1].tolist() == [77, 77, 77]
    assert out[0, 1].tolist() == [0, 0, 0]
    assert out[1, 0].tolist() == [0, 0, 0]
    assert image[0, 1].tolist() == [77, 77, 77]


def test_composite_rejects_size_mismatch():
    with pytest.raises(ValueError):
        composite(np.zeros((2, 2, 3), dtype=np.uint8), np.zeros((3, 2), dtype=np.uint8))

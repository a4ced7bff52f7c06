import numpy as np
import pytest

from colorbar.core.errors import InvalidDimensions, UnsupportedFormat
from colorbar.core.pixel_adapter import adapt
from colorbar.models.pixel_buffer import ChannelLayout, PixelBuffer


def test_sample_bgr_returns_normalized_rgb():
    frame = np.zeros((2, 3, 3), dtype=np.uint8)
    frame[1, 2] = (10, 20, 30)  # B, G, R
    view = adapt(PixelBuffer.from_array(frame))

    r, g, b = view.sample(2, 1)
    assert (r, g, b) == pytest.approx((30 / 255, 20 / 255, 10 / 255))
    assert view.sample(0, 0) == (0.0, 0.0, 0.0)


def test_sample_gray_replicates_channel():
    frame = np.full((4, 4), 255, dtype=np.uint8)
    view = adapt(PixelBuffer.from_array(frame))
    assert view.layout is ChannelLayout.GRAY8
    assert view.sample(3, 3) == (1.0, 1.0, 1.0)


def test_sample_bgra_ignores_alpha():
    frame = np.zeros((1, 1, 4), dtype=np.uint8)
    frame[0, 0] = (0, 0, 255, 7)
    view = adapt(PixelBuffer.from_array(frame))
    assert view.sample(0, 0) == (1.0, 0.0, 0.0)


def test_sample_out_of_range():
    view = adapt(PixelBuffer.from_array(np.zeros((2, 2), dtype=np.uint8)))
    with pytest.raises(IndexError):
        view.sample(2, 0)


def test_padded_rows_are_viewed_without_copy():
    width, height, stride = 3, 2, 16
    raw = np.full(stride * height, 99, dtype=np.uint8)
    raw[stride:stride + 3] = (1, 2, 3)
    buffer = PixelBuffer(width, height, stride, ChannelLayout.BGR24, raw)

    view = adapt(buffer)
    assert view.channels.shape == (2, 3, 3)
    assert tuple(view.channels[1, 0]) == (1, 2, 3)
    assert np.shares_memory(view.channels, raw)


def test_layout_accepts_names():
    buffer = PixelBuffer(1, 1, 1, "gray8", b"\x80")
    assert adapt(buffer).layout is ChannelLayout.GRAY8


@pytest.mark.parametrize("layout", ["yuv420p", "RGB48", None, 3])
def test_unknown_layout_is_unsupported(layout):
    buffer = PixelBuffer(2, 2, 6, layout, bytes(12))
    with pytest.raises(UnsupportedFormat):
        adapt(buffer)


def test_zero_size_rejected():
    with pytest.raises(InvalidDimensions):
        adapt(PixelBuffer(0, 4, 0, ChannelLayout.GRAY8, b""))


def test_short_stride_rejected():
    with pytest.raises(InvalidDimensions):
        adapt(PixelBuffer(4, 1, 8, ChannelLayout.BGR24, bytes(12)))


def test_short_data_rejected():
    with pytest.raises(InvalidDimensions):
        adapt(PixelBuffer(4, 4, 12, ChannelLayout.BGR24, bytes(12 * 3)))


def test_from_array_rejects_two_channel():
    with pytest.raises(UnsupportedFormat):
        PixelBuffer.from_array(np.zeros((2, 2, 2), dtype=np.uint8))


def test_from_array_copies_pixel_strided():
    frame = np.arange(4 * 6 * 3, dtype=np.uint8).reshape(4, 6, 3)[:, ::2]
    buffer = PixelBuffer.from_array(frame)
    assert (buffer.width, buffer.height, buffer.row_stride) == (3, 4, 9)
    view = adapt(buffer)
    assert np.array_equal(view.channels, frame)


def test_from_array_shares_row_padded_crop():
    full = np.zeros((100, 200, 3), dtype=np.uint8)
    full[:, :150] = np.arange(150, dtype=np.uint8)[None, :, None]
    frame = full[:, :150]

    buffer = PixelBuffer.from_array(frame)
    assert (buffer.width, buffer.height, buffer.row_stride) == (150, 100, 600)
    assert np.shares_memory(buffer.data, frame)
    assert np.array_equal(adapt(buffer).channels, frame)


def test_from_array_shares_gray_crop():
    full = np.arange(10 * 16, dtype=np.uint8).reshape(10, 16)
    frame = full[2:8, :12]
    buffer = PixelBuffer.from_array(frame)
    assert buffer.row_stride == 16
    assert np.shares_memory(buffer.data, full)
    assert np.array_equal(adapt(buffer).channels[..., 0], frame)


def test_from_array_copies_crop_whose_padding_overruns():
    full = np.arange(100 * 200 * 3, dtype=np.uint32).astype(np.uint8).reshape(100, 200, 3)
    frame = full[50:, 50:]
    buffer = PixelBuffer.from_array(frame)
    assert buffer.row_stride == 150 * 3
    assert not np.shares_memory(buffer.data, full)
    assert np.array_equal(adapt(buffer).channels, frame)


@pytest.mark.parametrize("geometry", [(None, 2, 6), (2, "2", 6), (2, 2, 6.0), (True, 2, 6)])
def test_non_integer_geometry_rejected(geometry):
    width, height, stride = geometry
    with pytest.raises(InvalidDimensions):
        adapt(PixelBuffer(width, height, stride, ChannelLayout.BGR24, bytes(12)))


def test_numpy_integer_geometry_accepted():
    buffer = PixelBuffer(np.int64(2), np.int32(2), np.int64(6), ChannelLayout.BGR24, bytes(12))
    assert adapt(buffer).channels.shape == (2, 2, 3)

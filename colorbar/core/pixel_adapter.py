import logging
from typing import Tuple

import numpy as np

from colorbar.core.errors import InvalidDimensions, UnsupportedFormat
from colorbar.models.pixel_buffer import ChannelLayout, PixelBuffer

logger = logging.getLogger(__name__)


class PixelView:
    """Zero-copy HxWxC view over a PixelBuffer's bytes.

    Rows may be padded (``row_stride`` larger than the packed row); the
    padding is never read.
    """

    def __init__(self, channels: np.ndarray, layout: ChannelLayout):
        self.channels = channels
        self.layout = layout

    @property
    def width(self) -> int:
        return self.channels.shape[1]

    @property
    def height(self) -> int:
        return self.channels.shape[0]

    def sample(self, x: int, y: int) -> Tuple[float, float, float]:
        """Normalized (r, g, b) at integer pixel (x, y)."""
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"Pixel ({x}, {y}) outside {self.width}x{self.height}")
        px = self.channels[y, x]
        if self.layout is ChannelLayout.GRAY8:
            v = float(px[0]) / 255.0
            return v, v, v
        # BGR order in memory, alpha (if any) ignored
        return float(px[2]) / 255.0, float(px[1]) / 255.0, float(px[0]) / 255.0


def adapt(buffer: PixelBuffer) -> PixelView:
    """Validate a PixelBuffer and wrap it as a PixelView.

    Raises:
        UnsupportedFormat: layout is not GRAY8, BGR24 or BGRA32
        InvalidDimensions: non-integer or zero size, stride shorter than a row,
            or short data
    """
    layout = ChannelLayout.parse(buffer.channel_layout)
    bpp = layout.bytes_per_pixel
    width, height, stride = buffer.width, buffer.height, buffer.row_stride
    for name, value in (("width", width), ("height", height), ("row_stride", stride)):
        if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
            raise InvalidDimensions(f"Frame {name} must be an integer, got {value!r}")

    if width <= 0 or height <= 0:
        raise InvalidDimensions(f"Empty frame: {width}x{height}")
    if stride < width * bpp:
        raise InvalidDimensions(
            f"Row stride {stride} shorter than {width} px * {bpp} B"
        )

    try:
        flat = np.frombuffer(buffer.data, dtype=np.uint8)
    except (TypeError, ValueError) as e:
        raise UnsupportedFormat(f"Frame data is not a byte buffer: {e}") from e
    if flat.size < stride * height:
        raise InvalidDimensions(
            f"Frame data has {flat.size} bytes, need {stride * height} "
            f"({height} rows * stride {stride})"
        )

    channels = np.lib.stride_tricks.as_strided(
        flat,
        shape=(height, width, bpp),
        strides=(stride, bpp, 1),
        writeable=False,
    )
    return PixelView(channels, layout)

from dataclasses import dataclass
from enum import Enum
from typing import Any

import numpy as np

from colorbar.core.errors import UnsupportedFormat


class ChannelLayout(Enum):
    GRAY8 = "gray8"
    BGR24 = "bgr24"
    BGRA32 = "bgra32"

    @property
    def bytes_per_pixel(self) -> int:
        return _BYTES_PER_PIXEL[self]

    @classmethod
    def parse(cls, value: Any) -> "ChannelLayout":
        """Accept a ChannelLayout or its name/value (case-insensitive)."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip().lower()
            for layout in cls:
                if key in (layout.value, layout.name.lower()):
                    return layout
        raise UnsupportedFormat(f"Unsupported channel layout: {value!r}")


_BYTES_PER_PIXEL = {
    ChannelLayout.GRAY8: 1,
    ChannelLayout.BGR24: 3,
    ChannelLayout.BGRA32: 4,
}

_LAYOUT_BY_CHANNELS = {
    1: ChannelLayout.GRAY8,
    3: ChannelLayout.BGR24,
    4: ChannelLayout.BGRA32,
}


@dataclass(frozen=True)
class PixelBuffer:
    """Read-only description of a packed 8-bit frame owned by the caller.

    ``channel_layout`` is normally a ChannelLayout, but frame sources may hand
    over anything; the pixel adapter is the one that rejects unknown layouts.
    """

    width: int
    height: int
    row_stride: int
    channel_layout: Any
    data: Any

    @classmethod
    def from_array(cls, frame: np.ndarray) -> "PixelBuffer":
        """Wrap an HxW, HxWx3 (BGR) or HxWx4 (BGRA) uint8 array.

        Arrays with packed pixels share memory with the buffer, including
        row-padded crops of a larger frame, as long as the last row's padding
        lies inside the parent array. Anything else is copied first.
        """
        if frame.dtype != np.uint8:
            raise UnsupportedFormat(f"Expected uint8 frame, got {frame.dtype}")
        if frame.ndim == 2:
            channels = 1
        elif frame.ndim == 3:
            channels = frame.shape[2]
        else:
            raise UnsupportedFormat(f"Expected 2-D or 3-D frame, got shape {frame.shape}")
        layout = _LAYOUT_BY_CHANNELS.get(channels)
        if layout is None:
            raise UnsupportedFormat(f"Unsupported channel count: {channels}")

        height, width = frame.shape[:2]
        data = _padded_rows(frame, channels)
        if data is None:
            frame = np.ascontiguousarray(frame)
            data = frame.reshape(-1)
        return cls(
            width=width,
            height=height,
            row_stride=frame.strides[0],
            channel_layout=layout,
            data=data,
        )


def _padded_rows(frame: np.ndarray, channels: int):
    """Flat byte view of ``height * row_stride`` bytes starting at ``frame``, or None.

    Only possible when pixels are packed within a row and the span stays
    inside the memory of the array that owns it.
    """
    if frame.flags.c_contiguous:
        return frame.reshape(-1)
    height, width = frame.shape[:2]
    stride = frame.strides[0]
    if frame.strides[1] != channels or (frame.ndim == 3 and frame.strides[2] != 1):
        return None
    if height == 0 or stride < width * channels:
        return None

    root = frame
    while isinstance(root.base, np.ndarray):
        root = root.base
    if not root.flags.c_contiguous:
        return None
    start = frame.__array_interface__["data"][0]
    root_start = root.__array_interface__["data"][0]
    if start + stride * height > root_start + root.nbytes:
        return None
    return np.lib.stride_tricks.as_strided(
        frame, shape=(stride * height,), strides=(1,), writeable=False
    )

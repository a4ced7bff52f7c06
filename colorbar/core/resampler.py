import logging

import numpy as np

from colorbar.core.errors import InvalidBlockSize, InvalidDimensions
from colorbar.core.pixel_adapter import PixelView
from colorbar.models.pixel_buffer import ChannelLayout

logger = logging.getLogger(__name__)

# BT.601 luma weights, in BGR memory order
LUMA_WEIGHTS_BGR = np.array([0.114, 0.587, 0.299], dtype=np.float64)


def _axis_taps(src_size: int, dst_size: int):
    """Neighbour indices and blend weights for one axis.

    Pixel centres are aligned: destination cell i samples source coordinate
    (i + 0.5) * src / dst - 0.5, clamped to the image.
    """
    pos = (np.arange(dst_size, dtype=np.float64) + 0.5) * (src_size / dst_size) - 0.5
    pos = np.clip(pos, 0.0, src_size - 1)
    lo = np.floor(pos).astype(np.intp)
    hi = np.minimum(lo + 1, src_size - 1)
    frac = pos - lo
    return lo, hi, frac


class Resampler:
    """Bilinear downsampler from any frame to an N x N luma grid in [0, 1]."""

    def __init__(self, grid_size: int = 32):
        if grid_size < 1:
            raise InvalidBlockSize(f"Grid size must be positive, got {grid_size}")
        self.grid_size = grid_size

    def _luma(self, pixels: np.ndarray, layout: ChannelLayout) -> np.ndarray:
        if layout is ChannelLayout.GRAY8:
            return pixels[..., 0].astype(np.float64)
        return pixels[..., :3].astype(np.float64) @ LUMA_WEIGHTS_BGR

    def resample(self, view: PixelView) -> np.ndarray:
        """Return a fresh grid_size x grid_size float64 array."""
        width, height = view.width, view.height
        if width == 0 or height == 0:
            raise InvalidDimensions(f"Cannot resample empty frame {width}x{height}")

        n = self.grid_size
        x0, x1, fx = _axis_taps(width, n)
        y0, y1, fy = _axis_taps(height, n)

        src = view.channels
        # Fancy indexing gathers only the 4 * N * N taps we need
        top_left = self._luma(src[y0[:, None], x0[None, :]], view.layout)
        top_right = self._luma(src[y0[:, None], x1[None, :]], view.layout)
        bottom_left = self._luma(src[y1[:, None], x0[None, :]], view.layout)
        bottom_right = self._luma(src[y1[:, None], x1[None, :]], view.layout)

        wx = fx[None, :]
        wy = fy[:, None]
        top = top_left * (1.0 - wx) + top_right * wx
        bottom = bottom_left * (1.0 - wx) + bottom_right * wx
        grid = (top * (1.0 - wy) + bottom * wy) / 255.0

        # Rounding in the weighted sums can overshoot by an ulp
        np.clip(grid, 0.0, 1.0, out=grid)
        logger.debug("Resampled %dx%d %s frame to %dx%d grid",
                     width, height, view.layout.value, n, n)
        return grid

import logging

import numpy as np

from colorbar.core.dct import DCT2D
from colorbar.core.errors import InvalidBlockSize, InvalidDimensions
from colorbar.core.pixel_adapter import PixelView, adapt
from colorbar.core.resampler import Resampler
from colorbar.models.fingerprint import Fingerprint
from colorbar.models.pixel_buffer import PixelBuffer

logger = logging.getLogger(__name__)

MAX_FINGERPRINT_BITS = 64


class FingerprintExtractor:
    """DCT perceptual hash: resample -> 2-D DCT -> low-frequency block -> bits.

    Policy (fixed for every call, reference and probe alike):
      * the DC coefficient is zeroed by the transform before the mean is taken,
        so the block mean covers all M * M values with DC counted as 0;
      * bit = 1 where coefficient > block mean;
      * the block is traversed row-major, first coefficient in the most
        significant bit.
    """

    def __init__(self, block_size: int = 8, grid_size: int = 32):
        if block_size < 1 or block_size * block_size > MAX_FINGERPRINT_BITS:
            raise InvalidBlockSize(
                f"Block size {block_size} gives {block_size * block_size} bits, "
                f"must be 1..{MAX_FINGERPRINT_BITS}"
            )
        if block_size > grid_size:
            raise InvalidBlockSize(
                f"Block size {block_size} larger than grid size {grid_size}"
            )
        self.block_size = block_size
        self.grid_size = grid_size
        self.resampler = Resampler(grid_size)
        self.transform = DCT2D(grid_size)

    @property
    def width(self) -> int:
        return self.block_size * self.block_size

    def extract(self, spectrum: np.ndarray) -> Fingerprint:
        """Turn an N x N spectrum into a fingerprint."""
        m = self.block_size
        if spectrum.shape != (self.grid_size, self.grid_size):
            raise InvalidDimensions(
                f"Expected {self.grid_size}x{self.grid_size} spectrum, got {spectrum.shape}"
            )
        block = spectrum[:m, :m].ravel()
        mean = block.mean()

        bits = 0
        for above in block > mean:
            bits = (bits << 1) | int(above)
        return Fingerprint(bits=bits, block_size=m, grid_size=self.grid_size)

    def fingerprint_view(self, view: PixelView) -> Fingerprint:
        grid = self.resampler.resample(view)
        spectrum = self.transform.forward(grid)
        return self.extract(spectrum)

    def fingerprint(self, buffer: PixelBuffer) -> Fingerprint:
        """Full chain for one frame. Scratch grids live only for this call."""
        return self.fingerprint_view(adapt(buffer))

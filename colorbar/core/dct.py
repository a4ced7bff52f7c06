import logging
import math

import numpy as np

from colorbar.core.errors import InvalidBlockSize, InvalidDimensions

logger = logging.getLogger(__name__)

# Coefficients smaller than this are rounding noise from a flat input
FLUSH_EPSILON = 1e-9


def dct_basis(size: int) -> np.ndarray:
    """Orthonormal DCT-II matrix C with C[k, n] = a(k) * cos(pi * (2n + 1) * k / 2N)."""
    n = np.arange(size, dtype=np.float64)
    k = n[:, None]
    basis = np.cos(math.pi * (2.0 * n[None, :] + 1.0) * k / (2.0 * size))
    basis[0, :] *= math.sqrt(1.0 / size)
    basis[1:, :] *= math.sqrt(2.0 / size)
    return basis


class DCT2D:
    """Separable 2-D DCT-II for a fixed N x N grid.

    The cosine basis is computed once and shared read-only, so one instance
    can serve concurrent callers. The DC term is always zeroed in the output.
    """

    def __init__(self, size: int = 32):
        if size < 1:
            raise InvalidBlockSize(f"Transform size must be positive, got {size}")
        self.size = size
        self._basis = dct_basis(size)
        self._basis.flags.writeable = False

    def _rows(self, grid: np.ndarray) -> np.ndarray:
        # 1-D DCT of every row: X[r, k] = sum_n x[r, n] * C[k, n]
        return grid @ self._basis.T

    def forward(self, grid: np.ndarray) -> np.ndarray:
        """Return the spectrum of ``grid`` with DC zeroed and noise flushed."""
        if grid.shape != (self.size, self.size):
            raise InvalidDimensions(
                f"Expected {self.size}x{self.size} grid, got {grid.shape}"
            )
        grid = np.asarray(grid, dtype=np.float64)
        spectrum = self._rows(self._rows(grid).T).T
        spectrum[0, 0] = 0.0
        spectrum[np.abs(spectrum) < FLUSH_EPSILON] = 0.0
        return spectrum

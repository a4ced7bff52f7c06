from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class Fingerprint:
    """Perceptual hash of one image.

    ``bits`` holds ``block_size ** 2`` bits, first coefficient of the block in
    the most significant position. Only fingerprints with the same
    ``block_size`` and ``grid_size`` can be compared.
    """

    bits: int
    block_size: int
    grid_size: int

    @property
    def width(self) -> int:
        return self.block_size * self.block_size

    def compatible_with(self, other: "Fingerprint") -> bool:
        return self.block_size == other.block_size and self.grid_size == other.grid_size

    def bit_array(self) -> np.ndarray:
        """Bits as a uint8 array in traversal order."""
        width = self.width
        return np.array(
            [(self.bits >> (width - 1 - i)) & 1 for i in range(width)],
            dtype=np.uint8,
        )

    def to_hex(self) -> str:
        digits = (self.width + 3) // 4
        return f"{self.bits:0{digits}x}"

    @classmethod
    def from_hex(cls, text: str, block_size: int = 8, grid_size: int = 32) -> "Fingerprint":
        bits = int(text, 16)
        if bits >> (block_size * block_size):
            raise ValueError(f"Hash {text!r} is wider than {block_size * block_size} bits")
        return cls(bits=bits, block_size=block_size, grid_size=grid_size)

    def __str__(self) -> str:
        return self.to_hex()


@dataclass(frozen=True)
class ReferenceEntry:
    fingerprint: Fingerprint
    source_path: str
    match_threshold: int

from colorbar.core.errors import IncompatibleFingerprints, InvalidThreshold
from colorbar.models.fingerprint import Fingerprint


def hamming_distance(a: Fingerprint, b: Fingerprint) -> int:
    """Number of differing bits between two comparable fingerprints."""
    if not a.compatible_with(b):
        raise IncompatibleFingerprints(
            f"Cannot compare {a.block_size}x{a.block_size}/grid {a.grid_size} "
            f"with {b.block_size}x{b.block_size}/grid {b.grid_size}"
        )
    return (a.bits ^ b.bits).bit_count()


def is_match(distance: int, threshold: int) -> bool:
    return distance <= threshold


def validate_threshold(threshold, width: int = 64) -> int:
    """Return ``threshold`` if it is an integer in [0, width], else raise InvalidThreshold."""
    if isinstance(threshold, bool) or not isinstance(threshold, int):
        raise InvalidThreshold(f"Threshold must be an integer, got {threshold!r}")
    if not 0 <= threshold <= width:
        raise InvalidThreshold(f"Threshold {threshold} outside [0, {width}]")
    return threshold

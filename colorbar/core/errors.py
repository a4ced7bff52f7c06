class ColorbarError(Exception):
    """Base class for all detector errors."""


class UnsupportedFormat(ColorbarError):
    """Pixel layout is not one of GRAY8, BGR24, BGRA32."""


class InvalidDimensions(ColorbarError):
    """Zero-sized source, short stride or short data buffer."""


class InvalidBlockSize(ColorbarError):
    """Coefficient block does not fit the grid or the 64-bit fingerprint."""


class InvalidThreshold(ColorbarError):
    """Match threshold outside [0, fingerprint width]."""


class ReferenceLoadError(ColorbarError):
    """Reference image is missing, unreadable or in an unsupported format."""


class ConfigError(ColorbarError):
    """Required option missing or malformed configuration."""


class IncompatibleFingerprints(ColorbarError, ValueError):
    """Fingerprints built with different grid or block sizes were compared."""


class FrameSourceError(ColorbarError):
    """Frame source could not be opened."""

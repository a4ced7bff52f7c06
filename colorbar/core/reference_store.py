import logging
from typing import Callable

from colorbar.core.distance import validate_threshold
from colorbar.core.errors import (
    ConfigError,
    InvalidDimensions,
    ReferenceLoadError,
    UnsupportedFormat,
)
from colorbar.core.fingerprint import FingerprintExtractor
from colorbar.models.app_settings import AppSettings
from colorbar.models.fingerprint import Fingerprint, ReferenceEntry
from colorbar.models.pixel_buffer import PixelBuffer
from colorbar.utils.image_loader import load_image

logger = logging.getLogger(__name__)


class ReferenceStore:
    """Holds the reference fingerprint built once at startup.

    There is no setter: after construction the store is only read, so one
    instance can be shared by classifiers on several threads.
    """

    def __init__(self, entry: ReferenceEntry):
        self._entry = entry

    @property
    def entry(self) -> ReferenceEntry:
        return self._entry

    @property
    def fingerprint(self) -> Fingerprint:
        return self._entry.fingerprint

    @property
    def threshold(self) -> int:
        return self._entry.match_threshold

    @classmethod
    def from_settings(
        cls,
        settings: AppSettings,
        extractor: FingerprintExtractor,
        loader: Callable[[str], PixelBuffer] = load_image,
    ) -> "ReferenceStore":
        """Load the configured reference image and fingerprint it.

        Raises:
            ConfigError: ``file`` or ``threshold`` not configured
            InvalidThreshold: threshold outside [0, fingerprint width]
            ReferenceLoadError: the image could not be loaded or fingerprinted
        """
        if not settings.reference_file:
            raise ConfigError("Option 'file' (reference image path) is required")
        if settings.threshold is None:
            raise ConfigError("Option 'threshold' is required")
        threshold = validate_threshold(settings.threshold, extractor.width)

        path = str(settings.reference_file)
        buffer = loader(path)
        try:
            fingerprint = extractor.fingerprint(buffer)
        except (UnsupportedFormat, InvalidDimensions) as e:
            raise ReferenceLoadError(f"Cannot fingerprint reference {path}: {e}") from e

        logger.info("Reference %s -> %s (threshold=%d/%d)",
                    path, fingerprint.to_hex(), threshold, fingerprint.width)
        return cls(ReferenceEntry(
            fingerprint=fingerprint,
            source_path=path,
            match_threshold=threshold,
        ))

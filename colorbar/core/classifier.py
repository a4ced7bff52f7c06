import logging

from colorbar.core.distance import hamming_distance, is_match
from colorbar.core.errors import InvalidDimensions, UnsupportedFormat
from colorbar.core.fingerprint import FingerprintExtractor
from colorbar.core.reference_store import ReferenceStore
from colorbar.core.smoother import MatchSmoother
from colorbar.models.classification import ClassificationResult
from colorbar.models.pixel_buffer import PixelBuffer

logger = logging.getLogger(__name__)


class FrameClassifier:
    """Fingerprints each frame and compares it with the reference.

    ``classify`` is a pure function of the frame and the reference apart from
    the smoother, which only sees the per-frame match decisions. Use one
    classifier per stream when ``confirm_frames`` > 1.
    """

    def __init__(
        self,
        store: ReferenceStore,
        extractor: FingerprintExtractor,
        confirm_frames: int = 1,
    ):
        self.store = store
        self.extractor = extractor
        self.smoother = MatchSmoother(confirm_frames)
        self._frames = 0
        self._errors = 0

    @property
    def frames_processed(self) -> int:
        return self._frames

    @property
    def frames_failed(self) -> int:
        return self._errors

    def classify(self, buffer: PixelBuffer) -> ClassificationResult:
        """Classify one frame.

        Raises:
            UnsupportedFormat: frame layout not GRAY8, BGR24 or BGRA32
            InvalidDimensions: empty or inconsistent frame geometry
        """
        probe = self.extractor.fingerprint(buffer)
        distance = hamming_distance(probe, self.store.fingerprint)
        matched = is_match(distance, self.store.threshold)
        confirmed = self.smoother.update(matched)
        logger.debug("Frame %s: distance=%d threshold=%d match=%s confirmed=%s",
                     probe.to_hex(), distance, self.store.threshold, matched, confirmed)
        return ClassificationResult(distance=distance, is_match=matched, confirmed=confirmed)

    def process(self, buffer: PixelBuffer) -> ClassificationResult:
        """Classify one frame, turning per-frame errors into a no-match result."""
        self._frames += 1
        try:
            return self.classify(buffer)
        except (UnsupportedFormat, InvalidDimensions) as e:
            self._errors += 1
            logger.warning("Frame %d not classified: %s", self._frames, e)
            self.smoother.update(False)
            return ClassificationResult.unclassified(f"{type(e).__name__}: {e}")

    def reset(self) -> None:
        self.smoother.reset()

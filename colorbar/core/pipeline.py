import logging
import threading
import time
import traceback
from typing import Callable, Optional

from colorbar.core.classifier import FrameClassifier
from colorbar.core.frame_source import FrameSource
from colorbar.models.app_settings import AppSettings, SourceType
from colorbar.models.classification import ClassificationResult

logger = logging.getLogger(__name__)

ResultCallback = Callable[[int, ClassificationResult], None]
EventCallback = Callable[[int], None]


class DetectionPipeline:
    """Runs grab -> classify on frames from a FrameSource.

    ``start`` runs the loop on a daemon thread; ``run_blocking`` runs it on
    the calling thread. Callbacks receive the frame index: ``on_result`` for
    every frame, ``on_match`` when a confirmed match begins and ``on_clear``
    when it ends.
    """

    def __init__(
        self,
        settings: AppSettings,
        classifier: FrameClassifier,
        source: Optional[FrameSource] = None,
        on_result: Optional[ResultCallback] = None,
        on_match: Optional[EventCallback] = None,
        on_clear: Optional[EventCallback] = None,
    ):
        self.settings = settings
        self.classifier = classifier
        self.source = source or FrameSource()
        self.on_result = on_result
        self.on_match = on_match
        self.on_clear = on_clear

        self._running = False
        self._thread: threading.Thread | None = None
        self._frame_index = 0
        self._null_frame_count = 0
        self._matched = False
        self._match_count = 0

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def frames_seen(self) -> int:
        return self._frame_index

    @property
    def matches_confirmed(self) -> int:
        return self._match_count

    def _open_source(self) -> None:
        if not self.source.is_started:
            self.source.start(
                source=self.settings.source,
                source_type=self.settings.source_type,
                monitor=self.settings.monitor,
            )

    def start(self) -> None:
        """Start the pipeline on a background thread."""
        if self._running:
            return
        self._open_source()
        self._reset_counters()
        self._running = True
        self._thread = threading.Thread(target=self._loop, daemon=True, name="pipeline")
        self._thread.start()
        logger.info("Pipeline started (source=%s, type=%s, interval=%dms)",
                    self.settings.source, self.settings.source_type.value,
                    self.settings.update_interval_ms)

    def stop(self) -> None:
        """Stop the pipeline (non-blocking)."""
        if not self._running:
            return
        self._running = False
        logger.info("Pipeline stopped")

    def shutdown(self) -> None:
        """Full cleanup."""
        self.stop()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=3.0)
        self.source.stop()

    def run_blocking(self, max_frames: Optional[int] = None) -> int:
        """Process frames on the calling thread until the source ends.

        Returns the number of frames processed.
        """
        self._open_source()
        self._reset_counters()
        self._running = True
        try:
            while self._running:
                if max_frames is not None and self._frame_index >= max_frames:
                    break
                self._paced_cycle()
        finally:
            self._running = False
            self.source.stop()
        logger.info("Processed %d frames, %d confirmed match(es)",
                    self._frame_index, self._match_count)
        return self._frame_index

    def _reset_counters(self) -> None:
        self._frame_index = 0
        self._null_frame_count = 0
        self._matched = False
        self._match_count = 0
        self.classifier.reset()

    def _loop(self) -> None:
        """Background thread loop: cycle + sleep."""
        logger.info("Pipeline thread started")
        while self._running:
            self._paced_cycle()
        # mss contexts are thread-local, release them on this thread
        self.source.stop()
        logger.info("Pipeline thread exited")

    def _paced_cycle(self) -> None:
        t0 = time.monotonic()
        try:
            self._run_cycle()
        except Exception as e:
            logger.error("Pipeline cycle error: %s\n%s", e, traceback.format_exc())

        interval_ms = self.settings.update_interval_ms
        if interval_ms > 0 and self._running:
            elapsed_ms = (time.monotonic() - t0) * 1000
            sleep_ms = max(0.0, interval_ms - elapsed_ms)
            time.sleep(sleep_ms / 1000)

    def _run_cycle(self) -> None:
        """Grab one frame, classify it and fire callbacks."""
        frame = self.source.grab()

        if frame is None:
            self._null_frame_count += 1
            if self.source.source_type == SourceType.VIDEO:
                logger.info("End of video stream after %d frames", self._frame_index)
                self._running = False
            elif self._null_frame_count <= 3 or self._null_frame_count % 20 == 0:
                logger.warning("Capture returned None (count=%d)", self._null_frame_count)
            return

        if self._null_frame_count > 0:
            logger.info("Capture recovered after %d null frames", self._null_frame_count)
        self._null_frame_count = 0

        index = self._frame_index
        self._frame_index += 1
        result = self.classifier.process(frame)

        log_every = max(1, self.settings.log_every)
        if result.classified and index % log_every == 0:
            logger.info("Frame %d: distance=%d match=%s confirmed=%s",
                        index, result.distance, result.is_match, result.confirmed)

        if self.on_result:
            self.on_result(index, result)

        if result.confirmed and not self._matched:
            self._matched = True
            self._match_count += 1
            if self.on_match:
                self.on_match(index)
        elif self._matched and not result.confirmed:
            self._matched = False
            if self.on_clear:
                self.on_clear(index)

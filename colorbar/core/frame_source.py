import logging
import threading
from typing import Optional, Union

import cv2
import mss
from mss.exception import ScreenShotError
import numpy as np

from colorbar.core.errors import FrameSourceError
from colorbar.models.app_settings import SourceType
from colorbar.models.pixel_buffer import ChannelLayout, PixelBuffer

logger = logging.getLogger(__name__)


class FrameSource:
    """Delivers frames as PixelBuffers from a video/camera (OpenCV) or the screen (mss).

    mss device contexts are thread-local, so the mss instance is created
    lazily by the first grab() on the capturing thread.
    """

    def __init__(self):
        self._capture: Optional[cv2.VideoCapture] = None
        self._source_type = SourceType.VIDEO
        self._monitor = 0
        self._started = False
        self._local = threading.local()

    @property
    def source_type(self) -> SourceType:
        return self._source_type

    @property
    def is_started(self) -> bool:
        return self._started

    def start(
        self,
        source: Union[str, int, None] = None,
        source_type: SourceType = SourceType.VIDEO,
        monitor: int = 0,
    ) -> None:
        """Open the source. A digit string or int selects a camera index."""
        self._source_type = source_type
        self._monitor = monitor

        if source_type == SourceType.SCREEN:
            # mss must be created on the grab() thread
            self._started = True
            logger.info("Screen capture configured for monitor %d (init deferred to grab thread)", monitor)
            return

        if source is None or source == "":
            raise FrameSourceError("No video source given")
        target = int(source) if isinstance(source, str) and source.isdigit() else source
        capture = cv2.VideoCapture(target)
        if not capture.isOpened():
            capture.release()
            raise FrameSourceError(f"Cannot open video source: {source!r}")
        self._capture = capture
        self._started = True
        logger.info("Video source opened: %s (%.0fx%.0f @ %.2f fps)", source,
                    capture.get(cv2.CAP_PROP_FRAME_WIDTH),
                    capture.get(cv2.CAP_PROP_FRAME_HEIGHT),
                    capture.get(cv2.CAP_PROP_FPS))

    def stop(self) -> None:
        """Release capture resources."""
        if self._capture is not None:
            self._capture.release()
            self._capture = None
        mss_inst = getattr(self._local, "mss_instance", None)
        if mss_inst is not None:
            mss_inst.close()
            self._local.mss_instance = None
        self._started = False

    def _get_mss(self):
        """Get or create a thread-local mss instance."""
        inst = getattr(self._local, "mss_instance", None)
        if inst is None:
            inst = mss.mss()
            self._local.mss_instance = inst
            logger.info("mss instance created on thread %s", threading.current_thread().name)
        return inst

    def grab(self) -> Optional[PixelBuffer]:
        """Next frame, or None at end of stream / on capture failure."""
        if not self._started:
            logger.error("Frame source not started")
            return None

        if self._source_type == SourceType.SCREEN:
            return self._grab_screen()
        return self._grab_video()

    def _grab_video(self) -> Optional[PixelBuffer]:
        ok, frame = self._capture.read()
        if not ok or frame is None:
            return None
        return PixelBuffer.from_array(frame)

    def _grab_screen(self) -> Optional[PixelBuffer]:
        sct = self._get_mss()
        monitors = sct.monitors
        idx = min(self._monitor + 1, len(monitors) - 1)  # mss monitors[0] is "all"
        try:
            shot = sct.grab(monitors[idx])
        except ScreenShotError as e:
            logger.error("Screen capture failed: %s", e)
            return None
        # mss hands out BGRA rows, packed
        return PixelBuffer(
            width=shot.width,
            height=shot.height,
            row_stride=shot.width * 4,
            channel_layout=ChannelLayout.BGRA32,
            data=np.frombuffer(shot.raw, dtype=np.uint8),
        )

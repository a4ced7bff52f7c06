import logging
import os

import cv2
import numpy as np

from colorbar.core.errors import ReferenceLoadError, UnsupportedFormat
from colorbar.models.pixel_buffer import PixelBuffer

logger = logging.getLogger(__name__)


def load_image(path: str) -> PixelBuffer:
    """Decode an image file into a GRAY8, BGR24 or BGRA32 PixelBuffer.

    16-bit images are reduced to 8 bits. Raises ReferenceLoadError for a
    missing, unreadable or undecodable file and for unsupported pixel types.
    """
    if not path or not os.path.isfile(path):
        raise ReferenceLoadError(f"Reference image not found: {path!r}")

    try:
        # fromfile + imdecode instead of imread so non-ASCII paths work everywhere
        raw = np.fromfile(path, dtype=np.uint8)
    except OSError as e:
        raise ReferenceLoadError(f"Cannot read {path}: {e}") from e
    if raw.size == 0:
        raise ReferenceLoadError(f"Reference image is empty: {path}")

    image = cv2.imdecode(raw, cv2.IMREAD_UNCHANGED)
    if image is None:
        raise ReferenceLoadError(f"Cannot decode image: {path}")

    if image.dtype == np.uint16:
        image = (image >> 8).astype(np.uint8)
    elif image.dtype != np.uint8:
        raise ReferenceLoadError(f"Unsupported pixel type {image.dtype} in {path}")

    try:
        buffer = PixelBuffer.from_array(image)
    except UnsupportedFormat as e:
        raise ReferenceLoadError(f"Unsupported image layout in {path}: {e}") from e

    logger.info("Loaded %s (%dx%d, %s)", path, buffer.width, buffer.height,
                buffer.channel_layout.value)
    return buffer

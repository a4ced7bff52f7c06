"""Colorbar Detector entry point.

Watches a video file, camera or screen for frames matching a reference image
(colour bars, a slate) using a DCT perceptual hash.
"""
import argparse
import logging
import sys
from typing import Optional, Sequence

from colorbar.core.classifier import FrameClassifier
from colorbar.core.errors import ColorbarError, ReferenceLoadError
from colorbar.core.fingerprint import FingerprintExtractor
from colorbar.core.pipeline import DetectionPipeline
from colorbar.core.reference_store import ReferenceStore
from colorbar.models.app_settings import AppSettings, SourceType
from colorbar.utils.config_manager import DEFAULT_CONFIG_PATH, ConfigManager
from colorbar.utils.image_loader import load_image

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_RUNTIME_ERROR = 1
EXIT_CONFIG_ERROR = 2


def setup_logging(debug: bool = False):
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="colorbar",
        description="Detect frames matching a reference image by perceptual hash.",
    )
    parser.add_argument("--config", default=DEFAULT_CONFIG_PATH,
                        help="YAML config file (default: %(default)s)")
    parser.add_argument("--debug", action="store_true", help="Log every frame")
    parser.add_argument("--grid-size", type=int, dest="grid_size")
    parser.add_argument("--block-size", type=int, dest="block_size")
    sub = parser.add_subparsers(dest="command")

    detect = sub.add_parser("detect", help="Classify frames from a video, camera or screen")
    detect.add_argument("--file", help="Reference image path")
    detect.add_argument("--threshold", type=int, help="Max Hamming distance for a match (0-64)")
    detect.add_argument("--confirm-frames", type=int, dest="confirm_frames",
                        help="Consecutive matching frames before a match is confirmed")
    detect.add_argument("--source", help="Video file, stream URL or camera index")
    detect.add_argument("--screen", action="store_const", const=SourceType.SCREEN,
                        dest="source_type", help="Capture the screen instead of a video")
    detect.add_argument("--monitor", type=int)
    detect.add_argument("--interval-ms", type=int, dest="update_interval_ms")
    detect.add_argument("--log-every", type=int, dest="log_every")
    detect.add_argument("--max-frames", type=int, help="Stop after this many frames")

    hash_cmd = sub.add_parser("hash", help="Print the fingerprint of image files")
    hash_cmd.add_argument("images", nargs="+")
    return parser


def load_settings(args: argparse.Namespace) -> AppSettings:
    settings = ConfigManager(args.config).load()
    overrides = {
        key: getattr(args, key, None)
        for key in ("file", "threshold", "confirm_frames", "source", "source_type",
                    "monitor", "update_interval_ms", "log_every", "grid_size", "block_size")
    }
    return settings.override(**overrides)


def run_detect(settings: AppSettings, max_frames: Optional[int]) -> int:
    try:
        extractor = FingerprintExtractor(settings.block_size, settings.grid_size)
        store = ReferenceStore.from_settings(settings, extractor)
        classifier = FrameClassifier(store, extractor, settings.confirm_frames)
    except ColorbarError as e:
        logger.error("Initialization failed: %s", e)
        return EXIT_CONFIG_ERROR

    pipeline = DetectionPipeline(
        settings,
        classifier,
        on_match=lambda index: logger.info("MATCH START at frame %d", index),
        on_clear=lambda index: logger.info("MATCH END at frame %d", index),
    )
    try:
        pipeline.run_blocking(max_frames=max_frames)
    except ColorbarError as e:
        logger.error("Detection failed: %s", e)
        return EXIT_RUNTIME_ERROR
    except KeyboardInterrupt:
        logger.info("Interrupted after %d frames", pipeline.frames_seen)
    return EXIT_OK


def run_hash(settings: AppSettings, images: Sequence[str]) -> int:
    try:
        extractor = FingerprintExtractor(settings.block_size, settings.grid_size)
    except ColorbarError as e:
        logger.error("Initialization failed: %s", e)
        return EXIT_CONFIG_ERROR

    status = EXIT_OK
    for path in images:
        try:
            fingerprint = extractor.fingerprint(load_image(path))
        except ReferenceLoadError as e:
            logger.error("%s", e)
            status = EXIT_RUNTIME_ERROR
            continue
        print(f"{fingerprint.to_hex()}  {path}")
    return status


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.debug)
    logger.info("Starting Colorbar Detector...")

    try:
        settings = load_settings(args)
    except ColorbarError as e:
        logger.error("Configuration error: %s", e)
        return EXIT_CONFIG_ERROR

    if args.command == "hash":
        return run_hash(settings, args.images)
    return run_detect(settings, getattr(args, "max_frames", None))


if __name__ == "__main__":
    sys.exit(main())

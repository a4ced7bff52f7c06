import cv2
import numpy as np
import pytest

from colorbar.core.fingerprint import FingerprintExtractor
from colorbar.core.reference_store import ReferenceStore
from colorbar.models.app_settings import AppSettings


def smooth_image(seed: int, width: int = 320, height: int = 240) -> np.ndarray:
    """Random low-frequency BGR image: a 6x6 colour lattice upscaled bicubically."""
    rng = np.random.default_rng(seed)
    lattice = rng.integers(0, 256, size=(6, 6, 3), dtype=np.uint8)
    return cv2.resize(lattice, (width, height), interpolation=cv2.INTER_CUBIC)


def add_noise(image: np.ndarray, seed: int, amplitude: int = 2) -> np.ndarray:
    """Add uniform integer noise in [-amplitude, amplitude] per sample."""
    rng = np.random.default_rng(seed)
    noise = rng.integers(-amplitude, amplitude + 1, size=image.shape)
    return np.clip(image.astype(np.int16) + noise, 0, 255).astype(np.uint8)


def solid_image(bgr=(40, 200, 90), width: int = 320, height: int = 240) -> np.ndarray:
    image = np.empty((height, width, 3), dtype=np.uint8)
    image[:, :] = bgr
    return image


@pytest.fixture
def reference_image() -> np.ndarray:
    return smooth_image(seed=1)


@pytest.fixture
def reference_path(tmp_path, reference_image) -> str:
    path = tmp_path / "reference.png"
    assert cv2.imwrite(str(path), reference_image)
    return str(path)


@pytest.fixture
def extractor() -> FingerprintExtractor:
    return FingerprintExtractor(block_size=8, grid_size=32)


@pytest.fixture
def settings(reference_path) -> AppSettings:
    return AppSettings(reference_file=reference_path, threshold=10)


@pytest.fixture
def store(settings, extractor) -> ReferenceStore:
    return ReferenceStore.from_settings(settings, extractor)

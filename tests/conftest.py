import tempfile
from pathlib import Path

import numpy as np
import pytest
from PIL import Image

from imageaugmentor.services.augmentation.buffer import PixelBuffer


def gradient_array(height: int, width: int) -> np.ndarray:
    """(height, width, 3) array where pixel (x, y) is [y % 256, x % 256, (x + y) % 256]."""
    ys, xs = np.mgrid[0:height, 0:width]
    return np.stack([ys % 256, xs % 256, (xs + ys) % 256], axis=-1).astype(np.uint8)


@pytest.fixture
def sample_rgb_buffer():
    """Create a 256x256 RGB buffer with a gradient pattern."""
    return PixelBuffer(gradient_array(256, 256))


@pytest.fixture
def sample_grayscale_buffer():
    """Create a 128x128 single channel buffer with random noise."""
    rng = np.random.default_rng(0)
    return PixelBuffer(rng.integers(0, 256, (128, 128), dtype=np.uint8))


@pytest.fixture
def noise_buffer():
    """Create a 64x64 RGB buffer of uniform noise."""
    rng = np.random.default_rng(1)
    return PixelBuffer(rng.integers(0, 256, (64, 64, 3), dtype=np.uint8))


@pytest.fixture
def source_images_dir():
    """Create a directory with two source images of different sizes and a file to be ignored."""
    with tempfile.TemporaryDirectory() as temp_dir:
        temp_path = Path(temp_dir)

        Image.fromarray(gradient_array(48, 64)).save(temp_path / "first.jpg", quality=95)
        Image.fromarray(gradient_array(32, 40)).save(temp_path / "second.png")
        (temp_path / "notes.txt").write_text("not an image")

        yield temp_path


@pytest.fixture
def output_dir():
    """Create a temporary output directory."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir) / "results"


# Test markers configuration
def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests that test individual components")
    config.addinivalue_line("markers", "integration: Integration tests that test component interactions")

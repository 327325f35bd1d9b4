"""Shared pytest fixtures for Atlasworks tests."""

import shutil
import tempfile
from pathlib import Path
from typing import Callable, Generator

import numpy as np
import pytest

from atlasworks.core.config import AtlasworksConfig
from atlasworks.core.raster import Raster

ATLAS_SIZE = 1024


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files.

    Yields:
        Path to temporary directory

    Cleanup:
        Directory is removed after test completes
    """
    temp_path = Path(tempfile.mkdtemp())
    try:
        yield temp_path
    finally:
        shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def test_config(temp_dir: Path) -> AtlasworksConfig:
    """Create a test configuration with default thresholds.

    Args:
        temp_dir: Temporary directory from fixture

    Returns:
        AtlasworksConfig instance for testing
    """
    return AtlasworksConfig(
        _env_file=None,
        outputs_dir=str(temp_dir / "outputs"),
    )


@pytest.fixture
def blank_atlas() -> Callable[..., np.ndarray]:
    """Factory for fully transparent pixel arrays.

    Returns:
        Function ``(size=1024, channels=4) -> np.ndarray``
    """

    def _make(size: int = ATLAS_SIZE, channels: int = 4) -> np.ndarray:
        return np.zeros((size, size, channels), dtype=np.uint8)

    return _make


@pytest.fixture
def paint_rect() -> Callable[..., np.ndarray]:
    """Factory that paints an opaque rectangle (inclusive corners).

    Returns:
        Function ``(pixels, x0, y0, x1, y1, color=(255, 0, 0, 255))``
    """

    def _paint(pixels, x0, y0, x1, y1, color=(255, 0, 0, 255)):
        pixels[y0 : y1 + 1, x0 : x1 + 1, :4] = color
        return pixels

    return _paint


@pytest.fixture
def paint_disc() -> Callable[..., np.ndarray]:
    """Factory that paints an opaque disc of all pixels within ``radius``.

    Returns:
        Function ``(pixels, cx, cy, radius, color=(0, 128, 255, 255))``
    """

    def _paint(pixels, cx, cy, radius, color=(0, 128, 255, 255)):
        height, width = pixels.shape[:2]
        ys, xs = np.ogrid[:height, :width]
        inside = (xs - cx) ** 2 + (ys - cy) ** 2 <= radius**2
        pixels[inside, :4] = color
        return pixels

    return _paint


@pytest.fixture
def fused_discs(blank_atlas, paint_disc, paint_rect) -> np.ndarray:
    """Two radius-100 discs in cells (0, 0) and (1, 0) joined by a 5x50 neck.

    Disc A is centred at (200, 170) and disc B at (451, 170); the neck covers
    columns 301-350 on rows 168-172 and crosses the cell boundary at x=341.
    """
    pixels = blank_atlas()
    paint_disc(pixels, 200, 170, 100, color=(200, 40, 40, 255))
    paint_disc(pixels, 451, 170, 100, color=(40, 200, 40, 255))
    paint_rect(pixels, 301, 168, 350, 172, color=(40, 40, 200, 255))
    return pixels


@pytest.fixture
def atlas_raster(blank_atlas) -> Raster:
    """A transparent 1024x1024 RGBA raster."""
    return Raster(blank_atlas())

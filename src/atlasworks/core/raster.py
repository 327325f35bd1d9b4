"""Raster model: decoding, encoding and probing of atlas images.

A :class:`Raster` is a thin wrapper around a ``uint8`` numpy array of shape
``(height, width, channels)``. Pillow does the PNG work; the engine only ever
sees raw pixel buffers.
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Union

import numpy as np
from PIL import Image

from .validation import RasterShapeError

logger = logging.getLogger(__name__)

RasterSource = Union[str, Path, bytes, Image.Image, np.ndarray]

# Pillow modes that map directly onto a raw channel layout
_CHANNEL_MODES = {1: "L", 2: "LA", 3: "RGB", 4: "RGBA"}


@dataclass
class Raster:
    """Row-major pixel buffer with shape ``(height, width, channels)``."""

    pixels: np.ndarray

    def __post_init__(self) -> None:
        if self.pixels.dtype != np.uint8:
            raise RasterShapeError(
                f"Raster pixels must be 8-bit (uint8), got {self.pixels.dtype}"
            )

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def channels(self) -> int:
        return int(self.pixels.shape[2]) if self.pixels.ndim == 3 else 1

    @property
    def alpha(self) -> np.ndarray:
        """View of the alpha channel (the fourth channel)."""
        return self.pixels[:, :, 3]

    @classmethod
    def blank(cls, width: int, height: int, channels: int = 4) -> "Raster":
        """Create a fully transparent raster."""
        return cls(np.zeros((height, width, channels), dtype=np.uint8))

    def copy(self) -> "Raster":
        return Raster(self.pixels.copy())

    def to_image(self) -> Image.Image:
        """Convert to a Pillow image (channels beyond RGBA are dropped)."""
        channels = min(self.channels, 4)
        data = self.pixels if self.pixels.ndim == 3 else self.pixels[:, :, None]
        data = np.ascontiguousarray(data[:, :, :channels])
        if channels == 1:
            data = data[:, :, 0]
        return Image.fromarray(data)

    def encode_png(self) -> bytes:
        """Encode the raster as PNG bytes."""
        buffer = io.BytesIO()
        self.to_image().save(buffer, format="PNG")
        return buffer.getvalue()

    def save(self, path: Path) -> Path:
        """Write the raster as a PNG file, creating parent directories."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        self.to_image().save(path, format="PNG")
        logger.info(f"Raster saved to: {path}")
        return path


def _open_image(source: RasterSource) -> Image.Image:
    if isinstance(source, Image.Image):
        return source
    if isinstance(source, (bytes, bytearray)):
        return Image.open(io.BytesIO(source))
    return Image.open(Path(source))


def load_raster(source: RasterSource) -> Raster:
    """Decode an image into a :class:`Raster` without forcing an alpha channel.

    Images that carry no alpha information keep their native channel count so
    that the engine can reject them; palette images with a transparency entry
    are expanded to RGBA.

    Args:
        source: File path, PNG bytes, Pillow image or a pixel array

    Returns:
        Decoded raster

    Raises:
        RasterShapeError: If a pixel array is not uint8
    """
    if isinstance(source, np.ndarray):
        pixels = source if source.ndim == 3 else source[:, :, None]
        return Raster(np.array(pixels, copy=True))

    image = _open_image(source)
    image.load()

    if image.mode == "P":
        image = image.convert("RGBA" if "transparency" in image.info else "RGB")
    elif image.mode == "PA":
        image = image.convert("RGBA")
    elif image.mode not in _CHANNEL_MODES.values():
        image = image.convert("RGBA" if "A" in image.getbands() else "RGB")

    pixels = np.asarray(image, dtype=np.uint8)
    if pixels.ndim == 2:
        pixels = pixels[:, :, None]

    logger.debug(f"Loaded raster {image.width}x{image.height} mode={image.mode}")
    return Raster(np.array(pixels, copy=True))


@dataclass(frozen=True)
class AtlasInfo:
    """Basic structure of an atlas image."""

    width: int
    height: int
    channels: int
    has_alpha: bool
    tile_size: float


def describe_atlas(source: RasterSource, grid_size: int = 3) -> AtlasInfo:
    """Report the dimensions, channels and nominal tile size of an atlas.

    Args:
        source: Anything :func:`load_raster` accepts, or a Raster
        grid_size: Number of cells along each axis

    Returns:
        AtlasInfo describing the image
    """
    raster = source if isinstance(source, Raster) else load_raster(source)
    return AtlasInfo(
        width=raster.width,
        height=raster.height,
        channels=raster.channels,
        has_alpha=raster.channels >= 4,
        tile_size=raster.width / grid_size,
    )

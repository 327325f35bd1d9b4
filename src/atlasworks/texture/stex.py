"""Godot stream-texture (GDST) codec for uncompressed textures.

A processed atlas ends up inside a pre-built game package as a ``.stex``
file. This module reads and writes the 20-byte header of that container and
converts images to the raw pixel layouts it stores.

File Layout
-----------
All fields are little-endian::

    offset  size  field
    0       4     magic "GDST"
    4       2     width
    6       2     width (secondary, 0 for uncompressed textures)
    8       2     height
    10      2     height (secondary, 0 for uncompressed textures)
    12      4     texture flags (TextureFlag)
    16      4     format: low byte = ImageFormat, upper bits = FeatureFlag
    20      ...   raw pixel data, row-major

Replacing a texture keeps the texture flags of the existing file and drops
its mipmap flag, because only the base level is written.
"""

from __future__ import annotations

import logging
import struct
from dataclasses import dataclass
from enum import IntEnum, IntFlag
from pathlib import Path
from typing import Optional, Union

import numpy as np
from PIL import Image

from atlasworks.core.raster import Raster

logger = logging.getLogger(__name__)

MAGIC = b"GDST"
HEADER_SIZE = 20
_HEADER = struct.Struct("<4sHHHHII")

ImageSource = Union[str, Path, Image.Image, Raster]


class TextureFormatError(ValueError):
    """Malformed texture header or unsupported pixel format."""

    pass


class ImageFormat(IntEnum):
    """Pixel formats, matching Godot's ``Image::Format`` enum."""

    L8 = 0x00
    LA8 = 0x01
    R8 = 0x02
    RG8 = 0x03
    RGB8 = 0x04
    RGBA8 = 0x05
    RGB565 = 0x06
    RGBA4444 = 0x07
    RGBA5551 = 0x08


class FeatureFlag(IntFlag):
    """Feature bits stored above the image format in the format field."""

    HAS_MIPMAPS = 0x00010000
    STREAM = 0x00020000
    DETECT_3D = 0x00040000
    DETECT_SRGB = 0x00080000
    DETECT_NORMAL = 0x00100000


class TextureFlag(IntFlag):
    """Sampling flags stored in the texture flags field."""

    MIPMAPS = 0x01
    REPEAT = 0x02
    FILTER = 0x04
    ANISOTROPIC_FILTER = 0x08
    CONVERT_TO_LINEAR = 0x10
    MIRRORED_REPEAT = 0x20
    VIDEO_SURFACE = 0x40


BYTES_PER_PIXEL = {
    ImageFormat.L8: 1,
    ImageFormat.LA8: 2,
    ImageFormat.R8: 1,
    ImageFormat.RG8: 2,
    ImageFormat.RGB8: 3,
    ImageFormat.RGBA8: 4,
    ImageFormat.RGB565: 2,
    ImageFormat.RGBA4444: 2,
    ImageFormat.RGBA5551: 2,
}


@dataclass(frozen=True)
class StexHeader:
    """Parsed GDST header."""

    width: int
    height: int
    texture_flags: int = 0
    image_format: int = ImageFormat.RGBA8
    feature_flags: int = 0
    width_b: int = 0
    height_b: int = 0

    @classmethod
    def parse(cls, buffer: bytes) -> "StexHeader":
        """Parse the header at the start of ``buffer``.

        Raises:
            TextureFormatError: If the buffer is too short or the magic is wrong
        """
        if len(buffer) < HEADER_SIZE:
            raise TextureFormatError("Invalid STEX file: too small")

        magic, width, width_b, height, height_b, texture_flags, fmt = _HEADER.unpack_from(buffer)
        if magic != MAGIC:
            raise TextureFormatError(
                f"Invalid STEX magic: expected 'GDST', got {magic.decode('ascii', 'replace')!r}"
            )

        return cls(
            width=width,
            height=height,
            texture_flags=texture_flags,
            image_format=fmt & 0xFF,
            feature_flags=fmt & 0xFFFFFF00,
            width_b=width_b,
            height_b=height_b,
        )

    def to_bytes(self) -> bytes:
        """Serialize to the 20-byte on-disk header."""
        return _HEADER.pack(
            MAGIC,
            self.width,
            self.width_b,
            self.height,
            self.height_b,
            self.texture_flags,
            int(self.image_format) | int(self.feature_flags),
        )

    @property
    def has_mipmaps(self) -> bool:
        return bool(self.feature_flags & FeatureFlag.HAS_MIPMAPS)

    @property
    def bytes_per_pixel(self) -> int:
        """Bytes per pixel of the stored format (4 for unknown formats)."""
        try:
            return BYTES_PER_PIXEL[ImageFormat(self.image_format)]
        except ValueError:
            return 4

    @property
    def expected_pixel_data_size(self) -> int:
        return self.width * self.height * self.bytes_per_pixel

    @property
    def format_name(self) -> str:
        try:
            return ImageFormat(self.image_format).name
        except ValueError:
            return "UNKNOWN"


def _open(source: ImageSource) -> Image.Image:
    if isinstance(source, Raster):
        return source.to_image()
    if isinstance(source, Image.Image):
        return source
    path = Path(source)
    if not path.exists():
        raise FileNotFoundError(f"Image file not found: {path}")
    return Image.open(path)


def pixel_data(
    source: ImageSource, image_format: ImageFormat = ImageFormat.RGBA8
) -> tuple[Image.Image, bytes]:
    """Convert an image to the raw byte layout of ``image_format``.

    Args:
        source: Image path, Pillow image or Raster
        image_format: One of the 8-bit-per-channel formats

    Returns:
        Tuple of (source image, raw row-major pixel bytes)

    Raises:
        TextureFormatError: For packed 16-bit formats, which are not encoded
    """
    try:
        image_format = ImageFormat(image_format)
    except ValueError as e:
        raise TextureFormatError(f"Unknown image format: {image_format!r}") from e
    image = _open(source)

    if image_format is ImageFormat.L8:
        data = image.convert("L").tobytes()
    elif image_format is ImageFormat.LA8:
        data = image.convert("LA").tobytes()
    elif image_format is ImageFormat.R8:
        data = image.convert("RGB").getchannel("R").tobytes()
    elif image_format is ImageFormat.RG8:
        rgb = np.asarray(image.convert("RGB"), dtype=np.uint8)
        data = np.ascontiguousarray(rgb[:, :, :2]).tobytes()
    elif image_format is ImageFormat.RGB8:
        data = image.convert("RGB").tobytes()
    elif image_format is ImageFormat.RGBA8:
        data = image.convert("RGBA").tobytes()
    else:
        raise TextureFormatError(f"Encoding to {image_format.name} is not supported")

    return image, data


@dataclass(frozen=True)
class ReplacementResult:
    """Outcome of :func:`replace_texture`."""

    original_size: int
    new_size: int
    original_dimensions: tuple[int, int]
    new_dimensions: tuple[int, int]
    image_format: ImageFormat
    bytes_per_pixel: int
    pixel_data_size: int
    output_path: Path


def replace_texture(
    stex_path: Union[str, Path],
    source: ImageSource,
    *,
    image_format: ImageFormat = ImageFormat.RGBA8,
    texture_flags: Optional[int] = None,
    feature_flags: Optional[int] = None,
    output_path: Optional[Union[str, Path]] = None,
) -> ReplacementResult:
    """Replace the pixels of an existing texture file with an image.

    Args:
        stex_path: Existing .stex file whose flags are preserved
        source: Replacement image (path, Pillow image or Raster)
        image_format: Pixel format to store
        texture_flags: Overrides the existing texture flags
        feature_flags: Overrides the existing feature flags (mipmaps removed
            from the existing ones otherwise)
        output_path: Where to write (defaults to overwriting ``stex_path``)

    Returns:
        ReplacementResult describing the written file

    Raises:
        FileNotFoundError: If the texture or image file does not exist
        TextureFormatError: If the existing header is invalid
    """
    stex_path = Path(stex_path)
    if not stex_path.exists():
        raise FileNotFoundError(f"STEX file not found: {stex_path}")

    existing = stex_path.read_bytes()
    header = StexHeader.parse(existing)

    image, data = pixel_data(source, image_format)

    if texture_flags is None:
        texture_flags = header.texture_flags
    if feature_flags is None:
        feature_flags = header.feature_flags & ~int(FeatureFlag.HAS_MIPMAPS)

    new_header = StexHeader(
        width=image.width,
        height=image.height,
        texture_flags=int(texture_flags),
        image_format=ImageFormat(image_format),
        feature_flags=int(feature_flags),
    )
    payload = new_header.to_bytes() + data

    output_path = Path(output_path) if output_path else stex_path
    output_path.write_bytes(payload)
    logger.info(
        f"Replaced texture {stex_path.name}: {header.width}x{header.height} -> "
        f"{image.width}x{image.height} {ImageFormat(image_format).name} ({len(payload)} bytes)"
    )

    return ReplacementResult(
        original_size=len(existing),
        new_size=len(payload),
        original_dimensions=(header.width, header.height),
        new_dimensions=(image.width, image.height),
        image_format=ImageFormat(image_format),
        bytes_per_pixel=BYTES_PER_PIXEL[ImageFormat(image_format)],
        pixel_data_size=len(data),
        output_path=output_path,
    )


@dataclass(frozen=True)
class TextureInfo:
    """Summary of a texture file on disk."""

    file_size: int
    header: StexHeader
    pixel_data_size: int
    format_name: str


def texture_info(stex_path: Union[str, Path]) -> TextureInfo:
    """Read a texture file and describe its header.

    Raises:
        FileNotFoundError: If the file does not exist
        TextureFormatError: If the header is invalid
    """
    stex_path = Path(stex_path)
    if not stex_path.exists():
        raise FileNotFoundError(f"STEX file not found: {stex_path}")

    buffer = stex_path.read_bytes()
    header = StexHeader.parse(buffer)
    return TextureInfo(
        file_size=len(buffer),
        header=header,
        pixel_data_size=len(buffer) - HEADER_SIZE,
        format_name=header.format_name,
    )

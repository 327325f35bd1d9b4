"""Tests for atlasworks.texture.stex: GDST header parsing and pixel replacement.

Tests cover:
- Header round trip and field layout
- Rejection of short buffers and wrong magic
- Pixel conversion for every supported 8-bit format
- Texture replacement keeping flags and dropping the mipmap bit
"""

import struct

import numpy as np
import pytest
from PIL import Image

from atlasworks.core.raster import Raster
from atlasworks.texture.stex import (
    HEADER_SIZE,
    FeatureFlag,
    ImageFormat,
    StexHeader,
    TextureFlag,
    TextureFormatError,
    pixel_data,
    replace_texture,
    texture_info,
)


@pytest.fixture
def stex_file(temp_dir):
    """A 4x2 RGBA8 texture with mipmaps and filter/repeat flags."""
    header = StexHeader(
        width=4,
        height=2,
        texture_flags=TextureFlag.FILTER | TextureFlag.REPEAT,
        image_format=ImageFormat.RGBA8,
        feature_flags=FeatureFlag.HAS_MIPMAPS | FeatureFlag.DETECT_SRGB,
    )
    path = temp_dir / "icons.stex"
    path.write_bytes(header.to_bytes() + bytes(4 * 2 * 4) + b"mipmaps")
    return path


class TestStexHeader:
    """Verify the 20-byte header."""

    def test_layout(self):
        header = StexHeader(width=1024, height=512, texture_flags=7, image_format=ImageFormat.RGB8)

        data = header.to_bytes()

        assert len(data) == HEADER_SIZE
        assert data[:4] == b"GDST"
        assert struct.unpack("<HHHHII", data[4:]) == (1024, 0, 512, 0, 7, 0x04)

    def test_round_trip(self):
        header = StexHeader(
            width=64,
            height=32,
            texture_flags=int(TextureFlag.MIPMAPS),
            image_format=ImageFormat.LA8,
            feature_flags=int(FeatureFlag.HAS_MIPMAPS),
        )

        parsed = StexHeader.parse(header.to_bytes())

        assert parsed == header
        assert parsed.has_mipmaps
        assert parsed.format_name == "LA8"
        assert parsed.expected_pixel_data_size == 64 * 32 * 2

    def test_too_small(self):
        with pytest.raises(TextureFormatError, match="too small"):
            StexHeader.parse(b"GDST\x00\x00")

    def test_wrong_magic(self):
        with pytest.raises(TextureFormatError, match="magic"):
            StexHeader.parse(b"RIFF" + bytes(16))

    def test_unknown_format(self):
        header = StexHeader.parse(b"GDST" + struct.pack("<HHHHII", 2, 0, 2, 0, 0, 0x2A))

        assert header.format_name == "UNKNOWN"
        assert header.bytes_per_pixel == 4


class TestPixelData:
    """Verify conversion into raw pixel layouts."""

    @pytest.fixture
    def image(self):
        return Image.new("RGBA", (3, 2), (200, 100, 50, 128))

    @pytest.mark.parametrize(
        "image_format,expected",
        [
            (ImageFormat.RGBA8, bytes([200, 100, 50, 128])),
            (ImageFormat.RGB8, bytes([200, 100, 50])),
            (ImageFormat.RG8, bytes([200, 100])),
            (ImageFormat.R8, bytes([200])),
        ],
    )
    def test_colour_formats(self, image, image_format, expected):
        _, data = pixel_data(image, image_format)

        assert data == expected * 6

    def test_luminance_formats(self, image):
        _, l8 = pixel_data(image, ImageFormat.L8)
        _, la8 = pixel_data(image, ImageFormat.LA8)

        assert len(l8) == 6
        assert len(la8) == 12
        assert la8[1] == 128

    def test_raster_source(self):
        raster = Raster(np.full((2, 2, 4), 9, dtype=np.uint8))

        image, data = pixel_data(raster, ImageFormat.RGBA8)

        assert image.size == (2, 2)
        assert data == bytes([9]) * 16

    @pytest.mark.parametrize(
        "image_format", [ImageFormat.RGB565, ImageFormat.RGBA4444, ImageFormat.RGBA5551, 99]
    )
    def test_unsupported_formats(self, image, image_format):
        with pytest.raises(TextureFormatError):
            pixel_data(image, image_format)

    def test_missing_image(self, temp_dir):
        with pytest.raises(FileNotFoundError):
            pixel_data(temp_dir / "missing.png")


class TestReplaceTexture:
    """Verify in-place and redirected texture replacement."""

    def test_replace_in_place(self, stex_file):
        image = Image.new("RGBA", (8, 8), (1, 2, 3, 4))

        result = replace_texture(stex_file, image)

        data = stex_file.read_bytes()
        header = StexHeader.parse(data)
        assert (header.width, header.height) == (8, 8)
        assert header.texture_flags == TextureFlag.FILTER | TextureFlag.REPEAT
        assert not header.has_mipmaps
        assert header.feature_flags == FeatureFlag.DETECT_SRGB
        assert data[HEADER_SIZE:] == bytes([1, 2, 3, 4]) * 64
        assert result.original_dimensions == (4, 2)
        assert result.new_dimensions == (8, 8)
        assert result.new_size == HEADER_SIZE + 8 * 8 * 4
        assert result.output_path == stex_file

    def test_replace_to_other_path(self, stex_file, temp_dir):
        original = stex_file.read_bytes()
        output = temp_dir / "out.stex"

        result = replace_texture(
            stex_file,
            Image.new("RGB", (2, 2)),
            image_format=ImageFormat.RGB8,
            texture_flags=0,
            output_path=output,
        )

        assert stex_file.read_bytes() == original
        header = StexHeader.parse(output.read_bytes())
        assert header.image_format == ImageFormat.RGB8
        assert header.texture_flags == 0
        assert result.bytes_per_pixel == 3
        assert result.pixel_data_size == 12

    def test_missing_texture(self, temp_dir):
        with pytest.raises(FileNotFoundError, match="STEX file not found"):
            replace_texture(temp_dir / "missing.stex", Image.new("RGBA", (1, 1)))

    def test_invalid_texture(self, temp_dir):
        path = temp_dir / "bad.stex"
        path.write_bytes(b"not a texture at all")

        with pytest.raises(TextureFormatError):
            replace_texture(path, Image.new("RGBA", (1, 1)))


class TestTextureInfo:
    def test_info(self, stex_file):
        info = texture_info(stex_file)

        assert info.header.width == 4
        assert info.format_name == "RGBA8"
        assert info.pixel_data_size == 4 * 2 * 4 + len(b"mipmaps")
        assert info.file_size == HEADER_SIZE + info.pixel_data_size
        assert info.header.has_mipmaps

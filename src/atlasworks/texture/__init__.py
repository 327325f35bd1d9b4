"""Binary texture codec for injecting processed atlases into game packages.

Modules
-------
stex
    Godot stream-texture (GDST) header parsing/building and raw pixel
    conversion for uncompressed textures.
"""

from atlasworks.texture.stex import (
    FeatureFlag,
    ImageFormat,
    StexHeader,
    TextureFlag,
    TextureFormatError,
    pixel_data,
    replace_texture,
    texture_info,
)

__all__ = [
    "FeatureFlag",
    "ImageFormat",
    "StexHeader",
    "TextureFlag",
    "TextureFormatError",
    "pixel_data",
    "replace_texture",
    "texture_info",
]

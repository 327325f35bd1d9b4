"""Atlasworks command-line interface.

Commands
--------
========================  ===============================================
Command                   Purpose
========================  ===============================================
``process IN [OUT]``      Re-center the nine illustrations of an atlas
``info IN``               Print dimensions, channels and tile size
``stex-info FILE``        Print the header of a GDST texture
``stex-replace STEX IMG`` Replace the pixels of a GDST texture
========================  ===============================================

Usage
-----
CLI (installed entry point)::

    atlasworks process face-atlas.png --mode silhouette --report

Direct invocation::

    python -m atlasworks.cli info face-atlas.png

Exit codes: 0 on success, 2 for invalid input (validation errors, malformed
textures, missing files).
"""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Optional, Sequence

from atlasworks import __version__
from atlasworks.core.config import config
from atlasworks.core.engine import AtlasProcessor
from atlasworks.core.raster import describe_atlas, load_raster
from atlasworks.core.validation import AlignmentMode, OwnershipPolicy, ValidationError
from atlasworks.texture.stex import ImageFormat, TextureFormatError, replace_texture, texture_info

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="atlasworks",
        description="Post-process generated 3x3 icon and face atlases.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--log-level",
        default=config.log_level,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help=f"Logging verbosity (default: {config.log_level})",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    process = commands.add_parser("process", help="Re-center atlas cells")
    process.add_argument("input", type=Path, help="Input PNG atlas")
    process.add_argument(
        "output",
        type=Path,
        nargs="?",
        help="Output PNG (default: <outputs_dir>/<input name>)",
    )
    process.add_argument(
        "--mode",
        default=AlignmentMode.ICON.value,
        choices=[m.value for m in AlignmentMode],
        help="Alignment mode (default: icon)",
    )
    process.add_argument(
        "--policy",
        default=None,
        choices=[p.value for p in OwnershipPolicy],
        help="Override the ownership filter of the mode",
    )
    process.add_argument(
        "--report",
        action="store_true",
        help="Print the run report as JSON",
    )

    info = commands.add_parser("info", help="Describe an atlas image")
    info.add_argument("input", type=Path, help="Input image")

    stex_info = commands.add_parser("stex-info", help="Describe a GDST texture")
    stex_info.add_argument("texture", type=Path, help="Texture file (.stex)")

    stex_replace = commands.add_parser("stex-replace", help="Replace GDST texture pixels")
    stex_replace.add_argument("texture", type=Path, help="Existing texture file (.stex)")
    stex_replace.add_argument("image", type=Path, help="Replacement image")
    stex_replace.add_argument(
        "--format",
        default=ImageFormat.RGBA8.name,
        choices=[f.name for f in ImageFormat],
        help="Pixel format to store (default: RGBA8)",
    )
    stex_replace.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Write to this path instead of overwriting the texture",
    )

    return parser


def _process(args: argparse.Namespace) -> int:
    raster = load_raster(args.input)
    result = AtlasProcessor(config).process(raster, args.mode, args.policy)

    output = args.output or config.outputs_dir / args.input.name
    result.raster.save(output)

    if args.report:
        print(result.report.model_dump_json(indent=2))
    return 0


def _info(args: argparse.Namespace) -> int:
    info = describe_atlas(args.input, grid_size=config.grid_size)
    print(
        json.dumps(
            {
                "width": info.width,
                "height": info.height,
                "channels": info.channels,
                "has_alpha": info.has_alpha,
                "tile_size": round(info.tile_size, 2),
            },
            indent=2,
        )
    )
    return 0


def _stex_info(args: argparse.Namespace) -> int:
    info = texture_info(args.texture)
    header = info.header
    print(
        json.dumps(
            {
                "file_size": info.file_size,
                "width": header.width,
                "height": header.height,
                "format": info.format_name,
                "texture_flags": header.texture_flags,
                "feature_flags": header.feature_flags,
                "has_mipmaps": header.has_mipmaps,
                "pixel_data_size": info.pixel_data_size,
                "expected_pixel_data_size": header.expected_pixel_data_size,
            },
            indent=2,
        )
    )
    return 0


def _stex_replace(args: argparse.Namespace) -> int:
    result = replace_texture(
        args.texture,
        args.image,
        image_format=ImageFormat[args.format],
        output_path=args.output,
    )
    print(f"Wrote {result.output_path} ({result.new_size} bytes)")
    return 0


_COMMANDS = {
    "process": _process,
    "info": _info,
    "stex-info": _stex_info,
    "stex-replace": _stex_replace,
}


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Parse arguments, configure logging and run the selected command.

    Registered as the ``atlasworks`` console script in ``pyproject.toml``.
    """
    args = _build_parser().parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        return _COMMANDS[args.command](args)
    except (ValidationError, TextureFormatError, FileNotFoundError) as e:
        logger.error(f"{args.command} failed: {e}")
        return 2


if __name__ == "__main__":
    raise SystemExit(main())

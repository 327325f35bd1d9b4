"""Atlasworks - post-processing for generated 3x3 icon and face atlases."""

__version__ = "0.3.0"

from atlasworks.core.config import AtlasworksConfig, config
from atlasworks.core.engine import AtlasProcessor, AtlasResult, process_atlas
from atlasworks.core.raster import Raster, describe_atlas, load_raster
from atlasworks.core.validation import (
    AlignmentMode,
    InvalidModeError,
    OwnershipPolicy,
    RasterShapeError,
    ValidationError,
)

__all__ = [
    "AlignmentMode",
    "AtlasProcessor",
    "AtlasResult",
    "AtlasworksConfig",
    "InvalidModeError",
    "OwnershipPolicy",
    "Raster",
    "RasterShapeError",
    "ValidationError",
    "config",
    "describe_atlas",
    "load_raster",
    "process_atlas",
]

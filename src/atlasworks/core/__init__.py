"""Core atlas post-processing engine.

This package turns a single 1024x1024 generated image holding a 3x3 grid of
illustrations into an atlas where every cell's content sits where the game
expects it:

- **Raster Model** (raster.py): Pillow-backed decode/encode of raw RGBA buffers
- **Grid** (grid.py): the fixed 3x3 cell partition (341/341/342 px cells)
- **Connected-Component Extractor** (components.py): explicit-stack flood fill
  into opaque "parts"
- **Bridge Separator** (bridges.py): severs narrow necks between silhouettes
  fused across cells (silhouette mode only)
- **Cell Ownership Resolver** (ownership.py): assigns each part to one cell
  or discards it
- **Placement Compositor** (placement.py): re-renders each cell's parts
  centered or bottom-aligned in a fresh raster
- **AtlasworksConfig** (config.py): Pydantic Settings for every threshold

Usage Example
-------------
    from atlasworks.core import AtlasProcessor, load_raster

    processor = AtlasProcessor()
    result = processor.process(load_raster("activities-atlas.png"), "icon")
    result.raster.save(Path("outputs/activities-atlas.png"))
    print(result.report.model_dump_json(indent=2))

Error Handling
--------------
Input is validated before any pixel is touched. ``RasterShapeError`` and
``InvalidModeError`` (both ``ValidationError``) are the only errors the
engine raises; empty cells and unsevered fusions are normal outcomes.
"""

from atlasworks.core.config import AtlasworksConfig, config
from atlasworks.core.engine import AtlasProcessor, AtlasResult, process_atlas
from atlasworks.core.raster import Raster, describe_atlas, load_raster

__all__ = [
    "AtlasProcessor",
    "AtlasResult",
    "AtlasworksConfig",
    "Raster",
    "config",
    "describe_atlas",
    "load_raster",
    "process_atlas",
]

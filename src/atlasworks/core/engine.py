"""Atlas post-processing engine.

This module wires the pipeline together:

    raw raster
      -> (silhouette mode) bridge separation on a private copy
      -> connected-component extraction
      -> cell ownership resolution
      -> placement into a fresh transparent raster

Each call is a pure function of its input pixels and mode. The caller's
buffer is never modified: validation happens first, then the engine works on
its own copy.

Alignment Modes
---------------
============  ==========  ===================  ==========
Mode          Bridges     Ownership policy     Placement
============  ==========  ===================  ==========
icon          no          icon                 center
silhouette    yes         silhouette           bottom
============  ==========  ===================  ==========

Usage
-----
::

    from atlasworks.core.engine import process_atlas
    from atlasworks.core.raster import load_raster

    raster = load_raster("face-atlas.png")
    result = process_atlas(raster, "silhouette")
    result.save(Path("outputs/face-atlas.png"))
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Optional

from .bridges import separate_bridges
from .components import find_parts
from .config import AtlasworksConfig, config as default_config
from .grid import Cell, Grid
from .models import AtlasReport, CellSummary, CutSummary
from .ownership import resolve_ownership
from .placement import Alignment, composite, group_bounds, target_origin
from .raster import Raster
from .validation import (
    AlignmentMode,
    OwnershipPolicy,
    validate_alignment_mode,
    validate_ownership_policy,
    validate_raster_shape,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ModeProfile:
    """How an alignment mode drives each pipeline stage."""

    separate_bridges: bool
    policy: OwnershipPolicy
    alignment: Alignment


MODE_PROFILES: dict[AlignmentMode, ModeProfile] = {
    AlignmentMode.ICON: ModeProfile(
        separate_bridges=False,
        policy=OwnershipPolicy.ICON,
        alignment=Alignment.CENTER,
    ),
    AlignmentMode.SILHOUETTE: ModeProfile(
        separate_bridges=True,
        policy=OwnershipPolicy.SILHOUETTE,
        alignment=Alignment.BOTTOM,
    ),
}


@dataclass
class AtlasResult:
    """Processed raster plus the report describing how it was produced."""

    raster: Raster
    report: AtlasReport


class AtlasProcessor:
    """Re-centers the nine illustrations of a 3x3 atlas inside their cells."""

    def __init__(self, config: Optional[AtlasworksConfig] = None):
        """
        Initialize the processor.

        Args:
            config: Configuration object. If None, uses global default config.
        """
        self.config = config or default_config

    def process(
        self,
        raster: Raster,
        mode: "AlignmentMode | str",
        policy: "OwnershipPolicy | str | None" = None,
    ) -> AtlasResult:
        """
        Process one atlas.

        Args:
            raster: Input raster (must be atlas_size x atlas_size, >= 4 channels)
            mode: "icon" or "silhouette"
            policy: Optional ownership policy overriding the mode's default

        Returns:
            AtlasResult with a new raster of identical shape

        Raises:
            InvalidModeError: If mode or policy is not recognized
            RasterShapeError: If the raster has the wrong size or no alpha
        """
        validate_raster_shape(raster.pixels, self.config.atlas_size)
        mode = validate_alignment_mode(mode)
        profile = MODE_PROFILES[mode]
        policy = profile.policy if policy is None else validate_ownership_policy(policy)

        logger.info(f"Processing {raster.width}x{raster.height} atlas in {mode.value} mode")

        pixels = raster.pixels.copy()
        grid = Grid(raster.width, raster.height, self.config.grid_size)

        cuts = separate_bridges(pixels, self.config) if profile.separate_bridges else []

        parts = find_parts(pixels, self.config.alpha_threshold, self.config.min_part_pixels)
        ownership = resolve_ownership(parts, grid, policy, self.config)
        output = composite(pixels, ownership.approved, grid, profile.alignment)

        report = AtlasReport(
            mode=mode.value,
            policy=policy.value,
            parts_found=len(parts),
            parts_rejected=len(ownership.rejected),
            cuts=[CutSummary(**asdict(cut)) for cut in cuts],
            cells=[self._summarize_cell(cell, ownership.approved, profile) for cell in grid.cells],
        )

        logger.info(
            f"Atlas processed: {len(parts)} parts, {report.parts_rejected} rejected, "
            f"{len(cuts)} bridges cut, {report.empty_cells} empty cells"
        )
        return AtlasResult(raster=Raster(output), report=report)

    @staticmethod
    def _summarize_cell(cell: Cell, approved: dict, profile: ModeProfile) -> CellSummary:
        parts = approved.get(cell.key) or []
        if not parts:
            return CellSummary(cx=cell.cx, cy=cell.cy)

        return CellSummary(
            cx=cell.cx,
            cy=cell.cy,
            parts=len(parts),
            pixels=sum(part.pixel_count for part in parts),
            target=target_origin(cell, group_bounds(parts), profile.alignment),
        )


def process_atlas(
    raster: Raster,
    mode: "AlignmentMode | str",
    *,
    policy: "OwnershipPolicy | str | None" = None,
    config: Optional[AtlasworksConfig] = None,
) -> Raster:
    """Process an atlas and return only the output raster.

    See :meth:`AtlasProcessor.process` for arguments and errors.
    """
    return AtlasProcessor(config).process(raster, mode, policy).raster

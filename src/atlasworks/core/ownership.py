"""Cell ownership: decide which grid cell each part belongs to.

Every part is tested against the grid to count how many of its pixels fall in
each cell. A policy-dependent acceptance filter runs first; surviving parts
are owned by the cell holding most of their pixels and are approved for that
cell only.

Policies
--------
- **icon**: compact parts only, anything touching 3 or more cells is dropped
- **generic**: background-tolerant, only parts touching more than 5 cells
  are dropped
- **silhouette**: parts must touch at most 4 cells, measure 200-400 px on
  both axes and stay within 20% of a cell size of their cell's grid lines
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

import numpy as np

from .components import Part
from .config import AtlasworksConfig, config as default_config
from .grid import Cell, Grid
from .validation import OwnershipPolicy

logger = logging.getLogger(__name__)


@dataclass
class OwnershipRecord:
    """Per-cell pixel counts for a single part."""

    counts: np.ndarray  # indexed by row-major cell index

    @property
    def span(self) -> int:
        """Number of distinct cells touched."""
        return int(np.count_nonzero(self.counts))

    @property
    def owner_index(self) -> int:
        """Row-major index of the cell with the most pixels.

        Ties go to the cell that comes first in row-major scan order.
        """
        return int(np.argmax(self.counts))


@dataclass
class OwnershipResult:
    """Approved parts per cell plus the parts that were filtered out."""

    approved: dict[tuple[int, int], list[Part]] = field(default_factory=dict)
    rejected: list[Part] = field(default_factory=list)

    @property
    def approved_count(self) -> int:
        return sum(len(parts) for parts in self.approved.values())


def count_cells(part: Part, grid: Grid) -> OwnershipRecord:
    """Count the part's pixels per grid cell."""
    indices = grid.cell_index(part.xs, part.ys)
    counts = np.bincount(indices, minlength=grid.size * grid.size)
    return OwnershipRecord(counts=counts)


def _overhangs_cell(part: Part, cell: Cell, tolerance: float) -> bool:
    bounds = part.bounds
    return (
        bounds.min_x < cell.x0 - tolerance
        or bounds.max_x + 1 > cell.x1 + tolerance
        or bounds.min_y < cell.y0 - tolerance
        or bounds.max_y + 1 > cell.y1 + tolerance
    )


def is_accepted(
    part: Part,
    record: OwnershipRecord,
    grid: Grid,
    policy: OwnershipPolicy,
    config: AtlasworksConfig,
) -> bool:
    """Apply the policy's acceptance filter to a part.

    Args:
        part: Part under test
        record: Its per-cell pixel counts
        grid: Atlas grid
        policy: Acceptance policy
        config: Thresholds

    Returns:
        True if the part may take part in ownership
    """
    span = record.span

    if policy is OwnershipPolicy.ICON:
        return span <= config.icon_max_span

    if policy is OwnershipPolicy.GENERIC:
        return span <= config.generic_max_span

    if span > config.silhouette_max_span:
        return False

    low, high = config.silhouette_min_size, config.silhouette_max_size
    if not (low <= part.width <= high and low <= part.height <= high):
        return False

    # The cell holding the box centre is the one the silhouette is aligned to
    bounds = part.bounds
    center_cell = grid.cell_at(
        (bounds.min_x + bounds.max_x + 1) / 2, (bounds.min_y + bounds.max_y + 1) / 2
    )
    tolerance = config.silhouette_edge_tolerance * min(grid.cell_width, grid.cell_height)
    return not _overhangs_cell(part, center_cell, tolerance)


def resolve_ownership(
    parts: list[Part],
    grid: Grid,
    policy: OwnershipPolicy,
    config: Optional[AtlasworksConfig] = None,
) -> OwnershipResult:
    """Assign each part to at most one cell.

    Args:
        parts: Parts from :func:`~atlasworks.core.components.find_parts`
        grid: Atlas grid
        policy: Acceptance filter to apply before ownership
        config: Thresholds (global config if omitted)

    Returns:
        OwnershipResult whose ``approved`` mapping keeps parts in input order
    """
    config = config or default_config
    result = OwnershipResult(approved={cell.key: [] for cell in grid.cells})

    for part in parts:
        record = count_cells(part, grid)
        if not is_accepted(part, record, grid, policy, config):
            result.rejected.append(part)
            continue

        owner = grid.cells[record.owner_index]
        result.approved[owner.key].append(part)

    logger.debug(
        f"Ownership ({policy.value}): {result.approved_count} approved, "
        f"{len(result.rejected)} rejected"
    )
    return result

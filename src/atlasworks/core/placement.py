"""Placement compositor: re-render each cell's approved parts into its cell."""

from __future__ import annotations

import logging
from enum import Enum
from functools import reduce

import numpy as np

from .components import BoundingBox, Part
from .grid import Cell, Grid

logger = logging.getLogger(__name__)


class Alignment(str, Enum):
    """Where a cell's group of parts is placed inside the cell."""

    CENTER = "center"
    BOTTOM = "bottom"


def group_bounds(parts: list[Part]) -> BoundingBox:
    """Union bounding box of a non-empty list of parts."""
    return reduce(lambda acc, part: acc.union(part.bounds), parts[1:], parts[0].bounds)


def target_origin(cell: Cell, bounds: BoundingBox, alignment: Alignment) -> tuple[int, int]:
    """Top-left output coordinate for a group with the given bounds.

    Bottom alignment puts the group's last row on the cell's last row; a group
    taller than the cell overflows upward instead of being clipped.
    """
    # Floor division, matching floor((cell - group) / 2) for negative values too
    target_x = cell.x0 + (cell.width - bounds.width) // 2

    if alignment is Alignment.CENTER:
        target_y = cell.y0 + (cell.height - bounds.height) // 2
    else:
        target_y = cell.y1 - bounds.height

    return target_x, target_y


def composite(
    source: np.ndarray,
    approved: dict[tuple[int, int], list[Part]],
    grid: Grid,
    alignment: Alignment,
) -> np.ndarray:
    """Write every cell's approved parts into a fresh transparent raster.

    Args:
        source: Pixel array the parts were extracted from
        approved: Parts per cell key, as produced by ownership resolution
        grid: Atlas grid
        alignment: Placement policy

    Returns:
        New pixel array with the same shape as ``source``
    """
    height, width = source.shape[:2]
    output = np.zeros_like(source)

    for cell in grid.cells:
        parts = approved.get(cell.key) or []
        if not parts:
            continue

        bounds = group_bounds(parts)
        target_x, target_y = target_origin(cell, bounds, alignment)
        dx = target_x - bounds.min_x
        dy = target_y - bounds.min_y

        for part in parts:
            new_x = part.xs + dx
            new_y = part.ys + dy
            inside = (new_x >= 0) & (new_x < width) & (new_y >= 0) & (new_y < height)
            output[new_y[inside], new_x[inside]] = source[part.ys[inside], part.xs[inside]]

        logger.debug(
            f"Cell {cell.key}: placed {len(parts)} parts "
            f"({bounds.width}x{bounds.height}) at ({target_x}, {target_y})"
        )

    return output

"""Bridge separation: cut silhouettes the generator fused across cells.

The generator is asked for nine independent poses but sometimes draws two
neighbours touching, so a single connected part spans two or three cells.
This pre-pass looks for such parts one band of the grid at a time and erases
the narrowest cross-section ("bridge") near each expected split position.

Two passes run on the same pixel buffer, always in this order:

1. **Row-wise**: for each row band, parts that are too wide for one cell
   are cut along columns (undoes horizontal fusion).
2. **Column-wise**: the same logic on the transposed buffer, so parts that
   are too tall for one cell are cut along rows (undoes vertical fusion).

Each pass mutates the buffer directly, and the column-wise pass sees the
cuts made by the row-wise pass. Parts are re-extracted for every band so a
cut in one band is visible to the next.

Heuristic
---------
Silhouettes are wide at the body or head and narrow where they happen to
touch, so the column with the fewest opaque pixels of the part inside a
small window around the expected split is taken as the fusion point. When
that column is a thin neck (at most ``bridge_max_thickness`` pixels) the cut
grows sideways while the neighbouring columns are no thicker, which removes
the whole constant-width neck; a thicker bridge is cut along that single
column only.

Known limitations: silhouettes fused diagonally are not separated, and a
part whose search window contains none of its pixels stays fused.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .components import Part, find_parts
from .config import AtlasworksConfig, config as default_config

logger = logging.getLogger(__name__)

# Split positions along a part's extent, keyed by the number of splits
_SPLIT_FRACTIONS = {1: (1 / 2,), 2: (1 / 3, 2 / 3)}


@dataclass(frozen=True)
class BridgeCut:
    """A severed bridge.

    ``axis`` is "x" for cuts made by the row-wise pass (a run of columns) and
    "y" for the column-wise pass (a run of rows). ``start`` and ``end`` are
    inclusive coordinates along that axis.
    """

    axis: str
    band: int
    start: int
    end: int
    thickness: int
    erased: int


def split_count(extent: int, expected: float) -> int:
    """Number of splits needed for a part of ``extent`` pixels.

    Returns 0 below 1.5 expected silhouettes, 1 below 2.5, else 2.
    """
    ratio = extent / expected
    if ratio < 1.5:
        return 0
    if ratio < 2.5:
        return 1
    return 2


def band_ranges(length: int, bands: int) -> list[tuple[int, int]]:
    """Split ``length`` into equal bands; the last band absorbs the remainder."""
    size = length // bands
    return [
        (index * size, length if index == bands - 1 else (index + 1) * size)
        for index in range(bands)
    ]


def _find_narrowest(counts: np.ndarray, center: int, radius: int) -> Optional[int]:
    low = max(center - radius, 0)
    high = min(center + radius, counts.size - 1)
    if low > high:
        return None

    window = counts[low : high + 1]
    occupied = np.flatnonzero(window)
    if occupied.size == 0:
        return None

    # First minimum wins
    return low + int(occupied[np.argmin(window[occupied])])


def _grow_cut(
    counts: np.ndarray, narrowest: int, max_neck: int, max_thickness: int
) -> tuple[int, int]:
    thickness = counts[narrowest]
    start = end = narrowest
    if thickness > max_thickness:
        return start, end

    while start > 0 and narrowest - start < max_neck and 0 < counts[start - 1] <= thickness:
        start -= 1
    while (
        end < counts.size - 1 and end - narrowest < max_neck and 0 < counts[end + 1] <= thickness
    ):
        end += 1

    return start, end


def _cut_part(
    pixels: np.ndarray,
    part: Part,
    splits: int,
    band: int,
    axis: str,
    config: AtlasworksConfig,
) -> list[BridgeCut]:
    min_x = part.bounds.min_x
    local_x = part.xs - min_x
    counts = np.bincount(local_x, minlength=part.width)
    cuts = []

    for fraction in _SPLIT_FRACTIONS[splits]:
        center = int(part.width * fraction)
        narrowest = _find_narrowest(counts, center, config.bridge_search_radius)
        if narrowest is None:
            logger.debug(f"No bridge near {min_x + center} ({axis}); part stays fused")
            continue

        start, end = _grow_cut(
            counts, narrowest, config.bridge_max_neck, config.bridge_max_thickness
        )
        selected = (local_x >= start) & (local_x <= end)
        pixels[part.ys[selected], part.xs[selected]] = 0

        cuts.append(
            BridgeCut(
                axis=axis,
                band=band,
                start=min_x + start,
                end=min_x + end,
                thickness=int(counts[narrowest]),
                erased=int(np.count_nonzero(selected)),
            )
        )

    return cuts


def _separate_along_columns(
    pixels: np.ndarray,
    axis: str,
    config: AtlasworksConfig,
) -> list[BridgeCut]:
    """Cut parts that are too wide for one cell, band by band down the rows.

    ``pixels`` may be a transposed view; writes go through to the original.
    """
    height, width = pixels.shape[:2]
    expected = config.bridge_expected_fill * width / config.grid_size
    cuts: list[BridgeCut] = []

    for band, (top, bottom) in enumerate(band_ranges(height, config.grid_size)):
        parts = find_parts(pixels, config.alpha_threshold, config.min_part_pixels)

        for part in parts:
            if part.height <= config.bridge_min_extent:
                continue

            inside = np.count_nonzero((part.ys >= top) & (part.ys < bottom))
            if inside < config.bridge_band_mass_ratio * part.pixel_count:
                continue

            splits = split_count(part.width, expected)
            if splits:
                cuts.extend(_cut_part(pixels, part, splits, band, axis, config))

    return cuts


def separate_bridges(
    pixels: np.ndarray,
    config: Optional[AtlasworksConfig] = None,
) -> list[BridgeCut]:
    """Run the row-wise then column-wise separation passes in place.

    Args:
        pixels: Pixel array of shape (height, width, channels); mutated
        config: Thresholds (global config if omitted)

    Returns:
        Every cut made, row-wise pass first
    """
    config = config or default_config

    cuts = _separate_along_columns(pixels, "x", config)
    cuts += _separate_along_columns(pixels.transpose(1, 0, 2), "y", config)

    for cut in cuts:
        logger.info(
            f"Severed bridge along {cut.axis} {cut.start}-{cut.end} in band {cut.band} "
            f"(thickness {cut.thickness}, {cut.erased} pixels erased)"
        )
    return cuts

"""Connected-component extraction over the opaque region of a raster.

Parts are maximal 4-connected regions of pixels whose alpha exceeds the
opacity threshold. The scan is left-to-right, top-to-bottom and every flood
fill uses an explicit stack, so a fully opaque 1024x1024 raster is traversed
without recursion and the result is identical for identical input.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BoundingBox:
    """Inclusive axis-aligned bounding box."""

    min_x: int
    max_x: int
    min_y: int
    max_y: int

    @property
    def width(self) -> int:
        return self.max_x - self.min_x + 1

    @property
    def height(self) -> int:
        return self.max_y - self.min_y + 1

    def union(self, other: "BoundingBox") -> "BoundingBox":
        return BoundingBox(
            min_x=min(self.min_x, other.min_x),
            max_x=max(self.max_x, other.max_x),
            min_y=min(self.min_y, other.min_y),
            max_y=max(self.max_y, other.max_y),
        )


@dataclass(eq=False)
class Part:
    """A connected opaque region.

    ``xs`` and ``ys`` hold the member coordinates in visitation order.
    """

    xs: np.ndarray
    ys: np.ndarray
    bounds: BoundingBox

    @property
    def pixel_count(self) -> int:
        return int(self.xs.size)

    @property
    def width(self) -> int:
        return self.bounds.width

    @property
    def height(self) -> int:
        return self.bounds.height


def opaque_mask(pixels: np.ndarray, alpha_threshold: int = 10) -> np.ndarray:
    """Boolean mask of pixels whose alpha is strictly above the threshold."""
    return pixels[:, :, 3] > alpha_threshold


def _flood_fill(mask: bytearray, width: int, height: int, start: int) -> list[int]:
    """Collect the 4-connected region containing ``start``.

    Visited pixels are cleared in ``mask`` as they are claimed.
    """
    mask[start] = 0
    stack = [start]
    members = []
    last_row = (height - 1) * width

    while stack:
        index = stack.pop()
        members.append(index)
        x = index % width

        # Neighbours are pushed right, left, down, up
        if x + 1 < width and mask[index + 1]:
            mask[index + 1] = 0
            stack.append(index + 1)
        if x > 0 and mask[index - 1]:
            mask[index - 1] = 0
            stack.append(index - 1)
        if index < last_row and mask[index + width]:
            mask[index + width] = 0
            stack.append(index + width)
        if index >= width and mask[index - width]:
            mask[index - width] = 0
            stack.append(index - width)

    return members


def find_parts(
    pixels: np.ndarray,
    alpha_threshold: int = 10,
    min_pixels: int = 4,
) -> list[Part]:
    """Find all connected opaque parts of a raster.

    Args:
        pixels: Pixel array of shape (height, width, channels >= 4)
        alpha_threshold: Pixels with alpha above this value are opaque
        min_pixels: Parts with fewer member pixels are discarded as noise

    Returns:
        Parts in scan order of their first (top-most, then left-most) pixel
    """
    height, width = pixels.shape[:2]
    opaque = opaque_mask(pixels, alpha_threshold).ravel()
    mask = bytearray(opaque.astype(np.uint8).tobytes())

    parts: list[Part] = []
    discarded = 0

    for start in np.flatnonzero(opaque).tolist():
        if not mask[start]:
            continue

        members = np.asarray(_flood_fill(mask, width, height, start), dtype=np.int64)
        if members.size < min_pixels:
            discarded += 1
            continue

        ys, xs = np.divmod(members, width)
        parts.append(
            Part(
                xs=xs,
                ys=ys,
                bounds=BoundingBox(
                    min_x=int(xs.min()),
                    max_x=int(xs.max()),
                    min_y=int(ys.min()),
                    max_y=int(ys.max()),
                ),
            )
        )

    logger.debug(f"Found {len(parts)} parts ({discarded} noise fragments discarded)")
    return parts

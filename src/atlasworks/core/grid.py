"""Fixed N x N cell partition of an atlas."""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class Cell:
    """One grid cell; ``x1`` and ``y1`` are exclusive."""

    cx: int
    cy: int
    x0: int
    x1: int
    y0: int
    y1: int

    @property
    def key(self) -> tuple[int, int]:
        return (self.cx, self.cy)

    @property
    def width(self) -> int:
        return self.x1 - self.x0

    @property
    def height(self) -> int:
        return self.y1 - self.y0

    def contains(self, x: int, y: int) -> bool:
        return self.x0 <= x < self.x1 and self.y0 <= y < self.y1


class Grid:
    """Partition of a ``width`` x ``height`` raster into ``size`` x ``size`` cells.

    Cell boundaries are ``floor(i * width / size)``, which for a 1024 atlas
    gives 341/341/342 cell widths. Cells are stored in row-major scan order,
    which is also the ownership tie-break order.
    """

    def __init__(self, width: int, height: int, size: int = 3) -> None:
        self.width = width
        self.height = height
        self.size = size
        self.x_lines = [math.floor(i * width / size) for i in range(size + 1)]
        self.y_lines = [math.floor(i * height / size) for i in range(size + 1)]
        self.cells: list[Cell] = [
            Cell(
                cx=cx,
                cy=cy,
                x0=self.x_lines[cx],
                x1=self.x_lines[cx + 1],
                y0=self.y_lines[cy],
                y1=self.y_lines[cy + 1],
            )
            for cy in range(size)
            for cx in range(size)
        ]

    @property
    def cell_width(self) -> float:
        return self.width / self.size

    @property
    def cell_height(self) -> float:
        return self.height / self.size

    def cell(self, cx: int, cy: int) -> Cell:
        return self.cells[cy * self.size + cx]

    def column_of(self, xs: np.ndarray) -> np.ndarray:
        """Cell column index for each x coordinate."""
        return np.searchsorted(self.x_lines, xs, side="right") - 1

    def row_of(self, ys: np.ndarray) -> np.ndarray:
        """Cell row index for each y coordinate."""
        return np.searchsorted(self.y_lines, ys, side="right") - 1

    def cell_index(self, xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
        """Row-major cell index for each (x, y) pair inside the raster."""
        return self.row_of(ys) * self.size + self.column_of(xs)

    def cell_at(self, x: float, y: float) -> Cell:
        """Cell containing a (possibly fractional) point, clamped to the grid."""
        cx = int(np.clip(self.column_of(np.asarray([x]))[0], 0, self.size - 1))
        cy = int(np.clip(self.row_of(np.asarray([y]))[0], 0, self.size - 1))
        return self.cell(cx, cy)

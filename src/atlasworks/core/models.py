"""Pydantic models describing the outcome of an atlas run.

These models never influence pixel output; they exist so a run can be logged
and emitted as JSON by the command-line interface.

Models
------
CutSummary
    One severed bridge.
CellSummary
    Approved parts and placement for a single grid cell.
AtlasReport
    Everything that happened during one ``process_atlas`` call.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class CutSummary(BaseModel):
    """A bridge removed by the separator.

    Attributes:
        axis: ``"x"`` for a run of columns, ``"y"`` for a run of rows.
        band: Index of the grid band the fused part was found in.
        start: First erased coordinate along ``axis``.
        end: Last erased coordinate along ``axis`` (inclusive).
        thickness: Pixels of the part in the narrowest column/row.
        erased: Total pixels cleared by the cut.
    """

    axis: str
    band: int
    start: int
    end: int
    thickness: int
    erased: int


class CellSummary(BaseModel):
    """Result for one grid cell.

    Attributes:
        cx: Cell column (0-based).
        cy: Cell row (0-based).
        parts: Number of approved parts placed in the cell.
        pixels: Number of source pixels belonging to those parts.
        target: Top-left output coordinate of the group, or ``None`` when the
            cell is empty.
    """

    cx: int
    cy: int
    parts: int = 0
    pixels: int = 0
    target: tuple[int, int] | None = None


class AtlasReport(BaseModel):
    """Summary of a single atlas run.

    Attributes:
        mode: Alignment mode that was requested.
        policy: Ownership policy that was applied.
        parts_found: Parts extracted after bridge separation.
        parts_rejected: Parts dropped by the ownership filter.
        cuts: Bridges severed before extraction (silhouette mode only).
        cells: Per-cell summaries in row-major order.
    """

    mode: str
    policy: str
    parts_found: int = Field(default=0, ge=0)
    parts_rejected: int = Field(default=0, ge=0)
    cuts: list[CutSummary] = Field(default_factory=list)
    cells: list[CellSummary] = Field(default_factory=list)

    @property
    def empty_cells(self) -> int:
        return sum(1 for cell in self.cells if cell.parts == 0)

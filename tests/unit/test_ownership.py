"""Tests for atlasworks.core.ownership: per-part cell assignment."""

import numpy as np
import pytest

from atlasworks.core.components import find_parts
from atlasworks.core.config import AtlasworksConfig
from atlasworks.core.grid import Grid
from atlasworks.core.ownership import count_cells, is_accepted, resolve_ownership
from atlasworks.core.validation import OwnershipPolicy


@pytest.fixture
def grid() -> Grid:
    return Grid(1024, 1024, 3)


class TestCountCells:
    """Verify per-cell pixel counting."""

    def test_single_cell(self, blank_atlas, paint_rect, grid):
        pixels = paint_rect(blank_atlas(), 400, 400, 409, 409)
        (part,) = find_parts(pixels)

        record = count_cells(part, grid)

        assert record.span == 1
        assert record.counts[4] == 100
        assert grid.cells[record.owner_index].key == (1, 1)

    def test_straddling_part(self, blank_atlas, paint_rect, grid):
        """A part across x=341 counts pixels on both sides."""
        pixels = paint_rect(blank_atlas(), 331, 10, 360, 19)
        (part,) = find_parts(pixels)

        record = count_cells(part, grid)

        assert record.span == 2
        assert record.counts[0] == 10 * 10
        assert record.counts[1] == 20 * 10
        assert grid.cells[record.owner_index].key == (1, 0)

    def test_tie_goes_to_first_cell_in_scan_order(self, blank_atlas, paint_rect, grid):
        """Equal counts in two cells resolve to the row-major earlier one."""
        pixels = paint_rect(blank_atlas(), 331, 10, 350, 19)
        (part,) = find_parts(pixels)

        record = count_cells(part, grid)

        assert record.counts[0] == record.counts[1]
        assert grid.cells[record.owner_index].key == (0, 0)


class TestIsAccepted:
    """Verify each policy's acceptance filter."""

    def _part(self, pixels):
        (part,) = find_parts(pixels)
        return part

    def test_icon_rejects_three_cells(self, blank_atlas, paint_rect, grid, test_config):
        """A horizontal bar through all three columns is dropped in icon policy."""
        part = self._part(paint_rect(blank_atlas(), 300, 100, 700, 110))
        record = count_cells(part, grid)

        assert record.span == 3
        assert not is_accepted(part, record, grid, OwnershipPolicy.ICON, test_config)
        assert is_accepted(part, record, grid, OwnershipPolicy.GENERIC, test_config)

    def test_icon_accepts_two_cells(self, blank_atlas, paint_rect, grid, test_config):
        part = self._part(paint_rect(blank_atlas(), 320, 100, 360, 110))
        record = count_cells(part, grid)

        assert is_accepted(part, record, grid, OwnershipPolicy.ICON, test_config)

    def test_generic_rejects_more_than_five_cells(
        self, blank_atlas, paint_rect, grid, test_config
    ):
        """An L covering six cells is background, not content."""
        pixels = blank_atlas()
        paint_rect(pixels, 0, 1000, 1023, 1010)
        paint_rect(pixels, 1000, 0, 1010, 1010)
        part = self._part(pixels)
        record = count_cells(part, grid)

        assert record.span == 5
        assert is_accepted(part, record, grid, OwnershipPolicy.GENERIC, test_config)

        paint_rect(pixels, 0, 600, 20, 1010)
        part = self._part(pixels)
        record = count_cells(part, grid)

        assert record.span == 6
        assert not is_accepted(part, record, grid, OwnershipPolicy.GENERIC, test_config)

    @pytest.mark.parametrize(
        "size,accepted",
        [(199, False), (200, True), (300, True), (400, True), (401, False)],
    )
    def test_silhouette_size_range(
        self, blank_atlas, paint_rect, grid, test_config, size, accepted
    ):
        """Silhouettes must measure 200-400 px on both axes."""
        part = self._part(paint_rect(blank_atlas(), 0, 0, size - 1, size - 1))
        record = count_cells(part, grid)

        assert is_accepted(part, record, grid, OwnershipPolicy.SILHOUETTE, test_config) is accepted

    def test_silhouette_small_icon_rejected(self, blank_atlas, paint_rect, grid, test_config):
        part = self._part(paint_rect(blank_atlas(), 100, 100, 149, 149))
        record = count_cells(part, grid)

        assert is_accepted(part, record, grid, OwnershipPolicy.ICON, test_config)
        assert not is_accepted(part, record, grid, OwnershipPolicy.SILHOUETTE, test_config)

    def test_silhouette_overhang_rejected(self, blank_atlas, paint_rect, grid, test_config):
        """A silhouette reaching far past its cell's grid lines is dropped."""
        # Centred in cell (1, 1) but 100 px past its left line at x=341
        part = self._part(paint_rect(blank_atlas(), 241, 400, 640, 640))
        record = count_cells(part, grid)

        assert not is_accepted(part, record, grid, OwnershipPolicy.SILHOUETTE, test_config)

    def test_silhouette_small_overhang_accepted(
        self, blank_atlas, paint_rect, grid, test_config
    ):
        """Overhang within 20% of a cell size is tolerated."""
        part = self._part(paint_rect(blank_atlas(), 311, 400, 650, 640))
        record = count_cells(part, grid)

        assert record.span == 2
        assert is_accepted(part, record, grid, OwnershipPolicy.SILHOUETTE, test_config)

    def test_silhouette_bottom_edge_past_grid_line(
        self, blank_atlas, paint_rect, grid, test_config
    ):
        """An edge 119 px past the y=682 line is rejected; 68 px is tolerated."""
        part = self._part(paint_rect(blank_atlas(), 400, 450, 650, 800))
        record = count_cells(part, grid)

        assert record.span == 2
        assert not is_accepted(part, record, grid, OwnershipPolicy.SILHOUETTE, test_config)

        part = self._part(paint_rect(blank_atlas(), 400, 450, 650, 749))

        assert is_accepted(
            part, count_cells(part, grid), grid, OwnershipPolicy.SILHOUETTE, test_config
        )

    def test_silhouette_tolerance_scales_with_config(
        self, blank_atlas, paint_rect, grid, temp_dir
    ):
        """A zero tolerance rejects any edge outside the centre cell."""
        strict = AtlasworksConfig(
            _env_file=None, outputs_dir=temp_dir, silhouette_edge_tolerance=0.0
        )
        part = self._part(paint_rect(blank_atlas(), 340, 400, 640, 640))

        assert not is_accepted(
            part, count_cells(part, grid), grid, OwnershipPolicy.SILHOUETTE, strict
        )

    def test_silhouette_radius_100_disc_accepted(
        self, blank_atlas, paint_disc, grid, test_config
    ):
        """A 201 px disc anywhere inside its cell is a valid silhouette."""
        part = self._part(paint_disc(blank_atlas(), 200, 170, 100))
        record = count_cells(part, grid)

        assert (part.width, part.height) == (201, 201)
        assert is_accepted(part, record, grid, OwnershipPolicy.SILHOUETTE, test_config)


class TestResolveOwnership:
    """Verify end-to-end assignment of parts to cells."""

    def test_every_cell_has_an_entry(self, blank_atlas, grid, test_config):
        result = resolve_ownership([], grid, OwnershipPolicy.ICON, test_config)

        assert sorted(result.approved) == sorted(cell.key for cell in grid.cells)
        assert result.approved_count == 0

    def test_parts_assigned_to_one_cell(self, blank_atlas, paint_rect, grid, test_config):
        pixels = blank_atlas()
        paint_rect(pixels, 10, 10, 40, 40)
        paint_rect(pixels, 700, 700, 720, 720)
        paint_rect(pixels, 100, 100, 120, 120)
        parts = find_parts(pixels)

        result = resolve_ownership(parts, grid, OwnershipPolicy.ICON, test_config)

        assert result.approved[(0, 0)] == [parts[0], parts[1]]
        assert result.approved[(2, 2)] == [parts[2]]
        assert result.rejected == []
        assert result.approved_count == 3

    def test_rejected_parts_listed(self, blank_atlas, grid, test_config):
        """A diagonal line through three cells is rejected in icon policy."""
        pixels = blank_atlas()
        index = np.arange(1024)
        pixels[index, index, 3] = 255
        pixels[index[1:], index[:-1], 3] = 255
        parts = find_parts(pixels)

        result = resolve_ownership(parts, grid, OwnershipPolicy.ICON, test_config)

        assert len(parts) == 1
        assert result.rejected == parts
        assert result.approved_count == 0

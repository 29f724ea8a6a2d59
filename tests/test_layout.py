"""Tests for grid layout and text truncation."""

import pytest

from buzz.layout import (
    CORE_MIN_BAR_WIDTH,
    DEFAULT_TERMINAL_HEIGHT,
    HEADLINE_MIN_BAR_WIDTH,
    MIN_COMMAND_WIDTH,
    GridLayout,
    bar_grid,
    bar_width,
    command_width,
    core_grid,
    headline_grid,
    process_line_budget,
    truncate_left,
)


def row_width(layout: GridLayout, bars: int | None = None) -> int:
    """Columns taken by a row of `bars` bars (a full row by default)."""
    if bars is None:
        bars = layout.bars_per_row
    if bars <= 0:
        return 0
    return bars * layout.bar_width + (bars - 1) * layout.spacing


class TestTruncateLeft:
    """Tests for truncate_left."""

    @pytest.mark.parametrize(
        ("text", "max_width", "expected"),
        [
            ("/usr/bin/test", 20, "/usr/bin/test"),
            ("/usr/bin/test", 13, "/usr/bin/test"),
            ("/very/long/path/to/executable", 20, "...ath/to/executable"),
            ("/path/to/some/very/long/executable/name", 25, "...y/long/executable/name"),
            ("/usr/bin/test", 5, "...st"),
            ("/usr/bin/test", 3, "..."),
            ("/usr/bin/test", 2, ".."),
            ("/usr/bin/test", 1, "."),
            ("/usr/bin/test", 0, ""),
            ("/usr/bin/test", -4, ""),
            ("/path/to/文件/executable", 15, "...件/executable"),
            ("", 10, ""),
        ],
    )
    def test_truncate_left(self, text, max_width, expected):
        """Test left truncation keeps the tail and marks the cut."""
        assert truncate_left(text, max_width) == expected

    @pytest.mark.parametrize("max_width", range(0, 30))
    def test_result_length(self, max_width):
        """Test the result is min(len(s), max_width) characters long."""
        text = "/opt/データ/bin/long-running-service"

        assert len(truncate_left(text, max_width)) == min(len(text), max_width)


class TestBarGrid:
    """Tests for bar_grid."""

    def test_bar_width_formula(self):
        """Test the per-bar width formula."""
        assert bar_width(80, 4, 2) == 18
        assert bar_width(80, 2, 2) == 39
        assert bar_width(81, 2, 2) == 39

    def test_four_per_row_when_it_fits(self):
        """Test the nominal four-per-row grid on a wide terminal."""
        layout = bar_grid(120, 4)

        assert layout == GridLayout(bars_per_row=4, bar_width=28, spacing=2)

    def test_degrades_to_two_per_row(self):
        """Test narrow terminals fall back to two bars per row."""
        layout = bar_grid(60, 4)

        # (60 - 6) // 4 = 13 < 15, so (60 - 2) // 2 = 29
        assert layout.bars_per_row == 2
        assert layout.bar_width == 29

    def test_clamps_to_minimum(self):
        """Test widths below the floor are clamped, even if they overflow."""
        layout = bar_grid(20, 4)

        assert layout.bars_per_row == 2
        assert layout.bar_width == CORE_MIN_BAR_WIDTH
        assert row_width(layout) > 20

    def test_no_degradation_when_disabled(self):
        """Test headline grids keep two per row and only clamp."""
        layout = bar_grid(30, 2, min_bar_width=HEADLINE_MIN_BAR_WIDTH, degrade=False)

        assert layout.bars_per_row == 2
        assert layout.bar_width == HEADLINE_MIN_BAR_WIDTH

    @pytest.mark.parametrize("available", range(2 * CORE_MIN_BAR_WIDTH + 2, 200))
    def test_row_fits_available_width(self, available):
        """Test a full row never overflows once two minimum bars fit."""
        layout = bar_grid(available, 4)

        assert layout.bar_width >= CORE_MIN_BAR_WIDTH
        assert row_width(layout) <= available
        assert available - row_width(layout) < layout.bars_per_row

    def test_headline_grid_uses_full_width(self):
        """Test the headline grid spans the whole terminal."""
        assert row_width(headline_grid(80)) == 80
        assert row_width(headline_grid(81)) == 80

    def test_core_grid(self):
        """Test the core grid for a standard terminal."""
        assert core_grid(80) == GridLayout(bars_per_row=4, bar_width=18, spacing=2)


class TestGridLayout:
    """Tests for GridLayout row helpers."""

    def test_rows_preserve_order(self):
        """Test items fill rows left to right, last row partial."""
        layout = GridLayout(bars_per_row=4, bar_width=18)

        assert layout.rows(list(range(10))) == [[0, 1, 2, 3], [4, 5, 6, 7], [8, 9]]

    def test_rows_empty(self):
        """Test no items means no rows."""
        layout = GridLayout(bars_per_row=4, bar_width=18)

        assert layout.rows([]) == []
        assert layout.row_count(0) == 0

    @pytest.mark.parametrize(("items", "rows"), [(1, 1), (4, 1), (5, 2), (8, 2), (9, 3)])
    def test_row_count(self, items, rows):
        """Test ceiling division of items into rows."""
        assert GridLayout(bars_per_row=4, bar_width=18).row_count(items) == rows


class TestVerticalBudget:
    """Tests for process_line_budget."""

    def test_standard_terminal(self):
        """Test the budget for a 24-line terminal with two core rows."""
        lines_used = 2 + 1 + 2 + 1 + 1

        assert process_line_budget(24, lines_used) == 16

    def test_unknown_height_uses_default(self):
        """Test height 0 is treated as the default height."""
        assert process_line_budget(0, 7) == process_line_budget(DEFAULT_TERMINAL_HEIGHT, 7)

    @pytest.mark.parametrize("height", [1, 2, 5, 8, 9])
    def test_always_at_least_one_line(self, height):
        """Test tiny terminals still show one process."""
        assert process_line_budget(height, 7) >= 1

    def test_command_width(self):
        """Test the command column width and its floor."""
        assert command_width(80) == 55
        assert command_width(30) == MIN_COMMAND_WIDTH
        assert command_width(0) == MIN_COMMAND_WIDTH

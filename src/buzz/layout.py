"""Grid layout and text fitting for the dashboard frame."""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import TypeVar

T = TypeVar("T")

# Columns reserved at the right edge of the frame.
FRAME_MARGIN = 0
BAR_SPACING = 2

HEADLINE_BARS_PER_ROW = 2
HEADLINE_MIN_BAR_WIDTH = 20

CORE_BARS_PER_ROW = 4
# "CPU00" (5) + " 100.0%" (7) + 3 columns of bar
CORE_MIN_BAR_WIDTH = 15

DEFAULT_TERMINAL_HEIGHT = 24
BOTTOM_MARGIN = 1

# PID (10) + space (1) + CPU% (5) + spaces (2) + MEM% (5) + spaces (2)
FIXED_COLUMNS_WIDTH = 25
MIN_COMMAND_WIDTH = 10

ELLIPSIS = "..."


@dataclass(slots=True, frozen=True)
class GridLayout:
    """Geometry of a row-major grid of equally sized bars."""

    bars_per_row: int
    bar_width: int
    spacing: int = BAR_SPACING

    def rows(self, items: Sequence[T]) -> list[Sequence[T]]:
        """Split items into rows left to right; the last row may be partial."""
        step = self.bars_per_row
        return [items[i : i + step] for i in range(0, len(items), step)]

    def row_count(self, item_count: int) -> int:
        """Number of rows needed for item_count bars."""
        if item_count <= 0:
            return 0
        return -(-item_count // self.bars_per_row)


def available_width(terminal_width: int) -> int:
    """Horizontal space the bar grids may use."""
    return max(0, terminal_width - FRAME_MARGIN)


def bar_width(available: int, bars_per_row: int, spacing: int = BAR_SPACING) -> int:
    """Width of each bar when bars_per_row bars share `available` columns."""
    return (available - (bars_per_row - 1) * spacing) // bars_per_row


def bar_grid(
    available: int,
    bars_per_row: int,
    *,
    spacing: int = BAR_SPACING,
    min_bar_width: int = CORE_MIN_BAR_WIDTH,
    degrade: bool = True,
) -> GridLayout:
    """
    Fit bars_per_row bars into `available` columns.

    When the bars come out narrower than min_bar_width, the grid first drops
    to two bars per row (if degrade is set), then clamps the width to
    min_bar_width. A clamped grid can be wider than `available`.
    """
    bars_per_row = max(1, bars_per_row)
    width = bar_width(available, bars_per_row, spacing)

    if width < min_bar_width and degrade and bars_per_row > 2:
        bars_per_row = 2
        width = bar_width(available, bars_per_row, spacing)

    if width < min_bar_width:
        width = min_bar_width

    return GridLayout(bars_per_row=bars_per_row, bar_width=width, spacing=spacing)


def headline_grid(terminal_width: int) -> GridLayout:
    """Two-per-row grid for the CPU/GPU and memory gauges."""
    return bar_grid(
        available_width(terminal_width),
        HEADLINE_BARS_PER_ROW,
        min_bar_width=HEADLINE_MIN_BAR_WIDTH,
        degrade=False,
    )


def core_grid(terminal_width: int) -> GridLayout:
    """Grid for the per-core CPU bars."""
    return bar_grid(
        available_width(terminal_width),
        CORE_BARS_PER_ROW,
        min_bar_width=CORE_MIN_BAR_WIDTH,
    )


def process_line_budget(
    terminal_height: int, lines_used: int, bottom_margin: int = BOTTOM_MARGIN
) -> int:
    """Number of process rows that fit below lines_used; never less than 1."""
    if terminal_height <= 0:
        terminal_height = DEFAULT_TERMINAL_HEIGHT
    return max(1, terminal_height - lines_used - bottom_margin)


def command_width(terminal_width: int) -> int:
    """Columns left for the COMMAND column of the process table."""
    return max(MIN_COMMAND_WIDTH, terminal_width - FIXED_COLUMNS_WIDTH)


def truncate_left(s: str, max_width: int) -> str:
    """
    Shorten s to at most max_width characters, keeping its tail.

    The cut is marked with a leading "...", so "/very/long/path/to/executable"
    at width 20 becomes "...ath/to/executable". Widths of 3 or less yield
    only the dots.
    """
    if len(s) <= max_width:
        return s
    if max_width <= 0:
        return ""
    if max_width <= len(ELLIPSIS):
        return ELLIPSIS[:max_width]
    return ELLIPSIS + s[len(s) - (max_width - len(ELLIPSIS)) :]

"""Frame composer: turns a metrics snapshot into one full-screen text frame."""

from collections.abc import Sequence

from rich.style import Style
from rich.text import Text

from buzz.bars import band_of, clamp_percent, render_bar
from buzz.layout import (
    GridLayout,
    command_width,
    core_grid,
    headline_grid,
    process_line_budget,
    truncate_left,
)
from buzz.models import MetricsSnapshot, ProcessEntry

LOADING_TEXT = "Loading..."
HEADER_STYLE = Style(bold=True, underline=True)
GAP = " " * 2

# Headline rows, then a blank line, the core rows, a blank line and the
# process table header.
HEADLINE_ROWS = 2
SEPARATOR_ROWS = 2
HEADER_ROWS = 1


def _bar_row(bars: Sequence[Text], layout: GridLayout) -> Text:
    line = Text()
    for index, bar in enumerate(bars):
        if index:
            line.append(" " * layout.spacing)
        line.append_text(bar)
    return line


def _headline_rows(snapshot: MetricsSnapshot, width: int) -> list[Text]:
    layout = headline_grid(width)
    cpu = clamp_percent(snapshot.cpu_usage)
    gpu = clamp_percent(snapshot.gpu_usage)
    mem = clamp_percent(snapshot.memory_usage)
    gpu_mem = clamp_percent(snapshot.gpu_memory_usage)

    gauges = [
        ("CPU Usage", f"{cpu:5.1f}%", cpu),
        ("GPU Usage", f"{gpu:3.0f}%", gpu),
        ("Memory", f"{mem:5.1f}%", mem),
        ("GPU Memory", f"{gpu_mem:4.1f}%", gpu_mem),
    ]
    bars = [
        render_bar(label, text, value, layout.bar_width, underline=True)
        for label, text, value in gauges
    ]
    return [_bar_row(row, layout) for row in layout.rows(bars)]


def _core_rows(cores: Sequence[float], layout: GridLayout) -> list[Text]:
    bars = []
    for index, usage in enumerate(cores):
        usage = clamp_percent(usage)
        label = f"CPU{index:02d}"
        bars.append(render_bar(label, f"{usage:4.1f}%", usage, layout.bar_width, underline=True))
    return [_bar_row(row, layout) for row in layout.rows(bars)]


def _process_header() -> Text:
    return Text(f"{'PID':<10s} {'CPU%':>5s}  {'MEM%':>5s}  COMMAND", style=HEADER_STYLE)


def _process_row(proc: ProcessEntry, max_command: int) -> Text:
    cpu = clamp_percent(proc.cpu_percent)
    mem = clamp_percent(proc.memory_percent)
    row = Text(f"{proc.pid:<10d} ")
    row.append(f"{cpu:5.1f}", style=band_of(cpu).style())
    row.append(GAP)
    row.append(f"{mem:5.1f}", style=band_of(mem).style())
    row.append(GAP)
    row.append(truncate_left(proc.command, max_command))
    return row


def compose_frame(snapshot: MetricsSnapshot, width: int, height: int) -> Text:
    """
    Compose the dashboard for one tick.

    Args:
        snapshot: Metrics to display.
        width: Terminal width; 0 means not yet known.
        height: Terminal height; 0 falls back to a default height.

    Returns:
        The styled frame, one line per dashboard row.
    """
    if width <= 0:
        return Text(LOADING_TEXT)

    lines = _headline_rows(snapshot, width)
    lines.append(Text())

    cores = core_grid(width)
    lines.extend(_core_rows(snapshot.cpu_cores, cores))
    lines.append(Text())

    core_rows = cores.row_count(len(snapshot.cpu_cores))
    lines_used = HEADLINE_ROWS + SEPARATOR_ROWS + core_rows + HEADER_ROWS
    visible = min(process_line_budget(height, lines_used), len(snapshot.processes))

    lines.append(_process_header())
    max_command = command_width(width)
    for proc in snapshot.processes[:visible]:
        lines.append(_process_row(proc, max_command))

    frame = Text("\n").join(lines)
    frame.no_wrap = True
    frame.overflow = "crop"
    return frame


def render_frame(snapshot: MetricsSnapshot, width: int, height: int) -> str:
    """Compose the frame and return it without styling."""
    return compose_frame(snapshot, width, height).plain

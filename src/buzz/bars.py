"""Progress bars with overlaid label and percentage text."""

import math
from enum import Enum

from rich.style import Style
from rich.text import Text

WARN_THRESHOLD = 50.0
CRITICAL_THRESHOLD = 80.0


class Band(Enum):
    """Severity bands a percentage falls into."""

    OK = "green"
    WARN = "yellow"
    CRITICAL = "red"

    @property
    def color(self) -> str:
        """Rich color name used for this band."""
        return self.value

    def style(self, *, underline: bool = False) -> Style:
        """Plain style: band color on the default background."""
        return Style(color=self.color, underline=underline)

    def inverted_style(self, *, underline: bool = False) -> Style:
        """Inverted style: black text on the band color."""
        return Style(color="black", bgcolor=self.color, underline=underline)


def clamp_percent(value: float) -> float:
    """Clamp a percentage to [0, 100]. NaN counts as 0."""
    if math.isnan(value):
        return 0.0
    return min(max(value, 0.0), 100.0)


def band_of(percent: float) -> Band:
    """Map a percentage to its severity band."""
    percent = clamp_percent(percent)
    if percent < WARN_THRESHOLD:
        return Band.OK
    if percent < CRITICAL_THRESHOLD:
        return Band.WARN
    return Band.CRITICAL


def filled_columns(percent: float, width: int) -> int:
    """Number of leftmost columns covered by the filled part of a bar."""
    if width <= 0:
        return 0
    return math.floor(clamp_percent(percent) / 100.0 * width)


def _overlay(
    text: Text, chunk: str, start: int, filled: int, plain: Style, inverted: Style
) -> None:
    """Append chunk starting at column start, inverting the part left of filled."""
    split = min(max(filled - start, 0), len(chunk))
    if split:
        text.append(chunk[:split], style=inverted)
    if split < len(chunk):
        text.append(chunk[split:], style=plain)


def render_bar(
    label: str,
    percent_text: str,
    percent: float,
    width: int,
    *,
    underline: bool = False,
    band: Band | None = None,
) -> Text:
    """
    Render a bar of `width` columns with the label on the left and the
    percentage text on the right.

    Columns left of the fill boundary use the inverted band style, so the
    text appears to sit inside the filled region; the rest use the plain
    band color. Lengths are counted in code points.

    Args:
        label: Text drawn from the left edge.
        percent_text: Text drawn flush against the right edge.
        percent: Value controlling the fill; clamped to [0, 100].
        width: Total bar width in columns.
        underline: Underline every cell, filled or not.
        band: Color band override; derived from `percent` when omitted.

    Returns:
        A Text of exactly `width` characters, or `label + " " + percent_text`
        when the bar has no room for the two texts.
    """
    if width <= 0:
        return Text(f"{label} {percent_text}")

    percent = clamp_percent(percent)
    if band is None:
        band = band_of(percent)
    plain = band.style(underline=underline)
    inverted = band.inverted_style(underline=underline)

    if len(label) + len(percent_text) >= width:
        return Text(f"{label} {percent_text}", style=plain)

    filled = filled_columns(percent, width)
    percent_start = width - len(percent_text)
    filler = " " * (percent_start - len(label))

    bar = Text()
    _overlay(bar, label, 0, filled, plain, inverted)
    _overlay(bar, filler, len(label), filled, plain, inverted)
    _overlay(bar, percent_text, percent_start, filled, plain, inverted)
    return bar

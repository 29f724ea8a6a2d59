"""Command-line settings for buzz."""

import argparse
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

DEFAULT_INTERVAL = 3.0
DEFAULT_SAMPLE_WINDOW = 1.0
DEFAULT_LOG_LEVEL = "INFO"
MIN_INTERVAL = 0.5
MIN_SAMPLE_WINDOW = 0.1


@dataclass(slots=True, frozen=True)
class Settings:
    """Runtime settings taken from the command line."""

    interval: float = DEFAULT_INTERVAL  # seconds between snapshots
    sample_window: float = DEFAULT_SAMPLE_WINDOW  # CPU sampling window per snapshot
    log_file: Path | None = None
    log_level: str = DEFAULT_LOG_LEVEL


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the buzz command."""
    parser = argparse.ArgumentParser(
        prog="buzz",
        description="Terminal dashboard for CPU, memory, GPU and process usage.",
    )
    parser.add_argument(
        "-i",
        "--interval",
        type=float,
        default=DEFAULT_INTERVAL,
        help="seconds between refreshes (default: %(default)s)",
    )
    parser.add_argument(
        "--sample-window",
        type=float,
        default=DEFAULT_SAMPLE_WINDOW,
        help="CPU sampling window in seconds (default: %(default)s)",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="write log messages to this file (the screen is owned by the dashboard)",
    )
    parser.add_argument(
        "--log-level",
        default=DEFAULT_LOG_LEVEL,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="log level for --log-file (default: %(default)s)",
    )
    return parser


def parse_args(argv: Sequence[str] | None = None) -> Settings:
    """Parse command-line arguments into Settings."""
    args = build_parser().parse_args(argv)
    return Settings(
        interval=max(MIN_INTERVAL, args.interval),
        sample_window=max(MIN_SAMPLE_WINDOW, args.sample_window),
        log_file=args.log_file,
        log_level=args.log_level,
    )


def configure_logging(settings: Settings) -> None:
    """Send log records to the log file, if one was requested."""
    if settings.log_file is None:
        logging.getLogger("buzz").addHandler(logging.NullHandler())
        return

    logging.basicConfig(
        filename=settings.log_file,
        level=getattr(logging, settings.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

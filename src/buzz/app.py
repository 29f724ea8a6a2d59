"""buzz - Main Textual application."""

import logging
import sys
from collections.abc import Sequence
from queue import Empty, Queue

from rich.text import Text
from textual import events
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Static

from buzz.config import Settings, configure_logging, parse_args
from buzz.frame import compose_frame
from buzz.gpu import GpuProbe
from buzz.models import MetricsSnapshot, ViewState
from buzz.monitor import StatsMonitor, StatsProvider

logger = logging.getLogger(__name__)

QUEUE_POLL_INTERVAL = 0.25
# The monitor thread is a daemon; quitting does not wait out a collection.
SHUTDOWN_TIMEOUT = 0.2


class DashboardView(Static):
    """Full-screen widget showing the composed dashboard frame."""

    DEFAULT_CSS = """
    DashboardView {
        width: 1fr;
        height: 1fr;
    }
    """

    def __init__(self, *args, **kwargs) -> None:
        """Initialize DashboardView."""
        super().__init__(*args, **kwargs)
        self._frame: Text = compose_frame(MetricsSnapshot.empty(), 0, 0)

    @property
    def frame(self) -> Text:
        """Get the most recently composed frame."""
        return self._frame

    def show(self, state: ViewState) -> None:
        """Compose a frame from the view state and display it."""
        self._frame = compose_frame(state.snapshot, state.width, state.height)
        self.update(self._frame)


class BuzzApp(App):
    """Main buzz application."""

    TITLE = "buzz"
    SUB_TITLE = "System Dashboard"

    CSS = """
    Screen {
        layout: vertical;
        overflow: hidden;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("Q", "quit", "Quit", show=False),
        Binding("escape", "quit", "Quit", show=False, priority=True),
        Binding("ctrl+c", "quit", "Quit", show=False, priority=True),
    ]

    def __init__(
        self,
        provider: StatsProvider | None = None,
        interval: float = 3.0,
    ) -> None:
        """
        Initialize the BuzzApp.

        Args:
            provider: Snapshot source. Defaults to a StatsProvider with its
                own GPU probe.
            interval: Seconds between snapshots.
        """
        super().__init__()
        if provider is None:
            provider = StatsProvider(gpu=GpuProbe())
        self._state = ViewState()
        self._update_queue: Queue[MetricsSnapshot] = Queue()
        self._monitor = StatsMonitor(self._update_queue, provider, interval=interval)

    @property
    def state(self) -> ViewState:
        """Get the current view state."""
        return self._state

    def compose(self) -> ComposeResult:
        """Compose the application layout."""
        yield DashboardView(id="dashboard")

    def on_mount(self) -> None:
        """Start the stats monitor when the app is mounted."""
        self._state.resize(self.size.width, self.size.height)
        self._redraw()
        self._monitor.start()
        # Set up a timer to poll the queue for updates
        self.set_interval(QUEUE_POLL_INTERVAL, self._check_for_updates)

    def on_resize(self, event: events.Resize) -> None:
        """Redraw at the new terminal size without waiting for a tick."""
        self._state.resize(event.size.width, event.size.height)
        self._redraw()

    def on_unmount(self) -> None:
        """Stop the monitor thread when the app shuts down."""
        self._monitor.stop(timeout=SHUTDOWN_TIMEOUT)

    def _check_for_updates(self) -> None:
        """Check the queue for new snapshots and refresh the dashboard."""
        # Drain the queue, keeping only the most recent snapshot
        snapshot = None
        while True:
            try:
                snapshot = self._update_queue.get_nowait()
            except Empty:
                break

        if snapshot is not None:
            self._state.replace_snapshot(snapshot)
            self._redraw()

    def _redraw(self) -> None:
        """Recompose the frame from the current state."""
        try:
            self.query_one("#dashboard", DashboardView).show(self._state)
        except Exception:
            # The dashboard must keep running even if one frame fails
            logger.exception("Failed to redraw dashboard")

    def action_quit(self) -> None:
        """Handle quit action with graceful cleanup."""
        self._monitor.stop(timeout=SHUTDOWN_TIMEOUT)
        self.exit()


def main(argv: Sequence[str] | None = None) -> None:
    """Entry point for the buzz application."""
    settings: Settings = parse_args(argv)
    configure_logging(settings)

    # Vendor detection shells out; do it once before the screen takes over
    gpu = GpuProbe()
    gpu.detect()

    provider = StatsProvider(gpu=gpu, sample_interval=settings.sample_window)
    app = BuzzApp(provider=provider, interval=settings.interval)
    try:
        app.run()
    except Exception as exc:
        logger.exception("Display failed")
        print(f"Error running application: {exc}", file=sys.stderr)
        sys.exit(1)

    if app.return_code:
        sys.exit(app.return_code)


if __name__ == "__main__":
    main()

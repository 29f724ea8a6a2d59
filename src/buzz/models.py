"""Data models for buzz."""

from dataclasses import dataclass, field


@dataclass(slots=True, frozen=True)
class ProcessEntry:
    """Immutable snapshot of a single process row."""

    pid: int
    cpu_percent: float
    memory_percent: float
    command: str  # exe path, process name, or "" when both lookups fail


@dataclass(slots=True, frozen=True)
class MetricsSnapshot:
    """One immutable sample of every metric, taken once per refresh tick."""

    cpu_usage: float = 0.0  # average of cpu_cores
    gpu_usage: float = 0.0
    memory_usage: float = 0.0
    gpu_memory_usage: float = 0.0
    cpu_cores: tuple[float, ...] = ()
    processes: tuple[ProcessEntry, ...] = ()  # sorted by cpu_percent, descending

    @classmethod
    def empty(cls) -> "MetricsSnapshot":
        """Snapshot shown before the first collection completes."""
        return cls()


@dataclass(slots=True)
class ViewState:
    """
    Mutable display state owned by the refresh loop.

    Width and height stay 0 until the terminal reports its size.
    """

    width: int = 0
    height: int = 0
    snapshot: MetricsSnapshot = field(default_factory=MetricsSnapshot.empty)

    def resize(self, width: int, height: int) -> None:
        """Store new terminal dimensions."""
        self.width = max(0, width)
        self.height = max(0, height)

    def replace_snapshot(self, snapshot: MetricsSnapshot) -> None:
        """Swap in the snapshot from the latest tick."""
        self.snapshot = snapshot

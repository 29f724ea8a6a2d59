"""Metrics collection and the background refresh thread for buzz."""

import logging
import threading
import time
from collections.abc import Callable
from queue import Queue

import psutil

from buzz.gpu import GpuProbe
from buzz.models import MetricsSnapshot, ProcessEntry

logger = logging.getLogger(__name__)

MAX_PROCESSES = 100


class StatsProvider:
    """
    Collects a MetricsSnapshot from psutil and the GPU probe.

    collect() never raises: any metric that cannot be read comes back as 0,
    and processes that vanish or deny access mid-scan are skipped.
    """

    def __init__(
        self,
        gpu: GpuProbe | None = None,
        sample_interval: float | None = 1.0,
        max_processes: int = MAX_PROCESSES,
    ) -> None:
        """
        Initialize the StatsProvider.

        Args:
            gpu: Probe for GPU readings. GPU fields stay 0 without one.
            sample_interval: CPU sampling window in seconds. collect() blocks
                for this long. None compares against the previous call instead.
            max_processes: Cap on the number of processes per snapshot.
        """
        self._gpu = gpu
        self._sample_interval = sample_interval
        self._max_processes = max_processes
        # Initialize CPU percent (first non-blocking call returns 0.0)
        psutil.cpu_percent(percpu=True)
        self._prime_process_counters()

    def _prime_process_counters(self) -> None:
        """
        Start per-process CPU counters.

        Process.cpu_percent() returns 0.0 on its first call and idle processes
        are skipped, so without this the first snapshot has no processes.
        psutil.process_iter() keeps the primed Process objects for later calls.
        """
        try:
            for _ in psutil.process_iter(attrs=["cpu_percent"]):
                pass
        except OSError as exc:
            logger.debug("Process counter priming failed: %s", exc)

    def collect(self) -> MetricsSnapshot:
        """Collect a snapshot of the current system state."""
        cores = self._collect_cores()
        cpu_usage = sum(cores) / len(cores) if cores else 0.0
        gpu = self._gpu

        return MetricsSnapshot(
            cpu_usage=cpu_usage,
            gpu_usage=self._read_gpu(gpu.usage) if gpu else 0.0,
            memory_usage=self._collect_memory(),
            gpu_memory_usage=self._read_gpu(gpu.memory_usage) if gpu else 0.0,
            cpu_cores=cores,
            processes=self._collect_processes(),
        )

    def _collect_cores(self) -> tuple[float, ...]:
        try:
            return tuple(psutil.cpu_percent(interval=self._sample_interval, percpu=True))
        except (OSError, RuntimeError) as exc:
            logger.debug("CPU sampling failed: %s", exc)
            return ()

    def _collect_memory(self) -> float:
        try:
            return psutil.virtual_memory().percent
        except (OSError, RuntimeError) as exc:
            logger.debug("Memory sampling failed: %s", exc)
            return 0.0

    def _read_gpu(self, reading: Callable[[], float]) -> float:
        try:
            return reading()
        except Exception:
            logger.debug("GPU %s reading failed", reading.__name__, exc_info=True)
            return 0.0

    def _collect_processes(self) -> tuple[ProcessEntry, ...]:
        """
        Collect the busiest processes, sorted by CPU usage (highest first).

        Idle processes (0% CPU) are left out. CPU percentages cover the time
        since the previous scan (or the priming pass in __init__).
        """
        processes: list[ProcessEntry] = []
        attrs = ["pid", "name", "exe", "cpu_percent", "memory_percent"]

        try:
            for proc in psutil.process_iter(attrs=attrs):
                try:
                    info = proc.info
                    cpu_percent = info.get("cpu_percent") or 0.0
                    if cpu_percent == 0:
                        continue

                    processes.append(
                        ProcessEntry(
                            pid=info.get("pid", proc.pid),
                            cpu_percent=cpu_percent,
                            memory_percent=info.get("memory_percent") or 0.0,
                            command=info.get("exe") or info.get("name") or "",
                        )
                    )
                except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
                    # Process died mid-scan or is off limits
                    continue
        except OSError as exc:
            logger.debug("Process enumeration failed: %s", exc)

        processes.sort(key=lambda p: p.cpu_percent, reverse=True)
        return tuple(processes[: self._max_processes])


class StatsMonitor:
    """
    Background refresh thread.

    Collects a snapshot, pushes it to a thread-safe Queue, then waits for
    the refresh interval or a stop request.
    """

    def __init__(
        self,
        update_queue: Queue[MetricsSnapshot],
        provider: StatsProvider,
        interval: float = 3.0,
    ) -> None:
        """
        Initialize the StatsMonitor.

        Args:
            update_queue: Thread-safe queue to push snapshots to.
            provider: Source of snapshots.
            interval: Seconds to wait between collections. Default 3.0s.
        """
        self._queue = update_queue
        self._provider = provider
        self._interval = interval
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def is_running(self) -> bool:
        """Check if the monitor thread is running."""
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the monitoring thread."""
        if self.is_running:
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._poll_loop,
            daemon=True,
            name="StatsMonitor",
        )
        self._thread.start()

    def stop(self, timeout: float | None = 5.0) -> None:
        """
        Stop the monitoring thread.

        A collection already in progress finishes first, so this can block
        for up to one sampling window.

        Args:
            timeout: How long to wait for thread to stop (seconds).
        """
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None

    def _poll_loop(self) -> None:
        """
        Main polling loop running in the background thread.

        Collection time counts toward the interval, so snapshots arrive every
        `interval` seconds unless a collection takes longer than that.
        """
        while not self._stop_event.is_set():
            started = time.monotonic()
            try:
                snapshot = self._provider.collect()
            except Exception:
                # Keep the loop alive; the next tick retries
                logger.exception("Snapshot collection failed")
            else:
                if not self._stop_event.is_set():
                    self._queue.put(snapshot)

            # Wait out the rest of the interval or until stop is requested
            elapsed = time.monotonic() - started
            self._stop_event.wait(timeout=max(0.0, self._interval - elapsed))

"""Verification Test: Chaos Monkey - processes dying while stats are collected.

A process that disappears mid-scan is an unavailable metric: it must be
skipped, never reported as an error, and the refresh loop must keep running.
"""

import multiprocessing
import random
import time
from queue import Empty, Queue

import pytest

from buzz.models import MetricsSnapshot
from buzz.monitor import StatsMonitor, StatsProvider


def dummy_worker(duration: float = 60.0) -> None:
    """A dummy worker process that sleeps for a given duration."""
    try:
        time.sleep(duration)
    except (KeyboardInterrupt, SystemExit):
        pass


def busy_worker(duration: float = 60.0) -> None:
    """A dummy worker that burns CPU so it shows up in the process list."""
    deadline = time.time() + duration
    try:
        while time.time() < deadline:
            pass
    except (KeyboardInterrupt, SystemExit):
        pass


class TestChaosMonkey:
    """Chaos Monkey verification suite tests."""

    def test_monitor_survives_process_termination(self):
        """
        Test that the monitor keeps delivering snapshots while processes die.

        Busy workers are terminated at random between collections so some
        of them vanish while psutil is iterating.
        """
        processes = []
        for _ in range(8):
            p = multiprocessing.Process(target=busy_worker, args=(30.0,))
            p.start()
            processes.append(p)

        queue: Queue[MetricsSnapshot] = Queue()
        monitor = StatsMonitor(queue, StatsProvider(sample_interval=0.1), interval=0.1)

        try:
            monitor.start()
            assert queue.get(timeout=5.0) is not None

            for p in random.sample(processes, 6):
                p.terminate()
                time.sleep(0.05)

            snapshots_after_chaos = 0
            start_time = time.time()
            while time.time() - start_time < 3.0:
                try:
                    snapshot = queue.get(timeout=1.0)
                except Empty:
                    continue
                snapshots_after_chaos += 1
                assert isinstance(snapshot.processes, tuple)

            assert snapshots_after_chaos >= 3, (
                f"Expected at least 3 snapshots after chaos, got {snapshots_after_chaos}"
            )
            assert monitor.is_running, "Monitor should still be running after chaos"

        finally:
            monitor.stop()
            for p in processes:
                if p.is_alive():
                    p.terminate()
            for p in processes:
                p.join(timeout=1.0)

    def test_terminated_process_is_skipped(self):
        """
        Test that a process killed before collection does not appear.

        Process collection must not raise for a pid that no longer exists.
        """
        p = multiprocessing.Process(target=busy_worker, args=(60.0,))
        p.start()
        time.sleep(0.2)

        provider = StatsProvider(sample_interval=None)
        provider._collect_processes()

        p.terminate()
        p.join(timeout=1.0)
        dead_pid = p.pid

        try:
            processes = provider._collect_processes()
        except Exception as e:
            pytest.fail(f"_collect_processes raised an exception: {e}")

        assert dead_pid not in {proc.pid for proc in processes}

    def test_zombie_process_handling(self):
        """
        Test that the monitor handles zombie processes gracefully.

        A child that exits before the parent reaps it stays a zombie until
        join(); collection must not crash on it.
        """
        queue: Queue[MetricsSnapshot] = Queue()
        monitor = StatsMonitor(queue, StatsProvider(sample_interval=0.1), interval=0.2)

        monitor.start()

        try:
            p = multiprocessing.Process(target=dummy_worker, args=(0.1,))
            p.start()
            time.sleep(0.3)

            for _ in range(3):
                try:
                    snapshot = queue.get(timeout=2.0)
                    assert isinstance(snapshot.processes, tuple)
                except Empty:
                    continue

            p.join(timeout=1.0)

            assert monitor.is_running, "Monitor should survive zombie processes"

        finally:
            monitor.stop()

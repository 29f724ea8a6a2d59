"""GPU utilization via vendor command-line tools (nvidia-smi, rocm-smi)."""

import logging
import subprocess
import threading
from collections.abc import Callable
from enum import Enum

logger = logging.getLogger(__name__)

NVIDIA_USAGE_CMD = ["nvidia-smi", "--query-gpu=utilization.gpu", "--format=csv,noheader,nounits"]
NVIDIA_MEMORY_CMD = [
    "nvidia-smi",
    "--query-gpu=memory.used,memory.total",
    "--format=csv,noheader,nounits",
]
ROCM_USAGE_CMD = ["rocm-smi", "--showuse"]
ROCM_MEMORY_CMD = ["rocm-smi", "--showmeminfo", "vram"]

ROCM_DEVICE = "GPU[0]"

Runner = Callable[[list[str], float], str | None]


class GpuVendor(Enum):
    """GPU vendors whose tools we know how to read."""

    NONE = "none"
    NVIDIA = "nvidia"
    AMD = "amd"


def run_command(args: list[str], timeout: float) -> str | None:
    """Run a command and return its stdout, or None if it failed."""
    try:
        result = subprocess.run(
            args,
            capture_output=True,
            text=True,
            timeout=timeout,
            check=True,
        )
    except (OSError, subprocess.SubprocessError) as exc:
        logger.debug("%s failed: %s", args[0], exc)
        return None
    return result.stdout


def _to_float(value: str) -> float | None:
    try:
        return float(value.strip())
    except ValueError:
        return None


def _value_after_last_colon(line: str) -> str | None:
    _, sep, value = line.rpartition(":")
    if not sep:
        return None
    return value.strip()


def parse_nvidia_utilization(output: str) -> float:
    """Parse `utilization.gpu` csv output (first GPU)."""
    lines = output.strip().splitlines()
    if not lines:
        return 0.0
    return _to_float(lines[0]) or 0.0


def parse_nvidia_memory(output: str) -> float:
    """Parse `memory.used,memory.total` csv output into a used percentage."""
    lines = output.strip().splitlines()
    if not lines:
        return 0.0
    parts = lines[0].split(",")
    if len(parts) != 2:
        return 0.0
    used, total = _to_float(parts[0]), _to_float(parts[1])
    if used is None or not total:
        return 0.0
    return used / total * 100.0


def parse_rocm_usage(output: str) -> float:
    """
    Parse `rocm-smi --showuse` output.

    The line of interest looks like ``GPU[0]    : GPU use (%): 25``.
    """
    for line in output.splitlines():
        if line.strip().startswith(ROCM_DEVICE) and "GPU use (%)" in line:
            value = _value_after_last_colon(line)
            usage = _to_float(value) if value is not None else None
            if usage is not None:
                return usage
    return 0.0


def parse_rocm_vram(output: str) -> float:
    """
    Parse `rocm-smi --showmeminfo vram` output into a used percentage.

    Needs both ``VRAM Total Memory (B)`` and ``VRAM Total Used Memory (B)``
    for GPU[0].
    """
    total: float | None = None
    used: float | None = None
    for line in output.splitlines():
        if not line.strip().startswith(ROCM_DEVICE):
            continue
        value = _value_after_last_colon(line)
        if value is None:
            continue
        if "VRAM Total Used Memory (B)" in line:
            used = _to_float(value)
        elif "VRAM Total Memory (B)" in line:
            total = _to_float(value)
        if total is not None and used is not None:
            break

    if total and used is not None:
        return used / total * 100.0
    return 0.0


class GpuProbe:
    """
    Reads GPU utilization for whichever vendor tool is installed.

    Vendor detection shells out, so it runs once per probe and is cached.
    Callers racing on the first detection wait for it to finish and then
    share the result. Every reading returns 0.0 when no tool is available or
    its output cannot be parsed.
    """

    def __init__(self, runner: Runner = run_command, timeout: float = 2.0) -> None:
        """
        Initialize the GpuProbe.

        Args:
            runner: Runs a command, returning stdout or None on failure.
            timeout: Seconds allowed per vendor tool invocation.
        """
        self._runner = runner
        self._timeout = timeout
        self._lock = threading.Lock()
        self._vendor: GpuVendor | None = None

    def detect(self) -> GpuVendor:
        """Detect the GPU vendor once and return the cached result."""
        vendor = self._vendor
        if vendor is not None:
            return vendor

        with self._lock:
            if self._vendor is None:
                self._vendor = self._detect()
                logger.info("GPU vendor detected: %s", self._vendor.value)
            return self._vendor

    def _detect(self) -> GpuVendor:
        if self._run(NVIDIA_USAGE_CMD) is not None:
            return GpuVendor.NVIDIA
        if self._run(ROCM_USAGE_CMD) is not None:
            return GpuVendor.AMD
        return GpuVendor.NONE

    def _run(self, args: list[str]) -> str | None:
        return self._runner(args, self._timeout)

    def usage(self) -> float:
        """GPU utilization percentage, 0.0 if unavailable."""
        vendor = self.detect()
        if vendor is GpuVendor.NVIDIA:
            output = self._run(NVIDIA_USAGE_CMD)
            return parse_nvidia_utilization(output) if output is not None else 0.0
        if vendor is GpuVendor.AMD:
            output = self._run(ROCM_USAGE_CMD)
            return parse_rocm_usage(output) if output is not None else 0.0
        return 0.0

    def memory_usage(self) -> float:
        """GPU memory used percentage, 0.0 if unavailable."""
        vendor = self.detect()
        if vendor is GpuVendor.NVIDIA:
            output = self._run(NVIDIA_MEMORY_CMD)
            return parse_nvidia_memory(output) if output is not None else 0.0
        if vendor is GpuVendor.AMD:
            output = self._run(ROCM_MEMORY_CMD)
            return parse_rocm_vram(output) if output is not None else 0.0
        return 0.0

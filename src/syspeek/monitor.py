"""Metric acquisition and polling engine for syspeek."""

import logging
import threading
import time
from collections.abc import Callable
from queue import Queue

import psutil

from syspeek.metrics import calculate_usage
from syspeek.models import CpuCounterSnapshot
from syspeek.power import PowerStatusNormalizer
from syspeek.report import Report

logger = logging.getLogger(__name__)

# psutil reports CPU times in seconds; counters are kept as integer ticks.
CLOCK_TICKS = 100
DEFAULT_SETTLE_INTERVAL = 0.2


def read_cpu_counters() -> CpuCounterSnapshot:
    """Read aggregate CPU time counters. Fields the platform lacks are 0."""
    times = psutil.cpu_times()

    def ticks(field: str) -> int:
        return round(getattr(times, field, 0.0) * CLOCK_TICKS)

    return CpuCounterSnapshot(
        user=ticks("user"),
        nice=ticks("nice"),
        system=ticks("system"),
        idle=ticks("idle"),
        iowait=ticks("iowait"),
        irq=ticks("irq"),
        softirq=ticks("softirq"),
    )


def read_memory() -> tuple[int, int]:
    """Return (used, total) physical memory in bytes."""
    mem = psutil.virtual_memory()
    return mem.used, mem.total


def sample_cpu_usage(
    settle_interval: float = DEFAULT_SETTLE_INTERVAL,
    read_counters: Callable[[], CpuCounterSnapshot] = read_cpu_counters,
    sleep: Callable[[float], None] = time.sleep,
) -> float:
    """
    Measure CPU usage over a short settle interval.

    The two counter reads happen strictly in order, with the sleep between
    them so the cumulative counters can advance.
    """
    start = read_counters()
    sleep(settle_interval)
    end = read_counters()
    return calculate_usage(start, end)


def collect_report(
    power: PowerStatusNormalizer,
    settle_interval: float = DEFAULT_SETTLE_INTERVAL,
    read_counters: Callable[[], CpuCounterSnapshot] = read_cpu_counters,
    sleep: Callable[[float], None] = time.sleep,
) -> Report:
    """Collect one full report: CPU, memory and power."""
    cpu_percent = sample_cpu_usage(settle_interval, read_counters, sleep)
    memory_used, memory_total = read_memory()
    return Report(
        cpu_percent=cpu_percent,
        memory_used=memory_used,
        memory_total=memory_total,
        power=power.status(),
    )


class SystemMonitor:
    """
    Background monitor that collects reports on a fixed poll rate.

    Runs in a separate daemon thread and pushes each Report to a thread-safe
    Queue. A failed collection cycle is logged and the loop keeps going.
    """

    def __init__(
        self,
        update_queue: Queue[Report],
        power: PowerStatusNormalizer,
        poll_rate: float = 5.0,
        settle_interval: float = DEFAULT_SETTLE_INTERVAL,
    ) -> None:
        """
        Initialize the SystemMonitor.

        Args:
            update_queue: Thread-safe queue to push reports to.
            power: Power strategy used for every report.
            poll_rate: Seconds to wait between reports, at least 0.1s. Default 5.0s.
            settle_interval: Seconds between the two CPU counter reads.
        """
        self._queue = update_queue
        self._power = power
        self.poll_rate = poll_rate
        self._settle_interval = settle_interval
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def poll_rate(self) -> float:
        """Get the current poll rate."""
        return self._poll_rate

    @poll_rate.setter
    def poll_rate(self, value: float) -> None:
        """Set the poll rate."""
        self._poll_rate = max(0.1, value)

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
            name="SystemMonitor",
        )
        self._thread.start()

    def stop(self, timeout: float | None = 5.0) -> None:
        """
        Stop the monitoring thread.

        Args:
            timeout: How long to wait for thread to stop (seconds).
        """
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None

    def _poll_loop(self) -> None:
        """Main polling loop running in the background thread."""
        while not self._stop_event.is_set():
            try:
                report = collect_report(
                    self._power,
                    self._settle_interval,
                    sleep=self._stop_event.wait,
                )
                self._queue.put(report)
            except Exception:
                logger.exception("Failed to collect report")

            self._stop_event.wait(timeout=self._poll_rate)

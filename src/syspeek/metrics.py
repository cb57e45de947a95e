"""CPU usage and byte size computations for syspeek."""

from syspeek.models import CpuCounterSnapshot, FormattedSize, SizeUnit

_UNITS = list(SizeUnit)
_STEP = 1024.0


def calculate_usage(start: CpuCounterSnapshot, end: CpuCounterSnapshot) -> float:
    """
    Calculate CPU utilization between two counter snapshots.

    Args:
        start: Snapshot taken first.
        end: Snapshot taken after the sampling interval.

    Returns:
        Percentage of non-idle time in the interval. 0.0 when the counters
        have not advanced. Snapshots passed out of order give a meaningless
        result; callers must keep them in time order.
    """
    delta_total = end.total - start.total
    if delta_total <= 0:
        return 0.0

    delta_idle = end.idle_total - start.idle_total
    return 100.0 * (delta_total - delta_idle) / delta_total


def scale_bytes(num_bytes: int) -> FormattedSize:
    """Scale a byte count to the largest unit it fills, up to TB."""
    value = float(num_bytes)
    index = 0
    while value >= _STEP and index < len(_UNITS) - 1:
        value /= _STEP
        index += 1
    return FormattedSize(scaled_value=value, unit=_UNITS[index])


def format_bytes(num_bytes: int) -> str:
    """Format bytes as a human-readable string, e.g. ``"1.46 KB"``."""
    return str(scale_bytes(num_bytes))

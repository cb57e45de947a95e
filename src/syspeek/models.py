"""Data models for syspeek."""

from dataclasses import dataclass
from enum import Enum


@dataclass(slots=True, frozen=True)
class CpuCounterSnapshot:
    """Immutable snapshot of cumulative CPU time counters since boot."""

    user: int
    nice: int
    system: int
    idle: int
    iowait: int
    irq: int
    softirq: int

    @property
    def total(self) -> int:
        """Sum of all seven counters."""
        return (
            self.user
            + self.nice
            + self.system
            + self.idle
            + self.iowait
            + self.irq
            + self.softirq
        )

    @property
    def idle_total(self) -> int:
        """Time spent idle, including time waiting on I/O."""
        return self.idle + self.iowait


class SizeUnit(Enum):
    """Units of the byte ladder, smallest first."""

    B = "B"
    KB = "KB"
    MB = "MB"
    GB = "GB"
    TB = "TB"

    @property
    def rank(self) -> int:
        """Position of the unit on the ladder (B is 0)."""
        return list(SizeUnit).index(self)


@dataclass(slots=True, frozen=True)
class FormattedSize:
    """A byte count scaled to the largest fitting unit."""

    scaled_value: float
    unit: SizeUnit

    def __str__(self) -> str:
        return f"{self.scaled_value:.2f} {self.unit.value}"


class PowerSource(Enum):
    """Where the host is drawing power from."""

    AC = "AC"
    BATTERY = "Battery"
    UNKNOWN = "Unknown"


@dataclass(slots=True, frozen=True)
class PowerStatus:
    """Normalized power status for one poll."""

    source: PowerSource
    charge: str | None = None  # e.g. "95%", None when unreadable

    @property
    def charge_display(self) -> str:
        return self.charge if self.charge is not None else "N/A"

    @classmethod
    def unknown(cls) -> "PowerStatus":
        """Status used when the platform source cannot be read."""
        return cls(source=PowerSource.UNKNOWN, charge=None)

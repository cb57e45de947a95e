"""Power status acquisition and normalization for syspeek."""

import logging
import subprocess
import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Generic, TypeVar

import psutil

from syspeek.models import PowerSource, PowerStatus

logger = logging.getLogger(__name__)

RawT = TypeVar("RawT")

SYSFS_POWER_SUPPLY = Path("/sys/class/power_supply")
PMSET_COMMAND = ("pmset", "-g", "batt")


@dataclass(slots=True, frozen=True)
class StructuredPowerReading:
    """Raw power fields as read from the OS. None means unreadable."""

    ac_online: object | None
    capacity: object | None


class PowerStatusNormalizer(ABC, Generic[RawT]):
    """
    Turns platform-specific power input into a PowerStatus.

    Subclasses split the work into read_raw() (talks to the OS) and
    normalize() (pure parsing), so the parsing can be tested with
    hand-written input. status() combines the two and never raises.
    """

    name: str = ""

    @abstractmethod
    def read_raw(self) -> RawT | None:
        """Read raw power input from the platform."""

    @abstractmethod
    def normalize(self, raw: RawT | None) -> PowerStatus:
        """Convert raw platform input into a PowerStatus."""

    def status(self) -> PowerStatus:
        """Read and normalize, degrading to Unknown/N/A on any failure."""
        try:
            return self.normalize(self.read_raw())
        except Exception:
            logger.debug("Power status unavailable from %s", self.name, exc_info=True)
            return PowerStatus.unknown()


class StructuredPowerNormalizer(PowerStatusNormalizer[StructuredPowerReading]):
    """Normalizes an AC-online indicator and a battery capacity value."""

    def normalize(self, raw: StructuredPowerReading | None) -> PowerStatus:
        if raw is None:
            return PowerStatus.unknown()
        return PowerStatus(
            source=_classify_ac_online(raw.ac_online),
            charge=_format_capacity(raw.capacity),
        )


def _classify_ac_online(value: object | None) -> PowerSource:
    if value is None:
        return PowerSource.UNKNOWN
    if isinstance(value, str):
        online = value.strip() == "1"
    else:
        online = bool(value)
    return PowerSource.AC if online else PowerSource.BATTERY


def _format_capacity(value: object | None) -> str | None:
    if value is None:
        return None
    if isinstance(value, str):
        text = value.strip()
        return f"{text}%" if text else None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return f"{value}%"


class SysfsPowerNormalizer(StructuredPowerNormalizer):
    """Reads AC and battery state from Linux sysfs power_supply files."""

    name = "sysfs"

    def __init__(
        self,
        root: Path = SYSFS_POWER_SUPPLY,
        ac_supply: str = "AC",
        battery_supply: str = "BAT0",
    ) -> None:
        """
        Initialize the sysfs reader.

        Args:
            root: Directory holding the power_supply entries.
            ac_supply: Name of the mains adapter entry.
            battery_supply: Name of the battery entry.
        """
        self._ac_online_path = root / ac_supply / "online"
        self._capacity_path = root / battery_supply / "capacity"

    def read_raw(self) -> StructuredPowerReading:
        return StructuredPowerReading(
            ac_online=_read_text(self._ac_online_path),
            capacity=_read_text(self._capacity_path),
        )


def _read_text(path: Path) -> str | None:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.debug("Cannot read %s: %s", path, exc)
        return None


class PsutilPowerNormalizer(StructuredPowerNormalizer):
    """Reads AC and battery state through psutil.sensors_battery()."""

    name = "psutil"

    def read_raw(self) -> StructuredPowerReading | None:
        sensors_battery = getattr(psutil, "sensors_battery", None)
        if sensors_battery is None:
            return None
        battery = sensors_battery()
        if battery is None:
            return None
        return StructuredPowerReading(
            ac_online=battery.power_plugged,
            capacity=battery.percent,
        )


class PmsetPowerNormalizer(PowerStatusNormalizer[str]):
    """Scrapes the output of macOS ``pmset -g batt``."""

    name = "pmset"

    def __init__(self, command: tuple[str, ...] = PMSET_COMMAND, timeout: float = 5.0) -> None:
        self._command = command
        self._timeout = timeout

    def read_raw(self) -> str | None:
        try:
            result = subprocess.run(
                self._command,
                capture_output=True,
                timeout=self._timeout,
                check=False,
            )
        except (OSError, subprocess.TimeoutExpired) as exc:
            logger.debug("Cannot run %s: %s", " ".join(self._command), exc)
            return None
        if result.returncode != 0:
            logger.debug("%s exited with status %s", " ".join(self._command), result.returncode)
            return None
        return result.stdout.decode("utf-8", errors="replace")

    def normalize(self, raw: str | None) -> PowerStatus:
        if raw is None:
            return PowerStatus.unknown()
        source = PowerSource.AC if "AC Power" in raw else PowerSource.BATTERY
        return PowerStatus(source=source, charge=extract_percentage(raw))


def extract_percentage(text: str) -> str | None:
    """
    Return the first whitespace-delimited token ending in ``%``.

    The token runs from the nearest whitespace before the first ``%`` (or
    the start of the text) up to and including the ``%``.
    """
    end = text.find("%")
    if end == -1:
        return None
    start = end
    while start > 0 and not text[start - 1].isspace():
        start -= 1
    return text[start : end + 1].strip()


BACKENDS: dict[str, type[PowerStatusNormalizer]] = {
    SysfsPowerNormalizer.name: SysfsPowerNormalizer,
    PmsetPowerNormalizer.name: PmsetPowerNormalizer,
    PsutilPowerNormalizer.name: PsutilPowerNormalizer,
}


def select_normalizer(backend: str = "auto", platform: str | None = None) -> PowerStatusNormalizer:
    """
    Build the power normalizer for a backend name.

    Args:
        backend: One of BACKENDS, or "auto" to choose by platform.
        platform: Platform string to choose by. Defaults to sys.platform.
    """
    if backend == "auto":
        platform = platform or sys.platform
        if platform.startswith("linux"):
            backend = SysfsPowerNormalizer.name
        elif platform == "darwin":
            backend = PmsetPowerNormalizer.name
        else:
            backend = PsutilPowerNormalizer.name

    try:
        normalizer_cls = BACKENDS[backend]
    except KeyError:
        raise ValueError(f"Unknown power backend: {backend}") from None

    logger.debug("Using %s power backend", backend)
    return normalizer_cls()

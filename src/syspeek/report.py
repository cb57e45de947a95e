"""Report assembly for syspeek."""

from dataclasses import dataclass

from syspeek.metrics import format_bytes
from syspeek.models import PowerStatus

LABEL_WIDTH = 16


@dataclass(slots=True, frozen=True)
class Report:
    """One snapshot of host metrics, ready to print."""

    cpu_percent: float
    memory_used: int  # Bytes
    memory_total: int  # Bytes
    power: PowerStatus

    def lines(self) -> list[str]:
        """Return the report as its four text lines."""
        return [
            _line("CPU Usage:", f"{self.cpu_percent:.2f}%"),
            _line(
                "Memory:",
                f"{format_bytes(self.memory_used)} / {format_bytes(self.memory_total)} used",
            ),
            _line("Power Source:", self.power.source.value),
            _line("Charge:", self.power.charge_display),
        ]

    def render(self) -> str:
        return "\n".join(self.lines())


def _line(label: str, value: str) -> str:
    return f"{label:<{LABEL_WIDTH}}{value}"

"""Command line configuration for syspeek."""

import argparse
import math
from collections.abc import Sequence
from dataclasses import dataclass

from syspeek.monitor import DEFAULT_SETTLE_INTERVAL
from syspeek.power import BACKENDS

DEFAULT_INTERVAL = 5.0
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(slots=True, frozen=True)
class Settings:
    """Resolved runtime settings."""

    runs: int | None = None  # None runs until interrupted
    interval: float = DEFAULT_INTERVAL
    settle_interval: float = DEFAULT_SETTLE_INTERVAL
    power_backend: str = "auto"
    log_level: str = "WARNING"
    tui: bool = False


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {value!r}") from None
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def _non_negative_float(value: str) -> float:
    try:
        number = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid number: {value!r}") from None
    if not math.isfinite(number) or number < 0:
        raise argparse.ArgumentTypeError(f"must be a finite non-negative number, got {value}")
    return number


def build_parser() -> argparse.ArgumentParser:
    """Build the syspeek argument parser."""
    parser = argparse.ArgumentParser(
        prog="syspeek",
        description="Print periodic CPU, memory and power snapshots of this host.",
    )
    parser.add_argument(
        "-r",
        "--runs",
        type=_positive_int,
        default=None,
        help="Number of snapshots to run (default: until interrupted)",
    )
    parser.add_argument(
        "-i",
        "--interval",
        type=_non_negative_float,
        default=DEFAULT_INTERVAL,
        help="Polling interval in seconds (default: %(default)s)",
    )
    parser.add_argument(
        "--settle",
        dest="settle_interval",
        type=_non_negative_float,
        default=DEFAULT_SETTLE_INTERVAL,
        help="Seconds between the two CPU counter reads (default: %(default)s)",
    )
    parser.add_argument(
        "--power-backend",
        choices=["auto", *BACKENDS],
        default="auto",
        help="Where to read power status from (default: %(default)s)",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default="WARNING",
        help="Logging threshold, written to stderr (default: %(default)s)",
    )
    parser.add_argument(
        "--tui",
        action="store_true",
        help="Show a live terminal view instead of printing snapshots",
    )
    return parser


def parse_args(argv: Sequence[str] | None = None) -> Settings:
    """Parse command line arguments into Settings."""
    args = build_parser().parse_args(argv)
    return Settings(
        runs=args.runs,
        interval=args.interval,
        settle_interval=args.settle_interval,
        power_backend=args.power_backend,
        log_level=args.log_level,
        tui=args.tui,
    )

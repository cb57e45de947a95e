"""syspeek - command line entry point."""

import logging
import sys
import time
from collections.abc import Callable, Sequence
from typing import TextIO

from syspeek.config import Settings, parse_args
from syspeek.logger import configure_logging
from syspeek.monitor import collect_report
from syspeek.power import PowerStatusNormalizer, select_normalizer
from syspeek.report import Report

logger = logging.getLogger(__name__)


def run(
    settings: Settings,
    power: PowerStatusNormalizer,
    out: TextIO | None = None,
    sleep: Callable[[float], None] = time.sleep,
    collect: Callable[..., Report] = collect_report,
) -> int:
    """
    Print snapshots until settings.runs is reached.

    Returns:
        Number of snapshots printed.
    """
    out = out if out is not None else sys.stdout
    count = 0
    while True:
        print(f"--- Snapshot {count + 1} ---", file=out)
        report = collect(power, settings.settle_interval, sleep=sleep)
        print(report.render(), file=out, flush=True)

        count += 1
        if settings.runs is not None and count >= settings.runs:
            return count

        sleep(settings.interval)
        print(file=out)


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for syspeek."""
    settings = parse_args(argv)
    configure_logging(settings.log_level)
    power = select_normalizer(settings.power_backend)
    logger.debug("Starting with %s", settings)

    if settings.tui:
        from syspeek.app import SysPeekApp

        SysPeekApp(settings, power).run()
        return 0

    try:
        run(settings, power)
    except KeyboardInterrupt:
        logger.info("Interrupted")
        return 130
    return 0


if __name__ == "__main__":
    sys.exit(main())

"""Run syspeek with ``python -m syspeek``."""

import sys

from syspeek.cli import main

sys.exit(main())

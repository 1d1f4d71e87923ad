"""Wall-clock source for quote timestamps.

Staleness math always receives "now" as an argument; this module only
provides the production value and the type used for injection.
"""

import time
from collections.abc import Callable

Clock = Callable[[], int]


def system_clock_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return time.time_ns() // 1_000_000

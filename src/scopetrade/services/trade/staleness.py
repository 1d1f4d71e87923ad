"""Quote time-to-live policy.

All functions take "now" from the caller so the policy can be evaluated
against any clock.
"""

import math
from dataclasses import dataclass

from scopetrade.constants.trade import QUOTE_TTL_SECONDS


@dataclass(frozen=True)
class StalenessPolicy:
    """Fixed TTL after which a quote is no longer actionable."""

    ttl_seconds: int = QUOTE_TTL_SECONDS

    def age_ms(self, requested_at_ms: float, now_ms: float) -> float:
        """Milliseconds since the quote was requested.

        A missing or non-positive stamp has infinite age.
        """
        if not math.isfinite(requested_at_ms) or requested_at_ms <= 0:
            return math.inf
        return max(0, now_ms - requested_at_ms)

    def seconds_remaining(self, requested_at_ms: float, now_ms: float) -> int:
        """Whole seconds left, ``max(0, ttl - floor(age / 1000))``."""
        age = self.age_ms(requested_at_ms, now_ms)
        if math.isinf(age):
            return 0
        return max(0, self.ttl_seconds - math.floor(age / 1000))

    def is_stale(self, requested_at_ms: float, now_ms: float) -> bool:
        """Check if no whole second of validity is left."""
        return self.seconds_remaining(requested_at_ms, now_ms) <= 0

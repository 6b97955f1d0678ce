"""Rate limiting domain models."""

from dataclasses import dataclass
from datetime import datetime, timedelta

GENERATE_PLAN = "generate-plan"
SWAP_MEAL = "swap-meal"
SUBSTITUTE_INGREDIENT = "substitute-ingredient"


@dataclass(frozen=True)
class RateLimitRule:
    """Quota for one action within a fixed window."""

    limit: int
    window: timedelta

    @property
    def window_seconds(self) -> int:
        """Return the window length in whole seconds."""
        return int(self.window.total_seconds())


@dataclass(frozen=True)
class RateLimitCounter:
    """Store-level counter for a (device, action) key."""

    count: int
    window_start: datetime
    allowed: bool = True


@dataclass(frozen=True)
class RateLimitResult:
    """Outcome of a rate limit check."""

    allowed: bool
    remaining: int
    reset_time: datetime
    limit: int

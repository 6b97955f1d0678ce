"""Per-device fixed-window rate limiting."""

import logging
import re
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol

from mealprep_planner.domain.errors import (
    InvalidDeviceIdError,
    RateLimiterUnavailableError,
)
from mealprep_planner.domain.rate_limits import (
    RateLimitCounter,
    RateLimitResult,
    RateLimitRule,
)

_logger = logging.getLogger(__name__)

DEVICE_ID_PATTERN = re.compile(r"^[A-Za-z0-9-]{1,128}$")
# Windows older than this many window lengths are safe to delete.
EXPIRY_WINDOWS = 2


class RateLimitRepository(Protocol):
    """Persistence interface for rate-limit counters."""

    def increment_and_check(
        self, key: str, window_seconds: int, limit: int, now: datetime
    ) -> RateLimitCounter:
        """Atomically count a request and report whether it was allowed.

        Starts a new window when the stored one has expired. A denied
        request leaves the counter unchanged.
        """

    def get_counter(self, key: str) -> RateLimitCounter | None:
        """Return the current counter for a key, if present."""

    def delete_expired(self, before: datetime) -> int:
        """Delete counters whose window started before the cutoff."""


def validate_device_id(device_id: str | None) -> str:
    """Return the device id or raise InvalidDeviceIdError."""
    if device_id is None or not DEVICE_ID_PATTERN.fullmatch(device_id):
        raise InvalidDeviceIdError
    return device_id


def rate_limit_key(device_id: str, action: str) -> str:
    """Return the storage key for a (device, action) pair."""
    return f"{device_id}_{action}"


@dataclass
class RateLimiter:
    """Fail-closed rate limiter keyed by device and action."""

    repository: RateLimitRepository
    rules: dict[str, RateLimitRule]

    def check(
        self, device_id: str, action: str, now: datetime | None = None
    ) -> RateLimitResult:
        """Count one request against the device's quota."""
        device_id = validate_device_id(device_id)
        rule = self.rules[action]
        now = now or datetime.now(tz=UTC)
        try:
            counter = self.repository.increment_and_check(
                rate_limit_key(device_id, action),
                rule.window_seconds,
                rule.limit,
                now,
            )
        except Exception as exc:
            _logger.exception(
                "Rate limit store unavailable", extra={"action": action}
            )
            raise RateLimiterUnavailableError(
                "Rate limiter unavailable. Please try again later."
            ) from exc
        result = _to_result(counter, rule)
        if not result.allowed:
            _logger.info(
                "Rate limit exceeded",
                extra={"action": action, "limit": rule.limit},
            )
        return result

    def status(
        self, device_id: str, action: str, now: datetime | None = None
    ) -> RateLimitResult:
        """Report the remaining quota without consuming any."""
        device_id = validate_device_id(device_id)
        rule = self.rules[action]
        now = now or datetime.now(tz=UTC)
        try:
            counter = self.repository.get_counter(rate_limit_key(device_id, action))
        except Exception as exc:
            _logger.exception(
                "Rate limit store unavailable", extra={"action": action}
            )
            raise RateLimiterUnavailableError(
                "Rate limiter unavailable. Please try again later."
            ) from exc
        if counter is None or counter.window_start + rule.window <= now:
            return RateLimitResult(
                allowed=True,
                remaining=rule.limit,
                reset_time=now + rule.window,
                limit=rule.limit,
            )
        # Counters read from storage do not carry the allowed flag.
        return _to_result(counter, rule, allowed=counter.count < rule.limit)

    def cleanup_expired(self, now: datetime | None = None) -> int:
        """Delete counters that can no longer affect any decision."""
        now = now or datetime.now(tz=UTC)
        longest = max(rule.window for rule in self.rules.values())
        deleted = self.repository.delete_expired(now - longest * EXPIRY_WINDOWS)
        _logger.info("Expired rate limits removed", extra={"deleted": deleted})
        return deleted


def _to_result(
    counter: RateLimitCounter, rule: RateLimitRule, allowed: bool | None = None
) -> RateLimitResult:
    return RateLimitResult(
        allowed=counter.allowed if allowed is None else allowed,
        remaining=max(0, rule.limit - counter.count),
        reset_time=counter.window_start + rule.window,
        limit=rule.limit,
    )

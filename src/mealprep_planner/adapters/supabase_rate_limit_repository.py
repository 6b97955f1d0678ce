"""Supabase implementation for rate-limit counters."""

from dataclasses import dataclass
from datetime import datetime

from supabase import Client

from mealprep_planner.domain.rate_limits import RateLimitCounter
from mealprep_planner.services.rate_limits import RateLimitRepository


@dataclass
class SupabaseRateLimitRepository(RateLimitRepository):
    """Counters in the ``rate_limits`` table.

    Increments go through the ``increment_rate_limit`` Postgres function so
    the read-check-write happens in a single transaction.
    """

    client: Client

    def increment_and_check(
        self, key: str, window_seconds: int, limit: int, now: datetime
    ) -> RateLimitCounter:
        """Atomically count a request via the database function."""
        response = self.client.rpc(
            "increment_rate_limit",
            {
                "p_key": key,
                "p_window_seconds": window_seconds,
                "p_limit": limit,
                "p_now": now.isoformat(),
            },
        ).execute()
        if not response.data:
            raise RuntimeError("Rate limit function returned no data")
        row = response.data[0] if isinstance(response.data, list) else response.data
        return _parse_counter(row)

    def get_counter(self, key: str) -> RateLimitCounter | None:
        """Return the current counter for a key, if present."""
        response = (
            self.client.table("rate_limits")
            .select("key, count, window_start")
            .eq("key", key)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_counter(response.data[0])

    def delete_expired(self, before: datetime) -> int:
        """Delete counters whose window started before the cutoff."""
        response = (
            self.client.table("rate_limits")
            .delete()
            .lt("window_start", before.isoformat())
            .execute()
        )
        return len(response.data or [])


def _parse_counter(row: dict[str, object]) -> RateLimitCounter:
    """Parse a counter row into a domain model."""
    return RateLimitCounter(
        count=int(row.get("count", 0)),
        window_start=datetime.fromisoformat(str(row["window_start"])),
        allowed=bool(row.get("allowed", True)),
    )

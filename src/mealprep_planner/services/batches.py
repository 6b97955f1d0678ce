"""Concurrent generation of detailed recipes in small day batches."""

import asyncio
import logging
from dataclasses import dataclass

from mealprep_planner.domain.catalog import IngredientCatalog
from mealprep_planner.domain.errors import MalformedResponseError
from mealprep_planner.domain.plans import MealPlanDay, WeekSkeleton
from mealprep_planner.domain.profile import UserProfile, WeeklyPreferences
from mealprep_planner.services.completion import CompletionClient
from mealprep_planner.services.prompts import SYSTEM_PROMPT, build_batch_prompt
from mealprep_planner.services.validation import parse_batch

_logger = logging.getLogger(__name__)

MIN_DURATION_DAYS = 1
MAX_DURATION_DAYS = 14
BATCH_SIZE = 2
TRUNCATED_STOP_REASONS = frozenset({"max_tokens", "max_output_tokens", "length"})


def clamp_duration(duration_days: int) -> int:
    """Clamp a requested plan length to the supported range."""
    return max(MIN_DURATION_DAYS, min(MAX_DURATION_DAYS, duration_days))


def plan_batches(duration_days: int) -> list[tuple[int, int]]:
    """Split days [0, duration) into inclusive ranges of at most BATCH_SIZE."""
    return [
        (start, min(start + BATCH_SIZE, duration_days) - 1)
        for start in range(0, duration_days, BATCH_SIZE)
    ]


@dataclass
class BatchDetailGenerator:
    """Fan batches out to the detail model and join them all-or-nothing."""

    client: CompletionClient
    model: str
    max_tokens: int

    async def generate(  # noqa: PLR0913
        self,
        profile: UserProfile,
        duration_days: int,
        catalog: IngredientCatalog,
        skeleton: WeekSkeleton | None,
        preferences: WeeklyPreferences,
    ) -> list[MealPlanDay]:
        """Generate every day of the plan, ordered by absolute day index."""
        total_days = clamp_duration(duration_days)
        tasks = [
            asyncio.create_task(
                self._generate_batch(
                    profile, start, end, catalog, skeleton, preferences
                )
            )
            for start, end in plan_batches(total_days)
        ]
        days: list[MealPlanDay] = []
        try:
            for finished in asyncio.as_completed(tasks):
                days.extend(await finished)
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
        return sorted(days, key=lambda day: day.day_of_week)

    async def _generate_batch(  # noqa: PLR0913
        self,
        profile: UserProfile,
        start_day: int,
        end_day: int,
        catalog: IngredientCatalog,
        skeleton: WeekSkeleton | None,
        preferences: WeeklyPreferences,
    ) -> list[MealPlanDay]:
        label = f"days {start_day}-{end_day}"
        prompt = build_batch_prompt(
            profile, start_day, end_day, catalog, skeleton, preferences
        )
        completion = await self.client.complete(
            model=self.model,
            max_tokens=self.max_tokens,
            system_prompt=SYSTEM_PROMPT,
            user_prompt=prompt,
        )
        if completion.stop_reason in TRUNCATED_STOP_REASONS:
            _logger.warning(
                "Batch response hit the token limit",
                extra={"batch": label, "max_tokens": self.max_tokens},
            )
        parsed = parse_batch(completion.content, label)
        return _reindex(parsed, start_day, end_day, label)


def _reindex(
    days: list[MealPlanDay], start_day: int, end_day: int, label: str
) -> list[MealPlanDay]:
    """Assign absolute day indices in the order the model returned them."""
    expected = end_day - start_day + 1
    if len(days) < expected:
        raise MalformedResponseError(
            label, f"Expected {expected} days, got {len(days)}"
        )
    if len(days) > expected:
        _logger.warning(
            "Batch returned extra days, truncating",
            extra={"batch": label, "expected": expected, "received": len(days)},
        )
    ordered = sorted(days, key=lambda day: day.day_of_week)[:expected]
    return [
        day.model_copy(update={"day_of_week": start_day + offset})
        for offset, day in enumerate(ordered)
    ]

"""Best-effort weekly skeleton planning."""

import logging
from dataclasses import dataclass

from pydantic import ValidationError

from mealprep_planner.domain.catalog import IngredientCatalog
from mealprep_planner.domain.errors import MalformedResponseError
from mealprep_planner.domain.plans import WeekSkeleton
from mealprep_planner.domain.profile import UserProfile, WeeklyPreferences
from mealprep_planner.services.completion import CompletionClient
from mealprep_planner.services.prompts import (
    SKELETON_SYSTEM_PROMPT,
    build_skeleton_prompt,
    skeleton_token_budget,
)
from mealprep_planner.services.validation import extract_json_object

_logger = logging.getLogger(__name__)


@dataclass
class SkeletonPlanner:
    """Sketch meal concepts for the whole plan with one cheap model call.

    Returns ``None`` instead of raising: callers fall back to generating each
    batch without cross-day context.
    """

    client: CompletionClient
    model: str
    base_tokens: int
    tokens_per_day: int
    max_tokens: int

    async def generate(
        self,
        profile: UserProfile,
        duration_days: int,
        catalog: IngredientCatalog,
        preferences: WeeklyPreferences,
    ) -> WeekSkeleton | None:
        """Return a week skeleton, or None when anything goes wrong."""
        prompt = build_skeleton_prompt(profile, duration_days, catalog, preferences)
        budget = skeleton_token_budget(
            duration_days,
            base=self.base_tokens,
            per_day=self.tokens_per_day,
            cap=self.max_tokens,
        )
        try:
            completion = await self.client.complete(
                model=self.model,
                max_tokens=budget,
                system_prompt=SKELETON_SYSTEM_PROMPT,
                user_prompt=prompt,
            )
            return _parse_skeleton(completion.content)
        except Exception as exc:  # noqa: BLE001
            _logger.warning(
                "Skeleton generation failed, continuing without it",
                extra={"error": str(exc), "duration_days": duration_days},
            )
            return None


def _parse_skeleton(raw_text: str) -> WeekSkeleton:
    json_text = extract_json_object(raw_text or "")
    if json_text is None:
        raise MalformedResponseError("skeleton", "No JSON object found in response")
    try:
        return WeekSkeleton.model_validate_json(json_text)
    except ValidationError as exc:
        raise MalformedResponseError("skeleton", "Invalid skeleton payload") from exc

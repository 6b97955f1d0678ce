"""Single-meal replacement."""

import logging
from dataclasses import dataclass

from mealprep_planner.domain.envelopes import (
    RateLimitInfo,
    SwapMealRequest,
    SwapMealResponse,
)
from mealprep_planner.domain.errors import (
    InputValidationError,
    RateLimiterUnavailableError,
)
from mealprep_planner.domain.plans import MEAL_TYPES
from mealprep_planner.domain.rate_limits import SWAP_MEAL
from mealprep_planner.services.catalog import catalog_for
from mealprep_planner.services.completion import CompletionClient
from mealprep_planner.services.plans import (
    RATE_LIMITED_MESSAGE,
    validate_request_fields,
)
from mealprep_planner.services.prompts import SWAP_SYSTEM_PROMPT, build_swap_prompt
from mealprep_planner.services.rate_limits import RateLimiter
from mealprep_planner.services.recipes import RecipeDeduplicationStore
from mealprep_planner.services.validation import parse_recipe

_logger = logging.getLogger(__name__)


@dataclass
class MealSwapService:
    """Generate one replacement recipe for a meal slot."""

    client: CompletionClient
    model: str
    max_tokens: int
    rate_limiter: RateLimiter
    recipe_store: RecipeDeduplicationStore

    async def swap(self, request: SwapMealRequest) -> SwapMealResponse:
        """Return a new recipe for the requested meal type."""
        meal_type = request.meal_type.strip().lower()
        try:
            device_id = validate_request_fields(
                request.user_profile, request.device_id, request.exclude_recipe_names
            )
            if meal_type not in MEAL_TYPES:
                raise InputValidationError(
                    f"mealType must be one of: {', '.join(MEAL_TYPES)}"
                )
        except InputValidationError as exc:
            return SwapMealResponse(success=False, error=str(exc), status_code=400)

        try:
            rate_limit = self.rate_limiter.check(device_id, SWAP_MEAL)
        except RateLimiterUnavailableError as exc:
            return SwapMealResponse(success=False, error=str(exc), status_code=503)
        rate_limit_info = RateLimitInfo.from_result(rate_limit)
        if not rate_limit.allowed:
            return SwapMealResponse(
                success=False,
                error=RATE_LIMITED_MESSAGE,
                rate_limit_info=rate_limit_info,
                status_code=429,
            )

        profile = request.user_profile
        preferences = request.to_preferences()
        catalog = catalog_for(profile, preferences)
        try:
            completion = await self.client.complete(
                model=self.model,
                max_tokens=self.max_tokens,
                system_prompt=SWAP_SYSTEM_PROMPT,
                user_prompt=build_swap_prompt(
                    profile, meal_type, catalog, preferences
                ),
            )
            recipe = parse_recipe(completion.content, f"swap {meal_type}")
            saved = self.recipe_store.save_if_unique(recipe, meal_type)
        except Exception as exc:
            _logger.exception("Meal swap failed", extra={"meal_type": meal_type})
            return SwapMealResponse(
                success=False,
                error=f"Failed to generate replacement meal: {exc}",
                rate_limit_info=rate_limit_info,
                status_code=400,
            )

        _logger.info(
            "Replacement meal generated",
            extra={"meal_type": meal_type, "saved": saved.saved},
        )
        return SwapMealResponse(
            success=True, recipe=recipe, rate_limit_info=rate_limit_info
        )

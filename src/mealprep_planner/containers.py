"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from mealprep_planner.adapters.openai_completion_client import OpenAICompletionClient
from mealprep_planner.adapters.supabase_rate_limit_repository import (
    SupabaseRateLimitRepository,
)
from mealprep_planner.adapters.supabase_recipe_repository import (
    SupabaseRecipeRepository,
)
from mealprep_planner.config import Settings, rate_limit_rules
from mealprep_planner.services.batches import BatchDetailGenerator
from mealprep_planner.services.plans import MealPlanService
from mealprep_planner.services.rate_limits import RateLimiter
from mealprep_planner.services.recipes import RecipeDeduplicationStore
from mealprep_planner.services.skeleton import SkeletonPlanner
from mealprep_planner.services.substitutes import SubstituteIngredientService
from mealprep_planner.services.swaps import MealSwapService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    rate_limiter: RateLimiter
    recipe_store: RecipeDeduplicationStore
    meal_plan_service: MealPlanService
    meal_swap_service: MealSwapService
    substitute_service: SubstituteIngredientService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    rate_limiter = RateLimiter(
        repository=SupabaseRateLimitRepository(supabase_client),
        rules=rate_limit_rules(resolved_settings),
    )
    recipe_store = RecipeDeduplicationStore(SupabaseRecipeRepository(supabase_client))
    completion_client = OpenAICompletionClient.create(
        resolved_settings.openai_api_key,
        reasoning_effort=resolved_settings.openai_reasoning_effort,
        store=resolved_settings.openai_store,
    )
    meal_plan_service = MealPlanService(
        rate_limiter=rate_limiter,
        skeleton_planner=SkeletonPlanner(
            client=completion_client,
            model=resolved_settings.openai_skeleton_model,
            base_tokens=resolved_settings.skeleton_base_tokens,
            tokens_per_day=resolved_settings.skeleton_tokens_per_day,
            max_tokens=resolved_settings.skeleton_max_tokens,
        ),
        batch_generator=BatchDetailGenerator(
            client=completion_client,
            model=resolved_settings.openai_model,
            max_tokens=resolved_settings.batch_max_tokens,
        ),
        recipe_store=recipe_store,
    )
    meal_swap_service = MealSwapService(
        client=completion_client,
        model=resolved_settings.openai_model,
        max_tokens=resolved_settings.swap_max_tokens,
        rate_limiter=rate_limiter,
        recipe_store=recipe_store,
    )
    substitute_service = SubstituteIngredientService(
        client=completion_client,
        model=resolved_settings.openai_substitute_model,
        max_tokens=resolved_settings.substitute_max_tokens,
        rate_limiter=rate_limiter,
    )

    async def close_resources() -> None:
        await completion_client.close()

    return AppContainer(
        settings=resolved_settings,
        rate_limiter=rate_limiter,
        recipe_store=recipe_store,
        meal_plan_service=meal_plan_service,
        meal_swap_service=meal_swap_service,
        substitute_service=substitute_service,
        close_resources=close_resources,
    )

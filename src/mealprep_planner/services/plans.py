"""Meal plan generation pipeline."""

import logging
from dataclasses import dataclass, field

from mealprep_planner.domain.envelopes import GeneratePlanRequest, GeneratePlanResponse
from mealprep_planner.domain.errors import (
    InputValidationError,
    RateLimiterUnavailableError,
)
from mealprep_planner.domain.profile import UserProfile
from mealprep_planner.domain.rate_limits import GENERATE_PLAN
from mealprep_planner.services.assembler import PlanAssembler
from mealprep_planner.services.batches import BatchDetailGenerator, clamp_duration
from mealprep_planner.services.catalog import catalog_for
from mealprep_planner.services.rate_limits import RateLimiter, validate_device_id
from mealprep_planner.services.recipes import RecipeDeduplicationStore, plan_recipes
from mealprep_planner.services.skeleton import SkeletonPlanner
from mealprep_planner.services.validation import check_plan

_logger = logging.getLogger(__name__)

RATE_LIMITED_MESSAGE = "Rate limit exceeded. Please try again later."
MAX_EXCLUDED_RECIPE_NAMES = 200

# (attribute, wire name, minimum, maximum)
PROFILE_BOUNDS: tuple[tuple[str, str, float, float], ...] = (
    ("daily_calorie_target", "dailyCalorieTarget", 800, 10000),
    ("age", "age", 13, 120),
    ("weight_kg", "weightKg", 20, 500),
    ("height_cm", "heightCm", 50, 300),
    ("protein_grams", "proteinGrams", 0, 1000),
    ("meals_per_day", "mealsPerDay", 1, 10),
)


def validate_profile(profile: UserProfile) -> None:
    """Reject profiles whose numeric fields fall outside supported bounds."""
    for attribute, wire_name, minimum, maximum in PROFILE_BOUNDS:
        value = getattr(profile, attribute)
        if not minimum <= value <= maximum:
            raise InputValidationError(
                f"{wire_name} must be between {minimum} and {maximum}"
            )


def validate_request_fields(
    profile: UserProfile, device_id: str | None, exclude_recipe_names: list[str]
) -> str:
    """Run the checks shared by every generation endpoint.

    Returns the validated device id. Raises InputValidationError before any
    rate-limit or model call is made.
    """
    if not device_id:
        raise InputValidationError("Device ID is required")
    validate_device_id(device_id)
    validate_profile(profile)
    if len(exclude_recipe_names) > MAX_EXCLUDED_RECIPE_NAMES:
        raise InputValidationError(
            f"excludeRecipeNames accepts at most {MAX_EXCLUDED_RECIPE_NAMES} entries"
        )
    return device_id


@dataclass
class MealPlanService:
    """Turn a generation request into a complete plan or a clear failure."""

    rate_limiter: RateLimiter
    skeleton_planner: SkeletonPlanner
    batch_generator: BatchDetailGenerator
    recipe_store: RecipeDeduplicationStore
    assembler: PlanAssembler = field(default_factory=PlanAssembler)

    async def generate(self, request: GeneratePlanRequest) -> GeneratePlanResponse:
        """Run the full pipeline for one request."""
        try:
            device_id = validate_request_fields(
                request.user_profile, request.device_id, request.exclude_recipe_names
            )
        except InputValidationError as exc:
            return self.assembler.failure(str(exc))

        try:
            rate_limit = self.rate_limiter.check(device_id, GENERATE_PLAN)
        except RateLimiterUnavailableError as exc:
            return self.assembler.failure(str(exc), status_code=503)
        if not rate_limit.allowed:
            return self.assembler.failure(
                RATE_LIMITED_MESSAGE, rate_limit, status_code=429
            )

        profile = request.user_profile
        preferences = request.to_preferences()
        duration = clamp_duration(request.duration)
        catalog = catalog_for(profile, preferences)
        _logger.info(
            "Generating meal plan",
            extra={
                "duration": duration,
                "include_snacks": profile.include_snacks,
                "diet_tier": catalog.diet_tier,
            },
        )
        skeleton = await self.skeleton_planner.generate(
            profile, duration, catalog, preferences
        )
        try:
            days = await self.batch_generator.generate(
                profile, duration, catalog, skeleton, preferences
            )
            check_plan(days, profile.include_snacks)
            plan = self.assembler.build_plan(days)
            storage = self.recipe_store.save_all_if_unique(plan_recipes(plan.days))
        except Exception as exc:
            _logger.exception("Meal plan generation failed")
            return self.assembler.failure(
                f"Failed to generate meal plan: {exc}", rate_limit
            )

        _logger.info(
            "Meal plan generated",
            extra={
                "plan_id": plan.id,
                "days": len(plan.days),
                "used_skeleton": skeleton is not None,
            },
        )
        return self.assembler.success(plan, storage, rate_limit)

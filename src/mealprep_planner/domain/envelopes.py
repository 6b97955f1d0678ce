"""Request and response envelopes for the generation endpoints."""

from datetime import datetime

from pydantic import Field

from mealprep_planner.domain.models import CamelModel
from mealprep_planner.domain.plans import GeneratedRecipe, MealPlanDay
from mealprep_planner.domain.profile import UserProfile, WeeklyPreferences
from mealprep_planner.domain.rate_limits import RateLimitResult
from mealprep_planner.domain.substitutes import RecipeContext, SubstituteOption

DEFAULT_DURATION_DAYS = 7


class GeneratePlanRequest(CamelModel):
    """Payload for POST /v1/generate-plan."""

    user_profile: UserProfile
    device_id: str | None = None
    weekly_preferences: str | None = None
    exclude_recipe_names: list[str] = []
    duration: int = DEFAULT_DURATION_DAYS
    weekly_focus: list[str] = []
    temporary_exclusions: list[str] = []
    weekly_busyness: str | None = None

    def to_preferences(self) -> WeeklyPreferences:
        """Collect the per-request preferences into one value."""
        return WeeklyPreferences(
            notes=self.weekly_preferences,
            focus=tuple(self.weekly_focus),
            busyness=self.weekly_busyness,
            temporary_exclusions=tuple(self.temporary_exclusions),
            exclude_recipe_names=tuple(self.exclude_recipe_names),
        )


class SwapMealRequest(CamelModel):
    """Payload for POST /v1/swap-meal."""

    user_profile: UserProfile
    meal_type: str
    device_id: str | None = None
    weekly_preferences: str | None = None
    exclude_recipe_names: list[str] = []
    temporary_exclusions: list[str] = []

    def to_preferences(self) -> WeeklyPreferences:
        """Collect the per-request preferences into one value."""
        return WeeklyPreferences(
            notes=self.weekly_preferences,
            temporary_exclusions=tuple(self.temporary_exclusions),
            exclude_recipe_names=tuple(self.exclude_recipe_names),
        )


class SubstituteIngredientRequest(CamelModel):
    """Payload for POST /v1/substitute-ingredient."""

    ingredient_name: str = ""
    ingredient_quantity: float = 0
    ingredient_unit: str = ""
    recipe_context: RecipeContext | None = None
    dietary_restrictions: list[str] = []
    allergies: list[str] = []
    device_id: str | None = None


class RateLimitInfo(CamelModel):
    """Quota metadata returned to clients."""

    remaining: int
    reset_time: datetime
    limit: int

    @classmethod
    def from_result(cls, result: RateLimitResult) -> "RateLimitInfo":
        """Build the wire model from a limiter result."""
        return cls(
            remaining=result.remaining,
            reset_time=result.reset_time,
            limit=result.limit,
        )


class Envelope(CamelModel):
    """Base response envelope."""

    success: bool
    error: str | None = None
    rate_limit_info: RateLimitInfo | None = None
    # HTTP status for the endpoint; never serialized.
    status_code: int = Field(default=200, exclude=True)

    def to_payload(self) -> dict[str, object]:
        """Serialize for JSON responses, omitting absent fields."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class MealPlan(CamelModel):
    """Assembled plan with its identifier."""

    id: str
    days: list[MealPlanDay]


class GeneratePlanResponse(Envelope):
    """Response for POST /v1/generate-plan."""

    meal_plan: MealPlan | None = None
    recipes_added: int | None = None
    recipes_duplicate: int | None = None


class SwapMealResponse(Envelope):
    """Response for POST /v1/swap-meal."""

    recipe: GeneratedRecipe | None = None


class SubstituteIngredientResponse(Envelope):
    """Response for POST /v1/substitute-ingredient."""

    substitutes: list[SubstituteOption] | None = None

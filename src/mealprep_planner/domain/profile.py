"""User profile and weekly preference models."""

from dataclasses import dataclass
from typing import Literal

from pydantic import field_validator

from mealprep_planner.domain.models import FrozenCamelModel


class UserProfile(FrozenCamelModel):
    """Nutrition profile sent by the client with every generation request."""

    age: int
    gender: str = "Other"
    weight_kg: float
    height_cm: float
    activity_level: str = "Moderately Active"
    daily_calorie_target: int
    protein_grams: int
    carbs_grams: int = 0
    fat_grams: int = 0
    weight_goal: str = "Maintain Weight"
    dietary_restrictions: tuple[str, ...] = ()
    allergies: tuple[str, ...] = ()
    food_dislikes: tuple[str, ...] = ()
    preferred_cuisines: tuple[str, ...] = ()
    disliked_cuisines: tuple[str, ...] = ()
    cooking_skill: str = "Intermediate"
    max_cooking_time_minutes: int = 30
    simple_mode_enabled: bool = False
    meals_per_day: int = 3
    include_snacks: bool = False
    pantry_level: str = "Average"
    barriers: tuple[str, ...] = ()
    primary_goals: tuple[str, ...] = ()
    goal_pace: str = "Moderate"
    measurement_system: Literal["metric", "imperial"] = "metric"

    @field_validator("measurement_system", mode="before")
    @classmethod
    def _lowercase_measurement_system(cls, value: object) -> object:
        return value.lower() if isinstance(value, str) else value


@dataclass(frozen=True)
class WeeklyPreferences:
    """Per-request preferences that apply to a single generation call."""

    notes: str | None = None
    focus: tuple[str, ...] = ()
    busyness: str | None = None
    temporary_exclusions: tuple[str, ...] = ()
    exclude_recipe_names: tuple[str, ...] = ()

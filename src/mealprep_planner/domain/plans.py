"""Meal plan models shared by the planner stages."""

from dataclasses import dataclass
from typing import Literal

from pydantic import Field, field_validator

from mealprep_planner.domain.models import CamelModel

MealType = Literal["breakfast", "snack", "lunch", "dinner"]
MEAL_TYPES: tuple[str, ...] = ("breakfast", "snack", "lunch", "dinner")
MEAL_ORDER_WITH_SNACKS: tuple[str, ...] = (
    "breakfast",
    "snack",
    "lunch",
    "snack",
    "dinner",
)
MEAL_ORDER_WITHOUT_SNACKS: tuple[str, ...] = ("breakfast", "lunch", "dinner")


def expected_meal_order(include_snacks: bool) -> tuple[str, ...]:
    """Return the meal slots each day must contain, in order."""
    return MEAL_ORDER_WITH_SNACKS if include_snacks else MEAL_ORDER_WITHOUT_SNACKS


def _normalize_label(value: object) -> object:
    if isinstance(value, str):
        return value.strip().lower()
    return value


class Ingredient(CamelModel):
    """Ingredient line of a generated recipe."""

    name: str = Field(min_length=1)
    quantity: float = Field(ge=0)
    unit: str
    category: str = "other"


class GeneratedRecipe(CamelModel):
    """Recipe produced by the model, validated against the response schema."""

    name: str = Field(min_length=1)
    description: str = ""
    calories: float = Field(ge=0, le=5000)
    protein_grams: float = Field(ge=0, le=1000)
    carbs_grams: float = Field(ge=0, le=1000)
    fat_grams: float = Field(ge=0, le=1000)
    fiber_grams: float = Field(default=0, ge=0, le=500)
    prep_time_minutes: int = Field(default=0, ge=0, le=1440)
    cook_time_minutes: int = Field(default=0, ge=0, le=1440)
    servings: int = Field(default=1, ge=1, le=50)
    complexity: Literal["easy", "medium", "hard"] = "easy"
    cuisine_type: str = ""
    instructions: list[str] = Field(min_length=1)
    ingredients: list[Ingredient] = Field(min_length=1)

    @field_validator("complexity", mode="before")
    @classmethod
    def _lowercase_complexity(cls, value: object) -> object:
        return _normalize_label(value)


class Meal(CamelModel):
    """One meal slot within a day."""

    meal_type: MealType
    recipe: GeneratedRecipe

    @field_validator("meal_type", mode="before")
    @classmethod
    def _lowercase_meal_type(cls, value: object) -> object:
        return _normalize_label(value)


class MealPlanDay(CamelModel):
    """A day of the plan with its meals in serving order."""

    day_of_week: int = Field(ge=0)
    meals: list[Meal]


class BatchPayload(CamelModel):
    """Top-level shape of a batch response."""

    days: list[MealPlanDay]


class MealConcept(CamelModel):
    """Free-text dish idea assigned to a skeleton meal slot."""

    concept: str = Field(min_length=1)
    protein: str | None = None
    cuisine: str | None = None

    def describe(self) -> str:
        """Return a one-line description for prompts."""
        details = [
            f"{label}: {value}"
            for label, value in (("protein", self.protein), ("cuisine", self.cuisine))
            if value
        ]
        if not details:
            return self.concept
        return f"{self.concept} ({', '.join(details)})"


class SkeletonDay(CamelModel):
    """Meal concepts for a single day of the skeleton."""

    day: int = Field(ge=0)
    breakfast: MealConcept
    lunch: MealConcept
    dinner: MealConcept
    snacks: list[MealConcept] = Field(default_factory=list, max_length=2)

    def concepts(self) -> list[tuple[str, MealConcept]]:
        """Return (slot, concept) pairs in serving order."""
        pairs: list[tuple[str, MealConcept]] = [("breakfast", self.breakfast)]
        if self.snacks:
            pairs.append(("snack", self.snacks[0]))
        pairs.append(("lunch", self.lunch))
        if len(self.snacks) > 1:
            pairs.append(("snack", self.snacks[1]))
        pairs.append(("dinner", self.dinner))
        return pairs


class WeekSkeleton(CamelModel):
    """Cheap first-pass plan of meal concepts plus a shared grocery list."""

    weekly_grocery_list: list[str]
    days: list[SkeletonDay]

    def days_in_range(self, start: int, end: int) -> list[SkeletonDay]:
        """Return skeleton days whose index falls within [start, end]."""
        return [day for day in self.days if start <= day.day <= end]

    def days_outside_range(self, start: int, end: int) -> list[SkeletonDay]:
        """Return skeleton days assigned to other batches."""
        return [day for day in self.days if not start <= day.day <= end]


@dataclass(frozen=True)
class PlanWarning:
    """Non-fatal observation about a generated plan."""

    kind: str
    message: str
    day: int | None = None

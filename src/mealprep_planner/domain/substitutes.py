"""Ingredient substitution models."""

from pydantic import Field, field_validator

from mealprep_planner.domain.models import CamelModel, FrozenCamelModel


class RecipeContext(FrozenCamelModel):
    """The recipe an ingredient is being replaced in."""

    recipe_name: str = Field(min_length=1)
    total_calories: float = Field(default=0, ge=0)
    total_protein: float = Field(default=0, ge=0)
    total_carbs: float = Field(default=0, ge=0)
    total_fat: float = Field(default=0, ge=0)
    other_ingredients: tuple[str, ...] = ()


class SubstituteOption(CamelModel):
    """One suggested replacement with per-100g and per-quantity nutrition."""

    name: str = Field(min_length=1)
    reason: str = ""
    quantity: float = Field(ge=0)
    unit: str
    quantity_grams: float = Field(ge=0)
    category: str = "other"
    # The alias generator would spell these "Per100G".
    calories_per_100g: float = Field(alias="caloriesPer100g", ge=0, le=900)
    protein_per_100g: float = Field(alias="proteinPer100g", ge=0, le=100)
    carbs_per_100g: float = Field(alias="carbsPer100g", ge=0, le=100)
    fat_per_100g: float = Field(alias="fatPer100g", ge=0, le=100)
    total_calories: float = Field(ge=0)
    total_protein: float = Field(ge=0)
    total_carbs: float = Field(ge=0)
    total_fat: float = Field(ge=0)

    @field_validator("category", mode="before")
    @classmethod
    def _lowercase_category(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower()
        return value


class SubstitutesPayload(CamelModel):
    """Top-level shape of a substitution response."""

    substitutes: list[SubstituteOption] = Field(min_length=1)

"""Content-addressed persistence for generated recipes."""

import hashlib
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Protocol

from mealprep_planner.domain.plans import GeneratedRecipe, MealPlanDay
from mealprep_planner.domain.recipes import BatchSaveResult, SaveResult, StoredRecipe

_logger = logging.getLogger(__name__)

CALORIE_BUCKET = 10


class RecipeRepository(Protocol):
    """Persistence interface for the shared recipe library."""

    def find_by_fingerprint(self, fingerprint: str) -> StoredRecipe | None:
        """Return the stored recipe with this fingerprint, if any."""

    def insert(
        self, fingerprint: str, recipe: GeneratedRecipe, meal_type: str
    ) -> str | None:
        """Insert a recipe, returning its id or None if the fingerprint exists."""

    def list_recent(self, limit: int) -> list[StoredRecipe]:
        """Return the most recently stored recipes."""

    def count(self) -> int:
        """Return the number of stored recipes."""


def recipe_fingerprint(recipe: GeneratedRecipe) -> str:
    """Hash a recipe's normalized name and rounded macro signature."""
    name = " ".join(recipe.name.lower().split())
    calories = round(recipe.calories / CALORIE_BUCKET) * CALORIE_BUCKET
    signature = "|".join(
        [
            name,
            str(calories),
            str(round(recipe.protein_grams)),
            str(round(recipe.carbs_grams)),
            str(round(recipe.fat_grams)),
        ]
    )
    return hashlib.sha256(signature.encode("utf-8")).hexdigest()


def plan_recipes(days: list[MealPlanDay]) -> list[tuple[GeneratedRecipe, str]]:
    """Flatten a plan into (recipe, meal type) pairs in serving order."""
    return [(meal.recipe, meal.meal_type) for day in days for meal in day.meals]


@dataclass
class RecipeDeduplicationStore:
    """Save recipes once per fingerprint and count the rest as duplicates."""

    repository: RecipeRepository

    def save_if_unique(self, recipe: GeneratedRecipe, meal_type: str) -> SaveResult:
        """Persist a recipe unless an identical one is already stored."""
        fingerprint = recipe_fingerprint(recipe)
        existing = self.repository.find_by_fingerprint(fingerprint)
        if existing is not None:
            return SaveResult(saved=False, id=existing.id)
        recipe_id = self.repository.insert(fingerprint, recipe, meal_type)
        if recipe_id is None:
            # Another request stored the same fingerprint first.
            winner = self.repository.find_by_fingerprint(fingerprint)
            return SaveResult(saved=False, id=winner.id if winner else None)
        return SaveResult(saved=True, id=recipe_id)

    def save_all_if_unique(
        self, items: Iterable[tuple[GeneratedRecipe, str]]
    ) -> BatchSaveResult:
        """Save each recipe in order and tally saves and duplicates."""
        saved_ids: list[str] = []
        duplicate_ids: list[str] = []
        saved = duplicates = failed = 0
        for recipe, meal_type in items:
            try:
                result = self.save_if_unique(recipe, meal_type)
            except Exception:
                # Failed writes are logged and skipped.
                failed += 1
                _logger.exception(
                    "Recipe save failed",
                    extra={"recipe": recipe.name, "meal_type": meal_type},
                )
                continue
            if result.saved:
                saved += 1
                if result.id:
                    saved_ids.append(result.id)
            else:
                duplicates += 1
                if result.id:
                    duplicate_ids.append(result.id)
        _logger.info(
            "Recipes stored",
            extra={"saved": saved, "duplicates": duplicates, "failed": failed},
        )
        return BatchSaveResult(
            saved=saved,
            duplicates=duplicates,
            failed=failed,
            saved_ids=saved_ids,
            duplicate_ids=duplicate_ids,
        )

    def recent(self, limit: int = 20) -> list[StoredRecipe]:
        """Return recently stored recipes."""
        return self.repository.list_recent(limit)

    def count(self) -> int:
        """Return the size of the recipe library."""
        return self.repository.count()

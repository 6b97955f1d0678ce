"""Supabase implementation for the shared recipe library."""

from dataclasses import dataclass
from datetime import datetime

from supabase import Client

from mealprep_planner.domain.plans import GeneratedRecipe
from mealprep_planner.domain.recipes import StoredRecipe
from mealprep_planner.services.recipes import RecipeRepository

_SUMMARY_COLUMNS = "id, fingerprint, name, meal_type, cuisine_type, calories, created_at"


@dataclass
class SupabaseRecipeRepository(RecipeRepository):
    """Supabase-backed repository keyed by a unique fingerprint column."""

    client: Client

    def find_by_fingerprint(self, fingerprint: str) -> StoredRecipe | None:
        """Return the stored recipe with this fingerprint, if any."""
        response = (
            self.client.table("recipes")
            .select(_SUMMARY_COLUMNS)
            .eq("fingerprint", fingerprint)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_recipe(response.data[0])

    def insert(
        self, fingerprint: str, recipe: GeneratedRecipe, meal_type: str
    ) -> str | None:
        """Insert unless the fingerprint exists; conflicts return no rows."""
        response = (
            self.client.table("recipes")
            .upsert(
                {
                    **recipe.model_dump(mode="json"),
                    "fingerprint": fingerprint,
                    "meal_type": meal_type,
                },
                on_conflict="fingerprint",
                ignore_duplicates=True,
            )
            .execute()
        )
        if not response.data:
            return None
        return str(response.data[0]["id"])

    def list_recent(self, limit: int) -> list[StoredRecipe]:
        """Return the most recently stored recipes."""
        response = (
            self.client.table("recipes")
            .select(_SUMMARY_COLUMNS)
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
        return [_parse_recipe(row) for row in response.data or []]

    def count(self) -> int:
        """Return the number of stored recipes."""
        response = (
            self.client.table("recipes").select("id", count="exact").limit(1).execute()
        )
        return int(response.count or 0)


def _parse_recipe(row: dict[str, object]) -> StoredRecipe:
    """Parse a recipe row into a domain model."""
    created_raw = row.get("created_at")
    created_at = (
        datetime.fromisoformat(created_raw)
        if isinstance(created_raw, str) and created_raw
        else None
    )
    return StoredRecipe(
        id=str(row["id"]),
        fingerprint=str(row.get("fingerprint", "")),
        name=str(row.get("name", "")),
        meal_type=str(row.get("meal_type", "")),
        cuisine_type=str(row.get("cuisine_type") or ""),
        calories=float(row.get("calories", 0.0)),
        created_at=created_at,
    )

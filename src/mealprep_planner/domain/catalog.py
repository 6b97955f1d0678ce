"""Ingredient catalog domain model."""

from dataclasses import dataclass


@dataclass(frozen=True)
class IngredientCatalog:
    """Allowed ingredients grouped by category for one generation request."""

    diet_tier: str
    proteins: tuple[str, ...]
    carbs: tuple[str, ...]
    vegetables: tuple[str, ...]
    fruits: tuple[str, ...]
    dairy_fats: tuple[str, ...]
    snacks: tuple[str, ...]
    excluded_terms: tuple[str, ...]
    rotation_hint: str

    def categories(self) -> dict[str, tuple[str, ...]]:
        """Return category lists keyed by a display label."""
        return {
            "Proteins": self.proteins,
            "Carbs": self.carbs,
            "Vegetables": self.vegetables,
            "Fruits": self.fruits,
            "Dairy & fats": self.dairy_fats,
            "Snack items": self.snacks,
        }

    def all_items(self) -> tuple[str, ...]:
        """Return every allowed item across categories."""
        items: list[str] = []
        for values in self.categories().values():
            items.extend(values)
        return tuple(items)

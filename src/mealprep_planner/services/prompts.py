"""Prompt construction for skeleton, batch, swap and substitution requests."""

from dataclasses import dataclass

from mealprep_planner.domain.catalog import IngredientCatalog
from mealprep_planner.domain.plans import SkeletonDay, WeekSkeleton, expected_meal_order
from mealprep_planner.domain.profile import UserProfile, WeeklyPreferences
from mealprep_planner.domain.substitutes import RecipeContext

CALORIE_SPLIT = {"breakfast": 0.22, "lunch": 0.32, "dinner": 0.28, "snack": 0.09}
PROTEIN_SPLIT = {"breakfast": 0.20, "lunch": 0.28, "dinner": 0.26, "snack": 0.13}
TARGET_TOLERANCE = 0.10

VALID_COMPLEXITY = "easy, medium, hard"
VALID_CUISINES = (
    "american, italian, mexican, asian, mediterranean, indian, japanese, thai, "
    "french, greek, korean, vietnamese, middleEastern, african, caribbean"
)
VALID_CATEGORIES = "produce, meat, dairy, pantry, frozen, bakery, beverages, other"
METRIC_UNITS = (
    "gram, kilogram, milliliter, liter, cup, tablespoon, teaspoon, piece, slice, "
    "bunch, can, package"
)
IMPERIAL_UNITS = (
    "pound, ounce, cup, tablespoon, teaspoon, piece, slice, bunch, can, package"
)

_BUSYNESS_GUIDANCE = {
    "super busy": (
        "Keep every lunch and dinner under 20 minutes and reuse leftovers "
        "where it makes sense."
    ),
    "normal week": "Use the user's usual cooking time limits.",
    "relaxed week": (
        "The user has extra time this week; one or two dinners may take "
        "longer than usual."
    ),
}

SYSTEM_PROMPT = """You are a professional nutritionist and chef creating personalized meal plans.

IMPORTANT: Respond ONLY with valid JSON. No markdown, no explanation, no code blocks.

CRITICAL REQUIREMENTS:
- Hit the per-meal calorie and protein ranges you are given
- Respect all dietary restrictions strictly
- NEVER include any ingredient the user is allergic to or has excluded
- Use ONLY ingredients from the allowed catalog plus basic pantry staples
  (oil, salt, pepper, dried herbs and spices, vinegar, stock)

TIME CONSTRAINTS BY MEAL TYPE:
- Breakfast: MAX 10 minutes. Simple breakfast foods only.
- Snacks: MAX 5 minutes. No-cook only.
- Lunch: up to 30 minutes total.
- Dinner: up to the user's max cooking time.

Guidelines:
- Follow the weekly skeleton when one is provided
- Do not repeat proteins or cuisines already assigned to other days
- Consider cooking skill when choosing recipe complexity
- Provide accurate nutritional information per serving
- CRITICAL: Every ingredient mentioned in instructions MUST be in the ingredients list (including oil, sauces and seasonings)"""

SKELETON_SYSTEM_PROMPT = """You are a meal-planning assistant sketching a weekly menu.

Respond ONLY with valid JSON. No markdown, no explanation.
Produce meal CONCEPTS (short dish ideas), not recipes. Keep the week coherent:
share ingredients across days, rotate proteins and vary cuisines."""

SWAP_SYSTEM_PROMPT = """You are a professional nutritionist and chef creating personalized meals.

IMPORTANT: Respond ONLY with valid JSON. No markdown, no explanation, no code blocks.

Guidelines:
- Create a balanced meal that fits the user's targets
- Respect all dietary restrictions strictly
- NEVER include any ingredient the user is allergic to or has excluded
- Keep prep and cook times realistic
- CRITICAL: Every ingredient mentioned in instructions MUST be in the ingredients list (including oil, sauces and seasonings)"""

SUBSTITUTE_COUNT = 3

SUBSTITUTE_SYSTEM_PROMPT = f"""You are a professional nutritionist. Given an ingredient in a recipe, suggest exactly {SUBSTITUTE_COUNT} substitutes.

Respond ONLY with valid JSON. No markdown.
Each substitute must work culinarily in the recipe, respect dietary restrictions and allergies strictly,
and include accurate per-100g nutrition plus pre-calculated totals for the suggested quantity."""

_SUBSTITUTE_SHAPE = """{
  "substitutes": [
    {
      "name": "Ingredient",
      "reason": "max 10 words",
      "quantity": 1,
      "unit": "cup",
      "quantityGrams": 150,
      "category": "produce",
      "caloriesPer100g": 100,
      "proteinPer100g": 5,
      "carbsPer100g": 10,
      "fatPer100g": 3,
      "totalCalories": 150,
      "totalProtein": 7.5,
      "totalCarbs": 15,
      "totalFat": 4.5
    }
  ]
}"""

_RECIPE_SHAPE = """{
  "name": "Recipe Name",
  "description": "Brief description",
  "instructions": ["Step 1", "Step 2"],
  "prepTimeMinutes": 10,
  "cookTimeMinutes": 15,
  "servings": 1,
  "complexity": "easy",
  "cuisineType": "american",
  "calories": 400,
  "proteinGrams": 20,
  "carbsGrams": 40,
  "fatGrams": 15,
  "fiberGrams": 5,
  "ingredients": [
    {"name": "Ingredient", "quantity": 1, "unit": "cup", "category": "produce"}
  ]
}"""


@dataclass(frozen=True)
class MealTarget:
    """Absolute calorie and macro ranges for one meal slot."""

    meal_type: str
    calories: tuple[int, int]
    protein: tuple[int, int]
    carbs: tuple[int, int]
    fat: tuple[int, int]

    def describe(self) -> str:
        """Return a prompt line for this slot."""
        return (
            f"- {self.meal_type}: {self.calories[0]}-{self.calories[1]} kcal, "
            f"protein {self.protein[0]}-{self.protein[1]}g, "
            f"carbs {self.carbs[0]}-{self.carbs[1]}g, "
            f"fat {self.fat[0]}-{self.fat[1]}g"
        )


def meal_targets(profile: UserProfile) -> list[MealTarget]:
    """Split daily targets across the day's meal slots, in serving order."""
    slots = expected_meal_order(profile.include_snacks)
    calorie_total = sum(CALORIE_SPLIT[slot] for slot in slots)
    protein_total = sum(PROTEIN_SPLIT[slot] for slot in slots)
    return [
        _target(
            profile,
            slot,
            calorie_share=CALORIE_SPLIT[slot] / calorie_total,
            protein_share=PROTEIN_SPLIT[slot] / protein_total,
        )
        for slot in slots
    ]


def meal_target(profile: UserProfile, meal_type: str) -> MealTarget:
    """Return the target for a single slot, used when swapping one meal."""
    for target in meal_targets(profile):
        if target.meal_type == meal_type:
            return target
    return _target(
        profile,
        meal_type,
        calorie_share=CALORIE_SPLIT[meal_type],
        protein_share=PROTEIN_SPLIT[meal_type],
    )


def skeleton_token_budget(
    duration_days: int, *, base: int, per_day: int, cap: int
) -> int:
    """Scale the skeleton token budget with plan length, up to a cap."""
    return min(cap, base + per_day * duration_days)


def build_skeleton_prompt(
    profile: UserProfile,
    duration_days: int,
    catalog: IngredientCatalog,
    preferences: WeeklyPreferences,
) -> str:
    """Build the user prompt for the weekly skeleton call."""
    snack_line = (
        'Include exactly two "snacks" per day.'
        if profile.include_snacks
        else 'Use an empty "snacks" list.'
    )
    sections = [
        f"Sketch a {duration_days}-day meal plan (days 0-{duration_days - 1}).",
        _profile_section(profile),
        _catalog_section(catalog),
        _preferences_section(preferences),
        snack_line,
        "Provide a weeklyGroceryList of 20-25 items that every day draws from.",
        "Respond with JSON in this exact format:",
        """{
  "weeklyGroceryList": ["item"],
  "days": [
    {
      "day": 0,
      "breakfast": {"concept": "Dish idea", "protein": "eggs", "cuisine": null},
      "lunch": {"concept": "Dish idea", "protein": "chicken breast", "cuisine": "mexican"},
      "dinner": {"concept": "Dish idea", "protein": "salmon", "cuisine": "japanese"},
      "snacks": [{"concept": "Snack idea", "protein": null, "cuisine": null}]
    }
  ]
}""",
    ]
    return "\n\n".join(section for section in sections if section)


def build_batch_prompt(  # noqa: PLR0913
    profile: UserProfile,
    start_day: int,
    end_day: int,
    catalog: IngredientCatalog,
    skeleton: WeekSkeleton | None,
    preferences: WeeklyPreferences,
) -> str:
    """Build the user prompt for one batch of consecutive days."""
    num_days = end_day - start_day + 1
    slots = expected_meal_order(profile.include_snacks)
    targets = "\n".join(target.describe() for target in meal_targets(profile))
    sections = [
        f"Create full recipes for DAYS {start_day}-{end_day} ({num_days} days).",
        _profile_section(profile),
        f"PER-MEAL TARGETS:\n{targets}",
        _catalog_section(catalog),
        _preferences_section(preferences),
    ]
    if skeleton is not None:
        sections.append(_skeleton_section(skeleton, start_day, end_day))
        sections.append(_other_batches_section(skeleton, start_day, end_day))
    sections.extend(
        [
            (
                f"Each day must contain exactly {len(slots)} meals in this order: "
                f"{', '.join(slots)}."
            ),
            "Respond with JSON in this exact format:",
            '{\n  "days": [\n    {\n      "dayOfWeek": '
            f'{start_day},\n      "meals": [\n        {{"mealType": "breakfast", '
            '"recipe": RECIPE}\n      ]\n    }\n  ]\n}',
            f"RECIPE has this shape:\n{_RECIPE_SHAPE}",
            _valid_values_section(profile),
            f"dayOfWeek should run from {start_day} to {end_day}.",
            "Keep ingredients to essential items (5-8 per recipe).",
        ]
    )
    return "\n\n".join(section for section in sections if section)


def build_swap_prompt(
    profile: UserProfile,
    meal_type: str,
    catalog: IngredientCatalog,
    preferences: WeeklyPreferences,
) -> str:
    """Build the user prompt for a single replacement recipe."""
    target = meal_target(profile, meal_type)
    sections = [
        f"Create a single {meal_type} recipe.",
        _profile_section(profile),
        f"MEAL TARGETS:\n{target.describe()}",
        _catalog_section(catalog),
        _preferences_section(preferences),
        f"Respond with a single recipe JSON (no array, no wrapper):\n{_RECIPE_SHAPE}",
        _valid_values_section(profile),
    ]
    return "\n\n".join(section for section in sections if section)


def build_substitute_prompt(
    ingredient_name: str,
    quantity: float,
    unit: str,
    recipe: RecipeContext,
    restrictions: list[str],
    allergies: list[str],
) -> str:
    """Build the user prompt asking for ingredient substitutes."""
    lines = [
        (
            f'Suggest {SUBSTITUTE_COUNT} substitutes for "{ingredient_name}" '
            f'({quantity:g} {unit}) in "{recipe.recipe_name}".'
        ),
        f"Other ingredients: {_join(recipe.other_ingredients, 'None')}",
        (
            f"Recipe macros: {recipe.total_calories:g} kcal, "
            f"{recipe.total_protein:g}g protein, {recipe.total_carbs:g}g carbs, "
            f"{recipe.total_fat:g}g fat"
        ),
        f"DIETARY RESTRICTIONS: {_join(tuple(restrictions), 'None')}",
        f"ALLERGIES (NEVER include these): {_join(tuple(allergies), 'None')}",
        f"Valid categories: {VALID_CATEGORIES}",
        f"Respond with:\n{_SUBSTITUTE_SHAPE}",
    ]
    return "\n".join(lines)


def _target(
    profile: UserProfile, meal_type: str, *, calorie_share: float, protein_share: float
) -> MealTarget:
    return MealTarget(
        meal_type=meal_type,
        calories=_range(profile.daily_calorie_target * calorie_share),
        protein=_range(profile.protein_grams * protein_share),
        carbs=_range(profile.carbs_grams * calorie_share),
        fat=_range(profile.fat_grams * calorie_share),
    )


def _range(value: float) -> tuple[int, int]:
    return (
        round(value * (1 - TARGET_TOLERANCE)),
        round(value * (1 + TARGET_TOLERANCE)),
    )


def _join(values: tuple[str, ...], fallback: str) -> str:
    return ", ".join(values) or fallback


def _profile_section(profile: UserProfile) -> str:
    return "\n".join(
        [
            "PROFILE:",
            f"- Age: {profile.age}, Gender: {profile.gender}",
            f"- Weight: {profile.weight_kg}kg, Height: {profile.height_cm}cm",
            f"- Activity: {profile.activity_level}",
            f"- Goal: {profile.weight_goal} (pace: {profile.goal_pace})",
            f"- Primary goals: {_join(profile.primary_goals, 'None')}",
            (
                f"- Daily targets: {profile.daily_calorie_target} kcal, "
                f"protein {profile.protein_grams}g, carbs {profile.carbs_grams}g, "
                f"fat {profile.fat_grams}g"
            ),
            f"- Dietary restrictions: {_join(profile.dietary_restrictions, 'None')}",
            (
                "- Allergies (NEVER include these ingredients): "
                f"{_join(profile.allergies, 'None')}"
            ),
            f"- Dislikes: {_join(profile.food_dislikes, 'None')}",
            f"- Preferred cuisines: {_join(profile.preferred_cuisines, 'Varied')}",
            f"- Avoid cuisines: {_join(profile.disliked_cuisines, 'None')}",
            f"- Cooking skill: {profile.cooking_skill}",
            f"- Max cooking time: {profile.max_cooking_time_minutes} minutes",
            (
                "- Simple mode: "
                f"{'Yes - prefer fewer ingredients' if profile.simple_mode_enabled else 'No'}"
            ),
            f"- Pantry: {profile.pantry_level}",
            f"- Struggles with: {_join(profile.barriers, 'None')}",
        ]
    )


def _catalog_section(catalog: IngredientCatalog) -> str:
    lines = [f"ALLOWED INGREDIENTS ({catalog.diet_tier} catalog):"]
    for label, items in catalog.categories().items():
        lines.append(f"- {label}: {_join(items, 'none available')}")
    lines.append(catalog.rotation_hint)
    if catalog.excluded_terms:
        lines.append(f"NEVER USE: {', '.join(catalog.excluded_terms)}")
    return "\n".join(lines)


def _preferences_section(preferences: WeeklyPreferences) -> str:
    lines = [
        "THIS WEEK:",
        f"- Special requests: {preferences.notes or 'None'}",
        f"- Focus: {_join(preferences.focus, 'None')}",
    ]
    if preferences.busyness:
        guidance = _BUSYNESS_GUIDANCE.get(preferences.busyness.strip().lower(), "")
        lines.append(f"- Busyness: {preferences.busyness}. {guidance}".rstrip())
    if preferences.temporary_exclusions:
        lines.append(
            "- Temporarily excluded (treat as allergies): "
            f"{', '.join(preferences.temporary_exclusions)}"
        )
    if preferences.exclude_recipe_names:
        lines.append(
            "- Avoid these recently used recipes: "
            f"{', '.join(preferences.exclude_recipe_names)}"
        )
    return "\n".join(lines)


def _skeleton_section(skeleton: WeekSkeleton, start_day: int, end_day: int) -> str:
    lines = [
        "SHARED GROCERY LIST (prefer these items): "
        + ", ".join(skeleton.weekly_grocery_list),
        "PLANNED CONCEPTS FOR THESE DAYS (turn each into a full recipe):",
    ]
    lines.extend(_describe_day(day) for day in skeleton.days_in_range(start_day, end_day))
    return "\n".join(lines)


def _other_batches_section(
    skeleton: WeekSkeleton, start_day: int, end_day: int
) -> str:
    others = skeleton.days_outside_range(start_day, end_day)
    if not others:
        return ""
    lines = ["ALREADY ASSIGNED TO OTHER DAYS (do not duplicate these dishes):"]
    lines.extend(_describe_day(day) for day in others)
    return "\n".join(lines)


def _describe_day(day: SkeletonDay) -> str:
    concepts = "; ".join(
        f"{slot}: {concept.describe()}" for slot, concept in day.concepts()
    )
    return f"- Day {day.day}: {concepts}"


def _valid_values_section(profile: UserProfile) -> str:
    units = IMPERIAL_UNITS if profile.measurement_system == "imperial" else METRIC_UNITS
    return "\n".join(
        [
            'Valid mealTypes: breakfast, snack, lunch, dinner (use "snack" for every snack)',
            f"Valid complexity: {VALID_COMPLEXITY}",
            f"Valid cuisineTypes: {VALID_CUISINES}",
            f"Valid categories: {VALID_CATEGORIES}",
            f"Valid units: {units}",
        ]
    )

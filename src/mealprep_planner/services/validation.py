"""Parsing and sanity checks for model output."""

import json
import logging
import re
from collections import Counter

from pydantic import ValidationError

from mealprep_planner.domain.errors import MalformedResponseError
from mealprep_planner.domain.plans import (
    BatchPayload,
    GeneratedRecipe,
    MealPlanDay,
    PlanWarning,
    expected_meal_order,
)
from mealprep_planner.domain.substitutes import SubstituteOption, SubstitutesPayload

_logger = logging.getLogger(__name__)

_FENCE_PATTERN = re.compile(r"```(?:json|JSON)?")

# Ingredients that recipes often use in steps but forget to list.
TRACKED_INGREDIENTS: tuple[str, ...] = (
    "oil",
    "butter",
    "garlic",
    "onion",
    "soy sauce",
    "honey",
    "lemon",
    "lime",
    "vinegar",
    "cheese",
    "yogurt",
    "maple syrup",
)


def extract_json_object(raw_text: str) -> str | None:
    """Return the text between the first '{' and the last '}', fences removed."""
    text = _FENCE_PATTERN.sub("", raw_text).strip()
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end < start:
        return None
    return text[start : end + 1]


def parse_batch(raw_text: str, batch_label: str) -> list[MealPlanDay]:
    """Parse a batch response into plan days or raise MalformedResponseError."""
    data = _load_object(raw_text, batch_label)
    try:
        payload = BatchPayload.model_validate(data)
    except ValidationError as exc:
        raise MalformedResponseError(
            batch_label, f"Response failed schema validation: {_summarize(exc)}"
        ) from exc
    return payload.days


def parse_recipe(raw_text: str, label: str) -> GeneratedRecipe:
    """Parse a single recipe object, optionally wrapped in a "recipe" key."""
    data = _load_object(raw_text, label)
    if isinstance(data.get("recipe"), dict):
        data = data["recipe"]
    try:
        return GeneratedRecipe.model_validate(data)
    except ValidationError as exc:
        raise MalformedResponseError(
            label, f"Response failed schema validation: {_summarize(exc)}"
        ) from exc


def parse_substitutes(raw_text: str, label: str) -> list[SubstituteOption]:
    """Parse a substitution response into its list of options."""
    data = _load_object(raw_text, label)
    try:
        payload = SubstitutesPayload.model_validate(data)
    except ValidationError as exc:
        raise MalformedResponseError(
            label, f"Response failed schema validation: {_summarize(exc)}"
        ) from exc
    return payload.substitutes


def check_plan(days: list[MealPlanDay], include_snacks: bool) -> list[PlanWarning]:
    """Return non-fatal warnings about a parsed plan and log each one."""
    warnings = [
        *_check_meal_slots(days, include_snacks),
        *_check_duplicate_names(days),
        *_check_listed_ingredients(days),
    ]
    for warning in warnings:
        _logger.warning(
            "Plan warning",
            extra={"kind": warning.kind, "day": warning.day, "detail": warning.message},
        )
    return warnings


def _load_object(raw_text: str, label: str) -> dict[str, object]:
    if not raw_text or not raw_text.strip():
        raise MalformedResponseError(label, "Empty response from model")
    json_text = extract_json_object(raw_text)
    if json_text is None:
        raise MalformedResponseError(label, "No JSON object found in response")
    try:
        data = json.loads(json_text)
    except json.JSONDecodeError as exc:
        raise MalformedResponseError(label, f"Invalid JSON: {exc.msg}") from exc
    if not isinstance(data, dict):
        raise MalformedResponseError(label, "Response is not a JSON object")
    return data


def _summarize(exc: ValidationError) -> str:
    first = exc.errors()[0]
    location = ".".join(str(part) for part in first["loc"])
    return f"{location}: {first['msg']}"


def _check_meal_slots(
    days: list[MealPlanDay], include_snacks: bool
) -> list[PlanWarning]:
    expected = expected_meal_order(include_snacks)
    expected_counts = Counter(expected)
    warnings: list[PlanWarning] = []
    for day in days:
        actual = tuple(meal.meal_type for meal in day.meals)
        if Counter(actual) != expected_counts:
            warnings.append(
                PlanWarning(
                    kind="meal_count",
                    message=(
                        f"Expected meals {', '.join(expected)}, "
                        f"got {', '.join(actual) or 'none'}"
                    ),
                    day=day.day_of_week,
                )
            )
        elif actual != expected:
            warnings.append(
                PlanWarning(
                    kind="meal_order",
                    message=f"Meals out of order: {', '.join(actual)}",
                    day=day.day_of_week,
                )
            )
    return warnings


def _check_duplicate_names(days: list[MealPlanDay]) -> list[PlanWarning]:
    seen: set[str] = set()
    warnings: list[PlanWarning] = []
    for day in days:
        for meal in day.meals:
            key = " ".join(meal.recipe.name.lower().split())
            if key in seen:
                warnings.append(
                    PlanWarning(
                        kind="duplicate_recipe",
                        message=f"Recipe '{meal.recipe.name}' appears more than once",
                        day=day.day_of_week,
                    )
                )
            seen.add(key)
    return warnings


def _check_listed_ingredients(days: list[MealPlanDay]) -> list[PlanWarning]:
    warnings: list[PlanWarning] = []
    for day in days:
        for meal in day.meals:
            missing = _unlisted_ingredients(meal.recipe)
            if missing:
                warnings.append(
                    PlanWarning(
                        kind="unlisted_ingredient",
                        message=(
                            f"'{meal.recipe.name}' uses {', '.join(missing)} "
                            "in its instructions without listing it"
                        ),
                        day=day.day_of_week,
                    )
                )
    return warnings


def _unlisted_ingredients(recipe: GeneratedRecipe) -> list[str]:
    steps = " ".join(recipe.instructions).lower()
    listed = " | ".join(ingredient.name.lower() for ingredient in recipe.ingredients)
    return [
        term
        for term in TRACKED_INGREDIENTS
        if re.search(rf"\b{re.escape(term)}s?\b", steps) and term not in listed
    ]

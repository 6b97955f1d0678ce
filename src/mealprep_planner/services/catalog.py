"""Allowed-ingredient catalog derived from dietary rules."""

from collections.abc import Iterable

from mealprep_planner.domain.catalog import IngredientCatalog
from mealprep_planner.domain.profile import UserProfile, WeeklyPreferences

VEGAN = "vegan"
VEGETARIAN = "vegetarian"
PESCATARIAN = "pescatarian"
OMNIVORE = "omnivore"

# Most restrictive first.
_TIER_ORDER = (VEGAN, VEGETARIAN, PESCATARIAN, OMNIVORE)

_BASE_CATALOG: dict[str, tuple[tuple[str, str], ...]] = {
    "proteins": (
        ("chicken breast", OMNIVORE),
        ("chicken thighs", OMNIVORE),
        ("ground turkey", OMNIVORE),
        ("turkey breast", OMNIVORE),
        ("lean ground beef", OMNIVORE),
        ("pork tenderloin", OMNIVORE),
        ("salmon", PESCATARIAN),
        ("tuna", PESCATARIAN),
        ("cod", PESCATARIAN),
        ("tilapia", PESCATARIAN),
        ("shrimp", PESCATARIAN),
        ("eggs", VEGETARIAN),
        ("paneer", VEGETARIAN),
        ("tofu", VEGAN),
        ("tempeh", VEGAN),
        ("seitan", VEGAN),
        ("lentils", VEGAN),
        ("chickpeas", VEGAN),
        ("black beans", VEGAN),
        ("edamame", VEGAN),
    ),
    "carbs": (
        ("brown rice", VEGAN),
        ("white rice", VEGAN),
        ("quinoa", VEGAN),
        ("oats", VEGAN),
        ("whole wheat pasta", VEGAN),
        ("whole grain bread", VEGAN),
        ("whole wheat tortillas", VEGAN),
        ("corn tortillas", VEGAN),
        ("couscous", VEGAN),
        ("potatoes", VEGAN),
        ("sweet potatoes", VEGAN),
    ),
    "vegetables": (
        ("broccoli", VEGAN),
        ("spinach", VEGAN),
        ("kale", VEGAN),
        ("bell peppers", VEGAN),
        ("onions", VEGAN),
        ("garlic", VEGAN),
        ("tomatoes", VEGAN),
        ("carrots", VEGAN),
        ("zucchini", VEGAN),
        ("mushrooms", VEGAN),
        ("cauliflower", VEGAN),
        ("green beans", VEGAN),
        ("asparagus", VEGAN),
        ("brussels sprouts", VEGAN),
        ("eggplant", VEGAN),
        ("celery", VEGAN),
        ("cucumber", VEGAN),
        ("beets", VEGAN),
        ("jalapeños", VEGAN),
        ("red chili peppers", VEGAN),
    ),
    "fruits": (
        ("bananas", VEGAN),
        ("apples", VEGAN),
        ("berries", VEGAN),
        ("oranges", VEGAN),
        ("mango", VEGAN),
        ("pineapple", VEGAN),
        ("grapes", VEGAN),
        ("lemons", VEGAN),
    ),
    "dairy_fats": (
        ("greek yogurt", VEGETARIAN),
        ("milk", VEGETARIAN),
        ("cottage cheese", VEGETARIAN),
        ("cheddar cheese", VEGETARIAN),
        ("feta cheese", VEGETARIAN),
        ("mozzarella", VEGETARIAN),
        ("butter", VEGETARIAN),
        ("olive oil", VEGAN),
        ("avocado", VEGAN),
        ("olives", VEGAN),
        ("peanut butter", VEGAN),
        ("almond butter", VEGAN),
        ("tahini", VEGAN),
        ("coconut milk", VEGAN),
        ("almond milk", VEGAN),
    ),
    "snacks": (
        ("beef jerky", OMNIVORE),
        ("turkey jerky", OMNIVORE),
        ("string cheese", VEGETARIAN),
        ("almonds", VEGAN),
        ("walnuts", VEGAN),
        ("cashews", VEGAN),
        ("trail mix", VEGAN),
        ("hummus", VEGAN),
        ("rice cakes", VEGAN),
        ("popcorn", VEGAN),
        ("dark chocolate", VEGAN),
    ),
}

_DAIRY = frozenset(
    {
        "greek yogurt",
        "milk",
        "cottage cheese",
        "cheddar cheese",
        "feta cheese",
        "mozzarella",
        "butter",
        "paneer",
        "string cheese",
    }
)
_GLUTEN = frozenset(
    {
        "whole wheat pasta",
        "whole grain bread",
        "whole wheat tortillas",
        "couscous",
        "seitan",
    }
)
_FISH = frozenset({"salmon", "tuna", "cod", "tilapia"})
_SHELLFISH = frozenset({"shrimp"})
_TREE_NUTS = frozenset(
    {"almonds", "walnuts", "cashews", "trail mix", "almond butter", "almond milk"}
)
_MEAT = frozenset(
    {
        "chicken breast",
        "chicken thighs",
        "ground turkey",
        "turkey breast",
        "lean ground beef",
        "pork tenderloin",
        "beef jerky",
        "turkey jerky",
    }
)

COMPOUND_TERMS: dict[str, frozenset[str]] = {
    "seafood": _FISH | _SHELLFISH,
    "fish": _FISH,
    "shellfish": _SHELLFISH,
    "meat": _MEAT,
    "red meat": frozenset({"lean ground beef", "pork tenderloin", "beef jerky"}),
    "poultry": frozenset(
        {"chicken breast", "chicken thighs", "ground turkey", "turkey breast"}
    ),
    "chicken": frozenset({"chicken breast", "chicken thighs"}),
    "turkey": frozenset({"ground turkey", "turkey breast", "turkey jerky"}),
    "beef": frozenset({"lean ground beef", "beef jerky"}),
    "pork": frozenset({"pork tenderloin"}),
    "beans": frozenset({"black beans", "chickpeas", "lentils", "edamame"}),
    "legumes": frozenset(
        {"black beans", "chickpeas", "lentils", "edamame", "hummus", "peanut butter"}
    ),
    "spicy food": frozenset({"jalapeños", "red chili peppers"}),
    "peanuts": frozenset({"peanut butter"}),
    "tree nuts": _TREE_NUTS,
    "nuts": _TREE_NUTS | {"peanut butter"},
    "milk": _DAIRY,
    "dairy": _DAIRY,
    "dairy-free": _DAIRY,
    "lactose": _DAIRY,
    "cheese": frozenset(
        {"cottage cheese", "cheddar cheese", "feta cheese", "mozzarella", "paneer"}
    ),
    "eggs": frozenset({"eggs"}),
    "wheat": _GLUTEN,
    "gluten": _GLUTEN,
    "gluten-free": _GLUTEN,
    "soy": frozenset({"tofu", "tempeh", "edamame"}),
    "sesame": frozenset({"tahini", "hummus"}),
    "halal": frozenset({"pork tenderloin"}),
    "kosher": frozenset({"pork tenderloin", "shrimp"}),
}

_IGNORED_TERMS = frozenset({"", "none", "no restrictions"})
_ROTATION_SIZE = 6


def build_ingredient_catalog(
    restrictions: Iterable[str],
    allergies: Iterable[str],
    dislikes: Iterable[str],
    exclusions: Iterable[str] = (),
) -> IngredientCatalog:
    """Build the allowed-ingredient catalog for one generation request.

    The diet tier comes from the most restrictive matching restriction. Every
    allergy, dislike, restriction-implied term and temporary exclusion is
    expanded through ``COMPOUND_TERMS`` and removed by exact, case-insensitive
    name match. Temporary exclusions are applied last and only live for this
    call.
    """
    restriction_terms = _normalize_terms(restrictions)
    tier = _select_tier(restriction_terms)

    removed: set[str] = set()
    for term in restriction_terms:
        if term in COMPOUND_TERMS:
            removed |= COMPOUND_TERMS[term]
    personal_terms = _normalize_terms(allergies) | _normalize_terms(dislikes)
    removed |= _expand(personal_terms)
    exclusion_terms = _normalize_terms(exclusions)
    removed |= _expand(exclusion_terms)

    allowed = _TIER_ORDER[: _TIER_ORDER.index(tier) + 1]
    filtered = {
        category: tuple(
            name
            for name, item_tier in items
            if item_tier in allowed and name not in removed
        )
        for category, items in _BASE_CATALOG.items()
    }
    return IngredientCatalog(
        diet_tier=tier,
        proteins=filtered["proteins"],
        carbs=filtered["carbs"],
        vegetables=filtered["vegetables"],
        fruits=filtered["fruits"],
        dairy_fats=filtered["dairy_fats"],
        snacks=filtered["snacks"],
        excluded_terms=tuple(sorted(personal_terms | exclusion_terms)),
        rotation_hint=_rotation_hint(filtered["proteins"]),
    )


def catalog_for(
    profile: UserProfile, preferences: WeeklyPreferences
) -> IngredientCatalog:
    """Build the catalog from a profile and this week's exclusions."""
    return build_ingredient_catalog(
        restrictions=profile.dietary_restrictions,
        allergies=profile.allergies,
        dislikes=profile.food_dislikes,
        exclusions=preferences.temporary_exclusions,
    )


def blocked_terms(allergies: Iterable[str]) -> frozenset[str]:
    """Return the allergy terms plus every catalog item they expand to."""
    terms = _normalize_terms(allergies)
    return frozenset(terms | _expand(terms))

def _normalize_terms(terms: Iterable[str]) -> set[str]:
    normalized = {" ".join(term.lower().split()) for term in terms}
    return normalized - _IGNORED_TERMS


def _expand(terms: set[str]) -> set[str]:
    expanded: set[str] = set()
    for term in terms:
        expanded |= COMPOUND_TERMS.get(term, frozenset({term}))
    return expanded


def _select_tier(restrictions: set[str]) -> str:
    for tier in _TIER_ORDER:
        if tier in restrictions:
            return tier
    return OMNIVORE


def _rotation_hint(proteins: tuple[str, ...]) -> str:
    if not proteins:
        return (
            "No catalog proteins remain; build protein from dairy, grains "
            "and vegetables."
        )
    step = max(1, len(proteins) // _ROTATION_SIZE)
    rotation = " -> ".join(proteins[::step][:_ROTATION_SIZE])
    return (
        f"Rotate proteins in this order: {rotation}. "
        "Use each protein at most twice per week and never for two dinners in a row."
    )

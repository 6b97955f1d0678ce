"""Allergy-aware ingredient substitution."""

import logging
import re
from dataclasses import dataclass

from mealprep_planner.domain.envelopes import (
    RateLimitInfo,
    SubstituteIngredientRequest,
    SubstituteIngredientResponse,
)
from mealprep_planner.domain.errors import (
    InputValidationError,
    MalformedResponseError,
    RateLimiterUnavailableError,
)
from mealprep_planner.domain.rate_limits import SUBSTITUTE_INGREDIENT
from mealprep_planner.domain.substitutes import SubstituteOption
from mealprep_planner.services.catalog import blocked_terms
from mealprep_planner.services.completion import CompletionClient
from mealprep_planner.services.plans import RATE_LIMITED_MESSAGE
from mealprep_planner.services.prompts import (
    SUBSTITUTE_COUNT,
    SUBSTITUTE_SYSTEM_PROMPT,
    build_substitute_prompt,
)
from mealprep_planner.services.rate_limits import RateLimiter, validate_device_id
from mealprep_planner.services.validation import parse_substitutes

_logger = logging.getLogger(__name__)


def validate_substitute_request(request: SubstituteIngredientRequest) -> str:
    """Return the validated device id or raise InputValidationError."""
    if not request.device_id:
        raise InputValidationError("Device ID is required")
    validate_device_id(request.device_id)
    if not request.ingredient_name.strip():
        raise InputValidationError("Ingredient name is required")
    if request.recipe_context is None:
        raise InputValidationError("Recipe context is required")
    return request.device_id


def safe_substitutes(
    options: list[SubstituteOption], allergies: list[str]
) -> list[SubstituteOption]:
    """Drop options whose name mentions an allergen, keeping at most three."""
    terms = blocked_terms(allergies)
    kept = [
        option
        for option in options
        if not any(_mentions(option.name, term) for term in terms)
    ]
    if len(kept) < len(options):
        _logger.warning(
            "Dropped substitutes matching allergies",
            extra={"dropped": len(options) - len(kept)},
        )
    return kept[:SUBSTITUTE_COUNT]


def _mentions(text: str, term: str) -> bool:
    return re.search(rf"\b{re.escape(term)}s?\b", text.lower()) is not None


@dataclass
class SubstituteIngredientService:
    """Suggest replacements for one ingredient of a recipe."""

    client: CompletionClient
    model: str
    max_tokens: int
    rate_limiter: RateLimiter

    async def substitute(
        self, request: SubstituteIngredientRequest
    ) -> SubstituteIngredientResponse:
        """Return up to three substitutes for the requested ingredient."""
        try:
            device_id = validate_substitute_request(request)
        except InputValidationError as exc:
            return SubstituteIngredientResponse(
                success=False, error=str(exc), status_code=400
            )

        try:
            rate_limit = self.rate_limiter.check(device_id, SUBSTITUTE_INGREDIENT)
        except RateLimiterUnavailableError as exc:
            return SubstituteIngredientResponse(
                success=False, error=str(exc), status_code=503
            )
        rate_limit_info = RateLimitInfo.from_result(rate_limit)
        if not rate_limit.allowed:
            return SubstituteIngredientResponse(
                success=False,
                error=RATE_LIMITED_MESSAGE,
                rate_limit_info=rate_limit_info,
                status_code=429,
            )

        ingredient = request.ingredient_name.strip()
        label = f"substitute {ingredient}"
        try:
            completion = await self.client.complete(
                model=self.model,
                max_tokens=self.max_tokens,
                system_prompt=SUBSTITUTE_SYSTEM_PROMPT,
                user_prompt=build_substitute_prompt(
                    ingredient,
                    request.ingredient_quantity,
                    request.ingredient_unit,
                    request.recipe_context,
                    request.dietary_restrictions,
                    request.allergies,
                ),
            )
            options = safe_substitutes(
                parse_substitutes(completion.content, label), request.allergies
            )
            if not options:
                raise MalformedResponseError(label, "Every substitute was an allergen")
        except Exception as exc:
            _logger.exception(
                "Ingredient substitution failed", extra={"ingredient": ingredient}
            )
            return SubstituteIngredientResponse(
                success=False,
                error=f"Failed to generate substitutes: {exc}",
                rate_limit_info=rate_limit_info,
                status_code=400,
            )

        _logger.info(
            "Substitutes generated",
            extra={"ingredient": ingredient, "count": len(options)},
        )
        return SubstituteIngredientResponse(
            success=True, substitutes=options, rate_limit_info=rate_limit_info
        )

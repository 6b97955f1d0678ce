"""Tests for container wiring."""

import asyncio

from mealprep_planner.containers import build_container
from mealprep_planner.domain.rate_limits import (
    GENERATE_PLAN,
    SUBSTITUTE_INGREDIENT,
    SWAP_MEAL,
)


def test_build_container_creates_services(settings) -> None:
    container = build_container(settings)
    assert container.meal_plan_service is not None
    assert container.meal_swap_service.rate_limiter is container.rate_limiter
    assert set(container.rate_limiter.rules) == {
        GENERATE_PLAN,
        SWAP_MEAL,
        SUBSTITUTE_INGREDIENT,
    }
    assert container.substitute_service.rate_limiter is container.rate_limiter
    asyncio.run(container.close_resources())

"""Plan identity and response envelopes."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import uuid4

from mealprep_planner.domain.envelopes import (
    GeneratePlanResponse,
    MealPlan,
    RateLimitInfo,
)
from mealprep_planner.domain.plans import MealPlanDay
from mealprep_planner.domain.rate_limits import RateLimitResult
from mealprep_planner.domain.recipes import BatchSaveResult


def new_plan_id(now: datetime | None = None) -> str:
    """Return a time-based plan id with a random suffix."""
    now = now or datetime.now(tz=UTC)
    return f"mp_{int(now.timestamp() * 1000)}_{uuid4().hex[:9]}"


@dataclass
class PlanAssembler:
    """Build plans and the success or failure envelopes around them."""

    def build_plan(self, days: list[MealPlanDay]) -> MealPlan:
        """Order the days and give the plan an identity."""
        ordered = sorted(days, key=lambda day: day.day_of_week)
        return MealPlan(id=new_plan_id(), days=ordered)

    def success(
        self,
        plan: MealPlan,
        storage: BatchSaveResult,
        rate_limit: RateLimitResult,
    ) -> GeneratePlanResponse:
        """Wrap a complete plan with storage counts and quota."""
        return GeneratePlanResponse(
            success=True,
            meal_plan=plan,
            recipes_added=storage.saved,
            recipes_duplicate=storage.duplicates,
            rate_limit_info=RateLimitInfo.from_result(rate_limit),
        )

    def failure(
        self,
        error: str,
        rate_limit: RateLimitResult | None = None,
        status_code: int = 400,
    ) -> GeneratePlanResponse:
        """Return an error envelope that never carries plan data."""
        return GeneratePlanResponse(
            success=False,
            error=error,
            status_code=status_code,
            rate_limit_info=(
                RateLimitInfo.from_result(rate_limit) if rate_limit else None
            ),
        )

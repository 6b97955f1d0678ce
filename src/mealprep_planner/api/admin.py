"""Admin API endpoints with simple token auth."""

from __future__ import annotations

from dataclasses import asdict
from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request, status

if TYPE_CHECKING:
    from mealprep_planner.containers import AppContainer

router = APIRouter(prefix="/admin", tags=["admin"])


def _get_admin_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.admin_token


async def require_admin(
    x_admin_token: str | None = Header(default=None),
    admin_token: str = Depends(_get_admin_token),
) -> None:
    """Ensure requests include a valid admin token."""
    if not x_admin_token or x_admin_token != admin_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


@router.get("/recipes/recent", dependencies=[Depends(require_admin)])
async def recent_recipes(
    request: Request, limit: int = Query(default=20, ge=1, le=200)
) -> dict[str, object]:
    """Return the most recently stored recipes."""
    container: AppContainer = request.app.state.container
    recipes = container.recipe_store.recent(limit)
    return {"recipes": [asdict(recipe) for recipe in recipes]}


@router.get("/recipes/count", dependencies=[Depends(require_admin)])
async def recipe_count(request: Request) -> dict[str, int]:
    """Return the size of the shared recipe library."""
    container: AppContainer = request.app.state.container
    return {"count": container.recipe_store.count()}


@router.post("/rate-limits/cleanup", dependencies=[Depends(require_admin)])
async def cleanup_rate_limits(request: Request) -> dict[str, int]:
    """Delete expired rate-limit counters."""
    container: AppContainer = request.app.state.container
    return {"deleted": container.rate_limiter.cleanup_expired()}

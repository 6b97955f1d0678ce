"""ASGI entrypoint for the meal planner API."""

from mealprep_planner.api.app import create_app
from mealprep_planner.containers import build_container

app = create_app(build_container())

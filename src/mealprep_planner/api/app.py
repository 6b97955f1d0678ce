"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from mealprep_planner.api.admin import router as admin_router
from mealprep_planner.app_logging import configure_logging
from mealprep_planner.containers import AppContainer
from mealprep_planner.domain.envelopes import (
    Envelope,
    GeneratePlanRequest,
    RateLimitInfo,
    SubstituteIngredientRequest,
    SwapMealRequest,
)
from mealprep_planner.domain.errors import (
    InputValidationError,
    RateLimiterUnavailableError,
)
from mealprep_planner.domain.rate_limits import GENERATE_PLAN


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(admin_router)

    @app.exception_handler(RequestValidationError)
    async def request_validation_error(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Answer malformed payloads with the standard error envelope."""
        message = _describe_validation_error(exc)
        logger.info(
            "Rejected malformed request",
            extra={"path": request.url.path, "detail": message},
        )
        return _envelope_response(
            Envelope(success=False, error=message, status_code=400)
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/v1/generate-plan")
    async def generate_plan(
        payload: GeneratePlanRequest, request: Request
    ) -> JSONResponse:
        """Generate a complete multi-day meal plan."""
        state_container: AppContainer = request.app.state.container
        response = await state_container.meal_plan_service.generate(payload)
        return _envelope_response(response)

    @app.post("/v1/swap-meal")
    async def swap_meal(payload: SwapMealRequest, request: Request) -> JSONResponse:
        """Generate a single replacement meal."""
        state_container: AppContainer = request.app.state.container
        response = await state_container.meal_swap_service.swap(payload)
        return _envelope_response(response)

    @app.post("/v1/substitute-ingredient")
    async def substitute_ingredient(
        payload: SubstituteIngredientRequest, request: Request
    ) -> JSONResponse:
        """Suggest substitutes for one ingredient of a recipe."""
        state_container: AppContainer = request.app.state.container
        response = await state_container.substitute_service.substitute(payload)
        return _envelope_response(response)

    @app.get("/v1/rate-limit")
    async def rate_limit_status(
        request: Request,
        device_id: str = Query(alias="deviceId"),
        action: str = GENERATE_PLAN,
    ) -> JSONResponse:
        """Report remaining quota without consuming it."""
        state_container: AppContainer = request.app.state.container
        try:
            result = state_container.rate_limiter.status(device_id, action)
        except InputValidationError as exc:
            envelope = Envelope(success=False, error=str(exc), status_code=400)
        except KeyError:
            envelope = Envelope(
                success=False, error=f"Unknown action: {action}", status_code=400
            )
        except RateLimiterUnavailableError as exc:
            envelope = Envelope(success=False, error=str(exc), status_code=503)
        else:
            envelope = Envelope(
                success=True, rate_limit_info=RateLimitInfo.from_result(result)
            )
        return _envelope_response(envelope)

    return app


def _envelope_response(envelope: Envelope) -> JSONResponse:
    """Serialize an envelope with its status code."""
    return JSONResponse(
        status_code=envelope.status_code, content=envelope.to_payload()
    )


def _describe_validation_error(exc: RequestValidationError) -> str:
    """Return a short message for the first validation error."""
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    if not location:
        return f"Invalid request: {first.get('msg', 'invalid payload')}"
    return f"Invalid request: {location}: {first.get('msg', 'invalid value')}"

"""FastAPI application."""

import logging

from dishka import AsyncContainer
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from skullking.config import Settings
from skullking.domain.error import DomainError
from skullking.interface.api.routes import (
    auth,
    health,
    settings as settings_routes,
    users,
)
from skullking.util.di.container import create_container, setup_di
from skullking.util.observability import instrument_fastapi, instrument_httpx

logger = logging.getLogger(__name__)

API_PREFIX = "/api"


async def _domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    # Routes map expected domain errors themselves; anything reaching here
    # is unexpected and must not leak details.
    logger.exception(f"Unhandled domain error on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "An internal server error occurred"},
    )


def create_app(container: AsyncContainer | None = None) -> FastAPI:
    """Create FastAPI application.

    Logfire must be configured before calling this function: start_app.py
    does it in production and tests/conftest.py in tests.

    Args:
        container: DI container to use; the production container is built
            when omitted

    Returns:
        Configured application
    """
    settings = Settings()

    instrument_httpx()

    app_instance = FastAPI(
        title="Skull King API",
        description="Backend API for the Skull King score tracker",
        version="0.1.0",
    )

    instrument_fastapi(app_instance)

    app_instance.add_middleware(
        CORSMiddleware,
        allow_origins=[
            settings.api.frontend_url,
            "http://localhost:5173",  # Vite default
        ],
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Accept", "Origin", "X-Requested-With"],
        max_age=600,
    )

    setup_di(app_instance, container or create_container())

    app_instance.add_exception_handler(DomainError, _domain_error_handler)

    app_instance.include_router(health.router, prefix=API_PREFIX)
    app_instance.include_router(auth.router, prefix=API_PREFIX)
    app_instance.include_router(settings_routes.router, prefix=API_PREFIX)
    app_instance.include_router(users.router, prefix=API_PREFIX)

    return app_instance


# App instance for uvicorn; logfire must be configured before import
app = create_app()

"""
FastAPI application entry point.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from outreach.calls.router import router as calls_router
from outreach.config import get_settings
from outreach.contacts.router import router as contacts_router
from outreach.shared.database import get_database_manager
from outreach.shared.exceptions import (
    NotFoundError,
    OutcomeProcessingError,
    ValidationError,
)
from outreach.shared.logging import CorrelationIdMiddleware, get_logger, setup_logging
from outreach.telephony.config import get_outcome_config, get_telephony_config
from outreach.telephony.factory import create_telephony_provider
from outreach.telephony.normalizer import OutcomeNormalizer
from outreach.telephony.webhooks.router import router as webhooks_router

import outreach.calls.models  # noqa: F401

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Provider and outcome configuration are validated here, so a missing
    credential stops the process before it accepts traffic.
    """
    setup_logging()
    settings = get_settings()

    logger.info("Application starting", extra={"env": settings.app_env})

    if getattr(app.state, "outcome_normalizer", None) is None:
        app.state.outcome_normalizer = OutcomeNormalizer(get_outcome_config())
    if getattr(app.state, "telephony_provider", None) is None:
        app.state.telephony_provider = create_telephony_provider(get_telephony_config())

    db_manager = get_database_manager()
    if settings.auto_create_tables:
        await db_manager.create_all()
        logger.info("Database tables ensured")

    yield

    logger.info("Shutting down application")

    await app.state.telephony_provider.aclose()
    await db_manager.close()
    logger.info("Application shutdown complete")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Outreach API",
        description="Outbound collections calling and call-outcome ingestion",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )

    @app.exception_handler(OutcomeProcessingError)
    async def _outcome_error(_: Request, exc: OutcomeProcessingError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "error": str(exc)},
        )

    @app.exception_handler(NotFoundError)
    async def _not_found(_: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(ValidationError)
    async def _validation(_: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        errors = [
            {
                "field": ".".join(str(loc) for loc in error["loc"]),
                "message": error["msg"],
                "type": error["type"],
            }
            for error in exc.errors()
        ]
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "detail": {
                    "code": "VALIDATION_ERROR",
                    "message": "Request validation failed",
                    "errors": errors,
                }
            },
        )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(CorrelationIdMiddleware)

    app.include_router(contacts_router)
    app.include_router(calls_router)
    app.include_router(webhooks_router)

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        return {"status": "healthy"}

    return app


app = create_app()

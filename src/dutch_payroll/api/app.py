"""FastAPI application factory."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from dutch_payroll.api.routes import (
    health_router,
    payroll_router,
    rate_tables_router,
    validation_router,
)
from dutch_payroll.calculators.rate_table import get_default_registry
from dutch_payroll.config import settings
from dutch_payroll.exceptions import (
    ConfigurationError,
    InvariantViolation,
    RateTableNotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    # Startup: fail fast on broken rate tables
    registry = get_default_registry()
    logger.info("Rate tables available for %s", registry.years)
    yield


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Dutch Payroll Engine API",
        description="Dutch payroll calculation engine",
        version=settings.engine_version,
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Exception handlers
    @app.exception_handler(ValidationError)
    async def validation_exception_handler(
        request: Request, exc: ValidationError
    ) -> JSONResponse:
        """Handle rejected calculation input."""
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"code": "VALIDATION_ERROR", **exc.to_dict()},
        )

    @app.exception_handler(RateTableNotFoundError)
    async def rate_table_not_found_handler(
        request: Request, exc: RateTableNotFoundError
    ) -> JSONResponse:
        """Handle requests for a tax year without a rate table."""
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={
                "detail": str(exc),
                "code": "RATE_TABLE_NOT_FOUND",
                "field": "year",
                "constraint": "rate_table_exists",
            },
        )

    @app.exception_handler(ConfigurationError)
    async def configuration_exception_handler(
        request: Request, exc: ConfigurationError
    ) -> JSONResponse:
        """Handle broken rate table configuration."""
        logger.error("Configuration error: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": str(exc), "code": "CONFIGURATION_ERROR"},
        )

    @app.exception_handler(InvariantViolation)
    async def invariant_exception_handler(
        request: Request, exc: InvariantViolation
    ) -> JSONResponse:
        """Handle internally inconsistent results."""
        logger.error("Invariant violation: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "detail": str(exc),
                "code": "INVARIANT_VIOLATION",
                "field": exc.name,
            },
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.exception("Unhandled error on %s", request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "detail": "An unexpected error occurred",
                "code": "INTERNAL_ERROR",
            },
        )

    # Include routers
    app.include_router(health_router)
    app.include_router(payroll_router, prefix="/api/v1")
    app.include_router(rate_tables_router, prefix="/api/v1")
    app.include_router(validation_router, prefix="/api/v1")

    return app


# Default app instance for uvicorn
app = create_app()

"""FastAPI application entry point."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from provider_validation.api.v1.endpoints import health
from provider_validation.api.v1.router import api_router
from provider_validation.core.config import settings
from provider_validation.core.database import DatabaseClient
from provider_validation.core.exceptions import AppError, StoreFailure, ValidationFlowError
from provider_validation.utils.logging import get_logger
from provider_validation.utils.responses import create_error_detail

LOGGER = get_logger(__name__, level=settings.log_level)


class RootResponse(BaseModel):
    """Root endpoint response payload."""

    message: str = Field(..., description="Service status message")
    version: str = Field(..., description="Running application version")
    docs: str = Field(..., description="Path to the interactive API docs")
    health: str = Field(..., description="Path to the health check endpoint")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    LOGGER.info(
        "Starting application",
        extra={
            "app_name": settings.app_name,
            "version": settings.app_version,
            "environment": settings.environment,
        },
    )

    db_client = DatabaseClient(settings.db)
    app.state.db_client = db_client

    try:
        await db_client.connect()
        if settings.db.auto_migrate:
            await db_client.auto_migrate()
    except Exception as e:
        LOGGER.error(
            "Database initialization failed",
            exc_info=True,
            extra={"error": str(e)},
        )

    yield

    LOGGER.info("Shutting down application")
    try:
        await db_client.disconnect()
    except Exception as e:
        LOGGER.error(
            "Error closing database",
            exc_info=True,
            extra={"error": str(e)},
        )


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Assigns provider records to operators for manual contact validation",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)


@app.middleware("http")
async def add_request_id(request: Request, call_next):
    request_id = request.headers.get("X-Request-ID", str(uuid4()))
    request.state.request_id = request_id
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Render workflow and store failures as problem details."""
    if isinstance(exc, StoreFailure):
        LOGGER.error(
            f"Store failure: {exc.message}",
            exc_info=exc.original_error,
            extra={"path": request.url.path},
        )
        title = "Store Unavailable"
    elif isinstance(exc, ValidationFlowError):
        LOGGER.info(
            f"Request rejected: {exc.message}",
            extra={"path": request.url.path, "error": exc.__class__.__name__},
        )
        title = exc.title
    else:
        LOGGER.error(f"Unhandled application error: {exc.message}", exc_info=exc)
        title = "Internal Server Error"

    error_detail = create_error_detail(
        title=title,
        status=exc.status_code,
        detail=exc.message,
        request=request,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=error_detail.model_dump(mode="json"),
    )


# Include routers
app.include_router(api_router, prefix=settings.api_v1_prefix)
app.include_router(health.router, prefix="/health", tags=["Health"])


@app.get(
    "/",
    response_model=RootResponse,
    tags=["Root"],
    summary="Root endpoint",
    description="Get basic information about the API",
    operation_id="get_public_root_metadata",
)
async def root() -> RootResponse:
    """Root endpoint.

    Returns:
        RootResponse: Basic API information
    """
    return RootResponse(
        message="Server is running",
        version=settings.app_version,
        docs="/docs",
        health="/health",
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "provider_validation.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )

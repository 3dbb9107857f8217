"""
Airbyte Sync Service - FastAPI Application Entrypoint

This is the main entrypoint for the Airbyte sync service. It sets up:
- FastAPI application with CORS middleware
- Structured JSON logging with contextual fields
- Service dependencies (AirbyteClient, ExportService)
- API routers for Airbyte resources, exports and monitoring
- Request ID middleware for tracing
- Error handler rendering Airbyte client errors as JSON
- Health check endpoint

The service authenticates against the Airbyte API with client credentials,
lists workspaces and related resources, and exports them as tabular files.
"""

import logging
import time
import uuid
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app import __version__
from app.api.airbyte_api import router as airbyte_router
from app.api.export_api import router as export_router
from app.api.monitoring_api import router as monitoring_router
from app.core.config import get_settings
from app.core.exceptions import AirbyteClientError
from app.core.logging import bind_context, configure_logging
from app.models.api_models import ErrorResponse, HealthResponse
from app.services.airbyte_client import AirbyteClient
from app.services.export_service import ExportService


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan context manager for startup and shutdown."""
    settings = get_settings()

    # Startup
    configure_logging(settings.LOG_LEVEL, service=settings.APP_NAME, env=settings.ENV)
    logger = logging.getLogger(__name__)
    logger.info("service_startup", extra={"app_name": settings.APP_NAME, "api_url": settings.airbyte.api_url})

    missing = settings.airbyte.missing_credentials()
    if missing:
        logger.warning("airbyte_credentials_missing", extra={"missing": missing})

    # Initialize services
    airbyte_client = AirbyteClient(settings)
    export_service = ExportService(settings, airbyte_client)

    # Attach to app state
    app.state.settings = settings
    app.state.airbyte_client = airbyte_client
    app.state.export_service = export_service

    logger.info("startup_complete")

    yield

    # Shutdown
    logger.info("service_shutdown")
    await airbyte_client.close()


# Create FastAPI app
app = FastAPI(
    title="Airbyte Sync Service",
    description="FastAPI service that lists Airbyte workspaces, connections and jobs and exports them as tables",
    version=__version__,
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    """Middleware to add request ID and timing to all requests."""
    request_id = str(uuid.uuid4())
    request.state.request_id = request_id

    logger = logging.getLogger(__name__)
    start_time = time.perf_counter()

    try:
        response = await call_next(request)
    except Exception as exc:
        duration_ms = (time.perf_counter() - start_time) * 1000
        with bind_context(logger, request_id=request_id, path=request.url.path, method=request.method, duration_ms=round(duration_ms, 2)) as log:
            log.exception("unhandled_exception", exc_info=exc)
        return JSONResponse(status_code=500, content={"detail": "Internal Server Error", "request_id": request_id})

    duration_ms = (time.perf_counter() - start_time) * 1000
    with bind_context(logger, request_id=request_id, path=request.url.path, method=request.method, status_code=response.status_code, duration_ms=round(duration_ms, 2)) as log:
        log.info("request_complete")

    # Add request ID to response headers
    response.headers["X-Request-ID"] = request_id
    return response


@app.exception_handler(AirbyteClientError)
async def airbyte_error_handler(request: Request, exc: AirbyteClientError) -> JSONResponse:
    """Render client errors with their own status code."""
    request_id = getattr(request.state, "request_id", None)
    logging.getLogger(__name__).warning(
        "airbyte_client_error",
        extra={"request_id": request_id, "error_code": exc.error_code, "status_code": exc.status_code},
    )
    body = ErrorResponse(error=exc.error_code, message=exc.message, details=exc.details, request_id=request_id)
    return JSONResponse(status_code=exc.status_code, content=body.model_dump(mode="json"))


# Include API routers
app.include_router(airbyte_router, prefix="/api/v1", tags=["airbyte"])
app.include_router(export_router, prefix="/api/v1", tags=["export"])
app.include_router(monitoring_router, prefix="/api/v1", tags=["monitoring"])


@app.get("/", tags=["root"])
async def root():
    """Root endpoint."""
    return {"message": "Welcome to Airbyte Sync Service", "docs": "/docs"}


@app.get("/health", tags=["health"], response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Simple health check endpoint."""
    return HealthResponse(status="healthy", version=__version__)


if __name__ == "__main__":
    import uvicorn
    settings = get_settings()
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.is_dev,
        log_level=settings.LOG_LEVEL.lower(),
    )

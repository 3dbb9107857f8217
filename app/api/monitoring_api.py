"""
Monitoring API

FastAPI router for monitoring endpoints:
- GET /status: Returns Airbyte connectivity, token state and last export
"""
from __future__ import annotations

import logging
import time
from datetime import datetime, timezone

from fastapi import APIRouter, Request

from .. import __version__
from ..core.config import get_settings
from ..models.api_models import StatusResponse

router = APIRouter()
logger = logging.getLogger(__name__)

_start_time = time.time()


@router.get("/status", response_model=StatusResponse)
async def status_endpoint(request: Request) -> StatusResponse:
    """Return service status and Airbyte client state."""
    settings = get_settings()
    client = request.app.state.airbyte_client
    export_service = request.app.state.export_service

    response = StatusResponse(
        service=settings.APP_NAME,
        version=__version__,
        environment=settings.ENV,
        uptime_seconds=time.time() - _start_time,
        api_url=settings.airbyte.api_url,
        credentials_configured=not settings.airbyte.missing_credentials(),
        token=client.tokens.token_info(),
        last_export=export_service.last_export,
        last_activity=datetime.now(timezone.utc),
    )

    logger.info("status_requested", extra={"environment": settings.ENV})
    return response

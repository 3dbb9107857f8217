"""
Export API

FastAPI router for export endpoints:
- POST /export/trigger: Export an Airbyte listing to a file and return its stats
"""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request

from ..core.logging import bind_context
from ..models.api_models import ExportTriggerRequest, ExportTriggerResponse
from ..services.export_service import ExportService

router = APIRouter()
logger = logging.getLogger(__name__)


def get_export_service(request: Request) -> ExportService:
    """Dependency to get export service from app state."""
    return request.app.state.export_service


@router.post("/export/trigger", response_model=ExportTriggerResponse)
async def trigger_export(
    request: ExportTriggerRequest,
    req: Request,
    export_service: ExportService = Depends(get_export_service),
) -> ExportTriggerResponse:
    """Export an Airbyte resource listing.

    Fetches the listing, maps it to a table and writes it under the
    configured export directory. Airbyte errors propagate to the
    application's error handler.
    """
    with bind_context(logger, request_id=req.state.request_id) as log:
        log.info("export_triggered", extra={"resource": request.resource, "format": request.format})

        filters = {}
        if request.workspace_ids:
            filters["workspace_ids"] = request.workspace_ids

        stats = await export_service.export(request.resource, request.format, **filters)

    return ExportTriggerResponse(
        batch_id=stats["batch_id"],
        status="completed",
        message=f"Exported {stats['row_count']} {request.resource}",
        stats=stats,
    )

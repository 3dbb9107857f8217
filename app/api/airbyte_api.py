"""
Airbyte API

FastAPI router exposing Airbyte resources:
- GET /workspaces: List workspaces (rows or table)
- GET /workspaces/{workspace_id}: Fetch one workspace
- GET /connections: List connections, optionally per workspace
- POST /connections/{connection_id}/sync: Trigger a sync job
- GET /jobs/{job_id}: Fetch job status
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Literal, Optional

from fastapi import APIRouter, Depends, Query, Request

from ..core.logging import bind_context
from ..models.api_models import SyncTriggerResponse, TableResponse
from ..services import tabular
from ..services.airbyte_client import AirbyteClient

router = APIRouter()
logger = logging.getLogger(__name__)


def get_airbyte_client(request: Request) -> AirbyteClient:
    """Dependency to get the Airbyte client from app state."""
    return request.app.state.airbyte_client


@router.get("/workspaces")
async def list_workspaces(
    req: Request,
    format_: Literal["rows", "table"] = Query("rows", alias="format"),
    client: AirbyteClient = Depends(get_airbyte_client),
) -> Any:
    """List every workspace as rows, or as a columns/rows table."""
    with bind_context(logger, request_id=req.state.request_id) as log:
        frame = tabular.workspaces_to_frame(await client.list_workspaces())
        log.info("workspaces_listed", extra={"count": len(frame)})

    table = tabular.frame_to_table(frame)
    if format_ == "table":
        return TableResponse(**table).model_dump()
    return [dict(zip(table["columns"], row)) for row in table["rows"]]


@router.get("/workspaces/{workspace_id}")
async def get_workspace(workspace_id: str, client: AirbyteClient = Depends(get_airbyte_client)) -> Dict[str, Any]:
    workspace = await client.get_workspace(workspace_id)
    return workspace.to_row()


@router.get("/connections")
async def list_connections(
    workspace_id: Optional[List[str]] = Query(None),
    client: AirbyteClient = Depends(get_airbyte_client),
) -> List[Dict[str, Any]]:
    connections = await client.list_connections(workspace_id)
    return [c.to_row() for c in connections]


@router.post("/connections/{connection_id}/sync", response_model=SyncTriggerResponse)
async def trigger_sync(
    connection_id: str,
    req: Request,
    client: AirbyteClient = Depends(get_airbyte_client),
) -> SyncTriggerResponse:
    """Ask Airbyte to start a sync for the connection."""
    with bind_context(logger, request_id=req.state.request_id) as log:
        job = await client.trigger_sync(connection_id)
        log.info("sync_requested", extra={"connection_id": connection_id, "job_id": job.job_id})
    return SyncTriggerResponse(job_id=job.job_id, status=job.status, connection_id=connection_id)


@router.get("/jobs/{job_id}")
async def get_job(job_id: int, client: AirbyteClient = Depends(get_airbyte_client)) -> Dict[str, Any]:
    job = await client.get_job(job_id)
    return job.to_row()

"""
API Models

Pydantic models for API requests and responses:
- TableResponse: DataFrame rendered as columns + rows
- ExportTriggerRequest/Response: For running an export
- StatusResponse: For monitoring endpoint
- ErrorResponse: For error handling
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TableResponse(BaseModel):
    """Tabular view of a listing."""

    columns: List[str] = Field(..., description="Column names in order")
    rows: List[List[Any]] = Field(..., description="Row values aligned with columns")


class ExportTriggerRequest(BaseModel):
    """Request model for triggering an export."""

    resource: Literal["workspaces", "sources", "destinations", "connections", "jobs"] = Field(
        "workspaces", description="Airbyte resource to export"
    )
    format: Optional[Literal["csv", "json", "ndjson"]] = Field(None, description="Output format (uses config default)")
    workspace_ids: Optional[List[str]] = Field(None, description="Restrict listing to these workspaces")


class ExportTriggerResponse(BaseModel):
    """Response model for export trigger."""

    batch_id: str = Field(..., description="Unique batch identifier")
    status: str = Field(..., description="Export status")
    message: str = Field(..., description="Status message")
    stats: Dict[str, Any] = Field(..., description="Export statistics")


class SyncTriggerResponse(BaseModel):
    """Response model for a triggered connection sync."""

    job_id: int = Field(..., description="Airbyte job identifier")
    status: str = Field(..., description="Job status reported by Airbyte")
    connection_id: str = Field(..., description="Connection being synced")


class StatusResponse(BaseModel):
    """Response model for status/monitoring endpoint."""

    service: str = Field(..., description="Service name")
    version: str = Field(..., description="Service version")
    environment: str = Field(..., description="Deployment environment")
    uptime_seconds: float = Field(..., description="Service uptime in seconds")

    # Airbyte connectivity
    api_url: Optional[str] = Field(None, description="Configured Airbyte API base URL")
    credentials_configured: bool = Field(..., description="Whether all Airbyte credentials are set")
    token: Dict[str, Any] = Field(default_factory=dict, description="Cached token metadata (never the token)")

    # Recent activity
    last_export: Optional[Dict[str, Any]] = Field(None, description="Stats of the last successful export")
    last_activity: Optional[datetime] = Field(None, description="Timestamp of this status check")


class ErrorResponse(BaseModel):
    """Standard error response model."""

    error: str = Field(..., description="Error type or code")
    message: str = Field(..., description="Human-readable error message")
    details: Optional[Dict[str, Any]] = Field(None, description="Additional error details")
    request_id: Optional[str] = Field(None, description="Request ID for tracing")
    timestamp: datetime = Field(default_factory=_utcnow, description="Error timestamp")


class HealthResponse(BaseModel):
    """Response model for health check endpoint."""

    status: str = Field(..., description="Health status")
    timestamp: datetime = Field(default_factory=_utcnow, description="Health check timestamp")
    version: Optional[str] = Field(None, description="Service version")

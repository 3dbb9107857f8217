"""
Airbyte Resource Models

Pydantic models for Airbyte API payloads:
- TokenResponse: OAuth client-credentials token reply
- Workspace, Source, Destination, Connection, Job: listing items

Field names follow the API's camelCase wire format; unknown fields are kept
so that tabular exports carry everything the API returned.
"""
from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class TokenResponse(BaseModel):
    """Body returned by the token endpoint."""

    model_config = ConfigDict(extra="ignore")

    access_token: str = Field(..., description="Bearer token")
    token_type: str = Field("Bearer", description="Token type")
    expires_in: Optional[int] = Field(None, description="Lifetime in seconds")

    @field_validator("access_token")
    @classmethod
    def non_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("access_token must be a non-empty string")
        return v


class AirbyteResource(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    def to_row(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class Workspace(AirbyteResource):
    workspace_id: str = Field(..., alias="workspaceId")
    name: str
    data_residency: Optional[str] = Field(None, alias="dataResidency")


class Source(AirbyteResource):
    source_id: str = Field(..., alias="sourceId")
    name: str
    source_type: Optional[str] = Field(None, alias="sourceType")
    workspace_id: Optional[str] = Field(None, alias="workspaceId")


class Destination(AirbyteResource):
    destination_id: str = Field(..., alias="destinationId")
    name: str
    destination_type: Optional[str] = Field(None, alias="destinationType")
    workspace_id: Optional[str] = Field(None, alias="workspaceId")


class Connection(AirbyteResource):
    connection_id: str = Field(..., alias="connectionId")
    name: str
    source_id: Optional[str] = Field(None, alias="sourceId")
    destination_id: Optional[str] = Field(None, alias="destinationId")
    workspace_id: Optional[str] = Field(None, alias="workspaceId")
    status: Optional[str] = None


class Job(AirbyteResource):
    job_id: int = Field(..., alias="jobId")
    status: str
    job_type: Optional[str] = Field(None, alias="jobType")
    connection_id: Optional[str] = Field(None, alias="connectionId")
    start_time: Optional[str] = Field(None, alias="startTime")
    duration: Optional[str] = None
    bytes_synced: Optional[int] = Field(None, alias="bytesSynced")
    rows_synced: Optional[int] = Field(None, alias="rowsSynced")

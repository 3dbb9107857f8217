"""
Export Service

Implements the Airbyte export pipeline:
- Fetch: Lists a resource through the Airbyte client
- Transform: Maps the listing to a flat DataFrame
- Write: Persists the frame as CSV, JSON or NDJSON under the export directory
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, Optional
from uuid import uuid4

import pandas as pd

from ..core.config import Settings
from ..core.logging import bind_context
from . import tabular
from .airbyte_client import AirbyteClient

logger = logging.getLogger(__name__)

FORMAT_EXTENSIONS = {"csv": "csv", "json": "json", "ndjson": "ndjson"}


class ExportService:
    """Service for exporting Airbyte listings to tabular files."""

    def __init__(self, settings: Settings, client: AirbyteClient):
        self.settings = settings
        self.client = client
        self.last_export: Optional[Dict[str, Any]] = None

    def _fetchers(self) -> Dict[str, Callable[..., Awaitable[pd.DataFrame]]]:
        return {
            "workspaces": self._workspaces,
            "sources": self._sources,
            "destinations": self._destinations,
            "connections": self._connections,
            "jobs": self._jobs,
        }

    async def _workspaces(self, **_: Any) -> pd.DataFrame:
        return tabular.workspaces_to_frame(await self.client.list_workspaces())

    async def _sources(self, workspace_ids: Optional[list] = None, **_: Any) -> pd.DataFrame:
        return tabular.sources_to_frame(await self.client.list_sources(workspace_ids))

    async def _destinations(self, workspace_ids: Optional[list] = None, **_: Any) -> pd.DataFrame:
        return tabular.destinations_to_frame(await self.client.list_destinations(workspace_ids))

    async def _connections(self, workspace_ids: Optional[list] = None, **_: Any) -> pd.DataFrame:
        return tabular.connections_to_frame(await self.client.list_connections(workspace_ids))

    async def _jobs(self, connection_id: Optional[str] = None, job_type: Optional[str] = None, **_: Any) -> pd.DataFrame:
        return tabular.jobs_to_frame(await self.client.list_jobs(connection_id, job_type))

    async def fetch_frame(self, resource: str, **filters: Any) -> pd.DataFrame:
        """List `resource` and return it as a DataFrame."""
        fetcher = self._fetchers().get(resource)
        if fetcher is None:
            raise ValueError(f"Unsupported resource: {resource}")
        return await fetcher(**filters)

    async def export(
        self,
        resource: str = "workspaces",
        fmt: Optional[str] = None,
        output_dir: Optional[Path] = None,
        **filters: Any,
    ) -> Dict[str, Any]:
        """Export a resource listing to a file. Returns export statistics."""
        fmt = fmt or self.settings.export.default_format
        if fmt not in FORMAT_EXTENSIONS:
            raise ValueError(f"Unsupported export format: {fmt}")
        if resource not in self._fetchers():
            raise ValueError(f"Unsupported resource: {resource}")

        output_dir = Path(output_dir) if output_dir is not None else Path(self.settings.export.data_path)
        if output_dir.exists() and not output_dir.is_dir():
            raise ValueError(f"Expected a directory but got a file: {output_dir}")

        batch_id = str(uuid4())
        with bind_context(logger, batch_id=batch_id, resource=resource) as log:
            log.info("export_started", extra={"format": fmt})

            try:
                frame = await self.fetch_frame(resource, **filters)
            except Exception as e:
                log.error("export_fetch_error", extra={"error": str(e)})
                raise

            output_dir.mkdir(parents=True, exist_ok=True)
            path = output_dir / f"{resource}-{batch_id}.{FORMAT_EXTENSIONS[fmt]}"
            self._write(frame, path, fmt)

            stats = {
                "batch_id": batch_id,
                "resource": resource,
                "format": fmt,
                "row_count": int(len(frame)),
                "columns": [str(c) for c in frame.columns],
                "path": str(path),
            }
            self.last_export = stats
            log.info("export_completed", extra={"row_count": stats["row_count"], "path": stats["path"]})
            return stats

    @staticmethod
    def _write(frame: pd.DataFrame, path: Path, fmt: str) -> None:
        if fmt == "csv":
            frame.to_csv(path, index=False)
        elif fmt == "json":
            frame.to_json(path, orient="records", indent=2)
        else:
            frame.to_json(path, orient="records", lines=True)

"""
Airbyte API Client

Handles communication with the Airbyte REST API including:
- Bearer authentication through the client-credentials flow
- Resilient HTTP requests with retries and backoff
- Paginated listing of workspaces, sources, destinations, connections and jobs
- Sync triggering and job lookup
- Error handling and logging
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence, Type, TypeVar

import httpx
from pydantic import ValidationError
from tenacity import AsyncRetrying, RetryCallState, retry_if_exception, stop_after_attempt, wait_exponential

from ..core.config import Settings
from ..core.exceptions import (
    AirbyteAPIError,
    AirbyteClientError,
    AuthenticationError,
    ResponseFormatError,
    TokenEndpointUnavailable,
)
from ..models.airbyte import AirbyteResource, Connection, Destination, Job, Source, Workspace
from .token_manager import TokenManager

logger = logging.getLogger(__name__)

ResourceT = TypeVar("ResourceT", bound=AirbyteResource)


def _is_retryable(exc: BaseException) -> bool:
    if isinstance(exc, (httpx.TransportError, TokenEndpointUnavailable)):
        return True
    return isinstance(exc, AirbyteAPIError) and exc.retryable


def _log_retry(retry_state: RetryCallState) -> None:
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(
        "airbyte_request_retry",
        extra={"attempt": retry_state.attempt_number, "error": str(exc)},
    )


class AirbyteClient:
    """Client for the Airbyte API with resilience and token refresh."""

    def __init__(
        self,
        settings: Settings,
        http_client: Optional[httpx.AsyncClient] = None,
        token_manager: Optional[TokenManager] = None,
    ):
        self.settings = settings
        self.base_url = settings.airbyte.api_url
        self.max_retries = settings.airbyte.max_retries
        self.backoff_base = settings.airbyte.backoff_base
        self.backoff_max = settings.airbyte.backoff_max
        self.page_size = settings.airbyte.page_size

        # HTTP client with connection pooling
        self._owns_client = http_client is None
        self.client = http_client or httpx.AsyncClient(
            timeout=settings.airbyte.timeout_seconds,
            limits=httpx.Limits(max_keepalive_connections=20, max_connections=100),
        )
        self.tokens = token_manager or TokenManager(settings, self.client)

    async def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_client:
            await self.client.aclose()

    async def _request(self, method: str, endpoint: str, **kwargs: Any) -> Dict[str, Any]:
        """Make an authenticated request, retrying transient failures."""
        self.settings.airbyte.require_credentials()

        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_retries),
            wait=wait_exponential(multiplier=self.backoff_base, max=self.backoff_max),
            retry=retry_if_exception(_is_retryable),
            before_sleep=_log_retry,
            reraise=True,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    return await self._send(method, endpoint, **kwargs)
        except httpx.TransportError as e:
            logger.error("airbyte_request_error", extra={"error": str(e), "endpoint": endpoint})
            raise AirbyteClientError(
                f"Airbyte API unreachable: {e}",
                status_code=503,
                error_code="airbyte_unreachable",
                details={"endpoint": endpoint},
            ) from e
        raise AssertionError("unreachable")  # pragma: no cover

    async def _send(self, method: str, endpoint: str, **kwargs: Any) -> Dict[str, Any]:
        url = f"{self.base_url}{endpoint}"
        extra_headers = kwargs.pop("headers", None) or {}

        token = await self.tokens.get_token()
        response = await self.client.request(method, url, headers=self._headers(token, extra_headers), **kwargs)

        if response.status_code == 401:
            # Token may have been revoked or expired early; refresh once
            logger.warning("airbyte_unauthorized", extra={"endpoint": endpoint})
            self.tokens.invalidate()
            token = await self.tokens.get_token(force_refresh=True)
            response = await self.client.request(method, url, headers=self._headers(token, extra_headers), **kwargs)
            if response.status_code == 401:
                raise AuthenticationError(
                    "Airbyte rejected a freshly issued token",
                    details={"endpoint": endpoint},
                )

        if response.is_error:
            logger.error(
                "airbyte_http_error",
                extra={"status_code": response.status_code, "endpoint": endpoint, "response": response.text[:500]},
            )
            raise AirbyteAPIError(response.status_code, endpoint, response.text[:500])

        if not response.content:
            return {}
        try:
            body = response.json()
        except ValueError as e:
            raise ResponseFormatError(f"Non-JSON response from {endpoint}", details={"endpoint": endpoint}) from e
        if not isinstance(body, dict):
            raise ResponseFormatError(f"Expected a JSON object from {endpoint}", details={"endpoint": endpoint})
        return body

    @staticmethod
    def _headers(token: str, extra: Dict[str, str]) -> Dict[str, str]:
        headers = {"Authorization": f"Bearer {token}", "Accept": "application/json"}
        headers.update(extra)
        return headers

    @staticmethod
    def _collection(body: Dict[str, Any], key: str, endpoint: str) -> List[Dict[str, Any]]:
        """Extract a listing collection, accepting the public API's `data` key as fallback."""
        items = body.get(key)
        if items is None:
            items = body.get("data")
        if not isinstance(items, list):
            raise ResponseFormatError(
                f"Response from {endpoint} has no '{key}' collection",
                details={"endpoint": endpoint, "keys": sorted(body)},
            )
        return items

    async def _list_paginated(self, endpoint: str, key: str, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """Collect every page of a listing endpoint."""
        items: List[Dict[str, Any]] = []
        offset = 0
        base_params = {k: v for k, v in (params or {}).items() if v is not None}

        while True:
            page_params = {**base_params, "limit": self.page_size, "offset": offset}
            body = await self._request("GET", endpoint, params=page_params)
            page = self._collection(body, key, endpoint)
            items.extend(page)

            # Servers may cap the page below page_size; only `next` signals more data
            if not page or not body.get("next"):
                break
            offset += len(page)

        logger.info("airbyte_list_complete", extra={"endpoint": endpoint, "count": len(items)})
        return items

    @staticmethod
    def _parse(model: Type[ResourceT], items: Sequence[Dict[str, Any]], endpoint: str) -> List[ResourceT]:
        try:
            return [model.model_validate(item) for item in items]
        except ValidationError as e:
            raise ResponseFormatError(
                f"Unexpected item shape from {endpoint}",
                details={"endpoint": endpoint, "errors": e.errors(include_url=False, include_context=False)},
            ) from e

    async def list_workspaces(self) -> List[Workspace]:
        """List every workspace visible to the configured application."""
        items = await self._list_paginated("/workspaces", "workspaces")
        return self._parse(Workspace, items, "/workspaces")

    async def get_workspace(self, workspace_id: str) -> Workspace:
        endpoint = f"/workspaces/{workspace_id}"
        body = await self._request("GET", endpoint)
        return self._parse(Workspace, [body], endpoint)[0]

    async def list_sources(self, workspace_ids: Optional[List[str]] = None) -> List[Source]:
        items = await self._list_paginated("/sources", "sources", {"workspaceIds": workspace_ids})
        return self._parse(Source, items, "/sources")

    async def list_destinations(self, workspace_ids: Optional[List[str]] = None) -> List[Destination]:
        items = await self._list_paginated("/destinations", "destinations", {"workspaceIds": workspace_ids})
        return self._parse(Destination, items, "/destinations")

    async def list_connections(self, workspace_ids: Optional[List[str]] = None) -> List[Connection]:
        items = await self._list_paginated("/connections", "connections", {"workspaceIds": workspace_ids})
        return self._parse(Connection, items, "/connections")

    async def list_jobs(self, connection_id: Optional[str] = None, job_type: Optional[str] = None) -> List[Job]:
        items = await self._list_paginated("/jobs", "jobs", {"connectionId": connection_id, "jobType": job_type})
        return self._parse(Job, items, "/jobs")

    async def get_job(self, job_id: int) -> Job:
        endpoint = f"/jobs/{job_id}"
        body = await self._request("GET", endpoint)
        return self._parse(Job, [body], endpoint)[0]

    async def trigger_sync(self, connection_id: str) -> Job:
        """Start a sync job for a connection."""
        body = await self._request("POST", "/jobs", json={"connectionId": connection_id, "jobType": "sync"})
        job = self._parse(Job, [body], "/jobs")[0]
        logger.info("airbyte_sync_triggered", extra={"connection_id": connection_id, "job_id": job.job_id})
        return job

"""
Bearer token management for the Airbyte API.

Implements the OAuth2 client-credentials flow: the client ID and secret are
exchanged for a short-lived access token, which is cached and refreshed
shortly before it expires.
"""
from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Callable, Dict, Optional

import httpx
from pydantic import ValidationError

from ..core.config import Settings
from ..core.exceptions import AuthenticationError, TokenEndpointUnavailable
from ..core.logging import mask_secret
from ..models.airbyte import TokenResponse

logger = logging.getLogger(__name__)


class TokenManager:
    """Caches an Airbyte access token and refreshes it before expiry."""

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient, clock: Callable[[], float] = time.monotonic):
        self.settings = settings
        self.client = http_client
        self.clock = clock
        self.refresh_margin = settings.airbyte.token_refresh_margin_seconds
        self.default_ttl = settings.airbyte.default_token_ttl_seconds

        self._access_token: Optional[str] = None
        self._token_type: Optional[str] = None
        self._expires_at: float = 0.0
        self._lock = asyncio.Lock()

    @property
    def token_url(self) -> str:
        return f"{self.settings.airbyte.api_url}{self.settings.airbyte.token_path}"

    def _is_fresh(self) -> bool:
        return self._access_token is not None and self.clock() < self._expires_at - self.refresh_margin

    async def get_token(self, force_refresh: bool = False) -> str:
        """Return a valid access token, fetching a new one when stale or forced."""
        if not force_refresh and self._is_fresh():
            return self._access_token  # type: ignore[return-value]

        async with self._lock:
            # Another caller may have refreshed while we waited
            if not force_refresh and self._is_fresh():
                return self._access_token  # type: ignore[return-value]
            return await self._fetch_token()

    def invalidate(self) -> None:
        self._access_token = None
        self._token_type = None
        self._expires_at = 0.0

    def token_info(self) -> Dict[str, Any]:
        """Describe the cached token without exposing it."""
        if self._access_token is None:
            return {"has_token": False, "expires_in_seconds": None, "token_type": None}
        return {
            "has_token": True,
            "expires_in_seconds": max(0, round(self._expires_at - self.clock())),
            "token_type": self._token_type,
        }

    async def _fetch_token(self) -> str:
        airbyte = self.settings.airbyte
        airbyte.require_credentials()

        payload = {
            "client_id": airbyte.client_id,
            "client_secret": airbyte.client_secret.get_secret_value(),  # type: ignore[union-attr]
            "grant_type": "client_credentials",
        }

        try:
            response = await self.client.post(self.token_url, json=payload, headers={"Accept": "application/json"})
        except httpx.HTTPError as e:
            logger.error("airbyte_token_request_error", extra={"error": str(e), "url": self.token_url})
            raise TokenEndpointUnavailable(f"Token request failed: {e}", details={"url": self.token_url}) from e

        if response.status_code == 429 or response.status_code >= 500:
            logger.warning("airbyte_token_endpoint_unavailable", extra={"status_code": response.status_code})
            raise TokenEndpointUnavailable(
                f"Token endpoint returned {response.status_code}",
                details={"upstream_status": response.status_code},
            )

        if response.is_error:
            logger.error(
                "airbyte_token_rejected",
                extra={"status_code": response.status_code, "client_id": mask_secret(airbyte.client_id)},
            )
            raise AuthenticationError(
                f"Token endpoint returned {response.status_code}",
                details={"upstream_status": response.status_code, "detail": response.text[:500]},
            )

        try:
            token = TokenResponse.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            logger.error("airbyte_token_malformed", extra={"error": str(e)})
            raise AuthenticationError("Token response did not contain an access_token") from e

        ttl = token.expires_in if token.expires_in is not None else self.default_ttl
        self._access_token = token.access_token
        self._token_type = token.token_type
        self._expires_at = self.clock() + ttl

        logger.info("airbyte_token_acquired", extra={"expires_in": ttl, "token": mask_secret(token.access_token)})
        return token.access_token

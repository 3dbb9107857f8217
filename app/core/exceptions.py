"""
Custom exceptions for the Airbyte sync service.

Every error raised by the client carries an HTTP status code, a stable
error code and a details dict so the API layer can render it directly.
"""
from __future__ import annotations

from typing import Any, Dict, Optional


class AirbyteClientError(Exception):
    """Base exception for the Airbyte sync service."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        error_code: str = "internal_error",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details or {}


class ConfigurationError(AirbyteClientError):
    """Raised when required Airbyte settings are missing or invalid."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(
            message=message,
            status_code=500,
            error_code="configuration_error",
            details=details,
        )


class AuthenticationError(AirbyteClientError):
    """Raised when a bearer token cannot be obtained or is rejected."""

    def __init__(self, message: str = "Airbyte authentication failed", details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(
            message=message,
            status_code=401,
            error_code="authentication_error",
            details=details,
        )


class AirbyteAPIError(AirbyteClientError):
    """Raised when the Airbyte API answers with a non-2xx status."""

    def __init__(self, status_code: int, endpoint: str, detail: str = "") -> None:
        super().__init__(
            message=f"Airbyte API returned {status_code} for {endpoint}",
            status_code=502 if status_code >= 500 else status_code,
            error_code="airbyte_api_error",
            details={"upstream_status": status_code, "endpoint": endpoint, "detail": detail},
        )
        self.upstream_status = status_code
        self.endpoint = endpoint

    @property
    def retryable(self) -> bool:
        return self.upstream_status == 429 or self.upstream_status >= 500


class ResponseFormatError(AirbyteClientError):
    """Raised when a response body is not JSON or lacks the expected collection."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(
            message=message,
            status_code=502,
            error_code="response_format_error",
            details=details,
        )


class TokenEndpointUnavailable(AirbyteClientError):
    """Raised when the token endpoint is unreachable or answers 429/5xx."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(
            message=message,
            status_code=503,
            error_code="token_endpoint_unavailable",
            details=details,
        )

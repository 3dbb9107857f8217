"""
Pytest configuration and shared fixtures.

Seeds the environment before the app is imported and provides an in-memory
Airbyte API built on httpx.MockTransport.
"""
import json
import os
from typing import Any, Callable, Dict, List, Tuple, Union

os.environ.setdefault("ENV", "test")
os.environ.setdefault("AIRBYTE_API_URL", "https://airbyte.test/v1")
os.environ.setdefault("AIRBYTE_CLIENT_ID", "test-client-id")
os.environ.setdefault("AIRBYTE_CLIENT_SECRET", "test-client-secret")

import httpx
import pytest

from app.core.config import AirbyteSettings, ExportSettings, Settings

API_URL = "https://airbyte.test/v1"

Responder = Union[httpx.Response, Callable[[httpx.Request], httpx.Response]]


class FakeAirbyte:
    """Minimal Airbyte API double: token endpoint plus scripted routes."""

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self.token_calls = 0
        self.token_status = 200
        # Statuses returned by the next token calls before token_status applies
        self.token_failures: List[int] = []
        self.token_body: Dict[str, Any] = {"expires_in": 180, "token_type": "Bearer"}
        self.routes: Dict[Tuple[str, str], List[Responder]] = {}

    def add(self, method: str, path: str, *responses: Responder) -> None:
        self.routes[(method.upper(), path)] = list(responses)

    def api_requests(self) -> List[httpx.Request]:
        return [r for r in self.requests if not r.url.path.endswith("/oauth/token")]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        if request.method == "POST" and request.url.path == "/v1/oauth/token":
            self.token_calls += 1
            status = self.token_failures.pop(0) if self.token_failures else self.token_status
            if status != 200:
                return httpx.Response(status, json={"message": "token endpoint error"})
            body = dict(self.token_body)
            body.setdefault("access_token", f"token-{self.token_calls}")
            return httpx.Response(200, json=body)

        queue = self.routes.get((request.method, request.url.path))
        if not queue:
            return httpx.Response(404, json={"message": f"no route for {request.url.path}"})
        responder = queue.pop(0) if len(queue) > 1 else queue[0]
        if callable(responder):
            return responder(request)
        return responder


def json_body(request: httpx.Request) -> Dict[str, Any]:
    return json.loads(request.content.decode("utf-8"))


@pytest.fixture
def fake_airbyte() -> FakeAirbyte:
    return FakeAirbyte()


@pytest.fixture
def http_client(fake_airbyte: FakeAirbyte) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(fake_airbyte.handler))


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        ENV="test",
        airbyte=AirbyteSettings(
            _env_file=None,
            api_url=API_URL,
            client_id="test-client-id",
            client_secret="test-client-secret",
            max_retries=3,
            backoff_base=0,
            backoff_max=0,
            page_size=100,
        ),
        export=ExportSettings(_env_file=None, data_path=str(tmp_path / "exports")),
    )


@pytest.fixture
def workspace_items() -> List[Dict[str, Any]]:
    return [
        {"workspaceId": "ws-1", "name": "Analytics", "dataResidency": "us"},
        {"workspaceId": "ws-2", "name": "Marketing", "dataResidency": "eu"},
    ]

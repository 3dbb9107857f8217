import httpx
import pytest
from fastapi.testclient import TestClient

from app.core.config import get_settings
from app.services.airbyte_client import AirbyteClient
from app.services.export_service import ExportService
from main import app


@pytest.fixture
def api(monkeypatch, tmp_path, settings, http_client):
    monkeypatch.setenv("ENV", "test")
    monkeypatch.setenv("EXPORT_DATA_PATH", str(tmp_path / "exports"))
    get_settings.cache_clear()

    with TestClient(app) as client:
        # Swap the real HTTP client for the in-memory Airbyte double
        airbyte_client = AirbyteClient(settings, http_client=http_client)
        app.state.airbyte_client = airbyte_client
        app.state.export_service = ExportService(settings, airbyte_client)
        yield client

    get_settings.cache_clear()


def test_health(api):
    resp = api.get("/health")
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "healthy"
    assert body["version"] == "1.0.0"
    assert "timestamp" in body
    assert resp.headers["X-Request-ID"]


def test_root(api):
    resp = api.get("/")

    assert resp.status_code == 200
    assert resp.json() == {"message": "Welcome to Airbyte Sync Service", "docs": "/docs"}


def test_list_workspaces_rows(api, fake_airbyte, workspace_items):
    fake_airbyte.add("GET", "/v1/workspaces", httpx.Response(200, json={"workspaces": workspace_items}))

    resp = api.get("/api/v1/workspaces")

    assert resp.status_code == 200
    rows = resp.json()
    assert rows[0]["workspaceId"] == "ws-1"
    assert rows[1]["name"] == "Marketing"


def test_list_workspaces_table(api, fake_airbyte):
    fake_airbyte.add("GET", "/v1/workspaces", httpx.Response(200, json={"workspaces": []}))

    resp = api.get("/api/v1/workspaces", params={"format": "table"})

    assert resp.status_code == 200
    assert resp.json() == {"columns": ["workspaceId", "name"], "rows": []}


def test_upstream_not_found_is_rendered(api, fake_airbyte):
    resp = api.get("/api/v1/workspaces/unknown")

    assert resp.status_code == 404
    body = resp.json()
    assert body["error"] == "airbyte_api_error"
    assert body["details"]["upstream_status"] == 404
    assert body["request_id"] == resp.headers["X-Request-ID"]


def test_rejected_credentials_are_rendered(api, fake_airbyte):
    fake_airbyte.token_status = 401

    resp = api.get("/api/v1/workspaces")

    assert resp.status_code == 401
    assert resp.json()["error"] == "authentication_error"


def test_trigger_sync(api, fake_airbyte):
    fake_airbyte.add("POST", "/v1/jobs", httpx.Response(200, json={"jobId": 9, "status": "running", "jobType": "sync"}))

    resp = api.post("/api/v1/connections/c-1/sync")

    assert resp.status_code == 200
    assert resp.json() == {"job_id": 9, "status": "running", "connection_id": "c-1"}


def test_get_job(api, fake_airbyte):
    fake_airbyte.add("GET", "/v1/jobs/9", httpx.Response(200, json={"jobId": 9, "status": "succeeded", "rowsSynced": 120}))

    resp = api.get("/api/v1/jobs/9")

    assert resp.status_code == 200
    assert resp.json()["rowsSynced"] == 120


def test_export_trigger_and_status(api, fake_airbyte, workspace_items, settings):
    fake_airbyte.add("GET", "/v1/workspaces", httpx.Response(200, json={"workspaces": workspace_items}))

    resp = api.post("/api/v1/export/trigger", json={"resource": "workspaces", "format": "json"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "completed"
    assert body["stats"]["row_count"] == 2
    assert body["stats"]["path"].endswith(".json")

    status = api.get("/api/v1/status").json()
    assert status["credentials_configured"] is True
    assert status["token"]["has_token"] is True
    assert status["last_export"]["batch_id"] == body["batch_id"]


def test_export_trigger_rejects_unknown_resource(api):
    resp = api.post("/api/v1/export/trigger", json={"resource": "secrets"})
    assert resp.status_code == 422


def test_list_connections_filters_by_workspace(api, fake_airbyte):
    fake_airbyte.add(
        "GET",
        "/v1/connections",
        httpx.Response(200, json={"connections": [{"connectionId": "c-1", "name": "PG to BQ", "workspaceId": "ws-1"}]}),
    )

    resp = api.get("/api/v1/connections", params=[("workspace_id", "ws-1"), ("workspace_id", "ws-2")])

    assert resp.status_code == 200
    assert resp.json()[0]["connectionId"] == "c-1"
    request = fake_airbyte.api_requests()[0]
    assert request.url.params.get_list("workspaceIds") == ["ws-1", "ws-2"]


def test_workspace_table_keeps_integer_columns(api, fake_airbyte):
    fake_airbyte.add(
        "GET",
        "/v1/workspaces",
        httpx.Response(
            200,
            json={"workspaces": [{"workspaceId": "ws-1", "name": "A", "memberCount": 3}, {"workspaceId": "ws-2", "name": "B"}]},
        ),
    )

    resp = api.get("/api/v1/workspaces", params={"format": "table"})

    assert resp.status_code == 200
    rows = resp.json()["rows"]
    assert rows[0][-1] == 3
    assert isinstance(rows[0][-1], int)
    assert rows[1][-1] is None


def test_token_endpoint_outage_is_rendered_as_unavailable(api, fake_airbyte):
    fake_airbyte.token_status = 503

    resp = api.get("/api/v1/workspaces")

    assert resp.status_code == 503
    assert resp.json()["error"] == "token_endpoint_unavailable"

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.core.settings import CorsPolicy, Settings, settings
from app.main import app, bootstrap, cors_options

from tests.conftest import auth_header


def test_root(client):
    body = client.get("/").json()

    assert body["service"] == settings.APP_NAME
    assert body["status"] == "running"


def test_health(client):
    assert client.get("/health").json()["status"] == "healthy"


def test_database_health(client, mock_db):
    body = client.get("/health/db").json()

    assert body["connected"] is True
    assert body["database"] == "mock"


def test_database_health_failure(client, mock_db, monkeypatch):
    def broken():
        raise RuntimeError("connection refused")

    monkeypatch.setattr(mock_db, "collections", broken)

    response = client.get("/health/db")

    assert response.status_code == 503


def test_unknown_route_uses_error_envelope(client):
    response = client.get("/api/nowhere")

    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "Route not found", "code": "not_found"}


@pytest.mark.parametrize("environment,stack_expected", [("test", True), ("production", False)])
def test_unhandled_exception_is_internal_error(mock_db, monkeypatch, environment, stack_expected):
    def broken(collection_name):
        raise RuntimeError("boom")

    monkeypatch.setattr(mock_db, "collection", broken)
    monkeypatch.setattr(settings, "ENVIRONMENT", environment)

    with TestClient(app, raise_server_exceptions=False) as test_client:
        response = test_client.post("/api/auth/login", json={"email": "a@example.com", "password": "x"})

    assert response.status_code == 500
    body = response.json()
    assert body["success"] is False
    assert body["code"] == "internal_error"
    assert ("stack" in body) is stack_expected


def test_bootstrap_is_idempotent(monkeypatch):
    calls = []
    monkeypatch.setattr("app.main.initialize_firestore", lambda: calls.append(1))
    fresh = FastAPI()

    bootstrap(fresh)
    bootstrap(fresh)

    assert calls == [1]
    assert fresh.state.initialized is True


def test_cors_allow_all_disables_credentials():
    options = cors_options(Settings(CORS_POLICY=CorsPolicy.ALLOW_ALL))

    assert options["allow_origins"] == ["*"]
    assert options["allow_credentials"] is False


def test_cors_allow_listed_uses_configured_origins():
    options = cors_options(Settings(
        CORS_POLICY=CorsPolicy.ALLOW_LISTED,
        CORS_ORIGINS="https://pakair.example, http://localhost:5173",
    ))

    assert options["allow_origins"] == ["https://pakair.example", "http://localhost:5173"]
    assert options["allow_credentials"] is True


def test_cors_dev_permissive_reflects_any_origin():
    options = cors_options(Settings(CORS_POLICY=CorsPolicy.DEV_PERMISSIVE))

    assert options["allow_origin_regex"] == ".*"
    assert options["allow_credentials"] is True


def test_preflight_from_listed_origin(client):
    response = client.options(
        "/api/reports",
        headers={"Origin": "http://localhost:5173", "Access-Control-Request-Method": "POST"},
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "http://localhost:5173"


def test_feature_status_without_token(client):
    body = client.get("/api/features/status").json()

    assert set(body["features"]) == {"claudeHaiku", "aiFeatures"}
    assert body["viewer_role"] is None


def test_feature_status_ignores_bad_token(client):
    response = client.get("/api/features/status", headers=auth_header("garbage"))

    assert response.status_code == 200
    assert response.json()["viewer_role"] is None


@pytest.mark.parametrize("fixture_name,role", [("citizen", "citizen"), ("official", "official")])
def test_feature_status_reports_viewer_role(client, request, fixture_name, role):
    _, token = request.getfixturevalue(fixture_name)

    body = client.get("/api/features/status", headers=auth_header(token)).json()

    assert body["viewer_role"] == role


def test_citizen_cannot_review_or_delete(client, citizen, submit_report):
    _, token = citizen
    report_id = submit_report(token).json()["data"]["id"]

    for method, path in (
        ("patch", f"/api/reports/{report_id}/verify"),
        ("patch", f"/api/reports/{report_id}/reject"),
        ("delete", f"/api/reports/{report_id}"),
    ):
        response = getattr(client, method)(path, headers=auth_header(token))
        assert response.status_code == 403
        assert response.json()["message"] == "Access denied. Official role required."


def test_official_cannot_submit(client, official, submit_report, media_provider):
    _, token = official

    response = submit_report(token)

    assert response.status_code == 403
    assert response.json()["message"] == "Access denied. Citizen role required."
    assert media_provider.objects == {}

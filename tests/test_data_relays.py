from datetime import datetime, timezone

import pytest

from app.core.settings import settings

from tests.conftest import auth_header

RELAYS = [
    ("/api/model-data", "MODEL_DATA_COLLECTION", "Model data not found"),
    ("/api/recommendations", "RECOMMENDATIONS_COLLECTION", "Recommendation not found"),
]


@pytest.fixture
def seeded(mock_db):
    mock_db.collection(settings.MODEL_DATA_COLLECTION).document("lahore-2024-11-02").set({
        "city": "Lahore",
        "predicted_aqi": 312.5,
        "generated_at": datetime(2024, 11, 2, 6, 0, tzinfo=timezone.utc),
        "hourly": [280, 301, 312],
    })
    mock_db.collection(settings.RECOMMENDATIONS_COLLECTION).document("rec-1").set({
        "city": "Lahore",
        "advice": "Close schools on Monday",
        "confidence": {"value": 0.82, "model": "v3"},
    })
    return mock_db


@pytest.mark.parametrize("path,collection_setting,_", RELAYS)
def test_official_lists_documents(client, official, seeded, path, collection_setting, _):
    _, token = official

    response = client.get(path, headers=auth_header(token))

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["count"] == len(body["data"]) == 1
    assert body["data"][0]["id"]


def test_documents_pass_through_unmodified(client, official, seeded):
    _, token = official

    model = client.get("/api/model-data/lahore-2024-11-02", headers=auth_header(token)).json()["data"]
    rec = client.get("/api/recommendations/rec-1", headers=auth_header(token)).json()["data"]

    assert model == {
        "id": "lahore-2024-11-02",
        "city": "Lahore",
        "predicted_aqi": 312.5,
        "generated_at": "2024-11-02T06:00:00+00:00",
        "hourly": [280, 301, 312],
    }
    assert rec["confidence"] == {"value": 0.82, "model": "v3"}


@pytest.mark.parametrize("path,_,message", RELAYS)
def test_missing_document_is_not_found(client, official, seeded, path, _, message):
    _, token = official

    response = client.get(f"{path}/missing", headers=auth_header(token))

    assert response.status_code == 404
    assert response.json()["message"] == message


@pytest.mark.parametrize("path,_,__", RELAYS)
def test_malformed_identifier_is_rejected(client, official, path, _, __):
    _, token = official

    response = client.get(f"{path}/__reserved__", headers=auth_header(token))

    assert response.status_code == 400
    assert response.json()["code"] == "invalid_identifier"


@pytest.mark.parametrize("path,_,__", RELAYS)
def test_relays_are_official_only(client, citizen, seeded, path, _, __):
    _, token = citizen

    assert client.get(path, headers=auth_header(token)).status_code == 403
    assert client.get(path).status_code == 401


def test_empty_collection_lists_nothing(client, official):
    _, token = official

    body = client.get("/api/model-data", headers=auth_header(token)).json()

    assert body == {"success": True, "count": 0, "data": []}

from datetime import datetime, timezone

import pytest
from firebase_admin import firestore
from google.api_core import exceptions as google_exceptions

from app.config.mock_firestore import MockFirestore


@pytest.fixture
def stations():
    db = MockFirestore()
    readings = {
        "lhr": {"city": "Lahore", "aqi": 310, "tags": ["smog"]},
        "khi": {"city": "Karachi", "aqi": 140, "tags": []},
        "isb": {"city": "Islamabad", "aqi": 95, "tags": ["clear"]},
        "mux": {"city": "Multan", "aqi": 260},
    }
    for doc_id, data in readings.items():
        db.collection("stations").document(doc_id).set(data)
    return db


def test_where_order_offset_limit(stations):
    query = (
        stations.collection("stations")
        .where("aqi", ">", 100)
        .order_by("aqi", direction=firestore.Query.DESCENDING)
        .offset(1)
        .limit(2)
    )

    assert [doc.id for doc in query.stream()] == ["mux", "khi"]


def test_count_ignores_paging(stations):
    query = stations.collection("stations").where("aqi", ">=", 140).limit(1)

    assert query.count().get()[0][0].value == 3


def test_array_contains_and_in(stations):
    collection = stations.collection("stations")

    assert [d.id for d in collection.where("tags", "array_contains", "smog").stream()] == ["lhr"]
    assert sorted(d.id for d in collection.where("city", "in", ["Lahore", "Multan"]).stream()) == ["lhr", "mux"]


def test_transforms_on_update(stations):
    ref = stations.collection("stations").document("lhr")

    ref.update({
        "tags": firestore.ArrayUnion(["smog", "fog"]),
        "views": firestore.Increment(2),
        "city": firestore.DELETE_FIELD,
        "meta.checked_at": firestore.SERVER_TIMESTAMP,
    })

    data = ref.get().to_dict()
    assert data["tags"] == ["smog", "fog"]
    assert data["views"] == 2
    assert "city" not in data
    assert isinstance(data["meta"]["checked_at"], datetime)


def test_update_missing_document_raises(stations):
    with pytest.raises(google_exceptions.NotFound):
        stations.collection("stations").document("nope").update({"aqi": 1})


def test_create_existing_document_conflicts(stations):
    with pytest.raises(google_exceptions.Conflict):
        stations.collection("stations").document("lhr").create({"aqi": 1})


def test_auto_ids_are_unique():
    collection = MockFirestore().collection("reports")
    ids = {collection.document().id for _ in range(50)}

    assert len(ids) == 50
    assert all(len(doc_id) == 20 for doc_id in ids)


def test_persists_to_json_file(tmp_path):
    path = str(tmp_path / "mock_db.json")
    stamp = datetime(2024, 11, 2, 6, 0, tzinfo=timezone.utc)
    MockFirestore(path).collection("reports").document("r1").set({"title": "Smog", "created_at": stamp})

    reloaded = MockFirestore(path).collection("reports").document("r1").get().to_dict()

    assert reloaded == {"title": "Smog", "created_at": stamp}

import json

import pytest

from app.core.settings import settings
from app.models.user import Role
from app.services.provisioning import ProvisioningRefused, provision_default_official
from app.services.user_service import get_user_service
from app.utils.security import verify_password
from scripts.seed_db import load_seed, relay_collections, write_to_db

OFFICIAL_EMAIL = "dev.official@example.com"


@pytest.fixture
def official_credentials(monkeypatch):
    monkeypatch.setattr(settings, "DEFAULT_OFFICIAL_EMAIL", OFFICIAL_EMAIL)
    monkeypatch.setattr(settings, "DEFAULT_OFFICIAL_PASSWORD", "official-pass")


def stored_official():
    return get_user_service().get_user_by_email(OFFICIAL_EMAIL, include_password=True)


def test_refused_in_production(official_credentials, monkeypatch):
    monkeypatch.setattr(settings, "ENVIRONMENT", "production")

    with pytest.raises(ProvisioningRefused):
        provision_default_official(apply=True)

    assert stored_official() is None


def test_refused_without_credentials(monkeypatch):
    monkeypatch.setattr(settings, "DEFAULT_OFFICIAL_EMAIL", None)
    monkeypatch.setattr(settings, "DEFAULT_OFFICIAL_PASSWORD", None)

    with pytest.raises(ProvisioningRefused):
        provision_default_official(apply=True)


def test_dry_run_writes_nothing(official_credentials):
    result = provision_default_official()

    assert result == {"action": "create", "email": OFFICIAL_EMAIL, "changes": [], "applied": False}
    assert stored_official() is None


def test_creates_official_account(official_credentials):
    result = provision_default_official(apply=True)

    user = stored_official()
    assert result["action"] == "create"
    assert user["role"] == Role.OFFICIAL.value
    assert user["is_verified"] is True
    assert verify_password("official-pass", user["password_hash"])


def test_promotes_existing_citizen_without_touching_password(official_credentials, make_user):
    make_user(Role.CITIZEN, email=OFFICIAL_EMAIL, password="their-own-pass", is_active=False)

    result = provision_default_official(apply=True)

    user = stored_official()
    assert result["action"] == "update"
    assert result["changes"] == ["is_active", "role"]
    assert user["role"] == Role.OFFICIAL.value
    assert user["is_active"] is True
    assert verify_password("their-own-pass", user["password_hash"])


def test_reset_password_replaces_password(official_credentials, make_user):
    make_user(Role.OFFICIAL, email=OFFICIAL_EMAIL, password="their-own-pass")

    result = provision_default_official(apply=True, reset_password=True)

    assert result["changes"] == ["password"]
    assert verify_password("official-pass", stored_official()["password_hash"])


def test_second_run_is_noop(official_credentials):
    provision_default_official(apply=True)

    assert provision_default_official(apply=True, reset_password=True)["action"] == "noop"


def test_seed_writes_only_relay_collections(tmp_path, mock_db):
    seed_file = tmp_path / "db_seed.json"
    seed_file.write_text(json.dumps({
        settings.MODEL_DATA_COLLECTION: {"m1": {"aqi": 180}},
        settings.RECOMMENDATIONS_COLLECTION: {"r1": {"advice": "Wear a mask"}},
        "users": {"u1": {"email": "intruder@example.com"}},
    }))
    seed = load_seed(str(seed_file))

    assert write_to_db(mock_db, seed, apply=False, allowed=relay_collections()) == 2
    assert mock_db.collection(settings.MODEL_DATA_COLLECTION).document("m1").get().exists is False

    assert write_to_db(mock_db, seed, apply=True, allowed=relay_collections()) == 2
    assert mock_db.collection(settings.MODEL_DATA_COLLECTION).document("m1").get().to_dict() == {"aqi": 180}
    assert mock_db.collection("users").document("u1").get().exists is False

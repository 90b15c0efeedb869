import io
import os

# Configure before any app module reads settings
os.environ["ENVIRONMENT"] = "test"
os.environ["USE_MOCK_DB"] = "true"
os.environ["MOCK_DB_PATH"] = ""
os.environ["MEDIA_PROVIDER"] = "mock"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["CORS_POLICY"] = "allow_listed"
os.environ["CORS_ORIGINS"] = "http://localhost:5173"

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from app.config import firebase
from app.config.mock_firestore import MockFirestore
from app.main import app
from app.models.user import Role, UserCreate
from app.services.media import registry as media_registry
from app.services.media.mock_provider import MockMediaProvider
from app.services.user_service import get_user_service
from app.utils.security import create_access_token


@pytest.fixture(autouse=True)
def mock_db(monkeypatch):
    db = MockFirestore()
    monkeypatch.setattr(firebase, "db", db)
    return db


@pytest.fixture(autouse=True)
def media_provider(monkeypatch):
    provider = MockMediaProvider(base_url="https://media.test")
    monkeypatch.setattr(media_registry, "_provider_instance", provider)
    return provider


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_user():
    counter = {"n": 0}

    def _factory(role: Role = Role.CITIZEN, password: str = "secret123", **overrides):
        counter["n"] += 1
        profile = UserCreate(
            first_name=overrides.pop("first_name", "Ayesha"),
            last_name=overrides.pop("last_name", "Khan"),
            email=overrides.pop("email", f"user{counter['n']}@example.com"),
            phone=overrides.pop("phone", "03001234567"),
            password=password,
            role=role,
            agree_to_terms=True,
        )
        user = get_user_service().create_user(profile)
        if overrides:
            user = get_user_service().update_user(user["id"], overrides)
        token = create_access_token(user["id"], user["role"])
        return user, token

    return _factory


@pytest.fixture
def citizen(make_user):
    return make_user(Role.CITIZEN)


@pytest.fixture
def official(make_user):
    return make_user(Role.OFFICIAL, first_name="Imran", last_name="Ali")


def auth_header(token):
    return {"Authorization": f"Bearer {token}"}


def image_bytes(width=64, height=48, image_format="PNG"):
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), color=(120, 130, 140)).save(buffer, format=image_format)
    return buffer.getvalue()


def report_form(**overrides):
    form = {
        "title": "Thick smog on the ring road",
        "description": "Visibility under 100m, strong smell of burning crop residue.",
        "useCurrentLocation": "true",
        "address": "Ring Road, Lahore",
        "latitude": "31.5204",
        "longitude": "74.3587",
        "city": "Lahore",
        "province": "Punjab",
    }
    form.update(overrides)
    return {k: v for k, v in form.items() if v is not None}


@pytest.fixture
def submit_report(client):
    def _submit(token, files=None, **form_overrides):
        if files is None:
            files = {"media": ("smog.png", image_bytes(), "image/png")}
        return client.post(
            "/api/reports",
            data=report_form(**form_overrides),
            files=files,
            headers=auth_header(token),
        )

    return _submit

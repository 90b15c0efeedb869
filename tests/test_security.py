import jwt
import pytest

from app.core import errors
from app.core.settings import settings
from app.utils.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)


def test_hash_is_salted_and_verifiable():
    first = hash_password("secret123")
    second = hash_password("secret123")

    assert first != "secret123"
    assert first != second
    assert verify_password("secret123", first)
    assert not verify_password("secret124", first)


def test_verify_rejects_missing_or_malformed_hash():
    assert not verify_password("secret123", None)
    assert not verify_password("secret123", "not-a-bcrypt-hash")
    assert not verify_password("", hash_password("secret123"))


def test_token_round_trip_carries_user_id():
    token = create_access_token("user-1", "citizen")
    assert decode_access_token(token) == "user-1"


def test_expired_token():
    token = create_access_token("user-1", "citizen", expires_minutes=-5)
    with pytest.raises(errors.TokenExpired):
        decode_access_token(token)


def test_token_signed_with_another_secret_is_invalid():
    token = jwt.encode({"sub": "user-1"}, "some-other-secret", algorithm=settings.JWT_ALGORITHM)
    with pytest.raises(errors.TokenInvalid):
        decode_access_token(token)


def test_token_without_subject_is_invalid():
    token = jwt.encode({"role": "citizen"}, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
    with pytest.raises(errors.TokenInvalid):
        decode_access_token(token)


def test_garbage_token_is_invalid():
    with pytest.raises(errors.TokenInvalid):
        decode_access_token("abc.def.ghi")

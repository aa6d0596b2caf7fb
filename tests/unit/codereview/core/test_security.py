from datetime import datetime, timezone

import jwt
import pytest

from codereview.core import (
    UnauthorizedError,
    as_utc,
    create_access_token,
    decode_token,
    generate_token,
    get_config,
    hash_password,
    hash_token,
    verify_password,
)


def test_password_hashing():
    hashed = hash_password("password123")

    assert hashed != "password123"
    assert hashed.startswith("$argon2")
    assert verify_password("password123", hashed)
    assert not verify_password("password124", hashed)


def test_token_round_trip():
    token = create_access_token("user-1", "reviewer")

    data = decode_token(token)

    assert data.sub == "user-1"
    assert data.role == "reviewer"
    assert data.exp - data.iat == get_config().AUTH.JWT_EXPIRES_IN


def test_expired_token():
    token = create_access_token("user-1", "student", expires_in=-5)
    with pytest.raises(UnauthorizedError, match="expired"):
        decode_token(token)


def test_token_signed_with_other_secret():
    token = jwt.encode({"sub": "user-1", "role": "admin", "iat": 0, "exp": 2**31}, "other-secret", algorithm="HS256")
    with pytest.raises(UnauthorizedError, match="Invalid token"):
        decode_token(token)


def test_token_missing_claims():
    auth = get_config().AUTH
    token = jwt.encode({"sub": "user-1", "exp": 2**31}, auth.JWT_SECRET.get_secret_value(), algorithm="HS256")
    with pytest.raises(UnauthorizedError):
        decode_token(token)


def test_random_tokens():
    first, second = generate_token(), generate_token()

    assert first != second
    assert len(first) == 64
    assert hash_token(first) == hash_token(first)
    assert hash_token(first) != first


def test_as_utc():
    naive = datetime(2024, 1, 1, 12, 0)
    assert as_utc(naive).tzinfo is timezone.utc
    aware = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
    assert as_utc(aware) is aware
    assert as_utc(None) is None

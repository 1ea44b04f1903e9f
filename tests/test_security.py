import pytest
from jose import jwt

from mida_app.core.exceptions import TokenExpired, TokenInvalid
from mida_app.core.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    issue_token,
    verify_password,
)


def test_password_hash_is_salted_and_verifiable():
    first = hash_password("clave123")
    second = hash_password("clave123")

    assert first != second
    assert "clave123" not in first
    assert verify_password("clave123", first)
    assert not verify_password("otra-clave", first)


def test_verify_password_rejects_corrupt_hash():
    assert not verify_password("clave123", "no-es-un-hash")
    assert not verify_password("", "no-es-un-hash")


def test_hash_password_rejects_empty():
    with pytest.raises(ValueError):
        hash_password("   ")


def test_token_round_trip_keeps_claims():
    token = issue_token(7, "maria", "admin")

    claims = decode_access_token(token)

    assert claims.user_id == 7
    assert claims.username == "maria"
    assert claims.role == "admin"


def test_expired_token_is_rejected():
    token = create_access_token({"sub": "1", "username": "maria", "role": "user"}, expires_minutes=-1)

    with pytest.raises(TokenExpired):
        decode_access_token(token)


def test_token_signed_with_other_key_is_invalid():
    token = jwt.encode({"sub": "1"}, "otra-clave", algorithm="HS256")

    with pytest.raises(TokenInvalid):
        decode_access_token(token)


def test_garbage_token_is_invalid():
    with pytest.raises(TokenInvalid):
        decode_access_token("esto.no.es-un-jwt")


def test_token_without_numeric_subject_is_invalid():
    token = create_access_token({"sub": "maria"})

    with pytest.raises(TokenInvalid):
        decode_access_token(token)

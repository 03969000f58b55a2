"""Session token issue/verify and reset token helpers."""

from datetime import timedelta

import pytest
from jose import jwt

from rbac_portal.app.core.tokens import (
    ExpiredToken,
    InvalidSignature,
    MalformedToken,
    TokenService,
    generate_reset_token,
    hash_token,
)


@pytest.fixture
def tokens(settings, clock):
    return TokenService(settings, clock=clock)


def test_round_trip_carries_subject_and_expiry(tokens, clock, settings):
    claims = tokens.verify(tokens.issue("user-1", email="a@example.com"))
    assert claims.sub == "user-1"
    assert claims.email == "a@example.com"
    assert claims.iat == int(clock.start.timestamp())
    assert claims.exp - claims.iat == settings.access_token_expire_minutes * 60


def test_expiry_boundary(tokens, clock, settings):
    token = tokens.issue("user-1")
    lifetime = timedelta(minutes=settings.access_token_expire_minutes)

    clock.now = clock.start + lifetime - timedelta(seconds=1)
    assert tokens.verify(token).sub == "user-1"

    clock.now = clock.start + lifetime + timedelta(seconds=1)
    with pytest.raises(ExpiredToken):
        tokens.verify(token)


def test_foreign_secret_is_rejected(tokens, clock, settings):
    forged = jwt.encode(
        {"sub": "user-1", "iat": int(clock.start.timestamp()), "exp": int(clock.start.timestamp()) + 60},
        "some-other-secret",
        algorithm=settings.jwt_algorithm,
    )
    with pytest.raises(InvalidSignature):
        tokens.verify(forged)


def test_tampered_payload_is_rejected(tokens):
    header, payload, signature = tokens.issue("user-1").split(".")
    other_payload = tokens.issue("user-2").split(".")[1]
    with pytest.raises(InvalidSignature):
        tokens.verify(".".join([header, other_payload, signature]))


@pytest.mark.parametrize("garbage", ["", "not-a-token", "a.b.c"])
def test_garbage_is_malformed(tokens, garbage):
    with pytest.raises(MalformedToken):
        tokens.verify(garbage)


def test_missing_subject_is_malformed(tokens, clock, settings):
    token = jwt.encode(
        {"iat": int(clock.start.timestamp()), "exp": int(clock.start.timestamp()) + 60},
        settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
    )
    with pytest.raises(MalformedToken):
        tokens.verify(token)


def test_reset_tokens_are_random_and_hashed():
    first, second = generate_reset_token(), generate_reset_token()
    assert first != second
    assert len(first) >= 43
    assert hash_token(first) == hash_token(first)
    assert hash_token(first) != first
    assert len(hash_token(first)) == 64

import asyncio
import json
import time

import pytest
import requests
from jose import jwt

from src.core.security import (
    IdentityProviderError,
    IdentityVerificationError,
    JWTIdentityVerifier,
)

SECRET = "unit-test-secret"


def make_token(claims=None, secret=SECRET, expires_in=3600):
    now = int(time.time())
    payload = {"sub": "alice", "email": "alice@example.com", "iat": now, "exp": now + expires_in}
    payload.update(claims or {})
    payload = {name: value for name, value in payload.items() if value is not None}
    return jwt.encode(payload, secret, algorithm="HS256")


@pytest.fixture
def verifier():
    return JWTIdentityVerifier(key=SECRET, algorithms=["HS256"])


def test_requires_key_or_jwks_url():
    with pytest.raises(ValueError):
        JWTIdentityVerifier()


def test_valid_token(verifier):
    identity = verifier.verify_sync(make_token())

    assert identity.subject_id == "alice"
    assert identity.email == "alice@example.com"


def test_async_verify(verifier):
    identity = asyncio.run(verifier.verify(make_token()))
    assert identity.subject_id == "alice"


def test_user_id_claim_is_accepted(verifier):
    token = make_token({"sub": None, "user_id": "bob"})
    assert verifier.verify_sync(token).subject_id == "bob"


def test_expired_token(verifier):
    with pytest.raises(IdentityVerificationError) as exc:
        verifier.verify_sync(make_token(expires_in=-60))

    assert exc.value.expired


def test_wrong_signature(verifier):
    with pytest.raises(IdentityVerificationError) as exc:
        verifier.verify_sync(make_token(secret="someone-else"))

    assert not exc.value.expired


def test_garbage_token(verifier):
    with pytest.raises(IdentityVerificationError):
        verifier.verify_sync("not-a-jwt")


def test_audience_and_issuer_are_checked():
    verifier = JWTIdentityVerifier(
        key=SECRET,
        algorithms=["HS256"],
        audience="poetry-camera",
        issuer="https://issuer.example.com",
    )
    good = make_token({"aud": "poetry-camera", "iss": "https://issuer.example.com"})
    wrong_audience = make_token({"aud": "other-app", "iss": "https://issuer.example.com"})

    assert verifier.verify_sync(good).subject_id == "alice"
    with pytest.raises(IdentityVerificationError):
        verifier.verify_sync(wrong_audience)


def test_json_key_is_parsed():
    jwk = {"kty": "oct", "k": "dW5pdC10ZXN0LXNlY3JldA"}
    verifier = JWTIdentityVerifier(key=json.dumps(jwk), algorithms=["HS256"])

    assert verifier.static_key == jwk
    assert verifier.verify_sync(make_token()).subject_id == "alice"


def test_jwks_keys_are_cached(mocker):
    jwk = {"keys": [{"kty": "oct", "k": "dW5pdC10ZXN0LXNlY3JldA"}]}
    response = mocker.MagicMock()
    response.json.return_value = jwk
    get = mocker.patch("src.core.security.requests.get", return_value=response)
    verifier = JWTIdentityVerifier(
        jwks_url="https://issuer.example.com/jwks", algorithms=["HS256"], keys_ttl=3600
    )

    verifier.verify_sync(make_token())
    verifier.verify_sync(make_token())

    get.assert_called_once()


def test_jwks_fetch_failure_is_provider_error(mocker):
    mocker.patch(
        "src.core.security.requests.get",
        side_effect=requests.ConnectionError("unreachable"),
    )
    verifier = JWTIdentityVerifier(jwks_url="https://issuer.example.com/jwks", algorithms=["HS256"])

    with pytest.raises(IdentityProviderError):
        verifier.verify_sync(make_token())

"""Identity verification for bearer ID tokens."""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from threading import RLock
from typing import Any, Dict, List, Optional, Union
import json
import logging
import time

import requests
from jose import ExpiredSignatureError, JWTError, jwt
from starlette.concurrency import run_in_threadpool

from src.app.config import settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VerifiedIdentity:
    """Claims the identity provider vouches for."""
    subject_id: str
    email: Optional[str] = None


class IdentityVerificationError(Exception):
    """The token could not be verified."""

    def __init__(self, message: str, expired: bool = False):
        super().__init__(message)
        self.expired = expired


class IdentityProviderError(IdentityVerificationError):
    """The identity provider itself could not be reached."""


class IdentityVerifier(ABC):
    """Turns a bearer credential into a verified identity."""

    @abstractmethod
    async def verify(self, token: str) -> VerifiedIdentity:
        """Return the verified identity or raise IdentityVerificationError."""
        pass


class JWTIdentityVerifier(IdentityVerifier):
    """
    Verifies provider-issued ID tokens with python-jose.

    Signing keys come either from a static key (secret, PEM, or a JSON JWK /
    JWK set) or from a JWKS / x509 certificate URL that is fetched and kept
    for ``keys_ttl`` seconds.
    """

    def __init__(
        self,
        key: Optional[str] = None,
        jwks_url: Optional[str] = None,
        algorithms: Optional[List[str]] = None,
        audience: Optional[str] = None,
        issuer: Optional[str] = None,
        keys_ttl: int = 3600,
        timeout: float = 10.0,
    ):
        if not key and not jwks_url:
            raise ValueError("Either a signing key or a JWKS URL is required")
        self.static_key = self._parse_key(key) if key else None
        self.jwks_url = jwks_url
        self.algorithms = algorithms or ["RS256"]
        self.audience = audience
        self.issuer = issuer
        self.keys_ttl = keys_ttl
        self.timeout = timeout
        self._keys: Optional[Dict[str, Any]] = None
        self._keys_fetched_at = 0.0
        self._lock = RLock()

    @staticmethod
    def _parse_key(key: str) -> Union[str, Dict[str, Any]]:
        stripped = key.strip()
        if stripped.startswith("{"):
            return json.loads(stripped)
        return key

    def _fetch_keys(self) -> Dict[str, Any]:
        try:
            response = requests.get(self.jwks_url, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except (requests.RequestException, ValueError) as e:
            raise IdentityProviderError(f"Could not fetch signing keys: {e}") from e

    def _signing_keys(self) -> Union[str, Dict[str, Any]]:
        if self.static_key is not None:
            return self.static_key

        with self._lock:
            expired = time.monotonic() - self._keys_fetched_at > self.keys_ttl
            if self._keys is None or expired:
                self._keys = self._fetch_keys()
                self._keys_fetched_at = time.monotonic()
                logger.info(f"Refreshed identity signing keys from {self.jwks_url}")
            return self._keys

    def verify_sync(self, token: str) -> VerifiedIdentity:
        """Decode and validate ``token``; blocking variant of ``verify``."""
        keys = self._signing_keys()
        try:
            claims = jwt.decode(
                token,
                keys,
                algorithms=self.algorithms,
                audience=self.audience,
                issuer=self.issuer,
                options={"verify_aud": self.audience is not None},
            )
        except ExpiredSignatureError as e:
            raise IdentityVerificationError("Token expired", expired=True) from e
        except JWTError as e:
            raise IdentityVerificationError(f"Invalid token: {e}") from e

        subject_id = claims.get("sub") or claims.get("user_id")
        if not subject_id:
            raise IdentityVerificationError("Token has no subject")

        return VerifiedIdentity(subject_id=subject_id, email=claims.get("email"))

    async def verify(self, token: str) -> VerifiedIdentity:
        return await run_in_threadpool(self.verify_sync, token)


def build_identity_verifier() -> IdentityVerifier:
    """Create the verifier described by the application settings."""
    return JWTIdentityVerifier(
        key=settings.IDENTITY_JWT_KEY,
        jwks_url=settings.IDENTITY_JWKS_URL,
        algorithms=settings.identity_algorithms,
        audience=settings.IDENTITY_AUDIENCE,
        issuer=settings.IDENTITY_ISSUER,
        keys_ttl=settings.IDENTITY_KEYS_TTL_SECONDS,
        timeout=settings.IDENTITY_TIMEOUT_SECONDS,
    )

"""
Core package initializer.

This package provides the request gateway's building blocks: identity
token verification, the allowlist cache and its subscription, the
authenticator and the rate limiter.
"""

from .allowlist import (
    AllowlistCache,
    AllowlistNotifier,
    AllowlistSubscription,
    RedisAllowlistSource,
)

from .auth import (
    Authenticator,
    AuthContext,
    ParamAuth,
    TokenAuth,
)

from .security import (
    IdentityVerifier,
    JWTIdentityVerifier,
    VerifiedIdentity,
    build_identity_verifier,
)

__all__ = [
    # Allowlist
    "AllowlistCache",
    "AllowlistNotifier",
    "AllowlistSubscription",
    "RedisAllowlistSource",
    # Authentication
    "Authenticator",
    "AuthContext",
    "ParamAuth",
    "TokenAuth",
    # Identity
    "IdentityVerifier",
    "JWTIdentityVerifier",
    "VerifiedIdentity",
    "build_identity_verifier",
]

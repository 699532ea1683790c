"""Request authentication: trust tiers and the authenticator state machine."""
from dataclasses import dataclass
from typing import ClassVar, FrozenSet, Mapping, Optional, Union
import logging

from src.app.exceptions import (
    AuthenticationError,
    AuthorizationError,
    TokenExpiredError,
    UpstreamError,
)
from src.core.allowlist import AllowlistCache
from src.core.security import (
    IdentityProviderError,
    IdentityVerificationError,
    IdentityVerifier,
    VerifiedIdentity,
)
from src.models.enums import AuthTier

logger = logging.getLogger(__name__)

# Reachable without any credential
PUBLIC_PATHS: FrozenSet[str] = frozenset({
    "/",
    "/health",
    "/favicon.ico",
    "/public/getPoem",
    "/public/getWebDisplayPoem",
})

# Accept a bearer token or, failing that, a bare subject id parameter
DUAL_AUTH_PATHS: FrozenSet[str] = frozenset({"/generate-poem"})

SUBJECT_PARAM = "userid"
BEARER_PREFIX = "Bearer "


@dataclass(frozen=True)
class TokenAuth:
    """Subject verified by the identity provider."""
    subject_id: str
    email: Optional[str] = None

    tier: ClassVar[AuthTier] = AuthTier.token
    is_verified: ClassVar[bool] = True


@dataclass(frozen=True)
class ParamAuth:
    """Subject asserted by the client and found on the allowlist."""
    subject_id: str

    tier: ClassVar[AuthTier] = AuthTier.param
    is_verified: ClassVar[bool] = False


AuthContext = Union[TokenAuth, ParamAuth]


def parse_bearer(authorization: Optional[str]) -> Optional[str]:
    """Extract the token from an ``Authorization: Bearer <token>`` header."""
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        return None
    token = authorization[len(BEARER_PREFIX):].strip()
    return token or None


class Authenticator:
    """
    Decides per request whether it proceeds and under which trust tier.

    Public paths skip every check. Dual-auth paths try the token first and
    fall back to the ``userid`` parameter. All other paths require a valid
    bearer token whose subject is allowlisted.
    """

    def __init__(
        self,
        verifier: IdentityVerifier,
        allowlist: AllowlistCache,
        public_paths: FrozenSet[str] = PUBLIC_PATHS,
        dual_auth_paths: FrozenSet[str] = DUAL_AUTH_PATHS,
    ):
        self.verifier = verifier
        self.allowlist = allowlist
        self.public_paths = public_paths
        self.dual_auth_paths = dual_auth_paths

    def is_public(self, path: str) -> bool:
        return path in self.public_paths

    def is_dual_auth(self, path: str) -> bool:
        return path in self.dual_auth_paths

    async def authenticate(
        self,
        path: str,
        authorization: Optional[str],
        query_params: Mapping[str, str],
    ) -> Optional[AuthContext]:
        """
        Resolve the request's auth context.

        Returns:
            None for public paths, otherwise a TokenAuth or ParamAuth

        Raises:
            AuthenticationError: No usable credential (401)
            AuthorizationError: Subject not on the allowlist (403)
            UpstreamError: Identity provider unreachable on a token-only path
        """
        if self.is_public(path):
            return None
        if self.is_dual_auth(path):
            return await self.authenticate_dual(authorization, query_params.get(SUBJECT_PARAM))
        return await self.authenticate_token(authorization)

    def _require_allowed(self, subject_id: str) -> None:
        if not self.allowlist.is_allowed(subject_id):
            logger.info(f"Blocked access attempt from unauthorized user: {subject_id}")
            raise AuthorizationError(
                "Access denied: User not on allowlist", code="NOT_ALLOWLISTED"
            )

    async def _verify(self, token: str) -> VerifiedIdentity:
        return await self.verifier.verify(token)

    async def authenticate_token(self, authorization: Optional[str]) -> TokenAuth:
        token = parse_bearer(authorization)
        if token is None:
            raise AuthenticationError(
                "Authentication required: Missing or invalid token", code="MISSING_TOKEN"
            )

        try:
            identity = await self._verify(token)
        except IdentityProviderError as e:
            raise UpstreamError(str(e)) from e
        except IdentityVerificationError as e:
            logger.warning(f"Token verification error: {e}")
            if e.expired:
                raise TokenExpiredError() from e
            raise AuthenticationError() from e

        self._require_allowed(identity.subject_id)
        return TokenAuth(subject_id=identity.subject_id, email=identity.email)

    async def authenticate_dual(
        self,
        authorization: Optional[str],
        subject_param: Optional[str],
    ) -> AuthContext:
        token = parse_bearer(authorization)
        if token is not None:
            try:
                identity = await self._verify(token)
            except IdentityVerificationError as e:
                logger.warning(f"Token verification failed, trying {SUBJECT_PARAM} parameter: {e}")
            else:
                self._require_allowed(identity.subject_id)
                logger.info(f"Using verified subject from token: {identity.subject_id}")
                return TokenAuth(subject_id=identity.subject_id, email=identity.email)

        if subject_param:
            self._require_allowed(subject_param)
            logger.info(f"Using {SUBJECT_PARAM} parameter: {subject_param}")
            return ParamAuth(subject_id=subject_param)

        raise AuthenticationError(
            "Authentication required: Missing token or userid", code="AUTH_REQUIRED"
        )

"""Dependencies for API endpoints."""
from fastapi import Depends, Request
from sqlalchemy.orm import Session
from typing import Callable

from src.app.config import settings
from src.app.exceptions import AuthenticationError, AuthorizationError
from src.core.allowlist import AllowlistNotifier
from src.core.auth import AuthContext, TokenAuth
from src.db.base import SessionLocal, get_db
from src.repositories.allowlist_repo import AllowlistRepository
from src.repositories.poem_repo import PoemRepository
from src.services.generation import PoetryService
from src.services.navigation import SequentialNavigator
from src.services.ownership import OwnedMutationGuard
from src.services.storage.s3 import S3Service

__all__ = [
    "get_db",
    "get_auth_context",
    "get_token_auth",
    "get_current_admin",
    "get_session_factory",
    "get_poem_repo",
    "get_allowlist_repo",
    "get_navigator",
    "get_mutation_guard",
    "get_poetry_service",
    "get_storage",
    "get_allowlist_notifier",
    "get_client_ip",
]


def get_auth_context(request: Request) -> AuthContext:
    """Auth context resolved by the authentication middleware."""
    context = getattr(request.state, "auth", None)
    if context is None:
        raise AuthenticationError(
            "Authentication required: Missing or invalid token", code="MISSING_TOKEN"
        )
    return context


def get_token_auth(auth: AuthContext = Depends(get_auth_context)) -> TokenAuth:
    """Require a subject verified by the identity provider."""
    if not isinstance(auth, TokenAuth):
        raise AuthorizationError(
            "This operation requires a verified token", code="TOKEN_REQUIRED"
        )
    return auth


def get_current_admin(auth: TokenAuth = Depends(get_token_auth)) -> TokenAuth:
    """Verify the caller is the configured admin."""
    if not settings.ADMIN_SUBJECT_ID or auth.subject_id != settings.ADMIN_SUBJECT_ID:
        raise AuthorizationError("Access denied: Unauthorized", code="NOT_ADMIN")
    return auth


def get_session_factory() -> Callable[[], Session]:
    """Session factory for work that outlives the request (background tasks)."""
    return SessionLocal


def get_poem_repo(db: Session = Depends(get_db)) -> PoemRepository:
    return PoemRepository(db)


def get_allowlist_repo(db: Session = Depends(get_db)) -> AllowlistRepository:
    return AllowlistRepository(db)


def get_navigator() -> SequentialNavigator:
    return SequentialNavigator()


def get_mutation_guard(repo: PoemRepository = Depends(get_poem_repo)) -> OwnedMutationGuard:
    return OwnedMutationGuard(repo, max_attempts=settings.MUTATION_MAX_ATTEMPTS)


def get_poetry_service() -> PoetryService:
    return PoetryService()


def get_storage() -> S3Service:
    return S3Service()


def get_allowlist_notifier() -> AllowlistNotifier:
    return AllowlistNotifier(settings.REDIS_URL, settings.ALLOWLIST_CHANNEL)


def get_client_ip(request: Request) -> str:
    """Extract client IP address."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"

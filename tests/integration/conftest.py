"""
Integration test configuration
"""
import pytest
from fastapi.testclient import TestClient

from src.api.deps import get_allowlist_notifier, get_db, get_session_factory
from src.app.main import app
from src.core.allowlist import AllowlistCache
from src.core.auth import Authenticator
from src.core.security import (
    IdentityVerificationError,
    IdentityVerifier,
    VerifiedIdentity,
)
from src.models.allowlist import AllowlistEntry
from src.models.enums import EmptyAllowlistPolicy


class StubVerifier(IdentityVerifier):
    """Accepts "token-<uid>" bearer tokens; "expired" is an expired token."""

    async def verify(self, token):
        if token.startswith("token-"):
            return VerifiedIdentity(subject_id=token[len("token-"):])
        if token == "expired":
            raise IdentityVerificationError("Token expired", expired=True)
        raise IdentityVerificationError("Invalid token")


@pytest.fixture
def auth_header():
    def build(subject_id):
        return {"Authorization": f"Bearer token-{subject_id}"}
    return build


@pytest.fixture
def allowlist():
    cache = AllowlistCache(EmptyAllowlistPolicy.closed)
    cache.replace(["alice", "bob", "admin-uid", "display-uid"])
    return cache


@pytest.fixture
def notifier(mocker):
    """Stands in for the Redis change publisher."""
    return mocker.MagicMock()


@pytest.fixture
def client(db_session, session_factory, allowlist, notifier):
    """FastAPI test client with dependency overrides."""
    for subject_id in ("alice", "bob", "admin-uid"):
        db_session.add(AllowlistEntry(subject_id=subject_id))
    db_session.commit()

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    original_authenticator = app.state.authenticator
    app.state.authenticator = Authenticator(StubVerifier(), allowlist)
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_allowlist_notifier] = lambda: notifier

    # Lifespan is not entered: no Redis subscription during tests
    yield TestClient(app)

    app.dependency_overrides.clear()
    app.state.authenticator = original_authenticator

"""
Shared test configuration.

Settings are read from the environment at import time, so the variables are
set here before any ``src`` module is imported.
"""
import os

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DB_USER", "test")
os.environ.setdefault("DB_PASSWORD", "test")
os.environ.setdefault("DB_HOST", "localhost")
os.environ.setdefault("DB_NAME", "poetry_camera_test")
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/15")
os.environ.setdefault("S3_BUCKET_NAME", "poetry-camera-test")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("IDENTITY_JWT_KEY", "test-signing-secret")
os.environ.setdefault("IDENTITY_JWT_ALGORITHMS", "HS256")
os.environ.setdefault("ADMIN_SUBJECT_ID", "admin-uid")
os.environ.setdefault("WEB_DISPLAY_SUBJECT_ID", "display-uid")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from src.db.base import Base
from src.models import AllowlistEntry, Poem  # noqa: F401  (registers tables)


@pytest.fixture
def engine():
    """In-memory database shared by every session of one test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    """Create test database session."""
    session = session_factory()
    yield session
    session.close()

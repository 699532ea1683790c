"""Allowlist model."""
from sqlalchemy import Column, Integer, String

from src.db.base import Base
from .base import TimestampMixin


class AllowlistEntry(Base, TimestampMixin):
    """A subject permitted to use protected operations, plus their settings."""

    __tablename__ = 'allowlist'

    id = Column(Integer, primary_key=True, autoincrement=True)
    subject_id = Column(String(128), nullable=False, unique=True, index=True)

    # Per-user settings
    api_key = Column(String(255), nullable=True)
    timezone = Column(String(64), nullable=True)
    pen_name = Column(String(255), nullable=True)
    theme_mode = Column(String(32), nullable=True)
    display_poem_id = Column(String(36), nullable=True)

    added_by = Column(String(128), nullable=True)

    def __repr__(self) -> str:
        return f'<AllowlistEntry(subject_id={self.subject_id})>'

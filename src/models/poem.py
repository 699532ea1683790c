"""Poem model."""
from sqlalchemy import Column, String, Text, Boolean, Integer, JSON
import uuid

from src.db.base import Base
from .base import TimestampMixin


class Poem(Base, TimestampMixin):
    """A generated poem. ``owner_id`` is written once at creation."""

    __tablename__ = 'poems'

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    owner_id = Column(String(128), nullable=False, index=True)

    title = Column(String(255), nullable=False, default='')
    text = Column(Text, nullable=False, default='')
    palette = Column(JSON, nullable=False, default=list)

    is_favorite = Column(Boolean, nullable=False, default=False, index=True)
    derived_asset_url = Column(String(512), nullable=True)
    author_alias = Column(String(255), nullable=True)

    # Date parts captured in the owner's timezone at generation time
    extra_data = Column(JSON, nullable=True)

    # Bumped by every guarded write; used for compare-and-swap updates
    version = Column(Integer, nullable=False, default=1)

    def __repr__(self) -> str:
        return f'<Poem(id={self.id}, owner_id={self.owner_id}, is_favorite={self.is_favorite})>'

"""Allowlist repository for database operations."""
from sqlalchemy.orm import Session
from typing import Any, Callable, Dict, List, Optional

from src.repositories.base import BaseRepository
from src.models.allowlist import AllowlistEntry

# Settings a user may change about themselves
UPDATABLE_SETTINGS = ('api_key', 'timezone', 'theme_mode', 'pen_name')


class AllowlistRepository(BaseRepository[AllowlistEntry]):
    """Repository for allowlist entries and the per-user settings they carry."""

    def __init__(self, db: Session):
        super().__init__(AllowlistEntry, db)

    def get_by_subject(self, subject_id: str) -> Optional[AllowlistEntry]:
        return self.get_by_field('subject_id', subject_id)

    def list_subject_ids(self) -> List[str]:
        """Return every allowlisted subject identifier."""
        rows = self.db.query(AllowlistEntry.subject_id).all()
        return [row[0] for row in rows]

    def add_subject(self, subject_id: str, added_by: Optional[str] = None) -> AllowlistEntry:
        return self.create({'subject_id': subject_id, 'added_by': added_by})

    def update_settings(self, entry: AllowlistEntry, changes: Dict[str, Any]) -> AllowlistEntry:
        """
        Apply only the whitelisted settings fields from ``changes``.

        Args:
            entry: Allowlist entry to update
            changes: Field name to new value; unknown fields are ignored

        Returns:
            Updated entry
        """
        updates = {k: v for k, v in changes.items() if k in UPDATABLE_SETTINGS}
        return self.update(entry, updates)

    def set_display_poem(self, entry: AllowlistEntry, poem_id: Optional[str]) -> AllowlistEntry:
        return self.update(entry, {'display_poem_id': poem_id})


def load_subject_ids(session_factory: Callable[[], Session]) -> List[str]:
    """Read the full allowlist in a short-lived session."""
    db = session_factory()
    try:
        return AllowlistRepository(db).list_subject_ids()
    finally:
        db.close()

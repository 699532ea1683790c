"""Admin schemas."""
from datetime import datetime
from typing import Optional

from src.models.allowlist import AllowlistEntry
from src.schemas.poem import CamelModel


class AllowlistUserResponse(CamelModel):
    subject_id: str
    added_by: Optional[str] = None
    created_at: Optional[datetime] = None
    timezone: Optional[str] = None
    pen_name: Optional[str] = None
    theme_mode: Optional[str] = None
    has_api_key: bool = False

    @classmethod
    def from_entry(cls, entry: AllowlistEntry) -> "AllowlistUserResponse":
        return cls(
            subject_id=entry.subject_id,
            added_by=entry.added_by,
            created_at=entry.created_at,
            timezone=entry.timezone,
            pen_name=entry.pen_name,
            theme_mode=entry.theme_mode,
            has_api_key=bool(entry.api_key),
        )


class AdminUsersResponse(CamelModel):
    allowed: list[AllowlistUserResponse]


class AddUserRequest(CamelModel):
    new_uid: Optional[str] = None


class AddUserResponse(CamelModel):
    success: bool = True
    uid: str

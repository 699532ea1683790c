"""User settings schemas."""
from typing import Any, Optional

from pydantic import ConfigDict

from src.models.allowlist import AllowlistEntry
from src.schemas.poem import CamelModel


class SettingsResponse(CamelModel):
    """Settings of the calling user. The API key itself is never returned."""
    subject_id: Optional[str] = None
    timezone: Optional[str] = None
    pen_name: Optional[str] = None
    theme_mode: Optional[str] = None
    display_poem_id: Optional[str] = None
    has_api_key: bool = False

    @classmethod
    def from_entry(cls, entry: AllowlistEntry) -> "SettingsResponse":
        return cls(
            subject_id=entry.subject_id,
            timezone=entry.timezone,
            pen_name=entry.pen_name,
            theme_mode=entry.theme_mode,
            display_poem_id=entry.display_poem_id,
            has_api_key=bool(entry.api_key),
        )


class SettingsUpdate(CamelModel):
    """Fields a user may change; anything else in the payload is ignored."""
    model_config = ConfigDict(extra="ignore")

    api_key: Optional[str] = None
    timezone: Optional[str] = None
    theme_mode: Optional[str] = None
    pen_name: Optional[str] = None


class UpdateSettingsRequest(CamelModel):
    settings: Any = None


class SetDisplayPoemRequest(CamelModel):
    poem_id: Optional[str] = None


class UsesWebDisplayResponse(CamelModel):
    uses_web_display: bool

"""Poem schemas for API requests and responses."""
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from datetime import datetime
from typing import Optional, Union

from src.models.poem import Poem


class CamelModel(BaseModel):
    """Serialises to camelCase, accepts either case on input."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PoemResponse(CamelModel):
    """A poem as returned to clients."""
    id: str
    owner_id: str
    title: str
    text: str
    palette: list[str] = []
    created_at: datetime
    is_favorite: bool = False
    derived_asset_url: Optional[str] = None
    author_alias: Optional[str] = None

    # Date parts captured at generation time
    day_of_week: Optional[str] = None
    date: Optional[int] = None
    month: Optional[str] = None
    year: Optional[int] = None

    @classmethod
    def from_poem(cls, poem: Poem, **extra) -> "PoemResponse":
        date_parts = poem.extra_data or {}
        return cls(
            id=poem.id,
            owner_id=poem.owner_id,
            title=poem.title,
            text=poem.text,
            palette=list(poem.palette or []),
            created_at=poem.created_at,
            is_favorite=bool(poem.is_favorite),
            derived_asset_url=poem.derived_asset_url,
            author_alias=poem.author_alias,
            day_of_week=date_parts.get("dayOfWeek"),
            date=date_parts.get("date"),
            month=date_parts.get("month"),
            year=date_parts.get("year"),
            **extra,
        )


class IndexedPoemResponse(PoemResponse):
    """Poem annotated with its logical position in the navigation order."""
    index: int


class PoemNavigationResponse(CamelModel):
    current_poem: Optional[IndexedPoemResponse] = None
    next_poem: Optional[IndexedPoemResponse] = None
    previous_poem: Optional[IndexedPoemResponse] = None


class ToggleFavoriteRequest(BaseModel):
    """Omitting ``status`` flips the current flag; an explicit null clears it."""
    id: Optional[str] = None
    status: Optional[Union[bool, str]] = None


class ToggleFavoriteResponse(CamelModel):
    success: bool = True
    is_favorite: bool


class SuccessResponse(BaseModel):
    success: bool = True


class GeneratedPoemResponse(CamelModel):
    """Poem as produced by the content provider, before it is stored."""
    title: str
    poem: str
    palette: list[str] = []
    day_of_week: str
    date: int
    month: str
    year: int


class SketchRequest(BaseModel):
    id: Optional[str] = None
    title: Optional[str] = None
    poem: Optional[str] = None


class SketchResponse(CamelModel):
    sketch_url: str

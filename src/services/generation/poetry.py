"""Poem and sketch generation on behalf of an allowlisted user."""
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.app.config import settings
from src.app.exceptions import UpstreamError, ValidationError
from src.repositories.allowlist_repo import AllowlistRepository
from src.repositories.poem_repo import PoemRepository
from src.services.generation.gemini import ContentProviderError, GeminiClient
from src.services.generation.prompts import prompt_for, sketch_prompt
from src.utils.dates import format_date

logger = logging.getLogger(__name__)

MISSING_KEY_MESSAGE = "Gemini API Key is missing. Please configure it in your settings."


@dataclass(frozen=True)
class GenerationSettings:
    """Per-user values that shape a generation request."""
    api_key: Optional[str] = None
    timezone: Optional[str] = None
    pen_name: Optional[str] = None


def default_client_factory(api_key: str) -> GeminiClient:
    return GeminiClient(
        api_key=api_key,
        base_url=settings.GEMINI_BASE_URL,
        text_model=settings.GEMINI_TEXT_MODEL,
        image_model=settings.GEMINI_IMAGE_MODEL,
        timeout=settings.GENERATION_TIMEOUT_SECONDS,
    )


def load_generation_settings(db: Session, subject_id: str) -> GenerationSettings:
    """Look up the caller's key, timezone and pen name; empty on failure."""
    try:
        entry = AllowlistRepository(db).get_by_subject(subject_id)
    except SQLAlchemyError as e:
        logger.error(f"Error fetching user settings for {subject_id}: {e}")
        return GenerationSettings()

    if entry is None:
        return GenerationSettings()
    return GenerationSettings(
        api_key=entry.api_key or None,
        timezone=entry.timezone,
        pen_name=entry.pen_name,
    )


class PoetryService:
    """Wraps the content provider with prompt selection and response shaping."""

    def __init__(self, client_factory: Callable[[str], GeminiClient] = default_client_factory):
        self.client_factory = client_factory

    def _client(self, user: GenerationSettings) -> GeminiClient:
        if not user.api_key:
            raise ValidationError(MISSING_KEY_MESSAGE, code="MISSING_API_KEY")
        return self.client_factory(user.api_key)

    def generate_poem(
        self,
        user: GenerationSettings,
        image: bytes,
        mime_type: str,
        poem_type: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Generate a poem for ``image`` and enrich it with the local date.

        Returns:
            {"title", "poem", "palette", "dayOfWeek", "date", "month", "year"}
        """
        client = self._client(user)
        try:
            data = client.generate_poem(image, mime_type, prompt_for(poem_type))
        except ContentProviderError as e:
            raise UpstreamError(f"Poem generation failed: {e}") from e

        palette = data.get("palette") or []
        return {
            "title": str(data.get("title") or ""),
            "poem": str(data.get("poem") or ""),
            "palette": [str(color) for color in palette] if isinstance(palette, list) else [],
            **format_date(user.timezone),
        }

    def generate_sketch(self, user: GenerationSettings, title: str, poem: str) -> bytes:
        client = self._client(user)
        try:
            return client.generate_sketch(sketch_prompt(title, poem))
        except ContentProviderError as e:
            raise UpstreamError(f"Sketch generation failed: {e}") from e


DATE_KEYS: List[str] = ["dayOfWeek", "date", "month", "year"]


def save_generated_poem(
    session_factory: Callable[[], Session],
    owner_id: str,
    generated: Dict[str, Any],
    pen_name: Optional[str] = None,
) -> None:
    """
    Persist a poem after the response has been sent.

    Failures are logged and swallowed; the caller already has the poem.
    """
    db = session_factory()
    try:
        poem = PoemRepository(db).create_poem(
            owner_id=owner_id,
            title=generated.get("title", ""),
            text=generated.get("poem", ""),
            palette=generated.get("palette", []),
            author_alias=pen_name or "",
            extra_data={key: generated[key] for key in DATE_KEYS if key in generated},
        )
        logger.info(f"Poem {poem.id} saved for user: {owner_id}")
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error saving poem for {owner_id}: {e}")
    finally:
        db.close()

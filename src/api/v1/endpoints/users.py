"""Per-user settings endpoints."""
from fastapi import APIRouter, Depends
from pydantic import ValidationError as PydanticValidationError

from src.api.deps import get_allowlist_notifier, get_allowlist_repo, get_poem_repo, get_token_auth
from src.app.config import settings
from src.app.exceptions import NotFoundError, ValidationError
from src.core.allowlist import AllowlistNotifier
from src.core.auth import TokenAuth
from src.repositories.allowlist_repo import AllowlistRepository
from src.repositories.poem_repo import PoemRepository
from src.schemas.poem import SuccessResponse
from src.schemas.settings import (
    SetDisplayPoemRequest,
    SettingsResponse,
    SettingsUpdate,
    UpdateSettingsRequest,
    UsesWebDisplayResponse,
)


router = APIRouter()


def _own_entry(repo: AllowlistRepository, subject_id: str):
    entry = repo.get_by_subject(subject_id)
    if entry is None:
        raise NotFoundError('User not found')
    return entry


@router.get('/get-settings')
def get_settings(
    auth: TokenAuth = Depends(get_token_auth),
    repo: AllowlistRepository = Depends(get_allowlist_repo),
):
    """Caller's settings, or an empty object when none are stored."""
    entry = repo.get_by_subject(auth.subject_id)
    if entry is None:
        return {}
    return SettingsResponse.from_entry(entry).model_dump(by_alias=True)


@router.post('/update-settings', response_model=SuccessResponse)
def update_settings(
    payload: UpdateSettingsRequest,
    auth: TokenAuth = Depends(get_token_auth),
    repo: AllowlistRepository = Depends(get_allowlist_repo),
    notifier: AllowlistNotifier = Depends(get_allowlist_notifier),
):
    if not isinstance(payload.settings, dict):
        raise ValidationError('Invalid settings format')

    try:
        update = SettingsUpdate.model_validate(payload.settings)
    except PydanticValidationError:
        raise ValidationError('Invalid settings format')

    entry = _own_entry(repo, auth.subject_id)
    repo.update_settings(entry, update.model_dump(exclude_unset=True))
    notifier.publish()
    return SuccessResponse()


@router.get('/uses-web-display', response_model=UsesWebDisplayResponse)
def uses_web_display(auth: TokenAuth = Depends(get_token_auth)):
    """Whether the caller is the account behind the shared web display."""
    return UsesWebDisplayResponse(
        uses_web_display=bool(settings.WEB_DISPLAY_SUBJECT_ID)
        and auth.subject_id == settings.WEB_DISPLAY_SUBJECT_ID
    )


@router.post('/set-web-display-poem', response_model=SuccessResponse)
def set_web_display_poem(
    payload: SetDisplayPoemRequest,
    auth: TokenAuth = Depends(get_token_auth),
    repo: AllowlistRepository = Depends(get_allowlist_repo),
    poem_repo: PoemRepository = Depends(get_poem_repo),
):
    """Pin one of the caller's poems for their web display; a null ``poemId`` unpins."""
    entry = _own_entry(repo, auth.subject_id)

    if payload.poem_id:
        poem = poem_repo.get(payload.poem_id)
        if poem is None or poem.owner_id != auth.subject_id:
            raise NotFoundError('Poem not found')

    repo.set_display_poem(entry, payload.poem_id or None)
    return SuccessResponse()

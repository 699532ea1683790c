"""Poem browsing and owner-only mutation endpoints."""
from fastapi import APIRouter, Depends, Query
from typing import List, Optional

from src.api.deps import (
    get_allowlist_repo,
    get_mutation_guard,
    get_navigator,
    get_poem_repo,
    get_token_auth,
)
from src.app.exceptions import ValidationError
from src.core.auth import TokenAuth
from src.repositories.allowlist_repo import AllowlistRepository
from src.repositories.poem_repo import PoemRepository
from src.schemas.poem import (
    IndexedPoemResponse,
    PoemNavigationResponse,
    PoemResponse,
    SuccessResponse,
    ToggleFavoriteRequest,
    ToggleFavoriteResponse,
)
from src.services.navigation import Positioned, SequentialNavigator, order_mode_for
from src.services.ownership import OwnedMutationGuard
from src.utils.validators import coerce_status, parse_flag, parse_index, parse_page


router = APIRouter()


def _indexed(slot: Optional[Positioned]) -> Optional[IndexedPoemResponse]:
    if slot is None:
        return None
    return IndexedPoemResponse.from_poem(slot.item, index=slot.index)


def navigate_poems(
    repo: PoemRepository,
    navigator: SequentialNavigator,
    owner_id: str,
    index: Optional[str],
    favorites_only: Optional[str],
    sort_by_date: Optional[str],
) -> PoemNavigationResponse:
    """Shared by the authenticated and the public navigation routes."""
    order_mode = order_mode_for(parse_flag(sort_by_date))
    only_favorites = parse_flag(favorites_only)

    window = navigator.navigate(
        lambda offset, limit: repo.get_window(
            owner_id, offset, limit, order_mode=order_mode, favorites_only=only_favorites
        ),
        parse_index(index),
    )

    return PoemNavigationResponse(
        current_poem=_indexed(window.current),
        next_poem=_indexed(window.next),
        previous_poem=_indexed(window.previous),
    )


@router.get('/poemList', response_model=List[PoemResponse])
def list_poems(
    page: Optional[str] = Query(None, description='Page number (1-based)'),
    sort_by_date: Optional[str] = Query(None, alias='sortByDate'),
    auth: TokenAuth = Depends(get_token_auth),
    repo: PoemRepository = Depends(get_poem_repo),
    navigator: SequentialNavigator = Depends(get_navigator),
):
    """
    List the caller's poems, 50 per page.

    Favourites come first unless ``sortByDate=true``.
    """
    order_mode = order_mode_for(parse_flag(sort_by_date))
    poems = navigator.page(
        lambda offset, limit: repo.get_window(auth.subject_id, offset, limit, order_mode=order_mode),
        parse_page(page),
    )
    return [PoemResponse.from_poem(poem) for poem in poems]


@router.get('/getPoem', response_model=PoemNavigationResponse)
def get_poem(
    index: Optional[str] = Query(None, description='Logical position, 0 = most recent'),
    favorites_only: Optional[str] = Query(None, alias='favoritesOnly'),
    sort_by_date: Optional[str] = Query(None, alias='sortByDate'),
    auth: TokenAuth = Depends(get_token_auth),
    repo: PoemRepository = Depends(get_poem_repo),
    navigator: SequentialNavigator = Depends(get_navigator),
):
    """Poem at ``index`` with its newer (next) and older (previous) neighbours."""
    return navigate_poems(repo, navigator, auth.subject_id, index, favorites_only, sort_by_date)


@router.get('/public/getPoem', response_model=PoemNavigationResponse)
def get_public_poem(
    userid: Optional[str] = Query(None),
    index: Optional[str] = Query(None),
    favorites_only: Optional[str] = Query(None, alias='favoritesOnly'),
    sort_by_date: Optional[str] = Query(None, alias='sortByDate'),
    repo: PoemRepository = Depends(get_poem_repo),
    navigator: SequentialNavigator = Depends(get_navigator),
):
    """
    Read-only navigation for unattended displays.

    The owner comes straight from ``userid``; nothing is verified.
    """
    if not userid:
        raise ValidationError('Missing userid parameter')
    return navigate_poems(repo, navigator, userid, index, favorites_only, sort_by_date)


@router.get('/public/getWebDisplayPoem', response_model=PoemNavigationResponse)
def get_web_display_poem(
    userid: Optional[str] = Query(None),
    repo: PoemRepository = Depends(get_poem_repo),
    allowlist_repo: AllowlistRepository = Depends(get_allowlist_repo),
):
    """The poem a user pinned for their web display, if it is still theirs."""
    if not userid:
        raise ValidationError('Missing userid parameter')

    entry = allowlist_repo.get_by_subject(userid)
    if entry is None or not entry.display_poem_id:
        return PoemNavigationResponse()

    poem = repo.get(entry.display_poem_id)
    if poem is None or poem.owner_id != userid:
        return PoemNavigationResponse()

    return PoemNavigationResponse(
        current_poem=IndexedPoemResponse.from_poem(poem, index=0)
    )


@router.post('/toggleFavorite', response_model=ToggleFavoriteResponse)
def toggle_favorite(
    payload: ToggleFavoriteRequest,
    auth: TokenAuth = Depends(get_token_auth),
    guard: OwnedMutationGuard = Depends(get_mutation_guard),
):
    """Set the favourite flag to ``status``, or flip it when omitted."""
    if not payload.id:
        raise ValidationError('Missing id')

    # An explicit null sets false; only an omitted status toggles
    status = coerce_status(payload.status) if "status" in payload.model_fields_set else None
    new_status = guard.set_favorite(payload.id, auth.subject_id, status)
    return ToggleFavoriteResponse(is_favorite=new_status)


@router.delete('/deletePoem', response_model=SuccessResponse)
def delete_poem(
    id: Optional[str] = Query(None),
    auth: TokenAuth = Depends(get_token_auth),
    guard: OwnedMutationGuard = Depends(get_mutation_guard),
):
    if not id:
        raise ValidationError('Missing id')

    guard.delete(id, auth.subject_id)
    return SuccessResponse()

"""Allowlist administration endpoints."""
import logging

from fastapi import APIRouter, Depends, status

from src.api.deps import get_allowlist_notifier, get_allowlist_repo, get_current_admin
from src.app.exceptions import ValidationError
from src.core.allowlist import AllowlistNotifier
from src.core.auth import TokenAuth
from src.repositories.allowlist_repo import AllowlistRepository
from src.schemas.admin import (
    AddUserRequest,
    AddUserResponse,
    AdminUsersResponse,
    AllowlistUserResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get('/users', response_model=AdminUsersResponse)
def list_users(
    admin: TokenAuth = Depends(get_current_admin),
    repo: AllowlistRepository = Depends(get_allowlist_repo),
):
    """All allowlisted users. API keys are reduced to a ``hasApiKey`` flag."""
    entries = repo.list_all()
    return AdminUsersResponse(allowed=[AllowlistUserResponse.from_entry(e) for e in entries])


@router.post('/add-user', response_model=AddUserResponse, status_code=status.HTTP_200_OK)
def add_user(
    payload: AddUserRequest,
    admin: TokenAuth = Depends(get_current_admin),
    repo: AllowlistRepository = Depends(get_allowlist_repo),
    notifier: AllowlistNotifier = Depends(get_allowlist_notifier),
):
    """
    Add a subject to the allowlist.

    Subscribers are notified so every instance picks up the change without
    waiting for the next resync.
    """
    new_uid = (payload.new_uid or '').strip()
    if not new_uid:
        raise ValidationError('Missing newUid')

    if repo.get_by_subject(new_uid) is not None:
        raise ValidationError('User already allowlisted')

    repo.add_subject(new_uid, added_by=admin.subject_id)
    logger.info(f"Admin {admin.subject_id} added {new_uid} to the allowlist")

    notifier.publish()
    return AddUserResponse(uid=new_uid)

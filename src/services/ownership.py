"""Single-owner mutation and deletion of poems."""
import logging
from typing import Any, Callable, Dict, Optional

from src.app.exceptions import AuthorizationError, ConflictError, NotFoundError
from src.models.poem import Poem
from src.repositories.poem_repo import PoemRepository

logger = logging.getLogger(__name__)


class OwnedMutationGuard:
    """
    Read-check-write for poems owned by a single subject.

    Every write is a compare-and-swap on ``(id, owner_id, version)``. When a
    concurrent writer bumps the version between our read and our write, the
    poem is re-read (and the ownership check repeated) up to
    ``max_attempts`` times before giving up with ``ConflictError``.
    """

    def __init__(self, repo: PoemRepository, max_attempts: int = 3):
        self.repo = repo
        self.max_attempts = max(1, max_attempts)

    def load_owned(self, poem_id: str, subject_id: str, action: str = "modify") -> Poem:
        """
        Fetch a poem and check that ``subject_id`` owns it.

        Raises:
            NotFoundError: No poem with this id
            AuthorizationError: Poem belongs to someone else
        """
        poem = self.repo.get(poem_id, fresh=True)
        if poem is None:
            raise NotFoundError("Poem not found")
        if poem.owner_id != subject_id:
            logger.info(f"Subject {subject_id} tried to {action} poem {poem_id} owned by another user")
            raise AuthorizationError(f"Unauthorized to {action} this poem", code="NOT_OWNER")
        return poem

    def _update(
        self,
        poem_id: str,
        subject_id: str,
        changes: Callable[[Poem], Dict[str, Any]],
    ) -> Dict[str, Any]:
        for attempt in range(1, self.max_attempts + 1):
            poem = self.load_owned(poem_id, subject_id)
            values = changes(poem)
            if self.repo.compare_and_set(poem_id, subject_id, poem.version, values):
                return values
            logger.info(f"Concurrent update on poem {poem_id} (attempt {attempt}), retrying")
        raise ConflictError()

    def set_favorite(self, poem_id: str, subject_id: str, status: Optional[bool] = None) -> bool:
        """
        Set the favourite flag to ``status``, or flip it when ``status`` is None.

        Returns:
            The stored flag
        """
        def changes(poem: Poem) -> Dict[str, Any]:
            new_status = (not poem.is_favorite) if status is None else bool(status)
            return {'is_favorite': new_status}

        return self._update(poem_id, subject_id, changes)['is_favorite']

    def set_derived_asset(self, poem_id: str, subject_id: str, url: str) -> str:
        return self._update(poem_id, subject_id, lambda poem: {'derived_asset_url': url})['derived_asset_url']

    def delete(self, poem_id: str, subject_id: str) -> None:
        for attempt in range(1, self.max_attempts + 1):
            poem = self.load_owned(poem_id, subject_id, action="delete")
            if self.repo.compare_and_delete(poem_id, subject_id, poem.version):
                logger.info(f"Deleted poem {poem_id} for {subject_id}")
                return
            logger.info(f"Concurrent update on poem {poem_id} (attempt {attempt}), retrying")
        raise ConflictError()

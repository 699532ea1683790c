"""Poem repository for database operations."""
from sqlalchemy.orm import Session, Query
from sqlalchemy import delete, desc, update
from typing import Optional, List, Dict, Any

from src.repositories.base import BaseRepository
from src.models.poem import Poem
from src.models.enums import OrderMode


class PoemRepository(BaseRepository[Poem]):
    """Repository for poem database operations."""

    def __init__(self, db: Session):
        super().__init__(Poem, db)

    def create_poem(
        self,
        owner_id: str,
        title: str,
        text: str,
        palette: List[str],
        author_alias: Optional[str] = None,
        extra_data: Optional[Dict[str, Any]] = None,
    ) -> Poem:
        """
        Create new poem record.

        Args:
            owner_id: Subject the poem belongs to (never changes afterwards)
            title: Poem title
            text: Poem body
            palette: Ordered colour codes
            author_alias: Pen name at generation time
            extra_data: Date parts and other generation metadata

        Returns:
            Created Poem instance
        """
        return self.create({
            'owner_id': owner_id,
            'title': title,
            'text': text,
            'palette': list(palette),
            'is_favorite': False,
            'author_alias': author_alias,
            'extra_data': extra_data,
        })

    def _owner_query(self, owner_id: str, favorites_only: bool = False) -> Query:
        query = self.db.query(Poem).filter(Poem.owner_id == owner_id)
        if favorites_only:
            query = query.filter(Poem.is_favorite.is_(True))
        return query

    @staticmethod
    def _apply_order(query: Query, order_mode: OrderMode) -> Query:
        if order_mode == OrderMode.date_only:
            return query.order_by(desc(Poem.created_at), desc(Poem.id))
        return query.order_by(desc(Poem.is_favorite), desc(Poem.created_at), desc(Poem.id))

    def get_window(
        self,
        owner_id: str,
        offset: int,
        limit: int,
        order_mode: OrderMode = OrderMode.favorite_first,
        favorites_only: bool = False,
    ) -> List[Poem]:
        """
        Get a contiguous slice of one owner's poems under the given ordering.

        Args:
            owner_id: Owner subject identifier
            offset: Number of rows to skip
            limit: Maximum rows to return
            order_mode: favorite_first or date_only
            favorites_only: Restrict to favourited poems

        Returns:
            Poems in order, newest first
        """
        query = self._apply_order(self._owner_query(owner_id, favorites_only), order_mode)
        return query.offset(offset).limit(limit).all()

    def compare_and_set(
        self,
        poem_id: str,
        owner_id: str,
        expected_version: int,
        values: Dict[str, Any],
    ) -> bool:
        """
        Update a poem only if it is still owned by ``owner_id`` and still at
        ``expected_version``. Bumps the version on success.

        Returns:
            True if the row was updated, False if another writer got there first
        """
        stmt = (
            update(Poem)
            .where(
                Poem.id == poem_id,
                Poem.owner_id == owner_id,
                Poem.version == expected_version,
            )
            .values(version=Poem.version + 1, **values)
            .execution_options(synchronize_session=False)
        )
        result = self.db.execute(stmt)
        self.db.commit()
        return result.rowcount == 1

    def compare_and_delete(self, poem_id: str, owner_id: str, expected_version: int) -> bool:
        """
        Delete a poem only if ownership and version still match.

        Returns:
            True if the row was deleted
        """
        stmt = (
            delete(Poem)
            .where(
                Poem.id == poem_id,
                Poem.owner_id == owner_id,
                Poem.version == expected_version,
            )
            .execution_options(synchronize_session=False)
        )
        result = self.db.execute(stmt)
        self.db.commit()
        return result.rowcount == 1

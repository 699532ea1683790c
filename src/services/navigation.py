"""
Sequential navigation over one owner's poems.

Given a logical position in an ordered collection, fetch the poem at that
position together with its immediate neighbours using a single range query:

    index 0:  offset 0,         size 2  -> [current, previous]
    index n:  offset n - 1,     size 3  -> [next, current, previous]

"next" is the newer neighbour (index - 1) and "previous" the older one
(index + 1). Index 0 is always the most recent poem under the active order.
"""
from dataclasses import dataclass
from typing import Callable, Generic, List, Optional, Sequence, TypeVar

from src.models.enums import OrderMode

T = TypeVar("T")

PAGE_SIZE = 50

# (offset, limit) -> rows in order
RangeQuery = Callable[[int, int], Sequence[T]]


@dataclass(frozen=True)
class Positioned(Generic[T]):
    """An item and its resolved logical index."""
    item: T
    index: int


@dataclass(frozen=True)
class NavigationWindow(Generic[T]):
    current: Optional[Positioned[T]] = None
    next: Optional[Positioned[T]] = None
    previous: Optional[Positioned[T]] = None

    @property
    def empty(self) -> bool:
        return self.current is None and self.next is None and self.previous is None


def window_bounds(index: int) -> tuple[int, int]:
    """Return the ``(offset, size)`` range covering ``index`` and its neighbours."""
    offset = max(0, index - 1)
    size = 2 if index == 0 else 3
    return offset, size


def order_mode_for(sort_by_date: bool) -> OrderMode:
    return OrderMode.date_only if sort_by_date else OrderMode.favorite_first


def _at(rows: Sequence[T], position: int, index: int) -> Optional[Positioned[T]]:
    if position < len(rows):
        return Positioned(item=rows[position], index=index)
    return None


class SequentialNavigator:
    """Maps a window of ordered rows onto current/next/previous slots."""

    def navigate(self, fetch: RangeQuery, index: int) -> NavigationWindow:
        """
        Args:
            fetch: Range query over the ordered collection
            index: Normalised logical position (>= 0)

        Returns:
            NavigationWindow; every slot is None for an empty collection
        """
        index = max(0, index)
        offset, size = window_bounds(index)
        rows = list(fetch(offset, size))

        if not rows:
            return NavigationWindow()

        if index == 0:
            return NavigationWindow(
                current=_at(rows, 0, 0),
                previous=_at(rows, 1, 1),
                next=None,
            )

        return NavigationWindow(
            next=_at(rows, 0, index - 1),
            current=_at(rows, 1, index),
            previous=_at(rows, 2, index + 1),
        )

    def page(self, fetch: RangeQuery, page: int) -> List[T]:
        """Fixed-size page (1-based), not neighbour aware."""
        page = max(1, page)
        return list(fetch((page - 1) * PAGE_SIZE, PAGE_SIZE))

from datetime import datetime, timedelta

import pytest

from src.models.enums import OrderMode
from src.models.poem import Poem
from src.repositories.poem_repo import PoemRepository


BASE_TIME = datetime(2025, 6, 1, 12, 0)


def add_poem(db, poem_id, owner_id="alice", minutes=0, is_favorite=False):
    poem = Poem(
        id=poem_id,
        owner_id=owner_id,
        title=f"Poem {poem_id}",
        text="words",
        palette=["#000000"],
        is_favorite=is_favorite,
        created_at=BASE_TIME + timedelta(minutes=minutes),
    )
    db.add(poem)
    db.commit()
    return poem


@pytest.fixture
def repo(db_session):
    return PoemRepository(db_session)


def ids(poems):
    return [poem.id for poem in poems]


def test_create_poem_starts_at_version_one(repo):
    poem = repo.create_poem(
        owner_id="alice",
        title="Morning",
        text="light on the lake",
        palette=["#ffffff", "#336699"],
        author_alias="A.",
        extra_data={"year": 2025},
    )

    assert poem.id
    assert poem.version == 1
    assert poem.is_favorite is False
    assert poem.palette == ["#ffffff", "#336699"]


def test_favorite_first_order(db_session, repo):
    add_poem(db_session, "old-fav", minutes=0, is_favorite=True)
    add_poem(db_session, "newest", minutes=30)
    add_poem(db_session, "middle", minutes=10)

    window = repo.get_window("alice", 0, 10, order_mode=OrderMode.favorite_first)

    assert ids(window) == ["old-fav", "newest", "middle"]


def test_date_only_order(db_session, repo):
    add_poem(db_session, "old-fav", minutes=0, is_favorite=True)
    add_poem(db_session, "newest", minutes=30)
    add_poem(db_session, "middle", minutes=10)

    window = repo.get_window("alice", 0, 10, order_mode=OrderMode.date_only)

    assert ids(window) == ["newest", "middle", "old-fav"]


def test_equal_timestamps_are_ordered_by_id(db_session, repo):
    add_poem(db_session, "a", minutes=5)
    add_poem(db_session, "c", minutes=5)
    add_poem(db_session, "b", minutes=5)

    window = repo.get_window("alice", 0, 10, order_mode=OrderMode.date_only)

    assert ids(window) == ["c", "b", "a"]


def test_window_is_scoped_to_owner_and_favorites(db_session, repo):
    add_poem(db_session, "mine", minutes=1)
    add_poem(db_session, "mine-fav", minutes=2, is_favorite=True)
    add_poem(db_session, "theirs", owner_id="bob", minutes=3, is_favorite=True)

    assert ids(repo.get_window("alice", 0, 10)) == ["mine-fav", "mine"]
    assert ids(repo.get_window("alice", 0, 10, favorites_only=True)) == ["mine-fav"]


def test_window_offset_and_limit(db_session, repo):
    for minute in range(5):
        add_poem(db_session, f"p{minute}", minutes=minute)

    window = repo.get_window("alice", 1, 3, order_mode=OrderMode.date_only)

    assert ids(window) == ["p3", "p2", "p1"]


def test_compare_and_set_bumps_version(db_session, repo):
    add_poem(db_session, "p1")

    assert repo.compare_and_set("p1", "alice", 1, {"is_favorite": True})

    poem = repo.get("p1", fresh=True)
    assert poem.is_favorite is True
    assert poem.version == 2


def test_compare_and_set_rejects_stale_version(db_session, repo):
    add_poem(db_session, "p1")
    repo.compare_and_set("p1", "alice", 1, {"is_favorite": True})

    assert not repo.compare_and_set("p1", "alice", 1, {"is_favorite": False})
    assert repo.get("p1", fresh=True).is_favorite is True


def test_compare_and_set_rejects_other_owner(db_session, repo):
    add_poem(db_session, "p1")

    assert not repo.compare_and_set("p1", "bob", 1, {"is_favorite": True})


def test_compare_and_delete(db_session, repo):
    add_poem(db_session, "p1")

    assert not repo.compare_and_delete("p1", "bob", 1)
    assert not repo.compare_and_delete("p1", "alice", 7)
    assert repo.compare_and_delete("p1", "alice", 1)
    assert repo.get("p1", fresh=True) is None


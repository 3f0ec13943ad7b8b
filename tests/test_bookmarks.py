from datetime import timedelta
from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from newsroom.bookmarks import BookmarkService, clean_tags
from newsroom.errors import InvalidInput, NotFound, StoreUnavailable
from newsroom.models import Bookmark, InteractionEvent, InteractionType

from conftest import BASE_TIME


@pytest.fixture
def setup(db, add_user, add_article):
    add_user(id="u1")
    for i in range(3):
        add_article(id=f"a{i}")
    return BookmarkService(db)


def bookmark_events(db):
    return (
        db.query(InteractionEvent)
        .filter(InteractionEvent.type == InteractionType.BOOKMARK)
        .order_by(InteractionEvent.id)
        .all()
    )


class TestCleanTags:
    def test_strips_and_dedupes_in_order(self):
        assert clean_tags([" later ", "work", "later", "", "  "]) == ["later", "work"]


# ---------------------------------------------------------------------------
# add / remove
# ---------------------------------------------------------------------------

class TestAddRemove:
    def test_add_creates_bookmark_and_event(self, db, setup):
        bookmark = setup.add("u1", "a0", ["read-later"])

        assert bookmark.article_id == "a0"
        assert bookmark.tags == ["read-later"]
        [event] = bookmark_events(db)
        assert event.value is True

    def test_readding_replaces_tags(self, db, setup):
        setup.add("u1", "a0", ["one"])
        setup.add("u1", "a0", ["two"])

        rows = db.query(Bookmark).all()
        assert len(rows) == 1
        assert rows[0].tags == ["two"]
        assert [e.value for e in bookmark_events(db)] == [True]

    def test_add_unknown_article(self, db, setup):
        with pytest.raises(NotFound):
            setup.add("u1", "missing")
        assert db.query(Bookmark).count() == 0

    def test_remove_deletes_and_records_false(self, db, setup):
        setup.add("u1", "a0")

        setup.remove("u1", "a0")

        assert db.query(Bookmark).count() == 0
        assert [e.value for e in bookmark_events(db)] == [True, False]

    def test_failed_commit_leaves_neither_bookmark_nor_event(self, db, setup):
        failure = OperationalError("INSERT INTO bookmarks", {}, Exception("database is locked"))

        with patch.object(db, "commit", side_effect=failure):
            with pytest.raises(StoreUnavailable):
                setup.add("u1", "a0", ["read-later"])

        assert db.query(Bookmark).count() == 0
        assert bookmark_events(db) == []

    def test_failed_remove_keeps_bookmark_and_events(self, db, setup):
        setup.add("u1", "a0")
        failure = OperationalError("DELETE FROM bookmarks", {}, Exception("database is locked"))

        with patch.object(db, "commit", side_effect=failure):
            with pytest.raises(StoreUnavailable):
                setup.remove("u1", "a0")

        assert db.query(Bookmark).count() == 1
        assert [e.value for e in bookmark_events(db)] == [True]

    def test_add_unknown_user(self, db, setup):
        with pytest.raises(NotFound):
            setup.add("ghost", "a0")
        assert db.query(Bookmark).count() == 0
        assert bookmark_events(db) == []

    def test_remove_missing_bookmark(self, db, setup):
        with pytest.raises(NotFound):
            setup.remove("u1", "a0")
        assert bookmark_events(db) == []


# ---------------------------------------------------------------------------
# listing and tags
# ---------------------------------------------------------------------------

class TestListing:
    def _add_dated(self, db, setup, article_id, tags, hours):
        bookmark = setup.add("u1", article_id, tags)
        bookmark.created_at = BASE_TIME + timedelta(hours=hours)
        db.commit()

    def test_newest_first(self, db, setup):
        self._add_dated(db, setup, "a0", [], 0)
        self._add_dated(db, setup, "a1", [], 2)
        self._add_dated(db, setup, "a2", [], 1)

        assert [b.article_id for b in setup.list("u1")] == ["a1", "a2", "a0"]

    def test_filter_requires_all_tags(self, db, setup):
        self._add_dated(db, setup, "a0", ["work", "ai"], 0)
        self._add_dated(db, setup, "a1", ["work"], 1)

        assert [b.article_id for b in setup.list("u1", tags=["work", "ai"])] == ["a0"]
        assert len(setup.list("u1", tags=["work"])) == 2

    def test_limit_and_offset(self, db, setup):
        for hours, article_id in enumerate(["a0", "a1", "a2"]):
            self._add_dated(db, setup, article_id, [], hours)

        assert [b.article_id for b in setup.list("u1", limit=1, offset=1)] == ["a1"]

    def test_bad_paging(self, setup):
        with pytest.raises(InvalidInput):
            setup.list("u1", limit=0)

    def test_update_tags(self, setup):
        setup.add("u1", "a0", ["old"])

        updated = setup.update_tags("u1", "a0", ["new", "new", " shiny "])

        assert updated.tags == ["new", "shiny"]

    def test_update_tags_missing_bookmark(self, setup):
        with pytest.raises(NotFound):
            setup.update_tags("u1", "a0", ["x"])

    def test_distinct_tags_first_seen_order(self, db, setup):
        self._add_dated(db, setup, "a0", ["work", "ai"], 0)
        self._add_dated(db, setup, "a1", ["ai", "health"], 1)

        assert setup.tags("u1") == ["work", "ai", "health"]

    def test_unknown_user(self, setup):
        with pytest.raises(NotFound):
            setup.list("ghost")

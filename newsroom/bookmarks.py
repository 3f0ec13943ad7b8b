import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from newsroom.errors import InvalidInput, NotFound, store_call
from newsroom.models import Bookmark, InteractionType
from newsroom.recorder import InteractionRecorder
from newsroom.users import require_user

logger = logging.getLogger(__name__)


def clean_tags(tags: List[str]) -> List[str]:
    """Strip tags, drop blanks and duplicates while keeping their order."""
    cleaned = []
    for tag in tags:
        tag = tag.strip()
        if tag and tag not in cleaned:
            cleaned.append(tag)
    return cleaned


class BookmarkService:
    """
    Per-user bookmarks with free-form tags.

    Adding or removing a bookmark is also an engagement signal, recorded through
    the InteractionRecorder as bookmark=True / bookmark=False events in the same
    commit as the bookmark row.
    """

    def __init__(self, db: Session, recorder: Optional[InteractionRecorder] = None):
        self.db = db
        self.recorder = recorder or InteractionRecorder(db)

    def _find(self, user_id: str, article_id: str) -> Optional[Bookmark]:
        return (
            self.db.query(Bookmark)
            .filter(Bookmark.user_id == user_id, Bookmark.article_id == article_id)
            .first()
        )

    def add(self, user_id: str, article_id: str, tags: Optional[List[str]] = None) -> Bookmark:
        """
        Bookmark an article, or replace the tags of an existing bookmark.

        Only a newly created bookmark records a bookmark event. The row and the
        event are committed together.
        """
        with store_call(self.db, "add bookmark"):
            require_user(self.db, user_id)
            article = self.recorder.require_article(article_id)

            bookmark = self._find(user_id, article_id)
            created = bookmark is None
            if created:
                bookmark = Bookmark(user_id=user_id, article_id=article_id)
                self.db.add(bookmark)
                self.recorder.stage(user_id, article, InteractionType.BOOKMARK, True)
            bookmark.tags = clean_tags(tags or [])
            self.db.commit()
            self.db.refresh(bookmark)

        if created:
            logger.info(f"[bookmarks] user={user_id} bookmarked article={article_id}")
        else:
            logger.info(f"[bookmarks] user={user_id} retagged bookmark for article={article_id}")
        return bookmark

    def remove(self, user_id: str, article_id: str) -> None:
        with store_call(self.db, "remove bookmark"):
            require_user(self.db, user_id)
            bookmark = self._find(user_id, article_id)
            if bookmark is None:
                raise NotFound(f"no bookmark for article '{article_id}'")
            article = self.recorder.require_article(article_id)

            self.recorder.stage(user_id, article, InteractionType.BOOKMARK, False)
            self.db.delete(bookmark)
            self.db.commit()

        logger.info(f"[bookmarks] user={user_id} removed bookmark for article={article_id}")

    def list(
        self,
        user_id: str,
        tags: Optional[List[str]] = None,
        limit: int = 10,
        offset: int = 0,
    ) -> List[Bookmark]:
        """Newest first. With tags given, a bookmark must carry every one of them."""
        if limit < 1 or offset < 0:
            raise InvalidInput("limit must be >= 1 and offset >= 0")

        with store_call(self.db, "list bookmarks"):
            require_user(self.db, user_id)
            rows = (
                self.db.query(Bookmark)
                .filter(Bookmark.user_id == user_id)
                .order_by(Bookmark.created_at.desc())
                .all()
            )

        # Tags live in a JSON column, so the containment check runs here
        wanted = set(clean_tags(tags or []))
        if wanted:
            rows = [b for b in rows if wanted.issubset(b.tags or [])]
        return rows[offset:offset + limit]

    def update_tags(self, user_id: str, article_id: str, tags: List[str]) -> Bookmark:
        with store_call(self.db, "update bookmark tags"):
            bookmark = self._find(user_id, article_id)
            if bookmark is None:
                raise NotFound(f"no bookmark for article '{article_id}'")
            bookmark.tags = clean_tags(tags)
            self.db.commit()
            self.db.refresh(bookmark)
        return bookmark

    def tags(self, user_id: str) -> List[str]:
        """Distinct tags across the user's bookmarks, in first-seen order."""
        with store_call(self.db, "list bookmark tags"):
            require_user(self.db, user_id)
            rows = (
                self.db.query(Bookmark.tags)
                .filter(Bookmark.user_id == user_id)
                .order_by(Bookmark.created_at)
                .all()
            )
        seen = []
        for row in rows:
            for tag in row.tags or []:
                if tag not in seen:
                    seen.append(tag)
        return seen

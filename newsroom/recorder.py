import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from newsroom.errors import NotFound, store_call
from newsroom.models import Article, InteractionEvent, InteractionType
from newsroom.schemas import ViewRecorded
from newsroom.users import require_user

logger = logging.getLogger(__name__)


class InteractionRecorder:
    """
    Appends per-user engagement events.

    Each event carries the article's category and source as they were at write
    time, so aggregation never has to join back against the article.
    """

    def __init__(self, db: Session):
        self.db = db

    def require_article(self, article_id: str) -> Article:
        article = self.db.get(Article, article_id)
        if article is None:
            raise NotFound(f"article '{article_id}' not found")
        return article

    def stage(self, user_id: str, article: Article, kind: InteractionType, value: bool = True) -> InteractionEvent:
        """
        Add an event to the session and flush it, leaving the commit to the caller.

        Callers that write other rows alongside the event commit them together.
        """
        event = InteractionEvent(
            user_id=user_id,
            article_id=article.id,
            category=article.category,
            source=article.source,
            type=kind,
            value=value,
        )
        self.db.add(event)
        self.db.flush()
        return event

    def _record(self, user_id: str, article_id: str, kind: InteractionType, value: bool = True) -> InteractionEvent:
        with store_call(self.db, f"record {kind.value}"):
            require_user(self.db, user_id)
            article = self.require_article(article_id)
            event = self.stage(user_id, article, kind, value)
            self.db.commit()
            self.db.refresh(event)

        logger.info(f"[recorder] {kind.value}={value} user={user_id} article={article_id}")
        return event

    def record_view(self, user_id: Optional[str], article_id: str) -> ViewRecorded:
        """
        Count a view and, for a known user, append a view event.

        Every call increments the counter; repeated views are not de-duplicated.
        The increment is committed before the event write. If the event write
        fails the increment is kept and the failure is returned in the result.
        """
        with store_call(self.db, "record view"):
            if user_id is not None:
                require_user(self.db, user_id)
            article = self.require_article(article_id)

            # Single UPDATE statement, so concurrent views can't lose an increment
            self.db.query(Article).filter(Article.id == article_id).update(
                {Article.views: Article.views + 1}, synchronize_session=False
            )
            self.db.commit()
            self.db.refresh(article)
            views = article.views

        if user_id is None:
            return ViewRecorded(article_id=article_id, views=views, tracked=False)

        try:
            self.stage(user_id, article, InteractionType.VIEW)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"[recorder] View counted but event write failed for user={user_id} article={article_id}: {e}")
            return ViewRecorded(article_id=article_id, views=views, tracked=False, error=str(e))

        logger.info(f"[recorder] view user={user_id} article={article_id} (views={views})")
        return ViewRecorded(article_id=article_id, views=views, tracked=True)

    def record_bookmark(self, user_id: str, article_id: str, value: bool) -> InteractionEvent:
        return self._record(user_id, article_id, InteractionType.BOOKMARK, value)

    def record_not_interested(self, user_id: str, article_id: str) -> InteractionEvent:
        return self._record(user_id, article_id, InteractionType.NOT_INTERESTED)

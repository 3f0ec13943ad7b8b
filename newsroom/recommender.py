import logging
from typing import List, Set

from sqlalchemy.orm import Session

from newsroom.errors import store_call
from newsroom.models import Article, InteractionEvent, InteractionType, UserInterest
from newsroom.users import require_user

logger = logging.getLogger(__name__)

RECOMMENDATION_LIMIT = 10   # max articles returned per request
RECENT_VIEW_LIMIT = 10      # how many recent views feed the category set
TRENDING_FALLBACK_LIMIT = 5 # most-viewed articles served when no categories are known


class RecommendationGenerator:
    """
    Picks articles from the categories a user declared or recently read.

    Articles the user marked not-interested are never returned. The trending
    fallback applies only when the user has no categories at all: a category
    set whose articles are all excluded yields an empty list.
    """

    def __init__(self, db: Session):
        self.db = db

    def _interest_categories(self, user_id: str) -> Set[str]:
        rows = self.db.query(UserInterest.category).filter(UserInterest.user_id == user_id).all()
        return {row.category for row in rows}

    def _recent_view_categories(self, user_id: str) -> Set[str]:
        rows = (
            self.db.query(InteractionEvent.category)
            .filter(
                InteractionEvent.user_id == user_id,
                InteractionEvent.type == InteractionType.VIEW,
            )
            .order_by(InteractionEvent.created_at.desc(), InteractionEvent.id.desc())
            .limit(RECENT_VIEW_LIMIT)
            .all()
        )
        return {row.category for row in rows}

    def _not_interested_ids(self, user_id: str) -> Set[str]:
        rows = (
            self.db.query(InteractionEvent.article_id)
            .filter(
                InteractionEvent.user_id == user_id,
                InteractionEvent.type == InteractionType.NOT_INTERESTED,
            )
            .distinct()
            .all()
        )
        return {row.article_id for row in rows}

    def _trending_fallback(self, excluded: Set[str]) -> List[Article]:
        query = self.db.query(Article)
        if excluded:
            query = query.filter(Article.id.notin_(sorted(excluded)))
        return (
            query.order_by(Article.views.desc(), Article.published_at.desc())
            .limit(TRENDING_FALLBACK_LIMIT)
            .all()
        )

    def get_recommendations(self, user_id: str) -> List[Article]:
        with store_call(self.db, "load recommendations"):
            require_user(self.db, user_id)

            categories = self._interest_categories(user_id) | self._recent_view_categories(user_id)
            excluded = self._not_interested_ids(user_id)

            if not categories:
                articles = self._trending_fallback(excluded)
                logger.info(f"[recommender] user={user_id} has no categories, serving {len(articles)} trending")
                return articles

            query = self.db.query(Article).filter(Article.category.in_(sorted(categories)))
            if excluded:
                query = query.filter(Article.id.notin_(sorted(excluded)))
            articles = query.order_by(Article.published_at.desc()).limit(RECOMMENDATION_LIMIT).all()

        logger.info(
            f"[recommender] user={user_id} categories={sorted(categories)} "
            f"excluded={len(excluded)} -> {len(articles)} articles"
        )
        return articles

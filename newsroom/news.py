import logging
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from sqlalchemy.orm import Session

from newsroom.errors import InvalidInput, NotFound, store_call
from newsroom.models import Article, as_utc
from newsroom.schemas import ArticleIngest, SearchFilters

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100
SUGGESTION_LIMIT = 5

# "month" is a flat 30 days rather than a calendar month
DATE_WINDOWS = {
    "week": timedelta(days=7),
    "month": timedelta(days=30),
}


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so % and _ in a query match themselves."""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def page_bounds(page: int, page_size: int) -> tuple[int, int]:
    """Translate 1-based page/page_size into (offset, limit)."""
    if page < 1:
        raise InvalidInput("page must be >= 1")
    if not 1 <= page_size <= MAX_PAGE_SIZE:
        raise InvalidInput(f"page_size must be between 1 and {MAX_PAGE_SIZE}")
    return (page - 1) * page_size, page_size


def date_cutoff(window: str, now: Optional[datetime] = None) -> Optional[datetime]:
    """Earliest published_at admitted by a date filter, or None for "all"."""
    now = as_utc(now) if now else datetime.now(timezone.utc)
    if window == "all":
        return None
    if window == "today":
        return now.replace(hour=0, minute=0, second=0, microsecond=0)
    if window in DATE_WINDOWS:
        return now - DATE_WINDOWS[window]
    raise InvalidInput(f"unknown date filter '{window}'")


class NewsService:
    """Article catalog: ingestion, listings, search and suggestions."""

    def __init__(self, db: Session):
        self.db = db

    def ingest(self, articles: List[ArticleIngest]) -> int:
        """
        Upsert a batch of articles.

        Existing rows get their descriptive fields refreshed; the view counter
        is never reset by re-ingestion.
        """
        with store_call(self.db, "ingest articles"):
            for incoming in articles:
                fields = incoming.model_dump()
                existing = self.db.get(Article, incoming.id)
                if existing is None:
                    self.db.add(Article(**fields))
                else:
                    for name, value in fields.items():
                        setattr(existing, name, value)
            self.db.commit()

        logger.info(f"[news] Ingested {len(articles)} articles")
        return len(articles)

    def _page(self, query, page: int, page_size: int) -> List[Article]:
        offset, limit = page_bounds(page, page_size)
        with store_call(self.db, "list articles"):
            return query.offset(offset).limit(limit).all()

    def latest(self, page: int = 1, page_size: int = 10) -> List[Article]:
        query = self.db.query(Article).order_by(Article.published_at.desc())
        return self._page(query, page, page_size)

    def trending(self, page: int = 1, page_size: int = 5) -> List[Article]:
        """Most viewed first. Trending is raw view count, not recency-weighted."""
        query = self.db.query(Article).order_by(Article.views.desc(), Article.published_at.desc())
        return self._page(query, page, page_size)

    def by_category(self, category: str, page: int = 1, page_size: int = 10) -> List[Article]:
        if not category or not category.strip():
            raise InvalidInput("category must not be blank")
        query = (
            self.db.query(Article)
            .filter(Article.category == category.strip())
            .order_by(Article.published_at.desc())
        )
        return self._page(query, page, page_size)

    def get(self, article_id: str) -> Article:
        with store_call(self.db, "load article"):
            article = self.db.get(Article, article_id)
        if article is None:
            raise NotFound(f"article '{article_id}' not found")
        return article

    def _title_matches(self, query, text: str):
        # Every whitespace-separated term must appear in the title, wildcards taken literally
        for term in text.split():
            query = query.filter(Article.title.ilike(f"%{escape_like(term)}%", escape="\\"))
        return query

    def search(
        self,
        text: str = "",
        filters: Optional[SearchFilters] = None,
        page: int = 1,
        page_size: int = 12,
    ) -> List[Article]:
        filters = filters or SearchFilters()
        query = self._title_matches(self.db.query(Article), text or "")

        if filters.category != "all":
            query = query.filter(Article.category == filters.category)
        if filters.source != "all":
            query = query.filter(Article.source == filters.source)

        cutoff = date_cutoff(filters.date)
        if cutoff is not None:
            query = query.filter(Article.published_at >= cutoff)

        if filters.sort_by == "popularity":
            query = query.order_by(Article.views.desc(), Article.published_at.desc())
        else:
            # No ranking backend, so "relevance" orders like "date"
            query = query.order_by(Article.published_at.desc())

        articles = self._page(query, page, page_size)
        logger.info(f"[news] search q='{text}' filters={filters.model_dump()} -> {len(articles)} results")
        return articles

    def suggestions(self, text: str) -> List[str]:
        """Titles matching a partial query, for search-box autocomplete."""
        if not text or not text.strip():
            return []
        query = self._title_matches(self.db.query(Article.title), text)
        with store_call(self.db, "load suggestions"):
            rows = query.order_by(Article.views.desc()).limit(SUGGESTION_LIMIT).all()
        return [row.title for row in rows]

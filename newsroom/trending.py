import logging
from typing import Dict, List

from sqlalchemy.orm import Session

from newsroom.errors import InvalidInput, store_call
from newsroom.models import Article
from newsroom.schemas import TrendingTopic

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Topic heuristic: word counts over the titles of the most-viewed articles.
# No stemming and no multi-word phrases.
# ---------------------------------------------------------------------------

ARTICLE_SAMPLE_SIZE = 50
TOPIC_LIMIT = 10
MIN_TOKEN_LENGTH = 4  # tokens of 3 characters or fewer are dropped
STOP_WORDS = frozenset({"the", "and", "that", "this", "with", "from"})


def extract_tokens(title: str) -> List[str]:
    """Lower-case, whitespace-split and filter a title into topic candidates."""
    return [
        word
        for word in (title or "").lower().split()
        if len(word) >= MIN_TOKEN_LENGTH and word not in STOP_WORDS
    ]


def rank_topics(articles) -> List[TrendingTopic]:
    """
    Count tokens across (title, category) pairs and return the top topics.

    A topic keeps the category of the article it was first seen in. Equal
    counts stay in first-encountered order (dicts keep insertion order and
    sorted() is stable).
    """
    counts: Dict[str, int] = {}
    categories: Dict[str, str] = {}
    for title, category in articles:
        for token in extract_tokens(title):
            if token not in counts:
                counts[token] = 0
                categories[token] = category
            counts[token] += 1

    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return [
        TrendingTopic(topic=topic, count=count, category=categories[topic])
        for topic, count in ranked[:TOPIC_LIMIT]
    ]


class TrendingTopicExtractor:
    def __init__(self, db: Session):
        self.db = db

    def get_trending_topics(self, category: str = "all") -> List[TrendingTopic]:
        if category is None or not category.strip():
            raise InvalidInput("category filter must not be blank")
        category = category.strip()

        with store_call(self.db, "load trending articles"):
            query = self.db.query(Article.title, Article.category)
            if category != "all":
                query = query.filter(Article.category == category)
            rows = (
                query.order_by(Article.views.desc(), Article.published_at.desc())
                .limit(ARTICLE_SAMPLE_SIZE)
                .all()
            )

        topics = rank_topics((row.title, row.category) for row in rows)
        logger.info(f"[trending] category={category} scanned {len(rows)} articles -> {len(topics)} topics")
        return topics

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from newsroom.database import get_db
from newsroom.news import NewsService
from newsroom.recorder import InteractionRecorder
from newsroom.schemas import (
    ArticleIngest,
    ArticleResponse,
    ArticleSummary,
    InteractionEventResponse,
    InteractionRequest,
    SearchFilters,
    TrendingTopic,
    ViewRecorded,
    ViewRequest,
)
from newsroom.summarizer import ArticleSummarizer, summarizer
from newsroom.trending import TrendingTopicExtractor

logger = logging.getLogger(__name__)

router = APIRouter()


def get_news(db: Session = Depends(get_db)) -> NewsService:
    return NewsService(db)


def get_recorder(db: Session = Depends(get_db)) -> InteractionRecorder:
    return InteractionRecorder(db)


def get_trending(db: Session = Depends(get_db)) -> TrendingTopicExtractor:
    return TrendingTopicExtractor(db)


def get_summarizer() -> ArticleSummarizer:
    return summarizer


@router.post("/ingest", status_code=200)
def ingest(articles: List[ArticleIngest], news: NewsService = Depends(get_news)):
    """Upsert a batch of articles. Returns an acknowledgment with the count received."""
    logger.info(f"[/ingest] Received batch of {len(articles)} articles")
    received = news.ingest(articles)
    return {"status": "ok", "received": received}


@router.get("/articles/latest", response_model=List[ArticleResponse])
def latest(page: int = 1, page_size: int = 10, news: NewsService = Depends(get_news)):
    return news.latest(page, page_size)


@router.get("/articles/trending", response_model=List[ArticleResponse])
def trending_articles(page: int = 1, page_size: int = 5, news: NewsService = Depends(get_news)):
    """Most viewed articles first."""
    return news.trending(page, page_size)


@router.get("/articles/search", response_model=List[ArticleResponse])
def search(
    q: str = "",
    filters: SearchFilters = Depends(),
    page: int = 1,
    page_size: int = 12,
    news: NewsService = Depends(get_news),
):
    return news.search(q, filters, page, page_size)


@router.get("/articles/suggestions", response_model=List[str])
def suggestions(q: str = "", news: NewsService = Depends(get_news)):
    return news.suggestions(q)


@router.get("/articles/category/{category}", response_model=List[ArticleResponse])
def by_category(category: str, page: int = 1, page_size: int = 10, news: NewsService = Depends(get_news)):
    return news.by_category(category, page, page_size)


@router.get("/articles/{article_id}/summary", response_model=ArticleSummary)
def summarize(
    article_id: str,
    news: NewsService = Depends(get_news),
    service: ArticleSummarizer = Depends(get_summarizer),
):
    """
    Summarize the article's page. Falls back to the description or title
    (summarized=false) when the page or the model is unavailable.
    """
    return service.summarize(news.get(article_id))


@router.post("/articles/{article_id}/view", response_model=ViewRecorded)
def record_view(
    article_id: str,
    body: Optional[ViewRequest] = None,
    recorder: InteractionRecorder = Depends(get_recorder),
):
    """
    Count a view. With a user_id the view is also tracked for recommendations.
    A tracking failure is reported in the body (tracked=false) but still returns 200.
    """
    user_id = body.user_id if body else None
    return recorder.record_view(user_id, article_id)


@router.post("/articles/{article_id}/not-interested", response_model=InteractionEventResponse)
def not_interested(
    article_id: str,
    body: InteractionRequest,
    recorder: InteractionRecorder = Depends(get_recorder),
):
    return recorder.record_not_interested(body.user_id, article_id)


@router.get("/topics/trending", response_model=List[TrendingTopic])
def trending_topics(category: str = "all", extractor: TrendingTopicExtractor = Depends(get_trending)):
    return extractor.get_trending_topics(category)

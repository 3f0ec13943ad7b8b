from datetime import datetime
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from newsroom.models import InteractionType, InterestFrequency, NewsletterSchedule, as_utc


# ---------------------------------------------------------------------------
# Articles
# ---------------------------------------------------------------------------

class ArticleIngest(BaseModel):
    """Shape expected from the /ingest endpoint."""
    id: str
    title: str
    description: Optional[str] = None
    url: Optional[str] = None
    image_url: Optional[str] = None
    published_at: datetime
    source: str
    category: str

    @field_validator("published_at")
    @classmethod
    def _published_at_utc(cls, value: datetime) -> datetime:
        return as_utc(value)


class ArticleResponse(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    url: Optional[str] = None
    image_url: Optional[str] = None
    published_at: datetime
    source: str
    category: str
    views: int = 0

    # Allows Pydantic to read data directly from SQLAlchemy model instances
    model_config = ConfigDict(from_attributes=True)


class SearchFilters(BaseModel):
    category: str = "all"
    source: str = "all"
    date: Literal["all", "today", "week", "month"] = "all"
    sort_by: Literal["relevance", "date", "popularity"] = "relevance"


# ---------------------------------------------------------------------------
# Users and interests
# ---------------------------------------------------------------------------

class UserCreate(BaseModel):
    email: str
    is_premium: bool = False


class UserResponse(BaseModel):
    id: str
    email: str
    is_premium: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class Interest(BaseModel):
    category: str
    keywords: List[str] = Field(default_factory=list)
    frequency: InterestFrequency = InterestFrequency.DAILY

    model_config = ConfigDict(from_attributes=True)


# ---------------------------------------------------------------------------
# Interactions
# ---------------------------------------------------------------------------

class ViewRequest(BaseModel):
    user_id: Optional[str] = None  # anonymous readers only bump the counter


class InteractionRequest(BaseModel):
    user_id: str


class InteractionEventResponse(BaseModel):
    id: int
    user_id: str
    article_id: str
    category: str
    source: str
    type: InteractionType
    value: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ViewRecorded(BaseModel):
    """
    Outcome of record_view. The counter increment is committed before the
    per-user event is written, so tracked=False with an error message means
    the view counted but the event write failed.
    """
    article_id: str
    views: int
    tracked: bool
    error: Optional[str] = None


class ArticleSummary(BaseModel):
    """summarized=False means summary holds the description or title fallback."""
    article_id: str
    summary: str
    summarized: bool


# ---------------------------------------------------------------------------
# Trending and analytics
# ---------------------------------------------------------------------------

class TrendingTopic(BaseModel):
    topic: str
    count: int
    category: str


class EngagementRates(BaseModel):
    total: int
    view_rate: float
    bookmark_rate: float
    not_interested_rate: float


class RecommendationAnalytics(BaseModel):
    total_recommendations: int
    view_rate: float
    bookmark_rate: float
    not_interested_rate: float
    by_category: Dict[str, EngagementRates]
    by_source: Dict[str, EngagementRates]


# ---------------------------------------------------------------------------
# Bookmarks
# ---------------------------------------------------------------------------

class BookmarkCreate(BaseModel):
    article_id: str
    tags: List[str] = Field(default_factory=list)


class BookmarkTagsUpdate(BaseModel):
    tags: List[str]


class BookmarkResponse(BaseModel):
    id: str
    user_id: str
    article_id: str
    tags: List[str]
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# ---------------------------------------------------------------------------
# Newsletters
# ---------------------------------------------------------------------------

class NewsletterCreate(BaseModel):
    title: str
    description: Optional[str] = None
    schedule: NewsletterSchedule = NewsletterSchedule.WEEKLY
    categories: List[str] = Field(default_factory=list)
    keywords: List[str] = Field(default_factory=list)


class NewsletterUpdate(BaseModel):
    """Partial update: only the fields actually sent are applied."""
    title: Optional[str] = None
    description: Optional[str] = None
    schedule: Optional[NewsletterSchedule] = None
    categories: Optional[List[str]] = None
    keywords: Optional[List[str]] = None
    is_active: Optional[bool] = None


class NewsletterResponse(BaseModel):
    id: str
    user_id: str
    title: str
    description: Optional[str] = None
    schedule: NewsletterSchedule
    categories: List[str]
    keywords: List[str]
    is_active: bool
    subscriber_count: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)

from newsroom.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """
    Normalize a timestamp to UTC. Naive values are taken to already be UTC.

    SQLite drops the offset when storing a DateTime, so everything written to
    or compared against a DateTime column goes through here first.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


def _values(enum_cls):
    # Persist the lower-case values ("not_interested"), not the member names
    return [member.value for member in enum_cls]


class InteractionType(str, enum.Enum):
    VIEW = "view"
    BOOKMARK = "bookmark"
    NOT_INTERESTED = "not_interested"


class InterestFrequency(str, enum.Enum):
    DAILY = "daily"
    WEEKLY = "weekly"


class NewsletterSchedule(str, enum.Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class Article(Base):
    __tablename__ = "articles"

    # ID comes from the ingesting client (e.g. a URL hash), not auto-generated
    id = Column(String, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    url = Column(String, nullable=True)
    image_url = Column(String, nullable=True)
    published_at = Column(DateTime, nullable=False, index=True)
    source = Column(String, nullable=False)          # e.g. "reuters", "ars-technica"
    category = Column(String, nullable=False, index=True)

    # Global counter, only ever touched by the atomic increment in the recorder
    views = Column(Integer, nullable=False, default=0)

    ingested_at = Column(DateTime, default=_utcnow)


class User(Base):
    __tablename__ = "users"

    id = Column(String, primary_key=True, default=_new_id)
    email = Column(String, nullable=False, unique=True)
    is_premium = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=_utcnow)


class UserInterest(Base):
    __tablename__ = "user_interests"
    __table_args__ = (UniqueConstraint("user_id", "category"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    category = Column(String, nullable=False)
    keywords = Column(JSON, nullable=False, default=list)
    frequency = Column(
        Enum(InterestFrequency, values_callable=_values, native_enum=False),
        nullable=False,
        default=InterestFrequency.DAILY,
    )


class InteractionEvent(Base):
    __tablename__ = "interaction_events"

    # Autoincrement id doubles as a tie-breaker for events sharing a timestamp
    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    article_id = Column(String, ForeignKey("articles.id"), nullable=False)

    # Denormalized from the article at write time
    category = Column(String, nullable=False)
    source = Column(String, nullable=False)

    type = Column(
        Enum(InteractionType, values_callable=_values, native_enum=False),
        nullable=False,
    )
    value = Column(Boolean, nullable=False, default=True)  # bookmark toggle direction
    created_at = Column(DateTime, nullable=False, default=_utcnow, index=True)


class Bookmark(Base):
    __tablename__ = "bookmarks"
    __table_args__ = (UniqueConstraint("user_id", "article_id"),)

    id = Column(String, primary_key=True, default=_new_id)
    user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    article_id = Column(String, ForeignKey("articles.id"), nullable=False)
    tags = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime, nullable=False, default=_utcnow)


class Newsletter(Base):
    __tablename__ = "newsletters"

    id = Column(String, primary_key=True, default=_new_id)
    user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    schedule = Column(
        Enum(NewsletterSchedule, values_callable=_values, native_enum=False),
        nullable=False,
        default=NewsletterSchedule.WEEKLY,
    )
    categories = Column(JSON, nullable=False, default=list)
    keywords = Column(JSON, nullable=False, default=list)
    is_active = Column(Boolean, nullable=False, default=True)
    subscriber_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=_utcnow)

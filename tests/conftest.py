"""
Shared fixtures: an in-memory SQLite session per test plus small row factories
that insert directly into the DB, bypassing the services under test.
"""
from datetime import datetime, timedelta, timezone
from itertools import count

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from newsroom.database import Base
from newsroom.models import Article, InteractionEvent, InteractionType, User, UserInterest

BASE_TIME = datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def db():
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    Session = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = Session()
    yield session
    session.close()
    engine.dispose()


@pytest.fixture
def add_article(db):
    """Insert an Article; each call gets a later published_at unless one is given."""
    seq = count()

    def _add(**kwargs) -> Article:
        n = next(seq)
        defaults = {
            "id": f"article-{n}",
            "title": f"Test Article {n}",
            "description": None,
            "url": f"https://example.com/{n}",
            "image_url": None,
            "published_at": BASE_TIME + timedelta(hours=n),
            "source": "test-source",
            "category": "technology",
            "views": 0,
        }
        defaults.update(kwargs)
        article = Article(**defaults)
        db.add(article)
        db.commit()
        return article

    return _add


@pytest.fixture
def add_user(db):
    seq = count()

    def _add(**kwargs) -> User:
        n = next(seq)
        defaults = {"id": f"user-{n}", "email": f"user{n}@example.com", "is_premium": False}
        defaults.update(kwargs)
        user = User(**defaults)
        db.add(user)
        db.commit()
        return user

    return _add


@pytest.fixture
def add_interest(db):
    def _add(user_id: str, category: str, keywords=None) -> UserInterest:
        interest = UserInterest(user_id=user_id, category=category, keywords=keywords or [])
        db.add(interest)
        db.commit()
        return interest

    return _add


@pytest.fixture
def add_event(db):
    """Insert an InteractionEvent for an existing article, copying its category/source."""
    def _add(user_id: str, article: Article, kind: InteractionType, value: bool = True,
             created_at: datetime = None) -> InteractionEvent:
        event = InteractionEvent(
            user_id=user_id,
            article_id=article.id,
            category=article.category,
            source=article.source,
            type=kind,
            value=value,
            created_at=created_at or datetime.now(timezone.utc),
        )
        db.add(event)
        db.commit()
        return event

    return _add

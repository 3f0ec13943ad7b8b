import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from newsroom.analytics import AnalyticsAggregator
from newsroom.database import get_db
from newsroom.interests import InterestService
from newsroom.recommender import RecommendationGenerator
from newsroom.schemas import (
    ArticleResponse,
    Interest,
    RecommendationAnalytics,
    UserCreate,
    UserResponse,
)
from newsroom.users import UserService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users")


def get_users(db: Session = Depends(get_db)) -> UserService:
    return UserService(db)


def get_interests(db: Session = Depends(get_db)) -> InterestService:
    return InterestService(db)


def get_recommender(db: Session = Depends(get_db)) -> RecommendationGenerator:
    return RecommendationGenerator(db)


def get_aggregator(db: Session = Depends(get_db)) -> AnalyticsAggregator:
    return AnalyticsAggregator(db)


@router.post("", response_model=UserResponse, status_code=201)
def register(body: UserCreate, users: UserService = Depends(get_users)):
    return users.register(body.email, body.is_premium)


@router.get("/{user_id}", response_model=UserResponse)
def get_user(user_id: str, users: UserService = Depends(get_users)):
    return users.get_user(user_id)


@router.get("/{user_id}/interests", response_model=List[Interest])
def read_interests(user_id: str, interests: InterestService = Depends(get_interests)):
    return interests.get_interests(user_id)


@router.put("/{user_id}/interests", response_model=List[Interest])
def replace_interests(
    user_id: str,
    body: List[Interest],
    interests: InterestService = Depends(get_interests),
):
    """Replace the user's interests wholesale."""
    return interests.save_interests(user_id, body)


@router.get("/{user_id}/recommendations", response_model=List[ArticleResponse])
def recommendations(user_id: str, recommender: RecommendationGenerator = Depends(get_recommender)):
    return recommender.get_recommendations(user_id)


@router.get("/{user_id}/analytics", response_model=RecommendationAnalytics)
def analytics(user_id: str, aggregator: AnalyticsAggregator = Depends(get_aggregator)):
    """Engagement rates over the last 30 days, overall and by category/source."""
    return aggregator.get_analytics(user_id)

import logging
from typing import List

from sqlalchemy.orm import Session

from newsroom.errors import InvalidInput, store_call
from newsroom.models import UserInterest
from newsroom.schemas import Interest
from newsroom.users import require_user

logger = logging.getLogger(__name__)


def validate_interests(interests: List[Interest]) -> List[Interest]:
    """
    Normalize and check an interest list before it replaces the stored one.

    Categories and keywords are stripped; blanks and repeated categories are rejected.
    """
    cleaned = []
    seen = set()
    for interest in interests:
        category = interest.category.strip()
        if not category:
            raise InvalidInput("interest category must not be blank")
        if category in seen:
            raise InvalidInput(f"category '{category}' listed more than once")
        seen.add(category)

        keywords = [k.strip() for k in interest.keywords]
        if any(not k for k in keywords):
            raise InvalidInput(f"blank keyword in category '{category}'")

        cleaned.append(Interest(category=category, keywords=keywords, frequency=interest.frequency))
    return cleaned


class InterestService:
    def __init__(self, db: Session):
        self.db = db

    def get_interests(self, user_id: str) -> List[UserInterest]:
        with store_call(self.db, "load interests"):
            require_user(self.db, user_id)
            return (
                self.db.query(UserInterest)
                .filter(UserInterest.user_id == user_id)
                .order_by(UserInterest.id)
                .all()
            )

    def save_interests(self, user_id: str, interests: List[Interest]) -> List[UserInterest]:
        """Replace the user's interests wholesale: no merging with what was stored."""
        cleaned = validate_interests(interests)

        with store_call(self.db, "save interests"):
            require_user(self.db, user_id)
            self.db.query(UserInterest).filter(UserInterest.user_id == user_id).delete()
            rows = [
                UserInterest(
                    user_id=user_id,
                    category=i.category,
                    keywords=i.keywords,
                    frequency=i.frequency,
                )
                for i in cleaned
            ]
            self.db.add_all(rows)
            self.db.commit()

        logger.info(f"[interests] Saved {len(rows)} interests for user {user_id}")
        return self.get_interests(user_id)

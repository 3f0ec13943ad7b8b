import logging
from typing import List

from sqlalchemy.orm import Session

from newsroom.errors import InvalidInput, NotFound, store_call
from newsroom.models import Newsletter
from newsroom.schemas import NewsletterCreate, NewsletterUpdate
from newsroom.users import require_user

logger = logging.getLogger(__name__)


class NewsletterService:
    """Newsletter definitions owned by a user. Sending them happens elsewhere."""

    def __init__(self, db: Session):
        self.db = db

    def _require(self, newsletter_id: str) -> Newsletter:
        newsletter = self.db.get(Newsletter, newsletter_id)
        if newsletter is None:
            raise NotFound(f"newsletter '{newsletter_id}' not found")
        return newsletter

    def list_for_user(self, user_id: str) -> List[Newsletter]:
        with store_call(self.db, "list newsletters"):
            require_user(self.db, user_id)
            return (
                self.db.query(Newsletter)
                .filter(Newsletter.user_id == user_id)
                .order_by(Newsletter.created_at)
                .all()
            )

    def create(self, user_id: str, data: NewsletterCreate) -> Newsletter:
        if not data.title.strip():
            raise InvalidInput("newsletter title must not be blank")

        with store_call(self.db, "create newsletter"):
            require_user(self.db, user_id)
            newsletter = Newsletter(user_id=user_id, is_active=True, **data.model_dump())
            newsletter.title = newsletter.title.strip()
            self.db.add(newsletter)
            self.db.commit()
            self.db.refresh(newsletter)

        logger.info(f"[newsletters] user={user_id} created newsletter {newsletter.id} ({newsletter.schedule.value})")
        return newsletter

    def update(self, newsletter_id: str, changes: NewsletterUpdate) -> Newsletter:
        updates = changes.model_dump(exclude_unset=True)
        if "title" in updates and not (updates["title"] or "").strip():
            raise InvalidInput("newsletter title must not be blank")
        nulled = [name for name, value in updates.items() if value is None and name != "description"]
        if nulled:
            raise InvalidInput(f"fields cannot be null: {', '.join(nulled)}")

        with store_call(self.db, "update newsletter"):
            newsletter = self._require(newsletter_id)
            for name, value in updates.items():
                setattr(newsletter, name, value)
            self.db.commit()
            self.db.refresh(newsletter)

        logger.info(f"[newsletters] Updated {newsletter_id}: {sorted(updates)}")
        return newsletter

    def delete(self, newsletter_id: str) -> None:
        with store_call(self.db, "delete newsletter"):
            newsletter = self._require(newsletter_id)
            self.db.delete(newsletter)
            self.db.commit()
        logger.info(f"[newsletters] Deleted {newsletter_id}")

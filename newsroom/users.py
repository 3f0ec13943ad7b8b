import logging

from sqlalchemy.orm import Session

from newsroom.errors import InvalidInput, NotFound, store_call
from newsroom.models import User

logger = logging.getLogger(__name__)


def require_user(db: Session, user_id: str) -> User:
    """Return the user or raise NotFound. Shared by every per-user operation."""
    user = db.get(User, user_id)
    if user is None:
        raise NotFound(f"user '{user_id}' not found")
    return user


class UserService:
    """Minimal user registry. Credentials live with the auth provider, not here."""

    def __init__(self, db: Session):
        self.db = db

    def register(self, email: str, is_premium: bool = False) -> User:
        email = (email or "").strip().lower()
        if "@" not in email:
            raise InvalidInput(f"'{email}' is not an email address")

        with store_call(self.db, "register user"):
            if self.db.query(User).filter(User.email == email).first() is not None:
                raise InvalidInput(f"email '{email}' is already registered")

            user = User(email=email, is_premium=is_premium)
            self.db.add(user)
            self.db.commit()
            self.db.refresh(user)

        logger.info(f"[users] Registered user {user.id} (premium={user.is_premium})")
        return user

    def get_user(self, user_id: str) -> User:
        with store_call(self.db, "load user"):
            return require_user(self.db, user_id)

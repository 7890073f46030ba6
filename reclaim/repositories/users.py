from typing import Optional

from sqlalchemy.orm import Session

from ..core.database import utcnow
from ..models.user import User


class UserRepository:
    """User-credential store."""

    def __init__(self, db: Session):
        self.db = db

    def find_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email).first()

    def add(self, user: User) -> User:
        self.db.add(user)
        return user

    def update_password_hash(self, user: User, password_hash: str) -> None:
        # Not committed here; the caller owns the transaction
        user.password_hash = password_hash
        user.updated_at = utcnow()
        self.db.flush()

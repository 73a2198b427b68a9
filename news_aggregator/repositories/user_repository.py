from typing import List, Optional

from sqlalchemy.orm import Session

from ..core.database import SessionLocal
from ..models.user import User
from ..news.refresher import UserPreferenceSnapshot


class UserRepository:
    def __init__(self, db: Session):
        self.db = db

    def create(self, email: str, name: str, password_hash: str, preferences: Optional[List[str]] = None) -> User:
        user = User(
            email=email.lower(),
            name=name.strip(),
            password_hash=password_hash,
            preferences=list(preferences or []),
        )
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self.db.query(User).filter(User.id == user_id).first()

    def get_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email.lower()).first()

    def update_preferences(self, user: User, preferences: List[str]) -> User:
        user.preferences = list(preferences)
        self.db.commit()
        self.db.refresh(user)
        return user

    def list_preference_snapshots(self) -> List[UserPreferenceSnapshot]:
        users = self.db.query(User).order_by(User.id).all()
        return [
            UserPreferenceSnapshot(user_id=user.id, preferences=tuple(user.preferences or ()))
            for user in users
            if user.preferences
        ]


def load_preference_snapshots() -> List[UserPreferenceSnapshot]:
    """Read every user's current preferences in a short-lived session."""
    db = SessionLocal()
    try:
        return UserRepository(db).list_preference_snapshots()
    finally:
        db.close()

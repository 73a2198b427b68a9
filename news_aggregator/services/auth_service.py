from typing import List, Optional, Tuple

import structlog

from ..core.exceptions import AuthenticationError, UserExistsError
from ..core.security import create_access_token, hash_password, verify_password
from ..models.user import User
from ..repositories.user_repository import UserRepository

logger = structlog.get_logger(__name__)


class AuthService:
    """Registration and login on top of the user repository."""

    def __init__(self, users: UserRepository):
        self.users = users

    def register(self, email: str, password: str, name: str, preferences: Optional[List[str]] = None) -> Tuple[User, str]:
        if self.users.get_by_email(email):
            raise UserExistsError(email.lower())

        user = self.users.create(
            email=email,
            name=name,
            password_hash=hash_password(password),
            preferences=preferences,
        )
        logger.info("User registered", user_id=user.id)
        return user, create_access_token(user.id, user.email)

    def login(self, email: str, password: str) -> Tuple[User, str]:
        user = self.users.get_by_email(email)
        if not user or not verify_password(password, user.password_hash):
            logger.info("Login failed", email=email.lower())
            raise AuthenticationError()

        return user, create_access_token(user.id, user.email)

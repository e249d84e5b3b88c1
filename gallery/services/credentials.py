"""
Credential store: user records and password checks.

Passwords are hashed with werkzeug's salted scrypt and compared in constant
time. The very first user created becomes the admin.
"""

import threading
from functools import lru_cache
from typing import Optional

from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from werkzeug.security import check_password_hash, generate_password_hash

from gallery.core.errors import DuplicateUsername, InvalidCredentials, InvalidInput
from gallery.models.user import User

# Serializes the "is this the first user" check with the insert
_create_lock = threading.Lock()


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    return generate_password_hash("not-a-real-password")


class CredentialStore:
    def __init__(self, db: Session):
        self.db = db

    def get_by_username(self, username: str) -> Optional[User]:
        return self.db.query(User).filter(User.username == username).first()

    def create_user(self, username: str, password: str) -> User:
        username = (username or "").strip()
        if not username or not password:
            raise InvalidInput("Username and password required")

        if self.get_by_username(username):
            raise DuplicateUsername()

        password_hash = generate_password_hash(password)

        with _create_lock:
            if self.get_by_username(username):
                raise DuplicateUsername()
            is_first = self.db.query(User.id).first() is None

            user = User(username=username, password_hash=password_hash, is_admin=is_first)
            self.db.add(user)
            try:
                self.db.commit()
            except IntegrityError:
                self.db.rollback()
                raise DuplicateUsername()

        self.db.refresh(user)
        logger.info("Created user {} (id={}, admin={})", user.username, user.id, user.is_admin)
        return user

    def verify_user(self, username: str, password: str) -> User:
        user = self.get_by_username((username or "").strip())
        if user is None:
            # Same hashing cost as a wrong password
            check_password_hash(_dummy_hash(), password or "")
            raise InvalidCredentials()

        if not check_password_hash(user.password_hash, password or ""):
            raise InvalidCredentials()
        return user

    def bootstrap_admin(self, username: Optional[str], password: Optional[str]) -> Optional[User]:
        """Create the configured seed account unless it already exists."""
        if not username or not password:
            return None

        existing = self.get_by_username(username.strip())
        if existing is not None:
            return existing

        user = self.create_user(username, password)
        if not user.is_admin:
            logger.warning("Seed account {} created without admin rights: users already existed", username)
        return user

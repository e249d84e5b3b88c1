# gallery/services/sessions.py
import secrets
from dataclasses import dataclass
from datetime import timedelta
from typing import Callable, Optional

from loguru import logger
from sqlalchemy.orm import Session

from gallery.models.database import utcnow
from gallery.models.session import AuthSession
from gallery.models.user import User


@dataclass(frozen=True)
class AuthenticatedIdentity:
    user_id: int
    username: str
    is_admin: bool


class SessionAuthority:
    """Issues, resolves and revokes server-side login sessions.

    Anonymous -> Authenticated on ``issue``; back to Anonymous on ``revoke``
    or once ``expires_at`` has passed. The admin flag is copied at issue time.
    """

    def __init__(self, db: Session, ttl: timedelta, clock: Callable = utcnow):
        self.db = db
        self.ttl = ttl
        self.clock = clock

    def issue(self, user: User) -> str:
        self.purge_expired()

        now = self.clock()
        token = secrets.token_urlsafe(32)
        self.db.add(
            AuthSession(
                token=token,
                user_id=user.id,
                username=user.username,
                is_admin=user.is_admin,
                created_at=now,
                expires_at=now + self.ttl,
            )
        )
        self.db.commit()
        logger.info("Session issued for {}", user.username)
        return token

    def resolve(self, token: Optional[str]) -> Optional[AuthenticatedIdentity]:
        if not token:
            return None

        record = self.db.get(AuthSession, token)
        if record is None:
            return None

        if record.expires_at <= self.clock():
            username = record.username
            self.db.delete(record)
            self.db.commit()
            logger.info("Session for {} expired", username)
            return None

        return AuthenticatedIdentity(
            user_id=record.user_id,
            username=record.username,
            is_admin=record.is_admin,
        )

    def revoke(self, token: Optional[str]) -> None:
        if not token:
            return
        deleted = self.db.query(AuthSession).filter(AuthSession.token == token).delete()
        self.db.commit()
        if deleted:
            logger.info("Session revoked")

    def purge_expired(self) -> int:
        deleted = (
            self.db.query(AuthSession)
            .filter(AuthSession.expires_at <= self.clock())
            .delete(synchronize_session=False)
        )
        self.db.commit()
        return deleted

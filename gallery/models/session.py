# gallery/models/session.py
from sqlalchemy import Boolean, Column, DateTime, Integer, String

from gallery.models.database import Base, utcnow


class AuthSession(Base):
    """Server-side login state. The cookie only carries ``token``."""

    __tablename__ = "sessions"

    token = Column(String(64), primary_key=True)
    user_id = Column(Integer, nullable=False, index=True)
    username = Column(String(50), nullable=False)
    is_admin = Column(Boolean, nullable=False)   # cached at login
    created_at = Column(DateTime, default=utcnow)
    expires_at = Column(DateTime, nullable=False, index=True)

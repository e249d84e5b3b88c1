"""
Request-scoped dependencies: registries bound to the request's DB session,
identity resolution and the two access guards.
"""

from datetime import timedelta
from typing import Optional

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from gallery.core.errors import Forbidden, Unauthenticated
from gallery.models.database import get_db
from gallery.services.categories import CategoryRegistry
from gallery.services.credentials import CredentialStore
from gallery.services.images import ImageRegistry
from gallery.services.sessions import AuthenticatedIdentity, SessionAuthority

# Key of the session token inside the signed cookie
SESSION_TOKEN_KEY = "token"


def get_credential_store(db: Session = Depends(get_db)) -> CredentialStore:
    return CredentialStore(db)


def get_session_authority(request: Request, db: Session = Depends(get_db)) -> SessionAuthority:
    ttl = timedelta(seconds=request.app.state.settings.session_ttl_seconds)
    return SessionAuthority(db, ttl=ttl)


def get_category_registry(db: Session = Depends(get_db)) -> CategoryRegistry:
    return CategoryRegistry(db)


def get_image_registry(request: Request, db: Session = Depends(get_db)) -> ImageRegistry:
    return ImageRegistry(
        db,
        storage=request.app.state.storage,
        max_size=request.app.state.settings.max_upload_size_bytes,
    )


# --- helper: resolve the logged in identity from the session cookie ---
def get_identity(
    request: Request,
    sessions: SessionAuthority = Depends(get_session_authority),
) -> Optional[AuthenticatedIdentity]:
    token = request.session.get(SESSION_TOKEN_KEY)
    identity = sessions.resolve(token)
    if token and identity is None:
        # Expired or revoked elsewhere: drop it from the cookie too
        request.session.pop(SESSION_TOKEN_KEY, None)
    return identity


def require_authenticated(
    identity: Optional[AuthenticatedIdentity] = Depends(get_identity),
) -> AuthenticatedIdentity:
    if identity is None:
        raise Unauthenticated()
    return identity


def require_admin(
    identity: Optional[AuthenticatedIdentity] = Depends(get_identity),
) -> AuthenticatedIdentity:
    if identity is None or not identity.is_admin:
        raise Forbidden()
    return identity

# gallery/routers/auth.py
from typing import Optional

from fastapi import APIRouter, Depends, Request

from gallery.routers.deps import (
    SESSION_TOKEN_KEY,
    get_credential_store,
    get_identity,
    get_session_authority,
)
from gallery.schemas import Credentials
from gallery.services.credentials import CredentialStore
from gallery.services.sessions import AuthenticatedIdentity, SessionAuthority

router = APIRouter(prefix="/api", tags=["auth"])


@router.post("/signup")
def signup(payload: Credentials, users: CredentialStore = Depends(get_credential_store)):
    user = users.create_user(payload.username, payload.password)
    return {"message": "User created successfully", "isAdmin": user.is_admin}


@router.post("/login")
def login(
    request: Request,
    payload: Credentials,
    users: CredentialStore = Depends(get_credential_store),
    sessions: SessionAuthority = Depends(get_session_authority),
):
    user = users.verify_user(payload.username, payload.password)

    # A fresh token on every login; the old one stops working
    sessions.revoke(request.session.get(SESSION_TOKEN_KEY))
    request.session[SESSION_TOKEN_KEY] = sessions.issue(user)

    return {
        "message": "Login successful",
        "isAdmin": user.is_admin,
        "username": user.username,
    }


@router.post("/logout")
def logout(request: Request, sessions: SessionAuthority = Depends(get_session_authority)):
    sessions.revoke(request.session.get(SESSION_TOKEN_KEY))
    request.session.clear()
    return {"message": "Logged out successfully"}


@router.get("/check-auth")
def check_auth(identity: Optional[AuthenticatedIdentity] = Depends(get_identity)):
    if identity is None:
        return {"authenticated": False}
    return {
        "authenticated": True,
        "isAdmin": identity.is_admin,
        "username": identity.username,
    }

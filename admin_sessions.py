"""
BidHub Server - Session Management

Cookie-based session management for the admin panel and the marketplace API.
Session records live in a SessionStore; the cookie only carries a signed
session ID.
"""

import os
import secrets
import logging
from datetime import datetime, timezone, timedelta
from typing import Optional

from fastapi import Response
from jose import JWTError, jwt

from models.infrastructure import AdminSession
from session_store import SessionStore, MemorySessionStore

logger = logging.getLogger(__name__)

# Session configuration
SESSION_COOKIE_NAME = "bidhub.sid"
SESSION_LIFETIME_DAYS = 7

# Cookie signing
# Without BIDHUB_SESSION_SECRET a random key is used and cookies do not survive a restart
SESSION_SECRET = os.environ.get("BIDHUB_SESSION_SECRET") or secrets.token_urlsafe(32)
ALGORITHM = "HS256"

# Active session store, replaced at startup by server.py
_session_store: SessionStore = MemorySessionStore()


# ==================== Store Registry ====================

def ConfigureSessionStore(store: SessionStore) -> None:
    """
    Set the session store used by all requests

    Args:
        store: SessionStore implementation
    """
    global _session_store
    _session_store = store
    logger.info(f"Using session store: {type(store).__name__}")


def GetSessionStore() -> SessionStore:
    """FastAPI dependency returning the active session store"""
    return _session_store


# ==================== Cookie Signing ====================

def SignSessionId(session_id: str) -> str:
    """
    Sign a session ID for use as cookie value

    Args:
        session_id: Session ID

    Returns:
        str: Signed token containing the session ID
    """
    return jwt.encode({"sid": session_id}, SESSION_SECRET, algorithm=ALGORITHM)


def UnsignSessionId(cookie_value: Optional[str]) -> Optional[str]:
    """
    Verify a session cookie and extract the session ID

    Args:
        cookie_value: Raw cookie value

    Returns:
        str: Session ID if the signature is valid, None otherwise
    """
    if not cookie_value:
        return None

    try:
        payload = jwt.decode(cookie_value, SESSION_SECRET, algorithms=[ALGORITHM])
    except JWTError:
        logger.warning("Rejected session cookie with invalid signature")
        return None

    session_id = payload.get("sid")
    return session_id if isinstance(session_id, str) else None


# ==================== Session Lifecycle ====================

def CreateSession(
    store: SessionStore,
    user_id: str,
    email: str,
    lifetime_days: int = SESSION_LIFETIME_DAYS
) -> AdminSession:
    """
    Create a new session

    Args:
        store: Session store
        user_id: User ID
        email: User email
        lifetime_days: Absolute session lifetime

    Returns:
        AdminSession object with new session ID
    """
    # Generate secure random session ID
    session_id = secrets.token_urlsafe(32)

    now = datetime.now(timezone.utc)
    session = AdminSession(
        session_id=session_id,
        user_id=user_id,
        email=email,
        created_at_utc=now,
        expires_at_utc=now + timedelta(days=lifetime_days)
    )

    store.Save(session)

    logger.info(f"Created session for user '{email}' (expires in {lifetime_days} days)")

    return session


def GetSession(store: SessionStore, session_id: Optional[str]) -> Optional[AdminSession]:
    """
    Get an active session by ID

    Args:
        store: Session store
        session_id: Session ID from cookie

    Returns:
        AdminSession if valid and not expired, None otherwise
    """
    if not session_id:
        return None

    return store.Get(session_id)


def DeleteSession(store: SessionStore, session_id: str) -> None:
    """
    Delete a session (logout)

    Args:
        store: Session store
        session_id: Session ID to delete
    """
    session = store.Get(session_id)
    store.Destroy(session_id)
    if session:
        logger.info(f"Deleted session for user '{session.email}'")


def CleanupExpiredSessions(store: SessionStore) -> int:
    """
    Remove all sessions past their lifetime

    Args:
        store: Session store

    Returns:
        Number of sessions cleaned up
    """
    removed = store.CleanupExpired()

    if removed:
        logger.info(f"Cleaned up {removed} expired sessions")

    return removed


# ==================== Cookie Helpers ====================

def SetSessionCookie(response: Response, session: AdminSession) -> None:
    """
    Attach the signed session cookie to a response

    Args:
        response: Outgoing response
        session: Session the cookie refers to
    """
    max_age = int((session.expires_at_utc - datetime.now(timezone.utc)).total_seconds())
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=SignSessionId(session.session_id),
        max_age=max(max_age, 0),
        httponly=True,
        samesite="lax"
    )


def ClearSessionCookie(response: Response) -> None:
    """Remove the session cookie from the client"""
    response.delete_cookie(
        key=SESSION_COOKIE_NAME,
        path="/",
        samesite="lax"
    )

"""
BidHub Server - Authentication Endpoints

This module contains marketplace login, logout and current user endpoints.
These routes are not subject to the admin idle timeout.
"""

import logging
from fastapi import APIRouter, Depends, HTTPException, Request, Response, status

from models.auth import LoginRequest, LoginResponse, UserInfo
from auth import AuthenticateUser, GetSessionLifetimeDays, RequireUser
from admin_sessions import (
    SESSION_COOKIE_NAME, GetSessionStore, CreateSession, DeleteSession,
    UnsignSessionId, SetSessionCookie, ClearSessionCookie
)
from session_store import SessionStore


# Create logger
logger = logging.getLogger(__name__)

# Create router instance
router = APIRouter()


def DiscardRequestSession(request: Request, store: SessionStore) -> None:
    """Destroy the session referenced by the request cookie, if any"""
    session_id = UnsignSessionId(request.cookies.get(SESSION_COOKIE_NAME))
    if session_id:
        DeleteSession(store, session_id)


# ==================== Authentication Endpoints ====================

@router.post("/api/auth/login", response_model=LoginResponse, tags=["Authentication"])
async def login(
    login_request: LoginRequest,
    request: Request,
    response: Response,
    store: SessionStore = Depends(GetSessionStore)
):
    """
    Authenticate user and start a session

    Args:
        login_request: Email and password

    Returns:
        LoginResponse: Authenticated user

    Raises:
        HTTPException: If credentials are invalid
    """
    from database import db_manager

    user_data = AuthenticateUser(db_manager, login_request.email, login_request.password)

    if not user_data:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password"
        )

    # A login always starts a fresh session
    DiscardRequestSession(request, store)
    session = CreateSession(store, user_data['id'], user_data['email'], GetSessionLifetimeDays())
    SetSessionCookie(response, session)

    logger.info(f"User '{user_data['email']}' logged in successfully")

    return LoginResponse(
        user=UserInfo(id=user_data['id'], email=user_data['email'], role=user_data['role'])
    )


@router.post("/api/auth/logout", tags=["Authentication"])
async def logout(
    request: Request,
    response: Response,
    store: SessionStore = Depends(GetSessionStore)
):
    """
    Logout endpoint - destroys the session and clears the cookie
    """
    DiscardRequestSession(request, store)
    ClearSessionCookie(response)

    return {"message": "Logged out successfully"}


@router.get("/api/auth/user", response_model=UserInfo, tags=["Authentication"])
async def current_user(user: dict = Depends(RequireUser)):
    """
    Get the logged-in user

    Returns:
        UserInfo: Current user
    """
    return UserInfo(id=user['user_id'], email=user['email'], role=user['role'])

"""
BidHub Server - Admin Authentication Endpoints

This module contains admin panel authentication endpoints including
login, logout, the current admin and the idle-timeout status of the session.
"""

import logging
from fastapi import APIRouter, Depends, HTTPException, Request, Response, status

from models.auth import LoginRequest, AdminLoginResponse, UserInfo, AdminRoleInfo
from models.api import AdminSessionStatus, SessionExpiredResponse
from auth import AuthenticateUser, GetActiveAdminRole, GetIdleTimeoutMs, GetSessionLifetimeDays, RequireAdmin
from admin_sessions import GetSessionStore, CreateSession, SetSessionCookie, ClearSessionCookie
from session_store import SessionStore
from routes.auth import DiscardRequestSession


# Create logger
logger = logging.getLogger(__name__)

# Create router instance
router = APIRouter()

# Documented on every route that runs the idle-timeout check
SESSION_EXPIRED_RESPONSES = {401: {"model": SessionExpiredResponse, "description": "Session expired due to inactivity"}}


# ==================== Admin Authentication Endpoints ====================

@router.post("/api/admin/login", response_model=AdminLoginResponse, tags=["Admin"])
async def admin_login(
    login_request: LoginRequest,
    request: Request,
    response: Response,
    store: SessionStore = Depends(GetSessionStore)
):
    """
    Admin login - same as the marketplace login but requires an active admin role

    Args:
        login_request: Email and password

    Returns:
        AdminLoginResponse: Admin user and role

    Raises:
        HTTPException: 401 on invalid credentials, 403 without admin role
    """
    from database import db_manager

    user = AuthenticateUser(db_manager, login_request.email, login_request.password)

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password"
        )

    admin_role = GetActiveAdminRole(db_manager, user['id'])
    if not admin_role:
        logger.warning(f"Admin login refused for '{user['email']}': no active admin role")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required"
        )

    # Start from a fresh session so a previous session ID is never promoted to admin
    DiscardRequestSession(request, store)
    session = CreateSession(store, user['id'], user['email'], GetSessionLifetimeDays())
    SetSessionCookie(response, session)

    logger.info(f"Admin '{user['email']}' logged in with role '{admin_role['role']}'")

    return AdminLoginResponse(
        user=UserInfo(id=user['id'], email=user['email'], role=user['role']),
        adminRole=AdminRoleInfo(role=admin_role['role'], permissions=admin_role['permissions'])
    )


@router.post("/api/admin/logout", tags=["Admin"])
async def admin_logout(
    request: Request,
    response: Response,
    store: SessionStore = Depends(GetSessionStore)
):
    """
    Admin logout - destroys the session and clears the cookie
    """
    DiscardRequestSession(request, store)
    ClearSessionCookie(response)

    return {"message": "Logged out successfully"}


@router.get("/api/admin/user", response_model=AdminLoginResponse, responses=SESSION_EXPIRED_RESPONSES, tags=["Admin"])
async def admin_current_user(admin: dict = Depends(RequireAdmin)):
    """
    Get the logged-in admin and their role

    Returns:
        AdminLoginResponse: Admin user and role
    """
    return AdminLoginResponse(
        user=UserInfo(id=admin['user_id'], email=admin['email'], role=admin['role']),
        adminRole=AdminRoleInfo(
            role=admin['admin_role']['role'],
            permissions=admin['admin_role']['permissions']
        )
    )


@router.get("/api/admin/session", response_model=AdminSessionStatus, responses=SESSION_EXPIRED_RESPONSES, tags=["Admin"])
async def admin_session_status(
    admin: dict = Depends(RequireAdmin),
    idle_timeout_ms: int = Depends(GetIdleTimeoutMs)
):
    """
    Get the idle-timeout state of the current admin session
    Calling this endpoint counts as admin activity.

    Returns:
        AdminSessionStatus: Timeout, last activity and absolute expiry
    """
    session = admin['session']
    return AdminSessionStatus(
        idleTimeoutMs=idle_timeout_ms,
        lastAdminActivity=session.last_admin_activity,
        expiresAt=session.expires_at_utc.isoformat()
    )

"""
BidHub Server - Authentication Utilities

This module provides authentication functionality including:
- Password authentication against the users table
- Session lookup from the signed session cookie
- Admin idle-timeout enforcement
- Admin role and permission dependencies for protected routes

Dependency chain for admin routes:
    GetCurrentSession -> EnforceAdminSessionTimeout -> RequireAdmin -> RequirePermission
"""

import time
import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import Depends, HTTPException, Request, status

from models.database import User
from models.infrastructure import AdminSession
from managers.database_manager import DatabaseManager
from admin_sessions import SESSION_COOKIE_NAME, SESSION_LIFETIME_DAYS, GetSessionStore, GetSession, UnsignSessionId
from session_store import SessionStore
from session_timeout import ADMIN_SESSION_TIMEOUT_MS, TrackAdminActivity
from rbac import AdminHasPermission

logger = logging.getLogger(__name__)

# Bounds for the admin_session_timeout_minutes setting
MIN_ADMIN_TIMEOUT_MINUTES = 1
MAX_ADMIN_TIMEOUT_MINUTES = 24 * 60

# Bounds for the session_lifetime_days setting
MIN_SESSION_LIFETIME_DAYS = 1
MAX_SESSION_LIFETIME_DAYS = 30


# ==================== Authentication Helper Functions ====================

def AuthenticateUser(db_manager: DatabaseManager, email: str, password: str) -> Optional[dict]:
    """
    Authenticate a user with email and password

    Args:
        db_manager: DatabaseManager instance
        email: Login email
        password: Plain text password

    Returns:
        dict: User data dictionary if authentication successful, None otherwise
              Contains: id, email, role, status, last_login
    """
    session = db_manager.GetSession()

    try:
        user = session.query(User).filter(User.email == email.strip().lower()).first()

        if not user:
            return None

        if not db_manager.VerifyPassword(password, user.password_hash):
            return None

        if user.status == "suspended":
            return None

        user.last_login = datetime.now(timezone.utc)
        session.commit()

        # Return user data as dictionary to avoid SQLAlchemy session issues
        return {
            'id': user.id,
            'email': user.email,
            'role': user.role,
            'status': user.status,
            'last_login': user.last_login
        }

    finally:
        session.close()


def GetActiveAdminRole(db_manager: DatabaseManager, user_id: str) -> Optional[dict]:
    """
    Get a user's active admin role

    Args:
        db_manager: DatabaseManager instance
        user_id: User ID

    Returns:
        dict: Admin role info (id, role, permissions, active), or None if not an admin
    """
    session = db_manager.GetSession()
    try:
        admin_role = db_manager.GetActiveAdminRole(session, user_id)
        return admin_role.ToDict() if admin_role else None
    finally:
        session.close()


def GetUserInfo(db_manager: DatabaseManager, user_id: str) -> Optional[dict]:
    """Load the public fields of a user, or None if the user no longer exists"""
    session = db_manager.GetSession()
    try:
        user = session.query(User).filter(User.id == user_id).first()
        if not user:
            return None
        return {"id": user.id, "email": user.email, "role": user.role}
    finally:
        session.close()


# ==================== Clock and Configuration Dependencies ====================

def GetCurrentTimeMs() -> int:
    """FastAPI dependency returning the wall clock in milliseconds since epoch"""
    return int(time.time() * 1000)


def GetIdleTimeoutMs() -> int:
    """
    FastAPI dependency returning the admin idle timeout in milliseconds
    Read from the admin_session_timeout_minutes setting on every request.
    """
    from database import db_manager

    if db_manager is None:
        return ADMIN_SESSION_TIMEOUT_MS

    raw_value = db_manager.GetSettingValue("admin_session_timeout_minutes")
    if raw_value is None:
        return ADMIN_SESSION_TIMEOUT_MS

    try:
        minutes = int(raw_value)
    except ValueError:
        logger.warning(f"Invalid admin_session_timeout_minutes '{raw_value}', using default")
        return ADMIN_SESSION_TIMEOUT_MS

    if minutes < MIN_ADMIN_TIMEOUT_MINUTES or minutes > MAX_ADMIN_TIMEOUT_MINUTES:
        logger.warning(f"admin_session_timeout_minutes {minutes} out of range, using default")
        return ADMIN_SESSION_TIMEOUT_MS

    return minutes * 60 * 1000


def GetSessionLifetimeDays() -> int:
    """Absolute session lifetime from the session_lifetime_days setting"""
    from database import db_manager

    raw_value = db_manager.GetSettingValue("session_lifetime_days") if db_manager else None
    if raw_value is None:
        return SESSION_LIFETIME_DAYS

    try:
        days = int(raw_value)
    except ValueError:
        logger.warning(f"Invalid session_lifetime_days '{raw_value}', using default")
        return SESSION_LIFETIME_DAYS

    if days < MIN_SESSION_LIFETIME_DAYS or days > MAX_SESSION_LIFETIME_DAYS:
        logger.warning(f"session_lifetime_days {days} out of range, using default")
        return SESSION_LIFETIME_DAYS

    return days


# ==================== Session Dependencies ====================

def GetCurrentSession(
    request: Request,
    store: SessionStore = Depends(GetSessionStore)
) -> Optional[AdminSession]:
    """
    FastAPI dependency resolving the session cookie to a session

    Returns:
        AdminSession if the cookie is valid and the session exists, None otherwise
    """
    session_id = UnsignSessionId(request.cookies.get(SESSION_COOKIE_NAME))
    return GetSession(store, session_id)


def EnforceAdminSessionTimeout(
    session: Optional[AdminSession] = Depends(GetCurrentSession),
    store: SessionStore = Depends(GetSessionStore),
    now_ms: int = Depends(GetCurrentTimeMs),
    idle_timeout_ms: int = Depends(GetIdleTimeoutMs)
) -> Optional[AdminSession]:
    """
    FastAPI dependency applying the admin idle timeout

    Returns:
        AdminSession with renewed activity timestamp, or None without a session

    Raises:
        AdminSessionExpiredError: If the session was idle for too long
    """
    return TrackAdminActivity(store, session, now_ms, idle_timeout_ms)


def RequireUser(session: Optional[AdminSession] = Depends(GetCurrentSession)) -> dict:
    """
    FastAPI dependency requiring any logged-in user

    Returns:
        dict: session_id, user_id, email, role

    Raises:
        HTTPException: 401 if there is no authenticated session
    """
    from database import db_manager

    if session is None or not session.HasPrincipal():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required"
        )

    user = GetUserInfo(db_manager, session.user_id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found"
        )

    return {
        "session_id": session.session_id,
        "user_id": user["id"],
        "email": user["email"],
        "role": user["role"]
    }


def RequireAdmin(session: Optional[AdminSession] = Depends(EnforceAdminSessionTimeout)) -> dict:
    """
    FastAPI dependency requiring a logged-in user with an active admin role
    The idle timeout is applied before the admin role is checked.

    Returns:
        dict: session, user_id, email, role, admin_role

    Raises:
        HTTPException: 401 without a session, 403 without an active admin role
    """
    from database import db_manager

    if session is None or not session.HasPrincipal():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required"
        )

    user = GetUserInfo(db_manager, session.user_id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found"
        )

    admin_role = GetActiveAdminRole(db_manager, session.user_id)
    if not admin_role:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required"
        )

    return {
        "session": session,
        "user_id": user["id"],
        "email": user["email"],
        "role": user["role"],
        "admin_role": admin_role
    }


def RequirePermission(permission_name: str):
    """
    Dependency factory to create a permission checking dependency

    Args:
        permission_name: Permission required, e.g. 'settings:edit'

    Returns:
        Dependency function that checks for the permission

    Usage:
        @router.get("/api/admin/something")
        async def some_endpoint(admin: dict = Depends(RequirePermission("settings:view"))):
            ...
    """
    def permission_checker(admin: dict = Depends(RequireAdmin)) -> dict:
        """
        Check if the current admin has the required permission

        Raises:
            HTTPException: 403 Forbidden if the admin lacks the permission
        """
        if not AdminHasPermission(admin["admin_role"], permission_name):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Permission '{permission_name}' required"
            )

        return admin

    return permission_checker


# Convenience dependencies for common permissions
RequireSettingsView = RequirePermission("settings:view")
RequireSettingsEdit = RequirePermission("settings:edit")

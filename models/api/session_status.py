"""
BidHub Server - Session Status API Models

Pydantic models describing the state of the caller's admin session.
"""

from typing import Optional
from pydantic import BaseModel


class AdminSessionStatus(BaseModel):
    """Idle-timeout state of the current admin session"""
    idleTimeoutMs: int
    lastAdminActivity: Optional[int] = None  # Milliseconds since epoch
    expiresAt: str  # ISO timestamp of the absolute session lifetime


class SessionExpiredResponse(BaseModel):
    """Body of the 401 sent when an admin session was idle for too long"""
    message: str
    code: str

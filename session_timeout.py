"""
BidHub Server - Admin Session Idle Timeout

Closes admin sessions after a period without authenticated admin requests.

Every authenticated admin request is checked against the session's last
admin activity timestamp:
- no timestamp yet: the timestamp is set to now
- idle longer than the timeout: the session is destroyed and the request
  is rejected with AdminSessionExpiredError
- otherwise: the timestamp is moved to now (sliding window)

Requests without a session or without an authenticated user are not touched.
"""

import logging
import math
from enum import Enum
from typing import Optional

from exceptions import AdminSessionExpiredError
from exceptions.session_expired_error import ADMIN_SESSION_TIMEOUT_CODE, SESSION_EXPIRED_MESSAGE
from models.infrastructure import AdminSession
from session_store import SessionStore

logger = logging.getLogger(__name__)

# 30 minutes in milliseconds
ADMIN_SESSION_TIMEOUT_MS = 30 * 60 * 1000

__all__ = [
    'ADMIN_SESSION_TIMEOUT_MS',
    'ADMIN_SESSION_TIMEOUT_CODE',
    'SESSION_EXPIRED_MESSAGE',
    'ActivityDecision',
    'EvaluateAdminActivity',
    'TrackAdminActivity',
]


class ActivityDecision(Enum):
    """Outcome of the idle-timeout check for one request"""
    INITIALIZED = "initialized"  # First admin request of the session
    RENEWED = "renewed"          # Within the idle window, timestamp moved to now
    EXPIRED = "expired"          # Idle window exceeded, session destroyed


def _NormalizeTimestamp(value) -> Optional[int]:
    """Stored timestamps that are not finite numbers are treated as missing"""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return int(value)


def EvaluateAdminActivity(now_ms: int, last_activity_ms: Optional[int], idle_timeout_ms: int) -> ActivityDecision:
    """
    Decide what happens to a session for a request arriving at now_ms

    Args:
        now_ms: Current time in milliseconds since epoch
        last_activity_ms: Stored admin activity timestamp, or None
        idle_timeout_ms: Allowed idle period in milliseconds

    Returns:
        ActivityDecision: INITIALIZED, RENEWED or EXPIRED
    """
    last_activity_ms = _NormalizeTimestamp(last_activity_ms)
    if last_activity_ms is None:
        return ActivityDecision.INITIALIZED

    # Non-positive elapsed time (clock moved backwards) renews the session
    elapsed_ms = now_ms - last_activity_ms
    if elapsed_ms > idle_timeout_ms:
        return ActivityDecision.EXPIRED

    return ActivityDecision.RENEWED


def TrackAdminActivity(
    store: SessionStore,
    session: Optional[AdminSession],
    now_ms: int,
    idle_timeout_ms: int = ADMIN_SESSION_TIMEOUT_MS
) -> Optional[AdminSession]:
    """
    Apply the idle-timeout check to the session of an incoming request

    Args:
        store: Session store holding the session
        session: Session attached to the request, or None
        now_ms: Current time in milliseconds since epoch
        idle_timeout_ms: Allowed idle period in milliseconds

    Returns:
        AdminSession: The session with its renewed timestamp, or the input
                      unchanged when the check does not apply

    Raises:
        AdminSessionExpiredError: If the session was idle for longer than idle_timeout_ms
    """
    if session is None or not session.HasPrincipal():
        return session

    last_activity_ms = _NormalizeTimestamp(store.GetLastAdminActivity(session.session_id))
    decision = EvaluateAdminActivity(now_ms, last_activity_ms, idle_timeout_ms)

    if decision is ActivityDecision.EXPIRED:
        elapsed_ms = now_ms - last_activity_ms
        logger.info(
            f"Admin session {session.session_id} for user '{session.email}' expired "
            f"after {elapsed_ms // 1000}s of inactivity"
        )

        try:
            store.Destroy(session.session_id)
        except Exception as e:
            # The request is rejected whether or not the record could be removed
            logger.error(f"Error destroying expired admin session {session.session_id}: {str(e)}")

        raise AdminSessionExpiredError(session.session_id, elapsed_ms, idle_timeout_ms)

    updated = store.SetLastAdminActivity(session.session_id, now_ms)
    if updated is None:
        # Removed by another request between lookup and update
        updated = session.WithAdminActivity(now_ms)

    if decision is ActivityDecision.INITIALIZED:
        logger.debug(f"Admin activity tracking started for session {session.session_id}")

    return updated

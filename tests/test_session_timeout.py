#!/usr/bin/env python3
"""
Tests for the admin session idle timeout

Exercises the decision function and the tracker directly against an
in-memory session store, without the HTTP layer.
"""

import logging
import sys
from datetime import datetime, timezone, timedelta
from pathlib import Path

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from models.infrastructure import AdminSession
from session_store import MemorySessionStore
from session_timeout import (
    ADMIN_SESSION_TIMEOUT_MS,
    ActivityDecision,
    EvaluateAdminActivity,
    TrackAdminActivity,
)
from exceptions import AdminSessionExpiredError


def make_session(session_id="sid-1", user_id="user-1", last_admin_activity=None):
    """Build a session valid for one day"""
    now = datetime.now(timezone.utc)
    return AdminSession(
        session_id=session_id,
        user_id=user_id,
        email="admin@example.com" if user_id else None,
        created_at_utc=now,
        expires_at_utc=now + timedelta(days=1),
        last_admin_activity=last_admin_activity
    )


def stored(store, session):
    store.Save(session)
    return session


class LogoutAfterLookupStore(MemorySessionStore):
    """Memory store where a concurrent logout lands right after the activity lookup"""

    def GetLastAdminActivity(self, session_id):
        last_activity = super().GetLastAdminActivity(session_id)
        self.Destroy(session_id)
        return last_activity


class FailingDestroyStore(MemorySessionStore):
    """Memory store whose Destroy always fails"""

    def Destroy(self, session_id):
        raise RuntimeError("store unavailable")


def test_default_timeout_is_thirty_minutes():
    assert ADMIN_SESSION_TIMEOUT_MS == 1_800_000


def test_evaluate_decisions():
    """Missing timestamp initializes, within the window renews, beyond it expires"""
    assert EvaluateAdminActivity(5_000, None, ADMIN_SESSION_TIMEOUT_MS) is ActivityDecision.INITIALIZED
    assert EvaluateAdminActivity(1_000_000, 0, ADMIN_SESSION_TIMEOUT_MS) is ActivityDecision.RENEWED
    assert EvaluateAdminActivity(2_900_000, 1_000_000, ADMIN_SESSION_TIMEOUT_MS) is ActivityDecision.EXPIRED


def test_evaluate_boundary_is_still_active():
    """Exactly the timeout is not yet expired; one millisecond more is"""
    assert EvaluateAdminActivity(1_800_000, 0, ADMIN_SESSION_TIMEOUT_MS) is ActivityDecision.RENEWED
    assert EvaluateAdminActivity(1_800_001, 0, ADMIN_SESSION_TIMEOUT_MS) is ActivityDecision.EXPIRED


def test_evaluate_clock_moved_backwards():
    """A timestamp in the future counts as activity"""
    assert EvaluateAdminActivity(1_000, 50_000, ADMIN_SESSION_TIMEOUT_MS) is ActivityDecision.RENEWED


def test_evaluate_non_integer_timestamp_is_missing():
    assert EvaluateAdminActivity(1_000, "yesterday", ADMIN_SESSION_TIMEOUT_MS) is ActivityDecision.INITIALIZED
    assert EvaluateAdminActivity(1_000, True, ADMIN_SESSION_TIMEOUT_MS) is ActivityDecision.INITIALIZED


def test_evaluate_non_finite_timestamp_is_missing():
    """NaN and infinity loaded from a JSON session record are re-initialized"""
    for value in [float("nan"), float("inf"), float("-inf")]:
        assert EvaluateAdminActivity(1_000, value, ADMIN_SESSION_TIMEOUT_MS) is ActivityDecision.INITIALIZED


def test_tracker_reinitializes_non_finite_timestamp():
    store = MemorySessionStore()
    session = stored(store, make_session(last_admin_activity=float("nan")))

    result = TrackAdminActivity(store, session, 7_000)

    assert result.last_admin_activity == 7_000
    assert store.GetLastAdminActivity(session.session_id) == 7_000


def test_no_session_passes_through():
    store = MemorySessionStore()
    assert TrackAdminActivity(store, None, 1_000) is None
    assert len(store) == 0


def test_session_without_principal_is_untouched():
    """Anonymous sessions are neither initialized nor expired"""
    store = MemorySessionStore()
    session = stored(store, make_session(user_id=None, last_admin_activity=0))

    result = TrackAdminActivity(store, session, 10 * ADMIN_SESSION_TIMEOUT_MS)

    assert result is session
    assert store.Get(session.session_id).last_admin_activity == 0


def test_first_request_initializes_timestamp():
    store = MemorySessionStore()
    session = stored(store, make_session())

    result = TrackAdminActivity(store, session, 0)

    assert result.last_admin_activity == 0
    assert store.GetLastAdminActivity(session.session_id) == 0
    # The request's session value is not modified in place
    assert session.last_admin_activity is None


def test_activity_within_window_renews():
    store = MemorySessionStore()
    session = stored(store, make_session(last_admin_activity=0))

    result = TrackAdminActivity(store, session, 1_000_000)

    assert result.last_admin_activity == 1_000_000
    assert store.GetLastAdminActivity(session.session_id) == 1_000_000


def test_sliding_window_keeps_session_alive():
    """Requests spaced just under the timeout keep the session indefinitely"""
    store = MemorySessionStore()
    session = stored(store, make_session())
    step = ADMIN_SESSION_TIMEOUT_MS - 1

    now = 0
    for _ in range(5):
        session = TrackAdminActivity(store, session, now)
        now += step

    assert store.GetLastAdminActivity(session.session_id) == 4 * step


def test_idle_session_expires_and_is_destroyed():
    store = MemorySessionStore()
    session = stored(store, make_session(last_admin_activity=1_000_000))

    with pytest.raises(AdminSessionExpiredError) as exc_info:
        TrackAdminActivity(store, session, 2_900_000)

    error = exc_info.value
    assert error.code == "ADMIN_SESSION_TIMEOUT"
    assert error.message == "Session expired due to inactivity"
    assert error.elapsed_ms == 1_900_000
    assert error.ToResponseBody() == {
        "message": "Session expired due to inactivity",
        "code": "ADMIN_SESSION_TIMEOUT"
    }
    assert store.Get(session.session_id) is None


def test_custom_timeout():
    store = MemorySessionStore()
    session = stored(store, make_session(last_admin_activity=0))

    with pytest.raises(AdminSessionExpiredError):
        TrackAdminActivity(store, session, 60_001, idle_timeout_ms=60_000)


def test_destroy_failure_is_logged_and_request_still_rejected(caplog):
    store = FailingDestroyStore()
    session = stored(store, make_session(last_admin_activity=0))

    with caplog.at_level(logging.ERROR, logger="session_timeout"):
        with pytest.raises(AdminSessionExpiredError):
            TrackAdminActivity(store, session, ADMIN_SESSION_TIMEOUT_MS + 1)

    assert "Error destroying expired admin session sid-1" in caplog.text
    assert "store unavailable" in caplog.text


def test_session_removed_concurrently_still_returns_renewed_value():
    """The tracker does not fail when the record disappears before the update"""
    store = MemorySessionStore()
    session = make_session(last_admin_activity=0)

    result = TrackAdminActivity(store, session, 500)

    assert result.last_admin_activity == 500
    assert store.Get(session.session_id) is None


def test_logout_after_lookup_is_not_undone():
    """A session destroyed between the activity lookup and the renewal stays destroyed"""
    store = LogoutAfterLookupStore()
    session = stored(store, make_session(last_admin_activity=0))

    result = TrackAdminActivity(store, session, 1_000)

    assert result.last_admin_activity == 1_000
    assert store.Get(session.session_id) is None
    assert len(store) == 0


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-v"]))

#!/usr/bin/env python3
"""
Tests for the session stores

Both backends are run through the same behaviour checks.
"""

import sys
from datetime import datetime, timezone, timedelta
from pathlib import Path

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from models.infrastructure import AdminSession
from managers.database_manager import DatabaseManager
from session_store import MemorySessionStore, DatabaseSessionStore
from admin_sessions import CreateSession, GetSession, DeleteSession, CleanupExpiredSessions


@pytest.fixture(params=["memory", "database"])
def store(request, tmp_path):
    if request.param == "memory":
        yield MemorySessionStore()
        return

    manager = DatabaseManager(str(tmp_path / "sessions.db"))
    manager.InitializeDatabase()
    yield DatabaseSessionStore(manager)
    manager.engine.dispose()


def make_session(session_id, expires_in=timedelta(days=1), last_admin_activity=None):
    now = datetime.now(timezone.utc)
    return AdminSession(
        session_id=session_id,
        user_id="user-1",
        email="admin@example.com",
        created_at_utc=now,
        expires_at_utc=now + expires_in,
        last_admin_activity=last_admin_activity
    )


def test_save_and_get(store):
    session = make_session("abc", last_admin_activity=1234)
    store.Save(session)

    loaded = store.Get("abc")
    assert loaded.session_id == "abc"
    assert loaded.user_id == "user-1"
    assert loaded.email == "admin@example.com"
    assert loaded.last_admin_activity == 1234


def test_get_unknown_or_empty_id(store):
    assert store.Get("missing") is None
    assert store.Get("") is None


def test_session_past_lifetime_is_removed_on_read(store):
    store.Save(make_session("old", expires_in=timedelta(seconds=-1)))

    assert store.Get("old") is None
    assert store.CleanupExpired() == 0


def test_cleanup_expired_counts_removed_sessions(store):
    store.Save(make_session("old-1", expires_in=timedelta(seconds=-5)))
    store.Save(make_session("old-2", expires_in=timedelta(seconds=-5)))
    store.Save(make_session("current"))

    assert store.CleanupExpired() == 2
    assert store.Get("current") is not None


def test_destroy_is_idempotent(store):
    store.Save(make_session("abc"))

    store.Destroy("abc")
    store.Destroy("abc")

    assert store.Get("abc") is None


def test_admin_activity_helpers(store):
    store.Save(make_session("abc"))

    assert store.GetLastAdminActivity("abc") is None

    updated = store.SetLastAdminActivity("abc", 0)
    assert updated.last_admin_activity == 0
    assert store.GetLastAdminActivity("abc") == 0

    store.SetLastAdminActivity("abc", 99)
    assert store.GetLastAdminActivity("abc") == 99


def test_activity_helpers_on_missing_session(store):
    assert store.GetLastAdminActivity("missing") is None
    assert store.SetLastAdminActivity("missing", 10) is None
    assert store.Get("missing") is None


def test_activity_update_does_not_restore_destroyed_session(store):
    session = make_session("abc", last_admin_activity=0)
    store.Save(session)
    store.Destroy("abc")

    assert store.SetLastAdminActivity("abc", 500) is None
    assert store.Get("abc") is None


def test_database_activity_update_loses_race_with_destroy(tmp_path, monkeypatch):
    """A row deleted after the read and before the UPDATE is not written back"""
    manager = DatabaseManager(str(tmp_path / "race.db"))
    manager.InitializeDatabase()
    store = DatabaseSessionStore(manager)
    store.Save(make_session("abc", last_admin_activity=0))

    with_activity = AdminSession.WithAdminActivity

    def destroy_then_update(self, timestamp_ms):
        store.Destroy(self.session_id)
        return with_activity(self, timestamp_ms)

    monkeypatch.setattr(AdminSession, "WithAdminActivity", destroy_then_update)

    assert store.SetLastAdminActivity("abc", 1_000) is None
    assert store.Get("abc") is None
    manager.engine.dispose()


def test_session_lifecycle_functions(store):
    session = CreateSession(store, "user-1", "admin@example.com", lifetime_days=1)

    assert len(session.session_id) >= 32
    assert session.last_admin_activity is None
    assert GetSession(store, session.session_id) == session
    assert GetSession(store, None) is None

    DeleteSession(store, session.session_id)
    assert GetSession(store, session.session_id) is None


def test_cleanup_expired_sessions_function(store):
    store.Save(make_session("old", expires_in=timedelta(seconds=-1)))
    assert CleanupExpiredSessions(store) == 1


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-v"]))

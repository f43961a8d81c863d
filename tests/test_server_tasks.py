#!/usr/bin/env python3
"""
Tests for the background session pruning task
"""

import asyncio
import logging
import sys
from datetime import datetime, timezone, timedelta
from pathlib import Path

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import admin_sessions
from models.infrastructure import AdminSession
from session_store import MemorySessionStore
from server import PruneExpiredSessions


class FailingCleanupStore(MemorySessionStore):
    """Memory store whose cleanup always fails"""

    def __init__(self):
        super().__init__()
        self.cleanup_calls = 0

    def CleanupExpired(self):
        self.cleanup_calls += 1
        raise RuntimeError("store unavailable")


@pytest.fixture
def configure_store():
    previous = admin_sessions.GetSessionStore()
    yield admin_sessions.ConfigureSessionStore
    admin_sessions.ConfigureSessionStore(previous)


def make_session(session_id, expires_in):
    now = datetime.now(timezone.utc)
    return AdminSession(
        session_id=session_id,
        user_id="user-1",
        email="admin@example.com",
        created_at_utc=now - timedelta(days=1),
        expires_at_utc=now + expires_in
    )


def run_prune_until(condition, timeout_seconds=5.0):
    """Run the prune loop with a short interval until condition() holds, then cancel it"""
    async def runner():
        task = asyncio.create_task(PruneExpiredSessions(interval_seconds=0.01))
        try:
            deadline = asyncio.get_running_loop().time() + timeout_seconds
            while not condition():
                assert not task.done(), "prune task stopped"
                assert asyncio.get_running_loop().time() < deadline, "condition not reached"
                await asyncio.sleep(0.01)
            assert not task.done()
        finally:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

    asyncio.run(runner())


def test_prune_removes_sessions_past_lifetime(configure_store):
    store = MemorySessionStore()
    store.Save(make_session("old-1", timedelta(seconds=-1)))
    store.Save(make_session("old-2", timedelta(seconds=-1)))
    store.Save(make_session("current", timedelta(days=1)))
    configure_store(store)

    run_prune_until(lambda: len(store) == 1)

    assert store.Get("current") is not None


def test_prune_failure_is_logged_and_loop_continues(configure_store, caplog):
    store = FailingCleanupStore()
    configure_store(store)

    with caplog.at_level(logging.ERROR, logger="server"):
        run_prune_until(lambda: store.cleanup_calls >= 3)

    assert "Error pruning expired sessions: store unavailable" in caplog.text


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-v"]))

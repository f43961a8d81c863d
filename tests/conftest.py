"""
Shared fixtures for BidHub Server tests

Provides a temporary SQLite database, an in-memory session store,
a controllable clock for the admin idle timeout, and an HTTP test client.
"""

import sys
from pathlib import Path

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import database
import admin_sessions
from managers.database_manager import DatabaseManager
from session_store import MemorySessionStore
from auth import GetCurrentTimeMs

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "Admin-Pass-123"


@pytest.fixture
def db_manager(tmp_path):
    """Initialized database installed as the global db_manager"""
    manager = DatabaseManager(str(tmp_path / "bidhub-test.db"))
    manager.InitializeDatabase()

    previous = database.db_manager
    database.db_manager = manager
    yield manager
    database.db_manager = previous
    manager.engine.dispose()


@pytest.fixture
def session_store():
    """In-memory session store installed as the active store"""
    store = MemorySessionStore()
    previous = admin_sessions.GetSessionStore()
    admin_sessions.ConfigureSessionStore(store)
    yield store
    admin_sessions.ConfigureSessionStore(previous)


@pytest.fixture
def clock():
    """Mutable clock in milliseconds used by the idle-timeout check"""
    return {"now": 0}


@pytest.fixture
def app(db_manager, session_store, clock):
    from server import app as fastapi_app

    fastapi_app.dependency_overrides[GetCurrentTimeMs] = lambda: clock["now"]
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    # Not used as a context manager, so the production lifespan does not run
    from fastapi.testclient import TestClient

    return TestClient(app)


def CreateUser(db_manager, email, password, role="client", status="active"):
    """Create a marketplace user and return its ID"""
    from models.database import User

    session = db_manager.GetSession()
    try:
        user = User(
            email=email,
            password_hash=db_manager.HashPassword(password),
            role=role,
            status=status
        )
        session.add(user)
        session.commit()
        return user.id
    finally:
        session.close()


def CreateAdmin(db_manager, email=ADMIN_EMAIL, password=ADMIN_PASSWORD, role="super_admin"):
    """Create an admin account and return its user ID"""
    session = db_manager.GetSession()
    try:
        user, _ = db_manager.CreateAdminUser(session, email, password, role)
        session.commit()
        return user.id
    finally:
        session.close()


@pytest.fixture
def admin_user(db_manager):
    """Credentials of a super admin"""
    CreateAdmin(db_manager)
    return {"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD}


@pytest.fixture
def admin_client(client, admin_user):
    """Test client logged in through the admin login endpoint"""
    response = client.post("/api/admin/login", json=admin_user)
    assert response.status_code == 200
    return client


def CurrentSessionId(client):
    """Session ID carried by the client's session cookie"""
    return admin_sessions.UnsignSessionId(client.cookies.get(admin_sessions.SESSION_COOKIE_NAME))

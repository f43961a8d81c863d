"""
BidHub Server - Session Stores

Storage backends for server-side sessions.

- SessionStore: abstract interface used by the session layer
- MemorySessionStore: in-process dictionary (single worker, tests)
- DatabaseSessionStore: rows in the sessions table via SQLAlchemy

Every store drops records that are past their absolute lifetime on read.
The idle-timeout tracker only needs GetLastAdminActivity, SetLastAdminActivity
and Destroy; stores implement SetLastAdminActivity as an update-if-present.
"""

import logging
import threading
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Dict, Optional

from models.database import StoredSession
from models.infrastructure import AdminSession
from managers.database_manager import DatabaseManager

logger = logging.getLogger(__name__)


class SessionStore(ABC):
    """
    Interface for session persistence
    """

    @abstractmethod
    def Get(self, session_id: str) -> Optional[AdminSession]:
        """
        Load a session

        Args:
            session_id: Session ID

        Returns:
            AdminSession if present and within its lifetime, None otherwise
        """

    @abstractmethod
    def Save(self, session: AdminSession) -> None:
        """Insert or replace a session record"""

    @abstractmethod
    def Destroy(self, session_id: str) -> None:
        """Delete a session record (no error if it does not exist)"""

    @abstractmethod
    def CleanupExpired(self) -> int:
        """
        Remove all records past their absolute lifetime

        Returns:
            Number of sessions removed
        """

    def GetLastAdminActivity(self, session_id: str) -> Optional[int]:
        """
        Get the admin activity timestamp of a session

        Returns:
            Milliseconds since epoch, or None if the session has none
            or does not exist
        """
        session = self.Get(session_id)
        if session is None:
            return None
        return session.last_admin_activity

    @abstractmethod
    def SetLastAdminActivity(self, session_id: str, timestamp_ms: int) -> Optional[AdminSession]:
        """
        Store a new admin activity timestamp for a session

        The update only applies to a session that still exists, so a session
        destroyed by another request is never written back.

        Returns:
            The updated session, or None if the session no longer exists
        """


class MemorySessionStore(SessionStore):
    """
    Session store backed by a dictionary
    Sessions are lost when the process exits.
    """

    def __init__(self):
        self._sessions: Dict[str, AdminSession] = {}
        self._lock = threading.Lock()

    def Get(self, session_id: str) -> Optional[AdminSession]:
        if not session_id:
            return None

        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return None

            if session.IsExpired():
                logger.info(f"Session {session_id} reached its lifetime for user '{session.email}'")
                del self._sessions[session_id]
                return None

            return session

    def Save(self, session: AdminSession) -> None:
        with self._lock:
            self._sessions[session.session_id] = session

    def Destroy(self, session_id: str) -> None:
        with self._lock:
            self._sessions.pop(session_id, None)

    def SetLastAdminActivity(self, session_id: str, timestamp_ms: int) -> Optional[AdminSession]:
        # Lookup and replace under one lock so a destroyed session is never written back
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None or session.IsExpired():
                return None

            updated = session.WithAdminActivity(timestamp_ms)
            self._sessions[session_id] = updated
            return updated

    def CleanupExpired(self) -> int:
        with self._lock:
            expired_ids = [
                session_id
                for session_id, session in self._sessions.items()
                if session.IsExpired()
            ]

            for session_id in expired_ids:
                del self._sessions[session_id]

        return len(expired_ids)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)


class DatabaseSessionStore(SessionStore):
    """
    Session store backed by the sessions table

    Each call uses its own ORM session. Errors roll back and propagate.
    """

    def __init__(self, db_manager: DatabaseManager):
        self.db_manager = db_manager

    @staticmethod
    def _ToNaiveUtc(value: datetime) -> datetime:
        # SQLite returns naive datetimes, so expire is stored naive UTC
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value

    def Get(self, session_id: str) -> Optional[AdminSession]:
        if not session_id:
            return None

        db_session = self.db_manager.GetSession()
        try:
            record = db_session.query(StoredSession).filter(StoredSession.sid == session_id).first()
            if record is None:
                return None

            now = self._ToNaiveUtc(datetime.now(timezone.utc))
            if record.expire <= now:
                logger.info(f"Session {session_id} reached its lifetime")
                db_session.delete(record)
                db_session.commit()
                return None

            return AdminSession.FromDict(record.sess)

        except Exception:
            db_session.rollback()
            raise
        finally:
            db_session.close()

    def Save(self, session: AdminSession) -> None:
        db_session = self.db_manager.GetSession()
        try:
            record = db_session.query(StoredSession).filter(StoredSession.sid == session.session_id).first()
            if record is None:
                record = StoredSession(sid=session.session_id)
                db_session.add(record)

            record.sess = session.ToDict()
            record.expire = self._ToNaiveUtc(session.expires_at_utc)
            db_session.commit()

        except Exception:
            db_session.rollback()
            raise
        finally:
            db_session.close()

    def SetLastAdminActivity(self, session_id: str, timestamp_ms: int) -> Optional[AdminSession]:
        """
        Store a new admin activity timestamp with a conditional UPDATE

        Returns:
            The updated session, or None if the row was deleted or expired
            before the update ran
        """
        if not session_id:
            return None

        db_session = self.db_manager.GetSession()
        try:
            now = self._ToNaiveUtc(datetime.now(timezone.utc))
            record = db_session.query(StoredSession).filter(
                StoredSession.sid == session_id,
                StoredSession.expire > now
            ).first()
            if record is None:
                return None

            updated = AdminSession.FromDict(record.sess).WithAdminActivity(timestamp_ms)

            # Zero rows means the session was destroyed after it was read
            updated_rows = db_session.query(StoredSession).filter(
                StoredSession.sid == session_id,
                StoredSession.expire > now
            ).update({StoredSession.sess: updated.ToDict()}, synchronize_session=False)
            db_session.commit()

            return updated if updated_rows else None

        except Exception:
            db_session.rollback()
            raise
        finally:
            db_session.close()

    def Destroy(self, session_id: str) -> None:
        db_session = self.db_manager.GetSession()
        try:
            db_session.query(StoredSession).filter(StoredSession.sid == session_id).delete()
            db_session.commit()

        except Exception:
            db_session.rollback()
            raise
        finally:
            db_session.close()

    def CleanupExpired(self) -> int:
        db_session = self.db_manager.GetSession()
        try:
            now = self._ToNaiveUtc(datetime.now(timezone.utc))
            removed = db_session.query(StoredSession).filter(StoredSession.expire <= now).delete()
            db_session.commit()
            return removed

        except Exception:
            db_session.rollback()
            raise
        finally:
            db_session.close()

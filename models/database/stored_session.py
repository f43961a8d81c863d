"""
BidHub Server - Stored Session Database Model

Persisted session records used by the database-backed session store.
"""

from sqlalchemy import Column, String, DateTime, JSON

from models.database.base import Base


class StoredSession(Base):
    """
    Sessions table - one row per server-side session
    """
    __tablename__ = "sessions"

    sid = Column(String, primary_key=True)
    sess = Column(JSON, nullable=False)
    expire = Column(DateTime, nullable=False, index=True)

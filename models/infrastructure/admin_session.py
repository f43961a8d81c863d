"""
BidHub Server - Admin Session Model

Immutable value object for a server-side session.
A request never mutates a session in place; it saves a replaced copy.
"""

from datetime import datetime, timezone
from dataclasses import dataclass, replace, asdict
from typing import Optional


@dataclass(frozen=True)
class AdminSession:
    """Represents a server-side session and its admin activity timestamp"""
    session_id: str
    user_id: Optional[str]
    email: Optional[str]
    created_at_utc: datetime
    expires_at_utc: datetime
    last_admin_activity: Optional[int] = None  # Milliseconds since epoch

    def IsExpired(self, now: Optional[datetime] = None) -> bool:
        """Check if the session has passed its absolute lifetime"""
        now = now or datetime.now(timezone.utc)
        return now >= self.expires_at_utc

    def HasPrincipal(self) -> bool:
        """True when an authenticated user is attached to the session"""
        return self.user_id is not None

    def WithAdminActivity(self, timestamp_ms: int) -> "AdminSession":
        """Return a copy with the admin activity timestamp replaced"""
        return replace(self, last_admin_activity=timestamp_ms)

    def ToDict(self) -> dict:
        data = asdict(self)
        data["created_at_utc"] = self.created_at_utc.isoformat()
        data["expires_at_utc"] = self.expires_at_utc.isoformat()
        return data

    @classmethod
    def FromDict(cls, data: dict) -> "AdminSession":
        return cls(
            session_id=data["session_id"],
            user_id=data.get("user_id"),
            email=data.get("email"),
            created_at_utc=datetime.fromisoformat(data["created_at_utc"]),
            expires_at_utc=datetime.fromisoformat(data["expires_at_utc"]),
            last_admin_activity=data.get("last_admin_activity")
        )

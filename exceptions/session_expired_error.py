"""
BidHub Server - Admin Session Expired Exception

Raised when an admin session has been idle longer than the allowed window.
The code is the stable value clients use to tell an idle logout apart
from any other authentication failure.
"""

from .session_error import BidHubSessionError

ADMIN_SESSION_TIMEOUT_CODE = "ADMIN_SESSION_TIMEOUT"
SESSION_EXPIRED_MESSAGE = "Session expired due to inactivity"


class AdminSessionExpiredError(BidHubSessionError):
    """Exception for admin sessions expired due to inactivity."""

    def __init__(self, session_id: str, elapsed_ms: int, idle_timeout_ms: int):
        super().__init__(SESSION_EXPIRED_MESSAGE)
        self.session_id = session_id
        self.elapsed_ms = elapsed_ms
        self.idle_timeout_ms = idle_timeout_ms
        self.message = SESSION_EXPIRED_MESSAGE
        self.code = ADMIN_SESSION_TIMEOUT_CODE

    def ToResponseBody(self) -> dict:
        """JSON body sent with the 401 response"""
        return {"message": self.message, "code": self.code}

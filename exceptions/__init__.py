"""
BidHub Server - Exceptions Package

Contains exception classes raised by the session layer and turned into
HTTP responses by the application's exception handlers.
"""

from .session_error import BidHubSessionError
from .session_expired_error import AdminSessionExpiredError

__all__ = [
    'BidHubSessionError',
    'AdminSessionExpiredError'
]

"""
BidHub Server - Session Error Exception

Base exception class for session-related errors.
"""


class BidHubSessionError(Exception):
    """Base exception for session errors."""
    pass

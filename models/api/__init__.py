"""
BidHub Server - API Models Package

This package contains Pydantic models for API endpoints.
"""

from models.api.settings import PlatformSettingRequest
from models.api.session_status import AdminSessionStatus, SessionExpiredResponse

__all__ = [
    'PlatformSettingRequest',
    'AdminSessionStatus',
    'SessionExpiredResponse',
]

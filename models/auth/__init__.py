"""
BidHub Server - Auth Models Package

This package contains Pydantic models for authentication endpoints.
"""

from models.auth.login_request import LoginRequest
from models.auth.user_info import UserInfo
from models.auth.admin_role_info import AdminRoleInfo
from models.auth.login_response import LoginResponse, AdminLoginResponse

__all__ = [
    'LoginRequest',
    'UserInfo',
    'AdminRoleInfo',
    'LoginResponse',
    'AdminLoginResponse',
]

"""
BidHub Server - Login Response Models

Pydantic models for login endpoint responses.
"""

from pydantic import BaseModel

from models.auth.user_info import UserInfo
from models.auth.admin_role_info import AdminRoleInfo


class LoginResponse(BaseModel):
    """Response model for the marketplace login endpoint"""
    user: UserInfo


class AdminLoginResponse(BaseModel):
    """Response model for the admin login and current admin endpoints"""
    user: UserInfo
    adminRole: AdminRoleInfo

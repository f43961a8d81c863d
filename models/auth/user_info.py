"""
BidHub Server - User Info Model

Public subset of a user record returned by authentication endpoints.
"""

from pydantic import BaseModel


class UserInfo(BaseModel):
    """Authenticated user as seen by the frontend"""
    id: str
    email: str
    role: str

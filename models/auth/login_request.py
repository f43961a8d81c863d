"""
BidHub Server - Login Request Model

Pydantic model for login endpoint requests.
"""

from pydantic import BaseModel


class LoginRequest(BaseModel):
    """Request model for login endpoints"""
    email: str
    password: str

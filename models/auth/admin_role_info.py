"""
BidHub Server - Admin Role Info Model

Admin role and permission map returned to the admin panel.
"""

from pydantic import BaseModel


class AdminRoleInfo(BaseModel):
    """Admin role of the authenticated user"""
    role: str
    permissions: dict = {}  # {category: {action: bool}}

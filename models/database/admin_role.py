"""
BidHub Server - Admin Role Database Model

Assigns an admin role and its permission map to a user.
"""

from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, DateTime, Boolean, ForeignKey, JSON
from sqlalchemy.orm import relationship

from models.database.base import Base


class AdminRole(Base):
    """
    Admin roles table - one row per admin assignment

    permissions holds a nested map of the form {category: {action: bool}}.
    """
    __tablename__ = "admin_roles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String, ForeignKey("users.id"), nullable=False)
    role = Column(String, nullable=False)  # 'super_admin', 'moderator', 'support', 'finance'
    permissions = Column(JSON, nullable=False, default=dict)
    active = Column(Boolean, default=True)
    created_at = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))

    # Relationship to user
    user = relationship("User", back_populates="admin_roles")

    def ToDict(self) -> dict:
        """Serialize for API responses and request-scoped admin info"""
        return {
            "id": self.id,
            "role": self.role,
            "permissions": self.permissions or {},
            "active": self.active
        }
